import pytest
from hal_restful.core.errors import CreationError, ProblemError
from hal_restful.core.problem import DEFAULT_DESCRIBED_BY, ApiProblem


def test_problem_payload_shape_with_derived_title():
    problem = ApiProblem(404, "Missing")
    assert problem.to_dict() == {
        "describedBy": DEFAULT_DESCRIBED_BY,
        "title": "Not Found",
        "httpStatus": 404,
        "detail": "Missing",
    }


def test_unlisted_status_gets_unknown_title():
    assert ApiProblem(416, "Range").resolved_title == "Unknown"
    assert ApiProblem(418, "Teapot").to_dict()["title"] == "Unknown"


def test_custom_described_by_without_title_is_unknown():
    problem = ApiProblem(404, "Missing", described_by="https://example.com/problems")
    assert problem.to_dict()["title"] == "Unknown"
    titled = ApiProblem(
        404, "Missing", described_by="https://example.com/problems", title="Gone"
    )
    assert titled.to_dict()["title"] == "Gone"


def test_additional_details_cannot_override_reserved_keys():
    problem = ApiProblem(
        400,
        "Validation failed",
        additional={"title": "ignored", "httpStatus": 200, "errors": ["name"]},
    )
    payload = problem.to_dict()
    assert payload["title"] == "Bad Request"
    assert payload["httpStatus"] == 400
    assert payload["errors"] == ["name"]
    assert list(payload)[:4] == ["describedBy", "title", "httpStatus", "detail"]


def test_from_problem_error_uses_its_details():
    exc = CreationError("name is required", additional_details={"field": "name"})
    problem = ApiProblem.from_exception(exc)
    payload = problem.to_dict()
    assert payload["httpStatus"] == 422
    assert payload["title"] == "Unprocessable Entity"
    assert payload["detail"] == "name is required"
    assert payload["field"] == "name"


def test_problem_error_overrides_described_by_and_title():
    exc = ProblemError(
        "quota",
        status_code=429,
        described_by="https://example.com/quota",
        title="Quota exceeded",
    )
    payload = ApiProblem.from_exception(exc).to_dict()
    assert payload["describedBy"] == "https://example.com/quota"
    assert payload["title"] == "Quota exceeded"
    assert payload["httpStatus"] == 429


def test_status_derived_from_exception_attributes():
    class NotFound(Exception):
        status_code = 404

    class Weird(Exception):
        code = 999

    assert ApiProblem.from_exception(NotFound("x")).status == 404
    assert ApiProblem.from_exception(Weird("x")).status == 500
    assert ApiProblem.from_exception(ValueError("x")).status == 500


def test_problem_error_status_out_of_range_falls_back_to_500():
    payload = ApiProblem.from_exception(ProblemError("x", status_code=999)).to_dict()
    assert payload["httpStatus"] == 500
    assert payload["title"] == "Internal Server Error"


def test_explicit_status_wins_over_exception():
    class NotFound(Exception):
        status_code = 404

    assert ApiProblem(409, NotFound("x")).status == 409


def _raise_chained():
    try:
        raise ValueError("inner failure")
    except ValueError as exc:
        raise RuntimeError("outer failure") from exc


def test_detail_without_stack_trace_is_message():
    with pytest.raises(RuntimeError) as info:
        _raise_chained()
    problem = ApiProblem.from_exception(info.value)
    assert problem.to_dict()["detail"] == "outer failure"


def test_detail_with_stack_trace_walks_causes():
    with pytest.raises(RuntimeError) as info:
        _raise_chained()
    problem = ApiProblem.from_exception(info.value).with_stack_trace()
    detail = problem.to_dict()["detail"]
    assert detail.startswith("outer failure")
    assert "inner failure" in detail
    assert detail.index("outer failure") < detail.index("inner failure")
    assert "_raise_chained" in detail


def test_with_stack_trace_returns_copy():
    problem = ApiProblem(500, "x")
    traced = problem.with_stack_trace()
    assert traced.include_stack_trace is True
    assert problem.include_stack_trace is False


def test_get_normalizes_names():
    problem = ApiProblem(404, "Missing", additional={"errors": ["a"]})
    assert problem.get("http_status") == 404
    assert problem.get("HTTPSTATUS") == 404
    assert problem.get("described_by") == DEFAULT_DESCRIBED_BY
    assert problem.get("errors") == ["a"]
    with pytest.raises(KeyError):
        problem.get("missing")
