import pytest
from hal_restful.core.config import RendererConfig, load_metadata_map
from hal_restful.core.negotiation import API_PROBLEM_JSON, PROBLEM_JSON
from hal_restful.transports.http.config import HttpConfig

HAL_ENV = (
    "HAL_PAGE_PARAM",
    "HAL_DEFAULT_PAGE_SIZE",
    "HAL_COLLECTION_NAME",
    "HAL_IDENTIFIER_NAME",
    "HAL_MATCH_ANCESTORS",
    "HAL_INCLUDE_STACK_TRACE",
    "HAL_PROBLEM_MEDIA_TYPE",
    "HAL_PROBLEMS_JSON_ONLY",
    "HAL_BASE_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in HAL_ENV:
        monkeypatch.delenv(name, raising=False)


class Base:
    pass


class Child(Base):
    pass


def test_renderer_config_defaults():
    cfg = RendererConfig.from_env(use_dotenv=False)
    assert cfg == RendererConfig()
    assert cfg.page_param == "page"
    assert cfg.default_page_size == 30
    assert cfg.collection_name == "items"


def test_renderer_config_from_env(monkeypatch):
    monkeypatch.setenv("HAL_PAGE_PARAM", "p")
    monkeypatch.setenv("HAL_DEFAULT_PAGE_SIZE", "50")
    monkeypatch.setenv("HAL_COLLECTION_NAME", "entries")
    monkeypatch.setenv("HAL_IDENTIFIER_NAME", "uuid")
    monkeypatch.setenv("HAL_MATCH_ANCESTORS", "yes")
    monkeypatch.setenv("HAL_INCLUDE_STACK_TRACE", "1")

    cfg = RendererConfig.from_env(use_dotenv=False)
    assert cfg == RendererConfig(
        page_param="p",
        default_page_size=50,
        collection_name="entries",
        identifier_name="uuid",
        match_ancestors=True,
        include_stack_trace=True,
    )


@pytest.mark.parametrize(
    "name,value",
    [
        ("HAL_DEFAULT_PAGE_SIZE", "0"),
        ("HAL_DEFAULT_PAGE_SIZE", "lots"),
        ("HAL_MATCH_ANCESTORS", "maybe"),
    ],
)
def test_renderer_config_rejects_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        RendererConfig.from_env(use_dotenv=False)


def test_load_metadata_map_uses_env_for_ancestors_unless_configured():
    cfg = RendererConfig(match_ancestors=True)
    metadata_map = load_metadata_map({Base: {"route": "base"}}, renderer_config=cfg)
    assert metadata_map.get(Child()).route == "base"

    explicit = load_metadata_map(
        {"metadata_map": {Base: {"route": "base"}}, "match_ancestors": False},
        renderer_config=cfg,
    )
    assert explicit.get(Child()) is None


def test_http_config_defaults_and_env(monkeypatch):
    assert HttpConfig.from_env() == HttpConfig()
    assert HttpConfig().problem_media_type == PROBLEM_JSON

    monkeypatch.setenv("HAL_PROBLEM_MEDIA_TYPE", "Application/Api-Problem+Json")
    monkeypatch.setenv("HAL_PROBLEMS_JSON_ONLY", "false")
    monkeypatch.setenv("HAL_BASE_URL", "https://api.example.com/")
    cfg = HttpConfig.from_env()
    assert cfg.problem_media_type == API_PROBLEM_JSON
    assert cfg.problems_json_only is False
    assert cfg.base_url == "https://api.example.com"


def test_http_config_validation():
    with pytest.raises(ValueError):
        HttpConfig(problem_media_type="text/plain")
    with pytest.raises(ValueError):
        HttpConfig(base_url="/relative")
    with pytest.raises(ValueError):
        HttpConfig(base_url="https://api.example.com/?x=1")
