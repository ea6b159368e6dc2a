#!/usr/bin/env python3
"""
Fail if hal_restful.core reaches into a web framework or the transports.
Checks all Python files under src/hal_restful/core/, including relative
imports that climb out of the core package.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
CORE_DIR = REPO_ROOT / "src" / "hal_restful" / "core"

FORBIDDEN_PREFIXES = (
    "starlette",
    "fastapi",
    "uvicorn",
    "hal_restful.transports",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if is_forbidden(alias.name):
                    errors.append(f"{path}: forbidden import '{alias.name}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            # `from ..transports import x` inside core
            if node.level >= 2:
                errors.append(
                    f"{path}: relative import leaves core ('{'.' * node.level}{mod}')"
                )
            elif node.level == 0 and mod and is_forbidden(mod):
                errors.append(f"{path}: forbidden import '{mod}'")
    return errors


def main(core_dir: Path = CORE_DIR) -> int:
    violations: list[str] = []
    for py_file in sorted(core_dir.rglob("*.py")):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
