"""Expose the ContaCalc version to the health endpoint and scripts."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "contacalc"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_PROJECT_TABLE = re.compile(r"^\[project\]\s*$(?P<body>.*?)(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
_VERSION_LINE = re.compile(r"^version\s*=\s*[\"'](?P<version>[^\"']+)[\"']", re.MULTILINE)


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version.

    Source checkouts without package metadata read ``pyproject.toml`` instead.
    """

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Return ``project.version`` from the ``pyproject.toml`` at ``path``."""

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    table = _PROJECT_TABLE.search(path.read_text(encoding="utf-8"))
    match = _VERSION_LINE.search(table.group("body")) if table else None
    if match is None:
        raise RuntimeError(f"No [project] version declared in {path}")
    return match.group("version")


__all__ = ["PACKAGE_NAME", "get_project_version", "read_pyproject_version"]
