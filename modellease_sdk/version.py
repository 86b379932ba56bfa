"""
Version information for the ModelLease SDK.

Installed distributions report their metadata version. A source checkout
reads ``[project].version`` from the repository's ``pyproject.toml``.
"""
import importlib.metadata
import pathlib
from typing import Optional

import tomli

DISTRIBUTION_NAME = "modellease-sdk"
DEFAULT_VERSION = "0.1.0"
PYPROJECT_PATH = pathlib.Path(__file__).parent.parent / "pyproject.toml"


def read_pyproject_version(path: pathlib.Path) -> Optional[str]:
    """Return ``[project].version`` from a pyproject file, or None if it can't be read."""
    try:
        with path.open("rb") as f:
            project = tomli.load(f).get("project", {})
    except (FileNotFoundError, tomli.TOMLDecodeError):
        return None
    return project.get("version")


def get_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH) or DEFAULT_VERSION


__version__ = get_version()
