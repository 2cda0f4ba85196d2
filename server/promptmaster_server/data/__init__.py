"""Bundled configuration data (optimizer rules, prompt templates, model catalogue)."""

from importlib import resources


def read_text(name: str) -> str:
    """Read a data file shipped with the package."""
    return resources.files(__name__).joinpath(name).read_text(encoding="utf-8")
