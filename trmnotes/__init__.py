"""Trmnotes package initialization."""

from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "cli",
    "config",
    "editing",
    "notes",
    "session",
]

# Single source of truth comes from package metadata defined in pyproject.toml
try:
    __version__ = version("trmnotes")
except PackageNotFoundError:
    __version__ = "0.0.0"
