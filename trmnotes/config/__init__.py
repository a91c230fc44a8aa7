"""Configuration package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .manager import ConfigManager, TrmnotesSettings
    from .paths import TrmnotesPaths

__all__ = ["ConfigManager", "TrmnotesSettings", "TrmnotesPaths"]


def __getattr__(name: str) -> Any:
    if name in {"ConfigManager", "TrmnotesSettings"}:
        from .manager import ConfigManager, TrmnotesSettings

        return {"ConfigManager": ConfigManager, "TrmnotesSettings": TrmnotesSettings}[name]
    if name == "TrmnotesPaths":
        from .paths import TrmnotesPaths

        return TrmnotesPaths
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
