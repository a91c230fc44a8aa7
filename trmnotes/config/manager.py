from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from ..editing.autosave import DEFAULT_QUIET_PERIOD
from ..notes.catalog import DEFAULT_NOTE_EXTENSION
from .paths import TrmnotesPaths

DEFAULT_PROJECT_CONFIG: Dict[str, Any] = {
    "notes_dir": "notes",
    "autosave_seconds": DEFAULT_QUIET_PERIOD,
    "note_extension": DEFAULT_NOTE_EXTENSION,
    "note_template": "",
    "explorer_open": True,
    "debug": None,
}
GLOBAL_DEFAULTS_KEY = "workspace_defaults"


@dataclass
class TrmnotesSettings:
    notes_dir: Path
    autosave_seconds: float
    note_extension: str
    note_template: str
    explorer_open: bool
    debug: Any
    recovery_dir: Path


class ConfigManager:
    """Reads trmnotes configuration: defaults, global, workspace, environment."""

    def __init__(self, paths: TrmnotesPaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console()

    def create_config_template(self) -> Path:
        """Create or update .trmnotes/trmnotes.json without overwriting user settings."""
        self.paths.trmnotes_dir.mkdir(parents=True, exist_ok=True)
        current = self._read_json(self.paths.config_file)
        merged = self._merge_dicts(DEFAULT_PROJECT_CONFIG, current)
        self.paths.config_file.write_text(
            json.dumps(merged, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        return self.paths.config_file

    def load_project_config(self) -> Dict[str, Any]:
        """Defaults, overlaid by global workspace defaults, then the workspace file."""
        merged = self._merge_dicts(DEFAULT_PROJECT_CONFIG, self._global_defaults())
        return self._merge_dicts(merged, self._read_json(self.paths.config_file))

    def load_settings(
        self,
        *,
        notes_dir: Optional[str] = None,
        autosave_seconds: Optional[float] = None,
        debug: Any = None,
    ) -> TrmnotesSettings:
        """Resolve settings; explicit arguments win over env, env over files."""
        cfg = self.load_project_config()
        env = self._env_settings()

        raw_notes_dir = notes_dir or env.get("notes_dir") or cfg.get("notes_dir")
        resolved_autosave = autosave_seconds
        if resolved_autosave is None:
            resolved_autosave = env.get("autosave_seconds")
        if resolved_autosave is None:
            resolved_autosave = self._to_float(cfg.get("autosave_seconds"))
        if resolved_autosave is None or resolved_autosave < 0:
            self.console.print(
                "[yellow]Invalid autosave_seconds in config; "
                f"using {DEFAULT_QUIET_PERIOD}s.[/yellow]"
            )
            resolved_autosave = DEFAULT_QUIET_PERIOD

        extension = cfg.get("note_extension")
        if not isinstance(extension, str) or not extension.strip():
            extension = DEFAULT_NOTE_EXTENSION
        extension = extension.strip()
        if not extension.startswith("."):
            extension = f".{extension}"

        template = cfg.get("note_template")
        return TrmnotesSettings(
            notes_dir=self._resolve_dir(raw_notes_dir),
            autosave_seconds=float(resolved_autosave),
            note_extension=extension,
            note_template=template if isinstance(template, str) else "",
            explorer_open=self._to_bool(cfg.get("explorer_open"), default=True),
            debug=debug if debug is not None else cfg.get("debug"),
            recovery_dir=self.paths.recovery_dir,
        )

    def _resolve_dir(self, raw: Any) -> Path:
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            return self.paths.default_notes_dir
        candidate = Path(text).expanduser()
        if not candidate.is_absolute():
            candidate = self.paths.root / candidate
        return candidate

    def _env_settings(self) -> Dict[str, Any]:
        return {
            "notes_dir": os.getenv("TRMNOTES_NOTES_DIR"),
            "autosave_seconds": self._to_float(os.getenv("TRMNOTES_AUTOSAVE_SECONDS")),
        }

    def _global_defaults(self) -> Dict[str, Any]:
        data = self._read_json(self.paths.global_config_file)
        defaults = data.get(GLOBAL_DEFAULTS_KEY, {})
        return defaults if isinstance(defaults, dict) else {}

    def _merge_dicts(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        if not override:
            return dict(base)
        merged: Dict[str, Any] = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge_dicts(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            self.console.print(
                f"[red]Failed to parse JSON config at {path}. Using defaults.[/red]"
            )
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _to_float(value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @staticmethod
    def _to_bool(value: Any, *, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"1", "true", "yes", "y", "on"}:
                return True
            if lowered in {"0", "false", "no", "n", "off"}:
                return False
        return default
