"""Per-project StepScout settings (excluded path fragments).

Stored as a small JSON object, by default ``stepscout.json`` at the project
root::

    {"exclude_paths": ["build/", "node_modules"]}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stepscout.io_utils import load_json, save_json

SETTINGS_FILENAME = "stepscout.json"


@dataclass
class StepScoutSettings:
    exclude_paths: list[str] = field(default_factory=list)

    def excluded_path_fragments(self) -> list[str]:
        """Non-blank fragments, in the order they were configured."""
        return [p for p in self.exclude_paths if p.strip()]

    def add_exclude(self, fragment: str) -> bool:
        """Append *fragment* unless blank or already present."""
        fragment = fragment.strip()
        if not fragment or fragment in self.exclude_paths:
            return False
        self.exclude_paths.append(fragment)
        return True

    def remove_exclude(self, fragment: str) -> bool:
        try:
            self.exclude_paths.remove(fragment.strip())
        except ValueError:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"exclude_paths": list(self.exclude_paths)}


def settings_from_dict(payload: Any, *, origin: str = "<settings>") -> StepScoutSettings:
    if not isinstance(payload, dict):
        raise ValueError(f"Settings payload must be a JSON object: {origin}")
    excludes = payload.get("exclude_paths", [])
    if not isinstance(excludes, list) or not all(isinstance(e, str) for e in excludes):
        raise ValueError(f"exclude_paths must be a list of strings: {origin}")
    return StepScoutSettings(exclude_paths=list(excludes))


def load_settings(path: Path) -> StepScoutSettings:
    """Load settings from *path*; a missing file yields the defaults."""
    if not path.exists():
        return StepScoutSettings()
    return settings_from_dict(load_json(path), origin=str(path))


def save_settings(settings: StepScoutSettings, path: Path) -> None:
    save_json(settings.to_dict(), path)
