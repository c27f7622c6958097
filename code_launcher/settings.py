"""Persistent launcher settings: a JSON file under the user config directory."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import structlog
from platformdirs import user_config_dir

from code_launcher.exceptions import SettingsError

log = structlog.get_logger("code_launcher.settings")

APP_NAME = "code-launcher"
SETTINGS_FILE = "settings.json"


@dataclass(frozen=True)
class Settings:
    scan_directory: str = ""
    ignored_projects: frozenset[str] = field(default_factory=frozenset)

    def to_json(self) -> dict:
        return {
            "scan_directory": self.scan_directory,
            "ignored_projects": normalize_ignored_projects(self.ignored_projects),
        }

    @classmethod
    def from_json(cls, data: dict) -> Settings:
        scan_directory = data.get("scan_directory") or ""
        ignored = data.get("ignored_projects") or []
        if not isinstance(scan_directory, str) or not isinstance(ignored, list):
            raise SettingsError("Malformed settings: unexpected value types")
        return cls(
            scan_directory=scan_directory.strip(),
            ignored_projects=frozenset(normalize_ignored_projects(ignored)),
        )


def normalize_ignored_projects(values) -> list[str]:
    """Trim, drop empty entries and sort."""
    return sorted({str(v).strip() for v in values} - {""})


def default_config_dir() -> Path:
    override = os.environ.get("CODE_LAUNCHER_CONFIG_DIR")
    if override:
        return Path(override)
    return Path(user_config_dir(APP_NAME))


class SettingsStore:
    """Key-value settings consulted by the caller; the scanner never reads it."""

    def __init__(self, config_dir: str | Path | None = None) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()

    @property
    def path(self) -> Path:
        return self.config_dir / SETTINGS_FILE

    def load(self) -> Settings:
        """Read settings; a missing file yields defaults."""
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SettingsError(f"Invalid JSON in {self.path}: {exc}") from exc
        except OSError as exc:
            raise SettingsError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsError(f"Invalid settings in {self.path}: expected an object")
        return Settings.from_json(data)

    def save(self, settings: Settings) -> None:
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(settings.to_json(), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise SettingsError(f"Cannot write {self.path}: {exc}") from exc
        log.debug("settings.saved", path=str(self.path))

    def set_scan_directory(self, directory: str) -> Settings:
        settings = replace(self.load(), scan_directory=directory.strip())
        self.save(settings)
        return settings

    def ignore(self, project_path: str) -> Settings:
        current = self.load()
        settings = replace(current, ignored_projects=current.ignored_projects | {project_path.strip()})
        self.save(settings)
        return settings

    def unignore(self, project_path: str) -> Settings:
        current = self.load()
        settings = replace(current, ignored_projects=current.ignored_projects - {project_path.strip()})
        self.save(settings)
        return settings
