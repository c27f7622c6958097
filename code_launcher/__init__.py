"""Code Launcher: find IDE projects under a directory tree and open them."""

__version__ = "0.1.0"

from code_launcher.catalog import CatalogView, ProjectCatalog, ProjectEntry, filter_projects
from code_launcher.classifier import (
    IconRef,
    display_label,
    display_markup,
    icon_for,
    pick_toolchain,
    project_parts,
)
from code_launcher.exceptions import (
    InvalidRootError,
    LaunchError,
    LauncherError,
    ScanCancelledError,
    SettingsError,
)
from code_launcher.launcher import LaunchResult, launch_project
from code_launcher.scanner import (
    CancellationToken,
    ProjectScanner,
    ScanOptions,
    ScanOutcome,
    ScanStatus,
    scan,
    use_locale_collation,
)
from code_launcher.settings import Settings, SettingsStore

__all__ = [
    "CancellationToken",
    "CatalogView",
    "IconRef",
    "InvalidRootError",
    "LaunchError",
    "LaunchResult",
    "LauncherError",
    "ProjectCatalog",
    "ProjectEntry",
    "ProjectScanner",
    "ScanCancelledError",
    "ScanOptions",
    "ScanOutcome",
    "ScanStatus",
    "Settings",
    "SettingsError",
    "SettingsStore",
    "display_label",
    "display_markup",
    "filter_projects",
    "icon_for",
    "launch_project",
    "pick_toolchain",
    "project_parts",
    "scan",
    "use_locale_collation",
]
