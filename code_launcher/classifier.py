"""Project classifier: display label, toolchain and icon for a project path.

Pure functions; the only I/O is file-existence checks (and, for the default
icon resolver, reading ``.desktop`` entries).
"""

from __future__ import annotations

import configparser
import os
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from code_launcher.constants import (
    CUSTOM_ICON_PATH,
    DEFAULT_TOOLCHAIN,
    FALLBACK_ICON_NAME,
    IDE_COMMANDS,
    MARKER_RULES,
    TOOLBOX_APP_DIRS,
    toolbox_apps_dir,
)
from code_launcher.fs import FileSystem, LocalFileSystem, basename, dirname

log = structlog.get_logger("code_launcher.classifier")

_LOCAL_FS = LocalFileSystem()

_MARKUP_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}


@dataclass(frozen=True)
class IconRef:
    """Icon reference handed opaquely to the rendering layer."""

    kind: str  # "file" | "themed"
    value: str


IconResolver = Callable[[str], "IconRef | None"]


def project_parts(project_path: str) -> tuple[str, str]:
    """Return ``(parent_name, project_name)`` for *project_path*."""
    project_name = basename(project_path)
    parent_name = basename(dirname(project_path))
    return parent_name, project_name


def display_label(project_path: str) -> str:
    parent_name, project_name = project_parts(project_path)
    return f"{parent_name}/{project_name}"


def escape_markup(text: str) -> str:
    """Escape the characters Pango markup treats specially."""
    return "".join(_MARKUP_ESCAPES.get(ch, ch) for ch in str(text))


def display_markup(project_path: str) -> str:
    """Label markup with the parent segment (and slash) dimmed."""
    parent_name, project_name = project_parts(project_path)
    return f'<span alpha="70%">{escape_markup(parent_name)}/</span>{escape_markup(project_name)}'


def pick_toolchain(project_path: str, fs: FileSystem | None = None) -> str:
    """Pick a toolchain key from marker files.

    Walks MARKER_RULES in declared order and returns the first toolchain with
    any of its markers present; falls back to DEFAULT_TOOLCHAIN.
    """
    fs = fs or _LOCAL_FS
    for toolchain, marker_files in MARKER_RULES:
        for marker in marker_files:
            if fs.exists(os.path.join(project_path, marker)):
                return toolchain
    return DEFAULT_TOOLCHAIN


def icon_for(
    project_path: str,
    toolchain: str,
    resolver: IconResolver | None = None,
    fs: FileSystem | None = None,
) -> IconRef:
    """Resolve the icon for a project.

    Precedence: project-local ``.idea/icon.png``, then *resolver* (default
    :func:`toolchain_icon`), then a generic themed icon.
    """
    fs = fs or _LOCAL_FS
    custom = os.path.join(project_path, CUSTOM_ICON_PATH)
    if fs.exists(custom):
        return IconRef("file", custom)

    resolver = resolver or toolchain_icon
    icon = resolver(toolchain)
    if icon is not None:
        return icon

    return IconRef("themed", FALLBACK_ICON_NAME)


def toolchain_icon(toolchain: str) -> IconRef | None:
    """Look up the installed IDE's icon.

    Tries the JetBrains Toolbox layout (PNG, then SVG) and then the
    ``Icon=`` key of a matching desktop entry.
    """
    app_dir = TOOLBOX_APP_DIRS.get(toolchain, TOOLBOX_APP_DIRS[DEFAULT_TOOLCHAIN])
    base_name = "idea" if toolchain == DEFAULT_TOOLCHAIN else toolchain
    bin_dir = os.path.join(toolbox_apps_dir(), app_dir, "bin")
    for ext in ("png", "svg"):
        candidate = os.path.join(bin_dir, f"{base_name}.{ext}")
        if os.path.exists(candidate):
            return IconRef("file", candidate)

    return desktop_entry_icon(IDE_COMMANDS.get(toolchain, IDE_COMMANDS[DEFAULT_TOOLCHAIN]))


def desktop_entry_icon(name: str) -> IconRef | None:
    """Return the icon of the first ``*.desktop`` file whose name contains *name*."""
    for apps_dir in _application_dirs():
        try:
            candidates = sorted(f for f in os.listdir(apps_dir) if f.endswith(".desktop"))
        except OSError:
            continue
        for filename in candidates:
            if name.lower() not in filename.lower():
                continue
            icon = _read_desktop_icon(os.path.join(apps_dir, filename))
            if icon:
                kind = "file" if os.path.isabs(icon) else "themed"
                return IconRef(kind, icon)
    return None


def _application_dirs() -> list[str]:
    data_home = os.environ.get("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"), ".local", "share"
    )
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    dirs = [data_home] + [d for d in data_dirs.split(os.pathsep) if d]
    return [os.path.join(d, "applications") for d in dirs]


def _read_desktop_icon(path: str) -> str | None:
    parser = configparser.RawConfigParser(strict=False, interpolation=None)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError):
        log.debug("classifier.desktop_entry_unreadable", path=path)
        return None
    if not parser.has_section("Desktop Entry"):
        return None
    return parser.get("Desktop Entry", "Icon", fallback=None) or None
