"""Scan limits, marker tables and JetBrains Toolbox layout."""

from __future__ import annotations

import os

SCAN_LIMIT_PROJECTS = 5000
SCAN_LIMIT_DEPTH = 50
SCAN_BATCH_SIZE = 64

# A child directory holding any of these is a project root
PROJECT_ROOT_MARKERS: tuple[str, ...] = (".idea", ".git", ".hg", ".svn")

# Never descended into, whatever their depth or contents
SKIP_DIRS: frozenset[str] = frozenset({"node_modules", ".git", ".hg", ".svn", ".cache"})

DEFAULT_TOOLCHAIN = "intellij"

# Toolchain detection rules: (toolchain_key, marker_files)
# Ordered by priority, first match wins
MARKER_RULES: list[tuple[str, tuple[str, ...]]] = [
    (
        "webstorm",
        (
            "package.json",
            "pnpm-lock.yaml",
            "yarn.lock",
            "tsconfig.json",
            "vite.config.js",
            "vite.config.ts",
            "next.config.js",
            "deno.json",
            "bun.lockb",
            "bunfig.toml",
        ),
    ),
    ("goland", ("go.mod", "go.work")),
    ("rustrover", ("Cargo.toml", "rust-toolchain", "rust-toolchain.toml")),
    ("pycharm", ("pyproject.toml", "requirements.txt", "setup.py", "Pipfile", "poetry.lock")),
]

# Toolbox launcher script / PATH command per toolchain
IDE_COMMANDS: dict[str, str] = {
    "webstorm": "webstorm",
    "goland": "goland",
    "rustrover": "rustrover",
    "pycharm": "pycharm",
    "intellij": "idea",
}

# Directory names under <toolbox>/apps
TOOLBOX_APP_DIRS: dict[str, str] = {
    "webstorm": "webstorm",
    "goland": "goland",
    "rustrover": "rustrover",
    "pycharm": "pycharm",
    "intellij": "intellij-idea",
}

CUSTOM_ICON_PATH = os.path.join(".idea", "icon.png")
FALLBACK_ICON_NAME = "applications-development-symbolic"


def toolbox_dir() -> str:
    """Root of the JetBrains Toolbox install (``CODE_LAUNCHER_TOOLBOX_DIR`` overrides)."""
    override = os.environ.get("CODE_LAUNCHER_TOOLBOX_DIR")
    if override:
        return override
    return os.path.join(os.path.expanduser("~"), ".local", "share", "JetBrains", "Toolbox")


def toolbox_scripts_dir() -> str:
    return os.path.join(toolbox_dir(), "scripts")


def toolbox_apps_dir() -> str:
    return os.path.join(toolbox_dir(), "apps")
