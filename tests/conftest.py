"""Shared pytest fixtures for code-launcher tests."""

import locale

import pytest

from code_launcher.settings import SettingsStore


@pytest.fixture
def settings_store(tmp_path):
    return SettingsStore(tmp_path / "config")


@pytest.fixture
def isolated_desktop(tmp_path, monkeypatch):
    """Point Toolbox and XDG lookups at empty directories under tmp_path."""
    toolbox = tmp_path / "toolbox"
    data_home = tmp_path / "xdg-home"
    data_dirs = tmp_path / "xdg-dirs"
    for d in (toolbox, data_home, data_dirs):
        d.mkdir()
    monkeypatch.setenv("CODE_LAUNCHER_TOOLBOX_DIR", str(toolbox))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_home))
    monkeypatch.setenv("XDG_DATA_DIRS", str(data_dirs))
    return {"toolbox": toolbox, "data_home": data_home, "data_dirs": data_dirs}


_COLLATION_LOCALES = ("en_US.UTF-8", "en_US.utf8", "en_GB.UTF-8", "de_DE.UTF-8", "fr_FR.UTF-8")


@pytest.fixture
def collation_locale():
    """Switch LC_COLLATE to an installed UTF-8 language locale for one test."""
    previous = locale.setlocale(locale.LC_COLLATE)
    for name in _COLLATION_LOCALES:
        try:
            locale.setlocale(locale.LC_COLLATE, name)
        except locale.Error:
            continue
        break
    else:
        pytest.skip("no UTF-8 language locale installed")
    yield name
    locale.setlocale(locale.LC_COLLATE, previous)
