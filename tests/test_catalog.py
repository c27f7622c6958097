"""Tests for ProjectCatalog and the ignore/search filters."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from code_launcher.catalog import (
    MSG_NO_MATCHES,
    MSG_NO_PROJECTS,
    MSG_NO_SCAN_DIRECTORY,
    MSG_NOT_SCANNED,
    ProjectCatalog,
    build_entry,
    filter_projects,
)
from code_launcher.classifier import IconRef


def _project(root: Path, rel: str, files: tuple[str, ...] = ()) -> str:
    path = root / rel
    (path / ".idea").mkdir(parents=True)
    for f in files:
        (path / f).write_text("")
    return str(path)


def _no_icon(_key):
    return None


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "src"
    _project(root, "web/shop", files=("package.json",))
    _project(root, "go/api", files=("go.mod",))
    _project(root, "py/Tools", files=("pyproject.toml",))
    return root


class TestFilterProjects:
    PROJECTS = ["/src/web/shop", "/src/go/api", "/src/py/Tools"]

    def test_no_filters(self):
        assert filter_projects(self.PROJECTS) == self.PROJECTS

    def test_ignored_removed(self):
        assert filter_projects(self.PROJECTS, ignored={"/src/go/api"}) == [
            "/src/web/shop",
            "/src/py/Tools",
        ]

    def test_query_matches_label_case_insensitive(self):
        assert filter_projects(self.PROJECTS, query="PY/t") == ["/src/py/Tools"]

    def test_query_matches_full_path(self):
        assert filter_projects(self.PROJECTS, query="src/go") == ["/src/go/api"]

    def test_blank_query_keeps_all(self):
        assert filter_projects(self.PROJECTS, query="   ") == self.PROJECTS

    def test_no_match(self):
        assert filter_projects(self.PROJECTS, query="zzz") == []


class TestBuildEntry:
    def test_entry_fields(self, tmp_path: Path):
        path = _project(tmp_path, "team/app", files=("Cargo.toml",))
        entry = build_entry(path, icon_resolver=_no_icon)
        assert entry.path == path
        assert entry.label == "team/app"
        assert entry.markup == '<span alpha="70%">team/</span>app'
        assert entry.toolchain == "rustrover"
        assert entry.icon == IconRef("themed", "applications-development-symbolic")


class TestProjectCatalog:
    @pytest.mark.asyncio
    async def test_no_scan_directory(self, settings_store):
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert view.message == MSG_NO_SCAN_DIRECTORY
        assert view.entries == []

    @pytest.mark.asyncio
    async def test_scan_directory_missing(self, settings_store, tmp_path: Path):
        settings_store.set_scan_directory(str(tmp_path / "gone"))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert view.message == f"Not a directory: {tmp_path / 'gone'}"
        assert not catalog.has_scanned

    def test_view_before_scan(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        assert catalog.view().message == MSG_NOT_SCANNED

    @pytest.mark.asyncio
    async def test_refresh_lists_classified_entries(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert view.message is None
        assert [(e.label, e.toolchain) for e in view.entries] == [
            ("go/api", "goland"),
            ("py/Tools", "pycharm"),
            ("web/shop", "webstorm"),
        ]
        assert catalog.has_scanned

    @pytest.mark.asyncio
    async def test_progress_forwarded(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        counts = []
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon, on_progress=counts.append)
        await catalog.refresh()
        assert counts == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_ignored_projects_hidden(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        settings_store.ignore(str(tree / "go/api"))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert [e.label for e in view.entries] == ["py/Tools", "web/shop"]

    @pytest.mark.asyncio
    async def test_all_ignored(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        for rel in ("web/shop", "go/api", "py/Tools"):
            settings_store.ignore(str(tree / rel))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert view.message == MSG_NO_PROJECTS

    @pytest.mark.asyncio
    async def test_empty_tree(self, settings_store, tmp_path: Path):
        settings_store.set_scan_directory(str(tmp_path))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        view = await catalog.refresh()
        assert view.message == MSG_NO_PROJECTS
        assert catalog.has_scanned

    @pytest.mark.asyncio
    async def test_search(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        await catalog.refresh()

        assert [e.label for e in catalog.view("SHOP").entries] == ["web/shop"]
        assert catalog.search_text == "shop"
        # Search text sticks until changed
        assert [e.label for e in catalog.view().entries] == ["web/shop"]
        assert catalog.view("nothing-here").message == MSG_NO_MATCHES
        assert len(catalog.view("").entries) == 3

    @pytest.mark.asyncio
    async def test_cached_until_forced(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        await catalog.refresh()

        _project(tree, "new/thing")
        view = await catalog.refresh()
        assert len(view.entries) == 3

        view = await catalog.refresh(force=True)
        assert len(view.entries) == 4

    @pytest.mark.asyncio
    async def test_invalidate(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        await catalog.refresh()
        catalog.view("api")

        catalog.invalidate()
        assert catalog.projects == []
        assert catalog.search_text == ""
        assert catalog.view().message == MSG_NOT_SCANNED

    @pytest.mark.asyncio
    async def test_superseded_refresh_keeps_previous_state(self, settings_store, tree: Path):
        settings_store.set_scan_directory(str(tree))
        catalog = ProjectCatalog(settings_store, icon_resolver=_no_icon)
        await catalog.refresh()

        _project(tree, "deep/a/b/c")
        first = asyncio.create_task(catalog.refresh(force=True))
        await asyncio.sleep(0)
        second = asyncio.create_task(catalog.refresh(force=True))
        first_view, second_view = await asyncio.gather(first, second)

        assert first_view.stale
        assert len(first_view.entries) == 3
        assert not second_view.stale
        assert len(second_view.entries) == 4
