"""ProjectCatalog: headless panel state built from the last scan."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import structlog

from code_launcher.classifier import (
    IconRef,
    IconResolver,
    display_label,
    display_markup,
    icon_for,
    pick_toolchain,
)
from code_launcher.scanner import ProjectScanner
from code_launcher.settings import SettingsStore

log = structlog.get_logger("code_launcher.catalog")

MSG_NO_SCAN_DIRECTORY = "Set a scan directory in settings"
MSG_NOT_SCANNED = "Run a scan to list projects"
MSG_NO_PROJECTS = "No projects found"
MSG_NO_MATCHES = "No matches"


@dataclass(frozen=True)
class ProjectEntry:
    """One renderable project row."""

    path: str
    label: str
    markup: str
    toolchain: str
    icon: IconRef


@dataclass
class CatalogView:
    """What the UI shows: either entries or a single disabled message line."""

    entries: list[ProjectEntry] = field(default_factory=list)
    message: str | None = None
    stale: bool = False


def filter_projects(
    projects: Iterable[str],
    ignored: Iterable[str] = (),
    query: str | None = None,
) -> list[str]:
    """Drop ignored projects, then keep those whose label or path contains *query*.

    Matching is case-insensitive; input order is preserved.
    """
    ignored_set = set(ignored)
    q = (query or "").strip().lower()
    result = []
    for path in projects:
        if path in ignored_set:
            continue
        if q and q not in display_label(path).lower() and q not in path.lower():
            continue
        result.append(path)
    return result


def build_entry(project_path: str, icon_resolver: IconResolver | None = None) -> ProjectEntry:
    toolchain = pick_toolchain(project_path)
    return ProjectEntry(
        path=project_path,
        label=display_label(project_path),
        markup=display_markup(project_path),
        toolchain=toolchain,
        icon=icon_for(project_path, toolchain, resolver=icon_resolver),
    )


class ProjectCatalog:
    """Keeps the last scan result and turns it into views.

    Settings changes are pushed in by the caller through :meth:`invalidate`;
    the catalog itself only reads the store.
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        scanner: ProjectScanner | None = None,
        icon_resolver: IconResolver | None = None,
        on_progress: Callable[[int], None] | None = None,
    ) -> None:
        self._settings_store = settings_store
        self._scanner = scanner or ProjectScanner()
        self._icon_resolver = icon_resolver
        self._on_progress = on_progress
        self.projects: list[str] = []
        self.has_scanned = False
        self.search_text = ""

    def invalidate(self) -> None:
        """Drop cached results and the search text (scan directory changed)."""
        self.projects = []
        self.has_scanned = False
        self.search_text = ""

    async def refresh(self, force: bool = False) -> CatalogView:
        """Scan the configured directory (or reuse the cached result).

        A refresh superseded by a newer one keeps the previous state and
        returns a view flagged ``stale``.
        """
        settings = self._settings_store.load()
        root = settings.scan_directory.strip()

        if not root:
            self.invalidate()
            return CatalogView(message=MSG_NO_SCAN_DIRECTORY)

        if not os.path.isdir(root):
            self.projects = []
            self.has_scanned = False
            return CatalogView(message=f"Not a directory: {root}")

        if self.has_scanned and not force:
            return self.view()

        outcome = await self._scanner.scan(root, on_progress=self._on_progress)
        if outcome.cancelled or not self._scanner.is_current(outcome.generation):
            log.debug("catalog.refresh_superseded", generation=outcome.generation)
            view = self.view()
            view.stale = True
            return view

        self.projects = outcome.projects
        self.has_scanned = True
        log.info("catalog.refreshed", root=root, projects=len(self.projects))
        return self.view()

    def view(self, query: str | None = None) -> CatalogView:
        if query is not None:
            self.search_text = query.strip().lower()

        settings = self._settings_store.load()
        if not settings.scan_directory.strip():
            return CatalogView(message=MSG_NO_SCAN_DIRECTORY)
        if not self.has_scanned:
            return CatalogView(message=MSG_NOT_SCANNED)

        visible = filter_projects(self.projects, settings.ignored_projects)
        if not visible:
            return CatalogView(message=MSG_NO_PROJECTS)

        matches = filter_projects(visible, query=self.search_text)
        if not matches:
            return CatalogView(message=MSG_NO_MATCHES)

        return CatalogView(entries=[build_entry(p, self._icon_resolver) for p in matches])
