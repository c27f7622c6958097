"""Async project scanner with bounded, cancellable traversal.

Walks a directory tree with an explicit stack, reports directories that hold a
project-root marker (``.idea``, ``.git``, ``.hg``, ``.svn``) and never descends
past them. Runs on the asyncio loop without worker threads, yielding control
at the start of every directory and between batches of entries.
"""

from __future__ import annotations

import asyncio
import enum
import locale
import os
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import dataclass, field

import structlog

from code_launcher.classifier import display_label
from code_launcher.constants import (
    PROJECT_ROOT_MARKERS,
    SCAN_BATCH_SIZE,
    SCAN_LIMIT_DEPTH,
    SCAN_LIMIT_PROJECTS,
    SKIP_DIRS,
)
from code_launcher.exceptions import InvalidRootError, ScanCancelledError
from code_launcher.fs import FileSystem, LocalFileSystem

log = structlog.get_logger("code_launcher.scanner")


class CancellationToken:
    """Cooperative cancel handle checked at every scanner suspension point."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, partial: list[str] | None = None) -> None:
        if self._cancelled:
            raise ScanCancelledError(partial)


@dataclass
class ScanOptions:
    """Options for a single :func:`scan` call.

    ``max_depth`` bounds the depth of reported projects, the root being
    depth 0: a directory at depth ``max_depth`` is never enumerated, so
    ``max_depth=0`` only checks the root itself. This is one level stricter
    than a limit applied to the enumerated directory, which would also list
    children at ``max_depth + 1``.
    """

    max_projects: int = SCAN_LIMIT_PROJECTS
    max_depth: int = SCAN_LIMIT_DEPTH
    cancel_token: CancellationToken | None = None
    on_progress: Callable[[int], None] | None = None
    batch_size: int = SCAN_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.max_projects < 1:
            raise ValueError(f"max_projects must be >= 1, got {self.max_projects}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")


def use_locale_collation(name: str = "") -> bool:
    """Set ``LC_COLLATE`` to *name* (empty: the user's environment).

    Python starts in the "C" locale, where :func:`locale.strxfrm` compares
    code points. Returns False and keeps the current collation when the
    locale is not available.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, name)
    except locale.Error:
        log.debug("scanner.collation_unavailable", locale=name or "<environment>")
        return False
    return True


def sort_projects(projects) -> list[str]:
    """Sort by display label, case-insensitive and locale-aware; path breaks ties.

    Collation follows the process ``LC_COLLATE``; see :func:`use_locale_collation`.
    """
    return sorted(projects, key=_sort_key)


def _sort_key(project_path: str) -> tuple[str, str]:
    label = display_label(project_path).casefold()
    try:
        return locale.strxfrm(label), project_path
    except (ValueError, OSError):
        # Undecodable filenames (surrogate escapes) cannot be collated
        return label, project_path


def is_project_root(fs: FileSystem, path: str) -> bool:
    """True when *path* holds any project-root marker as an immediate child."""
    return any(fs.exists(os.path.join(path, marker)) for marker in PROJECT_ROOT_MARKERS)


async def scan(
    root_path: str,
    options: ScanOptions | None = None,
    fs: FileSystem | None = None,
) -> list[str]:
    """Scan *root_path* for project roots.

    Returns the project paths sorted by display label. Stops early (without
    error) once ``max_projects`` is reached.

    Raises:
        InvalidRootError: *root_path* is missing or not a directory.
        ScanCancelledError: the cancel token fired before the scan finished;
            ``partial`` carries the sorted projects found so far.
    """
    options = options or ScanOptions()
    fs = fs or LocalFileSystem()

    root = os.path.abspath(os.path.expanduser(root_path))
    if not fs.is_dir(root):
        raise InvalidRootError(root_path)

    return await _Traversal(root, options, fs).run()


class _Traversal:
    """Per-call traversal state; owned exclusively by one :func:`scan` call."""

    def __init__(self, root: str, options: ScanOptions, fs: FileSystem) -> None:
        self.root = root
        self.options = options
        self.fs = fs
        self.projects: set[str] = set()
        self.stack: list[tuple[str, int]] = [(root, 0)]
        self.visited = 0

    @property
    def full(self) -> bool:
        return len(self.projects) >= self.options.max_projects

    def check_cancelled(self) -> None:
        token = self.options.cancel_token
        if token is not None and token.cancelled:
            log.debug("scanner.cancelled", root=self.root, found=len(self.projects))
            raise ScanCancelledError(sort_projects(self.projects))

    def record(self, path: str) -> None:
        before = len(self.projects)
        self.projects.add(path)
        if self.options.on_progress is None or len(self.projects) == before:
            return
        try:
            self.options.on_progress(len(self.projects))
        except Exception:
            log.debug("scanner.progress_callback_error", exc_info=True)

    async def run(self) -> list[str]:
        self.check_cancelled()
        if is_project_root(self.fs, self.root):
            self.record(self.root)
            return sort_projects(self.projects)

        while self.stack and not self.full:
            await asyncio.sleep(0)
            self.check_cancelled()

            directory, depth = self.stack.pop()
            # Children would land deeper than max_depth
            if depth >= self.options.max_depth:
                continue

            self.visited += 1
            try:
                await self._enumerate(directory, depth)
            except OSError as exc:
                log.debug("scanner.enumerate_failed", directory=directory, error=str(exc))

        result = sort_projects(self.projects)
        log.debug(
            "scanner.completed",
            root=self.root,
            projects=len(result),
            directories=self.visited,
            capped=self.full,
        )
        return result

    async def _enumerate(self, directory: str, depth: int) -> None:
        """Record project roots among *directory*'s children; push the rest."""
        batches = self.fs.iter_children(directory, self.options.batch_size)
        async with aclosing(batches):
            async for batch in batches:
                self.check_cancelled()
                for entry in batch:
                    if not entry.is_dir or entry.name in SKIP_DIRS:
                        continue

                    child = os.path.join(directory, entry.name)
                    if is_project_root(self.fs, child):
                        self.record(child)
                        if self.full:
                            return
                        continue

                    self.stack.append((child, depth + 1))


class ScanStatus(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class ScanOutcome:
    """Terminal outcome of one :meth:`ProjectScanner.scan` call."""

    generation: int
    status: ScanStatus
    root_path: str
    projects: list[str] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.status is ScanStatus.CANCELLED


class ProjectScanner:
    """Single-flight wrapper around :func:`scan`.

    Each call gets a generation number. Starting a scan cancels the one in
    flight and waits for it to stop before touching the filesystem, so at most
    one scan runs per instance. Callers compare ``outcome.generation`` with
    :meth:`is_current` to drop results that were superseded.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()
        self._lock = asyncio.Lock()
        self._generation = 0
        self._token: CancellationToken | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def cancel(self) -> None:
        """Request cancellation of the scan in flight, if any."""
        if self._token is not None:
            self._token.cancel()

    async def scan(
        self,
        root_path: str,
        *,
        max_projects: int = SCAN_LIMIT_PROJECTS,
        max_depth: int = SCAN_LIMIT_DEPTH,
        on_progress: Callable[[int], None] | None = None,
        batch_size: int = SCAN_BATCH_SIZE,
    ) -> ScanOutcome:
        """Run a scan, superseding any scan already in flight.

        ``InvalidRootError`` propagates; cancellation is reported through
        ``ScanOutcome.status`` rather than raised.
        """
        token = CancellationToken()
        options = ScanOptions(
            max_projects=max_projects,
            max_depth=max_depth,
            cancel_token=token,
            on_progress=on_progress,
            batch_size=batch_size,
        )

        self._generation += 1
        generation = self._generation
        self.cancel()

        async with self._lock:
            if not self.is_current(generation):
                log.debug("scanner.superseded", generation=generation)
                return ScanOutcome(generation, ScanStatus.CANCELLED, root_path)

            self._token = token
            try:
                projects = await scan(root_path, options, fs=self._fs)
            except ScanCancelledError as exc:
                return ScanOutcome(generation, ScanStatus.CANCELLED, root_path, exc.partial)
            finally:
                if self._token is token:
                    self._token = None

        log.info("scanner.scan_finished", generation=generation, projects=len(projects))
        return ScanOutcome(generation, ScanStatus.COMPLETED, root_path, projects)
