"""Filesystem query interface used by the scanner and classifier."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class DirEntry:
    """A single child of an enumerated directory."""

    name: str
    is_dir: bool


@runtime_checkable
class FileSystem(Protocol):
    """The narrow capability set the scanner depends on."""

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def iter_children(self, path: str, batch_size: int) -> AsyncIterator[list[DirEntry]]: ...


class LocalFileSystem:
    """``os.scandir``-backed filesystem.

    Directory type is read without following symlinks, so a symlinked
    directory is reported with ``is_dir=False`` and never traversed.
    ``exists`` follows symlinks, which means a symlinked marker whose
    target exists is honored.
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    async def iter_children(self, path: str, batch_size: int) -> AsyncIterator[list[DirEntry]]:
        """Yield the children of *path* in batches of at most *batch_size*.

        Control returns to the event loop after every batch. ``OSError``
        from opening or reading the directory propagates to the caller.
        """
        with os.scandir(path) as it:
            batch: list[DirEntry] = []
            for entry in it:
                batch.append(DirEntry(entry.name, _is_real_dir(entry)))
                if len(batch) >= batch_size:
                    yield batch
                    batch = []
                    await asyncio.sleep(0)
            if batch:
                yield batch


def _is_real_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def basename(path: str) -> str:
    """Last path component; the filesystem root maps to itself."""
    stripped = path.rstrip(os.sep)
    if not stripped:
        return os.sep if path else ""
    return os.path.basename(stripped)


def dirname(path: str) -> str:
    stripped = path.rstrip(os.sep)
    if not stripped:
        return os.sep if path else ""
    return os.path.dirname(stripped)
