"""Document store interfaces for the literature vault."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

import structlog

from zoteroid.utils import normalize_path

logger = structlog.get_logger(__name__)


class StoreError(RuntimeError):
    """Raised when the document store cannot complete a mutation."""


@dataclass(frozen=True, slots=True)
class StoreEntry:
    path: str
    is_folder: bool = False


class DocumentStore(Protocol):
    """High-level contract the workflows need from a vault."""

    async def exists(self, path: str) -> StoreEntry | None:
        ...

    async def create_folder(self, path: str) -> StoreEntry:
        ...

    async def create_document(self, path: str, content: str) -> StoreEntry:
        ...

    async def overwrite_document(self, entry: StoreEntry, content: str) -> None:
        ...

    async def open_document(self, entry: StoreEntry) -> None:
        ...


class LocalVault(DocumentStore):
    """Plain directory of markdown files used as the document store."""

    def __init__(self, root: Path, opener: Callable[[Path], object] | None = None) -> None:
        self._root = root
        self._opener = opener
        self._lock = asyncio.Lock()

    def resolve(self, path: str) -> Path:
        relative = normalize_path(path)
        if any(part == ".." for part in relative.split("/")):
            raise StoreError(f"Path escapes the vault: {path}")
        return self._root / relative if relative else self._root

    async def exists(self, path: str) -> StoreEntry | None:
        target = self.resolve(path)
        if target.is_dir():
            return StoreEntry(path=normalize_path(path), is_folder=True)
        if target.is_file():
            return StoreEntry(path=normalize_path(path))
        return None

    async def create_folder(self, path: str) -> StoreEntry:
        target = self.resolve(path)
        async with self._lock:
            try:
                await asyncio.to_thread(target.mkdir, parents=True)
            except OSError as exc:
                logger.warning("store.create_folder_failed", path=path, error=str(exc))
                raise StoreError(str(exc)) from exc
        logger.info("store.create_folder", path=path)
        return StoreEntry(path=normalize_path(path), is_folder=True)

    async def create_document(self, path: str, content: str) -> StoreEntry:
        target = self.resolve(path)
        async with self._lock:
            try:
                await asyncio.to_thread(self._write_new, target, content)
            except OSError as exc:
                logger.warning("store.create_document_failed", path=path, error=str(exc))
                raise StoreError(str(exc)) from exc
        logger.info("store.create_document", path=path)
        return StoreEntry(path=normalize_path(path))

    async def overwrite_document(self, entry: StoreEntry, content: str) -> None:
        if entry.is_folder:
            raise StoreError(f"Cannot overwrite a folder: {entry.path}")
        target = self.resolve(entry.path)
        async with self._lock:
            try:
                await asyncio.to_thread(target.write_text, content, encoding="utf-8")
            except OSError as exc:
                logger.warning("store.overwrite_failed", path=entry.path, error=str(exc))
                raise StoreError(str(exc)) from exc
        logger.info("store.overwrite_document", path=entry.path)

    async def open_document(self, entry: StoreEntry) -> None:
        logger.info("store.open_document", path=entry.path)
        if self._opener is not None:
            self._opener(self.resolve(entry.path))

    # Internal helpers -----------------------------------------------------

    @staticmethod
    def _write_new(target: Path, content: str) -> None:
        # Exclusive mode: never clobber a note created by a concurrent import.
        with target.open("x", encoding="utf-8") as fh:
            fh.write(content)
