"""Asynchronous import pipeline turning a DOI into a literature note."""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

import structlog

from zoteroid.errors import (
    DocumentCreationError,
    FolderCreationError,
    InvalidIdentifier,
    ZoteroidError,
)
from zoteroid.models import DerivedNaming, NormalizedRecord
from zoteroid.settings import DEFAULT_LITERATURE_ROOT, Settings
from zoteroid.utils import extract_doi, join_path
from .composer import compose_note
from .extraction import extract_record
from .naming import derive_naming
from .resolvers import RegistryClient
from .storage import DocumentStore, StoreEntry, StoreError

logger = structlog.get_logger(__name__)

CREATED_MESSAGE = "Record successfully created"
EXISTS_MESSAGE = (
    "Record already exists, if you want to re-create it, "
    "please delete the old one and try again."
)


class ImportStatus(str, Enum):
    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(slots=True)
class ImportOutcome:
    status: ImportStatus
    message: str
    identifier: str
    doi: str | None = None
    path: str | None = None
    record: NormalizedRecord | None = None
    error: ZoteroidError | None = None

    @property
    def ok(self) -> bool:
        return self.status in (ImportStatus.SUCCESS, ImportStatus.ALREADY_EXISTS)


@dataclass(slots=True)
class NotePreview:
    doi: str
    record: NormalizedRecord
    naming: DerivedNaming
    path: str
    body: str


class ImportPipeline:
    """Coordinates validation, metadata lookup, naming, and persistence."""

    def __init__(
        self,
        registry: RegistryClient,
        store: DocumentStore,
        settings: Settings,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._registry = registry
        self._store = store
        self._settings = settings
        self._today = today
        self._path_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def root(self) -> str:
        return self._settings.literature_root or DEFAULT_LITERATURE_ROOT

    async def import_identifier(self, raw: str) -> ImportOutcome:
        """Run one import; every failure is reported through the outcome."""
        identifier = raw.strip()
        doi = extract_doi(identifier)
        if doi is None:
            error = InvalidIdentifier(identifier)
            logger.info("import.rejected", identifier=identifier)
            return ImportOutcome(
                status=ImportStatus.REJECTED,
                message=error.user_message,
                identifier=identifier,
                error=error,
            )

        try:
            record, naming = await self._resolve(doi)
            return await self._persist(identifier, record, naming)
        except ZoteroidError as exc:
            logger.warning(
                "import.failed",
                doi=doi,
                error=type(exc).__name__,
                detail=str(exc),
            )
            return ImportOutcome(
                status=ImportStatus.FAILED,
                message=exc.user_message,
                identifier=identifier,
                doi=doi,
                error=exc,
            )

    async def import_many(self, identifiers: Iterable[str]) -> list[ImportOutcome]:
        outcomes = []
        for identifier in identifiers:
            outcomes.append(await self.import_identifier(identifier))
        return outcomes

    async def preview(self, doi: str) -> NotePreview:
        """Fetch metadata and render the note without touching the store."""
        record, naming = await self._resolve(doi)
        return NotePreview(
            doi=doi,
            record=record,
            naming=naming,
            path=self._note_path(naming),
            body=compose_note(record, self._today()),
        )

    async def _resolve(self, doi: str) -> tuple[NormalizedRecord, DerivedNaming]:
        payload = await self._registry.fetch(doi)
        record = extract_record(payload, doi=doi)
        return record, derive_naming(record)

    def _note_path(self, naming: DerivedNaming) -> str:
        return join_path(join_path(self.root, naming.folder_name), naming.file_name)

    async def _persist(
        self, identifier: str, record: NormalizedRecord, naming: DerivedNaming
    ) -> ImportOutcome:
        path = self._note_path(naming)

        async with self._lock_for(path):
            await self._ensure_folder(join_path(self.root, naming.folder_name))
            existing = await self._lookup(path)
            if existing is not None:
                logger.info("import.exists", doi=record.doi, path=path)
                if not existing.is_folder:
                    await self._store.open_document(existing)
                return ImportOutcome(
                    status=ImportStatus.ALREADY_EXISTS,
                    message=EXISTS_MESSAGE,
                    identifier=identifier,
                    doi=record.doi,
                    path=path,
                    record=record,
                )
            body = compose_note(record, self._today())
            created = await self._create_document(path, body)

        logger.info("import.success", doi=record.doi, path=created.path)
        await self._store.open_document(created)
        return ImportOutcome(
            status=ImportStatus.SUCCESS,
            message=CREATED_MESSAGE,
            identifier=identifier,
            doi=record.doi,
            path=created.path,
            record=record,
        )

    async def _ensure_folder(self, folder_path: str) -> None:
        try:
            if await self._store.exists(folder_path) is not None:
                return
            await self._store.create_folder(folder_path)
        except StoreError as exc:
            raise FolderCreationError(str(exc)) from exc

    async def _lookup(self, path: str) -> StoreEntry | None:
        try:
            return await self._store.exists(path)
        except StoreError as exc:
            raise DocumentCreationError(str(exc)) from exc

    async def _create_document(self, path: str, body: str) -> StoreEntry:
        try:
            return await self._store.create_document(path, body)
        except StoreError as exc:
            raise DocumentCreationError(str(exc)) from exc

    def _lock_for(self, path: str) -> asyncio.Lock:
        lock = self._path_locks.get(path)
        if lock is None:
            lock = asyncio.Lock()
            self._path_locks[path] = lock
        return lock
