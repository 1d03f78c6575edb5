"""Generate the aggregate literature overview page."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from zoteroid.errors import OverviewWriteError, ZoteroidError
from zoteroid.settings import DEFAULT_LITERATURE_ROOT, Settings
from zoteroid.utils import normalize_path
from .composer import RECORD_TYPE
from .storage import DocumentStore, StoreEntry, StoreError

logger = structlog.get_logger(__name__)

OVERVIEW_TYPE = "ZoteroidOverview"
MISSING_PATH_MESSAGE = "Literature overview page path is not configured."


class OverviewStatus(str, Enum):
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    FAILED = "failed"


@dataclass(slots=True)
class OverviewOutcome:
    status: OverviewStatus
    message: str
    path: str | None = None
    error: ZoteroidError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not OverviewStatus.FAILED


def _index_block(field: str, root: str) -> list[str]:
    return [
        "```dataview",
        f"LIST WITHOUT ID {field}",
        f'FROM "{root}"',
        f"WHERE {field}",
        f"FLATTEN {field}",
        f"GROUP BY {field}",
        f"SORT {field} ASC",
        "```",
    ]


def render_overview(root: str) -> str:
    """Return the overview page body; ``root`` is embedded without escaping."""
    lines = [
        "---\n",
        f"type: {OVERVIEW_TYPE}",
        "---\n\n\n",
        "### Filtered Paper",
        "```dataview",
        "TABLE Journal, Title, Year, Keyword",
        f'FROM "{root}"',
        f'WHERE type = "{RECORD_TYPE}"',
        "",
        "// change here to filter by keyword, journal, year, etc.",
        'WHERE (contains(Keyword, "#keyword1") or contains(Keyword, "")) '
        'and contains(journal, "") and (year > 1949)',
        "",
        "// change here to sort by date added or publish year, in ASC or DESC order",
        "// SORT Year DESC",
        "SORT date DESC",
        "```",
        "",
        "### All Keywords",
        *_index_block("Keyword", root),
        "",
        "### All Journals",
        *_index_block("Journal", root),
        "",
        "### All Labs",
        *_index_block("Lab", root),
        "\n\n\nTo correctly display this page, you need to install Dataview plug-in.",
    ]
    return "\n".join(lines)


class OverviewGenerator:
    """Creates or fully replaces the overview page at the configured path."""

    def __init__(self, store: DocumentStore, settings: Settings) -> None:
        self._store = store
        self._settings = settings

    async def regenerate(self) -> OverviewOutcome:
        path = normalize_path((self._settings.overview_path or "").strip())
        if not path:
            logger.warning("overview.unconfigured")
            return OverviewOutcome(status=OverviewStatus.FAILED, message=MISSING_PATH_MESSAGE)

        content = render_overview(self._settings.literature_root or DEFAULT_LITERATURE_ROOT)
        try:
            entry, status = await self._write(path, content)
        except OverviewWriteError as exc:
            logger.warning("overview.failed", path=path, detail=str(exc))
            return OverviewOutcome(
                status=OverviewStatus.FAILED,
                message=exc.user_message,
                path=path,
                error=exc,
            )

        logger.info("overview.written", path=path, status=status.value)
        await self._store.open_document(entry)
        message = (
            "Overwritten literature overview page"
            if status is OverviewStatus.OVERWRITTEN
            else "Created literature overview page"
        )
        return OverviewOutcome(status=status, message=message, path=entry.path)

    async def _write(self, path: str, content: str) -> tuple[StoreEntry, OverviewStatus]:
        try:
            existing = await self._store.exists(path)
            if existing is not None:
                await self._store.overwrite_document(existing, content)
                return existing, OverviewStatus.OVERWRITTEN
            created = await self._store.create_document(path, content)
            return created, OverviewStatus.CREATED
        except StoreError as exc:
            raise OverviewWriteError(str(exc)) from exc
