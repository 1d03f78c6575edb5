"""Map raw Crossref payloads onto normalized records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

import structlog

from zoteroid.models import CrossrefWork, NormalizedRecord

TAG_PATTERN = re.compile(r"<[^>]*>")

logger = structlog.get_logger(__name__)


def extract_record(payload: Any, doi: str = "") -> NormalizedRecord:
    """Build a fully populated record from a Crossref ``message`` payload.

    Missing or malformed fields fall back to the record defaults, so this never
    raises for JSON-like input.
    """
    if not isinstance(payload, Mapping):
        logger.debug("extract.not_mapping", kind=type(payload).__name__)
        payload = {}
    work = CrossrefWork.model_validate(dict(payload))
    title = work.first_title()
    record = NormalizedRecord(
        doi=doi,
        title=title if title is not None else "Untitled",
        year=work.year() or "UnknownYear",
        journal=work.first_container_title() or "",
        authors=[name for name in map(author_name, work.authors()) if name],
        abstract=strip_markup(work.abstract_text()),
        publication_type=work.type_name() or "",
    )
    logger.debug("extract.record", doi=doi, kind=record.kind.value, year=record.year)
    return record


def author_name(entry: Mapping[str, Any]) -> str:
    """Prefer a literal name, otherwise join given and family names."""
    literal = entry.get("literal")
    if isinstance(literal, str) and literal:
        return literal
    given = entry.get("given") if isinstance(entry.get("given"), str) else ""
    family = entry.get("family") if isinstance(entry.get("family"), str) else ""
    separator = " " if given and family else ""
    return f"{given}{separator}{family}".strip()


def strip_markup(text: str | None) -> str:
    """Drop JATS/HTML tags from an abstract."""
    if not text:
        return ""
    return TAG_PATTERN.sub("", text).strip()
