"""Derive vault folder and file names for a record."""

from __future__ import annotations

from zoteroid.models import DerivedNaming, NormalizedRecord, PublicationKind
from zoteroid.utils import sanitize_for_path

MAX_BASE_NAME_LENGTH = 100
UNKNOWN_JOURNAL = "UNKNOWN"
FALLBACK_NAME = "Untitled"


def base_title(record: NormalizedRecord) -> str:
    kind = record.kind
    if kind is PublicationKind.JOURNAL:
        return f"{record.journal} - {record.year} - {record.title}"
    if kind is PublicationKind.BOOK:
        return f"BOOK - {record.year} - {record.title}"
    return f"{record.journal or UNKNOWN_JOURNAL} - {record.year} - {record.title}"


def derive_naming(record: NormalizedRecord) -> DerivedNaming:
    """Truncate, trim, then sanitize; the order matters for byte-identical names."""
    truncated = base_title(record)[:MAX_BASE_NAME_LENGTH].strip()
    name = sanitize_for_path(truncated) or FALLBACK_NAME
    return DerivedNaming(folder_name=name, file_base_name=name)
