"""Core data models used throughout the Zoteroid application."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NOTE_EXTENSION = ".md"


class PublicationKind(str, Enum):
    JOURNAL = "journal"
    BOOK = "book"
    OTHER = "other"


class CrossrefWork(BaseModel):
    """Subset of a Crossref ``message`` payload consumed by the extractor.

    Crossref fields are loosely typed, so everything is accepted as ``Any`` and
    the accessors below return ``None`` whenever a value has an unexpected shape.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Any = None
    title: Any = None
    container_title: Any = Field(default=None, alias="container-title")
    issued: Any = None
    published_print: Any = Field(default=None, alias="published-print")
    published_online: Any = Field(default=None, alias="published-online")
    author: Any = None
    abstract: Any = None

    def first_title(self) -> str | None:
        value = self.title
        if isinstance(value, list):
            return (_text(value[0]) or "") if value else None
        return _text(value)

    def first_container_title(self) -> str | None:
        value = self.container_title
        if isinstance(value, list) and value:
            return _text(value[0])
        return None

    def year(self) -> str | None:
        for field in (self.issued, self.published_print, self.published_online):
            year = _year_from_date(field)
            if year:
                return year
        return None

    def authors(self) -> list[dict[str, Any]]:
        if not isinstance(self.author, list):
            return []
        return [entry for entry in self.author if isinstance(entry, dict)]

    def abstract_text(self) -> str | None:
        return _text(self.abstract)

    def type_name(self) -> str | None:
        return self.type if isinstance(self.type, str) else None


class NormalizedRecord(BaseModel):
    """Normalized metadata describing a work; every field has a value."""

    doi: str = ""
    title: str = "Untitled"
    year: str = "UnknownYear"
    journal: str = ""
    authors: list[str] = Field(default_factory=list)
    abstract: str = ""
    publication_type: str = ""

    @property
    def author_line(self) -> str:
        return "; ".join(self.authors)

    @property
    def kind(self) -> PublicationKind:
        if "journal" in self.publication_type:
            return PublicationKind.JOURNAL
        if "book" in self.publication_type:
            return PublicationKind.BOOK
        return PublicationKind.OTHER


class DerivedNaming(BaseModel):
    """Folder and file names derived from a record."""

    folder_name: str
    file_base_name: str

    @property
    def file_name(self) -> str:
        return f"{self.file_base_name}{NOTE_EXTENSION}"


def _text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        text = str(value)
        return text or None
    return None


def _year_from_date(value: Any) -> str | None:
    if not isinstance(value, dict):
        return None
    parts = value.get("date-parts")
    if not isinstance(parts, list) or not parts:
        return None
    first = parts[0]
    if not isinstance(first, list) or not first:
        return None
    return _text(first[0])
