"""Render normalized records into literature notes."""

from __future__ import annotations

from datetime import date

from zoteroid.models import NormalizedRecord

RECORD_TYPE = "ZoteroidRecord"
DOI_RESOLVER = "https://doi.org/"


def doi_link(doi: str) -> str:
    return f"{DOI_RESOLVER}{doi}"


def compose_note(record: NormalizedRecord, created: date) -> str:
    """Return the markdown body of a new literature note.

    Sections use dataview inline fields (``(Label:: value)``) so the overview
    page can query them by name. Lab and Keyword are editable stubs.
    """
    lines = [
        "---\n",
        f"type: {RECORD_TYPE}",
        f"date: {created.isoformat()}",
        "---\n\n\n",
        f"### Title\n(Title:: {record.title})\n",
        f"### Journal\n(Journal:: {record.journal})\n",
        f"### Year\n(Year:: {record.year})\n",
        f"### DOI\n(DOI:: {doi_link(record.doi)})\n",
        "### Lab\n(Lab:: #nobody)\n",
        "### Keyword\n(Keyword:: #keyword1)\n(Keyword:: #keyword2)\n",
        f"### Authors\n{record.author_line}",
        f"### Abstract\n{record.abstract}\n",
        "### Main idea\n\n\n",
        "### Materials and methods\n\n\n",
        "### Comment\n\n\n",
    ]
    return "\n".join(lines)
