"""Service abstractions for the Zoteroid application."""

from .composer import compose_note, doi_link
from .extraction import extract_record
from .naming import derive_naming
from .overview import OverviewGenerator, OverviewOutcome, OverviewStatus, render_overview
from .pipeline import ImportOutcome, ImportPipeline, ImportStatus, NotePreview
from .resolvers import CrossrefClient, RegistryClient
from .storage import DocumentStore, LocalVault, StoreEntry, StoreError

__all__ = [
    "CrossrefClient",
    "RegistryClient",
    "DocumentStore",
    "LocalVault",
    "StoreEntry",
    "StoreError",
    "ImportPipeline",
    "ImportOutcome",
    "ImportStatus",
    "NotePreview",
    "OverviewGenerator",
    "OverviewOutcome",
    "OverviewStatus",
    "render_overview",
    "extract_record",
    "derive_naming",
    "compose_note",
    "doi_link",
]
