"""Error kinds raised inside the import and overview workflows."""

from __future__ import annotations


class ZoteroidError(RuntimeError):
    """Base error carrying a short message suitable for end users."""

    user_message = "Unexpected error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail


class InvalidIdentifier(ZoteroidError):
    user_message = "Invalid DOI or DOI URL"


class IdentifierNotFound(ZoteroidError):
    user_message = "DOI does not exist"


class TransportError(ZoteroidError):
    user_message = "Network error when checking DOI"


class MetadataParseError(ZoteroidError):
    user_message = "Error reading DOI metadata"


class FolderCreationError(ZoteroidError):
    user_message = "Failed to create folder. Check that literature root exists and is writable."


class DocumentCreationError(ZoteroidError):
    user_message = "Failed to create file."


class OverviewWriteError(ZoteroidError):
    user_message = "Failed to write literature overview page."
