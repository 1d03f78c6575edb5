"""Utility helpers for identifier extraction and vault-safe names."""

from __future__ import annotations

import re

DOI_PATTERN = re.compile(r"(10\.\d{4,9}/[-._;()/:A-Z0-9]+)", flags=re.IGNORECASE)
ILLEGAL_PATH_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_SLASH_RUN = re.compile(r"/+")


def extract_doi(identifier: str) -> str | None:
    """Return the first DOI embedded in the identifier, verbatim."""
    if not identifier:
        return None
    match = DOI_PATTERN.search(identifier.strip())
    if not match:
        return None
    return match.group(1)


def sanitize_for_path(name: str) -> str:
    """Replace characters that are illegal in path segments with underscores."""
    return ILLEGAL_PATH_CHARS.sub("_", name).strip()


def normalize_path(path: str) -> str:
    """Normalize a vault-relative path to forward slashes without edge slashes."""
    path = path.replace("\\", "/")
    path = _SLASH_RUN.sub("/", path)
    return path.strip("/")


def join_path(root: str, name: str) -> str:
    if not root:
        return normalize_path(name)
    return normalize_path(f"{root}/{name}")
