"""Registry clients responsible for turning DOIs into raw metadata."""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

from zoteroid.errors import IdentifierNotFound, MetadataParseError, TransportError
from zoteroid.settings import Settings

logger = structlog.get_logger(__name__)


class RegistryClient(Protocol):
    """Protocol for metadata registries."""

    name: str

    async def fetch(self, doi: str) -> Any:
        """Return the registry's payload for ``doi`` or raise a registry error."""
        ...


class CrossrefClient:
    """Fetches work metadata from the Crossref Works API."""

    name = "crossref"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def url_for(self, doi: str) -> str:
        return f"{self._settings.crossref_base_url.rstrip('/')}/{quote(doi, safe='')}"

    async def fetch(self, doi: str) -> Any:
        url = self.url_for(doi)
        logger.info("registry.attempt", registry=self.name, doi=doi)
        try:
            response = await self._client.get(
                url, headers={"User-Agent": self._settings.user_agent}
            )
        except httpx.HTTPError as exc:
            logger.warning("registry.error", registry=self.name, doi=doi, error=str(exc))
            raise TransportError(str(exc)) from exc

        if not response.is_success:
            logger.info("registry.miss", registry=self.name, doi=doi, status=response.status_code)
            raise IdentifierNotFound(f"{self.name} returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("registry.bad_json", registry=self.name, doi=doi, error=str(exc))
            raise MetadataParseError(str(exc)) from exc

        message = data.get("message") if isinstance(data, dict) else None
        if message is None:
            logger.info("registry.empty", registry=self.name, doi=doi)
            raise IdentifierNotFound("response has no message payload")
        if not isinstance(message, dict):
            logger.warning("registry.unexpected_message", registry=self.name, doi=doi)
        logger.info("registry.hit", registry=self.name, doi=doi)
        return message
