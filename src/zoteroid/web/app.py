"""FastAPI request/response surface for Zoteroid."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from zoteroid.errors import (
    DocumentCreationError,
    FolderCreationError,
    IdentifierNotFound,
)
from zoteroid.services import (
    CrossrefClient,
    ImportOutcome,
    ImportPipeline,
    ImportStatus,
    LocalVault,
    OverviewGenerator,
    RegistryClient,
)
from zoteroid.settings import Settings, get_settings


class ImportPayload(BaseModel):
    identifier: str


class SettingsPayload(BaseModel):
    literature_root: Optional[str] = None
    overview_path: Optional[str] = None


def _status_code(outcome: ImportOutcome) -> int:
    if outcome.ok:
        return status.HTTP_200_OK
    if outcome.status is ImportStatus.REJECTED:
        return status.HTTP_400_BAD_REQUEST
    if isinstance(outcome.error, IdentifierNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(outcome.error, (FolderCreationError, DocumentCreationError)):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_502_BAD_GATEWAY


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[RegistryClient] = None,
) -> FastAPI:
    """Factory used by uvicorn; ``registry`` overrides the Crossref client."""
    state = {"settings": settings or get_settings()}

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with httpx.AsyncClient(timeout=state["settings"].http_timeout) as client:
            app.state.http = client
            yield

    app = FastAPI(title="Zoteroid", lifespan=lifespan)

    def current() -> Settings:
        return state["settings"]

    def pipeline() -> ImportPipeline:
        active = current()
        client = registry or CrossrefClient(client=app.state.http, settings=active)
        return ImportPipeline(registry=client, store=LocalVault(active.vault_dir), settings=active)

    @app.post("/import")
    async def import_identifier(payload: ImportPayload) -> JSONResponse:
        outcome = await pipeline().import_identifier(payload.identifier)
        body = {
            "status": outcome.status.value,
            "message": outcome.message,
            "doi": outcome.doi,
            "path": outcome.path,
        }
        return JSONResponse(body, status_code=_status_code(outcome))

    @app.post("/overview")
    async def regenerate_overview() -> JSONResponse:
        active = current()
        generator = OverviewGenerator(store=LocalVault(active.vault_dir), settings=active)
        outcome = await generator.regenerate()
        body = {"status": outcome.status.value, "message": outcome.message, "path": outcome.path}
        code = status.HTTP_200_OK if outcome.ok else status.HTTP_500_INTERNAL_SERVER_ERROR
        return JSONResponse(body, status_code=code)

    @app.get("/settings")
    async def read_settings() -> dict:
        return current().model_dump(mode="json")

    @app.put("/settings")
    async def update_settings(payload: SettingsPayload) -> dict:
        state["settings"] = current().update(**payload.model_dump())
        return current().model_dump(mode="json")

    return app
