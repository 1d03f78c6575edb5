import asyncio
from datetime import date

import httpx
import pytest

from zoteroid.errors import IdentifierNotFound, TransportError
from zoteroid.services.pipeline import ImportPipeline, ImportStatus
from zoteroid.services.resolvers import CrossrefClient
from zoteroid.services.storage import LocalVault, StoreEntry, StoreError
from zoteroid.settings import Settings

NATURE_PAYLOAD = {
    "type": "journal-article",
    "issued": {"date-parts": [[2020, 8, 12]]},
    "title": ["Example Paper"],
    "container-title": ["Nature"],
    "author": [{"given": "A", "family": "B"}],
}
NOTE_PATH = "Literature/Nature - 2020 - Example Paper/Nature - 2020 - Example Paper.md"


class _StubRegistry:
    name = "stub"

    def __init__(self, payload=None, error: Exception | None = None) -> None:
        self._payload = payload if payload is not None else NATURE_PAYLOAD
        self._error = error
        self.calls: list[str] = []

    async def fetch(self, doi: str) -> dict:  # noqa: D401 - test helper
        self.calls.append(doi)
        await asyncio.sleep(0)
        if self._error is not None:
            raise self._error
        return self._payload


class _ReadOnlyVault(LocalVault):
    async def create_folder(self, path: str) -> StoreEntry:
        raise StoreError("read-only file system")


def _pipeline(tmp_path, registry: _StubRegistry, opened: list | None = None, **overrides):
    settings = Settings(vault_dir=tmp_path, **overrides)
    store = LocalVault(tmp_path, opener=opened.append if opened is not None else None)
    return ImportPipeline(
        registry=registry, store=store, settings=settings, today=lambda: date(2024, 5, 1)
    )


@pytest.mark.asyncio
async def test_import_creates_note_from_doi_url(tmp_path) -> None:
    registry = _StubRegistry()
    opened: list = []
    pipeline = _pipeline(tmp_path, registry, opened)

    outcome = await pipeline.import_identifier("https://doi.org/10.1038/s41586-020-2649-2")

    assert outcome.status is ImportStatus.SUCCESS
    assert outcome.message == "Record successfully created"
    assert registry.calls == ["10.1038/s41586-020-2649-2"]
    assert outcome.path == NOTE_PATH
    body = (tmp_path / NOTE_PATH).read_text(encoding="utf-8")
    assert "date: 2024-05-01" in body
    assert "### Authors\nA B\n" in body
    assert "(DOI:: https://doi.org/10.1038/s41586-020-2649-2)" in body
    assert opened == [tmp_path / NOTE_PATH]


@pytest.mark.asyncio
async def test_malformed_identifier_is_rejected_without_fetch(tmp_path) -> None:
    registry = _StubRegistry()
    pipeline = _pipeline(tmp_path, registry)

    outcome = await pipeline.import_identifier("https://example.org/not-a-doi")

    assert outcome.status is ImportStatus.REJECTED
    assert outcome.message == "Invalid DOI or DOI URL"
    assert registry.calls == []
    assert not (tmp_path / "Literature").exists()


@pytest.mark.asyncio
async def test_second_import_never_overwrites(tmp_path) -> None:
    opened: list = []
    pipeline = _pipeline(tmp_path, _StubRegistry(), opened)
    await pipeline.import_identifier("10.1038/s41586-020-2649-2")
    note = tmp_path / NOTE_PATH
    note.write_text("my annotations", encoding="utf-8")

    outcome = await pipeline.import_identifier("doi:10.1038/s41586-020-2649-2")

    assert outcome.status is ImportStatus.ALREADY_EXISTS
    assert outcome.ok
    assert note.read_text(encoding="utf-8") == "my annotations"
    assert opened == [note, note]


@pytest.mark.asyncio
async def test_concurrent_imports_of_same_doi_create_one_note(tmp_path) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry())

    first, second = await asyncio.gather(
        pipeline.import_identifier("10.1038/s41586-020-2649-2"),
        pipeline.import_identifier("10.1038/s41586-020-2649-2"),
    )

    statuses = sorted(outcome.status.value for outcome in (first, second))
    assert statuses == ["already_exists", "success"]


@pytest.mark.asyncio
async def test_empty_metadata_uses_generic_name(tmp_path) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry(payload={}))

    outcome = await pipeline.import_identifier("10.5555/12345678")

    assert outcome.status is ImportStatus.SUCCESS
    assert outcome.path == (
        "Literature/UNKNOWN - UnknownYear - Untitled/UNKNOWN - UnknownYear - Untitled.md"
    )


@pytest.mark.asyncio
async def test_custom_root_and_existing_folder(tmp_path) -> None:
    (tmp_path / "refs" / "Nature - 2020 - Example Paper").mkdir(parents=True)
    pipeline = _pipeline(tmp_path, _StubRegistry(), literature_root="refs/")

    outcome = await pipeline.import_identifier("10.1038/s41586-020-2649-2")

    assert outcome.status is ImportStatus.SUCCESS
    assert outcome.path == "refs/Nature - 2020 - Example Paper/Nature - 2020 - Example Paper.md"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "message"),
    [
        (TransportError("boom"), "Network error when checking DOI"),
        (IdentifierNotFound("404"), "DOI does not exist"),
    ],
)
async def test_registry_errors_become_failed_outcomes(tmp_path, error, message) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry(error=error))

    outcome = await pipeline.import_identifier("10.1038/s41586-020-2649-2")

    assert outcome.status is ImportStatus.FAILED
    assert outcome.message == message
    assert outcome.error is error


@pytest.mark.asyncio
async def test_folder_creation_failure(tmp_path) -> None:
    settings = Settings(vault_dir=tmp_path)
    pipeline = ImportPipeline(
        registry=_StubRegistry(), store=_ReadOnlyVault(tmp_path), settings=settings
    )

    outcome = await pipeline.import_identifier("10.1038/s41586-020-2649-2")

    assert outcome.status is ImportStatus.FAILED
    assert outcome.message.startswith("Failed to create folder")


@pytest.mark.asyncio
async def test_preview_does_not_write(tmp_path) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry())

    preview = await pipeline.preview("10.1038/s41586-020-2649-2")

    assert preview.path == NOTE_PATH
    assert preview.naming.file_base_name == "Nature - 2020 - Example Paper"
    assert "(Title:: Example Paper)" in preview.body
    assert not (tmp_path / "Literature").exists()


@pytest.mark.asyncio
async def test_import_many_keeps_order(tmp_path) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry())

    outcomes = await pipeline.import_many(["bogus", "10.1038/s41586-020-2649-2"])

    assert [outcome.status for outcome in outcomes] == [
        ImportStatus.REJECTED,
        ImportStatus.SUCCESS,
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [{}, ["not", "an", "object"]])
async def test_empty_crossref_message_creates_default_note(tmp_path, message) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"message": message}))
    settings = Settings(vault_dir=tmp_path)
    async with httpx.AsyncClient(transport=transport) as http:
        pipeline = ImportPipeline(
            registry=CrossrefClient(client=http, settings=settings),
            store=LocalVault(tmp_path),
            settings=settings,
        )
        outcome = await pipeline.import_identifier("10.5555/12345678")

    assert outcome.status is ImportStatus.SUCCESS
    assert outcome.path == (
        "Literature/UNKNOWN - UnknownYear - Untitled/UNKNOWN - UnknownYear - Untitled.md"
    )
    assert (tmp_path / outcome.path).exists()


@pytest.mark.asyncio
async def test_path_locks_are_released_after_import(tmp_path) -> None:
    pipeline = _pipeline(tmp_path, _StubRegistry())

    await pipeline.import_many(["10.1038/s41586-020-2649-2", "10.1038/s41586-020-2649-2"])

    assert len(pipeline._path_locks) == 0
