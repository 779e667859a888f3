"""Unit tests for the named identifier store."""

from __future__ import annotations

import threading
from uuid import UUID

import pytest

from core.errors import HostDocumentError, InvalidArgumentError, StorageFault
from core.types import NotFound, ResolvedIdentifier, SchemaDescriptor
from host.application import HostApplication
from host.document import Document
from host.elements import DataStorage, Entity
from host.schema import Schema, build_schema
from store.extensible_storage import ExtensibleStorageAdapter
from store.named_identifier_store import NamedIdentifierStore


def _store(application: HostApplication) -> NamedIdentifierStore:
    return NamedIdentifierStore(ExtensibleStorageAdapter(application.schemas))


def _resolved(result: ResolvedIdentifier | NotFound) -> ResolvedIdentifier:
    assert isinstance(result, ResolvedIdentifier)
    return result


class _CompetingWriterAdapter(ExtensibleStorageAdapter):
    """Adapter whose first lookup lets a competing writer commit before answering."""

    def __init__(self, application: HostApplication, competitor: NamedIdentifierStore) -> None:
        super().__init__(application.schemas)
        self._competitor = competitor
        self.competitor_result: ResolvedIdentifier | NotFound | None = None

    def find_record(self, document: Document, schema: Schema, name: str) -> DataStorage | None:
        if self.competitor_result is None and not document.has_open_transaction():
            self.competitor_result = self._competitor.resolve(document, name, True)
            return None
        return super().find_record(document, schema, name)


class _BarrierAdapter(ExtensibleStorageAdapter):
    """Adapter that holds every unlocked lookup until all callers have looked."""

    def __init__(self, application: HostApplication, barrier: threading.Barrier) -> None:
        super().__init__(application.schemas)
        self._barrier = barrier

    def find_record(self, document: Document, schema: Schema, name: str) -> DataStorage | None:
        record = super().find_record(document, schema, name)
        if not document.is_modifiable:
            self._barrier.wait(timeout=5)
        return record


def test_resolve_example_scenario() -> None:
    """Create, re-read, and miss an unrelated name on a fresh document."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")

    first = _resolved(store.resolve(document, "ProjectTrackingId", True))
    second = _resolved(store.resolve(document, "ProjectTrackingId", True))
    other = store.resolve(document, "Other", False)

    assert (
        first.created
        and not second.created
        and first.identifier == second.identifier
        and other == NotFound(name="Other")
    )


def test_resolve_generates_random_version_four_guid() -> None:
    """Created identifiers should come from the random UUID generator."""
    application = HostApplication()
    document = application.new_document("fresh")

    result = _resolved(_store(application).resolve(document, "ProjectTrackingId"))

    assert result.identifier.version == 4


def test_lookup_without_create_does_not_mutate() -> None:
    """A missing name with creation disabled should leave the document untouched."""
    application = HostApplication()
    document = application.new_document("fresh")

    result = _store(application).resolve(document, "absent", create_if_missing=False)

    assert (
        isinstance(result, NotFound)
        and document.data_storages() == ()
        and not document.is_modified
        and not document.has_open_transaction()
    )


def test_distinct_names_get_distinct_records() -> None:
    """Each name should get its own identifier and its own storage element."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")

    first = _resolved(store.resolve(document, "alpha"))
    second = _resolved(store.resolve(document, "beta"))

    assert first.identifier != second.identifier and [
        element.name for element in document.data_storages()
    ] == ["alpha", "beta"]


def test_commit_failure_leaves_no_record() -> None:
    """A vetoed commit should surface a fault and store nothing."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")

    def reject(_: Document, transaction_name: str) -> None:
        raise HostDocumentError(f"disk full while committing {transaction_name}")

    document.add_failure_processor(reject)
    with pytest.raises(StorageFault):
        store.resolve(document, "ProjectTrackingId")
    document.remove_failure_processor(reject)

    assert isinstance(store.resolve(document, "ProjectTrackingId", False), NotFound)


def test_record_created_by_competing_writer_wins() -> None:
    """A record committed between lookup and create should be returned, not replaced."""
    application = HostApplication()
    competitor = _store(application)
    adapter = _CompetingWriterAdapter(application, competitor)
    store = NamedIdentifierStore(adapter)
    document = application.new_document("fresh")

    result = _resolved(store.resolve(document, "ProjectTrackingId"))
    winner = _resolved(adapter.competitor_result)

    assert (
        not result.created
        and winner.created
        and result.identifier == winner.identifier
        and len(document.data_storages()) == 1
    )


def test_concurrent_creators_store_one_record() -> None:
    """Two threads that both miss the lookup should end with one shared identifier."""
    application = HostApplication()
    document = application.new_document("fresh")
    store = NamedIdentifierStore(_BarrierAdapter(application, threading.Barrier(2)))
    results: list[ResolvedIdentifier | NotFound] = []

    def create() -> None:
        results.append(store.resolve(document, "ProjectTrackingId"))

    threads = [threading.Thread(target=create) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    resolved = [_resolved(result) for result in results]

    assert (
        len(document.data_storages()) == 1
        and len({result.identifier for result in resolved}) == 1
        and sorted(result.created for result in resolved) == [False, True]
    )


def test_resolve_reuses_caller_transaction() -> None:
    """Creation inside a caller transaction should commit with the caller."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")

    with document.transaction("Caller"):
        created = _resolved(store.resolve(document, "ProjectTrackingId"))
        inside_modified = document.is_modified
    found = _resolved(store.resolve(document, "ProjectTrackingId", False))

    assert not inside_modified and document.is_modified and found.identifier == created.identifier


def test_caller_rollback_discards_created_record() -> None:
    """Rolling back the caller transaction should discard the new entry."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")
    transaction = document.transaction("Caller")
    transaction.start()
    store.resolve(document, "ProjectTrackingId")

    transaction.rollback()

    assert isinstance(store.resolve(document, "ProjectTrackingId", False), NotFound)


def test_read_only_document_faults_on_create() -> None:
    """Creating in a read-only document should raise a storage fault."""
    application = HostApplication()
    document = Document("locked", read_only=True)

    with pytest.raises(StorageFault):
        _store(application).resolve(document, "ProjectTrackingId")


def test_records_with_foreign_schema_are_invisible() -> None:
    """Elements tagged with another schema should not satisfy a lookup."""
    application = HostApplication()
    document = application.new_document("fresh")
    foreign_schema = build_schema(
        UUID("9E8D7C6B-5A49-4837-A625-14F3E2D1C0B9"), "Foreign", {"Guid": "guid"}
    )
    with document.transaction("Foreign"):
        element = document.create_data_storage("ProjectTrackingId")
        document.set_entity(
            element,
            Entity(foreign_schema, {"Guid": UUID("00000000-0000-4000-8000-000000000001")}),
        )

    result = _store(application).resolve(document, "ProjectTrackingId", False)

    assert isinstance(result, NotFound)


def test_schema_layout_conflict_raises_storage_fault() -> None:
    """A schema id already registered with another layout should fault."""
    application = HostApplication()
    descriptor = SchemaDescriptor()
    application.schemas.register(
        build_schema(descriptor.schema_id, descriptor.schema_name, {"Other": "guid"})
    )
    document = application.new_document("fresh")

    with pytest.raises(StorageFault):
        _store(application).resolve(document, "ProjectTrackingId", False)


def test_custom_descriptor_uses_its_field_name() -> None:
    """The stored entity should use the descriptor's field name."""
    application = HostApplication()
    descriptor = SchemaDescriptor(
        schema_id=UUID("2B0C4E8A-6D1F-4F3B-9A57-0E6C1D2F3A4B"),
        schema_name="AcmeProjectTracking",
        field_name="TrackingGuid",
    )
    store = NamedIdentifierStore(ExtensibleStorageAdapter(application.schemas), descriptor)
    document = application.new_document("fresh")

    result = _resolved(store.resolve(document, "ProjectTrackingId"))
    entity = document.data_storages()[0].get_entity(descriptor.schema_id)

    assert entity is not None and entity.get("TrackingGuid") == result.identifier


@pytest.mark.parametrize("name", ["", "   ", None])
def test_resolve_rejects_invalid_names(name: object) -> None:
    """Empty or missing names should be rejected before touching the host."""
    application = HostApplication()
    document = application.new_document("fresh")

    with pytest.raises(InvalidArgumentError):
        _store(application).resolve(document, name, True)  # type: ignore[arg-type]


def test_resolve_rejects_missing_document() -> None:
    """A missing document should be rejected as an invalid argument."""
    with pytest.raises(InvalidArgumentError):
        _store(HostApplication()).resolve(None, "ProjectTrackingId")  # type: ignore[arg-type]


def test_try_resolve_reports_fault_outcome() -> None:
    """try_resolve should return a fault outcome instead of raising."""
    application = HostApplication()
    document = Document("locked", read_only=True)

    outcome = _store(application).try_resolve(document, "ProjectTrackingId")

    assert outcome.status == "fault" and isinstance(outcome.error, StorageFault)


def test_try_resolve_reports_created_then_found() -> None:
    """try_resolve should distinguish created and found outcomes."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")

    created = store.try_resolve(document, "ProjectTrackingId")
    found = store.try_resolve(document, "ProjectTrackingId")

    assert (
        created.status == "created"
        and found.status == "found"
        and created.identifier == found.identifier
        and found.succeeded
    )


def test_lookup_during_foreign_transaction_ignores_uncommitted_record() -> None:
    """Another thread's open entry should neither be returned nor survive its rollback."""
    application = HostApplication()
    store = _store(application)
    document = application.new_document("fresh")
    opened = threading.Event()
    release = threading.Event()
    writer_results: list[ResolvedIdentifier | NotFound] = []
    reader_results: list[ResolvedIdentifier | NotFound] = []

    def writer() -> None:
        transaction = document.transaction("Caller")
        transaction.start()
        writer_results.append(store.resolve(document, "ProjectTrackingId"))
        opened.set()
        release.wait(timeout=5)
        transaction.rollback()

    def reader() -> None:
        reader_results.append(store.resolve(document, "ProjectTrackingId"))

    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    opened.wait(timeout=5)
    lookup = store.resolve(document, "ProjectTrackingId", False)
    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    release.set()
    writer_thread.join(timeout=10)
    reader_thread.join(timeout=10)
    discarded = _resolved(writer_results[0])
    created = _resolved(reader_results[0])
    final = _resolved(store.resolve(document, "ProjectTrackingId", False))

    assert (
        isinstance(lookup, NotFound)
        and created.created
        and created.identifier != discarded.identifier
        and final.identifier == created.identifier
        and len(document.data_storages()) == 1
    )


def test_default_schema_accepts_registered_add_in_layout() -> None:
    """A schema registered under the add-in's id, name, and field should be reused."""
    application = HostApplication()
    application.schemas.register(
        build_schema(
            UUID("5F374308-9C59-42AE-ACC3-A77EF45EC146"),
            "JtNamedGuiStorage",
            {"Guid": "guid"},
            SchemaDescriptor().documentation,
        )
    )
    document = application.new_document("fresh")

    result = _store(application).resolve(document, "ProjectTrackingId", False)

    assert isinstance(result, NotFound)
