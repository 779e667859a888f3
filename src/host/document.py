"""In-memory host document with transactional element storage.

The document is the single shared resource. Write transactions are
serialized by a re-entrant lock and work on a private copy of the
elements; pure reads need no transaction and see only committed state
unless the reading thread owns the open transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import threading
from typing import Callable, Iterable

from core.constants import DEFAULT_DOCUMENT_TITLE, FIRST_ELEMENT_ID
from core.errors import ReadOnlyDocumentError, TransactionError
from core.logging_config import get_logger
from host.elements import DataStorage, Entity
from host.transaction import Transaction

_LOGGER = get_logger(__name__)

FailureProcessor = Callable[["Document", str], None]


@dataclass(frozen=True)
class _Savepoint:
    """Element state captured when a transaction starts."""

    transaction: Transaction
    elements: dict[int, DataStorage]
    next_element_id: int
    revision: int


class Document:
    """Open host document holding data storage elements."""

    def __init__(
        self,
        title: str = DEFAULT_DOCUMENT_TITLE,
        path: Path | None = None,
        read_only: bool = False,
        elements: Iterable[DataStorage] = (),
        next_element_id: int | None = None,
    ) -> None:
        self._title = title
        self._path = path
        self._read_only = read_only
        self._elements: dict[int, DataStorage] = {item.element_id: item for item in elements}
        self._committed = self._elements
        self._next_element_id = max(
            next_element_id or FIRST_ELEMENT_ID,
            max(self._elements, default=FIRST_ELEMENT_ID - 1) + 1,
        )
        self._revision = 0
        self._modified = False
        self._lock = threading.RLock()
        self._owner_thread: int | None = None
        self._savepoints: list[_Savepoint] = []
        self._failure_processors: list[FailureProcessor] = []

    @property
    def title(self) -> str:
        return self._title

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def is_modified(self) -> bool:
        """Return whether committed changes are not yet saved."""
        return self._modified

    @property
    def is_modifiable(self) -> bool:
        """Return whether the calling thread holds an open transaction."""
        return bool(self._savepoints) and self._owner_thread == threading.get_ident()

    @property
    def next_element_id(self) -> int:
        return self._next_element_id

    def transaction(self, name: str) -> Transaction:
        """Create an unstarted transaction bound to this document."""
        return Transaction(self, name)

    def add_failure_processor(self, processor: FailureProcessor) -> None:
        """Register a callable that may veto top-level commits by raising."""
        self._failure_processors.append(processor)

    def remove_failure_processor(self, processor: FailureProcessor) -> None:
        self._failure_processors.remove(processor)

    def data_storages(self) -> tuple[DataStorage, ...]:
        """Return data storage elements ordered by element id."""
        elements = self._visible_elements()
        return tuple(elements[element_id] for element_id in sorted(elements))

    def element(self, element_id: int) -> DataStorage | None:
        return self._visible_elements().get(element_id)

    def create_data_storage(self, name: str) -> DataStorage:
        """Create a named data storage element inside the open transaction."""
        self._ensure_modifiable()
        element = DataStorage(self._next_element_id, name)
        self._elements[element.element_id] = element
        self._next_element_id += 1
        self._revision += 1
        return element

    def set_entity(self, element: DataStorage, entity: Entity) -> None:
        """Attach an entity to an element, replacing one of the same schema."""
        self._ensure_modifiable()
        stored = self._elements.get(element.element_id)
        if stored is None:
            raise TransactionError(
                f"Element {element.element_id} does not exist in document {self._title!r}."
            )
        stored._attach(entity)
        self._revision += 1

    def mark_saved(self, path: Path) -> None:
        """Record a successful save to path."""
        self._path = path
        self._modified = False

    def has_open_transaction(self) -> bool:
        return bool(self._savepoints)

    def _visible_elements(self) -> dict[int, DataStorage]:
        if self.is_modifiable:
            return self._elements
        return self._committed

    def _ensure_modifiable(self) -> None:
        if self._read_only:
            raise ReadOnlyDocumentError(
                f"Document {self._title!r} is read-only. Reopen it writable to make changes."
            )
        if not self.is_modifiable:
            raise TransactionError(
                f"Document {self._title!r} cannot be modified outside an open transaction."
            )

    def _begin_transaction(self, transaction: Transaction) -> bool:
        if self._read_only:
            raise ReadOnlyDocumentError(
                f"Cannot start transaction {transaction.name!r}: "
                f"document {self._title!r} is read-only."
            )
        self._lock.acquire()
        nested = bool(self._savepoints)
        if not nested:
            self._owner_thread = threading.get_ident()
            self._elements = _clone_elements(self._committed)
        self._savepoints.append(
            _Savepoint(
                transaction=transaction,
                elements=_clone_elements(self._elements),
                next_element_id=self._next_element_id,
                revision=self._revision,
            )
        )
        return nested

    def _finish_transaction(self, transaction: Transaction, commit: bool) -> None:
        if not self._savepoints or self._savepoints[-1].transaction is not transaction:
            raise TransactionError(
                f"Transaction {transaction.name!r} is not the innermost open transaction."
            )
        savepoint = self._savepoints[-1]
        top_level = len(self._savepoints) == 1
        try:
            if commit and top_level:
                self._run_failure_processors(savepoint)
            if not commit:
                self._restore(savepoint)
            elif top_level:
                if self._revision != savepoint.revision:
                    self._modified = True
                self._committed = self._elements
        finally:
            self._savepoints.pop()
            if top_level:
                self._elements = self._committed
                self._owner_thread = None
            self._lock.release()

    def _run_failure_processors(self, savepoint: _Savepoint) -> None:
        for processor in list(self._failure_processors):
            try:
                processor(self, savepoint.transaction.name)
            except Exception as error:
                self._restore(savepoint)
                _LOGGER.warning(
                    "transaction_rolled_back",
                    document=self._title,
                    transaction=savepoint.transaction.name,
                    reason=str(error),
                )
                raise TransactionError(
                    f"Commit of transaction {savepoint.transaction.name!r} was rejected: "
                    f"{error}. The document was rolled back."
                ) from error

    def _restore(self, savepoint: _Savepoint) -> None:
        self._elements = _clone_elements(savepoint.elements)
        self._next_element_id = savepoint.next_element_id
        self._revision = savepoint.revision


def _clone_elements(elements: dict[int, DataStorage]) -> dict[int, DataStorage]:
    return {key: value.clone() for key, value in elements.items()}
