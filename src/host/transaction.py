"""Scoped write transactions over a host document.

A transaction opened while another one is active on the same document
becomes a sub-transaction: its rollback restores only its own changes and
its commit folds them into the enclosing transaction.
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Literal

from core.errors import TransactionError

if TYPE_CHECKING:
    from host.document import Document

TransactionStatus = Literal["not_started", "started", "committed", "rolled_back"]


class Transaction:
    """One named write transaction, usable as a context manager."""

    def __init__(self, document: "Document", name: str) -> None:
        if not name:
            raise TransactionError("Transaction name must be non-empty.")
        self._document = document
        self._name = name
        self._status: TransactionStatus = "not_started"
        self._nested = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def status(self) -> TransactionStatus:
        return self._status

    @property
    def is_nested(self) -> bool:
        return self._nested

    def start(self) -> None:
        """Start the transaction, blocking while another thread holds the document.

        Raises:
            TransactionError: If already started.
            ReadOnlyDocumentError: If the document is read-only.
        """
        if self._status != "not_started":
            raise TransactionError(f"Transaction {self._name!r} was already started.")
        self._nested = self._document._begin_transaction(self)
        self._status = "started"

    def commit(self) -> None:
        """Commit changes; a vetoed top-level commit rolls back and raises.

        Raises:
            TransactionError: If not started or a failure processor vetoes the commit.
        """
        self._require_started()
        try:
            self._document._finish_transaction(self, commit=True)
        except TransactionError:
            self._status = "rolled_back"
            raise
        self._status = "committed"

    def rollback(self) -> None:
        """Discard every change made since start."""
        self._require_started()
        self._document._finish_transaction(self, commit=False)
        self._status = "rolled_back"

    def __enter__(self) -> "Transaction":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._status != "started":
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def _require_started(self) -> None:
        if self._status != "started":
            raise TransactionError(
                f"Transaction {self._name!r} is {self._status.replace('_', ' ')}, not started."
            )
