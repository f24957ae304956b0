"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterator, Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from clientledger.domain.entities import (
    Client,
    Invoice,
    Transaction,
    BalanceHistoryEntry,
    HistoryRecord,
)


class Database(ABC):
    """Abstract database interface for clientledger.

    Every method runs in its own short transaction unless it is called inside
    ``unit_of_work()``, in which case it joins that unit and nothing is
    committed until the unit exits cleanly.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Unit of work
    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Open an atomic unit of work for the calling thread.

        Commits on clean exit and rolls back on any exception. Lock and
        version conflicts are raised as ConcurrentModification. Nested calls
        join the outer unit.
        """
        pass

    @abstractmethod
    def in_unit_of_work(self) -> bool:
        """Return True if the calling thread has an open unit of work."""
        pass

    # Client operations
    @abstractmethod
    def create_client(
        self,
        name: str,
        client_type: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a new client with a zero balance. Returns client ID."""
        pass

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[Client]:
        """Get client by ID."""
        pass

    @abstractmethod
    def get_client_by_name(self, name: str) -> Optional[Client]:
        """Get client by exact name."""
        pass

    @abstractmethod
    def list_clients(
        self, active_only: bool = False, client_type: Optional[str] = None
    ) -> list[Client]:
        """List clients ordered by name."""
        pass

    @abstractmethod
    def update_client(
        self,
        client_id: int,
        name: Optional[str] = None,
        client_type: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update descriptive client fields. The balance is never touched here."""
        pass

    @abstractmethod
    def delete_client(self, client_id: int) -> None:
        """Delete a client and, by cascade, its balance history."""
        pass

    @abstractmethod
    def lock_client(self, client_id: int) -> Optional[Client]:
        """Get a client and hold a row lock on it for the current unit of work."""
        pass

    @abstractmethod
    def update_client_balance(self, client_id: int, new_balance: Decimal) -> None:
        """Write a client's stored balance.

        Raises ConcurrentModification if the row changed since it was read.
        """
        pass

    @abstractmethod
    def get_client_invoice_count(self, client_id: int) -> int:
        """Get count of invoices issued to or by a client."""
        pass

    @abstractmethod
    def get_client_transaction_count(self, client_id: int) -> int:
        """Get count of transactions referencing a client."""
        pass

    # Invoice operations
    @abstractmethod
    def create_invoice(
        self,
        invoice_number: str,
        invoice_type: str,
        client_id: int,
        date: date,
        total: Decimal,
        paid: Decimal,
        notes: Optional[str] = None,
    ) -> int:
        """Create an invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """Get invoice by ID, optionally holding a row lock on it."""
        pass

    @abstractmethod
    def invoice_number_exists(self, invoice_number: str) -> bool:
        """Check if an invoice number is taken."""
        pass

    @abstractmethod
    def list_invoice_numbers(self, prefix: str) -> list[str]:
        """List invoice numbers starting with prefix."""
        pass

    @abstractmethod
    def list_invoices(
        self,
        client_id: Optional[int] = None,
        invoice_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Invoice]:
        """List invoices with optional filters, newest first."""
        pass

    @abstractmethod
    def update_invoice(
        self,
        invoice_id: int,
        total: Optional[Decimal] = None,
        paid: Optional[Decimal] = None,
        date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update invoice fields. Only fields that are not None are changed."""
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice."""
        pass

    @abstractmethod
    def get_invoice_payment_count(self, invoice_id: int) -> int:
        """Get count of transactions linked to an invoice."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_number: str,
        transaction_type: str,
        amount: Decimal,
        date: date,
        description: str,
        payment_method: str,
        client_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def transaction_number_exists(self, transaction_number: str) -> bool:
        """Check if a transaction number is taken."""
        pass

    @abstractmethod
    def list_transaction_numbers(self, prefix: str) -> list[str]:
        """List transaction numbers starting with prefix."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        client_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        invoice_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        transaction_type: Optional[str] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
        client_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        update_links: bool = False,
    ) -> None:
        """Update transaction fields.

        Only fields that are not None are changed, except that
        ``update_links`` writes ``client_id`` and ``invoice_id`` even when
        they are None (to clear them).
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Balance history operations
    @abstractmethod
    def add_balance_history(self, record: HistoryRecord) -> int:
        """Insert one balance history row. Returns history ID."""
        pass

    @abstractmethod
    def list_balance_history(
        self,
        client_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        after: Optional[tuple[datetime, int]] = None,
        limit: Optional[int] = None,
    ) -> list[BalanceHistoryEntry]:
        """List history rows for a client ordered by (date, id) ascending.

        Args:
            start: Inclusive lower bound on row date
            end: Exclusive upper bound on row date
            after: Only rows strictly after this (date, id) position
            limit: Maximum number of rows
        """
        pass

    @abstractmethod
    def sum_balance_history(self, client_id: int) -> Decimal:
        """Sum of all history deltas for a client."""
        pass

    @abstractmethod
    def count_balance_history(self, client_id: int) -> int:
        """Number of history rows for a client."""
        pass

    def iter_balance_history(
        self,
        client_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page_size: int = 200,
    ) -> Iterator[BalanceHistoryEntry]:
        """Lazily iterate history rows page by page.

        Each page is read in its own short transaction, so a slow consumer
        never holds a database lock.
        """
        after = None
        while True:
            page = self.list_balance_history(
                client_id, start=start, end=end, after=after, limit=page_size
            )
            yield from page
            if len(page) < page_size:
                return
            last = page[-1]
            after = (last.date, last.id)
