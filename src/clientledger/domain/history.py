"""Balance history (audit ledger) domain service."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterator, Optional

from clientledger.database.base import Database
from clientledger.domain.entities import BalanceHistoryEntry, HistoryRecord
from clientledger.domain.errors import InvalidLedgerEntry, ValidationError


class BalanceHistoryLedger:
    """Append-only, per-client record of every balance change.

    Rows can be added and read. No update or delete is offered; rows only
    disappear when their client is deleted.
    """

    def __init__(self, db: Database, page_size: int = 200):
        """Initialize history ledger.

        Args:
            db: Database instance
            page_size: Rows fetched per page by ``list_for_client``
        """
        self.db = db
        self.page_size = page_size

    def record(self, entry: HistoryRecord) -> int:
        """Append one history row.

        Args:
            entry: Row to store

        Returns:
            History row ID

        Raises:
            InvalidLedgerEntry: If ``new_balance != previous_balance + amount``
        """
        if entry.previous_balance + entry.amount != entry.new_balance:
            raise InvalidLedgerEntry(
                f"History row for client {entry.client_id} does not add up: "
                f"{entry.previous_balance} + {entry.amount} != {entry.new_balance}"
            )
        return self.db.add_balance_history(entry)

    def list_for_client(
        self,
        client_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Iterator[BalanceHistoryEntry]:
        """Iterate a client's history oldest first.

        The iterator is lazy and reads the store page by page; calling this
        again starts a fresh pass.

        Args:
            client_id: Client ID
            start_date: Optional first day to include
            end_date: Optional last day to include

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")

        start = datetime.combine(start_date, time.min) if start_date is not None else None
        end = (
            datetime.combine(end_date + timedelta(days=1), time.min)
            if end_date is not None
            else None
        )
        return self.db.iter_balance_history(
            client_id, start=start, end=end, page_size=self.page_size
        )

    def total_for_client(self, client_id: int) -> Decimal:
        """Sum of every recorded delta for a client."""
        return self.db.sum_balance_history(client_id)

    def count_for_client(self, client_id: int) -> int:
        """Number of recorded rows for a client."""
        return self.db.count_balance_history(client_id)
