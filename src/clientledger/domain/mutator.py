"""Balance mutation domain service.

``BalanceMutator`` is the only code that writes a client's stored balance.
Each change reads the locked client row, writes the new balance and appends
the matching history row inside one unit of work.
"""

import os
import time
from decimal import Decimal
from typing import Callable, Optional, TypeVar

from clientledger.database.base import Database
from clientledger.domain.entities import BalanceChange, CauseType, HistoryRecord
from clientledger.domain.errors import (
    ClientNotFound,
    ConcurrentModification,
    InvalidAmount,
    client_inactive,
    client_not_found,
    concurrent_modification,
)
from clientledger.domain.history import BalanceHistoryLedger
from clientledger.logger_config import logger
from clientledger.utils.amount_parser import MAX_AMOUNT, to_decimal

T = TypeVar("T")


class BalanceMutator:
    """Applies signed deltas to client balances atomically."""

    def __init__(
        self,
        db: Database,
        history: Optional[BalanceHistoryLedger] = None,
        max_retries: Optional[int] = None,
        backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize balance mutator.

        Args:
            db: Database instance
            history: History ledger to record into (defaults to one on ``db``)
            max_retries: Retries after a concurrent modification. If None,
                reads CLIENTLEDGER_MAX_RETRIES, defaulting to 3
            backoff: Base delay in seconds, doubled per retry. If None, reads
                CLIENTLEDGER_RETRY_BACKOFF, defaulting to 0.05
            sleep: Sleep function used between retries
        """
        self.db = db
        self.history = history or BalanceHistoryLedger(db)
        if max_retries is None:
            max_retries = int(os.environ.get("CLIENTLEDGER_MAX_RETRIES", "3"))
        if backoff is None:
            backoff = float(os.environ.get("CLIENTLEDGER_RETRY_BACKOFF", "0.05"))
        self.max_retries = max_retries
        self.backoff = backoff
        self._sleep = sleep

    def run_atomic(self, work: Callable[[], T]) -> T:
        """Run ``work`` in a unit of work, retrying on concurrent modification.

        When the calling thread is already inside a unit of work, ``work``
        simply joins it and the outermost caller owns commit and retry.

        Raises:
            ConcurrentModification: If every attempt conflicted
        """
        if self.db.in_unit_of_work():
            return work()

        attempts = 0
        while True:
            attempts += 1
            try:
                with self.db.unit_of_work():
                    return work()
            except ConcurrentModification as e:
                if attempts > self.max_retries:
                    logger.error(f"Giving up after {attempts} attempts: {e}")
                    raise ConcurrentModification(concurrent_modification(attempts)) from e
                delay = self.backoff * (2 ** (attempts - 1))
                logger.warning(f"Concurrent modification (attempt {attempts}), retrying in {delay:.3f}s: {e}")
                self._sleep(delay)

    def apply(
        self,
        client_id: int,
        delta: Decimal,
        description: str,
        cause_type: CauseType = CauseType.ADJUSTMENT,
        cause_id: Optional[int] = None,
    ) -> BalanceChange:
        """Apply a delta to a client's balance as its own atomic operation.

        Args:
            client_id: Client ID
            delta: Signed amount; positive raises what the client owes
            description: Human readable cause
            cause_type: Kind of event causing the change
            cause_id: ID of the invoice or transaction causing the change

        Returns:
            BalanceChange with the new balance and history row ID

        Raises:
            ClientNotFound: If the client is missing or inactive
            InvalidAmount: If delta is not a finite decimal, or the new
                balance would not fit a money column
            ConcurrentModification: If retries are exhausted
        """
        delta = to_decimal(delta, "delta")
        return self.run_atomic(
            lambda: self.apply_within(client_id, delta, description, cause_type, cause_id)
        )

    def apply_within(
        self,
        client_id: int,
        delta: Decimal,
        description: str,
        cause_type: CauseType = CauseType.ADJUSTMENT,
        cause_id: Optional[int] = None,
    ) -> BalanceChange:
        """Apply a delta inside the caller's open unit of work.

        Used by invoice and transaction flows so that the document and its
        balance effect commit or roll back together.
        """
        if not self.db.in_unit_of_work():
            return self.apply(client_id, delta, description, cause_type, cause_id)

        delta = to_decimal(delta, "delta")
        if delta == 0:
            # no negative zero in the ledger
            delta = abs(delta)

        client = self.db.lock_client(client_id)
        if client is None:
            raise ClientNotFound(client_not_found(client_id))
        if not client.is_active:
            raise ClientNotFound(client_inactive(client_id))

        previous_balance = client.balance
        new_balance = previous_balance + delta
        if abs(new_balance) >= MAX_AMOUNT:
            raise InvalidAmount(
                f"Client {client_id} balance {new_balance} would be out of range "
                f"(must be below {MAX_AMOUNT:,.0f})"
            )
        self.db.update_client_balance(client_id, new_balance)
        history_id = self.history.record(
            HistoryRecord(
                client_id=client_id,
                cause_type=cause_type,
                cause_id=cause_id,
                previous_balance=previous_balance,
                amount=delta,
                new_balance=new_balance,
                description=description,
            )
        )

        logger.info(
            f"Client {client_id} balance {previous_balance} -> {new_balance} "
            f"({delta:+}) [{cause_type.value} {cause_id}]: {description}"
        )
        return BalanceChange(
            client_id=client_id,
            previous_balance=previous_balance,
            amount=delta,
            new_balance=new_balance,
            history_id=history_id,
        )
