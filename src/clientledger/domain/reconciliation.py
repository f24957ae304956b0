"""Balance reconciliation domain service."""

from typing import Optional

from clientledger.database.base import Database
from clientledger.domain.calculator import calculate_balance
from clientledger.domain.entities import BalanceChange, CauseType, ReconciliationReport
from clientledger.domain.errors import (
    ClientNotFound,
    InconsistentBalance,
    ValidationError,
    balance_mismatch,
    client_not_found,
)
from clientledger.domain.mutator import BalanceMutator
from clientledger.logger_config import logger


class ReconciliationService:
    """Compares stored balances against what a client's documents imply.

    Three figures are compared: the stored balance, the balance recalculated
    from invoices and transactions, and the sum of the history rows. Drift is
    reported and logged but only corrected on explicit request.
    """

    def __init__(self, db: Database, mutator: Optional[BalanceMutator] = None):
        """Initialize reconciliation service.

        Args:
            db: Database instance
            mutator: Balance mutator used for corrections
        """
        self.db = db
        self.mutator = mutator or BalanceMutator(db)

    def build_report(self, client_id: int) -> ReconciliationReport:
        """Read all three figures for a client.

        Raises:
            ClientNotFound: If client doesn't exist
            InvalidLedgerEntry: If a stored document has invalid figures
        """
        client = self.db.get_client(client_id)
        if client is None:
            raise ClientNotFound(client_not_found(client_id))

        invoices = self.db.list_invoices(client_id=client_id)
        transactions = self.db.list_transactions(client_id=client_id)
        return ReconciliationReport(
            client_id=client_id,
            stored_balance=client.balance,
            calculated_balance=calculate_balance(invoices, transactions),
            history_total=self.db.sum_balance_history(client_id),
            invoice_count=len(invoices),
            transaction_count=len(transactions),
        )

    def reconcile(self, client_id: int) -> ReconciliationReport:
        """Build the report and log a warning if the client has drifted."""
        report = self.build_report(client_id)
        if not report.is_consistent:
            logger.warning(
                balance_mismatch(client_id, report.stored_balance, report.calculated_balance)
                + f", history total {report.history_total}"
            )
        return report

    def reconcile_all(self, active_only: bool = False) -> list[ReconciliationReport]:
        """Reconcile every client.

        Returns:
            One report per client, ordered by client name
        """
        return [
            self.reconcile(client.id)
            for client in self.db.list_clients(active_only=active_only)
        ]

    def verify(self, client_id: int) -> None:
        """Raise if the stored balance disagrees with the documents.

        Raises:
            InconsistentBalance: If stored and calculated balances differ
        """
        report = self.reconcile(client_id)
        if report.stored_balance != report.calculated_balance:
            raise InconsistentBalance(
                client_id, report.stored_balance, report.calculated_balance
            )

    def correct(self, client_id: int, confirm: bool = False) -> Optional[BalanceChange]:
        """Move the stored balance onto the calculated balance.

        The correction goes through the mutator, so it lands in the history
        as an adjustment row like any other change.

        Args:
            client_id: Client ID
            confirm: Must be True; corrections are never applied implicitly

        Returns:
            The applied change, or None if the balance already matched

        Raises:
            ValidationError: If confirm is not True
            ClientNotFound: If client is missing or inactive
        """
        if confirm is not True:
            raise ValidationError("Balance correction requires explicit confirmation")

        def work() -> Optional[BalanceChange]:
            report = self.build_report(client_id)
            if report.difference == 0:
                return None
            return self.mutator.apply_within(
                client_id,
                report.difference,
                f"Reconciliation adjustment {report.stored_balance} -> "
                f"{report.calculated_balance}",
                cause_type=CauseType.ADJUSTMENT,
            )

        change = self.mutator.run_atomic(work)
        if change is not None:
            logger.warning(
                f"Corrected client {client_id} balance "
                f"{change.previous_balance} -> {change.new_balance}"
            )
        return change
