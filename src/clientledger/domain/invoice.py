"""Invoice domain service."""

from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from clientledger.database.base import Database
from clientledger.domain.calculator import invoice_delta, invoice_due, signed_invoice_amount
from clientledger.domain.entities import CauseType, Invoice as InvoiceEntity, InvoiceType
from clientledger.domain.errors import (
    ClientNotFound,
    ConflictError,
    DependencyError,
    InvoiceNotFound,
    ValidationError,
    client_not_found,
    invoice_delete_blocked,
    invoice_not_found,
)
from clientledger.domain.mutator import BalanceMutator
from clientledger.logger_config import logger
from clientledger.utils.amount_parser import to_decimal
from clientledger.utils.numbering import document_prefix, next_document_number


def parse_invoice_type(invoice_type: InvoiceType | str) -> InvoiceType:
    """Parse an invoice type name.

    Raises:
        ValidationError: If the name is not a known invoice type
    """
    try:
        return InvoiceType(invoice_type)
    except ValueError:
        valid = ", ".join(t.value for t in InvoiceType)
        raise ValidationError(f"Unknown invoice type '{invoice_type}'. Expected one of: {valid}")


class InvoiceService:
    """Service for issuing and removing invoices.

    Every create, update and delete moves the client's balance by the change
    in the invoice's due amount, in the same unit of work as the invoice row
    itself.
    """

    def __init__(self, db: Database, mutator: Optional[BalanceMutator] = None):
        """Initialize invoice service.

        Args:
            db: Database instance
            mutator: Balance mutator (defaults to one on ``db``)
        """
        self.db = db
        self.mutator = mutator or BalanceMutator(db)

    def create_invoice(
        self,
        client_id: int,
        invoice_type: InvoiceType | str,
        total: Decimal,
        paid: Decimal = Decimal("0"),
        date: Optional[date_type] = None,
        invoice_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an invoice and apply its due amount to the client balance.

        A sale adds ``due`` to the balance, a purchase subtracts it. An
        invoice that is already fully paid still records a zero-amount
        history row.

        Args:
            client_id: Client ID
            invoice_type: sale or purchase
            total: Invoice total
            paid: Amount paid up front
            date: Invoice date (defaults to today)
            invoice_number: Optional number (generated as INV-YYMM-NNNN if omitted)
            notes: Optional notes

        Returns:
            Invoice ID

        Raises:
            ValidationError: If type is unknown
            InvalidAmount: If total or paid is not a decimal
            InvalidLedgerEntry: If a figure is negative or paid exceeds total
            ClientNotFound: If client is missing or inactive
            ConflictError: If the invoice number is taken
        """
        invoice_type = parse_invoice_type(invoice_type)
        total = to_decimal(total, "total")
        paid = to_decimal(paid, "paid")
        due = invoice_due(total, paid)
        invoice_date = date or date_type.today()

        def work() -> int:
            if self.db.get_client(client_id) is None:
                raise ClientNotFound(client_not_found(client_id))

            number = invoice_number
            if number is None:
                number = next_document_number(
                    "INV",
                    invoice_date,
                    self.db.list_invoice_numbers(document_prefix("INV", invoice_date)),
                )
            elif self.db.invoice_number_exists(number):
                raise ConflictError(f"Invoice number '{number}' already exists")

            invoice_id = self.db.create_invoice(
                invoice_number=number,
                invoice_type=invoice_type.value,
                client_id=client_id,
                date=invoice_date,
                total=total,
                paid=paid,
                notes=notes,
            )
            self.mutator.apply_within(
                client_id,
                signed_invoice_amount(invoice_type, due),
                f"{invoice_type.value.capitalize()} invoice {number} created (due {due})",
                cause_type=CauseType.INVOICE,
                cause_id=invoice_id,
            )
            return invoice_id

        invoice_id = self.mutator.run_atomic(work)
        logger.info(f"Created {invoice_type.value} invoice {invoice_id} for client {client_id}")
        return invoice_id

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceEntity]:
        """Get invoice by ID.

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice entity or None if not found
        """
        return self.db.get_invoice(invoice_id)

    def require_invoice(self, invoice_id: int) -> InvoiceEntity:
        """Get invoice by ID or raise InvoiceNotFound."""
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFound(invoice_not_found(invoice_id))
        return invoice

    def list_invoices(
        self,
        client_id: Optional[int] = None,
        invoice_type: Optional[InvoiceType | str] = None,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
    ) -> list[InvoiceEntity]:
        """List invoices with filters.

        Args:
            client_id: Optional client filter
            invoice_type: Optional sale/purchase filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            List of invoice entities, newest first
        """
        type_value = parse_invoice_type(invoice_type).value if invoice_type is not None else None
        return self.db.list_invoices(
            client_id=client_id,
            invoice_type=type_value,
            start_date=start_date,
            end_date=end_date,
        )

    def update_invoice(
        self,
        invoice_id: int,
        total: Optional[Decimal] = None,
        paid: Optional[Decimal] = None,
        date: Optional[date_type] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update invoice fields.

        Only fields that are provided are changed. When ``total`` or ``paid``
        changes, the client balance moves by the difference between the new
        and the old signed due amount.

        Args:
            invoice_id: Invoice ID to update
            total: Optional new total
            paid: Optional new paid amount
            date: Optional new date
            notes: Optional new notes

        Raises:
            InvoiceNotFound: If invoice doesn't exist
            InvalidAmount: If total or paid is not a decimal
            InvalidLedgerEntry: If a figure is negative or paid exceeds total
            ValidationError: If paid would fall below the linked payments
            ClientNotFound: If the client is inactive
        """
        new_total = to_decimal(total, "total") if total is not None else None
        new_paid = to_decimal(paid, "paid") if paid is not None else None

        def work() -> None:
            invoice = self.db.get_invoice(invoice_id, for_update=True)
            if invoice is None:
                raise InvoiceNotFound(invoice_not_found(invoice_id))

            target_total = new_total if new_total is not None else invoice.total
            target_paid = new_paid if new_paid is not None else invoice.paid
            due = invoice_due(target_total, target_paid, label=f"Invoice {invoice_id}")

            if new_paid is not None:
                linked = sum(
                    (txn.amount for txn in self.db.list_transactions(invoice_id=invoice_id)),
                    Decimal("0"),
                )
                if target_paid < linked:
                    raise ValidationError(
                        f"Invoice {invoice_id} paid {target_paid} is below its linked payments {linked}"
                    )

            self.db.update_invoice(invoice_id, total=new_total, paid=new_paid, date=date, notes=notes)

            delta = signed_invoice_amount(invoice.invoice_type, due) - invoice_delta(invoice)
            if delta != 0:
                self.mutator.apply_within(
                    invoice.client_id,
                    delta,
                    f"{invoice.invoice_type.value.capitalize()} invoice {invoice.invoice_number} "
                    f"updated (due {invoice.due} -> {due})",
                    cause_type=CauseType.INVOICE,
                    cause_id=invoice_id,
                )

        self.mutator.run_atomic(work)
        logger.info(f"Updated invoice {invoice_id}")

    def delete_invoice(self, invoice_id: int) -> None:
        """Delete an invoice and reverse its effect on the client balance.

        Args:
            invoice_id: Invoice ID to delete

        Raises:
            InvoiceNotFound: If invoice doesn't exist
            DependencyError: If payments are still linked to the invoice
            ClientNotFound: If the client is inactive
        """

        def work() -> None:
            invoice = self.db.get_invoice(invoice_id, for_update=True)
            if invoice is None:
                raise InvoiceNotFound(invoice_not_found(invoice_id))

            payment_count = self.db.get_invoice_payment_count(invoice_id)
            if payment_count > 0:
                raise DependencyError(invoice_delete_blocked(invoice_id, payment_count))

            reversal = -invoice_delta(invoice)
            self.db.delete_invoice(invoice_id)
            self.mutator.apply_within(
                invoice.client_id,
                reversal,
                f"{invoice.invoice_type.value.capitalize()} invoice {invoice.invoice_number} deleted",
                cause_type=CauseType.INVOICE,
                cause_id=invoice_id,
            )

        self.mutator.run_atomic(work)
        logger.info(f"Deleted invoice {invoice_id}")
