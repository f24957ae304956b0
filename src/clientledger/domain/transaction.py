"""Transaction domain service."""

from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from clientledger.database.base import Database
from clientledger.domain.calculator import signed_transaction_amount
from clientledger.domain.entities import (
    CauseType,
    Invoice as InvoiceEntity,
    InvoiceType,
    PaymentMethod,
    Transaction as TransactionEntity,
    TransactionType,
)
from clientledger.domain.errors import (
    ClientNotFound,
    ConflictError,
    InvalidAmount,
    InvoiceNotFound,
    TransactionNotFound,
    ValidationError,
    client_not_found,
    invoice_not_found,
    transaction_not_found,
)
from clientledger.domain.mutator import BalanceMutator
from clientledger.logger_config import logger
from clientledger.utils.amount_parser import to_decimal
from clientledger.utils.numbering import document_prefix, next_document_number

# The only invoice type each transaction type may pay against
PAYABLE_INVOICE_TYPE = {
    TransactionType.INCOME: InvoiceType.SALE,
    TransactionType.EXPENSE: InvoiceType.PURCHASE,
}


def parse_transaction_type(transaction_type: TransactionType | str) -> TransactionType:
    """Parse a transaction type name.

    Raises:
        ValidationError: If the name is not a known transaction type
    """
    try:
        return TransactionType(transaction_type)
    except ValueError:
        valid = ", ".join(t.value for t in TransactionType)
        raise ValidationError(
            f"Unknown transaction type '{transaction_type}'. Expected one of: {valid}"
        )


def parse_payment_method(payment_method: PaymentMethod | str) -> PaymentMethod:
    """Parse a payment method name.

    Raises:
        ValidationError: If the name is not a known payment method
    """
    try:
        return PaymentMethod(payment_method)
    except ValueError:
        valid = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(
            f"Unknown payment method '{payment_method}'. Expected one of: {valid}"
        )


def parse_transaction_amount(amount: Decimal) -> Decimal:
    """Coerce a transaction amount, which must be strictly positive.

    Raises:
        InvalidAmount: If amount is not a positive decimal
    """
    amount = to_decimal(amount, "amount")
    if amount <= 0:
        raise InvalidAmount(f"Transaction amount must be greater than zero, got {amount}")
    return amount


class TransactionService:
    """Service for managing treasury transactions.

    A transaction with a client moves that client's balance. A transaction
    linked to an invoice is a payment against it: it raises the invoice's
    ``paid`` and moves the balance by the same amount the invoice's ``due``
    falls.
    """

    def __init__(self, db: Database, mutator: Optional[BalanceMutator] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            mutator: Balance mutator (defaults to one on ``db``)
        """
        self.db = db
        self.mutator = mutator or BalanceMutator(db)

    def create_transaction(
        self,
        transaction_type: TransactionType | str,
        amount: Decimal,
        description: str = "",
        client_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
        date: Optional[date_type] = None,
        payment_method: PaymentMethod | str = PaymentMethod.CASH,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        transaction_number: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            transaction_type: income or expense
            amount: Positive amount
            description: Description
            client_id: Optional client (defaults to the invoice's client)
            invoice_id: Optional invoice this transaction pays
            date: Transaction date (defaults to today)
            payment_method: cash, bank, check, card or other
            reference_number: Optional reference number
            notes: Optional notes
            transaction_number: Optional number (generated as TRX-YYMM-NNNN if omitted)

        Returns:
            Transaction ID

        Raises:
            ValidationError: If type, payment method or invoice linkage is invalid
            InvalidAmount: If amount is not a positive decimal
            ClientNotFound: If client is missing or inactive
            InvoiceNotFound: If invoice doesn't exist
            ConflictError: If the transaction number is taken
        """
        transaction_type = parse_transaction_type(transaction_type)
        payment_method = parse_payment_method(payment_method)
        amount = parse_transaction_amount(amount)
        txn_date = date or date_type.today()

        def work() -> int:
            target_client_id = client_id
            invoice = None
            if invoice_id is not None:
                invoice, target_client_id = self._payable_invoice(
                    invoice_id, transaction_type, amount, target_client_id
                )

            if target_client_id is not None and self.db.get_client(target_client_id) is None:
                raise ClientNotFound(client_not_found(target_client_id))

            number = transaction_number
            if number is None:
                number = next_document_number(
                    "TRX",
                    txn_date,
                    self.db.list_transaction_numbers(document_prefix("TRX", txn_date)),
                )
            elif self.db.transaction_number_exists(number):
                raise ConflictError(f"Transaction number '{number}' already exists")

            txn_id = self.db.create_transaction(
                transaction_number=number,
                transaction_type=transaction_type.value,
                amount=amount,
                date=txn_date,
                description=description,
                payment_method=payment_method.value,
                client_id=target_client_id,
                invoice_id=invoice_id,
                reference_number=reference_number,
                notes=notes,
            )

            if invoice is not None:
                self.db.update_invoice(invoice.id, paid=invoice.paid + amount)
                cause = f"Payment {number} against invoice {invoice.invoice_number}"
            else:
                cause = f"{transaction_type.value.capitalize()} transaction {number}"

            if target_client_id is not None:
                # Paying a sale lowers the balance like income, paying a
                # purchase raises it like an expense
                self.mutator.apply_within(
                    target_client_id,
                    signed_transaction_amount(transaction_type, amount),
                    cause,
                    cause_type=CauseType.TRANSACTION,
                    cause_id=txn_id,
                )
            return txn_id

        txn_id = self.mutator.run_atomic(work)
        logger.info(f"Created {transaction_type.value} transaction {txn_id}")
        return txn_id

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise TransactionNotFound."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise TransactionNotFound(transaction_not_found(transaction_id))
        return txn

    def _payable_invoice(
        self,
        invoice_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
        client_id: Optional[int],
    ) -> tuple[InvoiceEntity, int]:
        """Lock an invoice and check that a payment may be made against it.

        Returns:
            Tuple of (invoice, client ID), the client defaulting to the invoice's client

        Raises:
            InvoiceNotFound: If invoice doesn't exist
            ValidationError: If the client, direction or amount does not fit the invoice
        """
        invoice = self.db.get_invoice(invoice_id, for_update=True)
        if invoice is None:
            raise InvoiceNotFound(invoice_not_found(invoice_id))
        if client_id is None:
            client_id = invoice.client_id
        elif client_id != invoice.client_id:
            raise ValidationError(
                f"Invoice {invoice_id} belongs to client {invoice.client_id}, "
                f"not client {client_id}"
            )
        expected_type = PAYABLE_INVOICE_TYPE[transaction_type]
        if invoice.invoice_type != expected_type:
            raise ValidationError(
                f"An {transaction_type.value} transaction cannot pay "
                f"{invoice.invoice_type.value} invoice {invoice_id}"
            )
        if amount > invoice.due:
            raise ValidationError(
                f"Payment {amount} exceeds invoice {invoice_id} due amount {invoice.due}"
            )
        return invoice, client_id

    def update_transaction(
        self,
        transaction_id: int,
        transaction_type: Optional[TransactionType | str] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        client_id: Optional[int] = None,
        invoice_id: Optional[int] = None,
        date: Optional[date_type] = None,
        payment_method: Optional[PaymentMethod | str] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        clear_client: bool = False,
        clear_invoice: bool = False,
    ) -> None:
        """Update transaction fields.

        Only fields that are provided are changed. The old effect of the
        transaction is undone and the new one applied in one unit of work:
        the paid amount of the old and new invoice follows the payment, and
        the balance moves by the difference between the new and the old
        signed amount (or is moved from the old client to the new one).

        Args:
            transaction_id: Transaction ID to update
            transaction_type: Optional new type (income or expense)
            amount: Optional new positive amount
            description: Optional new description
            client_id: Optional new client
            invoice_id: Optional invoice the transaction now pays
            date: Optional new date
            payment_method: Optional new payment method
            reference_number: Optional new reference number
            notes: Optional new notes
            clear_client: If True, detach the transaction from its client
            clear_invoice: If True, detach the transaction from its invoice

        Raises:
            TransactionNotFound: If transaction doesn't exist
            InvoiceNotFound: If the old or new invoice doesn't exist
            ValidationError: If type, payment method or invoice linkage is invalid
            InvalidAmount: If amount is not a positive decimal
            ClientNotFound: If an affected client is missing or inactive
        """
        if clear_client and client_id is not None:
            raise ValidationError("Cannot set both client_id and clear_client")
        if clear_invoice and invoice_id is not None:
            raise ValidationError("Cannot set both invoice_id and clear_invoice")

        new_type = parse_transaction_type(transaction_type) if transaction_type is not None else None
        new_method = parse_payment_method(payment_method) if payment_method is not None else None
        new_amount = parse_transaction_amount(amount) if amount is not None else None

        def work() -> None:
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                raise TransactionNotFound(transaction_not_found(transaction_id))

            target_type = new_type or txn.transaction_type
            target_amount = new_amount if new_amount is not None else txn.amount

            if clear_invoice:
                target_invoice_id = None
            elif invoice_id is not None:
                target_invoice_id = invoice_id
            else:
                target_invoice_id = txn.invoice_id

            if clear_client:
                if target_invoice_id is not None:
                    raise ValidationError(
                        f"Transaction {transaction_id} pays invoice {target_invoice_id} "
                        f"and must keep that invoice's client"
                    )
                target_client_id = None
            elif client_id is not None:
                target_client_id = client_id
            elif target_invoice_id is not None and target_invoice_id != txn.invoice_id:
                # Defaults to the new invoice's client
                target_client_id = None
            else:
                target_client_id = txn.client_id

            # The new payment is checked against the due left after the old one is undone
            if txn.invoice_id is not None:
                old_invoice = self.db.get_invoice(txn.invoice_id, for_update=True)
                if old_invoice is None:
                    raise InvoiceNotFound(invoice_not_found(txn.invoice_id))
                self.db.update_invoice(old_invoice.id, paid=old_invoice.paid - txn.amount)

            if target_invoice_id is not None:
                invoice, target_client_id = self._payable_invoice(
                    target_invoice_id, target_type, target_amount, target_client_id
                )
                self.db.update_invoice(invoice.id, paid=invoice.paid + target_amount)

            self.db.update_transaction(
                transaction_id,
                transaction_type=new_type.value if new_type is not None else None,
                amount=new_amount,
                date=date,
                description=description,
                payment_method=new_method.value if new_method is not None else None,
                client_id=target_client_id,
                invoice_id=target_invoice_id,
                reference_number=reference_number,
                notes=notes,
                update_links=True,
            )

            old_effect = signed_transaction_amount(txn.transaction_type, txn.amount)
            new_effect = signed_transaction_amount(target_type, target_amount)
            cause = f"Transaction {txn.transaction_number} updated"
            if target_client_id == txn.client_id:
                if target_client_id is not None and new_effect != old_effect:
                    self.mutator.apply_within(
                        target_client_id,
                        new_effect - old_effect,
                        cause,
                        cause_type=CauseType.TRANSACTION,
                        cause_id=transaction_id,
                    )
                return

            if txn.client_id is not None:
                self.mutator.apply_within(
                    txn.client_id,
                    -old_effect,
                    f"{cause} (moved to another client)",
                    cause_type=CauseType.TRANSACTION,
                    cause_id=transaction_id,
                )
            if target_client_id is not None:
                self.mutator.apply_within(
                    target_client_id,
                    new_effect,
                    cause,
                    cause_type=CauseType.TRANSACTION,
                    cause_id=transaction_id,
                )

        self.mutator.run_atomic(work)
        logger.info(f"Updated transaction {transaction_id}")

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and reverse its balance effect.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            TransactionNotFound: If transaction doesn't exist
            ClientNotFound: If the client is inactive
        """

        def work() -> None:
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                raise TransactionNotFound(transaction_not_found(transaction_id))

            if txn.invoice_id is not None:
                invoice = self.db.get_invoice(txn.invoice_id, for_update=True)
                if invoice is None:
                    raise InvoiceNotFound(invoice_not_found(txn.invoice_id))
                self.db.update_invoice(invoice.id, paid=invoice.paid - txn.amount)
                cause = (
                    f"Payment {txn.transaction_number} against invoice "
                    f"{invoice.invoice_number} deleted"
                )
            else:
                cause = (
                    f"{txn.transaction_type.value.capitalize()} transaction "
                    f"{txn.transaction_number} deleted"
                )

            self.db.delete_transaction(transaction_id)
            if txn.client_id is not None:
                self.mutator.apply_within(
                    txn.client_id,
                    -signed_transaction_amount(txn.transaction_type, txn.amount),
                    cause,
                    cause_type=CauseType.TRANSACTION,
                    cause_id=transaction_id,
                )

        self.mutator.run_atomic(work)
        logger.info(f"Deleted transaction {transaction_id}")

    def list_transactions(
        self,
        client_id: Optional[int] = None,
        transaction_type: Optional[TransactionType | str] = None,
        invoice_id: Optional[int] = None,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters.

        Args:
            client_id: Optional client filter
            transaction_type: Optional income/expense filter
            invoice_id: Optional invoice filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            List of transaction entities, newest first
        """
        type_value = (
            parse_transaction_type(transaction_type).value if transaction_type is not None else None
        )
        return self.db.list_transactions(
            client_id=client_id,
            transaction_type=type_value,
            invoice_id=invoice_id,
            start_date=start_date,
            end_date=end_date,
        )
