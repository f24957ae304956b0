"""Balance calculation rules.

A client's balance is the sum of signed ledger entries derived from its
invoices and transactions:

- sale invoice: ``+due`` (the client owes the unpaid part)
- purchase invoice: ``-due`` (the business owes the supplier)
- unlinked income: ``-amount`` (a payment from the client)
- unlinked expense: ``+amount`` (a payment to the client)

Transactions linked to an invoice are already reflected in that invoice's
``paid`` field and contribute nothing on their own.

Everything here is pure: no I/O, no mutation of the inputs.
"""

from decimal import Decimal
from typing import Iterable, Iterator, Optional

from clientledger.domain.entities import (
    CauseType,
    EntryDirection,
    Invoice,
    InvoiceType,
    LedgerEntry,
    Transaction,
    TransactionType,
)
from clientledger.domain.errors import InvalidLedgerEntry

ZERO = Decimal("0")


def _require_non_negative(value: Optional[Decimal], what: str) -> Decimal:
    if value is None:
        raise InvalidLedgerEntry(f"{what} is missing")
    if not isinstance(value, Decimal) or not value.is_finite():
        raise InvalidLedgerEntry(f"{what} must be a finite decimal, got {value!r}")
    if value < 0:
        raise InvalidLedgerEntry(f"{what} must not be negative, got {value}")
    return value


def invoice_due(total: Optional[Decimal], paid: Optional[Decimal], label: str = "Invoice") -> Decimal:
    """Validate invoice figures and return ``total - paid``.

    Raises:
        InvalidLedgerEntry: If a figure is missing or negative, or paid exceeds total
    """
    total = _require_non_negative(total, f"{label} total")
    paid = _require_non_negative(paid, f"{label} paid")
    if paid > total:
        raise InvalidLedgerEntry(f"{label} paid {paid} exceeds total {total}")
    return total - paid


def signed_invoice_amount(invoice_type: InvoiceType, amount: Decimal) -> Decimal:
    """Sign an invoice-side amount relative to the client-is-debtor convention."""
    return amount if invoice_type == InvoiceType.SALE else -amount


def signed_transaction_amount(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Sign a transaction amount relative to the client-is-debtor convention."""
    return -amount if transaction_type == TransactionType.INCOME else amount


def invoice_delta(invoice: Invoice) -> Decimal:
    """Balance delta an invoice contributes while it exists."""
    due = invoice_due(invoice.total, invoice.paid, label=f"Invoice {invoice.id}")
    return signed_invoice_amount(invoice.invoice_type, due)


def transaction_delta(transaction: Transaction) -> Decimal:
    """Balance delta a transaction contributes on its own.

    Linked transactions return zero; their effect lives in the invoice.
    """
    amount = _require_non_negative(transaction.amount, f"Transaction {transaction.id} amount")
    if transaction.is_linked:
        return ZERO
    return signed_transaction_amount(transaction.transaction_type, amount)


def ledger_entries(
    invoices: Iterable[Invoice], transactions: Iterable[Transaction]
) -> Iterator[LedgerEntry]:
    """Yield the ledger entries a balance is derived from.

    Linked transactions are validated but yield no entry.
    """
    for invoice in invoices:
        amount = invoice_delta(invoice)
        yield LedgerEntry(
            client_id=invoice.client_id,
            amount=amount,
            direction=EntryDirection.for_amount(amount),
            cause_type=CauseType.INVOICE,
            cause_id=invoice.id,
        )

    for txn in transactions:
        amount = transaction_delta(txn)
        if txn.is_linked:
            continue
        yield LedgerEntry(
            client_id=txn.client_id,
            amount=amount,
            direction=EntryDirection.for_amount(amount),
            cause_type=CauseType.TRANSACTION,
            cause_id=txn.id,
        )


def calculate_balance(
    invoices: Iterable[Invoice], transactions: Iterable[Transaction]
) -> Decimal:
    """Derive a client's balance from its invoices and transactions.

    Args:
        invoices: The client's invoices, in any order
        transactions: The client's transactions, in any order

    Returns:
        Signed balance; positive means the client owes the business

    Raises:
        InvalidLedgerEntry: If any invoice or transaction has a missing or
            negative figure
    """
    return sum((entry.amount for entry in ledger_entries(invoices, transactions)), ZERO)
