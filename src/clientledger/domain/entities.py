"""Domain model entities for clientledger.

These are pure data classes representing business concepts, independent of
database schema. Monetary fields are always ``Decimal``; nothing in the domain
layer round-trips money through binary floating point.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class ClientType(str, Enum):
    """Kind of business relationship with a client."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class InvoiceType(str, Enum):
    """Invoice direction."""

    SALE = "sale"
    PURCHASE = "purchase"


class TransactionType(str, Enum):
    """Treasury transaction direction."""

    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """How money moved for a transaction."""

    CASH = "cash"
    BANK = "bank"
    CHECK = "check"
    CARD = "card"
    OTHER = "other"


class EntryDirection(str, Enum):
    """Ledger direction tag for a balance change.

    A debit raises what the client owes the business, a credit lowers it.
    """

    DEBIT = "debit"
    CREDIT = "credit"

    @classmethod
    def for_amount(cls, amount: Decimal) -> "EntryDirection":
        """Return the direction tag for a signed delta (zero is a debit)."""
        return cls.CREDIT if amount < 0 else cls.DEBIT


class CauseType(str, Enum):
    """Kind of event that caused a balance change."""

    INVOICE = "invoice"
    TRANSACTION = "transaction"
    ADJUSTMENT = "adjustment"


@dataclass(frozen=True)
class Client:
    """Client (customer or supplier) domain entity."""

    id: int
    name: str
    client_type: ClientType
    balance: Decimal
    is_active: bool
    created_at: datetime
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Invoice:
    """Sale or purchase invoice domain entity."""

    id: int
    invoice_number: str
    invoice_type: InvoiceType
    client_id: int
    date: date
    total: Optional[Decimal]
    paid: Optional[Decimal]
    notes: Optional[str]
    created_at: datetime

    @property
    def due(self) -> Decimal:
        """Outstanding unpaid amount (``total - paid``)."""
        return self.total - self.paid


@dataclass(frozen=True)
class Transaction:
    """Treasury transaction domain entity."""

    id: int
    transaction_number: str
    transaction_type: TransactionType
    amount: Optional[Decimal]
    date: date
    description: str
    payment_method: PaymentMethod
    client_id: Optional[int]
    invoice_id: Optional[int]
    reference_number: Optional[str]
    notes: Optional[str]
    created_at: datetime

    @property
    def is_linked(self) -> bool:
        """True when the transaction is a payment against an invoice."""
        return self.invoice_id is not None


@dataclass(frozen=True)
class BalanceHistoryEntry:
    """Immutable balance history (audit ledger) row."""

    id: int
    client_id: int
    cause_type: CauseType
    cause_id: Optional[int]
    previous_balance: Decimal
    amount: Decimal
    new_balance: Decimal
    entry_type: EntryDirection
    description: Optional[str]
    date: datetime


@dataclass(frozen=True)
class HistoryRecord:
    """A balance history row that has not been stored yet."""

    client_id: int
    cause_type: CauseType
    cause_id: Optional[int]
    previous_balance: Decimal
    amount: Decimal
    new_balance: Decimal
    description: Optional[str] = None

    @property
    def entry_type(self) -> EntryDirection:
        return EntryDirection.for_amount(self.amount)


@dataclass(frozen=True)
class LedgerEntry:
    """One signed contribution to a client's balance."""

    client_id: int
    amount: Decimal
    direction: EntryDirection
    cause_type: CauseType
    cause_id: Optional[int]


@dataclass(frozen=True)
class BalanceChange:
    """Result of applying a delta to a client's stored balance."""

    client_id: int
    previous_balance: Decimal
    amount: Decimal
    new_balance: Decimal
    history_id: int


@dataclass(frozen=True)
class ReconciliationReport:
    """Comparison of a client's stored balance against its derivations."""

    client_id: int
    stored_balance: Decimal
    calculated_balance: Decimal
    history_total: Decimal
    invoice_count: int
    transaction_count: int

    @property
    def difference(self) -> Decimal:
        """Calculated minus stored balance."""
        return self.calculated_balance - self.stored_balance

    @property
    def is_consistent(self) -> bool:
        """True when stored, calculated and history totals all agree."""
        return (
            self.stored_balance == self.calculated_balance
            and self.stored_balance == self.history_total
        )
