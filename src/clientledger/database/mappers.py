"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so string columns come back out as
the domain's enums and nothing outside the database package ever holds an
ORM instance.
"""

from clientledger.domain import entities as domain
from clientledger.database.models import (
    Client as ORMClient,
    Invoice as ORMInvoice,
    Transaction as ORMTransaction,
    BalanceHistory as ORMBalanceHistory,
)


def client_to_domain(orm_client: ORMClient) -> domain.Client:
    """Convert SQLAlchemy Client model to domain Client entity."""
    return domain.Client(
        id=orm_client.id,
        name=orm_client.name,
        client_type=domain.ClientType(orm_client.client_type),
        balance=orm_client.balance,
        is_active=orm_client.is_active,
        created_at=orm_client.created_at,
        phone=orm_client.phone,
        email=orm_client.email,
        address=orm_client.address,
        notes=orm_client.notes,
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    return domain.Invoice(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        invoice_type=domain.InvoiceType(orm_invoice.invoice_type),
        client_id=orm_invoice.client_id,
        date=orm_invoice.date,
        total=orm_invoice.total,
        paid=orm_invoice.paid,
        notes=orm_invoice.notes,
        created_at=orm_invoice.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_number=orm_transaction.transaction_number,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        description=orm_transaction.description,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        client_id=orm_transaction.client_id,
        invoice_id=orm_transaction.invoice_id,
        reference_number=orm_transaction.reference_number,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def balance_history_to_domain(orm_entry: ORMBalanceHistory) -> domain.BalanceHistoryEntry:
    """Convert SQLAlchemy BalanceHistory model to domain BalanceHistoryEntry."""
    return domain.BalanceHistoryEntry(
        id=orm_entry.id,
        client_id=orm_entry.client_id,
        cause_type=domain.CauseType(orm_entry.cause_type),
        cause_id=orm_entry.cause_id,
        previous_balance=orm_entry.previous_balance,
        amount=orm_entry.amount,
        new_balance=orm_entry.new_balance,
        entry_type=domain.EntryDirection(orm_entry.entry_type),
        description=orm_entry.description,
        date=orm_entry.date,
    )
