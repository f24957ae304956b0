"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ClientNotFound(NotFoundError):
    """Balance mutation targets a missing or inactive client."""


class InvoiceNotFound(NotFoundError):
    """Requested invoice does not exist."""


class TransactionNotFound(NotFoundError):
    """Requested transaction does not exist."""


class InvalidAmount(ValidationError):
    """A monetary value is missing, malformed or not finite."""


class InvalidLedgerEntry(ValidationError):
    """An invoice or transaction cannot contribute to a balance."""


class ConcurrentModification(ConflictError):
    """A balance mutation lost a race and could not be retried successfully."""


class InconsistentBalance(DomainError):
    """Stored balance disagrees with the balance derived from history."""

    def __init__(self, client_id: int, stored: Decimal, calculated: Decimal):
        super().__init__(balance_mismatch(client_id, stored, calculated))
        self.client_id = client_id
        self.stored = stored
        self.calculated = calculated


def client_not_found(client_id: int) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def client_inactive(client_id: int) -> str:
    """Return message for a client that cannot take balance changes."""
    return f"Client {client_id} is inactive"


def duplicate_client_name(name: str) -> str:
    """Return message for duplicate client name."""
    return f"Client with name '{name}' already exists"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def invoice_delete_blocked(invoice_id: int, payment_count: int) -> str:
    """Return message when an invoice still has linked payments."""
    return (
        f"Cannot delete invoice {invoice_id}: it has {payment_count} linked "
        f"payment{'s' if payment_count != 1 else ''}. Please delete them first."
    )


def concurrent_modification(attempts: int) -> str:
    """Return message when a mutation keeps conflicting."""
    return (
        "Balance was modified concurrently; "
        f"gave up after {attempts} attempt{'s' if attempts != 1 else ''}"
    )


def balance_mismatch(client_id: int, stored: Decimal, calculated: Decimal) -> str:
    """Return message for reconciliation drift."""
    return (
        f"Client {client_id} balance is inconsistent: stored {stored}, "
        f"calculated {calculated} (difference {calculated - stored})"
    )
