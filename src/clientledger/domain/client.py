"""Client domain service."""

from decimal import Decimal
from typing import Optional

from clientledger.database.base import Database
from clientledger.domain.entities import Client as ClientEntity, ClientType
from clientledger.domain.errors import (
    ClientNotFound,
    ConflictError,
    DependencyError,
    ValidationError,
    client_not_found,
    duplicate_client_name,
)
from clientledger.domain.mutator import BalanceMutator
from clientledger.logger_config import logger


def parse_client_type(client_type: ClientType | str) -> ClientType:
    """Parse a client type name.

    Raises:
        ValidationError: If the name is not a known client type
    """
    try:
        return ClientType(client_type)
    except ValueError:
        valid = ", ".join(t.value for t in ClientType)
        raise ValidationError(f"Unknown client type '{client_type}'. Expected one of: {valid}")


class ClientService:
    """Service for managing clients.

    Balances are read here but never written; see ``BalanceMutator``.
    """

    def __init__(self, db: Database, mutator: Optional[BalanceMutator] = None):
        """Initialize client service.

        Args:
            db: Database instance
            mutator: Balance mutator whose retry policy guards deletes
                (defaults to one on ``db``)
        """
        self.db = db
        self.mutator = mutator or BalanceMutator(db)

    def create_client(
        self,
        name: str,
        client_type: ClientType | str = ClientType.CUSTOMER,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a new client with a zero balance.

        Args:
            name: Client name
            client_type: customer or supplier
            phone: Optional phone number
            email: Optional email address
            address: Optional address
            notes: Optional notes
            is_active: Whether the client can take balance changes

        Returns:
            Client ID

        Raises:
            ValidationError: If name is empty or client type is unknown
            ConflictError: If client name already exists
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Client name must not be empty")
        client_type = parse_client_type(client_type)

        if self.db.get_client_by_name(name) is not None:
            raise ConflictError(duplicate_client_name(name))

        client_id = self.db.create_client(
            name=name,
            client_type=client_type.value,
            phone=phone,
            email=email,
            address=address,
            notes=notes,
            is_active=is_active,
        )
        logger.info(f"Created {client_type.value} '{name}' (ID: {client_id})")
        return client_id

    def get_client(self, client_id: int) -> Optional[ClientEntity]:
        """Get client by ID.

        Args:
            client_id: Client ID

        Returns:
            Client entity or None if not found
        """
        return self.db.get_client(client_id)

    def require_client(self, client_id: int) -> ClientEntity:
        """Get client by ID or raise ClientNotFound."""
        client = self.db.get_client(client_id)
        if client is None:
            raise ClientNotFound(client_not_found(client_id))
        return client

    def get_balance(self, client_id: int) -> Decimal:
        """Get the stored balance of a client.

        Raises:
            ClientNotFound: If client doesn't exist
        """
        return self.require_client(client_id).balance

    def list_clients(
        self, active_only: bool = False, client_type: Optional[ClientType | str] = None
    ) -> list[ClientEntity]:
        """List clients.

        Args:
            active_only: Only return active clients
            client_type: Optional customer/supplier filter

        Returns:
            List of client entities ordered by name
        """
        type_value = parse_client_type(client_type).value if client_type is not None else None
        return self.db.list_clients(active_only=active_only, client_type=type_value)

    def update_client(
        self,
        client_id: int,
        name: Optional[str] = None,
        client_type: Optional[ClientType | str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        """Update descriptive client fields.

        Only fields that are provided are changed.

        Raises:
            ClientNotFound: If client doesn't exist
            ConflictError: If the new name belongs to another client
        """
        self.require_client(client_id)

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Client name must not be empty")
            existing = self.db.get_client_by_name(name)
            if existing is not None and existing.id != client_id:
                raise ConflictError(duplicate_client_name(name))

        type_value = parse_client_type(client_type).value if client_type is not None else None
        self.db.update_client(
            client_id,
            name=name,
            client_type=type_value,
            phone=phone,
            email=email,
            address=address,
            notes=notes,
        )

    def set_active(self, client_id: int, is_active: bool) -> None:
        """Activate or deactivate a client.

        Inactive clients keep their balance and history but reject new
        balance changes.

        Raises:
            ClientNotFound: If client doesn't exist
        """
        self.require_client(client_id)
        self.db.update_client(client_id, is_active=is_active)
        logger.info(f"Client {client_id} {'activated' if is_active else 'deactivated'}")

    def delete_client(self, client_id: int) -> None:
        """Delete a client together with its balance history.

        The client row is locked for the whole check, so an invoice or
        transaction cannot be added between the dependency count and the
        delete.

        Args:
            client_id: Client ID to delete

        Raises:
            ClientNotFound: If client doesn't exist
            DependencyError: If client still has invoices or transactions
        """

        def work() -> None:
            if self.db.lock_client(client_id) is None:
                raise ClientNotFound(client_not_found(client_id))

            invoice_count = self.db.get_client_invoice_count(client_id)
            transaction_count = self.db.get_client_transaction_count(client_id)

            if invoice_count > 0 or transaction_count > 0:
                parts = []
                if invoice_count > 0:
                    parts.append(f"{invoice_count} invoice{'s' if invoice_count != 1 else ''}")
                if transaction_count > 0:
                    parts.append(f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}")
                raise DependencyError(
                    f"Cannot delete client {client_id}: it has {', '.join(parts)}. "
                    f"Please delete them first."
                )

            self.db.delete_client(client_id)

        self.mutator.run_atomic(work)
        logger.info(f"Deleted client {client_id}")
