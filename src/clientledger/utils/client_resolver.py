"""Utility for resolving client names to IDs."""

from clientledger.domain.client import ClientService
from clientledger.domain.errors import ClientNotFound


def resolve_client(client_service: ClientService, client: str | int) -> int:
    """Resolve a client name or ID to a client ID.

    A value that parses as an integer is treated as an ID; anything else is
    looked up by exact name.

    Args:
        client_service: ClientService instance
        client: Client name, or ID as int or numeric string

    Returns:
        Client ID

    Raises:
        ClientNotFound: If no client matches
    """
    try:
        client_id = int(client)
    except (ValueError, TypeError):
        client_id = None

    if client_id is not None:
        return client_service.require_client(client_id).id

    found = client_service.db.get_client_by_name(str(client).strip())
    if found is None:
        raise ClientNotFound(f"Client '{client}' not found")
    return found.id
