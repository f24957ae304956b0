"""Domain layer for clientledger application.

Services are imported from their own modules (``clientledger.domain.invoice``
and so on); only the dependency-free entity and error modules are re-exported
here so the database layer can import them without a cycle.
"""

from clientledger.domain import entities, errors

__all__ = ["entities", "errors"]
