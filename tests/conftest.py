"""Shared pytest fixtures for clientledger tests."""

import tempfile
import os
import logging
from datetime import date
from decimal import Decimal
import pytest

from clientledger.database.factories import create_sqlite_database
from clientledger.domain.client import ClientService
from clientledger.domain.history import BalanceHistoryLedger
from clientledger.domain.invoice import InvoiceService
from clientledger.domain.mutator import BalanceMutator
from clientledger.domain.reconciliation import ReconciliationService
from clientledger.domain.transaction import TransactionService
from clientledger.logger_config import logger


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def mutator(temp_db):
    """Create a BalanceMutator that never sleeps between retries."""
    return BalanceMutator(temp_db, max_retries=3, backoff=0, sleep=lambda _: None)


@pytest.fixture
def client_service(temp_db, mutator):
    """Create a ClientService with a temporary database."""
    return ClientService(temp_db, mutator=mutator)


@pytest.fixture
def history_ledger(temp_db):
    """Create a BalanceHistoryLedger with a small page size."""
    return BalanceHistoryLedger(temp_db, page_size=3)


@pytest.fixture
def invoice_service(temp_db, mutator):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db, mutator=mutator)


@pytest.fixture
def transaction_service(temp_db, mutator):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db, mutator=mutator)


@pytest.fixture
def reconciliation_service(temp_db, mutator):
    """Create a ReconciliationService with a temporary database."""
    return ReconciliationService(temp_db, mutator=mutator)


@pytest.fixture
def sample_customer(client_service):
    """Create a sample customer for testing."""
    client_id = client_service.create_client(name="Acme Corp", client_type="customer")
    return client_service.get_client(client_id)


@pytest.fixture
def sample_supplier(client_service):
    """Create a sample supplier for testing."""
    client_id = client_service.create_client(name="Paper Mill", client_type="supplier")
    return client_service.get_client(client_id)


@pytest.fixture
def sample_sale_invoice(invoice_service, sample_customer):
    """Create a sale invoice of 1000 with 300 paid up front."""
    invoice_id = invoice_service.create_invoice(
        client_id=sample_customer.id,
        invoice_type="sale",
        total=Decimal("1000.00"),
        paid=Decimal("300.00"),
        date=date(2024, 1, 15),
    )
    return invoice_service.get_invoice(invoice_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def ledger_logs(caplog):
    """Capture records from the application logger, which does not propagate."""
    logger.addHandler(caplog.handler)
    previous_level = logger.level
    logger.setLevel(logging.INFO)
    yield caplog
    logger.setLevel(previous_level)
    logger.removeHandler(caplog.handler)
