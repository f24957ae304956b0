"""Tests for CLI commands."""

from decimal import Decimal

from clientledger.cli.main import cli


def run(cli_runner, temp_db, *args, input=None):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], input=input)


class TestClientCommands:
    """Tests for client commands."""

    def test_create_and_list(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "client", "create", "Acme Corp")
        assert result.exit_code == 0
        assert "Created customer 'Acme Corp'" in result.output

        result = run(cli_runner, temp_db, "client", "list")
        assert result.exit_code == 0
        assert "Acme Corp" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "client", "list")
        assert result.exit_code == 0
        assert "No clients found" in result.output

    def test_create_duplicate(self, cli_runner, temp_db, sample_customer):
        result = run(cli_runner, temp_db, "client", "create", "Acme Corp")
        assert result.exit_code == 1
        assert "already exists" in result.output.lower()

    def test_balance_by_name(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(cli_runner, temp_db, "client", "balance", "Acme Corp")
        assert result.exit_code == 0
        assert "700.00 (receivable)" in result.output

    def test_unknown_client(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "client", "balance", "Nobody")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_history(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(cli_runner, temp_db, "client", "history", "Acme Corp")
        assert result.exit_code == 0
        assert "invoice" in result.output
        assert "+700.00" in result.output

    def test_history_rejects_two_periods(self, cli_runner, temp_db, sample_customer):
        result = run(cli_runner, temp_db, "client", "history", "Acme Corp", "--this-month", "--last-month")
        assert result.exit_code == 1
        assert "Only one period option" in result.output

    def test_deactivate_blocks_invoices(self, cli_runner, temp_db, sample_customer):
        assert run(cli_runner, temp_db, "client", "deactivate", "Acme Corp").exit_code == 0

        result = run(
            cli_runner, temp_db, "invoice", "create", "--client", "Acme Corp", "--type", "sale", "--total", "10"
        )
        assert result.exit_code == 1
        assert "inactive" in result.output

    def test_delete_with_confirmation(self, cli_runner, temp_db, sample_customer):
        result = run(cli_runner, temp_db, "client", "delete", "Acme Corp", input="y\n")
        assert result.exit_code == 0
        assert "Deleted client 'Acme Corp'" in result.output
        assert temp_db.get_client(sample_customer.id) is None

    def test_delete_cancelled(self, cli_runner, temp_db, sample_customer):
        result = run(cli_runner, temp_db, "client", "delete", "Acme Corp", input="n\n")
        assert "Deletion cancelled" in result.output
        assert temp_db.get_client(sample_customer.id) is not None


class TestReconcileCommand:
    """Tests for client reconcile."""

    def test_all_consistent(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(cli_runner, temp_db, "client", "reconcile")
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_drift_reported_without_fix(self, cli_runner, temp_db, sample_sale_invoice):
        temp_db.update_client_balance(sample_sale_invoice.client_id, Decimal("600"))

        result = run(cli_runner, temp_db, "client", "reconcile", "Acme Corp")

        assert result.exit_code == 1
        assert "calculated 700.00" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("600")

    def test_fix_after_confirmation(self, cli_runner, temp_db, sample_sale_invoice):
        temp_db.update_client_balance(sample_sale_invoice.client_id, Decimal("600"))

        result = run(cli_runner, temp_db, "client", "reconcile", "Acme Corp", "--fix", input="y\n")

        assert result.exit_code == 0
        assert "adjusted to 700.00" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("700")

    def test_fix_declined(self, cli_runner, temp_db, sample_sale_invoice):
        temp_db.update_client_balance(sample_sale_invoice.client_id, Decimal("600"))

        result = run(cli_runner, temp_db, "client", "reconcile", "--fix", input="n\n")

        assert result.exit_code == 1
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("600")


class TestInvoiceCommands:
    """Tests for invoice commands."""

    def test_create_list_delete(self, cli_runner, temp_db, sample_customer):
        result = run(
            cli_runner, temp_db,
            "invoice", "create", "--client", "Acme Corp", "--type", "sale",
            "--total", "$1,000.00", "--paid", "300", "--date", "2024-01-15",
        )
        assert result.exit_code == 0
        assert "INV-2401-0001" in result.output
        assert "due 700.00" in result.output

        result = run(cli_runner, temp_db, "invoice", "list", "--client", "Acme Corp")
        assert result.exit_code == 0
        assert "INV-2401-0001" in result.output

        invoice_id = temp_db.list_invoices(client_id=sample_customer.id)[0].id
        result = run(cli_runner, temp_db, "invoice", "delete", str(invoice_id), "--yes")
        assert result.exit_code == 0
        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")

    def test_invalid_total(self, cli_runner, temp_db, sample_customer):
        result = run(
            cli_runner, temp_db, "invoice", "create", "--client", "Acme Corp", "--type", "sale", "--total", "lots"
        )
        assert result.exit_code == 1
        assert "Invalid total" in result.output

    def test_total_too_large(self, cli_runner, temp_db, sample_customer):
        result = run(
            cli_runner, temp_db, "invoice", "create", "--client", "Acme Corp", "--type", "sale", "--total", "1e30"
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error:" in result.output
        assert "out of range" in result.output
        assert temp_db.list_invoices(client_id=sample_customer.id) == []

    def test_paid_over_total(self, cli_runner, temp_db, sample_customer):
        result = run(
            cli_runner, temp_db,
            "invoice", "create", "--client", "Acme Corp", "--type", "sale", "--total", "10", "--paid", "20",
        )
        assert result.exit_code == 1
        assert "exceeds total" in result.output

    def test_update_total(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(cli_runner, temp_db, "invoice", "update", str(sample_sale_invoice.id), "--total", "1,100")

        assert result.exit_code == 0
        assert "due 800.00" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("800")

    def test_update_paid_over_total(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(cli_runner, temp_db, "invoice", "update", str(sample_sale_invoice.id), "--paid", "2000")

        assert result.exit_code == 1
        assert "exceeds total" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("700")

    def test_show_lists_payments(self, cli_runner, temp_db, transaction_service, sample_sale_invoice):
        transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("100"), invoice_id=sample_sale_invoice.id
        )

        result = run(cli_runner, temp_db, "invoice", "show", str(sample_sale_invoice.id))

        assert result.exit_code == 0
        assert "Due:    600.00" in result.output
        assert "Payments:" in result.output

    def test_delete_blocked_by_payment(self, cli_runner, temp_db, transaction_service, sample_sale_invoice):
        transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("100"), invoice_id=sample_sale_invoice.id
        )

        result = run(cli_runner, temp_db, "invoice", "delete", str(sample_sale_invoice.id), "--yes")

        assert result.exit_code == 1
        assert "linked payment" in result.output


class TestTransactionCommands:
    """Tests for transaction commands."""

    def test_payment_against_invoice(self, cli_runner, temp_db, sample_sale_invoice):
        result = run(
            cli_runner, temp_db,
            "transaction", "create", "--type", "income", "--amount", "200",
            "--invoice", str(sample_sale_invoice.id), "--method", "bank",
        )

        assert result.exit_code == 0
        assert "TRX-" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("500")

    def test_create_show_delete(self, cli_runner, temp_db, sample_customer):
        result = run(
            cli_runner, temp_db,
            "transaction", "create", "--type", "expense", "--amount", "45.50",
            "--client", "Acme Corp", "--description", "Refund",
        )
        assert result.exit_code == 0
        txn = temp_db.list_transactions(client_id=sample_customer.id)[0]

        result = run(cli_runner, temp_db, "transaction", "show", str(txn.id))
        assert result.exit_code == 0
        assert "Refund" in result.output

        result = run(cli_runner, temp_db, "transaction", "list", "--type", "expense")
        assert txn.transaction_number in result.output

        result = run(cli_runner, temp_db, "transaction", "delete", str(txn.id), "--yes")
        assert result.exit_code == 0
        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")

    def test_update_amount_and_unlink(self, cli_runner, temp_db, transaction_service, sample_sale_invoice):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("100"), invoice_id=sample_sale_invoice.id
        )

        result = run(cli_runner, temp_db, "transaction", "update", str(txn_id), "--amount", "150")
        assert result.exit_code == 0
        assert "Updated transaction" in result.output
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("550")

        result = run(cli_runner, temp_db, "transaction", "update", str(txn_id), "--unlink-invoice")
        assert result.exit_code == 0
        assert temp_db.get_invoice(sample_sale_invoice.id).paid == Decimal("300")
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("550")

    def test_update_clear_client(self, cli_runner, temp_db, sample_customer, transaction_service):
        txn_id = transaction_service.create_transaction(
            transaction_type="expense", amount=Decimal("20"), client_id=sample_customer.id
        )

        result = run(cli_runner, temp_db, "transaction", "update", str(txn_id), "--client", "")

        assert result.exit_code == 0
        assert temp_db.get_transaction(txn_id).client_id is None
        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")

    def test_missing_transaction(self, cli_runner, temp_db):
        result = run(cli_runner, temp_db, "transaction", "show", "99")
        assert result.exit_code == 1
        assert "not found" in result.output


def test_invalid_log_level(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "--log-level", "chatty", "client", "list")
    assert result.exit_code == 2
