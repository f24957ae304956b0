"""Tests for TransactionService."""

import pytest
from datetime import date
from decimal import Decimal

from clientledger.domain.entities import CauseType, PaymentMethod
from clientledger.domain.errors import (
    ClientNotFound,
    ConflictError,
    InvalidAmount,
    InvoiceNotFound,
    TransactionNotFound,
    ValidationError,
)


class TestUnlinkedTransactions:
    """Transactions that are not payments against an invoice."""

    def test_income_lowers_balance(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income",
            amount=Decimal("200"),
            description="Deposit",
            client_id=sample_customer.id,
        )

        assert temp_db.get_client(sample_customer.id).balance == Decimal("-200")
        row = temp_db.list_balance_history(sample_customer.id)[0]
        assert row.cause_type == CauseType.TRANSACTION
        assert row.cause_id == txn_id

    def test_expense_raises_balance(self, temp_db, transaction_service, sample_supplier):
        transaction_service.create_transaction(
            transaction_type="expense",
            amount=Decimal("75.25"),
            client_id=sample_supplier.id,
            payment_method="bank",
        )

        assert temp_db.get_client(sample_supplier.id).balance == Decimal("75.25")

    def test_transaction_without_client_touches_no_balance(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="expense", amount=Decimal("12"), description="Office supplies"
        )

        txn = transaction_service.get_transaction(txn_id)
        assert txn.client_id is None
        assert txn.payment_method == PaymentMethod.CASH
        assert temp_db.count_balance_history(sample_customer.id) == 0

    def test_generated_number(self, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income",
            amount=Decimal("1"),
            client_id=sample_customer.id,
            date=date(2024, 5, 3),
        )

        assert transaction_service.get_transaction(txn_id).transaction_number == "TRX-2405-0001"

    def test_duplicate_number_rejected(self, transaction_service, sample_customer):
        transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("1"), transaction_number="R-1"
        )
        with pytest.raises(ConflictError):
            transaction_service.create_transaction(
                transaction_type="income", amount=Decimal("1"), transaction_number="R-1"
            )

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, transaction_service, sample_customer, amount):
        with pytest.raises(InvalidAmount):
            transaction_service.create_transaction(
                transaction_type="income", amount=amount, client_id=sample_customer.id
            )

    def test_unknown_payment_method(self, transaction_service):
        with pytest.raises(ValidationError, match="Unknown payment method"):
            transaction_service.create_transaction(
                transaction_type="income", amount=Decimal("1"), payment_method="barter"
            )

    def test_missing_client(self, transaction_service):
        with pytest.raises(ClientNotFound):
            transaction_service.create_transaction(
                transaction_type="income", amount=Decimal("1"), client_id=404
            )

    def test_delete_reverses_effect(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("200"), client_id=sample_customer.id
        )

        transaction_service.delete_transaction(txn_id)

        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")
        assert [r.amount for r in temp_db.list_balance_history(sample_customer.id)] == [
            Decimal("-200"),
            Decimal("200"),
        ]
        assert transaction_service.get_transaction(txn_id) is None

    def test_delete_missing(self, transaction_service):
        with pytest.raises(TransactionNotFound):
            transaction_service.delete_transaction(999)


class TestLinkedPayments:
    """Transactions that pay an invoice."""

    def test_payment_updates_invoice_and_balance(
        self, temp_db, transaction_service, invoice_service, sample_sale_invoice
    ):
        transaction_service.create_transaction(
            transaction_type="income",
            amount=Decimal("200"),
            invoice_id=sample_sale_invoice.id,
        )

        invoice = invoice_service.get_invoice(sample_sale_invoice.id)
        assert invoice.paid == Decimal("500")
        assert invoice.due == Decimal("500")
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("500")

    def test_client_defaults_to_invoice_client(self, transaction_service, sample_sale_invoice):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("1"), invoice_id=sample_sale_invoice.id
        )

        txn = transaction_service.get_transaction(txn_id)
        assert txn.client_id == sample_sale_invoice.client_id
        assert txn.is_linked

    def test_payment_above_due_rejected(self, temp_db, transaction_service, sample_sale_invoice):
        with pytest.raises(ValidationError, match="exceeds"):
            transaction_service.create_transaction(
                transaction_type="income",
                amount=Decimal("700.01"),
                invoice_id=sample_sale_invoice.id,
            )
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("700")

    def test_wrong_direction_rejected(self, transaction_service, sample_sale_invoice):
        with pytest.raises(ValidationError, match="cannot pay"):
            transaction_service.create_transaction(
                transaction_type="expense", amount=Decimal("10"), invoice_id=sample_sale_invoice.id
            )

    def test_mismatched_client_rejected(self, transaction_service, sample_sale_invoice, sample_supplier):
        with pytest.raises(ValidationError, match="belongs to client"):
            transaction_service.create_transaction(
                transaction_type="income",
                amount=Decimal("10"),
                invoice_id=sample_sale_invoice.id,
                client_id=sample_supplier.id,
            )

    def test_missing_invoice(self, transaction_service):
        with pytest.raises(InvoiceNotFound):
            transaction_service.create_transaction(
                transaction_type="income", amount=Decimal("10"), invoice_id=999
            )

    def test_deleting_payment_restores_invoice(
        self, temp_db, transaction_service, invoice_service, sample_sale_invoice
    ):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("300"), invoice_id=sample_sale_invoice.id
        )

        transaction_service.delete_transaction(txn_id)

        invoice = invoice_service.get_invoice(sample_sale_invoice.id)
        assert invoice.paid == Decimal("300")
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("700")

    def test_purchase_payment(self, temp_db, transaction_service, invoice_service, sample_supplier):
        invoice_id = invoice_service.create_invoice(
            client_id=sample_supplier.id, invoice_type="purchase", total=Decimal("400")
        )

        transaction_service.create_transaction(
            transaction_type="expense", amount=Decimal("150"), invoice_id=invoice_id
        )

        assert invoice_service.get_invoice(invoice_id).due == Decimal("250")
        assert temp_db.get_client(sample_supplier.id).balance == Decimal("-250")


class TestUpdateTransaction:
    """Tests for transaction edits."""

    def test_amount_change_moves_balance_by_difference(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("200"), client_id=sample_customer.id
        )

        transaction_service.update_transaction(txn_id, amount=Decimal("250"), description="Corrected")

        assert transaction_service.get_transaction(txn_id).description == "Corrected"
        assert temp_db.get_client(sample_customer.id).balance == Decimal("-250")
        rows = temp_db.list_balance_history(sample_customer.id)
        assert [r.amount for r in rows] == [Decimal("-200"), Decimal("-50")]
        assert rows[-1].cause_type == CauseType.TRANSACTION

    def test_type_flip_reverses_sign(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("40"), client_id=sample_customer.id
        )

        transaction_service.update_transaction(txn_id, transaction_type="expense")

        assert temp_db.get_client(sample_customer.id).balance == Decimal("40")

    def test_moving_to_another_client(self, temp_db, transaction_service, sample_customer, sample_supplier):
        txn_id = transaction_service.create_transaction(
            transaction_type="expense", amount=Decimal("30"), client_id=sample_customer.id
        )

        transaction_service.update_transaction(txn_id, client_id=sample_supplier.id)

        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")
        assert temp_db.get_client(sample_supplier.id).balance == Decimal("30")
        assert temp_db.sum_balance_history(sample_customer.id) == Decimal("0")

    def test_clearing_client_reverses_effect(self, temp_db, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("15"), client_id=sample_customer.id
        )

        transaction_service.update_transaction(txn_id, clear_client=True)

        assert transaction_service.get_transaction(txn_id).client_id is None
        assert temp_db.get_client(sample_customer.id).balance == Decimal("0")

    def test_payment_amount_follows_invoice(
        self, temp_db, transaction_service, invoice_service, sample_sale_invoice
    ):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("200"), invoice_id=sample_sale_invoice.id
        )

        transaction_service.update_transaction(txn_id, amount=Decimal("700"))

        invoice = invoice_service.get_invoice(sample_sale_invoice.id)
        assert invoice.paid == Decimal("1000")
        assert invoice.due == Decimal("0")
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("0")

    def test_payment_cannot_exceed_due(
        self, temp_db, transaction_service, invoice_service, sample_sale_invoice
    ):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("200"), invoice_id=sample_sale_invoice.id
        )

        with pytest.raises(ValidationError, match="exceeds"):
            transaction_service.update_transaction(txn_id, amount=Decimal("700.01"))

        assert invoice_service.get_invoice(sample_sale_invoice.id).paid == Decimal("500")
        assert transaction_service.get_transaction(txn_id).amount == Decimal("200")
        assert temp_db.get_client(sample_sale_invoice.client_id).balance == Decimal("500")

    def test_linking_and_unlinking(self, temp_db, transaction_service, invoice_service, sample_sale_invoice):
        client_id = sample_sale_invoice.client_id
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("100"), client_id=client_id
        )

        transaction_service.update_transaction(txn_id, invoice_id=sample_sale_invoice.id)

        assert invoice_service.get_invoice(sample_sale_invoice.id).paid == Decimal("400")
        assert transaction_service.get_transaction(txn_id).is_linked
        assert temp_db.get_client(client_id).balance == Decimal("600")

        transaction_service.update_transaction(txn_id, clear_invoice=True)

        assert invoice_service.get_invoice(sample_sale_invoice.id).paid == Decimal("300")
        assert not transaction_service.get_transaction(txn_id).is_linked
        assert temp_db.get_client(client_id).balance == Decimal("600")
        assert temp_db.sum_balance_history(client_id) == Decimal("600")

    def test_type_flip_on_payment_rejected(self, transaction_service, sample_sale_invoice):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("10"), invoice_id=sample_sale_invoice.id
        )

        with pytest.raises(ValidationError, match="cannot pay"):
            transaction_service.update_transaction(txn_id, transaction_type="expense")

    def test_payment_must_keep_invoice_client(self, transaction_service, sample_sale_invoice):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("10"), invoice_id=sample_sale_invoice.id
        )

        with pytest.raises(ValidationError, match="must keep"):
            transaction_service.update_transaction(txn_id, clear_client=True)

    def test_conflicting_flags(self, transaction_service, sample_customer):
        with pytest.raises(ValidationError, match="Cannot set both"):
            transaction_service.update_transaction(1, client_id=sample_customer.id, clear_client=True)

    def test_update_missing(self, transaction_service):
        with pytest.raises(TransactionNotFound):
            transaction_service.update_transaction(999, amount=Decimal("1"))

    def test_non_positive_amount_rejected(self, transaction_service, sample_customer):
        txn_id = transaction_service.create_transaction(
            transaction_type="income", amount=Decimal("10"), client_id=sample_customer.id
        )

        with pytest.raises(InvalidAmount):
            transaction_service.update_transaction(txn_id, amount=Decimal("0"))


def test_list_transactions_filters(transaction_service, sample_customer, sample_sale_invoice):
    transaction_service.create_transaction(
        transaction_type="income", amount=Decimal("5"), client_id=sample_customer.id
    )
    transaction_service.create_transaction(
        transaction_type="income", amount=Decimal("6"), invoice_id=sample_sale_invoice.id
    )
    transaction_service.create_transaction(transaction_type="expense", amount=Decimal("7"))

    assert len(transaction_service.list_transactions()) == 3
    assert len(transaction_service.list_transactions(client_id=sample_customer.id)) == 2
    assert [t.amount for t in transaction_service.list_transactions(invoice_id=sample_sale_invoice.id)] == [
        Decimal("6")
    ]
    assert len(transaction_service.list_transactions(transaction_type="expense")) == 1
