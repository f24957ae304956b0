"""Tests for document numbering."""

from datetime import date

from clientledger.utils.numbering import document_prefix, next_document_number


def test_prefix_uses_two_digit_year_and_month():
    assert document_prefix("INV", date(2024, 3, 9)) == "INV-2403-"


def test_first_number_of_month():
    assert next_document_number("TRX", date(2024, 3, 9), []) == "TRX-2403-0001"


def test_continues_after_highest_number():
    existing = ["INV-2403-0001", "INV-2403-0007", "INV-2403-0002"]
    assert next_document_number("INV", date(2024, 3, 1), existing) == "INV-2403-0008"


def test_ignores_foreign_and_malformed_numbers():
    existing = ["INV-2402-0099", "INV-2403-ABCD", "CUSTOM-1"]
    assert next_document_number("INV", date(2024, 3, 1), existing) == "INV-2403-0001"


def test_grows_past_four_digits():
    assert next_document_number("INV", date(2024, 3, 1), ["INV-2403-9999"]) == "INV-2403-10000"
