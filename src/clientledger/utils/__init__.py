"""Utility functions for clientledger."""

from clientledger.utils.date_parser import parse_date
from clientledger.utils.amount_parser import parse_amount, to_decimal

__all__ = ["parse_date", "parse_amount", "to_decimal"]
