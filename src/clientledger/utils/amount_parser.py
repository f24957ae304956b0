"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from clientledger.domain.errors import InvalidAmount

# Smallest amount a money column can hold
CENT = Decimal("0.01")

# Money columns are Numeric(15, 2): 13 integer digits
MAX_AMOUNT = Decimal("1e13")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Empty or unparsable input is an error; it is never read as zero.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidAmount: If amount string cannot be parsed
    """
    if amount_str is None or not amount_str.strip():
        raise InvalidAmount("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols
    amount_str = re.sub(r"[$€£¥]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise InvalidAmount(f"Could not parse amount '{amount_str}': {e!r}") from e

    if not amount.is_finite():
        raise InvalidAmount(f"Amount '{amount_str}' is not a finite number")
    return -amount if is_negative else amount


def to_decimal(value: object, field: str = "amount") -> Decimal:
    """Coerce a monetary value to a finite Decimal.

    Accepts ``Decimal``, ``int`` and numeric strings. Floats are rejected so
    binary rounding error never reaches the ledger.

    Raises:
        InvalidAmount: If the value is missing, a float, not finite, finer than
            a cent, or too large for a money column
    """
    if value is None:
        raise InvalidAmount(f"Missing {field}")
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(f"{field} must be a decimal, got {type(value).__name__}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        amount = parse_amount(value)
    else:
        raise InvalidAmount(f"{field} must be a decimal, got {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmount(f"{field} {amount} is not a finite number")
    if abs(amount) >= MAX_AMOUNT:
        raise InvalidAmount(f"{field} {amount} is out of range (must be below {MAX_AMOUNT:,.0f})")
    try:
        quantized = amount.quantize(CENT)
    except InvalidOperation as e:
        raise InvalidAmount(f"{field} {amount} cannot be held as a money amount") from e
    if amount != quantized:
        raise InvalidAmount(f"{field} {amount} has more than two decimal places")
    return amount
