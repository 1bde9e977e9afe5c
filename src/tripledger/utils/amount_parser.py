"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45", "€123.45"
    - "EUR 123.45", "123.45 USD"
    - "1,234.56"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed or has more than two decimals
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = amount_str.strip()

    # Remove currency symbols and three-letter codes
    cleaned = re.sub(r"[$€£¥]", "", cleaned)
    cleaned = re.sub(r"^[A-Za-z]{3}\s+|\s+[A-Za-z]{3}$", "", cleaned)

    # Remove thousands separators
    cleaned = cleaned.replace(",", "").strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if amount.as_tuple().exponent < -2:
        raise ValueError(f"Amount '{amount_str}' has more than two decimal places")
    return amount


def parse_share(share_str: str) -> tuple[str, Decimal]:
    """Parse a ``MEMBER=VALUE`` share option.

    Args:
        share_str: Share string such as "ana@example.com=120" or "3=40%"

    Returns:
        Tuple of (member reference, value)

    Raises:
        ValueError: If the share string is malformed
    """
    member, sep, value = share_str.rpartition("=")
    if not sep or not member.strip() or not value.strip():
        raise ValueError(f"Share '{share_str}' must look like MEMBER=VALUE")
    return member.strip(), parse_amount(value.strip().rstrip("%"))
