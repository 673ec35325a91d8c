"""
Validation utilities
"""
import re
from decimal import Decimal, InvalidOperation


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount string: decimal comma becomes a point

    Example:
        >>> normalize_decimal_input("100,50")
        "100.50"
    """
    return value.strip().replace(",", ".")


def validate_decimal_amount(value: str, max_decimal_places: int = 2) -> tuple[bool, str | None]:
    """
    Validate a non-negative money amount

    Returns:
        (is_valid, error_message)

    Example:
        >>> validate_decimal_amount("100.50")
        (True, None)
        >>> validate_decimal_amount("100.505")
        (False, "At most 2 decimal places")
    """
    normalized = normalize_decimal_input(value)

    try:
        decimal_value = Decimal(normalized)
    except (InvalidOperation, ValueError):
        return False, "Amount must be numeric"

    if decimal_value < 0:
        return False, "Amount must not be negative"

    pattern = rf"^\d+(\.\d{{1,{max_decimal_places}}})?$"
    if not re.match(pattern, normalized):
        return False, f"At most {max_decimal_places} decimal places"

    return True, None


def validate_and_normalize_amount(value, max_decimal_places: int = 2) -> Decimal:
    """
    Validate an amount (str / int / float / Decimal) and return it as Decimal

    Raises:
        ValueError: if validation fails

    Example:
        >>> validate_and_normalize_amount("100,50")
        Decimal("100.50")
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be numeric")
    is_valid, error = validate_decimal_amount(str(value), max_decimal_places)
    if not is_valid:
        raise ValueError(error)

    return Decimal(normalize_decimal_input(str(value)))
