"""
Format Validation Utilities

Provides helper functions used by the VRR validators including:
- Exact decimal parsing (never binary floating point)
- Significant digit and decimal place counting
- Fixed-scale decimal formatting
- LEI (ISO 17442) check digit calculation
"""

import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Optional
from ..config.constants import REGEX_PATTERNS


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a raw value into a finite Decimal.

    Accepts strings, ints and Decimals. Floats are converted through
    their string form so 0.1 stays 0.1.

    Args:
        value: Raw value to parse

    Returns:
        Decimal if the value is a finite number, None otherwise
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        decimal = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None

    if not decimal.is_finite():
        return None

    return decimal


def count_significant_digits(decimal: Decimal) -> int:
    """
    Count the digits of a decimal's plain normalised form.

    Sign and decimal separator are excluded; trailing fractional zeros
    and leading integer zeros are dropped (so "0.50" counts as "05").

    Args:
        decimal: Finite decimal

    Returns:
        Number of digits
    """
    plain = format(decimal.normalize(), "f")
    return len(plain.replace("-", "").replace(".", ""))


def count_decimal_places(decimal: Decimal) -> int:
    """
    Count decimal places ignoring trailing zeros ("1.50" has 1).

    Args:
        decimal: Finite decimal

    Returns:
        Number of decimal places (0 for integers)
    """
    exponent = decimal.normalize().as_tuple().exponent
    return max(0, -exponent)


def format_fixed(decimal: Decimal, fraction_digits: int) -> str:
    """
    Format a decimal with exactly ``fraction_digits`` decimal places.

    Args:
        decimal: Finite decimal
        fraction_digits: Decimal places in the output

    Returns:
        Plain (non-scientific) string, e.g. "1234.50"
    """
    with localcontext() as ctx:
        ctx.prec = max(28, count_significant_digits(decimal) + fraction_digits + 2)
        quantized = decimal.quantize(Decimal(1).scaleb(-fraction_digits))
    return format(quantized, "f")


def lei_to_numeric(identifier: str) -> str:
    """
    Convert an LEI fragment to its ISO 7064 numeric string.

    Letters map to their code minus 55 (A=10 ... Z=35); digits map to
    themselves.

    Args:
        identifier: Uppercase alphanumeric string

    Returns:
        String of digits
    """
    return "".join(
        str(ord(char) - 55) if char.isalpha() else char
        for char in identifier
    )


def mod97(numeric: str) -> int:
    """
    Compute a numeric string modulo 97 digit by digit.

    Args:
        numeric: String of digits

    Returns:
        Remainder in 0..96
    """
    remainder = 0
    for digit in numeric:
        remainder = (remainder * 10 + int(digit)) % 97
    return remainder


def calculate_lei_check_digits(base: str) -> str:
    """
    Calculate the two LEI check digits for an 18-character base.

    The base is suffixed with "00", converted to digits, and the check
    is 98 minus the remainder mod 97, zero-padded to two digits.

    Args:
        base: First 18 characters of the LEI (uppercase)

    Returns:
        Two-character check digit string

    Example:
        >>> calculate_lei_check_digits("529900T8BM49AURSDO")
        '55'
    """
    remainder = mod97(lei_to_numeric(base + "00"))
    return str(98 - remainder).zfill(2)


def is_lei_shape(value: str) -> bool:
    """True if value is exactly 20 uppercase alphanumerics."""
    return bool(re.match(REGEX_PATTERNS["lei"], value))
