"""
Business Rule Check Catalogue

Named predicates referenced from report_rules.yaml. Field checks take the
raw field value; cross-field checks take the values of every field the
rule names, keyed by path. Both receive the ValidationContext and the
rule's params, and return True when the rule holds.

Amounts are compared as Decimal. An absent value counts as zero in
cross-field sums; a present value that does not parse fails the check.
"""

from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Sequence

from ..models.validation_result import ValidationContext
from ..utils.format_utils import parse_decimal
from ..utils.field_paths import ABSENT
from ..config.constants import DEFAULT_BALANCE_TOLERANCE, MAX_AMOUNT_EXPONENT


FieldCheck = Callable[..., bool]
CrossFieldCheck = Callable[..., bool]

FIELD_CHECKS: Dict[str, FieldCheck] = {}
CROSS_FIELD_CHECKS: Dict[str, CrossFieldCheck] = {}


def field_check(name: str):
    """Register a single-field predicate under ``name``."""
    def decorator(func: FieldCheck) -> FieldCheck:
        FIELD_CHECKS[name] = func
        return func
    return decorator


def cross_field_check(name: str):
    """Register a cross-field predicate under ``name``."""
    def decorator(func: CrossFieldCheck) -> CrossFieldCheck:
        CROSS_FIELD_CHECKS[name] = func
        return func
    return decorator


def _amount(value: Any) -> Optional[Decimal]:
    """Decimal for a cross-field operand; ABSENT is zero, garbage is None.

    Magnitudes beyond MAX_AMOUNT_EXPONENT are garbage too: summing them
    would overflow the decimal context.
    """
    if value is ABSENT or value is None:
        return Decimal(0)

    decimal = parse_decimal(value)
    if decimal is None or (decimal and decimal.adjusted() > MAX_AMOUNT_EXPONENT):
        return None
    return decimal


def _amounts(values_by_path: Dict[str, Any], fields: Sequence[str]) -> Optional[list]:
    amounts = [_amount(values_by_path.get(path, ABSENT)) for path in fields]
    if any(amount is None for amount in amounts):
        return None
    return amounts


# =============================================================================
# FIELD CHECKS
# =============================================================================

@field_check("positive")
def is_positive(value: Any, context: Optional[ValidationContext] = None, **params) -> bool:
    decimal = parse_decimal(value)
    return decimal is not None and decimal > 0


@field_check("non_negative")
def is_non_negative(value: Any, context: Optional[ValidationContext] = None, **params) -> bool:
    decimal = parse_decimal(value)
    return decimal is not None and decimal >= 0


@field_check("minimum_value")
def meets_minimum(value: Any, context: Optional[ValidationContext] = None, min_value: Any = 0, **params) -> bool:
    """True when value >= min_value."""
    decimal = parse_decimal(value)
    return decimal is not None and decimal >= Decimal(str(min_value))


@field_check("maximum_value")
def meets_maximum(value: Any, context: Optional[ValidationContext] = None, max_value: Any = 0, **params) -> bool:
    """True when value <= max_value."""
    decimal = parse_decimal(value)
    return decimal is not None and decimal <= Decimal(str(max_value))


# =============================================================================
# CROSS-FIELD CHECKS
# =============================================================================

@cross_field_check("balance_sheet_identity")
def balance_sheet_balances(
    values_by_path: Dict[str, Any],
    context: Optional[ValidationContext] = None,
    fields: Sequence[str] = (),
    tolerance: Any = DEFAULT_BALANCE_TOLERANCE,
    **params
) -> bool:
    """
    Assets = Liabilities + Equity within tolerance.

    Args:
        values_by_path: Values of the rule's fields
        context: Validation context
        fields: Paths in order (assets, liabilities, equity)
        tolerance: Maximum absolute difference

    Returns:
        True if |assets - (liabilities + equity)| <= tolerance
    """
    amounts = _amounts(values_by_path, fields)
    if amounts is None or len(amounts) != 3:
        return False

    assets, liabilities, equity = amounts
    return abs(assets - (liabilities + equity)) <= Decimal(str(tolerance))


@cross_field_check("sum_equals")
def total_equals_parts(
    values_by_path: Dict[str, Any],
    context: Optional[ValidationContext] = None,
    fields: Sequence[str] = (),
    tolerance: Any = DEFAULT_BALANCE_TOLERANCE,
    **params
) -> bool:
    """First field equals the sum of the remaining fields within tolerance."""
    amounts = _amounts(values_by_path, fields)
    if not amounts:
        return False

    total, parts = amounts[0], amounts[1:]
    return abs(total - sum(parts, Decimal(0))) <= Decimal(str(tolerance))


@cross_field_check("not_greater_than")
def first_not_greater_than_second(
    values_by_path: Dict[str, Any],
    context: Optional[ValidationContext] = None,
    fields: Sequence[str] = (),
    **params
) -> bool:
    """First field <= second field."""
    amounts = _amounts(values_by_path, fields)
    if amounts is None or len(amounts) != 2:
        return False

    return amounts[0] <= amounts[1]
