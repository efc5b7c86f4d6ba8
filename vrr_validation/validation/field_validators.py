"""
VRR Field Validators

Provides validators for the MAS 610 VRR data types:
1. Number (total digits / fraction digits)
2. Date (optionally past-only)
3. Email
4. Legal Entity Identifier (ISO 17442 checksum)
5. Yes/No/N.A. and Yes/No codes
6. Percentage (range and precision)
7. Boolean
8. Text (length bounds and optional pattern)
9. Firm Reference Number

Each validator returns a ValidationOutcome with:
- Validation status (pass/fail)
- Stable error code and message on failure
- Normalized value on success

Validators never raise; the engine decides what a failure means.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional, Dict, Any, Callable, Pattern, Union

from ..models.validation_result import ValidationOutcome
from ..config import constants as codes
from ..config.constants import REGEX_PATTERNS, YES_NO_NA_LABELS, YES_NO_LABELS
from ..utils.format_utils import (
    parse_decimal,
    count_significant_digits,
    count_decimal_places,
    format_fixed,
    calculate_lei_check_digits,
    is_lei_shape,
)
from ..utils.date_utils import is_iso_date_literal, parse_iso_date, is_future_date


class VRRValidator:
    """Base class: validates one raw value against one VRR data type."""

    def validate(self, value: Any) -> ValidationOutcome:
        raise NotImplementedError

    def __call__(self, value: Any) -> ValidationOutcome:
        return self.validate(value)


# =============================================================================
# NUMERIC VALIDATORS
# =============================================================================

class NumberValidator(VRRValidator):
    """
    Validate a VRR number with fixed precision and scale.

    Requirements:
    - Value must be present
    - Trimmed text matches -?\\d{0,int}(\\.\\d{0,frac})?
    - Significant digits <= total_digits
    - Decimal places <= fraction_digits

    Normalized value is the number fixed to ``fraction_digits`` places.
    """

    def __init__(self, total_digits: int, fraction_digits: int):
        if fraction_digits > total_digits:
            raise ValueError("fraction_digits cannot exceed total_digits")

        self.total_digits = total_digits
        self.fraction_digits = fraction_digits
        integer_digits = total_digits - fraction_digits
        self.pattern = re.compile(
            rf"^-?[0-9]{{0,{integer_digits}}}(\.[0-9]{{0,{fraction_digits}}})?$"
        )

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.NUMBER_REQUIRED, "Value is required")

        value_stripped = str(value).strip()

        if not self.pattern.match(value_stripped):
            return ValidationOutcome.fail(
                codes.NUMBER_PATTERN,
                f"Invalid number format. Expected pattern: {self.pattern.pattern}"
            )

        # Pattern admits "", "-" and "." which are not numbers
        decimal = parse_decimal(value_stripped)
        if decimal is None:
            return ValidationOutcome.fail(codes.NUMBER_INVALID, "Invalid decimal number")

        if count_significant_digits(decimal) > self.total_digits:
            return ValidationOutcome.fail(
                codes.NUMBER_TOTAL_DIGITS,
                f"Number exceeds maximum total digits: {self.total_digits}"
            )

        if count_decimal_places(decimal) > self.fraction_digits:
            return ValidationOutcome.fail(
                codes.NUMBER_FRACTION_DIGITS,
                f"Number exceeds maximum fraction digits: {self.fraction_digits}"
            )

        return ValidationOutcome.ok(format_fixed(decimal, self.fraction_digits))


class PercentageValidator(VRRValidator):
    """Validate a percentage within [min_value, max_value] with bounded precision."""

    def __init__(
        self,
        min_value: Union[int, str, Decimal] = 0,
        max_value: Union[int, str, Decimal] = 100,
        fraction_digits: int = 2
    ):
        self.min_value = Decimal(str(min_value))
        self.max_value = Decimal(str(max_value))
        self.fraction_digits = fraction_digits

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.PERCENTAGE_REQUIRED, "Percentage is required")

        decimal = parse_decimal(value)
        if decimal is None:
            return ValidationOutcome.fail(codes.PERCENTAGE_INVALID, "Invalid percentage format")

        if decimal < self.min_value or decimal > self.max_value:
            return ValidationOutcome.fail(
                codes.PERCENTAGE_RANGE,
                f"Percentage must be between {self.min_value} and {self.max_value}"
            )

        if count_decimal_places(decimal) > self.fraction_digits:
            return ValidationOutcome.fail(
                codes.PERCENTAGE_PRECISION,
                f"Percentage cannot have more than {self.fraction_digits} decimal places"
            )

        return ValidationOutcome.ok(format_fixed(decimal, self.fraction_digits))


# =============================================================================
# DATE VALIDATOR
# =============================================================================

class DateValidator(VRRValidator):
    """
    Validate an ISO date literal.

    Only the exact YYYY-MM-DD shape is accepted; parseable alternatives
    such as "2024/01/31" or "2024-1-31" fail with DATE_FORMAT.
    """

    def __init__(self, past_only: bool = False, today: Optional[Callable[[], date]] = None):
        self.past_only = past_only
        self._today = today

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.DATE_REQUIRED, "Date is required")

        value_stripped = str(value).strip()

        if not is_iso_date_literal(value_stripped):
            return ValidationOutcome.fail(
                codes.DATE_FORMAT,
                "Invalid date format. Expected: YYYY-MM-DD"
            )

        parsed = parse_iso_date(value_stripped)
        if parsed is None:
            return ValidationOutcome.fail(codes.DATE_INVALID, "Invalid date value")

        if self.past_only and is_future_date(parsed, self._today):
            return ValidationOutcome.fail(codes.DATE_PAST_ONLY, "Date must be in the past")

        return ValidationOutcome.ok(parsed.isoformat())


# =============================================================================
# IDENTIFIER VALIDATORS
# =============================================================================

class EmailValidator(VRRValidator):
    """Validate a contact email address (max 255 characters)."""

    MAX_LENGTH = 255

    def __init__(self):
        self.pattern = re.compile(REGEX_PATTERNS["email"])

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.EMAIL_REQUIRED, "Email is required")

        value_stripped = str(value).strip()

        if len(value_stripped) > self.MAX_LENGTH:
            return ValidationOutcome.fail(
                codes.EMAIL_LENGTH,
                f"Email exceeds maximum length: {self.MAX_LENGTH}"
            )

        if not self.pattern.match(value_stripped):
            return ValidationOutcome.fail(codes.EMAIL_FORMAT, "Invalid email format")

        return ValidationOutcome.ok(value_stripped.lower())


class LEIValidator(VRRValidator):
    """
    Validate a Legal Entity Identifier (ISO 17442).

    Requirements:
    - Exactly 20 characters after trimming and uppercasing
    - Uppercase letters and digits only
    - Last two characters equal the mod-97 check digits of the first 18

    Pattern failures never reach the checksum step.
    """

    LENGTH = 20

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.LEI_REQUIRED, "LEI is required")

        value_normalized = str(value).strip().upper()

        if len(value_normalized) != self.LENGTH:
            return ValidationOutcome.fail(
                codes.LEI_LENGTH,
                f"LEI must be exactly {self.LENGTH} characters"
            )

        if not is_lei_shape(value_normalized):
            return ValidationOutcome.fail(
                codes.LEI_PATTERN,
                "LEI must contain only uppercase letters and numbers"
            )

        expected_check = calculate_lei_check_digits(value_normalized[:-2])
        if value_normalized[-2:] != expected_check:
            return ValidationOutcome.fail(codes.LEI_CHECKSUM, "Invalid LEI checksum")

        return ValidationOutcome.ok(value_normalized)


class FirmReferenceNumberValidator(VRRValidator):
    """Validate a Firm Reference Number: 2 letters followed by 8 digits."""

    def __init__(self):
        self.pattern = re.compile(REGEX_PATTERNS["frn"])

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.FRN_REQUIRED, "FRN is required")

        value_normalized = str(value).strip().upper()

        if not self.pattern.match(value_normalized):
            return ValidationOutcome.fail(
                codes.FRN_FORMAT,
                "Invalid FRN format. Expected: 2 letters followed by 8 digits"
            )

        return ValidationOutcome.ok(value_normalized)


# =============================================================================
# CODED VALUE VALIDATORS
# =============================================================================

class CodeSetValidator(VRRValidator):
    """Validate a value against a fixed code -> label set."""

    def __init__(self, labels: Dict[str, str], required_code: str, invalid_code: str, description: str):
        self.labels = dict(labels)
        self.required_code = required_code
        self.invalid_code = invalid_code
        self.description = description

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(self.required_code, "Value is required")

        value_stripped = str(value).strip()

        if value_stripped not in self.labels:
            return ValidationOutcome.fail(
                self.invalid_code,
                f"Invalid value. Must be {self.description}"
            )

        return ValidationOutcome.ok({"code": value_stripped, "label": self.labels[value_stripped]})


class YesNoNAValidator(CodeSetValidator):
    def __init__(self):
        super().__init__(
            YES_NO_NA_LABELS,
            codes.YESNONA_REQUIRED,
            codes.YESNONA_INVALID,
            "0 (No), 1 (Yes), or 2 (N/A)"
        )


class YesNoValidator(CodeSetValidator):
    def __init__(self):
        super().__init__(
            YES_NO_LABELS,
            codes.YESNO_REQUIRED,
            codes.YESNO_INVALID,
            "0 (No) or 1 (Yes)"
        )


class BooleanValidator(VRRValidator):
    """Accept true/false/1/0 (case-insensitive) only."""

    TRUE_VALUES = {"true", "1"}
    FALSE_VALUES = {"false", "0"}

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            return ValidationOutcome.fail(codes.BOOLEAN_REQUIRED, "Boolean value is required")

        value_normalized = str(value).strip().lower()

        if value_normalized in self.TRUE_VALUES:
            return ValidationOutcome.ok(True)
        if value_normalized in self.FALSE_VALUES:
            return ValidationOutcome.ok(False)

        return ValidationOutcome.fail(
            codes.BOOLEAN_INVALID,
            "Invalid boolean value. Must be true, false, 1, or 0"
        )


# =============================================================================
# TEXT VALIDATOR
# =============================================================================

class TextValidator(VRRValidator):
    """
    Validate free text with length bounds and an optional pattern.

    A missing value is valid (as "") when min_length is 0.
    """

    def __init__(
        self,
        max_length: int,
        min_length: int = 0,
        pattern: Optional[Union[str, Pattern[str]]] = None
    ):
        self.max_length = max_length
        self.min_length = min_length
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def validate(self, value: Any) -> ValidationOutcome:
        if value is None:
            if self.min_length > 0:
                return ValidationOutcome.fail(codes.TEXT_REQUIRED, "Text value is required")
            return ValidationOutcome.ok("")

        text = str(value).strip()

        if len(text) < self.min_length:
            return ValidationOutcome.fail(
                codes.TEXT_MIN_LENGTH,
                f"Text must be at least {self.min_length} characters"
            )

        if len(text) > self.max_length:
            return ValidationOutcome.fail(
                codes.TEXT_MAX_LENGTH,
                f"Text cannot exceed {self.max_length} characters"
            )

        if self.pattern is not None and not self.pattern.search(text):
            return ValidationOutcome.fail(codes.TEXT_PATTERN, "Text does not match required pattern")

        return ValidationOutcome.ok(text)


# =============================================================================
# DATA TYPE CATALOGUE
# =============================================================================

VRR_VALIDATORS: Dict[str, VRRValidator] = {
    # Number validators
    "VRR_Number_14_2": NumberValidator(16, 2),
    "VRR_Number_14_1": NumberValidator(15, 1),
    "VRR_Number_14_4": NumberValidator(18, 4),
    "VRR_Number_14": NumberValidator(14, 0),

    # Date validators
    "VRR_Date": DateValidator(past_only=False),
    "VRR_Date_Past": DateValidator(past_only=True),

    # Text validators
    "VRR_Text": TextValidator(255),
    "VRR_Text_Long": TextValidator(500),

    # Other validators
    "VRR_Email": EmailValidator(),
    "VRR_LEI": LEIValidator(),
    "VRR_YesNoNA": YesNoNAValidator(),
    "VRR_YesNo": YesNoValidator(),
    "VRR_Percentage": PercentageValidator(),
    "VRR_Boolean": BooleanValidator(),
    "VRR_FRN": FirmReferenceNumberValidator(),
}


def get_validator(data_type: str) -> Optional[VRRValidator]:
    """
    Look up the validator bound to a VRR data type name.

    Args:
        data_type: Catalogue key (e.g., "VRR_Number_14_2")

    Returns:
        VRRValidator, or None for an unknown data type
    """
    return VRR_VALIDATORS.get(data_type)
