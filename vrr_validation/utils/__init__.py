"""
Utilities Module

Helper functions and utilities used across the engine.

Components:
- logger.py: Centralized logging with contact-detail masking
- error_handler.py: VRRError exceptions and ErrorHandler
- date_utils.py: ISO date parsing utilities
- format_utils.py: Decimal and LEI helpers
- field_paths.py: Dotted path extraction with an explicit ABSENT marker
- reporting.py: Actionable error reports and error statistics
"""

from .logger import get_logger, get_module_logger
from .error_handler import (
    ErrorLevel,
    ErrorCode,
    VRRError,
    RuleConfigurationError,
    MalformedOutcomeError,
    BatchValidationError,
    ErrorHandler,
)
from .date_utils import is_future_date, parse_iso_date
from .format_utils import parse_decimal, calculate_lei_check_digits
from .field_paths import ABSENT, get_field_value
from .reporting import ErrorReporter, get_error_reporter

__all__ = [
    "get_logger",
    "get_module_logger",
    "ErrorLevel",
    "ErrorCode",
    "VRRError",
    "RuleConfigurationError",
    "MalformedOutcomeError",
    "BatchValidationError",
    "ErrorHandler",
    "is_future_date",
    "parse_iso_date",
    "parse_decimal",
    "calculate_lei_check_digits",
    "ABSENT",
    "get_field_value",
    "ErrorReporter",
    "get_error_reporter",
]
