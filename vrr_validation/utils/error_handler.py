"""
Standardized error handling for the VRR validation engine.

Data problems in a report are never raised: they are returned as
ValidationOutcome / DetailedValidationError values. The exceptions in
this module cover programming and configuration faults only (bad rule
files, validators returning the wrong thing).
"""

import traceback
from typing import Optional, Any, Dict, Union
from enum import Enum
import logging

from .logger import VRRLogger


class ErrorLevel(Enum):
    """Error severity levels."""
    CRITICAL = "critical"  # System failure, cannot continue
    ERROR = "error"  # Operation failed, but system can continue
    WARNING = "warning"  # Operation succeeded with issues
    INFO = "info"  # Informational message


class ErrorCode(Enum):
    """Standardized error codes for engine faults."""

    # Configuration Errors (1xxx)
    RULE_FILE_NOT_FOUND = 1001
    RULE_FILE_INVALID = 1002
    DUPLICATE_FIELD_RULE = 1003
    UNKNOWN_DATA_TYPE = 1004
    UNKNOWN_RULE_CHECK = 1005

    # Validation Engine Errors (2xxx)
    MALFORMED_OUTCOME = 2001

    # Batch Errors (3xxx)
    BATCH_VALIDATION_FAILED = 3001
    BATCH_CANCELLED = 3002


class VRRError(Exception):
    """Base exception class for VRR validation engine faults."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize VRR error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            level: Severity level from ErrorLevel enum
            details: Additional error details as dictionary
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.level = level
        self.details = details or {}
        self.cause = cause

        if cause:
            self.details['original_error'] = str(cause)
            self.details['traceback'] = ''.join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            'message': self.message,
            'code': self.code.value,
            'level': self.level.value,
            'details': self.details
        }


class RuleConfigurationError(VRRError):
    """Raised when the rule registry cannot be built from its source."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RULE_FILE_INVALID,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, code, ErrorLevel.CRITICAL, details, cause)


class MalformedOutcomeError(VRRError):
    """Raised when a validator returns something other than a ValidationOutcome."""

    def __init__(self, data_type: str, returned: Any):
        super().__init__(
            message=f"Validator for '{data_type}' returned {type(returned).__name__}, expected ValidationOutcome",
            code=ErrorCode.MALFORMED_OUTCOME,
            level=ErrorLevel.CRITICAL,
            details={'data_type': data_type, 'returned_type': type(returned).__name__}
        )


class BatchValidationError(VRRError):
    """Wraps an unexpected exception raised while validating one queued report."""

    def __init__(self, report_id: str, cause: Exception):
        super().__init__(
            message=f"Validation failed for report '{report_id}'",
            code=ErrorCode.BATCH_VALIDATION_FAILED,
            level=ErrorLevel.ERROR,
            details={'report_id': report_id},
            cause=cause
        )


class ErrorHandler:
    """Centralized error handler with logging."""

    def __init__(self, logger: Optional[Union[logging.Logger, VRRLogger]] = None):
        """
        Initialize error handler.

        Args:
            logger: Standard or masking VRRLogger to use (creates default if None)
        """
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, error: VRRError) -> None:
        """
        Handle an error by logging it appropriately.

        Args:
            error: The error to handle
        """
        log_message = f"[{error.code.name}] {error.message}"

        details = {k: v for k, v in error.details.items() if k != 'traceback'}
        if details:
            log_message += f" | Details: {details}"

        if error.level == ErrorLevel.CRITICAL:
            self.logger.critical(log_message)
        elif error.level == ErrorLevel.ERROR:
            self.logger.error(log_message)
        elif error.level == ErrorLevel.WARNING:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)
