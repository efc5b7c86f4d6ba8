"""
Data Models Module

Pydantic models for type safety and validation.

Components:
- validation_result.py: Field outcomes, contexts and report validation results
- error_report.py: Enriched errors, quick fixes, error reports and statistics
"""

from .validation_result import (
    ValidationOutcome,
    ReportingPeriod,
    ValidationContext,
    DetailedValidationError,
    ValidationSummary,
    PerformanceMetrics,
    SchemaValidationResult,
)
from .error_report import (
    ErrorContext,
    EnrichedValidationError,
    QuickFix,
    ErrorReportSummary,
    ReportMetadata,
    ErrorReport,
    ErrorCodeFrequency,
    ErrorStatistics,
)

__all__ = [
    "ValidationOutcome",
    "ReportingPeriod",
    "ValidationContext",
    "DetailedValidationError",
    "ValidationSummary",
    "PerformanceMetrics",
    "SchemaValidationResult",
    "ErrorContext",
    "EnrichedValidationError",
    "QuickFix",
    "ErrorReportSummary",
    "ReportMetadata",
    "ErrorReport",
    "ErrorCodeFrequency",
    "ErrorStatistics",
]
