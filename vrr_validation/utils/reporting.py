"""
Error Reporting Module

Turns validation errors into actionable error reports with:
- Unique error ids, categories and retryability
- Suggestions from error codes, data types and field names
- Documentation links
- Prioritized recommendations and quick fixes
- Rolling error statistics
- JSON export for automation

Lookup tables come from config/error_catalog.yaml.
"""

import json
import threading
import time
import uuid
from collections import Counter
from typing import Dict, List, Optional, Iterable

from ..models.validation_result import DetailedValidationError
from ..models.error_report import (
    ErrorContext,
    EnrichedValidationError,
    QuickFix,
    ErrorReportSummary,
    ReportMetadata,
    ErrorReport,
    ErrorCodeFrequency,
    ErrorStatistics,
)
from ..config.constants import (
    ValidationSeverity,
    ErrorCategory,
    FIELD_REQUIRED,
    NO_RULE_FOUND,
    BUSINESS_RULE_VIOLATION,
    CROSS_FIELD_VALIDATION,
    NUMBER_PATTERN,
    DATE_FORMAT,
    TOP_ERROR_CODES_LIMIT,
    PATTERN_RECOMMENDATION_THRESHOLD,
)
from ..config.error_catalog import ErrorCatalog, get_error_catalog
from .logger import get_module_logger

logger = get_module_logger()


CODE_CATEGORIES: Dict[str, ErrorCategory] = {
    FIELD_REQUIRED: ErrorCategory.SCHEMA_VALIDATION,
    NO_RULE_FOUND: ErrorCategory.SYSTEM_ERROR,
    BUSINESS_RULE_VIOLATION: ErrorCategory.BUSINESS_RULE,
    CROSS_FIELD_VALIDATION: ErrorCategory.CROSS_FIELD,
}


def categorize_error_code(error_code: str) -> ErrorCategory:
    """
    Infer the error category from an error code.

    Codes not listed in CODE_CATEGORIES come from typed validators and
    are data format errors.

    Args:
        error_code: Stable error code

    Returns:
        ErrorCategory
    """
    return CODE_CATEGORIES.get(error_code, ErrorCategory.DATA_FORMAT)


def generate_error_id() -> str:
    """Error id of the form ERR_<epoch ms>_<9 hex chars>."""
    return f"ERR_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


class ErrorReporter:
    """
    Enhanced reporter for VRR validation errors.

    Generates actionable feedback including:
    - What's wrong (code, message, category)
    - How to fix it (suggestions, quick fixes, documentation)
    - What to do first (recommendations)

    Every created error is kept in this reporter's history until
    clear_history() is called.
    """

    def __init__(self, catalog: Optional[ErrorCatalog] = None):
        """
        Initialize the error reporter.

        Args:
            catalog: ErrorCatalog lookup tables (uses packaged catalogue if None)
        """
        self.catalog = catalog or get_error_catalog()
        self._history: List[EnrichedValidationError] = []
        self._lock = threading.Lock()

    def create_error(
        self,
        validation_error: DetailedValidationError,
        context: ErrorContext,
        category: Optional[ErrorCategory] = None
    ) -> EnrichedValidationError:
        """
        Enrich one validation error and record it in the history.

        Args:
            validation_error: Error from SchemaValidationResult
            context: Report context
            category: Explicit category (inferred from the code if None)

        Returns:
            EnrichedValidationError
        """
        code = validation_error.error_code

        error = EnrichedValidationError(
            error_id=generate_error_id(),
            category=category or categorize_error_code(code),
            severity=validation_error.severity,
            code=code,
            message=validation_error.message,
            description=validation_error.message,
            field_path=validation_error.field_path,
            actual_value=validation_error.actual_value,
            expected_value=validation_error.expected_value,
            related_fields=list(validation_error.related_fields or ()),
            context=context,
            suggestions=self._generate_suggestions(validation_error),
            documentation=self.catalog.documentation_link(code),
            is_retryable=self.catalog.is_retryable(code)
        )

        with self._lock:
            self._history.append(error)

        return error

    def create_error_report(
        self,
        errors: Iterable[DetailedValidationError],
        context: ErrorContext
    ) -> ErrorReport:
        """
        Create an actionable error report for one validated report.

        Args:
            errors: Errors (and optionally warnings) from validation
            context: Report context

        Returns:
            ErrorReport with summary, recommendations and quick fixes
        """
        enriched = [self.create_error(error, context) for error in errors]

        report = ErrorReport(
            report_id=context.report_id,
            summary=self._generate_summary(enriched),
            errors=enriched,
            recommendations=self._generate_recommendations(enriched),
            quick_fixes=self._generate_quick_fixes(enriched),
            report_metadata=ReportMetadata(
                report_type=context.report_type,
                institution_code=context.institution_code,
                reporting_period=context.timestamp.strftime("%Y-%m")
            )
        )

        logger.info(
            "Error report created",
            report_id=context.report_id,
            report_type=context.report_type,
            total_errors=report.summary.total_errors,
            critical_errors=report.summary.critical_error_count
        )

        return report

    def get_statistics(self) -> ErrorStatistics:
        """
        Statistics over every error created since the last clear_history().

        Returns:
            ErrorStatistics with counts and the most frequent codes
        """
        with self._lock:
            history = list(self._history)

        statistics = ErrorStatistics(total_errors=len(history))

        code_counts: Counter = Counter()
        for error in history:
            statistics.errors_by_category[error.category] += 1
            statistics.errors_by_severity[error.severity] += 1
            code_counts[error.code] += 1

        statistics.top_error_codes = [
            ErrorCodeFrequency(
                code=code,
                count=count,
                percentage=count / len(history) * 100
            )
            for code, count in code_counts.most_common(TOP_ERROR_CODES_LIMIT)
        ]

        return statistics

    def clear_history(self) -> None:
        """Forget all recorded errors."""
        with self._lock:
            self._history.clear()

    def export_to_json(self, report: ErrorReport) -> str:
        """
        Export an error report to JSON for automation/integration.

        Args:
            report: Error report

        Returns:
            JSON string
        """
        report_dict = report.model_dump(mode="json")

        report_dict["submission"] = {
            "requires_resubmission": report.summary.critical_error_count > 0,
            "auto_fixable_errors": sum(
                len(fix.target_errors) for fix in report.quick_fixes if fix.auto_applicable
            )
        }

        return json.dumps(report_dict, indent=2, default=str)

    # =========================================================================
    # HELPER FUNCTIONS
    # =========================================================================

    def _generate_suggestions(self, validation_error: DetailedValidationError) -> List[str]:
        return _unique(
            self.catalog.suggestions_for_code(validation_error.error_code)
            + self.catalog.suggestions_for_data_type(validation_error.data_type)
            + self.catalog.suggestions_for_field(validation_error.field_path)
        )

    @staticmethod
    def _generate_summary(errors: List[EnrichedValidationError]) -> ErrorReportSummary:
        summary = ErrorReportSummary(total_errors=len(errors))

        for error in errors:
            summary.errors_by_category[error.category] += 1
            summary.errors_by_severity[error.severity] += 1

        summary.critical_error_count = summary.errors_by_severity[ValidationSeverity.CRITICAL]
        summary.retryable_error_count = sum(1 for error in errors if error.is_retryable)
        return summary

    @staticmethod
    def _generate_recommendations(errors: List[EnrichedValidationError]) -> List[str]:
        """
        Build prioritized recommendations.

        Order: critical, high, repeated formatting patterns, cross-field,
        retryable.
        """
        recommendations = []
        code_counts = Counter(error.code for error in errors)

        critical_count = sum(1 for e in errors if e.severity == ValidationSeverity.CRITICAL)
        if critical_count > 0:
            recommendations.append(
                f"URGENT: Address {critical_count} critical error(s) immediately"
                " - report cannot be submitted until resolved"
            )

        high_count = sum(1 for e in errors if e.severity == ValidationSeverity.HIGH)
        if high_count > 0:
            recommendations.append(
                f"HIGH PRIORITY: Resolve {high_count} high-priority error(s) before submission"
            )

        if code_counts[NUMBER_PATTERN] > PATTERN_RECOMMENDATION_THRESHOLD:
            recommendations.append(
                "PATTERN: Multiple number format errors detected - review number formatting guidelines"
            )

        if code_counts[DATE_FORMAT] > PATTERN_RECOMMENDATION_THRESHOLD:
            recommendations.append(
                "PATTERN: Multiple date format errors detected - ensure dates are in YYYY-MM-DD format"
            )

        if code_counts[CROSS_FIELD_VALIDATION] > 0:
            recommendations.append(
                "CROSS-FIELD: Review relationships between fields"
                " - balance sheet equations and totals must be consistent"
            )

        retryable_count = sum(1 for e in errors if e.is_retryable)
        if retryable_count > 0:
            recommendations.append(
                f"RETRY: {retryable_count} error(s) may be resolved by retrying validation"
                " after minor corrections"
            )

        return recommendations

    def _generate_quick_fixes(self, errors: List[EnrichedValidationError]) -> List[QuickFix]:
        quick_fixes = []

        for code in _unique(error.code for error in errors):
            template = self.catalog.quick_fix_for(code)
            if template is None:
                continue

            quick_fixes.append(QuickFix(
                fix_id=template.fix_id,
                title=template.title,
                description=template.description,
                target_errors=[error.error_id for error in errors if error.code == code],
                auto_applicable=template.auto_applicable,
                estimated_time=template.estimated_time,
                instructions=list(template.instructions)
            ))

        return quick_fixes


# Singleton instance for global access
_error_reporter_instance = None


def get_error_reporter() -> ErrorReporter:
    """
    Get singleton instance of ErrorReporter.

    Returns:
        ErrorReporter instance
    """
    global _error_reporter_instance
    if _error_reporter_instance is None:
        _error_reporter_instance = ErrorReporter()
    return _error_reporter_instance
