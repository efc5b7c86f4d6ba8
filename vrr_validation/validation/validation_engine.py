"""
Validation Engine

Core orchestrator for MAS 610 VRR report validation.
Coordinates path extraction, typed field validation, business rules,
cross-field rules, and compliance classification.
"""

import time
from typing import Dict, Optional, List, Any

from ..models.validation_result import (
    ValidationOutcome,
    ValidationContext,
    DetailedValidationError,
    ValidationSummary,
    PerformanceMetrics,
    SchemaValidationResult,
)
from ..config.constants import (
    ValidationSeverity,
    ComplianceStatus,
    FIELD_REQUIRED,
    VALIDATION_ERROR,
    NO_RULE_FOUND,
    BUSINESS_RULE_VIOLATION,
    CROSS_FIELD_VALIDATION,
    CROSS_FIELD_DATA_TYPE,
)
from ..config.error_catalog import ErrorCatalog, get_error_catalog
from ..utils.error_handler import MalformedOutcomeError
from ..utils.field_paths import get_field_value, is_present
from ..utils.logger import get_module_logger

from .rule_loader import (
    RuleRegistry,
    FieldRule,
    BusinessRule,
    CrossFieldRule,
    get_rule_registry,
)

logger = get_module_logger()


class ValidationEngine:
    """
    Main validation engine for MAS 610 VRR reports.

    Orchestrates the complete validation workflow:
    1. Look up the rule set of the report type
    2. Validate every field rule (presence, type, business rules)
    3. Evaluate cross-field rules
    4. Summarize errors by severity
    5. Measure validation time

    The engine is synchronous and keeps no per-call state, so one
    instance can be shared across threads.
    """

    def __init__(
        self,
        rule_registry: Optional[RuleRegistry] = None,
        error_catalog: Optional[ErrorCatalog] = None
    ):
        """
        Initialize the ValidationEngine.

        Args:
            rule_registry: RuleRegistry instance (uses singleton if None)
            error_catalog: ErrorCatalog for data-type suggestions (uses packaged catalogue if None)
        """
        self.rule_registry = rule_registry or get_rule_registry()
        self.error_catalog = error_catalog or get_error_catalog()

    def get_rules(self, report_type: str) -> List[FieldRule]:
        """Field rules of a report type, in evaluation order."""
        return self.rule_registry.get_rules(report_type)

    def get_cross_field_rules(self, report_type: str) -> List[CrossFieldRule]:
        """Cross-field rules of a report type."""
        return self.rule_registry.get_cross_field_rules(report_type)

    def get_report_types(self) -> List[str]:
        """Report types with registered rules."""
        return self.rule_registry.get_report_types()

    def validate_field(
        self,
        field_path: str,
        value: Any,
        report_type: str,
        context: Optional[ValidationContext] = None
    ) -> ValidationOutcome:
        """
        Validate a single value against the rule for its field path.

        Only the typed validator runs; business and cross-field rules need
        the whole report.

        Args:
            field_path: Dotted field path (e.g., "data.totalAssets")
            value: Raw value to validate
            report_type: Report type whose rules apply
            context: Validation context (unused by typed validators)

        Returns:
            ValidationOutcome; NO_RULE_FOUND failure if the path has no rule
        """
        rule = self.rule_registry.get_rule(report_type, field_path)

        if rule is None:
            return ValidationOutcome.fail(NO_RULE_FOUND, "No validation rule found for field")

        return self._run_validator(rule, value)

    def validate_report(
        self,
        report: Dict[str, Any],
        report_type: str,
        context: Optional[ValidationContext] = None
    ) -> SchemaValidationResult:
        """
        Validate an entire report with all-at-once validation.

        This is the main entry point for report validation. Data problems
        never raise; each becomes an error or warning in the result.

        Args:
            report: Nested report payload (header, data, sections ...)
            report_type: Report type identifier (e.g., "APPENDIX_A1")
            context: Validation context; built from report_type if None

        Returns:
            SchemaValidationResult with errors, warnings, summary and timing
        """
        start_time = time.perf_counter()

        if context is None:
            context = ValidationContext(report_type=report_type)

        rule_set = self.rule_registry.get_rule_set(report_type)

        errors: List[DetailedValidationError] = []
        warnings: List[DetailedValidationError] = []
        valid_fields = 0
        invalid_fields = 0

        # Field-level validation
        for rule in rule_set.field_rules:
            value = get_field_value(report, rule.field_path)

            if not is_present(value):
                if rule.is_required_for(report):
                    errors.append(self._required_field_error(rule))
                    invalid_fields += 1
                else:
                    valid_fields += 1
                continue

            outcome = self._run_validator(rule, value)
            if not outcome.is_valid:
                errors.append(self._type_validation_error(rule, value, outcome))
                invalid_fields += 1
                continue

            valid_fields += 1

            for business_rule in rule.business_rules:
                if business_rule.evaluate(value, context):
                    continue

                error = self._business_rule_error(rule, business_rule, value)
                if business_rule.severity == ValidationSeverity.LOW:
                    warnings.append(error)
                else:
                    errors.append(error)

        # Cross-field validation
        for cross_rule in rule_set.cross_field_rules:
            values_by_path = self._collect_cross_field_values(report, cross_rule, context)

            if not cross_rule.evaluate(values_by_path, context):
                errors.append(self._cross_field_error(cross_rule, values_by_path))

        elapsed_seconds = time.perf_counter() - start_time
        total_fields = len(rule_set.field_rules)

        counts_by_severity = {severity: 0 for severity in ValidationSeverity}
        for error in errors:
            counts_by_severity[error.severity] += 1

        result = SchemaValidationResult(
            report_type=report_type,
            is_valid=len(errors) == 0,
            errors=tuple(errors),
            warnings=tuple(warnings),
            summary=ValidationSummary(
                total_fields=total_fields,
                valid_fields=valid_fields,
                invalid_fields=invalid_fields,
                counts_by_severity=counts_by_severity
            ),
            performance_metrics=PerformanceMetrics(
                validation_time_ms=elapsed_seconds * 1000,
                fields_per_second=(
                    total_fields / elapsed_seconds if elapsed_seconds > 0 else float(total_fields)
                )
            )
        )

        logger.log_validation(
            report_type=report_type,
            is_valid=result.is_valid,
            error_count=len(errors),
            warning_count=len(warnings),
            duration_ms=result.performance_metrics.validation_time_ms
        )

        return result

    def determine_compliance_status(self, result: SchemaValidationResult) -> ComplianceStatus:
        """
        Determine compliance status of a validation result.

        Business logic:
        1. Any CRITICAL error → non-compliant
        2. Any HIGH error → warning
        3. Otherwise → compliant (warnings never block compliance)

        Args:
            result: Result of validate_report

        Returns:
            ComplianceStatus
        """
        return result.compliance_status

    # =========================================================================
    # HELPER FUNCTIONS
    # =========================================================================

    def _run_validator(self, rule: FieldRule, value: Any) -> ValidationOutcome:
        outcome = rule.validator.validate(value)
        if not isinstance(outcome, ValidationOutcome):
            raise MalformedOutcomeError(rule.data_type, outcome)
        return outcome

    @staticmethod
    def _collect_cross_field_values(
        report: Dict[str, Any],
        cross_rule: CrossFieldRule,
        context: ValidationContext
    ) -> Dict[str, Any]:
        """Values of a cross-field rule's paths; context.cross_field_data fills gaps."""
        values_by_path = {}
        for field_path in cross_rule.fields:
            value = get_field_value(report, field_path)
            if not is_present(value) and field_path in context.cross_field_data:
                value = context.cross_field_data[field_path]
            values_by_path[field_path] = value
        return values_by_path

    def _required_field_error(self, rule: FieldRule) -> DetailedValidationError:
        return DetailedValidationError(
            rule_id=f"REQ_{rule.field_path}",
            rule_name=f"Required Field: {rule.field_name}",
            field_path=rule.field_path,
            field_name=rule.field_name,
            data_type=rule.data_type,
            actual_value=None,
            expected_value="Required field",
            severity=ValidationSeverity.CRITICAL,
            error_code=FIELD_REQUIRED,
            message=f"{rule.field_name} is required but not provided",
            suggestions=(f"Provide a value for {rule.field_name}",)
        )

    def _type_validation_error(
        self,
        rule: FieldRule,
        value: Any,
        outcome: ValidationOutcome
    ) -> DetailedValidationError:
        return DetailedValidationError(
            rule_id=f"VAL_{rule.field_path}",
            rule_name=f"Field Validation: {rule.field_name}",
            field_path=rule.field_path,
            field_name=rule.field_name,
            data_type=rule.data_type,
            actual_value=value,
            expected_value=outcome.message,
            severity=ValidationSeverity.HIGH,
            error_code=outcome.error_code or VALIDATION_ERROR,
            message=outcome.message or "Validation failed",
            suggestions=tuple(self.error_catalog.suggestions_for_data_type(rule.data_type))
        )

    @staticmethod
    def _business_rule_error(
        rule: FieldRule,
        business_rule: BusinessRule,
        value: Any
    ) -> DetailedValidationError:
        return DetailedValidationError(
            rule_id=business_rule.rule_id,
            rule_name=business_rule.name,
            field_path=rule.field_path,
            field_name=rule.field_name,
            data_type=rule.data_type,
            actual_value=value,
            expected_value=business_rule.description or None,
            severity=business_rule.severity,
            error_code=BUSINESS_RULE_VIOLATION,
            message=business_rule.message,
            suggestions=(f"Review {business_rule.description or business_rule.name}",)
        )

    @staticmethod
    def _cross_field_error(
        cross_rule: CrossFieldRule,
        values_by_path: Dict[str, Any]
    ) -> DetailedValidationError:
        joined_fields = ", ".join(cross_rule.fields)
        return DetailedValidationError(
            rule_id=cross_rule.rule_id,
            rule_name=cross_rule.name,
            field_path=joined_fields,
            field_name=joined_fields,
            data_type=CROSS_FIELD_DATA_TYPE,
            actual_value={
                path: (value if is_present(value) else None)
                for path, value in values_by_path.items()
            },
            expected_value=cross_rule.description or None,
            severity=cross_rule.severity,
            error_code=CROSS_FIELD_VALIDATION,
            message=cross_rule.message,
            suggestions=(f"Review relationship between: {joined_fields}",),
            related_fields=tuple(cross_rule.fields)
        )

    def generate_validation_report(
        self,
        result: SchemaValidationResult,
        include_warnings: bool = True
    ) -> str:
        """
        Generate human-readable validation report.

        Args:
            result: Result of validate_report
            include_warnings: Whether to list warnings

        Returns:
            Formatted validation report as string
        """
        report_lines = []

        # Header
        report_lines.append("=" * 80)
        report_lines.append("MAS 610 VRR VALIDATION REPORT")
        report_lines.append("=" * 80)
        report_lines.append(f"Report Type: {result.report_type}")
        report_lines.append(f"Status: {result.compliance_status.value}")
        report_lines.append(f"Validation Time: {result.performance_metrics.validation_time_ms:.2f}ms")
        report_lines.append("")

        # Summary
        summary = result.summary
        report_lines.append("-" * 80)
        report_lines.append("SUMMARY")
        report_lines.append("-" * 80)
        report_lines.append(f"Total Fields Checked: {summary.total_fields}")
        report_lines.append(f"Valid Fields: {summary.valid_fields}")
        report_lines.append(f"Invalid Fields: {summary.invalid_fields}")
        for severity in ValidationSeverity:
            report_lines.append(f"{severity.value.title()} Errors: {summary.counts_by_severity.get(severity, 0)}")
        report_lines.append(f"Warnings: {len(result.warnings)}")
        report_lines.append("")

        if result.errors:
            report_lines.append("-" * 80)
            report_lines.append("ERRORS")
            report_lines.append("-" * 80)
            for error in result.errors:
                report_lines.extend(self._format_error(error))
            report_lines.append("")

        if include_warnings and result.warnings:
            report_lines.append("-" * 80)
            report_lines.append("WARNINGS")
            report_lines.append("-" * 80)
            for warning in result.warnings:
                report_lines.extend(self._format_error(warning))
            report_lines.append("")

        report_lines.append("=" * 80)
        report_lines.append("END OF REPORT")
        report_lines.append("=" * 80)

        return "\n".join(report_lines)

    @staticmethod
    def _format_error(error: DetailedValidationError) -> List[str]:
        lines = [f"\n  [{error.severity.value}] {error.rule_id} {error.field_name}"]
        lines.append(f"      Code: {error.error_code}")
        lines.append(f"      Message: {error.message}")
        if error.actual_value is not None:
            lines.append(f"      Value: {error.actual_value}")
        for suggestion in error.suggestions:
            lines.append(f"        • {suggestion}")
        return lines


# Singleton instance for global access
_validation_engine_instance = None


def get_validation_engine() -> ValidationEngine:
    """
    Get singleton instance of ValidationEngine.

    Returns:
        ValidationEngine instance
    """
    global _validation_engine_instance
    if _validation_engine_instance is None:
        _validation_engine_instance = ValidationEngine()
    return _validation_engine_instance
