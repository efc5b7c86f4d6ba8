"""
Validation Result Data Models

Defines the structure for validation results including typed-field
outcomes, detailed errors and report-level schema validation results.
"""

from pydantic import BaseModel, Field
from typing import Tuple, Optional, Dict, Any
from datetime import date
from ..config.constants import ValidationSeverity, ComplianceStatus


class ValidationOutcome(BaseModel):
    """Result of validating one raw value against one VRR data type"""

    is_valid: bool = Field(..., description="Whether the value passed validation")
    error_code: Optional[str] = Field(None, description="Stable error code on failure")
    message: Optional[str] = Field(None, description="Human-readable failure message")
    normalized_value: Optional[Any] = Field(None, description="Canonical form of a valid value")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "is_valid": True,
                "error_code": None,
                "message": None,
                "normalized_value": "1234567890.12"
            }
        }

    @classmethod
    def ok(cls, normalized_value: Any = None) -> "ValidationOutcome":
        return cls(is_valid=True, normalized_value=normalized_value)

    @classmethod
    def fail(cls, error_code: str, message: str) -> "ValidationOutcome":
        return cls(is_valid=False, error_code=error_code, message=message)


class ReportingPeriod(BaseModel):
    """Inclusive reporting period"""

    start: date
    end: date

    class Config:
        frozen = True


class ValidationContext(BaseModel):
    """Read-only input threaded through validators and rules for one call"""

    report_type: str = Field(..., description="Report type identifier (e.g., APPENDIX_A1)")
    reporting_period: Optional[ReportingPeriod] = Field(None, description="Period covered by the report")
    institution_data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Reference data about the reporting institution"
    )
    cross_field_data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional values available to cross-field rules"
    )

    class Config:
        frozen = True


class DetailedValidationError(BaseModel):
    """One failed field rule, business rule, or cross-field rule"""

    rule_id: str = Field(..., description="Identifier of the failing rule")
    rule_name: str = Field(..., description="Human-readable rule name")
    field_path: str = Field(..., description="Dotted path of the field (comma-joined for cross-field)")
    field_name: str = Field(..., description="Display name of the field")
    data_type: str = Field(..., description="VRR data type of the field")
    actual_value: Optional[Any] = Field(None, description="Value found in the report")
    expected_value: Optional[Any] = Field(None, description="What the rule expected")
    severity: ValidationSeverity = Field(..., description="CRITICAL, HIGH, MEDIUM or LOW")
    error_code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Failure message")
    suggestions: Tuple[str, ...] = Field(default_factory=tuple, description="How to fix it")
    related_fields: Optional[Tuple[str, ...]] = Field(
        None,
        description="Field paths involved in a cross-field rule"
    )

    class Config:
        frozen = True


class ValidationSummary(BaseModel):
    """Field counts and severity buckets for one validation run"""

    total_fields: int = Field(0, description="Field rules evaluated")
    valid_fields: int = Field(0, description="Fields that passed type validation")
    invalid_fields: int = Field(0, description="Fields missing or failing type validation")
    counts_by_severity: Dict[ValidationSeverity, int] = Field(
        default_factory=lambda: {severity: 0 for severity in ValidationSeverity},
        description="Error counts per severity (warnings excluded)"
    )

    class Config:
        frozen = True

    @property
    def critical_errors(self) -> int:
        return self.counts_by_severity.get(ValidationSeverity.CRITICAL, 0)

    @property
    def high_errors(self) -> int:
        return self.counts_by_severity.get(ValidationSeverity.HIGH, 0)

    @property
    def medium_errors(self) -> int:
        return self.counts_by_severity.get(ValidationSeverity.MEDIUM, 0)

    @property
    def low_errors(self) -> int:
        return self.counts_by_severity.get(ValidationSeverity.LOW, 0)


class PerformanceMetrics(BaseModel):
    """Timing of one validation run"""

    validation_time_ms: float = Field(0.0, ge=0.0, description="Elapsed wall time")
    fields_per_second: float = Field(
        0.0,
        ge=0.0,
        description="total_fields / elapsed seconds; total_fields when elapsed is zero"
    )

    class Config:
        frozen = True


class SchemaValidationResult(BaseModel):
    """Terminal output of one engine invocation"""

    report_type: str = Field(..., description="Report type the rules were taken from")
    is_valid: bool = Field(..., description="True when there are no errors")
    errors: Tuple[DetailedValidationError, ...] = Field(default_factory=tuple)
    warnings: Tuple[DetailedValidationError, ...] = Field(default_factory=tuple)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "report_type": "APPENDIX_A1",
                "is_valid": False,
                "errors": [
                    {
                        "rule_id": "CFR001",
                        "rule_name": "Balance Sheet Equation",
                        "field_path": "data.totalAssets, data.totalLiabilities, data.shareholderEquity",
                        "field_name": "data.totalAssets, data.totalLiabilities, data.shareholderEquity",
                        "data_type": "Cross-Field",
                        "severity": "CRITICAL",
                        "error_code": "CROSS_FIELD_VALIDATION",
                        "message": "Balance sheet equation must balance: Assets = Liabilities + Equity"
                    }
                ],
                "warnings": [],
                "summary": {
                    "total_fields": 9,
                    "valid_fields": 9,
                    "invalid_fields": 0
                },
                "performance_metrics": {
                    "validation_time_ms": 0.42,
                    "fields_per_second": 21428.6
                }
            }
        }

    @property
    def compliance_status(self) -> ComplianceStatus:
        """
        Classify the result for submission.

        Any CRITICAL error makes the report non-compliant; HIGH errors
        without CRITICAL ones downgrade it to a warning. Warnings never
        affect the status.
        """
        if self.summary.critical_errors > 0:
            return ComplianceStatus.NON_COMPLIANT
        if self.summary.high_errors > 0:
            return ComplianceStatus.WARNING
        return ComplianceStatus.COMPLIANT
