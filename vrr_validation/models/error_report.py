"""
Error Report Data Models

Defines enriched errors, quick fixes, error reports and rolling
error statistics produced by the error reporting layer.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime
from ..config.constants import ValidationSeverity, ErrorCategory


def _zero_by_category() -> Dict[ErrorCategory, int]:
    return {category: 0 for category in ErrorCategory}


def _zero_by_severity() -> Dict[ValidationSeverity, int]:
    return {severity: 0 for severity in ValidationSeverity}


class ErrorContext(BaseModel):
    """Where and when a batch of errors was produced"""

    report_id: str = Field(..., description="Identifier of the validated report")
    report_type: str = Field(..., description="Report type (e.g., APPENDIX_A1)")
    institution_code: str = Field(..., description="Reporting institution code")
    timestamp: datetime = Field(default_factory=datetime.now, description="When validation ran")
    user_id: Optional[str] = Field(None, description="User who triggered validation")
    session_id: Optional[str] = Field(None, description="Session identifier")
    environment: str = Field("production", description="Deployment environment")


class EnrichedValidationError(BaseModel):
    """A validation error with suggestions, documentation and retry hints"""

    error_id: str = Field(..., description="Unique identifier of this error occurrence")
    category: ErrorCategory = Field(..., description="Error category")
    severity: ValidationSeverity = Field(..., description="Severity carried over from validation")
    code: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Failure message")
    description: str = Field(..., description="Longer description")
    field_path: Optional[str] = Field(None, description="Field path the error belongs to")
    actual_value: Optional[Any] = Field(None, description="Value found in the report")
    expected_value: Optional[Any] = Field(None, description="What the rule expected")
    related_fields: List[str] = Field(default_factory=list, description="Fields of a cross-field rule")
    context: ErrorContext = Field(..., description="Report context")
    suggestions: List[str] = Field(default_factory=list, description="How to fix it")
    documentation: str = Field(..., description="Documentation URL")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the error was created")
    is_retryable: bool = Field(False, description="Formatting error that a corrected retry may clear")
    retry_count: int = Field(0, ge=0)
    max_retries: int = Field(3, ge=0)


class QuickFix(BaseModel):
    """Remediation template applied to all errors sharing one code"""

    fix_id: str
    title: str
    description: str
    target_errors: List[str] = Field(default_factory=list, description="error_id values this fix addresses")
    auto_applicable: bool = False
    estimated_time: str = "unknown"
    instructions: List[str] = Field(default_factory=list)


class ErrorReportSummary(BaseModel):
    """Counts for one error report"""

    total_errors: int = 0
    errors_by_category: Dict[ErrorCategory, int] = Field(default_factory=_zero_by_category)
    errors_by_severity: Dict[ValidationSeverity, int] = Field(default_factory=_zero_by_severity)
    critical_error_count: int = 0
    retryable_error_count: int = 0


class ReportMetadata(BaseModel):
    """Identity of the report an error report describes"""

    report_type: str
    institution_code: str
    reporting_period: str = Field(..., description="YYYY-MM of the validation timestamp")


class ErrorReport(BaseModel):
    """Actionable error report for one validated report"""

    report_id: str
    summary: ErrorReportSummary
    errors: List[EnrichedValidationError] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    quick_fixes: List[QuickFix] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)
    report_metadata: ReportMetadata


class ErrorCodeFrequency(BaseModel):
    """How often one code appears in the error history"""

    code: str
    count: int
    percentage: float = Field(..., ge=0.0, le=100.0)


class ErrorStatistics(BaseModel):
    """Rolling statistics over every error created by a reporter"""

    total_errors: int = 0
    errors_by_category: Dict[ErrorCategory, int] = Field(default_factory=_zero_by_category)
    errors_by_severity: Dict[ValidationSeverity, int] = Field(default_factory=_zero_by_severity)
    top_error_codes: List[ErrorCodeFrequency] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)
