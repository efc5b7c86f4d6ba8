"""
Application Constants and Enumerations

Defines constants used throughout the validation engine including
severities, compliance statuses, error categories, report types,
validator error codes and cache/batch tuning defaults.

KEY DESIGN PRINCIPLES:

1. DATA PROBLEMS ARE RESULTS, NOT EXCEPTIONS:
   - Every failing field, business rule or cross-field rule becomes a
     DetailedValidationError in the result
   - Only programming or configuration defects raise

2. ALL-AT-ONCE VALIDATION:
   - Validate ALL fields of a report in a single pass
   - Surface every error and warning on the first run

3. STABLE ERROR CODES:
   - Codes drive suggestion lookup, documentation links and retryability
   - Never rename a code without updating error_catalog.yaml
"""

from enum import Enum


class ValidationSeverity(str, Enum):
    """Severity assigned to a validation error"""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ComplianceStatus(str, Enum):
    """Compliance classification of a validated report"""
    PENDING = "pending"
    COMPLIANT = "compliant"
    WARNING = "warning"
    NON_COMPLIANT = "non-compliant"


class ErrorCategory(str, Enum):
    """Category of an enriched error in an error report"""
    SCHEMA_VALIDATION = "SCHEMA_VALIDATION"
    BUSINESS_RULE = "BUSINESS_RULE"
    CROSS_FIELD = "CROSS_FIELD"
    DATA_FORMAT = "DATA_FORMAT"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    PERFORMANCE = "PERFORMANCE"


class ReportType(str, Enum):
    """MAS 610 appendices with registered rule sets"""
    APPENDIX_A1 = "APPENDIX_A1"
    APPENDIX_B1 = "APPENDIX_B1"
    APPENDIX_C1 = "APPENDIX_C1"
    APPENDIX_D1 = "APPENDIX_D1"


# =============================================================================
# ERROR CODES
# =============================================================================

# Engine-level codes
FIELD_REQUIRED = "FIELD_REQUIRED"
VALIDATION_ERROR = "VALIDATION_ERROR"
NO_RULE_FOUND = "NO_RULE_FOUND"
BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
CROSS_FIELD_VALIDATION = "CROSS_FIELD_VALIDATION"

# Typed validator codes
NUMBER_REQUIRED = "NUMBER_REQUIRED"
NUMBER_PATTERN = "NUMBER_PATTERN"
NUMBER_INVALID = "NUMBER_INVALID"
NUMBER_TOTAL_DIGITS = "NUMBER_TOTAL_DIGITS"
NUMBER_FRACTION_DIGITS = "NUMBER_FRACTION_DIGITS"

DATE_REQUIRED = "DATE_REQUIRED"
DATE_FORMAT = "DATE_FORMAT"
DATE_INVALID = "DATE_INVALID"
DATE_PAST_ONLY = "DATE_PAST_ONLY"

EMAIL_REQUIRED = "EMAIL_REQUIRED"
EMAIL_LENGTH = "EMAIL_LENGTH"
EMAIL_FORMAT = "EMAIL_FORMAT"

LEI_REQUIRED = "LEI_REQUIRED"
LEI_LENGTH = "LEI_LENGTH"
LEI_PATTERN = "LEI_PATTERN"
LEI_CHECKSUM = "LEI_CHECKSUM"

YESNONA_REQUIRED = "YESNONA_REQUIRED"
YESNONA_INVALID = "YESNONA_INVALID"
YESNO_REQUIRED = "YESNO_REQUIRED"
YESNO_INVALID = "YESNO_INVALID"

PERCENTAGE_REQUIRED = "PERCENTAGE_REQUIRED"
PERCENTAGE_INVALID = "PERCENTAGE_INVALID"
PERCENTAGE_RANGE = "PERCENTAGE_RANGE"
PERCENTAGE_PRECISION = "PERCENTAGE_PRECISION"

BOOLEAN_REQUIRED = "BOOLEAN_REQUIRED"
BOOLEAN_INVALID = "BOOLEAN_INVALID"

TEXT_REQUIRED = "TEXT_REQUIRED"
TEXT_MIN_LENGTH = "TEXT_MIN_LENGTH"
TEXT_MAX_LENGTH = "TEXT_MAX_LENGTH"
TEXT_PATTERN = "TEXT_PATTERN"

FRN_REQUIRED = "FRN_REQUIRED"
FRN_FORMAT = "FRN_FORMAT"


# Data type label used on cross-field errors
CROSS_FIELD_DATA_TYPE = "Cross-Field"


# Human labels for enumerated VRR codes
YES_NO_NA_LABELS = {"0": "No", "1": "Yes", "2": "N/A"}
YES_NO_LABELS = {"0": "No", "1": "Yes"}


# Regex patterns for format validation
REGEX_PATTERNS = {
    "iso_date": r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$",
    "email": r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
    "lei": r"^[A-Z0-9]{20}$",
    "frn": r"^[A-Z]{2}[0-9]{8}$",
}


# Allowed tolerance for accounting identities (balance sheet, loan totals)
DEFAULT_BALANCE_TOLERANCE = "0.01"

# Largest power of ten a cross-field operand may carry
MAX_AMOUNT_EXPONENT = 28


# Cache & batch defaults (see config/settings.py for env overrides)
DEFAULT_CACHE_TTL_SECONDS = 5 * 60
MAX_CACHE_SIZE = 1000
BATCH_SIZE = 10
PARALLEL_LIMIT = 4
BATCH_DELAY_SECONDS = 0.01
CACHE_CLEANUP_INTERVAL_SECONDS = 60

# Rough per-entry footprint used for the memory usage metric
APPROX_CACHE_ENTRY_BYTES = 1024

# Number of codes reported in error statistics
TOP_ERROR_CODES_LIMIT = 10

# Occurrences of one formatting code needed to trigger a pattern recommendation
PATTERN_RECOMMENDATION_THRESHOLD = 2


# Fields whose values are masked in logs
SENSITIVE_FIELDS = [
    "contact_email",
    "contactemail",
    "email",
]
