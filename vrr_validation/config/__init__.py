"""
Configuration Module

Manages engine configuration and lookup tables.

Components:
- constants.py: Enums, error codes and cache/batch defaults
- settings.py: Cache/batch settings with VRR_* environment overrides
- error_catalog.py: Loads suggestion/documentation/quick-fix tables from YAML
- report_rules.yaml: Field and cross-field rules per report type
"""

from .constants import ValidationSeverity, ComplianceStatus, ErrorCategory, ReportType
from .settings import OptimizerSettings
from .error_catalog import ErrorCatalog, QuickFixTemplate, get_error_catalog

__all__ = [
    "ValidationSeverity",
    "ComplianceStatus",
    "ErrorCategory",
    "ReportType",
    "OptimizerSettings",
    "ErrorCatalog",
    "QuickFixTemplate",
    "get_error_catalog",
]
