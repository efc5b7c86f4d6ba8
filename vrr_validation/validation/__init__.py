"""
Validation Module

Validates MAS 610 reports against the rules in report_rules.yaml.

Components:
- validation_engine.py: Main validation orchestrator
- rule_loader.py: Builds the immutable rule registry from YAML
- field_validators.py: Typed VRR field validators
- business_rules.py: Named business and cross-field checks
"""

from .validation_engine import ValidationEngine, get_validation_engine
from .rule_loader import (
    RuleRegistry,
    FieldRule,
    BusinessRule,
    CrossFieldRule,
    ReportTypeRuleSet,
    get_rule_registry,
)
from .field_validators import (
    VRRValidator,
    NumberValidator,
    DateValidator,
    EmailValidator,
    LEIValidator,
    YesNoNAValidator,
    YesNoValidator,
    PercentageValidator,
    BooleanValidator,
    TextValidator,
    FirmReferenceNumberValidator,
    VRR_VALIDATORS,
    get_validator,
)
from .business_rules import FIELD_CHECKS, CROSS_FIELD_CHECKS

__all__ = [
    # Main components
    "ValidationEngine",
    "get_validation_engine",
    "RuleRegistry",
    "FieldRule",
    "BusinessRule",
    "CrossFieldRule",
    "ReportTypeRuleSet",
    "get_rule_registry",

    # Field validators
    "VRRValidator",
    "NumberValidator",
    "DateValidator",
    "EmailValidator",
    "LEIValidator",
    "YesNoNAValidator",
    "YesNoValidator",
    "PercentageValidator",
    "BooleanValidator",
    "TextValidator",
    "FirmReferenceNumberValidator",
    "VRR_VALIDATORS",
    "get_validator",

    # Rule checks
    "FIELD_CHECKS",
    "CROSS_FIELD_CHECKS",
]
