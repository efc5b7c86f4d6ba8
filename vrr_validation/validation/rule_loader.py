"""
Validation Rule Registry

Loads and parses report validation rules from report_rules.yaml.
Provides type-safe, immutable access to the field rules and cross-field
rules of each report type.
"""

import yaml
from pathlib import Path
from typing import Dict, Optional, List, Any, Tuple
from pydantic import BaseModel, Field, ValidationError
from functools import lru_cache

from ..config.constants import ValidationSeverity
from ..models.validation_result import ValidationContext
from ..utils.error_handler import RuleConfigurationError, ErrorCode
from ..utils.field_paths import get_field_value, is_present
from ..utils.logger import get_module_logger
from .field_validators import VRRValidator, get_validator, VRR_VALIDATORS
from .business_rules import FIELD_CHECKS, CROSS_FIELD_CHECKS

logger = get_module_logger()


class BusinessRule(BaseModel):
    """Semantic check on a single field that already passed type validation"""

    rule_id: str = Field(..., description="Rule identifier (e.g., BR001)")
    name: str = Field(..., description="Human-readable rule name")
    description: str = Field("", description="What the rule enforces")
    severity: ValidationSeverity = Field(..., description="Severity of a violation; LOW becomes a warning")
    check: str = Field(..., description="Name of a FIELD_CHECKS predicate")
    params: Dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the check")
    message: str = Field(..., description="Error message for a violation")

    class Config:
        frozen = True

    def evaluate(self, value: Any, context: Optional[ValidationContext] = None) -> bool:
        return FIELD_CHECKS[self.check](value, context, **self.params)


class CrossFieldRule(BaseModel):
    """Consistency check across several fields of one report"""

    rule_id: str = Field(..., description="Rule identifier (e.g., CFR001)")
    name: str = Field(..., description="Human-readable rule name")
    description: str = Field("", description="What the rule enforces")
    severity: ValidationSeverity = Field(..., description="Severity of a violation")
    fields: Tuple[str, ...] = Field(..., min_length=1, description="Field paths the rule reads, in order")
    check: str = Field(..., description="Name of a CROSS_FIELD_CHECKS predicate")
    params: Dict[str, Any] = Field(default_factory=dict, description="Keyword arguments for the check")
    message: str = Field(..., description="Error message for a violation")

    class Config:
        frozen = True

    def evaluate(self, values_by_path: Dict[str, Any], context: Optional[ValidationContext] = None) -> bool:
        return CROSS_FIELD_CHECKS[self.check](values_by_path, context, fields=self.fields, **self.params)


class FieldRule(BaseModel):
    """Validation rule for a single report field"""

    field_path: str = Field(..., description="Dotted path into the report (e.g., data.totalAssets)")
    field_name: str = Field(..., description="Display name of the field")
    data_type: str = Field(..., description="VRR data type (key of VRR_VALIDATORS)")
    required: bool = Field(False, description="Whether the field must be present")
    conditional: bool = Field(False, description="Required only when every dependency is present")
    dependencies: Tuple[str, ...] = Field(default_factory=tuple, description="Paths a conditional field depends on")
    business_rules: Tuple[BusinessRule, ...] = Field(default_factory=tuple)

    class Config:
        frozen = True

    @property
    def validator(self) -> VRRValidator:
        return get_validator(self.data_type)

    def is_required_for(self, report: Any) -> bool:
        """
        Decide whether this field must be present in a given report.

        Args:
            report: Report payload

        Returns:
            True if the field is required, or conditional with all
            dependencies present
        """
        if self.required:
            return True
        if self.conditional and self.dependencies:
            return all(is_present(get_field_value(report, path)) for path in self.dependencies)
        return False


class ReportTypeRuleSet(BaseModel):
    """Ordered field rules and cross-field rules of one report type"""

    report_type: str
    field_rules: Tuple[FieldRule, ...] = Field(default_factory=tuple)
    cross_field_rules: Tuple[CrossFieldRule, ...] = Field(default_factory=tuple)

    class Config:
        frozen = True


class RuleRegistry:
    """
    Loads and manages report validation rules from YAML configuration.

    The registry is built once; rule sets are immutable afterwards.
    Configuration defects (unknown data types, unknown checks, duplicate
    field paths) raise RuleConfigurationError here, never during
    validation.
    """

    def __init__(self, rules_path: Optional[Path] = None, rules_data: Optional[Dict[str, Any]] = None):
        """
        Initialize the RuleRegistry.

        Args:
            rules_path: Path to report_rules.yaml. If None, uses default location.
            rules_data: Already-parsed rule document; skips file loading.
        """
        if rules_data is None:
            if rules_path is None:
                rules_path = Path(__file__).parent.parent / "config" / "report_rules.yaml"
            self.rules_path: Optional[Path] = Path(rules_path)
            rules_data = self._load_yaml(self.rules_path)
        else:
            self.rules_path = None

        self._rule_sets: Dict[str, ReportTypeRuleSet] = self._build(rules_data)

        logger.info(
            "Rule registry loaded",
            source=str(self.rules_path) if self.rules_path else "mapping",
            report_types=list(self._rule_sets.keys())
        )

    @classmethod
    def from_dict(cls, rules_data: Dict[str, Any]) -> "RuleRegistry":
        """Build a registry from an in-memory rule document."""
        return cls(rules_data=rules_data)

    # =========================================================================
    # LOADING
    # =========================================================================

    @staticmethod
    def _load_yaml(rules_path: Path) -> Dict[str, Any]:
        if not rules_path.exists():
            raise RuleConfigurationError(
                f"Validation rules file not found: {rules_path}",
                code=ErrorCode.RULE_FILE_NOT_FOUND,
                details={'path': str(rules_path)}
            )

        try:
            with open(rules_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleConfigurationError(
                f"Failed to parse YAML file {rules_path}",
                details={'path': str(rules_path)},
                cause=e
            )

    def _build(self, rules_data: Any) -> Dict[str, ReportTypeRuleSet]:
        if not isinstance(rules_data, dict):
            raise RuleConfigurationError("Validation rules document must be a mapping")

        common_rules = self._parse_field_rules(rules_data.get('common_rules') or [], "common_rules")
        self._check_unique_paths(common_rules, "common_rules")

        rule_sets: Dict[str, ReportTypeRuleSet] = {}
        report_types = rules_data.get('report_types') or {}
        if not isinstance(report_types, dict):
            raise RuleConfigurationError("'report_types' must be a mapping of report type to rules")

        for report_type, type_data in report_types.items():
            type_data = type_data or {}
            own_rules = self._parse_field_rules(type_data.get('field_rules') or [], report_type)
            self._check_unique_paths(own_rules, report_type)

            # Report-type rules win over common rules on the same path
            own_paths = {rule.field_path for rule in own_rules}
            merged = own_rules + [rule for rule in common_rules if rule.field_path not in own_paths]

            cross_field_rules = self._parse_cross_field_rules(
                type_data.get('cross_field_rules') or [],
                report_type
            )

            rule_sets[report_type] = ReportTypeRuleSet(
                report_type=report_type,
                field_rules=tuple(merged),
                cross_field_rules=tuple(cross_field_rules)
            )

        return rule_sets

    def _parse_field_rules(self, raw_rules: List[Dict[str, Any]], scope: str) -> List[FieldRule]:
        rules = []
        for raw_rule in raw_rules:
            try:
                rule = FieldRule(**raw_rule)
            except (ValidationError, TypeError) as e:
                raise RuleConfigurationError(
                    f"Invalid field rule in '{scope}'",
                    details={'scope': scope, 'rule': raw_rule},
                    cause=e
                )

            if rule.data_type not in VRR_VALIDATORS:
                raise RuleConfigurationError(
                    f"Unknown data type '{rule.data_type}' for field '{rule.field_path}'",
                    code=ErrorCode.UNKNOWN_DATA_TYPE,
                    details={'scope': scope, 'field_path': rule.field_path}
                )

            for business_rule in rule.business_rules:
                if business_rule.check not in FIELD_CHECKS:
                    raise RuleConfigurationError(
                        f"Unknown business rule check '{business_rule.check}' in rule {business_rule.rule_id}",
                        code=ErrorCode.UNKNOWN_RULE_CHECK,
                        details={'scope': scope, 'rule_id': business_rule.rule_id}
                    )

            rules.append(rule)
        return rules

    def _parse_cross_field_rules(self, raw_rules: List[Dict[str, Any]], scope: str) -> List[CrossFieldRule]:
        rules = []
        for raw_rule in raw_rules:
            try:
                rule = CrossFieldRule(**raw_rule)
            except (ValidationError, TypeError) as e:
                raise RuleConfigurationError(
                    f"Invalid cross-field rule in '{scope}'",
                    details={'scope': scope, 'rule': raw_rule},
                    cause=e
                )

            if rule.check not in CROSS_FIELD_CHECKS:
                raise RuleConfigurationError(
                    f"Unknown cross-field check '{rule.check}' in rule {rule.rule_id}",
                    code=ErrorCode.UNKNOWN_RULE_CHECK,
                    details={'scope': scope, 'rule_id': rule.rule_id}
                )

            rules.append(rule)
        return rules

    @staticmethod
    def _check_unique_paths(rules: List[FieldRule], scope: str) -> None:
        seen = set()
        for rule in rules:
            if rule.field_path in seen:
                raise RuleConfigurationError(
                    f"Duplicate field rule for '{rule.field_path}' in '{scope}'",
                    code=ErrorCode.DUPLICATE_FIELD_RULE,
                    details={'scope': scope, 'field_path': rule.field_path}
                )
            seen.add(rule.field_path)

    # =========================================================================
    # ACCESS
    # =========================================================================

    def get_rule_set(self, report_type: str) -> ReportTypeRuleSet:
        """
        Get the rule set of a report type.

        Args:
            report_type: Report type identifier (e.g., "APPENDIX_A1")

        Returns:
            ReportTypeRuleSet; empty for an unknown report type
        """
        rule_set = self._rule_sets.get(report_type)
        if rule_set is None:
            return ReportTypeRuleSet(report_type=report_type)
        return rule_set

    def get_rules(self, report_type: str) -> List[FieldRule]:
        """
        Get field rules of a report type in evaluation order.

        Args:
            report_type: Report type identifier

        Returns:
            List of FieldRule objects (a copy; empty for unknown types)
        """
        return list(self.get_rule_set(report_type).field_rules)

    def get_rule(self, report_type: str, field_path: str) -> Optional[FieldRule]:
        """
        Get the rule for one field path.

        Args:
            report_type: Report type identifier
            field_path: Dotted field path

        Returns:
            FieldRule object, or None if no rule covers the path
        """
        for rule in self.get_rule_set(report_type).field_rules:
            if rule.field_path == field_path:
                return rule
        return None

    def get_cross_field_rules(self, report_type: str) -> List[CrossFieldRule]:
        """Get cross-field rules of a report type (empty for unknown types)."""
        return list(self.get_rule_set(report_type).cross_field_rules)

    def get_report_types(self) -> List[str]:
        """
        Get list of all configured report types.

        Returns:
            List of report type identifiers
        """
        return list(self._rule_sets.keys())

    def has_report_type(self, report_type: str) -> bool:
        return report_type in self._rule_sets


# Singleton instance for global access
@lru_cache(maxsize=1)
def get_rule_registry() -> RuleRegistry:
    """
    Get singleton instance of RuleRegistry.

    Uses LRU cache to ensure only one instance is created.

    Returns:
        RuleRegistry instance
    """
    return RuleRegistry()
