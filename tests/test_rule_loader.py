"""Tests for the rule registry and its YAML loading."""

import pytest
from pydantic import ValidationError

from vrr_validation.config.constants import ValidationSeverity
from vrr_validation.utils.error_handler import RuleConfigurationError, ErrorCode, ErrorLevel
from vrr_validation.validation.rule_loader import (
    RuleRegistry,
    FieldRule,
    BusinessRule,
    CrossFieldRule,
    get_rule_registry,
)
from vrr_validation.validation.field_validators import LEIValidator, NumberValidator


def _document(**type_data):
    """Minimal rule document with one report type."""
    return {
        "common_rules": [
            {"field_path": "header.institutionLEI", "field_name": "Institution LEI",
             "data_type": "VRR_LEI", "required": True},
        ],
        "report_types": {"TEST": type_data},
    }


class TestPackagedRules:
    """Test the rules shipped in report_rules.yaml."""

    def test_report_types(self, rule_registry):
        assert rule_registry.get_report_types() == [
            "APPENDIX_A1", "APPENDIX_B1", "APPENDIX_C1", "APPENDIX_D1"
        ]
        assert rule_registry.has_report_type("APPENDIX_A1")
        assert not rule_registry.has_report_type("APPENDIX_Z9")

    def test_a1_rules_in_declaration_order(self, rule_registry):
        paths = [rule.field_path for rule in rule_registry.get_rules("APPENDIX_A1")]
        assert paths == [
            "header.reportingInstitution",
            "header.reportingPeriod",
            "header.submissionDate",
            "header.firmReferenceNumber",
            "header.parentInstitutionName",
            "header.parentInstitutionLEI",
            "data.totalAssets",
            "data.totalLiabilities",
            "data.shareholderEquity",
            "header.institutionLEI",
            "header.contactEmail",
            "header.isConsolidated",
        ]

    def test_common_rules_appended_to_every_type(self, rule_registry):
        for report_type in rule_registry.get_report_types():
            paths = [rule.field_path for rule in rule_registry.get_rules(report_type)]
            assert paths[-3:] == ["header.institutionLEI", "header.contactEmail", "header.isConsolidated"]

    def test_business_rules_parsed(self, rule_registry):
        rule = rule_registry.get_rule("APPENDIX_A1", "data.totalAssets")
        assert len(rule.business_rules) == 1
        business_rule = rule.business_rules[0]
        assert business_rule.rule_id == "BR001"
        assert business_rule.severity == ValidationSeverity.HIGH
        assert business_rule.check == "positive"

        ratio_rule = rule_registry.get_rule("APPENDIX_C1", "data.liquidity.liquidityRatio")
        assert ratio_rule.business_rules[0].severity == ValidationSeverity.LOW
        assert ratio_rule.business_rules[0].params == {"min_value": "16"}

    def test_cross_field_rules(self, rule_registry):
        cfr001 = rule_registry.get_cross_field_rules("APPENDIX_A1")[0]
        assert cfr001.rule_id == "CFR001"
        assert cfr001.severity == ValidationSeverity.CRITICAL
        assert cfr001.fields == ("data.totalAssets", "data.totalLiabilities", "data.shareholderEquity")

        b1_ids = [rule.rule_id for rule in rule_registry.get_cross_field_rules("APPENDIX_B1")]
        assert b1_ids == ["CFR002", "CFR003"]
        assert rule_registry.get_cross_field_rules("APPENDIX_C1") == []

    def test_validator_bound_to_rule(self, rule_registry):
        assert isinstance(rule_registry.get_rule("APPENDIX_A1", "header.institutionLEI").validator, LEIValidator)
        assert isinstance(rule_registry.get_rule("APPENDIX_A1", "data.totalAssets").validator, NumberValidator)

    def test_unknown_report_type_is_empty(self, rule_registry):
        assert rule_registry.get_rules("APPENDIX_Z9") == []
        assert rule_registry.get_cross_field_rules("APPENDIX_Z9") == []
        assert rule_registry.get_rule("APPENDIX_Z9", "data.totalAssets") is None

    def test_unknown_path(self, rule_registry):
        assert rule_registry.get_rule("APPENDIX_A1", "data.unknownField") is None

    def test_returned_lists_are_copies(self, rule_registry):
        rules = rule_registry.get_rules("APPENDIX_A1")
        rules.clear()
        assert len(rule_registry.get_rules("APPENDIX_A1")) == 12

    def test_singleton(self):
        assert get_rule_registry() is get_rule_registry()


class TestRuleImmutability:

    def test_field_rule_is_frozen(self, rule_registry):
        rule = rule_registry.get_rule("APPENDIX_A1", "data.totalAssets")
        with pytest.raises(ValidationError):
            rule.required = False

    def test_business_rule_is_frozen(self, rule_registry):
        business_rule = rule_registry.get_rule("APPENDIX_A1", "data.totalAssets").business_rules[0]
        with pytest.raises(ValidationError):
            business_rule.severity = ValidationSeverity.LOW

    def test_cross_field_rule_is_frozen(self, rule_registry):
        rule = rule_registry.get_cross_field_rules("APPENDIX_A1")[0]
        with pytest.raises(ValidationError):
            rule.fields = ("data.totalAssets",)


class TestRuleMerging:
    """Test how common rules combine with report-type rules."""

    def test_type_rule_overrides_common_rule(self):
        registry = RuleRegistry.from_dict(_document(field_rules=[
            {"field_path": "data.amount", "field_name": "Amount", "data_type": "VRR_Number_14_2"},
            {"field_path": "header.institutionLEI", "field_name": "Optional LEI",
             "data_type": "VRR_LEI", "required": False},
        ]))

        rules = registry.get_rules("TEST")
        assert [rule.field_path for rule in rules] == ["data.amount", "header.institutionLEI"]
        assert rules[1].field_name == "Optional LEI"
        assert rules[1].required is False

    def test_type_without_field_rules_gets_common_rules(self):
        registry = RuleRegistry.from_dict(_document())
        assert [rule.field_path for rule in registry.get_rules("TEST")] == ["header.institutionLEI"]

    def test_loads_from_file(self, tmp_path):
        rules_file = tmp_path / "rules.yaml"
        rules_file.write_text(
            "report_types:\n"
            "  TEST:\n"
            "    field_rules:\n"
            "      - field_path: data.amount\n"
            "        field_name: Amount\n"
            "        data_type: VRR_Number_14\n"
            "        required: true\n",
            encoding="utf-8"
        )

        registry = RuleRegistry(rules_path=rules_file)
        assert registry.rules_path == rules_file
        assert registry.get_rule("TEST", "data.amount").required is True


class TestRuleConfigurationErrors:
    """Configuration defects are reported when the registry is built."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry(rules_path=tmp_path / "missing.yaml")
        assert exc_info.value.code == ErrorCode.RULE_FILE_NOT_FOUND
        assert exc_info.value.level == ErrorLevel.CRITICAL

    def test_invalid_yaml(self, tmp_path):
        rules_file = tmp_path / "broken.yaml"
        rules_file.write_text("report_types: [unclosed\n", encoding="utf-8")

        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry(rules_path=rules_file)
        assert exc_info.value.code == ErrorCode.RULE_FILE_INVALID
        assert "original_error" in exc_info.value.details

    def test_document_must_be_mapping(self, tmp_path):
        rules_file = tmp_path / "list.yaml"
        rules_file.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(RuleConfigurationError):
            RuleRegistry(rules_path=rules_file)

    def test_report_types_must_be_mapping(self):
        with pytest.raises(RuleConfigurationError):
            RuleRegistry.from_dict({"report_types": ["APPENDIX_A1"]})

    def test_duplicate_field_path(self):
        rule = {"field_path": "data.amount", "field_name": "Amount", "data_type": "VRR_Number_14"}
        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry.from_dict(_document(field_rules=[rule, dict(rule)]))
        assert exc_info.value.code == ErrorCode.DUPLICATE_FIELD_RULE
        assert exc_info.value.details["field_path"] == "data.amount"

    def test_unknown_data_type(self):
        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry.from_dict(_document(field_rules=[
                {"field_path": "data.amount", "field_name": "Amount", "data_type": "VRR_Money"},
            ]))
        assert exc_info.value.code == ErrorCode.UNKNOWN_DATA_TYPE

    def test_unknown_business_check(self):
        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry.from_dict(_document(field_rules=[{
                "field_path": "data.amount", "field_name": "Amount", "data_type": "VRR_Number_14",
                "business_rules": [{
                    "rule_id": "BR900", "name": "Odd", "severity": "HIGH",
                    "check": "is_odd", "message": "Amount must be odd",
                }],
            }]))
        assert exc_info.value.code == ErrorCode.UNKNOWN_RULE_CHECK

    def test_unknown_cross_field_check(self):
        with pytest.raises(RuleConfigurationError) as exc_info:
            RuleRegistry.from_dict(_document(cross_field_rules=[{
                "rule_id": "CFR900", "name": "Ratio", "severity": "HIGH",
                "fields": ["data.a", "data.b"], "check": "ratio_between", "message": "Bad ratio",
            }]))
        assert exc_info.value.code == ErrorCode.UNKNOWN_RULE_CHECK

    def test_cross_field_rule_needs_fields(self):
        with pytest.raises(RuleConfigurationError):
            RuleRegistry.from_dict(_document(cross_field_rules=[{
                "rule_id": "CFR900", "name": "Empty", "severity": "HIGH",
                "fields": [], "check": "sum_equals", "message": "Nothing to sum",
            }]))

    def test_field_rule_missing_data_type(self):
        with pytest.raises(RuleConfigurationError):
            RuleRegistry.from_dict(_document(field_rules=[
                {"field_path": "data.amount", "field_name": "Amount"},
            ]))

    def test_invalid_severity(self):
        with pytest.raises(RuleConfigurationError):
            RuleRegistry.from_dict(_document(field_rules=[{
                "field_path": "data.amount", "field_name": "Amount", "data_type": "VRR_Number_14",
                "business_rules": [{
                    "rule_id": "BR900", "name": "Positive", "severity": "URGENT",
                    "check": "positive", "message": "Must be positive",
                }],
            }]))


class TestConditionalRequirement:
    """Test FieldRule.is_required_for."""

    def setup_method(self):
        self.rule = FieldRule(
            field_path="header.parentInstitutionLEI",
            field_name="Parent Institution LEI",
            data_type="VRR_LEI",
            conditional=True,
            dependencies=("header.parentInstitutionName",)
        )

    def test_required_when_dependency_present(self):
        report = {"header": {"parentInstitutionName": "Parent Holdings"}}
        assert self.rule.is_required_for(report)

    def test_not_required_when_dependency_absent(self):
        assert not self.rule.is_required_for({"header": {}})
        assert not self.rule.is_required_for({"header": {"parentInstitutionName": None}})

    def test_all_dependencies_must_be_present(self):
        rule = self.rule.model_copy(update={"dependencies": ("header.a", "header.b")})
        assert not rule.is_required_for({"header": {"a": "x"}})
        assert rule.is_required_for({"header": {"a": "x", "b": "y"}})

    def test_required_rule_always_required(self):
        rule = FieldRule(field_path="data.x", field_name="X", data_type="VRR_Text", required=True)
        assert rule.is_required_for({})

    def test_conditional_without_dependencies_is_optional(self):
        rule = FieldRule(field_path="data.x", field_name="X", data_type="VRR_Text", conditional=True)
        assert not rule.is_required_for({"data": {"x": "1"}})


class TestRuleEvaluation:

    def test_business_rule_evaluate(self):
        rule = BusinessRule(
            rule_id="BR100", name="Floor", severity=ValidationSeverity.HIGH,
            check="minimum_value", params={"min_value": "10"}, message="Below floor"
        )
        assert rule.evaluate("10.00")
        assert not rule.evaluate("9.99")

    def test_cross_field_rule_evaluate(self):
        rule = CrossFieldRule(
            rule_id="CFR100", name="Sum", severity=ValidationSeverity.HIGH,
            fields=("data.total", "data.a", "data.b"), check="sum_equals", message="Totals differ"
        )
        assert rule.evaluate({"data.total": "30", "data.a": "10", "data.b": "20"})
        assert not rule.evaluate({"data.total": "31", "data.a": "10", "data.b": "20"})
