"""Tests for the business rule check catalogue and field path extraction."""

import pytest

from vrr_validation.utils.field_paths import ABSENT, get_field_value, is_present
from vrr_validation.validation.business_rules import FIELD_CHECKS, CROSS_FIELD_CHECKS

BALANCE_FIELDS = ("data.totalAssets", "data.totalLiabilities", "data.shareholderEquity")


class TestFieldPaths:

    def test_nested_lookup(self):
        report = {"data": {"loanPortfolio": {"totalLoans": "100.00"}}}
        assert get_field_value(report, "data.loanPortfolio.totalLoans") == "100.00"

    def test_missing_segments_are_absent(self):
        report = {"data": {"totalAssets": "1"}}
        assert get_field_value(report, "data.totalLiabilities") is ABSENT
        assert get_field_value(report, "header.reportingPeriod") is ABSENT
        assert get_field_value(report, "data.totalAssets.value") is ABSENT

    def test_none_is_absent(self):
        assert get_field_value({"data": {"x": None}}, "data.x") is ABSENT

    def test_falsy_values_are_present(self):
        report = {"data": {"zero": 0, "empty": "", "flag": False}}
        for path in ("data.zero", "data.empty", "data.flag"):
            assert is_present(get_field_value(report, path))

    def test_absent_marker(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"
        assert not is_present(ABSENT)


class TestFieldChecks:

    @pytest.mark.parametrize("check, value, expected", [
        ("positive", "0.01", True),
        ("positive", "0", False),
        ("positive", "-5", False),
        ("non_negative", "0", True),
        ("non_negative", "-0.01", False),
        ("positive", "abc", False),
    ])
    def test_sign_checks(self, check, value, expected):
        assert FIELD_CHECKS[check](value) is expected

    def test_minimum_and_maximum(self):
        assert FIELD_CHECKS["minimum_value"]("16.00", None, min_value="16")
        assert not FIELD_CHECKS["minimum_value"]("15.99", None, min_value="16")
        assert FIELD_CHECKS["maximum_value"]("100", None, max_value=100)
        assert not FIELD_CHECKS["maximum_value"]("100.01", None, max_value=100)


class TestCrossFieldChecks:

    def test_balance_sheet_identity(self):
        check = CROSS_FIELD_CHECKS["balance_sheet_identity"]
        values = dict(zip(BALANCE_FIELDS, ["50000000.00", "38000000.00", "12000000.00"]))
        assert check(values, None, fields=BALANCE_FIELDS)

        values["data.shareholderEquity"] = "15000000.00"
        assert not check(values, None, fields=BALANCE_FIELDS)

    def test_balance_sheet_tolerance(self):
        check = CROSS_FIELD_CHECKS["balance_sheet_identity"]
        values = dict(zip(BALANCE_FIELDS, ["100.01", "50.00", "50.00"]))
        assert check(values, None, fields=BALANCE_FIELDS, tolerance="0.01")
        assert not check(values, None, fields=BALANCE_FIELDS, tolerance="0.001")

    def test_absent_values_count_as_zero(self):
        check = CROSS_FIELD_CHECKS["balance_sheet_identity"]
        values = {"data.totalAssets": "100", "data.totalLiabilities": "100", "data.shareholderEquity": ABSENT}
        assert check(values, None, fields=BALANCE_FIELDS)

    def test_unparseable_value_fails(self):
        check = CROSS_FIELD_CHECKS["balance_sheet_identity"]
        values = dict(zip(BALANCE_FIELDS, ["100", "abc", "0"]))
        assert not check(values, None, fields=BALANCE_FIELDS)

    @pytest.mark.parametrize("name, values, fields", [
        ("balance_sheet_identity", {"a": "1E+1000000", "l": "0", "e": "0"}, ("a", "l", "e")),
        ("balance_sheet_identity", {"a": "0", "l": "9E+999999", "e": "9E+999999"}, ("a", "l", "e")),
        ("sum_equals", {"t": "1", "a": "9E+999999", "b": "9E+999999"}, ("t", "a", "b")),
        ("not_greater_than", {"p": "1E+99", "n": "50"}, ("p", "n")),
    ])
    def test_out_of_range_amounts_fail(self, name, values, fields):
        assert not CROSS_FIELD_CHECKS[name](values, None, fields=fields)

    def test_sum_equals(self):
        check = CROSS_FIELD_CHECKS["sum_equals"]
        fields = ("t", "a", "b", "c")
        assert check({"t": "6", "a": "1", "b": "2", "c": "3"}, None, fields=fields)
        assert not check({"t": "7", "a": "1", "b": "2", "c": "3"}, None, fields=fields)

    def test_not_greater_than(self):
        check = CROSS_FIELD_CHECKS["not_greater_than"]
        fields = ("provisions", "npl")
        assert check({"provisions": "50", "npl": "50"}, None, fields=fields)
        assert not check({"provisions": "51", "npl": "50"}, None, fields=fields)
