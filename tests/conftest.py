"""Pytest configuration and shared fixtures."""

import copy
from datetime import date, datetime

import pytest

from vrr_validation.config.settings import OptimizerSettings
from vrr_validation.models.validation_result import ValidationContext, ReportingPeriod
from vrr_validation.models.error_report import ErrorContext
from vrr_validation.validation.rule_loader import RuleRegistry
from vrr_validation.validation.validation_engine import ValidationEngine


# LEIs whose last two characters are the ISO 17442 check digits of the first 18
VALID_LEI = "529900T8BM49AURSDO55"
OTHER_VALID_LEIS = ["HWUPKR0MPOU8FGXBT394", "7LTWFZYICNSX8D621K86", "5493001RKR6KSZQBD290"]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingEngine(ValidationEngine):
    """ValidationEngine that counts how often it is asked to validate."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.report_calls = 0
        self.field_calls = 0

    def validate_report(self, report, report_type, context=None):
        self.report_calls += 1
        return super().validate_report(report, report_type, context)

    def validate_field(self, field_path, value, report_type, context=None):
        self.field_calls += 1
        return super().validate_field(field_path, value, report_type, context)


def _header(**overrides):
    header = {
        "reportingInstitution": "Example Bank Ltd",
        "reportingPeriod": "2025-06-30",
        "submissionDate": "2025-07-15",
        "institutionLEI": VALID_LEI,
        "contactEmail": "Compliance@ExampleBank.com",
        "isConsolidated": "true",
    }
    header.update(overrides)
    return header


@pytest.fixture(scope="session")
def rule_registry():
    """Packaged rule registry."""
    return RuleRegistry()


@pytest.fixture
def engine(rule_registry):
    """Validation engine over the packaged rules."""
    return ValidationEngine(rule_registry=rule_registry)


@pytest.fixture
def counting_engine(rule_registry):
    """Validation engine that counts calls."""
    return CountingEngine(rule_registry=rule_registry)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def optimizer_settings():
    """Small, deterministic optimizer settings (no auto drain)."""
    return OptimizerSettings(
        default_ttl_seconds=60,
        max_cache_size=100,
        batch_size=10,
        parallel_limit=4,
        batch_delay_seconds=0,
        cleanup_interval_seconds=60,
        auto_drain=False
    )


@pytest.fixture
def a1_context():
    return ValidationContext(
        report_type="APPENDIX_A1",
        reporting_period=ReportingPeriod(start=date(2025, 4, 1), end=date(2025, 6, 30))
    )


@pytest.fixture
def valid_a1_report():
    """Balanced Appendix A1 report: 50M assets = 38M liabilities + 12M equity."""
    return {
        "reportId": "RPT-A1-001",
        "institutionCode": "INST001",
        "sections": [],
        "header": _header(),
        "data": {
            "totalAssets": "50000000.00",
            "totalLiabilities": "38000000.00",
            "shareholderEquity": "12000000.00",
        },
    }


@pytest.fixture
def unbalanced_a1_report(valid_a1_report):
    """A1 report whose equity breaks the balance sheet equation."""
    report = copy.deepcopy(valid_a1_report)
    report["data"]["shareholderEquity"] = "15000000.00"
    return report


@pytest.fixture
def valid_b1_report():
    return {
        "reportId": "RPT-B1-001",
        "institutionCode": "INST001",
        "header": _header(),
        "data": {
            "loanPortfolio": {
                "totalLoans": "1000000.00",
                "performingLoans": "950000.00",
                "nonPerformingLoans": "50000.00",
            },
            "provisions": {
                "specificProvisions": "20000.00",
            },
        },
    }


@pytest.fixture
def valid_c1_report():
    return {
        "reportId": "RPT-C1-001",
        "institutionCode": "INST001",
        "header": _header(),
        "data": {
            "liquidity": {
                "liquidAssets": "2500000.00",
                "liquidityRatio": "18.50",
            },
        },
    }


@pytest.fixture
def valid_d1_report():
    return {
        "reportId": "RPT-D1-001",
        "institutionCode": "INST001",
        "header": _header(),
        "data": {
            "capital": {
                "tier1Capital": "800000.00",
                "tier2Capital": "200000.00",
                "totalCapitalRatio": "14.25",
            },
        },
    }


@pytest.fixture
def error_context():
    return ErrorContext(
        report_id="RPT-A1-001",
        report_type="APPENDIX_A1",
        institution_code="INST001",
        timestamp=datetime(2025, 7, 15, 10, 30)
    )
