"""Tests for the TTL cache and cache key generation."""

import copy
from datetime import date

import pytest

from vrr_validation.cache.validation_cache import (
    TTLCache,
    CacheEntry,
    generate_report_fingerprint,
    generate_field_cache_key,
)
from vrr_validation.models.validation_result import ValidationContext, ReportingPeriod

from conftest import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(max_size=3, default_ttl=60, clock=clock, name="test")


class TestTTLExpiry:

    def test_hit_before_ttl(self, cache, clock):
        cache.set("a", 1)
        clock.advance(59.9)
        assert cache.get("a") == 1

    def test_hit_at_exact_ttl(self, cache, clock):
        cache.set("a", 1)
        clock.advance(60)
        assert cache.get("a") == 1

    def test_miss_after_ttl(self, cache, clock):
        cache.set("a", 1)
        clock.advance(60.001)
        assert cache.get("a") is None
        assert "a" not in cache

    def test_per_entry_ttl(self, cache, clock):
        cache.set("short", 1, ttl=5)
        cache.set("long", 2)
        clock.advance(10)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_overwrite_restarts_ttl(self, cache, clock):
        cache.set("a", 1)
        clock.advance(50)
        cache.set("a", 2)
        clock.advance(50)
        assert cache.get("a") == 2

    def test_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_entry_expiry(self):
        entry = CacheEntry(key="k", value={"x": 1}, created_at=100.0, ttl=10)
        assert not entry.is_expired(110.0)
        assert entry.is_expired(110.5)


class TestEviction:

    def test_size_never_exceeds_max(self, cache, clock):
        for i in range(10):
            cache.set(f"k{i}", i)
            clock.advance(1)
            assert len(cache) <= 3
        assert len(cache) == 3

    def test_oldest_created_entry_is_evicted(self, cache, clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            clock.advance(1)

        # Reading "a" does not protect it; eviction follows creation order
        assert cache.get("a") == "a"
        cache.set("d", "d")

        assert "a" not in cache
        assert all(key in cache for key in ("b", "c", "d"))

    def test_overwriting_existing_key_does_not_evict(self, cache, clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            clock.advance(1)

        cache.set("b", "B")

        assert len(cache) == 3
        assert cache.get("a") == "a"
        assert cache.get("b") == "B"

    def test_overwrite_moves_entry_to_newest(self, cache, clock):
        for key in ("a", "b", "c"):
            cache.set(key, key)
            clock.advance(1)

        cache.set("a", "A")
        clock.advance(1)
        cache.set("d", "d")

        assert "b" not in cache
        assert cache.get("a") == "A"

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            TTLCache(max_size=0, default_ttl=60)


class TestSweep:

    def test_sweep_removes_only_expired(self, cache, clock):
        cache.set("old", 1, ttl=5)
        cache.set("older", 2, ttl=1)
        cache.set("fresh", 3)
        clock.advance(10)

        assert cache.sweep_expired() == 2
        assert len(cache) == 1
        assert cache.get("fresh") == 3

    def test_sweep_empty(self, cache):
        assert cache.sweep_expired() == 0

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0


class TestFingerprints:

    def test_key_order_does_not_matter(self, valid_a1_report):
        reordered = {key: valid_a1_report[key] for key in reversed(list(valid_a1_report))}
        reordered["header"] = dict(reversed(list(valid_a1_report["header"].items())))

        assert generate_report_fingerprint(valid_a1_report, "APPENDIX_A1") == \
            generate_report_fingerprint(reordered, "APPENDIX_A1")

    def test_data_changes_fingerprint(self, valid_a1_report, unbalanced_a1_report):
        assert generate_report_fingerprint(valid_a1_report, "APPENDIX_A1") != \
            generate_report_fingerprint(unbalanced_a1_report, "APPENDIX_A1")

    def test_header_changes_fingerprint(self, valid_a1_report):
        changed = copy.deepcopy(valid_a1_report)
        changed["header"]["contactEmail"] = "other@examplebank.com"
        assert generate_report_fingerprint(valid_a1_report, "APPENDIX_A1") != \
            generate_report_fingerprint(changed, "APPENDIX_A1")

    def test_report_type_changes_fingerprint(self, valid_a1_report):
        assert generate_report_fingerprint(valid_a1_report, "APPENDIX_A1") != \
            generate_report_fingerprint(valid_a1_report, "APPENDIX_B1")

    def test_reporting_period_changes_fingerprint(self, valid_a1_report, a1_context):
        other_period = ValidationContext(
            report_type="APPENDIX_A1",
            reporting_period=ReportingPeriod(start=date(2025, 1, 1), end=date(2025, 3, 31))
        )
        assert generate_report_fingerprint(valid_a1_report, "APPENDIX_A1", a1_context) != \
            generate_report_fingerprint(valid_a1_report, "APPENDIX_A1", other_period)

    def test_context_data_changes_fingerprint(self, valid_b1_report):
        bare = ValidationContext(report_type="APPENDIX_B1")
        supplied = ValidationContext(
            report_type="APPENDIX_B1",
            cross_field_data={"data.loanPortfolio.nonPerformingLoans": "999999999.00"}
        )
        with_institution = ValidationContext(report_type="APPENDIX_B1", institution_data={"tier": 1})

        fingerprints = {
            generate_report_fingerprint(valid_b1_report, "APPENDIX_B1", context)
            for context in (bare, supplied, with_institution)
        }
        assert len(fingerprints) == 3
        assert generate_report_fingerprint(valid_b1_report, "APPENDIX_B1", bare) == \
            generate_report_fingerprint(valid_b1_report, "APPENDIX_B1")

    def test_fingerprint_shape(self, valid_a1_report):
        fingerprint = generate_report_fingerprint(valid_a1_report, "APPENDIX_A1")
        prefix, report_hash, context_hash = fingerprint.split(":")
        assert prefix == "report"
        assert len(report_hash) == len(context_hash) == 32

    def test_field_cache_key(self):
        key = generate_field_cache_key("data.totalAssets", "100.00", "APPENDIX_A1")
        assert key.startswith("field:")
        assert key == generate_field_cache_key("data.totalAssets", "100.00", "APPENDIX_A1")
        assert key != generate_field_cache_key("data.totalAssets", "100.01", "APPENDIX_A1")
        assert key != generate_field_cache_key("data.totalLiabilities", "100.00", "APPENDIX_A1")
