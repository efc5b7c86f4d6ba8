"""
Validation Result Cache

In-memory TTL cache for validation results, keyed by deterministic
fingerprints of the validated input.

Contract:
- An entry is a hit while (now - created_at) <= ttl
- An expired entry is a miss and is dropped on lookup
- Inserting a new key into a full cache evicts the single entry with
  the oldest created_at (creation order, not access order)
- sweep_expired() drops every expired entry regardless of capacity
"""

import json
import hashlib
import threading
import time
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from ..models.validation_result import ValidationContext
from ..utils.logger import get_module_logger

logger = get_module_logger()

T = TypeVar("T")


class CacheEntry(BaseModel, Generic[T]):
    """One cached value with its creation time and lifetime"""

    key: str
    value: T
    created_at: float = Field(..., description="Clock reading when the entry was stored")
    ttl: float = Field(..., gt=0, description="Lifetime in seconds")

    class Config:
        frozen = True
        arbitrary_types_allowed = True

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl


class TTLCache(Generic[T]):
    """
    Bounded key -> CacheEntry map with TTL expiry.

    All operations hold one lock so the cache can be shared between the
    event loop and worker threads.
    """

    def __init__(
        self,
        max_size: int,
        default_ttl: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache"
    ):
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of entries
            default_ttl: Lifetime in seconds used when set() gets no ttl
            clock: Monotonic clock in seconds (injectable for tests)
            name: Label used in log events
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[T]:
        """
        Look up a live value.

        Args:
            key: Cache key

        Returns:
            Cached value, or None on a miss (absent or expired)
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.log_cache_event(self.name, "expired", key)
                return None

            return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """
        Store a value, evicting the oldest entry if a new key does not fit.

        Args:
            key: Cache key
            value: Value to store
            ttl: Lifetime in seconds (default_ttl if None)
        """
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_oldest()

            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=self._clock(),
                ttl=ttl if ttl is not None else self.default_ttl
            )

    def sweep_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug("Swept expired cache entries", cache=self.name, removed=len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def _evict_oldest(self) -> None:
        oldest_key = min(self._entries, key=lambda k: self._entries[k].created_at)
        del self._entries[oldest_key]
        logger.log_cache_event(self.name, "evicted", oldest_key)


# =============================================================================
# FINGERPRINTS
# =============================================================================

def _hash_object(obj: Any) -> str:
    """MD5 of the canonical (sorted-key) JSON form of an object."""
    canonical = json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()


def generate_report_fingerprint(
    report: Dict[str, Any],
    report_type: str,
    context: Optional[ValidationContext] = None
) -> str:
    """
    Generate the cache key of a report validation.

    Covers the report identity (reportId, institutionCode), every
    section's id and data, the header and data blocks the field rules
    read, and the context's report type, reporting period, institution
    data and cross-field data. Key order inside the payload does not
    affect the fingerprint.

    Args:
        report: Report payload
        report_type: Report type being validated
        context: Validation context

    Returns:
        Cache key string
    """
    sections = report.get("sections") or []
    report_hash = _hash_object({
        "reportId": report.get("reportId"),
        "reportType": report_type,
        "institutionCode": report.get("institutionCode"),
        "sections": [
            {"sectionId": section.get("sectionId"), "data": section.get("data")}
            if isinstance(section, dict) else section
            for section in sections
        ],
        "header": report.get("header"),
        "data": report.get("data"),
    })

    context_hash = _hash_object({
        "reportType": context.report_type if context else report_type,
        "reportingPeriod": (
            context.reporting_period.model_dump(mode="json")
            if context and context.reporting_period else None
        ),
        "institutionData": context.institution_data if context else {},
        "crossFieldData": context.cross_field_data if context else {},
    })

    return f"report:{report_hash}:{context_hash}"


def generate_field_cache_key(field_path: str, value: Any, report_type: str) -> str:
    """
    Generate the cache key of a single field validation.

    Args:
        field_path: Dotted field path
        value: Raw value
        report_type: Report type whose rules apply

    Returns:
        Cache key string
    """
    return f"field:{_hash_object({'fieldPath': field_path, 'value': value, 'reportType': report_type})}"
