"""
Cache & Batch Module

Caches validation results and runs reports through a priority batch
queue with bounded parallelism.

Components:
- validation_cache.py: TTL cache and input fingerprints
- performance_optimizer.py: Cached validation, batch queue and metrics
"""

from .validation_cache import CacheEntry, TTLCache, generate_report_fingerprint, generate_field_cache_key
from .performance_optimizer import (
    ValidationOptimizer,
    BatchValidationRequest,
    BatchValidationResult,
    OptimizerMetrics,
    CacheStats,
)

__all__ = [
    "CacheEntry",
    "TTLCache",
    "generate_report_fingerprint",
    "generate_field_cache_key",
    "ValidationOptimizer",
    "BatchValidationRequest",
    "BatchValidationResult",
    "OptimizerMetrics",
    "CacheStats",
]
