"""Runtime settings for the cache and batch layer."""

import os
from typing import Mapping, Optional
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    MAX_CACHE_SIZE,
    BATCH_SIZE,
    PARALLEL_LIMIT,
    BATCH_DELAY_SECONDS,
    CACHE_CLEANUP_INTERVAL_SECONDS,
)


class OptimizerSettings(BaseModel):
    """Tuning knobs for ValidationOptimizer"""

    default_ttl_seconds: float = Field(
        DEFAULT_CACHE_TTL_SECONDS,
        gt=0,
        description="Lifetime of cached validation results"
    )

    max_cache_size: int = Field(
        MAX_CACHE_SIZE,
        gt=0,
        description="Maximum entries per cache map"
    )

    batch_size: int = Field(
        BATCH_SIZE,
        gt=0,
        description="Requests taken from the queue per group"
    )

    parallel_limit: int = Field(
        PARALLEL_LIMIT,
        gt=0,
        description="Concurrent validations per chunk"
    )

    batch_delay_seconds: float = Field(
        BATCH_DELAY_SECONDS,
        ge=0,
        description="Pause between groups while draining"
    )

    cleanup_interval_seconds: float = Field(
        CACHE_CLEANUP_INTERVAL_SECONDS,
        gt=0,
        description="Period of the expired-entry sweep"
    )

    auto_drain: bool = Field(
        True,
        description="Start draining the batch queue as soon as work is enqueued"
    )

    class Config:
        frozen = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OptimizerSettings":
        """Build settings, overriding defaults with VRR_* environment variables."""
        environ = os.environ if environ is None else environ

        env_map = {
            "default_ttl_seconds": "VRR_CACHE_TTL_SECONDS",
            "max_cache_size": "VRR_MAX_CACHE_SIZE",
            "batch_size": "VRR_BATCH_SIZE",
            "parallel_limit": "VRR_PARALLEL_LIMIT",
            "batch_delay_seconds": "VRR_BATCH_DELAY_SECONDS",
            "cleanup_interval_seconds": "VRR_CLEANUP_INTERVAL_SECONDS",
            "auto_drain": "VRR_AUTO_DRAIN",
        }

        overrides = {
            field_name: environ[env_name]
            for field_name, env_name in env_map.items()
            if env_name in environ
        }

        return cls(**overrides)
