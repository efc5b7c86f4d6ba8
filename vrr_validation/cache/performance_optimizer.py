"""
Validation Performance Optimizer

Adds result caching, a priority batch queue and bounded-parallel
validation on top of the synchronous ValidationEngine.

Concurrency model:
- The engine runs in worker threads (asyncio.to_thread)
- Each chunk of at most parallel_limit requests is awaited with
  asyncio.gather before the next chunk starts
- Only one drain runs at a time; enqueue() starts one when none is running
- A caller-supplied asyncio.Event cancels a drain between chunks; the
  chunk in flight always completes and unprocessed requests stay queued
"""

import asyncio
import threading
import time
from typing import Any, Dict, List, Optional, Tuple, Callable

from pydantic import BaseModel, Field

from ..models.validation_result import ValidationContext, ValidationOutcome, SchemaValidationResult
from ..validation.validation_engine import ValidationEngine, get_validation_engine
from ..config.settings import OptimizerSettings
from ..config.constants import APPROX_CACHE_ENTRY_BYTES
from ..utils.error_handler import ErrorHandler, ErrorLevel, ErrorCode, VRRError, BatchValidationError
from ..utils.logger import get_module_logger
from .validation_cache import TTLCache, generate_report_fingerprint, generate_field_cache_key

logger = get_module_logger()


class BatchValidationRequest(BaseModel):
    """One report waiting for validation"""

    report_id: str
    report: Dict[str, Any]
    report_type: str
    context: Optional[ValidationContext] = None
    priority: int = Field(0, description="Higher runs first; ties keep insertion order")


class BatchValidationResult(BaseModel):
    """Outcome of one batch-processed report"""

    report_id: str
    result: Optional[SchemaValidationResult] = Field(None, description="None when validation raised")
    processing_time_ms: float = 0.0
    cache_hit: bool = False
    error: Optional[Dict[str, Any]] = Field(None, description="VRRError.to_dict() of a failed request")


class OptimizerMetrics(BaseModel):
    """Counters of one optimizer instance"""

    total_validations: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    average_validation_time_ms: float = 0.0
    batches_processed: int = 0
    parallel_validations: int = 0
    memory_usage_bytes: int = 0


class CacheStats(BaseModel):
    """Sizes and hit rate of the optimizer caches"""

    report_cache_size: int
    field_cache_size: int
    cache_hit_rate: float = Field(..., ge=0.0, le=1.0)
    memory_usage_bytes: int


class ValidationOptimizer:
    """
    Cache and batch layer for report validation.

    Features:
    - Report result cache keyed by report fingerprint
    - Field result cache keyed by (field path, value, report type)
    - Priority queue drained in groups of bounded-parallel chunks
    - Metrics and cache statistics
    """

    def __init__(
        self,
        engine: Optional[ValidationEngine] = None,
        settings: Optional[OptimizerSettings] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the optimizer.

        Args:
            engine: ValidationEngine instance (uses singleton if None)
            settings: Tuning knobs (from VRR_* environment if None)
            clock: Monotonic clock for cache expiry (injectable for tests)
        """
        self.engine = engine or get_validation_engine()
        self.settings = settings or OptimizerSettings.from_env()

        self.report_cache: TTLCache[SchemaValidationResult] = TTLCache(
            max_size=self.settings.max_cache_size,
            default_ttl=self.settings.default_ttl_seconds,
            clock=clock,
            name="report"
        )
        self.field_cache: TTLCache[ValidationOutcome] = TTLCache(
            max_size=self.settings.max_cache_size,
            default_ttl=self.settings.default_ttl_seconds,
            clock=clock,
            name="field"
        )

        self.error_handler = ErrorHandler(logger)

        self._metrics = OptimizerMetrics()
        self._metrics_lock = threading.Lock()

        self._queue: List[Tuple[BatchValidationRequest, "asyncio.Future[SchemaValidationResult]"]] = []
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None
        self._cleanup_task: Optional[asyncio.Task] = None

    # =========================================================================
    # CACHED VALIDATION
    # =========================================================================

    def validate_report_cached(
        self,
        report: Dict[str, Any],
        report_type: str,
        context: Optional[ValidationContext] = None,
        ttl: Optional[float] = None
    ) -> SchemaValidationResult:
        """
        Validate a report, reusing a live cached result when available.

        Args:
            report: Report payload
            report_type: Report type identifier
            context: Validation context
            ttl: Lifetime of a newly cached result (settings default if None)

        Returns:
            SchemaValidationResult
        """
        result, _ = self._validate_with_cache(report, report_type, context, ttl)
        return result

    def validate_field_cached(
        self,
        field_path: str,
        value: Any,
        report_type: str,
        context: Optional[ValidationContext] = None,
        ttl: Optional[float] = None
    ) -> ValidationOutcome:
        """
        Validate one field value, reusing a live cached outcome when available.

        Args:
            field_path: Dotted field path
            value: Raw value
            report_type: Report type whose rules apply
            context: Validation context
            ttl: Lifetime of a newly cached outcome (settings default if None)

        Returns:
            ValidationOutcome
        """
        key = generate_field_cache_key(field_path, value, report_type)

        cached = self.field_cache.get(key)
        if cached is not None:
            logger.log_cache_event("field", "hit", key)
            return cached

        outcome = self.engine.validate_field(field_path, value, report_type, context)
        self.field_cache.set(key, outcome, ttl)
        return outcome

    def _validate_with_cache(
        self,
        report: Dict[str, Any],
        report_type: str,
        context: Optional[ValidationContext],
        ttl: Optional[float] = None
    ) -> Tuple[SchemaValidationResult, bool]:
        key = generate_report_fingerprint(report, report_type, context)

        cached = self.report_cache.get(key)
        if cached is not None:
            with self._metrics_lock:
                self._metrics.cache_hits += 1
            logger.log_cache_event("report", "hit", key)
            return cached, True

        start_time = time.perf_counter()
        result = self.engine.validate_report(report, report_type, context)
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        with self._metrics_lock:
            metrics = self._metrics
            total_time = metrics.average_validation_time_ms * metrics.total_validations
            metrics.cache_misses += 1
            metrics.total_validations += 1
            metrics.average_validation_time_ms = (total_time + elapsed_ms) / metrics.total_validations

        self.report_cache.set(key, result, ttl)
        logger.log_cache_event("report", "miss", key)
        return result, False

    def _process_request(self, request: BatchValidationRequest) -> BatchValidationResult:
        start_time = time.perf_counter()
        result, cache_hit = self._validate_with_cache(request.report, request.report_type, request.context)
        return BatchValidationResult(
            report_id=request.report_id,
            result=result,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            cache_hit=cache_hit
        )

    async def _process_chunk(
        self,
        chunk: List[BatchValidationRequest],
        futures: Optional[List["asyncio.Future"]] = None
    ) -> List[BatchValidationResult]:
        """
        Validate a chunk concurrently; results keep the chunk's order.

        A request whose validation raises yields a result carrying the
        error instead of failing the whole chunk. When futures are given
        (one per request) each is resolved with its outcome.
        """
        outcomes = await asyncio.gather(
            *(asyncio.to_thread(self._process_request, request) for request in chunk),
            return_exceptions=True
        )

        results = []
        for index, (request, outcome) in enumerate(zip(chunk, outcomes)):
            future = futures[index] if futures is not None else None

            if isinstance(outcome, Exception):
                error = BatchValidationError(request.report_id, outcome)
                self.error_handler.handle(error)
                results.append(BatchValidationResult(report_id=request.report_id, error=error.to_dict()))
                if future is not None and not future.done():
                    future.set_exception(error)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)
                if future is not None and not future.done():
                    future.set_result(outcome.result)

        with self._metrics_lock:
            self._metrics.parallel_validations += len(chunk)

        return results

    def _chunks(self, items: List[Any]) -> List[List[Any]]:
        limit = self.settings.parallel_limit
        return [items[i:i + limit] for i in range(0, len(items), limit)]

    # =========================================================================
    # BATCH QUEUE
    # =========================================================================

    async def enqueue(
        self,
        report_id: str,
        report: Dict[str, Any],
        report_type: str,
        context: Optional[ValidationContext] = None,
        priority: int = 0
    ) -> "asyncio.Future[SchemaValidationResult]":
        """
        Queue a report for batch validation.

        The request is placed before the first queued request with a
        lower priority. When auto_drain is on and no drain is running, a
        drain task is started.

        Args:
            report_id: Caller's identifier for the report
            report: Report payload
            report_type: Report type identifier
            context: Validation context
            priority: Higher values are validated first

        Returns:
            Future resolved with the SchemaValidationResult (or the
            BatchValidationError if validation raised)
        """
        request = BatchValidationRequest(
            report_id=report_id,
            report=report,
            report_type=report_type,
            context=context,
            priority=priority
        )
        future = asyncio.get_running_loop().create_future()

        insert_index = next(
            (index for index, (queued, _) in enumerate(self._queue) if queued.priority < priority),
            len(self._queue)
        )
        self._queue.insert(insert_index, (request, future))

        logger.debug("Report queued", report_id=report_id, priority=priority, queue_size=len(self._queue))

        if self.settings.auto_drain and not self._draining and (
            self._drain_task is None or self._drain_task.done()
        ):
            self._drain_task = asyncio.create_task(self.drain())

        return future

    async def drain(self, cancel_event: Optional[asyncio.Event] = None) -> List[BatchValidationResult]:
        """
        Process queued requests until the queue is empty or cancelled.

        Requests are taken in groups of batch_size; each group runs as
        chunks of at most parallel_limit concurrent validations, with a
        short pause between groups. Returns immediately with no results
        if another drain is already running.

        Args:
            cancel_event: Checked before each chunk; once set, remaining
                requests are put back at the front of the queue

        Returns:
            Results in processing order
        """
        if self._draining:
            return []

        self._draining = True
        results: List[BatchValidationResult] = []
        start_time = time.perf_counter()

        try:
            while self._queue:
                if cancel_event is not None and cancel_event.is_set():
                    break

                group = self._queue[:self.settings.batch_size]
                del self._queue[:self.settings.batch_size]

                chunks = self._chunks(group)
                cancelled = False
                for chunk_index, chunk in enumerate(chunks):
                    if cancel_event is not None and cancel_event.is_set():
                        unprocessed = [item for remaining in chunks[chunk_index:] for item in remaining]
                        self._queue[0:0] = unprocessed
                        self.error_handler.handle(VRRError(
                            "Batch drain cancelled",
                            ErrorCode.BATCH_CANCELLED,
                            level=ErrorLevel.WARNING,
                            details={"requeued": len(unprocessed)}
                        ))
                        cancelled = True
                        break

                    results.extend(await self._process_chunk(
                        [request for request, _ in chunk],
                        [future for _, future in chunk]
                    ))

                if cancelled:
                    break

                with self._metrics_lock:
                    self._metrics.batches_processed += 1

                if self._queue:
                    await asyncio.sleep(self.settings.batch_delay_seconds)
        finally:
            self._draining = False

        logger.log_performance(
            "batch_drain",
            time.perf_counter() - start_time,
            {"processed": len(results), "pending": len(self._queue)}
        )
        return results

    def pending_report_ids(self) -> List[str]:
        """Queued report ids in the order they will be processed."""
        return [request.report_id for request, _ in self._queue]

    async def validate_reports_parallel(
        self,
        requests: List[BatchValidationRequest]
    ) -> List[BatchValidationResult]:
        """
        Validate an explicit list of reports without the queue.

        Args:
            requests: Reports to validate

        Returns:
            One result per request, in request order
        """
        results: List[BatchValidationResult] = []
        for chunk in self._chunks(list(requests)):
            results.extend(await self._process_chunk(chunk))
        return results

    # =========================================================================
    # CACHE MAINTENANCE
    # =========================================================================

    def sweep_expired(self) -> int:
        """
        Remove expired entries from both caches.

        Returns:
            Number of entries removed
        """
        removed = self.report_cache.sweep_expired() + self.field_cache.sweep_expired()
        self._update_memory_usage()
        return removed

    async def run_cache_cleanup(self) -> None:
        """Sweep expired entries every cleanup_interval_seconds until cancelled."""
        while True:
            await asyncio.sleep(self.settings.cleanup_interval_seconds)
            self.sweep_expired()

    def start_cache_cleanup(self) -> asyncio.Task:
        """Start the periodic sweep on the running event loop."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.get_running_loop().create_task(self.run_cache_cleanup())
        return self._cleanup_task

    def stop_cache_cleanup(self) -> None:
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            self._cleanup_task = None

    def clear(self) -> None:
        """Empty both caches."""
        self.report_cache.clear()
        self.field_cache.clear()
        self._update_memory_usage()
        logger.info("Validation caches cleared")

    # =========================================================================
    # METRICS
    # =========================================================================

    def _update_memory_usage(self) -> None:
        with self._metrics_lock:
            self._metrics.memory_usage_bytes = (
                (len(self.report_cache) + len(self.field_cache)) * APPROX_CACHE_ENTRY_BYTES
            )

    def get_metrics(self) -> OptimizerMetrics:
        """
        Snapshot of the optimizer counters.

        Returns:
            OptimizerMetrics copy
        """
        self._update_memory_usage()
        with self._metrics_lock:
            return self._metrics.model_copy()

    def reset_metrics(self) -> None:
        with self._metrics_lock:
            self._metrics = OptimizerMetrics()

    def get_cache_stats(self) -> CacheStats:
        """
        Get statistics about the caches.

        Returns:
            CacheStats with sizes, hit rate and approximate memory usage
        """
        metrics = self.get_metrics()
        lookups = metrics.cache_hits + metrics.cache_misses

        return CacheStats(
            report_cache_size=len(self.report_cache),
            field_cache_size=len(self.field_cache),
            cache_hit_rate=metrics.cache_hits / lookups if lookups else 0.0,
            memory_usage_bytes=metrics.memory_usage_bytes
        )
