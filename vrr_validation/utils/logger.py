"""
Centralized logging infrastructure for the VRR validation engine.

This module provides consistent logging across all modules with proper
log levels, formatting, optional file rotation and masking of contact
details.
"""

import logging
import logging.handlers
import os
import re
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..config.constants import SENSITIVE_FIELDS


EMAIL_PATTERN = re.compile(r'[^\s@"]+@[^\s@"]+\.[^\s@"]+')


class VRRLogger:
    """
    Centralized logger for VRR validation with consistent formatting.

    Features:
    - Structured logging (message plus JSON key/values)
    - File rotation when file logging is enabled
    - Masking of contact emails
    - Helpers for validation, performance and cache events
    """

    def __init__(
        self,
        name: str,
        log_dir: str = "logs",
        log_level: str = "INFO",
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        enable_console: bool = True,
        enable_file: bool = False
    ):
        """
        Initialize the VRR logger.

        Args:
            name: Logger name (usually module name)
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_bytes: Max size of log file before rotation
            backup_count: Number of backup files to keep
            enable_console: Whether to log to console
            enable_file: Whether to log to file
        """
        self.name = name
        self.logger = logging.getLogger(f"vrr_validation.{name}")
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        self.logger.handlers = []

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        simple_formatter = logging.Formatter(
            '%(levelname)s | %(message)s'
        )

        if enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.WARNING)  # Console stays quiet for per-field chatter
            console_handler.setFormatter(simple_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            log_file = os.path.join(log_dir, f"{name}_{datetime.now():%Y%m%d}.log")
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(file_handler)

            error_log_file = os.path.join(log_dir, f"{name}_errors_{datetime.now():%Y%m%d}.log")
            error_handler = logging.handlers.RotatingFileHandler(
                filename=error_log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(error_handler)

    def _mask_sensitive_data(self, data: Any) -> Any:
        """
        Mask contact details in log payloads.

        Args:
            data: Data to mask (dict, list, or string)

        Returns:
            Data with sensitive fields masked
        """
        if isinstance(data, dict):
            masked = {}
            for key, value in data.items():
                if str(key).lower() in SENSITIVE_FIELDS:
                    if isinstance(value, str) and len(value) > 4:
                        masked[key] = f"{value[:2]}***{value[-2:]}"
                    else:
                        masked[key] = "***MASKED***"
                else:
                    masked[key] = self._mask_sensitive_data(value)
            return masked
        elif isinstance(data, (list, tuple)):
            return [self._mask_sensitive_data(item) for item in data]
        elif isinstance(data, str):
            return EMAIL_PATTERN.sub('***@***', data)
        else:
            return data

    def _format(self, message: str, kwargs: Dict[str, Any]) -> str:
        if kwargs:
            masked_kwargs = self._mask_sensitive_data(kwargs)
            message = f"{message} | {json.dumps(masked_kwargs, default=str)}"
        return message

    # Logging methods with automatic sensitive data masking

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._format(message, kwargs))

    def info(self, message: str, **kwargs):
        """Log info message."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(self._format(message, kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._format(message, kwargs))

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message with optional exception."""
        message = self._format(message, kwargs)
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        self.logger.error(message, exc_info=exception is not None)

    def critical(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log critical message with optional exception."""
        message = self._format(message, kwargs)
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        self.logger.critical(message, exc_info=exception is not None)

    # Specialized logging methods

    def log_validation(
        self,
        report_type: str,
        is_valid: bool,
        error_count: int,
        warning_count: int,
        duration_ms: float
    ):
        """Log the outcome of one report validation."""
        self.info(
            "Report validation completed",
            report_type=report_type,
            is_valid=is_valid,
            errors=error_count,
            warnings=warning_count,
            duration_ms=round(duration_ms, 3)
        )

    def log_performance(
        self,
        operation: str,
        duration_seconds: float,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log performance metrics."""
        self.debug(
            "Performance metric",
            operation=operation,
            duration_seconds=round(duration_seconds, 3),
            details=details if details else {}
        )

    def log_cache_event(self, cache: str, event: str, key: str):
        """Log a cache hit, miss, store or eviction."""
        self.debug(
            "Cache event",
            cache=cache,
            event=event,
            key=key
        )


# Global logger instances for different modules
_loggers: Dict[str, VRRLogger] = {}


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    **kwargs
) -> VRRLogger:
    """
    Get or create a logger instance.

    Log level comes from VRR_LOG_LEVEL; file logging is switched on by
    VRR_LOG_TO_FILE and written under VRR_LOG_DIR.

    Args:
        name: Logger name (usually module name)
        log_level: Override default log level
        **kwargs: Additional arguments for VRRLogger

    Returns:
        VRRLogger instance
    """
    if name not in _loggers:
        if log_level is None:
            log_level = os.environ.get('VRR_LOG_LEVEL', 'INFO')

        if 'enable_file' not in kwargs:
            kwargs['enable_file'] = os.environ.get('VRR_LOG_TO_FILE', '').lower() in ('1', 'true', 'yes')
        if 'log_dir' not in kwargs:
            kwargs['log_dir'] = os.environ.get('VRR_LOG_DIR', 'logs')

        _loggers[name] = VRRLogger(name, log_level=log_level, **kwargs)

    return _loggers[name]


def get_module_logger() -> VRRLogger:
    """
    Get a logger for the calling module.

    Returns:
        VRRLogger instance for the calling module
    """
    import inspect
    frame = inspect.currentframe()
    if frame and frame.f_back:
        module_name = frame.f_back.f_globals.get('__name__', 'unknown')
    else:
        module_name = 'unknown'

    # vrr_validation.validation.validation_engine -> validation_engine
    module_name = module_name.split('.')[-1]

    return get_logger(module_name)
