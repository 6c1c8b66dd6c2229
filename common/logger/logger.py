# common/logger/logger.py
"""
Application logger with explicit initialization and optional timing.

Usage:
    from common.logger import get_app_logger

    logger = get_app_logger(__name__)
    logger.info("Patient created", patient_id=42)

    # Check logger overhead
    timed = get_app_logger(__name__, track_timing=True)
    print(timed.get_timing_stats())
"""

import time
from typing import Any, Dict, Optional
import structlog

from common.config.structlog_config import get_logger as _get_structlog_logger


class TimingStats:
    """Track timing statistics for logger performance."""

    def __init__(self) -> None:
        self.reset()

    def record(self, elapsed: float) -> None:
        self.total_calls += 1
        self.total_time += elapsed
        self.max_time = max(self.max_time, elapsed)
        self.min_time = min(self.min_time, elapsed)

    def get_stats(self) -> Dict[str, Any]:
        avg = self.total_time / self.total_calls if self.total_calls > 0 else 0
        return {
            "total_calls": self.total_calls,
            "avg_time_ms": avg * 1000,
            "max_time_ms": self.max_time * 1000,
            "min_time_ms": self.min_time * 1000 if self.total_calls else 0,
        }

    def reset(self) -> None:
        self.total_calls = 0
        self.total_time = 0.0
        self.max_time = 0.0
        self.min_time = float("inf")


class AppLogger:
    """
    Application logger wrapper.

    Resolves the structlog logger on first use, so modules can create
    loggers at import time before configure_structlog() has run.
    """

    def __init__(self, name: str = "app", track_timing: bool = False) -> None:
        self._name = name
        self._logger_instance: Optional[structlog.BoundLogger] = None
        self._timing_stats: Optional[TimingStats] = (
            TimingStats() if track_timing else None
        )

    @property
    def _logger(self) -> structlog.BoundLogger:
        if self._logger_instance is None:
            self._logger_instance = _get_structlog_logger(self._name)
        return self._logger_instance

    def _log(self, level: str, msg: str, **kwargs: Any) -> None:
        start_time = time.perf_counter()
        try:
            getattr(self._logger, level)(msg, **kwargs)
        finally:
            if self._timing_stats is not None:
                self._timing_stats.record(time.perf_counter() - start_time)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log("debug", msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log("info", msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log("warning", msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log("error", msg, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._log("critical", msg, **kwargs)

    def get_timing_stats(self) -> Dict[str, Any]:
        """Timing metrics, or an error entry when timing is disabled."""
        if self._timing_stats is None:
            return {"error": "Timing tracking not enabled"}
        return self._timing_stats.get_stats()

    def reset_timing_stats(self) -> None:
        if self._timing_stats is not None:
            self._timing_stats.reset()


def get_app_logger(name: str = "app", track_timing: bool = False) -> AppLogger:
    """
    Get application logger instance.

    Example:
        >>> logger = get_app_logger("auth", track_timing=True)
        >>> logger.info("Login succeeded", user_id=123)
    """
    return AppLogger(name=name, track_timing=track_timing)


logger = get_app_logger()

__all__ = ["logger", "AppLogger", "get_app_logger", "TimingStats"]
