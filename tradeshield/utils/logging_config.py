"""
Logging and in-process metrics for TradeShield.

Production logs are one JSON object per line carrying the request id of the
HTTP request that produced them; development logs stay human-readable.
"""

import logging
import sys
import json
import threading
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional
from functools import wraps
from contextvars import ContextVar

from tradeshield.config import settings


SERVICE_NAME = "tradeshield"
LATENCY_WINDOW = 1000

# Set per request by the API middleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the structured fields under ``data``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "env": settings.environment,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """
    Logger taking keyword fields instead of format arguments.

        logger = StructuredLogger(__name__)
        logger.info("Listing analyzed", analysis_id=12, risk_level="high")
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, exc_info: bool, fields: Dict[str, Any]):
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, exc_info=exc_info, extra={"data": fields}, stacklevel=3)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, False, fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, False, fields)

    def error(self, message: str, exc_info: bool = False, **fields):
        self._log(logging.ERROR, message, exc_info, fields)


def setup_logging(level: str = "INFO", json_format: bool = True):
    """Replace the root handlers with a single stdout handler."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
    root_logger.addHandler(handler)

    # OpenAI client and DB engine are chatty at DEBUG
    for noisy in ("httpx", "httpcore", "openai", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def init_logging():
    is_prod = settings.is_production
    setup_logging(level="INFO" if is_prod else "DEBUG", json_format=is_prod)


# ============== METRICS ==============


class MetricsCollector:
    """
    Thread-safe counters and latency samples, reported by ``/status``.

    Analyses run in the threadpool, so every update takes the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = {}
        self._timings: Dict[str, Deque[float]] = {}
        self._start_time = time.time()

    def increment(self, name: str, value: int = 1):
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value

    def timing(self, name: str, seconds: float):
        with self._lock:
            self._timings.setdefault(name, deque(maxlen=LATENCY_WINDOW)).append(seconds)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            counters = dict(self._counters)
            samples = {name: sorted(values) for name, values in self._timings.items() if values}

        timings = {
            name: {
                "count": len(values),
                "avg": sum(values) / len(values),
                "p50": values[len(values) // 2],
                "max": values[-1],
            }
            for name, values in samples.items()
        }
        return {
            "uptime_seconds": round(time.time() - self._start_time, 1),
            "counters": counters,
            "timings": timings,
        }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._timings.clear()


metrics = MetricsCollector()


def track_analysis(analysis_type: str):
    """
    Count calls, failures and latency of a method returning an AnalysisResult.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics.increment(f"analysis.{analysis_type}.total")
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                metrics.increment(f"analysis.{analysis_type}.errors")
                raise
            metrics.timing(f"analysis.{analysis_type}.latency", time.perf_counter() - start)
            if not result.success:
                metrics.increment(f"analysis.{analysis_type}.failed")
            elif not result.schema_valid:
                metrics.increment(f"analysis.{analysis_type}.schema_anomalies")
            return result

        return wrapper

    return decorator
