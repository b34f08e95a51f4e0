# backend/discovery/services/base.py
"""
Shared service plumbing for the discovery engine.

Every service gets the request snapshot, a class-named logger and operation
timing. Timings are kept per class (for `get_metrics`) and mirrored to the
Prometheus registry in `monitoring.prometheus_metrics`.
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, cast

from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.catalog_snapshot import CatalogSnapshot

logger = logging.getLogger(__name__)

SLOW_OPERATION_SECONDS = 1.0

F = TypeVar("F", bound=Callable[..., Any])


def _empty_stats() -> Dict[str, Any]:
    return {
        "count": 0,
        "total_time": 0.0,
        "success_count": 0,
        "failure_count": 0,
        "min_time": float("inf"),
        "max_time": 0.0,
    }


class BaseService:
    """
    Base class for discovery services.

    Services never write; they compute over the snapshot they were built
    with.
    """

    # Per-class operation stats, keyed by class name then operation
    _class_metrics: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def __init__(self, snapshot: Optional[CatalogSnapshot] = None):
        self.snapshot = snapshot
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Time a service method and report it.

        Usage:
            @BaseService.measure_operation("search")
            def search(self, query):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: "BaseService", *args: Any, **kwargs: Any) -> Any:
                started = time.time()
                error_type: Optional[str] = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    self._finish_operation(operation_name, started, error_type)

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    @contextmanager
    def measure_operation_context(self, operation_name: str) -> Iterator[None]:
        """
        Time a block inside a service method.

        Usage:
            with self.measure_operation_context("score_candidates"):
                ...
        """
        started = time.time()
        error_type: Optional[str] = None
        try:
            yield
        except Exception as e:
            error_type = type(e).__name__
            raise
        finally:
            self._finish_operation(operation_name, started, error_type)

    def _finish_operation(
        self, operation_name: str, started: float, error_type: Optional[str]
    ) -> None:
        elapsed = time.time() - started
        success = error_type is None
        self._record_metric(operation_name, elapsed, success)

        if elapsed > SLOW_OPERATION_SECONDS:
            self.logger.warning(f"Slow operation detected: {operation_name} took {elapsed:.2f}s")

        prometheus_metrics.record_service_operation(
            service=self.__class__.__name__,
            operation=operation_name,
            duration=elapsed,
            status="success" if success else "error",
            error_type=error_type,
        )

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        per_class = BaseService._class_metrics.setdefault(self.__class__.__name__, {})
        stats = per_class.setdefault(operation, _empty_stats())
        stats["count"] += 1
        stats["total_time"] += elapsed
        stats["min_time"] = min(stats["min_time"], elapsed)
        stats["max_time"] = max(stats["max_time"], elapsed)
        stats["success_count" if success else "failure_count"] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Timing summary for each operation this service class has run."""
        summary: Dict[str, Any] = {}
        for operation, stats in BaseService._class_metrics.get(
            self.__class__.__name__, {}
        ).items():
            count = stats["count"]
            if not count:
                continue
            summary[operation] = {
                **stats,
                "avg_time": stats["total_time"] / count,
                "success_rate": stats["success_count"] / count,
            }
        return summary

    def reset_metrics(self) -> None:
        BaseService._class_metrics.pop(self.__class__.__name__, None)
        self.logger.info(f"Metrics reset for {self.__class__.__name__}")
