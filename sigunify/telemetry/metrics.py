"""In-memory counters and gauges describing statement processing.

The driver records one ``processed`` sample per statement and one ``failed``
sample per failure, tagged with the error kind.  Each signature update adds an
``updated`` sample and a ``bindings`` gauge holding the number of placeholder
bindings the table carries afterwards.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

PROCESSED = "sigunify.statements.processed"
FAILED = "sigunify.statements.failed"
SIGNATURES_UPDATED = "sigunify.signatures.updated"
BINDINGS = "sigunify.unifier.bindings"


@dataclass(frozen=True, slots=True)
class MetricInfo:
    """Catalog entry describing a known series."""

    name: str
    kind: str
    description: str


CATALOG: Dict[str, MetricInfo] = {
    info.name: info
    for info in (
        MetricInfo(PROCESSED, "counter", "Statements handed to the driver"),
        MetricInfo(FAILED, "counter", "Statements that ended in a Failure, tagged by error kind"),
        MetricInfo(SIGNATURES_UPDATED, "counter", "Signature entries written to a symbol table"),
        MetricInfo(BINDINGS, "gauge", "Placeholder bindings held by the table after a statement"),
    )
}


@dataclass(frozen=True, slots=True)
class MetricSample:
    value: float
    timestamp: float
    tags: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"value": self.value, "timestamp": self.timestamp}
        if self.tags:
            payload["tags"] = dict(self.tags)
        return payload


@dataclass(slots=True)
class MetricSeries:
    """All samples recorded under one metric name."""

    name: str
    kind: str
    description: str | None = None
    samples: list[MetricSample] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(sample.value for sample in self.samples)

    def by_tag(self) -> Dict[str, float]:
        """Sum sample values per ``key=value`` tag label."""

        totals: Dict[str, float] = {}
        for sample in self.samples:
            for key, tag in sample.tags.items():
                label = f"{key}={tag}"
                totals[label] = totals.get(label, 0.0) + sample.value
        return totals

    def summary(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {"name": self.name, "kind": self.kind, "count": len(self.samples)}
        if self.samples:
            summary["total"] = self.total
            summary["last"] = self.samples[-1].value
        tagged = self.by_tag()
        if tagged:
            summary["by_tag"] = tagged
        if self.description:
            summary["description"] = self.description
        return summary


class MetricsRegistry:
    """Thread-safe store of metric series.

    Each :class:`~sigunify.driver.session.Session` may own a registry; sessions
    created without one share the process-wide registry from
    :func:`get_registry`.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._series: Dict[str, MetricSeries] = {}

    def emit(
        self,
        name: str,
        value: Any = 1,
        *,
        kind: str | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> MetricSample:
        if not isinstance(name, str) or not name:
            raise ValueError("metric name must be a non-empty string")
        sample = MetricSample(_coerce_value(value), time.time(), dict(tags or {}))
        with self._lock:
            series = self._series.get(name)
            if series is None:
                info = CATALOG.get(name)
                series = MetricSeries(
                    name=name,
                    kind=kind or (info.kind if info else "gauge"),
                    description=info.description if info else None,
                )
                self._series[name] = series
            series.samples.append(sample)
        return sample

    def get_series(self, name: str) -> MetricSeries | None:
        """Return a detached copy of the series recorded under ``name``."""

        with self._lock:
            series = self._series.get(name)
            if series is None:
                return None
            return MetricSeries(series.name, series.kind, series.description, list(series.samples))

    def total(self, name: str) -> float:
        series = self.get_series(name)
        return series.total if series is not None else 0.0

    def names(self) -> Iterable[str]:
        with self._lock:
            return sorted(self._series)

    def snapshot(self) -> Dict[str, list[Dict[str, Any]]]:
        with self._lock:
            return {
                name: [sample.to_dict() for sample in series.samples]
                for name, series in self._series.items()
            }

    def summaries(self) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {name: series.summary() for name, series in self._series.items()}

    def reset(self) -> None:
        with self._lock:
            self._series.clear()


_REGISTRY = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    return _REGISTRY


def _coerce_value(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise TypeError(f"metric value {value!r} is not numeric") from exc
    raise TypeError(f"metric value {value!r} is not numeric")


__all__ = [
    "BINDINGS",
    "CATALOG",
    "FAILED",
    "MetricInfo",
    "MetricSample",
    "MetricSeries",
    "MetricsRegistry",
    "PROCESSED",
    "SIGNATURES_UPDATED",
    "get_registry",
]
