"""Shared type and exception definitions for the exporter."""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class ExporterError(Exception):
    """Base exception for exporter errors."""
    pass


class NodeConnectionError(ExporterError):
    """Raised when the node cannot be reached or its credentials cannot be loaded."""
    pass


class ProbeError(ExporterError):
    """Raised when a single RPC call fails."""
    pass


class DeadlineExceeded(ProbeError):
    """Raised when the shared scrape deadline has run out."""
    pass


class ValueKind(enum.Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Static metadata for one exported metric."""
    key: str
    name: str
    help: str
    labels: Tuple[str, ...] = ()
    kind: ValueKind = ValueKind.GAUGE


@dataclass(frozen=True)
class Sample:
    """One observed value of a metric."""
    descriptor: MetricDescriptor
    value: float
    kind: ValueKind = ValueKind.GAUGE
    label_values: Tuple[str, ...] = ()

    def __post_init__(self):
        if len(self.label_values) != len(self.descriptor.labels):
            raise ValueError(
                f"{self.descriptor.name}: expected {len(self.descriptor.labels)} label values, "
                f"got {len(self.label_values)}"
            )

    @property
    def labels(self):
        return dict(zip(self.descriptor.labels, self.label_values))


@dataclass
class ProbeResult:
    """Outcome of one probe within a scrape."""
    probe_name: str
    status: str = "ok"
    samples: int = 0
    cause: Optional[str] = None

    @classmethod
    def ok(cls, probe_name: str, samples: int) -> 'ProbeResult':
        return cls(probe_name=probe_name, status="ok", samples=samples)

    @classmethod
    def skipped(cls, probe_name: str, cause: str, samples: int = 0) -> 'ProbeResult':
        return cls(probe_name=probe_name, status="skipped", samples=samples, cause=cause)

    @property
    def is_skipped(self) -> bool:
        return self.status == "skipped"


@dataclass
class SessionReport:
    """Summary of one scrape: connection outcome plus every probe result."""
    up: bool = False
    connection_error: Optional[str] = None
    results: List[ProbeResult] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)
    duration: float = 0.0
    finished: bool = False
    abandoned: bool = False

    def add(self, result: ProbeResult) -> None:
        self.results.append(result)

    def finish(self, up: bool) -> None:
        self.up = up
        self.duration = time.monotonic() - self.started
        self.finished = True

    def abandon(self) -> None:
        """Mark a scrape whose consumer stopped reading before liveness was decided."""
        self.abandoned = True
        self.duration = time.monotonic() - self.started

    @property
    def skipped(self) -> List[ProbeResult]:
        return [r for r in self.results if r.is_skipped]

    def log(self, logger: logging.Logger) -> None:
        """Render the report to the given logger."""
        if self.connection_error is not None:
            logger.error(f"Scrape failed, node unreachable: {self.connection_error}")
        for result in self.skipped:
            logger.warning(f"Probe {result.probe_name} skipped: {result.cause}")
        ok = len(self.results) - len(self.skipped)
        if self.abandoned:
            logger.info(
                f"Scrape abandoned by the consumer probes_ok={ok} "
                f"probes_skipped={len(self.skipped)} duration={self.duration:.3f}s"
            )
            return
        logger.info(
            f"Scrape finished up={int(self.up)} probes_ok={ok} "
            f"probes_skipped={len(self.skipped)} duration={self.duration:.3f}s"
        )
