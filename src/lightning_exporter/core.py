"""Scrape orchestration: one connection, the ordered probes, one liveness sample."""
from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Iterator, List, Optional, Sequence

from .catalog import MetricCatalog
from .probes import ProbeBase, default_probes
from .rpc import CredentialProvider, Deadline, LndRestClient, NodeConnection
from .types import MetricDescriptor, ProbeResult, Sample, SessionReport

log = logging.getLogger("lightning-exporter.core")

DEFAULT_TIMEOUT = 15.0


class State(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    PROBING = "probing"
    DONE = "done"
    FAILED = "failed"


class ScrapeSession:
    """State owned by a single scrape. Never outlives it."""

    def __init__(self, connection: NodeConnection, client: LndRestClient, deadline: Deadline,
                 probes: Sequence[ProbeBase], catalog: MetricCatalog, report: SessionReport):
        self.connection = connection
        self.client = client
        self.deadline = deadline
        self.probes = probes
        self.catalog = catalog
        self.report = report
        self.cursor = 0

    def run(self) -> Iterator[Sample]:
        """Yield each probe's samples as it completes.

        Returns False when a required probe failed, True otherwise.
        """
        while self.cursor < len(self.probes):
            probe = self.probes[self.cursor]
            if self.deadline.expired:
                self._skip_remaining(f"deadline of {self.deadline.seconds}s exceeded")
                break
            self.cursor += 1
            log.debug(f"Running probe {probe.NAME} ({probe.RPC})")
            result, samples = probe.run(self.client, self.catalog)
            self.report.add(result)
            if probe.REQUIRED and result.is_skipped:
                self.report.connection_error = result.cause
                return False
            yield from samples
        return True

    def _skip_remaining(self, cause: str) -> None:
        for probe in self.probes[self.cursor:]:
            self.report.add(ProbeResult.skipped(probe.NAME, cause))
        self.cursor = len(self.probes)


class CollectionOrchestrator:
    """Runs one scrape at a time against the node.

    ``collect()`` never raises for node or RPC failures: a node that cannot be
    reached yields a single ``up 0`` sample, a failed probe is left out of the
    scrape. The liveness sample is always the last one yielded.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        catalog: Optional[MetricCatalog] = None,
        probes: Optional[Sequence[ProbeBase]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client_factory: Callable[[NodeConnection, Deadline], LndRestClient] = LndRestClient,
    ):
        self.credentials = credentials
        self.catalog = catalog if catalog is not None else MetricCatalog()
        self.probes: List[ProbeBase] = list(probes) if probes is not None else default_probes()
        self.timeout = timeout
        self.client_factory = client_factory
        self.lock = threading.Lock()
        self.state = State.IDLE
        self.last_report: Optional[SessionReport] = None

    def describe(self) -> Sequence[MetricDescriptor]:
        return self.catalog.describe()

    def collect(self) -> Iterator[Sample]:
        """Run one scrape and yield its samples."""
        with self.lock:
            report = SessionReport()
            try:
                yield from self._scrape(report)
            finally:
                if not report.finished:
                    report.abandon()
                self.state = State.IDLE
                self.last_report = report
                report.log(log)

    def _up(self, value: int) -> Sample:
        return self.catalog.sample("lnd_up", value)

    def _scrape(self, report: SessionReport) -> Iterator[Sample]:
        self.state = State.CONNECTING
        try:
            connection = self.credentials.connect()
        except Exception as e:
            report.connection_error = str(e)
            report.finish(up=False)
            self.state = State.FAILED
            yield self._up(0)
            return

        try:
            deadline = Deadline(self.timeout)
            session = ScrapeSession(
                connection=connection,
                client=self.client_factory(connection, deadline),
                deadline=deadline,
                probes=self.probes,
                catalog=self.catalog,
                report=report,
            )
            self.state = State.PROBING
            up = yield from session.run()
            report.finish(up=up)
            self.state = State.DONE if up else State.FAILED
            yield self._up(1 if up else 0)
        finally:
            connection.close()
