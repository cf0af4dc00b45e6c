"""Base class for probes."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from ..catalog import MetricCatalog
from ..rpc import LndRestClient
from ..types import ProbeError, ProbeResult, Sample

log = logging.getLogger("lightning-exporter.probes")


def bool_label(value: bool) -> str:
    return "true" if value else "false"


class ProbeBase(ABC):
    """One RPC call plus the mapping of its response to samples."""

    # These should be overridden by subclasses
    NAME: str
    RPC: str

    # A required probe failing means the node is unusable for this scrape.
    REQUIRED = False

    def __init__(self):
        if not getattr(self, 'NAME', None):
            raise NotImplementedError("Subclasses must define NAME")
        if not getattr(self, 'RPC', None):
            raise NotImplementedError("Subclasses must define RPC")

    @abstractmethod
    def collect(self, client: LndRestClient, catalog: MetricCatalog) -> Iterable[Sample]:
        """Call the node and return the samples derived from its answer."""
        return []

    def run(self, client: LndRestClient, catalog: MetricCatalog) -> Tuple[ProbeResult, List[Sample]]:
        """Run the probe and return its outcome with the samples it produced.

        The samples are materialised before returning so a probe that fails
        half way contributes nothing.
        """
        try:
            samples = list(self.collect(client, catalog))
        except ProbeError as e:
            return ProbeResult.skipped(self.NAME, str(e)), []
        except Exception as e:
            log.debug(f"Probe {self.NAME} raised while mapping {self.RPC}", exc_info=True)
            return ProbeResult.skipped(self.NAME, f"{self.RPC}: {type(e).__name__}: {e}"), []
        return ProbeResult.ok(self.NAME, len(samples)), samples

    def __repr__(self):
        return f"<{type(self).__name__} {self.NAME}>"
