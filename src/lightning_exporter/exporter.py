"""prometheus_client glue: publishes the catalog and each scrape as metric families."""
from __future__ import annotations

import logging
from typing import Dict, List

from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .core import CollectionOrchestrator
from .types import MetricDescriptor, ValueKind

log = logging.getLogger("lightning-exporter.exporter")


def metric_family(descriptor: MetricDescriptor) -> Metric:
    if descriptor.kind is ValueKind.COUNTER:
        return CounterMetricFamily(descriptor.name, descriptor.help, labels=list(descriptor.labels))
    return GaugeMetricFamily(descriptor.name, descriptor.help, labels=list(descriptor.labels))


class LightningCollector:
    """Custom collector handed to a ``CollectorRegistry``.

    ``describe`` comes straight from the catalog, so the registry knows every
    family before the first scrape. ``collect`` runs one scrape and groups its
    samples by descriptor, keeping the order in which families first appear.
    """

    def __init__(self, orchestrator: CollectionOrchestrator):
        self.orchestrator = orchestrator

    def describe(self) -> List[Metric]:
        return [metric_family(d) for d in self.orchestrator.describe()]

    def collect(self) -> List[Metric]:
        families: Dict[str, Metric] = {}
        for sample in self.orchestrator.collect():
            descriptor = sample.descriptor
            family = families.get(descriptor.key)
            if family is None:
                family = families[descriptor.key] = metric_family(descriptor)
            family.add_metric(list(sample.label_values), sample.value)
        return list(families.values())


def build_registry(orchestrator: CollectionOrchestrator, python_metrics: bool = False) -> CollectorRegistry:
    """Create the registry served on the metrics path."""
    registry = CollectorRegistry()
    registry.register(LightningCollector(orchestrator))
    if python_metrics:
        log.debug("Registering process, platform and GC collectors")
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)
    return registry
