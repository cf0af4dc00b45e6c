"""Fixed set of metric descriptors exported for an lnd node."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

from .types import MetricDescriptor, Sample, ValueKind

DEFAULT_NAMESPACE = "lnd"

CHANNEL_LABELS = (
    "active",
    "remote_pubkey",
    "chan_point",
    "chan_id",
    "capacity",
    "commit_fee",
    "private",
    "initiator",
)

FORWARDING_LABELS = (
    "peer_alias_in",
    "peer_alias_out",
    "amount_in",
    "amount_out",
    "fee",
    "channel_id_in",
    "channel_id_out",
    "timestamp_ns",
)

# key -> (metric name, help text, label names, kind)
METRIC_TABLE = (
    ("lnd_up", "lnd_up", "Whether the last scrape reached the lnd node.", (), ValueKind.GAUGE),
    ("forwarding_history_info", "forwarding_history_info", "One series per forwarding event.",
     FORWARDING_LABELS, ValueKind.GAUGE),
    ("network_capacity_sats_total", "network_capacity_sats_total",
     "Total capacity of the public network in satoshis.", (), ValueKind.GAUGE),
    ("network_channels_total", "network_channels_total",
     "Number of channels in the public network.", (), ValueKind.GAUGE),
    ("network_nodes_total", "network_nodes_total",
     "Number of nodes in the public network.", (), ValueKind.GAUGE),
    ("instance_info", "instance_info", "Node alias, identity key and version.",
     ("alias", "pubkey", "version"), ValueKind.GAUGE),
    ("wallet_balance_sats", "wallet_balance_sats", "The wallet balance.", ("status",), ValueKind.GAUGE),
    ("peers", "peers", "Number of currently connected peers.", (), ValueKind.GAUGE),
    ("channels", "channels", "Number of channels", ("status",), ValueKind.GAUGE),
    ("block_height", "block_height", "The node's current view of the height of the best block",
     (), ValueKind.GAUGE),
    ("synced_to_chain", "synced_to_chain", "Whether the node is synced to the chain.",
     (), ValueKind.GAUGE),
    ("channel_limbo_balance_sats", "channel_limbo_balance_sats",
     "The balance in satoshis encumbered in pending channels", (), ValueKind.GAUGE),
    ("channels_pending", "channel_pending", "The total pending channels",
     ("status", "forced"), ValueKind.GAUGE),
    ("channels_waiting_close", "channel_waiting_close",
     "Channels waiting for closing tx to confirm", (), ValueKind.GAUGE),
    ("channels_balance_sats", "channels_balance_sats", "Sum of all channel funds available",
     (), ValueKind.GAUGE),
    ("channel_balance_sats", "channel_balance_sats", "The channel local balance",
     CHANNEL_LABELS, ValueKind.GAUGE),
    ("channel_balance_percentage", "channel_balance_percentage",
     "The channel local balance as a fraction of capacity minus commit fee",
     CHANNEL_LABELS, ValueKind.GAUGE),
    ("peer_info", "peer_info", "One series per connected peer.",
     ("addr", "remote_pubkey", "direction"), ValueKind.GAUGE),
    ("peer_info_received_bytes_total", "peer_info_received_bytes_total",
     "Bytes received from the peer.", ("addr",), ValueKind.COUNTER),
    ("peer_info_sent_bytes_total", "peer_info_sent_bytes_total",
     "Bytes sent to the peer.", ("addr",), ValueKind.COUNTER),
)


class MetricCatalog:
    """Immutable registry of metric descriptors, keyed by metric key.

    The catalog is built once and shared read-only by every scrape, so the
    metrics registry can publish it before the first scrape has run.
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE, table=METRIC_TABLE):
        descriptors = {}
        for key, name, help_text, labels, kind in table:
            if key in descriptors:
                raise ValueError(f"Duplicate metric key: {key}")
            full_name = f"{namespace}_{name}" if namespace else name
            descriptors[key] = MetricDescriptor(
                key=key,
                name=full_name,
                help=help_text,
                labels=tuple(labels),
                kind=kind,
            )
        self.namespace = namespace
        self._descriptors: Mapping[str, MetricDescriptor] = MappingProxyType(descriptors)

    def describe(self) -> Tuple[MetricDescriptor, ...]:
        """Return every descriptor, in table order."""
        return tuple(self._descriptors.values())

    def get(self, key: str) -> MetricDescriptor:
        return self._descriptors[key]

    __getitem__ = get

    def keys(self):
        return self._descriptors.keys()

    def sample(self, key: str, value, *label_values) -> Sample:
        """Build a Sample for the descriptor under ``key``."""
        descriptor = self._descriptors[key]
        return Sample(
            descriptor=descriptor,
            value=float(value),
            kind=descriptor.kind,
            label_values=tuple(str(v) for v in label_values),
        )

    def __contains__(self, key) -> bool:
        return key in self._descriptors

    def __iter__(self) -> Iterator[MetricDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)
