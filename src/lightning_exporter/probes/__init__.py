"""Probes run against the node on every scrape.

Each probe wraps one read-only lnd call and maps its answer to samples.
``default_probes`` returns them in the order a scrape runs them.
"""
from typing import List

from .probe_base import ProbeBase
from .node import NodeStatusProbe
from .wallet import WalletBalanceProbe
from .channels import ChannelBalanceProbe, ChannelDetailProbe, PendingChannelsProbe
from .forwarding import ForwardingHistoryProbe
from .network import NetworkInfoProbe
from .peers import PeerDetailProbe


def default_probes(forwarding_metrics: bool = True, peer_metrics: bool = True) -> List[ProbeBase]:
    """Build the fixed probe sequence, leaving out the disabled optional probes."""
    probes: List[ProbeBase] = [
        NodeStatusProbe(),
        WalletBalanceProbe(),
        PendingChannelsProbe(),
        ChannelBalanceProbe(),
    ]
    if forwarding_metrics:
        probes.append(ForwardingHistoryProbe())
    probes.append(NetworkInfoProbe())
    probes.append(ChannelDetailProbe())
    if peer_metrics:
        probes.append(PeerDetailProbe())
    return probes


__all__ = [
    "ProbeBase",
    "NodeStatusProbe",
    "WalletBalanceProbe",
    "PendingChannelsProbe",
    "ChannelBalanceProbe",
    "ForwardingHistoryProbe",
    "NetworkInfoProbe",
    "ChannelDetailProbe",
    "PeerDetailProbe",
    "default_probes",
]
