from __future__ import annotations

from .probe_base import ProbeBase


class PeerDetailProbe(ProbeBase):
    """ListPeers: presence and traffic counters per connected peer."""
    NAME = "peer_detail"
    RPC = "ListPeers"

    def collect(self, client, catalog):
        samples = []
        for peer in client.list_peers():
            direction = "inbound" if peer.inbound else "outbound"
            samples.append(catalog.sample("peer_info", 1, peer.address, peer.pub_key, direction))
            samples.append(catalog.sample("peer_info_received_bytes_total", peer.bytes_recv, peer.address))
            samples.append(catalog.sample("peer_info_sent_bytes_total", peer.bytes_sent, peer.address))
        return samples
