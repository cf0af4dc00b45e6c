from __future__ import annotations

from .probe_base import ProbeBase


class NetworkInfoProbe(ProbeBase):
    NAME = "network_info"
    RPC = "GetNetworkInfo"

    def collect(self, client, catalog):
        info = client.network_info()
        return [
            catalog.sample("network_capacity_sats_total", info.total_network_capacity),
            catalog.sample("network_channels_total", info.num_channels),
            catalog.sample("network_nodes_total", info.num_nodes),
        ]
