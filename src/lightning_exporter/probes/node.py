from __future__ import annotations

from .probe_base import ProbeBase


class NodeStatusProbe(ProbeBase):
    """GetInfo: identity, peer and channel counts, chain view.

    Runs first. If it fails the node is considered down for the scrape.
    """
    NAME = "node_status"
    RPC = "GetInfo"
    REQUIRED = True

    def collect(self, client, catalog):
        info = client.get_info()
        return [
            catalog.sample("instance_info", 1, info.alias, info.identity_pubkey, info.version),
            catalog.sample("peers", info.num_peers),
            catalog.sample("channels", info.num_active_channels, "active"),
            catalog.sample("channels", info.num_pending_channels, "pending"),
            catalog.sample("channels", info.num_inactive_channels, "inactive"),
            catalog.sample("block_height", info.block_height),
            catalog.sample("synced_to_chain", 1 if info.synced_to_chain else 0),
        ]
