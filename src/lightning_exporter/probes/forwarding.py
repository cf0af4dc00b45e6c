from __future__ import annotations

from .probe_base import ProbeBase


class ForwardingHistoryProbe(ProbeBase):
    """One info series per forwarding event of the node's default history window."""
    NAME = "forwarding_history"
    RPC = "ForwardingHistory"

    def collect(self, client, catalog):
        history = client.forwarding_history()
        return [
            catalog.sample(
                "forwarding_history_info", 1,
                event.peer_alias_in,
                event.peer_alias_out,
                event.amt_in,
                event.amt_out,
                event.fee,
                event.chan_id_in,
                event.chan_id_out,
                event.timestamp_ns,
            )
            for event in history.events
        ]
