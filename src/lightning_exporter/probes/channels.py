"""Probes reading channel state: pending channels, balances, per-channel detail."""
from __future__ import annotations

from typing import List, Optional

from ..responses import Channel
from ..types import Sample
from .probe_base import ProbeBase, bool_label


def balance_ratio(channel: Channel) -> Optional[float]:
    """Local balance over usable capacity, or None when there is none.

    Usable capacity is the channel capacity minus the commitment fee.
    """
    usable = channel.capacity - channel.commit_fee
    if usable <= 0:
        return None
    return channel.local_balance / usable


def channel_labels(channel: Channel):
    return (
        bool_label(channel.active),
        channel.remote_pubkey,
        channel.channel_point,
        str(channel.chan_id),
        str(channel.capacity),
        str(channel.commit_fee),
        bool_label(channel.private),
        bool_label(channel.initiator),
    )


class PendingChannelsProbe(ProbeBase):
    NAME = "pending_channels"
    RPC = "PendingChannels"

    def collect(self, client, catalog):
        pending = client.pending_channels()
        return [
            catalog.sample("channel_limbo_balance_sats", pending.total_limbo_balance),
            catalog.sample("channels_pending", pending.pending_open, "opening", "false"),
            catalog.sample("channels_pending", pending.pending_closing, "closing", "false"),
            catalog.sample("channels_pending", pending.pending_force_closing, "closing", "true"),
            catalog.sample("channels_waiting_close", pending.waiting_close),
        ]


class ChannelBalanceProbe(ProbeBase):
    NAME = "channel_balance"
    RPC = "ChannelBalance"

    def collect(self, client, catalog):
        return [catalog.sample("channels_balance_sats", client.channel_balance().balance)]


class ChannelDetailProbe(ProbeBase):
    """ListChannels: one balance series per open channel, plus its ratio."""
    NAME = "channel_detail"
    RPC = "ListChannels"

    def collect(self, client, catalog):
        samples: List[Sample] = []
        for channel in client.list_channels():
            labels = channel_labels(channel)
            ratio = balance_ratio(channel)
            if ratio is not None:
                samples.append(catalog.sample("channel_balance_percentage", ratio, *labels))
            samples.append(catalog.sample("channel_balance_sats", channel.local_balance, *labels))
        return samples
