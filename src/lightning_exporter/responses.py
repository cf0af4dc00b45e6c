"""Typed views of the lnd REST responses the exporter reads.

The REST gateway serialises 64-bit integers as JSON strings and leaves out
fields holding their zero value, so every accessor here tolerates both.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


def _int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value in (None, ""):
        return 0
    return int(value)


def _bool(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _list(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    return list(data.get(key) or [])


@dataclass
class NodeInfo:
    alias: str = ""
    identity_pubkey: str = ""
    version: str = ""
    num_peers: int = 0
    num_active_channels: int = 0
    num_pending_channels: int = 0
    num_inactive_channels: int = 0
    block_height: int = 0
    synced_to_chain: bool = False

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'NodeInfo':
        return cls(
            alias=_str(data, "alias"),
            identity_pubkey=_str(data, "identity_pubkey"),
            version=_str(data, "version"),
            num_peers=_int(data, "num_peers"),
            num_active_channels=_int(data, "num_active_channels"),
            num_pending_channels=_int(data, "num_pending_channels"),
            num_inactive_channels=_int(data, "num_inactive_channels"),
            block_height=_int(data, "block_height"),
            synced_to_chain=_bool(data, "synced_to_chain"),
        )


@dataclass
class WalletBalance:
    confirmed_balance: int = 0
    unconfirmed_balance: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'WalletBalance':
        return cls(
            confirmed_balance=_int(data, "confirmed_balance"),
            unconfirmed_balance=_int(data, "unconfirmed_balance"),
        )


@dataclass
class PendingChannels:
    total_limbo_balance: int = 0
    pending_open: int = 0
    pending_closing: int = 0
    pending_force_closing: int = 0
    waiting_close: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'PendingChannels':
        return cls(
            total_limbo_balance=_int(data, "total_limbo_balance"),
            pending_open=len(_list(data, "pending_open_channels")),
            pending_closing=len(_list(data, "pending_closing_channels")),
            pending_force_closing=len(_list(data, "pending_force_closing_channels")),
            waiting_close=len(_list(data, "waiting_close_channels")),
        )


@dataclass
class ChannelBalance:
    balance: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ChannelBalance':
        return cls(balance=_int(data, "balance"))


@dataclass
class ForwardingEvent:
    peer_alias_in: str = ""
    peer_alias_out: str = ""
    amt_in: int = 0
    amt_out: int = 0
    fee: int = 0
    chan_id_in: int = 0
    chan_id_out: int = 0
    timestamp_ns: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ForwardingEvent':
        return cls(
            peer_alias_in=_str(data, "peer_alias_in"),
            peer_alias_out=_str(data, "peer_alias_out"),
            amt_in=_int(data, "amt_in"),
            amt_out=_int(data, "amt_out"),
            fee=_int(data, "fee"),
            chan_id_in=_int(data, "chan_id_in"),
            chan_id_out=_int(data, "chan_id_out"),
            timestamp_ns=_int(data, "timestamp_ns"),
        )


@dataclass
class ForwardingHistory:
    events: List[ForwardingEvent] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ForwardingHistory':
        return cls(events=[ForwardingEvent.from_json(e) for e in _list(data, "forwarding_events")])


@dataclass
class NetworkInfo:
    total_network_capacity: int = 0
    num_channels: int = 0
    num_nodes: int = 0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'NetworkInfo':
        return cls(
            total_network_capacity=_int(data, "total_network_capacity"),
            num_channels=_int(data, "num_channels"),
            num_nodes=_int(data, "num_nodes"),
        )


@dataclass
class Channel:
    active: bool = False
    remote_pubkey: str = ""
    channel_point: str = ""
    chan_id: int = 0
    capacity: int = 0
    local_balance: int = 0
    commit_fee: int = 0
    private: bool = False
    initiator: bool = False

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Channel':
        return cls(
            active=_bool(data, "active"),
            remote_pubkey=_str(data, "remote_pubkey"),
            channel_point=_str(data, "channel_point"),
            chan_id=_int(data, "chan_id"),
            capacity=_int(data, "capacity"),
            local_balance=_int(data, "local_balance"),
            commit_fee=_int(data, "commit_fee"),
            private=_bool(data, "private"),
            initiator=_bool(data, "initiator"),
        )


@dataclass
class Peer:
    pub_key: str = ""
    address: str = ""
    bytes_sent: int = 0
    bytes_recv: int = 0
    inbound: bool = False

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Peer':
        return cls(
            pub_key=_str(data, "pub_key"),
            address=_str(data, "address"),
            bytes_sent=_int(data, "bytes_sent"),
            bytes_recv=_int(data, "bytes_recv"),
            inbound=_bool(data, "inbound"),
        )
