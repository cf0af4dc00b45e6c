from __future__ import annotations

from typing import Dict, Optional

import pytest

from lightning_exporter.catalog import MetricCatalog
from lightning_exporter.core import CollectionOrchestrator
from lightning_exporter.probes import default_probes
from lightning_exporter.responses import (
    Channel,
    ChannelBalance,
    ForwardingEvent,
    ForwardingHistory,
    NetworkInfo,
    NodeInfo,
    PendingChannels,
    Peer,
    WalletBalance,
)
from lightning_exporter.types import NodeConnectionError


class FakeConnection:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeCredentials:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.connections = []

    def connect(self):
        if self.error is not None:
            raise self.error
        conn = FakeConnection()
        self.connections.append(conn)
        return conn


class FakeClient:
    """Stands in for LndRestClient; ``failures`` maps method name to exception."""

    def __init__(self, failures: Optional[Dict[str, Exception]] = None, **overrides):
        self.failures = failures or {}
        self.calls = []
        self.info = overrides.get("info", NodeInfo(
            alias="alice", identity_pubkey="02abc", version="0.17.0-beta",
            num_peers=5, num_active_channels=2, num_pending_channels=1,
            num_inactive_channels=0, block_height=800000, synced_to_chain=True,
        ))
        self.wallet = overrides.get("wallet", WalletBalance(confirmed_balance=1000, unconfirmed_balance=50))
        self.pending = overrides.get("pending", PendingChannels(
            total_limbo_balance=20, pending_open=1, pending_closing=2,
            pending_force_closing=3, waiting_close=4,
        ))
        self.balance = overrides.get("balance", ChannelBalance(balance=700))
        self.history = overrides.get("history", ForwardingHistory(events=[
            ForwardingEvent(peer_alias_in="bob", peer_alias_out="carol", amt_in=1001, amt_out=1000,
                            fee=1, chan_id_in=11, chan_id_out=22, timestamp_ns=1700000000000000000),
        ]))
        self.network = overrides.get("network", NetworkInfo(
            total_network_capacity=500000000, num_channels=60000, num_nodes=15000,
        ))
        self.channels = overrides.get("channels", [
            Channel(active=True, remote_pubkey="03def", channel_point="txid:0", chan_id=11,
                    capacity=100, local_balance=45, commit_fee=10, private=False, initiator=True),
        ])
        self.peers = overrides.get("peers", [
            Peer(pub_key="03def", address="10.0.0.1:9735", bytes_sent=300, bytes_recv=200, inbound=True),
        ])

    def _answer(self, name, value):
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]
        return value

    def get_info(self):
        return self._answer("get_info", self.info)

    def wallet_balance(self):
        return self._answer("wallet_balance", self.wallet)

    def pending_channels(self):
        return self._answer("pending_channels", self.pending)

    def channel_balance(self):
        return self._answer("channel_balance", self.balance)

    def forwarding_history(self):
        return self._answer("forwarding_history", self.history)

    def network_info(self):
        return self._answer("network_info", self.network)

    def list_channels(self):
        return self._answer("list_channels", self.channels)

    def list_peers(self):
        return self._answer("list_peers", self.peers)


def make_orchestrator(client=None, credentials=None, timeout=15.0, **probe_flags):
    client = client or FakeClient()
    credentials = credentials or FakeCredentials()
    return CollectionOrchestrator(
        credentials,
        catalog=MetricCatalog("lnd"),
        probes=default_probes(**probe_flags),
        timeout=timeout,
        client_factory=lambda connection, deadline: client,
    )


def by_name(samples, name):
    return [s for s in samples if s.descriptor.name == name]


@pytest.fixture
def catalog():
    return MetricCatalog("lnd")


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def unreachable():
    return FakeCredentials(error=NodeConnectionError("Cannot read macaroon file ''"))
