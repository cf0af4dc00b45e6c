from __future__ import annotations

import pytest

from lightning_exporter.probes import (
    ChannelBalanceProbe,
    ChannelDetailProbe,
    ForwardingHistoryProbe,
    NetworkInfoProbe,
    NodeStatusProbe,
    PeerDetailProbe,
    PendingChannelsProbe,
    ProbeBase,
    WalletBalanceProbe,
    default_probes,
)
from lightning_exporter.probes.channels import balance_ratio
from lightning_exporter.responses import Channel, NodeInfo
from lightning_exporter.types import ProbeError

from conftest import FakeClient, by_name


def values(samples):
    return {(s.descriptor.key, s.label_values): s.value for s in samples}


def test_default_order():
    names = [p.NAME for p in default_probes()]
    assert names == [
        "node_status",
        "wallet_balance",
        "pending_channels",
        "channel_balance",
        "forwarding_history",
        "network_info",
        "channel_detail",
        "peer_detail",
    ]


def test_optional_probes_can_be_disabled():
    names = [p.NAME for p in default_probes(forwarding_metrics=False, peer_metrics=False)]
    assert "forwarding_history" not in names
    assert "peer_detail" not in names
    assert len(names) == 6


def test_node_status_scenario(catalog):
    result, samples = NodeStatusProbe().run(FakeClient(), catalog)
    assert result.status == "ok"
    got = values(samples)
    assert got[("peers", ())] == 5
    assert got[("channels", ("active",))] == 2
    assert got[("channels", ("pending",))] == 1
    assert got[("channels", ("inactive",))] == 0
    assert got[("instance_info", ("alice", "02abc", "0.17.0-beta"))] == 1
    assert got[("block_height", ())] == 800000
    assert got[("synced_to_chain", ())] == 1


def test_node_status_not_synced(catalog):
    client = FakeClient(info=NodeInfo(synced_to_chain=False))
    _, samples = NodeStatusProbe().run(client, catalog)
    assert by_name(samples, "lnd_synced_to_chain")[0].value == 0


def test_wallet_balance(catalog):
    _, samples = WalletBalanceProbe().run(FakeClient(), catalog)
    assert values(samples) == {
        ("wallet_balance_sats", ("unconfirmed",)): 50,
        ("wallet_balance_sats", ("confirmed",)): 1000,
    }


def test_pending_channels(catalog):
    _, samples = PendingChannelsProbe().run(FakeClient(), catalog)
    assert values(samples) == {
        ("channel_limbo_balance_sats", ()): 20,
        ("channels_pending", ("opening", "false")): 1,
        ("channels_pending", ("closing", "false")): 2,
        ("channels_pending", ("closing", "true")): 3,
        ("channels_waiting_close", ()): 4,
    }


def test_channel_balance(catalog):
    _, samples = ChannelBalanceProbe().run(FakeClient(), catalog)
    assert values(samples) == {("channels_balance_sats", ()): 700}


def test_forwarding_history_labels(catalog):
    _, samples = ForwardingHistoryProbe().run(FakeClient(), catalog)
    assert len(samples) == 1
    assert samples[0].value == 1
    assert samples[0].label_values == (
        "bob", "carol", "1001", "1000", "1", "11", "22", "1700000000000000000",
    )


def test_network_info(catalog):
    _, samples = NetworkInfoProbe().run(FakeClient(), catalog)
    assert values(samples) == {
        ("network_capacity_sats_total", ()): 500000000,
        ("network_channels_total", ()): 60000,
        ("network_nodes_total", ()): 15000,
    }


def test_channel_detail_with_ratio(catalog):
    _, samples = ChannelDetailProbe().run(FakeClient(), catalog)
    assert [s.descriptor.key for s in samples] == ["channel_balance_percentage", "channel_balance_sats"]
    ratio, balance = samples
    assert ratio.value == pytest.approx(0.5)
    assert balance.value == 45
    assert balance.label_values == ("true", "03def", "txid:0", "11", "100", "10", "false", "true")
    assert ratio.label_values == balance.label_values


def test_channel_detail_without_usable_capacity(catalog):
    channel = Channel(capacity=10, commit_fee=10, local_balance=45, chan_id=7)
    _, samples = ChannelDetailProbe().run(FakeClient(channels=[channel]), catalog)
    assert [s.descriptor.key for s in samples] == ["channel_balance_sats"]
    assert samples[0].value == 45


@pytest.mark.parametrize("capacity,commit_fee,expected", [
    (100, 10, 0.5),
    (10, 10, None),
    (5, 10, None),
    (0, 0, None),
])
def test_balance_ratio_guard(capacity, commit_fee, expected):
    ratio = balance_ratio(Channel(capacity=capacity, commit_fee=commit_fee, local_balance=45))
    if expected is None:
        assert ratio is None
    else:
        assert ratio == pytest.approx(expected)


def test_peer_detail(catalog):
    _, samples = PeerDetailProbe().run(FakeClient(), catalog)
    got = values(samples)
    assert got[("peer_info", ("10.0.0.1:9735", "03def", "inbound"))] == 1
    assert got[("peer_info_received_bytes_total", ("10.0.0.1:9735",))] == 200
    assert got[("peer_info_sent_bytes_total", ("10.0.0.1:9735",))] == 300


def test_empty_lists_yield_no_item_samples(catalog):
    client = FakeClient(channels=[], peers=[])
    assert ChannelDetailProbe().run(client, catalog)[1] == []
    assert PeerDetailProbe().run(client, catalog)[1] == []


def test_rpc_failure_is_skipped(catalog):
    client = FakeClient(failures={"wallet_balance": ProbeError("GET /v1/balance/blockchain HTTP 500")})
    result, samples = WalletBalanceProbe().run(client, catalog)
    assert result.is_skipped
    assert "HTTP 500" in result.cause
    assert samples == []


def test_mapping_error_is_skipped(catalog):
    client = FakeClient(channels=[object()])
    result, samples = ChannelDetailProbe().run(client, catalog)
    assert result.is_skipped
    assert result.cause.startswith("ListChannels: AttributeError")
    assert samples == []


def test_probe_requires_name():
    class Nameless(ProbeBase):
        RPC = "GetInfo"

        def collect(self, client, catalog):
            return []

    with pytest.raises(NotImplementedError):
        Nameless()
