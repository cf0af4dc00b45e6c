from __future__ import annotations

from unittest.mock import patch

import pytest

from lightning_exporter import cli
from lightning_exporter.config import ExporterConfig, load_config, parse_bool
from lightning_exporter.core import CollectionOrchestrator


def test_defaults():
    config = load_config([], environ={})
    assert config == ExporterConfig()
    assert config.namespace == "lnd"
    assert config.listen_address == ":9113"
    assert config.metrics_path == "/metrics"
    assert config.timeout == 15.0


def test_environment_supplies_defaults():
    config = load_config([], environ={
        "NAMESPACE": "ln",
        "LISTEN_ADDRESS": ":9999",
        "TELEMETRY_PATH": "/m",
        "RPC_ADDR": "node:8080",
        "TLS_CERT_PATH": "/certs/tls.cert",
        "MACAROON_PATH": "/macs/readonly.macaroon",
        "PYTHON_METRICS": "true",
        "PEER_METRICS": "no",
        "SCRAPE_TIMEOUT": "5",
    })
    assert config.namespace == "ln"
    assert config.listen_address == ":9999"
    assert config.metrics_path == "/m"
    assert config.rpc_addr == "node:8080"
    assert config.tls_cert_path == "/certs/tls.cert"
    assert config.macaroon_path == "/macs/readonly.macaroon"
    assert config.python_metrics is True
    assert config.peer_metrics is False
    assert config.timeout == 5.0


def test_flags_win_over_environment():
    config = load_config(
        ["--namespace", "flag", "--rpc.addr", "other:8080", "--peer-metrics", "--no-forwarding-metrics"],
        environ={"NAMESPACE": "env", "RPC_ADDR": "env:8080", "PEER_METRICS": "false"},
    )
    assert config.namespace == "flag"
    assert config.rpc_addr == "other:8080"
    assert config.peer_metrics is True
    assert config.forwarding_metrics is False


def test_metrics_path_gets_leading_slash():
    assert load_config(["--web.telemetry-path", "metrics"], environ={}).metrics_path == "/metrics"


@pytest.mark.parametrize("raw,expected", [
    ("1", True), ("TRUE", True), ("on", True), ("0", False), ("False", False), ("off", False),
])
def test_parse_bool(raw, expected):
    assert parse_bool(raw) is expected


def test_bad_boolean_environment_is_an_error():
    with pytest.raises(SystemExit):
        load_config([], environ={"PYTHON_METRICS": "maybe"})


def test_non_positive_timeout_is_an_error():
    with pytest.raises(SystemExit):
        load_config(["--timeout", "0"], environ={})


def test_build_orchestrator_honours_flags():
    config = ExporterConfig(namespace="ln", peer_metrics=False, forwarding_metrics=False, timeout=3)
    orchestrator = cli.build_orchestrator(config)
    assert isinstance(orchestrator, CollectionOrchestrator)
    assert orchestrator.catalog["lnd_up"].name == "ln_lnd_up"
    assert orchestrator.timeout == 3
    assert [p.NAME for p in orchestrator.probes] == [
        "node_status", "wallet_balance", "pending_channels", "channel_balance",
        "network_info", "channel_detail",
    ]


@patch("lightning_exporter.cli.setup_logging")
@patch("lightning_exporter.cli.ExporterDaemon.bind", side_effect=OSError("Address already in use"))
def test_main_exits_when_listen_fails(mock_bind, mock_logging):
    assert cli.main(["--web.listen-address", "127.0.0.1:1"]) == 1
    mock_bind.assert_called_once()


@patch("lightning_exporter.cli.setup_logging")
@patch("lightning_exporter.cli.ExporterDaemon.start")
@patch("lightning_exporter.cli.ExporterDaemon.bind")
def test_main_serves(mock_bind, mock_start, mock_logging):
    assert cli.main(["--debug"]) == 0
    assert mock_logging.call_args[1]["debug"] is True
    mock_start.assert_called_once()
