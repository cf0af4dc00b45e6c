"""Exporter configuration: command line flags with environment variable defaults."""
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class ExporterConfig:
    namespace: str = "lnd"
    listen_address: str = ":9113"
    metrics_path: str = "/metrics"
    rpc_addr: str = "localhost:8080"
    tls_cert_path: str = "/root/.lnd/tls.cert"
    macaroon_path: str = ""
    python_metrics: bool = False
    peer_metrics: bool = True
    forwarding_metrics: bool = True
    timeout: float = 15.0
    log_level: str = "INFO"
    debug: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'ExporterConfig':
        return cls(
            namespace=args.namespace,
            listen_address=args.listen_address,
            metrics_path=args.metrics_path,
            rpc_addr=args.rpc_addr,
            tls_cert_path=args.tls_cert_path,
            macaroon_path=args.macaroon_path,
            python_metrics=args.python_metrics,
            peer_metrics=args.peer_metrics,
            forwarding_metrics=args.forwarding_metrics,
            timeout=args.timeout,
            log_level=args.log_level,
            debug=args.debug,
        )


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def build_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    """Build the argument parser. Defaults are read from ``environ``."""
    env = os.environ if environ is None else environ
    defaults = ExporterConfig()

    parser = argparse.ArgumentParser(
        prog="lightning-exporter",
        description="Prometheus exporter for an lnd Lightning node."
    )

    def env_bool(name: str, default: bool) -> bool:
        raw = env.get(name)
        if raw is None:
            return default
        try:
            return parse_bool(raw)
        except ValueError:
            parser.error(f"environment variable {name}: expected a boolean, got {raw!r}")

    def env_float(name: str, default: float) -> float:
        raw = env.get(name)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            parser.error(f"environment variable {name}: expected a number, got {raw!r}")

    parser.add_argument('--namespace', default=env.get('NAMESPACE', defaults.namespace),
                        help='The namespace or prefix to use in the exported metrics (env NAMESPACE).')
    parser.add_argument('--web.listen-address', dest='listen_address',
                        default=env.get('LISTEN_ADDRESS', defaults.listen_address),
                        help='Address to listen on for web interface and telemetry (env LISTEN_ADDRESS).')
    parser.add_argument('--web.telemetry-path', dest='metrics_path',
                        default=env.get('TELEMETRY_PATH', defaults.metrics_path),
                        help='Path under which to expose metrics (env TELEMETRY_PATH).')
    parser.add_argument('--rpc.addr', dest='rpc_addr', default=env.get('RPC_ADDR', defaults.rpc_addr),
                        help='lnd REST address, host:port (env RPC_ADDR).')
    parser.add_argument('--lnd.tls-cert-path', dest='tls_cert_path',
                        default=env.get('TLS_CERT_PATH', defaults.tls_cert_path),
                        help='Path to the node TLS certificate (env TLS_CERT_PATH).')
    parser.add_argument('--lnd.macaroon-path', dest='macaroon_path',
                        default=env.get('MACAROON_PATH', defaults.macaroon_path),
                        help='Path to the read-only macaroon (env MACAROON_PATH).')
    parser.add_argument('--python-metrics', dest='python_metrics', action=argparse.BooleanOptionalAction,
                        default=env_bool('PYTHON_METRICS', defaults.python_metrics),
                        help='Also expose process and Python runtime metrics (env PYTHON_METRICS).')
    parser.add_argument('--peer-metrics', dest='peer_metrics', action=argparse.BooleanOptionalAction,
                        default=env_bool('PEER_METRICS', defaults.peer_metrics),
                        help='Export per-peer metrics (env PEER_METRICS).')
    parser.add_argument('--forwarding-metrics', dest='forwarding_metrics',
                        action=argparse.BooleanOptionalAction,
                        default=env_bool('FORWARDING_METRICS', defaults.forwarding_metrics),
                        help='Export one series per forwarding event (env FORWARDING_METRICS).')
    parser.add_argument('--timeout', type=float, default=env_float('SCRAPE_TIMEOUT', defaults.timeout),
                        help='Deadline in seconds shared by all RPC calls of one scrape (env SCRAPE_TIMEOUT).')
    parser.add_argument('--log-level', type=str.upper, default=env.get('LOG_LEVEL', defaults.log_level),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging level (default: INFO, ignored if --debug is used)')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug output (overrides --log-level)')
    return parser


def load_config(argv=None, environ: Optional[Mapping[str, str]] = None) -> ExporterConfig:
    parser = build_parser(environ)
    args = parser.parse_args(argv)
    if args.timeout <= 0:
        parser.error("--timeout must be positive")
    if not args.metrics_path.startswith('/'):
        args.metrics_path = '/' + args.metrics_path
    return ExporterConfig.from_args(args)
