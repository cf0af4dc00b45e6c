import logging
import sys
from typing import List, Optional

from . import __version__
from .catalog import MetricCatalog
from .config import ExporterConfig, load_config
from .core import CollectionOrchestrator
from .daemon import ExporterDaemon
from .exporter import build_registry
from .probes import default_probes
from .rpc import CredentialProvider

LOG_FORMAT = '%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s'


def setup_logging(level: str = "INFO", debug: bool = False) -> logging.Logger:
    """Configure the root logger and return the exporter's logger."""
    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%dT%H:%M:%S%z'))
    root_logger.addHandler(console)

    log = logging.getLogger("lightning-exporter")
    log.setLevel(log_level)
    return log


def build_orchestrator(config: ExporterConfig) -> CollectionOrchestrator:
    credentials = CredentialProvider(
        rpc_addr=config.rpc_addr,
        tls_cert_path=config.tls_cert_path,
        macaroon_path=config.macaroon_path,
    )
    return CollectionOrchestrator(
        credentials,
        catalog=MetricCatalog(config.namespace),
        probes=default_probes(
            forwarding_metrics=config.forwarding_metrics,
            peer_metrics=config.peer_metrics,
        ),
        timeout=config.timeout,
    )


def build_daemon(config: ExporterConfig) -> ExporterDaemon:
    orchestrator = build_orchestrator(config)
    registry = build_registry(orchestrator, python_metrics=config.python_metrics)
    return ExporterDaemon(config, registry)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    config = load_config(argv)
    log = setup_logging(config.log_level, debug=config.debug)
    log.info(f"Lightning Prometheus Exporter version={__version__}")
    log.debug(f"Configuration: {config}")

    try:
        daemon = build_daemon(config)
        daemon.bind()
    except (OSError, ValueError) as e:
        log.error(f"Cannot listen on {config.listen_address}: {e}")
        return 1

    daemon.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
