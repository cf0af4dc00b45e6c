from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lightning-exporter")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["catalog", "cli", "core", "daemon", "exporter", "probes", "rpc"]
