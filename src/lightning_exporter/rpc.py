"""Connection, credentials and client for the lnd REST gateway."""
from __future__ import annotations

import json
import logging
import socket
import ssl
import threading
import time
from typing import Any, Callable, Dict, Optional
from urllib import request, error as urlerror

from .responses import (
    Channel,
    ChannelBalance,
    ForwardingHistory,
    NetworkInfo,
    NodeInfo,
    PendingChannels,
    Peer,
    WalletBalance,
)
from .types import DeadlineExceeded, NodeConnectionError, ProbeError

log = logging.getLogger("lightning-exporter.rpc")

MACAROON_HEADER = "Grpc-Metadata-macaroon"

# lnd answers ListChannels and ForwardingHistory with large bodies on busy nodes.
MAX_RESPONSE_BYTES = 50 * 1024 * 1024
READ_CHUNK_BYTES = 64 * 1024


class Deadline:
    """A single point in time shared by every call of one scrape."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0


def _time_left(method: str, path: str, expires_at: float) -> float:
    left = expires_at - time.monotonic()
    if left <= 0:
        raise DeadlineExceeded(f"{method} {path} ran out of time")
    return left


def base_url(rpc_addr: str) -> str:
    if rpc_addr.startswith(("http://", "https://")):
        return rpc_addr.rstrip("/")
    return f"https://{rpc_addr}".rstrip("/")


class NodeConnection:
    """An open, authenticated channel to one lnd node.

    Owned by a single scrape and closed when it ends.
    """

    def __init__(self, url: str, opener: request.OpenerDirector, macaroon_hex: str):
        self.url = url
        self._opener = opener
        self._macaroon_hex = macaroon_hex
        self.closed = False

    def call(self, method: str, path: str, body: Optional[Dict[str, Any]] = None,
             timeout: float = 15.0) -> Dict[str, Any]:
        """Send one request and return the decoded JSON object.

        ``timeout`` bounds the whole call: connecting, the response headers
        and every byte of the body. A node that keeps the socket busy by
        trickling its reply is abandoned once the time is up.
        """
        if self.closed:
            raise ProbeError(f"{method} {path}: connection is closed")
        data = json.dumps(body).encode() if body is not None else None
        headers = {"Accept": "application/json", MACAROON_HEADER: self._macaroon_hex}
        if data is not None:
            headers["Content-Type"] = "application/json"
        req = request.Request(self.url + path, data=data, headers=headers, method=method)
        expires_at = time.monotonic() + timeout
        outcome: Dict[str, Any] = {}

        def fetch():
            try:
                outcome["raw"] = self._fetch(method, path, req, expires_at)
            except Exception as e:
                outcome["error"] = e

        # urllib only bounds single socket operations, so the wait happens here.
        worker = threading.Thread(target=fetch, name=f"lnd-rpc {path}", daemon=True)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            log.debug(f"{method} {path} abandoned after {timeout:.1f}s")
            raise DeadlineExceeded(f"{method} {path} still running after {timeout:.1f}s (url={self.url})")
        if "error" in outcome:
            raise outcome["error"]

        raw = outcome["raw"]
        try:
            payload = json.loads(raw.decode() or "{}")
        except ValueError as e:
            raise ProbeError(f"{method} {path} returned malformed JSON: {e}")
        if not isinstance(payload, dict):
            raise ProbeError(f"{method} {path} returned {type(payload).__name__}, expected object")
        return payload

    def _fetch(self, method: str, path: str, req: request.Request, expires_at: float) -> bytes:
        chunks = []
        size = 0
        try:
            with self._opener.open(req, timeout=_time_left(method, path, expires_at)) as resp:
                while True:
                    chunk = resp.read1(READ_CHUNK_BYTES)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > MAX_RESPONSE_BYTES:
                        raise ProbeError(f"{method} {path} response exceeds {MAX_RESPONSE_BYTES} bytes")
                    chunks.append(chunk)
                    _time_left(method, path, expires_at)
        except socket.timeout:
            raise ProbeError(f"{method} {path} timeout (url={self.url})")
        except urlerror.HTTPError as e:
            raise ProbeError(f"{method} {path} HTTP {e.code}: {e.reason}")
        except urlerror.URLError as e:
            reason = getattr(e, "reason", e)
            raise ProbeError(f"{method} {path} connection error (url={self.url}): {reason}")
        except OSError as e:
            raise ProbeError(f"{method} {path} I/O error (url={self.url}): {e}")
        return b"".join(chunks)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._opener.close()


class CredentialProvider:
    """Loads the node's TLS certificate and macaroon and opens connections."""

    def __init__(self, rpc_addr: str, tls_cert_path: str, macaroon_path: str):
        self.rpc_addr = rpc_addr
        self.tls_cert_path = tls_cert_path
        self.macaroon_path = macaroon_path

    def ssl_context(self) -> ssl.SSLContext:
        try:
            return ssl.create_default_context(cafile=self.tls_cert_path)
        except (OSError, ssl.SSLError) as e:
            raise NodeConnectionError(f"Cannot load node TLS certificate {self.tls_cert_path!r}: {e}")

    def macaroon(self) -> str:
        if not self.macaroon_path:
            raise NodeConnectionError("No macaroon path configured")
        try:
            with open(self.macaroon_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise NodeConnectionError(f"Cannot read macaroon file {self.macaroon_path!r}: {e}")
        if not raw:
            raise NodeConnectionError(f"Macaroon file {self.macaroon_path!r} is empty")
        return raw.hex()

    def connect(self) -> NodeConnection:
        context = self.ssl_context()
        macaroon_hex = self.macaroon()
        opener = request.build_opener(request.HTTPSHandler(context=context))
        url = base_url(self.rpc_addr)
        log.debug(f"Opened connection to {url}")
        return NodeConnection(url, opener, macaroon_hex)


class LndRestClient:
    """The eight read-only lnd calls the exporter uses.

    Every call is bounded by the remaining time of the shared deadline.
    """

    def __init__(self, connection: NodeConnection, deadline: Optional[Deadline] = None):
        self.connection = connection
        self.deadline = deadline

    def _call(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        timeout = 15.0
        if self.deadline is not None:
            timeout = self.deadline.remaining()
            if timeout <= 0:
                raise DeadlineExceeded(f"deadline of {self.deadline.seconds}s exceeded before {path}")
        return self.connection.call(method, path, body=body, timeout=timeout)

    def get_info(self) -> NodeInfo:
        return NodeInfo.from_json(self._call("GET", "/v1/getinfo"))

    def wallet_balance(self) -> WalletBalance:
        return WalletBalance.from_json(self._call("GET", "/v1/balance/blockchain"))

    def pending_channels(self) -> PendingChannels:
        return PendingChannels.from_json(self._call("GET", "/v1/channels/pending"))

    def channel_balance(self) -> ChannelBalance:
        return ChannelBalance.from_json(self._call("GET", "/v1/balance/channels"))

    def forwarding_history(self) -> ForwardingHistory:
        return ForwardingHistory.from_json(self._call("POST", "/v1/switch", body={}))

    def network_info(self) -> NetworkInfo:
        return NetworkInfo.from_json(self._call("GET", "/v1/graph/info"))

    def list_channels(self):
        payload = self._call("GET", "/v1/channels")
        return [Channel.from_json(c) for c in payload.get("channels") or []]

    def list_peers(self):
        payload = self._call("GET", "/v1/peers")
        return [Peer.from_json(p) for p in payload.get("peers") or []]
