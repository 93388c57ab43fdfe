"""Dialing capabilities: open a TCP connection as seen from behind a proxy.

A ``Dialer`` is the only thing the benchmark engine knows about a proxy. One
concrete class exists per protocol family this tool can speak; which class a
proxy gets is decided once, when the directory is built, by ``build_dialer``.

SOCKS5 and plain HTTP (``CONNECT``) proxies are dialed with PySocks. Protocols
that need a dedicated client engine (shadowsocks, vmess, trojan, ...) get no
dialer and are reported as unresolvable by the directory.
"""

import abc
import logging
import socket
import threading
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import socks

LOGGER = logging.getLogger(__name__)


class Dialer(abc.ABC):
    """Opens connections to ``host:port`` through one proxy."""

    @abc.abstractmethod
    def dial(self, host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
        """Return a connected socket to ``host:port``.

        Raises:
            OSError: When the proxy or the destination cannot be reached.
        """


@dataclass(frozen=True)
class SocksDialer(Dialer):
    """Dialer backed by ``socks.create_connection``.

    Args:
        proxy_type: PySocks proxy type (``socks.SOCKS5`` or ``socks.HTTP``).
        server: Proxy host.
        port: Proxy TCP port.
        username: Optional proxy username.
        password: Optional proxy password.
    """

    proxy_type: int
    server: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    def dial(self, host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
        return socks.create_connection(
            (host, port),
            timeout=timeout,
            proxy_type=self.proxy_type,
            proxy_addr=self.server,
            proxy_port=self.port,
            proxy_rdns=True,
            proxy_username=self.username,
            proxy_password=self.password,
        )


class AbortableDialer(Dialer):
    """Wraps a dialer and remembers every socket it opens so they can be cut.

    ``abort`` shuts the sockets down, which wakes any thread blocked reading
    from them. Sockets dialed after ``abort`` are shut down immediately.
    """

    def __init__(self, inner: Dialer) -> None:
        self._inner = inner
        self._sockets: List[socket.socket] = []
        self._lock = threading.Lock()
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def dial(self, host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
        sock = self._inner.dial(host, port, timeout)
        with self._lock:
            self._sockets.append(sock)
            if self._aborted:
                _shutdown(sock)
        return sock

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            for sock in self._sockets:
                _shutdown(sock)


def _shutdown(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        # Already closed by the HTTP layer
        LOGGER.debug("Socket shutdown skipped: %s", exc)


_SOCKS_TYPES = {
    "socks5": socks.SOCKS5,
    "http": socks.HTTP,
}


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def build_dialer(config: Mapping[str, Any]) -> Optional[Dialer]:
    """Return a dialer for a raw proxy entry, or None when none can be built.

    Entries requesting TLS towards the proxy itself are not dialable with
    PySocks and return None as well.
    """
    proxy_type = str(config.get("type", "")).lower()
    socks_type = _SOCKS_TYPES.get(proxy_type)
    if socks_type is None:
        return None
    if config.get("tls"):
        LOGGER.debug("Proxy %s requests TLS to the proxy; no dialer available", config.get("name"))
        return None

    server = _optional_str(config.get("server"))
    try:
        port = int(config.get("port"))
    except (TypeError, ValueError):
        port = 0
    if not server or not 0 < port < 65536:
        LOGGER.debug("Proxy %s has no usable server/port", config.get("name"))
        return None

    return SocksDialer(
        proxy_type=socks_type,
        server=server,
        port=port,
        username=_optional_str(config.get("username")),
        password=_optional_str(config.get("password")),
    )


__all__ = ["AbortableDialer", "Dialer", "SocksDialer", "build_dialer"]
