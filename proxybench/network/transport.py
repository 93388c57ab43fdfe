"""Requests transport whose connection establishment is delegated to a dialer.

The layering mirrors urllib3's own SOCKS support: a connection class overriding
``_new_conn``, pool classes pointing at it, and a pool manager handing the
dialer to every pool it creates. ``DialerAdapter`` installs that pool manager
into a ``requests`` session. TLS, HTTP framing and timeouts stay with urllib3.
"""

import socket
from typing import Optional

import requests
from requests.adapters import DEFAULT_POOLBLOCK, HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.exceptions import ConnectTimeoutError, NewConnectionError
from urllib3.poolmanager import PoolManager

from proxybench.network.dialers import Dialer


class DialerHTTPConnection(HTTPConnection):
    """A plain-text HTTP connection opened through a ``Dialer``."""

    def __init__(self, *args, dialer: Dialer, **kwargs) -> None:
        self._dialer = dialer
        super().__init__(*args, **kwargs)

    def _connect_timeout(self) -> Optional[float]:
        # urllib3 may hand us its "default timeout" sentinel instead of a number.
        if isinstance(self.timeout, (int, float)):
            return float(self.timeout)
        return None

    def _new_conn(self) -> socket.socket:
        timeout = self._connect_timeout()
        try:
            return self._dialer.dial(self.host, self.port, timeout)
        except socket.timeout as exc:
            raise ConnectTimeoutError(
                self,
                f"Connection to {self.host} timed out. (connect timeout={timeout})",
            ) from exc
        except OSError as exc:
            # PySocks wraps the underlying socket error in ProxyError.socket_err
            if isinstance(getattr(exc, "socket_err", None), socket.timeout):
                raise ConnectTimeoutError(
                    self,
                    f"Connection to {self.host} timed out. (connect timeout={timeout})",
                ) from exc
            raise NewConnectionError(self, f"Failed to establish a new connection: {exc}") from exc


class DialerHTTPSConnection(DialerHTTPConnection, HTTPSConnection):
    pass


class DialerHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = DialerHTTPConnection


class DialerHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = DialerHTTPSConnection


class DialerPoolManager(PoolManager):
    """Pool manager whose pools open every connection through ``dialer``."""

    pool_classes_by_scheme = {
        "http": DialerHTTPConnectionPool,
        "https": DialerHTTPSConnectionPool,
    }

    def __init__(self, dialer: Dialer, num_pools: int = 10, headers=None, **connection_pool_kw) -> None:
        super().__init__(num_pools, headers, **connection_pool_kw)
        self._dialer = dialer
        self.pool_classes_by_scheme = DialerPoolManager.pool_classes_by_scheme

    def _new_pool(self, scheme, host, port, request_context=None):
        # The dialer must not become part of the pool key, so it is injected here.
        if request_context is None:
            request_context = self.connection_pool_kw.copy()
        request_context["dialer"] = self._dialer
        return super()._new_pool(scheme, host, port, request_context=request_context)


class DialerAdapter(HTTPAdapter):
    """``requests`` adapter routing all connections through a dialer."""

    def __init__(self, dialer: Dialer, **kwargs) -> None:
        self._dialer = dialer
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=DEFAULT_POOLBLOCK, **pool_kwargs) -> None:
        self._pool_connections = connections
        self._pool_maxsize = maxsize
        self._pool_block = block
        self.poolmanager = DialerPoolManager(
            self._dialer,
            num_pools=connections,
            maxsize=maxsize,
            block=block,
            **pool_kwargs,
        )


def build_session(dialer: Dialer) -> requests.Session:
    """Return a session whose HTTP(S) traffic is dialed through ``dialer``.

    Environment proxy settings are ignored so that the measured path is the
    proxy under test and nothing else.
    """
    session = requests.Session()
    session.trust_env = False
    adapter = DialerAdapter(dialer)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


__all__ = [
    "DialerAdapter",
    "DialerHTTPConnection",
    "DialerHTTPSConnection",
    "DialerPoolManager",
    "build_session",
]
