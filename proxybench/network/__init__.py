"""Network utilities for dialing through proxies.

Exports:
- ``Dialer``: the opaque "connect through this proxy" capability.
- ``SocksDialer``: PySocks-backed dialer for SOCKS5 and HTTP CONNECT proxies.
- ``build_dialer``: pick a dialer for a raw proxy entry.
- ``build_session``: a ``requests`` session whose connections use a dialer.
"""

from proxybench.network.dialers import Dialer, SocksDialer, build_dialer
from proxybench.network.transport import DialerAdapter, build_session

__all__ = [
    "Dialer",
    "DialerAdapter",
    "SocksDialer",
    "build_dialer",
    "build_session",
]
