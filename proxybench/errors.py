"""Fatal error types.

Anything raised from here aborts the whole run; per-chunk network failures are
never surfaced as exceptions (see ``proxybench.bench.fetch``).
"""


class ConfigurationError(ValueError):
    """Invalid or unusable run configuration (sources, filter, sort field)."""


class UnsupportedProxyTypeError(ConfigurationError):
    """A proxy entry declares a protocol type this tool does not recognize."""

    def __init__(self, name: str, proxy_type: str) -> None:
        super().__init__(f"Unsupported proxy type {proxy_type!r} for proxy {name!r}")
        self.name = name
        self.proxy_type = proxy_type


__all__ = ["ConfigurationError", "UnsupportedProxyTypeError"]
