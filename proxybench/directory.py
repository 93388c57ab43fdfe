"""Proxy directory: named proxies loaded from Clash-style YAML sources.

A source is a local file path or an ``http(s)://`` URL; several sources can be
given as one comma-separated string. Each payload is a mapping with a
``proxies`` list and an optional ``proxy-providers`` mapping, or a bare list
of proxy entries (the shape written by ``proxybench.export.write_yaml``).

Every entry is sanitized before registration. Names are unique across the
whole directory: the first entry seen under a name wins. Dialers are built
once here, so the benchmark engine never looks at protocol types beyond the
leaf/routing classification.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import requests
import yaml

from proxybench.config import DEFAULT_EXCLUDED_CIPHERS, DEFAULT_USER_AGENT, AppConfig
from proxybench.errors import ConfigurationError
from proxybench.logging_utils import perf
from proxybench.network.dialers import Dialer, build_dialer
from proxybench.sanitize import clean_payload, validate_entry

LOGGER = logging.getLogger(__name__)

LEAF_TYPES = frozenset(
    {
        "ss",
        "ssr",
        "snell",
        "socks5",
        "http",
        "vmess",
        "vless",
        "trojan",
        "hysteria",
        "hysteria2",
        "wireguard",
        "tuic",
    }
)
ROUTING_TYPES = frozenset(
    {
        "direct",
        "reject",
        "relay",
        "select",
        "fallback",
        "url-test",
        "load-balance",
    }
)

RESERVED_PROVIDER_NAME = "default"
SOURCE_TIMEOUT_SECONDS = 15.0


class ProxyKind(Enum):
    LEAF = "leaf"
    ROUTING = "routing"
    UNKNOWN = "unknown"


def classify(proxy_type: str) -> ProxyKind:
    """Map a configuration ``type`` value onto a ``ProxyKind``."""
    lowered = (proxy_type or "").lower()
    if lowered in LEAF_TYPES:
        return ProxyKind.LEAF
    if lowered in ROUTING_TYPES:
        return ProxyKind.ROUTING
    return ProxyKind.UNKNOWN


@dataclass(frozen=True)
class ProxyEntry:
    """One named proxy with its raw configuration and optional dialer."""

    name: str
    proxy_type: str
    config: Mapping[str, Any]
    dialer: Optional[Dialer] = None

    @property
    def kind(self) -> ProxyKind:
        return classify(self.proxy_type)


def _is_remote(location: str) -> bool:
    return location.lower().startswith(("http://", "https://"))


def read_source(
    location: str,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    session: Optional[requests.Session] = None,
) -> Optional[bytes]:
    """Return the raw bytes of a config source, or None when unreadable."""
    try:
        if _is_remote(location):
            getter = session.get if session is not None else requests.get
            resp = getter(
                location,
                headers={"User-Agent": user_agent},
                timeout=SOURCE_TIMEOUT_SECONDS,
            )
            resp.raise_for_status()
            return resp.content
        return Path(location).expanduser().read_bytes()
    except (requests.RequestException, OSError) as exc:
        LOGGER.warning("Failed to read config source %s: %s", location, exc)
        return None


def parse_payload(body: bytes, origin: str) -> Tuple[List[Any], Dict[str, Any]]:
    """Parse a source payload into ``(proxies, providers)``.

    Raises:
        ConfigurationError: If the payload is not valid YAML of a known shape.
    """
    try:
        data = yaml.safe_load(clean_payload(body))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse config from {origin}: {exc}") from exc

    if data is None:
        return [], {}
    if isinstance(data, list):
        return data, {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config from {origin} is neither a mapping nor a list")

    proxies = data.get("proxies") or []
    providers = data.get("proxy-providers") or {}
    if not isinstance(proxies, list):
        raise ConfigurationError(f"`proxies` in {origin} must be a list")
    if not isinstance(providers, dict):
        raise ConfigurationError(f"`proxy-providers` in {origin} must be a mapping")
    return proxies, providers


def make_entry(config: Mapping[str, Any], prefix: Optional[str] = None) -> ProxyEntry:
    """Build a ``ProxyEntry`` from a validated raw config."""
    name = str(config["name"])
    if prefix:
        name = f"[{prefix}] {name}"
    proxy_type = str(config["type"]).lower()
    dialer = build_dialer(config) if classify(proxy_type) is ProxyKind.LEAF else None
    return ProxyEntry(name=name, proxy_type=proxy_type, config=dict(config), dialer=dialer)


def build_entries(
    configs: Sequence[Any],
    excluded_ciphers: Iterable[str] = DEFAULT_EXCLUDED_CIPHERS,
    prefix: Optional[str] = None,
) -> List[ProxyEntry]:
    """Validate raw configs and turn the survivors into entries."""
    excluded = tuple(excluded_ciphers)
    return [
        make_entry(config, prefix)
        for index, config in enumerate(configs)
        if validate_entry(index, config, excluded)
    ]


def load_provider(
    name: str,
    config: Any,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    excluded_ciphers: Iterable[str] = DEFAULT_EXCLUDED_CIPHERS,
    session: Optional[requests.Session] = None,
) -> List[ProxyEntry]:
    """Expand a proxy provider into entries named ``[<provider>] <proxy>``.

    Supported provider types are ``http`` (``url``), ``file`` (``path``) and
    ``inline`` (``payload``). An optional ``filter`` regex keeps matching
    proxy names only.

    Raises:
        ConfigurationError: For a reserved name, an unsupported type, or a
            provider whose content cannot be loaded.
    """
    if name == RESERVED_PROVIDER_NAME:
        raise ConfigurationError(f"can not define a provider called `{RESERVED_PROVIDER_NAME}`")
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"proxy provider {name} must be a mapping")

    provider_type = str(config.get("type", "")).lower()
    if provider_type == "inline":
        proxies = config.get("payload") or []
    elif provider_type in ("http", "file"):
        key = "url" if provider_type == "http" else "path"
        location = config.get(key)
        if not location:
            raise ConfigurationError(f"proxy provider {name} has no `{key}`")
        body = read_source(str(location), user_agent=user_agent, session=session)
        if body is None:
            raise ConfigurationError(f"initial proxy provider {name} error: {location} is unavailable")
        proxies, _ = parse_payload(body, f"proxy provider {name}")
    else:
        raise ConfigurationError(f"parse proxy provider {name} error: unsupported type {provider_type!r}")

    if not isinstance(proxies, list):
        raise ConfigurationError(f"proxy provider {name} payload must be a list")

    pattern = config.get("filter")
    try:
        name_filter = re.compile(pattern) if pattern else None
    except re.error as exc:
        raise ConfigurationError(f"proxy provider {name} has an invalid filter: {exc}") from exc

    entries = build_entries(proxies, excluded_ciphers, prefix=name)
    if name_filter is not None:
        entries = [e for e in entries if name_filter.search(str(e.config["name"]))]
    LOGGER.info("Proxy provider %s supplied %d proxies", name, len(entries))
    return entries


class ProxyDirectory:
    """Name-keyed registry of proxies for one benchmark run."""

    def __init__(self, entries: Iterable[ProxyEntry] = ()) -> None:
        self._entries: Dict[str, ProxyEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: ProxyEntry) -> bool:
        """Register ``entry``; returns False if the name is already taken."""
        if entry.name in self._entries:
            LOGGER.warning("proxy %s is a duplicate name, skipped", entry.name)
            return False
        self._entries[entry.name] = entry
        return True

    def entry(self, name: str) -> Optional[ProxyEntry]:
        return self._entries.get(name)

    def resolve(self, name: str) -> Optional[Dialer]:
        """Return the dialer for ``name``, or None if it cannot be dialed."""
        found = self._entries.get(name)
        return found.dialer if found else None

    def type_of(self, name: str) -> Optional[ProxyKind]:
        found = self._entries.get(name)
        return found.kind if found else None

    def raw_config(self, name: str) -> Optional[Dict[str, Any]]:
        found = self._entries.get(name)
        return dict(found.config) if found else None

    def all_names(self) -> Set[str]:
        return set(self._entries)

    def undialable(self, names: Iterable[str]) -> List[str]:
        """Leaf proxies among ``names`` that have no dialer for their protocol."""
        return [
            name
            for name in names
            if self.type_of(name) is ProxyKind.LEAF and self.resolve(name) is None
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    @perf("directory.from_sources", tags={"component": "directory"})
    def from_sources(
        cls,
        sources: str,
        *,
        app_config: Optional[AppConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> "ProxyDirectory":
        """Load every comma-separated source into one directory.

        Unreadable sources are skipped with a warning.

        Raises:
            ConfigurationError: If no source is given, a payload does not
                parse, or a provider is invalid.
        """
        locations = [part.strip() for part in (sources or "").split(",") if part.strip()]
        if not locations:
            raise ConfigurationError("Please specify the configuration file")

        user_agent = app_config.user_agent if app_config else DEFAULT_USER_AGENT
        excluded = app_config.excluded_ciphers if app_config else DEFAULT_EXCLUDED_CIPHERS

        directory = cls()
        for location in locations:
            body = read_source(location, user_agent=user_agent, session=session)
            if body is None:
                continue
            proxies, providers = parse_payload(body, location)
            for entry in build_entries(proxies, excluded):
                directory.add(entry)
            for provider_name, provider_config in providers.items():
                for entry in load_provider(
                    str(provider_name),
                    provider_config,
                    user_agent=user_agent,
                    excluded_ciphers=excluded,
                    session=session,
                ):
                    directory.add(entry)

        LOGGER.info("Loaded %d proxies from %d source(s)", len(directory), len(locations))
        return directory


__all__ = [
    "LEAF_TYPES",
    "ROUTING_TYPES",
    "ProxyDirectory",
    "ProxyEntry",
    "ProxyKind",
    "build_entries",
    "classify",
    "load_provider",
    "make_entry",
    "parse_payload",
    "read_source",
]
