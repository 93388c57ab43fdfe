"""Cleanup and policy validation for raw proxy configuration entries.

Proxy lists collected from the wild are often HTML-escaped or carry YAML
alias markers that break parsing, and some entries use ciphers or identifiers
that the downstream clients reject. Entries failing validation are dropped
with a warning; they never reach the directory.
"""

import logging
from typing import Any, Iterable, Mapping

from proxybench.config import DEFAULT_EXCLUDED_CIPHERS

LOGGER = logging.getLogger(__name__)

_PAYLOAD_REMOVALS = (b"&quot;", b"&quot", b"*", b"?")

# Protocols whose entries must declare a cipher.
CIPHER_PROTOCOLS = frozenset({"ss", "ssr", "vmess"})

VMESS_UUID_LENGTH = 36


def clean_payload(payload: bytes) -> bytes:
    """Strip HTML quote entities and YAML alias/complex-key markers."""
    for token in _PAYLOAD_REMOVALS:
        payload = payload.replace(token, b"")
    return payload


def validate_entry(
    index: int,
    config: Any,
    excluded_ciphers: Iterable[str] = DEFAULT_EXCLUDED_CIPHERS,
) -> bool:
    """Return True when ``config`` may be registered as a proxy.

    Args:
        index: Position of the entry in its source list, for log messages.
        config: Raw entry as parsed from YAML.
        excluded_ciphers: Cipher names (substring match) that disqualify an entry.
    """
    if not isinstance(config, Mapping):
        LOGGER.warning("proxy %d is not a mapping, skipped", index)
        return False

    proxy_type = config.get("type")
    if proxy_type is None:
        LOGGER.warning("proxy %d has no type, skipped", index)
        return False
    if not isinstance(proxy_type, str):
        LOGGER.warning("proxy %d type %r is not a string, skipped", index, proxy_type)
        return False
    proxy_type = proxy_type.lower()

    name = config.get("name")
    if name is None or not str(name).strip():
        LOGGER.warning("proxy %d has no name, skipped", index)
        return False

    cipher = config.get("cipher")
    if cipher is None:
        if proxy_type in CIPHER_PROTOCOLS:
            LOGGER.warning("%s proxy %d (%s) declares no cipher, skipped", proxy_type, index, name)
            return False
    elif not isinstance(cipher, str):
        LOGGER.warning("proxy %d (%s) cipher %r is not a string, skipped", index, name, cipher)
        return False
    else:
        lowered = cipher.lower()
        for excluded in excluded_ciphers:
            if excluded and excluded.lower() in lowered:
                LOGGER.info("proxy %d (%s) uses excluded cipher %s, skipped", index, name, excluded)
                return False

    if proxy_type == "vmess":
        uuid = config.get("uuid")
        if not isinstance(uuid, str):
            LOGGER.warning("vmess proxy %d (%s) has no valid uuid, skipped", index, name)
            return False
        if len(uuid) != VMESS_UUID_LENGTH:
            LOGGER.warning(
                "vmess proxy %d (%s) uuid length %d != %d, skipped",
                index,
                name,
                len(uuid),
                VMESS_UUID_LENGTH,
            )
            return False

    return True


__all__ = ["CIPHER_PROTOCOLS", "clean_payload", "validate_entry"]
