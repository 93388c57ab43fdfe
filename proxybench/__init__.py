"""Proxy benchmark: rank a proxy list by live TTFB and download bandwidth."""

__version__ = "0.1.0"
