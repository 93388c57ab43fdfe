"""Fixtures for integration tests that reach real proxies and the network."""

import os

import pytest

from proxybench.config import AppConfig, load_config
from proxybench.directory import ProxyDirectory


@pytest.fixture(scope="session")
def app_config() -> AppConfig:
    return load_config()


@pytest.fixture(scope="session")
def config_sources() -> str:
    sources = os.environ.get("PROXYBENCH_IT_CONFIG", "")
    if not sources:
        pytest.skip("PROXYBENCH_IT_CONFIG must point at a proxy config to run integration tests.")
    return sources


@pytest.fixture(scope="session")
def directory(config_sources: str, app_config: AppConfig) -> ProxyDirectory:
    return ProxyDirectory.from_sources(config_sources, app_config=app_config)
