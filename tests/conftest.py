"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from fusionbrain.client import FusionBrainClient
from fusionbrain.config import FusionBrainConfig

ENDPOINT = "https://fb.test"
STYLES_URL = "http://cdn.fb.test/static/styles/key"


@pytest.fixture
def config() -> FusionBrainConfig:
    """Configuration pointing at a fake host."""
    return FusionBrainConfig(
        api_key="api-123",
        secret_key="secret-456",
        endpoint=ENDPOINT,
        styles_url=STYLES_URL,
    )


@pytest.fixture
def make_client(config: FusionBrainConfig) -> Callable[..., FusionBrainClient]:
    """Build a client whose transport is served by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> FusionBrainClient:
        return FusionBrainClient(config, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def task_payload() -> dict:
    """A finished, successful status response."""
    return {
        "uuid": "3b7c1e3a-0000-4000-8000-000000000001",
        "status": "DONE",
        "images": ["aGVsbG8="],
        "censored": False,
        "generationTime": 12.5,
    }
