"""Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for Settings
- A MagicMock standing in for BitmovinApi, handing out predictable ids
- Status task builders
"""

import operator
import os
from types import SimpleNamespace
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest
from bitmovin_api_sdk import Status

# Set application environment variables BEFORE importing any application code
os.environ["BITMOVIN_API_KEY"] = "test-api-key"
os.environ["BITMOVIN_S3_BUCKET_NAME"] = "test-output-bucket"
os.environ["BITMOVIN_S3_ACCESS_KEY"] = "test-access-key"
os.environ["BITMOVIN_S3_SECRET_KEY"] = "test-secret-key"
os.environ["POLL_INTERVAL_SECONDS"] = "0"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["POWERTOOLS_LOG_LEVEL"] = "DEBUG"

from src.shared.config import Settings, load_settings  # noqa: E402

# SDK create endpoint -> id prefix of the resources it returns
CREATE_ENDPOINTS: dict[str, str] = {
    "encoding.inputs.http.create": "input",
    "encoding.outputs.s3.create": "output",
    "encoding.encodings.create": "encoding",
    "encoding.configurations.video.h264.create": "h264",
    "encoding.configurations.audio.aac.create": "aac",
    "encoding.encodings.streams.create": "stream",
    "encoding.encodings.muxings.mp4.create": "mp4-muxing",
    "encoding.encodings.muxings.fmp4.create": "fmp4-muxing",
    "encoding.filters.watermark.create": "watermark",
    "encoding.filters.text.create": "text",
    "encoding.encodings.streams.sprites.create": "sprite",
    "encoding.manifests.dash.default.create": "manifest",
}


def _id_factory(prefix: str) -> Callable[..., SimpleNamespace]:
    """Return a side effect creating resources numbered from 1."""
    counter = {"n": 0}

    def create(**kwargs: Any) -> SimpleNamespace:
        counter["n"] += 1
        return SimpleNamespace(id=f"{prefix}-{counter['n']}")

    return create


def build_task(status: Status, progress: int | None = None, messages: list | None = None) -> SimpleNamespace:
    """Shape of the Task returned by the status endpoints."""
    return SimpleNamespace(status=status, progress=progress, messages=messages or [])


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings loaded from the test environment."""
    return load_settings()


# =============================================================================
# Bitmovin API Fixtures
# =============================================================================


@pytest.fixture
def make_task() -> Callable[..., SimpleNamespace]:
    """Builder for status tasks."""
    return build_task


@pytest.fixture
def bitmovin_api() -> MagicMock:
    """Mocked BitmovinApi whose encodings and manifests finish immediately."""
    api = MagicMock(name="BitmovinApi")
    for path, prefix in CREATE_ENDPOINTS.items():
        operator.attrgetter(path)(api).side_effect = _id_factory(prefix)

    api.encoding.encodings.status.return_value = build_task(Status.FINISHED, progress=100)
    api.encoding.manifests.dash.status.return_value = build_task(Status.FINISHED, progress=100)
    return api


@pytest.fixture
def endpoint_calls() -> Callable[[MagicMock], list[str]]:
    """Names of the SDK endpoints called on a mocked API, in call order."""

    def names(api: MagicMock) -> list[str]:
        return [c[0] for c in api.mock_calls]

    return names


@pytest.fixture
def call_kwargs() -> Callable[[MagicMock, str], list[dict[str, Any]]]:
    """Keyword arguments of every call to one endpoint, in call order."""

    def kwargs_for(api: MagicMock, endpoint: str) -> list[dict[str, Any]]:
        return [c[2] for c in api.mock_calls if c[0] == endpoint]

    return kwargs_for
