"""
Test configuration for Podcraft tests.

This module provides shared fixtures: an isolated error log and classifier,
a retry controller whose backoff never really sleeps, fake chain providers,
and a FastAPI test client.
"""
# Set test environment variables BEFORE any imports that might use them
import os
import tempfile
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("AUDIO_ENHANCEMENT_ENABLED", "false")
os.environ.setdefault("AUDIO_OUTPUT_DIR", os.path.join(tempfile.gettempdir(), "podcraft-test-audio"))

import random
import pytest
from typing import Any, Optional
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from podcraft.utils.error_classifier import ErrorClassifier, ErrorLog
from podcraft.utils.fallback_chain import FallbackChainExecutor, ProviderDescriptor
from podcraft.utils.retry import RetryController, RetryPolicy


@pytest.fixture
def error_log():
    """Fresh error ring log per test."""
    return ErrorLog(capacity=100)


@pytest.fixture
def classifier(error_log):
    return ErrorClassifier(error_log)


@pytest.fixture
def no_sleep():
    """Stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def retry_controller(classifier, no_sleep):
    return RetryController(classifier, sleep=no_sleep, rng=random.Random(42))


@pytest.fixture
def executor(retry_controller):
    return FallbackChainExecutor(retry_controller)


@pytest.fixture
def fast_policy():
    """Two retries with tiny delays."""
    return RetryPolicy(max_retries=2, base_delay=0.01, max_delay=0.05)


@pytest.fixture
def make_provider():
    """Build a chain provider whose invoke is an AsyncMock."""
    def _make(
        name: str,
        return_value: Any = None,
        side_effect: Any = None,
        available: bool = True,
        timeout: Optional[float] = None,
    ) -> ProviderDescriptor:
        invoke = AsyncMock(return_value=return_value, side_effect=side_effect)
        return ProviderDescriptor(
            name=name,
            is_available=lambda: available,
            invoke=invoke,
            timeout=timeout,
        )
    return _make


# FastAPI client fixture
@pytest.fixture
def client():
    """Create FastAPI test client; dependency overrides are cleared afterwards."""
    from podcraft.main import app
    client = TestClient(app)
    yield client
    client.app.dependency_overrides.clear()
