"""
Tests for provider error normalisation.
"""

from __future__ import annotations

import asyncio

import pytest

from toolloop.exceptions import (
    ConfigurationError,
    ProviderRequestError,
    TransientProviderError,
)
from toolloop.providers.base import normalize_provider_error


class HTTPStatusError(Exception):
    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class ResponseError(Exception):
    def __init__(self, status_code):
        self.response = type("Response", (), {"status_code": status_code})()
        super().__init__("response error")


@pytest.mark.parametrize("status", [408, 409, 425, 429, 500, 502, 503, 529])
def test_retryable_statuses_are_transient(status):
    error = normalize_provider_error(HTTPStatusError(status), "openai")

    assert isinstance(error, TransientProviderError)
    assert error.status_code == status
    assert error.provider == "openai"


@pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
def test_client_errors_are_not_retried(status):
    error = normalize_provider_error(HTTPStatusError(status), "anthropic")

    assert isinstance(error, ProviderRequestError)
    assert error.retryable is False


def test_status_is_read_from_the_response():
    assert isinstance(normalize_provider_error(ResponseError(503), "google"), TransientProviderError)


@pytest.mark.parametrize(
    "exc", [asyncio.TimeoutError(), TimeoutError("slow"), ConnectionError("reset")]
)
def test_timeouts_and_connection_errors_are_transient(exc):
    assert isinstance(normalize_provider_error(exc, "openrouter"), TransientProviderError)


def test_unknown_errors_are_treated_as_transient():
    error = normalize_provider_error(RuntimeError("weird"), "openai")

    assert isinstance(error, TransientProviderError)
    assert "weird" in str(error)


def test_taxonomy_errors_pass_through():
    original = ConfigurationError("bad")
    assert normalize_provider_error(original, "openai") is original

    transient = TransientProviderError("again")
    assert normalize_provider_error(transient, "openai") is transient
