"""Pytest configuration and fixtures for whispir-sdk tests.

This file provides:
- scripted_transport: factory for an httpx.MockTransport replaying canned
  responses or raising canned errors, recording every request it receives
- Fixtures: a baseline ClientConfig and a zero retry delay
"""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from whispir_sdk.models import ClientConfig


ScriptedTransport = Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]


def _make_scripted_transport(
    *outcomes: httpx.Response | Exception,
) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    sent: list[httpx.Request] = []
    remaining = list(outcomes)

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        if not remaining:
            raise AssertionError(f"Unexpected extra request: {request.method} {request.url}")
        outcome = remaining.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.MockTransport(handler), sent


@pytest.fixture
def scripted_transport() -> ScriptedTransport:
    """Transport returning (or raising) outcomes in order.

    Prefer this over patching httpx.Client - requests go through the real
    client, auth flow and header handling.
    """
    return _make_scripted_transport


@pytest.fixture
def qps_headers() -> list[tuple[str, str]]:
    return [("X-Mashery-Error-Code", "ERR_403_DEVELOPER_OVER_QPS")]


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(apikey="K1", username="user", password="secret")


@pytest.fixture
def no_retry_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    """Skip the 1 second wait before the over-QPS retry."""
    monkeypatch.setattr("whispir_sdk.executor.RETRY_DELAY_SECONDS", 0.0)
