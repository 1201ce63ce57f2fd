"""Shared fixtures for the test-suite."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest


def build_response(status_code: int = 200, payload=None, json_error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if payload is None else str(payload)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def make_response():
    return build_response


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()
