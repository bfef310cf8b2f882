from __future__ import annotations

import asyncio

import pytest

from greenhub.core.cancellation import CancellationToken, simulated_latency
from greenhub.core.exceptions import OperationCancelledError


def test_latency_uses_injected_sleep():
    waited = []

    async def fake_sleep(seconds):
        waited.append(seconds)

    asyncio.run(simulated_latency(1.5, sleep=fake_sleep))

    assert waited == [1.5]


def test_negative_latency_is_clamped():
    waited = []

    async def fake_sleep(seconds):
        waited.append(seconds)

    asyncio.run(simulated_latency(-1, sleep=fake_sleep))

    assert waited == [0.0]


def test_cancelled_before_start_never_sleeps():
    token = CancellationToken()
    token.cancel()
    waited = []

    async def fake_sleep(seconds):
        waited.append(seconds)

    with pytest.raises(OperationCancelledError):
        asyncio.run(simulated_latency(1.0, token, fake_sleep))
    assert waited == []


def test_cancelled_during_wait_raises_after_wait():
    token = CancellationToken()

    async def cancelling_sleep(_seconds):
        token.cancel()

    with pytest.raises(OperationCancelledError):
        asyncio.run(simulated_latency(1.0, token, cancelling_sleep))
    assert token.cancelled
