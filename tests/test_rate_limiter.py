from unittest.mock import AsyncMock, patch

import pytest

from codecore_bot.rate.rate_limiter import OutboundRateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_single_token_per_interval():
    clock = FakeClock()
    rl = OutboundRateLimiter(2.0, clock=clock)
    assert rl.try_acquire()
    assert not rl.try_acquire()
    clock.now = 1.9
    assert not rl.try_acquire()
    clock.now = 2.0
    assert rl.try_acquire()


def test_burst_capacity():
    clock = FakeClock()
    rl = OutboundRateLimiter(1.0, capacity=3, clock=clock)
    assert [rl.try_acquire() for _ in range(4)] == [True, True, True, False]
    clock.now = 10.0
    # Refill never exceeds capacity
    assert rl.snapshot()["tokens"] == 3


@pytest.mark.parametrize("interval,capacity", [(0, 1), (-1.0, 1), (1.0, 0)])
def test_invalid_parameters(interval, capacity):
    with pytest.raises(ValueError):
        OutboundRateLimiter(interval, capacity=capacity)


@pytest.mark.asyncio
async def test_acquire_spaces_messages_by_interval():
    clock = FakeClock()
    rl = OutboundRateLimiter(2.0, clock=clock)
    sent_at: list[float] = []

    async def fake_sleep(delay):
        clock.now += delay

    with patch("asyncio.sleep", new_callable=AsyncMock, side_effect=fake_sleep) as sleep_mock:
        for _ in range(3):
            await rl.acquire()
            sent_at.append(clock.now)

    assert sent_at == pytest.approx([0.0, 2.0, 4.0])
    assert sleep_mock.await_count == 2


@pytest.mark.asyncio
async def test_acquire_reports_wait_time():
    clock = FakeClock()
    rl = OutboundRateLimiter(1.5, clock=clock)

    async def fake_sleep(delay):
        clock.now += delay

    assert await rl.acquire() == 0.0
    clock.now = 0.5
    with patch("asyncio.sleep", new_callable=AsyncMock, side_effect=fake_sleep):
        waited = await rl.acquire()
    assert waited == pytest.approx(1.0)


def test_snapshot_fields():
    rl = OutboundRateLimiter(1.0, clock=FakeClock())
    snap = rl.snapshot()
    assert snap == {"interval": 1.0, "capacity": 1, "tokens": 1.0}
