"""Unit tests for the token bucket storage."""

import pytest

from dfood.infrastructure.api.middleware import RateLimitStorage


class FakeMonotonic:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def ticks() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def storage(ticks) -> RateLimitStorage:
    return RateLimitStorage(clock=ticks)


def test_burst_then_reject(storage):
    decisions = [storage.consume("ip:1.2.3.4", 10, burst=10) for _ in range(11)]

    assert all(d.allowed for d in decisions[:10])
    assert decisions[9].remaining == 0
    assert decisions[10].allowed is False
    assert decisions[10].reset_seconds == pytest.approx(6.0)


def test_remaining_counts_down(storage):
    first = storage.consume("ip:1.2.3.4", 10, burst=10)
    second = storage.consume("ip:1.2.3.4", 10, burst=10)

    assert first.remaining == 9
    assert second.remaining == 8


def test_tokens_refill_over_time(storage, ticks):
    for _ in range(10):
        storage.consume("ip:1.2.3.4", 10, burst=10)
    assert storage.consume("ip:1.2.3.4", 10, burst=10).allowed is False

    ticks.now += 7

    assert storage.consume("ip:1.2.3.4", 10, burst=10).allowed is True


def test_keys_are_independent(storage):
    for _ in range(10):
        storage.consume("ip:1.2.3.4", 10, burst=10)

    assert storage.consume("ip:5.6.7.8", 10, burst=10).allowed is True


def test_burst_below_one_still_allows_a_request(storage):
    assert storage.consume("ip:1.2.3.4", 10, burst=0).allowed is True
    assert storage.consume("ip:1.2.3.4", 10, burst=0).allowed is False


def test_stale_buckets_are_cleaned(ticks):
    storage = RateLimitStorage(cleanup_interval=60, clock=ticks)
    storage.consume("ip:1.2.3.4", 10)

    ticks.now += 3601
    storage.consume("ip:5.6.7.8", 10)

    assert len(storage) == 1
