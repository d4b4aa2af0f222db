"""Unit tests for rate limiter."""

import pytest
import asyncio
import time
from boorukit.utils.rate_limiter import RateLimiter


class TestRateLimiter:
    """Test cases for RateLimiter class."""

    def test_initialization(self, clock):
        """Test rate limiter starts with a full bucket."""
        limiter = RateLimiter(requests=6, per_seconds=30.0, clock=clock)
        assert limiter.capacity == 6
        assert limiter.refill_interval == 30.0
        assert limiter.refill_rate == pytest.approx(0.2)
        assert limiter.available() == 6

    def test_invalid_settings(self):
        """Test non-positive settings are rejected."""
        with pytest.raises(ValueError):
            RateLimiter(requests=0)
        with pytest.raises(ValueError):
            RateLimiter(requests=1, per_seconds=0)

    def test_try_acquire_drains_bucket(self, clock):
        """Test that exactly `capacity` tokens can be taken without refill."""
        limiter = RateLimiter(requests=3, per_seconds=1.0, clock=clock)

        results = [limiter.try_acquire() for _ in range(5)]

        assert results == [True, True, True, False, False]
        assert limiter.available() == 0

    def test_refill_is_continuous(self, clock):
        """Test tokens accrue proportionally to elapsed time."""
        limiter = RateLimiter(requests=2, per_seconds=1.0, clock=clock)
        assert limiter.try_acquire()
        assert limiter.try_acquire()
        assert not limiter.try_acquire()

        # Half a second at 2 tokens/s is one token
        clock.advance(0.5)
        assert limiter.try_acquire()
        assert not limiter.try_acquire()

        clock.advance(0.25)
        assert not limiter.try_acquire()
        clock.advance(0.25)
        assert limiter.try_acquire()

    def test_refill_capped_at_capacity(self, clock):
        """Test long idle periods do not accumulate extra tokens."""
        limiter = RateLimiter(requests=2, per_seconds=1.0, clock=clock)
        limiter.try_acquire()

        clock.advance(60)

        assert limiter.available() == 2
        assert [limiter.try_acquire() for _ in range(3)] == [True, True, False]

    def test_token_conservation(self, clock):
        """Test acquisitions over a window never exceed capacity + elapsed * rate."""
        limiter = RateLimiter(requests=4, per_seconds=2.0, clock=clock)
        granted = 0
        for _ in range(40):
            if limiter.try_acquire():
                granted += 1
            clock.advance(0.1)

        # 4 initial tokens + 4.0s elapsed * 2 tokens/s
        assert granted <= 4 + 8
        assert granted >= 8

    def test_reset(self, clock):
        """Test reset refills the bucket."""
        limiter = RateLimiter(requests=2, per_seconds=10.0, clock=clock)
        limiter.try_acquire()
        limiter.try_acquire()
        assert limiter.available() == 0

        limiter.reset()

        assert limiter.available() == 2

    def test_get_stats(self, clock):
        """Test rate limiter statistics."""
        limiter = RateLimiter(requests=6, per_seconds=30.0, clock=clock)

        stats = limiter.get_stats()
        assert stats['available_tokens'] == 6
        assert stats['capacity'] == 6
        assert stats['refill_interval_seconds'] == 30.0
        assert stats['can_make_request'] is True

        for _ in range(6):
            limiter.try_acquire()

        stats = limiter.get_stats()
        assert stats['available_tokens'] == 0
        assert stats['can_make_request'] is False

    def test_default_booru(self):
        """Test the preset allows 2 requests per second."""
        limiter = RateLimiter.default_booru()
        assert limiter.capacity == 2
        assert limiter.refill_interval == 1.0

    def test_from_config(self, sample_config):
        """Test building a limiter from the rate_limit config section."""
        limiter = RateLimiter.from_config(sample_config['rate_limit'])
        assert limiter.capacity == 5
        assert limiter.refill_interval == 1.0

    @pytest.mark.asyncio
    async def test_acquire_under_limit_is_immediate(self):
        """Test requests under the limit do not wait."""
        limiter = RateLimiter(requests=5, per_seconds=1.0)

        start = time.monotonic()
        for _ in range(5):
            await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed < 0.1
        assert limiter.available() == 0

    @pytest.mark.asyncio
    async def test_acquire_waits_for_refill(self):
        """Test acquire suspends until a token has accrued."""
        # 20 tokens/s, so the third acquire waits about 50ms
        limiter = RateLimiter(requests=2, per_seconds=0.1)
        await limiter.acquire()
        await limiter.acquire()

        start = time.monotonic()
        await limiter.acquire()
        elapsed = time.monotonic() - start

        assert elapsed >= 0.03
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_concurrent_acquire_shared_limiter(self):
        """Test many tasks sharing one limiter all eventually get a token."""
        limiter = RateLimiter(requests=2, per_seconds=0.05)
        granted = []

        async def worker(i):
            await limiter.acquire()
            granted.append(i)

        await asyncio.gather(*(worker(i) for i in range(6)))

        assert sorted(granted) == list(range(6))
