"""Tests for gemini_image_mcp.core.rate_limiter: sliding window admission.

Tests cover:
- Admission up to the configured capacity.
- Rejection of the (N+1)-th call with a positive retry delay.
- Pruning of timestamps older than 60 seconds.
- Retry delay computed from the oldest admission in the window.
"""

from __future__ import annotations

import logging

import pytest

from gemini_image_mcp.core.exceptions import RateLimitExceeded
from gemini_image_mcp.core.rate_limiter import WINDOW_MS, RateLimiter


class TestAdmission:
    """Verify the window capacity."""

    @pytest.mark.parametrize("capacity", [1, 3, 10])
    def test_nth_call_admitted_and_next_rejected(self, fake_clock, capacity):
        """The N-th call succeeds; the (N+1)-th fails with a positive retry."""
        limiter = RateLimiter(capacity, clock=fake_clock)
        for _ in range(capacity):
            limiter.admit()
            fake_clock.advance(100)

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.admit()
        assert exc_info.value.retry_after_ms > 0

    def test_rejection_does_not_record_call(self, fake_clock):
        """A rejected call must not occupy a slot in the window."""
        limiter = RateLimiter(2, clock=fake_clock)
        limiter.admit()
        limiter.admit()
        with pytest.raises(RateLimitExceeded):
            limiter.admit()
        assert limiter.in_window() == 2

    def test_invalid_capacity(self):
        """Capacity below 1 is a programming error."""
        with pytest.raises(ValueError):
            RateLimiter(0)


class TestRetryAfter:
    """Verify the retry delay reported on rejection."""

    def test_retry_after_measured_from_oldest_call(self, fake_clock):
        """retry_after = 60000 - (now - oldest)."""
        limiter = RateLimiter(2, clock=fake_clock)
        limiter.admit()
        fake_clock.advance(15_000)
        limiter.admit()
        fake_clock.advance(5_000)

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.admit()
        assert exc_info.value.retry_after_ms == WINDOW_MS - 20_000

    def test_message_rounds_up_to_seconds(self, fake_clock):
        """The message reports whole seconds, rounded up."""
        limiter = RateLimiter(1, clock=fake_clock)
        limiter.admit()
        fake_clock.advance(500)

        with pytest.raises(RateLimitExceeded) as exc_info:
            limiter.admit()
        assert exc_info.value.retry_after_seconds == 60
        assert str(exc_info.value) == "Rate limit exceeded. Please wait 60 seconds."


class TestPruning:
    """Verify that expired admissions leave the window."""

    def test_full_window_recovers_after_sixty_seconds(self, fake_clock):
        """After 60s with no calls, the next admission always succeeds."""
        limiter = RateLimiter(3, clock=fake_clock)
        for _ in range(3):
            limiter.admit()

        fake_clock.advance(WINDOW_MS + 1)
        limiter.admit()
        assert limiter.in_window() == 1

    def test_exactly_sixty_seconds_is_expired(self, fake_clock):
        """A timestamp exactly 60000 ms old is outside the window."""
        limiter = RateLimiter(1, clock=fake_clock)
        limiter.admit()
        fake_clock.advance(WINDOW_MS)
        limiter.admit()

    def test_partial_expiry(self, fake_clock):
        """Only the expired admissions are pruned."""
        limiter = RateLimiter(2, clock=fake_clock)
        limiter.admit()
        fake_clock.advance(30_000)
        limiter.admit()
        fake_clock.advance(31_000)

        assert limiter.in_window() == 1
        limiter.admit()
        with pytest.raises(RateLimitExceeded):
            limiter.admit()


class TestLogging:
    """Verify admission decisions are logged."""

    def test_rejection_logged_with_counts(self, fake_clock, caplog):
        limiter = RateLimiter(2, clock=fake_clock)
        limiter.admit()
        limiter.admit()
        fake_clock.advance(1_000)

        with caplog.at_level(logging.WARNING, logger="gemini_image_mcp.core.rate_limiter"):
            with pytest.raises(RateLimitExceeded):
                limiter.admit()

        assert "Rate limit reached (2 calls in window); retry in 59000 ms" in caplog.text

    def test_admission_logged_at_debug(self, fake_clock, caplog):
        limiter = RateLimiter(3, clock=fake_clock)
        with caplog.at_level(logging.DEBUG, logger="gemini_image_mcp.core.rate_limiter"):
            limiter.admit()
        assert "Admitted call 1/3" in caplog.text
