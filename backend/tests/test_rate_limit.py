import pytest

from couponme.core.errors import TooManyRequests
from couponme.core.rate_limit import SlidingWindowLimiter


def test_window_slides_and_reports_retry_after() -> None:
    limiter = SlidingWindowLimiter(limit=2, window_seconds=60)
    limiter.hit("1.2.3.4", now=100.0)
    limiter.hit("1.2.3.4", now=110.0)

    with pytest.raises(TooManyRequests) as exc:
        limiter.hit("1.2.3.4", now=120.0)
    assert exc.value.headers == {"Retry-After": "40"}

    limiter.hit("5.6.7.8", now=120.0)
    limiter.hit("1.2.3.4", now=161.0)


def test_rejected_calls_do_not_extend_the_window() -> None:
    limiter = SlidingWindowLimiter(limit=1, window_seconds=10)
    limiter.hit("a", now=0.0)
    for moment in (1.0, 5.0, 9.0):
        with pytest.raises(TooManyRequests):
            limiter.hit("a", now=moment)
    limiter.hit("a", now=10.5)
