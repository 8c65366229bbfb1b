"""
Fixed-window request limiting for the API.

DRF's built-in throttles keep a sliding history of timestamps and only
understand single-unit periods ("100/min").  The portal's limit is a
fixed quota per fixed window (by default 100 requests per 15 minutes per
client IP), so this throttle counts requests in a cache key derived from
the current window number.
"""
from __future__ import annotations

import re

from rest_framework.throttling import SimpleRateThrottle

_UNITS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}
_RATE_RE = re.compile(r'^\s*(\d+)\s*/\s*(\d*)\s*([smhd])[a-z]*\s*$', re.IGNORECASE)


def parse_window_rate(rate: str) -> tuple[int, int]:
    """Parse ``"<n>/<k><unit>"`` (e.g. ``"100/15m"``) into ``(n, seconds)``."""
    match = _RATE_RE.match(rate or '')
    if not match:
        raise ValueError(f'Invalid rate limit: {rate!r}')
    num, multiplier, unit = match.groups()
    return int(num), int(multiplier or 1) * _UNITS[unit.lower()]


class FixedWindowRateThrottle(SimpleRateThrottle):
    scope = 'api'
    cache_format = 'throttle_%(scope)s_%(ident)s'

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        return parse_window_rate(rate)

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}

    def allow_request(self, request, view):
        if self.rate is None:
            return True
        self.key = self.get_cache_key(request, view)
        if self.key is None:
            return True
        self.now = self.timer()
        window = int(self.now // self.duration)
        self.window_end = (window + 1) * self.duration
        window_key = f'{self.key}:{window}'
        self.cache.add(window_key, 0, self.duration)
        try:
            count = self.cache.incr(window_key)
        except ValueError:
            # expired between add() and incr()
            self.cache.set(window_key, 1, self.duration)
            count = 1
        return count <= self.num_requests

    def wait(self):
        return max(0.0, self.window_end - self.now)
