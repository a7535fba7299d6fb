"""Outbound rate limiting."""

from .rate_limiter import OutboundRateLimiter

__all__ = ["OutboundRateLimiter"]
