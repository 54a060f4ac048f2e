"""
Infrastructure Module - Cross-cutting concerns.

This module provides:
- Logging: Structured logging with color support
- Rate Limiting: slowapi limits for the HTTP surface
- Retry: Retry utilities with exponential backoff for REST collaborators
"""

from .logging import LoggerMixin, setup_logging
from .rate_limiter import limit_health, limiter, setup_rate_limiter
from .retry import RetryConfig, execute_with_retry

__all__ = [
    # Logging
    "setup_logging",
    "LoggerMixin",
    # Rate limiting
    "limiter",
    "setup_rate_limiter",
    "limit_health",
    # Retry
    "execute_with_retry",
    "RetryConfig",
]
