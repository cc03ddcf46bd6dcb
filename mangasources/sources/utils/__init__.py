"""Source utilities for rate limiting, retries, user agents and HTML parsing."""

from .rate_limiter import DomainRateLimiter, TokenBucket
from .user_agents import (
    get_random_user_agent,
    add_random_ua_preference_to_screen,
    resolve_user_agent,
    DESKTOP_USER_AGENTS,
    MOBILE_USER_AGENTS,
)
from .html import as_soup, abs_url, attr, text, own_text, img_attr
from .retry import http_retry


__all__ = [
    # Rate limiting
    "DomainRateLimiter",
    "TokenBucket",
    # User agents
    "get_random_user_agent",
    "add_random_ua_preference_to_screen",
    "resolve_user_agent",
    "DESKTOP_USER_AGENTS",
    "MOBILE_USER_AGENTS",
    # HTML
    "as_soup",
    "abs_url",
    "attr",
    "text",
    "own_text",
    "img_attr",
    # Retry decorators
    "http_retry",
]
