"""User-Agent selection and the random user-agent source preferences."""

import random
from typing import List, Optional, Sequence

from mangasources.sources.preferences import (
    EditTextPreference,
    ListPreference,
    PreferenceScreen,
    SourcePreferences,
)


PREF_KEY_RANDOM_UA = "pref_random_ua_type"
PREF_KEY_CUSTOM_UA = "pref_random_ua_custom"

UA_TYPE_OFF = "off"
UA_TYPE_DESKTOP = "desktop"
UA_TYPE_MOBILE = "mobile"


DESKTOP_USER_AGENTS: List[str] = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
    # Chrome on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    # Chrome on Linux
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    # Firefox
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:133.0) Gecko/20100101 Firefox/133.0",
    # Edge
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0",
]

MOBILE_USER_AGENTS: List[str] = [
    # Android Chrome
    "Mozilla/5.0 (Linux; Android 14; SM-S918B) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 13; Pixel 7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Mobile Safari/537.36",
    # iPhone Safari
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1",
]


def _matches(user_agent: str, browser: str) -> bool:
    browser = browser.lower()
    if browser == "chrome":
        return "Chrome/" in user_agent and "Edg/" not in user_agent
    if browser == "firefox":
        return "Firefox/" in user_agent
    if browser == "edge":
        return "Edg/" in user_agent
    return browser in user_agent.lower()


def get_random_user_agent(
    ua_type: str = UA_TYPE_DESKTOP,
    filter_include: Optional[Sequence[str]] = None,
) -> str:
    """Pick a random user-agent string.

    Args:
        ua_type: UA_TYPE_DESKTOP or UA_TYPE_MOBILE
        filter_include: Browser names to restrict to (e.g. ["chrome"])

    Returns:
        Random user-agent string; the whole pool is used when the
        filter leaves nothing
    """
    pool = MOBILE_USER_AGENTS if ua_type == UA_TYPE_MOBILE else DESKTOP_USER_AGENTS
    if filter_include:
        filtered = [ua for ua in pool if any(_matches(ua, b) for b in filter_include)]
        pool = filtered or pool
    return random.choice(pool)


def add_random_ua_preference_to_screen(screen: PreferenceScreen) -> None:
    """Add the user-agent type list and the custom user-agent field."""
    screen.add_preference(
        ListPreference(
            key=PREF_KEY_RANDOM_UA,
            title="Random User-Agent (Requires Restart)",
            summary="%s",
            default_value=UA_TYPE_OFF,
            entries=["Off", "Desktop", "Mobile"],
            entry_values=[UA_TYPE_OFF, UA_TYPE_DESKTOP, UA_TYPE_MOBILE],
        )
    )
    screen.add_preference(
        EditTextPreference(
            key=PREF_KEY_CUSTOM_UA,
            title="Custom User-Agent",
            summary="Leave blank to use the application default user-agent (IGNORED if Random User-Agent is enabled)",
            default_value="",
        )
    )


def get_pref_ua_type(preferences: SourcePreferences) -> str:
    return preferences.get_str(PREF_KEY_RANDOM_UA, UA_TYPE_OFF)


def get_pref_custom_ua(preferences: SourcePreferences) -> Optional[str]:
    value = preferences.get_str(PREF_KEY_CUSTOM_UA, "").strip()
    return value or None


def resolve_user_agent(
    preferences: SourcePreferences,
    default: str,
    filter_include: Optional[Sequence[str]] = None,
) -> str:
    """User-Agent for a source: random type first, then custom, then default."""
    ua_type = get_pref_ua_type(preferences)
    if ua_type in (UA_TYPE_DESKTOP, UA_TYPE_MOBILE):
        return get_random_user_agent(ua_type, filter_include)
    return get_pref_custom_ua(preferences) or default
