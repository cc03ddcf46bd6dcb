"""Tests for preference storage and user-agent selection."""

import json

import pytest

from mangasources.sources.preferences import (
    ConfigurableSource,
    PreferenceScreen,
    SourcePreferences,
    SwitchPreference,
    get_source_preferences,
)
from mangasources.sources.utils.user_agents import (
    DESKTOP_USER_AGENTS,
    MOBILE_USER_AGENTS,
    PREF_KEY_CUSTOM_UA,
    PREF_KEY_RANDOM_UA,
    get_random_user_agent,
    resolve_user_agent,
)


DEFAULT_UA = "Default/1.0"


class TestSourcePreferences:
    def test_in_memory_defaults(self, memory_preferences):
        assert memory_preferences.path is None
        assert memory_preferences.get_bool("missing") is False
        assert memory_preferences.get_bool("missing", True) is True
        assert memory_preferences.get_str("missing", "x") == "x"

    def test_put_and_remove(self, memory_preferences):
        memory_preferences.put("flag", True)
        assert "flag" in memory_preferences
        assert memory_preferences.get_bool("flag") is True

        memory_preferences.remove("flag")
        assert "flag" not in memory_preferences

    def test_persisted_to_directory(self, tmp_path):
        preferences = SourcePreferences("source_1", str(tmp_path))
        preferences.put(PREF_KEY_CUSTOM_UA, "Saved/2.0")

        with open(tmp_path / "source_1.json", encoding="utf-8") as f:
            assert json.load(f) == {PREF_KEY_CUSTOM_UA: "Saved/2.0"}

        reloaded = SourcePreferences("source_1", str(tmp_path))
        assert reloaded.get_str(PREF_KEY_CUSTOM_UA) == "Saved/2.0"

    def test_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")

        preferences = SourcePreferences("broken", str(tmp_path))

        assert preferences.get_str("anything") == ""

    def test_get_source_preferences_name(self):
        assert get_source_preferences(42).name == "source_42"


class TestConfigurableSource:
    def test_screen_setup_is_required(self):
        class Unconfigured(ConfigurableSource):
            pass

        with pytest.raises(TypeError):
            Unconfigured()

    def test_subclass_adds_preferences(self):
        class Configured(ConfigurableSource):
            def setup_preference_screen(self, screen):
                screen.add_preference(SwitchPreference(key="flag", title="Flag"))

        screen = PreferenceScreen()
        Configured().setup_preference_screen(screen)

        assert screen.keys() == ["flag"]


class TestUserAgents:
    def test_default_when_nothing_set(self, memory_preferences):
        assert resolve_user_agent(memory_preferences, DEFAULT_UA) == DEFAULT_UA

    def test_custom_user_agent(self, memory_preferences):
        memory_preferences.put(PREF_KEY_CUSTOM_UA, "  Custom/1.0 ")
        assert resolve_user_agent(memory_preferences, DEFAULT_UA) == "Custom/1.0"

    def test_blank_custom_user_agent_ignored(self, memory_preferences):
        memory_preferences.put(PREF_KEY_CUSTOM_UA, "   ")
        assert resolve_user_agent(memory_preferences, DEFAULT_UA) == DEFAULT_UA

    def test_random_type_wins_over_custom(self, memory_preferences):
        memory_preferences.put(PREF_KEY_RANDOM_UA, "mobile")
        memory_preferences.put(PREF_KEY_CUSTOM_UA, "Custom/1.0")

        assert resolve_user_agent(memory_preferences, DEFAULT_UA) in MOBILE_USER_AGENTS

    def test_off_uses_custom(self, memory_preferences):
        memory_preferences.put(PREF_KEY_RANDOM_UA, "off")
        memory_preferences.put(PREF_KEY_CUSTOM_UA, "Custom/1.0")

        assert resolve_user_agent(memory_preferences, DEFAULT_UA) == "Custom/1.0"

    def test_chrome_filter(self):
        for _ in range(20):
            user_agent = get_random_user_agent("desktop", ["chrome"])
            assert "Chrome/" in user_agent
            assert "Edg/" not in user_agent

    def test_firefox_filter(self):
        assert "Firefox/" in get_random_user_agent("desktop", ["firefox"])

    def test_filter_without_matches_uses_whole_pool(self):
        assert get_random_user_agent("mobile", ["firefox"]) in MOBILE_USER_AGENTS

    def test_unfiltered_desktop(self):
        assert get_random_user_agent() in DESKTOP_USER_AGENTS
