"""Per-source preference storage and preference screen descriptors."""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog

from mangasources.config import settings


logger = structlog.get_logger(__name__)


class SourcePreferences:
    """Key/value preference store scoped to one source.

    Values live in memory; when a directory is given they are also
    written to <directory>/<name>.json on every change.
    """

    def __init__(self, name: str, directory: Optional[str] = None):
        self.name = name
        self.directory = directory
        self._values: Dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Optional[str]:
        if not self.directory:
            return None
        return os.path.join(self.directory, f"{self.name}.json")

    def _load(self) -> None:
        path = self.path
        if not path or not os.path.exists(path):
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                self._values = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("preferences_load_failed", path=path, error=str(e))
            self._values = {}

    def _save(self) -> None:
        path = self.path
        if not path:
            return
        os.makedirs(self.directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._values, f, ensure_ascii=False, indent=2)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return bool(self._values.get(key, default))

    def get_str(self, key: str, default: str = "") -> str:
        value = self._values.get(key, default)
        return default if value is None else str(value)

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._save()

    def __contains__(self, key: str) -> bool:
        return key in self._values


def get_source_preferences(source_id: int) -> SourcePreferences:
    """Open the preference store for a source id using configured storage."""
    return SourcePreferences(f"source_{source_id}", settings.get_preferences_dir())


@dataclass
class Preference:
    """Base preference descriptor rendered by the host."""

    key: str
    title: str
    summary: str = ""
    default_value: Any = None


@dataclass
class SwitchPreference(Preference):
    summary_on: str = ""
    summary_off: str = ""
    default_value: bool = False


@dataclass
class ListPreference(Preference):
    entries: List[str] = field(default_factory=list)
    entry_values: List[str] = field(default_factory=list)


@dataclass
class EditTextPreference(Preference):
    dialog_message: str = ""


class PreferenceScreen:
    """Ordered collection of preferences for one source."""

    def __init__(self):
        self.preferences: List[Preference] = []

    def add_preference(self, preference: Preference) -> None:
        self.preferences.append(preference)

    def keys(self) -> List[str]:
        return [p.key for p in self.preferences]


class ConfigurableSource(ABC):
    """Mixin for sources that expose user preferences."""

    @abstractmethod
    def setup_preference_screen(self, screen: PreferenceScreen) -> None:
        """Add this source's preferences to the screen."""
        pass
