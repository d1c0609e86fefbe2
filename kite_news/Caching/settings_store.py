"""
Settings Store Module

User settings persisted in meta/settings.json. The settings file is the one
entry that survives cache clears.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from kite_news.Caching.cache_store import CacheStore, META_NAMESPACE
from kite_news.Caching.followed_filter import normalize_for_save

# Configure logging
logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings.json"
FOLLOWED_CATEGORIES_FIELD = "followed_categories"


class SettingsStore:
    """Reads and writes the user settings mapping."""

    def __init__(self, store: CacheStore):
        self.store = store

    @property
    def relative_path(self) -> str:
        return f"{META_NAMESPACE}/{SETTINGS_KEY}"

    def get_settings(self) -> Dict[str, Any]:
        data = self.store.read_json(SETTINGS_KEY, META_NAMESPACE)
        if not isinstance(data, dict):
            return {}
        return data

    def save_settings(self, settings: Dict[str, Any]) -> None:
        self.store.write_json(SETTINGS_KEY, META_NAMESPACE, settings)

    def get_followed_categories(self) -> Optional[List[str]]:
        """
        Get the list of followed category identifiers.

        Returns:
            List of identifiers (e.g. ["tech.json", "world.json"]), or None
            when no explicit preference is stored, meaning "all categories"
        """
        followed = self.get_settings().get(FOLLOWED_CATEGORIES_FIELD)
        if not isinstance(followed, list) or not followed:
            return None
        return [str(item) for item in followed]

    def save_followed_categories(self, selected: Optional[Sequence[str]],
                                 all_known: Sequence[str] = ()) -> Optional[List[str]]:
        """
        Save the followed categories, normalized against the known categories.

        Args:
            selected: Identifiers to follow, or None to follow all
            all_known: Identifiers of every category in the current index

        Returns:
            The value that was stored (None means "follow all")
        """
        value = normalize_for_save(selected, all_known)
        settings = self.get_settings()
        if value is None:
            settings.pop(FOLLOWED_CATEGORIES_FIELD, None)
        else:
            settings[FOLLOWED_CATEGORIES_FIELD] = value
        self.save_settings(settings)
        logger.info(f"Saved followed categories: {value if value is not None else 'all'}")
        return value
