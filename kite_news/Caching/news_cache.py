"""
News Cache Module

The operations presentation layers use to read the local news store: the
category index, per-category articles, cached images and the followed
categories preference, plus cache clearing and day-rollover invalidation.
"""

import time
import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from kite_news.Caching.cache_store import (
    CacheStore,
    META_NAMESPACE,
    ARTICLES_NAMESPACE,
    IMAGES_NAMESPACE,
    NAMESPACES,
)
from kite_news.Caching.key_derivation import image_key
from kite_news.Caching.invalidation import should_invalidate
from kite_news.Caching.settings_store import SettingsStore

# Configure logging
logger = logging.getLogger(__name__)

INDEX_KEY = "categories.json"
ARTICLES_KEY_PREFIX = "articles_"
UPDATE_INTERVAL_SECONDS = 24 * 3600


def articles_key(category_file: str) -> str:
    return f"{ARTICLES_KEY_PREFIX}{category_file}"


class NewsCache:
    """Facade over the cache store for the news index, articles, images and settings."""

    def __init__(self, root_dir: Union[str, Path], settings: Optional[SettingsStore] = None):
        self.store = CacheStore(root_dir)
        self.settings = settings or SettingsStore(self.store)

    # Generic access

    def get_cache_dir(self, namespace: Optional[str] = None) -> Path:
        return self.store.get_cache_dir(namespace)

    def is_cache_valid(self, key: str, namespace: str) -> bool:
        """Check if a cache entry exists."""
        return self.store.exists(key, namespace)

    # Category index

    def has_index(self) -> bool:
        return self.store.exists(INDEX_KEY, META_NAMESPACE)

    def load_index(self) -> Optional[Dict[str, Any]]:
        data = self.store.read_json(INDEX_KEY, META_NAMESPACE)
        return data if isinstance(data, dict) else None

    def save_index(self, data: Dict[str, Any]) -> Path:
        return self.store.write_json(INDEX_KEY, META_NAMESPACE, data)

    def last_sync_timestamp(self) -> Optional[int]:
        """
        Get the timestamp recorded in the cached index.

        Returns:
            Epoch seconds of the last successful index sync, or None
        """
        data = self.load_index()
        if not data or data.get("timestamp") is None:
            return None
        try:
            return int(float(data["timestamp"]))
        except (TypeError, ValueError):
            logger.warning(f"Cached index has an invalid timestamp: {data.get('timestamp')!r}")
            return None

    def known_category_files(self) -> List[str]:
        data = self.load_index() or {}
        categories = data.get("categories") or []
        return [c["file"] for c in categories if isinstance(c, dict) and c.get("file")]

    def next_update_in(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds until the feed is due for its daily update (<= 0 means available now)."""
        last_sync = self.last_sync_timestamp()
        if last_sync is None:
            return None
        if now is None:
            now = time.time()
        return last_sync + UPDATE_INTERVAL_SECONDS - now

    # Articles

    def load_articles(self, category_file: str) -> Optional[Dict[str, Any]]:
        data = self.store.read_json(articles_key(category_file), ARTICLES_NAMESPACE)
        return data if isinstance(data, dict) else None

    def save_articles(self, category_file: str, data: Dict[str, Any]) -> Path:
        return self.store.write_json(articles_key(category_file), ARTICLES_NAMESPACE, data)

    def has_articles(self, category_file: str) -> bool:
        return self.store.exists(articles_key(category_file), ARTICLES_NAMESPACE)

    def cached_article_count(self, category_file: str) -> Optional[int]:
        data = self.load_articles(category_file)
        if data and isinstance(data.get("clusters"), list):
            return len(data["clusters"])
        return None

    # Images

    def get_image_path(self, url: Optional[str]) -> Optional[Path]:
        """
        Get the local path where an image URL is (or would be) cached.

        Args:
            url: The full image URL

        Returns:
            Path inside the images namespace, or None for an empty URL
        """
        if not url:
            return None
        return self.store.path_for(image_key(url), IMAGES_NAMESPACE)

    def has_image(self, url: str) -> bool:
        return bool(url) and self.store.exists(image_key(url), IMAGES_NAMESPACE)

    def get_cached_image(self, url: Optional[str]) -> Optional[Path]:
        """Return the local path of an image only if it has been downloaded."""
        if not url or not self.has_image(url):
            return None
        return self.get_image_path(url)

    def save_image(self, url: str, content: bytes) -> Path:
        return self.store.write_bytes(image_key(url), IMAGES_NAMESPACE, content)

    # Followed categories

    def get_followed_categories(self) -> Optional[List[str]]:
        return self.settings.get_followed_categories()

    def save_followed_categories(self, selected: Optional[Sequence[str]]) -> Optional[List[str]]:
        """Save the followed categories, normalized against the cached index."""
        return self.settings.save_followed_categories(selected, self.known_category_files())

    # Maintenance

    def clear_cache(self) -> List[Tuple[str, str]]:
        """Clear all cached entries except the user settings."""
        return self.store.clear(preserve={self.settings.relative_path})

    def check_and_clear_if_new_day(self, new_timestamp: Optional[float] = None,
                                   tz: Optional[tzinfo] = None) -> bool:
        """
        Wipe the cache if the incoming index belongs to a new day.

        Args:
            new_timestamp: Timestamp of the incoming index (defaults to now)
            tz: Timezone for the day comparison (defaults to local time)

        Returns:
            True if the cache was wiped
        """
        if not should_invalidate(self.last_sync_timestamp(), new_timestamp, tz):
            return False
        logger.info("Wiping cache for the new news cycle")
        self.clear_cache()
        return True

    def get_cache_statistics(self) -> Dict[str, Any]:
        """
        Generate cache statistics.

        Returns:
            Dictionary with entry counts and sizes per namespace and the
            last sync timestamp
        """
        namespaces = {}
        for namespace in NAMESPACES:
            keys = self.store.list_keys(namespace)
            size_bytes = 0
            for key in keys:
                try:
                    size_bytes += self.store.path_for(key, namespace).stat().st_size
                except OSError:
                    continue
            namespaces[namespace] = {"entries": len(keys), "size_bytes": size_bytes}

        return {
            "cache_dir": str(self.store.root_dir),
            "last_sync_timestamp": self.last_sync_timestamp(),
            "namespaces": namespaces,
            "total_size_kb": round(sum(n["size_bytes"] for n in namespaces.values()) / 1024),
        }
