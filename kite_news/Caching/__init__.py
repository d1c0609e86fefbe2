"""
Cache Management System

A namespaced file cache for the Kite news feed and the sync run that fills it.
"""

# Import public API components for easier access
from kite_news.Caching.cache_store import (
    CacheStore,
    META_NAMESPACE,
    ARTICLES_NAMESPACE,
    IMAGES_NAMESPACE,
    NAMESPACES,
)
from kite_news.Caching.key_derivation import image_key
from kite_news.Caching.invalidation import should_invalidate, cache_freshness, CacheFreshness
from kite_news.Caching.followed_filter import (
    resolve_followed,
    normalize_for_save,
    filter_categories,
)
from kite_news.Caching.settings_store import SettingsStore
from kite_news.Caching.news_cache import NewsCache
from kite_news.Caching.sync_orchestrator import SyncOrchestrator
