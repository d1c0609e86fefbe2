"""
Kite News Cache

Offline-first cache and synchronization engine for the Kagi Kite news feed.
Fetches the category index, per-category article clusters and their images,
stores them in a namespaced file cache and serves every later read from it.
"""

from kite_news.config import KiteNewsConfig, load_config
from kite_news.exceptions import (
    KiteNewsError,
    KiteApiError,
    TransportError,
    DecodeError,
    CacheIOError,
)

# Package metadata
__version__ = "1.0.0"
__author__ = "Kite News Team"
