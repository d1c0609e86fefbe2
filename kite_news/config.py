"""
Configuration Module

Loads runtime settings for the news cache from the environment.
A `.env` file is honoured through python-dotenv.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

# Default constants
DEFAULT_BASE_URL = "https://kite.kagi.com/"
DEFAULT_INDEX_FILE = "index.json"
DEFAULT_DATA_DIR = os.path.join("~", ".local", "share", "kite-news")
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_IMAGE_TIMEOUT = 60.0
DEFAULT_USER_AGENT = "kite-news-cache/1.0"


def normalize_base_url(base_url: str) -> str:
    """Return the base URL with exactly one trailing slash."""
    return base_url.rstrip("/") + "/"


@dataclass
class KiteNewsConfig:
    """
    Runtime settings for the cache and the API client.

    All values have defaults so the cache works without any environment setup.
    """
    base_url: str = DEFAULT_BASE_URL
    index_file: str = DEFAULT_INDEX_FILE
    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR).expanduser())
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    image_timeout: float = DEFAULT_IMAGE_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"

    def __post_init__(self):
        self.base_url = normalize_base_url(self.base_url)
        self.data_dir = Path(self.data_dir).expanduser()


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {raw!r}, using default {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, using default {default}")
        return default
    return value


def load_config(env_file: Optional[Union[str, Path]] = None) -> KiteNewsConfig:
    """
    Build a KiteNewsConfig from environment variables.

    Args:
        env_file: Optional path to a .env file (defaults to dotenv's lookup)

    Returns:
        Populated KiteNewsConfig
    """
    # Load environment variables from .env file
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return KiteNewsConfig(
        base_url=os.getenv("KITE_NEWS_BASE_URL", DEFAULT_BASE_URL),
        index_file=os.getenv("KITE_NEWS_INDEX_FILE", DEFAULT_INDEX_FILE),
        data_dir=Path(os.getenv("KITE_NEWS_DATA_DIR", DEFAULT_DATA_DIR)),
        request_timeout=_float_from_env("KITE_NEWS_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        image_timeout=_float_from_env("KITE_NEWS_IMAGE_TIMEOUT", DEFAULT_IMAGE_TIMEOUT),
        user_agent=os.getenv("KITE_NEWS_USER_AGENT", DEFAULT_USER_AGENT),
        log_level=os.getenv("KITE_NEWS_LOG_LEVEL", "INFO").upper(),
    )
