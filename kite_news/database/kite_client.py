"""
Kite API Client Module

Synchronous, read-only client for the Kagi Kite public API. Fetches the
category index, per-category article clusters and image payloads.
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

from kite_news.config import (
    DEFAULT_BASE_URL,
    DEFAULT_INDEX_FILE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_IMAGE_TIMEOUT,
    DEFAULT_USER_AGENT,
    KiteNewsConfig,
    normalize_base_url,
)
from kite_news.exceptions import TransportError, DecodeError

# Configure logging
logger = logging.getLogger(__name__)


class KiteClient:
    """HTTP client for the Kite API with per-request timeouts."""

    def __init__(self,
                 base_url: str = DEFAULT_BASE_URL,
                 index_file: str = DEFAULT_INDEX_FILE,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 image_timeout: float = DEFAULT_IMAGE_TIMEOUT,
                 user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            base_url: Root URL of the API
            index_file: Path of the category index relative to the base URL
            request_timeout: Timeout in seconds for JSON requests
            image_timeout: Timeout in seconds for image downloads
            user_agent: User-Agent header sent with every request
            session: Optional requests session to reuse
        """
        self.base_url = normalize_base_url(base_url)
        self.index_file = index_file
        self.request_timeout = request_timeout
        self.image_timeout = image_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    @classmethod
    def from_config(cls, config: KiteNewsConfig,
                    session: Optional[requests.Session] = None) -> "KiteClient":
        return cls(
            base_url=config.base_url,
            index_file=config.index_file,
            request_timeout=config.request_timeout,
            image_timeout=config.image_timeout,
            user_agent=config.user_agent,
            session=session,
        )

    def _get(self, url: str, timeout: float) -> requests.Response:
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=timeout)
        except requests.RequestException as e:
            logger.warning(f"Connection failed for {url}: {e}")
            raise TransportError(f"Connection failed: {e}") from e

        if response.status_code != 200:
            message = f"HTTP {response.status_code} {response.reason or ''}".strip()
            logger.warning(f"{message} for {url}")
            raise TransportError(message)

        if not response.content:
            logger.warning(f"Empty response body from {url}")
            raise TransportError("Empty response")
        return response

    def get_json(self, url: str) -> Dict[str, Any]:
        """
        Perform a GET request and decode the JSON object it returns.

        Args:
            url: Full URL to fetch

        Returns:
            Decoded JSON object

        Raises:
            TransportError: On connection failure, non-200 status or empty body
            DecodeError: If the body is not a JSON object
        """
        response = self._get(url, self.request_timeout)
        try:
            data = json.loads(response.content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"JSON parse error for {url}: {e}")
            logger.debug(f"First 200 chars of body: {response.content[:200]!r}")
            raise DecodeError("JSON parse error") from e

        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")

        logger.debug(f"Successfully decoded JSON from {url}")
        return data

    def fetch_categories(self) -> Dict[str, Any]:
        """Fetch the category index (timestamp and categories)."""
        return self.get_json(urljoin(self.base_url, self.index_file))

    def fetch_articles(self, category_file: str) -> Dict[str, Any]:
        """
        Fetch article clusters for a specific category.

        Args:
            category_file: The category identifier (e.g. "tech.json")

        Returns:
            Response with category, timestamp and clusters
        """
        if not category_file:
            raise TransportError("No category filename provided")
        return self.get_json(urljoin(self.base_url, category_file))

    def fetch_image(self, url: str) -> bytes:
        """Download an image and return its raw bytes."""
        if not url:
            raise TransportError("No image URL provided")
        response = self._get(url, self.image_timeout)
        return response.content
