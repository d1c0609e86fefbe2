"""
Key Derivation Module

Maps remote image URLs to fixed-length, filesystem-safe cache keys.
"""

import hashlib

IMAGE_KEY_PREFIX = "img_"
IMAGE_KEY_SUFFIX = ".jpg"


def image_key(url: str) -> str:
    """
    Generate a unique, repeatable cache key for an image URL.

    The key is the MD5 hex digest of the URL, so the same URL always maps to
    the same entry and no lookup table is needed.

    Args:
        url: Full image URL

    Returns:
        Key of the form img_<32 hex chars>.jpg

    Raises:
        ValueError: If the URL is empty or None
    """
    if not url:
        raise ValueError("Image URL is required for cache key generation")

    digest = hashlib.md5(url.encode("utf-8")).hexdigest()
    return f"{IMAGE_KEY_PREFIX}{digest}{IMAGE_KEY_SUFFIX}"
