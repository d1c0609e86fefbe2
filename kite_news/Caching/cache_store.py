"""
Cache Store Module

Namespaced key/value persistence backed by files. Every entry lives at
`<root>/<namespace>/<key>`; JSON entries and raw binary entries share the
same layout. Writes go through a temporary file in the target directory
followed by a rename, so readers never observe a partially written entry.
"""

import os
import json
import logging
import tempfile
import shutil
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from kite_news.exceptions import CacheIOError

# Configure logging
logger = logging.getLogger(__name__)

# Namespaces of the cache key space
META_NAMESPACE = "meta"
ARTICLES_NAMESPACE = "articles"
IMAGES_NAMESPACE = "images"
NAMESPACES = (META_NAMESPACE, ARTICLES_NAMESPACE, IMAGES_NAMESPACE)

TEMP_PREFIX = ".tmp_"


class CacheStore:
    """File-backed cache partitioned into the meta, articles and images namespaces."""

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).expanduser()

    def _validate(self, key: str, namespace: Optional[str]) -> None:
        if namespace is not None and namespace not in NAMESPACES:
            raise ValueError(f"Unknown cache namespace: {namespace!r}")
        if not key or key in (".", "..") or "/" in key or "\\" in key:
            raise ValueError(f"Invalid cache key: {key!r}")

    def get_cache_dir(self, namespace: Optional[str] = None, create: bool = True) -> Path:
        """
        Get the directory holding a namespace (or the cache root).

        Args:
            namespace: One of NAMESPACES, or None for the cache root
            create: Create the directory if it does not exist yet

        Returns:
            Path to the directory
        """
        if namespace is not None and namespace not in NAMESPACES:
            raise ValueError(f"Unknown cache namespace: {namespace!r}")
        directory = self.root_dir / namespace if namespace else self.root_dir
        if create and not directory.is_dir():
            logger.debug(f"Creating cache directory: {directory}")
            directory.mkdir(parents=True, exist_ok=True)
        return directory

    def path_for(self, key: str, namespace: str) -> Path:
        """Return the file path of an entry without touching the filesystem."""
        self._validate(key, namespace)
        return self.root_dir / namespace / key

    def exists(self, key: str, namespace: str) -> bool:
        return self.path_for(key, namespace).is_file()

    def read_bytes(self, key: str, namespace: str) -> Optional[bytes]:
        """Read a raw entry, or None when it is missing or unreadable."""
        path = self.path_for(key, namespace)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Error reading cache entry {path}: {e}")
            return None

    def read_json(self, key: str, namespace: str) -> Optional[Any]:
        """
        Read and decode a JSON entry.

        Missing, empty and corrupt entries are all reported as a cache miss
        (None); corruption is logged but never raised to the caller.

        Args:
            key: Entry key within the namespace
            namespace: Cache namespace

        Returns:
            Decoded object or list, or None
        """
        content = self.read_bytes(key, namespace)
        if not content:
            return None
        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Corrupt cache file {self.path_for(key, namespace)}: {e}")
            return None
        if not isinstance(data, (dict, list)):
            logger.warning(f"Corrupt cache file {self.path_for(key, namespace)}: "
                           f"unexpected top-level {type(data).__name__}")
            return None
        return data

    def write_bytes(self, key: str, namespace: str, content: bytes) -> Path:
        """
        Replace an entry with the given bytes using an atomic write.

        Args:
            key: Entry key within the namespace
            namespace: Cache namespace
            content: Full payload of the entry

        Returns:
            Path of the written entry

        Raises:
            CacheIOError: If the entry could not be written
        """
        target = self.path_for(key, namespace)
        temp_path = None
        try:
            dir_name = self.get_cache_dir(namespace)
            # Create temp file in same directory for atomic move
            fd, temp_path = tempfile.mkstemp(dir=dir_name, prefix=TEMP_PREFIX)
            with os.fdopen(fd, "wb") as temp_file:
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            shutil.move(temp_path, target)
            temp_path = None
        except OSError as e:
            logger.error(f"Error saving cache entry {target}: {e}")
            raise CacheIOError(f"Could not write {target}: {e}") from e
        finally:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

        logger.debug(f"Saved cache entry {target}")
        return target

    def write_json(self, key: str, namespace: str, value: Any) -> Path:
        """Serialize a value as JSON and replace the entry with it."""
        try:
            content = json.dumps(value, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CacheIOError(f"Failed to encode JSON for {namespace}/{key}: {e}") from e
        return self.write_bytes(key, namespace, content)

    def list_keys(self, namespace: str) -> List[str]:
        """List the keys present in a namespace, skipping in-flight temp files."""
        directory = self.get_cache_dir(namespace, create=False)
        if not directory.is_dir():
            return []
        return sorted(
            entry.name for entry in directory.iterdir()
            if entry.is_file() and not entry.name.startswith(TEMP_PREFIX)
        )

    def clear(self, preserve: Iterable[str] = ()) -> List[Tuple[str, str]]:
        """
        Remove every entry in every namespace except the preserved ones.

        Walks the tree bottom-up, deleting files before their parent
        directories, and removes directories left empty. Deletion failures
        do not stop the traversal; they are collected and returned.

        Args:
            preserve: Entries to keep, as paths relative to the cache root
                      (e.g. "meta/settings.json")

        Returns:
            List of (path, error message) for entries that could not be removed
        """
        keep = {Path(p).as_posix() for p in preserve}
        errors: List[Tuple[str, str]] = []

        if not self.root_dir.is_dir():
            return errors

        logger.info(f"Clearing cache in {self.root_dir} (preserving {sorted(keep)})")
        for dirpath, dirnames, filenames in os.walk(self.root_dir, topdown=False):
            current = Path(dirpath)
            for filename in filenames:
                path = current / filename
                if path.relative_to(self.root_dir).as_posix() in keep:
                    continue
                try:
                    path.unlink()
                except OSError as e:
                    logger.warning(f"Could not delete cache file {path}: {e}")
                    errors.append((str(path), str(e)))

            if current == self.root_dir:
                continue
            try:
                if not any(current.iterdir()):
                    current.rmdir()
            except OSError as e:
                logger.warning(f"Could not remove cache directory {current}: {e}")
                errors.append((str(current), str(e)))

        return errors
