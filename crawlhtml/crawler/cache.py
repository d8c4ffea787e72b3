"""
Content-addressed HTML cache.

One file per exact URL string at ``<cache_root>/<sha256(url)>.html``.
Entries never expire; they are removed only by ``clear()``. The cache is
advisory: every failure is logged and reported on the returned result,
never raised.
"""

import hashlib
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from crawlhtml.crawler.errors import CacheError
from crawlhtml.utils.config import get_settings
from crawlhtml.utils.logging import get_logger

logger = get_logger(__name__)

CACHE_SUFFIX = ".html"


@dataclass
class CacheLookup:
    """Result of a cache read. ``html`` is None on a miss."""

    html: str | None = None
    path: Path | None = None
    warning: str | None = None

    @property
    def hit(self) -> bool:
        return self.html is not None


@dataclass
class CacheWriteResult:
    """Result of a cache write or clear."""

    ok: bool
    path: Path | None = None
    warning: str | None = None


class ContentCache:
    """URL-keyed HTML cache on the local filesystem."""

    def __init__(self, cache_root: str | Path):
        self.cache_root = Path(cache_root)

    @classmethod
    def from_settings(cls) -> "ContentCache":
        """Cache rooted at ``settings.storage.cache_dir``."""
        return cls(get_settings().storage.cache_dir)

    @staticmethod
    def key_for(url: str) -> str:
        """Hex SHA-256 of the exact URL string (no normalization)."""
        return hashlib.sha256(url.encode("utf-8")).hexdigest()

    def path_for(self, url: str) -> Path:
        return self.cache_root / f"{self.key_for(url)}{CACHE_SUFFIX}"

    def get(self, url: str) -> CacheLookup:
        """Look up cached HTML for url."""
        path = self.path_for(url)
        try:
            html = path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return CacheLookup()
        except (OSError, UnicodeDecodeError) as e:
            error = CacheError(f"Failed to read cache entry: {e}", path=str(path))
            logger.warning("Cache read failed", url=url, **error.to_dict())
            return CacheLookup(path=path, warning=error.message)

        logger.debug("Cache hit", url=url, path=str(path), content_length=len(html))
        return CacheLookup(html=html, path=path)

    def put(self, url: str, html: str) -> CacheWriteResult:
        """Store html for url.

        The payload is written to a temporary file in the cache root and
        renamed into place, so concurrent readers see either the previous
        entry or the complete new one. Concurrent writers of the same URL
        are last-writer-wins.
        """
        path = self.path_for(url)
        tmp_name: str | None = None
        try:
            self.cache_root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.cache_root, prefix=f".{path.stem[:16]}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(html.encode("utf-8"))
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            error = CacheError(f"Failed to write cache entry: {e}", path=str(path))
            logger.warning("Cache write failed", url=url, **error.to_dict())
            return CacheWriteResult(ok=False, path=path, warning=error.message)
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug("Cache stored", url=url, path=str(path), content_length=len(html))
        return CacheWriteResult(ok=True, path=path)

    def clear(self) -> CacheWriteResult:
        """Remove the whole cache root. Succeeds when it does not exist."""
        try:
            shutil.rmtree(self.cache_root)
        except FileNotFoundError:
            pass
        except OSError as e:
            error = CacheError(f"Failed to clear cache: {e}", path=str(self.cache_root))
            logger.warning("Cache clear failed", **error.to_dict())
            return CacheWriteResult(ok=False, path=self.cache_root, warning=error.message)

        logger.info("Cache cleared", path=str(self.cache_root))
        return CacheWriteResult(ok=True, path=self.cache_root)
