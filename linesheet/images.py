"""Product image download and thumbnailing for the PDF renderer."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image


class ImageManager:
    """Downloads product images into a local cache and prepares thumbnails."""

    def __init__(self, cache_dir: Path, timeout: int = 30, session: Optional[requests.Session] = None) -> None:
        self.cache_dir = cache_dir
        self.timeout = timeout
        self.session = session or requests.Session()
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def fetch(self, url: str) -> Optional[Path]:
        if not url:
            return None
        destination = self.cache_dir / self._cache_name(url)
        if destination.exists():
            return destination
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logging.warning("Failed to download image", extra={"url": url, "error": str(exc)})
            return None
        with destination.open("wb") as handle:
            handle.write(response.content)
        return destination

    def thumbnail(self, url: str, size: Tuple[int, int]) -> Optional[Image.Image]:
        """Return an RGB copy of the image scaled to fit ``size``, or None if unavailable."""

        path = self.fetch(url)
        if path is None:
            return None
        try:
            with Image.open(path) as img:
                thumb = img.convert("RGB")
                thumb.thumbnail(size, Image.LANCZOS)
                return thumb
        except OSError as exc:
            logging.warning("Unreadable image skipped", extra={"url": url, "error": str(exc)})
            return None

    __call__ = thumbnail

    def _cache_name(self, url: str) -> str:
        digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]
        return digest + (self._infer_extension(url) or ".jpg")

    def _infer_extension(self, url: str) -> Optional[str]:
        path = urlparse(url).path
        if "." in path.rsplit("/", 1)[-1]:
            return path[path.rfind("."):].lower()
        return None
