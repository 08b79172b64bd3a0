"""
Emoji handling utilities for card generation.
Resolves emoji clusters to Twemoji images and keeps the results in a cache
that can be shared between renders.
"""

import os
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Optional

import requests
from PIL import Image

from .text_processing import segment_text

_LOGGER = logging.getLogger(__name__)

TWEMOJI_BASE_URL = os.getenv(
    "TWEMOJI_BASE_URL",
    "https://cdn.jsdelivr.net/gh/twitter/twemoji@14.0.2/assets/72x72",
)

# Optional directory where downloaded emoji PNGs are kept between runs
EMOJI_CACHE_DIR = os.getenv("TWEMOJI_CACHE_DIR") or None

EMOJI_FETCH_TIMEOUT = 10


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class GlyphResolution:
    """Outcome of an emoji lookup. Only RESOLVED carries an image."""

    status: ResolutionStatus
    image: Optional[Image.Image] = None
    error: Optional[str] = None

    @property
    def resolved(self):
        return self.status is ResolutionStatus.RESOLVED


@dataclass(frozen=True)
class EmojiStyle:
    """
    Placement of emoji images relative to the text they replace.

    The image is drawn as a square of ``font_size * scale`` whose top edge is
    ``font_size * baseline`` above the text baseline.
    """

    scale: float = 1.0
    baseline: float = 0.8

    def size(self, font_size):
        return font_size * self.scale

    def top(self, baseline_y, font_size):
        return baseline_y - font_size * self.baseline


class EmojiCache:
    """
    Thread-safe mapping of emoji cluster to GlyphResolution.

    Entries are never replaced: when two renders miss on the same emoji at
    the same time, the first stored result wins.
    """

    def __init__(self):
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, cluster):
        with self._lock:
            return self._entries.get(cluster)

    def put(self, cluster, resolution):
        with self._lock:
            return self._entries.setdefault(cluster, resolution)

    def __contains__(self, cluster):
        with self._lock:
            return cluster in self._entries

    def __len__(self):
        with self._lock:
            return len(self._entries)


def emoji_codepoint_key(emoji_char):
    """
    Build the Twemoji file key of an emoji, e.g. '🇺🇸' -> '1f1fa-1f1f8'.

    :param emoji_char: Emoji cluster, possibly several code points
    :return: Lowercase hex code points joined by '-'
    """
    return "-".join(f"{ord(c):x}" for c in emoji_char)


def _strip_variation_selectors(s):
    """
    Return a string with U+FE0F (variation selector-16) characters removed.
    Twemoji filenames often omit the FE0F codepoint (variation selector),
    so trying the filename without it can avoid 404 errors for characters
    like '❤️' (U+2764 U+FE0F).
    """
    return "".join(ch for ch in s if ord(ch) != 0xFE0F)


def _candidate_keys(emoji_char):
    keys = [emoji_codepoint_key(emoji_char)]
    stripped = _strip_variation_selectors(emoji_char)
    if stripped and stripped != emoji_char:
        keys.append(emoji_codepoint_key(stripped))
    return keys


def download_glyph_asset(url, timeout=EMOJI_FETCH_TIMEOUT):
    """
    Download an emoji image.

    :param url: Image URL
    :param timeout: Timeout in seconds
    :return: Response body as bytes
    :raises requests.RequestException: on network errors and HTTP error status
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def decode_glyph(data):
    """Decode PNG bytes into an RGBA image."""
    image = Image.open(BytesIO(data))
    image.load()
    return image.convert("RGBA")


def _is_not_found(error):
    response = getattr(error, "response", None)
    return response is not None and response.status_code == 404


class EmojiResolver:
    """
    Resolve emoji clusters to images, downloading them from Twemoji on a miss.

    Every lookup, successful or not, is stored in the cache so an emoji is
    fetched at most once per cache. Failures are never raised, callers draw
    the emoji as plain text instead.
    """

    def __init__(
        self,
        cache=None,
        base_url=TWEMOJI_BASE_URL,
        cache_dir=EMOJI_CACHE_DIR,
        timeout=EMOJI_FETCH_TIMEOUT,
        fetch=None,
    ):
        """
        :param cache: EmojiCache to use, shared caches allow several renderers to reuse downloads
        :param base_url: Base URL of the Twemoji PNG assets
        :param cache_dir: Directory for downloaded PNG files (None = memory only)
        :param timeout: Download timeout in seconds
        :param fetch: Callable (url, timeout) -> bytes, defaults to an HTTP download
        """
        self.cache = cache if cache is not None else EmojiCache()
        self.base_url = base_url.rstrip("/")
        self.cache_dir = cache_dir
        self.timeout = timeout
        self._fetch = fetch or download_glyph_asset

        if cache_dir and not os.path.exists(cache_dir):
            os.makedirs(cache_dir, exist_ok=True)

    def resolve(self, emoji_char):
        """
        Get the image for an emoji.

        :param emoji_char: Emoji cluster
        :return: RGBA image or None if the emoji could not be resolved
        """
        return self.resolve_result(emoji_char).image

    def resolve_result(self, emoji_char):
        """
        Get the lookup outcome for an emoji, fetching it on a cache miss.

        :param emoji_char: Emoji cluster
        :return: GlyphResolution
        """
        cached = self.cache.get(emoji_char)
        if cached is not None:
            return cached

        resolution = self._lookup(emoji_char)
        if not resolution.resolved:
            _LOGGER.warning(
                "Could not resolve emoji image for %s: %s", emoji_char, resolution.error
            )
        return self.cache.put(emoji_char, resolution)

    def precache(self, text):
        """
        Resolve all emoji found in text ahead of drawing.

        :param text: Text to scan for emojis
        """
        for segment in segment_text(text):
            if segment.is_emoji:
                self.resolve_result(segment.content)

    def _lookup(self, emoji_char):
        last_error = None
        for key in _candidate_keys(emoji_char):
            local_path = self._local_path(key)
            if local_path and os.path.exists(local_path):
                try:
                    with open(local_path, "rb") as f:
                        return GlyphResolution(ResolutionStatus.RESOLVED, decode_glyph(f.read()))
                except Exception as e:
                    _LOGGER.debug("Ignoring unreadable cached emoji %s: %s", local_path, e)

            url = f"{self.base_url}/{key}.png"
            try:
                data = self._fetch(url, self.timeout)
            except Exception as e:
                last_error = e
                if _is_not_found(e):
                    # Twemoji lacks this exact filename, try the next candidate
                    _LOGGER.debug("Twemoji 404 for %s (key %s)", emoji_char, key)
                    continue
                return GlyphResolution(ResolutionStatus.FAILED, error=str(e))

            try:
                image = decode_glyph(data)
            except Exception as e:
                return GlyphResolution(ResolutionStatus.FAILED, error=f"undecodable image: {e}")

            self._store(local_path, data)
            _LOGGER.debug("Resolved emoji %s from %s", emoji_char, url)
            return GlyphResolution(ResolutionStatus.RESOLVED, image)

        return GlyphResolution(
            ResolutionStatus.NOT_FOUND,
            error=str(last_error) if last_error is not None else "no matching asset",
        )

    def _local_path(self, key):
        if not self.cache_dir:
            return None
        return os.path.join(self.cache_dir, f"{key}.png")

    def _store(self, local_path, data):
        if not local_path:
            return
        try:
            with open(local_path, "wb") as f:
                f.write(data)
        except OSError as e:
            _LOGGER.debug("Could not write emoji cache file %s: %s", local_path, e)
