"""
Font Manager for card generation

This module handles registration, lookup and download of the fonts used to
draw card text with Pillow.
"""

import os
import logging
import platform
import threading
from functools import lru_cache

import requests
from PIL import ImageFont

from card_errors import FontLoadError
from card_formats import FETCH_TIMEOUT

_LOGGER = logging.getLogger(__name__)

# Google Fonts that can be downloaded for the default card fonts (Open Source)
GOOGLE_FONTS = {
    "Poppins": {
        "regular": "https://github.com/google/fonts/raw/main/ofl/poppins/Poppins-Regular.ttf",
        "bold": "https://github.com/google/fonts/raw/main/ofl/poppins/Poppins-Bold.ttf",
        "description": "Geometric sans-serif used by the welcome and leave cards",
    },
    "Lato": {
        "regular": "https://github.com/google/fonts/raw/main/ofl/lato/Lato-Regular.ttf",
        "bold": "https://github.com/google/fonts/raw/main/ofl/lato/Lato-Bold.ttf",
        "description": "Humanist sans-serif, close to the tweet card font",
    },
}

# System font locations by platform
SYSTEM_FONT_PATHS = {
    "windows": ["C:/Windows/Fonts", os.path.expandvars("%WINDIR%/Fonts")],
    "linux": ["/usr/share/fonts", "/usr/local/share/fonts", "~/.fonts"],
    "darwin": ["/Library/Fonts", "/System/Library/Fonts", "~/Library/Fonts"],  # macOS
}

# Sans-serif system fonts tried when a family is not available
SYSTEM_REGULAR_FONTS = [
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "NotoSans-Regular.ttf",
    "Ubuntu-R.ttf",
    "Arial.ttf",
    "arial.ttf",
    "Helvetica.ttc",
]

SYSTEM_BOLD_FONTS = [
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "NotoSans-Bold.ttf",
    "Ubuntu-B.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "Helvetica.ttc",
]

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


def get_fonts_directories():
    """
    Get the directories searched for font files by family name.

    The local ``fonts`` directory next to this module comes first, followed
    by the directory named in the CARD_FONTS_DIR environment variable.
    """
    directories = [os.path.join(os.path.dirname(os.path.abspath(__file__)), "fonts")]
    env_dir = os.getenv("CARD_FONTS_DIR")
    if env_dir:
        directories.append(env_dir)
    return directories


def _candidate_filenames(family, bold):
    base = family.replace(" ", "")
    stems = [f"{base}-Bold", f"{base}Bold"] if bold else [f"{base}-Regular", base]
    return [stem + ext for stem in stems for ext in FONT_EXTENSIONS]


def find_local_font(family, bold=False):
    """
    Find a font file for a family in the local fonts directories.

    :param family: Font family name, e.g. 'Poppins'
    :param bold: Look for the bold variant
    :return: Path to font file or None if not found
    """
    for fonts_dir in get_fonts_directories():
        if not os.path.isdir(fonts_dir):
            continue
        for filename in _candidate_filenames(family, bold):
            font_path = os.path.join(fonts_dir, filename)
            if os.path.exists(font_path):
                return font_path
    return None


@lru_cache(maxsize=2)
def find_system_font(bold=False):
    """
    Try to find a general purpose sans-serif font in system fonts.

    :param bold: Look for a bold font
    :return: Path to font file or None if not found
    """
    system = platform.system().lower()
    search_paths = SYSTEM_FONT_PATHS.get(system)
    if search_paths is None:
        _LOGGER.warning("Unknown platform: %s", system)
        return None

    font_list = SYSTEM_BOLD_FONTS if bold else SYSTEM_REGULAR_FONTS
    search_paths = [os.path.expanduser(p) for p in search_paths]

    for search_path in search_paths:
        if not os.path.exists(search_path):
            continue

        for font_name in font_list:
            font_path = os.path.join(search_path, font_name)
            if os.path.exists(font_path):
                return font_path

            # Check subdirectories (for Linux)
            for root, dirs, files in os.walk(search_path):
                if font_name in files:
                    return os.path.join(root, font_name)

    _LOGGER.warning("No system %s font found", "bold" if bold else "regular")
    return None


@lru_cache(maxsize=64)
def _truetype(font_path, size):
    return ImageFont.truetype(font_path, size)


def load_font_file(font_path, size):
    """
    Load a font file directly, without registering it.

    :param font_path: Path to a TTF/OTF font file
    :param size: Font size in pixels
    :return: Pillow font object
    :raises FontLoadError: if the file is missing or not a usable font
    """
    if not font_path or not os.path.exists(font_path):
        raise FontLoadError(font_path, f"Font file not found: {font_path}")
    try:
        return _truetype(font_path, size)
    except OSError as e:
        raise FontLoadError(font_path, f"Could not load font {font_path}: {e}") from e


class FontRegistry:
    """Maps font family names to font files, per weight."""

    def __init__(self):
        self._fonts = {}
        self._lock = threading.Lock()

    def register(self, font_path, family, bold=False):
        """
        Register a font file under a family name.

        :param font_path: Path to a TTF/OTF font file
        :param family: Family name used by cards
        :param bold: Register as the bold variant of the family
        :raises FontLoadError: if the file is missing or not a usable font
        """
        load_font_file(font_path, 12)

        with self._lock:
            self._fonts[(family, bold)] = font_path
        _LOGGER.info("Registered font '%s'%s from: %s", family, " (bold)" if bold else "", font_path)

    def lookup(self, family, bold=False):
        with self._lock:
            return self._fonts.get((family, bold))

    def resolve_path(self, family, bold=False):
        """
        Find the font file to use for a family.

        Strategies, in order: registered fonts (bold falls back to the
        regular registration), local fonts directories, system fonts.

        :return: Path to font file or None to use Pillow's default font
        """
        font_path = self.lookup(family, bold)
        if not font_path and bold:
            font_path = self.lookup(family, False)
        if not font_path:
            font_path = find_local_font(family, bold)
        if not font_path:
            font_path = find_system_font(bold)
        return font_path

    def load(self, family, size, bold=False):
        """
        Get a Pillow font for a family and pixel size.

        :param family: Font family name
        :param size: Font size in pixels
        :param bold: Use the bold variant when available
        :return: Pillow font object
        """
        font_path = self.resolve_path(family, bold)
        if font_path:
            try:
                return _truetype(font_path, size)
            except OSError as e:
                _LOGGER.warning("Failed to load font %s: %s", font_path, e)

        _LOGGER.warning("No font file found for '%s', using Pillow's default font", family)
        return ImageFont.load_default(size=size)


_DEFAULT_REGISTRY = FontRegistry()


def register_font(font_path, family, bold=False):
    """Register a font file in the default registry."""
    _DEFAULT_REGISTRY.register(font_path, family, bold)


def load_font(family, size, bold=False):
    """Load a font from the default registry."""
    return _DEFAULT_REGISTRY.load(family, size, bold)


def download_font(font_name, fonts_dir=None, bold=False):
    """
    Download a font from Google Fonts into the local fonts directory.

    :param font_name: Name of the font to download (from GOOGLE_FONTS)
    :param fonts_dir: Directory to save fonts (default: ./fonts)
    :param bold: Download the bold variant
    :return: Path to downloaded font file or None if failed
    """
    if font_name not in GOOGLE_FONTS:
        _LOGGER.error("Unknown font: %s. Available fonts: %s", font_name, list(GOOGLE_FONTS.keys()))
        return None

    if fonts_dir is None:
        fonts_dir = get_fonts_directories()[0]
    os.makedirs(fonts_dir, exist_ok=True)

    font_info = GOOGLE_FONTS[font_name]
    url = font_info["bold" if bold else "regular"]
    font_path = os.path.join(fonts_dir, os.path.basename(url))

    # Check if already downloaded
    if os.path.exists(font_path):
        _LOGGER.info("Font already exists: %s", font_path)
        return font_path

    try:
        _LOGGER.info("Downloading %s font from Google Fonts...", font_name)
        _LOGGER.info("  URL: %s", url)
        _LOGGER.info("  Description: %s", font_info["description"])

        response = requests.get(url, stream=True, timeout=FETCH_TIMEOUT)
        response.raise_for_status()
        with open(font_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)

        _LOGGER.info("✓ Successfully downloaded: %s", font_path)
        return font_path

    except (requests.RequestException, OSError) as e:
        _LOGGER.error("Failed to download font %s: %s", font_name, e)
        if os.path.exists(font_path):
            os.remove(font_path)
        return None
