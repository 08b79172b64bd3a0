"""
Image loading for card generation.

Avatars and backgrounds can be given as http(s) URLs, local file paths, raw
bytes or already opened Pillow images. Every failure is raised as an
ImageLoadError whose ``reason`` tells a bad source apart from a network
problem.
"""

import os
import logging
from io import BytesIO
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from PIL import Image

from card_errors import ImageLoadError
from card_formats import FETCH_TIMEOUT

_LOGGER = logging.getLogger(__name__)


def _describe(source):
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return repr(source)


def download_image_bytes(url, timeout=FETCH_TIMEOUT):
    """
    Download an image.

    :param url: http(s) URL
    :param timeout: Timeout in seconds
    :return: Response body as bytes
    :raises ImageLoadError: if the URL is invalid, unreachable or returns an error status
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as e:
        raise ImageLoadError(url, ImageLoadError.INVALID_SOURCE, f"Invalid image URL {url!r}: {e}") from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        reason = ImageLoadError.NOT_FOUND if status == 404 else ImageLoadError.HTTP_STATUS
        raise ImageLoadError(url, reason, f"Image request for {url!r} failed with HTTP status {status}") from e
    except requests.exceptions.RequestException as e:
        raise ImageLoadError(url, ImageLoadError.NETWORK, f"Could not download image {url!r}: {e}") from e

    _LOGGER.debug("Downloaded %d bytes from %s", len(response.content), url)
    return response.content


def read_image_file(path):
    """
    Read an image file from disk.

    :param path: File path
    :return: File content as bytes
    :raises ImageLoadError: if the file does not exist or cannot be read
    """
    if not os.path.isfile(path):
        raise ImageLoadError(path, ImageLoadError.NOT_FOUND, f"Image file not found: {path}")
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageLoadError(path, ImageLoadError.INVALID_SOURCE, f"Could not read image file {path}: {e}") from e


def decode_image(data, source=None):
    """
    Decode image bytes into an RGBA Pillow image.

    :param data: Encoded image (PNG, JPEG, GIF, WEBP, ...)
    :param source: Original source, used in error messages
    :return: RGBA image
    :raises ImageLoadError: if the data is not a supported image
    """
    try:
        image = Image.open(BytesIO(data))
        image.load()
        return image.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(
            source, ImageLoadError.DECODE, f"Could not decode image {_describe(source)}: {e}"
        ) from e


def load_image(source, timeout=FETCH_TIMEOUT):
    """
    Load an image from a URL, a file path, bytes or a Pillow image.

    :param source: Image source
    :param timeout: Download timeout in seconds for URLs
    :return: RGBA Pillow image
    :raises ImageLoadError: if the image cannot be loaded
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")

    if isinstance(source, (bytes, bytearray)):
        return decode_image(bytes(source), source)

    if not isinstance(source, (str, os.PathLike)) or not os.fspath(source):
        raise ImageLoadError(source, ImageLoadError.INVALID_SOURCE, f"Invalid image source: {_describe(source)}")

    location = os.fspath(source)
    parsed = urlparse(location)
    scheme = parsed.scheme.lower()

    if scheme in ("http", "https"):
        data = download_image_bytes(location, timeout)
    elif scheme == "file":
        data = read_image_file(url2pathname(parsed.path))
    elif scheme == "" or len(scheme) == 1:
        # Plain path, a single letter scheme is a Windows drive
        data = read_image_file(location)
    else:
        raise ImageLoadError(
            source, ImageLoadError.INVALID_SOURCE, f"Unsupported image URL scheme {scheme!r} in {location!r}"
        )

    return decode_image(data, location)
