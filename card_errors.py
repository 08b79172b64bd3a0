"""
Error types for card generation.

Configuration errors are raised while a card is being configured, before any
drawing starts. Load errors come from the image and font collaborators and are
turned into a CardRenderError when the failing input is required for the card.
"""

from typing import Optional


class CardError(Exception):
    """Base class for all card generation errors."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class CardConfigError(CardError, ValueError):
    """Invalid configuration value. ``field`` names the offending setting."""


class CardRenderError(CardError):
    """A required input could not be loaded, the render was aborted."""


class ImageLoadError(CardError):
    """An image could not be fetched or decoded."""

    INVALID_SOURCE = "invalid_source"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"

    def __init__(self, source, reason: str, message: str) -> None:
        super().__init__(message)
        self.source = source
        self.reason = reason

    @property
    def is_network_error(self) -> bool:
        return self.reason in (self.NETWORK, self.HTTP_STATUS)


class FontLoadError(CardError):
    """A font file could not be registered or loaded."""

    def __init__(self, path, message: str) -> None:
        super().__init__(message)
        self.path = path
