"""
Text processing utilities for card generation.
Splits text into plain and emoji segments and converts color inputs.
"""

import re
import logging
from dataclasses import dataclass
from enum import Enum

import emoji
from PIL import ImageColor

_LOGGER = logging.getLogger(__name__)

VARIATION_SELECTOR_16 = "\ufe0f"

HEX_COLOR_RE = re.compile(r"^#([a-fA-F0-9]{6}|[a-fA-F0-9]{3})$")


class SegmentKind(Enum):
    PLAIN_TEXT = "plain_text"
    EMOJI = "emoji"


@dataclass(frozen=True)
class TextSegment:
    """A run of text that is either drawn with the font or replaced by an emoji image."""

    kind: SegmentKind
    content: str

    @property
    def is_emoji(self):
        return self.kind is SegmentKind.EMOJI


def segment_text(text):
    """
    Split text into an ordered list of plain text and emoji segments.

    Emoji are detected with the Unicode emoji data of the ``emoji`` package,
    which is the only classification rule used for drawing. ZWJ sequences,
    flags, keycaps and skin tone modifiers stay one segment, and a U+FE0F
    directly following an emoji is kept with it. Adjacent plain characters
    are merged so that joining all contents gives back the input.

    :param text: Text to split
    :return: List of TextSegment
    """
    segments = []
    plain_chars = []

    def flush_plain():
        if plain_chars:
            segments.append(TextSegment(SegmentKind.PLAIN_TEXT, "".join(plain_chars)))
            plain_chars.clear()

    for token in emoji.analyze(text or "", non_emoji=True, join_emoji=True):
        if isinstance(token.value, emoji.EmojiMatch):
            flush_plain()
            segments.append(TextSegment(SegmentKind.EMOJI, token.chars))
        elif (
            token.chars == VARIATION_SELECTOR_16
            and not plain_chars
            and segments
            and segments[-1].is_emoji
        ):
            # Emoji followed by an unmatched FE0F, keep the selector with the emoji
            last = segments.pop()
            segments.append(TextSegment(SegmentKind.EMOJI, last.content + token.chars))
        else:
            plain_chars.append(token.chars)

    flush_plain()
    return segments


def contains_emoji(text):
    """
    Check if text contains at least one emoji segment.

    :param text: Text to check
    :return: True if any emoji is found
    """
    return any(segment.is_emoji for segment in segment_text(text))


def join_segments(segments):
    """Concatenate segment contents back into a string."""
    return "".join(segment.content for segment in segments)


def is_hex_color(value):
    """
    Check for a ``#rgb`` or ``#rrggbb`` color string.

    :param value: Value to check
    :return: True if value is a valid hex color
    """
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def get_color_rgb(color_input, alpha=None):
    """
    Convert a hex color to a Pillow color tuple.

    :param color_input: Color string such as '#fff' or '#a7b9c5'
    :param alpha: Optional alpha channel value 0-255
    :return: (r, g, b) or (r, g, b, a) tuple with values between 0 and 255
    """
    if not is_hex_color(color_input):
        raise ValueError(f"Invalid hex color: {color_input!r}")

    rgb = ImageColor.getrgb(color_input)[:3]
    if alpha is None:
        return rgb
    return (*rgb, max(0, min(255, int(alpha))))
