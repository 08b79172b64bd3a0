"""
Text fitting utilities for card generation.
Handles measuring text that contains emoji, word wrapping and estimating the
height of wrapped text before the output image is created.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass

from PIL import Image, ImageDraw

from .text_processing import segment_text, join_segments

_LOGGER = logging.getLogger(__name__)

# Constants
MAX_TEXT_LENGTH = 2490
MAX_UNBROKEN_LENGTH = 57
ELLIPSIS = "..."
# Line advance as a multiple of the line height, used by estimate_height and by drawing
LINE_SPACING_FACTOR = 1.0

SegmentPlacement = namedtuple("SegmentPlacement", ["segment", "x", "width"])


@dataclass(frozen=True)
class TextLine:
    """One wrapped line: its segments and measured width in pixels."""

    segments: tuple
    width: float

    @property
    def text(self):
        return join_segments(self.segments)


def truncate_text(text, limit, marker=ELLIPSIS):
    """
    Cut text to at most ``limit`` characters and append a marker if it was cut.

    Plain text may be cut anywhere, an emoji crossing the limit is dropped
    as a whole.

    :param text: Text to truncate
    :param limit: Maximum number of characters kept
    :param marker: Appended when text was truncated
    :return: Truncated text
    """
    if len(text) <= limit:
        return text

    kept = []
    remaining = limit
    for segment in segment_text(text):
        if len(segment.content) <= remaining:
            kept.append(segment.content)
            remaining -= len(segment.content)
            continue
        if not segment.is_emoji:
            kept.append(segment.content[:remaining])
        break
    return "".join(kept) + marker


def line_advance(line_height):
    """Vertical distance between two baselines."""
    return line_height * LINE_SPACING_FACTOR


def pillow_text_measurer(font, draw=None):
    """
    Create a measuring function for a Pillow font.

    Without a draw object a 1x1 throwaway image is used, so text can be
    measured before the real output image exists.

    :param font: Pillow font used for drawing
    :param draw: Optional ImageDraw to measure with
    :return: Callable text -> width in pixels
    """
    if draw is None:
        draw = ImageDraw.Draw(Image.new("RGBA", (1, 1)))

    def measure_text(text):
        return draw.textlength(text, font=font)

    return measure_text


def _split_paragraphs(text):
    text = truncate_text(text or "", MAX_TEXT_LENGTH)
    return [paragraph.rstrip("\r") for paragraph in text.split("\n")]


class TextLayout:
    """
    Measures and wraps text for a single font.

    Plain text is measured with the given callable, each emoji counts as a
    square of ``font_size * emoji_scale`` pixels, whatever its image size.
    """

    def __init__(self, measure_text, font_size, emoji_scale=1.0):
        """
        :param measure_text: Callable text -> width in pixels for the active font
        :param font_size: Font size in pixels
        :param emoji_scale: Emoji size relative to the font size
        """
        self._measure_text = measure_text
        self.font_size = font_size
        self.emoji_scale = emoji_scale

    @property
    def emoji_width(self):
        return self.font_size * self.emoji_scale

    def segment_width(self, segment):
        if segment.is_emoji:
            return self.emoji_width
        return self._measure_text(segment.content)

    def measure(self, text):
        """
        Total width of text or of a sequence of segments.

        :param text: String or iterable of TextSegment
        :return: Width in pixels
        """
        segments = segment_text(text) if isinstance(text, str) else text
        return sum(self.segment_width(segment) for segment in segments)

    def position_segments(self, segments, x, align="left"):
        """
        Compute where each segment starts when a line is drawn at x.

        :param segments: Segments of one line
        :param x: Anchor x position
        :param align: 'left', 'center' or 'right' relative to x
        :return: List of SegmentPlacement
        """
        widths = [self.segment_width(segment) for segment in segments]
        total_width = sum(widths)

        if align == "left":
            cursor = x
        elif align == "center":
            cursor = x - total_width / 2
        elif align == "right":
            cursor = x - total_width
        else:
            raise ValueError(f"Unknown alignment: {align}")

        placements = []
        for segment, width in zip(segments, widths):
            placements.append(SegmentPlacement(segment, cursor, width))
            cursor += width
        return placements

    def make_line(self, text):
        segments = tuple(segment_text(text))
        return TextLine(segments, self.measure(segments))

    def wrap(self, text, max_width):
        """
        Wrap text to fit within max_width using actual measurements.

        Words are never split: a word wider than max_width gets a line of
        its own. A paragraph without any space is treated as a single word
        and shortened to MAX_UNBROKEN_LENGTH characters instead.

        :param text: Text to wrap, newlines start a new line
        :param max_width: Maximum line width in pixels
        :return: List of TextLine, at least one
        """
        lines = []
        for paragraph in _split_paragraphs(text):
            lines.extend(self._wrap_paragraph(paragraph, max_width))
        return lines

    def _wrap_paragraph(self, paragraph, max_width):
        if " " not in paragraph:
            return [self.make_line(truncate_text(paragraph, MAX_UNBROKEN_LENGTH))]

        words = [word for word in paragraph.split(" ") if word]
        if not words:
            return [self.make_line("")]

        lines = []
        current_line = words[0]
        for word in words[1:]:
            test_line = current_line + " " + word
            if self.measure(test_line) <= max_width:
                current_line = test_line
            else:
                lines.append(self.make_line(current_line))
                current_line = word

        lines.append(self.make_line(current_line))
        return lines

    def wrap_to_characters(self, text, max_chars, max_lines=None):
        """
        Wrap text at the last space before a character budget.

        :param text: Text to wrap
        :param max_chars: Maximum number of characters per line
        :param max_lines: If set, the last allowed line takes all remaining words
        :return: List of TextLine, at least one
        """
        words = [word for word in (text or "").split(" ") if word]
        if not words:
            return [self.make_line("")]

        lines = []
        current_line = words[0]
        for word in words[1:]:
            test_line = current_line + " " + word
            if len(test_line) <= max_chars:
                current_line = test_line
            else:
                lines.append(current_line)
                current_line = word
        lines.append(current_line)

        if max_lines and len(lines) > max_lines:
            lines = lines[: max_lines - 1] + [" ".join(lines[max_lines - 1:])]

        return [self.make_line(line) for line in lines]

    def estimate_height(self, text, max_width, line_height):
        """
        Height that wrapped text will take, computed without drawing.

        :param text: Text to wrap
        :param max_width: Maximum line width in pixels
        :param line_height: Height of one line in pixels
        :return: Height in pixels
        """
        line_count = len(self.wrap(text, max_width))
        height = line_height + (line_count - 1) * line_advance(line_height)
        _LOGGER.debug(
            "Estimated %d line(s), height=%.1fpx for max_width=%spx",
            line_count,
            height,
            max_width,
        )
        return height
