"""
Text rendering utilities package.
Segmentation, emoji resolution and text layout for card generation.
"""

from .text_processing import (
    SegmentKind,
    TextSegment,
    segment_text,
    contains_emoji,
    join_segments,
    is_hex_color,
    get_color_rgb,
)
from .emoji_handler import (
    EmojiCache,
    EmojiResolver,
    EmojiStyle,
    GlyphResolution,
    ResolutionStatus,
    emoji_codepoint_key,
)
from .text_fitting import (
    MAX_TEXT_LENGTH,
    MAX_UNBROKEN_LENGTH,
    ELLIPSIS,
    LINE_SPACING_FACTOR,
    TextLayout,
    TextLine,
    SegmentPlacement,
    truncate_text,
    line_advance,
    pillow_text_measurer,
)

__all__ = [
    # Text processing
    'SegmentKind',
    'TextSegment',
    'segment_text',
    'contains_emoji',
    'join_segments',
    'is_hex_color',
    'get_color_rgb',
    # Emoji handling
    'EmojiCache',
    'EmojiResolver',
    'EmojiStyle',
    'GlyphResolution',
    'ResolutionStatus',
    'emoji_codepoint_key',
    # Text fitting
    'MAX_TEXT_LENGTH',
    'MAX_UNBROKEN_LENGTH',
    'ELLIPSIS',
    'LINE_SPACING_FACTOR',
    'TextLayout',
    'TextLine',
    'SegmentPlacement',
    'truncate_text',
    'line_advance',
    'pillow_text_measurer',
]
