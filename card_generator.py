"""
Card generation.

Renders welcome/leave banners and tweet cards to PNG bytes. Every card runs
through the same sequence of steps:

    prepare fonts -> measure text -> create image -> background -> frame
    -> title -> body text -> avatar -> PNG

Text sizes are measured before the image is created, with the same fonts and
layouts that draw the text afterwards, so the image height always fits the
wrapped text.
"""

import os
import logging
from io import BytesIO

from PIL import Image, ImageChops, ImageDraw

import card_formats
from card_errors import CardRenderError, FontLoadError, ImageLoadError
from card_spec import BannerCardSpec, TweetCardSpec
from font_manager import load_font, load_font_file
from image_loader import load_image
from text_rendering import (
    EmojiResolver,
    EmojiStyle,
    TextLayout,
    get_color_rgb,
    line_advance,
    pillow_text_measurer,
    segment_text,
)

_LOGGER = logging.getLogger(__name__)

# Supersampling factor for antialiased clip masks
MASK_SCALE = 4


class Surface:
    """An RGBA image together with its ImageDraw."""

    def __init__(self, width, height, color=(0, 0, 0, 0)):
        self.image = Image.new("RGBA", (int(width), int(height)), color)
        self.draw = ImageDraw.Draw(self.image)

    @property
    def size(self):
        return self.image.size

    def draw_image(self, bitmap, x, y, width, height):
        """Paste a bitmap scaled to width x height, keeping its transparency."""
        resized = bitmap.convert("RGBA").resize((max(1, round(width)), max(1, round(height))), Image.LANCZOS)
        self.image.paste(resized, (round(x), round(y)), resized)

    def composite(self, layer, mask=None):
        """Blend a full-size layer on top, optionally limited to a clip mask."""
        if mask is not None:
            layer = layer.copy()
            layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
        self.image.alpha_composite(layer)


def rounded_rect_mask(size, box, radius):
    """Antialiased mask that is white inside a rounded rectangle."""
    width, height = size
    mask = Image.new("L", (width * MASK_SCALE, height * MASK_SCALE), 0)
    ImageDraw.Draw(mask).rounded_rectangle(
        [c * MASK_SCALE for c in box], radius=radius * MASK_SCALE, fill=255
    )
    return mask.resize(size, Image.LANCZOS)


def circle_mask(size, center, radius):
    """Antialiased mask that is white inside a circle."""
    cx, cy = center
    return rounded_rect_mask(size, (cx - radius, cy - radius, cx + radius, cy + radius), radius)


class CardRenderer:
    """
    Base renderer. Subclasses fill in the drawing steps for one card type.

    A renderer works from an immutable card spec and is used for one render.
    The emoji resolver, and with it the emoji cache, may be shared between
    renderers running in different threads.
    """

    emoji_style = EmojiStyle()

    def __init__(self, spec, emoji_resolver=None, image_loader=load_image, fetch_timeout=card_formats.FETCH_TIMEOUT):
        """
        :param spec: Finalized card spec
        :param emoji_resolver: EmojiResolver to use, a new one with its own cache if None
        :param image_loader: Callable (source, timeout) -> RGBA image, raising ImageLoadError
        :param fetch_timeout: Timeout in seconds for avatar and background downloads
        """
        self.spec = spec
        self.emoji_resolver = emoji_resolver or EmojiResolver(timeout=fetch_timeout)
        self.image_loader = image_loader
        self.fetch_timeout = fetch_timeout

    def render(self):
        """
        Draw the card.

        :return: PNG encoded image as bytes
        :raises CardRenderError: if the avatar, background image or font cannot be loaded
        """
        _LOGGER.info("Rendering %s card", self.spec.card_type)
        self.prepare_fonts()
        width, height = self.pre_measure()
        surface = self.allocate_surface(width, height)
        self.draw_background(surface)
        self.draw_frame(surface)
        self.draw_title(surface)
        self.draw_body(surface)
        self.draw_avatar(surface)
        image = self.finish(surface)
        return self.encode(image)

    # Steps

    def prepare_fonts(self):
        font_path = self.spec.font.path
        if font_path:
            self._load_font_file(font_path, 12)

    def get_font(self, size, bold=False):
        """
        Font for this card at a pixel size.

        A font file given with the card is used for every weight and is never
        registered.
        """
        if self.spec.font.path:
            return self._load_font_file(self.spec.font.path, size)
        return load_font(self.spec.font.family, size, bold)

    def _load_font_file(self, font_path, size):
        try:
            return load_font_file(font_path, size)
        except FontLoadError as e:
            raise CardRenderError(f"The font file {font_path!r} is not valid: {e}", field="font") from e

    def pre_measure(self):
        raise NotImplementedError

    def allocate_surface(self, width, height):
        _LOGGER.debug("Creating %dx%d image", width, height)
        return Surface(width, height)

    def draw_background(self, surface):
        pass

    def draw_frame(self, surface):
        pass

    def draw_title(self, surface):
        pass

    def draw_body(self, surface):
        pass

    def draw_avatar(self, surface):
        pass

    def finish(self, surface):
        return surface.image

    def encode(self, image):
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    # Helpers

    def make_layout(self, font, font_size):
        """TextLayout measuring with a throwaway image, usable before the card image exists."""
        return TextLayout(pillow_text_measurer(font), font_size, self.emoji_style.scale)

    def load_required_image(self, source, field):
        """
        Load an image the card cannot be drawn without.

        :raises CardRenderError: naming the field if loading fails
        """
        try:
            return self.image_loader(source, self.fetch_timeout)
        except ImageLoadError as e:
            if e.is_network_error:
                hint = "could not be downloaded, check the URL and your internet connection"
            else:
                hint = "is not a valid image or you are not connected to the internet"
            raise CardRenderError(f"The image given for the {field} {hint}: {e}", field=field) from e

    def draw_text(self, surface, text, xy, font, layout, fill, align="left"):
        """
        Draw one line of text, replacing emoji by their images.

        Each segment is drawn at the position computed by the layout. An emoji
        without an image is drawn as text at its reserved position.

        :param text: String or TextLine
        :param xy: Anchor position, y is the text baseline
        :return: Drawn width in pixels
        """
        x, y = xy
        segments = segment_text(text) if isinstance(text, str) else text.segments
        placements = layout.position_segments(segments, x, align)
        font_size = layout.font_size

        for placement in placements:
            segment = placement.segment
            if segment.is_emoji:
                glyph = self.emoji_resolver.resolve(segment.content)
                if glyph is not None:
                    side = self.emoji_style.size(font_size)
                    surface.draw_image(glyph, placement.x, self.emoji_style.top(y, font_size), side, side)
                    continue
                _LOGGER.debug("Drawing unresolved emoji %s as text", segment.content)
            if segment.content.strip():
                surface.draw.text((placement.x, y), segment.content, font=font, fill=fill, anchor="ls")

        return sum(placement.width for placement in placements)

    def draw_circular_avatar(self, surface, avatar, box, center, radius):
        """Draw the avatar scaled into box, clipped to a circle."""
        x, y, side = box
        layer = Surface(*surface.size)
        layer.draw_image(avatar, x, y, side, side)
        surface.composite(layer.image, circle_mask(surface.size, center, radius))


class BannerCardRenderer(CardRenderer):
    """Welcome and leave banners."""

    emoji_style = EmojiStyle(**card_formats.WELCOME_EMOJI_STYLE)
    layout_format = card_formats.WELCOME_FORMAT

    def prepare_fonts(self):
        super().prepare_fonts()
        spec = self.spec
        self.title_font = self.get_font(spec.title_size, bold=True)
        self.description_font = self.get_font(spec.description_size)

    def pre_measure(self):
        fmt = self.layout_format
        spec = self.spec
        self.title_layout = self.make_layout(self.title_font, spec.title_size)
        self.description_layout = self.make_layout(self.description_font, spec.description_size)
        self.description_lines = self.description_layout.wrap_to_characters(
            spec.description, fmt["description_line_chars"], fmt["description_max_lines"]
        )
        return card_formats.get_card_size(self.spec.card_type)

    def allocate_surface(self, width, height):
        surface = super().allocate_surface(width, height)
        # Everything except the outer border is drawn on a layer clipped to the card shape
        self.layer = Surface(width, height)
        return surface

    def draw_background(self, surface):
        fmt = self.layout_format
        spec = self.spec
        width, height = surface.size
        inset = fmt["background_inset"]
        box = (inset, inset, width - inset, height - inset)

        if spec.background_type == "image":
            background = self.load_required_image(spec.background, "background")
            self.layer.draw_image(background, inset, inset, box[2] - box[0], box[3] - box[1])
        else:
            self.layer.draw.rectangle(box, fill=get_color_rgb(spec.background))

        if spec.overlay_opacity > 0:
            overlay = Surface(width, height)
            inset = fmt["overlay_inset"]
            overlay.draw.rounded_rectangle(
                (inset, inset, width - inset, height - inset),
                radius=fmt["overlay_radius"],
                fill=(0, 0, 0, round(spec.overlay_opacity * 255)),
            )
            self.layer.composite(overlay.image)

    def draw_frame(self, surface):
        if not self.spec.border:
            return
        fmt = self.layout_format
        width, height = surface.size
        inset = fmt["border_inset"]
        surface.draw.rounded_rectangle(
            (inset, inset, width - inset, height - inset),
            radius=fmt["border_radius"],
            outline=get_color_rgb(self.spec.border),
            width=fmt["border_width"],
        )

    def draw_title(self, surface):
        fmt = self.layout_format
        self.draw_text(
            self.layer,
            self.spec.title,
            (fmt["width"] / 2, fmt["title_y"]),
            self.title_font,
            self.title_layout,
            get_color_rgb(self.spec.title_color),
            align="center",
        )

    def draw_body(self, surface):
        fmt = self.layout_format
        fill = get_color_rgb(self.spec.description_color)
        y = fmt["description_y"]
        for line in self.description_lines:
            self.draw_text(
                self.layer,
                line,
                (fmt["width"] / 2, y),
                self.description_font,
                self.description_layout,
                fill,
                align="center",
            )
            y += line_advance(fmt["description_line_height"])

    def draw_avatar(self, surface):
        fmt = self.layout_format
        cx, cy = fmt["avatar_center"]
        ring = fmt["avatar_ring_radius"] + fmt["avatar_ring_width"] / 2
        self.layer.draw.ellipse(
            (cx - ring, cy - ring, cx + ring, cy + ring),
            outline=get_color_rgb(self.spec.avatar_border),
            width=fmt["avatar_ring_width"],
        )

        avatar = self.load_required_image(self.spec.avatar, "avatar")
        radius = fmt["avatar_radius"]
        self.draw_circular_avatar(
            self.layer, avatar, (cx - radius, cy - radius, radius * 2), (cx, cy), radius
        )

    def finish(self, surface):
        fmt = self.layout_format
        width, height = surface.size
        inset = fmt["clip_inset"]
        clip = rounded_rect_mask(surface.size, (inset, inset, width - inset, height - inset), fmt["clip_radius"])
        surface.composite(self.layer.image, clip)
        return surface.image


class TweetCardRenderer(CardRenderer):
    """Tweet style cards, taller for longer comments."""

    emoji_style = EmojiStyle(**card_formats.TWEET_EMOJI_STYLE)
    layout_format = card_formats.TWEET_FORMAT

    def prepare_fonts(self):
        super().prepare_fonts()
        fmt = self.layout_format
        self.name_font = self.get_font(fmt["name_size"])
        self.comment_font = self.get_font(fmt["comment_size"])

    @property
    def theme(self):
        return card_formats.TWEET_THEMES[self.spec.theme]

    def pre_measure(self):
        fmt = self.layout_format
        self.name_layout = self.make_layout(self.name_font, fmt["name_size"])
        self.comment_layout = self.make_layout(self.comment_font, fmt["comment_size"])

        self.comment_lines = self.comment_layout.wrap(self.spec.comment, fmt["comment_max_width"])
        comment_height = self.comment_layout.estimate_height(
            self.spec.comment, fmt["comment_max_width"], fmt["comment_line_height"]
        )
        _LOGGER.info("Comment wraps to %d line(s), %.0fpx", len(self.comment_lines), comment_height)
        width, base_height = card_formats.get_card_size("tweet")
        return width, round(base_height + comment_height)

    def draw_background(self, surface):
        width, height = surface.size
        inset = self.layout_format["background_inset"]
        surface.draw.rectangle(
            (inset, inset, width - inset, height - inset),
            fill=get_color_rgb(self.theme["background"]),
        )

    def draw_frame(self, surface):
        fmt = self.layout_format
        height = surface.size[1]
        icon_y = height - fmt["icon_offset"]
        for icon_name, icon_x in zip(card_formats.TWEET_ICONS, fmt["icon_x"]):
            self._draw_icon(surface, icon_name, icon_x, icon_y, fmt["icon_size"])
        menu_x, menu_y = fmt["menu_icon_xy"]
        self._draw_icon(surface, card_formats.TWEET_MENU_ICON, menu_x, menu_y, fmt["menu_icon_size"])

        separator_y = height - fmt["separator_offset"]
        left, right = fmt["separator_x"]
        surface.draw.line(
            (left, separator_y, right, separator_y),
            fill=get_color_rgb(card_formats.TWEET_SEPARATOR_COLOR),
            width=1,
        )

    def _draw_icon(self, surface, icon_name, x, y, size):
        assets_dir = self.spec.assets_dir
        if not assets_dir:
            return
        try:
            icon = self.image_loader(os.path.join(assets_dir, icon_name), self.fetch_timeout)
        except ImageLoadError as e:
            _LOGGER.warning("Skipping tweet icon %s: %s", icon_name, e)
            return
        surface.draw_image(icon, x, y, size, size)

    def draw_title(self, surface):
        fmt = self.layout_format
        name_width = self.draw_text(
            surface,
            self.spec.display_name,
            fmt["display_name_xy"],
            self.name_font,
            self.name_layout,
            get_color_rgb(self.theme["display_name"]),
        )
        self.draw_text(
            surface,
            "@" + self.spec.username,
            fmt["username_xy"],
            self.name_font,
            self.name_layout,
            get_color_rgb(self.theme["username"]),
        )
        if self.spec.verified:
            x = fmt["display_name_xy"][0] + name_width + fmt["verified_gap"]
            self._draw_verified_badge(surface, x, fmt["verified_y"], fmt["verified_size"])

    def _draw_verified_badge(self, surface, x, y, size):
        surface.draw.ellipse((x, y, x + size, y + size), fill=get_color_rgb(card_formats.VERIFIED_BADGE_COLOR))
        check = [
            (x + size * 0.28, y + size * 0.52),
            (x + size * 0.44, y + size * 0.68),
            (x + size * 0.73, y + size * 0.36),
        ]
        surface.draw.line(check, fill=(255, 255, 255), width=max(2, round(size / 10)), joint="curve")

    def draw_body(self, surface):
        fmt = self.layout_format
        fill = get_color_rgb(self.theme["comment"])
        x, y = fmt["comment_x"], fmt["comment_y"]
        for line in self.comment_lines:
            self.draw_text(surface, line, (x, y), self.comment_font, self.comment_layout, fill)
            y += line_advance(fmt["comment_line_height"])

    def draw_avatar(self, surface):
        fmt = self.layout_format
        avatar = self.load_required_image(self.spec.avatar, "avatar")
        self.draw_circular_avatar(surface, avatar, fmt["avatar_box"], fmt["avatar_center"], fmt["avatar_radius"])


RENDERERS = {
    BannerCardSpec: BannerCardRenderer,
    TweetCardSpec: TweetCardRenderer,
}


def render_card(spec, emoji_resolver=None, image_loader=load_image, fetch_timeout=card_formats.FETCH_TIMEOUT):
    """
    Render a finalized card spec to PNG bytes.

    :param spec: BannerCardSpec or TweetCardSpec
    :param emoji_resolver: Optional shared EmojiResolver
    :param image_loader: Callable (source, timeout) -> RGBA image
    :param fetch_timeout: Timeout in seconds for downloads
    :return: PNG bytes
    """
    renderer_class = RENDERERS.get(type(spec))
    if renderer_class is None:
        raise TypeError(f"Unsupported card spec: {type(spec).__name__}")
    renderer = renderer_class(spec, emoji_resolver, image_loader, fetch_timeout)
    return renderer.render()
