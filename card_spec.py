"""
Card configuration.

Cards are configured with chainable builders that validate every value as it
is set. ``finalize()`` returns a frozen snapshot that the renderer works
from, so changing a builder never affects a render that already started.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import card_formats
from card_errors import CardConfigError
from text_rendering import is_hex_color

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontSpec:
    family: str
    path: Optional[str] = None


@dataclass(frozen=True)
class BannerCardSpec:
    """Snapshot of a welcome or leave banner configuration."""

    card_type: str
    font: FontSpec
    avatar: Any
    background_type: str
    background: Any
    title: str
    title_color: str
    title_size: int
    description: str
    description_color: str
    description_size: int
    overlay_opacity: float
    border: Optional[str]
    avatar_border: str


@dataclass(frozen=True)
class TweetCardSpec:
    """Snapshot of a tweet card configuration."""

    font: FontSpec
    avatar: Any
    comment: str
    display_name: str
    username: str
    theme: str
    verified: bool
    assets_dir: Optional[str]

    card_type = "tweet"


def _require_color(field, value):
    if not value:
        raise CardConfigError(f"You must give a hexadecimal color for {field}.", field=field)
    if not is_hex_color(value):
        raise CardConfigError(
            f"Invalid color {value!r} for {field}. You must give a hexadecimal color.", field=field
        )
    return value


def _require_text(field, text, max_length=None):
    if not text or not isinstance(text, str):
        raise CardConfigError(f"You must give a text for {field}.", field=field)
    if max_length is not None and len(text) > max_length:
        raise CardConfigError(
            f"The maximum size of the {field} is {max_length} characters.", field=field
        )
    return text


def _require_source(field, source):
    if source is None or (isinstance(source, (str, bytes)) and not source):
        raise CardConfigError(f"You must give an image for {field}.", field=field)
    return source


class BannerCardBuilder:
    """
    Builder for welcome and leave banners.

    Example::

        spec = (
            BannerCardBuilder("welcome")
            .set_avatar("https://example.com/avatar.png")
            .set_title("Welcome")
            .set_description("Glad to have you here 🎉")
            .finalize()
        )
    """

    def __init__(self, card_type="welcome", font_family=None, font_path=None):
        if card_type not in ("welcome", "leave"):
            raise CardConfigError(
                f"Card type must be 'welcome' or 'leave', got {card_type!r}.", field="card_type"
            )
        defaults = card_formats.LEAVE_DEFAULTS if card_type == "leave" else card_formats.WELCOME_DEFAULTS

        self.card_type = card_type
        self.font = FontSpec(font_family or defaults["font_family"], font_path)
        self.avatar = card_formats.DEFAULT_AVATAR
        self.background_type = "color"
        self.background = defaults["background_color"]
        self.title = defaults["title"]
        self.title_color = defaults["title_color"]
        self.title_size = defaults["title_size"]
        self.description = defaults["description"]
        self.description_color = defaults["description_color"]
        self.description_size = defaults["description_size"]
        self.overlay_opacity = 0.0
        self.border = None
        self.avatar_border = defaults["avatar_border"]

    def set_avatar(self, image):
        self.avatar = _require_source("avatar", image)
        return self

    def set_avatar_border(self, color):
        self.avatar_border = _require_color("avatar_border", color)
        return self

    def set_background(self, background_type, value):
        if background_type == "color":
            self.background = _require_color("background", value)
        elif background_type == "image":
            self.background = _require_source("background", value)
        else:
            raise CardConfigError(
                f"The background type must be one of {card_formats.BACKGROUND_TYPES}, got {background_type!r}.",
                field="background_type",
            )
        self.background_type = background_type
        return self

    def set_border(self, color):
        self.border = _require_color("border", color)
        return self

    def set_title(self, text, color="#fff"):
        self.title = _require_text("title", text, card_formats.MAX_TITLE_LENGTH)
        if color:
            self.title_color = _require_color("title_color", color)
        return self

    def set_description(self, text, color="#a7b9c5"):
        self.description = _require_text("description", text, card_formats.MAX_DESCRIPTION_LENGTH)
        if color:
            self.description_color = _require_color("description_color", color)
        return self

    def set_overlay_opacity(self, opacity=0):
        if opacity is None:
            return self
        if isinstance(opacity, bool) or not isinstance(opacity, (int, float)) or not 0 <= opacity <= 1:
            raise CardConfigError(
                "The overlay opacity must be between 0 and 1 (0 and 1 included).",
                field="overlay_opacity",
            )
        self.overlay_opacity = float(opacity)
        return self

    def finalize(self):
        """Validate and freeze the configuration."""
        spec = BannerCardSpec(
            card_type=self.card_type,
            font=self.font,
            avatar=_require_source("avatar", self.avatar),
            background_type=self.background_type,
            background=self.background,
            title=self.title,
            title_color=self.title_color,
            title_size=self.title_size,
            description=self.description,
            description_color=self.description_color,
            description_size=self.description_size,
            overlay_opacity=self.overlay_opacity,
            border=self.border,
            avatar_border=self.avatar_border,
        )
        _LOGGER.debug("Finalized %s card configuration", self.card_type)
        return spec


class TweetCardBuilder:
    """Builder for tweet cards."""

    def __init__(self, font_family=None, font_path=None):
        defaults = card_formats.TWEET_DEFAULTS
        self.font = FontSpec(font_family or defaults["font_family"], font_path)
        self.avatar = defaults["avatar"]
        self.comment = defaults["comment"]
        self.display_name = defaults["display_name"]
        self.username = defaults["username"]
        self.theme = defaults["theme"]
        self.verified = False
        self.assets_dir = None

    def set_avatar(self, image):
        self.avatar = _require_source("avatar", image)
        return self

    def set_user(self, display_name, username):
        self.display_name = _require_text("display_name", display_name)
        self.username = _require_text("username", username)
        return self

    def set_comment(self, text):
        if not isinstance(text, str):
            raise CardConfigError("The comment must be a string.", field="comment")
        self.comment = text
        return self

    def set_theme(self, theme):
        if theme not in card_formats.TWEET_THEMES:
            raise CardConfigError(
                f"Invalid theme {theme!r}, expected one of {sorted(card_formats.TWEET_THEMES)}.",
                field="theme",
            )
        self.theme = theme
        return self

    def set_verified(self, verified):
        if not isinstance(verified, bool):
            raise CardConfigError("Verified must be a boolean.", field="verified")
        self.verified = verified
        return self

    def set_assets_dir(self, assets_dir):
        """Directory holding the reply/retweet/like/share/other icons."""
        self.assets_dir = assets_dir
        return self

    def finalize(self):
        """Validate and freeze the configuration."""
        return TweetCardSpec(
            font=self.font,
            avatar=_require_source("avatar", self.avatar),
            comment=self.comment,
            display_name=self.display_name,
            username=self.username,
            theme=self.theme,
            verified=self.verified,
            assets_dir=self.assets_dir,
        )
