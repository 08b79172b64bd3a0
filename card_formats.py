"""
Layout constants, themes and environment settings for the supported cards.

All positions are in pixels, y values of text are baselines.
"""

import os

# Timeout in seconds for avatar, background and emoji downloads
FETCH_TIMEOUT = float(os.getenv("CARD_FETCH_TIMEOUT", "10"))

# Emoji placement (square side = font size * scale, top = baseline - font size * baseline)
WELCOME_EMOJI_STYLE = {"scale": 0.9, "baseline": 0.75}
TWEET_EMOJI_STYLE = {"scale": 1.0, "baseline": 0.8}

DEFAULT_AVATAR = "https://cdn.discordapp.com/embed/avatars/0.png"

# Welcome / leave banner
WELCOME_FORMAT = {
    "width": 700,
    "height": 350,
    "border_inset": 15,
    "border_width": 8,
    "border_radius": 40,
    "clip_inset": 25,
    "clip_radius": 40,
    "background_inset": 10,
    "overlay_inset": 45,
    "overlay_radius": 30,
    "title_y": 225,
    "description_y": 260,
    "description_line_height": 35,
    "description_line_chars": 35,
    "description_max_lines": 2,
    "avatar_center": (350, 125),
    "avatar_radius": 60,
    "avatar_ring_radius": 66,
    "avatar_ring_width": 5,
}

WELCOME_DEFAULTS = {
    "font_family": "Poppins",
    "background_color": "#23272a",
    "title": "Welcome",
    "title_color": "#fff",
    "title_size": 28,
    "description": "Welcome to this server, go read the rules please!",
    "description_color": "#a7b9c5",
    "description_size": 26,
    "avatar_border": "#2a2e35",
}

LEAVE_DEFAULTS = dict(
    WELCOME_DEFAULTS,
    title="Goodbye",
    description="We hope to see you again soon!",
)

MAX_TITLE_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 80

# Tweet card
TWEET_FORMAT = {
    "width": 968,
    "base_height": 343,
    "background_inset": 10,
    "display_name_xy": (130, 70),
    "username_xy": (130, 100),
    "name_size": 25,
    "verified_gap": 10,
    "verified_y": 48,
    "verified_size": 30,
    "comment_x": 85,
    "comment_y": 170,
    "comment_size": 25,
    "comment_line_height": 40,
    "comment_max_width": 800,
    "separator_offset": 88,
    "separator_x": (50, 918),
    "icon_offset": 68,
    "icon_size": 45,
    "icon_x": (186.6, 384, 577.8, 771),
    "menu_icon_xy": (900, 40),
    "menu_icon_size": 35,
    "avatar_center": (80, 75),
    "avatar_radius": 40,
    "avatar_box": (35, 28, 90),
}

TWEET_ICONS = ("reply.png", "retweet.png", "like.png", "share.png")
TWEET_MENU_ICON = "other.png"

TWEET_DEFAULTS = {
    "font_family": "Chirp",
    "avatar": DEFAULT_AVATAR,
    "comment": "This is a tweet card. You can customize it as you wish. Enjoy!",
    "display_name": "Card",
    "username": "card",
    "theme": "light",
}

TWEET_THEMES = {
    "light": {
        "background": "#fff",
        "display_name": "#000",
        "username": "#000",
        "comment": "#000",
    },
    "dark": {
        "background": "#000",
        "display_name": "#fff",
        "username": "#8493a2",
        "comment": "#fff",
    },
    "dim": {
        "background": "#15202b",
        "display_name": "#fff",
        "username": "#8493a2",
        "comment": "#fff",
    },
}

TWEET_SEPARATOR_COLOR = "#8493a2"
VERIFIED_BADGE_COLOR = "#1d9bf0"

BACKGROUND_TYPES = ("color", "image")


def get_card_size(card_type):
    """Get the base (width, height) of a card type in pixels."""
    if card_type in ("welcome", "leave"):
        return (WELCOME_FORMAT["width"], WELCOME_FORMAT["height"])
    elif card_type == "tweet":
        return (TWEET_FORMAT["width"], TWEET_FORMAT["base_height"])
    else:
        raise ValueError(f"Unsupported card type: {card_type}")
