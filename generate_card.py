"""
Command line interface for card generation.

Examples::

    python generate_card.py welcome --avatar avatar.png --description "Glad to have you here 🎉"
    python generate_card.py tweet --avatar avatar.png --comment "Hello world" --theme dark --verified
    python generate_card.py --download-font Poppins
"""

import argparse
import logging
import sys

from card_errors import CardError
from card_generator import render_card
from card_spec import BannerCardBuilder, TweetCardBuilder
from font_manager import GOOGLE_FONTS, download_font

_LOGGER = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(description="Generate welcome, leave and tweet cards as PNG")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--download-font",
        choices=sorted(GOOGLE_FONTS),
        help="Download a Google font (regular and bold) into the local fonts directory and exit",
    )

    subparsers = parser.add_subparsers(dest="card_type")

    for card_type in ("welcome", "leave"):
        banner = subparsers.add_parser(card_type, help=f"Generate a {card_type} banner")
        _add_common_arguments(banner, default_output=f"{card_type}.png")
        banner.add_argument("--title", help="Title text (max. 20 characters)")
        banner.add_argument("--title-color", default="#fff", help="Title color (default: #fff)")
        banner.add_argument("--description", help="Description text (max. 80 characters)")
        banner.add_argument(
            "--description-color", default="#a7b9c5", help="Description color (default: #a7b9c5)"
        )
        banner.add_argument("--background-color", help="Background color, e.g. #23272a")
        banner.add_argument("--background-image", help="Background image URL or path")
        banner.add_argument("--border", help="Border color")
        banner.add_argument("--avatar-border", help="Avatar ring color")
        banner.add_argument(
            "--overlay-opacity", type=float, default=0, help="Opacity of the dark overlay, 0 to 1 (default: 0)"
        )

    tweet = subparsers.add_parser("tweet", help="Generate a tweet card")
    _add_common_arguments(tweet, default_output="tweet.png")
    tweet.add_argument("--comment", help="Tweet text (default: sample text)")
    tweet.add_argument("--display-name", default="Card", help="Display name")
    tweet.add_argument("--username", default="card", help="Username without @")
    tweet.add_argument("--theme", choices=["light", "dark", "dim"], default="light", help="Color theme")
    tweet.add_argument("--verified", action="store_true", help="Draw the verified badge")
    tweet.add_argument("--assets-dir", help="Directory with reply/retweet/like/share/other icons")

    return parser


def _add_common_arguments(parser, default_output):
    parser.add_argument("--avatar", help="Avatar image URL or path")
    parser.add_argument("--font-family", help="Font family name")
    parser.add_argument("--font-path", help="TTF/OTF file used instead of the font family")
    parser.add_argument(
        "--output", "-o", default=default_output, help=f"Output PNG file (default: {default_output})"
    )


def build_spec(args):
    """
    Create a finalized card spec from parsed arguments.

    :raises CardConfigError: if an argument value is invalid
    """
    if args.card_type == "tweet":
        builder = TweetCardBuilder(args.font_family, args.font_path)
        if args.avatar:
            builder.set_avatar(args.avatar)
        if args.comment is not None:
            builder.set_comment(args.comment)
        return (
            builder.set_user(args.display_name, args.username)
            .set_theme(args.theme)
            .set_verified(args.verified)
            .set_assets_dir(args.assets_dir)
            .finalize()
        )

    builder = BannerCardBuilder(args.card_type, args.font_family, args.font_path)
    if args.avatar:
        builder.set_avatar(args.avatar)
    if args.title:
        builder.set_title(args.title, args.title_color)
    if args.description:
        builder.set_description(args.description, args.description_color)
    if args.background_image:
        builder.set_background("image", args.background_image)
    elif args.background_color:
        builder.set_background("color", args.background_color)
    if args.border:
        builder.set_border(args.border)
    if args.avatar_border:
        builder.set_avatar_border(args.avatar_border)
    builder.set_overlay_opacity(args.overlay_opacity)
    return builder.finalize()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.download_font:
        paths = [download_font(args.download_font, bold=bold) for bold in (False, True)]
        return 0 if all(paths) else 1

    if not args.card_type:
        parser.print_help()
        return 2

    try:
        spec = build_spec(args)
        png = render_card(spec)
    except CardError as e:
        _LOGGER.error("Could not generate %s card: %s", args.card_type, e)
        return 1

    with open(args.output, "wb") as f:
        f.write(png)
    _LOGGER.info("Saved %s card to %s", args.card_type, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
