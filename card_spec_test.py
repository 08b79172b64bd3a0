import dataclasses

import pytest

import card_formats
from card_errors import CardConfigError
from card_spec import BannerCardBuilder, BannerCardSpec, TweetCardBuilder, TweetCardSpec


def test_banner_defaults():
    spec = BannerCardBuilder("welcome").finalize()

    assert isinstance(spec, BannerCardSpec)
    assert spec.card_type == "welcome"
    assert spec.title == "Welcome"
    assert spec.background_type == "color"
    assert spec.background == "#23272a"
    assert spec.font.family == "Poppins"
    assert spec.overlay_opacity == 0
    assert spec.border is None


def test_leave_defaults():
    spec = BannerCardBuilder("leave").finalize()

    assert spec.card_type == "leave"
    assert spec.title == "Goodbye"


def test_banner_builder_chains_settings():
    spec = (
        BannerCardBuilder("welcome", font_family="Lato")
        .set_avatar("avatar.png")
        .set_title("Hi 👋", "#ffffff")
        .set_description("Glad to have you here 🎉", "#ccc")
        .set_background("image", "background.png")
        .set_border("#f00")
        .set_avatar_border("#000")
        .set_overlay_opacity(0.5)
        .finalize()
    )

    assert spec.font.family == "Lato"
    assert spec.avatar == "avatar.png"
    assert spec.title == "Hi 👋"
    assert spec.description_color == "#ccc"
    assert spec.background_type == "image"
    assert spec.background == "background.png"
    assert spec.border == "#f00"
    assert spec.overlay_opacity == 0.5


def test_unknown_card_type_is_rejected():
    with pytest.raises(CardConfigError) as exc_info:
        BannerCardBuilder("party")
    assert exc_info.value.field == "card_type"


@pytest.mark.parametrize(
    "configure, field",
    [
        (lambda b: b.set_border("red"), "border"),
        (lambda b: b.set_avatar_border("#12"), "avatar_border"),
        (lambda b: b.set_title("x" * (card_formats.MAX_TITLE_LENGTH + 1)), "title"),
        (lambda b: b.set_title(""), "title"),
        (lambda b: b.set_title("ok", "white"), "title_color"),
        (lambda b: b.set_description("x" * (card_formats.MAX_DESCRIPTION_LENGTH + 1)), "description"),
        (lambda b: b.set_background("gradient", "#fff"), "background_type"),
        (lambda b: b.set_background("color", "blue"), "background"),
        (lambda b: b.set_background("image", ""), "background"),
        (lambda b: b.set_overlay_opacity(1.5), "overlay_opacity"),
        (lambda b: b.set_overlay_opacity(-0.1), "overlay_opacity"),
        (lambda b: b.set_overlay_opacity("0.5"), "overlay_opacity"),
        (lambda b: b.set_overlay_opacity(True), "overlay_opacity"),
        (lambda b: b.set_avatar(None), "avatar"),
    ],
)
def test_invalid_banner_values_name_the_field(configure, field):
    with pytest.raises(CardConfigError) as exc_info:
        configure(BannerCardBuilder("welcome"))
    assert exc_info.value.field == field


def test_config_errors_are_value_errors():
    with pytest.raises(ValueError):
        BannerCardBuilder().set_border("nope")


def test_title_length_counts_characters_not_bytes():
    title = "é" * card_formats.MAX_TITLE_LENGTH

    assert BannerCardBuilder().set_title(title).finalize().title == title


def test_overlay_opacity_bounds_are_inclusive():
    assert BannerCardBuilder().set_overlay_opacity(0).finalize().overlay_opacity == 0
    assert BannerCardBuilder().set_overlay_opacity(1).finalize().overlay_opacity == 1


def test_finalized_spec_is_a_snapshot():
    builder = BannerCardBuilder().set_title("First")
    spec = builder.finalize()

    builder.set_title("Second")

    assert spec.title == "First"
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.title = "Changed"


def test_tweet_builder():
    spec = (
        TweetCardBuilder()
        .set_avatar("avatar.png")
        .set_user("Jane", "jane")
        .set_comment("Hello world")
        .set_theme("dim")
        .set_verified(True)
        .set_assets_dir("assets")
        .finalize()
    )

    assert isinstance(spec, TweetCardSpec)
    assert spec.card_type == "tweet"
    assert (spec.display_name, spec.username) == ("Jane", "jane")
    assert spec.theme == "dim"
    assert spec.verified is True
    assert spec.assets_dir == "assets"


def test_tweet_comment_may_be_empty():
    assert TweetCardBuilder().set_comment("").finalize().comment == ""


@pytest.mark.parametrize(
    "configure, field",
    [
        (lambda b: b.set_theme("neon"), "theme"),
        (lambda b: b.set_verified("yes"), "verified"),
        (lambda b: b.set_comment(None), "comment"),
        (lambda b: b.set_user("", "jane"), "display_name"),
        (lambda b: b.set_user("Jane", ""), "username"),
    ],
)
def test_invalid_tweet_values_name_the_field(configure, field):
    with pytest.raises(CardConfigError) as exc_info:
        configure(TweetCardBuilder())
    assert exc_info.value.field == field


def test_get_card_size():
    assert card_formats.get_card_size("welcome") == (700, 350)
    assert card_formats.get_card_size("leave") == (700, 350)
    assert card_formats.get_card_size("tweet") == (968, 343)
    with pytest.raises(ValueError):
        card_formats.get_card_size("postcard")
