import generate_card
from card_formats import TWEET_DEFAULTS
from card_spec import BannerCardSpec, TweetCardSpec
from generate_card import build_parser, build_spec, main


def test_build_welcome_spec():
    args = build_parser().parse_args(
        [
            "welcome",
            "--avatar", "avatar.png",
            "--title", "Hi there",
            "--description", "Glad to have you 🎉",
            "--border", "#f00",
            "--overlay-opacity", "0.4",
        ]
    )

    spec = build_spec(args)

    assert isinstance(spec, BannerCardSpec)
    assert spec.card_type == "welcome"
    assert spec.avatar == "avatar.png"
    assert spec.title == "Hi there"
    assert spec.description == "Glad to have you 🎉"
    assert spec.border == "#f00"
    assert spec.overlay_opacity == 0.4


def test_build_leave_spec_with_background_image():
    args = build_parser().parse_args(["leave", "--background-image", "bg.png"])

    spec = build_spec(args)

    assert spec.card_type == "leave"
    assert spec.title == "Goodbye"
    assert spec.background_type == "image"
    assert spec.background == "bg.png"


def test_build_tweet_spec():
    args = build_parser().parse_args(
        ["tweet", "--comment", "Hello world", "--display-name", "Jane", "--username", "jane", "--theme", "dark", "--verified"]
    )

    spec = build_spec(args)

    assert isinstance(spec, TweetCardSpec)
    assert spec.comment == "Hello world"
    assert spec.theme == "dark"
    assert spec.verified is True


def test_main_writes_png(tmp_path, monkeypatch):
    rendered = []

    def fake_render(spec):
        rendered.append(spec)
        return b"\x89PNG fake"

    monkeypatch.setattr(generate_card, "render_card", fake_render)
    output = tmp_path / "card.png"

    assert main(["tweet", "--comment", "Hi", "--output", str(output)]) == 0
    assert output.read_bytes() == b"\x89PNG fake"
    assert rendered[0].comment == "Hi"


def test_main_reports_invalid_configuration(tmp_path):
    output = tmp_path / "card.png"

    assert main(["welcome", "--border", "red", "--output", str(output)]) == 1
    assert not output.exists()


def test_main_without_card_type():
    assert main([]) == 2


def test_main_download_font(monkeypatch):
    calls = []

    def fake_download(font_name, bold=False):
        calls.append((font_name, bold))
        return f"/fonts/{font_name}-{bold}.ttf"

    monkeypatch.setattr(generate_card, "download_font", fake_download)

    assert main(["--download-font", "Lato"]) == 0
    assert calls == [("Lato", False), ("Lato", True)]


def test_tweet_without_comment_keeps_default_text():
    spec = build_spec(build_parser().parse_args(["tweet"]))

    assert spec.comment == TWEET_DEFAULTS["comment"]
