import pytest

from sigilgen.core.appearance import Appearance, hex_to_rgb255, normalize_hex, rgb255_to_hex


@pytest.mark.parametrize(
    ("text", "expected"),
    [("#ff0000", "#FF0000"), ("00ff00", "#00FF00"), ("#abc", "#AABBCC"), (" #123456 ", "#123456")],
)
def test_normalize_hex(text: str, expected: str) -> None:
    assert normalize_hex(text) == expected


@pytest.mark.parametrize("text", ["", "#12345", "#gggggg", "red"])
def test_normalize_hex_rejects_malformed(text: str) -> None:
    with pytest.raises(ValueError, match="color"):
        normalize_hex(text)


def test_rgb_conversions() -> None:
    assert hex_to_rgb255("#102030") == (16, 32, 48)
    assert rgb255_to_hex((16, 32, 48)) == "#102030"
    assert rgb255_to_hex((-5, 300, 0)) == "#00FF00"


def test_appearance_normalizes_and_updates() -> None:
    a = Appearance(background="#fff", sigil="00f")
    assert a.background == "#FFFFFF"
    assert a.sigil == "#0000FF"
    b = a.with_colors(sigil="#f00")
    assert b.background == "#FFFFFF"
    assert b.sigil == "#FF0000"
    with pytest.raises(ValueError):
        Appearance(background="nope")
