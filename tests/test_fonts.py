import pytest
from PIL import ImageFont

from epochimg import fonts


def test_embedded_payload_loads(face):
    assert isinstance(face, fonts.FontFace)
    assert face.name


def test_get_face_is_shared():
    assert fonts.get_face() is fonts.get_face()


def test_malformed_payload_fails():
    with pytest.raises(fonts.FontLoadError):
        fonts.load(b"definitely not a font")


def test_ascent_and_descent_span_the_scale(face):
    assert face.ascent(100) > 0
    assert face.descent(100) < 0
    assert face.ascent(100) - face.descent(100) == pytest.approx(100)
    assert face.ascent(50) == pytest.approx(face.ascent(100) / 2)


def test_font_is_sized_by_pixel_height(face):
    fnt = face.font(200)
    assert isinstance(fnt, ImageFont.FreeTypeFont)
    asc, desc = fnt.getmetrics()
    assert abs((asc + desc) - 200) <= 2


def test_font_instances_are_memoized(face):
    assert face.font(57.6) is face.font(57.6)


def test_face_is_monospace(face):
    fnt = face.font(64)
    widths = {fnt.getlength(c) for c in "0123456789"}
    assert len(widths) == 1


def test_load_accepts_explicit_payload(face):
    other = fonts.load(fonts.embedded_font_bytes())
    assert other is not face
    assert other.ascent(80) == pytest.approx(face.ascent(80))
