"""Tests for text and image primitives."""
from unittest import mock

import pytest
from PIL import Image

from noteflow.document_builder import ContentRenderer, FontManager, PageCanvas
from noteflow.exceptions import GlyphEncodingError, ImageDecodeError


@pytest.fixture
def renderer():
    return ContentRenderer(PageCanvas(), FontManager())


def test_non_ascii_line_is_retried_sanitized(renderer):
    run = renderer.draw_line("Step 1 → Step 2", "Helvetica", 12, x=50, y=700)

    assert run.text == "Step 1  Step 2"
    assert [r.text for r in renderer.canvas.current_page.text_runs] == ["Step 1  Step 2"]


def test_winansi_text_is_drawn_unchanged(renderer):
    run = renderer.draw_line("Café", "Helvetica", 12, x=50, y=700)
    assert run.text == "Café"


def test_second_failure_propagates_or_drops(renderer):
    with mock.patch.object(
        renderer.fonts, "check_glyphs", side_effect=GlyphEncodingError("x", "Helvetica")
    ):
        with pytest.raises(GlyphEncodingError):
            renderer.draw_line("x", "Helvetica", 12)
        assert renderer.draw_line_or_drop("x", "Helvetica", 12) is None

    assert renderer.canvas.current_page.is_empty


def test_embed_png_and_jpeg(renderer, png_bytes, jpeg_bytes):
    png = renderer.embed_image(png_bytes(20, 10))
    jpeg = renderer.embed_image(jpeg_bytes(30, 15))

    assert (png.format, png.width, png.height) == ("PNG", 20, 10)
    assert (jpeg.format, jpeg.width, jpeg.height) == ("JPEG", 30, 15)


def test_palette_image_is_converted(renderer):
    from io import BytesIO

    buffer = BytesIO()
    Image.new("P", (8, 8)).save(buffer, format="PNG")
    embedded = renderer.embed_image(buffer.getvalue())
    assert embedded.image.mode in ("RGB", "RGBA")


def test_undecodable_bytes_are_not_placed(renderer):
    assert renderer.embed_image(b"definitely not an image") is None
    assert renderer.embed_image(b"") is None
    assert renderer.draw_image_bytes(b"garbage", 50, 50, 100, 100) is None
    assert renderer.canvas.current_page.is_empty


def test_measure_falls_back_to_estimate():
    fonts = FontManager(width_function=mock.Mock(side_effect=KeyError("NoSuchFont")))
    assert fonts.measure("abcd", "NoSuchFont", 10) == pytest.approx(4 * 10 * 0.6)


def test_decode_image_raises_for_garbage(renderer):
    with pytest.raises(ImageDecodeError):
        renderer.decode_image(b"\x00\x01\x02")
