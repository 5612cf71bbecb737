"""Tests for the page/cursor state object."""
from noteflow.document_builder import PageCanvas, TextRun


def _mark(canvas):
    canvas.add(TextRun("x", "Helvetica", 12, (0, 0, 0), canvas.margin, canvas.y))


def test_cursor_starts_at_top_margin():
    canvas = PageCanvas()
    assert canvas.y == 742
    assert canvas.content_width == 512
    assert len(canvas.pages) == 1


def test_ensure_space_breaks_only_when_needed():
    canvas = PageCanvas()
    _mark(canvas)
    assert canvas.ensure_space(100) is False

    canvas.y = 60
    assert canvas.ensure_space(20) is True
    assert len(canvas.pages) == 2
    assert canvas.y == 742


def test_ensure_space_reuses_empty_page():
    canvas = PageCanvas()
    canvas.y = 60
    assert canvas.ensure_space(100) is False
    assert len(canvas.pages) == 1
    assert canvas.y == 742


def test_move_below_margin_starts_new_page():
    canvas = PageCanvas()
    _mark(canvas)
    canvas.move_to(10)
    assert canvas.page_index == 1
    assert canvas.y == canvas.top

    canvas.advance(100)
    assert canvas.y == 642


def test_finished_pages_drop_trailing_blank_pages():
    canvas = PageCanvas()
    _mark(canvas)
    canvas.new_page()
    canvas.new_page()
    assert len(canvas.pages) == 3
    assert len(canvas.finished_pages()) == 1

    blank = PageCanvas()
    assert len(blank.finished_pages()) == 1
