"""Tests for text normalization and greedy wrapping."""
from reportlab.pdfbase.pdfmetrics import stringWidth

from noteflow.config import CONTENT_WIDTH
from noteflow.document_builder.text_layout import (
    line_height,
    normalize_text,
    split_long_word,
    strip_unprintable,
    take_line,
    word_stream,
    wrap,
    wrap_paragraphs,
)


def mono(text, font, size):
    return len(text) * 10


def test_normalize_replaces_non_ascii_and_unifies_newlines():
    assert normalize_text("Café\r\nau lait") == "Caf \nau lait"
    assert normalize_text("tab\there") == "tab here"
    assert normalize_text(None) == ""


def test_strip_unprintable_removes_arrow():
    assert strip_unprintable("Step 1 → Step 2") == "Step 1  Step 2"


def test_line_height():
    assert line_height(12) == 12 * 1.2


def test_wrap_paragraphs_keeps_blank_paragraphs():
    assert wrap_paragraphs("aa bb cc\n\ndd", "Helvetica", 12, 50, mono) == [["aa bb", "cc"], [], ["dd"]]


def test_take_line_stops_at_forced_break():
    words = ["a", "b", None, "c"]
    assert take_line(words, 0, "Helvetica", 12, 100, mono) == ("a b", 3)
    assert take_line(words, 3, "Helvetica", 12, 100, mono) == ("c", 4)


def test_split_long_word_into_fitting_chunks():
    assert split_long_word("abcdefghij", "Helvetica", 12, 30, mono) == ["abc", "def", "ghi", "j"]


def test_word_stream_marks_paragraph_breaks():
    stream = word_stream("one two\nthree")
    assert stream == ["one", "two", None, "three"]


def test_word_stream_keeps_long_words_whole():
    assert word_stream("x" * 30) == ["x" * 30]


def test_long_word_remainder_rewraps_at_the_next_width():
    words = word_stream("y " + "x" * 25)
    assert take_line(words, 0, "Helvetica", 12, 100, mono) == ("y", 1)
    assert take_line(words, 1, "Helvetica", 12, 100, mono) == ("x" * 10, 1)
    assert words[1] == "x" * 15
    # A wider line takes the rest of the word in one piece
    assert take_line(words, 1, "Helvetica", 12, 300, mono) == ("x" * 15, 2)


def test_overlong_word_is_split_not_overflowing():
    lines = wrap("x" * 30, "Helvetica", 12, 100, mono)
    assert lines == ["x" * 10, "x" * 10, "x" * 10]


def test_real_metrics_never_exceed_content_width():
    text = " ".join(["backpropagation", "gradient", "descent", "a", "of"] * 60)
    lines = wrap(text, "Helvetica", 12, CONTENT_WIDTH, stringWidth)
    assert len(lines) > 1
    for line in lines:
        assert stringWidth(line, "Helvetica", 12) <= CONTENT_WIDTH
    assert " ".join(lines).split() == text.split()
