"""Text Measurement and Wrapping

Pure functions for preparing text for the built-in font and breaking it
into lines:

- Non-ASCII normalization (the font only carries basic Latin glyphs)
- Sanitizing for the retry path of a failed draw
- Greedy word wrapping per paragraph, with overlong words split by characters
- Word streams with forced breaks for the two-column text flow

Measurement is passed in as a function (text, font, size) -> width so the
functions stay independent of reportlab and can be tested in isolation.
"""
import re
from typing import Callable, List, Optional, Tuple

from ..config import LINE_HEIGHT_RATIO

MeasureFunction = Callable[[str, str, float], float]

_NON_ASCII_RE = re.compile(r"[^\x00-\x7F]")
_CONTROL_RE = re.compile(r"[\x00-\x09\x0B-\x1F\x7F]")
_UNPRINTABLE_RE = re.compile(r"[^\x20-\x7E]")


def normalize_text(text: Optional[str]) -> str:
    """
    Prepare text for measurement and drawing with the built-in font.

    Every non-ASCII character becomes a single space; line endings are
    unified to "\\n" and other control characters become spaces.

    Examples:
        >>> normalize_text("Caf\\u00e9\\r\\nau lait")
        'Caf \\nau lait'
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _NON_ASCII_RE.sub(" ", text)
    return _CONTROL_RE.sub(" ", text)


def strip_unprintable(text: str) -> str:
    """Remove everything outside printable ASCII (0x20-0x7E)."""
    return _UNPRINTABLE_RE.sub("", text)


def line_height(size: float) -> float:
    return size * LINE_HEIGHT_RATIO


def split_paragraphs(text: str) -> List[str]:
    """Split on explicit paragraph breaks; blank paragraphs are kept as ''."""
    return [paragraph.strip() for paragraph in text.split("\n")]


def split_long_word(
    word: str,
    font: str,
    size: float,
    max_width: float,
    measure: MeasureFunction,
) -> List[str]:
    """
    Break a word wider than max_width into chunks that each fit.

    A single character wider than max_width still gets its own chunk.
    """
    chunks = []
    current = ""
    for char in word:
        candidate = current + char
        if current and measure(candidate, font, size) > max_width:
            chunks.append(current)
            current = char
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


def take_line(
    words: List[Optional[str]],
    start: int,
    font: str,
    size: float,
    max_width: float,
    measure: MeasureFunction,
) -> Tuple[str, int]:
    """
    Greedily take one line from a word stream.

    The stream may contain None entries marking forced line breaks. Words
    are accumulated while the measured width of the joined line stays
    within max_width. A forced break ends the line and is consumed. A word
    too wide to fit on a line of its own is split in place: the line gets
    the leading chunk and the remainder stays in the stream as one word,
    so the next line wraps it at whatever width that line has.

    Args:
        words: Word stream (None marks a forced break); modified in place
        start: Index of the first word of this line
        font: Font name passed to measure
        size: Font size passed to measure
        max_width: Maximum line width in points
        measure: Width function

    Returns:
        Tuple of (line_text, index_of_next_unconsumed_word)
    """
    line = ""
    index = start
    while index < len(words):
        word = words[index]
        if word is None:
            return line, index + 1
        candidate = f"{line} {word}" if line else word
        if measure(candidate, font, size) <= max_width:
            line = candidate
            index += 1
        elif line:
            break
        else:
            # Nothing placed yet and the word alone is too wide
            line = split_long_word(word, font, size, max_width, measure)[0]
            rest = word[len(line):]
            if rest:
                words[index] = rest
            else:
                index += 1
            break
    return line, index


def word_stream(text: str) -> List[Optional[str]]:
    """
    Tokenize normalized text into words with None at every line break.

    Words stay whole; take_line splits an overlong one against the width
    of the line it lands on.
    """
    stream: List[Optional[str]] = []
    paragraphs = split_paragraphs(text)
    for position, paragraph in enumerate(paragraphs):
        stream.extend(paragraph.split())
        if position < len(paragraphs) - 1:
            stream.append(None)
    return stream


def wrap_paragraph(
    paragraph: str,
    font: str,
    size: float,
    max_width: float,
    measure: MeasureFunction,
) -> List[str]:
    """Greedy word wrap of a single paragraph. Returns [] for a blank paragraph."""
    words = word_stream(paragraph.replace("\n", " "))
    lines = []
    index = 0
    while index < len(words):
        line, index = take_line(words, index, font, size, max_width, measure)
        if line:
            lines.append(line)
    return lines


def wrap_paragraphs(
    text: str,
    font: str,
    size: float,
    max_width: float,
    measure: MeasureFunction,
) -> List[List[str]]:
    """
    Normalize text and wrap each paragraph independently.

    Returns:
        One list of lines per paragraph; blank paragraphs give []

    Examples:
        >>> mono = lambda text, font, size: len(text) * 10
        >>> wrap_paragraphs("aa bb cc\\n\\ndd", "Helvetica", 12, 50, mono)
        [['aa bb', 'cc'], [], ['dd']]
    """
    return [
        wrap_paragraph(paragraph, font, size, max_width, measure)
        for paragraph in split_paragraphs(normalize_text(text))
    ]


def wrap(
    text: str,
    font: str,
    size: float,
    max_width: float,
    measure: MeasureFunction,
) -> List[str]:
    """Flattened wrap: every line of every paragraph, in order."""
    return [
        line
        for paragraph in wrap_paragraphs(text, font, size, max_width, measure)
        for line in paragraph
    ]
