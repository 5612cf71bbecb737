"""Font Manager Module

Provides the built-in Helvetica family, width measurement, and the glyph
check that decides whether a text run can be drawn at all.
"""
import logging
from typing import Callable, Optional

from reportlab.pdfbase import pdfmetrics

from ..config import FALLBACK_CHAR_WIDTH_RATIO, FONT_BOLD, FONT_ITALIC, FONT_REGULAR
from ..exceptions import GlyphEncodingError

logger = logging.getLogger(__name__)

# Standard Type 1 fonts are written with WinAnsiEncoding
STANDARD_FONT_ENCODING = "cp1252"

WidthFunction = Callable[[str, str, float], float]


class FontManager:
    """Manages the built-in font family used for every text run.

    No TrueType fonts are registered; all text is drawn with the standard
    Helvetica family, so only WinAnsi glyphs can be rendered.

    Attributes:
        font_name: Regular font name
        font_name_bold: Bold font name
        font_name_italic: Italic (oblique) font name
    """

    def __init__(
        self,
        width_function: Optional[WidthFunction] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the font manager.

        Args:
            width_function: Metric function (text, font, size) -> width in points.
                Defaults to reportlab's pdfmetrics.stringWidth.
            logger: Logger for measurement fallbacks
        """
        self.font_name = FONT_REGULAR
        self.font_name_bold = FONT_BOLD
        self.font_name_italic = FONT_ITALIC
        self._width_function = width_function or pdfmetrics.stringWidth
        self._logger = logger or globals()["logger"]

    def get_font_name(self, bold: bool = False, italic: bool = False) -> str:
        """
        Get a font name from the family.

        Args:
            bold: Return the bold variant
            italic: Return the oblique variant (ignored when bold is set)

        Returns:
            Font name string suitable for use with ReportLab
        """
        if bold:
            return self.font_name_bold
        if italic:
            return self.font_name_italic
        return self.font_name

    def measure(self, text: str, font: str, size: float) -> float:
        """
        Measure the rendered width of text.

        Falls back to a constant-width estimate (size * 0.6 per character)
        when the metric function raises, so wrapping never aborts.
        """
        try:
            return self._width_function(text, font, size)
        except Exception as e:
            self._logger.warning(
                "Width measurement failed for font %s, using estimate: %s", font, e
            )
            return len(text) * size * FALLBACK_CHAR_WIDTH_RATIO

    def check_glyphs(self, text: str, font: str) -> None:
        """
        Verify every character of text can be drawn with a standard font.

        Raises:
            GlyphEncodingError: On a control character or a character outside WinAnsi
        """
        for char in text:
            if ord(char) < 0x20 or ord(char) == 0x7F:
                raise GlyphEncodingError(text, font, f"control character {char!r}")
        try:
            text.encode(STANDARD_FONT_ENCODING)
        except UnicodeEncodeError as e:
            raise GlyphEncodingError(text, font, str(e)) from e
