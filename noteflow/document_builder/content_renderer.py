"""Content Renderer Module

Primitive drawing operations on the current page of a PageCanvas:
text lines with a sanitized retry, and raster images decoded as PNG or
JPEG with a "not placed" result instead of an exception.
"""
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Optional

from PIL import Image

from ..config import TEXT_COLOR
from .font_manager import FontManager
from .page_canvas import Color, ImagePlacement, PageCanvas, TextRun
from .text_layout import strip_unprintable
from ..exceptions import GlyphEncodingError, ImageDecodeError

logger = logging.getLogger(__name__)

DECODE_ORDER = ("PNG", "JPEG")


@dataclass(frozen=True)
class EmbeddedImage:
    """A decoded raster image ready to be drawn.

    Attributes:
        image: Loaded PIL image
        width: Natural width in pixels
        height: Natural height in pixels
        format: "PNG" or "JPEG"
    """

    image: Any
    width: int
    height: int
    format: str


class ContentRenderer:
    """Draws text runs and images onto a PageCanvas.

    Side effects are limited to appending commands to the current page.
    Cursor movement is left to the caller.
    """

    def __init__(
        self,
        canvas: PageCanvas,
        font_manager: Optional[FontManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize content renderer.

        Args:
            canvas: Page canvas receiving the draw commands
            font_manager: Font family and glyph check
            logger: Logger for degradations
        """
        self.canvas = canvas
        self.fonts = font_manager or FontManager()
        self._logger = logger or globals()["logger"]

    def _place_text(self, text: str, font: str, size: float, color: Color, x: float, y: float) -> TextRun:
        self.fonts.check_glyphs(text, font)
        run = TextRun(text=text, font=font, size=size, color=color, x=x, y=y)
        self.canvas.add(run)
        return run

    def draw_line(
        self,
        text: str,
        font: str,
        size: float,
        color: Color = TEXT_COLOR,
        x: float = 0,
        y: float = 0,
    ) -> TextRun:
        """
        Draw one line of text, retrying once with sanitized text.

        The first attempt draws text as given. If the font cannot encode it,
        every character outside printable ASCII is stripped and the line is
        drawn again.

        Returns:
            The TextRun that was recorded

        Raises:
            GlyphEncodingError: If the sanitized retry fails as well
        """
        try:
            return self._place_text(text, font, size, color, x, y)
        except GlyphEncodingError as e:
            self._logger.warning("Retrying line with sanitized text: %s", e)
        return self._place_text(strip_unprintable(text), font, size, color, x, y)

    def draw_line_or_drop(
        self,
        text: str,
        font: str,
        size: float,
        color: Color = TEXT_COLOR,
        x: float = 0,
        y: float = 0,
    ) -> Optional[TextRun]:
        """Like draw_line, but a line that fails twice is dropped and logged."""
        try:
            return self.draw_line(text, font, size, color, x, y)
        except GlyphEncodingError as e:
            self._logger.warning("Dropping undrawable line: %s", e)
            return None

    def decode_image(self, data: Optional[bytes]) -> EmbeddedImage:
        """
        Decode image bytes, trying PNG first and then JPEG.

        Raises:
            ImageDecodeError: If the bytes are empty or neither format
        """
        if not data:
            raise ImageDecodeError("empty image buffer")

        for image_format in DECODE_ORDER:
            try:
                image = Image.open(BytesIO(data), formats=[image_format])
                image.load()
            except Exception as e:
                self._logger.debug("Not a %s image: %s", image_format, e)
                continue
            width, height = image.size
            if width <= 0 or height <= 0:
                continue
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if image.mode in ("P", "LA", "PA") else "RGB")
            return EmbeddedImage(image=image, width=width, height=height, format=image_format)

        raise ImageDecodeError(f"image buffer ({len(data)} bytes) is neither PNG nor JPEG")

    def embed_image(self, data: Optional[bytes]) -> Optional[EmbeddedImage]:
        """Like decode_image, but returns None ("not placed") instead of raising."""
        try:
            return self.decode_image(data)
        except ImageDecodeError as e:
            self._logger.warning("Skipping image: %s", e)
            return None

    def draw_image(self, image: EmbeddedImage, x: float, y: float, width: float, height: float) -> ImagePlacement:
        """Place a decoded image with its lower-left corner at (x, y)."""
        placement = ImagePlacement(image=image, x=x, y=y, width=width, height=height)
        self.canvas.add(placement)
        return placement

    def draw_image_bytes(
        self,
        data: Optional[bytes],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> Optional[ImagePlacement]:
        """
        Decode and place image bytes in one step.

        Returns:
            The placement, or None ("not placed") if the bytes cannot be decoded
        """
        image = self.embed_image(data)
        if image is None:
            return None
        return self.draw_image(image, x, y, width, height)
