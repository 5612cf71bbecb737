"""Document Builder Module

Orchestrates PDF rendering by coordinating specialized components:
- FontManager: Built-in font family, measurement and glyph checks
- PageCanvas: Append-only pages and the write cursor
- ContentRenderer: Text line and image primitives
- SectionLayoutEngine: Per-section layout policies
- visual_sizing: Footprint rules for diagrams and flowcharts

Pages are recorded as draw commands first and written to a reportlab canvas
only in finalize(), so layout can be inspected before any bytes exist.
"""
import logging
import textwrap
from io import BytesIO
from typing import Iterable, List, Optional

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdfcanvas

from ..config import (
    BODY_FONT_SIZE,
    DEFAULT_AUTHOR,
    DEFAULT_SUBJECT,
    DEFAULT_TITLE,
    FONT_REGULAR,
    MARGIN,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    TITLE_FONT_SIZE,
)
from ..exceptions import DocumentFinalizeError
from ..section import Section
from .content_renderer import ContentRenderer
from .font_manager import FontManager
from .layout_engine import SectionLayoutEngine, SectionReport
from .page_canvas import ImagePlacement, Page, PageCanvas, TextRun
from .text_layout import normalize_text, strip_unprintable

logger = logging.getLogger(__name__)


class DocumentBuilder:
    """Build a PDF document from an ordered list of sections.

    Attributes:
        title: Document title, drawn first and stored in the PDF metadata
        canvas: Page canvas holding all recorded pages
        reports: One SectionReport per rendered section, in order
    """

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        author: str = DEFAULT_AUTHOR,
        subject: str = DEFAULT_SUBJECT,
        font_manager: Optional[FontManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize document builder.

        Args:
            title: Document title
            author: PDF metadata author
            subject: PDF metadata subject
            font_manager: Optional font manager (e.g. with a custom width function)
            logger: Logger passed to every component
        """
        self.title = title or DEFAULT_TITLE
        self.author = author
        self.subject = subject
        self._logger = logger or globals()["logger"]

        # Initialize specialized components
        self.font_manager = font_manager or FontManager(logger=self._logger)
        self.canvas = PageCanvas(logger=self._logger)
        self.content_renderer = ContentRenderer(self.canvas, self.font_manager, logger=self._logger)
        self.engine = SectionLayoutEngine(self.canvas, self.content_renderer, logger=self._logger)
        self.reports: List[SectionReport] = []
        self._title_drawn = False

    def add_title(self) -> None:
        if not self._title_drawn:
            self.engine.render_title(self.title)
            self._title_drawn = True

    def add_section(self, section: Section) -> SectionReport:
        report = self.engine.render_section(section)
        self.reports.append(report)
        return report

    def add_sections(self, sections: Iterable[Section]) -> List[SectionReport]:
        """Draw the title (once) and every section in order."""
        self.add_title()
        return [self.add_section(section) for section in sections]

    @property
    def pages(self) -> List[Page]:
        return self.canvas.finished_pages()

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def visual_count(self) -> int:
        return sum(len(page.images) for page in self.pages)

    def finalize(self) -> bytes:
        """
        Write all recorded pages to a PDF byte stream.

        Returns:
            Complete PDF bytes

        Raises:
            DocumentFinalizeError: If reportlab cannot produce the document
        """
        buffer = BytesIO()
        try:
            pdf = pdfcanvas.Canvas(buffer, pagesize=(self.canvas.page_width, self.canvas.page_height))
            pdf.setTitle(self.title)
            pdf.setAuthor(self.author)
            pdf.setSubject(self.subject)
            pdf.setCreator(DEFAULT_AUTHOR)

            for page in self.pages:
                for command in page.commands:
                    if isinstance(command, TextRun):
                        pdf.setFont(command.font, command.size)
                        pdf.setFillColorRGB(*command.color)
                        pdf.drawString(command.x, command.y, command.text)
                    elif isinstance(command, ImagePlacement):
                        pdf.drawImage(
                            ImageReader(command.image.image),
                            command.x,
                            command.y,
                            width=command.width,
                            height=command.height,
                            mask="auto",
                        )
                pdf.showPage()

            pdf.save()
        except Exception as e:
            raise DocumentFinalizeError(str(e)) from e

        pdf_bytes = buffer.getvalue()
        self._logger.info(
            "Rendered %r: %d page(s), %d visual(s), %d bytes",
            self.title, self.page_count, self.visual_count, len(pdf_bytes),
        )
        return pdf_bytes


def create_pdf_from_sections(
    title: str,
    sections: Iterable[Section],
    logger: Optional[logging.Logger] = None,
) -> bytes:
    """
    Helper function to render sections into PDF bytes.

    Args:
        title: Document title
        sections: Sections in document order
        logger: Optional logger for the whole build

    Returns:
        PDF bytes

    Raises:
        DocumentFinalizeError: If the PDF cannot be serialized
    """
    builder = DocumentBuilder(title, logger=logger)
    builder.add_sections(sections)
    return builder.finalize()


def _plain(text: Optional[str]) -> str:
    return strip_unprintable(normalize_text(text).replace("\n", " "))


def render_minimal_pdf(title: str, message: str, summary: str = "") -> bytes:
    """
    Last-resort one-page document drawn with bare canvas calls.

    Uses none of the layout components: no measurement, no images, no
    custom fonts. Text is reduced to printable ASCII and wrapped by
    character count.

    Args:
        title: Title line
        message: Error text
        summary: Optional summary text, truncated to what fits on the page

    Returns:
        PDF bytes
    """
    buffer = BytesIO()
    pdf = pdfcanvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))

    pdf.setFont(FONT_REGULAR, TITLE_FONT_SIZE)
    pdf.drawString(MARGIN, PAGE_HEIGHT - 100, _plain(title)[:40])

    pdf.setFont(FONT_REGULAR, BODY_FONT_SIZE)
    lines = textwrap.wrap(_plain(message), 85)
    if summary:
        lines += [""] + textwrap.wrap(_plain(summary), 85)

    y = PAGE_HEIGHT - 150
    for line in lines:
        if y < MARGIN:
            break
        pdf.drawString(MARGIN, y, line)
        y -= BODY_FONT_SIZE * 1.25

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
