"""Section Layout Engine

Renders sections one at a time onto a PageCanvas. The layout for each
section is chosen from whether it carries a visual and that visual's role:

- TEXT_ONLY: body text at full column width
- FLOWCHART: body text, then the flowchart centered below it
- SIDE_BY_SIDE: diagram in the left column, text in a right column that
  switches to full width once it runs past the diagram
- DIAGRAM_ONLY: a diagram with no body text, centered
- PLACEHOLDER: body text followed by a "visualization unavailable" line

Glyph faults drop a single line at worst and undecodable images turn into
placeholders, so rendering a section never raises for content reasons.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import (
    AFTER_IMAGE_GAP,
    BLOCK_TRAILING_RATIO,
    BODY_FONT_SIZE,
    CAPTION_COLOR,
    CAPTION_FONT_SIZE,
    CAPTION_LEADING,
    CAPTION_OFFSET,
    CAPTION_PREFIX,
    DIAGRAM_PLACEHOLDER,
    EMPTY_PARAGRAPH_RATIO,
    FLOWCHART_PLACEHOLDER,
    FLOWCHART_TRAILING_GAP,
    HEADING_FONT_SIZE,
    HEADING_GAP,
    PARAGRAPH_GAP_RATIO,
    PLACEHOLDER_COLOR,
    PLACEHOLDER_FONT_SIZE,
    PLACEHOLDER_GAP,
    SECTION_GAP,
    SECTION_GAP_AFTER_FLOWCHART,
    SIDE_BY_SIDE_GUTTER,
    SIDE_BY_SIDE_LEADING,
    SIDE_BY_SIDE_MIN_SPACE,
    SIDE_BY_SIDE_OVERFLOW_GAP,
    TEXT_COLOR,
    TEXT_TO_FLOWCHART_GAP,
    TITLE_FONT_SIZE,
    TITLE_GAP,
)
from ..section import Section, VisualRole
from .content_renderer import ContentRenderer, EmbeddedImage
from .page_canvas import Color, PageCanvas
from .text_layout import line_height, normalize_text, take_line, word_stream, wrap, wrap_paragraphs
from .visual_sizing import Footprint, after_caption_gap, caption_band, centered, size_diagram, size_flowchart

logger = logging.getLogger(__name__)


class SectionLayout(str, Enum):
    TEXT_ONLY = "text_only"
    FLOWCHART = "flowchart"
    SIDE_BY_SIDE = "side_by_side"
    DIAGRAM_ONLY = "diagram_only"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class PlacedVisual:
    """Where an image ended up.

    Attributes:
        page_index: Index of the page holding the image
        x: Left edge
        top: Top edge
        bottom: Bottom edge of the image itself
        width: Rendered width
        height: Rendered height
        block_bottom: Cursor position below the image and its caption
    """

    page_index: int
    x: float
    top: float
    bottom: float
    width: float
    height: float
    block_bottom: float


@dataclass
class SectionReport:
    """What the engine did with one section."""

    layout: SectionLayout
    visual: Optional[PlacedVisual] = None
    switch_y: Optional[float] = None
    switch_page_index: Optional[int] = None
    placeholder_text: Optional[str] = None


class SectionLayoutEngine:
    """Drives text wrapping, visual sizing and primitive drawing per section.

    The engine is single-use per document: it shares the canvas cursor with
    every other caller and only ever moves it forward.
    """

    def __init__(
        self,
        canvas: PageCanvas,
        renderer: ContentRenderer,
        logger: Optional[logging.Logger] = None,
    ):
        self.canvas = canvas
        self.renderer = renderer
        self.fonts = renderer.fonts
        self._logger = logger or globals()["logger"]
        self.dropped_lines = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_title(self, title: str) -> None:
        self._draw_text_block(title, self.fonts.get_font_name(bold=True), TITLE_FONT_SIZE)
        self.canvas.advance(TITLE_GAP)

    def render_section(self, section: Section) -> SectionReport:
        """
        Render one section and advance past it.

        Args:
            section: Section to draw

        Returns:
            SectionReport describing the chosen layout and image geometry
        """
        if section.heading:
            self._draw_heading(section.heading)

        report = self._render_body(section)

        gap = SECTION_GAP_AFTER_FLOWCHART if report.layout == SectionLayout.FLOWCHART else SECTION_GAP
        self.canvas.advance(gap)
        self.canvas.ensure_space(line_height(BODY_FONT_SIZE))
        return report

    # ------------------------------------------------------------------
    # Layout selection
    # ------------------------------------------------------------------

    def _render_body(self, section: Section) -> SectionReport:
        visual = section.visual
        if visual is None:
            self._draw_text_block(section.body_text, self.fonts.get_font_name(), BODY_FONT_SIZE)
            return SectionReport(SectionLayout.TEXT_ONLY)

        if not visual.is_ready:
            self._logger.warning(
                "Visual for section %r unavailable: %s", section.heading, visual.outcome.reason
            )
            return self._render_placeholder(section)

        image = self.renderer.embed_image(visual.image_bytes)
        if image is None:
            self._logger.warning("Visual for section %r could not be decoded", section.heading)
            return self._render_placeholder(section)

        if visual.role == VisualRole.FLOWCHART:
            return self._render_flowchart(section, image)
        if not section.body_text.strip():
            return self._render_diagram_alone(section, image)
        return self._render_side_by_side(section, image)

    # ------------------------------------------------------------------
    # Layouts
    # ------------------------------------------------------------------

    def _render_placeholder(self, section: Section) -> SectionReport:
        self._draw_text_block(section.body_text, self.fonts.get_font_name(), BODY_FONT_SIZE)

        text = FLOWCHART_PLACEHOLDER if section.role == VisualRole.FLOWCHART else DIAGRAM_PLACEHOLDER
        self.canvas.ensure_space(line_height(PLACEHOLDER_FONT_SIZE))
        self._draw(
            text,
            self.fonts.get_font_name(italic=True),
            PLACEHOLDER_FONT_SIZE,
            PLACEHOLDER_COLOR,
            self.canvas.margin,
            self.canvas.y,
        )
        self.canvas.advance(PLACEHOLDER_GAP)
        return SectionReport(SectionLayout.PLACEHOLDER, placeholder_text=text)

    def _render_flowchart(self, section: Section, image: EmbeddedImage) -> SectionReport:
        if section.body_text.strip():
            self._draw_text_block(section.body_text, self.fonts.get_font_name(), BODY_FONT_SIZE)
            self.canvas.advance(TEXT_TO_FLOWCHART_GAP)

        footprint = size_flowchart(
            image.width, image.height,
            self.canvas.content_width, self.canvas.page_height, self.canvas.margin,
        )
        placed = self._place_visual(image, VisualRole.FLOWCHART, section.caption, footprint)
        self.canvas.move_to(placed.block_bottom)
        self.canvas.advance(FLOWCHART_TRAILING_GAP)
        return SectionReport(SectionLayout.FLOWCHART, visual=placed)

    def _render_diagram_alone(self, section: Section, image: EmbeddedImage) -> SectionReport:
        footprint = centered(
            size_diagram(
                image.width, image.height,
                self.canvas.content_width, self.canvas.page_height, self.canvas.margin,
            ),
            self.canvas.content_width,
            self.canvas.margin,
        )
        placed = self._place_visual(image, VisualRole.DIAGRAM, section.caption, footprint)
        self.canvas.move_to(placed.block_bottom)
        return SectionReport(SectionLayout.DIAGRAM_ONLY, visual=placed)

    def _render_side_by_side(self, section: Section, image: EmbeddedImage) -> SectionReport:
        """
        Diagram on the left, body text flowing down a right column.

        Column text is drawn while its baseline stays at or above the
        bottom of the diagram block. The remaining words then continue at
        full width just below the block. The cursor ends at the lower of
        the two phases.
        """
        # Never start the two-column flow where the diagram would be pushed
        # to the next page halfway through
        self.canvas.ensure_space(SIDE_BY_SIDE_MIN_SPACE)

        footprint = size_diagram(
            image.width, image.height,
            self.canvas.content_width, self.canvas.page_height, self.canvas.margin,
        )
        placed = self._place_visual(image, VisualRole.DIAGRAM, section.caption, footprint)

        font = self.fonts.get_font_name()
        size = BODY_FONT_SIZE
        column_x = placed.x + placed.width + SIDE_BY_SIDE_GUTTER
        column_width = self.canvas.content_width - placed.width - SIDE_BY_SIDE_GUTTER
        floor = max(placed.block_bottom, self.canvas.margin)

        words = word_stream(normalize_text(section.body_text))
        index = 0
        text_y = placed.top
        while index < len(words) and text_y >= floor:
            line, index = take_line(words, index, font, size, column_width, self.fonts.measure)
            if line:
                self._draw(line, font, size, TEXT_COLOR, column_x, text_y)
            text_y -= SIDE_BY_SIDE_LEADING

        report = SectionReport(SectionLayout.SIDE_BY_SIDE, visual=placed)
        if index >= len(words):
            self.canvas.move_to(min(text_y, placed.block_bottom))
            return report

        # Text outgrew the diagram: continue at full width below it
        self.canvas.move_to(placed.block_bottom - SIDE_BY_SIDE_OVERFLOW_GAP)
        report.switch_y = self.canvas.y
        report.switch_page_index = self.canvas.page_index
        self._logger.debug(
            "Side-by-side text switched to full width at y=%.1f (diagram bottom %.1f)",
            self.canvas.y, placed.bottom,
        )
        while index < len(words):
            line, index = take_line(
                words, index, font, size, self.canvas.content_width, self.fonts.measure
            )
            self.canvas.ensure_space(SIDE_BY_SIDE_LEADING)
            if line:
                self._draw(line, font, size, TEXT_COLOR, self.canvas.margin, self.canvas.y)
            self.canvas.advance(SIDE_BY_SIDE_LEADING)
        return report

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def _place_visual(
        self,
        image: EmbeddedImage,
        role: VisualRole,
        caption: Optional[str],
        footprint: Footprint,
    ) -> PlacedVisual:
        """Draw an image and its caption, breaking the page first if they do not fit.

        The cursor is left where it was; callers move it to block_bottom.
        """
        caption_font = self.fonts.get_font_name(italic=True)
        caption_lines = []
        if caption and caption.strip():
            caption_lines = wrap(
                CAPTION_PREFIX + caption.strip(),
                caption_font,
                CAPTION_FONT_SIZE,
                footprint.width,
                self.fonts.measure,
            )

        required = footprint.height + caption_band(role, len(caption_lines))
        if self.canvas.ensure_space(required):
            self._logger.debug("Moved %s to page %d to keep it whole", role.value, len(self.canvas.pages))

        top = self.canvas.y
        bottom = top - footprint.height
        self.renderer.draw_image(image, footprint.x, bottom, footprint.width, footprint.height)

        if caption_lines:
            caption_y = bottom - CAPTION_OFFSET
            for number, line in enumerate(caption_lines):
                self._draw(
                    line, caption_font, CAPTION_FONT_SIZE, CAPTION_COLOR,
                    footprint.x, caption_y - number * CAPTION_LEADING,
                )
            last_baseline = caption_y - (len(caption_lines) - 1) * CAPTION_LEADING
            block_bottom = last_baseline - after_caption_gap(role)
        else:
            block_bottom = bottom - AFTER_IMAGE_GAP

        return PlacedVisual(
            page_index=self.canvas.page_index,
            x=footprint.x,
            top=top,
            bottom=bottom,
            width=footprint.width,
            height=footprint.height,
            block_bottom=block_bottom,
        )

    def _draw_heading(self, heading: str) -> None:
        # Keep the heading on the same page as the first body line
        self.canvas.ensure_space(line_height(HEADING_FONT_SIZE) + line_height(BODY_FONT_SIZE))
        self._draw_text_block(heading, self.fonts.get_font_name(bold=True), HEADING_FONT_SIZE)
        self.canvas.advance(HEADING_GAP)

    def _draw_text_block(
        self,
        text: str,
        font: str,
        size: float,
        color: Color = TEXT_COLOR,
    ) -> None:
        """Wrap text at full column width and draw it line by line.

        Each line gets its own ensure_space check, so pages only ever break
        between lines.
        """
        if not text or not text.strip():
            return

        leading = line_height(size)
        paragraphs = wrap_paragraphs(text, font, size, self.canvas.content_width, self.fonts.measure)
        for position, lines in enumerate(paragraphs):
            if not lines:
                self.canvas.advance(size * EMPTY_PARAGRAPH_RATIO)
                continue
            for line in lines:
                self.canvas.ensure_space(leading)
                self._draw(line, font, size, color, self.canvas.margin, self.canvas.y)
                self.canvas.advance(leading)
            if position < len(paragraphs) - 1:
                self.canvas.advance(size * PARAGRAPH_GAP_RATIO)
        self.canvas.advance(size * BLOCK_TRAILING_RATIO)

    def _draw(self, text: str, font: str, size: float, color: Color, x: float, y: float) -> None:
        if self.renderer.draw_line_or_drop(text, font, size, color, x, y) is None:
            self.dropped_lines += 1
