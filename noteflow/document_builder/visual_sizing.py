"""Visual Sizing Policy

Pure functions computing the on-page footprint of a visual from its
natural pixel size and its role:

- Diagram: half the content width, height capped at 40% of the page,
  left-aligned at the margin.
- Flowchart: fit inside 80% of the content width by 50% of the page,
  scaled down only, centered in the column.

Neither role is ever scaled up beyond its natural size (1 px = 1 pt).
"""
from dataclasses import dataclass

from ..config import (
    AFTER_CAPTION_GAP_DIAGRAM,
    AFTER_CAPTION_GAP_FLOWCHART,
    CAPTION_BAND_DIAGRAM,
    CAPTION_BAND_FLOWCHART,
    CAPTION_LEADING,
    CONTENT_WIDTH,
    DIAGRAM_MAX_HEIGHT_RATIO,
    DIAGRAM_WIDTH_RATIO,
    FLOWCHART_MAX_HEIGHT_RATIO,
    FLOWCHART_WIDTH_RATIO,
    IMAGE_BAND_NO_CAPTION,
    MARGIN,
    PAGE_HEIGHT,
)
from ..section import VisualRole


@dataclass(frozen=True)
class Footprint:
    """Rendered size of a visual and the x of its left edge."""

    x: float
    width: float
    height: float


def size_diagram(
    natural_width: float,
    natural_height: float,
    content_width: float = CONTENT_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = MARGIN,
) -> Footprint:
    """
    Size a square-ish diagram for the left column.

    Target width is 0.5 x content width; height follows the aspect ratio.
    If that height exceeds 0.4 x page height, width is re-derived from
    the height cap instead.

    Examples:
        >>> size_diagram(800, 800)
        Footprint(x=50, width=256.0, height=256.0)
        >>> round(size_diagram(400, 1200).height, 1)
        316.8
    """
    aspect = natural_height / natural_width
    width = min(DIAGRAM_WIDTH_RATIO * content_width, natural_width)
    height = width * aspect

    max_height = DIAGRAM_MAX_HEIGHT_RATIO * page_height
    if height > max_height:
        height = max_height
        width = height / aspect

    return Footprint(x=margin, width=width, height=height)


def size_flowchart(
    natural_width: float,
    natural_height: float,
    content_width: float = CONTENT_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = MARGIN,
) -> Footprint:
    """
    Size a wide flowchart, centered in the content column.

    The bounding box is 0.8 x content width by 0.5 x page height. The image
    is scaled uniformly by min(width scale, height scale), and only when
    it is larger than the box.

    Examples:
        >>> fp = size_flowchart(1600, 900)
        >>> round(fp.width, 1), round(fp.height, 1)
        (409.6, 230.4)
    """
    max_width = FLOWCHART_WIDTH_RATIO * content_width
    max_height = FLOWCHART_MAX_HEIGHT_RATIO * page_height
    scale = min(max_width / natural_width, max_height / natural_height, 1.0)

    width = natural_width * scale
    height = natural_height * scale
    return Footprint(x=margin + (content_width - width) / 2, width=width, height=height)


def size_visual(
    role: VisualRole,
    natural_width: float,
    natural_height: float,
    content_width: float = CONTENT_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = MARGIN,
) -> Footprint:
    sizer = size_flowchart if role == VisualRole.FLOWCHART else size_diagram
    return sizer(natural_width, natural_height, content_width, page_height, margin)


def centered(footprint: Footprint, content_width: float = CONTENT_WIDTH, margin: float = MARGIN) -> Footprint:
    """Same size, moved to the middle of the content column."""
    return Footprint(
        x=margin + (content_width - footprint.width) / 2,
        width=footprint.width,
        height=footprint.height,
    )


def caption_band(role: VisualRole, caption_lines: int) -> float:
    """
    Vertical space to reserve below an image for its caption.

    Args:
        role: Visual role
        caption_lines: Number of wrapped caption lines (0 for no caption)
    """
    if caption_lines <= 0:
        return IMAGE_BAND_NO_CAPTION
    base = CAPTION_BAND_FLOWCHART if role == VisualRole.FLOWCHART else CAPTION_BAND_DIAGRAM
    return base + (caption_lines - 1) * CAPTION_LEADING


def after_caption_gap(role: VisualRole) -> float:
    if role == VisualRole.FLOWCHART:
        return AFTER_CAPTION_GAP_FLOWCHART
    return AFTER_CAPTION_GAP_DIAGRAM
