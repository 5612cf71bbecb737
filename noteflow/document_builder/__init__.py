"""Document Builder Package

This package turns an ordered list of sections into a paginated PDF:

Core Classes:
- DocumentBuilder: Main orchestrator class (from builder.py)
- SectionLayoutEngine: Per-section layout policies
- PageCanvas: Append-only pages and the write cursor
- ContentRenderer: Text line and image primitives
- FontManager: Built-in Helvetica family and glyph checks

Utilities:
- text_layout: Normalization and greedy word wrapping
- visual_sizing: Diagram and flowchart footprints

Helper Functions:
- create_pdf_from_sections: Render sections to PDF bytes
- render_minimal_pdf: Last-resort one-page document
"""

# Import core classes
from .builder import DocumentBuilder, create_pdf_from_sections, render_minimal_pdf
from .content_renderer import ContentRenderer, EmbeddedImage
from .font_manager import FontManager
from .layout_engine import PlacedVisual, SectionLayout, SectionLayoutEngine, SectionReport
from .page_canvas import ImagePlacement, Page, PageCanvas, TextRun
from . import text_layout
from . import visual_sizing

# Expose public API
__all__ = [
    # Main builder class
    'DocumentBuilder',

    # Helper functions
    'create_pdf_from_sections',
    'render_minimal_pdf',

    # Component classes
    'SectionLayoutEngine',
    'SectionLayout',
    'SectionReport',
    'PlacedVisual',
    'PageCanvas',
    'Page',
    'TextRun',
    'ImagePlacement',
    'ContentRenderer',
    'EmbeddedImage',
    'FontManager',

    # Utilities modules
    'text_layout',
    'visual_sizing',
]
