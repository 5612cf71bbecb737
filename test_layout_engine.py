"""Tests for per-section layouts, pagination and placeholders."""
import math

import pytest

from noteflow.config import (
    BLOCK_TRAILING_RATIO,
    BODY_FONT_SIZE,
    DIAGRAM_PLACEHOLDER,
    EMPTY_PARAGRAPH_RATIO,
    FLOWCHART_PLACEHOLDER,
    HEADING_FONT_SIZE,
    HEADING_GAP,
    MARGIN,
    PARAGRAPH_GAP_RATIO,
)
from noteflow.document_builder import DocumentBuilder, SectionLayout
from noteflow.document_builder.text_layout import line_height
from noteflow.section import Section, SectionVisual, VisualRole

LONG_BODY = (
    "Backpropagation applies the chain rule layer by layer, reusing each "
    "intermediate gradient so the full derivative costs about as much as a "
    "forward pass. "
) * 12  # ~2000 characters


def _all_runs(builder):
    return [(page_index, run) for page_index, page in enumerate(builder.pages) for run in page.text_runs]


def test_text_only_section():
    builder = DocumentBuilder("Notes")
    builder.add_title()
    report = builder.add_section(Section(heading="Summary", body_text="One line of text."))

    assert report.layout == SectionLayout.TEXT_ONLY
    texts = [run.text for _, run in _all_runs(builder)]
    assert texts == ["Notes", "Summary", "One line of text."]
    assert builder.page_count == 1


def test_failed_visual_renders_single_placeholder():
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        heading="Neuron",
        body_text="A neuron sums its inputs.",
        visual=SectionVisual.failed(VisualRole.DIAGRAM, "rate limited"),
        caption="Neuron",
    ))

    assert report.layout == SectionLayout.PLACEHOLDER
    assert builder.visual_count == 0
    texts = [run.text for _, run in _all_runs(builder)]
    assert texts.count(DIAGRAM_PLACEHOLDER) == 1
    placeholder = next(run for _, run in _all_runs(builder) if run.text == DIAGRAM_PLACEHOLDER)
    assert placeholder.font == "Helvetica-Oblique"
    assert placeholder.color == (0.6, 0, 0)


def test_undecodable_flowchart_becomes_placeholder():
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        heading="Steps",
        body_text="",
        visual=SectionVisual.ready(VisualRole.FLOWCHART, b"not a png"),
    ))
    assert report.layout == SectionLayout.PLACEHOLDER
    assert report.placeholder_text == FLOWCHART_PLACEHOLDER
    assert builder.visual_count == 0


def test_side_by_side_switches_to_full_width(png_bytes):
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        body_text=LONG_BODY,
        visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes(800, 800)),
    ))

    assert report.layout == SectionLayout.SIDE_BY_SIDE
    placed = report.visual
    assert (placed.width, placed.height) == (256.0, 256.0)
    assert report.switch_y is not None
    assert report.switch_y <= placed.bottom

    runs = [run for _, run in _all_runs(builder)]
    column_runs = [run for run in runs if run.x > MARGIN]
    full_width_runs = [run for run in runs if run.x == MARGIN]
    assert column_runs and full_width_runs
    assert all(run.y <= report.switch_y for run in full_width_runs)


def test_side_by_side_text_never_overlaps_image(png_bytes):
    builder = DocumentBuilder()
    builder.add_title()
    report = builder.add_section(Section(
        heading="Neuron",
        body_text=LONG_BODY,
        visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes(800, 800)),
        caption="A single neuron with weighted inputs",
    ))

    placed = report.visual
    image_right = placed.x + placed.width
    for page_index, run in _all_runs(builder):
        if page_index != placed.page_index:
            continue
        if placed.bottom < run.y < placed.top:
            assert run.x >= image_right


def test_short_side_by_side_text_ends_below_diagram(png_bytes):
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        body_text="Short text.",
        visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes(800, 800)),
    ))
    assert report.switch_y is None
    assert builder.canvas.y < report.visual.bottom


def test_flowchart_is_stacked_and_centered(png_bytes):
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        heading="Backprop Steps",
        body_text="The steps in order.",
        visual=SectionVisual.ready(VisualRole.FLOWCHART, png_bytes(1600, 900)),
        caption="Backprop Steps",
    ))

    assert report.layout == SectionLayout.FLOWCHART
    placed = report.visual
    assert placed.width == pytest.approx(409.6)
    assert placed.x == pytest.approx(MARGIN + (512 - 409.6) / 2)

    runs = [run for _, run in _all_runs(builder)]
    body = next(run for run in runs if run.text == "The steps in order.")
    caption = next(run for run in runs if run.text == "Figure: Backprop Steps")
    assert body.y > placed.top
    assert caption.y == pytest.approx(placed.bottom - 25)
    assert caption.font == "Helvetica-Oblique"


def test_diagram_without_text_is_centered(png_bytes):
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes(800, 800)),
    ))
    assert report.layout == SectionLayout.DIAGRAM_ONLY
    assert report.visual.x == pytest.approx(MARGIN + (512 - 256) / 2)


def test_long_text_paginates_without_splitting_lines():
    body = "\n".join(f"Paragraph number {n}" for n in range(200))
    builder = DocumentBuilder()
    builder.add_sections([Section(heading="Long", body_text=body)])

    # Heading block, then 200 one-line paragraphs with 199 gaps between them
    total_height = (
        line_height(HEADING_FONT_SIZE) + HEADING_FONT_SIZE * BLOCK_TRAILING_RATIO + HEADING_GAP
        + 200 * line_height(BODY_FONT_SIZE)
        + 199 * BODY_FONT_SIZE * PARAGRAPH_GAP_RATIO
        + BODY_FONT_SIZE * BLOCK_TRAILING_RATIO
    )
    expected_pages = math.ceil(total_height / (742 - MARGIN))
    assert abs(builder.page_count - expected_pages) <= 1
    for _, run in _all_runs(builder):
        assert MARGIN <= run.y <= 742
    texts = [run.text for _, run in _all_runs(builder)]
    assert texts.count("Paragraph number 199") == 1


def test_visual_moves_to_next_page_when_it_does_not_fit(png_bytes):
    builder = DocumentBuilder()
    builder.add_section(Section(body_text="\n".join(["filler"] * 25)))
    report = builder.add_section(Section(
        body_text="Flow.",
        visual=SectionVisual.ready(VisualRole.FLOWCHART, png_bytes(1600, 900)),
        caption="Flow",
    ))
    assert report.visual.page_index == 1
    assert report.visual.bottom >= MARGIN


def test_finalize_produces_pdf(png_bytes):
    builder = DocumentBuilder("Title")
    builder.add_sections([
        Section(heading="Summary", body_text="Text."),
        Section(heading="Diagram", body_text="Beside.", visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes())),
    ])
    pdf_bytes = builder.finalize()
    assert pdf_bytes.startswith(b"%PDF")
    assert builder.visual_count == 1


def test_empty_paragraph_advances_half_a_line():
    def second_line_y(body):
        builder = DocumentBuilder()
        builder.add_section(Section(body_text=body))
        return next(run.y for _, run in _all_runs(builder) if run.text == "Second")

    with_blank = second_line_y("First\n\nSecond")
    without_blank = second_line_y("First\nSecond")
    assert without_blank - with_blank == pytest.approx(BODY_FONT_SIZE * EMPTY_PARAGRAPH_RATIO)


def test_long_word_stays_whole_after_switch_to_full_width(png_bytes):
    url = "https://example.org/" + "a" * 45
    builder = DocumentBuilder()
    report = builder.add_section(Section(
        body_text="filler " * 300 + url,
        visual=SectionVisual.ready(VisualRole.DIAGRAM, png_bytes(800, 800)),
    ))

    assert report.switch_y is not None
    url_runs = [run for _, run in _all_runs(builder) if "example.org" in run.text]
    assert len(url_runs) == 1
    assert url_runs[0].text.endswith(url)
    assert url_runs[0].x == MARGIN
