"""Tests for note/plan parsing and upload helpers."""
import pytest

from noteflow.exceptions import FileSizeLimitExceededError, UnsupportedInputError, ValidationError
from noteflow.note_content import DocumentPlan, NoteContent, PlannedSection
from noteflow.utils import clean_filename, detect_processing_issue, format_file_size, validate_upload


def test_note_content_round_trips_through_dict():
    data = {
        "summary": "S",
        "concepts_diagram": ["Neuron", None],
        "diagram_prompts": ["a neuron", "x"],
        "concepts_flowcharts": "Backprop Steps",
        "flowcharts_prompt": [],
    }
    notes = NoteContent.from_dict(data)

    assert notes.concepts_diagram == ("Neuron", "")
    assert notes.concepts_flowcharts == ("Backprop Steps",)
    assert notes.diagram_concept(1) is None
    assert notes.diagram_concept(5) is None
    assert notes.flowchart_name(0) == "Backprop Steps"
    assert NoteContent.from_dict(notes.to_dict()) == notes


def test_planned_section_accepts_both_key_styles():
    camel = PlannedSection.from_dict({"heading": "H", "content": "C", "includeImage": True, "imageCaption": "Cap"})
    snake = PlannedSection.from_dict({"heading": "H", "content": "C", "include_image": True, "image_caption": "Cap"})
    assert camel == snake
    assert PlannedSection.from_dict({"content": "x"}).heading is None


def test_document_plan_requires_sections_list():
    with pytest.raises(ValueError):
        DocumentPlan.from_dict({"title": "T"})
    with pytest.raises(ValueError):
        DocumentPlan.from_dict({"title": "T", "sections": ["not an object"]})
    assert DocumentPlan.from_dict({"title": " T ", "sections": []}).title == "T"


def test_validate_upload():
    assert validate_upload("image/png", 1024 * 1024) == 1.0
    with pytest.raises(UnsupportedInputError):
        validate_upload("application/zip", 10)
    with pytest.raises(UnsupportedInputError):
        validate_upload("video/mp4", 10)
    assert validate_upload("audio/wav", 1024) > 0
    assert validate_upload("application/pdf", 1024) > 0
    with pytest.raises(ValidationError):
        validate_upload("image/png", 0)
    with pytest.raises(FileSizeLimitExceededError):
        validate_upload("image/png", 21 * 1024 * 1024)


def test_clean_filename():
    assert clean_filename("Neural Networks: A Primer!") == "Neural_Networks_A_Primer"
    assert clean_filename("report.pdf") == "report"
    assert clean_filename("Нейросети") == "document"
    assert len(clean_filename("x" * 80)) == 50


def test_format_file_size():
    assert format_file_size(512) == "512 B"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(3 * 1024 * 1024) == "3.0 MB"


def test_detect_processing_issue():
    assert detect_processing_issue("I was unable to process the image.")
    assert detect_processing_issue("An ERROR occurred")
    assert not detect_processing_issue("Gradients flow backwards.")
