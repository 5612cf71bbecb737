"""Tests for the end-to-end note pipeline (collaborators mocked)."""
import os
from unittest import mock

import pytest

from noteflow.exceptions import InvalidConfigurationError, NoteGenerationError
from noteflow.note_content import DocumentPlan
from noteflow.pipeline import NotePipeline
from noteflow.processing_options import NoteRequest, PipelineOptions


@pytest.fixture
def generator(sample_notes):
    generator = mock.Mock()
    generator.beautify.return_value = sample_notes
    generator.plan_document.return_value = DocumentPlan.from_dict({
        "title": "Neural Networks",
        "sections": [{"heading": "Backprop Steps", "content": "Steps.", "includeImage": True}],
    })
    return generator


@pytest.fixture
def pipeline(generator, png_bytes):
    client = mock.Mock()
    client.generate.return_value = png_bytes(800, 800)
    renderer = mock.Mock()
    renderer.render.return_value = png_bytes(1600, 900)
    return NotePipeline(generator, diagram_client=client, flowchart_renderer=renderer)


def test_full_run_produces_document(pipeline):
    progress = []
    pipeline.progress = lambda p, d: progress.append(p)

    result = pipeline.process(NoteRequest(text="Explain backpropagation in neural networks."))

    assert result.is_complete
    assert result.document.title == "Neural Networks"
    assert result.document.visual_count == 4
    assert len(result.diagram_results) == 3
    assert progress[-1] == 1.0
    assert progress == sorted(progress)


def test_short_text_skips_ai(pipeline, generator):
    result = pipeline.process(NoteRequest(text="hi"))

    generator.beautify.assert_not_called()
    generator.plan_document.assert_not_called()
    assert result.is_complete
    assert "too short" in result.notes.summary


def test_plan_failure_falls_back_to_positional(pipeline, generator):
    generator.plan_document.side_effect = NoteGenerationError("bad plan")

    result = pipeline.process(NoteRequest(text="Explain backpropagation in neural networks."))

    assert result.is_complete
    assert result.document.title == "NoteFlow: AI-Generated Notes"
    assert result.document.visual_count == 4


def test_options_disable_visuals(pipeline, generator):
    options = PipelineOptions(generate_diagrams=False, generate_flowcharts=False, use_document_plan=False)
    result = pipeline.process(NoteRequest(text="Explain backpropagation in neural networks."), options)

    assert result.diagram_results == []
    assert result.flowchart_results == []
    assert result.document.visual_count == 0
    generator.plan_document.assert_not_called()


def test_unsupported_upload_fails_without_raising(pipeline):
    result = pipeline.process(NoteRequest(file_bytes=b"data", mime_type="application/zip"))

    assert result.is_failed
    assert "application/zip" in result.error


def test_note_generation_error_is_captured(pipeline, generator):
    generator.beautify.side_effect = RuntimeError("upstream down")

    result = pipeline.process(NoteRequest(text="Explain backpropagation in neural networks."))

    assert result.is_failed
    assert "notes" in result.error
    assert "upstream down" in result.error


def test_processing_issue_flag_and_gradio_outputs(pipeline, generator, sample_notes, tmp_path):
    from dataclasses import replace

    generator.beautify.return_value = replace(sample_notes, summary="Unable to process the image.")
    result = pipeline.process(NoteRequest(file_bytes=b"\x89PNG", mime_type="image/png", filename="scan.png"))

    assert result.potential_processing_issue
    summary, pdf_path, status = result.to_gradio_outputs(str(tmp_path))
    assert summary.startswith(">")
    assert os.path.exists(pdf_path)
    with open(pdf_path, "rb") as f:
        assert f.read(4) == b"%PDF"


def test_request_validation():
    with pytest.raises(ValueError):
        NoteRequest()
    with pytest.raises(ValueError):
        NoteRequest(text="both", file_bytes=b"x", mime_type="image/png")
    with pytest.raises(ValueError):
        NoteRequest(file_bytes=b"x")
    with pytest.raises(ValueError):
        PipelineOptions(max_workers=0)


def test_invalid_options_raise_configuration_error():
    with pytest.raises(InvalidConfigurationError):
        PipelineOptions(visual_timeout=0)


def test_pdf_upload_reaches_note_generator(pipeline, generator):
    result = pipeline.process(NoteRequest(file_bytes=b"%PDF-1.4 notes", mime_type="application/pdf", filename="lecture.pdf"))

    assert result.is_complete
    generator.beautify.assert_called_once_with(
        file_bytes=b"%PDF-1.4 notes", mime_type="application/pdf", filename="lecture.pdf",
    )


def test_video_upload_is_rejected_before_generation(pipeline, generator):
    result = pipeline.process(NoteRequest(file_bytes=b"\x00\x00\x00\x18ftyp", mime_type="video/mp4"))

    assert result.is_failed
    assert "video/mp4" in result.error
    generator.beautify.assert_not_called()
