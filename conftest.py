"""Shared fixtures: in-memory PNG/JPEG buffers and note content."""
from io import BytesIO

import pytest
from PIL import Image

from noteflow.note_content import NoteContent


def make_image_bytes(width: int, height: int, fmt: str = "PNG", color=(40, 90, 160)) -> bytes:
    mode = "RGB"
    image = Image.new(mode, (width, height), color)
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Factory: png_bytes(width, height) -> PNG buffer."""
    return lambda width=800, height=800: make_image_bytes(width, height, "PNG")


@pytest.fixture
def jpeg_bytes():
    return lambda width=800, height=800: make_image_bytes(width, height, "JPEG")


@pytest.fixture
def sample_notes():
    return NoteContent(
        summary="Neural networks learn by adjusting weights.\nBackpropagation computes gradients.",
        concepts_diagram=("Neuron", "Activation Function", "Loss Landscape"),
        diagram_prompts=("a neuron", "a sigmoid curve", "a loss surface"),
        concepts_flowcharts=("Backprop Steps",),
        flowcharts_prompt=("flowchart TD\n A[Forward] --> B[Loss];\n B --> C[Backward];",),
    )
