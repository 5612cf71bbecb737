"""Tests for mermaid rasterization and the text-card fallback."""
import subprocess
from io import BytesIO
from unittest import mock

import pytest
from PIL import Image

from noteflow.exceptions import FlowchartRenderError
from noteflow.flowchart_renderer import FlowchartRenderer, ensure_graph_header, render_fallback_flowchart

CODE = "flowchart TD\n A[Forward] --> B[Loss];\n B --> C[Backward];"


def _write_output(png_bytes):
    def fake_run(command, **kwargs):
        output_path = command[command.index("-o") + 1]
        with open(output_path, "wb") as f:
            f.write(png_bytes)
        return subprocess.CompletedProcess(command, 0, b"", b"")
    return fake_run


def test_header_is_added_only_when_missing():
    assert ensure_graph_header("A --> B") == "flowchart TD\nA --> B"
    assert ensure_graph_header("graph LR\nA --> B") == "graph LR\nA --> B"
    assert ensure_graph_header("  flowchart TD\nA") == "  flowchart TD\nA"


def test_mmdc_output_is_returned(png_bytes):
    image = png_bytes(1600, 900)
    renderer = FlowchartRenderer(mmdc_command="mmdc")
    with mock.patch("noteflow.flowchart_renderer.subprocess.run", side_effect=_write_output(image)) as run:
        assert renderer.render(CODE, "Backprop Steps") == image

    command = run.call_args.args[0]
    assert command[0] == "mmdc"
    assert command[-2:] == ["-b", "transparent"]
    assert run.call_args.kwargs["timeout"] == renderer.timeout


def test_js_entry_point_runs_with_node(png_bytes):
    renderer = FlowchartRenderer(mmdc_command="/opt/mermaid/cli.js")
    with mock.patch("noteflow.flowchart_renderer.subprocess.run", side_effect=_write_output(png_bytes())) as run:
        renderer.render_with_mmdc(CODE, "x")
    assert run.call_args.args[0][:2] == ["node", "/opt/mermaid/cli.js"]


def test_empty_output_is_an_error():
    renderer = FlowchartRenderer(use_fallback=False)
    with mock.patch("noteflow.flowchart_renderer.subprocess.run", side_effect=_write_output(b"")):
        with pytest.raises(FlowchartRenderError, match="empty"):
            renderer.render(CODE, "x")


def test_process_failure_without_fallback_raises():
    error = subprocess.CalledProcessError(1, ["mmdc"], stderr=b"Parse error on line 2")
    renderer = FlowchartRenderer(use_fallback=False)
    with mock.patch("noteflow.flowchart_renderer.subprocess.run", side_effect=error):
        with pytest.raises(FlowchartRenderError, match="Parse error"):
            renderer.render(CODE, "x")


def test_missing_mmdc_uses_fallback_card():
    renderer = FlowchartRenderer(mmdc_command="noteflow-missing-mmdc-binary")
    assert not renderer.is_available()

    data = renderer.render(CODE, "Backprop Steps")
    assert Image.open(BytesIO(data)).size == (800, 600)


def test_fallback_card_handles_long_and_non_ascii_source():
    code = "\n".join(f"N{i}[\"Étape {i} {'x' * 120}\"] --> N{i + 1};" for i in range(60))
    data = render_fallback_flowchart(code, "Schéma")
    image = Image.open(BytesIO(data))
    assert image.format == "PNG"
    assert image.size == (800, 600)
