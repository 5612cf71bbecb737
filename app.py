"""NoteFlow - Main Application

Gradio application that turns pasted text or an uploaded file into
AI-generated notes with diagrams and flowcharts, delivered as a PDF.
"""
import mimetypes
import os
import tempfile

import gradio as gr
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from noteflow.config import MAX_FILE_SIZE_MB, UPLOAD_FILE_TYPES
from noteflow.flowchart_renderer import FlowchartRenderer
from noteflow.image_generator import DiagramImageClient
from noteflow.logging_config import get_logger, setup_logging
from noteflow.note_generator import NoteGenerator
from noteflow.pipeline import NotePipeline
from noteflow.processing_options import NoteRequest, PipelineOptions

setup_logging()
logger = get_logger(__name__)

# Not registered on every platform
mimetypes.add_type("text/markdown", ".md")

# API keys should be set in .env or HF Space secrets
try:
    note_generator = NoteGenerator()
except ValueError as e:
    logger.warning("%s", e)
    note_generator = None

try:
    diagram_client = DiagramImageClient()
except ValueError as e:
    logger.warning("%s (diagrams disabled)", e)
    diagram_client = None

flowchart_renderer = FlowchartRenderer()
if not flowchart_renderer.is_available():
    logger.warning("mermaid-cli not found, flowcharts will use the text fallback")

OUTPUT_DIR = tempfile.mkdtemp(prefix="noteflow-")


def generate_notes(
    text: str,
    upload_path: str,
    generate_diagrams: bool,
    generate_flowcharts: bool,
    use_document_plan: bool,
    progress=gr.Progress()
) -> tuple:
    """
    Run the note pipeline for one submission.

    Args:
        text: Pasted text (ignored when a file is uploaded)
        upload_path: Path of the uploaded file, or None
        generate_diagrams: Generate AI diagram images
        generate_flowcharts: Render flowcharts
        use_document_plan: Let the AI plan the section layout
        progress: Gradio progress tracker

    Returns:
        Tuple of (summary markdown, PDF path or None, status message)
    """
    if note_generator is None:
        raise gr.Error(
            "OpenAI API not configured. "
            "Please set OPENAI_API_KEY environment variable."
        )

    try:
        if upload_path:
            mime_type, _ = mimetypes.guess_type(upload_path)
            with open(upload_path, "rb") as f:
                request = NoteRequest(
                    file_bytes=f.read(),
                    mime_type=mime_type,
                    filename=os.path.basename(upload_path),
                )
        else:
            request = NoteRequest(text=text)
    except ValueError:
        raise gr.Error("Please enter some text or upload a file")

    pipeline = NotePipeline(
        note_generator,
        diagram_client=diagram_client,
        flowchart_renderer=flowchart_renderer,
        progress_callback=lambda p, d: progress(p, desc=d),
    )
    options = PipelineOptions(
        generate_diagrams=generate_diagrams,
        generate_flowcharts=generate_flowcharts,
        use_document_plan=use_document_plan,
    )
    result = pipeline.process(request, options)
    if result.is_failed:
        raise gr.Error(result.status_message)
    return result.to_gradio_outputs(OUTPUT_DIR)


# Create Gradio interface
with gr.Blocks(title="NoteFlow") as app:
    gr.Markdown("# 📝 NoteFlow")
    gr.Markdown("Turn raw notes or a photo of them into a structured PDF with diagrams and flowcharts.")

    with gr.Row():
        with gr.Column():
            gr.Markdown("## Input")
            text_input = gr.Textbox(
                label="Text",
                lines=12,
                placeholder="Paste lecture notes, an article, or any text...",
            )
            file_input = gr.File(
                label=f"...or upload an image, PDF, audio or text file (max {MAX_FILE_SIZE_MB} MB)",
                file_types=UPLOAD_FILE_TYPES,
                type="filepath",
            )

            gr.Markdown("---")
            gr.Markdown("### ⚙️ Settings")
            diagrams_checkbox = gr.Checkbox(
                label="Generate diagrams",
                value=diagram_client is not None,
                interactive=diagram_client is not None,
            )
            flowcharts_checkbox = gr.Checkbox(label="Generate flowcharts", value=True)
            plan_checkbox = gr.Checkbox(
                label="AI document plan",
                value=True,
                info="Let the AI arrange sections; otherwise summary, diagrams, then flowcharts",
            )

            generate_btn = gr.Button("Generate Notes", variant="primary")

        with gr.Column():
            gr.Markdown("## Result")
            status = gr.Textbox(label="Status", interactive=False)
            summary_output = gr.Markdown()
            pdf_output = gr.File(label="Download PDF")

    generate_btn.click(
        fn=generate_notes,
        inputs=[text_input, file_input, diagrams_checkbox, flowcharts_checkbox, plan_checkbox],
        outputs=[summary_output, pdf_output, status],
    )


if __name__ == "__main__":
    app.launch()
