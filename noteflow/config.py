"""Configuration Constants

Constants for note composition, PDF layout and visual generation.
"""

# Page Geometry (points, US Letter)
PAGE_WIDTH = 612
PAGE_HEIGHT = 792
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN  # 512

# Typography (built-in Helvetica family only)
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
TITLE_FONT_SIZE = 24
HEADING_FONT_SIZE = 18
BODY_FONT_SIZE = 12
CAPTION_FONT_SIZE = 10
PLACEHOLDER_FONT_SIZE = 12

LINE_HEIGHT_RATIO = 1.2        # line advance = size * ratio
PARAGRAPH_GAP_RATIO = 0.8      # extra gap between paragraphs
EMPTY_PARAGRAPH_RATIO = 0.5    # blank line advance
BLOCK_TRAILING_RATIO = 0.5     # gap after every text block
FALLBACK_CHAR_WIDTH_RATIO = 0.6  # width estimate when measurement fails
CAPTION_LEADING = 12

# Colors (RGB, 0-1)
TEXT_COLOR = (0, 0, 0)
CAPTION_COLOR = (0.3, 0.3, 0.3)
PLACEHOLDER_COLOR = (0.6, 0, 0)

# Vertical Gaps (points)
TITLE_GAP = 30
HEADING_GAP = 10
SECTION_GAP = 35
SECTION_GAP_AFTER_FLOWCHART = 45
TEXT_TO_FLOWCHART_GAP = 20
FLOWCHART_TRAILING_GAP = 15
PLACEHOLDER_GAP = 20

# Captions
CAPTION_PREFIX = "Figure: "
CAPTION_OFFSET = 25              # image bottom -> first caption baseline
CAPTION_BAND_FLOWCHART = 45      # reserved below a captioned flowchart
CAPTION_BAND_DIAGRAM = 35        # reserved below a captioned diagram
IMAGE_BAND_NO_CAPTION = 20
AFTER_CAPTION_GAP_FLOWCHART = 50
AFTER_CAPTION_GAP_DIAGRAM = 35
AFTER_IMAGE_GAP = 25             # no caption

# Visual Sizing Ratios
DIAGRAM_WIDTH_RATIO = 0.5        # of content width
DIAGRAM_MAX_HEIGHT_RATIO = 0.4   # of page height
FLOWCHART_WIDTH_RATIO = 0.8      # of content width
FLOWCHART_MAX_HEIGHT_RATIO = 0.5  # of page height

# Side-by-side Layout
SIDE_BY_SIDE_MIN_SPACE = 250     # force a page break below this
SIDE_BY_SIDE_GUTTER = 30
SIDE_BY_SIDE_LEADING = 18
SIDE_BY_SIDE_OVERFLOW_GAP = 25

# Placeholders
DIAGRAM_PLACEHOLDER = "(Diagram visualization unavailable)"
FLOWCHART_PLACEHOLDER = "(Flowchart visualization unavailable)"

# Document Defaults
DEFAULT_TITLE = "NoteFlow: AI-Generated Notes"
DEFAULT_AUTHOR = "NoteFlow"
DEFAULT_SUBJECT = "AI-Generated Notes"
SUMMARY_HEADING = "Summary"
NO_SUMMARY_TEXT = "No summary available"
ERROR_TITLE = "Error Generating PDF"
ERROR_HEADING = "Error Information"
ERROR_SUMMARY_HEADING = "Content Summary"
FLOWCHART_FALLBACK_HEADING = "Process Workflow"
DIAGRAM_FALLBACK_HEADING = "Concept"

# Plan matching keywords for process-like visuals
PROCESS_KEYWORDS = (
    "process", "flow", "algorithm", "procedure", "workflow", "sequence", "steps",
)
MIN_MATCH_LENGTH = 3  # names must be longer than this for containment matches

# Diagram Image Generation (Hugging Face inference API)
HF_IMAGE_MODEL_URL = "https://api-inference.huggingface.co/models/black-forest-labs/FLUX.1-dev"
HF_GUIDANCE_SCALE = 7.5
HF_INFERENCE_STEPS = 50
HF_IMAGE_WIDTH = 1024
HF_IMAGE_HEIGHT = 768
HF_REQUEST_TIMEOUT = 120  # seconds

# Flowchart Rendering (mermaid-cli)
DEFAULT_MMDC_COMMAND = "mmdc"
MMDC_TIMEOUT = 60  # seconds
FALLBACK_FLOWCHART_SIZE = (800, 600)
FALLBACK_MAX_LINES = 25
FALLBACK_MAX_LINE_CHARS = 70

# Visual Batch Defaults
DEFAULT_MAX_WORKERS = 4
DEFAULT_VISUAL_TIMEOUT = 120  # seconds per visual, from when it starts

# Note Generation
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_AUDIO_MODEL = "gpt-4o-audio-preview"
# input_audio accepts only these container formats
AUDIO_INPUT_FORMATS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}
MIN_INPUT_CHARS = 10

# File Processing Limits
MAX_FILE_SIZE_MB = 20
ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "audio/mpeg",
    "audio/wav",
    "audio/x-wav",
    "audio/mp3",
    "application/pdf",
    "text/plain",
    "text/markdown",
)
# Extensions offered by the upload widget, matching ALLOWED_MIME_TYPES
UPLOAD_FILE_TYPES = [".png", ".jpg", ".jpeg", ".gif", ".webp", ".pdf", ".mp3", ".wav", ".txt", ".md"]

# Progress Steps (for UI progress tracking)
PROGRESS_STEPS = {
    "VALIDATE": 0.02,
    "NOTES": 0.10,
    "DIAGRAMS": 0.35,
    "FLOWCHARTS": 0.60,
    "PLAN": 0.75,
    "PDF_BUILD": 0.85,
    "COMPLETE": 1.0,
}
