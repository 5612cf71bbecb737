"""Custom Exception Hierarchy

Exception hierarchy for NoteFlow, split by the stage that raises it:
input validation, PDF rendering, visual generation, note generation
and pipeline orchestration.
"""


class NoteFlowError(Exception):
    """Base exception for all NoteFlow errors.

    Catching this exception will catch every custom exception raised by
    the composition engine, the visual clients and the pipeline.
    """
    pass


# Validation Errors
class ValidationError(NoteFlowError):
    """Raised when input validation fails."""
    pass


class UnsupportedInputError(ValidationError):
    """Raised when an uploaded file has a MIME type we cannot process."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported input type: {mime_type}")


class FileSizeLimitExceededError(ValidationError):
    """Raised when an upload exceeds the size limit."""

    def __init__(self, file_size: float, max_size: float):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"File size {file_size:.1f} MB exceeds maximum allowed size {max_size:.1f} MB"
        )


class InvalidConfigurationError(ValidationError, ValueError):
    """Raised when configuration parameters are invalid."""
    pass


# PDF Rendering Errors
class RenderingError(NoteFlowError):
    """Base class for PDF rendering errors."""
    pass


class GlyphEncodingError(RenderingError):
    """Raised when a text run cannot be drawn with the active font."""

    def __init__(self, text: str, font: str, reason: str = "unsupported glyph"):
        self.text = text
        self.font = font
        super().__init__(f"Cannot draw {text!r} with {font}: {reason}")


class ImageDecodeError(RenderingError):
    """Raised when a visual buffer is neither PNG nor JPEG."""
    pass


class DocumentFinalizeError(RenderingError):
    """Raised when the PDF library cannot produce a byte stream."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to finalize PDF: {reason}")


# Visual Generation Errors
class VisualGenerationError(NoteFlowError):
    """Base class for diagram and flowchart generation errors."""
    pass


class ImageGenerationAPIError(VisualGenerationError):
    """Raised when the image generation API request fails."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"Image generation API error ({status_code}): {message}")


class RateLimitedError(ImageGenerationAPIError):
    """Raised when the image generation API rejects us for rate limits."""

    def __init__(self, message: str = "API rate limited or temporarily unavailable"):
        super().__init__(429, message)


class ModelLoadingError(ImageGenerationAPIError):
    """Raised when the hosted model is still loading."""

    def __init__(self, message: str = "Model is loading"):
        super().__init__(503, message)


class FlowchartRenderError(VisualGenerationError):
    """Raised when mermaid source cannot be rasterized."""
    pass


class VisualTimeoutError(VisualGenerationError):
    """Raised when a single visual does not finish within the batch deadline."""

    def __init__(self, index: int, timeout_seconds: float):
        self.index = index
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Visual {index} timed out after {timeout_seconds:g} seconds"
        )


# Note Generation Errors
class NoteGenerationError(NoteFlowError):
    """Raised when the AI collaborator returns nothing usable."""
    pass


# Assembly Errors
class AssemblyError(NoteFlowError):
    """Raised when sections cannot be built from a document plan."""
    pass


# Pipeline Errors
class PipelineError(NoteFlowError):
    """Base class for pipeline orchestration errors."""
    pass


class PipelineStepError(PipelineError):
    """Raised when a specific pipeline step fails.

    This wraps the underlying exception while preserving the pipeline context.
    """

    def __init__(self, step_name: str, original_exception: Exception):
        self.step_name = step_name
        self.original_exception = original_exception
        super().__init__(
            f"Pipeline step '{step_name}' failed: {str(original_exception)}"
        )
