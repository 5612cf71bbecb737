"""Processing Options Dataclasses

Input request and configuration options for the note pipeline.
"""
from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_MAX_WORKERS, DEFAULT_VISUAL_TIMEOUT
from .exceptions import InvalidConfigurationError


@dataclass
class NoteRequest:
    """Raw content submitted by the user.

    Exactly one of text or file_bytes must be provided. mime_type is
    required together with file_bytes.
    """

    text: Optional[str] = None
    file_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None
    filename: Optional[str] = None

    def __post_init__(self):
        has_text = bool(self.text and self.text.strip())
        if has_text == bool(self.file_bytes):
            raise ValueError("Provide either text or a file, not both or neither")
        if self.file_bytes and not self.mime_type:
            raise ValueError("mime_type is required when a file is provided")

    @property
    def is_text(self) -> bool:
        return self.file_bytes is None

    @property
    def input_type(self) -> str:
        return "text/plain" if self.is_text else self.mime_type


@dataclass
class PipelineOptions:
    """Configuration options for the note pipeline.

    Attributes:
        generate_diagrams: Generate AI diagram images for diagram concepts
        generate_flowcharts: Rasterize flowchart sources
        use_document_plan: Ask the AI for a section plan before assembling
        max_workers: Thread pool size for each visual batch
        visual_timeout: Seconds one visual may run, counted from when a
            worker starts it, before it is recorded as timed out
    """

    generate_diagrams: bool = True
    generate_flowcharts: bool = True
    use_document_plan: bool = True
    max_workers: int = DEFAULT_MAX_WORKERS
    visual_timeout: float = DEFAULT_VISUAL_TIMEOUT

    def __post_init__(self):
        """Validate configuration options after initialization."""
        if self.max_workers < 1:
            raise InvalidConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
        if self.visual_timeout <= 0:
            raise InvalidConfigurationError(
                f"visual_timeout must be positive, got {self.visual_timeout}"
            )
