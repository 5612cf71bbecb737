"""Processing Result Dataclasses

Outcomes produced along the pipeline: per-visual results, the assembled
document, and the overall pipeline result.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .note_content import NoteContent
from .utils import clean_filename


@dataclass(frozen=True)
class VisualReady:
    """A visual that was produced; holds encoded image bytes."""

    image_bytes: bytes


@dataclass(frozen=True)
class VisualFailed:
    """A visual that could not be produced; holds the reason."""

    reason: str


VisualOutcome = Union[VisualReady, VisualFailed]


@dataclass(frozen=True)
class VisualResult:
    """Outcome of generating one diagram or flowchart.

    Attributes:
        concept_index: Position in the originating concept/prompt list
        outcome: VisualReady or VisualFailed
        name: Flowchart name used for plan matching (None for diagrams)
    """

    concept_index: int
    outcome: VisualOutcome
    name: Optional[str] = None

    @classmethod
    def ready(cls, index: int, image_bytes: bytes, name: Optional[str] = None) -> "VisualResult":
        return cls(concept_index=index, outcome=VisualReady(image_bytes), name=name)

    @classmethod
    def failed(cls, index: int, reason: str, name: Optional[str] = None) -> "VisualResult":
        return cls(concept_index=index, outcome=VisualFailed(reason), name=name)

    @property
    def is_ready(self) -> bool:
        return isinstance(self.outcome, VisualReady)

    @property
    def image_bytes(self) -> Optional[bytes]:
        return self.outcome.image_bytes if isinstance(self.outcome, VisualReady) else None

    @property
    def error(self) -> Optional[str]:
        return self.outcome.reason if isinstance(self.outcome, VisualFailed) else None


@dataclass(frozen=True)
class AssembledDocument:
    """Serialized PDF plus the label it should be offered under.

    Attributes:
        title: Document title, also used for the download file name
        pdf_bytes: Complete PDF byte stream
        page_count: Number of pages written
        visual_count: Number of images placed
        degraded: True when an error or minimal fallback document was produced
        error: Message of the failure that forced the fallback
    """

    title: str
    pdf_bytes: bytes
    page_count: int = 1
    visual_count: int = 0
    degraded: bool = False
    error: Optional[str] = None

    @property
    def filename(self) -> str:
        return f"{clean_filename(self.title)}.pdf"


@dataclass
class PipelineResult:
    """Result from the note pipeline.

    Attributes:
        status: "completed" or "failed"
        status_message: Human-readable status message
        notes: Generated note content (None if generation failed)
        document: Assembled PDF (None if the pipeline failed before assembly)
        diagram_results: One entry per diagram prompt
        flowchart_results: One entry per flowchart prompt
        potential_processing_issue: True if the summary suggests the AI struggled
        error: Error message if processing failed (None otherwise)
    """

    status: str
    status_message: str
    notes: Optional[NoteContent] = None
    document: Optional[AssembledDocument] = None
    diagram_results: List[VisualResult] = field(default_factory=list)
    flowchart_results: List[VisualResult] = field(default_factory=list)
    potential_processing_issue: bool = False
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True if processing completed and a document was produced."""
        return self.status == "completed" and self.document is not None

    @property
    def is_failed(self) -> bool:
        """True if processing failed with an error."""
        return self.status == "failed"

    def save_pdf(self, output_dir: str) -> Optional[str]:
        """Write the document into output_dir and return its path."""
        if self.document is None:
            return None
        path = os.path.join(output_dir, self.document.filename)
        with open(path, "wb") as f:
            f.write(self.document.pdf_bytes)
        return path

    def to_gradio_outputs(self, output_dir: str) -> tuple:
        """Convert to Gradio UI outputs format.

        Returns:
            Tuple of (summary_markdown, pdf_path, status_message)
        """
        if self.is_failed:
            return "", None, self.status_message

        summary = self.notes.summary if self.notes else ""
        if self.potential_processing_issue:
            summary = (
                "> The AI reported trouble processing this input; "
                "the summary may be incomplete.\n\n" + summary
            )
        return summary, self.save_pdf(output_dir), self.status_message
