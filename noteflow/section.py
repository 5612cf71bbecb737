"""Section Dataclasses

A Section is one heading + body + optional visual unit of the document.
Sections are immutable and consumed once, in order, by the layout engine.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .processing_result import VisualFailed, VisualOutcome, VisualReady


class VisualRole(str, Enum):
    """How a visual is sized and placed."""

    DIAGRAM = "diagram"
    FLOWCHART = "flowchart"


@dataclass(frozen=True)
class SectionVisual:
    """A visual promised to a section: either image bytes or a failure reason."""

    role: VisualRole
    outcome: VisualOutcome

    @property
    def image_bytes(self) -> Optional[bytes]:
        if isinstance(self.outcome, VisualReady):
            return self.outcome.image_bytes
        return None

    @property
    def is_ready(self) -> bool:
        return isinstance(self.outcome, VisualReady)

    @classmethod
    def ready(cls, role: VisualRole, image_bytes: bytes) -> "SectionVisual":
        return cls(role=role, outcome=VisualReady(image_bytes))

    @classmethod
    def failed(cls, role: VisualRole, reason: str) -> "SectionVisual":
        return cls(role=role, outcome=VisualFailed(reason))


@dataclass(frozen=True)
class Section:
    """One logical unit of the document.

    Attributes:
        heading: Optional section heading
        body_text: Body text, may be empty
        visual: Optional visual with its role
        caption: Optional caption drawn under the visual
    """

    heading: Optional[str] = None
    body_text: str = ""
    visual: Optional[SectionVisual] = None
    caption: Optional[str] = None

    @property
    def role(self) -> Optional[VisualRole]:
        return self.visual.role if self.visual else None
