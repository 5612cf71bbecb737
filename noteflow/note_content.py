"""Note Content Dataclasses

Structured output of the AI note generator and the optional document plan.
Both are parsed from JSON dicts that may use camelCase or snake_case keys.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


def _string_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple("" if item is None else str(item) for item in value)


@dataclass(frozen=True)
class NoteContent:
    """Summary text plus index-aligned concept names and visual prompts.

    Attributes:
        summary: Markdown-ish summary text
        concepts_diagram: Concept names, index-aligned with diagram_prompts
        diagram_prompts: Image generation prompts
        concepts_flowcharts: Flowchart names, index-aligned with flowcharts_prompt
        flowcharts_prompt: Mermaid graph source for each flowchart
    """

    summary: str = ""
    concepts_diagram: Tuple[str, ...] = field(default_factory=tuple)
    diagram_prompts: Tuple[str, ...] = field(default_factory=tuple)
    concepts_flowcharts: Tuple[str, ...] = field(default_factory=tuple)
    flowcharts_prompt: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NoteContent":
        data = data or {}
        return cls(
            summary=str(data.get("summary") or ""),
            concepts_diagram=_string_tuple(data.get("concepts_diagram")),
            diagram_prompts=_string_tuple(data.get("diagram_prompts")),
            concepts_flowcharts=_string_tuple(data.get("concepts_flowcharts")),
            flowcharts_prompt=_string_tuple(data.get("flowcharts_prompt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "concepts_diagram": list(self.concepts_diagram),
            "diagram_prompts": list(self.diagram_prompts),
            "concepts_flowcharts": list(self.concepts_flowcharts),
            "flowcharts_prompt": list(self.flowcharts_prompt),
        }

    def diagram_concept(self, index: int) -> Optional[str]:
        """Concept name for a diagram index, or None when absent/blank."""
        if 0 <= index < len(self.concepts_diagram):
            return self.concepts_diagram[index].strip() or None
        return None

    def flowchart_name(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.concepts_flowcharts):
            return self.concepts_flowcharts[index].strip() or None
        return None


@dataclass(frozen=True)
class PlannedSection:
    """One section of an AI-produced document plan."""

    content: str = ""
    heading: Optional[str] = None
    include_image: bool = False
    image_caption: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannedSection":
        if not isinstance(data, dict):
            raise ValueError(f"Planned section must be an object, got {type(data).__name__}")
        include = data.get("includeImage", data.get("include_image", False))
        caption = data.get("imageCaption", data.get("image_caption"))
        return cls(
            content=str(data.get("content") or ""),
            heading=(str(data["heading"]) if data.get("heading") else None),
            include_image=bool(include),
            image_caption=(str(caption) if caption else None),
        )


@dataclass(frozen=True)
class DocumentPlan:
    """Ordered sections plus a title, as proposed by the AI collaborator."""

    title: str
    sections: Tuple[PlannedSection, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentPlan":
        """Parse a plan dict.

        Raises:
            ValueError: If the dict lacks a sections list
        """
        if not isinstance(data, dict):
            raise ValueError("Document plan must be an object")
        sections = data.get("sections")
        if not isinstance(sections, list):
            raise ValueError("Document plan has no sections list")
        return cls(
            title=str(data.get("title") or "").strip(),
            sections=tuple(PlannedSection.from_dict(item) for item in sections),
        )
