"""Document Assembler

Maps generated notes and visual results onto an ordered list of sections,
renders them, and always hands back PDF bytes.

With a document plan, each section that asks for a visual is matched to an
unused result by name, most precise strategy first. Without a plan (or when
the plan cannot be used) sections follow a fixed order: summary, diagrams,
flowcharts. Results that no planned section claimed are appended at the
end, so no generated visual is ever silently dropped.
"""
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from .config import (
    DEFAULT_TITLE,
    DIAGRAM_FALLBACK_HEADING,
    ERROR_HEADING,
    ERROR_SUMMARY_HEADING,
    ERROR_TITLE,
    FLOWCHART_FALLBACK_HEADING,
    MIN_MATCH_LENGTH,
    NO_SUMMARY_TEXT,
    PROCESS_KEYWORDS,
    SUMMARY_HEADING,
)
from .document_builder import DocumentBuilder, render_minimal_pdf
from .exceptions import AssemblyError
from .note_content import DocumentPlan, NoteContent, PlannedSection
from .processing_result import AssembledDocument, VisualResult
from .section import Section, SectionVisual, VisualRole

logger = logging.getLogger(__name__)

NO_VISUAL_REASON = "no visual available for this section"

# (heading, caption, flowchart name) -> bool, most precise first
FLOWCHART_STRATEGIES: Tuple[Tuple[str, Callable[[str, str, str], bool]], ...] = (
    ("exact heading", lambda heading, caption, name: bool(heading) and heading == name),
    ("heading contains name", lambda heading, caption, name: len(name) > MIN_MATCH_LENGTH and name in heading),
    ("name contains heading", lambda heading, caption, name: len(heading) > MIN_MATCH_LENGTH and heading in name),
    ("caption contains name", lambda heading, caption, name: len(name) > MIN_MATCH_LENGTH and name in caption),
    (
        "shared keyword",
        lambda heading, caption, name: any(kw in heading and kw in name for kw in PROCESS_KEYWORDS),
    ),
)


def match_flowchart(
    heading: str,
    caption: str,
    candidates: Sequence[VisualResult],
    name_of: Callable[[VisualResult], str],
) -> Optional[Tuple[VisualResult, str]]:
    """
    Find the flowchart a section refers to.

    Strategies are tried in order; within a strategy, candidates are tried
    in index order. Comparison is case-insensitive.

    Returns:
        Tuple of (result, strategy_name), or None
    """
    heading = heading.strip().lower()
    caption = caption.strip().lower()
    for strategy_name, matches in FLOWCHART_STRATEGIES:
        for result in candidates:
            if matches(heading, caption, name_of(result).lower()):
                return result, strategy_name
    return None


def match_diagram(
    heading: str,
    caption: str,
    candidates: Sequence[VisualResult],
    concept_of: Callable[[VisualResult], Optional[str]],
) -> Optional[VisualResult]:
    """Find a diagram whose concept name is contained in (or contains) the heading or caption."""
    heading = heading.strip().lower()
    caption = caption.strip().lower()
    for result in candidates:
        concept = (concept_of(result) or "").lower()
        if not concept:
            continue
        if concept in heading or (heading and heading in concept) or concept in caption:
            return result
    return None


class VisualPool:
    """Diagram and flowchart results plus which of them have been assigned."""

    def __init__(
        self,
        notes: NoteContent,
        diagrams: Sequence[VisualResult],
        flowcharts: Sequence[VisualResult],
    ):
        self.notes = notes
        self.results = {
            VisualRole.DIAGRAM: sorted(diagrams, key=lambda r: r.concept_index),
            VisualRole.FLOWCHART: sorted(flowcharts, key=lambda r: r.concept_index),
        }
        self._used: Set[Tuple[VisualRole, int]] = set()

    def concept_name(self, result: VisualResult) -> Optional[str]:
        """Concept name from the notes, without a positional fallback."""
        return self.notes.diagram_concept(result.concept_index)

    def flowchart_name(self, result: VisualResult) -> Optional[str]:
        return (result.name or "").strip() or self.notes.flowchart_name(result.concept_index)

    def label(self, role: VisualRole, result: VisualResult) -> str:
        """Display name with a positional fallback ("Concept 2", "Flowchart 1")."""
        if role == VisualRole.FLOWCHART:
            return self.flowchart_name(result) or f"Flowchart {result.concept_index + 1}"
        return self.concept_name(result) or f"Concept {result.concept_index + 1}"

    def is_used(self, role: VisualRole, index: int) -> bool:
        return (role, index) in self._used

    def take(self, role: VisualRole, result: VisualResult) -> None:
        key = (role, result.concept_index)
        if key in self._used:
            raise AssemblyError(f"{role.value} {result.concept_index} assigned twice")
        self._used.add(key)

    def unused(self, role: VisualRole, ready: Optional[bool] = None) -> List[VisualResult]:
        """Unassigned results of a role, optionally filtered by readiness."""
        return [
            result for result in self.results[role]
            if not self.is_used(role, result.concept_index)
            and (ready is None or result.is_ready == ready)
        ]

    @property
    def used_count(self) -> int:
        return len(self._used)


class DocumentAssembler:
    """Builds sections from notes and visuals and renders them to PDF bytes.

    assemble() never raises for content problems. Any failure is turned into
    an error document; only if even the bare minimal document cannot be
    written does the original error propagate.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        builder_factory: Callable[..., DocumentBuilder] = DocumentBuilder,
    ):
        """
        Args:
            logger: Logger for matching decisions and fallbacks
            builder_factory: Callable(title, logger=...) returning a DocumentBuilder
        """
        self._logger = logger or globals()["logger"]
        self._builder_factory = builder_factory

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def assemble(
        self,
        notes: Union[NoteContent, Dict[str, Any], None],
        diagrams: Sequence[VisualResult] = (),
        flowcharts: Sequence[VisualResult] = (),
        plan: Union[DocumentPlan, Dict[str, Any], None] = None,
    ) -> AssembledDocument:
        """
        Build and render the document.

        Args:
            notes: Generated note content (or its dict form)
            diagrams: One result per diagram prompt
            flowcharts: One result per flowchart prompt
            plan: Optional AI section plan (or its dict form)

        Returns:
            AssembledDocument with PDF bytes; degraded=True if a fallback was used
        """
        summary = ""
        try:
            if not isinstance(notes, NoteContent):
                notes = NoteContent.from_dict(notes)
            summary = notes.summary
            title, sections = self.build_sections(notes, diagrams, flowcharts, plan)
            return self._render(title, sections)
        except Exception as e:
            self._logger.exception("Document assembly failed, producing error document")
            return self._error_document(e, summary)

    # ------------------------------------------------------------------
    # Section building
    # ------------------------------------------------------------------

    def build_sections(
        self,
        notes: NoteContent,
        diagrams: Sequence[VisualResult] = (),
        flowcharts: Sequence[VisualResult] = (),
        plan: Union[DocumentPlan, Dict[str, Any], None] = None,
    ) -> Tuple[str, List[Section]]:
        """
        Turn notes, visuals and an optional plan into (title, sections).

        A plan that cannot be parsed or walked falls back to positional order.
        """
        if plan is not None:
            try:
                if not isinstance(plan, DocumentPlan):
                    plan = DocumentPlan.from_dict(plan)
                if plan.sections:
                    pool = VisualPool(notes, diagrams, flowcharts)
                    sections = self.build_planned_sections(plan, pool)
                    return plan.title or DEFAULT_TITLE, sections
                self._logger.warning("Document plan has no sections, using positional layout")
            except Exception as e:
                self._logger.warning("Document plan unusable (%s), using positional layout", e)

        pool = VisualPool(notes, diagrams, flowcharts)
        return DEFAULT_TITLE, self.build_positional_sections(pool)

    def build_positional_sections(self, pool: VisualPool) -> List[Section]:
        """Summary first, then one section per diagram, then one per flowchart."""
        sections = [Section(heading=SUMMARY_HEADING, body_text=pool.notes.summary or NO_SUMMARY_TEXT)]
        for role, noun in ((VisualRole.DIAGRAM, "diagram"), (VisualRole.FLOWCHART, "flowchart")):
            for result in pool.results[role]:
                pool.take(role, result)
                name = pool.label(role, result)
                sections.append(Section(
                    heading=name,
                    body_text=f"This {noun} illustrates {name}.",
                    visual=SectionVisual(role, result.outcome),
                    caption=name,
                ))
        return sections

    def build_planned_sections(self, plan: DocumentPlan, pool: VisualPool) -> List[Section]:
        sections = []
        for planned in plan.sections:
            visual = None
            caption = planned.image_caption
            if planned.include_image:
                visual, caption = self._resolve_visual(planned, pool)
            sections.append(Section(
                heading=planned.heading,
                body_text=planned.content,
                visual=visual,
                caption=caption,
            ))
        sections.extend(self._trailing_sections(pool))
        return sections

    def _resolve_visual(
        self,
        planned: PlannedSection,
        pool: VisualPool,
    ) -> Tuple[SectionVisual, Optional[str]]:
        """
        Pick a visual for a planned section that asked for one.

        Order: flowchart by name, diagram by concept, any remaining ready
        flowchart, any remaining ready diagram. If nothing ready is left,
        a failed result matching by name supplies its placeholder.
        """
        heading = planned.heading or ""
        caption = planned.image_caption or ""

        found = self._match_by_name(heading, caption, pool, ready=True)
        if found is None:
            for role in (VisualRole.FLOWCHART, VisualRole.DIAGRAM):
                remaining = pool.unused(role, ready=True)
                if remaining:
                    found = (role, remaining[0])
                    self._logger.info(
                        "Assigned unmatched %s %r to section %r",
                        role.value, pool.label(role, remaining[0]), heading,
                    )
                    break
        if found is None:
            found = self._match_by_name(heading, caption, pool, ready=False)

        if found is None:
            self._logger.warning("Section %r requested a visual but none was available", heading)
            return SectionVisual.failed(VisualRole.DIAGRAM, NO_VISUAL_REASON), planned.image_caption

        role, result = found
        pool.take(role, result)
        return SectionVisual(role, result.outcome), planned.image_caption or pool.label(role, result)

    def _match_by_name(
        self,
        heading: str,
        caption: str,
        pool: VisualPool,
        ready: bool,
    ) -> Optional[Tuple[VisualRole, VisualResult]]:
        match = match_flowchart(
            heading, caption,
            pool.unused(VisualRole.FLOWCHART, ready),
            lambda result: pool.flowchart_name(result) or "",
        )
        if match is not None:
            result, strategy = match
            self._logger.debug(
                "Matched flowchart %r to section %r by %s",
                pool.label(VisualRole.FLOWCHART, result), heading, strategy,
            )
            return VisualRole.FLOWCHART, result

        result = match_diagram(heading, caption, pool.unused(VisualRole.DIAGRAM, ready), pool.concept_name)
        if result is not None:
            self._logger.debug(
                "Matched diagram %r to section %r", pool.concept_name(result), heading
            )
            return VisualRole.DIAGRAM, result
        return None

    def _trailing_sections(self, pool: VisualPool) -> List[Section]:
        """Sections for every result no planned section claimed."""
        sections = []
        leftovers = (
            (VisualRole.FLOWCHART, FLOWCHART_FALLBACK_HEADING, "flowchart", "a process workflow"),
            (VisualRole.DIAGRAM, DIAGRAM_FALLBACK_HEADING, "diagram", "a key concept"),
        )
        for role, fallback_heading, noun, fallback_subject in leftovers:
            for count, result in enumerate(pool.unused(role), start=1):
                pool.take(role, result)
                name = pool.flowchart_name(result) if role == VisualRole.FLOWCHART else pool.concept_name(result)
                self._logger.info("Appending unassigned %s %r as a new section", noun, name)
                sections.append(Section(
                    heading=f"{name or fallback_heading} {count}",
                    body_text=f"This {noun} illustrates {name or fallback_subject}.",
                    visual=SectionVisual(role, result.outcome),
                    caption=pool.label(role, result),
                ))
        return sections

    # ------------------------------------------------------------------
    # Rendering and fallbacks
    # ------------------------------------------------------------------

    def _render(self, title: str, sections: Sequence[Section]) -> AssembledDocument:
        builder = self._builder_factory(title, logger=self._logger)
        builder.add_sections(sections)
        pdf_bytes = builder.finalize()
        return AssembledDocument(
            title=builder.title,
            pdf_bytes=pdf_bytes,
            page_count=builder.page_count,
            visual_count=builder.visual_count,
        )

    def _error_document(self, error: Exception, summary: str) -> AssembledDocument:
        """Two-section error document, or the bare minimal one if that fails too."""
        message = f"An error occurred while generating this PDF: {error}"
        sections = [
            Section(heading=ERROR_HEADING, body_text=message),
            Section(heading=ERROR_SUMMARY_HEADING, body_text=summary or NO_SUMMARY_TEXT),
        ]
        try:
            document = self._render(ERROR_TITLE, sections)
            return replace(document, degraded=True, error=str(error))
        except Exception as fallback_error:
            self._logger.error("Error document failed as well: %s", fallback_error)

        try:
            pdf_bytes = render_minimal_pdf(ERROR_TITLE, message, summary)
        except Exception:
            self._logger.exception("Minimal document failed, nothing left to degrade to")
            raise error
        return AssembledDocument(
            title=ERROR_TITLE,
            pdf_bytes=pdf_bytes,
            page_count=1,
            degraded=True,
            error=str(error),
        )


def assemble_document(
    notes: Union[NoteContent, Dict[str, Any], None],
    diagrams: Sequence[VisualResult] = (),
    flowcharts: Sequence[VisualResult] = (),
    plan: Union[DocumentPlan, Dict[str, Any], None] = None,
    logger: Optional[logging.Logger] = None,
) -> AssembledDocument:
    """Convenience wrapper around DocumentAssembler().assemble()."""
    return DocumentAssembler(logger=logger).assemble(notes, diagrams, flowcharts, plan)
