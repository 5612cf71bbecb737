"""Note Processing Pipeline

Main orchestration logic for turning raw input into a notes PDF.
"""
import logging
from typing import Callable, List, Optional

from .assembler import DocumentAssembler
from .config import MIN_INPUT_CHARS, PROGRESS_STEPS
from .exceptions import NoteFlowError, PipelineStepError
from .note_content import DocumentPlan, NoteContent
from .processing_options import NoteRequest, PipelineOptions
from .processing_result import PipelineResult, VisualResult
from .utils import detect_processing_issue, format_file_size, validate_upload
from .visual_batch import generate_all_diagrams, generate_all_flowcharts

logger = logging.getLogger(__name__)


def short_input_notes(text: str) -> NoteContent:
    """Canned notes for text too short to be worth an AI call."""
    return NoteContent(summary=f'Your input "{text}" is too short for detailed analysis.')


class NotePipeline:
    """Note processing pipeline orchestrator.

    This class orchestrates the complete workflow:
    1. Validation - check upload type and size
    2. Notes - AI summary plus diagram and flowchart concepts
    3. Diagrams - concurrent image generation, one per concept
    4. Flowcharts - concurrent mermaid rasterization, one per source
    5. Plan - optional AI section plan (failure falls back to positional order)
    6. PDF Generation - assemble sections and render

    Attributes:
        notes: Note generator (beautify / plan_document)
        diagram_client: Diagram image client, or None to skip diagrams
        flowchart_renderer: Flowchart renderer, or None to skip flowcharts
        assembler: Document assembler
        progress_callback: Optional callback for progress updates (progress, desc)
    """

    def __init__(
        self,
        note_generator,
        diagram_client=None,
        flowchart_renderer=None,
        assembler: Optional[DocumentAssembler] = None,
        progress_callback: Optional[Callable[[float, str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.notes = note_generator
        self.diagram_client = diagram_client
        self.flowchart_renderer = flowchart_renderer
        self._logger = logger or globals()["logger"]
        self.assembler = assembler or DocumentAssembler(logger=self._logger)
        self.progress = progress_callback or (lambda p, d: None)

    def process(self, request: NoteRequest, options: Optional[PipelineOptions] = None) -> PipelineResult:
        """Execute the complete pipeline.

        Args:
            request: User input (text or file)
            options: Processing configuration options

        Returns:
            PipelineResult with notes, visuals and the PDF

        Raises:
            Does not raise - all errors are captured in PipelineResult.error
        """
        options = options or PipelineOptions()
        try:
            # Step 1: Validation
            self.progress(PROGRESS_STEPS["VALIDATE"], "Validating input...")
            self._validate(request)

            # Step 2: Notes
            self.progress(PROGRESS_STEPS["NOTES"], "Generating notes...")
            notes = self._run_step("notes", self._generate_notes, request)

            # Step 3-4: Visuals
            diagrams = self._generate_diagrams(notes, options)
            flowcharts = self._generate_flowcharts(notes, options)

            # Step 5: Plan
            plan = self._plan(request, notes, diagrams, flowcharts, options)

            # Step 6: PDF
            self.progress(PROGRESS_STEPS["PDF_BUILD"], "Building PDF...")
            document = self.assembler.assemble(notes, diagrams, flowcharts, plan)

            self.progress(PROGRESS_STEPS["COMPLETE"], "Complete!")

            message = f"✅ Notes ready: {document.page_count} page(s), {document.visual_count} visual(s)"
            if document.degraded:
                message = f"⚠️ PDF generated with errors: {document.error}"
            return PipelineResult(
                status="completed",
                status_message=message,
                notes=notes,
                document=document,
                diagram_results=diagrams,
                flowchart_results=flowcharts,
                potential_processing_issue=detect_processing_issue(notes.summary),
            )

        except Exception as e:
            self._logger.error("Pipeline failed: %s", e)
            return PipelineResult(
                status="failed",
                status_message=f"Processing failed: {str(e)}",
                error=str(e),
            )

    def _run_step(self, step_name: str, func, *args):
        """Run one step, wrapping unexpected exceptions with the step name."""
        try:
            return func(*args)
        except NoteFlowError:
            raise
        except Exception as e:
            raise PipelineStepError(step_name, e) from e

    def _validate(self, request: NoteRequest) -> None:
        """
        Raises:
            UnsupportedInputError: If the upload type is not accepted
            FileSizeLimitExceededError: If the upload is too large
        """
        if request.is_text:
            return
        validate_upload(request.mime_type, len(request.file_bytes))
        self._logger.info(
            "Accepted %s upload %r (%s)",
            request.mime_type, request.filename or "", format_file_size(len(request.file_bytes)),
        )

    def _generate_notes(self, request: NoteRequest) -> NoteContent:
        if request.is_text and len(request.text.strip()) < MIN_INPUT_CHARS:
            self._logger.info("Input shorter than %d characters, skipping AI", MIN_INPUT_CHARS)
            return short_input_notes(request.text.strip())
        if request.is_text:
            return self.notes.beautify(text=request.text)
        return self.notes.beautify(
            file_bytes=request.file_bytes, mime_type=request.mime_type, filename=request.filename,
        )

    def _generate_diagrams(self, notes: NoteContent, options: PipelineOptions) -> List[VisualResult]:
        if not (options.generate_diagrams and self.diagram_client and notes.diagram_prompts):
            return []
        self.progress(PROGRESS_STEPS["DIAGRAMS"], f"Generating {len(notes.diagram_prompts)} diagram(s)...")
        return generate_all_diagrams(
            notes.diagram_prompts,
            self.diagram_client,
            max_workers=options.max_workers,
            timeout=options.visual_timeout,
            logger=self._logger,
        )

    def _generate_flowcharts(self, notes: NoteContent, options: PipelineOptions) -> List[VisualResult]:
        if not (options.generate_flowcharts and self.flowchart_renderer and notes.flowcharts_prompt):
            return []
        self.progress(PROGRESS_STEPS["FLOWCHARTS"], f"Rendering {len(notes.flowcharts_prompt)} flowchart(s)...")
        return generate_all_flowcharts(
            notes.flowcharts_prompt,
            notes.concepts_flowcharts,
            self.flowchart_renderer,
            max_workers=options.max_workers,
            timeout=options.visual_timeout,
            logger=self._logger,
        )

    def _plan(
        self,
        request: NoteRequest,
        notes: NoteContent,
        diagrams: List[VisualResult],
        flowcharts: List[VisualResult],
        options: PipelineOptions,
    ) -> Optional[DocumentPlan]:
        """Ask for a document plan; any failure means positional assembly."""
        if not options.use_document_plan or not notes.summary:
            return None
        if request.is_text and len(request.text.strip()) < MIN_INPUT_CHARS:
            return None

        self.progress(PROGRESS_STEPS["PLAN"], "Planning document structure...")
        user_input = request.text if request.is_text else f"Uploaded {request.mime_type} file {request.filename or ''}".strip()
        try:
            return self.notes.plan_document(
                user_input,
                notes,
                diagram_count=sum(1 for result in diagrams if result.is_ready),
                flowchart_count=sum(1 for result in flowcharts if result.is_ready),
            )
        except Exception as e:
            self._logger.warning("Document planning failed, using positional layout: %s", e)
            return None
