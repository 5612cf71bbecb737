"""Note Generator

AI collaborator that turns raw input into structured notes and proposes a
section plan for the PDF. Both calls use OpenAI chat completions (JSON
mode except for audio) and are parsed into NoteContent / DocumentPlan.
"""
import base64
import json
import logging
import os
from typing import Any, Dict, List, Optional

from openai import OpenAI

from .config import AUDIO_INPUT_FORMATS, DEFAULT_OPENAI_AUDIO_MODEL, DEFAULT_OPENAI_MODEL
from .exceptions import NoteGenerationError, UnsupportedInputError
from .note_content import DocumentPlan, NoteContent

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 2048
USER_INPUT_PREVIEW_CHARS = 200

BEAUTIFY_SYSTEM_PROMPT = """You are an advanced Note Beautification System designed to transform raw input into well-structured notes.

If you cannot properly analyze the content or if the content appears to be blank or empty, respond with a clear statement about this limitation. Do not fabricate content that isn't there.

Respond with a JSON object with exactly these keys:
- "summary": concise and clear summary of the entire input (or a statement about being unable to extract meaningful content)
- "concepts_diagram": list of concepts that would be easier to understand with a diagram (empty if none)
- "diagram_prompts": for each concept above, an image generation prompt for a clean educational diagram
- "concepts_flowcharts": list of processes that are better represented as a flowchart (empty if none)
- "flowcharts_prompt": for each process above, valid mermaid.js flowchart code

Flowchart rules:
1. Always start with 'flowchart TD' or another valid mermaid diagram type
2. Keep node ids simple (A, B, C) and put descriptive text in the labels
3. Put labels containing parentheses or special characters in double quotes: A["Matrix (U, V)"]
4. End each line with a semicolon
5. Keep flowcharts small and focused"""

IMAGE_SYSTEM_ADDENDUM = """

For images: first describe what you see in detail. If the image appears blank or contains no meaningful content, say so explicitly and do not make up content."""

PDF_SYSTEM_ADDENDUM = """

For PDFs: first describe what the document contains. If it appears blank or unreadable, say so explicitly and do not make up content."""

PLAN_SYSTEM_PROMPT = """You are an expert document designer creating educational content with a focus on clarity and visual organization.
Create a structured document that integrates text explanations with the available diagrams and flowcharts.

1. Create a clear, descriptive title that reflects the document content
2. Organize content into logical sections with clear headings
3. For each section, provide educational text that explains concepts clearly
4. Mark the sections where a diagram or flowchart should be placed and give each a caption
5. Use the concept or flowchart name in the heading of a section that shows it
6. Use a professional, educational tone throughout

Respond with a JSON object:
{"title": str, "sections": [{"heading": str, "content": str, "includeImage": bool, "imageCaption": str}]}"""


def _parse_json(content: Optional[str], what: str) -> Dict[str, Any]:
    if not content or not content.strip():
        raise NoteGenerationError(f"Empty {what} response from model")
    content = content.strip()
    # Replies without JSON mode often come wrapped in a markdown fence
    if content.startswith("```"):
        content = content.strip("`").strip()
        if content.startswith("json"):
            content = content[4:]
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise NoteGenerationError(f"Malformed {what} JSON: {e}") from e
    if not isinstance(data, dict):
        raise NoteGenerationError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


class NoteGenerator:
    """OpenAI-backed note beautifier and document planner."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        audio_model: Optional[str] = None,
        client: Optional[OpenAI] = None,
        temperature: float = 0.7,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the note generator.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY env var.
            model: Chat model name. If None, reads NOTEFLOW_OPENAI_MODEL or uses the default.
            audio_model: Model for audio uploads. If None, reads NOTEFLOW_OPENAI_AUDIO_MODEL or uses the default.
            client: Pre-built OpenAI client (tests pass a mock here)
            temperature: Sampling temperature for note generation
            logger: Logger for request outcomes
        """
        self._logger = logger or globals()["logger"]
        self.model = model or os.getenv("NOTEFLOW_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL
        self.audio_model = audio_model or os.getenv("NOTEFLOW_OPENAI_AUDIO_MODEL") or DEFAULT_OPENAI_AUDIO_MODEL
        self.temperature = temperature

        if client is None:
            api_key = api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError(
                    "OPENAI_API_KEY not found. "
                    "Set it in .env file or pass as parameter."
                )
            client = OpenAI(api_key=api_key)
        self.client = client

    def _complete(
        self,
        messages: List[Dict[str, Any]],
        temperature: float,
        model: Optional[str] = None,
        json_mode: bool = True,
    ) -> Optional[str]:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = self.client.chat.completions.create(
            model=model or self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=MAX_OUTPUT_TOKENS,
            **kwargs,
        )
        return response.choices[0].message.content

    def build_messages(
        self,
        text: Optional[str] = None,
        file_bytes: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Build the chat messages for a beautify call.

        Images go in as image_url data URIs, PDFs as file parts, mp3/wav
        as input_audio parts. Plain-text uploads are decoded and sent like
        pasted text.

        Raises:
            UnsupportedInputError: For any other file type
        """
        if not file_bytes:
            return self._text_messages(text or "")

        mime_type = mime_type or "unknown"
        if mime_type.startswith("text/"):
            return self._text_messages(file_bytes.decode("utf-8", errors="replace"))

        encoded = base64.b64encode(file_bytes).decode()
        system_prompt = BEAUTIFY_SYSTEM_PROMPT
        if mime_type.startswith("image/"):
            system_prompt += IMAGE_SYSTEM_ADDENDUM
            part = {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}}
            instruction = (
                f"This input is an image of type: {mime_type}. "
                "Analyze it carefully and provide structured notes based on what you actually see."
            )
        elif mime_type == "application/pdf":
            system_prompt += PDF_SYSTEM_ADDENDUM
            part = {
                "type": "file",
                "file": {
                    "filename": filename or "document.pdf",
                    "file_data": f"data:application/pdf;base64,{encoded}",
                },
            }
            instruction = (
                "This input is a PDF document. Analyze its content carefully and provide "
                "structured notes based on what it actually contains."
            )
        elif mime_type in AUDIO_INPUT_FORMATS:
            part = {
                "type": "input_audio",
                "input_audio": {"data": encoded, "format": AUDIO_INPUT_FORMATS[mime_type]},
            }
            instruction = (
                f"This input is an audio file of type: {mime_type}. Analyze what is said and "
                "provide structured notes. If you cannot make out the audio, say so explicitly."
            )
        else:
            raise UnsupportedInputError(mime_type)

        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": [part, {"type": "text", "text": instruction}]},
        ]

    @staticmethod
    def _text_messages(text: str) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": BEAUTIFY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"This input is text content. Please analyze and structure the following content:\n\n{text}",
            },
        ]

    def beautify(
        self,
        text: Optional[str] = None,
        file_bytes: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> NoteContent:
        """
        Turn raw text or an uploaded file into structured notes.

        Audio goes to the audio-capable model without JSON mode, which
        those models do not offer; the reply is still parsed as JSON.

        Returns:
            NoteContent

        Raises:
            UnsupportedInputError: For file types the model cannot read
            NoteGenerationError: If the model returns nothing usable
        """
        messages = self.build_messages(text, file_bytes, mime_type, filename)
        is_audio = bool(file_bytes) and mime_type in AUDIO_INPUT_FORMATS
        model = self.audio_model if is_audio else self.model
        self._logger.info(
            "Generating notes with %s (%s input)",
            model, mime_type if file_bytes else "text",
        )
        content = self._complete(messages, self.temperature, model=model, json_mode=not is_audio)
        data = _parse_json(content, "notes")
        notes = NoteContent.from_dict(data)
        self._logger.info(
            "Notes generated: %d diagram concept(s), %d flowchart(s)",
            len(notes.concepts_diagram), len(notes.concepts_flowcharts),
        )
        return notes

    def plan_document(
        self,
        user_input: str,
        notes: NoteContent,
        diagram_count: int,
        flowchart_count: int,
    ) -> DocumentPlan:
        """
        Ask the model for a titled section plan.

        Args:
            user_input: Original input text (or a description of the file)
            notes: Notes produced by beautify()
            diagram_count: Number of diagrams that were generated
            flowchart_count: Number of flowcharts that were generated

        Raises:
            NoteGenerationError: If the plan JSON is malformed or has no sections list
        """
        preview = user_input[:USER_INPUT_PREVIEW_CHARS]
        if len(user_input) > USER_INPUT_PREVIEW_CHARS:
            preview += "..."

        prompt = f'Based on this user input: "{preview}"\n\nI have already generated these notes:\n\nSummary:\n{notes.summary}\n'
        if diagram_count > 0:
            prompt += f"\nI have {diagram_count} diagram(s) for these concepts:\n"
            for i, concept in enumerate(notes.concepts_diagram[:diagram_count]):
                prompt += f"{i + 1}. {concept}\n"
        if flowchart_count > 0:
            prompt += f"\nI have {flowchart_count} flowchart(s) for these processes:\n"
            for i, name in enumerate(notes.concepts_flowcharts[:flowchart_count]):
                prompt += f"{i + 1}. {name}\n"
        prompt += "\nPlease create a document structure that integrates these elements into a cohesive educational document."

        data = _parse_json(
            self._complete(
                [
                    {"role": "system", "content": PLAN_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
            ),
            "document plan",
        )
        try:
            plan = DocumentPlan.from_dict(data)
        except ValueError as e:
            raise NoteGenerationError(str(e)) from e
        self._logger.info("Document plan: %r with %d section(s)", plan.title, len(plan.sections))
        return plan
