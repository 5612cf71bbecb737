"""Flowchart Renderer

Rasterizes mermaid flowchart source to PNG with mermaid-cli (mmdc). When
mmdc is missing or fails, a Pillow-drawn card showing the source text is
returned instead, so a flowchart concept still gets an image.
"""
import logging
import os
import re
import shutil
import subprocess
import tempfile
from io import BytesIO
from typing import List, Optional

from PIL import Image, ImageDraw, ImageFont

from .config import (
    DEFAULT_MMDC_COMMAND,
    FALLBACK_FLOWCHART_SIZE,
    FALLBACK_MAX_LINE_CHARS,
    FALLBACK_MAX_LINES,
    MMDC_TIMEOUT,
)
from .exceptions import FlowchartRenderError

logger = logging.getLogger(__name__)

GRAPH_HEADER = "flowchart TD\n"


def ensure_graph_header(mermaid_code: str) -> str:
    """
    Prepend a flowchart declaration when the source lacks one.

    Examples:
        >>> ensure_graph_header("A --> B")
        'flowchart TD\\nA --> B'
        >>> ensure_graph_header("graph LR\\nA --> B")
        'graph LR\\nA --> B'
    """
    head = mermaid_code.strip().lower()
    if head.startswith("graph") or head.startswith("flowchart"):
        return mermaid_code
    return GRAPH_HEADER + mermaid_code


def _ascii(text: str) -> str:
    return text.encode("ascii", "replace").decode("ascii")


def render_fallback_flowchart(mermaid_code: str, name: str) -> bytes:
    """
    Draw the mermaid source as text on a plain card.

    Args:
        mermaid_code: Flowchart source shown on the card
        name: Flowchart name for the card title

    Returns:
        PNG bytes
    """
    width, height = FALLBACK_FLOWCHART_SIZE
    image = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    draw.rectangle((10, 10, width - 11, height - 11), outline="#9999cc", width=2)
    draw.text((20, 20), _ascii(f"Flowchart: {name}"), fill="#333333", font=font)
    draw.text(
        (20, 50),
        "This is a text representation of the flowchart code:",
        fill="#555555",
        font=font,
    )

    lines = mermaid_code.split("\n")
    shown = lines[:FALLBACK_MAX_LINES]
    for number, line in enumerate(shown):
        draw.text((30, 80 + number * 18), _ascii(line[:FALLBACK_MAX_LINE_CHARS]), fill="#333333", font=font)
    if len(lines) > len(shown):
        draw.text((30, 80 + len(shown) * 18), "...", fill="#333333", font=font)

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class FlowchartRenderer:
    """Turns mermaid source into PNG bytes.

    Attributes:
        mmdc_command: mmdc executable (or a .js entry point run with node)
        timeout: Seconds allowed for one mmdc run
        use_fallback: Return a text card instead of raising when mmdc fails
    """

    def __init__(
        self,
        mmdc_command: Optional[str] = None,
        timeout: float = MMDC_TIMEOUT,
        use_fallback: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.mmdc_command = mmdc_command or os.getenv("MMDC_PATH") or DEFAULT_MMDC_COMMAND
        self.timeout = timeout
        self.use_fallback = use_fallback
        self._logger = logger or globals()["logger"]

    def is_available(self) -> bool:
        """True if the mmdc command can be found."""
        return shutil.which(self.mmdc_command) is not None or os.path.isfile(self.mmdc_command)

    def _command(self) -> List[str]:
        if self.mmdc_command.endswith(".js"):
            return ["node", self.mmdc_command]
        return [self.mmdc_command]

    def render(self, mermaid_code: str, name: str) -> bytes:
        """
        Render a flowchart, falling back to a text card if enabled.

        Raises:
            FlowchartRenderError: If mmdc fails and the fallback is disabled
        """
        try:
            return self.render_with_mmdc(mermaid_code, name)
        except FlowchartRenderError as e:
            if not self.use_fallback:
                raise
            self._logger.warning("Using fallback rendering for flowchart %r: %s", name, e)
            return render_fallback_flowchart(mermaid_code, name)

    def render_with_mmdc(self, mermaid_code: str, name: str) -> bytes:
        """
        Run mermaid-cli on the source in a temporary directory.

        Returns:
            PNG bytes

        Raises:
            FlowchartRenderError: If mmdc is missing, fails, times out,
                or writes an empty file
        """
        source = ensure_graph_header(mermaid_code)
        stem = re.sub(r"[^a-z0-9]", "_", name.lower()) or "flowchart"

        with tempfile.TemporaryDirectory(prefix="flowchart-") as temp_dir:
            input_path = os.path.join(temp_dir, f"{stem}.mmd")
            output_path = os.path.join(temp_dir, f"{stem}.png")
            with open(input_path, "w", encoding="utf-8") as f:
                f.write(source)

            command = self._command() + ["-i", input_path, "-o", output_path, "-b", "transparent"]
            self._logger.debug("Running %s", " ".join(command))
            try:
                subprocess.run(command, check=True, capture_output=True, timeout=self.timeout)
            except FileNotFoundError as e:
                raise FlowchartRenderError(f"mermaid-cli not found: {command[0]}") from e
            except subprocess.TimeoutExpired as e:
                raise FlowchartRenderError(f"mermaid-cli timed out after {self.timeout}s") from e
            except subprocess.CalledProcessError as e:
                stderr = (e.stderr or b"").decode("utf-8", "replace").strip()
                raise FlowchartRenderError(
                    f"mermaid-cli exited with {e.returncode}: {stderr[:300]}"
                ) from e

            if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
                raise FlowchartRenderError("Generated PNG is empty")

            with open(output_path, "rb") as f:
                return f.read()
