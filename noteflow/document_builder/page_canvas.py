"""Page Canvas Module

Append-only sequence of fixed-size pages with a single write cursor.

Coordinates are PDF points with the origin at the bottom-left corner, the
same convention reportlab's canvas uses. The cursor's y therefore starts
at page_height - margin and decreases as content is placed. Pages record
draw commands; nothing touches reportlab until the builder serializes them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from ..config import MARGIN, PAGE_HEIGHT, PAGE_WIDTH

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float]


@dataclass(frozen=True)
class TextRun:
    """One line of text drawn with its baseline at (x, y)."""

    text: str
    font: str
    size: float
    color: Color
    x: float
    y: float


@dataclass(frozen=True)
class ImagePlacement:
    """A decoded image drawn with its lower-left corner at (x, y)."""

    image: Any  # EmbeddedImage
    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height


DrawCommand = Union[TextRun, ImagePlacement]


@dataclass
class Page:
    """A fixed-size drawing surface holding draw commands in order."""

    number: int
    width: float = PAGE_WIDTH
    height: float = PAGE_HEIGHT
    commands: List[DrawCommand] = field(default_factory=list)

    @property
    def text_runs(self) -> List[TextRun]:
        return [c for c in self.commands if isinstance(c, TextRun)]

    @property
    def images(self) -> List[ImagePlacement]:
        return [c for c in self.commands if isinstance(c, ImagePlacement)]

    @property
    def is_empty(self) -> bool:
        return not self.commands


class PageCanvas:
    """Pages plus a cursor, advanced strictly forward.

    Only the last page can receive commands. The cursor invariant is
    margin <= y <= page_height - margin after every operation; any move
    that would go below the margin appends a new page instead.

    Attributes:
        pages: All pages created so far, in order
        y: Cursor position on the current page
    """

    def __init__(
        self,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
        logger: Optional[logging.Logger] = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self._logger = logger or globals()["logger"]
        self.pages: List[Page] = []
        self.y = self.top
        self._append_page()

    @property
    def top(self) -> float:
        return self.page_height - self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def current_page(self) -> Page:
        return self.pages[-1]

    @property
    def page_index(self) -> int:
        return len(self.pages) - 1

    @property
    def remaining_height(self) -> float:
        """Vertical space left above the bottom margin."""
        return self.y - self.margin

    def _append_page(self) -> None:
        self.pages.append(Page(len(self.pages) + 1, self.page_width, self.page_height))
        self.y = self.top

    def new_page(self) -> None:
        """Start a new page and reset the cursor to the top margin."""
        self._append_page()
        self._logger.debug("Started page %d", len(self.pages))

    def ensure_space(self, required_height: float) -> bool:
        """
        Start a new page if required_height does not fit above the margin.

        A page with nothing drawn on it is reused from the top instead of
        being followed by another blank page, so content taller than a
        whole page still gets placed.

        Returns:
            True if a page break happened
        """
        if self.y - required_height >= self.margin:
            return False
        if self.current_page.is_empty:
            self.y = self.top
            return False
        self.new_page()
        return True

    def move_to(self, y: float) -> None:
        """Move the cursor to y, breaking to a new page if y is below the margin."""
        if y < self.margin:
            self.new_page()
        else:
            self.y = min(y, self.top)

    def advance(self, amount: float) -> None:
        """Move the cursor down by amount."""
        self.move_to(self.y - amount)

    def add(self, command: DrawCommand) -> None:
        """Record a draw command on the current page."""
        self.current_page.commands.append(command)

    def finished_pages(self) -> List[Page]:
        """Pages to serialize: trailing blank pages dropped, the first always kept."""
        pages = list(self.pages)
        while len(pages) > 1 and pages[-1].is_empty:
            pages.pop()
        return pages
