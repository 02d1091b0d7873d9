import io
import logging
import re

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from app.schemas.pydantic import StructuredResumeModel

logger = logging.getLogger(__name__)

MARGIN = 50
REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
LINE_HEIGHT_FACTOR = 1.3
BODY_SIZE = 11
BULLET_INDENT = 10

_NON_ASCII = re.compile(r"[^\x00-\x7F]")


@dataclass(frozen=True)
class DrawOp:
    page: int
    x: float
    y: float
    font: str
    size: float
    text: str


@dataclass
class ResumeLayout:
    """Positioned text lines for a rendered resume; page numbers start at 0."""

    page_size: Tuple[float, float]
    page_count: int = 1
    ops: List[DrawOp] = field(default_factory=list)

    def lines(self, page: Optional[int] = None) -> List[str]:
        return [op.text for op in self.ops if page is None or op.page == page]


def _text_width(text: str, font: str, size: float) -> float:
    return pdfmetrics.stringWidth(text, font, size)


class _Flow:
    """Top-down text cursor that wraps to the content width and breaks pages."""

    def __init__(self, page_size: Tuple[float, float]):
        self.width, self.height = page_size
        self.content_width = self.width - 2 * MARGIN
        self.layout = ResumeLayout(page_size=page_size)
        self.page = 0
        self.y = self.height - MARGIN

    def _new_page(self) -> None:
        self.page += 1
        self.layout.page_count += 1
        self.y = self.height - MARGIN

    def _emit(self, text: str, x: float, font: str, size: float, line_height: float) -> None:
        if self.y < MARGIN + line_height:
            self._new_page()
        self.layout.ops.append(DrawOp(self.page, x, self.y, font, size, text))
        self.y -= line_height

    def draw_text(self, text: Optional[str], font: str = REGULAR_FONT, size: float = BODY_SIZE, x: float = MARGIN) -> None:
        line_height = size * LINE_HEIGHT_FACTOR
        sanitized = _NON_ASCII.sub("?", str(text or ""))
        line = ""
        for word in sanitized.split(" "):
            candidate = f"{line} {word}" if line else word
            if _text_width(candidate, font, size) < self.content_width or not line:
                line = candidate
            else:
                self._emit(line, x, font, size, line_height)
                line = word
        self._emit(line, x, font, size, line_height)

    def move_down(self, lines: float = 1) -> None:
        self.y -= BODY_SIZE * LINE_HEIGHT_FACTOR * lines
        if self.y < MARGIN:
            self._new_page()


def layout_resume(resume: StructuredResumeModel, page_size: Tuple[float, float] = LETTER) -> ResumeLayout:
    """
    Lay out a structured resume as positioned lines of text.

    Sections appear in a fixed order (name, contact line, summary,
    experience, education, skills) and empty sections are skipped. The
    result depends only on `resume` and `page_size`.
    """
    flow = _Flow(page_size)

    if resume.name:
        flow.draw_text(resume.name, font=BOLD_FONT, size=18)
        flow.move_down(0.5)

    contact = resume.contact_info
    if contact is not None:
        parts = [p for p in (contact.phone, contact.email, contact.location, contact.linkedin) if p]
        flow.draw_text(" | ".join(parts), size=10)
        flow.move_down(1.5)

    if resume.summary:
        flow.draw_text("Summary", font=BOLD_FONT, size=14)
        flow.move_down(0.3)
        flow.draw_text(resume.summary)
        flow.move_down(1.5)

    if resume.experience:
        flow.draw_text("Experience", font=BOLD_FONT, size=14)
        flow.move_down(0.5)
        for entry in resume.experience:
            company_line = entry.company or ""
            if entry.location:
                company_line += f" | {entry.location}"
            if entry.dates:
                company_line += f" | {entry.dates}"
            flow.draw_text(company_line, font=BOLD_FONT, size=12)
            flow.move_down(0.1)
            if entry.title:
                flow.draw_text(entry.title, font=BOLD_FONT)
                flow.move_down(0.3)
            for accomplishment in entry.accomplishments:
                flow.draw_text(f"- {accomplishment}", x=MARGIN + BULLET_INDENT)
            flow.move_down(1)
        flow.move_down(0.5)

    if resume.education:
        flow.draw_text("Education", font=BOLD_FONT, size=14)
        flow.move_down(0.5)
        for entry in resume.education:
            flow.draw_text(entry.institution or "", font=BOLD_FONT, size=12)
            flow.move_down(0.1)
            degree_line = entry.degree or ""
            if entry.date:
                degree_line += f" | {entry.date}"
            flow.draw_text(degree_line)
            flow.move_down(1)
        flow.move_down(0.5)

    if resume.skills is not None:
        flow.draw_text("Skills", font=BOLD_FONT, size=14)
        flow.move_down(0.5)
        if isinstance(resume.skills, list):
            flow.draw_text(", ".join(resume.skills))
        else:
            for category, skills in resume.skills.items():
                if skills:
                    flow.draw_text(category, font=BOLD_FONT)
                    flow.move_down(0.2)
                    flow.draw_text(", ".join(skills))
                    flow.move_down(0.8)
        flow.move_down(1.5)

    # spacing after the last line can open a page that never gets content
    flow.layout.page_count = max((op.page for op in flow.layout.ops), default=0) + 1
    return flow.layout


def render_resume_pdf(resume: StructuredResumeModel, page_size: Tuple[float, float] = LETTER) -> bytes:
    """Render a structured resume to PDF bytes; identical input gives identical bytes."""
    layout = layout_resume(resume, page_size)
    buffer = io.BytesIO()
    # invariant=1 pins the creation date and document id
    pdf = canvas.Canvas(buffer, pagesize=page_size, invariant=1)
    pdf.setTitle(resume.name)
    pdf.setCreator("Resume Enhancer")

    current_page = 0
    for op in layout.ops:
        while current_page < op.page:
            pdf.showPage()
            current_page += 1
        pdf.setFont(op.font, op.size)
        pdf.drawString(op.x, op.y, op.text)
    pdf.save()
    data = buffer.getvalue()
    logger.info(f"Rendered resume PDF for {resume.name}: {layout.page_count} pages, {len(data)} bytes")
    return data
