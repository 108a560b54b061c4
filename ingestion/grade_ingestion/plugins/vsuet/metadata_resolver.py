import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional
from bs4 import BeautifulSoup, Tag

from ingestion.grade_ingestion.core.academic_years import current_academic_start
from ingestion.grade_ingestion.core.schemas import AssessmentType, ExtractionContext
from ingestion.grade_ingestion.plugins.vsuet import constants as C

logger = logging.getLogger(__name__)

DEFAULT_FACULTY = "Факультет"
DEFAULT_GROUP = "Группа"

@dataclass(frozen=True)
class SheetMetadata:
    faculty: str
    group_name: str
    course: int
    academic_year: str
    semester: int
    subject: str
    assessment_type: str
    closed: bool

class MetadataResolver:
    """
    Infers what a grade table is about from the text around it.

    The nearest caption or heading before the table is the primary source; the
    page <title> and first <h1> are fallbacks for the subject and the assessment
    type. Faculty and group come from the same heading text and otherwise from
    the crawl context. Year and semester come from the context, then from the
    `year=` / `semester=` query parameters of the source URL.
    """

    HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'caption']

    def __init__(self, soup: BeautifulSoup, context: ExtractionContext, today: Optional[date] = None):
        self.soup = soup
        self.context = context
        self.today = today or date.today()
        self.page_title = self._page_title()

    def resolve(self, table: Tag, ordinal: int, has_grade_column: bool) -> SheetMetadata:
        heading = self.heading_text(table)
        table_text = table.get_text(" ", strip=True)

        semester = self._resolve_semester()
        return SheetMetadata(
            faculty=self._match(C.P_FACULTY, heading) or self.context.faculty or DEFAULT_FACULTY,
            group_name=self._match(C.P_GROUP, heading) or self.context.group_name or DEFAULT_GROUP,
            course=self.context.course or math.ceil(semester / 2),
            academic_year=self._resolve_year(),
            semester=semester,
            subject=self._resolve_subject(heading, ordinal),
            assessment_type=self._resolve_assessment_type(heading, has_grade_column),
            closed=self._resolve_closed(table, heading, table_text),
        )

    # --- TEXT SOURCES ---

    def heading_text(self, table: Tag) -> str:
        parts = []
        caption = table.find('caption')
        if caption:
            parts.append(caption.get_text(" ", strip=True))

        previous = table.find_previous(self._is_heading)
        if previous:
            parts.append(previous.get_text(" ", strip=True))
        return "\n".join(p for p in parts if p)

    def _is_heading(self, tag: Tag) -> bool:
        if tag.name in self.HEADING_TAGS:
            return True
        return 'title' in (tag.get('class') or [])

    def _page_title(self) -> str:
        if self.soup.title and self.soup.title.get_text(strip=True):
            return self.soup.title.get_text(" ", strip=True)
        h1 = self.soup.find('h1')
        return h1.get_text(" ", strip=True) if h1 else ""

    @staticmethod
    def _match(pattern: re.Pattern, text: str) -> Optional[str]:
        if not text: return None
        match = pattern.search(text)
        if not match: return None
        value = match.group(1).strip(" :-")
        return value or None

    # --- FIELDS ---

    def _resolve_subject(self, heading: str, ordinal: int) -> str:
        subject = self._match(C.P_SUBJECT, heading) or self._match(C.P_SUBJECT, self.page_title)
        if subject:
            return subject
        if self.page_title:
            return self.page_title
        return f"Предмет {ordinal}"

    def _resolve_assessment_type(self, heading: str, has_grade_column: bool) -> str:
        for text in (heading, self.page_title):
            lowered = text.lower()
            for pattern, member in C.ASSESSMENT_PATTERNS:
                if pattern.search(lowered):
                    return AssessmentType[member].value

        # A letter-grade column implies a graded exam
        if has_grade_column:
            return AssessmentType.EXAM.value
        return AssessmentType.PASS_FAIL.value

    def _resolve_closed(self, table: Tag, heading: str, table_text: str) -> bool:
        text = re.sub(r"\s+", " ", f"{heading} {table_text}").lower()
        if C.P_OPEN.search(text):
            return False
        if C.P_CLOSED.search(text):
            return True
        # Sheets still being filled in carry editable inputs
        return table.find(C.EDITABLE_TAGS) is None

    def _resolve_year(self) -> str:
        if self.context.academic_year:
            return self.context.academic_year
        match = C.P_URL_YEAR.search(self.context.source_url or "")
        if match:
            return match.group(1)
        start = current_academic_start(self.today)
        return f"{start}-{start + 1}"

    def _resolve_semester(self) -> int:
        if self.context.semester in (1, 2):
            return self.context.semester
        match = C.P_URL_SEMESTER.search(self.context.source_url or "")
        if match and match.group(1) in ("1", "2"):
            return int(match.group(1))
        return 1
