from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

class AssessmentType(str, Enum):
    """
    Assessment vocabulary used by the portal.
    Values are the Russian labels stored with each sheet.
    """
    EXAM = "экзамен"
    PASS_FAIL = "зачёт"
    TERM_PAPER = "КП"
    GRADED_PASS_FAIL = "дифзачёт"
    UNKNOWN = "неизвестно"

@dataclass
class StudentRecord:
    """One table row: a student's scores on a single sheet."""
    gradebook_id: str
    score1: Optional[int] = None
    score2: Optional[int] = None
    score3: Optional[int] = None
    score4: Optional[int] = None   # No source column maps here
    total: Optional[int] = None
    grade: Optional[str] = None

@dataclass
class GradeSheet:
    """
    A 'ведомость': one assessment event for one group/subject/term.
    Identity for upserts is `identity_key`.
    """
    faculty: str
    group_name: str
    course: int
    academic_year: str
    semester: int
    subject: str
    assessment_type: str
    closed: bool
    students: List[StudentRecord] = field(default_factory=list)

    @property
    def identity_key(self) -> tuple:
        return (
            self.faculty,
            self.group_name,
            self.subject,
            self.academic_year,
            self.semester,
            self.assessment_type,
        )

@dataclass(frozen=True)
class ExtractionContext:
    """
    Caller-supplied context propagated from the crawl loop.
    Anything left as None is inferred from the page or the source URL.
    """
    faculty: Optional[str] = None
    group_name: Optional[str] = None
    academic_year: Optional[str] = None
    semester: Optional[int] = None
    course: Optional[int] = None
    source_url: Optional[str] = None

@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    message: str

@dataclass(frozen=True)
class ParseProgress:
    step: str
    current: int
    total: int
    status: str  # loading | parsing | done | error

@dataclass
class CrawlResult:
    sheets: List[GradeSheet] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    units_total: int = 0
    pages_fetched: int = 0

    @property
    def fetch_failed(self) -> bool:
        """True when not a single page could be fetched (as opposed to pages without grade tables)."""
        return self.pages_fetched == 0

@dataclass
class IngestionSummary:
    saved: int
    records: int
    used_demo: bool
    message: str
    errors: List[str] = field(default_factory=list)
