import re
from typing import Optional
from ingestion.grade_ingestion.core.schemas import AssessmentType, StudentRecord
from ingestion.grade_ingestion.plugins.vsuet import constants as C

class GradeRowStandardizer:
    """
    Normalizes raw cell values into StudentRecord fields and reconstructs
    the derived fields (total, grade) a sheet did not publish.
    Shared by live extraction and the demo generator.
    """

    NUMBER_PATTERN = re.compile(r'\D')

    @classmethod
    def parse_int(cls, text: Optional[str]) -> Optional[int]:
        """Strips everything but digits (and a leading minus). Empty -> None, never 0."""
        if text is None: return None
        clean = str(text).replace('\xa0', ' ').strip()
        negative = clean.startswith('-')
        digits = cls.NUMBER_PATTERN.sub('', clean)
        if not digits: return None
        value = int(digits)
        return -value if negative else value

    @classmethod
    def digits_only(cls, text: Optional[str]) -> str:
        if not text: return ""
        return cls.NUMBER_PATTERN.sub('', str(text))

    @classmethod
    def normalize_grade(cls, text: Optional[str]) -> Optional[str]:
        if text is None: return None
        clean = re.sub(r'\s+', ' ', str(text).replace('\xa0', ' ')).strip()
        if not clean: return None

        lowered = clean.lower()
        if lowered in ("5", "4", "3", "2"):
            return lowered
        for word, grade in C.GRADE_WORDS:
            if word in lowered:
                return grade
        return clean

    @classmethod
    def compute_total(cls, record: StudentRecord) -> Optional[int]:
        parts = (record.score1, record.score2, record.score3)
        if all(p is None for p in parts):
            return None
        return sum(p or 0 for p in parts)

    @classmethod
    def derive_grade(cls, total: Optional[int], assessment_type: str) -> Optional[str]:
        if total is None: return None

        if assessment_type == AssessmentType.PASS_FAIL:
            return C.GRADE_PASS if total >= C.PASS_THRESHOLD else C.GRADE_FAIL

        for threshold, grade in C.GRADE_THRESHOLDS:
            if total >= threshold:
                return grade
        return C.FAILING_GRADE

    @classmethod
    def standardize(cls, record: StudentRecord, assessment_type: str) -> StudentRecord:
        """Fills total and grade in place when the source left them empty."""
        if record.total is None:
            record.total = cls.compute_total(record)

        record.grade = cls.normalize_grade(record.grade)
        if record.grade is None:
            record.grade = cls.derive_grade(record.total, assessment_type)
        return record

    @classmethod
    def is_valid_gradebook(cls, gradebook_id: Optional[str]) -> bool:
        return bool(gradebook_id) and C.MIN_GRADEBOOK_LENGTH <= len(gradebook_id) <= C.MAX_GRADEBOOK_LENGTH
