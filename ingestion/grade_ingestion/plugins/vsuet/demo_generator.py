import logging
import random
from typing import List, Optional

from ingestion.grade_ingestion.core.schemas import AssessmentType, GradeSheet, StudentRecord
from ingestion.grade_ingestion.plugins.vsuet.row_standardizer import GradeRowStandardizer

logger = logging.getLogger(__name__)

class DemoDataGenerator:
    """
    Synthetic, schema-valid grade sheets with the shape of the real portal.
    Used as a fallback source and in tests; never mixed with live records.
    Totals and grades go through GradeRowStandardizer like extracted rows.
    """

    FACULTIES = [
        "Информационные технологии",
        "Экономический",
        "Механический",
        "Химическая технология",
        "Строительный",
        "Технологический",
    ]

    GROUP_PREFIXES = ["ИС", "ПИ", "БИ", "ЭК", "МН", "ТМ", "ХТ", "СТ"]

    SUBJECTS = [
        "Программирование",
        "Базы данных",
        "Алгоритмы",
        "Математика",
        "Физика",
        "Химия",
        "Английский язык",
        "История",
        "Экономика",
        "Менеджмент",
    ]

    ASSESSMENT_WEIGHTS = [
        (AssessmentType.EXAM, 45),
        (AssessmentType.PASS_FAIL, 45),
        (AssessmentType.TERM_PAPER, 5),
        (AssessmentType.GRADED_PASS_FAIL, 5),
    ]

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def generate(self, years: List[str], faculty: Optional[str] = None) -> List[GradeSheet]:
        faculties = [faculty] if faculty else self.FACULTIES
        sheets = []

        for fac in faculties:
            # 2-4 groups per faculty
            for g in range(self.rng.randint(2, 4)):
                group_name = f"{self.GROUP_PREFIXES[g % len(self.GROUP_PREFIXES)]}-{21 + g}"
                roster = self._make_roster(years[0] if years else "2023-2024")

                for course, year in enumerate(years, start=1):
                    for semester in (1, 2):
                        sheets.extend(self._make_semester(fac, group_name, min(course, 6), year, semester, roster))

        logger.info(f"[Demo] Generated {len(sheets)} sheets for {len(faculties)} facult(y/ies), years {years}")
        return sheets

    def _make_roster(self, admission_year: str) -> List[str]:
        """Gradebook numbers: admission year + 4 unique digits. Shared across a group's sheets."""
        prefix = admission_year.split('-')[0]
        size = self.rng.randint(15, 24)
        return [f"{prefix}{n}" for n in self.rng.sample(range(1000, 10000), size)]

    def _make_semester(self, faculty, group_name, course, year, semester, roster) -> List[GradeSheet]:
        # 2-4 distinct subjects per semester
        subjects = self.rng.sample(self.SUBJECTS, self.rng.randint(2, 4))
        types, weights = zip(*self.ASSESSMENT_WEIGHTS)
        sheets = []

        for subject in subjects:
            assessment = self.rng.choices(types, weights=weights)[0].value
            students = [
                GradeRowStandardizer.standardize(
                    StudentRecord(
                        gradebook_id=gradebook,
                        score1=self.rng.randint(1, 30),
                        score2=self.rng.randint(1, 30),
                        score3=self.rng.randint(1, 40),
                    ),
                    assessment,
                )
                for gradebook in roster
            ]

            sheets.append(GradeSheet(
                faculty=faculty,
                group_name=group_name,
                course=course,
                academic_year=year,
                semester=semester,
                subject=subject,
                assessment_type=assessment,
                closed=True,
                students=students,
            ))
        return sheets
