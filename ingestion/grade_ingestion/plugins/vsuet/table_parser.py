import logging
from datetime import date
from typing import Dict, List, Optional, Tuple
from bs4 import BeautifulSoup, Tag

from ingestion.grade_ingestion.core.schemas import ExtractionContext, GradeSheet, StudentRecord
from ingestion.grade_ingestion.plugins.vsuet import constants as C
from ingestion.grade_ingestion.plugins.vsuet.header_classifier import HeaderClassifier, NOT_FOUND
from ingestion.grade_ingestion.plugins.vsuet.metadata_resolver import MetadataResolver
from ingestion.grade_ingestion.plugins.vsuet.row_standardizer import GradeRowStandardizer

logger = logging.getLogger(__name__)

class GradeTableParser:
    """
    Heuristic extractor for the portal's grade pages.

    1. Gate: every <table> must look like a grade sheet (HeaderClassifier).
    2. Column map: header texts -> roles, first row is the header.
    3. Rows: column extraction, then gradebook and positional score fallbacks.
    4. Normalization: totals and grades reconstructed by GradeRowStandardizer.
    Pure transformation; identical input yields identical output.
    """

    PARSER_VERSION = "vsuet_tables_v1.0"

    POSITIONAL_FIELDS = ("score1", "score2", "score3", "total")

    def __init__(self, html: str, context: Optional[ExtractionContext] = None, today: Optional[date] = None):
        self.html = html
        self.context = context or ExtractionContext()
        self.today = today

    def parse(self) -> List[GradeSheet]:
        soup = BeautifulSoup(self.html or "", 'html.parser')
        resolver = MetadataResolver(soup, self.context, today=self.today)
        sheets = []

        for ordinal, table in enumerate(soup.find_all('table'), start=1):
            sheet = self._process_table(table, ordinal, resolver)
            if sheet:
                sheets.append(sheet)

        logger.debug(f"[{self.PARSER_VERSION}] {len(sheets)} sheet(s) from {self.context.source_url or 'inline html'}")
        return sheets

    def _process_table(self, table: Tag, ordinal: int, resolver: MetadataResolver) -> Optional[GradeSheet]:
        # Layout wrappers: the nested tables are visited on their own
        if table.find('table'): return None

        rows = table.find_all('tr')
        if len(rows) < 2: return None

        # 1. Header Row
        headers = [cell.get_text(" ", strip=True) for cell in rows[0].find_all(['th', 'td'])]
        if not HeaderClassifier.looks_like_grade_sheet(table.get_text(" ", strip=True), headers):
            logger.debug(f"Table {ordinal} skipped: no grade vocabulary")
            return None

        col_map = HeaderClassifier.classify(headers)
        meta = resolver.resolve(table, ordinal, has_grade_column=col_map[C.ROLE_GRADE] != NOT_FOUND)

        # 2. Data Rows
        students = []
        for row in rows[1:]:
            cells = [cell.get_text(" ", strip=True) for cell in row.find_all('td')]
            if len(cells) < 2: continue

            record = self._extract_row(cells, col_map)
            GradeRowStandardizer.standardize(record, meta.assessment_type)

            if not GradeRowStandardizer.is_valid_gradebook(record.gradebook_id):
                continue
            students.append(record)

        if not students:
            return None

        return GradeSheet(
            faculty=meta.faculty,
            group_name=meta.group_name,
            course=meta.course,
            academic_year=meta.academic_year,
            semester=meta.semester,
            subject=meta.subject,
            assessment_type=meta.assessment_type,
            closed=meta.closed,
            students=students,
        )

    def _extract_row(self, cells: List[str], col_map: Dict[str, int]) -> StudentRecord:
        def cell(role: str) -> Optional[str]:
            idx = col_map.get(role, NOT_FOUND)
            return cells[idx] if 0 <= idx < len(cells) else None

        gradebook, gradebook_idx = self._find_gradebook(cells, col_map)
        grade_text = cell(C.ROLE_GRADE)

        record = StudentRecord(
            gradebook_id=gradebook,
            score1=GradeRowStandardizer.parse_int(cell(C.ROLE_SCORE1)),
            score2=GradeRowStandardizer.parse_int(cell(C.ROLE_SCORE2)),
            score3=GradeRowStandardizer.parse_int(cell(C.ROLE_SCORE3)),
            total=GradeRowStandardizer.parse_int(cell(C.ROLE_TOTAL)),
            grade=grade_text if grade_text else None,
        )

        if record.score1 is None and record.score2 is None:
            self._positional_scores(record, cells, col_map, gradebook_idx)
        return record

    def _find_gradebook(self, cells: List[str], col_map: Dict[str, int]) -> Tuple[str, int]:
        idx = col_map.get(C.ROLE_GRADEBOOK, NOT_FOUND)
        if 0 <= idx < len(cells):
            gradebook = GradeRowStandardizer.digits_only(cells[idx])
            if GradeRowStandardizer.is_valid_gradebook(gradebook):
                return gradebook, idx

        # Fallback: first cell that is a gradebook-shaped number
        for pos, text in enumerate(cells):
            candidate = GradeRowStandardizer.digits_only(text)
            if C.FALLBACK_GRADEBOOK.match(candidate):
                return candidate, pos

        if 0 <= idx < len(cells):
            return GradeRowStandardizer.digits_only(cells[idx]), idx
        return "", NOT_FOUND

    def _positional_scores(self, record: StudentRecord, cells: List[str], col_map: Dict[str, int], gradebook_idx: int):
        """
        Assigns the first numeric cells, in order, to score1..score3 and total.
        Known limitation: an unlabelled numeric column (e.g. a row counter)
        is indistinguishable from a score.
        """
        consumed = {i for i in col_map.values() if i != NOT_FOUND}
        consumed.add(gradebook_idx)

        numbers = []
        for pos, text in enumerate(cells):
            if pos in consumed: continue
            value = GradeRowStandardizer.parse_int(text)
            if value is not None:
                numbers.append(value)

        free_fields = [f for f in self.POSITIONAL_FIELDS if getattr(record, f) is None]
        for field_name, value in zip(free_fields, numbers):
            setattr(record, field_name, value)
