import re
from typing import Dict, List, Optional
from ingestion.grade_ingestion.plugins.vsuet import constants as C

NOT_FOUND = -1

class HeaderClassifier:
    """
    Maps header cell texts to semantic column roles.
    Declarative: all vocabulary lives in `constants`.
    """

    @staticmethod
    def normalize_header(text: str) -> str:
        if not text: return ""
        text = text.replace('\xa0', ' ')
        return re.sub(r'\s+', ' ', text).strip().lower()

    @classmethod
    def classify(cls, headers: List[str]) -> Dict[str, int]:
        col_map = {role: NOT_FOUND for role, _ in C.HEADER_ALIASES}
        normalized = [cls.normalize_header(h) for h in headers]
        unassigned = []

        # Pass 1: primary vocabulary
        for idx, header in enumerate(normalized):
            if not header: continue
            role = cls._match_role(header)
            if role is None:
                unassigned.append(idx)
            elif col_map[role] == NOT_FOUND:
                col_map[role] = idx

        # Pass 2: weak vocabulary fills roles the table never named explicitly
        for idx in unassigned:
            role = cls._match_role(normalized[idx], C.HEADER_FALLBACK_ALIASES)
            if role and col_map[role] == NOT_FOUND:
                col_map[role] = idx

        return col_map

    @classmethod
    def _match_role(cls, header: str, aliases_table=None) -> Optional[str]:
        if aliases_table is None:
            exact = C.HEADER_EXACT_ALIASES.get(header)
            if exact: return exact
            aliases_table = C.HEADER_ALIASES

        for role, aliases in aliases_table:
            if any(alias in header for alias in aliases):
                return role
        return None

    @classmethod
    def looks_like_grade_sheet(cls, table_text: str, headers: List[str]) -> bool:
        """Gate that rejects layout, navigation and other non-data tables."""
        text = table_text.lower()
        if any(marker in text for marker in C.SHEET_TEXT_MARKERS):
            return True

        for raw in headers:
            header = cls.normalize_header(raw)
            if not header: continue
            if any(marker in header for marker in C.SHEET_HEADER_MARKERS):
                return True
            role = cls._match_role(header) or cls._match_role(header, C.HEADER_FALLBACK_ALIASES)
            if role in C.SCORE_ROLES:
                return True
        return False
