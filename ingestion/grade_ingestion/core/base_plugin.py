from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from ingestion.grade_ingestion.core.base_scanner import BaseScanner
from ingestion.grade_ingestion.core.fetcher import DEFAULT_HEADERS
from ingestion.grade_ingestion.core.schemas import ExtractionContext, GradeSheet

class BaseGradePlugin(ABC):
    @abstractmethod
    def get_slug(self) -> str: pass

    @abstractmethod
    def get_base_url(self) -> str: pass

    @abstractmethod
    def get_scanner(self) -> BaseScanner: pass

    @abstractmethod
    def build_faculty_url(self, faculty: str) -> str: pass

    @abstractmethod
    def build_unit_url(self, faculty: str, group: str, year: str, semester: int) -> str: pass

    @abstractmethod
    def extract(self, html: str, context: ExtractionContext) -> List[GradeSheet]: pass

    @abstractmethod
    def generate_demo(self, years: List[str], faculty: Optional[str] = None, seed: Optional[int] = None) -> List[GradeSheet]: pass

    def get_request_headers(self) -> Dict[str, str]:
        return dict(DEFAULT_HEADERS)

    # --- PRODUCTION POLITENESS ---
    def get_politeness_delay(self) -> float:
        """Seconds to wait before each unit fetch."""
        return 0.0
