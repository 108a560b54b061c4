from typing import List, Optional
from urllib.parse import urlencode

from app.config import settings
from ingestion.grade_ingestion.core.base_plugin import BaseGradePlugin
from ingestion.grade_ingestion.core.schemas import ExtractionContext, GradeSheet
from ingestion.grade_ingestion.plugins.vsuet.demo_generator import DemoDataGenerator
from ingestion.grade_ingestion.plugins.vsuet.scanner import VsuetGroupScanner
from ingestion.grade_ingestion.plugins.vsuet.table_parser import GradeTableParser

class VsuetPlugin(BaseGradePlugin):

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url or settings.SOURCE_BASE_URL

    def get_slug(self) -> str:
        return "vsuet"

    def get_base_url(self) -> str:
        return self.base_url

    def get_scanner(self) -> VsuetGroupScanner:
        return VsuetGroupScanner()

    # The portal publishes no index of sheets: query parameters are guessed.
    def build_faculty_url(self, faculty: str) -> str:
        return f"{self.base_url}?{urlencode({'faculty': faculty})}"

    def build_unit_url(self, faculty: str, group: str, year: str, semester: int) -> str:
        query = urlencode({'faculty': faculty, 'group': group, 'year': year, 'semester': semester})
        return f"{self.base_url}?{query}"

    def extract(self, html: str, context: ExtractionContext) -> List[GradeSheet]:
        return GradeTableParser(html, context).parse()

    def generate_demo(self, years: List[str], faculty: Optional[str] = None, seed: Optional[int] = None) -> List[GradeSheet]:
        return DemoDataGenerator(seed).generate(years, faculty)

    def get_politeness_delay(self) -> float:
        return 0.25
