import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.services.sheet_store import GradeSheetStore
from ingestion.grade_ingestion.core.academic_years import get_academic_years
from ingestion.grade_ingestion.core.base_plugin import BaseGradePlugin
from ingestion.grade_ingestion.core.crawler import GradeCrawler, ProgressCallback
from ingestion.grade_ingestion.core.fetcher import PageFetcher
from ingestion.grade_ingestion.core.schemas import GradeSheet, IngestionSummary, ParseProgress

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 5

class GradeIngestionPipeline:
    """
    The Chassis: 'Check -> Crawl -> (Demo Fallback) -> Store'.
    Live and demo sheets are never saved in the same run.
    """

    def __init__(
        self,
        plugin: BaseGradePlugin,
        fetcher: Optional[PageFetcher] = None,
        store: Optional[GradeSheetStore] = None,
        crawler: Optional[GradeCrawler] = None,
        demo_seed: Optional[int] = None
    ):
        self.plugin = plugin
        self.fetcher = fetcher or PageFetcher(base_url=plugin.get_base_url(), headers=plugin.get_request_headers())
        self.store = store or GradeSheetStore()
        self.crawler = crawler or GradeCrawler(plugin, fetcher=self.fetcher)
        self.demo_seed = demo_seed

    def run(
        self,
        db: Session,
        faculty: Optional[str] = None,
        years_count: Optional[int] = None,
        demo: bool = False,
        on_progress: Optional[ProgressCallback] = None
    ) -> IngestionSummary:
        faculty = faculty or settings.DEFAULT_FACULTY
        years_count = years_count or settings.DEFAULT_YEARS_COUNT
        logger.info(f"🚀 Ingestion run | Source: {self.plugin.get_slug()} | Faculty: {faculty} | Years: {years_count} | Demo: {demo}")

        # 1. Explicit demo request
        if demo:
            return self._save_demo(db, faculty, years_count, "Сгенерировано", on_progress)

        # 2. Availability check
        availability = self.fetcher.check_availability()
        if not availability.available:
            logger.warning(f"⚠️ Source unavailable ({availability.message}). Falling back to demo data.")
            return self._save_demo(
                db, faculty, years_count, "Сайт недоступен. Сгенерировано демо",
                on_progress, errors=[availability.message]
            )

        # 3. Crawl
        crawl = self.crawler.crawl_and_extract(faculty, years_count, on_progress=on_progress)
        errors = crawl.errors[:MAX_REPORTED_ERRORS]

        if not crawl.sheets:
            logger.warning(f"⚠️ No sheets extracted ({len(crawl.errors)} errors). Falling back to demo data.")
            return self._save_demo(db, faculty, years_count, "Нет данных с сайта. Демо", on_progress, errors=errors)

        # 4. Store
        saved, records = self.store.save_sheets(db, crawl.sheets, is_demo=False)
        message = self._describe("Загружено с сайта", saved, records)
        logger.info(f"✅ {message}")
        return IngestionSummary(saved=saved, records=records, used_demo=False, message=message, errors=errors)

    def _save_demo(
        self,
        db: Session,
        faculty: str,
        years_count: int,
        prefix: str,
        on_progress: Optional[ProgressCallback],
        errors: Optional[List[str]] = None
    ) -> IngestionSummary:
        years = get_academic_years(years_count)
        sheets: List[GradeSheet] = self.plugin.generate_demo(years, faculty, seed=self.demo_seed)
        saved, records = self.store.save_sheets(db, sheets, is_demo=True)
        message = self._describe(prefix, saved, records)

        if on_progress:
            on_progress(ParseProgress(step=message, current=saved, total=saved, status="done"))
        logger.info(f"🧪 {message}")
        return IngestionSummary(saved=saved, records=records, used_demo=True, message=message, errors=errors or [])

    @staticmethod
    def _describe(prefix: str, saved: int, records: int) -> str:
        return f"{prefix}: {saved} ведомостей, {records} записей"
