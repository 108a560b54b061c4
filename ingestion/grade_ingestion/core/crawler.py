import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, List, Optional

from app.config import settings
from ingestion.grade_ingestion.core.academic_years import get_academic_years
from ingestion.grade_ingestion.core.base_plugin import BaseGradePlugin
from ingestion.grade_ingestion.core.errors import GradeIngestionError, NoGradeTablesFound, NoGroupsFound
from ingestion.grade_ingestion.core.fetcher import PageFetcher
from ingestion.grade_ingestion.core.schemas import CrawlResult, ExtractionContext, GradeSheet, ParseProgress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ParseProgress], None]

@dataclass(frozen=True)
class CrawlUnit:
    index: int
    faculty: str
    group: str
    year: str
    semester: int
    url: str

    @property
    def label(self) -> str:
        return f"{self.group} {self.year} сем.{self.semester}"

class ProgressReporter:
    """Serializes progress updates from worker threads; `current` only grows."""

    def __init__(self, callback: Optional[ProgressCallback], total: int):
        self.callback = callback
        self.total = total
        self.current = 0
        self._lock = threading.Lock()

    def publish(self, step: str, status: str, advance: bool = False):
        with self._lock:
            if advance:
                self.current = min(self.current + 1, self.total)
            if self.callback:
                self.callback(ParseProgress(step=step, current=self.current, total=self.total, status=status))

class GradeCrawler:
    """
    Faculty -> groups -> (group, year, semester) units -> grade sheets.
    Each unit is fetched and extracted in isolation; failures are recorded
    in the result's error list and never abort the remaining crawl.
    """

    def __init__(
        self,
        plugin: BaseGradePlugin,
        fetcher: Optional[PageFetcher] = None,
        max_workers: Optional[int] = None,
        politeness_delay: Optional[float] = None
    ):
        self.plugin = plugin
        self.fetcher = fetcher or PageFetcher(base_url=plugin.get_base_url(), headers=plugin.get_request_headers())
        workers = max_workers if max_workers is not None else settings.CRAWL_WORKERS
        self.max_workers = min(max(1, workers), 8)
        self.politeness_delay = politeness_delay if politeness_delay is not None else plugin.get_politeness_delay()

    def crawl_and_extract(
        self,
        faculty: str,
        years_count: int,
        on_progress: Optional[ProgressCallback] = None
    ) -> CrawlResult:
        result = CrawlResult()
        years = get_academic_years(years_count)
        logger.info(f"--- CRAWLING {self.plugin.get_slug().upper()} | Faculty: {faculty} | Years: {years} ---")

        # 1. Discover Groups
        if on_progress:
            on_progress(ParseProgress(step="Загрузка списка групп...", current=0, total=0, status="loading"))
        try:
            groups = self._discover_groups(faculty, result)
        except GradeIngestionError as e:
            logger.error(f"Group discovery failed for {faculty}: {e}")
            result.errors.append(f"{faculty}: {e}")
            if on_progress:
                on_progress(ParseProgress(step=str(e), current=0, total=0, status="error"))
            return result

        # 2. Build Units
        units = self._build_units(faculty, groups, years)
        result.units_total = len(units)
        reporter = ProgressReporter(on_progress, len(units))
        reporter.publish(f"Найдено групп: {len(groups)}, страниц: {len(units)}", "loading")

        # 3. Process Units (bounded pool)
        per_unit = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_unit = {executor.submit(self._process_unit, unit): unit for unit in units}

            for future in as_completed(future_to_unit):
                unit = future_to_unit[future]
                try:
                    sheets = future.result()
                    per_unit[unit.index] = sheets
                    result.pages_fetched += 1
                    reporter.publish(f"{unit.label}: ведомостей {len(sheets)}", "parsing", advance=True)
                except NoGradeTablesFound as e:
                    result.pages_fetched += 1
                    result.errors.append(f"{unit.label}: {e}")
                    reporter.publish(f"{unit.label}: нет ведомостей", "parsing", advance=True)
                except GradeIngestionError as e:
                    logger.error(f"Unit failed {unit.label}: {e}")
                    result.errors.append(f"{unit.label}: {e}")
                    reporter.publish(f"{unit.label}: ошибка", "parsing", advance=True)
                except Exception as e:
                    logger.error(f"Unit crashed {unit.label}: {e}", exc_info=True)
                    result.errors.append(f"{unit.label}: {e}")
                    reporter.publish(f"{unit.label}: ошибка", "parsing", advance=True)

        # 4. Unit order, not completion order
        for index in sorted(per_unit):
            result.sheets.extend(per_unit[index])

        reporter.publish(f"Готово: ведомостей {len(result.sheets)}", "done")
        logger.info(
            f"Crawl Complete. Units: {result.units_total}, pages fetched: {result.pages_fetched}, "
            f"sheets: {len(result.sheets)}, errors: {len(result.errors)}"
        )
        return result

    def _discover_groups(self, faculty: str, result: CrawlResult) -> List[str]:
        url = self.plugin.build_faculty_url(faculty)
        html = self.fetcher.fetch(url)
        result.pages_fetched += 1
        groups = self.plugin.get_scanner().extract_groups(html, url)
        if not groups:
            raise NoGroupsFound(f"Не найдено групп на странице факультета {faculty}")
        return [g.name for g in groups]

    def _build_units(self, faculty: str, groups: List[str], years: List[str]) -> List[CrawlUnit]:
        units = []
        for group in groups:
            for year in years:
                for semester in (1, 2):
                    units.append(CrawlUnit(
                        index=len(units),
                        faculty=faculty,
                        group=group,
                        year=year,
                        semester=semester,
                        url=self.plugin.build_unit_url(faculty, group, year, semester),
                    ))
        return units

    def _process_unit(self, unit: CrawlUnit) -> List[GradeSheet]:
        if self.politeness_delay > 0:
            time.sleep(self.politeness_delay)

        html = self.fetcher.fetch(unit.url)
        context = ExtractionContext(
            faculty=unit.faculty,
            group_name=unit.group,
            academic_year=unit.year,
            semester=unit.semester,
            source_url=unit.url,
        )
        sheets = self.plugin.extract(html, context)
        if not sheets:
            raise NoGradeTablesFound("Ведомости на странице не найдены")
        return sheets
