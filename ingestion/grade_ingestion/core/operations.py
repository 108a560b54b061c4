"""
Entry points consumed by callers outside the ingestion package.
Each one resolves the source plugin from the factory; pass `source` to target another portal.
"""
from typing import List, Optional

from app.config import settings
from ingestion.common.services.plugin_factory import PluginFactory
from ingestion.grade_ingestion.core.crawler import GradeCrawler, ProgressCallback
from ingestion.grade_ingestion.core.fetcher import PageFetcher
from ingestion.grade_ingestion.core.schemas import AvailabilityResult, CrawlResult, ExtractionContext, GradeSheet

DEFAULT_SOURCE = "vsuet"

def extract(html: str, context: Optional[ExtractionContext] = None, source: str = DEFAULT_SOURCE) -> List[GradeSheet]:
    """Pure transformation of one page into grade sheets. No I/O."""
    return PluginFactory.get_plugin(source).extract(html, context or ExtractionContext())

def check_availability(source: str = DEFAULT_SOURCE) -> AvailabilityResult:
    plugin = PluginFactory.get_plugin(source)
    return PageFetcher(base_url=plugin.get_base_url(), headers=plugin.get_request_headers()).check_availability()

def generate_demo(
    years: List[str],
    faculty: Optional[str] = None,
    seed: Optional[int] = None,
    source: str = DEFAULT_SOURCE
) -> List[GradeSheet]:
    return PluginFactory.get_plugin(source).generate_demo(years, faculty, seed=seed)

def crawl_and_extract(
    faculty: Optional[str] = None,
    years_count: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    source: str = DEFAULT_SOURCE
) -> CrawlResult:
    crawler = GradeCrawler(PluginFactory.get_plugin(source))
    return crawler.crawl_and_extract(
        faculty or settings.DEFAULT_FACULTY,
        years_count or settings.DEFAULT_YEARS_COUNT,
        on_progress=on_progress,
    )
