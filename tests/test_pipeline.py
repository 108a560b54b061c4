from sqlalchemy import select

from app.models import StoredGradeSheet
from app.services.sheet_store import GradeSheetStore
from conftest import RoutedFetcher, faculty_page, page_html, table_html
from ingestion.grade_ingestion.core.crawler import GradeCrawler
from ingestion.grade_ingestion.core.pipeline import GradeIngestionPipeline
from ingestion.grade_ingestion.plugins.vsuet.plugin import VsuetPlugin


def live_portal(params):
    if "group" not in params:
        return faculty_page(["ИС-21"])
    return page_html(
        f"<h2>Зачёт. Предмет: Физика {params['semester']}</h2>",
        table_html(["№", "КТ1", "КТ2", "КТ3"], [["2023001", "20", "20", "30"], ["2023002", "5", "5", "5"]]),
    )


def empty_portal(params):
    if "group" not in params:
        return faculty_page(["ИС-21"])
    return page_html("<p>Нет ведомостей</p>")


def make_pipeline(route, available=True, message="Сайт доступен"):
    plugin = VsuetPlugin(base_url="https://example.test/Ved")
    fetcher = RoutedFetcher(route, available=available, message=message)
    crawler = GradeCrawler(plugin, fetcher=fetcher, max_workers=2, politeness_delay=0)
    return GradeIngestionPipeline(plugin, fetcher=fetcher, crawler=crawler, demo_seed=42), fetcher


def test_live_sheets_are_saved(db):
    pipeline, _ = make_pipeline(live_portal)

    summary = pipeline.run(db, faculty="УИТС", years_count=1)

    assert summary.used_demo is False
    assert (summary.saved, summary.records) == (2, 4)
    assert summary.message == "Загружено с сайта: 2 ведомостей, 4 записей"
    assert summary.errors == []
    assert GradeSheetStore().get_stats(db)["total_records"] == 4


def test_explicit_demo_skips_the_portal(db):
    pipeline, fetcher = make_pipeline(live_portal)

    summary = pipeline.run(db, faculty="УИТС", years_count=1, demo=True)

    assert summary.used_demo is True
    assert summary.message.startswith("Сгенерировано: ")
    assert fetcher.urls == []
    assert GradeSheetStore().count_sheets(db) == summary.saved > 0


def test_unavailable_source_falls_back_to_demo(db):
    pipeline, fetcher = make_pipeline(live_portal, available=False, message="Таймаут (10 сек)")

    summary = pipeline.run(db, faculty="УИТС", years_count=1)

    assert summary.used_demo is True
    assert summary.message.startswith("Сайт недоступен. Сгенерировано демо: ")
    assert summary.errors == ["Таймаут (10 сек)"]
    assert fetcher.urls == []


def test_zero_sheets_fall_back_to_demo_with_capped_errors(db):
    pipeline, _ = make_pipeline(empty_portal)

    summary = pipeline.run(db, faculty="УИТС", years_count=3)

    # 1 group x 3 years x 2 semesters, every page empty
    assert summary.used_demo is True
    assert summary.message.startswith("Нет данных с сайта. Демо: ")
    assert len(summary.errors) == 5


def test_demo_rows_are_flagged(db):
    pipeline, _ = make_pipeline(live_portal)
    pipeline.run(db, faculty="УИТС", years_count=1, demo=True)

    flags = set(db.execute(select(StoredGradeSheet.is_demo)).scalars())
    assert flags == {True}


def test_progress_reaches_done(db):
    updates = []
    pipeline, _ = make_pipeline(live_portal)

    pipeline.run(db, faculty="УИТС", years_count=1, on_progress=updates.append)

    assert updates[-1].status == "done"
