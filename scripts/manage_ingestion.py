import sys
import os
import argparse
import logging

# 1. Setup Paths (To allow importing 'app' and 'ingestion')
CURRENT_SCRIPT_PATH = os.path.abspath(__file__)
PROJECT_ROOT = os.path.dirname(os.path.dirname(CURRENT_SCRIPT_PATH))
sys.path.append(PROJECT_ROOT)

from app.config import settings
from app.database import SessionLocal
from app.services.sheet_store import GradeSheetStore
from ingestion.common.services.plugin_factory import PluginFactory
from ingestion.grade_ingestion.core.fetcher import PageFetcher
from ingestion.grade_ingestion.core.pipeline import GradeIngestionPipeline
from ingestion.grade_ingestion.core.schemas import ParseProgress

logging.basicConfig(level=settings.LOG_LEVEL, format="%(message)s")
logger = logging.getLogger("IngestionManager")

def print_progress(progress: ParseProgress):
    if progress.total:
        print(f"   [{progress.current}/{progress.total}] {progress.step}")
    else:
        print(f"   {progress.step}")

class IngestionCLI:
    def __init__(self):
        self.parser = argparse.ArgumentParser(description="VSUET Grade Sheet Ingestion Manager")
        self.parser.add_argument("--source", default="vsuet", choices=PluginFactory.list_available_plugins(),
                                 help="Source portal plugin")
        subparsers = self.parser.add_subparsers(dest="command", help="Available commands")

        # Command: load
        parser_load = subparsers.add_parser("load", help="Crawl the portal and store grade sheets")
        parser_load.add_argument("--faculty", type=str, default=settings.DEFAULT_FACULTY, help="Faculty code (e.g., УИТС)")
        parser_load.add_argument("--years", type=int, default=settings.DEFAULT_YEARS_COUNT, help="Number of recent academic years")
        parser_load.add_argument("--demo", action="store_true", help="Store generated demo data instead of crawling")
        parser_load.add_argument("--seed", type=int, default=None, help="Seed for demo data")

        # Command: check
        subparsers.add_parser("check", help="Check whether the portal is reachable")

        # Command: status
        subparsers.add_parser("status", help="Show stored sheet statistics")

        # Command: clear
        parser_clear = subparsers.add_parser("clear", help="Delete every stored sheet and student record")
        parser_clear.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    def run(self, argv=None) -> int:
        args = self.parser.parse_args(argv)

        if args.command is None:
            self.parser.print_help()
            return 1
        if args.command == "load":
            return self.load(args.source, args.faculty, args.years, args.demo, args.seed)
        if args.command == "check":
            return self.check(args.source)
        if args.command == "status":
            return self.status()
        if args.command == "clear":
            return self.clear(args.yes)
        return 1

    def load(self, source: str, faculty: str, years: int, demo: bool, seed) -> int:
        print(f"\n🚀 LOADING: {source.upper()} | Faculty: {faculty} | Years: {years} | Demo: {demo}")
        print("-" * 50)

        pipeline = GradeIngestionPipeline(PluginFactory.get_plugin(source), demo_seed=seed)
        with SessionLocal() as db:
            try:
                summary = pipeline.run(db, faculty=faculty, years_count=years, demo=demo, on_progress=print_progress)
            except Exception as e:
                logger.error(f"❌ Load failed: {e}")
                return 1

        print("-" * 50)
        print(f"{'🧪' if summary.used_demo else '✅'} {summary.message}")
        for error in summary.errors:
            print(f"   ⚠️ {error}")
        return 0

    def check(self, source: str) -> int:
        plugin = PluginFactory.get_plugin(source)
        result = PageFetcher(base_url=plugin.get_base_url(), headers=plugin.get_request_headers()).check_availability()
        print(f"{'✅' if result.available else '❌'} {plugin.get_base_url()} - {result.message}")
        return 0 if result.available else 2

    def status(self) -> int:
        with SessionLocal() as db:
            stats = GradeSheetStore().get_stats(db)

        print(f"\n📊 Sheets: {stats['total_sheets']} | Student records: {stats['total_records']}")
        if stats["faculties"]:
            print("   Faculties:")
            for row in stats["faculties"]:
                print(f"     {row['name']}: {row['count']}")
        if stats["years"]:
            print("   Academic years:")
            for row in stats["years"]:
                print(f"     {row['year']}: {row['count']}")
        return 0

    def clear(self, assume_yes: bool) -> int:
        if not assume_yes:
            confirm = input("Delete ALL stored grade sheets? (y/n): ")
            if confirm.lower() != 'y':
                print("Cancelled.")
                return 0

        with SessionLocal() as db:
            sheets, records = GradeSheetStore().clear_all(db)
        print(f"🧹 Deleted {sheets} sheets and {records} student records.")
        return 0

if __name__ == "__main__":
    sys.exit(IngestionCLI().run())
