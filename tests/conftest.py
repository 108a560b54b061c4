from typing import List, Optional, Sequence
from urllib.parse import parse_qs, urlparse

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
import app.models  # registers the tables on Base
from ingestion.grade_ingestion.core.schemas import AvailabilityResult, GradeSheet, StudentRecord

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    """A fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# --- HTML BUILDERS ---

def table_html(headers: Sequence[str], rows: Sequence[Sequence[str]], caption: Optional[str] = None, attrs: str = "") -> str:
    head = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
    cap = f"<caption>{caption}</caption>" if caption else ""
    return f"<table {attrs}>{cap}<tr>{head}</tr>{body}</table>"


def page_html(*fragments: str, title: str = "") -> str:
    head = f"<head><title>{title}</title></head>" if title else "<head></head>"
    return f"<html>{head}<body>{''.join(fragments)}</body></html>"


def faculty_page(groups: Sequence[str]) -> str:
    options = '<option value="">Выберите группу</option>' + "".join(
        f'<option value="{g}">{g}</option>' for g in groups
    )
    return page_html(f'<select name="ctl00$ddlGroup">{options}</select>', "<p>" + "x" * 120 + "</p>")


# --- FAKE HTTP ---

class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, encoding: Optional[str] = "utf-8"):
        self.text = text
        self.status_code = status_code
        self.encoding = encoding
        self.apparent_encoding = "utf-8"


class FakeSession:
    """Stands in for requests.Session: replays queued responses or exceptions."""

    def __init__(self, outcomes: List):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, headers=None, timeout=None, verify=None):
        self.calls.append({"url": url, "timeout": timeout})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RoutedFetcher:
    """
    Fake PageFetcher for crawl tests. `route(params)` receives the parsed query
    of each requested URL and returns HTML or raises.
    """

    def __init__(self, route, available: bool = True, message: str = "Сайт доступен"):
        self.route = route
        self.available = available
        self.message = message
        self.urls = []

    def fetch(self, url, timeout=None, retries=None, min_length=0):
        self.urls.append(url)
        params = {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}
        return self.route(params)

    def check_availability(self):
        return AvailabilityResult(available=self.available, message=self.message)


# --- SAMPLE RECORDS ---

def make_sheet(subject: str = "Базы данных", assessment_type: str = "экзамен", gradebooks=("2023001", "2023002"), **overrides) -> GradeSheet:
    fields = dict(
        faculty="УИТС",
        group_name="ИС-21",
        course=1,
        academic_year="2024-2025",
        semester=1,
        subject=subject,
        assessment_type=assessment_type,
        closed=True,
        students=[StudentRecord(gradebook_id=g, score1=20, score2=20, score3=30, total=70, grade="4") for g in gradebooks],
    )
    fields.update(overrides)
    return GradeSheet(**fields)


@pytest.fixture()
def timeout_error():
    return requests.exceptions.Timeout("read timed out")
