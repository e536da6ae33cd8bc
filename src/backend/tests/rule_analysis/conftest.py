import itertools
import os
import sys
from datetime import datetime, timezone


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.rule_analysis.models import ProjectAnalysis, RuleBook, RuleBookEntry
from common.rule_analysis.service import RuleAnalysisService
from common.rule_analysis.vocabulary import Translator, Vocabulary
from pipelines.stores import (
    InMemoryAnalysisRepository,
    InMemoryAnalysisResultStore,
    InMemoryRuleBookRepository,
)


@pytest.fixture
def make_entry():
    counter = itertools.count(1)

    def _make(
        *,
        outline: str = "",
        usage: str = "",
        column_type: str = "Parameter",
        fulfillability: str = "",
        text: str = "",
        rule_book_id: str = "rb-1",
        entry_id: str | None = None,
        **extra,
    ) -> RuleBookEntry:
        data = {
            "Gliederung": outline,
            "Text": text,
            "Nutzung": usage,
            "Spaltentyp": column_type,
            "Erfüllbarkeit": fulfillability,
        }
        data.update(extra)
        return RuleBookEntry(
            id=entry_id or f"rbe-{next(counter):03d}",
            rule_book_id=rule_book_id,
            data=data,
        )

    return _make


@pytest.fixture
def make_rule_book():
    def _make(
        *,
        rule_book_id: str = "rb-1",
        name: str = "Bauordnung-v1",
        version_name: str = "Bauordnung",
        version: int = 1,
        imported_at: datetime | None = None,
    ) -> RuleBook:
        return RuleBook(
            id=rule_book_id,
            name=name,
            version_name=version_name,
            version=version,
            imported_at=imported_at or datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc),
        )

    return _make


@pytest.fixture
def make_analysis():
    def _make(
        *,
        analysis_id: str = "pa-1",
        new_use=("Office",),
        fulfillability=("Light",),
        language: str = "en",
    ) -> ProjectAnalysis:
        return ProjectAnalysis(
            id=analysis_id,
            project_id="prj-1",
            project_name="Office building",
            started_at=datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc),
            new_use=list(new_use) if isinstance(new_use, tuple) else new_use,
            fulfillability=list(fulfillability) if isinstance(fulfillability, tuple) else fulfillability,
            language=language,
        )

    return _make


@pytest.fixture
def vocabulary() -> Vocabulary:
    return Vocabulary(
        canonical={"use.office": "Office", "use.retail": "Retail", "level.light": "Light", "level.medium": "Medium"},
        target={"use.office": "Büro", "use.retail": "Verkaufsstätte", "level.light": "Leicht", "level.medium": "Mittel"},
    )


@pytest.fixture
def make_service():
    def _make(*, books=(), analyses=(), translator: Translator | None = None):
        """`books` is a sequence of (RuleBook, [RuleBookEntry, ...]) pairs."""
        rule_books = InMemoryRuleBookRepository()
        for book, entries in books:
            rule_books.add(book, entries)
        analysis_repo = InMemoryAnalysisRepository()
        for analysis in analyses:
            analysis_repo.add(analysis)
        store = InMemoryAnalysisResultStore()
        service = RuleAnalysisService(
            rule_books=rule_books,
            analyses=analysis_repo,
            results=store,
            translator=translator,
        )
        return service, store

    return _make
