from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from common.rule_analysis.models import (
    ProjectAnalysis,
    ReferenceTable,
    RuleBook,
    RuleBookEntry,
)
from common.rule_analysis.repositories import AnalysisResultStore
from common.rule_analysis.service import RuleAnalysisService
from common.rule_analysis.vocabulary import Translator, load_vocabulary

from .settings import AppSettings
from .stores import (
    InMemoryAnalysisRepository,
    InMemoryAnalysisResultStore,
    InMemoryRuleBookRepository,
    LocalJsonAnalysisResultStore,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    rule_books: InMemoryRuleBookRepository
    analyses: InMemoryAnalysisRepository
    results: AnalysisResultStore


def _load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_rule_book_file(path: Path, repo: InMemoryRuleBookRepository) -> RuleBook:
    """Load one exported rule book.

    Expected shape: {"rule_book": {...}, "entries": [{"id": ..., "data": {...}}, ...],
    "reference_tables": [{"name": ..., "data": [[header...], [row...]]}, ...]}.
    Entries without an id get a positional one; their order is kept as import order.
    """
    raw = _load_json(path)
    book = RuleBook.model_validate(raw["rule_book"])
    entries = []
    for idx, item in enumerate(raw.get("entries", [])):
        if "data" not in item:
            item = {"data": item}
        entries.append(
            RuleBookEntry(
                id=str(item.get("id") or f"{book.id}-{idx:05d}"),
                rule_book_id=book.id,
                data=item["data"],
            )
        )
    tables = [
        ReferenceTable(
            id=str(t.get("id") or f"{book.id}-table-{idx}"),
            rule_book_id=book.id,
            name=t["name"],
            data=t.get("data", []),
        )
        for idx, t in enumerate(raw.get("reference_tables", []))
    ]
    if not book.row_count:
        book = book.model_copy(update={"row_count": len(entries)})
    repo.add(book, entries, tables)
    return book


def load_analysis_file(path: Path, repo: InMemoryAnalysisRepository) -> ProjectAnalysis:
    raw = _load_json(path)
    analysis = ProjectAnalysis.model_validate(raw["analysis"])
    repo.add(analysis, raw.get("project") or {})
    return analysis


def load_workspace(data_dir: Path, results: AnalysisResultStore | None = None) -> Workspace:
    rule_books = InMemoryRuleBookRepository()
    analyses = InMemoryAnalysisRepository()
    for path in sorted((data_dir / "rule_books").glob("*.json")):
        load_rule_book_file(path, rule_books)
    for path in sorted((data_dir / "analyses").glob("*.json")):
        load_analysis_file(path, analyses)
    logger.debug("Loaded workspace from %s", data_dir)
    return Workspace(
        rule_books=rule_books,
        analyses=analyses,
        results=results if results is not None else InMemoryAnalysisResultStore(),
    )


def get_data_source(name: str, settings: AppSettings) -> Workspace:
    """Resolve a workspace by name (fixtures|local)."""
    source = (name or "").strip().lower()
    if source in ("fixtures", ""):
        return load_workspace(settings.data_dir)
    if source == "local":
        return load_workspace(settings.data_dir, LocalJsonAnalysisResultStore(settings.results_path))
    raise ValueError(f"Unknown data source '{name}' (expected 'fixtures' or 'local').")


def build_service(settings: AppSettings) -> RuleAnalysisService:
    workspace = get_data_source(settings.data_source, settings)
    vocabulary = load_vocabulary(settings.vocab_canonical_path, settings.vocab_target_path)
    return RuleAnalysisService(
        rule_books=workspace.rule_books,
        analyses=workspace.analyses,
        results=workspace.results,
        translator=Translator(vocabulary),
    )
