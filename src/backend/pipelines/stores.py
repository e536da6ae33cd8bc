from __future__ import annotations

import json
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from common.rule_analysis.models import (
    AnalysisResult,
    ChecklistStatus,
    Fulfillability,
    ProjectAnalysis,
    ProjectAnalysisDetails,
    ReferenceTable,
    RuleBook,
    RuleBookDetails,
    RuleBookEntry,
)


def latest_rule_books(books: Iterable[RuleBook]) -> List[RuleBook]:
    """Highest version per `version_name`, most recently imported first."""
    latest: Dict[str, RuleBook] = {}
    for book in books:
        label = book.version_name or book.name
        current = latest.get(label)
        if current is None or book.version > current.version:
            latest[label] = book
    return sorted(latest.values(), key=lambda b: b.imported_at, reverse=True)


class InMemoryRuleBookRepository:
    def __init__(self) -> None:
        self._books: Dict[str, RuleBook] = {}
        self._entries: Dict[str, List[RuleBookEntry]] = {}
        self._tables: Dict[str, List[ReferenceTable]] = {}

    def add(
        self,
        rule_book: RuleBook,
        entries: Iterable[RuleBookEntry],
        reference_tables: Iterable[ReferenceTable] = (),
    ) -> None:
        # Entries are kept in the order given; that order is the import order.
        self._books[rule_book.id] = rule_book
        self._entries[rule_book.id] = list(entries)
        self._tables[rule_book.id] = list(reference_tables)

    def get_rule_books(self) -> List[RuleBook]:
        return latest_rule_books(self._books.values())

    def get_rule_book_details(self, rule_book_id: str) -> Optional[RuleBookDetails]:
        book = self._books.get(rule_book_id)
        if book is None:
            return None
        return RuleBookDetails(
            rule_book=book,
            entries=list(self._entries.get(rule_book_id, [])),
            reference_tables=list(self._tables.get(rule_book_id, [])),
        )


class InMemoryAnalysisRepository:
    def __init__(self) -> None:
        self._analyses: Dict[str, ProjectAnalysisDetails] = {}

    def add(self, analysis: ProjectAnalysis, project: Optional[dict] = None) -> None:
        self._analyses[analysis.id] = ProjectAnalysisDetails(analysis=analysis, project=project or {})

    def get_project_analysis_details(self, analysis_id: str) -> Optional[ProjectAnalysisDetails]:
        return self._analyses.get(analysis_id)


class InMemoryAnalysisResultStore:
    """One decision per (analysis, entry); concurrent upserts are last-write-wins."""

    def __init__(self, results: Iterable[AnalysisResult] = ()) -> None:
        self._lock = threading.Lock()
        self._results: Dict[Tuple[str, str], AnalysisResult] = {}
        for result in results:
            self._results[(result.project_analysis_id, result.rule_book_entry_id)] = result

    def find(self, analysis_id: str, entry_id: str) -> Optional[AnalysisResult]:
        return self._results.get((analysis_id, entry_id))

    def upsert(
        self,
        analysis_id: str,
        entry_id: str,
        checklist_status: Optional[ChecklistStatus],
        revised_fulfillability: Optional[Fulfillability],
        *,
        rule_book_id: str = "",
        segment_key: str = "",
    ) -> AnalysisResult:
        now = datetime.now(timezone.utc)
        with self._lock:
            existing = self._results.get((analysis_id, entry_id))
            if existing is not None:
                result = existing.model_copy(
                    update={
                        "checklist_status": checklist_status,
                        "revised_fulfillability": revised_fulfillability,
                        "rule_book_id": rule_book_id or existing.rule_book_id,
                        "segment_key": segment_key or existing.segment_key,
                        "last_updated": now,
                    }
                )
            else:
                result = AnalysisResult(
                    id=f"rar-{uuid.uuid4()}",
                    project_analysis_id=analysis_id,
                    rule_book_entry_id=entry_id,
                    rule_book_id=rule_book_id,
                    segment_key=segment_key,
                    checklist_status=checklist_status,
                    revised_fulfillability=revised_fulfillability,
                    last_updated=now,
                )
            updated = dict(self._results)
            updated[(analysis_id, entry_id)] = result
            self._commit(updated)
        return result

    def list_by_analysis(self, analysis_id: str) -> List[AnalysisResult]:
        return [r for (aid, _), r in list(self._results.items()) if aid == analysis_id]

    def delete_by_analysis(self, analysis_id: str) -> None:
        with self._lock:
            self._commit({k: r for k, r in self._results.items() if k[0] != analysis_id})

    def _commit(self, results: Dict[Tuple[str, str], AnalysisResult]) -> None:
        """Swap in the next state; runs under the lock."""
        self._results = results


class LocalJsonAnalysisResultStore(InMemoryAnalysisResultStore):
    """Result store persisted to a single JSON file, rewritten after each change."""

    def __init__(self, path: Path) -> None:
        self._path = path
        super().__init__(self._load(path))

    @staticmethod
    def _load(path: Path) -> List[AnalysisResult]:
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        if not isinstance(raw, list):
            raise ValueError(f"Result store {path} must contain a JSON list.")
        return [AnalysisResult.model_validate(item) for item in raw]

    def _commit(self, results: Dict[Tuple[str, str], AnalysisResult]) -> None:
        # Memory only changes once the file on disk holds the same state.
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump(mode="json") for r in results.values()]
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)
        super()._commit(results)
