from __future__ import annotations

from typing import List, Optional, Protocol

from .models import (
    AnalysisResult,
    ChecklistStatus,
    Fulfillability,
    ProjectAnalysisDetails,
    RuleBook,
    RuleBookDetails,
)


class RuleBookRepository(Protocol):
    def get_rule_books(self) -> List[RuleBook]:
        """Latest version of every rule book, most recently imported first."""
        ...

    def get_rule_book_details(self, rule_book_id: str) -> Optional[RuleBookDetails]:
        """Rule book with its entries in import order, or None if unknown."""
        ...


class AnalysisRepository(Protocol):
    def get_project_analysis_details(self, analysis_id: str) -> Optional[ProjectAnalysisDetails]:
        ...


class AnalysisResultStore(Protocol):
    def find(self, analysis_id: str, entry_id: str) -> Optional[AnalysisResult]:
        ...

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
        """Insert or update the single decision for (analysis, entry); atomic per pair."""
        ...

    def list_by_analysis(self, analysis_id: str) -> List[AnalysisResult]:
        ...

    def delete_by_analysis(self, analysis_id: str) -> None:
        ...
