from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .decisions import parse_checklist_status, parse_fulfillability, resolve_decision
from .errors import InvalidStateError, NotFoundError
from .filtering import criteria_for_analysis, filter_entries
from .models import (
    AnalysisCriteria,
    AnalysisResult,
    AnalysisResultData,
    ChecklistStatus,
    FilteredRuleBook,
    Fulfillability,
    ProjectAnalysisDetails,
    RuleBook,
    RuleBookDetails,
    RuleBookEntry,
    RuleBookProgress,
    SegmentDetails,
    SegmentEntry,
    SegmentRef,
)
from .navigator import is_analysis_complete, next_segment, ordered_segments
from .progress import index_results, rule_book_progress
from .reporting import build_result_data
from .repositories import AnalysisRepository, AnalysisResultStore, RuleBookRepository
from .segmentation import assign_segment_keys, segment_entries
from .vocabulary import Translator


logger = logging.getLogger(__name__)

TagInput = Optional[Union[Iterable[str], str]]


class RuleAnalysisService:
    """Caller-facing operations of the rule analysis engine.

    Nothing derived is cached: every call re-reads rule books, the analysis
    and its stored decisions, so answers always reflect current storage.
    """

    def __init__(
        self,
        *,
        rule_books: RuleBookRepository,
        analyses: AnalysisRepository,
        results: AnalysisResultStore,
        translator: Optional[Translator] = None,
        config: EngineConfig = DEFAULT_CONFIG,
    ):
        self._rule_books = rule_books
        self._analyses = analyses
        self._results = results
        self._translator = translator or Translator()
        self._config = config

    # Lookups

    def _analysis_details(self, analysis_id: str) -> ProjectAnalysisDetails:
        details = self._analyses.get_project_analysis_details(analysis_id)
        if details is None:
            raise NotFoundError("Project analysis", analysis_id)
        return details

    def _rule_book_details(self, rule_book_id: str) -> RuleBookDetails:
        details = self._rule_books.get_rule_book_details(rule_book_id)
        if details is None:
            raise NotFoundError("Rule book", rule_book_id)
        return details

    def _criteria(
        self,
        details: ProjectAnalysisDetails,
        *,
        new_use: TagInput = None,
        fulfillability: TagInput = None,
    ) -> AnalysisCriteria:
        return criteria_for_analysis(
            details.analysis,
            self._translator,
            new_use=new_use,
            fulfillability=fulfillability,
        )

    # Filtering and segmentation

    def get_filtered_rule_books(
        self,
        analysis_id: str,
        *,
        new_use: TagInput = None,
        fulfillability: TagInput = None,
    ) -> List[FilteredRuleBook]:
        criteria = self._criteria(
            self._analysis_details(analysis_id),
            new_use=new_use,
            fulfillability=fulfillability,
        )
        if criteria.is_empty:
            return []

        filtered: List[FilteredRuleBook] = []
        for book in self._rule_books.get_rule_books():
            details = self._rule_books.get_rule_book_details(book.id)
            if details is None:
                continue
            entries = filter_entries(
                details.entries,
                criteria.new_use,
                criteria.fulfillability,
                config=self._config,
            )
            if entries:
                filtered.append(FilteredRuleBook(rule_book=details.rule_book, entries=entries))
        return filtered

    def get_segmented_rule_book_data(self, analysis_id: str) -> List[RuleBookProgress]:
        filtered = self.get_filtered_rule_books(analysis_id)
        results_by_entry = index_results(self._results.list_by_analysis(analysis_id))
        progress = [
            rule_book_progress(
                item.rule_book,
                segment_entries(item.entries, config=self._config),
                results_by_entry,
                config=self._config,
            )
            for item in filtered
        ]
        logger.debug("Analysis %s spans %d rule books", analysis_id, len(progress))
        return progress

    def get_ordered_segments(self, analysis_id: str) -> List[SegmentRef]:
        return ordered_segments(self.get_segmented_rule_book_data(analysis_id))

    def get_next_segment(self, analysis_id: str, rule_book_id: str, segment_key: str) -> Optional[SegmentRef]:
        """Segment after the given one, or None when the review has reached the end."""
        return next_segment(self.get_ordered_segments(analysis_id), rule_book_id, segment_key)

    def is_analysis_complete(self, analysis_id: str) -> bool:
        return is_analysis_complete(self.get_segmented_rule_book_data(analysis_id))

    def get_segment_details(self, analysis_id: str, rule_book_id: str, segment_key: str) -> SegmentDetails:
        analysis_details = self._analysis_details(analysis_id)
        book_details = self._rule_book_details(rule_book_id)

        criteria = self._criteria(analysis_details)
        if not criteria.new_use:
            raise InvalidStateError(f"Analysis criteria not set for project analysis {analysis_id}.")

        filtered = filter_entries(
            book_details.entries,
            criteria.new_use,
            criteria.fulfillability,
            config=self._config,
        )
        results_by_entry = index_results(self._results.list_by_analysis(analysis_id))
        entries = [
            SegmentEntry(**entry.model_dump(), analysis=results_by_entry.get(entry.id))
            for key, entry in assign_segment_keys(filtered, config=self._config)
            if key == segment_key
        ]
        return SegmentDetails(
            project_analysis=analysis_details.analysis,
            rule_book=book_details.rule_book,
            segment_key=segment_key,
            entries=entries,
            reference_tables=book_details.reference_tables,
        )

    # Decisions

    def save_analysis_result(
        self,
        *,
        analysis_id: str,
        rule_book_id: str,
        entry_id: str,
        segment_key: str,
        checklist_status: Union[ChecklistStatus, str, None],
        revised_fulfillability: Union[Fulfillability, str, None] = None,
    ) -> AnalysisResult:
        self._analysis_details(analysis_id)
        status, revised = resolve_decision(
            parse_checklist_status(checklist_status),
            parse_fulfillability(revised_fulfillability),
        )
        result = self._results.upsert(
            analysis_id,
            entry_id,
            status,
            revised,
            rule_book_id=rule_book_id,
            segment_key=segment_key,
        )
        logger.info(
            "Saved decision for analysis %s entry %s: %s / %s",
            analysis_id,
            entry_id,
            status.value if status else None,
            revised.value if revised else None,
        )
        return result

    def get_analysis_result_data(self, analysis_id: str) -> AnalysisResultData:
        self._analysis_details(analysis_id)
        results = self._results.list_by_analysis(analysis_id)
        rule_books: Dict[str, RuleBook] = {}
        entries: Dict[str, RuleBookEntry] = {}
        for rule_book_id in dict.fromkeys(r.rule_book_id for r in results if r.rule_book_id):
            details = self._rule_books.get_rule_book_details(rule_book_id)
            if details is None:
                continue
            rule_books[rule_book_id] = details.rule_book
            entries.update((e.id, e) for e in details.entries)
        return build_result_data(results, entries=entries, rule_books=rule_books, config=self._config)

    def discard_analysis(self, analysis_id: str) -> None:
        self._results.delete_by_analysis(analysis_id)
        logger.info("Discarded stored decisions for analysis %s", analysis_id)
