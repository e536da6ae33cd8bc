from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    STATUSES_REQUIRING_FULFILLABILITY,
    AnalysisResult,
    RuleBook,
    RuleBookEntry,
    RuleBookProgress,
    SegmentProgress,
)


def index_results(results: Iterable[AnalysisResult]) -> Dict[str, AnalysisResult]:
    return {r.rule_book_entry_id: r for r in results}


def is_parameter(entry: RuleBookEntry, *, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    return entry.column(config.columns.column_type) == config.parameter_type


def is_completed(result: Optional[AnalysisResult]) -> bool:
    if result is None or result.checklist_status is None:
        return False
    if result.checklist_status in STATUSES_REQUIRING_FULFILLABILITY:
        return result.revised_fulfillability is not None
    return True


def segment_progress(
    key: str,
    entries: Sequence[RuleBookEntry],
    results_by_entry: Mapping[str, AnalysisResult],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> SegmentProgress:
    parameters = [e for e in entries if is_parameter(e, config=config)]
    completed = sum(1 for e in parameters if is_completed(results_by_entry.get(e.id)))
    return SegmentProgress(
        key=key,
        total_rows=len(entries),
        total_parameters=len(parameters),
        completed_parameters=completed,
    )


def rule_book_progress(
    rule_book: RuleBook,
    segments: Mapping[str, Sequence[RuleBookEntry]],
    results_by_entry: Mapping[str, AnalysisResult],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> RuleBookProgress:
    stats = [segment_progress(key, rows, results_by_entry, config=config) for key, rows in segments.items()]
    return RuleBookProgress(
        rule_book=rule_book,
        segments=stats,
        total_rows=sum(s.total_rows for s in stats),
        total_parameters=sum(s.total_parameters for s in stats),
        total_completed=sum(s.completed_parameters for s in stats),
    )
