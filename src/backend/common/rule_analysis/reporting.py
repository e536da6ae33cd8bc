from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    AnalysisResult,
    AnalysisResultData,
    ChartDatum,
    ChecklistStatus,
    Fulfillability,
    ParameterDetail,
    RuleBook,
    RuleBookEntry,
)


# Chart series names and colours used by the result view.
CHECKLIST_SERIES: Dict[ChecklistStatus, tuple[str, str]] = {
    ChecklistStatus.FULFILLED: ("fulfilled", "#4E79A7"),
    ChecklistStatus.NOT_FULFILLED: ("notFulfilled", "#E15759"),
    ChecklistStatus.NOT_RELEVANT: ("notRelevant", "#BAB0AC"),
    ChecklistStatus.NOT_VERIFIABLE: ("notVerifiable", "#B07AA1"),
}

FULFILLABILITY_COLOURS: Dict[Fulfillability, str] = {
    Fulfillability.LIGHT: "#BAB0AC",
    Fulfillability.MEDIUM: "#7A746F",
    Fulfillability.HEAVY: "#000000",
}


def build_result_data(
    results: Iterable[AnalysisResult],
    *,
    entries: Mapping[str, RuleBookEntry],
    rule_books: Mapping[str, RuleBook],
    config: EngineConfig = DEFAULT_CONFIG,
) -> AnalysisResultData:
    """Aggregate stored decisions for the result charts.

    Categories without any decision are left out. `entries` and `rule_books`
    are lookups by id used to describe the not fulfilled / not verifiable
    parameters; unknown ids still produce a row with what the result carries.
    """
    checklist_counts: Dict[ChecklistStatus, int] = {s: 0 for s in CHECKLIST_SERIES}
    fulfillability_counts: Dict[Fulfillability, int] = {f: 0 for f in FULFILLABILITY_COLOURS}
    not_fulfilled: List[ParameterDetail] = []
    not_verifiable: List[ParameterDetail] = []

    for result in results:
        if result.checklist_status is not None:
            checklist_counts[result.checklist_status] += 1
        if result.revised_fulfillability is not None:
            fulfillability_counts[result.revised_fulfillability] += 1

        if result.checklist_status == ChecklistStatus.NOT_FULFILLED:
            not_fulfilled.append(_parameter_detail(result, entries, rule_books, config))
        elif result.checklist_status == ChecklistStatus.NOT_VERIFIABLE:
            not_verifiable.append(_parameter_detail(result, entries, rule_books, config))

    checklist_data = [
        ChartDatum(name=CHECKLIST_SERIES[status][0], value=count, fill=CHECKLIST_SERIES[status][1])
        for status, count in checklist_counts.items()
        if count > 0
    ]
    fulfillability_data = [
        ChartDatum(name=level.value, value=count, fill=FULFILLABILITY_COLOURS[level])
        for level, count in fulfillability_counts.items()
        if count > 0
    ]
    return AnalysisResultData(
        checklist_data=checklist_data,
        fulfillability_data=fulfillability_data,
        not_fulfilled_parameters=not_fulfilled,
        not_verifiable_parameters=not_verifiable,
    )


def _parameter_detail(
    result: AnalysisResult,
    entries: Mapping[str, RuleBookEntry],
    rule_books: Mapping[str, RuleBook],
    config: EngineConfig,
) -> ParameterDetail:
    entry = entries.get(result.rule_book_entry_id)
    rule_book_id = result.rule_book_id or (entry.rule_book_id if entry else "")
    rule_book = rule_books.get(rule_book_id)
    return ParameterDetail(
        entry_id=result.rule_book_entry_id,
        rule_book_id=rule_book_id,
        rule_book_name=rule_book.name if rule_book else "",
        segment_key=result.segment_key,
        topic=entry.column(config.columns.text) if entry else "",
        structure=entry.column(config.columns.outline) if entry else "",
        fulfillability=result.revised_fulfillability,
    )
