from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Set

from .config import DEFAULT_CONFIG, EngineConfig
from .models import AnalysisCriteria, ProjectAnalysis, RuleBookEntry
from .normalize import normalize_multi_value
from .vocabulary import Translator


logger = logging.getLogger(__name__)

_USAGE_SEPARATORS = re.compile(r"[,;/]")


def usage_tokens(text: str) -> Set[str]:
    """Lower-cased words of a usage label; `,`, `;` and `/` count as whitespace."""
    return {word.lower() for word in _USAGE_SEPARATORS.sub(" ", text or "").split() if word}


def pooled_usage_tokens(tags: Iterable[str]) -> Set[str]:
    pooled: Set[str] = set()
    for tag in tags:
        pooled |= usage_tokens(tag)
    return pooled


def usage_matches(entry_usage: str, selected_words: Set[str], *, config: EngineConfig = DEFAULT_CONFIG) -> bool:
    if config.is_unspecified(entry_usage):
        return True
    entry_words = usage_tokens(entry_usage)
    overlap = len(entry_words & selected_words)
    # Multi-word labels need two shared words so filler words alone do not match.
    return overlap >= 2 or (len(entry_words) < 2 and overlap > 0)


def fulfillability_matches(
    entry_fulfillability: str,
    selected: Set[str],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> bool:
    if config.is_unspecified(entry_fulfillability):
        return True
    return entry_fulfillability.strip().lower() in selected


def filter_entries(
    entries: Sequence[RuleBookEntry],
    new_use_tags: Sequence[str],
    fulfillability_tags: Sequence[str],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[RuleBookEntry]:
    """Entries that apply to the selected usage and fulfillability, in input order.

    Blank or placeholder cells never exclude an entry. With no usage or no
    fulfillability selected nothing applies.
    """
    if not new_use_tags or not fulfillability_tags:
        return []

    selected_words = pooled_usage_tokens(new_use_tags)
    selected_levels = {tag.strip().lower() for tag in fulfillability_tags if tag.strip()}
    columns = config.columns

    kept = [
        entry
        for entry in entries
        if fulfillability_matches(entry.column(columns.fulfillability), selected_levels, config=config)
        and usage_matches(entry.column(columns.usage), selected_words, config=config)
    ]
    logger.debug("Filtered %d of %d entries", len(kept), len(entries))
    return kept


def criteria_for_analysis(
    analysis: ProjectAnalysis,
    translator: Translator,
    *,
    new_use: Optional[Iterable[str] | str] = None,
    fulfillability: Optional[Iterable[str] | str] = None,
) -> AnalysisCriteria:
    """Selections of an analysis in rule-book language, with optional caller overrides.

    Selections already written in the rule-book language are used untranslated.
    """
    raw_use = analysis.new_use if new_use is None else _as_raw(new_use)
    raw_levels = analysis.fulfillability if fulfillability is None else _as_raw(fulfillability)
    return AnalysisCriteria(
        new_use=translator.translate_all(normalize_multi_value(raw_use), source_language=analysis.language),
        fulfillability=translator.translate_all(normalize_multi_value(raw_levels), source_language=analysis.language),
    )


def _as_raw(value: Iterable[str] | str) -> list[str] | str:
    return value if isinstance(value, str) else list(value)
