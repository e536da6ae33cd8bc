from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .models import RuleBookEntry


_LEADING_DIGITS = re.compile(r"^\d+")
_PARAGRAPH_SIGN = re.compile(r"^§\s*(\d+)")


def own_segment_key(outline: str) -> Optional[str]:
    """Top-level outline number of a row, e.g. "3" for "3.2.1" or "§ 14" -> "14"."""
    text = (outline or "").strip()
    match = _LEADING_DIGITS.match(text)
    if match:
        return match.group(0)
    match = _PARAGRAPH_SIGN.match(text)
    if match:
        return match.group(1)
    return None


def assign_segment_keys(
    entries: Sequence[RuleBookEntry],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[Tuple[str, RuleBookEntry]]:
    """Pair every entry with its segment key, in input order.

    Rule books often carry the outline code only on the first row of a
    subsection, so rows without one inherit the key of the row before them.
    Input order is significant and must be the rule book's import order.
    """
    assigned: List[Tuple[str, RuleBookEntry]] = []
    current: Optional[str] = None
    for entry in entries:
        key = own_segment_key(entry.column(config.columns.outline))
        if key is not None:
            current = key
        assigned.append((current if current is not None else config.fallback_segment_key, entry))
    return assigned


def segment_entries(
    entries: Sequence[RuleBookEntry],
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Dict[str, List[RuleBookEntry]]:
    segments: Dict[str, List[RuleBookEntry]] = {}
    for key, entry in assign_segment_keys(entries, config=config):
        segments.setdefault(key, []).append(entry)
    return segments
