from __future__ import annotations

from typing import Iterable, List, Optional

from .models import RuleBookProgress, SegmentRef


def ordered_segments(books: Iterable[RuleBookProgress]) -> List[SegmentRef]:
    """All segments of all rule books as one flat review sequence.

    Rule books keep the order they were given in and segments keep discovery
    order; keys are strings and are deliberately not re-sorted numerically.
    """
    return [
        SegmentRef(rule_book_id=book.rule_book.id, segment_key=segment.key)
        for book in books
        for segment in book.segments
    ]


def next_segment(sequence: List[SegmentRef], rule_book_id: str, segment_key: str) -> Optional[SegmentRef]:
    for idx, ref in enumerate(sequence):
        if ref.rule_book_id == rule_book_id and ref.segment_key == segment_key:
            return sequence[idx + 1] if idx + 1 < len(sequence) else None
    return None


def is_analysis_complete(books: Iterable[RuleBookProgress]) -> bool:
    return all(book.is_complete for book in books)
