from __future__ import annotations

from typing import Any, List


def normalize_multi_value(value: Any) -> List[str]:
    """Coerce a stored multi-value field into a list of clean strings.

    Accepts a real list, a comma-delimited string, or a Postgres-style array
    literal such as ``{"Office","Retail"}``. Malformed input degrades to a
    best-effort split; this never raises.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [item if isinstance(item, str) else str(item) for item in value]
        return [item for item in items if item.strip()]
    if not isinstance(value, str):
        value = str(value)

    raw = value.strip()
    if not raw:
        return []

    if raw.startswith("{") and raw.endswith("}"):
        pieces = raw[1:-1].split(",")
        return [p.replace('"', "").strip() for p in pieces if p.replace('"', "").strip()]

    return [p.strip() for p in raw.split(",") if p.strip()]
