from __future__ import annotations

from typing import Optional, Tuple, Union

from .models import STATUSES_REQUIRING_FULFILLABILITY, ChecklistStatus, Fulfillability


def parse_checklist_status(value: Union[ChecklistStatus, str, None]) -> Optional[ChecklistStatus]:
    """Boundary parser for analyst input; accepts legacy UI labels such as "Unachievable"."""
    if value is None or isinstance(value, ChecklistStatus):
        return value
    if not value.strip():
        return None
    return ChecklistStatus(value)


def parse_fulfillability(value: Union[Fulfillability, str, None]) -> Optional[Fulfillability]:
    if value is None or isinstance(value, Fulfillability):
        return value
    if not value.strip():
        return None
    return Fulfillability(value)


def resolve_decision(
    checklist_status: Optional[ChecklistStatus],
    revised_fulfillability: Optional[Fulfillability],
) -> Tuple[Optional[ChecklistStatus], Optional[Fulfillability]]:
    """Apply the checklist transition rule to an incoming decision.

    Any status may follow any other. A revised fulfillability only survives
    alongside "Not Fulfilled" or "Not verifiable"; otherwise it is cleared,
    even when the caller sent one.
    """
    if checklist_status not in STATUSES_REQUIRING_FULFILLABILITY:
        return checklist_status, None
    return checklist_status, revised_fulfillability
