from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .normalize import normalize_multi_value


class ChecklistStatus(str, Enum):
    FULFILLED = "Fulfilled"
    NOT_FULFILLED = "Not Fulfilled"
    NOT_RELEVANT = "Not relevant"
    NOT_VERIFIABLE = "Not verifiable"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ChecklistStatus"]:
        # Older UI builds posted "Unachievable" for the same state that is stored as "Not Fulfilled".
        if isinstance(value, str):
            folded = value.strip().lower()
            if folded == "unachievable":
                return cls.NOT_FULFILLED
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return None


class Fulfillability(str, Enum):
    LIGHT = "Light"
    MEDIUM = "Medium"
    HEAVY = "Heavy"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Fulfillability"]:
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return None


# Statuses that require a revised fulfillability before the row counts as reviewed.
STATUSES_REQUIRING_FULFILLABILITY = frozenset({ChecklistStatus.NOT_FULFILLED, ChecklistStatus.NOT_VERIFIABLE})


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RuleBook(BaseModel):
    id: str
    name: str
    version_name: str = ""
    version: int = 1
    imported_at: datetime
    row_count: int = 0


class RuleBookEntry(BaseModel):
    id: str
    rule_book_id: str
    data: Dict[str, Any] = Field(default_factory=dict)

    def column(self, name: str) -> str:
        value = self.data.get(name)
        if value is None:
            return ""
        return str(value).strip()


class ReferenceTable(BaseModel):
    id: str
    rule_book_id: str
    name: str
    data: List[List[Any]] = Field(default_factory=list)


class RuleBookDetails(BaseModel):
    rule_book: RuleBook
    entries: List[RuleBookEntry] = Field(default_factory=list)
    reference_tables: List[ReferenceTable] = Field(default_factory=list)


class ProjectAnalysis(BaseModel):
    id: str
    project_id: str
    project_name: str = ""
    version: int = 1
    started_at: datetime
    last_modified_at: Optional[datetime] = None
    new_use: List[str] = Field(default_factory=list)
    fulfillability: List[str] = Field(default_factory=list)
    language: str = "en"

    @field_validator("new_use", "fulfillability", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> List[str]:
        return normalize_multi_value(value)


class ProjectAnalysisDetails(BaseModel):
    analysis: ProjectAnalysis
    project: Dict[str, Any] = Field(default_factory=dict)


class AnalysisResult(BaseModel):
    id: str
    project_analysis_id: str
    rule_book_entry_id: str
    rule_book_id: str = ""
    segment_key: str = ""
    checklist_status: Optional[ChecklistStatus] = None
    revised_fulfillability: Optional[Fulfillability] = None
    last_updated: Optional[datetime] = None

    @field_validator("checklist_status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return ChecklistStatus(value)
        return value

    @field_validator("revised_fulfillability", mode="before")
    @classmethod
    def _parse_fulfillability(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return Fulfillability(value)
        return value


class AnalysisCriteria(BaseModel):
    """Normalized, translated selections an analysis filters rule books with."""

    new_use: List[str] = Field(default_factory=list)
    fulfillability: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.new_use or not self.fulfillability


class FilteredRuleBook(BaseModel):
    rule_book: RuleBook
    entries: List[RuleBookEntry] = Field(default_factory=list)


class SegmentProgress(BaseModel):
    key: str
    total_rows: int = 0
    total_parameters: int = 0
    completed_parameters: int = 0


class RuleBookProgress(BaseModel):
    rule_book: RuleBook
    segments: List[SegmentProgress] = Field(default_factory=list)
    total_rows: int = 0
    total_parameters: int = 0
    total_completed: int = 0

    @property
    def is_complete(self) -> bool:
        return self.total_parameters == 0 or self.total_completed == self.total_parameters


class SegmentRef(BaseModel):
    rule_book_id: str
    segment_key: str


class SegmentEntry(RuleBookEntry):
    analysis: Optional[AnalysisResult] = None


class SegmentDetails(BaseModel):
    project_analysis: ProjectAnalysis
    rule_book: RuleBook
    segment_key: str
    entries: List[SegmentEntry] = Field(default_factory=list)
    reference_tables: List[ReferenceTable] = Field(default_factory=list)


class ChartDatum(BaseModel):
    name: str
    value: int
    fill: str = ""


class ParameterDetail(BaseModel):
    entry_id: str
    rule_book_id: str = ""
    rule_book_name: str = ""
    segment_key: str = ""
    topic: str = ""
    structure: str = ""
    fulfillability: Optional[Fulfillability] = None


class AnalysisResultData(BaseModel):
    checklist_data: List[ChartDatum] = Field(default_factory=list)
    fulfillability_data: List[ChartDatum] = Field(default_factory=list)
    not_fulfilled_parameters: List[ParameterDetail] = Field(default_factory=list)
    not_verifiable_parameters: List[ParameterDetail] = Field(default_factory=list)
