from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ColumnNames(BaseModel):
    # Defaults follow the German headers of the imported rule-book spreadsheets.
    outline: str = "Gliederung"
    text: str = "Text"
    usage: str = "Nutzung"
    column_type: str = "Spaltentyp"
    fulfillability: str = "Erfüllbarkeit"


class EngineConfig(BaseModel):
    """Column mapping and vocabulary the engine reads rule-book entries with.

    Build from a plain dict with `EngineConfig.model_validate(raw)`; unknown
    keys fall back to the defaults below.
    """

    columns: ColumnNames = Field(default_factory=ColumnNames)
    # Compared trimmed and case-insensitively; a placeholder means "applies to everything".
    placeholders: List[str] = Field(
        default_factory=lambda: ["Bitte auswaehlen", "Bitte auswählen", "Please select"]
    )
    parameter_type: str = "Parameter"
    fallback_segment_key: str = "0"

    def is_placeholder(self, value: str) -> bool:
        folded = value.strip().lower()
        return any(folded == p.strip().lower() for p in self.placeholders)

    def is_unspecified(self, value: str) -> bool:
        return not value.strip() or self.is_placeholder(value)


DEFAULT_CONFIG = EngineConfig()
