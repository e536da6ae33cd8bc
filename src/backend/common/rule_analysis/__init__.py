"""Source-agnostic rule analysis engine for building-regulation reviews.

This package intentionally contains only domain logic:
- Inputs are rule books, a project analysis and stored analyst decisions.
- Storage lives behind the protocols in `repositories`; no database or file I/O here
  apart from loading the vocabulary dictionaries.
"""

from .config import EngineConfig
from .errors import InvalidStateError, NotFoundError, RuleAnalysisError
from .filtering import filter_entries
from .models import (
    AnalysisResult,
    ChecklistStatus,
    Fulfillability,
    ProjectAnalysis,
    RuleBook,
    RuleBookEntry,
    RuleBookProgress,
    SegmentRef,
)
from .normalize import normalize_multi_value
from .segmentation import segment_entries
from .service import RuleAnalysisService
from .vocabulary import Translator, Vocabulary
