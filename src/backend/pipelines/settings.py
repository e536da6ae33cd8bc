from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class AppSettings:
    data_source: str
    data_dir: Path
    results_path: Path
    vocab_canonical_path: Optional[Path]
    vocab_target_path: Optional[Path]
    log_level: str


def get_settings() -> AppSettings:
    """
    Load rule analysis settings from environment variables (and `.env`).

    Reads:
      RULE_ANALYSIS_DATA_SOURCE, RULE_ANALYSIS_DATA_DIR, RULE_ANALYSIS_RESULTS_PATH,
      RULE_ANALYSIS_VOCAB_CANONICAL, RULE_ANALYSIS_VOCAB_TARGET, RULE_ANALYSIS_LOG_LEVEL
    """
    data_dir = Path(os.getenv("RULE_ANALYSIS_DATA_DIR", "").strip() or _default_data_dir())
    results_raw = os.getenv("RULE_ANALYSIS_RESULTS_PATH", "").strip()
    return AppSettings(
        data_source=os.getenv("RULE_ANALYSIS_DATA_SOURCE", "fixtures").strip().lower(),
        data_dir=data_dir,
        results_path=Path(results_raw) if results_raw else data_dir / "analysis_results.json",
        vocab_canonical_path=_optional_path("RULE_ANALYSIS_VOCAB_CANONICAL") or data_dir / "vocabulary" / "en.json",
        vocab_target_path=_optional_path("RULE_ANALYSIS_VOCAB_TARGET") or data_dir / "vocabulary" / "de.json",
        log_level=os.getenv("RULE_ANALYSIS_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def _default_data_dir() -> Path:
    return Path(__file__).resolve().parents[3] / "data"
