from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional


logger = logging.getLogger(__name__)


def _freeze(mapping: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType({str(k): str(v) for k, v in (mapping or {}).items() if v is not None})


@dataclass(frozen=True)
class Vocabulary:
    """Two flat translation dictionaries sharing the same keys.

    `canonical` holds the analysis' working language (the labels an analyst
    picks), `target` holds `target_language`, the language rule-book text is
    written in. Loaded once at startup and never mutated afterwards.
    """

    canonical: Mapping[str, str] = field(default_factory=dict)
    target: Mapping[str, str] = field(default_factory=dict)
    target_language: str = "de"

    def __post_init__(self) -> None:
        object.__setattr__(self, "canonical", _freeze(self.canonical))
        object.__setattr__(self, "target", _freeze(self.target))

    def key_for(self, text: str) -> Optional[str]:
        for key, value in self.canonical.items():
            if value == text:
                return key
        return None


def _load_dictionary(path: Optional[Path]) -> dict[str, str]:
    if path is None:
        return {}
    if not path.exists():
        logger.warning("Vocabulary file %s not found; translations disabled for it.", path)
        return {}
    with path.open("r", encoding="utf-8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(f"Vocabulary file {path} must contain a JSON object.")
    return {str(k): str(v) for k, v in raw.items() if v is not None}


def load_vocabulary(canonical_path: Optional[Path], target_path: Optional[Path]) -> Vocabulary:
    """Dictionaries are named after their language, e.g. `vocabulary/de.json`."""
    return Vocabulary(
        canonical=_load_dictionary(canonical_path),
        target=_load_dictionary(target_path),
        target_language=target_path.stem.lower() if target_path is not None else "de",
    )


class Translator:
    def __init__(self, vocabulary: Optional[Vocabulary] = None):
        self._vocabulary = vocabulary or Vocabulary()

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    def translate(self, token: str) -> str:
        """Map a working-language token to its rule-book-language spelling.

        Falls back to a direct key lookup, then to the token itself; a miss
        only weakens matching and is never an error.
        """
        if not token:
            return token
        key = self._vocabulary.key_for(token)
        if key is not None and key in self._vocabulary.target:
            return self._vocabulary.target[key]
        if token in self._vocabulary.target:
            return self._vocabulary.target[token]
        return token

    def translate_all(self, tokens: Iterable[str], *, source_language: Optional[str] = None) -> List[str]:
        tokens = list(tokens)
        if source_language and source_language.strip().lower() == self._vocabulary.target_language.lower():
            return tokens
        return [self.translate(t) for t in tokens]
