"""Keyword extraction and fuzzy preset lookup.

Model names are split into keywords ("claude-sonnet-4-5" -> ["claude",
"sonnet"]) and each keyword is searched, in order, against the preset names.
The first keyword with any hit decides the preset.

Scoring is rapidfuzz ``partial_ratio`` on normalized strings, so a keyword
matching anywhere inside a preset name counts the same as a prefix match.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz, process, utils

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[-_.\s]+")
_NUMERIC = re.compile(r"\d+")
_MIN_KEYWORD_LEN = 3


def extract_keywords(model_name: Any) -> list[str]:
    """Lower-cased name tokens, minus short connectors and version numbers."""
    if not isinstance(model_name, str) or not model_name:
        return []
    return [
        word for word in _SEPARATORS.split(model_name.lower())
        if len(word) >= _MIN_KEYWORD_LEN and not _NUMERIC.fullmatch(word)
    ]


@dataclass(frozen=True)
class FuzzyMatch:
    item: str
    score: float
    index: int


class FuzzyIndex:
    """Search a fixed candidate list with a 0..1 strictness threshold.

    threshold 0.0 accepts only perfect matches; higher values accept
    progressively weaker ones. A candidate passes when its score beats
    ``(1 - threshold) * 100`` or is a perfect 100.
    """

    def __init__(self, candidates: Sequence[str], threshold: float = 0.5):
        self._candidates = list(candidates)
        self.threshold = min(max(float(threshold), 0.0), 1.0)

    @property
    def score_cutoff(self) -> float:
        return (1.0 - self.threshold) * 100.0

    def search(self, query: str) -> list[FuzzyMatch]:
        """Matches best-first; equal scores keep candidate order."""
        if not query or not self._candidates:
            return []
        cutoff = self.score_cutoff
        results = process.extract(
            query,
            self._candidates,
            scorer=fuzz.partial_ratio,
            processor=utils.default_process,
            score_cutoff=cutoff,
            limit=None,
        )
        matches = [
            FuzzyMatch(item=item, score=score, index=index)
            for item, score, index in results
            if score > cutoff or score >= 100.0
        ]
        matches.sort(key=lambda m: (-m.score, m.index))
        return matches


def find_matching_preset(
    model_name: Any,
    preset_service: Any,
    threshold: float,
    keywords: list[str] | None = None,
) -> str | None:
    """Return the preset for the first keyword with a fuzzy hit, else None.

    ``preset_service`` needs a ``get_all_presets()`` method. A missing or
    failing service, or an empty preset list, means no match. ``keywords``
    defaults to ``extract_keywords(model_name)``.
    """
    if not isinstance(model_name, str) or not model_name:
        logger.debug(f"Invalid model name: {model_name!r}")
        return None

    if preset_service is None:
        logger.debug("Preset manager not found")
        return None

    try:
        all_presets = preset_service.get_all_presets()
    except Exception as e:
        logger.debug(f"Preset manager unavailable: {e}")
        return None

    if not isinstance(all_presets, (list, tuple)) or not all_presets:
        logger.debug("No presets available")
        return None

    if keywords is None:
        keywords = extract_keywords(model_name)
    logger.debug(f"Model keywords: {keywords}")

    index = FuzzyIndex([str(p) for p in all_presets], threshold=threshold)
    for keyword in keywords:
        results = index.search(keyword)
        if results:
            matched = results[0].item
            logger.info(f'Matched "{keyword}" to preset "{matched}"')
            return matched

    logger.debug(f"No matching preset found for model: {model_name}")
    return None
