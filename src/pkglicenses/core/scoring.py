# scoring.py
# SPDX-License-Identifier: MIT
"""Pick the reference license closest to a candidate text.

Similarity is the Dice coefficient over word sets::

    score = 2 * |candidate & template| / (|candidate| + |template|)

It is 1.0 only when both sets are equal and does not favor long or short
documents the way a plain shared-word count would.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from .locate import DirectoryReadError
from .log import get_logger
from .normalize import normalize
from .records import NO_MATCH, MatchResult, Template, WordSet

log = get_logger(__name__)

__all__ = ["dice_score", "match_words", "match_templates", "MatchCache"]


def dice_score(words: WordSet, template_words: WordSet) -> float | None:
    """Return the Dice coefficient of two word sets, None when both are empty."""
    total = len(words) + len(template_words)
    if total == 0:
        return None
    common = sum(1 for word in words if word in template_words)
    return 2.0 * common / total


def _ordered_difference(words: WordSet, other: WordSet) -> tuple[str, ...]:
    """Tokens of ``words`` absent from ``other``, by first occurrence in ``words``."""
    missing = [(index, word) for word, index in words.items() if word not in other]
    missing.sort()
    return tuple(word for _, word in missing)


def match_words(words: WordSet, templates: Sequence[Template]) -> MatchResult:
    """Return the template closest to a candidate word set.

    Templates are visited in corpus order and only a strictly greater score
    replaces the running best, so exact ties go to the first template. An
    empty candidate scores 0 against every non-empty template and still
    reports the first of them.

    Args:
        words (WordSet): Candidate word set from :func:`normalize`.
        templates (Sequence[Template]): Corpus to compare against.

    Returns:
        MatchResult: Best template with its score and vocabulary delta, or
        an empty result (no template, score 0) when nothing could be scored.
    """
    best: Template | None = None
    best_score = -1.0
    for template in templates:
        score = dice_score(words, template.words)
        if score is None:
            continue
        if score > best_score:
            best_score = score
            best = template
    if best is None:
        return NO_MATCH
    return MatchResult(
        template=best,
        score=best_score,
        extra_words=_ordered_difference(words, best.words),
        missing_words=_ordered_difference(best.words, words),
    )


def match_templates(text: str, templates: Sequence[Template]) -> MatchResult:
    """Normalize ``text`` and match it against ``templates``."""
    return match_words(normalize(text), templates)


class MatchCache:
    """Per-run memo of match results keyed by license file path.

    Many packages of one repository usually share a single license file;
    the file is read and scored once and the result is handed to each of
    them. The cache is never invalidated and must not outlive a run.
    """

    def __init__(
        self,
        templates: Sequence[Template],
        *,
        reader: Callable[[str], str] | None = None,
    ) -> None:
        self._templates = templates
        self._reader = reader or _read_license_text
        self._results: dict[str, MatchResult] = {}
        self.hits = 0

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, path: object) -> bool:
        return path in self._results

    @property
    def results(self) -> Mapping[str, MatchResult]:
        return self._results

    def match_file(self, path: str) -> MatchResult:
        """Return the match result for the license file at ``path``."""
        cached = self._results.get(path)
        if cached is not None:
            self.hits += 1
            log.debug("Match cache hit for %s", path)
            return cached
        result = match_templates(self._reader(path), self._templates)
        self._results[path] = result
        return result


def _read_license_text(path: str) -> str:
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise DirectoryReadError(path, exc) from exc
    return data.decode("utf-8-sig", errors="replace")
