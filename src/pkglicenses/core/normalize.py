# normalize.py
# SPDX-License-Identifier: MIT
"""Text normalization shared by license templates and candidate files.

Both sides of a comparison go through :func:`normalize`, so any change here
shifts every score uniformly.
"""

from __future__ import annotations

import re

from .records import WordSet

__all__ = ["strip_copyright", "tokenize", "normalize"]

# Operates on lowercased text. Horizontal whitespace only between the parts
# keeps a match on one line, which makes stripping idempotent.
COPYRIGHT_RE = re.compile(
    r"\s*copyright[ \t]*(?:\(c\)|©|â©)?[ \t]*(?:\d{4}|\[year\])[^\n]*"
)
WORD_RE = re.compile(r"[A-Za-z0-9_']+")


def strip_copyright(text: str) -> str:
    """Delete copyright notice lines from lowercased ``text``."""
    return COPYRIGHT_RE.sub("", text)


def tokenize(text: str) -> list[str]:
    """Lowercase ``text``, drop copyright lines, and split it into words."""
    return WORD_RE.findall(strip_copyright(text.lower()))


def normalize(text: str) -> WordSet:
    """Return the word set of ``text``.

    Each distinct token maps to the index of its first occurrence in the
    token stream; later occurrences never overwrite it.
    """
    words: dict[str, int] = {}
    for index, token in enumerate(tokenize(text)):
        words.setdefault(token, index)
    return words
