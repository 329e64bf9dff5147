"""Tokenizer and synonym-aware skill comparison."""
from __future__ import annotations

import re

from rapidfuzz.distance import Levenshtein

from cvmatch.config import RuleSet

_PUNCT = re.compile(r"[^\w\s]")


def normalize(s: str | None) -> str:
    return (s or "").lower().strip()


def tokenize(text: str | None, rules: RuleSet) -> list[str]:
    """Lowercase word tokens with punctuation, stopwords and short words removed.

    Order and duplicates are preserved; callers that need frequencies rely on it.
    """
    words = _PUNCT.sub(" ", normalize(text)).split()
    return [
        w for w in words
        if len(w) >= rules.min_token_length and w not in rules.stopwords
    ]


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Edit distance normalized by the longer string; 1.0 means identical."""
    return Levenshtein.normalized_similarity(a, b)


def are_synonyms(a: str, b: str, rules: RuleSet) -> bool:
    return any(a in entry and b in entry for entry in rules.synonyms)


def skills_match(a: str | None, b: str | None, rules: RuleSet) -> bool:
    """True when two skill strings name the same thing.

    Substring containment either way, a shared synonym entry, or edit-distance
    similarity at or above the configured threshold. Symmetric in its arguments.
    """
    a, b = normalize(a), normalize(b)
    if not a or not b:
        return False
    if a == b:
        return True
    shorter = min(len(a), len(b))
    if shorter >= rules.min_containment_length and (a in b or b in a):
        return True
    if are_synonyms(a, b, rules):
        return True
    return similarity(a, b) >= rules.fuzzy_threshold


def matches_any(term: str, candidates: list[str], rules: RuleSet) -> bool:
    return any(skills_match(term, c, rules) for c in candidates)
