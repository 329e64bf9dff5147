"""Keyword extraction from postings and CVs, and keyword-level matching."""
from __future__ import annotations

from collections import Counter

from cvmatch.config import RuleSet
from cvmatch.models import CVProfile, JobPosting, KeywordMatch
from cvmatch.text import matches_any, normalize, tokenize


def cv_text(cv: CVProfile) -> str:
    """All free text in a CV, joined in reading order."""
    parts: list[str] = [cv.personal.job_title or "", cv.summary or ""]
    for exp in cv.experience:
        parts.append(" ".join(filter(None, [exp.title, exp.company, exp.description])))
    for edu in cv.education:
        parts.append(" ".join(filter(None, [edu.degree, edu.institution])))
    parts.append(cv.skills_text)
    parts.extend(cv.certifications)
    parts.extend(cv.projects)
    return " ".join(p for p in parts if p)


def cv_terms(cv: CVProfile, rules: RuleSet) -> list[str]:
    """Deduplicated CV tokens followed by the explicit skill names."""
    terms = tokenize(cv_text(cv), rules) + [normalize(s) for s in cv.skill_names]
    return list(dict.fromkeys(t for t in terms if t))


def top_keywords(text: str, rules: RuleSet, limit: int | None = None) -> list[str]:
    """Most frequent tokens, most frequent first; ties keep first-seen order."""
    counts = Counter(tokenize(text, rules))
    ranked = sorted(counts, key=lambda w: -counts[w])
    return ranked[: limit if limit is not None else rules.job_keyword_limit]


def job_keywords(job: JobPosting, rules: RuleSet) -> list[str]:
    """The posting's explicit keywords, else the top tokens of its description and requirements."""
    explicit = [normalize(k) for k in job.keywords]
    explicit = list(dict.fromkeys(k for k in explicit if k))
    if explicit:
        return explicit[: rules.job_keyword_limit]
    return top_keywords(" ".join([job.description, *job.requirements]), rules)


def categorize(keyword: str, rules: RuleSet) -> str:
    low = normalize(keyword)
    for category, terms in rules.categories:
        if any(term in low for term in terms):
            return category
    return "general"


def keyword_weight(category: str, rules: RuleSet) -> float:
    return rules.category_weights.get(category, 1.0)


def match_keywords(keywords: list[str], terms: list[str], rules: RuleSet) -> list[KeywordMatch]:
    matches: list[KeywordMatch] = []
    for keyword in keywords:
        category = categorize(keyword, rules)
        matches.append(KeywordMatch(
            keyword=keyword,
            in_cv=matches_any(keyword, terms, rules),
            weight=keyword_weight(category, rules),
            category=category,
        ))
    return matches
