"""Industry detection and rule lookup."""
from __future__ import annotations

import re

from cvmatch.config import RuleSet
from cvmatch.keywords import cv_text
from cvmatch.log import get_logger
from cvmatch.models import CVProfile, IndustryRules, JobPosting
from cvmatch.text import normalize

log = get_logger(__name__)


def _occurrences(keyword: str, text: str) -> int:
    return len(re.findall(rf"(?<!\w){re.escape(keyword)}(?!\w)", text))


def industry_scores(text: str, rules: RuleSet) -> dict[str, int]:
    """Keyword occurrence count per industry, in canonical order."""
    low = normalize(text)
    return {
        industry.id: sum(_occurrences(k, low) for k in industry.keywords)
        for industry in rules.industries
    }


def classify_text(text: str, rules: RuleSet) -> IndustryRules:
    """Industry whose keywords occur most often; the first declared wins ties."""
    best: IndustryRules | None = None
    best_count = 0
    scores = industry_scores(text, rules)
    for industry in rules.industries:
        if scores[industry.id] > best_count:
            best, best_count = industry, scores[industry.id]
    if best is None:
        log.debug("No industry keywords found; using %s", rules.default_industry)
        return rules.default
    return best


def classify_cv(cv: CVProfile, rules: RuleSet) -> IndustryRules:
    return classify_text(cv_text(cv), rules)


def rules_for(name: str | None, rules: RuleSet) -> IndustryRules:
    """Named industry's rules, falling back to the default for unknown names."""
    found = rules.industry(name)
    if found is None:
        log.debug("Unknown industry %r; using %s", name, rules.default_industry)
        return rules.default
    return found


def resolve_for_job(cv: CVProfile, job: JobPosting, rules: RuleSet) -> IndustryRules:
    """The posting's declared industry when known, else the CV's detected one."""
    return rules.industry(job.industry) or classify_cv(cv, rules)
