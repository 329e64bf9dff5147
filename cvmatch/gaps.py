"""Skills gap analysis: what a posting asks for that the CV lacks."""
from __future__ import annotations

from cvmatch.config import RuleSet
from cvmatch.models import KeywordMatch, SkillGap

_PRIORITY_BY_CATEGORY: dict[str, str] = {
    "technical": "high",
    "industry": "high",
    "soft": "medium",
}
_DEFAULT_LEARNING_TIME = "1-2 weeks"


def skill_priority(category: str) -> str:
    return _PRIORITY_BY_CATEGORY.get(category, "low")


def learning_resources(skill: str, rules: RuleSet) -> tuple[str, ...]:
    return rules.learning_resources.get(skill.lower(), rules.default_resources)


def learning_time(priority: str, rules: RuleSet) -> str:
    return rules.learning_time.get(priority, _DEFAULT_LEARNING_TIME)


def analyze_gaps(matches: list[KeywordMatch], rules: RuleSet) -> list[SkillGap]:
    """One gap per unmatched keyword, in keyword order, capped at the gap limit."""
    gaps: list[SkillGap] = []
    for match in matches:
        if match.in_cv:
            continue
        priority = skill_priority(match.category)
        gaps.append(SkillGap(
            skill=match.keyword,
            category=match.category,
            priority=priority,
            learning_resources=learning_resources(match.keyword, rules),
            estimated_time_to_learn=learning_time(priority, rules),
        ))
        if len(gaps) >= rules.gap_limit:
            break
    return gaps
