"""Human-readable reasons and advice attached to a match.

Rules run in a fixed order and each adds at most one line, so the same
inputs always produce the same list.
"""
from __future__ import annotations

from cvmatch.models import CVProfile, JobPosting, KeywordMatch, SkillGap

HIGH_WEIGHT_CATEGORIES = ("technical", "industry")

STRONG_MATCH = 70
FAIR_MATCH = 50


def recommendations(overall: int, matches: list[KeywordMatch], gaps: list[SkillGap]) -> list[str]:
    out: list[str] = []

    if overall < FAIR_MATCH:
        out.append("Consider gaining more relevant experience before applying")

    key_missing = [m.keyword for m in matches if not m.in_cv and m.category in HIGH_WEIGHT_CATEGORIES]
    if key_missing:
        out.append(f"Focus on learning these key skills: {', '.join(key_missing[:3])}")

    high_gaps = [g.skill for g in gaps if g.priority == "high"]
    if high_gaps:
        out.append(f"Address high-priority skill gaps: {', '.join(high_gaps[:2])}")

    if overall >= STRONG_MATCH:
        out.append("Your profile is a strong match - consider applying soon")
    elif overall >= FAIR_MATCH:
        out.append("Highlight transferable skills and relevant experience in your application")
    else:
        out.append("Consider building more relevant experience before applying")
    return out


def _languages_met(cv: CVProfile, job: JobPosting) -> bool:
    if not job.language_requirements:
        return False
    spoken = {lang.strip().lower() for lang in cv.languages}
    return all(lang.strip().lower() in spoken for lang in job.language_requirements)


def match_reasons(
    cv: CVProfile,
    job: JobPosting,
    *,
    skills: int,
    experience: int,
    location: int,
    salary: int,
    ats: int,
) -> list[str]:
    reasons: list[str] = []
    if skills >= 80:
        reasons.append(f"Strong skills match ({skills}%)")
    if experience >= 80:
        reasons.append("Experience level matches")
    if location >= 80:
        reasons.append("Preferred location")
    if ats >= 80:
        reasons.append("CV is ATS-optimized")
    if salary >= 80:
        reasons.append("Salary range fits your expectation")
    if job.bee_requirement and cv.bee_candidate:
        reasons.append("BEE requirements met")
    if _languages_met(cv, job):
        reasons.append("Language requirements met")
    return reasons


def improvement_suggestions(*, skills: int, experience: int, ats: int) -> list[str]:
    suggestions: list[str] = []
    if skills < 60:
        suggestions.append("Add missing skills to your CV")
    if experience < 60:
        suggestions.append("Highlight relevant experience")
    if ats < 70:
        suggestions.append("Optimize CV for ATS systems")
    return suggestions
