"""Match a CV against postings: per-job scoring, filtering and ranking."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Iterable, Mapping

from cvmatch.ats import analyze_cv
from cvmatch.config import RuleSet, get_max_workers, load_rules
from cvmatch.gaps import analyze_gaps
from cvmatch.industry import resolve_for_job
from cvmatch.keywords import cv_terms, job_keywords, match_keywords
from cvmatch.log import get_logger
from cvmatch.models import CVProfile, InvalidRecordError, JobPosting, MatchResult, Preferences
from cvmatch.recommendations import improvement_suggestions, match_reasons, recommendations
from cvmatch.scorer import (
    candidate_years,
    education_alignment,
    experience_score,
    industry_alignment,
    job_salary_range,
    location_score,
    predicted_success,
    province_of,
    required_years,
    round_score,
    salary_score,
    skills_score,
)

log = get_logger(__name__)

MAX_MATCHES = 50


def _as_cv(cv: CVProfile | Mapping[str, Any]) -> CVProfile:
    if isinstance(cv, CVProfile):
        return cv
    if isinstance(cv, Mapping):
        return CVProfile.from_dict(cv)
    raise InvalidRecordError(f"expected a CV profile, got {type(cv).__name__}")


def _as_job(job: JobPosting | Mapping[str, Any]) -> JobPosting:
    if isinstance(job, JobPosting):
        return job
    if isinstance(job, Mapping):
        return JobPosting.from_dict(job)
    raise InvalidRecordError(f"expected a job posting, got {type(job).__name__}")


def analyze_job_match(
    cv: CVProfile | Mapping[str, Any],
    job: JobPosting | Mapping[str, Any],
    *,
    rules: RuleSet | None = None,
    today: date | None = None,
) -> MatchResult:
    """Score one posting for one CV. Pure: equal inputs give equal results."""
    cv, job = _as_cv(cv), _as_job(job)
    rules = rules or load_rules()
    industry = resolve_for_job(cv, job, rules)

    keywords = job_keywords(job, rules)
    matches = match_keywords(keywords, cv_terms(cv, rules), rules)
    matched = [m.keyword for m in matches if m.in_cv]
    missing = [m.keyword for m in matches if not m.in_cv]

    skills = skills_score(len(matched), len(matches))
    experience = experience_score(candidate_years(cv, today), required_years(job))
    location = location_score(cv.personal.location, job, rules)
    salary = salary_score(cv.expected_salary, job_salary_range(job))
    if job.ats_score is not None:
        ats = round_score(job.ats_score)
    else:
        ats = analyze_cv(cv, industry.id, rules=rules).overall_score

    w = industry.weights
    overall = round_score(
        skills * w.skills + experience * w.experience + ats * w.ats + location * w.location
    )
    gaps = analyze_gaps(matches, rules)

    return MatchResult(
        job=job,
        overall_score=overall,
        skills_match=skills,
        experience_match=experience,
        location_match=location,
        salary_match=salary,
        ats_compatibility=ats,
        predicted_application_success=predicted_success(overall, job, rules, today),
        industry=industry.id,
        education_alignment=education_alignment(cv, job, rules),
        industry_alignment=industry_alignment(keywords, industry),
        match_reasons=match_reasons(
            cv, job,
            skills=skills, experience=experience, location=location, salary=salary, ats=ats,
        ),
        improvement_suggestions=improvement_suggestions(skills=skills, experience=experience, ats=ats),
        recommendations=recommendations(overall, matches, gaps),
        matched_keywords=matched,
        missing_keywords=missing,
        keyword_matches=matches,
        skills_gap=gaps,
    )


def _passes(job: JobPosting, prefs: Preferences, rules: RuleSet) -> bool:
    if prefs.preferred_provinces:
        province = (job.province or "").upper() or province_of(job.location, rules)
        if province not in prefs.preferred_provinces:
            return False

    if prefs.job_types:
        wanted = {t.lower() for t in prefs.job_types}
        if (job.employment_type or "").lower() not in wanted:
            return False

    salary_range = job_salary_range(job)
    if salary_range is not None:
        if prefs.min_salary is not None and salary_range.max < prefs.min_salary:
            return False
        if prefs.max_salary is not None and salary_range.min > prefs.max_salary:
            return False
    return True


def find_matches(
    cv: CVProfile | Mapping[str, Any],
    jobs: Iterable[JobPosting | Mapping[str, Any]],
    preferences: Preferences | Mapping[str, Any] | None = None,
    *,
    rules: RuleSet | None = None,
    today: date | None = None,
    max_workers: int | None = None,
) -> list[MatchResult]:
    """Rank postings for a CV, best first, capped at ``MAX_MATCHES``.

    Sorting is stable, so postings with equal ranking scores keep their
    input order regardless of how many workers scored them.
    """
    cv = _as_cv(cv)
    postings = [_as_job(j) for j in jobs]
    rules = rules or load_rules()
    workers = max_workers or get_max_workers()

    def _score(job: JobPosting) -> MatchResult:
        return analyze_job_match(cv, job, rules=rules, today=today)

    if workers > 1 and len(postings) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_score, postings))
    else:
        results = [_score(job) for job in postings]

    if preferences is not None:
        if not isinstance(preferences, Preferences):
            preferences = Preferences.from_dict(preferences)
        results = [r for r in results if _passes(r.job, preferences, rules)]

    results.sort(key=lambda r: r.ranking_score, reverse=True)
    log.info("Scored %d jobs → %d after filters, returning top %d",
             len(postings), len(results), min(len(results), MAX_MATCHES))
    return results[:MAX_MATCHES]
