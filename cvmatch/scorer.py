"""Per-dimension match scores for a CV against one posting.

Every scorer returns an integer in [0, 100]. Parsers return ``None`` for
text they cannot read so that "unparsable" stays distinguishable from
"no requirement", even though both currently score the same.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime

from dateutil import parser as date_parser

from cvmatch.config import RuleSet
from cvmatch.log import get_logger
from cvmatch.models import CVProfile, IndustryRules, JobPosting
from cvmatch.text import normalize

log = get_logger(__name__)

NEUTRAL_SCORE = 50

_YEARS = re.compile(r"(\d+)\+?\s*(years?|yrs?)", re.IGNORECASE)
_SALARY = re.compile(r"R\s?(\d[\d,\s]*\d|\d)\s*-\s*R\s?(\d[\d,\s]*\d|\d)", re.IGNORECASE)
_ONGOING = {"present", "current", "now", "ongoing", "to date", "today"}
# Missing month or day fill from here, so "2020" reads as 1 January 2020
_DATE_DEFAULT = datetime(2000, 1, 1)

# Location tiers
LOCATION_CITY = 100
LOCATION_REMOTE = 90
LOCATION_PROVINCE = 70
LOCATION_OTHER = 30

# Education alignment below the posting's level
EDUCATION_ONE_BELOW = 75
EDUCATION_FAR_BELOW = 50

# Freshness and competition adjustments to predicted success
FRESH_POSTING_DAYS = 3
STALE_POSTING_DAYS = 14
FRESH_BONUS = 10
STALE_PENALTY = 15
PRESTIGE_PENALTY = 10


def round_score(value: float) -> int:
    """Round half up and clamp to the 0-100 score range."""
    return max(0, min(100, int(math.floor(value + 0.5))))


# ── Skills ───────────────────────────────────────────────────────────────


def skills_score(matched: int, total: int) -> int:
    if total <= 0:
        return 100
    return round_score(100 * matched / total)


# ── Experience ───────────────────────────────────────────────────────────


def parse_required_years(text: str | None) -> int | None:
    match = _YEARS.search(text or "")
    return int(match.group(1)) if match else None


def required_years(job: JobPosting) -> int | None:
    if job.experience_years is not None:
        return job.experience_years
    return parse_required_years(job.text)


def parse_date(value: str | None, today: date | None = None) -> date | None:
    text = normalize(value)
    if not text:
        return None
    if text in _ONGOING:
        return today or date.today()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return date_parser.parse(text, default=_DATE_DEFAULT, fuzzy=True).date()
    except (ValueError, OverflowError):
        log.debug("Unparsable date %r", value)
        return None


def candidate_years(cv: CVProfile, today: date | None = None) -> float:
    """Summed employment span in years.

    Entries whose start and end dates both parse contribute their span;
    any other entry counts as one year.
    """
    total = 0.0
    for exp in cv.experience:
        start = parse_date(exp.start_date, today)
        end = parse_date(exp.end_date, today)
        if start and end:
            total += max(0, (end - start).days) / 365.25
        else:
            total += 1.0
    return total


def experience_score(candidate: float, required: int | None) -> int:
    if not required:
        return 100
    if candidate >= required:
        return 100
    if candidate >= required * 0.8:
        return 80
    if candidate >= required * 0.6:
        return 60
    return max(20, round_score(candidate / required * 100))


# ── Location ─────────────────────────────────────────────────────────────


def _word(term: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)")


def province_of(location: str | None, rules: RuleSet) -> str | None:
    """Province of the last known city named in *location*.

    Addresses put the city after street and building names, so
    "St George's Mall, Johannesburg" resolves to GP.
    """
    low = normalize(location)
    if not low:
        return None
    best: tuple[tuple[int, int], str] | None = None
    for city, province in rules.provinces.items():
        for match in _word(city).finditer(low):
            key = (match.start(), len(city))
            if best is None or key > best[0]:
                best = (key, province)
    return best[1] if best else None


def location_score(cv_location: str | None, job: JobPosting, rules: RuleSet) -> int:
    user = normalize(cv_location)
    job_loc = normalize(job.location)
    if user and job_loc and (user in job_loc or job_loc in user):
        return LOCATION_CITY

    user_province = province_of(user, rules)
    job_province = (job.province or "").upper() or province_of(job_loc, rules)
    if user_province and user_province == job_province:
        return LOCATION_PROVINCE

    if "remote" in normalize(f"{job.location} {job.text}"):
        return LOCATION_REMOTE
    return LOCATION_OTHER


# ── Salary ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SalaryRange:
    min: int
    max: int

    def contains(self, amount: int) -> bool:
        return self.min <= amount <= self.max


def _amount(raw: str) -> int:
    return int(re.sub(r"[,\s]", "", raw))


def parse_salary_range(text: str | None) -> SalaryRange | None:
    """Read an "R<min> - R<max>" range; ``None`` when the text has none."""
    match = _SALARY.search(text or "")
    if not match:
        return None
    low, high = _amount(match.group(1)), _amount(match.group(2))
    return SalaryRange(min(low, high), max(low, high))


def job_salary_range(job: JobPosting) -> SalaryRange | None:
    if job.salary_min is not None or job.salary_max is not None:
        low = job.salary_min if job.salary_min is not None else job.salary_max
        high = job.salary_max if job.salary_max is not None else job.salary_min
        return SalaryRange(min(low, high), max(low, high))
    return parse_salary_range(job.salary) or parse_salary_range(job.description)


def salary_score(expected: int | None, salary_range: SalaryRange | None) -> int:
    if expected is None or salary_range is None or salary_range.max <= 0:
        return NEUTRAL_SCORE
    if salary_range.contains(expected):
        return 100
    if expected < salary_range.min:
        return round_score(min(100, expected / salary_range.min * 100 + 20))
    overshoot = (expected - salary_range.max) / salary_range.max
    return round_score(max(60, 100 - overshoot * 50))


# ── Alignment ───────────────────────────────────────────────────────────


def education_level(text: str | None, rules: RuleSet) -> int:
    """1 for high school (nothing named), then one step per configured level."""
    plain = re.sub(r"[^\w\s]", "", normalize(text))
    level = 1
    for rank, (_name, terms) in enumerate(rules.education_levels, start=2):
        if any(_word(term).search(plain) for term in terms):
            level = rank
    return level


def education_alignment(cv: CVProfile, job: JobPosting, rules: RuleSet) -> int:
    have = max((education_level(e.degree, rules) for e in cv.education), default=1)
    need = education_level(job.text, rules)
    if have >= need:
        return 100
    if have >= need - 1:
        return EDUCATION_ONE_BELOW
    return EDUCATION_FAR_BELOW


def industry_alignment(keywords: list[str], industry: IndustryRules) -> int:
    """Share of the industry's keywords that the posting's keywords touch."""
    if not industry.keywords:
        return 0
    hits = [
        ik for ik in industry.keywords
        if any(ik in k or k in ik for k in keywords if k)
    ]
    return round_score(100 * len(hits) / len(industry.keywords))


# ── Application success ──────────────────────────────────────────────────


def days_since_posted(job: JobPosting, today: date | None = None) -> int | None:
    posted = parse_date(job.posted_date)
    if posted is None:
        return None
    return ((today or date.today()) - posted).days


def predicted_success(overall: int, job: JobPosting, rules: RuleSet, today: date | None = None) -> int:
    success = overall * 0.8
    age = days_since_posted(job, today)
    if age is not None and age < FRESH_POSTING_DAYS:
        success += FRESH_BONUS
    if age is not None and age > STALE_POSTING_DAYS:
        success -= STALE_PENALTY
    company = normalize(job.company)
    if company and any(name in company for name in rules.prestige_employers):
        success -= PRESTIGE_PENALTY
    return max(5, min(95, round_score(success)))
