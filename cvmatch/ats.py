"""Rule-based ATS audit of a CV, section by section.

Each section starts at 100 and loses a fixed number of points per issue
found. Issues and their improvements are recorded in pairs. The overall
score blends the section average with industry compliance and a handful
of simulated ATS parsers.
"""
from __future__ import annotations

import re
from collections import Counter
from typing import Any, Callable, Mapping

from cvmatch.config import RuleSet, load_rules
from cvmatch.industry import classify_cv, rules_for
from cvmatch.keywords import cv_terms, cv_text, top_keywords
from cvmatch.log import get_logger
from cvmatch.models import (
    ATSTestResult,
    CVProfile,
    DetailedATSScore,
    IndustryCompliance,
    IndustryRules,
    KeywordOptimization,
    MAX_SECTION_SCORE,
    SectionScore,
)
from cvmatch.scorer import round_score
from cvmatch.text import matches_any

log = get_logger(__name__)

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DIGIT = re.compile(r"\d")

# Personal
MISSING_NAME = 20
MISSING_EMAIL = 25
INVALID_EMAIL = 10
MISSING_PHONE = 20
MISSING_LOCATION = 15

# Summary
SUMMARY_MIN_WORDS = 30
SUMMARY_MAX_WORDS = 100
SHORT_SUMMARY = 50
LONG_SUMMARY = 20
SUMMARY_NO_NUMBERS = 25

# Experience, per entry
MISSING_JOB_TITLE = 15
MISSING_COMPANY = 15
MISSING_DATES = 10
MISSING_DESCRIPTION = 20
FEW_BULLETS = 15
NO_ACTION_VERBS = 10
NO_METRICS = 15

# Education, per entry
MISSING_DEGREE = 25
MISSING_INSTITUTION = 20
MISSING_GRADUATION = 15

# Skills
MIN_SKILLS = 5
MAX_SKILLS = 20
FEW_SKILLS = 40
MANY_SKILLS = 20
NO_INDUSTRY_SKILLS = 30

# Projects
FEW_PROJECTS = 25
ABSENT_OPTIONAL_SECTION_SCORE = 50

# Industry compliance and simulated parsers
MISSING_REQUIREMENT = 20
ATS_BASE_SCORE = 75
ATS_ISSUE_PENALTY = 15
ATS_FLOOR = 40

SECTION_WEIGHT = 0.6
COMPLIANCE_WEIGHT = 0.2
ATS_TEST_WEIGHT = 0.2

OVERUSE_RATIO = 0.05
MISSING_KEYWORD_LIMIT = 10


def _tier(high_below: int, medium_below: int) -> Callable[[int, int], str]:
    def priority(score: int, _issues: int) -> str:
        if score < high_below:
            return "high"
        if score < medium_below:
            return "medium"
        return "low"
    return priority


def _by_issue_count(_score: int, issues: int) -> str:
    if issues > 2:
        return "high"
    return "medium" if issues > 0 else "low"


class _Audit:
    """Collects issue/improvement pairs and the running score for one section."""

    def __init__(self) -> None:
        self.score = MAX_SECTION_SCORE
        self.issues: list[str] = []
        self.improvements: list[str] = []

    def flag(self, issue: str, improvement: str, penalty: int) -> None:
        self.issues.append(issue)
        self.improvements.append(improvement)
        self.score -= penalty

    def result(self, priority: Callable[[int, int], str]) -> SectionScore:
        score = max(0, self.score)
        return SectionScore(
            score=score,
            issues=self.issues,
            improvements=self.improvements,
            priority=priority(score, len(self.issues)),
        )


def _empty_section(issue: str, improvement: str, score: int = 0, priority: str = "high") -> SectionScore:
    return SectionScore(score=score, issues=[issue], improvements=[improvement], priority=priority)


# ── Sections ─────────────────────────────────────────────────────────────


def audit_personal(cv: CVProfile) -> SectionScore:
    info = cv.personal
    audit = _Audit()
    if not info.full_name:
        audit.flag("Missing full name", "Add your complete full name", MISSING_NAME)
    if not info.email:
        audit.flag("Missing email address", "Add professional email address", MISSING_EMAIL)
    elif not _EMAIL.match(info.email):
        audit.flag(
            "Email format may not be ATS-friendly",
            "Use standard email format (name@domain.com)",
            INVALID_EMAIL,
        )
    if not info.phone:
        audit.flag("Missing phone number", "Add phone number with country code (+27)", MISSING_PHONE)
    if not info.location:
        audit.flag(
            "Missing location",
            "Add city and province (e.g., Cape Town, Western Cape)",
            MISSING_LOCATION,
        )
    return audit.result(_by_issue_count)


def audit_summary(cv: CVProfile) -> SectionScore:
    if not cv.summary:
        return _empty_section("Missing professional summary", "Add 3-4 sentence professional summary")

    audit = _Audit()
    words = len(cv.summary.split())
    if words < SUMMARY_MIN_WORDS:
        audit.flag(
            f"Summary too short (less than {SUMMARY_MIN_WORDS} words)",
            "Expand to 50-80 words with key achievements",
            SHORT_SUMMARY,
        )
    elif words > SUMMARY_MAX_WORDS:
        audit.flag(
            f"Summary too long (over {SUMMARY_MAX_WORDS} words)",
            "Condense to 50-80 words, focus on key points",
            LONG_SUMMARY,
        )
    if not _DIGIT.search(cv.summary):
        audit.flag(
            "No quantifiable achievements in summary",
            "Add 1-2 specific numbers or percentages",
            SUMMARY_NO_NUMBERS,
        )
    return audit.result(_tier(60, 80))


def audit_experience(cv: CVProfile, rules: RuleSet) -> SectionScore:
    if not cv.experience:
        return _empty_section("No work experience listed", "Add at least one work experience entry")

    audit = _Audit()
    for n, exp in enumerate(cv.experience, start=1):
        if not exp.title:
            audit.flag(f"Experience {n}: Missing job title", f"Add job title for experience {n}", MISSING_JOB_TITLE)
        if not exp.company:
            audit.flag(f"Experience {n}: Missing company name", f"Add company name for experience {n}", MISSING_COMPANY)
        if not exp.start_date or not exp.end_date:
            audit.flag(
                f"Experience {n}: Missing dates",
                f"Add start and end dates for experience {n}",
                MISSING_DATES,
            )
        if not exp.description:
            audit.flag(
                f"Experience {n}: Missing job description",
                "Add 3-5 bullet points describing your role",
                MISSING_DESCRIPTION,
            )
            continue

        bullets = [line for line in exp.description.splitlines() if line.strip()]
        if len(bullets) < 2:
            audit.flag(
                f"Experience {n}: Too few bullet points",
                "Add 3-5 bullet points for better ATS parsing",
                FEW_BULLETS,
            )
        description = exp.description.lower()
        if not any(verb in description for verb in rules.action_verbs):
            audit.flag(
                f"Experience {n}: Missing action verbs",
                "Start bullet points with action verbs (managed, developed, etc.)",
                NO_ACTION_VERBS,
            )
        if not _DIGIT.search(exp.description):
            audit.flag(
                f"Experience {n}: No quantifiable achievements",
                "Add numbers/percentages to show impact",
                NO_METRICS,
            )
    return audit.result(_tier(50, 75))


def audit_education(cv: CVProfile) -> SectionScore:
    if not cv.education:
        return _empty_section("No education information", "Add at least your highest qualification")

    audit = _Audit()
    for n, edu in enumerate(cv.education, start=1):
        if not edu.degree:
            audit.flag(
                f"Education {n}: Missing degree/qualification",
                f"Add degree name for education {n}",
                MISSING_DEGREE,
            )
        if not edu.institution:
            audit.flag(
                f"Education {n}: Missing institution",
                f"Add institution name for education {n}",
                MISSING_INSTITUTION,
            )
        if not edu.graduation_date:
            audit.flag(
                f"Education {n}: Missing graduation date",
                f"Add graduation year for education {n}",
                MISSING_GRADUATION,
            )
    return audit.result(_tier(60, 80))


def audit_skills(cv: CVProfile, industry: IndustryRules) -> SectionScore:
    skills = cv.skill_names
    if not skills:
        return _empty_section("No skills listed", "Add 8-12 relevant skills")

    audit = _Audit()
    if len(skills) < MIN_SKILLS:
        audit.flag(
            f"Too few skills listed (less than {MIN_SKILLS})",
            "Add more relevant skills (aim for 8-12)",
            FEW_SKILLS,
        )
    elif len(skills) > MAX_SKILLS:
        audit.flag(
            f"Too many skills listed (over {MAX_SKILLS})",
            "Focus on most relevant 10-15 skills",
            MANY_SKILLS,
        )

    lowered = [s.lower() for s in skills]
    if not any(wanted.lower() in s for wanted in industry.skills for s in lowered):
        name = industry.id.lower()
        audit.flag(f"Missing {name} industry skills", f"Add relevant {name} skills", NO_INDUSTRY_SKILLS)
    return audit.result(_tier(60, 80))


def audit_certifications(cv: CVProfile) -> SectionScore:
    if not cv.certifications:
        return _empty_section(
            "No certifications section found",
            "Add relevant professional certifications",
            score=ABSENT_OPTIONAL_SECTION_SCORE,
            priority="medium",
        )
    return SectionScore(score=MAX_SECTION_SCORE, priority="low")


def audit_projects(cv: CVProfile) -> SectionScore:
    if not cv.projects:
        return _empty_section(
            "No projects section found",
            "Add 2-3 relevant projects with descriptions",
            score=ABSENT_OPTIONAL_SECTION_SCORE,
            priority="medium",
        )
    audit = _Audit()
    if len(cv.projects) < 2:
        audit.flag("Only one project listed", "Add 2-3 relevant projects with descriptions", FEW_PROJECTS)
    return audit.result(_tier(60, 80))


def audit_sections(cv: CVProfile, industry: IndustryRules, rules: RuleSet) -> dict[str, SectionScore]:
    sections = {
        "personal": audit_personal(cv),
        "summary": audit_summary(cv),
        "experience": audit_experience(cv, rules),
        "education": audit_education(cv),
        "skills": audit_skills(cv, industry),
    }
    if "certifications" in industry.required_sections:
        sections["certifications"] = audit_certifications(cv)
    if "projects" in industry.required_sections:
        sections["projects"] = audit_projects(cv)
    return sections


# ── Industry, parsers, keywords ──────────────────────────────────────────


def industry_compliance(cv: CVProfile, industry: IndustryRules) -> IndustryCompliance:
    text = cv_text(cv).lower()
    missing = [req for req in industry.specific_requirements if req.lower() not in text]
    return IndustryCompliance(
        industry=industry.id,
        compliance=max(0, 100 - MISSING_REQUIREMENT * len(missing)),
        missing_requirements=missing,
    )


def _has_field(cv: CVProfile, name: str) -> bool:
    present = {
        "email": lambda: cv.personal.email,
        "phone": lambda: cv.personal.phone,
        "name": lambda: cv.personal.full_name,
        "location": lambda: cv.personal.location,
        "summary": lambda: cv.summary,
        "skills": lambda: cv.skill_names,
        "experience": lambda: cv.experience,
        "education": lambda: cv.education,
    }
    getter = present.get(name)
    if getter is None:
        log.debug("ATS check on unknown field %r ignored", name)
        return True
    return bool(getter())


def simulate_ats(cv: CVProfile, industry: IndustryRules, rules: RuleSet) -> list[ATSTestResult]:
    results: list[ATSTestResult] = []
    for system in industry.ats_systems:
        issues: list[str] = []
        recommendations: list[str] = []
        for check in rules.ats_systems.get(system, ()):
            if not _has_field(cv, check.field):
                issues.append(check.issue)
                recommendations.append(check.recommendation)
        score = max(ATS_FLOOR, ATS_BASE_SCORE - ATS_ISSUE_PENALTY * len(issues))
        results.append(ATSTestResult(system=system, score=score, issues=issues, recommendations=recommendations))
    return results


def keyword_optimization(cv: CVProfile, rules: RuleSet, job_description: str | None = None) -> KeywordOptimization:
    words = [w for w in re.split(r"\W+", cv_text(cv).lower()) if w]
    if not words:
        return KeywordOptimization(density=0.0)

    counts = Counter(w for w in words if len(w) > 3)
    density = round(len(counts) / len(words) * 100, 1)
    overused = [w for w, c in counts.items() if c > len(words) * OVERUSE_RATIO]

    missing: list[str] = []
    if job_description:
        terms = cv_terms(cv, rules)
        missing = [k for k in top_keywords(job_description, rules) if not matches_any(k, terms, rules)]
    return KeywordOptimization(density=density, missing=missing[:MISSING_KEYWORD_LIMIT], overused=overused)


def overall_score(
    sections: dict[str, SectionScore],
    compliance: int,
    ats_results: list[ATSTestResult],
) -> int:
    section_avg = sum(s.score / s.max_score * 100 for s in sections.values()) / len(sections)
    if ats_results:
        ats_avg = sum(r.score for r in ats_results) / len(ats_results)
    else:
        ats_avg = ATS_BASE_SCORE
    blended = section_avg * SECTION_WEIGHT + compliance * COMPLIANCE_WEIGHT + ats_avg * ATS_TEST_WEIGHT
    return round_score(blended)


def analyze_cv(
    cv: CVProfile | Mapping[str, Any],
    industry: str | None = None,
    job_description: str | None = None,
    *,
    rules: RuleSet | None = None,
) -> DetailedATSScore:
    """Audit a CV against the rules of *industry* (detected from the CV when omitted)."""
    if isinstance(cv, Mapping):
        cv = CVProfile.from_dict(cv)
    rules = rules or load_rules()
    target = rules_for(industry, rules) if industry else classify_cv(cv, rules)

    sections = audit_sections(cv, target, rules)
    compliance = industry_compliance(cv, target)
    ats_results = simulate_ats(cv, target, rules)
    score = overall_score(sections, compliance.compliance, ats_results)
    log.debug("ATS audit (%s): %d", target.id, score)

    return DetailedATSScore(
        overall_score=score,
        industry=target.id,
        section_scores=sections,
        industry_specific=compliance,
        ats_test_results=ats_results,
        keyword_optimization=keyword_optimization(cv, rules, job_description),
        format_guidance=[rules.format_rules[r] for r in target.format_rules if r in rules.format_rules],
    )
