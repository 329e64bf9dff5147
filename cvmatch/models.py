"""Data models for CV profiles, job postings and match results."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from cvmatch.log import get_logger

log = get_logger(__name__)

MAX_SECTION_SCORE = 100


class InvalidRecordError(ValueError):
    """A caller-supplied record violates a structural contract."""


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key wins; lets records arrive in camelCase or snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _text(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


_NUMBER_NOISE = re.compile(r"(?i)^\s*(zar|r)\s*|[,\s+]")
_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0", ""}


def _number(value: Any, name: str) -> int | None:
    """Lenient integer read: "R30,000", "5+" and "82.5" parse; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(_NUMBER_NOISE.sub("", str(value)))
        except ValueError:
            log.debug("Ignoring non-numeric %s=%r", name, value)
            return None
    if not math.isfinite(number):
        log.debug("Ignoring non-finite %s=%r", name, value)
        return None
    return int(math.floor(number + 0.5))


def _first(*values: int | None) -> int | None:
    return next((v for v in values if v is not None), None)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text not in _FALSE:
            log.debug("Treating unrecognised flag %r as false", value)
        return False
    return bool(value)


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and str(v).strip()]


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidRecordError(f"{kind} must be a mapping, got {type(data).__name__}")
    return data


# ── CV ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PersonalInfo:
    full_name: str | None = None
    job_title: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PersonalInfo:
        data = data or {}
        return cls(
            full_name=_text(_pick(data, "fullName", "full_name", "name")),
            job_title=_text(_pick(data, "jobTitle", "job_title", "title")),
            email=_text(_pick(data, "email")),
            phone=_text(_pick(data, "phone")),
            location=_text(_pick(data, "location")),
        )

    def to_dict(self) -> dict:
        return {
            "fullName": self.full_name,
            "jobTitle": self.job_title,
            "email": self.email,
            "phone": self.phone,
            "location": self.location,
        }


@dataclass(frozen=True)
class Experience:
    title: str | None = None
    company: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str | None = None
    location: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Experience:
        data = _require_mapping(data, "experience entry")
        return cls(
            title=_text(_pick(data, "title")),
            company=_text(_pick(data, "company")),
            start_date=_text(_pick(data, "startDate", "start_date")),
            end_date=_text(_pick(data, "endDate", "end_date")),
            description=_text(_pick(data, "description")),
            location=_text(_pick(data, "location")),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "company": self.company,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "description": self.description,
            "location": self.location,
        }


@dataclass(frozen=True)
class Education:
    degree: str | None = None
    institution: str | None = None
    graduation_date: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Education:
        data = _require_mapping(data, "education entry")
        return cls(
            degree=_text(_pick(data, "degree")),
            institution=_text(_pick(data, "institution")),
            graduation_date=_text(_pick(data, "graduationDate", "graduation_date")),
        )

    def to_dict(self) -> dict:
        return {
            "degree": self.degree,
            "institution": self.institution,
            "graduationDate": self.graduation_date,
        }


@dataclass(frozen=True)
class Skill:
    name: str
    category: str | None = None

    def to_dict(self) -> dict:
        return {"name": self.name, "category": self.category}


@dataclass(frozen=True)
class CVProfile:
    personal: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str | None = None
    experience: tuple[Experience, ...] = ()
    education: tuple[Education, ...] = ()
    # Free text ("Python, SQL\nExcel") or a structured list.
    skills: str | tuple[Skill, ...] | None = None
    languages: tuple[str, ...] = ()
    certifications: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    expected_salary: int | None = None
    bee_candidate: bool = False

    @property
    def skill_names(self) -> list[str]:
        """Skills as a clean list, whichever form they were supplied in."""
        if not self.skills:
            return []
        if isinstance(self.skills, str):
            parts = self.skills.replace("\n", ",").split(",")
            return [p.strip() for p in parts if p.strip()]
        return [s.name.strip() for s in self.skills if s.name and s.name.strip()]

    @property
    def skills_text(self) -> str:
        return ", ".join(self.skill_names)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CVProfile:
        data = _require_mapping(data, "CV profile")
        raw_skills = _pick(data, "skills")
        skills: str | tuple[Skill, ...] | None
        if raw_skills is None or isinstance(raw_skills, str):
            skills = raw_skills if raw_skills and raw_skills.strip() else None
        else:
            parsed = []
            for item in raw_skills:
                if isinstance(item, Mapping):
                    name = _text(item.get("name"))
                    if name:
                        parsed.append(Skill(name=name, category=_text(item.get("category"))))
                elif _text(item):
                    parsed.append(Skill(name=str(item).strip()))
            skills = tuple(parsed) or None

        salary = _pick(data, "expectedSalary", "expected_salary")
        return cls(
            personal=PersonalInfo.from_dict(_pick(data, "personalInfo", "personal_info", "personal")),
            summary=_text(_pick(data, "summary")),
            experience=tuple(Experience.from_dict(e) for e in _pick(data, "experience", default=[])),
            education=tuple(Education.from_dict(e) for e in _pick(data, "education", default=[])),
            skills=skills,
            languages=tuple(_str_list(_pick(data, "languages"))),
            certifications=tuple(_str_list(_pick(data, "certifications"))),
            projects=tuple(_str_list(_pick(data, "projects"))),
            expected_salary=_number(salary, "expectedSalary"),
            bee_candidate=_flag(_pick(data, "beeCandidate", "bee_candidate", default=False)),
        )

    def to_dict(self) -> dict:
        if isinstance(self.skills, tuple):
            skills: Any = [s.to_dict() for s in self.skills]
        else:
            skills = self.skills
        return {
            "personalInfo": self.personal.to_dict(),
            "summary": self.summary,
            "experience": [e.to_dict() for e in self.experience],
            "education": [e.to_dict() for e in self.education],
            "skills": skills,
            "languages": list(self.languages),
            "certifications": list(self.certifications),
            "projects": list(self.projects),
            "expectedSalary": self.expected_salary,
            "beeCandidate": self.bee_candidate,
        }


# ── Jobs ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class JobPosting:
    title: str
    company: str = ""
    location: str = ""
    province: str | None = None
    salary: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    currency: str = "ZAR"
    employment_type: str | None = None
    description: str = ""
    requirements: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    industry: str | None = None
    experience_years: int | None = None
    posted_date: str | None = None
    ats_score: int | None = None
    bee_requirement: bool = False
    language_requirements: tuple[str, ...] = ()
    id: str | None = None
    experience_level: str | None = None
    source: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.title, str) or not self.title.strip():
            raise InvalidRecordError("job posting requires a non-empty title")

    @property
    def text(self) -> str:
        """Title, description and requirements as one searchable string."""
        return " ".join([self.title, self.description, *self.requirements])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobPosting:
        data = _require_mapping(data, "job posting")
        salary_range = _pick(data, "salaryRange", "salary_range", default={})
        salary = _pick(data, "salary")
        if isinstance(salary, Mapping):
            salary_range, salary = salary, None
        if not isinstance(salary_range, Mapping):
            salary_range = {}

        def _int(*keys: str, source: Mapping[str, Any] = data) -> int | None:
            return _number(_pick(source, *keys), keys[0])

        province = _text(_pick(data, "province"))
        return cls(
            title=_pick(data, "title", default=""),
            company=_text(_pick(data, "company")) or "",
            location=_text(_pick(data, "location")) or "",
            province=province.upper() if province else None,
            salary=_text(salary),
            salary_min=_first(_int("min", source=salary_range), _int("salaryMin", "salary_min")),
            salary_max=_first(_int("max", source=salary_range), _int("salaryMax", "salary_max")),
            currency=_text(_pick(salary_range, "currency")) or "ZAR",
            employment_type=_text(_pick(data, "employmentType", "employment_type", "type")),
            description=_text(_pick(data, "description")) or "",
            requirements=tuple(_str_list(_pick(data, "requirements"))),
            keywords=tuple(_str_list(_pick(data, "keywords"))),
            industry=_text(_pick(data, "industry")),
            experience_years=_int("experienceYears", "experience_years", "requiredExperienceYears"),
            posted_date=_text(_pick(data, "postedDate", "posted_date")),
            ats_score=_int("atsScore", "ats_score"),
            bee_requirement=_flag(_pick(data, "beeRequirement", "bee_requirement", default=False)),
            language_requirements=tuple(
                _str_list(_pick(data, "languageRequirements", "language_requirements"))
            ),
            id=_text(_pick(data, "id")),
            experience_level=_text(_pick(data, "experienceLevel", "experience_level")),
            source=_text(_pick(data, "source")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "province": self.province,
            "salary": self.salary,
            "salaryRange": {"min": self.salary_min, "max": self.salary_max, "currency": self.currency},
            "employmentType": self.employment_type,
            "description": self.description,
            "requirements": list(self.requirements),
            "keywords": list(self.keywords),
            "industry": self.industry,
            "experienceYears": self.experience_years,
            "postedDate": self.posted_date,
            "atsScore": self.ats_score,
            "beeRequirement": self.bee_requirement,
            "languageRequirements": list(self.language_requirements),
            "experienceLevel": self.experience_level,
            "source": self.source,
        }


@dataclass(frozen=True)
class Preferences:
    preferred_provinces: tuple[str, ...] = ()
    job_types: tuple[str, ...] = ()
    min_salary: int | None = None
    max_salary: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Preferences:
        data = data or {}
        min_salary = _pick(data, "minSalary", "min_salary")
        max_salary = _pick(data, "maxSalary", "max_salary")
        return cls(
            preferred_provinces=tuple(
                p.upper() for p in _str_list(_pick(data, "preferredProvinces", "preferred_provinces"))
            ),
            job_types=tuple(_str_list(_pick(data, "jobTypes", "job_types"))),
            min_salary=_number(min_salary, "minSalary"),
            max_salary=_number(max_salary, "maxSalary"),
        )


# ── Rules ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WeightVector:
    skills: float
    experience: float
    ats: float
    location: float

    @property
    def total(self) -> float:
        return self.skills + self.experience + self.ats + self.location


@dataclass(frozen=True)
class IndustryRules:
    id: str
    required_sections: tuple[str, ...]
    keyword_density: float
    format_rules: tuple[str, ...]
    specific_requirements: tuple[str, ...]
    weights: WeightVector
    ats_systems: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    skills: tuple[str, ...] = ()


# ── Results ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeywordMatch:
    keyword: str
    in_cv: bool
    weight: float
    category: str

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "inCv": self.in_cv,
            "weight": self.weight,
            "category": self.category,
        }


@dataclass(frozen=True)
class SkillGap:
    skill: str
    category: str
    priority: str
    learning_resources: tuple[str, ...]
    estimated_time_to_learn: str

    def to_dict(self) -> dict:
        return {
            "skill": self.skill,
            "category": self.category,
            "priority": self.priority,
            "learningResources": list(self.learning_resources),
            "estimatedTimeToLearn": self.estimated_time_to_learn,
        }


@dataclass
class MatchResult:
    job: JobPosting
    overall_score: int
    skills_match: int
    experience_match: int
    location_match: int
    salary_match: int
    ats_compatibility: int
    predicted_application_success: int
    industry: str
    education_alignment: int = 100
    industry_alignment: int = 0
    match_reasons: list[str] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    matched_keywords: list[str] = field(default_factory=list)
    missing_keywords: list[str] = field(default_factory=list)
    keyword_matches: list[KeywordMatch] = field(default_factory=list)
    skills_gap: list[SkillGap] = field(default_factory=list)

    @property
    def ranking_score(self) -> int:
        return self.overall_score + self.predicted_application_success

    def to_dict(self) -> dict:
        return {
            "job": self.job.to_dict(),
            "industry": self.industry,
            "overallScore": self.overall_score,
            "skillsMatch": self.skills_match,
            "experienceMatch": self.experience_match,
            "locationMatch": self.location_match,
            "salaryMatch": self.salary_match,
            "atsCompatibility": self.ats_compatibility,
            "predictedApplicationSuccess": self.predicted_application_success,
            "educationAlignment": self.education_alignment,
            "industryAlignment": self.industry_alignment,
            "matchReasons": list(self.match_reasons),
            "improvementSuggestions": list(self.improvement_suggestions),
            "recommendations": list(self.recommendations),
            "matchedKeywords": list(self.matched_keywords),
            "missingKeywords": list(self.missing_keywords),
            "keywordMatches": [k.to_dict() for k in self.keyword_matches],
            "skillsGap": [g.to_dict() for g in self.skills_gap],
        }


@dataclass
class SectionScore:
    score: int
    issues: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    priority: str = "low"
    max_score: int = MAX_SECTION_SCORE

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "maxScore": self.max_score,
            "issues": list(self.issues),
            "improvements": list(self.improvements),
            "priority": self.priority,
        }


@dataclass
class ATSTestResult:
    system: str
    score: int
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "system": self.system,
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }


@dataclass
class IndustryCompliance:
    industry: str
    compliance: int
    missing_requirements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "industry": self.industry,
            "compliance": self.compliance,
            "missingRequirements": list(self.missing_requirements),
        }


@dataclass
class KeywordOptimization:
    density: float
    missing: list[str] = field(default_factory=list)
    overused: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"density": self.density, "missing": list(self.missing), "overused": list(self.overused)}


@dataclass
class DetailedATSScore:
    overall_score: int
    industry: str
    section_scores: dict[str, SectionScore]
    industry_specific: IndustryCompliance
    ats_test_results: list[ATSTestResult]
    keyword_optimization: KeywordOptimization
    format_guidance: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "overallScore": self.overall_score,
            "industry": self.industry,
            "sectionScores": {k: v.to_dict() for k, v in self.section_scores.items()},
            "industrySpecific": self.industry_specific.to_dict(),
            "atsTestResults": [r.to_dict() for r in self.ats_test_results],
            "keywordOptimization": self.keyword_optimization.to_dict(),
            "formatGuidance": list(self.format_guidance),
        }
