"""CV-to-job matching and ATS audit engine."""
from cvmatch.ats import analyze_cv
from cvmatch.config import RulesError, load_rules
from cvmatch.matcher import MAX_MATCHES, analyze_job_match, find_matches
from cvmatch.models import (
    CVProfile,
    DetailedATSScore,
    InvalidRecordError,
    JobPosting,
    MatchResult,
    Preferences,
    SectionScore,
    SkillGap,
)

__version__ = "1.0.0"

__all__ = [
    "analyze_cv", "analyze_job_match", "find_matches", "load_rules",
    "CVProfile", "JobPosting", "Preferences", "MatchResult", "SkillGap",
    "SectionScore", "DetailedATSScore", "InvalidRecordError", "RulesError",
    "MAX_MATCHES",
]
