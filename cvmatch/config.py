"""Load environment settings and the YAML rule tables."""
from __future__ import annotations

import functools
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from cvmatch.log import get_logger
from cvmatch.models import IndustryRules, WeightVector

log = get_logger(__name__)

load_dotenv()

RULES_DIR: Path = Path(__file__).resolve().parent / "rules"
INDUSTRIES_FILE = "industries.yaml"
MATCHING_FILE = "matching.yaml"

_WEIGHT_KEYS = ("skills", "experience", "ats", "location")
_WEIGHT_TOLERANCE = 1e-6


class RulesError(ValueError):
    """Rule configuration failed validation."""


@dataclass(frozen=True)
class AtsCheck:
    field: str
    issue: str
    recommendation: str


@dataclass(frozen=True)
class RuleSet:
    """Everything the engine reads from configuration, loaded once."""

    industries: tuple[IndustryRules, ...]
    default_industry: str
    ats_systems: dict[str, tuple[AtsCheck, ...]]
    format_rules: dict[str, str]
    stopwords: frozenset[str]
    min_token_length: int
    job_keyword_limit: int
    fuzzy_threshold: float
    min_containment_length: int
    synonyms: tuple[frozenset[str], ...]
    categories: tuple[tuple[str, tuple[str, ...]], ...]
    category_weights: dict[str, float]
    provinces: dict[str, str]
    prestige_employers: tuple[str, ...]
    gap_limit: int
    learning_time: dict[str, str]
    learning_resources: dict[str, tuple[str, ...]]
    default_resources: tuple[str, ...]
    action_verbs: tuple[str, ...]
    education_levels: tuple[tuple[str, tuple[str, ...]], ...]

    def industry(self, name: str | None) -> IndustryRules | None:
        """Case-insensitive lookup; None when the industry is unknown."""
        if not name:
            return None
        wanted = name.strip().lower()
        for rules in self.industries:
            if rules.id.lower() == wanted:
                return rules
        return None

    @property
    def default(self) -> IndustryRules:
        rules = self.industry(self.default_industry)
        if rules is None:
            raise RulesError(f"default industry {self.default_industry!r} is not configured")
        return rules


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def get_max_workers() -> int:
    raw = get_env("CVMATCH_MAX_WORKERS", "1")
    try:
        return max(1, int(raw))
    except ValueError:
        log.warning("Ignoring invalid CVMATCH_MAX_WORKERS=%r", raw)
        return 1


def rules_dir() -> Path:
    override = get_env("CVMATCH_RULES_DIR")
    return Path(override) if override else RULES_DIR


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise RulesError(f"rule file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise RulesError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesError(f"{path.name} must contain a mapping at the top level")
    return data


def _strings(values: Any, where: str) -> tuple[str, ...]:
    """A YAML list of plain strings, lowercased.

    Unquoted words such as on, yes or no load as booleans and are rejected.
    """
    if values is None:
        return ()
    if not isinstance(values, list):
        raise RulesError(f"{where} must be a list")
    for value in values:
        if not isinstance(value, str):
            raise RulesError(f"{where}: entry {value!r} is not a string; quote it in the YAML")
    return tuple(v.lower() for v in values)


def _weights(industry_id: str, raw: Any) -> WeightVector:
    if not isinstance(raw, dict) or set(raw) != set(_WEIGHT_KEYS):
        raise RulesError(f"{industry_id}: weights need exactly {', '.join(_WEIGHT_KEYS)}")
    values = {}
    for key in _WEIGHT_KEYS:
        try:
            value = float(raw[key])
        except (TypeError, ValueError) as exc:
            raise RulesError(f"{industry_id}: weight {key!r} is not a number") from exc
        if not 0.0 <= value <= 1.0:
            raise RulesError(f"{industry_id}: weight {key!r}={value} outside [0, 1]")
        values[key] = value
    vector = WeightVector(**values)
    if not math.isclose(vector.total, 1.0, abs_tol=_WEIGHT_TOLERANCE):
        raise RulesError(f"{industry_id}: weights sum to {vector.total:.4f}, expected 1.0")
    return vector


def _industry(raw: dict[str, Any]) -> IndustryRules:
    industry_id = str(raw.get("id", "")).strip()
    if not industry_id:
        raise RulesError("every industry needs an id")
    return IndustryRules(
        id=industry_id,
        required_sections=tuple(raw.get("required_sections", [])),
        keyword_density=float(raw.get("keyword_density", 0.0)),
        format_rules=tuple(raw.get("format_rules", [])),
        specific_requirements=tuple(raw.get("specific_requirements", [])),
        weights=_weights(industry_id, raw.get("weights")),
        ats_systems=tuple(raw.get("ats_systems", [])),
        keywords=_strings(raw.get("keywords"), f"{industry_id} keywords"),
        skills=tuple(raw.get("skills", [])),
    )


def _parse(industries_doc: dict[str, Any], matching_doc: dict[str, Any]) -> RuleSet:
    industries = tuple(_industry(raw) for raw in industries_doc.get("industries", []))
    if not industries:
        raise RulesError("no industries configured")
    ids = [i.id.lower() for i in industries]
    if len(ids) != len(set(ids)):
        raise RulesError("duplicate industry ids")

    default_industry = get_env("CVMATCH_DEFAULT_INDUSTRY") or industries_doc.get(
        "default_industry", industries[0].id
    )
    if default_industry.lower() not in ids:
        raise RulesError(f"default industry {default_industry!r} is not configured")

    ats_systems = {
        name: tuple(AtsCheck(**check) for check in (checks or []))
        for name, checks in (industries_doc.get("ats_systems") or {}).items()
    }
    for rules in industries:
        for system in rules.ats_systems:
            if system not in ats_systems:
                raise RulesError(f"{rules.id}: unknown ATS system {system!r}")

    tokenizer = matching_doc.get("tokenizer", {})
    keywords = matching_doc.get("keywords", {})
    gaps = matching_doc.get("gaps", {})

    threshold = float(keywords.get("fuzzy_threshold", 0.8))
    if not 0.0 < threshold <= 1.0:
        raise RulesError(f"fuzzy_threshold must be in (0, 1], got {threshold}")

    return RuleSet(
        industries=industries,
        default_industry=default_industry,
        ats_systems=ats_systems,
        format_rules=dict(industries_doc.get("format_rules") or {}),
        stopwords=frozenset(_strings(tokenizer.get("stopwords"), "stopwords")),
        min_token_length=int(tokenizer.get("min_token_length", 3)),
        job_keyword_limit=int(keywords.get("job_keyword_limit", 50)),
        fuzzy_threshold=threshold,
        min_containment_length=int(keywords.get("min_containment_length", 3)),
        synonyms=tuple(
            frozenset(_strings(entry, "synonyms")) for entry in matching_doc.get("synonyms") or []
        ),
        categories=tuple(
            (name, _strings(terms, f"category {name}"))
            for name, terms in (matching_doc.get("categories") or {}).items()
        ),
        category_weights={k: float(v) for k, v in (matching_doc.get("category_weights") or {}).items()},
        provinces={str(k).lower(): str(v).upper() for k, v in (matching_doc.get("provinces") or {}).items()},
        prestige_employers=_strings(matching_doc.get("prestige_employers"), "prestige_employers"),
        gap_limit=int(gaps.get("limit", 10)),
        learning_time=dict(gaps.get("learning_time") or {}),
        learning_resources={
            k.lower(): tuple(v) for k, v in (gaps.get("resources") or {}).items()
        },
        default_resources=tuple(gaps.get("default_resources", [])),
        action_verbs=_strings((matching_doc.get("ats") or {}).get("action_verbs"), "action_verbs"),
        education_levels=tuple(
            (name, _strings(terms, f"education level {name}"))
            for name, terms in (matching_doc.get("education_levels") or {}).items()
        ),
    )


@functools.lru_cache(maxsize=8)
def _load_cached(directory: str) -> RuleSet:
    base = Path(directory)
    rules = _parse(_read_yaml(base / INDUSTRIES_FILE), _read_yaml(base / MATCHING_FILE))
    log.info(
        "Loaded %d industry rule sets from %s (default: %s)",
        len(rules.industries), base, rules.default_industry,
    )
    return rules


def load_rules(path: Path | str | None = None) -> RuleSet:
    """Load and validate the rule tables from *path* (a directory); cached."""
    directory = Path(path) if path is not None else rules_dir()
    return _load_cached(str(directory.resolve()))


def clear_rules_cache() -> None:
    _load_cached.cache_clear()
