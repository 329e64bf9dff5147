#!/usr/bin/env python3
"""Entry point: rank postings for a CV, or audit a CV on its own.

    python run_match.py cv.yaml jobs.yaml [--top 10] [--province GP ...]
    python run_match.py cv.yaml --audit [--industry Banking]

Inputs may be YAML or JSON. Results are printed as JSON.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

from cvmatch import CVProfile, JobPosting, analyze_cv, find_matches
from cvmatch.log import get_logger

log = get_logger(__name__)


def _load(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("cv", type=Path, help="CV profile (YAML or JSON)")
    parser.add_argument("jobs", type=Path, nargs="?", help="List of job postings (YAML or JSON)")
    parser.add_argument("--audit", action="store_true", help="Run the ATS audit instead of matching")
    parser.add_argument("--industry", help="Industry rules to audit against")
    parser.add_argument("--top", type=int, default=10, help="Show top N matches")
    parser.add_argument("--province", action="append", default=[], help="Preferred province code")
    parser.add_argument("--job-type", action="append", default=[], help="Accepted employment type")
    parser.add_argument("--workers", type=int, help="Parallel scoring workers")
    args = parser.parse_args(argv)

    cv = CVProfile.from_dict(_load(args.cv) or {})

    if args.audit:
        report = analyze_cv(cv, args.industry)
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    if args.jobs is None:
        parser.error("a jobs file is required unless --audit is given")

    raw_jobs = _load(args.jobs) or []
    jobs = [JobPosting.from_dict(j) for j in raw_jobs]
    preferences = {"preferredProvinces": args.province, "jobTypes": args.job_type}
    results = find_matches(cv, jobs, preferences, max_workers=args.workers)
    log.info("Top %d of %d postings", min(args.top, len(results)), len(jobs))
    print(json.dumps([r.to_dict() for r in results[: args.top]], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
