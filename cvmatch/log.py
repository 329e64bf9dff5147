"""Centralized logging configuration for the engine and its runner."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _formatter() -> logging.Formatter:
    return logging.Formatter(_FORMAT, datefmt=_DATE_FMT)


def _file_handler(log_dir: str) -> logging.Handler:
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(
        path / f"cvmatch_{datetime.now().strftime('%Y-%m-%d')}.log", encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_formatter())
    return handler


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Host application already owns logging
    if root.handlers:
        return

    # stdout carries run_match.py's JSON
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_formatter())
    root.addHandler(console)

    log_dir = os.environ.get("CVMATCH_LOG_DIR", "").strip()
    if not log_dir:
        return
    try:
        root.addHandler(_file_handler(log_dir))
    except OSError as exc:
        root.warning("Could not open log directory %s: %s", log_dir, exc)
