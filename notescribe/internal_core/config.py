from __future__ import annotations

import os
from dataclasses import dataclass


_TRUTHY = {"1", "true", "t", "yes", "y", "on"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_fraction(name: str, default: float) -> float:
    value = _getenv_float(name, default)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")
    return value


@dataclass(frozen=True)
class ScribeConfig:
    NOTESCRIBE_LOG_LEVEL: str = "INFO"
    NOTESCRIBE_SPECIALIZED_CONFIDENCE_SCALE: float = 10.0
    NOTESCRIBE_SINGLE_CANDIDATE_CONFIDENCE: float = 0.8
    NOTESCRIBE_NEUTRAL_CONFIDENCE: float = 0.5
    NOTESCRIBE_MIN_REVIEW_SECTIONS: int = 3
    NOTESCRIBE_NARRATIVE_PREVIEW_CHARS: int = 200
    NOTESCRIBE_NOTE_STRICT: bool = False


def load_config() -> ScribeConfig:
    scale = _getenv_float("NOTESCRIBE_SPECIALIZED_CONFIDENCE_SCALE", 10.0)
    if scale <= 0:
        raise ValueError(f"NOTESCRIBE_SPECIALIZED_CONFIDENCE_SCALE must be positive, got {scale}")
    log_level = _getenv_str("NOTESCRIBE_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"NOTESCRIBE_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {log_level!r}")
    return ScribeConfig(
        NOTESCRIBE_LOG_LEVEL=log_level,
        NOTESCRIBE_SPECIALIZED_CONFIDENCE_SCALE=scale,
        NOTESCRIBE_SINGLE_CANDIDATE_CONFIDENCE=_getenv_fraction(
            "NOTESCRIBE_SINGLE_CANDIDATE_CONFIDENCE", 0.8
        ),
        NOTESCRIBE_NEUTRAL_CONFIDENCE=_getenv_fraction("NOTESCRIBE_NEUTRAL_CONFIDENCE", 0.5),
        NOTESCRIBE_MIN_REVIEW_SECTIONS=max(0, _getenv_int("NOTESCRIBE_MIN_REVIEW_SECTIONS", 3)),
        NOTESCRIBE_NARRATIVE_PREVIEW_CHARS=max(
            0, _getenv_int("NOTESCRIBE_NARRATIVE_PREVIEW_CHARS", 200)
        ),
        NOTESCRIBE_NOTE_STRICT=_getenv_bool("NOTESCRIBE_NOTE_STRICT", False),
    )
