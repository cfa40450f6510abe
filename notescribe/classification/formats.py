from __future__ import annotations

"""
Documentation format tags and classification result types.

Design intent:
- Dispatch on an enumerated tag instead of free-form format strings.
- Keep classifier output a closed, typed shape that is safe to audit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


ShiftPhase = Literal["Start of Shift", "Mid-Shift", "End of Shift"]
UnitType = Literal["Med-Surg", "ICU", "NICU", "Mother-Baby"]


class NoteFormat(str, Enum):
    SOAP = "SOAP"
    SBAR = "SBAR"
    PIE = "PIE"
    DAR = "DAR"
    SHIFT_ASSESSMENT = "shift-assessment"
    MAR = "mar"
    INTAKE_OUTPUT = "io"
    WOUND_CARE = "wound-care"
    SAFETY_CHECKLIST = "safety-checklist"
    MED_SURG = "med-surg"
    ICU = "icu"
    NICU = "nicu"
    MOTHER_BABY = "mother-baby"

    @property
    def is_generic(self) -> bool:
        return self in GENERIC_FORMATS


GENERIC_FORMATS: frozenset[NoteFormat] = frozenset(
    {NoteFormat.SOAP, NoteFormat.SBAR, NoteFormat.PIE, NoteFormat.DAR}
)
DEFAULT_FORMAT = NoteFormat.SOAP


class UnknownFormatError(ValueError):
    """Raised when a caller names a documentation format that does not exist."""


def parse_note_format(raw: str) -> NoteFormat:
    normalized = str(raw or "").strip()
    for item in NoteFormat:
        if normalized.lower() in {item.value.lower(), item.name.lower()}:
            return item
    raise UnknownFormatError(f"Unsupported note format: {normalized!r}")


@dataclass(frozen=True)
class FormatContext:
    shift_phase: ShiftPhase | None = None
    unit_type: UnitType | None = None


@dataclass(frozen=True)
class DetectedFormat:
    format: NoteFormat
    confidence: float
    reasoning: str
    indicators: list[str] = field(default_factory=list)
    context: FormatContext = field(default_factory=FormatContext)
