from __future__ import annotations

"""
Extract discrete clinical fields from transcribed nursing narrative.

Design intent:
- Apply Pattern Library rules only; no inference beyond what the text states.
- Never raise for absent or malformed data; absence is an empty field.
- Stay pure so the same narrative always yields the same fields. The one
  exception is the clock used for medications with no stated time.
"""

import logging
import re
from datetime import datetime
from typing import Callable

from notescribe.classification.formats import ShiftPhase, UnitType
from notescribe.extraction.clinical import (
    extract_administrations,
    extract_intake_output,
    extract_loose_medications,
    extract_wound_info,
    squash,
)
from notescribe.extraction.fields import ExtractedFields, Medication, VitalSigns
from notescribe.patterns.library import (
    PatternLibrary,
    contains_keyword,
    default_pattern_library,
    keyword_hits,
    keyword_regex,
)


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class FieldExtractor:
    def __init__(self, library: PatternLibrary | None = None, *, clock: Clock | None = None) -> None:
        self._library = library or default_pattern_library()
        self._clock = clock or datetime.now

    @property
    def library(self) -> PatternLibrary:
        return self._library

    def extract(self, narrative: str | None) -> ExtractedFields:
        text = str(narrative or "")
        if not text.strip():
            return ExtractedFields()
        library = self._library
        return ExtractedFields(
            vital_signs=self._extract_vitals(text),
            medications=self._extract_medications(text),
            interventions=_extract_interventions(text, library.intervention_verbs),
            symptoms=keyword_hits(library.symptom_terms, text),
            assessment_findings=keyword_hits(library.finding_terms, text),
            patient_statements=_extract_statements(text, library.statement_pattern),
            time_stamps=[squash(m.group(1)) for m in library.timestamp_pattern.finditer(text)],
            allergies=_extract_allergies(text, library),
            intake_output=extract_intake_output(text, library),
            wound_info=extract_wound_info(text, library),
            assessment_systems=detect_assessment_systems(text, library),
            safety_checks=keyword_hits(library.safety_check_terms, text),
            communications=detect_communications(text, library),
        )

    def _extract_vitals(self, text: str) -> VitalSigns:
        values: dict[str, str] = {}
        for rule in self._library.vital_rules:
            if rule.name in values:
                continue
            groups = rule.capture(text)
            if groups is None:
                continue
            if not rule.accepts(groups):
                logger.debug("vital_capture_discarded name=%s raw=%s", rule.name, "/".join(groups))
                continue
            values[rule.name] = rule.render(groups)
        return VitalSigns(**values)

    def _extract_medications(self, text: str) -> list[Medication]:
        default_time = self._clock().strftime("%H:%M")
        structured = extract_administrations(text, self._library, default_time=default_time)
        if structured:
            return structured
        return extract_loose_medications(text, self._library, default_time=default_time)


def detect_shift_phase(narrative: str, library: PatternLibrary | None = None) -> ShiftPhase | None:
    lib = library or default_pattern_library()
    for phrase, phase in lib.shift_phases:
        if contains_keyword(phrase, narrative or ""):
            return phase
    return None


def detect_unit_type(narrative: str, library: PatternLibrary | None = None) -> UnitType | None:
    lib = library or default_pattern_library()
    for unit, phrases in lib.unit_types.items():
        if keyword_hits(phrases, narrative or ""):
            return unit
    return None


def detect_assessment_systems(narrative: str, library: PatternLibrary | None = None) -> list[str]:
    lib = library or default_pattern_library()
    return [
        system
        for system, vocabulary in lib.assessment_systems.items()
        if any(contains_keyword(term, narrative or "") for term in vocabulary)
    ]


def detect_system_mentions(narrative: str, library: PatternLibrary | None = None) -> list[str]:
    """Body systems named explicitly ("neuro", "cardiac"), as used for shift assessments."""
    lib = library or default_pattern_library()
    return [
        system
        for system, names in lib.system_mentions.items()
        if keyword_hits(names, narrative or "")
    ]


def detect_communications(narrative: str, library: PatternLibrary | None = None) -> list[str]:
    lib = library or default_pattern_library()
    return [
        label
        for label, phrases in lib.communication_types.items()
        if keyword_hits(phrases, narrative or "")
    ]


def extract_fields(narrative: str | None, library: PatternLibrary | None = None) -> ExtractedFields:
    return FieldExtractor(library).extract(narrative)


def _extract_interventions(text: str, verbs: tuple[str, ...]) -> list[str]:
    found: list[tuple[int, str]] = []
    for verb in verbs:
        pattern = re.compile(keyword_regex(verb).pattern + r"[^.]*(?:\.|$)", re.IGNORECASE)
        for match in pattern.finditer(text):
            found.append((match.start(), match.group(0).strip()))
    out: list[str] = []
    for _, sentence in sorted(found, key=lambda item: item[0]):
        if sentence and sentence not in out:
            out.append(sentence)
    return out


def _extract_statements(text: str, pattern: re.Pattern[str]) -> list[str]:
    out: list[str] = []
    for match in pattern.finditer(text):
        quote = next((group for group in match.groups() if group), "")
        if quote.strip():
            out.append(quote)
    return out


def _extract_allergies(text: str, library: PatternLibrary) -> list[str]:
    match = library.allergy_pattern.search(text)
    if not match:
        return []
    out: list[str] = []
    for token in library.allergy_split_pattern.split(match.group(1)):
        allergen = token.strip()
        if allergen and allergen not in out:
            out.append(allergen)
    return out
