from __future__ import annotations

"""
Unit- and format-specific sub-extractors: medications, intake/output, wounds.

Design intent:
- Return a fully populated sub-object or None; never a half-filled record.
- First qualifying match wins for every sub-field.
"""

import re
from typing import Sequence

from notescribe.extraction.fields import IntakeOutput, Medication, WoundInfo
from notescribe.patterns.library import PatternLibrary, contains_keyword


def detect_medication_route(text: str, library: PatternLibrary) -> str | None:
    for route, phrases in library.route_synonyms.items():
        for phrase in phrases:
            if contains_keyword(phrase, text):
                return route
    return None


def extract_administrations(
    narrative: str,
    library: PatternLibrary,
    *,
    default_time: str,
) -> list[Medication]:
    """Structured pass: "administered <name> <dose> <route> [in <site>] [at <time>]"."""
    medications: list[Medication] = []
    for match in library.administration_pattern.finditer(narrative):
        raw_route = match.group("route")
        route = detect_medication_route(raw_route, library) or raw_route.upper()
        remainder = _rest_of_sentence(narrative, match.end())
        time_match = library.administration_time_pattern.search(remainder)
        medications.append(
            Medication(
                name=match.group("name"),
                dose=squash(match.group("dose")),
                route=route,
                time=squash(time_match.group(1)) if time_match else default_time,
                site=_detect_site(remainder, route, library),
            )
        )
    return medications


def extract_loose_medications(
    narrative: str,
    library: PatternLibrary,
    *,
    default_time: str,
) -> list[Medication]:
    names: list[str] = []
    for pattern in library.fallback_medication_patterns:
        for match in pattern.finditer(narrative):
            name = (match.group(1) or "").strip()
            if name and name not in names:
                names.append(name)
    return [Medication(name=name, dose="", route="", time=default_time) for name in names]


def extract_intake_output(narrative: str, library: PatternLibrary) -> IntakeOutput | None:
    intake = _collect_volumes(narrative, library.intake_rules)
    output = _collect_volumes(narrative, library.output_rules)
    if not intake and not output:
        return None
    intake_total = sum(intake.values())
    output_total = sum(output.values())
    return IntakeOutput(
        intake={**intake, "total": intake_total},
        output={**output, "total": output_total},
        balance=intake_total - output_total,
    )


def extract_wound_info(narrative: str, library: PatternLibrary) -> WoundInfo | None:
    location = None
    location_match = library.wound_location_pattern.search(narrative)
    if location_match:
        location = location_match.group(1).strip() or None

    stage = None
    for candidate in library.wound_stages:
        if contains_keyword(candidate, narrative):
            stage = candidate
            break

    size = None
    size_match = library.wound_size_pattern.search(narrative)
    if size_match:
        dims = [item for item in size_match.groups() if item]
        size = " x ".join(dims) + " cm"

    drainage = None
    for phrase, label in library.drainage_types:
        if contains_keyword(phrase, narrative):
            drainage = label
            break

    if not any((location, stage, size, drainage)):
        return None
    return WoundInfo(location=location, stage=stage, size=size, drainage=drainage)


def _collect_volumes(
    narrative: str,
    rules: Sequence[tuple[str, re.Pattern[str]]],
) -> dict[str, int]:
    volumes: dict[str, int] = {}
    for source, pattern in rules:
        match = pattern.search(narrative)
        if not match:
            continue
        try:
            volumes[source] = int(match.group(1))
        except ValueError:
            continue
    return volumes


def _detect_site(remainder: str, route: str, library: PatternLibrary) -> str | None:
    for site in library.medication_sites.get(route, ()):
        match = re.search(rf"(?<![a-z]){re.escape(site)}(?![a-z])", remainder, re.IGNORECASE)
        if match:
            return match.group(0)
    return None


def _rest_of_sentence(text: str, start: int) -> str:
    end = text.find(".", start)
    # Keep decimals such as "0.5 mg" inside the window.
    while end != -1 and end + 1 < len(text) and text[end + 1].isdigit():
        end = text.find(".", end + 1)
    return text[start:] if end == -1 else text[start:end]


def squash(text: str) -> str:
    return " ".join(str(text or "").split())
