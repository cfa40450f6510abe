from __future__ import annotations

from typing import Mapping

from notescribe.extraction.fields import ExtractedFields


def is_ready(
    sections: Mapping[str, str],
    fields: ExtractedFields,
    *,
    min_sections: int = 3,
) -> bool:
    """
    Minimum raw-material gate before human review.

    Requires at least one vital sign, at least one symptom and at least
    `min_sections` sections. It says nothing about clinical accuracy.
    """
    has_vitals = len(fields.vital_signs) > 0
    has_symptoms = len(fields.symptoms) > 0
    has_sections = len(sections) >= min_sections
    return has_vitals and has_symptoms and has_sections
