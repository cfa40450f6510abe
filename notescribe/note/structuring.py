from __future__ import annotations

"""
Classify, extract, assemble and gate one narrative into a reviewable draft.

Design intent:
- Create a fresh draft per call; edits always produce a new copy.
- Share only the immutable Pattern Library between calls.
"""

import logging
from dataclasses import dataclass, field, replace

from notescribe.classification.classifier import FormatClassifier
from notescribe.classification.formats import DetectedFormat, FormatContext, NoteFormat
from notescribe.extraction.extractor import (
    Clock,
    FieldExtractor,
    detect_shift_phase,
    detect_unit_type,
)
from notescribe.extraction.fields import ExtractedFields
from notescribe.internal_core.config import ScribeConfig
from notescribe.note.checklist import required_elements
from notescribe.note.readiness import is_ready
from notescribe.note.sections import assemble_sections
from notescribe.patterns.library import PatternLibrary, default_pattern_library


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructuredDraft:
    detected_format: DetectedFormat
    extracted_fields: ExtractedFields
    sections: dict[str, str]
    ready_for_review: bool
    required_elements: list[str] = field(default_factory=list)

    def with_section(self, name: str, text: str) -> "StructuredDraft":
        sections = dict(self.sections)
        sections[name] = text
        return replace(self, sections=sections)


class NoteStructurer:
    def __init__(
        self,
        library: PatternLibrary | None = None,
        config: ScribeConfig | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._library = library or default_pattern_library()
        self._config = config or ScribeConfig()
        self._classifier = FormatClassifier(self._library, self._config)
        self._extractor = FieldExtractor(self._library, clock=clock)

    def structure(
        self,
        narrative: str | None,
        *,
        context: FormatContext | None = None,
        note_format: NoteFormat | None = None,
    ) -> StructuredDraft:
        text = str(narrative or "")
        if note_format is None:
            detected = self._classifier.classify(text, context)
        else:
            detected = self._caller_selected(text, note_format, context)

        fields = self._extractor.extract(text)
        sections = assemble_sections(
            detected.format,
            fields,
            narrative=text,
            preview_chars=self._config.NOTESCRIBE_NARRATIVE_PREVIEW_CHARS,
        )
        ready = is_ready(sections, fields, min_sections=self._config.NOTESCRIBE_MIN_REVIEW_SECTIONS)
        logger.debug(
            "structured format=%s sections=%s ready=%s",
            detected.format.value,
            len(sections),
            ready,
        )
        return StructuredDraft(
            detected_format=detected,
            extracted_fields=fields,
            sections=sections,
            ready_for_review=ready,
            required_elements=required_elements(detected.context),
        )

    def _caller_selected(
        self,
        text: str,
        note_format: NoteFormat,
        context: FormatContext | None,
    ) -> DetectedFormat:
        caller = context or FormatContext()
        resolved = FormatContext(
            shift_phase=caller.shift_phase or detect_shift_phase(text, self._library),
            unit_type=caller.unit_type or detect_unit_type(text, self._library),
        )
        return DetectedFormat(
            format=note_format,
            confidence=1.0,
            reasoning=f"Format {note_format.value} selected by caller",
            indicators=[],
            context=resolved,
        )


def structure_narrative(
    narrative: str | None,
    *,
    context: FormatContext | None = None,
    note_format: NoteFormat | None = None,
    library: PatternLibrary | None = None,
    config: ScribeConfig | None = None,
    clock: Clock | None = None,
) -> StructuredDraft:
    structurer = NoteStructurer(library, config, clock=clock)
    return structurer.structure(narrative, context=context, note_format=note_format)
