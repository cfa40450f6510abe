from __future__ import annotations

"""
HTTP surface for notescribe.

Design intent:
- Keep API orchestration thin and typed.
- Delegate domain logic to classification/extraction/note modules.
- Return the indicators behind every decision for reviewer trust.
"""

import logging
from typing import Any, Callable, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from notescribe.classification.classifier import FormatClassifier
from notescribe.classification.formats import (
    DetectedFormat,
    FormatContext,
    NoteFormat,
    ShiftPhase,
    UnitType,
    UnknownFormatError,
    parse_note_format,
)
from notescribe.extraction.extractor import FieldExtractor
from notescribe.extraction.fields import ExtractedFields
from notescribe.internal_core.config import ScribeConfig, load_config
from notescribe.knowledge.terms import enrich_terms
from notescribe.note.draft import NoteGenerationError, build_generation_prompt, render_note_text
from notescribe.note.sections import section_names
from notescribe.note.structuring import NoteStructurer, StructuredDraft


class NarrativeRequest(BaseModel):
    narrative: str = Field(default="", max_length=100_000)
    shift_phase: ShiftPhase | None = None
    unit_type: UnitType | None = None


class StructureRequest(NarrativeRequest):
    note_format: str | None = None


class FormatContextPayload(BaseModel):
    shift_phase: str | None = None
    unit_type: str | None = None


class DetectedFormatResponse(BaseModel):
    format: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    indicators: list[str] = Field(default_factory=list)
    context: FormatContextPayload


class ExtractResponse(BaseModel):
    extracted_fields: dict[str, Any]
    is_empty: bool


class StructureResponse(BaseModel):
    detected_format: DetectedFormatResponse
    extracted_fields: dict[str, Any]
    sections: dict[str, str]
    ready_for_review: bool
    required_elements: list[str] = Field(default_factory=list)


class PromptResponse(StructureResponse):
    prompt: str
    note_text: str
    note_source: Literal["model", "fallback"]
    term_definitions: dict[str, str] = Field(default_factory=dict)


class FormatItem(BaseModel):
    format: str
    generic: bool
    sections: list[str]


class FormatListResponse(BaseModel):
    formats: list[FormatItem]


app = FastAPI(title="notescribe service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> ScribeConfig:
    existing = getattr(app.state, "scribe_config", None)
    if isinstance(existing, ScribeConfig):
        return existing
    created = load_config()
    logging.getLogger("notescribe").setLevel(created.NOTESCRIBE_LOG_LEVEL)
    setattr(app.state, "scribe_config", created)
    return created


def _get_note_completer() -> Callable[[str], str] | None:
    return getattr(app.state, "note_completer", None)


def _context_from(payload: NarrativeRequest) -> FormatContext:
    return FormatContext(shift_phase=payload.shift_phase, unit_type=payload.unit_type)


def _detected_to_response(detected: DetectedFormat) -> DetectedFormatResponse:
    return DetectedFormatResponse(
        format=detected.format.value,
        confidence=detected.confidence,
        reasoning=detected.reasoning,
        indicators=list(detected.indicators),
        context=FormatContextPayload(
            shift_phase=detected.context.shift_phase,
            unit_type=detected.context.unit_type,
        ),
    )


def _fields_to_dict(fields: ExtractedFields) -> dict[str, Any]:
    return fields.to_dict()


def _structure_from_payload(payload: StructureRequest) -> StructuredDraft:
    note_format: NoteFormat | None = None
    if payload.note_format:
        try:
            note_format = parse_note_format(payload.note_format)
        except UnknownFormatError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    structurer = NoteStructurer(config=_get_config())
    return structurer.structure(
        payload.narrative,
        context=_context_from(payload),
        note_format=note_format,
    )


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/formats", response_model=FormatListResponse)
async def list_formats() -> FormatListResponse:
    return FormatListResponse(
        formats=[
            FormatItem(format=item.value, generic=item.is_generic, sections=section_names(item))
            for item in NoteFormat
        ]
    )


@app.post("/notes/classify", response_model=DetectedFormatResponse)
async def classify_note(payload: NarrativeRequest) -> DetectedFormatResponse:
    classifier = FormatClassifier(config=_get_config())
    detected = classifier.classify(payload.narrative, _context_from(payload))
    return _detected_to_response(detected)


@app.post("/notes/extract", response_model=ExtractResponse)
async def extract_note_fields(payload: NarrativeRequest) -> ExtractResponse:
    fields = FieldExtractor().extract(payload.narrative)
    return ExtractResponse(extracted_fields=_fields_to_dict(fields), is_empty=fields.is_empty())


@app.post("/notes/structure", response_model=StructureResponse)
async def structure_note(payload: StructureRequest) -> StructureResponse:
    draft = _structure_from_payload(payload)
    return StructureResponse(
        detected_format=_detected_to_response(draft.detected_format),
        extracted_fields=_fields_to_dict(draft.extracted_fields),
        sections=dict(draft.sections),
        ready_for_review=draft.ready_for_review,
        required_elements=list(draft.required_elements),
    )


@app.post("/notes/prompt", response_model=PromptResponse)
async def note_prompt(payload: StructureRequest) -> PromptResponse:
    config = _get_config()
    draft = _structure_from_payload(payload)
    definitions = enrich_terms(draft.extracted_fields)
    prompt = build_generation_prompt(draft, narrative=payload.narrative, term_definitions=definitions)
    try:
        rendered = render_note_text(
            draft,
            complete=_get_note_completer(),
            narrative=payload.narrative,
            term_definitions=definitions,
            strict=config.NOTESCRIBE_NOTE_STRICT,
        )
    except NoteGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    logger.info(
        "note_prompt format=%s ready=%s source=%s",
        draft.detected_format.format.value,
        draft.ready_for_review,
        rendered.source,
    )
    return PromptResponse(
        detected_format=_detected_to_response(draft.detected_format),
        extracted_fields=_fields_to_dict(draft.extracted_fields),
        sections=dict(draft.sections),
        ready_for_review=draft.ready_for_review,
        required_elements=list(draft.required_elements),
        prompt=prompt,
        note_text=rendered.text,
        note_source=rendered.source,
        term_definitions=definitions,
    )
