from __future__ import annotations

"""
Build generation prompts from structured drafts and render the final note text.

Design intent:
- Embed the assembled sections directly in the prompt so the model only rewords facts.
- Treat the completion backend as an injected callable owned by the caller.
- Never leave the reviewer with a blank note: fall back to a labeled skeletal note.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Literal, Mapping

from notescribe.note.structuring import StructuredDraft


logger = logging.getLogger(__name__)

Complete = Callable[[str], str]
NoteSource = Literal["model", "fallback"]

SKELETAL_BANNER = "[DRAFT - generated from structured fields; completion service unavailable]"


class NoteGenerationError(RuntimeError):
    """Raised when note generation fails in strict mode."""


@dataclass(frozen=True)
class RenderedNote:
    text: str
    source: NoteSource


def build_generation_prompt(
    draft: StructuredDraft,
    *,
    narrative: str = "",
    term_definitions: Mapping[str, str] | None = None,
) -> str:
    detected = draft.detected_format
    lines: list[str] = [
        "Task: Draft one nursing documentation note in plain text.",
        "Output requirements:",
        "- Follow SECTIONS ordering and section names.",
        "- Use only facts present in SECTIONS or NARRATIVE.",
        "- If information is missing, write 'Not documented'.",
        "- Do not output JSON.",
        "- Do not output code fences.",
        "",
        f"Format: {detected.format.value}",
    ]
    if detected.context.shift_phase:
        lines.append(f"Shift Phase: {detected.context.shift_phase}")
    if detected.context.unit_type:
        lines.append(f"Unit: {detected.context.unit_type}")
    lines.append("")

    lines.append("SECTIONS:")
    for name, text in draft.sections.items():
        lines.append(f"## {name}")
        lines.append(text.strip())
        lines.append("")

    if draft.required_elements:
        lines.append("REQUIRED ELEMENTS:")
        lines.extend(f"- {item}" for item in draft.required_elements)
        lines.append("")

    if term_definitions:
        lines.append("TERMS:")
        lines.extend(f"- {term}: {definition}" for term, definition in term_definitions.items())
        lines.append("")

    narrative_text = str(narrative or "").strip()
    if narrative_text:
        lines.append("NARRATIVE:")
        lines.append(narrative_text)
        lines.append("")

    lines.append("Output:")
    lines.append("<note>")
    return "\n".join(lines)


def render_skeletal_note(draft: StructuredDraft) -> str:
    lines = [SKELETAL_BANNER, f"Format: {draft.detected_format.format.value}", ""]
    for name, text in draft.sections.items():
        lines.append(f"{name}:")
        lines.append(text.strip() or "Not documented")
        lines.append("")
    return "\n".join(lines).strip()


def render_note_text(
    draft: StructuredDraft,
    *,
    complete: Complete | None = None,
    narrative: str = "",
    term_definitions: Mapping[str, str] | None = None,
    strict: bool = False,
) -> RenderedNote:
    if complete is None:
        if strict:
            raise NoteGenerationError("No completion backend configured.")
        return RenderedNote(text=render_skeletal_note(draft), source="fallback")

    prompt = build_generation_prompt(draft, narrative=narrative, term_definitions=term_definitions)
    try:
        raw = complete(prompt)
    except Exception as exc:
        logger.warning("note_generation_failed error=%s fallback=%s", exc, not strict)
        if strict:
            raise NoteGenerationError(f"Note generation failed: {exc}") from exc
        return RenderedNote(text=render_skeletal_note(draft), source="fallback")

    cleaned = _strip_note_wrappers(raw)
    if not cleaned:
        logger.warning("note_generation_empty fallback=%s", not strict)
        if strict:
            raise NoteGenerationError("Note generation returned empty text.")
        return RenderedNote(text=render_skeletal_note(draft), source="fallback")
    return RenderedNote(text=cleaned, source="model")


def _strip_note_wrappers(text: str) -> str:
    cleaned = str(text or "").strip()
    if not cleaned:
        return ""

    wrapped = re.search(r"(?is)<note>\s*(.*?)\s*</note>", cleaned)
    if wrapped:
        return wrapped.group(1).strip()

    cleaned = re.sub(r"(?is)</?note>", "", cleaned)
    return cleaned.strip()
