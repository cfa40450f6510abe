from __future__ import annotations

"""
Rule-based documentation format classifier.

Design intent:
- Score candidates from Pattern Library tables; never guess beyond them.
- Keep every decision auditable through the literal indicators that won.
- Resolve ties by table order, never by dict or set iteration accidents.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from notescribe.classification.formats import (
    DEFAULT_FORMAT,
    DetectedFormat,
    FormatContext,
    NoteFormat,
)
from notescribe.extraction.extractor import (
    detect_shift_phase,
    detect_system_mentions,
    detect_unit_type,
)
from notescribe.internal_core.config import ScribeConfig
from notescribe.patterns.library import (
    GenericFormatRule,
    PatternLibrary,
    SpecializedKind,
    SpecializedRule,
    default_pattern_library,
    keyword_hits,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    format: NoteFormat
    score: int
    indicators: list[str]
    label: str


_Scorer = Callable[[SpecializedRule, str, PatternLibrary, FormatContext], "_Candidate | None"]


def _score_keywords(
    rule: SpecializedRule,
    text: str,
    library: PatternLibrary,
    caller: FormatContext,
) -> _Candidate | None:
    hits = keyword_hits(rule.keywords, text)
    threshold = rule.min_hits
    if rule.unit_type is not None and caller.unit_type == rule.unit_type:
        threshold = max(1, threshold - 1)
    if len(hits) < threshold:
        return None
    return _Candidate(rule.format, len(hits) + rule.bonus, hits, rule.indicator)


def _score_intake_output(
    rule: SpecializedRule,
    text: str,
    library: PatternLibrary,
    caller: FormatContext,
) -> _Candidate | None:
    cues = library.intake_output_cues
    intake = keyword_hits(cues.intake_terms, text)
    output = keyword_hits(cues.output_terms, text)
    balance = keyword_hits(cues.balance_terms, text)
    explicit = keyword_hits(cues.explicit_terms, text)
    if not (explicit or (intake and output) or balance):
        return None
    score = (
        (cues.intake_weight if intake else 0)
        + (cues.output_weight if output else 0)
        + (cues.balance_weight if balance else 0)
        + (cues.explicit_weight if explicit else 0)
    )
    if score < cues.min_score:
        return None
    return _Candidate(rule.format, score + cues.bonus, explicit + intake + output + balance, rule.indicator)


def _score_medication_administration(
    rule: SpecializedRule,
    text: str,
    library: PatternLibrary,
    caller: FormatContext,
) -> _Candidate | None:
    cues = library.medication_administration_cues
    hits = keyword_hits(cues.keywords, text)
    routes = [match.group(0) for match in cues.route_pattern.finditer(text)]
    indicators = hits + [route for route in dict.fromkeys(routes)]
    if len(hits) >= cues.strong_min_hits and len(routes) >= cues.strong_min_routes:
        return _Candidate(rule.format, len(hits) + len(routes) + cues.strong_bonus, indicators, rule.indicator)
    if len(hits) >= cues.basic_min_hits and len(routes) >= cues.basic_min_routes:
        return _Candidate(rule.format, len(hits) + cues.basic_bonus, indicators, rule.indicator)
    return None


_SCORERS: dict[SpecializedKind, _Scorer] = {
    "keywords": _score_keywords,
    "intake_output": _score_intake_output,
    "medication_administration": _score_medication_administration,
}


def _score_generic(rule: GenericFormatRule, text: str) -> tuple[int, list[str]]:
    hits = keyword_hits(rule.keywords, text)
    score = len(hits)
    indicators = list(hits)
    for cue in rule.cues:
        if cue.matches(text):
            score += cue.bonus
            indicators.append(cue.label)
    return score, indicators


def _best(candidates: list[_Candidate]) -> _Candidate | None:
    # Strict ">" keeps the earliest rule on equal scores.
    winner: _Candidate | None = None
    for candidate in candidates:
        if winner is None or candidate.score > winner.score:
            winner = candidate
    return winner


def _describe(label: str, indicators: list[str]) -> str:
    shown = ", ".join(indicators[:3])
    return f"Detected {label}: {shown}" if shown else f"Detected {label}"


class FormatClassifier:
    def __init__(
        self,
        library: PatternLibrary | None = None,
        config: ScribeConfig | None = None,
    ) -> None:
        self._library = library or default_pattern_library()
        self._config = config or ScribeConfig()

    def classify(self, narrative: str | None, context: FormatContext | None = None) -> DetectedFormat:
        text = str(narrative or "")
        caller = context or FormatContext()
        resolved = FormatContext(
            shift_phase=caller.shift_phase or detect_shift_phase(text, self._library),
            unit_type=caller.unit_type or detect_unit_type(text, self._library),
        )

        qualified = self._specialized(text, caller)
        forced = self._forced_shift_assessment(text, resolved, qualified)
        if forced is not None:
            return forced

        specialized = _best(qualified)
        if specialized is not None:
            confidence = self._weighted_confidence(
                specialized.score,
                sum(item.score for item in qualified) - specialized.score,
            )
            logger.debug(
                "classified format=%s score=%s confidence=%.2f pass=specialized",
                specialized.format.value,
                specialized.score,
                confidence,
            )
            return DetectedFormat(
                format=specialized.format,
                confidence=confidence,
                reasoning=_describe(specialized.label, specialized.indicators),
                indicators=specialized.indicators,
                context=resolved,
            )
        return self._generic(text, resolved)

    def _weighted_confidence(self, score: int, competing: int) -> float:
        # 1.0 only when no other format matched any indicator weight.
        scaled = min(score / self._config.NOTESCRIBE_SPECIALIZED_CONFIDENCE_SCALE, 1.0)
        total = score + competing
        return min(scaled, score / total) if total else scaled

    def _forced_shift_assessment(
        self,
        text: str,
        resolved: FormatContext,
        qualified: list[_Candidate],
    ) -> DetectedFormat | None:
        if resolved.shift_phase is None:
            return None
        systems = detect_system_mentions(text, self._library)
        if len(systems) < self._library.shift_assessment_min_systems:
            return None
        score = self._library.shift_assessment_score
        competing = sum(item.score for item in qualified) + sum(
            _score_generic(rule, text)[0] for rule in self._library.generic_rules
        )
        confidence = self._weighted_confidence(score, competing)
        logger.debug(
            "classified format=%s systems=%s phase=%s pass=forced",
            NoteFormat.SHIFT_ASSESSMENT.value,
            len(systems),
            resolved.shift_phase,
        )
        return DetectedFormat(
            format=NoteFormat.SHIFT_ASSESSMENT,
            confidence=confidence,
            reasoning=(
                f"Comprehensive {resolved.shift_phase} assessment with "
                f"{len(systems)} body systems ({', '.join(systems[:3])})"
            ),
            indicators=[resolved.shift_phase, *systems],
            context=resolved,
        )

    def _specialized(self, text: str, caller: FormatContext) -> list[_Candidate]:
        candidates: list[_Candidate] = []
        for rule in self._library.specialized_rules:
            candidate = _SCORERS[rule.kind](rule, text, self._library, caller)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _generic(self, text: str, resolved: FormatContext) -> DetectedFormat:
        scored: list[_Candidate] = []
        for rule in self._library.generic_rules:
            score, indicators = _score_generic(rule, text)
            scored.append(_Candidate(rule.format, score, indicators, f"{rule.format.value} indicators"))
        total = sum(item.score for item in scored)
        winner = _best(scored)
        if winner is None or total == 0:
            logger.debug("classified format=%s pass=default", DEFAULT_FORMAT.value)
            return DetectedFormat(
                format=DEFAULT_FORMAT,
                confidence=self._config.NOTESCRIBE_NEUTRAL_CONFIDENCE,
                reasoning=f"No format indicators found; defaulting to {DEFAULT_FORMAT.value}",
                indicators=[],
                context=resolved,
            )

        confidence = winner.score / total
        if sum(1 for item in scored if item.score > 0) == 1:
            confidence = min(confidence, self._config.NOTESCRIBE_SINGLE_CANDIDATE_CONFIDENCE)
        logger.debug(
            "classified format=%s score=%s total=%s confidence=%.2f pass=generic",
            winner.format.value,
            winner.score,
            total,
            confidence,
        )
        return DetectedFormat(
            format=winner.format,
            confidence=confidence,
            reasoning=_describe(winner.label, winner.indicators),
            indicators=winner.indicators,
            context=resolved,
        )


def classify_narrative(
    narrative: str | None,
    context: FormatContext | None = None,
    *,
    library: PatternLibrary | None = None,
    config: ScribeConfig | None = None,
) -> DetectedFormat:
    return FormatClassifier(library, config).classify(narrative, context)
