from __future__ import annotations

"""
Declarative recognition rules for nursing narrative.

Design intent:
- Every rule is a table row; adding a rule must not require new control flow.
- Keep the library immutable so one instance can be shared across callers.
- Keyword containment is token bounded ("gi" never fires inside "given").
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Sequence

from notescribe.classification.formats import NoteFormat, ShiftPhase, UnitType


SpecializedKind = Literal["keywords", "intake_output", "medication_administration"]


@lru_cache(maxsize=2048)
def keyword_regex(keyword: str) -> re.Pattern[str]:
    escaped = re.escape(keyword.strip().lower()).replace(r"\ ", r"\s+")
    return re.compile(rf"(?<![a-z0-9]){escaped}(?![a-z0-9])", re.IGNORECASE)


def contains_keyword(keyword: str, text: str) -> bool:
    return bool(keyword_regex(keyword).search(text or ""))


def keyword_hits(keywords: Sequence[str], text: str) -> list[str]:
    """Return the keywords found in text, in table order, without duplicates."""
    out: list[str] = []
    for keyword in keywords:
        if keyword in out:
            continue
        if contains_keyword(keyword, text):
            out.append(keyword)
    return out


# Optional connector between a label and its value: "BP: 120/80", "HR was 88".
_LINK = r"(?:\s*(?:[:=]|\bwas\b|\bis\b|\bof\b|\bas\b))*\s*"


# A bare count followed by a duration or volume unit is not a vital reading.
_NOT_A_MEASURE = r"(?!\s*(?:days?|weeks?|months?|years?|hours?|hrs?|minutes?|mins?|ml|cc|times)(?![a-z]))"


def _labelled(labels: str, value: str) -> re.Pattern[str]:
    return re.compile(rf"\b(?:{labels})(?![a-z0-9]){_LINK}{value}", re.IGNORECASE)


@dataclass(frozen=True)
class VitalRule:
    name: str
    pattern: re.Pattern[str]
    ranges: tuple[tuple[float, float], ...]
    joiner: str = "/"

    def capture(self, text: str) -> tuple[str, ...] | None:
        match = self.pattern.search(text or "")
        if not match:
            return None
        return tuple(item for item in match.groups() if item is not None)

    def accepts(self, groups: Sequence[str]) -> bool:
        if len(groups) != len(self.ranges):
            return False
        for raw, (low, high) in zip(groups, self.ranges):
            try:
                value = float(raw)
            except ValueError:
                return False
            if value < low or value > high:
                return False
        return True

    def render(self, groups: Sequence[str]) -> str:
        return self.joiner.join(groups)

    def match(self, text: str) -> str | None:
        groups = self.capture(text)
        if groups is None or not self.accepts(groups):
            return None
        return self.render(groups)


@dataclass(frozen=True)
class StructuralCue:
    """Term sequences that must appear in order within one line of text.

    Any one sequence matching is enough. Each term is located with a forward
    scan from the end of the previous hit, so checking a cue stays linear in
    the length of the narrative.
    """

    label: str
    sequences: tuple[tuple[str, ...], ...]
    bonus: int

    def matches(self, text: str) -> bool:
        for line in (text or "").splitlines():
            for terms in self.sequences:
                if _in_order(terms, line):
                    return True
        return False


def _in_order(terms: Sequence[str], line: str) -> bool:
    pos = 0
    for term in terms:
        match = keyword_regex(term).search(line, pos)
        if match is None:
            return False
        pos = match.end()
    return True


@dataclass(frozen=True)
class GenericFormatRule:
    format: NoteFormat
    keywords: tuple[str, ...]
    cues: tuple[StructuralCue, ...] = ()


@dataclass(frozen=True)
class SpecializedRule:
    format: NoteFormat
    kind: SpecializedKind
    indicator: str
    keywords: tuple[str, ...] = ()
    min_hits: int = 0
    bonus: int = 0
    unit_type: UnitType | None = None


@dataclass(frozen=True)
class IntakeOutputCues:
    intake_terms: tuple[str, ...]
    output_terms: tuple[str, ...]
    balance_terms: tuple[str, ...]
    explicit_terms: tuple[str, ...]
    intake_weight: int = 2
    output_weight: int = 2
    balance_weight: int = 3
    explicit_weight: int = 4
    min_score: int = 4
    bonus: int = 3


@dataclass(frozen=True)
class MedicationAdministrationCues:
    keywords: tuple[str, ...]
    route_pattern: re.Pattern[str]
    strong_min_hits: int = 2
    strong_min_routes: int = 2
    strong_bonus: int = 5
    basic_min_hits: int = 3
    basic_min_routes: int = 1
    basic_bonus: int = 3


@dataclass(frozen=True)
class PatternLibrary:
    vital_rules: tuple[VitalRule, ...]
    route_synonyms: dict[str, tuple[str, ...]]
    medication_sites: dict[str, tuple[str, ...]]
    administration_pattern: re.Pattern[str]
    fallback_medication_patterns: tuple[re.Pattern[str], ...]
    administration_time_pattern: re.Pattern[str]
    intervention_verbs: tuple[str, ...]
    symptom_terms: tuple[str, ...]
    finding_terms: tuple[str, ...]
    safety_check_terms: tuple[str, ...]
    statement_pattern: re.Pattern[str]
    timestamp_pattern: re.Pattern[str]
    allergy_pattern: re.Pattern[str]
    allergy_split_pattern: re.Pattern[str]
    intake_rules: tuple[tuple[str, re.Pattern[str]], ...]
    output_rules: tuple[tuple[str, re.Pattern[str]], ...]
    wound_location_pattern: re.Pattern[str]
    wound_size_pattern: re.Pattern[str]
    wound_stages: tuple[str, ...]
    drainage_types: tuple[tuple[str, str], ...]
    assessment_systems: dict[str, tuple[str, ...]]
    system_mentions: dict[str, tuple[str, ...]]
    shift_phases: tuple[tuple[str, ShiftPhase], ...]
    unit_types: dict[UnitType, tuple[str, ...]]
    communication_types: dict[str, tuple[str, ...]]
    generic_rules: tuple[GenericFormatRule, ...]
    specialized_rules: tuple[SpecializedRule, ...]
    intake_output_cues: IntakeOutputCues
    medication_administration_cues: MedicationAdministrationCues
    shift_assessment_min_systems: int = 3
    shift_assessment_score: int = 10


_ROUTE_SYNONYMS: dict[str, tuple[str, ...]] = {
    "PO": ("po", "by mouth", "oral", "orally", "p.o."),
    "IV": ("iv", "intravenous", "i.v.", "intravenously", "iv push", "ivp"),
    "IM": ("im", "intramuscular", "i.m."),
    "SQ": ("sq", "subq", "subcutaneous", "s.q.", "sc"),
    "SL": ("sl", "sublingual", "s.l.", "under tongue"),
    "PR": ("pr", "rectal", "rectally", "p.r."),
    "Topical": ("topical", "topically", "applied to skin"),
    "Inhaled": ("inhaled", "nebulized", "inhaler", "neb"),
}

_MEDICATION_SITES: dict[str, tuple[str, ...]] = {
    "IV": ("right ac", "left ac", "right hand", "left hand", "picc", "central line", "port"),
    "IM": (
        "right deltoid",
        "left deltoid",
        "right vastus lateralis",
        "left vastus lateralis",
        "right ventrogluteal",
        "left ventrogluteal",
    ),
    "SQ": ("abdomen", "right arm", "left arm", "right thigh", "left thigh"),
}

_DRUG_SUFFIXES = ("cillin", "mycin", "pril", "olol", "statin", "zole", "pine", "pam", "done", "caine")

_DOSE = (
    r"\d+(?:\.\d+)?\s*"
    r"(?:mg|mcg|g|units?|ml|meq|milligrams?|micrograms?|grams?|milliliters?)"
    r"(?![a-z])"
)
_TIME_OF_DAY = r"\d{1,2}:\d{2}(?:\s*(?:am|pm))?|\d{4}(?:\s*hours?)?|\d{1,2}\s*(?:am|pm)"


def _route_alternation(routes: dict[str, tuple[str, ...]]) -> str:
    phrases = sorted({item for values in routes.values() for item in values}, key=lambda item: (-len(item), item))
    return "|".join(re.escape(item) for item in phrases)


def _build_administration_pattern(routes: dict[str, tuple[str, ...]]) -> re.Pattern[str]:
    return re.compile(
        r"\b(?:administered|gave|given)\s+"
        r"(?:(?:him|her|them|the\s+patient|patient|pt)\s+)?"
        r"(?P<name>[a-z][a-z\-]*)\s+"
        rf"(?P<dose>{_DOSE})\s+"
        rf"(?P<route>{_route_alternation(routes)})(?![a-z])",
        re.IGNORECASE,
    )


def _build_vital_rules() -> tuple[VitalRule, ...]:
    return (
        VitalRule(
            name="blood_pressure",
            pattern=_labelled(
                r"blood\s+pressure|bp|b\.p\.",
                r"(\d{2,3})\s*(?:/|\bover\b)\s*(\d{2,3})(?!\d)",
            ),
            ranges=((50.0, 300.0), (20.0, 200.0)),
        ),
        VitalRule(
            name="heart_rate",
            pattern=_labelled(r"heart\s+rate|hr|pulse", rf"(\d{{2,3}})(?!\d){_NOT_A_MEASURE}"),
            ranges=((20.0, 300.0),),
        ),
        VitalRule(
            name="respiratory_rate",
            pattern=_labelled(r"respiratory\s+rate|respirations|rr|resp", rf"(\d{{1,2}})(?!\d){_NOT_A_MEASURE}"),
            ranges=((4.0, 60.0),),
        ),
        VitalRule(
            name="temperature",
            pattern=_labelled(r"temperature|temp|t", r"(\d{2,3}(?:\.\d+)?)(?!\.?\d)"),
            ranges=((30.0, 110.0),),
        ),
        VitalRule(
            name="oxygen_saturation",
            pattern=_labelled(
                r"oxygen\s+saturation|o2\s+saturation|o2\s+sats?|spo2|sao2|o2",
                r"(\d{2,3})(?!\d)",
            ),
            ranges=((50.0, 100.0),),
        ),
        VitalRule(
            name="pain_level",
            pattern=_labelled(r"pain\s+(?:level|scale|score)|pain", rf"(\d{{1,2}})(?!\d){_NOT_A_MEASURE}"),
            ranges=((0.0, 10.0),),
        ),
        VitalRule(
            name="weight",
            pattern=_labelled(r"weight|wt", r"(\d+(?:\.\d+)?)\s*(?:kg|lbs?|pounds?)\b"),
            ranges=((0.3, 700.0),),
        ),
        VitalRule(
            name="mean_arterial_pressure",
            pattern=_labelled(r"mean\s+arterial\s+pressure|map", r"(\d{2,3})(?!\d)"),
            ranges=((20.0, 200.0),),
        ),
        VitalRule(
            name="central_venous_pressure",
            pattern=_labelled(r"central\s+venous\s+pressure|cvp", r"(\d{1,2})(?!\d)"),
            ranges=((0.0, 40.0),),
        ),
    )


def _volume(labels: str) -> re.Pattern[str]:
    return _labelled(labels, r"(\d+)\s*(?:ml|cc|milliliters?)?(?![a-z0-9])")


def _cue(label: str, bonus: int, *sequences: tuple[str, ...]) -> StructuralCue:
    return StructuralCue(label=label, sequences=tuple(sequences), bonus=bonus)


def _build_generic_rules() -> tuple[GenericFormatRule, ...]:
    return (
        GenericFormatRule(
            format=NoteFormat.SOAP,
            keywords=(
                "patient reports", "patient states", "complains of", "denies",
                "vital signs", "physical exam", "assessment shows", "appears",
                "diagnosis", "impression", "assessment", "likely",
                "plan", "continue", "monitor", "follow up", "prescribe",
            ),
            cues=(
                _cue(
                    "SOAP structure mentioned", 3,
                    ("subjective",), ("objective",), ("assessment",), ("plan",),
                ),
            ),
        ),
        GenericFormatRule(
            format=NoteFormat.SBAR,
            keywords=(
                "handoff", "transfer", "report", "situation", "background",
                "recommendation", "notify", "call", "urgent", "immediate",
                "history of", "past medical", "current status", "concern",
                "concerned", "suggest", "recommend", "request", "need",
            ),
            cues=(
                _cue(
                    "handoff context", 3,
                    ("transferring",), ("handing off",), ("shift change",), ("report to",),
                ),
            ),
        ),
        GenericFormatRule(
            format=NoteFormat.PIE,
            keywords=(
                "problem", "issue", "concern", "difficulty",
                "intervention", "administered", "performed", "provided",
                "evaluation", "response", "outcome", "effective",
                "resolved", "improved", "worsened", "stable",
            ),
            cues=(
                _cue("problem-intervention pattern", 2, ("problem", "intervention"), ("issue", "action")),
            ),
        ),
        GenericFormatRule(
            format=NoteFormat.DAR,
            keywords=(
                "data", "observed", "noted", "findings",
                "action taken", "administered", "implemented", "initiated",
                "patient response", "tolerated", "reacted", "responded",
                "no adverse", "effective", "ineffective",
            ),
            cues=(
                _cue("data-action-response pattern", 2, ("observed", "administered", "responded")),
            ),
        ),
    )


def _build_specialized_rules() -> tuple[SpecializedRule, ...]:
    # Evaluation order is the tie-break order.
    return (
        SpecializedRule(
            format=NoteFormat.ICU,
            kind="keywords",
            indicator="ICU-specific keywords (hemodynamics, ventilator, sedation)",
            keywords=(
                "hemodynamic", "hemodynamics", "cvp", "map", "ventilator", "peep", "fio2",
                "rass", "cam-icu", "titration", "a-line", "central line",
            ),
            min_hits=3,
            bonus=5,
            unit_type="ICU",
        ),
        SpecializedRule(
            format=NoteFormat.NICU,
            kind="keywords",
            indicator="NICU-specific keywords",
            keywords=(
                "isolette", "thermoregulation", "nicu", "premature",
                "developmental care", "parental bonding",
            ),
            min_hits=2,
            bonus=5,
            unit_type="NICU",
        ),
        SpecializedRule(
            format=NoteFormat.MOTHER_BABY,
            kind="keywords",
            indicator="Mother-Baby specific keywords",
            keywords=(
                "fundal", "fundus", "lochia", "perineum", "breastfeeding", "latch",
                "postpartum", "newborn", "cord care", "circumcision",
            ),
            min_hits=2,
            bonus=5,
            unit_type="Mother-Baby",
        ),
        SpecializedRule(
            format=NoteFormat.WOUND_CARE,
            kind="keywords",
            indicator="wound care keywords",
            keywords=(
                "wound", "pressure injury", "ulcer", "dressing change", "wound care",
                "stage ii", "stage iii", "stage iv", "granulation", "slough", "eschar",
            ),
            min_hits=2,
            bonus=4,
        ),
        SpecializedRule(
            format=NoteFormat.SAFETY_CHECKLIST,
            kind="keywords",
            indicator="safety keywords",
            keywords=(
                "fall risk", "restraints", "isolation", "code status",
                "patient identification", "allergies",
            ),
            min_hits=3,
            bonus=4,
        ),
        SpecializedRule(
            format=NoteFormat.INTAKE_OUTPUT,
            kind="intake_output",
            indicator="intake/output keywords",
        ),
        SpecializedRule(
            format=NoteFormat.MAR,
            kind="medication_administration",
            indicator="medication administration keywords",
        ),
        SpecializedRule(
            format=NoteFormat.MED_SURG,
            kind="keywords",
            indicator="Med-Surg keywords (education, discharge, mobility)",
            keywords=(
                "patient education", "discharge", "mobility", "ambulated",
                "walker", "discharge planning",
            ),
            min_hits=2,
            bonus=3,
            unit_type="Med-Surg",
        ),
    )


def default_pattern_library() -> PatternLibrary:
    return _DEFAULT_LIBRARY


def build_pattern_library() -> PatternLibrary:
    """Build a fresh library; callers customise it with dataclasses.replace()."""
    return PatternLibrary(
        vital_rules=_build_vital_rules(),
        route_synonyms=dict(_ROUTE_SYNONYMS),
        medication_sites=dict(_MEDICATION_SITES),
        administration_pattern=_build_administration_pattern(_ROUTE_SYNONYMS),
        fallback_medication_patterns=(
            re.compile(
                rf"\b(?:administered|gave|given|received)\s+([a-z]+(?:{'|'.join(_DRUG_SUFFIXES)}))(?![a-z])",
                re.IGNORECASE,
            ),
            re.compile(r"\b(?:medications?|meds?|drugs?)\s*:\s*([^.,\n]+)", re.IGNORECASE),
        ),
        administration_time_pattern=re.compile(rf"\bat\s+({_TIME_OF_DAY})\b", re.IGNORECASE),
        intervention_verbs=(
            "administered", "provided", "performed", "initiated", "implemented",
            "applied", "inserted", "removed", "changed", "monitored",
            "assessed", "educated", "assisted", "positioned", "turned",
        ),
        symptom_terms=(
            "pain", "nausea", "vomiting", "diarrhea", "constipation",
            "fever", "chills", "cough", "shortness of breath", "dyspnea",
            "dizziness", "headache", "fatigue", "weakness", "confusion",
            "chest pain", "abdominal pain", "back pain", "swelling", "rash",
        ),
        finding_terms=(
            "alert", "oriented", "responsive", "stable", "unstable",
            "distress", "comfortable", "anxious", "calm", "cooperative",
            "skin warm", "skin cool", "skin dry", "skin moist",
            "lungs clear", "breath sounds", "heart sounds", "bowel sounds",
        ),
        safety_check_terms=(
            "fall risk", "fall precautions", "restraints", "isolation",
            "patient identification", "two patient identifiers", "allergy check",
            "code status", "bed alarm", "call light within reach",
        ),
        statement_pattern=re.compile(r"\"([^\"]+)\"|“([^”]+)”"),
        timestamp_pattern=re.compile(
            r"(?<![\d:])(\d{1,2}:\d{2}(?:\s*(?:am|pm))?|\d{4}\s*hours?)(?![\d:a-z])",
            re.IGNORECASE,
        ),
        allergy_pattern=re.compile(
            r"\ballerg(?:y|ies|ic)\b(?:\s+to\b)?\s*:?\s*([^.\n;]+)",
            re.IGNORECASE,
        ),
        allergy_split_pattern=re.compile(r"\s*(?:,|\band\b)\s*", re.IGNORECASE),
        intake_rules=(
            ("oral", _volume(r"oral\s+intake|po\s+intake")),
            ("iv", _volume(r"iv\s+(?:fluids?|intake)")),
            ("enteral", _volume(r"enteral(?:\s+(?:feeding|intake))?|tube\s+feeding")),
            ("parenteral", _volume(r"tpn|parenteral(?:\s+nutrition)?")),
            ("blood", _volume(r"blood\s+products?|prbcs?")),
        ),
        output_rules=(
            ("urine", _volume(r"urine(?:\s+output)?|voided")),
            ("stool", _volume(r"stool(?:\s+output)?")),
            ("emesis", _volume(r"emesis")),
            ("ng", _volume(r"ng\s+(?:drainage|output)")),
            ("drain", _volume(r"(?:jp|chest\s+tube|hemovac)\s+(?:drain(?:age)?|output)")),
            ("wound", _volume(r"wound\s+drainage")),
        ),
        wound_location_pattern=re.compile(
            r"\bwound\s+(?:on|at|to)\s+(?:the\s+)?([^,.\n]+)",
            re.IGNORECASE,
        ),
        wound_size_pattern=re.compile(
            r"(\d+(?:\.\d+)?)\s*(?:x|by)\s*(\d+(?:\.\d+)?)\s*(?:(?:x|by)\s*(\d+(?:\.\d+)?)\s*)?cm\b",
            re.IGNORECASE,
        ),
        wound_stages=(
            "Stage I", "Stage II", "Stage III", "Stage IV",
            "Unstageable", "Deep Tissue Injury", "Medical Device Related",
        ),
        drainage_types=(
            ("serosanguineous", "Serosanguineous"),
            ("serous", "Serous"),
            ("sanguineous", "Sanguineous"),
            ("purulent", "Purulent"),
            ("no drainage", "None"),
        ),
        assessment_systems={
            "neuro": (
                "neurological", "neuro", "mental status", "loc", "level of consciousness",
                "alert", "oriented", "pupils", "perrla",
            ),
            "cardiac": (
                "cardiac", "heart", "cardiovascular", "chest", "heart sounds",
                "rhythm", "pulses", "edema",
            ),
            "respiratory": (
                "respiratory", "lungs", "breathing", "breath sounds", "oxygen",
                "dyspnea", "cough", "sputum",
            ),
            "gi": (
                "gastrointestinal", "gi", "abdomen", "bowel", "nausea", "vomiting",
                "appetite", "bowel sounds",
            ),
            "gu": (
                "genitourinary", "gu", "urinary", "bladder", "foley", "catheter",
                "urine", "continent", "voiding",
            ),
            "skin": (
                "skin", "integumentary", "wound", "pressure injury", "rash",
                "bruising", "turgor",
            ),
            "musculoskeletal": (
                "musculoskeletal", "msk", "mobility", "range of motion", "rom",
                "strength", "gait",
            ),
        },
        system_mentions={
            "neuro": ("neuro", "neurological", "neurologic", "neurologically"),
            "cardiac": ("cardiac", "cardiovascular"),
            "respiratory": ("respiratory",),
            "gi": ("gi", "gastrointestinal"),
            "gu": ("gu", "genitourinary"),
            "skin": ("skin", "integumentary"),
            "musculoskeletal": ("musculoskeletal", "msk"),
        },
        shift_phases=(
            ("start of shift", "Start of Shift"),
            ("beginning of shift", "Start of Shift"),
            ("initial assessment", "Start of Shift"),
            ("shift start", "Start of Shift"),
            ("mid shift", "Mid-Shift"),
            ("mid-shift", "Mid-Shift"),
            ("during shift", "Mid-Shift"),
            ("end of shift", "End of Shift"),
            ("shift end", "End of Shift"),
            ("handoff", "End of Shift"),
            ("sign out", "End of Shift"),
        ),
        unit_types={
            "Med-Surg": ("med surg", "med-surg", "medical surgical", "medsurg", "general floor"),
            "ICU": ("icu", "intensive care", "critical care", "micu", "sicu", "ccu"),
            "NICU": ("nicu", "neonatal", "newborn icu", "neonatal intensive care"),
            "Mother-Baby": ("mother baby", "mother-baby", "postpartum", "maternity", "l&d"),
        },
        communication_types={
            "Provider Notification": (
                "called provider", "notified physician", "notified provider",
                "paged doctor", "contacted md", "call the physician",
            ),
            "Family Update": ("family notified", "spoke with family", "family at bedside"),
            "Handoff": ("report given", "end of shift report", "handoff report", "sign out"),
        },
        generic_rules=_build_generic_rules(),
        specialized_rules=_build_specialized_rules(),
        intake_output_cues=IntakeOutputCues(
            intake_terms=("intake", "oral", "iv fluid", "iv fluids"),
            output_terms=("output", "urine"),
            balance_terms=("balance", "fluid balance"),
            explicit_terms=("i&o", "i/o", "intake and output"),
        ),
        medication_administration_cues=MedicationAdministrationCues(
            keywords=(
                "medication administration", "mar", "administered", "gave",
                "dose", "route", "tolerated",
            ),
            route_pattern=re.compile(r"\b(?:po|iv|im|sq|sl|pr)\b", re.IGNORECASE),
        ),
    )


_DEFAULT_LIBRARY = build_pattern_library()
