from __future__ import annotations

"""
Clinical term lookup used to enrich generation prompts.

Design intent:
- Depend on a narrow lookup contract so any knowledge source can be injected.
- A miss is normal; enrichment simply omits the term.
"""

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from notescribe.extraction.fields import ExtractedFields


class TermLookup(Protocol):
    def lookup_term(self, word: str) -> str | None:
        ...


@dataclass(frozen=True)
class TermEntry:
    term: str
    definition: str
    category: str
    synonyms: tuple[str, ...] = ()


_DEFAULT_ENTRIES: tuple[TermEntry, ...] = (
    TermEntry(
        term="Hypertension",
        definition="Persistently elevated arterial blood pressure",
        category="diagnosis",
        synonyms=("HTN", "High Blood Pressure"),
    ),
    TermEntry(
        term="Chest Pain",
        definition="Discomfort in the chest that may indicate cardiac, pulmonary or musculoskeletal cause",
        category="symptom",
        synonyms=("angina",),
    ),
    TermEntry(
        term="Dyspnea",
        definition="Difficult or labored breathing",
        category="symptom",
        synonyms=("shortness of breath", "SOB"),
    ),
    TermEntry(
        term="Nausea",
        definition="Sensation of unease in the stomach with an urge to vomit",
        category="symptom",
    ),
    TermEntry(
        term="Diabetes Mellitus",
        definition="Metabolic disorder characterized by high blood glucose levels",
        category="diagnosis",
        synonyms=("DM", "Diabetes", "High Blood Sugar"),
    ),
    TermEntry(
        term="Sepsis",
        definition="Life-threatening organ dysfunction caused by dysregulated host response to infection",
        category="diagnosis",
        synonyms=("Septic Shock",),
    ),
    TermEntry(
        term="Lisinopril",
        definition="ACE inhibitor used to treat hypertension and heart failure",
        category="medication",
    ),
    TermEntry(
        term="Metoprolol",
        definition="Beta blocker used to control heart rate and blood pressure",
        category="medication",
    ),
    TermEntry(
        term="Acetaminophen",
        definition="Analgesic and antipyretic",
        category="medication",
        synonyms=("Tylenol",),
    ),
    TermEntry(
        term="PERRLA",
        definition="Pupils equal, round, reactive to light and accommodation",
        category="assessment",
    ),
)


@dataclass(frozen=True)
class StaticTermLookup:
    entries: tuple[TermEntry, ...] = _DEFAULT_ENTRIES
    _index: dict[str, TermEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, TermEntry] = {}
        for entry in self.entries:
            for key in (entry.term, *entry.synonyms):
                index.setdefault(key.strip().lower(), entry)
        object.__setattr__(self, "_index", index)

    def lookup_term(self, word: str) -> str | None:
        entry = self._index.get(str(word or "").strip().lower())
        return entry.definition if entry else None


def default_term_lookup() -> StaticTermLookup:
    return StaticTermLookup()


def _candidate_terms(fields: ExtractedFields) -> Iterable[str]:
    yield from fields.symptoms
    yield from fields.assessment_findings
    for med in fields.medications:
        yield med.name


def enrich_terms(fields: ExtractedFields, lookup: TermLookup | None = None) -> dict[str, str]:
    """Definitions for extracted terms the lookup knows, keyed by the term as extracted."""
    source = lookup or default_term_lookup()
    out: dict[str, str] = {}
    for term in _candidate_terms(fields):
        if not term or term in out:
            continue
        definition = source.lookup_term(term)
        if definition:
            out[term] = definition
    return out
