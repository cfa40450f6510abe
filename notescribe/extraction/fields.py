from __future__ import annotations

"""
Value objects produced by field extraction.

Design intent:
- Keep extracted values as matched text; narratives mix units and formats.
- Optional compound fields are either absent or fully populated from one match.
"""

from dataclasses import asdict, dataclass, field, fields as dataclass_fields
from typing import Any


VITAL_LABELS: dict[str, str] = {
    "blood_pressure": "BP",
    "heart_rate": "HR",
    "respiratory_rate": "RR",
    "temperature": "Temp",
    "oxygen_saturation": "O2 Sat",
    "pain_level": "Pain",
    "weight": "Weight",
    "mean_arterial_pressure": "MAP",
    "central_venous_pressure": "CVP",
}


@dataclass(frozen=True)
class VitalSigns:
    blood_pressure: str | None = None
    heart_rate: str | None = None
    respiratory_rate: str | None = None
    temperature: str | None = None
    oxygen_saturation: str | None = None
    pain_level: str | None = None
    weight: str | None = None
    mean_arterial_pressure: str | None = None
    central_venous_pressure: str | None = None

    def as_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        for item in dataclass_fields(self):
            value = getattr(self, item.name)
            if value:
                out[item.name] = value
        return out

    def __len__(self) -> int:
        return len(self.as_dict())


@dataclass(frozen=True)
class Medication:
    name: str
    dose: str = ""
    route: str = ""
    time: str = ""
    site: str | None = None

    def describe(self) -> str:
        parts = [self.name, self.dose, self.route]
        text = " ".join(part for part in parts if part)
        if self.time:
            text += f" at {self.time}"
        return text


@dataclass(frozen=True)
class IntakeOutput:
    intake: dict[str, int]
    output: dict[str, int]
    balance: int

    @property
    def intake_total(self) -> int:
        return int(self.intake.get("total", 0))

    @property
    def output_total(self) -> int:
        return int(self.output.get("total", 0))


@dataclass(frozen=True)
class WoundInfo:
    location: str | None = None
    stage: str | None = None
    size: str | None = None
    drainage: str | None = None


@dataclass(frozen=True)
class ExtractedFields:
    vital_signs: VitalSigns = field(default_factory=VitalSigns)
    medications: list[Medication] = field(default_factory=list)
    interventions: list[str] = field(default_factory=list)
    symptoms: list[str] = field(default_factory=list)
    assessment_findings: list[str] = field(default_factory=list)
    patient_statements: list[str] = field(default_factory=list)
    time_stamps: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)
    intake_output: IntakeOutput | None = None
    wound_info: WoundInfo | None = None
    assessment_systems: list[str] = field(default_factory=list)
    safety_checks: list[str] = field(default_factory=list)
    communications: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not field_values(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def field_values(fields: ExtractedFields) -> list[tuple[str, str]]:
    """
    Flatten every non-empty extracted value into (field label, text) pairs.

    Integer volumes are rendered as text so callers can check them verbatim.
    """
    out: list[tuple[str, str]] = []
    for name, value in fields.vital_signs.as_dict().items():
        out.append((name, value))
    for med in fields.medications:
        for attr in ("name", "dose", "route", "time", "site"):
            value = getattr(med, attr)
            if value:
                out.append((f"medication.{attr}", value))
    for attr in (
        "interventions",
        "symptoms",
        "assessment_findings",
        "patient_statements",
        "time_stamps",
        "allergies",
        "assessment_systems",
        "safety_checks",
        "communications",
    ):
        for value in getattr(fields, attr):
            if value:
                out.append((attr, value))
    if fields.intake_output is not None:
        for source, amount in fields.intake_output.intake.items():
            out.append((f"intake.{source}", str(amount)))
        for source, amount in fields.intake_output.output.items():
            out.append((f"output.{source}", str(amount)))
        out.append(("balance", str(fields.intake_output.balance)))
    if fields.wound_info is not None:
        for attr in ("location", "stage", "size", "drainage"):
            value = getattr(fields.wound_info, attr)
            if value:
                out.append((f"wound.{attr}", value))
    return out
