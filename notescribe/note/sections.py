from __future__ import annotations

"""
Assemble named draft sections from extracted fields.

Design intent:
- One table row per format; adding a format is a data change.
- Missing data yields fixed boilerplate, never an empty or failed section.
- Nothing extracted is dropped: values no section quotes are listed at the end.
"""

from dataclasses import dataclass
from typing import Callable

from notescribe.classification.formats import NoteFormat
from notescribe.extraction.fields import VITAL_LABELS, ExtractedFields, VitalSigns, field_values


ADDITIONAL_SECTION = "Additional Documentation"

_VITAL_UNITS: dict[str, str] = {
    "blood_pressure": " mmHg",
    "heart_rate": " bpm",
    "respiratory_rate": " breaths/min",
    "temperature": "°F",
    "oxygen_saturation": "%",
    "mean_arterial_pressure": " mmHg",
    "central_venous_pressure": " mmHg",
}

_SYSTEM_TITLES: dict[str, str] = {"gi": "GI", "gu": "GU"}

_NORMAL_SYSTEMS = (
    "Neuro: Alert and oriented",
    "Cardiac: Regular rate and rhythm",
    "Respiratory: Lungs clear bilaterally",
    "GI: Abdomen soft, non-tender",
    "GU: Voiding without difficulty",
    "Skin: Warm, dry, intact",
    "Musculoskeletal: Moves all extremities",
)

_DEFAULT_SAFETY = (
    "- Fall risk: Assessed",
    "- Patient identification: Verified",
    "- Call light: Within reach",
)


@dataclass(frozen=True)
class _Inputs:
    format: NoteFormat
    fields: ExtractedFields
    narrative: str
    preview_chars: int


_Builder = Callable[[_Inputs], str]


def vitals_stable(vitals: VitalSigns) -> bool:
    """Systolic within 90-180 and heart rate within 60-100; unparseable values are ignored."""
    if vitals.blood_pressure:
        systolic = _number(vitals.blood_pressure.split("/")[0])
        if systolic is not None and (systolic < 90 or systolic > 180):
            return False
    if vitals.heart_rate:
        rate = _number(vitals.heart_rate)
        if rate is not None and (rate < 60 or rate > 100):
            return False
    return True


def _number(raw: str) -> float | None:
    try:
        return float(raw)
    except ValueError:
        return None


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


def _subjective(inp: _Inputs) -> str:
    fields = inp.fields
    lines: list[str] = []
    if fields.patient_statements:
        lines.append(f'Patient states: "{fields.patient_statements[0]}"')
        lines.append("")
    if fields.symptoms:
        lines.append(f"Chief complaint: {', '.join(fields.symptoms)}")
    if fields.vital_signs.pain_level:
        lines.append(f"Pain level: {fields.vital_signs.pain_level}/10")
    return "\n".join(lines).strip() or "Patient reports: [Information from transcription]"


def _objective(inp: _Inputs) -> str:
    fields = inp.fields
    lines = ["Vital Signs:"]
    for name, value in fields.vital_signs.as_dict().items():
        if name == "pain_level":
            continue
        lines.append(f"- {VITAL_LABELS[name]}: {value}{_VITAL_UNITS.get(name, '')}")
    if len(lines) == 1:
        lines.append("- Not documented")
    if fields.assessment_findings:
        lines.append("")
        lines.append("Physical Assessment:")
        lines.extend(f"- {finding}" for finding in fields.assessment_findings)
    return "\n".join(lines)


def _assessment(inp: _Inputs) -> str:
    fields = inp.fields
    parts: list[str] = []
    if fields.symptoms:
        parts.append(f"Patient presents with {', '.join(fields.symptoms)}.")
    if fields.vital_signs.blood_pressure or fields.vital_signs.heart_rate:
        state = "stable" if vitals_stable(fields.vital_signs) else "require monitoring"
        parts.append(f"Vital signs {state}.")
    return " ".join(parts) or "Clinical assessment based on findings."


def _plan(inp: _Inputs) -> str:
    fields = inp.fields
    lines: list[str] = []
    if fields.medications:
        lines.append(f"Continue medications: {', '.join(med.describe() for med in fields.medications)}")
    if fields.interventions:
        lines.append(f"Ongoing interventions: {', '.join(fields.interventions[:2])}")
    lines.append("Monitor patient status and reassess as needed.")
    lines.append("Patient education provided regarding care plan.")
    return "\n".join(lines)


def _situation(inp: _Inputs) -> str:
    fields = inp.fields
    parts: list[str] = []
    if fields.symptoms:
        parts.append(f"Patient experiencing {fields.symptoms[0]}.")
    if fields.vital_signs.pain_level:
        parts.append(f"Pain level {fields.vital_signs.pain_level}/10.")
    return " ".join(parts) or "Current patient situation requires attention."


def _background(inp: _Inputs) -> str:
    fields = inp.fields
    parts = ["Patient history:"]
    if fields.allergies:
        parts.append(f"Allergies: {', '.join(fields.allergies)}.")
    if fields.medications:
        parts.append(f"Current medications: {', '.join(med.describe() for med in fields.medications)}.")
    if len(parts) == 1:
        parts.append("Not documented.")
    return " ".join(parts)


def _recommendation(inp: _Inputs) -> str:
    fields = inp.fields
    parts = ["Recommend:"]
    if "pain" in fields.symptoms:
        parts.append("Continue pain management protocol.")
    parts.append("Monitor vital signs and patient status.")
    parts.append("Notify provider of any changes.")
    if fields.communications:
        parts.append(f"Communication: {', '.join(fields.communications)}.")
    return " ".join(parts)


def _problem(inp: _Inputs) -> str:
    if inp.fields.symptoms:
        return f"Primary problem: {inp.fields.symptoms[0]}"
    return "Patient problem identified from assessment."


def _interventions(inp: _Inputs) -> str:
    if inp.fields.interventions:
        return "\n".join(inp.fields.interventions)
    return "Nursing interventions implemented per care plan."


def _evaluation(inp: _Inputs) -> str:
    return "Patient response to interventions monitored. Ongoing evaluation of effectiveness."


def _response(inp: _Inputs) -> str:
    return "Patient tolerated interventions well. No adverse reactions noted."


def _patient_assessment(inp: _Inputs) -> str:
    fields = inp.fields
    lines = ["System-by-System Assessment:", ""]
    if not fields.assessment_systems:
        lines.extend(_NORMAL_SYSTEMS)
        return "\n".join(lines)
    for system in fields.assessment_systems:
        title = _SYSTEM_TITLES.get(system, system.capitalize())
        findings = [item for item in fields.assessment_findings if system in item.lower()]
        lines.append(f"{title}: {', '.join(findings) if findings else 'WNL'}")
    return "\n".join(lines)


def _medications(inp: _Inputs) -> str:
    if not inp.fields.medications:
        return "No medications administered this shift."
    lines = ["Medications Administered:", ""]
    lines.extend(f"- {med.describe()}" for med in inp.fields.medications)
    return "\n".join(lines)


def _administration_details(inp: _Inputs) -> str:
    if not inp.fields.medications:
        return "No medications administered."
    lines = ["Administration Details:"]
    for med in inp.fields.medications:
        lines.append("")
        lines.append(f"{med.name}:")
        lines.append(f"- Time: {med.time or 'Not specified'}")
        lines.append(f"- Route: {med.route or 'Not specified'}")
        if med.site:
            lines.append(f"- Site: {med.site}")
        lines.append("- Patient tolerated well")
    return "\n".join(lines)


def _intake_output_summary(inp: _Inputs) -> str:
    io = inp.fields.intake_output
    if io is None:
        return "I&O: Monitoring continued"
    return "\n".join(
        [
            "Intake & Output:",
            "",
            f"Total Intake: {io.intake_total} mL",
            f"Total Output: {io.output_total} mL",
            f"Balance: {_signed(io.balance)} mL",
        ]
    )


def _volume_listing(title: str, volumes: dict[str, int]) -> str:
    lines = [f"{title}:"]
    for source, amount in volumes.items():
        if source != "total" and amount > 0:
            lines.append(f"- {source.capitalize()}: {amount} mL")
    lines.append("")
    lines.append(f"Total: {volumes.get('total', 0)} mL")
    return "\n".join(lines)


def _intake(inp: _Inputs) -> str:
    io = inp.fields.intake_output
    return "Intake: Monitoring continued" if io is None else _volume_listing("Intake", io.intake)


def _output(inp: _Inputs) -> str:
    io = inp.fields.intake_output
    return "Output: Monitoring continued" if io is None else _volume_listing("Output", io.output)


def _balance(inp: _Inputs) -> str:
    io = inp.fields.intake_output
    if io is None:
        return "Balance: Not documented"
    return f"Fluid Balance: {_signed(io.balance)} mL\n\nPatient fluid status monitored throughout shift."


def _wound_assessment(inp: _Inputs) -> str:
    wound = inp.fields.wound_info
    if wound is None:
        return "Wound assessment: No wounds noted"
    lines = ["Wound Assessment:", ""]
    for label, value in (
        ("Location", wound.location),
        ("Stage", wound.stage),
        ("Size", wound.size),
        ("Drainage", wound.drainage),
    ):
        if value:
            lines.append(f"{label}: {value}")
    return "\n".join(lines)


def _safety(inp: _Inputs) -> str:
    lines = ["Safety Checks:", ""]
    if inp.fields.safety_checks:
        lines.extend(f"- {check}: Assessed and addressed" for check in inp.fields.safety_checks)
    else:
        lines.extend(_DEFAULT_SAFETY)
    return "\n".join(lines)


def _risk_factors(inp: _Inputs) -> str:
    lines = ["Risk Factors:", ""]
    if inp.fields.safety_checks:
        lines.extend(f"- {check}" for check in inp.fields.safety_checks)
    else:
        lines.append("No significant risk factors identified at this time.")
    return "\n".join(lines)


def _narrative(inp: _Inputs) -> str:
    text = inp.narrative.strip()
    if not text:
        return "Shift Narrative:\n\nNot documented"
    preview = text[: inp.preview_chars]
    if len(text) > inp.preview_chars:
        preview += "..."
    return f"Shift Narrative:\n\n{preview}"


def _unit_assessment(inp: _Inputs) -> str:
    fields = inp.fields
    lines = [f"{inp.format.value.upper()} Unit Assessment:", ""]
    vitals = fields.vital_signs.as_dict()
    if vitals:
        lines.append("Vital Signs:")
        lines.extend(f"- {VITAL_LABELS[name]}: {value}" for name, value in vitals.items())
        lines.append("")
    if fields.assessment_findings:
        lines.append("Assessment Findings:")
        lines.extend(f"- {finding}" for finding in fields.assessment_findings)
    if not vitals and not fields.assessment_findings:
        lines.append("Not documented")
    return "\n".join(lines).strip()


_UNIT_SECTIONS: tuple[tuple[str, _Builder], ...] = (
    ("Unit Assessment", _unit_assessment),
    ("Interventions", _interventions),
    ("Patient Response", _response),
)

SECTION_TABLE: dict[NoteFormat, tuple[tuple[str, _Builder], ...]] = {
    NoteFormat.SOAP: (
        ("Subjective", _subjective),
        ("Objective", _objective),
        ("Assessment", _assessment),
        ("Plan", _plan),
    ),
    NoteFormat.SBAR: (
        ("Situation", _situation),
        ("Background", _background),
        ("Assessment", _assessment),
        ("Recommendation", _recommendation),
    ),
    NoteFormat.PIE: (
        ("Problem", _problem),
        ("Intervention", _interventions),
        ("Evaluation", _evaluation),
    ),
    NoteFormat.DAR: (
        ("Data", _objective),
        ("Action", _interventions),
        ("Response", _response),
    ),
    NoteFormat.SHIFT_ASSESSMENT: (
        ("Patient Assessment", _patient_assessment),
        ("Vital Signs", _objective),
        ("Medications", _medications),
        ("Intake & Output", _intake_output_summary),
        ("Safety", _safety),
        ("Narrative", _narrative),
    ),
    NoteFormat.MAR: (
        ("Medication Information", _medications),
        ("Administration Details", _administration_details),
        ("Response", _response),
    ),
    NoteFormat.INTAKE_OUTPUT: (
        ("Intake", _intake),
        ("Output", _output),
        ("Balance", _balance),
    ),
    NoteFormat.WOUND_CARE: (
        ("Wound Assessment", _wound_assessment),
        ("Interventions", _interventions),
        ("Response", _response),
    ),
    NoteFormat.SAFETY_CHECKLIST: (
        ("Safety Assessment", _safety),
        ("Risk Factors", _risk_factors),
        ("Interventions", _interventions),
    ),
    NoteFormat.MED_SURG: _UNIT_SECTIONS,
    NoteFormat.ICU: _UNIT_SECTIONS,
    NoteFormat.NICU: _UNIT_SECTIONS,
    NoteFormat.MOTHER_BABY: _UNIT_SECTIONS,
}


def section_names(fmt: NoteFormat) -> list[str]:
    return [name for name, _ in SECTION_TABLE[fmt]]


def assemble_sections(
    fmt: NoteFormat,
    fields: ExtractedFields,
    *,
    narrative: str = "",
    preview_chars: int = 200,
) -> dict[str, str]:
    inputs = _Inputs(
        format=fmt,
        fields=fields,
        narrative=str(narrative or ""),
        preview_chars=max(0, int(preview_chars)),
    )
    sections = {name: builder(inputs) for name, builder in SECTION_TABLE[fmt]}

    body = "\n".join(sections.values())
    leftovers: list[str] = []
    for label, value in field_values(fields):
        line = f"- {label}: {value}"
        if value not in body and line not in leftovers:
            leftovers.append(line)
    if leftovers:
        sections[ADDITIONAL_SECTION] = "\n".join(leftovers)
    return sections
