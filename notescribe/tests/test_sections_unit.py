import pytest

from notescribe.classification.formats import NoteFormat
from notescribe.extraction.extractor import extract_fields
from notescribe.extraction.fields import (
    ExtractedFields,
    IntakeOutput,
    Medication,
    VitalSigns,
    WoundInfo,
    field_values,
)
from notescribe.note.readiness import is_ready
from notescribe.note.sections import (
    ADDITIONAL_SECTION,
    assemble_sections,
    section_names,
    vitals_stable,
)


def _rich_fields() -> ExtractedFields:
    return ExtractedFields(
        vital_signs=VitalSigns(
            blood_pressure="150/95",
            heart_rate="104",
            temperature="100.4",
            pain_level="6",
            central_venous_pressure="9",
        ),
        medications=[Medication(name="Morphine", dose="2 mg", route="IV", time="10:15", site="left ac")],
        interventions=["Repositioned patient for comfort."],
        symptoms=["pain", "nausea"],
        assessment_findings=["alert", "lungs clear"],
        patient_statements=["it hurts when I move"],
        time_stamps=["10:15"],
        allergies=["penicillin"],
        intake_output=IntakeOutput(
            intake={"oral": 300, "total": 300},
            output={"urine": 500, "total": 500},
            balance=-200,
        ),
        wound_info=WoundInfo(location="left heel", stage="Stage II", size="2 x 1 cm"),
        assessment_systems=["neuro", "respiratory"],
        safety_checks=["fall risk"],
        communications=["Provider Notification"],
    )


@pytest.mark.parametrize("fmt", list(NoteFormat))
def test_every_extracted_value_appears_verbatim(fmt: NoteFormat) -> None:
    fields = _rich_fields()
    sections = assemble_sections(fmt, fields, narrative="Night shift narrative.")
    body = "\n".join(sections.values())
    for _, value in field_values(fields):
        assert value in body


def test_assembly_is_idempotent() -> None:
    fields = extract_fields("BP 140/90, HR 88, O2 sat 98%, patient reports chest pain for 2 hours")
    first = assemble_sections(NoteFormat.SBAR, fields, narrative="x")
    second = assemble_sections(NoteFormat.SBAR, fields, narrative="x")
    assert first == second
    assert list(first) == list(second)


def test_scenario_a_soap_sections() -> None:
    fields = extract_fields("BP 140/90, HR 88, O2 sat 98%, patient reports chest pain for 2 hours")
    sections = assemble_sections(NoteFormat.SOAP, fields)
    assert list(sections)[:4] == ["Subjective", "Objective", "Assessment", "Plan"]
    assert "chest pain" in sections["Subjective"]
    assert "140/90" in sections["Objective"]
    assert "Vital signs stable." in sections["Assessment"]


def test_empty_fields_use_boilerplate_without_additional_section() -> None:
    sections = assemble_sections(NoteFormat.SOAP, ExtractedFields())
    assert sections["Subjective"] == "Patient reports: [Information from transcription]"
    assert sections["Assessment"] == "Clinical assessment based on findings."
    assert ADDITIONAL_SECTION not in sections

    io_sections = assemble_sections(NoteFormat.INTAKE_OUTPUT, ExtractedFields())
    assert io_sections["Intake"] == "Intake: Monitoring continued"


def test_unreferenced_values_are_listed_in_additional_section() -> None:
    fields = ExtractedFields(symptoms=["cough"], allergies=["latex"])
    sections = assemble_sections(NoteFormat.PIE, fields)
    assert sections["Problem"] == "Primary problem: cough"
    assert sections[ADDITIONAL_SECTION] == "- allergies: latex"


def test_intake_output_sections_show_signed_balance() -> None:
    sections = assemble_sections(NoteFormat.INTAKE_OUTPUT, _rich_fields())
    assert "- Oral: 300 mL" in sections["Intake"]
    assert "Total: 500 mL" in sections["Output"]
    assert sections["Balance"].startswith("Fluid Balance: -200 mL")


def test_unit_formats_share_section_list_with_unit_header() -> None:
    sections = assemble_sections(NoteFormat.ICU, _rich_fields())
    assert list(sections)[:3] == ["Unit Assessment", "Interventions", "Patient Response"]
    assert sections["Unit Assessment"].startswith("ICU Unit Assessment:")
    assert "- CVP: 9" in sections["Unit Assessment"]


def test_mar_details_include_site() -> None:
    sections = assemble_sections(NoteFormat.MAR, _rich_fields())
    assert "- Site: left ac" in sections["Administration Details"]
    assert "- Morphine 2 mg IV at 10:15" in sections["Medication Information"]


def test_shift_narrative_preview_is_truncated() -> None:
    sections = assemble_sections(
        NoteFormat.SHIFT_ASSESSMENT,
        ExtractedFields(),
        narrative="0123456789abcdef",
        preview_chars=10,
    )
    assert sections["Narrative"] == "Shift Narrative:\n\n0123456789..."
    assert "Neuro: Alert and oriented" in sections["Patient Assessment"]


def test_section_names_follow_table() -> None:
    assert section_names(NoteFormat.SHIFT_ASSESSMENT) == [
        "Patient Assessment",
        "Vital Signs",
        "Medications",
        "Intake & Output",
        "Safety",
        "Narrative",
    ]


def test_vitals_stability_thresholds() -> None:
    assert vitals_stable(VitalSigns(blood_pressure="120/80", heart_rate="72"))
    assert not vitals_stable(VitalSigns(blood_pressure="190/100"))
    assert not vitals_stable(VitalSigns(heart_rate="52"))
    assert vitals_stable(VitalSigns())


def test_readiness_gate() -> None:
    fields = ExtractedFields(vital_signs=VitalSigns(heart_rate="80"), symptoms=["pain"])
    three = {"A": "a", "B": "b", "C": "c"}
    assert is_ready(three, fields)
    assert not is_ready({"A": "a", "B": "b"}, fields)
    assert not is_ready(three, ExtractedFields(symptoms=["pain"]))
    assert not is_ready(three, ExtractedFields(vital_signs=VitalSigns(heart_rate="80")))
    assert not is_ready(three, fields, min_sections=4)
