from datetime import datetime

import pytest

from notescribe.classification.formats import FormatContext, NoteFormat
from notescribe.internal_core.config import ScribeConfig
from notescribe.note.checklist import BASE_ELEMENTS, required_elements
from notescribe.note.structuring import NoteStructurer, structure_narrative


SCENARIO_A = "BP 140/90, HR 88, O2 sat 98%, patient reports chest pain for 2 hours"
SCENARIO_B = "Administered Lisinopril 10mg PO at 0900. Patient tolerated well."


def _clock() -> datetime:
    return datetime(2024, 5, 6, 7, 45)


def test_scenario_a_structures_ready_soap_draft() -> None:
    draft = structure_narrative(SCENARIO_A, clock=_clock)
    assert draft.detected_format.format is NoteFormat.SOAP
    assert draft.detected_format.indicators == ["patient reports"]
    assert draft.ready_for_review is True
    assert "140/90" in draft.sections["Objective"]
    assert draft.required_elements == list(BASE_ELEMENTS)


def test_scenario_b_mar_draft_is_not_ready_without_vitals() -> None:
    draft = structure_narrative(SCENARIO_B, note_format=NoteFormat.MAR, clock=_clock)
    meds = draft.extracted_fields.medications
    assert len(meds) == 1
    assert (meds[0].name, meds[0].dose, meds[0].route) == ("Lisinopril", "10mg", "PO")
    assert draft.sections["Administration Details"].strip()
    assert draft.sections["Response"].strip()
    assert draft.ready_for_review is False
    assert draft.detected_format.confidence == pytest.approx(1.0)


def test_scenario_d_empty_draft_is_not_ready() -> None:
    draft = structure_narrative("We walked to the park and ate lunch under the trees.")
    assert draft.detected_format.format is NoteFormat.SOAP
    assert draft.extracted_fields.is_empty()
    assert draft.ready_for_review is False


def test_shift_assessment_draft_carries_phase_checklist() -> None:
    draft = structure_narrative(
        "Start of shift assessment. Neuro: alert and oriented. Cardiac: regular rhythm. "
        "Respiratory: lungs clear. BP 124/78. Complains of headache."
    )
    assert draft.detected_format.format is NoteFormat.SHIFT_ASSESSMENT
    assert "Patient Assessment" in draft.sections
    assert "Review Orders" in draft.required_elements
    assert draft.ready_for_review is True


def test_caller_context_flows_into_required_elements() -> None:
    draft = structure_narrative(SCENARIO_A, context=FormatContext(unit_type="ICU"))
    assert draft.detected_format.context.unit_type == "ICU"
    assert "Hemodynamic Monitoring" in draft.required_elements


def test_with_section_returns_edited_copy() -> None:
    draft = structure_narrative(SCENARIO_A, clock=_clock)
    edited = draft.with_section("Plan", "Recheck BP in one hour.")
    assert edited.sections["Plan"] == "Recheck BP in one hour."
    assert draft.sections["Plan"] != "Recheck BP in one hour."
    assert edited.detected_format == draft.detected_format


def test_config_controls_review_gate() -> None:
    strict = NoteStructurer(config=ScribeConfig(NOTESCRIBE_MIN_REVIEW_SECTIONS=10), clock=_clock)
    assert strict.structure(SCENARIO_A).ready_for_review is False


def test_structuring_is_deterministic() -> None:
    structurer = NoteStructurer(clock=_clock)
    assert structurer.structure(SCENARIO_B) == structurer.structure(SCENARIO_B)


def test_required_elements_deduplicate_and_order() -> None:
    items = required_elements(FormatContext(shift_phase="Mid-Shift", unit_type="NICU"))
    assert items[:3] == list(BASE_ELEMENTS)
    assert items[3:6] == ["I&O Update", "Interventions", "Patient Response"]
    assert items[-1] == "Daily Weight"
    assert len(items) == len(set(items))
    assert required_elements() == list(BASE_ELEMENTS)
