import logging
from datetime import datetime

import pytest

from notescribe.extraction.extractor import (
    FieldExtractor,
    detect_communications,
    detect_shift_phase,
    detect_unit_type,
    extract_fields,
)
from notescribe.extraction.fields import ExtractedFields, Medication


def _fixed_clock() -> datetime:
    return datetime(2024, 1, 1, 8, 30)


def _extractor() -> FieldExtractor:
    return FieldExtractor(clock=_fixed_clock)


def test_extract_scenario_a_vitals_and_symptoms() -> None:
    fields = _extractor().extract("BP 140/90, HR 88, O2 sat 98%, patient reports chest pain for 2 hours")
    assert fields.vital_signs.blood_pressure == "140/90"
    assert fields.vital_signs.heart_rate == "88"
    assert fields.vital_signs.oxygen_saturation == "98"
    assert fields.vital_signs.pain_level is None
    assert "chest pain" in fields.symptoms
    assert fields.medications == []


def test_extract_scenario_b_structured_medication() -> None:
    fields = _extractor().extract("Administered Lisinopril 10mg PO at 0900. Patient tolerated well.")
    assert fields.medications == [
        Medication(name="Lisinopril", dose="10mg", route="PO", time="0900", site=None)
    ]
    assert len(fields.vital_signs) == 0
    assert fields.interventions == ["Administered Lisinopril 10mg PO at 0900."]


def test_extract_medication_route_synonym_site_and_clock_default() -> None:
    fields = _extractor().extract(
        "Gave enoxaparin 40 mg SQ in the abdomen at 2100. Given acetaminophen 650 mg by mouth."
    )
    assert fields.medications[0] == Medication(
        name="enoxaparin", dose="40 mg", route="SQ", time="2100", site="abdomen"
    )
    assert fields.medications[1].route == "PO"
    assert fields.medications[1].time == "08:30"


def test_extract_medication_fallbacks() -> None:
    suffix = _extractor().extract("Patient given metoprolol for rate control.")
    assert [med.name for med in suffix.medications] == ["metoprolol"]
    assert suffix.medications[0].dose == ""
    assert suffix.medications[0].time == "08:30"

    labelled = _extractor().extract("Medications: aspirin and heparin.")
    assert [med.name for med in labelled.medications] == ["aspirin and heparin"]


def test_extract_full_vital_set() -> None:
    fields = _extractor().extract(
        "Temp 101.2, RR 22, SpO2 94%, pain 7/10, weight 80 kg, MAP 65, CVP 12"
    )
    assert fields.vital_signs.as_dict() == {
        "respiratory_rate": "22",
        "temperature": "101.2",
        "oxygen_saturation": "94",
        "pain_level": "7",
        "weight": "80",
        "mean_arterial_pressure": "65",
        "central_venous_pressure": "12",
    }


def test_extract_discards_malformed_pain_and_logs(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="notescribe.extraction.extractor"):
        fields = _extractor().extract("Pain 15, HR 72")
    assert fields.vital_signs.pain_level is None
    assert fields.vital_signs.heart_rate == "72"
    assert "vital_capture_discarded name=pain_level" in caplog.text


def test_extract_ignores_durations_and_volumes_after_vital_labels() -> None:
    fields = _extractor().extract("Abdominal pain 3 days. IV fluids infusing every 4 hr 125 mL.")
    assert fields.vital_signs.heart_rate is None
    assert fields.vital_signs.pain_level is None

    vitals = _extractor().extract("HR 96, RR 20, pain 6 for 2 hours").vital_signs
    assert (vitals.heart_rate, vitals.respiratory_rate, vitals.pain_level) == ("96", "20", "6")


def test_extract_allergies_split_on_commas_and_and() -> None:
    fields = _extractor().extract("Allergies: penicillin, sulfa and latex. Vitals stable.")
    assert fields.allergies == ["penicillin", "sulfa", "latex"]
    assert _extractor().extract("Patient is allergic to peanuts.").allergies == ["peanuts"]


def test_extract_intake_output_totals_and_balance() -> None:
    fields = _extractor().extract("Oral intake 500 mL, IV fluids 1000 mL, urine output 800 mL.")
    io = fields.intake_output
    assert io is not None
    assert io.intake == {"oral": 500, "iv": 1000, "total": 1500}
    assert io.output == {"urine": 800, "total": 800}
    assert io.balance == 700


def test_extract_wound_info_first_match_per_field() -> None:
    fields = _extractor().extract(
        "Stage III pressure injury wound on the sacrum, 3 x 2 cm, serosanguineous drainage."
    )
    wound = fields.wound_info
    assert wound is not None
    assert wound.location == "sacrum"
    assert wound.stage == "Stage III"
    assert wound.size == "3 x 2 cm"
    assert wound.drainage == "Serosanguineous"
    assert _extractor().extract("Ambulated in hallway.").wound_info is None


def test_extract_interventions_ordered_by_appearance() -> None:
    fields = _extractor().extract("Turned patient every 2 hours. Applied barrier cream.")
    assert fields.interventions == ["Turned patient every 2 hours.", "Applied barrier cream."]


def test_extract_statements_and_timestamps() -> None:
    fields = _extractor().extract(
        'Patient said "my chest hurts" and “I feel dizzy”. Assessed at 14:30 and again at 1600 hours.'
    )
    assert fields.patient_statements == ["my chest hurts", "I feel dizzy"]
    assert fields.time_stamps == ["14:30", "1600 hours"]


def test_side_signal_detectors() -> None:
    assert detect_shift_phase("End of shift report given") == "End of Shift"
    assert detect_shift_phase("Routine check") is None
    assert detect_unit_type("Patient transferred to the SICU") == "ICU"
    assert detect_communications("Notified provider of BP change; family at bedside.") == [
        "Provider Notification",
        "Family Update",
    ]


@pytest.mark.parametrize(
    "narrative",
    ["", "   \n\t", None, "!!!???", "The weather is pleasant.", "BP 999/999 pain 99"],
)
def test_extract_never_raises(narrative) -> None:
    fields = extract_fields(narrative)
    assert isinstance(fields, ExtractedFields)


def test_extract_empty_and_unrelated_prose_is_all_empty() -> None:
    assert extract_fields("").is_empty()
    assert extract_fields("We walked to the park and ate lunch under the trees.").is_empty()


def test_extract_is_deterministic_with_fixed_clock() -> None:
    narrative = "Gave ondansetron 4 mg IV. Patient reports nausea. BP 128/82."
    assert _extractor().extract(narrative) == _extractor().extract(narrative)
