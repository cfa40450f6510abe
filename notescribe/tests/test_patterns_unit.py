from notescribe.classification.formats import NoteFormat
from notescribe.patterns.library import (
    build_pattern_library,
    contains_keyword,
    StructuralCue,
    default_pattern_library,
    keyword_hits,
)


def _vital_rule(name: str):
    for rule in default_pattern_library().vital_rules:
        if rule.name == name:
            return rule
    raise AssertionError(f"missing vital rule {name}")


def test_keyword_containment_is_token_bounded() -> None:
    assert not contains_keyword("gi", "Medication given at bedside")
    assert contains_keyword("gi", "GI: abdomen soft")
    assert not contains_keyword("stage i", "Stage IV pressure injury")
    assert contains_keyword("stage iv", "Stage IV pressure injury")


def test_keyword_containment_tolerates_extra_whitespace() -> None:
    assert contains_keyword("chest pain", "reports CHEST   pain overnight")


def test_keyword_hits_keep_table_order_without_duplicates() -> None:
    assert keyword_hits(("pain", "nausea", "pain"), "nausea and pain") == ["pain", "nausea"]
    assert keyword_hits(("pain",), "") == []


def test_blood_pressure_rule_accepts_spoken_form() -> None:
    rule = _vital_rule("blood_pressure")
    assert rule.match("BP 140 over 90") == "140/90"
    assert rule.match("blood pressure was 118/76") == "118/76"


def test_temperature_rule_stops_at_sentence_end() -> None:
    assert _vital_rule("temperature").match("Temp 98.6.") == "98.6"


def test_vital_rule_discards_implausible_capture() -> None:
    rule = _vital_rule("pain_level")
    assert rule.match("pain 15") is None
    assert rule.match("pain 7/10") == "7"


def test_default_library_is_shared_and_fresh_build_is_separate() -> None:
    assert default_pattern_library() is default_pattern_library()
    assert build_pattern_library() is not default_pattern_library()


def test_generic_rules_follow_evaluation_order() -> None:
    library = default_pattern_library()
    assert [rule.format for rule in library.generic_rules] == [
        NoteFormat.SOAP,
        NoteFormat.SBAR,
        NoteFormat.PIE,
        NoteFormat.DAR,
    ]


def test_structural_cue_requires_terms_in_order_on_one_line() -> None:
    cue = StructuralCue(label="dar", sequences=(("observed", "administered", "responded"),), bonus=2)
    assert cue.matches("Observed grimacing, administered morphine, patient responded well.")
    assert not cue.matches("Responded well after we administered morphine and observed.")
    assert not cue.matches("Observed grimacing.\nAdministered morphine.\nResponded well.")
    assert not cue.matches("unobserved readministered responded")


def test_structural_cue_accepts_any_alternative_sequence() -> None:
    cue = StructuralCue(label="pie", sequences=(("problem", "intervention"), ("issue", "action")), bonus=2)
    assert cue.matches("Issue: anxiety. Action: reassured.")
    assert not cue.matches("Intervention: repositioned. Problem: pain.")
