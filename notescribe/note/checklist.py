from __future__ import annotations

"""
Documentation elements a reviewer is expected to confirm per shift phase and unit.
"""

from notescribe.classification.formats import FormatContext, ShiftPhase, UnitType


BASE_ELEMENTS: tuple[str, ...] = ("Patient Assessment", "Vital Signs", "Safety Checks")

SHIFT_PHASE_ELEMENTS: dict[ShiftPhase, tuple[str, ...]] = {
    "Start of Shift": ("Review Orders", "Verify MAR", "Patient Identification"),
    "Mid-Shift": ("I&O Update", "Interventions", "Patient Response"),
    "End of Shift": ("Complete MAR", "Update Care Plans", "Handoff Report"),
}

UNIT_ELEMENTS: dict[UnitType, tuple[str, ...]] = {
    "Med-Surg": ("Patient Education", "Discharge Readiness", "Pain Management", "Mobility"),
    "ICU": ("Hemodynamic Monitoring", "Ventilator Settings", "Device Checks", "Sedation Score"),
    "NICU": ("Thermoregulation", "Feeding Tolerance", "Parental Bonding", "Daily Weight"),
    "Mother-Baby": ("Fundal Check", "Lochia", "Newborn Feeding", "Safe Sleep Education"),
}


def required_elements(context: FormatContext | None = None) -> list[str]:
    ctx = context or FormatContext()
    items = list(BASE_ELEMENTS)
    if ctx.shift_phase is not None:
        items.extend(SHIFT_PHASE_ELEMENTS.get(ctx.shift_phase, ()))
    if ctx.unit_type is not None:
        items.extend(UNIT_ELEMENTS.get(ctx.unit_type, ()))
    out: list[str] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out
