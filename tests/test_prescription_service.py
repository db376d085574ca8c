"""
Tests for the prescription log and the validating save path.
"""
from types import SimpleNamespace

import pytest

from core.errors import ValidationError
from core.prescription_form import PrescriptionForm
from models.prescription import Prescription, MedicineEntry
from services import prescription_service
from services.patient_service import create_patient
from services.prescription_service import (
    create_prescription,
    format_prescription_text,
    get_patient_prescriptions,
    get_prescription_by_id,
    save_prescription,
    validate_prescription,
)


@pytest.fixture
def patient(db, patient_data):
    return create_patient(patient_data, db=db)


def _dolo():
    return MedicineEntry(medicine="Dolo 650", dosage="650mg", frequency="TDS", duration="5", timing="After Food")


def test_empty_medicines_rejected_before_reaching_the_log(db, patient):
    form = PrescriptionForm(diagnosis="Fever", medicines=[])

    with pytest.raises(ValidationError, match="at least one medicine"):
        save_prescription(patient, form, db=db)
    assert db.query(Prescription).count() == 0


@pytest.mark.parametrize(
    "diagnosis, medicines, follow_up, message",
    [
        ("", [_dolo()], 7, "diagnosis"),
        ("   ", [_dolo()], 7, "diagnosis"),
        ("Fever", [MedicineEntry(medicine="  ")], 7, "medicine name"),
        ("Fever", [{"medicine": ""}], 7, "medicine name"),
        ("Fever", [_dolo()], "soon", "whole number"),
        ("Fever", [_dolo()], 0, "at least one day"),
    ],
)
def test_validate_prescription_rejects_incomplete_forms(patient, diagnosis, medicines, follow_up, message):
    with pytest.raises(ValidationError, match=message):
        validate_prescription(patient, diagnosis, medicines, follow_up)


def test_validate_prescription_requires_a_patient():
    with pytest.raises(ValidationError, match="select a patient"):
        validate_prescription(None, "Fever", [_dolo()], 7)


def test_save_prescription_snapshots_patient_and_stamps_created_at(db, patient):
    form = PrescriptionForm(diagnosis=" Viral Fever ", medicines=[_dolo()], advice="Rest", follow_up_days="5")

    saved = save_prescription(patient, form, doctor_name="Dr. Mehta", db=db)
    fetched = get_prescription_by_id(saved.prescription_id, db=db)

    assert fetched.patient_id == patient.patient_id
    assert fetched.patient_name == patient.name
    assert fetched.diagnosis == "Viral Fever"
    assert fetched.follow_up_days == 5
    assert fetched.doctor_name == "Dr. Mehta"
    assert fetched.created_at is not None
    assert fetched.medicines == [form.medicines[0].to_dict()]
    assert fetched.medicine_entries[0].medicine == "Dolo 650"


def test_log_does_not_validate_content(db):
    # Validation belongs to the caller; the log writes what it is given
    saved = create_prescription("P-x", "Someone", "", [], db=db)
    assert saved.prescription_id.startswith("RX")


def test_list_by_patient_returns_only_that_patient_newest_first(db):
    a1 = create_prescription("P-a", "A", "Cold", [{"medicine": "Crocin"}], db=db)
    create_prescription("P-b", "B", "Gastritis", [{"medicine": "Pan 40"}], db=db)
    a2 = create_prescription("P-a", "A", "Fever", [{"medicine": "Dolo 650"}], db=db)
    a3 = create_prescription("P-a", "A", "URTI", [{"medicine": "Azithral"}], db=db)

    found = get_patient_prescriptions("P-a", db=db)

    assert [p.prescription_id for p in found] == [a3.prescription_id, a2.prescription_id, a1.prescription_id]
    assert all(p.patient_id == "P-a" for p in found)
    created = [p.created_at for p in found]
    assert created == sorted(created, reverse=True)


def test_list_by_patient_respects_limit(db):
    for i in range(4):
        create_prescription("P-a", "A", f"Visit {i}", [{"medicine": "Crocin"}], db=db)
    assert [p.diagnosis for p in get_patient_prescriptions("P-a", db=db, limit=2)] == ["Visit 3", "Visit 2"]


def test_unknown_prescription_returns_none(db):
    assert get_prescription_by_id("RX-missing", db=db) is None
    assert get_patient_prescriptions("P-nobody", db=db) == []


def test_format_prescription_text():
    rx = Prescription(
        prescription_id="RX1",
        patient_id="P1",
        patient_name="Asha Verma",
        diagnosis="Viral Fever",
        medicines=[_dolo().to_dict()],
        advice="Rest for 3-4 days",
        follow_up_days=5,
        doctor_name=None,
        created_at=None,
    )
    text = format_prescription_text(rx)

    assert "Patient: Asha Verma" in text
    assert "Diagnosis: Viral Fever" in text
    assert "1. Dolo 650 650mg - TDS (Three Times Daily) x 5 days, After Food" in text
    assert "Follow-up after 5 days" in text
    assert "Doctor:" not in text


def test_save_uses_own_session_when_none_given(session_factory, db, patient):
    form = PrescriptionForm(diagnosis="Fever", medicines=[_dolo()])
    saved = save_prescription(SimpleNamespace(patient_id=patient.patient_id, name=patient.name), form)

    assert [p.prescription_id for p in prescription_service.get_patient_prescriptions(patient.patient_id)] == [
        saved.prescription_id
    ]
