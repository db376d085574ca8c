from sqlalchemy.orm import Session
from models.prescription import Prescription, MedicineEntry, DEFAULT_FOLLOW_UP_DAYS
from core.database import get_db_context, store_operation
from core.errors import ValidationError
from core.helpers import generate_record_id
from core.logging import get_logger
from core.time_utils import now_utc, format_timestamp
from services.catalog_service import DOSAGE_FREQUENCY

logger = get_logger("prescription_service")


# ------------------------------------------
# Validation (done by the caller, not the log)
# ------------------------------------------
def validate_prescription(patient, diagnosis: str, medicines: list, follow_up_days) -> int:
    """Check a prescription before it is written. Returns the follow-up in days."""
    if patient is None:
        raise ValidationError("Please select a patient first")

    if not (diagnosis or "").strip() or not medicines:
        raise ValidationError("Please add diagnosis and at least one medicine")

    for entry in medicines:
        name = entry.medicine if isinstance(entry, MedicineEntry) else (entry or {}).get("medicine")
        if not (name or "").strip():
            raise ValidationError("Every medicine line needs a medicine name")

    try:
        days = int(follow_up_days)
    except (TypeError, ValueError):
        raise ValidationError("Follow-up must be a whole number of days")
    if days <= 0:
        raise ValidationError("Follow-up must be at least one day")
    return days


# ------------------------------------------
# Create a new prescription (append-only)
# ------------------------------------------
def create_prescription(
    patient_id: str,
    patient_name: str,
    diagnosis: str,
    medicines: list,
    advice: str = "",
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS,
    doctor_name: str | None = None,
    db: Session | None = None,
) -> Prescription:
    if db is None:
        with get_db_context() as _db:
            return create_prescription(
                patient_id, patient_name, diagnosis, medicines,
                advice=advice, follow_up_days=follow_up_days,
                doctor_name=doctor_name, db=_db,
            )

    prescription = Prescription(
        prescription_id=generate_record_id("RX"),
        patient_id=patient_id,
        patient_name=patient_name,
        diagnosis=diagnosis,
        medicines=[m.to_dict() if isinstance(m, MedicineEntry) else dict(m) for m in medicines],
        advice=advice,
        follow_up_days=follow_up_days,
        doctor_name=doctor_name,
        created_at=now_utc(),
    )

    with store_operation(db, "save prescription"):
        db.add(prescription)
        db.commit()
        db.refresh(prescription)

    logger.info(
        "Saved prescription %s for patient %s (%d medicine(s))",
        prescription.prescription_id, patient_id, len(prescription.medicines),
    )
    return prescription


def save_prescription(patient, form, doctor_name: str | None = None, db: Session | None = None) -> Prescription:
    """Validate the editable form for the selected patient, then write it."""
    days = validate_prescription(patient, form.diagnosis, form.medicines, form.follow_up_days)
    return create_prescription(
        patient.patient_id,
        patient.name,
        form.diagnosis.strip(),
        form.medicines,
        advice=(form.advice or "").strip(),
        follow_up_days=days,
        doctor_name=doctor_name,
        db=db,
    )


# ------------------------------------------
# Get all prescriptions for a patient, newest first
# ------------------------------------------
def get_patient_prescriptions(patient_id: str, db: Session | None = None, limit: int | None = None) -> list[Prescription]:
    if db is None:
        with get_db_context() as _db:
            return get_patient_prescriptions(patient_id, db=_db, limit=limit)

    with store_operation(db, "load prescriptions"):
        query = (
            db.query(Prescription)
            .filter(Prescription.patient_id == patient_id)
            .order_by(Prescription.created_at.desc(), Prescription.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


# ------------------------------------------
# Get a single prescription by id
# ------------------------------------------
def get_prescription_by_id(prescription_id: str, db: Session | None = None) -> Prescription | None:
    if db is None:
        with get_db_context() as _db:
            return get_prescription_by_id(prescription_id, db=_db)

    with store_operation(db, "load prescription"):
        return db.query(Prescription).filter(Prescription.prescription_id == prescription_id).first()


def format_prescription_text(prescription: Prescription) -> str:
    """Plain-text copy of a saved prescription for download or printing."""
    lines = [
        f"Prescription {prescription.prescription_id}",
        f"Date: {format_timestamp(prescription.created_at)}",
        f"Patient: {prescription.patient_name}",
    ]
    if prescription.doctor_name:
        lines.append(f"Doctor: {prescription.doctor_name}")
    lines += ["", f"Diagnosis: {prescription.diagnosis}", "", "Rx:"]

    for i, m in enumerate(prescription.medicine_entries, start=1):
        frequency = DOSAGE_FREQUENCY.get(m.frequency, m.frequency)
        dosage = f" {m.dosage}" if m.dosage else ""
        lines.append(f"  {i}. {m.medicine}{dosage} - {m.frequency} ({frequency}) x {m.duration} days, {m.timing}")

    if prescription.advice:
        lines += ["", "Advice:", prescription.advice]
    if prescription.follow_up_days:
        lines += ["", f"Follow-up after {prescription.follow_up_days} days"]
    return "\n".join(lines)
