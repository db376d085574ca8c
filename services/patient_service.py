from sqlalchemy.orm import Session
from models.patient import Patient, GENDERS, BLOOD_GROUPS, EDITABLE_FIELDS
from core.database import get_db_context, store_operation
from core.errors import ValidationError
from core.helpers import generate_record_id
from core.logging import get_logger
from core.time_utils import now_utc, ensure_utc

logger = get_logger("patient_service")

LIST_FIELDS = ("allergies", "chronic_conditions")
OPTIONAL_TEXT_FIELDS = ("email", "blood_group", "emergency_contact", "address")


# ------------------------------------------
# Validation
# ------------------------------------------
def _positive_number(value, label: str, cast=float):
    if value in (None, ""):
        return None
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number.")
    if number <= 0:
        raise ValidationError(f"{label} must be greater than zero.")
    return number


def validate_patient_data(data: dict) -> dict:
    """Check a full patient record and return it normalised.

    Name, age and phone are mandatory. Lists default to [] and blank
    optional text becomes None.
    """
    unknown = set(data) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown patient field(s): {', '.join(sorted(unknown))}")

    name = (data.get("name") or "").strip()
    phone = str(data.get("phone") or "").strip()
    if not name or not phone or data.get("age") in (None, ""):
        raise ValidationError("Please fill in all required fields (Name, Age, Phone)")

    clean = {
        "name": name,
        "age": _positive_number(data.get("age"), "Age", cast=int),
        "phone": phone,
        "gender": data.get("gender") or "Male",
        "weight": _positive_number(data.get("weight"), "Weight"),
        "height": _positive_number(data.get("height"), "Height"),
    }
    if clean["gender"] not in GENDERS:
        raise ValidationError(f"Gender must be one of: {', '.join(GENDERS)}")

    for key in OPTIONAL_TEXT_FIELDS:
        value = data.get(key)
        clean[key] = value.strip() if isinstance(value, str) and value.strip() else None
    if clean["blood_group"] and clean["blood_group"] not in BLOOD_GROUPS:
        raise ValidationError(f"Blood group must be one of: {', '.join(BLOOD_GROUPS)}")

    for key in LIST_FIELDS:
        items = data.get(key) or []
        if isinstance(items, str):
            raise ValidationError(f"{key.replace('_', ' ').capitalize()} must be a list.")
        clean[key] = [str(item).strip() for item in items if str(item).strip()]

    return clean


# ------------------------------------------
# Create a new patient
# ------------------------------------------
def create_patient(data: dict, db: Session | None = None) -> Patient:
    fields = validate_patient_data(data)

    if db is None:
        with get_db_context() as _db:
            return create_patient(fields, db=_db)

    stamp = now_utc()
    patient = Patient(
        patient_id=generate_record_id("P"),
        created_at=stamp,
        updated_at=stamp,
        **fields,
    )

    with store_operation(db, "save patient"):
        db.add(patient)
        db.commit()
        db.refresh(patient)

    logger.info("Registered patient %s", patient.patient_id)
    return patient


# ------------------------------------------
# Fetch ALL patients, newest first
# ------------------------------------------
def list_patients(db: Session | None = None) -> list[Patient]:
    if db is None:
        with get_db_context() as _db:
            return list_patients(db=_db)

    with store_operation(db, "load patients"):
        return (
            db.query(Patient)
            .order_by(Patient.created_at.desc(), Patient.id.desc())
            .all()
        )


# ------------------------------------------
# Fetch patient by id
# ------------------------------------------
def get_patient_by_id(patient_id: str, db: Session | None = None) -> Patient | None:
    if db is None:
        with get_db_context() as _db:
            return get_patient_by_id(patient_id, db=_db)

    with store_operation(db, "load patient"):
        return db.query(Patient).filter(Patient.patient_id == patient_id).first()


# ------------------------------------------
# Search (client-side over the full list)
# ------------------------------------------
def filter_patients(
    patients: list[Patient],
    term: str = "",
    *,
    kind: str = "all",
    include_email: bool = False,
) -> list[Patient]:
    """Filter an already-loaded list of patients.

    Name (and optionally email) match case-insensitively; phone matches the
    raw term verbatim. kind narrows to patients with allergies or chronic
    conditions.
    """
    term = term or ""
    if term.strip():
        q = term.lower()
        patients = [
            p for p in patients
            if q in (p.name or "").lower()
            or term in (p.phone or "")
            or (include_email and q in (p.email or "").lower())
        ]

    if kind == "allergies":
        patients = [p for p in patients if p.allergy_list]
    elif kind == "chronic":
        patients = [p for p in patients if p.condition_list]

    return patients


def search_patients(term: str, db: Session | None = None) -> list[Patient]:
    return filter_patients(list_patients(db=db), term)


# ------------------------------------------
# Update patient (merge given fields)
# ------------------------------------------
def update_patient(patient_id: str, db: Session | None = None, **changes) -> Patient | None:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown patient field(s): {', '.join(sorted(unknown))}")

    if db is None:
        with get_db_context() as _db:
            return update_patient(patient_id, db=_db, **changes)

    patient = get_patient_by_id(patient_id, db=db)
    if not patient:
        return None

    merged = {field: getattr(patient, field) for field in EDITABLE_FIELDS}
    merged.update(changes)
    fields = validate_patient_data(merged)

    for key in changes:
        setattr(patient, key, fields[key])
    # Never move updated_at backwards, even if the clock does
    patient.updated_at = max(now_utc(), ensure_utc(patient.updated_at))

    with store_operation(db, "update patient"):
        db.commit()
        db.refresh(patient)

    logger.info("Updated patient %s (%s)", patient_id, ", ".join(sorted(changes)) or "no fields")
    return patient


# ------------------------------------------
# Delete a patient
# ------------------------------------------
def delete_patient(patient_id: str, db: Session | None = None) -> bool:
    """Remove a patient record. Returns False if it was already gone.

    Prescriptions are kept as history; their patient_id may no longer resolve.
    """
    if db is None:
        with get_db_context() as _db:
            return delete_patient(patient_id, db=_db)

    patient = get_patient_by_id(patient_id, db=db)
    if not patient:
        logger.info("Delete skipped, patient %s not found", patient_id)
        return False

    with store_operation(db, "delete patient"):
        db.delete(patient)
        db.commit()

    logger.info("Deleted patient %s", patient_id)
    return True
