# models/prescription.py

from dataclasses import dataclass, asdict, field

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from core.database import Base
from core.helpers import generate_record_id

FREQUENCIES = ("OD", "BD", "TDS", "QID")
TIMINGS = ("Before Food", "After Food", "Empty Stomach", "With Food")

DEFAULT_FOLLOW_UP_DAYS = 7


@dataclass
class MedicineEntry:
    """One line of a prescription. Ids are only unique within a single form."""

    medicine: str
    dosage: str = ""
    frequency: str = "BD"
    duration: str = "5"
    timing: str = "After Food"
    id: str = field(default_factory=lambda: generate_record_id("M"))

    @classmethod
    def from_dict(cls, data: dict) -> "MedicineEntry":
        entry = cls(
            medicine=str(data.get("medicine") or "").strip(),
            dosage=str(data.get("dosage") or "").strip(),
            frequency=str(data.get("frequency") or "BD").strip(),
            duration=str(data.get("duration") if data.get("duration") is not None else "5").strip(),
            timing=str(data.get("timing") or "After Food").strip(),
        )
        if data.get("id"):
            entry.id = str(data["id"])
        return entry

    def to_dict(self) -> dict:
        return asdict(self)


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True, index=True)
    prescription_id = Column(String, unique=True, index=True, nullable=False)

    # Soft reference to Patient.patient_id; the patient may since have been deleted
    patient_id = Column(String, index=True, nullable=False)
    # Snapshot of the patient's name at the time of writing
    patient_name = Column(String, nullable=False)

    diagnosis = Column(Text, nullable=False)
    medicines = Column(JSON, nullable=False, default=list)
    advice = Column(Text, nullable=True)
    follow_up_days = Column(Integer, nullable=True, default=DEFAULT_FOLLOW_UP_DAYS)
    doctor_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)

    @property
    def medicine_entries(self) -> list[MedicineEntry]:
        return [MedicineEntry.from_dict(m) for m in (self.medicines or []) if isinstance(m, dict)]

    def __repr__(self):
        return f"<Prescription {self.prescription_id} for Patient {self.patient_id}>"
