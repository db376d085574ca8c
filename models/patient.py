# models/patient.py

from sqlalchemy import Column, Integer, String, Float, DateTime, JSON
from core.database import Base
from core.helpers import calculate_bmi, bmi_category

GENDERS = ("Male", "Female", "Other")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")

# Fields a caller may set on create/update; everything else is managed here
EDITABLE_FIELDS = (
    "name",
    "age",
    "gender",
    "phone",
    "email",
    "weight",
    "height",
    "blood_group",
    "allergies",
    "chronic_conditions",
    "emergency_contact",
    "address",
)


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)

    # Generated public identifier; prescriptions refer to this value
    patient_id = Column(String, unique=True, index=True, nullable=False)

    # Demographics
    name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String, nullable=False, default="Male")
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True)

    # Clinical context
    weight = Column(Float, nullable=True)  # kg
    height = Column(Float, nullable=True)  # cm
    blood_group = Column(String, nullable=True)
    allergies = Column(JSON, nullable=True, default=list)
    chronic_conditions = Column(JSON, nullable=True, default=list)

    emergency_contact = Column(String, nullable=True)
    address = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    @property
    def allergy_list(self) -> list[str]:
        """Allergies, never None (rows written before the column existed read as [])."""
        return list(self.allergies or [])

    @property
    def condition_list(self) -> list[str]:
        return list(self.chronic_conditions or [])

    @property
    def bmi(self) -> float | None:
        return calculate_bmi(self.weight, self.height)

    @property
    def bmi_category(self) -> str | None:
        value = self.bmi
        return bmi_category(value) if value is not None else None

    def to_dict(self) -> dict:
        data = {field: getattr(self, field) for field in EDITABLE_FIELDS}
        data["allergies"] = self.allergy_list
        data["chronic_conditions"] = self.condition_list
        data["patient_id"] = self.patient_id
        data["created_at"] = self.created_at
        data["updated_at"] = self.updated_at
        return data

    def __repr__(self):
        return f"<Patient {self.patient_id} - {self.name}>"
