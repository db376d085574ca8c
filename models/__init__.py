from .patient import Patient
from .prescription import Prescription, MedicineEntry

__all__ = ["Patient", "Prescription", "MedicineEntry"]
