from .patient_service import create_patient, list_patients, get_patient_by_id, search_patients
from .prescription_service import create_prescription, get_patient_prescriptions

# Avoid importing optional/third-party heavy modules (e.g. ai_service)
# at package import time. Import submodules directly where needed instead.

__all__ = [
    "create_patient",
    "list_patients",
    "get_patient_by_id",
    "search_patients",
    "create_prescription",
    "get_patient_prescriptions",
]
