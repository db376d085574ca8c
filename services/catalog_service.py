"""
Static medicine catalog and diagnosis templates.

Loaded at import time and never persisted or mutated; lookups hand back
the shared read-only entries.
"""

from typing import NamedTuple


class CatalogMedicine(NamedTuple):
    id: str
    brand_name: str
    generic_name: str
    strength: str
    form: str
    category: str
    price: int
    common_dosage: str


class DiagnosisTemplate(NamedTuple):
    id: str
    name: str
    medicines: tuple
    advice: tuple


# -----------------------------------------------------
# Medicines (Indian brands)
# -----------------------------------------------------
MEDICINES = (
    # Fever & Pain
    CatalogMedicine("1", "Dolo 650", "Paracetamol", "650mg", "Tablet", "Antipyretic", 30, "1 tablet TDS"),
    CatalogMedicine("2", "Crocin", "Paracetamol", "500mg", "Tablet", "Antipyretic", 25, "1-2 tablets TDS"),
    CatalogMedicine("3", "Combiflam", "Ibuprofen + Paracetamol", "400mg+325mg", "Tablet", "Analgesic", 35, "1 tablet TDS"),
    # Antibiotics
    CatalogMedicine("4", "Augmentin", "Amoxicillin + Clavulanic Acid", "625mg", "Tablet", "Antibiotic", 180, "1 tablet BD"),
    CatalogMedicine("5", "Azithral", "Azithromycin", "500mg", "Tablet", "Antibiotic", 95, "1 tablet OD for 3 days"),
    # Gastric
    CatalogMedicine("6", "Pan 40", "Pantoprazole", "40mg", "Tablet", "PPI", 65, "1 tablet OD before breakfast"),
    CatalogMedicine("7", "Omez", "Omeprazole", "20mg", "Capsule", "PPI", 55, "1 capsule OD"),
    # Diabetes
    CatalogMedicine("8", "Glycomet", "Metformin", "500mg", "Tablet", "Antidiabetic", 45, "1 tablet BD after meals"),
    # Hypertension
    CatalogMedicine("9", "Amlodipine", "Amlodipine", "5mg", "Tablet", "Antihypertensive", 25, "1 tablet OD"),
    CatalogMedicine("10", "Telma", "Telmisartan", "40mg", "Tablet", "Antihypertensive", 95, "1 tablet OD"),
)

DOSAGE_FREQUENCY = {
    "OD": "Once Daily",
    "BD": "Twice Daily",
    "TDS": "Three Times Daily",
    "QID": "Four Times Daily",
}

DIAGNOSIS_TEMPLATES = (
    DiagnosisTemplate("1", "Viral Fever", ("Dolo 650",), ("Rest for 3-4 days", "Drink plenty of fluids")),
    DiagnosisTemplate("2", "URTI", ("Azithral", "Combiflam"), ("Complete antibiotic course", "Steam inhalation")),
    DiagnosisTemplate("3", "Gastritis", ("Pan 40",), ("Avoid spicy food", "Eat small frequent meals")),
    DiagnosisTemplate("4", "Diabetes", ("Glycomet",), ("Regular exercise", "Low sugar diet")),
    DiagnosisTemplate("5", "Hypertension", ("Amlodipine",), ("Low salt diet", "Monitor BP daily")),
)


def search_medicines(query: str, limit: int = 10) -> list[CatalogMedicine]:
    """Case-insensitive match on brand or generic name. Empty query lists the catalog."""
    q = (query or "").strip().lower()
    matches = [
        m for m in MEDICINES
        if q in m.brand_name.lower() or q in m.generic_name.lower()
    ]
    return matches[:limit]


def get_medicine_by_brand(brand_name: str) -> CatalogMedicine | None:
    for m in MEDICINES:
        if m.brand_name == brand_name:
            return m
    return None


def get_template(template_id: str) -> DiagnosisTemplate | None:
    for t in DIAGNOSIS_TEMPLATES:
        if t.id == template_id:
            return t
    return None


def medicine_label(medicine: CatalogMedicine) -> str:
    return f"{medicine.brand_name} ({medicine.generic_name} - {medicine.strength})"
