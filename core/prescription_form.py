from dataclasses import dataclass, field

from models.prescription import MedicineEntry, DEFAULT_FOLLOW_UP_DAYS, FREQUENCIES, TIMINGS
from services.catalog_service import get_template, get_medicine_by_brand


def unrecognised_fields(entry: MedicineEntry) -> list[str]:
    """Fields of a line whose value is not one of the standard choices (blank included)."""
    fields = []
    if entry.frequency not in FREQUENCIES:
        fields.append("frequency")
    if entry.timing not in TIMINGS:
        fields.append("timing")
    return fields


def _entry_from_draft(item: dict) -> MedicineEntry:
    entry = MedicineEntry.from_dict(item)
    # Blank values stay blank so the doctor is asked to pick one
    entry.frequency = str(item.get("frequency") or "").strip()
    entry.timing = str(item.get("timing") or "").strip()
    return entry


@dataclass
class PrescriptionForm:
    """Editable prescription being written for the selected patient.

    Lives in session state; nothing here touches the store.
    """

    diagnosis: str = ""
    medicines: list = field(default_factory=list)
    advice: str = ""
    follow_up_days: int = DEFAULT_FOLLOW_UP_DAYS

    def add_medicine(self, name: str, **details) -> MedicineEntry:
        entry = MedicineEntry(medicine=name, **details)
        self.medicines.append(entry)
        return entry

    def add_catalog_medicine(self, brand_name: str) -> MedicineEntry:
        """Add a catalog pick, starting the dosage at the listed strength."""
        medicine = get_medicine_by_brand(brand_name)
        return self.add_medicine(brand_name, dosage=medicine.strength if medicine else "")

    def remove_medicine(self, entry_id: str) -> None:
        self.medicines = [m for m in self.medicines if m.id != entry_id]

    def update_medicine(self, entry_id: str, **changes) -> None:
        for m in self.medicines:
            if m.id == entry_id:
                for key, value in changes.items():
                    if hasattr(m, key) and key != "id":
                        setattr(m, key, value)

    def load_template(self, template_id: str) -> bool:
        """Fill diagnosis and advice from a template and append its medicines."""
        template = get_template(template_id)
        if template is None:
            return False
        self.diagnosis = template.name
        self.advice = "\n".join(template.advice)
        for brand in template.medicines:
            if get_medicine_by_brand(brand):
                self.add_medicine(brand)
        return True

    def apply_draft(self, draft) -> None:
        """Merge an AI draft into the form. Blank draft fields keep what is already typed.

        A degraded draft only carries an error message, so the form is left alone.
        """
        if draft.degraded:
            return
        if draft.diagnosis:
            self.diagnosis = draft.diagnosis
        if draft.medicines:
            self.medicines = [_entry_from_draft(m) for m in draft.medicines]
        if draft.advice:
            self.advice = draft.advice
        if draft.follow_up_days:
            self.follow_up_days = draft.follow_up_days

    def reset(self) -> None:
        self.diagnosis = ""
        self.medicines = []
        self.advice = ""
        self.follow_up_days = DEFAULT_FOLLOW_UP_DAYS
