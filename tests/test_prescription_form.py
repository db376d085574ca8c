from core.prescription_form import PrescriptionForm, unrecognised_fields
from services.ai_service import PrescriptionDraft


def test_catalog_pick_starts_at_listed_strength():
    form = PrescriptionForm()

    entry = form.add_catalog_medicine("Pan 40")
    form.add_catalog_medicine("Not In Catalog")

    assert (entry.medicine, entry.dosage) == ("Pan 40", "40mg")
    assert [(m.medicine, m.dosage) for m in form.medicines] == [("Pan 40", "40mg"), ("Not In Catalog", "")]


def test_draft_lines_keep_blank_or_unusual_frequency_and_timing():
    form = PrescriptionForm()
    form.apply_draft(PrescriptionDraft(medicines=[
        {"medicine": "Dolo 650", "dosage": "650mg", "frequency": "", "duration": "5", "timing": ""},
        {"medicine": "Pan 40", "dosage": "40mg", "frequency": "HS", "duration": "7", "timing": "Before Food"},
        {"medicine": "Crocin", "dosage": "500mg", "frequency": "TDS", "duration": "3", "timing": "After Food"},
    ]))

    dolo, pan, crocin = form.medicines
    assert (dolo.frequency, dolo.timing) == ("", "")
    assert unrecognised_fields(dolo) == ["frequency", "timing"]
    assert unrecognised_fields(pan) == ["frequency"]
    assert unrecognised_fields(crocin) == []


def test_load_template_fills_diagnosis_advice_and_medicines():
    form = PrescriptionForm()

    assert form.load_template("2") is True
    assert form.diagnosis == "URTI"
    assert form.advice == "Complete antibiotic course\nSteam inhalation"
    assert [m.medicine for m in form.medicines] == ["Azithral", "Combiflam"]
    assert form.load_template("missing") is False


def test_template_medicines_append_to_existing_lines():
    form = PrescriptionForm()
    form.add_medicine("Pan 40")
    form.load_template("1")
    assert [m.medicine for m in form.medicines] == ["Pan 40", "Dolo 650"]


def test_update_and_remove_medicine_by_line_id():
    form = PrescriptionForm()
    first = form.add_medicine("Dolo 650")
    second = form.add_medicine("Crocin")

    form.update_medicine(first.id, dosage="650mg", frequency="TDS", id="hijack", bogus=1)
    form.remove_medicine(second.id)

    assert len(form.medicines) == 1
    assert form.medicines[0].id == first.id
    assert form.medicines[0].dosage == "650mg"
    assert form.medicines[0].frequency == "TDS"


def test_apply_draft_replaces_non_empty_fields():
    form = PrescriptionForm(diagnosis="Typed by doctor", advice="Keep this")
    form.add_medicine("Crocin")
    draft = PrescriptionDraft(
        diagnosis="Viral Fever",
        medicines=[{"medicine": "Dolo 650", "dosage": "650mg", "frequency": "TDS", "duration": "5", "timing": "After Food"}],
        advice="",
        follow_up_days=5,
    )

    form.apply_draft(draft)

    assert form.diagnosis == "Viral Fever"
    assert [(m.medicine, m.frequency) for m in form.medicines] == [("Dolo 650", "TDS")]
    assert form.advice == "Keep this"
    assert form.follow_up_days == 5


def test_degraded_draft_leaves_form_untouched():
    form = PrescriptionForm(diagnosis="Cough", advice="Warm fluids")
    form.add_medicine("Crocin")

    form.apply_draft(PrescriptionDraft.fallback())

    assert form.diagnosis == "Cough"
    assert form.advice == "Warm fluids"
    assert [m.medicine for m in form.medicines] == ["Crocin"]


def test_reset():
    form = PrescriptionForm(diagnosis="x", advice="y", follow_up_days=3)
    form.add_medicine("Crocin")
    form.reset()
    assert form == PrescriptionForm()
