"""
Page tests for the prescription writer and patient editor, run headless through Streamlit's AppTest.
"""
from pathlib import Path

from streamlit.testing.v1 import AppTest

from core.errors import PersistenceError
from core.prescription_form import PrescriptionForm
from models.prescription import MedicineEntry
from services import patient_service

PAGE = str(Path(__file__).resolve().parents[1] / "pages" / "1_New_Prescription.py")


def _page():
    return AppTest.from_file(PAGE, default_timeout=30)


def test_last_catalog_pick_is_not_added_again_on_reruns():
    at = _page()
    at.run()
    assert not at.exception

    # The search box remembers its last pick after clearing
    at.session_state["medicine_search"] = {**at.session_state["medicine_search"], "result": "Dolo 650"}
    at.run()
    at.run()
    at.run()

    assert not at.exception
    assert at.session_state["prescription_form"].medicines == []


def test_drafted_line_with_unusual_values_is_flagged_and_left_as_drafted():
    form = PrescriptionForm(diagnosis="Viral Fever")
    form.medicines = [MedicineEntry(medicine="Dolo 650", dosage="650mg", frequency="", timing="Bedtime")]
    at = _page()
    at.session_state["prescription_form"] = form

    at.run()
    at.run()

    assert not at.exception
    warnings = [w.value for w in at.warning]
    assert "Check frequency and timing: the drafted value is not a standard choice." in warnings
    line = at.session_state["prescription_form"].medicines[0]
    assert (line.frequency, line.timing) == ("", "Bedtime")


def test_edit_page_reports_store_failure(monkeypatch):
    def unavailable(*args, **kwargs):
        raise PersistenceError("Could not load patient. Please try again.")

    monkeypatch.setattr(patient_service, "get_patient_by_id", unavailable)
    at = AppTest.from_file(str(Path(PAGE).with_name("4_Register_Patient.py")), default_timeout=30)
    at.session_state["edit_patient_id"] = "P-any"

    at.run()

    assert not at.exception
    assert [e.value for e in at.error] == ["Could not load patient. Please try again."]
