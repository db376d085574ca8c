import streamlit as st

from core.prescription_form import PrescriptionForm


def init_session_state():
    """Ensure required session keys exist."""
    if "selected_patient" not in st.session_state:
        st.session_state.selected_patient = None
    if "prescription_form" not in st.session_state:
        st.session_state.prescription_form = PrescriptionForm()
    if "ai_pending" not in st.session_state:
        st.session_state.ai_pending = False


def get_form() -> PrescriptionForm:
    init_session_state()
    return st.session_state.prescription_form


def select_patient(patient):
    """Make this patient the one the prescription is written for."""
    st.session_state.selected_patient = patient


def clear_selected_patient():
    st.session_state.selected_patient = None


def forget_patient(patient_id: str):
    """Drop any in-memory reference to a deleted patient."""
    selected = st.session_state.get("selected_patient")
    if selected is not None and selected.patient_id == patient_id:
        clear_selected_patient()
    if st.session_state.get("profile_patient_id") == patient_id:
        st.session_state.pop("profile_patient_id", None)
    if st.session_state.get("edit_patient_id") == patient_id:
        st.session_state.pop("edit_patient_id", None)


def open_profile(patient_id: str):
    st.session_state["profile_patient_id"] = patient_id
    st.switch_page("pages/3_Patient_Profile.py")


def open_editor(patient_id: str | None = None):
    if patient_id:
        st.session_state["edit_patient_id"] = patient_id
    else:
        st.session_state.pop("edit_patient_id", None)
    st.switch_page("pages/4_Register_Patient.py")
