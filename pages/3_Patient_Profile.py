import streamlit as st

from core.errors import PersistenceError
from core.helpers import render_sidebar, ensure_store_ready
from core.session_manager import init_session_state, select_patient, forget_patient, open_editor
from core.time_utils import format_timestamp
from services.patient_service import get_patient_by_id, delete_patient
from services.prescription_service import get_patient_prescriptions, format_prescription_text

ensure_store_ready()
init_session_state()
render_sidebar()

# Ensure a patient is selected from previous page
if "profile_patient_id" not in st.session_state:
    st.error("No patient selected. Please go back to the patient list.")
    if st.button("Back to Patient List"):
        st.switch_page("pages/2_Patients.py")
    st.stop()

patient_id = st.session_state["profile_patient_id"]
try:
    patient = get_patient_by_id(patient_id)
except PersistenceError as e:
    st.error(str(e))
    st.stop()

if not patient:
    st.error("Patient not found.")
    if st.button("Back to Patient List"):
        st.switch_page("pages/2_Patients.py")
    st.stop()

st.title(patient.name)
st.caption(f"{patient.age} years • {patient.gender} • {patient.blood_group or 'Blood group not specified'}")

a1, a2, a3 = st.columns(3)
with a1:
    if st.button("Write Prescription", type="primary", use_container_width=True):
        select_patient(patient)
        st.switch_page("pages/1_New_Prescription.py")
with a2:
    if st.button("✏️ Edit Patient", use_container_width=True):
        open_editor(patient.patient_id)

profile_tab, history_tab = st.tabs(["Profile", "Prescription History"])

with profile_tab:
    c1, c2 = st.columns(2)
    with c1:
        st.markdown("#### Contact")
        st.write(f"Phone: {patient.phone}")
        st.write(f"Email: {patient.email or '—'}")
        st.write(f"Emergency Contact: {patient.emergency_contact or '—'}")
        st.write(f"Address: {patient.address or '—'}")
    with c2:
        st.markdown("#### Vitals")
        st.write(f"Weight: {f'{patient.weight} kg' if patient.weight else '—'}")
        st.write(f"Height: {f'{patient.height} cm' if patient.height else '—'}")
        if patient.bmi is not None:
            st.metric("BMI", patient.bmi, help=patient.bmi_category)
            st.caption(patient.bmi_category)

    if patient.allergy_list:
        st.error(f"⚠️ Allergies: {', '.join(patient.allergy_list)}")
    else:
        st.success("No known allergies")
    if patient.condition_list:
        st.warning(f"Chronic Conditions: {', '.join(patient.condition_list)}")

    st.caption(
        f"Registered {format_timestamp(patient.created_at)} • Last updated {format_timestamp(patient.updated_at)}"
    )

with history_tab:
    try:
        prescriptions = get_patient_prescriptions(patient.patient_id)
    except PersistenceError as e:
        prescriptions = []
        st.error(str(e))

    if not prescriptions:
        st.info("No prescriptions yet.")

    for rx in prescriptions:
        with st.expander(f"{format_timestamp(rx.created_at)} — {rx.diagnosis}"):
            for i, m in enumerate(rx.medicine_entries, start=1):
                st.write(f"{i}. **{m.medicine}** {m.dosage} • {m.frequency} • {m.duration} days • {m.timing}")
            if rx.advice:
                st.caption(rx.advice)
            if rx.follow_up_days:
                st.caption(f"Follow-up after {rx.follow_up_days} days")
            st.download_button(
                "Download",
                data=format_prescription_text(rx),
                file_name=f"{rx.prescription_id}.txt",
                key=f"dl_{rx.prescription_id}",
            )

# Danger zone: delete patient
with st.expander("🗑️ Delete Patient", expanded=False):
    st.warning("This removes the patient record. Their saved prescriptions stay in the log.")
    confirm = st.text_input("Type DELETE to confirm", value="")
    if st.button("Delete Patient", type="secondary", help="Irreversible action"):
        if confirm.strip().upper() != "DELETE":
            st.error("Confirmation text does not match DELETE.")
        else:
            try:
                delete_patient(patient.patient_id)
            except PersistenceError:
                # Keep the profile and any selection as they were
                st.error("Failed to delete patient. Please try again.")
            else:
                forget_patient(patient.patient_id)
                st.success("Patient deleted.")
                st.switch_page("pages/2_Patients.py")
