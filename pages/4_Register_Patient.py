import streamlit as st
from core.errors import ValidationError, PersistenceError
from core.helpers import render_sidebar, ensure_store_ready, split_list_input
from core.session_manager import init_session_state, select_patient
from models.patient import GENDERS, BLOOD_GROUPS
from services.patient_service import create_patient, update_patient, get_patient_by_id

# Page config is set globally in app.py

ensure_store_ready()
init_session_state()
render_sidebar()

edit_id = st.session_state.get("edit_patient_id")
try:
    patient = get_patient_by_id(edit_id) if edit_id else None
except PersistenceError as e:
    st.error(str(e))
    st.stop()

if edit_id and not patient:
    st.error("Patient not found.")
    st.session_state.pop("edit_patient_id", None)
    st.stop()

st.title("Edit Patient" if patient else "New Patient Registration")

blood_options = [""] + list(BLOOD_GROUPS)

with st.form("patient_form"):
    st.subheader("Basic Information")
    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Full Name *", value=patient.name if patient else "")
        age = st.number_input("Age *", min_value=1, max_value=120, step=1, value=int(patient.age) if patient else 30)
        gender = st.selectbox("Gender", GENDERS, index=GENDERS.index(patient.gender) if patient and patient.gender in GENDERS else 0)
    with c2:
        phone = st.text_input("Phone *", value=patient.phone if patient else "")
        email = st.text_input("Email", value=(patient.email or "") if patient else "")
        blood_group = st.selectbox(
            "Blood Group",
            blood_options,
            index=blood_options.index(patient.blood_group) if patient and patient.blood_group in blood_options else 0,
        )

    st.subheader("Physical & Medical")
    c3, c4 = st.columns(2)
    with c3:
        weight = st.number_input("Weight (kg)", min_value=0.0, step=0.5, value=float(patient.weight or 0) if patient else 0.0)
        allergies = st.text_input(
            "Allergies (comma separated)",
            value=", ".join(patient.allergy_list) if patient else "",
            placeholder="e.g., Penicillin, Sulfa",
        )
    with c4:
        height = st.number_input("Height (cm)", min_value=0.0, step=0.5, value=float(patient.height or 0) if patient else 0.0)
        conditions = st.text_input(
            "Chronic Conditions (comma separated)",
            value=", ".join(patient.condition_list) if patient else "",
            placeholder="e.g., Diabetes, Hypertension",
        )

    st.subheader("Contact")
    emergency_contact = st.text_input("Emergency Contact", value=(patient.emergency_contact or "") if patient else "")
    address = st.text_area("Address", value=(patient.address or "") if patient else "")

    submitted = st.form_submit_button("Save Patient", type="primary")

if submitted:
    data = {
        "name": name,
        "age": int(age),
        "gender": gender,
        "phone": phone,
        "email": email,
        "weight": weight or None,
        "height": height or None,
        "blood_group": blood_group or None,
        "allergies": split_list_input(allergies),
        "chronic_conditions": split_list_input(conditions),
        "emergency_contact": emergency_contact,
        "address": address,
    }
    try:
        if patient:
            saved = update_patient(patient.patient_id, **data)
        else:
            saved = create_patient(data)
    except ValidationError as e:
        st.error(str(e))
    except PersistenceError as e:
        st.error(f"Failed to save patient. {e}")
    else:
        if saved is None:
            st.error("Patient no longer exists.")
        else:
            st.session_state.pop("edit_patient_id", None)
            select_patient(saved)
            st.success(f"Patient saved! ID: {saved.patient_id}")
            st.switch_page("pages/1_New_Prescription.py")
