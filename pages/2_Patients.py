import streamlit as st
from core.errors import PersistenceError
from core.helpers import render_sidebar, ensure_store_ready
from core.session_manager import init_session_state, select_patient, open_profile, open_editor
from core.time_utils import format_timestamp
from services.patient_service import list_patients, filter_patients


def main():
    ensure_store_ready()
    init_session_state()
    render_sidebar()

    head, action = st.columns([4, 1])
    with head:
        st.title("Patient Management")
        st.caption("View and manage all registered patients")
    with action:
        if st.button("New Patient", use_container_width=True):
            open_editor()

    c1, c2 = st.columns([3, 1])
    with c1:
        q = st.text_input("Search", placeholder="Search by name, phone, or email...")
    with c2:
        kind = st.selectbox(
            "Show",
            ["all", "allergies", "chronic"],
            format_func=lambda k: {"all": "All Patients", "allergies": "With Allergies", "chronic": "Chronic Conditions"}[k],
        )

    try:
        patients = list_patients()
    except PersistenceError as e:
        st.error(str(e))
        st.stop()

    shown = filter_patients(patients, q, kind=kind, include_email=True)
    st.caption(f"Showing {len(shown)} of {len(patients)} patients")

    # Empty state
    if not shown:
        st.info("No patients found.")
        return

    # Render list
    for p in shown:
        with st.container():
            st.write(f"**{p.name}**  —  {p.age} yrs, {p.gender}  •  {p.phone}")
            details = [f"Registered {format_timestamp(p.created_at, '%d %b %Y')}"]
            if p.blood_group:
                details.append(f"Blood: {p.blood_group}")
            st.caption(" • ".join(details))
            if p.allergy_list:
                st.error(f"Allergies: {', '.join(p.allergy_list)}")

            col1, col2 = st.columns([1, 1])
            with col1:
                if st.button("Write Prescription", key=f"select_{p.patient_id}"):
                    select_patient(p)
                    st.switch_page("pages/1_New_Prescription.py")
            with col2:
                if st.button("View Profile", key=f"profile_{p.patient_id}"):
                    open_profile(p.patient_id)
        st.markdown("---")


if __name__ == "__main__":
    main()
