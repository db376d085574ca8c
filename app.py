import streamlit as st

from core.config import export_secrets_to_env
from core.helpers import render_sidebar, ensure_store_ready
from core.session_manager import init_session_state


def go_to(page_path: str):
    st.switch_page(page_path)


def main():
    st.set_page_config(
        page_title="Rx Writer",
        page_icon="💊",
        layout="wide",
    )

    export_secrets_to_env()
    ensure_store_ready()
    init_session_state()
    render_sidebar()

    st.title("Rx Writer")
    st.caption("Create smart, compliant prescriptions")
    st.write("---")

    selected = st.session_state.get("selected_patient")
    if selected:
        st.info(f"Writing for: **{selected.name}** ({selected.age} yrs, {selected.gender})")

    st.subheader("Quick navigation")
    c1, c2, c3 = st.columns(3)

    with c1:
        st.markdown("### New Prescription")
        if st.button("Write Prescription"):
            go_to("pages/1_New_Prescription.py")

    with c2:
        st.markdown("### Patients")
        if st.button("Manage Patients"):
            go_to("pages/2_Patients.py")

    with c3:
        st.markdown("### New Patient")
        if st.button("Register Patient"):
            st.session_state.pop("edit_patient_id", None)
            go_to("pages/4_Register_Patient.py")


if __name__ == "__main__":
    main()
