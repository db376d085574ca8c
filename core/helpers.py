import uuid
import streamlit as st


def generate_record_id(prefix: str = "") -> str:
    """Returns a short random identifier like P3f9a1c2e7b40 for new records."""
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def split_list_input(text: str | None) -> list[str]:
    """Turn comma-separated form input ("Penicillin, Sulfa") into a clean list."""
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]


def calculate_bmi(weight_kg, height_cm) -> float | None:
    """BMI rounded to one decimal, or None when weight or height is missing."""
    if not weight_kg or not height_cm:
        return None
    height_m = float(height_cm) / 100
    return round(float(weight_kg) / (height_m * height_m), 1)


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal"
    if bmi < 30:
        return "Overweight"
    return "Obese"


# -----------------------------
# Sidebar helpers
# -----------------------------
def hide_default_sidebar_nav():
    """Hide Streamlit's default multi-page navigation for a cleaner custom menu."""
    st.markdown(
        """
        <style>
        /* Hide the auto-generated Pages section */
        [data-testid="stSidebarNav"] { display: none; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar():
    """Render the main navigation menu.

    Items:
    - New Prescription
    - Patients
    - Register Patient
    """
    hide_default_sidebar_nav()
    with st.sidebar:
        st.markdown("### Rx Writer")
        st.caption("AI Prescription")
        if st.button("New Prescription", use_container_width=True):
            st.switch_page("pages/1_New_Prescription.py")
        if st.button("Patients", use_container_width=True):
            st.switch_page("pages/2_Patients.py")
        if st.button("Register Patient", use_container_width=True):
            st.session_state.pop("edit_patient_id", None)
            st.switch_page("pages/4_Register_Patient.py")


@st.cache_resource
def ensure_store_ready():
    """Create tables once per server process, whichever page is opened first."""
    from core.database import init_db

    init_db()
    return True
