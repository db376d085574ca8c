import streamlit as st
from streamlit_searchbox import st_searchbox

from core.config import get_settings
from core.errors import ValidationError, PersistenceError, AIServiceError
from core.helpers import render_sidebar, ensure_store_ready
from core.prescription_form import unrecognised_fields
from core.session_manager import init_session_state, get_form, select_patient, clear_selected_patient, open_profile, open_editor
from models.prescription import FREQUENCIES, TIMINGS
from services.catalog_service import DIAGNOSIS_TEMPLATES, DOSAGE_FREQUENCY, search_medicines, medicine_label
from services.patient_service import search_patients
from services.prescription_service import save_prescription, get_patient_prescriptions, format_prescription_text
from services.ai_service import (
    HISTORY_WINDOW,
    PrescriptionDraftGenerator,
    generate_prescription,
    find_allergy_conflicts,
)


def _bump_form_revision():
    # Form widgets are keyed by revision so programmatic changes show up
    st.session_state["form_rev"] = st.session_state.get("form_rev", 0) + 1


def _catalog_options(term: str):
    return [(medicine_label(m), m.brand_name) for m in search_medicines(term)]


def render_patient_picker():
    st.subheader("Patient")
    c1, c2 = st.columns([4, 1])
    with c1:
        term = st.text_input("Search patient", placeholder="Search by name or phone...", label_visibility="collapsed")
    with c2:
        if st.button("New Patient", use_container_width=True):
            open_editor()

    if not term.strip():
        return

    try:
        matches = search_patients(term)[:10]
    except PersistenceError as e:
        st.error(str(e))
        return

    if not matches:
        st.info("No matching patients. Register them as new.")
    for p in matches:
        col1, col2 = st.columns([4, 1])
        with col1:
            st.write(f"**{p.name}** - {p.age} yrs, {p.gender} • {p.phone}")
        with col2:
            if st.button("Select", key=f"sel_{p.patient_id}"):
                select_patient(p)
                st.rerun()


def render_selected_patient(patient):
    with st.container(border=True):
        left, right = st.columns([5, 1])
        with left:
            st.markdown(f"### {patient.name}")
            st.write(
                f"Age: **{patient.age} yrs** • Gender: **{patient.gender}** • Phone: **{patient.phone}**"
                + (f" • Blood: **{patient.blood_group}**" if patient.blood_group else "")
            )
            if patient.allergy_list:
                st.error(f"⚠️ ALLERGY ALERT: {', '.join(patient.allergy_list)}")
            if patient.condition_list:
                st.warning(f"Chronic Conditions: {', '.join(patient.condition_list)}")
        with right:
            if st.button("View Full Profile"):
                open_profile(patient.patient_id)
            if st.button("✖ Clear"):
                clear_selected_patient()
                st.rerun()


def render_ai_generator(patient, form):
    with st.expander("✨ AI-Powered Prescription", expanded=False):
        if patient is None:
            st.warning("Please select a patient to use AI prescription generation")
        symptoms = st.text_area(
            "Patient Symptoms *",
            placeholder="Describe patient's symptoms in detail...\nExample: Fever since 3 days, body ache, headache, mild cough",
            disabled=patient is None,
        )
        hint = st.text_input(
            "Diagnosis (Optional)",
            placeholder="e.g., Viral Fever, URTI, Gastritis",
            help="Leave blank to let AI suggest diagnosis",
            disabled=patient is None,
        )

        pending = st.session_state.get("ai_pending", False)
        c1, c2 = st.columns(2)
        with c1:
            generate = st.button(
                "Generate AI Prescription",
                type="primary",
                disabled=patient is None or not symptoms.strip() or pending,
            )
        with c2:
            suggest = st.button("Suggest Medicines", disabled=patient is None or not symptoms.strip() or pending)

        if generate:
            loaded = False
            st.session_state.ai_pending = True
            try:
                with st.spinner("Generating AI Prescription..."):
                    previous = get_patient_prescriptions(patient.patient_id, limit=HISTORY_WINDOW)
                    draft = generate_prescription(symptoms, patient, diagnosis=hint or None, previous_prescriptions=previous)
            except (ValidationError, PersistenceError, AIServiceError) as e:
                st.error(f"Failed to generate prescription. Please try again or create manually. ({e})")
            else:
                if draft.degraded:
                    st.warning(draft.advice)
                else:
                    form.apply_draft(draft)
                    _bump_form_revision()
                    conflicts = find_allergy_conflicts(draft, patient.allergy_list)
                    if conflicts:
                        st.session_state["allergy_conflicts"] = conflicts
                    st.session_state["draft_notice"] = "AI draft loaded. Review every line before saving."
                    loaded = True
            finally:
                st.session_state.ai_pending = False
            if loaded:
                st.rerun()

        if suggest:
            with st.spinner("Looking up medicines..."):
                st.session_state["suggestions"] = PrescriptionDraftGenerator().suggest_medicines(symptoms)
            if not st.session_state["suggestions"]:
                st.info("No suggestions available.")

        for name in st.session_state.get("suggestions", []):
            if st.button(f"+ {name}", key=f"sugg_{name}"):
                form.add_medicine(name)
                st.rerun()


def render_templates(form):
    st.subheader("Quick Templates")
    cols = st.columns(len(DIAGNOSIS_TEMPLATES))
    for col, template in zip(cols, DIAGNOSIS_TEMPLATES):
        with col:
            if st.button(template.name, key=f"tpl_{template.id}", use_container_width=True):
                form.load_template(template.id)
                _bump_form_revision()
                st.rerun()


def render_medicines(form):
    st.subheader("💊 Medicines")
    # The box keeps returning its last pick on reruns; only the submit callback adds a line
    st_searchbox(
        _catalog_options,
        placeholder="Search medicines...",
        key="medicine_search",
        clear_on_submit=True,
        submit_function=form.add_catalog_medicine,
    )

    c1, c2 = st.columns([4, 1])
    with c1:
        custom = st.text_input("Medicine not in list", placeholder="Type a brand name", label_visibility="collapsed")
    with c2:
        if st.button("Add", use_container_width=True) and custom.strip():
            form.add_medicine(custom.strip())

    if not form.medicines:
        st.caption("No medicines added yet")

    for i, m in enumerate(list(form.medicines), start=1):
        with st.container(border=True):
            head, remove = st.columns([6, 1])
            with head:
                st.write(f"**{i}. {m.medicine}**")
            with remove:
                if st.button("✖", key=f"rm_{m.id}"):
                    form.remove_medicine(m.id)
                    st.rerun()
            flagged = unrecognised_fields(m)
            if flagged:
                st.warning(f"Check {' and '.join(flagged)}: the drafted value is not a standard choice.")
            # Non-standard values stay selected until the doctor picks a standard one
            freq_options = FREQUENCIES if m.frequency in FREQUENCIES else (m.frequency, *FREQUENCIES)
            timing_options = TIMINGS if m.timing in TIMINGS else (m.timing, *TIMINGS)
            d, f, du, t = st.columns(4)
            with d:
                dosage = st.text_input("Dosage", value=m.dosage, key=f"dosage_{m.id}")
            with f:
                frequency = st.selectbox(
                    "Frequency",
                    freq_options,
                    index=freq_options.index(m.frequency),
                    format_func=lambda k: f"{k} - {DOSAGE_FREQUENCY[k]}" if k in DOSAGE_FREQUENCY else (k or "Select..."),
                    key=f"freq_{m.id}",
                )
            with du:
                duration = st.number_input(
                    "Duration (days)",
                    min_value=1,
                    step=1,
                    value=int(m.duration) if str(m.duration).isdigit() and int(m.duration) > 0 else 5,
                    key=f"dur_{m.id}",
                )
            with t:
                timing = st.selectbox(
                    "Timing",
                    timing_options,
                    index=timing_options.index(m.timing),
                    format_func=lambda k: k or "Select...",
                    key=f"timing_{m.id}",
                )
            form.update_medicine(m.id, dosage=dosage, frequency=frequency, duration=str(int(duration)), timing=timing)


def main():
    ensure_store_ready()
    init_session_state()
    render_sidebar()

    form = get_form()
    patient = st.session_state.get("selected_patient")
    rev = st.session_state.get("form_rev", 0)

    st.title("AI Prescription Generator")

    if patient is None:
        render_patient_picker()
    else:
        render_selected_patient(patient)

    notice = st.session_state.pop("draft_notice", None)
    if notice:
        st.success(notice)
    conflicts = st.session_state.pop("allergy_conflicts", None)
    if conflicts:
        st.error(f"⚠️ Draft includes medicines matching recorded allergies: {', '.join(conflicts)}")

    render_ai_generator(patient, form)
    render_templates(form)

    left, right = st.columns([1, 2])
    with left:
        st.subheader("Diagnosis")
        form.diagnosis = st.text_area("Diagnosis", value=form.diagnosis, height=180, key=f"diagnosis_{rev}", label_visibility="collapsed")
    with right:
        render_medicines(form)

    st.subheader("Advice & Follow-up")
    form.advice = st.text_area(
        "Advice",
        value=form.advice,
        placeholder="Dietary advice, lifestyle modifications...",
        key=f"advice_{rev}",
        label_visibility="collapsed",
    )
    form.follow_up_days = int(
        st.number_input("Follow-up after (days)", min_value=1, step=1, value=int(form.follow_up_days), key=f"follow_{rev}")
    )

    if st.button("Save Prescription", type="primary"):
        try:
            saved = save_prescription(patient, form, doctor_name=get_settings().doctor_name)
        except ValidationError as e:
            st.error(str(e))
        except PersistenceError:
            st.error("Failed to save prescription. Please try again.")
        else:
            st.session_state["last_saved_rx"] = format_prescription_text(saved)
            st.session_state["last_saved_rx_id"] = saved.prescription_id
            form.reset()
            _bump_form_revision()
            st.rerun()

    if st.session_state.get("last_saved_rx"):
        st.success("✅ Prescription saved successfully!")
        st.download_button(
            "Download Prescription",
            data=st.session_state["last_saved_rx"],
            file_name=f"{st.session_state.get('last_saved_rx_id', 'prescription')}.txt",
        )


if __name__ == "__main__":
    main()
