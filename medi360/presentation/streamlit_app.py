import logging
import os
from typing import Optional

import streamlit as st

from medi360.application.analytics import AnalyticsService
from medi360.application.chat import ChatService
from medi360.application.errors import Medi360Error
from medi360.application.profiles import HealthProfileService
from medi360.domain.profile import HealthProfile
from medi360.infrastructure.config import Settings
from medi360.infrastructure.llm.chain import build_llm_chain
from medi360.infrastructure.storage.json_store import JsonProfileStore, JsonSessionStore
from medi360.presentation.auth_screens import logout, show_auth_screen


logger = logging.getLogger(__name__)


DISCLAIMER = (
    "⚕️ **DISCLAIMER:** MEDI-360 provides general guidance only. It is NOT medical advice "
    "and NOT a diagnosis. In an emergency call 108 or your local emergency number."
)

SEVERITY_ICONS = {"low": "🟢", "moderate": "🟡", "high": "🟠", "emergency": "🔴"}

PAGES = ("💬 Chat", "🗂️ History", "🩺 Health Profile", "📊 Analytics")

GENDER_OPTIONS = ["male", "female", "other", "prefer-not-to-say"]
SMOKING_OPTIONS = ["never", "former", "current"]
EXERCISE_OPTIONS = ["sedentary", "light", "moderate", "active", "very-active"]

EMERGENCY_ALERT = "🚨 Emergency symptoms detected. Call 108 or your local emergency number now."


@st.cache_resource
def _build_services():
    settings = Settings()
    data_dir = settings.data_dir
    sessions = JsonSessionStore(os.path.join(data_dir, "sessions.json"))
    profiles = JsonProfileStore(os.path.join(data_dir, "profiles.json"))
    llms = build_llm_chain(settings)
    logger.info("Hosted model chain: %s", [llm.name for llm in llms] or "local only")
    return {
        "settings": settings,
        "chat": ChatService(sessions, profiles, llms),
        "profiles": HealthProfileService(profiles),
        "analytics": AnalyticsService(sessions, profiles),
    }


def _current_user_id() -> str:
    return st.session_state.user_data["id"]


def _render_sidebar(settings: Settings) -> str:
    user = st.session_state.user_data
    st.sidebar.title("🏥 MEDI-360")
    st.sidebar.caption(f"Signed in as **{user['full_name']}**")

    page = st.sidebar.radio("Navigate", PAGES)
    st.sidebar.divider()

    st.sidebar.markdown("### Assistant")
    if settings.llm_provider == "local":
        st.sidebar.warning("⚠️ Local rule-based assistant only")
    else:
        st.sidebar.caption(f"**Provider:** {settings.llm_provider}")

    if st.sidebar.button("🔄 New Consultation", use_container_width=True):
        st.session_state.pop("chat_session_id", None)
        st.rerun()
    if st.sidebar.button("🚪 Logout", use_container_width=True):
        logout()
    return page


def _render_chat(chat: ChatService):
    user_id = _current_user_id()
    if "chat_session_id" not in st.session_state:
        session = chat.create_session(user_id)
        st.session_state.chat_session_id = session.id

    try:
        session = chat.get_session(user_id, st.session_state.chat_session_id)
    except Medi360Error:
        st.session_state.pop("chat_session_id", None)
        st.rerun()
        return

    st.markdown(f"# 💬 {session.session_title}")
    st.info(DISCLAIMER)
    if st.session_state.pop("emergency_alert", False):
        st.error(EMERGENCY_ALERT)

    for msg in session.messages:
        role = "assistant" if msg.role == "system" else msg.role
        with st.chat_message(role):
            st.text(msg.content)

    user_input = st.chat_input("Describe how you are feeling...")
    if user_input:
        with st.spinner("⏳ Analyzing..."):
            try:
                reply = chat.send_message(user_id, session.id, user_input)
            except Medi360Error as e:
                st.error(f"❌ {e}")
                return
        if reply.emergency:
            # Shown on the next run; anything rendered now is discarded by the rerun
            st.session_state.emergency_alert = True
        st.rerun()

    if session.status == "active" and len(session.messages) > 1:
        if st.button("✅ Complete consultation"):
            chat.complete_session(user_id, session.id)
            st.session_state.pop("chat_session_id", None)
            st.rerun()


def _render_history(chat: ChatService):
    user_id = _current_user_id()
    st.markdown("# 🗂️ Consultation History")
    sessions = chat.list_sessions(user_id)
    if not sessions:
        st.info("No consultations yet. Start one from the Chat page.")
        return

    for session in sessions:
        severity = session.summary.overall_severity.value if session.summary.overall_severity else "low"
        title = f"{SEVERITY_ICONS.get(severity, '')} {session.session_title} · {session.status}"
        with st.expander(title):
            symptoms = [r.symptom for r in session.summary.reported_symptoms]
            st.caption(f"Symptoms: {', '.join(symptoms) if symptoms else 'none recorded'}")
            for msg in session.messages:
                if msg.role != "system":
                    st.markdown(f"**{msg.role.title()}:**")
                    st.text(msg.content)
            col1, col2 = st.columns(2)
            if session.status == "completed" and col1.button("Archive", key=f"archive-{session.id}"):
                chat.archive_session(user_id, session.id)
                st.rerun()
            if col2.button("Delete", key=f"delete-{session.id}"):
                chat.delete_session(user_id, session.id)
                st.rerun()


def _split_names(raw: str) -> list:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _keep_existing(entries, names: list) -> list:
    """Entries for the given names, reusing stored details where the name is unchanged."""
    existing = {entry.name.lower(): entry.model_dump() for entry in entries}
    return [existing.get(name.lower(), {"name": name}) for name in names]


def profile_form_changes(
    profile: Optional[HealthProfile],
    age: int,
    gender: str,
    height_cm: float,
    weight_kg: float,
    conditions: str,
    medications: str,
    smoking: str,
    exercise: str,
) -> dict:
    """Turn the profile form into create/update data without discarding fields the form does not show."""
    lifestyle = profile.lifestyle.model_dump() if profile else {}
    lifestyle.update(smoking_status=smoking, exercise_frequency=exercise)
    return {
        "age": int(age),
        "gender": gender,
        "height": {"value": height_cm or None, "unit": "cm"},
        "weight": {"value": weight_kg or None, "unit": "kg"},
        "known_conditions": _keep_existing(profile.known_conditions if profile else [], _split_names(conditions)),
        "current_medications": _keep_existing(
            profile.current_medications if profile else [], _split_names(medications)
        ),
        "lifestyle": lifestyle,
    }


def _stored_cm(profile: Optional[HealthProfile]) -> float:
    meters = profile.height.in_meters() if profile else None
    return round(meters * 100, 1) if meters else 0.0


def _stored_kg(profile: Optional[HealthProfile]) -> float:
    kg = profile.weight.in_kg() if profile else None
    return round(kg, 1) if kg else 0.0


def _render_profile(profiles: HealthProfileService):
    user_id = _current_user_id()
    st.markdown("# 🩺 Health Profile")

    try:
        profile = profiles.get(user_id)
    except Medi360Error:
        profile = None

    with st.form("profile_form"):
        age = st.number_input("Age", min_value=0, max_value=150, value=profile.age if profile else 30)
        gender = st.selectbox(
            "Gender", GENDER_OPTIONS, index=GENDER_OPTIONS.index(profile.gender) if profile else 0
        )
        height = st.number_input("Height (cm)", min_value=0.0, value=_stored_cm(profile))
        weight = st.number_input("Weight (kg)", min_value=0.0, value=_stored_kg(profile))
        conditions = st.text_input(
            "Known conditions (comma separated)",
            value=", ".join(c.name for c in profile.known_conditions) if profile else "",
        )
        medications = st.text_input(
            "Current medications (comma separated)",
            value=", ".join(m.name for m in profile.current_medications) if profile else "",
        )
        smoking = st.selectbox(
            "Smoking",
            SMOKING_OPTIONS,
            index=SMOKING_OPTIONS.index(profile.lifestyle.smoking_status) if profile else 0,
        )
        exercise = st.selectbox(
            "Exercise",
            EXERCISE_OPTIONS,
            index=EXERCISE_OPTIONS.index(profile.lifestyle.exercise_frequency) if profile else 0,
        )
        submitted = st.form_submit_button("Save profile")

    if submitted:
        data = profile_form_changes(
            profile, age, gender, height, weight, conditions, medications, smoking, exercise
        )
        try:
            profile = profiles.update(user_id, data) if profile else profiles.create(user_id, data)
            st.success("✅ Profile saved")
        except Medi360Error as e:
            st.error(f"❌ {e}")

    if profile:
        if profile.bmi:
            st.metric("BMI", profile.bmi)
        risks = profile.risk_summary()
        if risks:
            st.markdown("### Risk factors")
            for risk in risks:
                st.markdown(f"- {risk.factor} ({risk.level})")


def _render_analytics(analytics: AnalyticsService):
    user_id = _current_user_id()
    st.markdown("# 📊 Health Analytics")

    dashboard = analytics.dashboard(user_id)
    col1, col2, col3 = st.columns(3)
    col1.metric("Health score", dashboard.health_score)
    col2.metric("Consultations", dashboard.statistics.total_consultations)
    col3.metric("Emergencies", dashboard.statistics.emergency_consultations)

    timeframe = st.selectbox("Timeframe", ["7d", "30d", "90d"], index=1)
    symptoms = analytics.symptom_analysis(user_id, timeframe)
    if symptoms.top_symptoms:
        st.markdown("### Symptom frequency")
        st.bar_chart({s.symptom: s.count for s in symptoms.top_symptoms})
    st.markdown("### Severity distribution")
    st.bar_chart(symptoms.severity_distribution)

    trends = analytics.health_trends(user_id)
    if trends:
        st.markdown("### Monthly trend")
        st.line_chart(
            {
                "consultations": [t.consultations for t in trends],
                "emergencies": [t.emergencies for t in trends],
            }
        )

    st.markdown("### Recommendations")
    for rec in analytics.recommendations(user_id):
        st.markdown(f"- **{rec.category}** ({rec.priority}): {rec.suggestion} _{rec.reason}_")


def main():
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

    st.set_page_config(
        page_title="MEDI-360 Health Assistant",
        page_icon="⚕️",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    if not show_auth_screen():
        st.stop()

    services = _build_services()
    page = _render_sidebar(services["settings"])

    if page == PAGES[0]:
        _render_chat(services["chat"])
    elif page == PAGES[1]:
        _render_history(services["chat"])
    elif page == PAGES[2]:
        _render_profile(services["profiles"])
    else:
        _render_analytics(services["analytics"])


if __name__ == "__main__":
    main()
