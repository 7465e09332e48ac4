"""Main Streamlit entrypoint for the AgriBot farm assistant chat."""

from __future__ import annotations

import sys
import time
from pathlib import Path

# Ensure project root is on path when running: streamlit run agribot/routes/app.py
_root = Path(__file__).resolve().parents[2]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

import streamlit as st

from agribot.config import get_settings, load_env
from agribot.config.settings import MESSAGE_MAX_CHARS, QUICK_QUESTIONS, WELCOME_MESSAGE, Settings
from agribot.errors import AgriBotError, ChatValidationError
from agribot.observability import init_logging
from agribot.services.actions import MirrorResult, on_exchange_complete
from agribot.services.chat_service import ChatExchange, ChatService
from agribot.services.farmer_context import FarmerProfileStore
from agribot.store.session_log import InMemorySessionLog


USER_ID = "local-farmer"
CHAT_KEY = "chat_history"
SERVICE_KEY = "chat_service"
PROFILES_KEY = "farmer_profiles"
SESSION_ID_KEY = "chat_session_id"
MIRROR_RESULT_KEY = "mirror_result"
PENDING_QUESTION_KEY = "pending_quick_question"

SOIL_TYPES = ["", "Clay", "Sandy", "Loamy", "Silt", "Peaty", "Chalky", "Other"]
IRRIGATION_TYPES = ["", "Drip", "Sprinkler", "Flood", "Manual", "Rain-fed", "Other"]


def _init_service(settings: Settings) -> ChatService:
    if SERVICE_KEY not in st.session_state:
        profiles = FarmerProfileStore()
        st.session_state[PROFILES_KEY] = profiles
        st.session_state[SERVICE_KEY] = ChatService(
            session_log=InMemorySessionLog(),
            context_provider=profiles,
            settings=settings,
        )
    return st.session_state[SERVICE_KEY]


def _init_history() -> None:
    if CHAT_KEY not in st.session_state:
        st.session_state[CHAT_KEY] = [("bot", WELCOME_MESSAGE)]  # list[tuple[role, text]]


def _farm_profile_sidebar(profiles: FarmerProfileStore) -> None:
    current = profiles.get_profile(USER_ID) or {}
    farm = current.get("farmDetails") or {}
    stats = current.get("stats") or {}
    crops = farm.get("cropTypes") or [{}]
    with st.sidebar:
        st.header("Your farm")
        crop = st.text_input("Main crop", value=crops[0].get("name", ""), placeholder="e.g. wheat")
        city = st.text_input("City", value=(farm.get("location") or {}).get("city", ""), placeholder="e.g. Meerut")
        soil = st.selectbox("Soil type", SOIL_TYPES, index=SOIL_TYPES.index(farm.get("soilType") or ""))
        irrigation = st.selectbox(
            "Irrigation", IRRIGATION_TYPES, index=IRRIGATION_TYPES.index(farm.get("irrigationType") or "")
        )
        detected = st.number_input("Diseases detected", min_value=0, value=int(stats.get("diseasesDetected", 0)))
        treated = st.number_input("Treatments applied", min_value=0, value=int(stats.get("treatmentsApplied", 0)))
        st.caption(f"Questions asked: {stats.get('totalQueries', 0)}")

    profiles.save_profile(
        USER_ID,
        {
            "farmDetails": {
                "cropTypes": [{"name": crop}] if crop else [],
                "location": {"city": city},
                "soilType": soil or None,
                "irrigationType": irrigation or None,
            },
            "stats": {
                "totalQueries": stats.get("totalQueries", 0),
                "diseasesDetected": detected,
                "treatmentsApplied": treated,
            },
        },
    )


def _send(service: ChatService, settings: Settings, text: str) -> None:
    """Run one exchange; the typing delay is applied here, not in the service."""
    try:
        exchange: ChatExchange = service.send_message(
            USER_ID, text, session_id=st.session_state.get(SESSION_ID_KEY)
        )
    except ChatValidationError as e:
        st.warning("; ".join(e.errors) or str(e))
        return
    st.session_state[SESSION_ID_KEY] = exchange.session_id
    st.session_state[CHAT_KEY].append(("user", exchange.user_message.message))
    with st.spinner("AgriBot is typing..."):
        if settings.typing_delay_seconds:
            time.sleep(settings.typing_delay_seconds)
        st.session_state[MIRROR_RESULT_KEY] = on_exchange_complete(exchange, settings)
    st.session_state[CHAT_KEY].append(("bot", exchange.reply))


def main() -> None:
    load_env()
    settings = get_settings()
    init_logging(log_path=settings.log_path or None)

    st.set_page_config(page_title="AgriBot", page_icon="🌾")
    st.title("AgriBot")
    st.caption("Ask about crop diseases, irrigation, fertilizer, weather, harvest timing and treatments.")

    if st.button("Start over", type="secondary"):
        session_id = st.session_state.get(SESSION_ID_KEY)
        if session_id and SERVICE_KEY in st.session_state:
            try:
                st.session_state[SERVICE_KEY].end_session(USER_ID, session_id)
            except AgriBotError:
                pass
        for key in (CHAT_KEY, SESSION_ID_KEY, MIRROR_RESULT_KEY, PENDING_QUESTION_KEY):
            if key in st.session_state:
                del st.session_state[key]
        st.rerun()

    _init_history()
    service = _init_service(settings)
    _farm_profile_sidebar(st.session_state[PROFILES_KEY])

    for role, text in st.session_state[CHAT_KEY]:
        with st.chat_message("user" if role == "user" else "assistant"):
            st.markdown(text)

    # Quick questions only before the first user message
    if len(st.session_state[CHAT_KEY]) == 1:
        st.markdown("**Quick questions:**")
        cols = st.columns(2)
        for i, question in enumerate(QUICK_QUESTIONS):
            with cols[i % 2]:
                if st.button(f"{question['text']} ({question['category']})", key=f"quick_{i}"):
                    st.session_state[PENDING_QUESTION_KEY] = question["text"]
                    st.rerun()

    pending = st.session_state.pop(PENDING_QUESTION_KEY, None)
    if pending:
        _send(service, settings, pending)
        st.rerun()

    msg = st.chat_input(f"Type your question (up to {MESSAGE_MAX_CHARS} characters)")
    if msg and msg.strip():
        _send(service, settings, msg)
        st.rerun()

    if MIRROR_RESULT_KEY in st.session_state:
        mirror: MirrorResult = st.session_state[MIRROR_RESULT_KEY]
        if mirror.errors:
            st.warning("Transcript sheet reported errors: " + "; ".join(mirror.errors))

    session_id = st.session_state.get(SESSION_ID_KEY)
    if session_id:
        with st.expander("Rate this chat", expanded=False):
            with st.form("feedback_form", clear_on_submit=True):
                rating = st.slider("Rating", min_value=1, max_value=5, value=5)
                feedback = st.text_area("Feedback (optional)", max_chars=500)
                if st.form_submit_button("Submit"):
                    try:
                        service.submit_feedback(USER_ID, session_id, int(rating), feedback or None)
                        st.success("Thank you for your feedback! It helps us grow better crops... I mean, responses.")
                    except AgriBotError as e:
                        st.warning(str(e))

    with st.expander("Chat analytics", expanded=False):
        analytics = service.get_analytics(USER_ID)
        st.write(
            {
                "total_sessions": analytics.total_sessions,
                "total_messages": analytics.total_messages,
                "avg_satisfaction": analytics.avg_satisfaction,
                "resolved_sessions": analytics.resolved_sessions,
                "most_asked_topic": analytics.most_asked_topic,
                "top_topics": analytics.top_topics,
            }
        )


if __name__ == "__main__":
    main()
