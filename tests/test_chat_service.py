"""Tests for the consultation chat service and its hosted-model fallback chain."""
import pytest

from medi360.application.chat import (
    LOCAL_PROVIDER,
    WELCOME_MESSAGE,
    ChatService,
    build_system_prompt,
    detect_emergency,
    detect_severity,
    extract_symptoms,
)
from medi360.application.errors import InvalidRequestError, NotFoundError
from medi360.domain.knowledge import EMERGENCY_ACTIONS, FEVER_RECOMMENDATIONS
from medi360.domain.models import Severity
from medi360.domain.profile import HealthProfile
from medi360.infrastructure.storage.json_store import JsonProfileStore, JsonSessionStore


class DummyLLM:
    def __init__(self, name, reply):
        self.name = name
        self.reply = reply
        self.calls = []

    def generate_reply(self, messages):
        self.calls.append(messages)
        return self.reply


class FailingLLM:
    def __init__(self, name):
        self.name = name
        self.calls = 0

    def generate_reply(self, messages):
        self.calls += 1
        raise ConnectionError("boom: upstream unavailable")


@pytest.fixture
def sessions(tmp_path):
    return JsonSessionStore(str(tmp_path / "sessions.json"))


@pytest.fixture
def profiles(tmp_path):
    return JsonProfileStore(str(tmp_path / "profiles.json"))


def make_service(sessions, profiles, *llms):
    return ChatService(sessions, profiles, llms=llms)


class TestHelpers:
    def test_extract_symptoms_uses_vocabulary_order(self):
        assert extract_symptoms("I have a Fever and a bad cough") == ["fever", "cough"]

    def test_extract_chest_pain_also_finds_pain(self):
        assert extract_symptoms("sharp chest pain") == ["pain", "chest pain"]

    def test_extract_nothing(self):
        assert extract_symptoms("hello there") == []

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("This is an EMERGENCY", Severity.EMERGENCY),
            ("Please call 911 now", Severity.EMERGENCY),
            ("call 108 immediately", Severity.EMERGENCY),
            ("You should seek medical advice", Severity.MODERATE),
            ("Consult a doctor if it persists", Severity.MODERATE),
            ("Rest and drink water", Severity.LOW),
        ],
    )
    def test_detect_severity(self, text, expected):
        assert detect_severity(text) is expected

    def test_detect_emergency(self):
        assert detect_emergency("call 108")
        assert not detect_emergency("rest well")

    def test_system_prompt_without_profile(self):
        prompt = build_system_prompt(None)
        assert "Patient Age: Unknown" in prompt
        assert "🩺 ANALYSIS" in prompt


class TestSessions:
    def test_create_session_adds_welcome(self, sessions, profiles):
        service = make_service(sessions, profiles)

        session = service.create_session("user-1")

        assert session.status == "active"
        assert session.session_type == "symptom-check"
        assert session.session_title.startswith("Medical Consultation - ")
        assert session.messages[0].role == "system"
        assert session.messages[0].content == WELCOME_MESSAGE
        assert sessions.get(session.id) is not None

    def test_invalid_session_type(self, sessions, profiles):
        service = make_service(sessions, profiles)
        with pytest.raises(InvalidRequestError):
            service.create_session("user-1", session_type="gossip")

    def test_get_session_of_other_user_is_not_found(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")

        with pytest.raises(NotFoundError):
            service.get_session("user-2", session.id)

    def test_list_sessions_newest_first_with_limit(self, sessions, profiles):
        service = make_service(sessions, profiles)
        created = [service.create_session("user-1") for _ in range(3)]
        service.send_message("user-1", created[0].id, "I have a cough")

        listed = service.list_sessions("user-1", limit=2)

        assert len(listed) == 2
        assert listed[0].id == created[0].id

    def test_complete_and_archive(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")
        service.send_message("user-1", session.id, "fever and cough since yesterday")

        completed = service.complete_session("user-1", session.id)
        assert completed.status == "completed"
        assert completed.completed_at is not None
        assert [r.symptom for r in completed.summary.reported_symptoms] == ["fever", "cough"]

        archived = service.archive_session("user-1", session.id)
        assert archived.status == "archived"
        assert sessions.get(session.id).status == "archived"

    def test_delete_only_own_session(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")

        assert service.delete_session("user-2", session.id) is False
        assert service.delete_session("user-1", session.id) is True
        assert sessions.get(session.id) is None


class TestSendMessage:
    def test_blank_message_rejected(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")
        with pytest.raises(InvalidRequestError):
            service.send_message("user-1", session.id, "   ")

    def test_unknown_session(self, sessions, profiles):
        service = make_service(sessions, profiles)
        with pytest.raises(NotFoundError):
            service.send_message("user-1", "missing", "hello")

    def test_primary_model_answers(self, sessions, profiles):
        primary = DummyLLM("model-a", "🩺 ANALYSIS\nLikely a cold. Consult a doctor if it worsens.")
        secondary = DummyLLM("model-b", "unused")
        service = make_service(sessions, profiles, primary, secondary)
        session = service.create_session("user-1")

        reply = service.send_message("user-1", session.id, "I have a cough")

        assert reply.provider == "model-a"
        assert reply.severity is Severity.MODERATE
        assert reply.emergency is False
        assert reply.symptoms == ["cough"]
        assert reply.analysis is None
        assert secondary.calls == []

    def test_prompt_carries_profile_and_history(self, sessions, profiles):
        profiles.save(HealthProfile(user_id="user-1", age=70, gender="female"))
        primary = DummyLLM("model-a", "Rest well.")
        service = make_service(sessions, profiles, primary)
        session = service.create_session("user-1")

        service.send_message("user-1", session.id, "I have nausea")

        messages = primary.calls[0]
        assert messages[0]["role"] == "system"
        assert "Patient Age: 70" in messages[0]["content"]
        assert messages[-1] == {"role": "user", "content": "I have nausea"}
        assert all(m["content"] != WELCOME_MESSAGE for m in messages)

    def test_secondary_model_after_primary_failure(self, sessions, profiles):
        primary = FailingLLM("model-a")
        secondary = DummyLLM("model-b", "Please call 911 right away.")
        service = make_service(sessions, profiles, primary, secondary)
        session = service.create_session("user-1")

        reply = service.send_message("user-1", session.id, "my arm feels numb")

        assert primary.calls == 1
        assert reply.provider == "model-b"
        assert reply.emergency is True
        assert sessions.get(session.id).summary.emergency_flagged is True

    def test_empty_reply_moves_down_the_chain(self, sessions, profiles):
        service = make_service(sessions, profiles, DummyLLM("model-a", "   "), DummyLLM("model-b", "Rest."))
        session = service.create_session("user-1")

        reply = service.send_message("user-1", session.id, "tired")

        assert reply.provider == "model-b"

    def test_local_classifier_when_all_models_fail(self, sessions, profiles):
        service = make_service(sessions, profiles, FailingLLM("model-a"), FailingLLM("model-b"))
        session = service.create_session("user-1")

        reply = service.send_message("user-1", session.id, "I have a fever and a cough")

        assert reply.provider == LOCAL_PROVIDER
        assert reply.analysis is not None
        assert reply.severity is Severity.MODERATE
        assert "boom" not in reply.message
        assert "🩺 ANALYSIS" in reply.message
        assert "💊 IMMEDIATE ADVICE" in reply.message
        assert "⚠️ WARNING SIGNS" in reply.message
        for rec in FEVER_RECOMMENDATIONS:
            assert rec in reply.message

        stored = sessions.get(session.id)
        assistant = stored.messages[-1]
        assert assistant.role == "assistant"
        assert assistant.metadata.provider == LOCAL_PROVIDER
        assert assistant.metadata.ai_powered is False
        assert assistant.metadata.identified_symptoms == ["fever", "cough"]

    def test_local_classifier_without_models(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")

        reply = service.send_message("user-1", session.id, "Sharp chest pain on the left side")

        assert reply.provider == LOCAL_PROVIDER
        assert reply.emergency is True
        assert reply.severity is Severity.EMERGENCY
        assert "🚨 MEDICAL EMERGENCY" in reply.message
        assert EMERGENCY_ACTIONS[0] in reply.message
        summary = sessions.get(session.id).summary
        assert summary.emergency_flagged is True
        assert summary.overall_severity is Severity.EMERGENCY

    def test_local_classifier_uses_profile_context(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")
        assert service.send_message("user-1", session.id, "I have nausea").severity is Severity.LOW

        profiles.save(
            HealthProfile(
                user_id="user-1",
                age=70,
                gender="male",
                known_conditions=[{"name": "diabetes"}],
            )
        )
        reply = service.send_message("user-1", session.id, "I have nausea")

        assert reply.severity is Severity.MODERATE
        assert "Consider how symptoms may relate to your known conditions" in reply.message

    def test_reported_symptoms_are_not_duplicated(self, sessions, profiles):
        service = make_service(sessions, profiles)
        session = service.create_session("user-1")

        service.send_message("user-1", session.id, "cough")
        service.send_message("user-1", session.id, "still a cough and now fever")

        reported = [r.symptom for r in sessions.get(session.id).summary.reported_symptoms]
        assert reported == ["cough", "fever"]
