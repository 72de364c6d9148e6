import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ValidationError

from medi360.application.errors import InvalidRequestError, NotFoundError
from medi360.application.ports import LLMPort, ProfileStorePort, SessionStorePort
from medi360.application.responses import format_analysis
from medi360.domain.knowledge import COMMON_SYMPTOMS
from medi360.domain.models import AnalysisResult, Severity
from medi360.domain.profile import HealthProfile
from medi360.domain.rules import DEFAULT_CLASSIFIER, SymptomClassifier
from medi360.domain.session import ChatSession, ReportedSymptom


logger = logging.getLogger(__name__)


LOCAL_PROVIDER = "MEDI-360 Local"

WELCOME_MESSAGE = """Hello! 👋 I'm your MEDI-360 AI assistant.

I can help you with:
🩺 Checking Symptoms
💊 Home Remedies
🚑 When to see a Doctor

Please describe what you're feeling in detail."""


SYSTEM_PROMPT = """You are MEDI-360, a professional Medical AI.

CONTEXT:
Patient Age: {age}
Known Conditions: {conditions}
Current Medications: {medications}

INSTRUCTIONS:
1. Analyze the symptoms.
2. Respond in PLAIN TEXT only.
3. Do NOT use markdown symbols like #, *, or **.
4. Use Emojis for sections.
5. Use "•" for bullet points.
6. If the symptoms could be life-threatening, say it is an EMERGENCY and tell the patient to call 108/911.

REQUIRED OUTPUT FORMAT:

🩺 ANALYSIS
[Brief explanation here]

💊 IMMEDIATE ADVICE
• [Step 1]
• [Step 2]
• [Step 3]

⚠️ WARNING SIGNS
• [Symptom to watch for]

---
Disclaimer: I am an AI. Please consult a doctor for a professional diagnosis."""


def build_system_prompt(profile: Optional[HealthProfile]) -> str:
    if profile is None:
        return SYSTEM_PROMPT.format(age="Unknown", conditions="none", medications="none")
    context = profile.health_context()
    return SYSTEM_PROMPT.format(
        age=context.age if context.age is not None else "Unknown",
        conditions=", ".join(context.known_conditions) or "none",
        medications=", ".join(context.current_medications) or "none",
    )


def extract_symptoms(message: str) -> List[str]:
    """Naive vocabulary scan of a free-text message."""
    lowered = (message or "").lower()
    return [s for s in COMMON_SYMPTOMS if s in lowered]


def detect_severity(text: str) -> Severity:
    lowered = (text or "").lower()
    if "emergency" in lowered or "call 911" in lowered or "call 108" in lowered:
        return Severity.EMERGENCY
    if "seek medical" in lowered or "consult a doctor" in lowered:
        return Severity.MODERATE
    return Severity.LOW


def detect_emergency(text: str) -> bool:
    return detect_severity(text) is Severity.EMERGENCY


class ChatReply(BaseModel):
    session_id: str
    message: str
    severity: Severity
    emergency: bool
    symptoms: List[str]
    provider: str
    analysis: Optional[AnalysisResult] = None


class ChatService:
    """Symptom-check conversations backed by hosted models with a local fallback.

    Hosted models are tried in the order given; if all of them fail (or none
    are configured) the rule-based classifier answers instead.
    """

    def __init__(
        self,
        sessions: SessionStorePort,
        profiles: Optional[ProfileStorePort] = None,
        llms: Sequence[LLMPort] = (),
        classifier: SymptomClassifier = DEFAULT_CLASSIFIER,
        context_limit: int = 10,
    ):
        self.sessions = sessions
        self.profiles = profiles
        self.llms = list(llms)
        self.classifier = classifier
        self.context_limit = context_limit

    def create_session(self, user_id: str, session_type: Optional[str] = None) -> ChatSession:
        try:
            session = ChatSession(
                user_id=user_id,
                session_type=session_type or "symptom-check",
                session_title=f"Medical Consultation - {datetime.now():%Y-%m-%d}",
            )
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid session type: {session_type}") from e

        session.add_message("system", WELCOME_MESSAGE, {"ai_powered": True, "provider": "MEDI-360 AI"})
        self.sessions.save(session)
        logger.info("Created chat session %s for user %s", session.id, user_id)
        return session

    def send_message(self, user_id: str, session_id: str, message: str) -> ChatReply:
        if not message or not message.strip():
            raise InvalidRequestError("Message is required")

        session = self.get_session(user_id, session_id)
        session.add_message("user", message)
        profile = self.profiles.get(user_id) if self.profiles is not None else None
        symptoms = extract_symptoms(message)

        reply, provider = self._ask_hosted_models(session, profile)
        analysis: Optional[AnalysisResult] = None
        if reply is None:
            logger.warning("All hosted models failed for session %s; using local classifier", session.id)
            context = profile.health_context() if profile is not None else None
            analysis = self.classifier.classify(symptoms, context)
            reply = format_analysis(analysis)
            provider = LOCAL_PROVIDER
            severity = analysis.severity
            emergency = analysis.emergency_detected
        else:
            severity = detect_severity(reply)
            emergency = severity is Severity.EMERGENCY

        session.add_message(
            "assistant",
            reply,
            {
                "severity": severity,
                "identified_symptoms": symptoms,
                "recommendations": analysis.recommendations if analysis else [],
                "disclaimer_shown": True,
                "ai_powered": analysis is None,
                "provider": provider,
            },
        )
        self._update_summary(session, symptoms, severity, emergency)
        self.sessions.save(session)

        return ChatReply(
            session_id=session.id,
            message=reply,
            severity=severity,
            emergency=emergency,
            symptoms=symptoms,
            provider=provider,
            analysis=analysis,
        )

    def _ask_hosted_models(
        self, session: ChatSession, profile: Optional[HealthProfile]
    ) -> Tuple[Optional[str], Optional[str]]:
        messages = [{"role": "system", "content": build_system_prompt(profile)}]
        messages.extend(
            m for m in session.conversation_context(self.context_limit) if m["role"] != "system"
        )

        for llm in self.llms:
            name = getattr(llm, "name", type(llm).__name__)
            try:
                reply = llm.generate_reply(messages)
            except Exception as e:
                logger.error("Hosted model %s failed: %s", name, e)
                continue
            if reply and reply.strip():
                return reply.strip(), name
            logger.error("Hosted model %s returned an empty reply", name)
        return None, None

    @staticmethod
    def _update_summary(
        session: ChatSession, symptoms: List[str], severity: Severity, emergency: bool
    ) -> None:
        summary = session.summary
        known = {r.symptom for r in summary.reported_symptoms}
        for s in symptoms:
            if s not in known:
                summary.reported_symptoms.append(ReportedSymptom(symptom=s, severity=severity))
                known.add(s)
        if emergency:
            summary.emergency_flagged = True
        summary.overall_severity = severity

    def get_session(self, user_id: str, session_id: str) -> ChatSession:
        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError("Session not found")
        return session

    def list_sessions(self, user_id: str, limit: int = 10) -> List[ChatSession]:
        sessions = sorted(
            self.sessions.list_for_user(user_id),
            key=lambda s: s.last_message_at,
            reverse=True,
        )
        return sessions[:limit]

    def complete_session(self, user_id: str, session_id: str) -> ChatSession:
        session = self.get_session(user_id, session_id)
        session.complete()
        self.sessions.save(session)
        return session

    def archive_session(self, user_id: str, session_id: str) -> ChatSession:
        session = self.get_session(user_id, session_id)
        session.archive()
        self.sessions.save(session)
        return session

    def delete_session(self, user_id: str, session_id: str) -> bool:
        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return False
        return self.sessions.delete(session_id)
