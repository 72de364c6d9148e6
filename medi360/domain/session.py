import uuid
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .models import Severity


SessionType = Literal["symptom-check", "general-query", "medication-info", "emergency"]
SessionStatus = Literal["active", "completed", "archived"]


class MessageMetadata(BaseModel):
    severity: Optional[Severity] = None
    identified_symptoms: List[str] = []
    recommendations: List[str] = []
    disclaimer_shown: bool = False
    ai_powered: bool = False
    provider: Optional[str] = None


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)


class ReportedSymptom(BaseModel):
    symptom: str
    severity: Optional[Severity] = None
    reported_at: datetime = Field(default_factory=datetime.now)


class SessionSummary(BaseModel):
    reported_symptoms: List[ReportedSymptom] = []
    overall_severity: Optional[Severity] = None
    key_recommendations: List[str] = []
    emergency_flagged: bool = False
    referral_recommended: bool = False


class SessionAnalysis(BaseModel):
    symptoms: List[str]
    overall_severity: Severity
    message_count: int


class ChatSession(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    session_title: str = "Medical Consultation"
    session_type: SessionType = "symptom-check"
    messages: List[ChatMessage] = []
    summary: SessionSummary = Field(default_factory=SessionSummary)
    status: SessionStatus = "active"
    started_at: datetime = Field(default_factory=datetime.now)
    last_message_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)

    def add_message(self, role: str, content: str, metadata: Optional[Dict] = None) -> ChatMessage:
        message = ChatMessage(
            role=role,
            content=content,
            metadata=MessageMetadata(**(metadata or {})),
        )
        self.messages.append(message)
        self.last_message_at = message.timestamp
        return message

    def analyze_symptoms(self) -> SessionAnalysis:
        """Collect symptoms across messages; overall severity is the highest seen."""
        symptoms: List[str] = []
        overall = Severity.LOW

        for msg in self.messages:
            for s in msg.metadata.identified_symptoms:
                if s not in symptoms:
                    symptoms.append(s)
            severity = msg.metadata.severity
            if severity is not None and severity.rank > overall.rank:
                overall = severity

        return SessionAnalysis(
            symptoms=symptoms,
            overall_severity=overall,
            message_count=len(self.messages),
        )

    def complete(self) -> None:
        analysis = self.analyze_symptoms()
        now = datetime.now()

        self.summary.reported_symptoms = [
            ReportedSymptom(symptom=s, severity=analysis.overall_severity, reported_at=now)
            for s in analysis.symptoms
        ]
        self.summary.overall_severity = analysis.overall_severity
        self.status = "completed"
        self.completed_at = now

    def archive(self) -> None:
        self.status = "archived"

    def conversation_context(self, limit: int = 10) -> List[dict]:
        return [
            {"role": msg.role, "content": msg.content}
            for msg in self.messages[-limit:]
        ]
