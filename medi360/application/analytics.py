from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel

from medi360.application.ports import ProfileStorePort, SessionStorePort
from medi360.domain.models import Severity
from medi360.domain.profile import HealthProfile
from medi360.domain.session import ChatSession


class DashboardStatistics(BaseModel):
    total_consultations: int
    emergency_consultations: int
    active_conditions: int
    current_medications: int


class ConsultationOverview(BaseModel):
    session_id: str
    session_title: str
    status: str
    overall_severity: Optional[Severity] = None
    emergency_flagged: bool = False
    started_at: datetime
    last_message_at: datetime


class Dashboard(BaseModel):
    health_score: int
    statistics: DashboardStatistics
    recent_consultations: List[ConsultationOverview]
    has_health_profile: bool


class SymptomCount(BaseModel):
    symptom: str
    count: int


class SymptomAnalysis(BaseModel):
    timeframe: str
    total_sessions: int
    top_symptoms: List[SymptomCount]
    severity_distribution: Dict[str, int]


class MonthlyTrend(BaseModel):
    month: str
    consultations: int
    unique_symptoms: int
    emergencies: int


class Recommendation(BaseModel):
    category: str
    priority: str
    suggestion: str
    reason: str


class RiskAssessment(BaseModel):
    risk_score: int
    risk_level: str
    factors: List[str]


def health_score(profile: Optional[HealthProfile]) -> int:
    """Start at 100 and deduct for lifestyle and medical risk factors."""
    score = 100
    if profile is not None:
        if profile.bmi and (profile.bmi < 18.5 or profile.bmi > 30):
            score -= 10
        if profile.lifestyle.smoking_status == "current":
            score -= 15
        if profile.lifestyle.alcohol_consumption == "heavy":
            score -= 10
        if profile.lifestyle.exercise_frequency == "sedentary":
            score -= 10
        score -= len(profile.known_conditions) * 5
    return max(0, min(100, score))


def risk_score(profile: HealthProfile, recent_symptoms: Optional[List[str]] = None) -> RiskAssessment:
    score = 0
    factors: List[str] = []

    if profile.age > 65:
        score += 20
        factors.append("Age over 65")
    elif profile.age > 50:
        score += 10
        factors.append("Age over 50")

    if profile.bmi and profile.bmi > 30:
        score += 15
        factors.append("BMI in obesity range")
    elif profile.bmi and profile.bmi > 25:
        score += 5
        factors.append("BMI in overweight range")

    if profile.lifestyle.smoking_status == "current":
        score += 20
        factors.append("Current smoker")
    if profile.lifestyle.alcohol_consumption == "heavy":
        score += 10
        factors.append("Heavy alcohol use")

    if profile.known_conditions:
        score += len(profile.known_conditions) * 5
        factors.append(f"{len(profile.known_conditions)} known condition(s)")

    symptoms = recent_symptoms or []
    if symptoms:
        score += len(symptoms) * 3
        factors.append(f"{len(symptoms)} recent symptom(s)")

    score = min(score, 100)
    if score > 60:
        level = "high"
    elif score > 30:
        level = "moderate"
    else:
        level = "low"
    return RiskAssessment(risk_score=score, risk_level=level, factors=factors)


def parse_timeframe(timeframe: str, default: int = 30) -> int:
    digits = ""
    for ch in (timeframe or "").strip():
        if not ch.isdigit():
            break
        digits += ch
    days = int(digits) if digits else 0
    return days or default


class AnalyticsService:
    def __init__(self, sessions: SessionStorePort, profiles: ProfileStorePort):
        self.sessions = sessions
        self.profiles = profiles

    def dashboard(self, user_id: str) -> Dashboard:
        profile = self.profiles.get(user_id)
        sessions = self._sessions_newest_first(user_id)

        return Dashboard(
            health_score=health_score(profile),
            statistics=DashboardStatistics(
                total_consultations=len(sessions),
                emergency_consultations=sum(1 for s in sessions if s.summary.emergency_flagged),
                active_conditions=len(profile.known_conditions) if profile else 0,
                current_medications=len(profile.current_medications) if profile else 0,
            ),
            recent_consultations=[_overview(s) for s in sessions[:5]],
            has_health_profile=profile is not None,
        )

    def symptom_analysis(
        self, user_id: str, timeframe: str = "30d", now: Optional[datetime] = None
    ) -> SymptomAnalysis:
        days = parse_timeframe(timeframe)
        start = (now or datetime.now()) - timedelta(days=days)
        sessions = [s for s in self.sessions.list_for_user(user_id) if s.created_at >= start]

        frequency: Counter = Counter()
        distribution = {severity.value: 0 for severity in Severity}
        for session in sessions:
            for reported in session.summary.reported_symptoms:
                frequency[reported.symptom] += 1
            if session.summary.overall_severity is not None:
                distribution[session.summary.overall_severity.value] += 1

        top = sorted(frequency.items(), key=lambda item: item[1], reverse=True)[:10]
        return SymptomAnalysis(
            timeframe=f"{days} days",
            total_sessions=len(sessions),
            top_symptoms=[SymptomCount(symptom=s, count=c) for s, c in top],
            severity_distribution=distribution,
        )

    def health_trends(self, user_id: str, now: Optional[datetime] = None) -> List[MonthlyTrend]:
        start = (now or datetime.now()) - timedelta(days=183)
        sessions = sorted(
            (s for s in self.sessions.list_for_user(user_id) if s.created_at >= start),
            key=lambda s: s.created_at,
        )

        months: Dict[str, dict] = {}
        for session in sessions:
            month = session.created_at.strftime("%Y-%m")
            bucket = months.setdefault(month, {"consultations": 0, "symptoms": set(), "emergencies": 0})
            bucket["consultations"] += 1
            if session.summary.emergency_flagged:
                bucket["emergencies"] += 1
            for reported in session.summary.reported_symptoms:
                bucket["symptoms"].add(reported.symptom)

        return [
            MonthlyTrend(
                month=month,
                consultations=data["consultations"],
                unique_symptoms=len(data["symptoms"]),
                emergencies=data["emergencies"],
            )
            for month, data in months.items()
        ]

    def recommendations(self, user_id: str) -> List[Recommendation]:
        profile = self.profiles.get(user_id)
        recent = self._sessions_newest_first(user_id)[:10]
        recs: List[Recommendation] = []

        if profile is not None:
            if profile.bmi and profile.bmi > 30:
                recs.append(Recommendation(
                    category="Weight Management",
                    priority="high",
                    suggestion="Consider consulting a nutritionist for weight management guidance",
                    reason="BMI indicates obesity range",
                ))
            if profile.lifestyle.smoking_status == "current":
                recs.append(Recommendation(
                    category="Lifestyle",
                    priority="high",
                    suggestion="Smoking cessation programs can significantly improve health",
                    reason="Current smoking habit detected",
                ))
            if profile.lifestyle.exercise_frequency == "sedentary":
                recs.append(Recommendation(
                    category="Physical Activity",
                    priority="moderate",
                    suggestion="Start with 30 minutes of walking 3-4 times per week",
                    reason="Low physical activity levels",
                ))
            if profile.lifestyle.sleep_hours is not None and profile.lifestyle.sleep_hours < 6:
                recs.append(Recommendation(
                    category="Sleep Health",
                    priority="moderate",
                    suggestion="Aim for 7-9 hours of sleep per night",
                    reason="Insufficient sleep duration",
                ))

        if any(s.summary.emergency_flagged for s in recent):
            recs.append(Recommendation(
                category="Medical Attention",
                priority="high",
                suggestion="Schedule a comprehensive health checkup with your doctor",
                reason="Recent emergency-level symptoms reported",
            ))

        if profile is None:
            recs.append(Recommendation(
                category="Profile Completion",
                priority="high",
                suggestion="Complete your health profile for personalized recommendations",
                reason="Health profile not found",
            ))

        return recs

    def export(self, user_id: str) -> dict:
        profile = self.profiles.get(user_id)
        sessions = sorted(self.sessions.list_for_user(user_id), key=lambda s: s.created_at, reverse=True)
        return {
            "generated_at": datetime.now().isoformat(),
            "health_profile": profile.model_dump(mode="json") if profile else None,
            "consultation_history": [
                {
                    "date": s.started_at.isoformat(),
                    "type": s.session_type,
                    "symptoms": [r.symptom for r in s.summary.reported_symptoms],
                    "severity": s.summary.overall_severity.value if s.summary.overall_severity else None,
                    "emergency": s.summary.emergency_flagged,
                }
                for s in sessions
            ],
        }

    def _sessions_newest_first(self, user_id: str) -> List[ChatSession]:
        return sorted(
            self.sessions.list_for_user(user_id),
            key=lambda s: s.last_message_at,
            reverse=True,
        )


def _overview(session: ChatSession) -> ConsultationOverview:
    return ConsultationOverview(
        session_id=session.id,
        session_title=session.session_title,
        status=session.status,
        overall_severity=session.summary.overall_severity,
        emergency_flagged=session.summary.emergency_flagged,
        started_at=session.started_at,
        last_message_at=session.last_message_at,
    )
