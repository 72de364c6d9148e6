from typing import List, Optional, Protocol

from medi360.domain.profile import HealthProfile
from medi360.domain.session import ChatSession


class LLMPort(Protocol):
    name: str

    def generate_reply(self, messages: List[dict]) -> str:
        """
        Accepts chat-style messages and returns the assistant's plain-text reply.
        Raises on any network, quota or response-shape failure.
        """
        ...


class SessionStorePort(Protocol):
    def save(self, session: ChatSession) -> None:
        ...

    def get(self, session_id: str) -> Optional[ChatSession]:
        ...

    def list_for_user(self, user_id: str) -> List[ChatSession]:
        ...

    def delete(self, session_id: str) -> bool:
        ...


class ProfileStorePort(Protocol):
    def save(self, profile: HealthProfile) -> None:
        ...

    def get(self, user_id: str) -> Optional[HealthProfile]:
        ...

    def delete(self, user_id: str) -> bool:
        ...
