"""JSON-file document storage for health profiles and chat sessions."""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from medi360.domain.profile import HealthProfile
from medi360.domain.session import ChatSession
from medi360.infrastructure.config import Settings


logger = logging.getLogger(__name__)

_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: str) -> threading.RLock:
    """One lock per resolved file path, shared by every collection on that file."""
    key = os.path.abspath(path)
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


class StorageError(RuntimeError):
    """Raised when a storage file cannot be read back safely before a write."""


class JsonCollection:
    """A single JSON object on disk mapping document id to document.

    Reads and read-modify-write cycles hold a per-file lock, and every write
    replaces the file atomically, so readers never see a partial document.
    """

    def __init__(self, storage_path: str):
        self.storage_path = storage_path
        self.lock = _lock_for(storage_path)
        self._ensure_storage_exists()

    def _ensure_storage_exists(self) -> None:
        storage_dir = os.path.dirname(self.storage_path)
        if storage_dir and not os.path.exists(storage_dir):
            os.makedirs(storage_dir, exist_ok=True)

        with self.lock:
            if not os.path.exists(self.storage_path) or os.path.getsize(self.storage_path) == 0:
                self.save_all({})

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.storage_path, "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return {}

    def load_all(self) -> Dict[str, Any]:
        with self.lock:
            try:
                return self._read()
            except json.JSONDecodeError as e:
                logger.error("Corrupt storage file %s: %s", self.storage_path, e)
                return {}

    def _load_for_write(self) -> Dict[str, Any]:
        try:
            return self._read()
        except json.JSONDecodeError as e:
            logger.error("Refusing to overwrite corrupt storage file %s: %s", self.storage_path, e)
            raise StorageError(f"Storage file {self.storage_path} is corrupt") from e

    def save_all(self, documents: Dict[str, Any]) -> None:
        storage_dir = os.path.dirname(os.path.abspath(self.storage_path))
        with self.lock:
            fd, tmp_path = tempfile.mkstemp(dir=storage_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(documents, f, indent=2)
                os.replace(tmp_path, self.storage_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def put(self, key: str, document: Dict[str, Any]) -> None:
        with self.lock:
            documents = self._load_for_write()
            documents[key] = document
            self.save_all(documents)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self.load_all().get(key)

    def delete(self, key: str) -> bool:
        with self.lock:
            documents = self._load_for_write()
            if key not in documents:
                return False
            del documents[key]
            self.save_all(documents)
            return True


def _default_path(filename: str) -> str:
    return str(Path(Settings().data_dir) / filename)


class JsonProfileStore:
    def __init__(self, storage_path: Optional[str] = None):
        self.collection = JsonCollection(storage_path or _default_path("profiles.json"))

    def save(self, profile: HealthProfile) -> None:
        self.collection.put(profile.user_id, profile.model_dump(mode="json"))

    def get(self, user_id: str) -> Optional[HealthProfile]:
        doc = self.collection.get(user_id)
        if doc is None:
            return None
        try:
            return HealthProfile.model_validate(doc)
        except ValidationError as e:
            logger.error("Stored profile for %s is invalid: %s", user_id, e)
            return None

    def delete(self, user_id: str) -> bool:
        return self.collection.delete(user_id)


class JsonSessionStore:
    def __init__(self, storage_path: Optional[str] = None):
        self.collection = JsonCollection(storage_path or _default_path("sessions.json"))

    def save(self, session: ChatSession) -> None:
        self.collection.put(session.id, session.model_dump(mode="json"))

    def get(self, session_id: str) -> Optional[ChatSession]:
        doc = self.collection.get(session_id)
        if doc is None:
            return None
        return ChatSession.model_validate(doc)

    def list_for_user(self, user_id: str) -> List[ChatSession]:
        sessions = []
        for session_id, doc in self.collection.load_all().items():
            if doc.get("user_id") != user_id:
                continue
            try:
                sessions.append(ChatSession.model_validate(doc))
            except ValidationError as e:
                logger.error("Skipping invalid stored session %s: %s", session_id, e)
        return sessions

    def delete(self, session_id: str) -> bool:
        return self.collection.delete(session_id)
