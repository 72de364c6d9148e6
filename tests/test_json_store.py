"""Tests for the JSON-file document stores."""
import json
import threading

import pytest

from medi360.domain.models import Severity
from medi360.domain.profile import HealthProfile
from medi360.domain.session import ChatSession
from medi360.infrastructure.storage.json_store import (
    JsonCollection,
    JsonProfileStore,
    JsonSessionStore,
    StorageError,
)


class TestJsonCollection:
    def test_creates_missing_directory_and_file(self, tmp_path):
        path = tmp_path / "nested" / "docs.json"
        JsonCollection(str(path))

        assert path.exists()
        assert json.loads(path.read_text()) == {}

    def test_put_get_delete(self, tmp_path):
        collection = JsonCollection(str(tmp_path / "docs.json"))

        collection.put("a", {"value": 1})

        assert collection.get("a") == {"value": 1}
        assert collection.delete("a") is True
        assert collection.delete("a") is False
        assert collection.get("a") is None

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "docs.json"
        path.write_text("{not json")

        collection = JsonCollection(str(path))

        assert collection.load_all() == {}


class TestProfileStore:
    def test_round_trip_keeps_computed_bmi(self, tmp_path):
        store = JsonProfileStore(str(tmp_path / "profiles.json"))
        store.save(HealthProfile(
            user_id="u1", age=30, gender="male",
            height={"value": 180}, weight={"value": 81},
        ))

        loaded = store.get("u1")

        assert loaded.bmi == 25.0
        assert store.get("u2") is None

    def test_invalid_document_is_skipped(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"u1": {"user_id": "u1", "age": -4, "gender": "male"}}))

        assert JsonProfileStore(str(path)).get("u1") is None


class TestSessionStore:
    def test_list_for_user_filters_and_skips_invalid(self, tmp_path):
        store = JsonSessionStore(str(tmp_path / "sessions.json"))
        mine = ChatSession(user_id="u1")
        mine.add_message("user", "cough", {"severity": Severity.LOW, "identified_symptoms": ["cough"]})
        store.save(mine)
        store.save(ChatSession(user_id="u2"))
        store.collection.put("broken", {"user_id": "u1", "status": "unknown"})

        listed = store.list_for_user("u1")

        assert [s.id for s in listed] == [mine.id]
        assert listed[0].messages[0].metadata.severity is Severity.LOW

    def test_delete(self, tmp_path):
        store = JsonSessionStore(str(tmp_path / "sessions.json"))
        session = ChatSession(user_id="u1")
        store.save(session)

        assert store.delete(session.id) is True
        assert store.get(session.id) is None


class TestConcurrentWrites:
    def test_threads_writing_distinct_keys_keep_every_document(self, tmp_path):
        path = str(tmp_path / "docs.json")
        collections = [JsonCollection(path) for _ in range(4)]

        def writer(worker):
            collection = collections[worker % len(collections)]
            for i in range(10):
                collection.put(f"{worker}-{i}", {"worker": worker, "i": i})

        threads = [threading.Thread(target=writer, args=(w,)) for w in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(JsonCollection(path).load_all()) == 160

    def test_write_to_corrupt_file_raises_and_keeps_contents(self, tmp_path):
        path = tmp_path / "docs.json"
        collection = JsonCollection(str(path))
        collection.put("a", {"value": 1})
        collection.put("b", {"value": 2})
        text = path.read_text()
        path.write_text(text[: len(text) // 2])
        damaged = path.read_text()

        with pytest.raises(StorageError):
            collection.put("c", {"value": 3})
        with pytest.raises(StorageError):
            collection.delete("a")

        assert path.read_text() == damaged

    def test_no_temp_files_left_behind(self, tmp_path):
        collection = JsonCollection(str(tmp_path / "docs.json"))
        collection.put("a", {"value": 1})
        collection.delete("a")

        assert [p.name for p in tmp_path.iterdir()] == ["docs.json"]
