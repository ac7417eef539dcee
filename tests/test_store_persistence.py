import logging

from tagnotes.codec import decode_notes
from tagnotes.db import reset_engine
from tagnotes.errors import PersistenceFailure
from tagnotes.models import Draft
from tagnotes.storage import MemoryStorage, SqlStorage
from tagnotes.store import NoteStore, open_store


class FailingStorage(MemoryStorage):
    def write(self, key, blob):
        raise PersistenceFailure("quota exceeded")


def test_absent_blob_loads_empty():
    store = NoteStore(MemoryStorage())
    assert store.load_initial() == []
    assert store.loaded is True
    assert store.error is None


def test_corrupt_blob_falls_back_to_empty_and_is_reported(caplog):
    storage = MemoryStorage({"notes": "{not json"})
    store = NoteStore(storage)
    with caplog.at_level(logging.ERROR):
        assert store.load_initial() == []
    assert store.error
    assert store.view().error == store.error
    assert "unreadable" in caplog.text
    # the bad blob is untouched until something is saved
    assert storage.data["notes"] == "{not json"

    store.save_draft(Draft(title="fresh"))
    assert store.error is None
    assert [n.title for n in decode_notes(storage.data["notes"])] == ["fresh"]


def test_no_persist_before_load():
    storage = MemoryStorage()
    store = NoteStore(storage)
    store.notes = []
    assert store.persist() is False
    assert storage.writes == 0


def test_deleting_last_note_writes_empty_collection_by_default():
    storage = MemoryStorage()
    store = NoteStore(storage)
    store.load_initial()
    n = store.save_draft(Draft(title="only"))
    store.delete_note(n.id)
    assert storage.data["notes"] == "[]"


def test_legacy_policy_leaves_last_snapshot_when_collection_empties():
    storage = MemoryStorage()
    store = NoteStore(storage, persist_empty=False)
    store.load_initial()
    n = store.save_draft(Draft(title="only"))
    snapshot = storage.data["notes"]
    store.delete_note(n.id)
    assert store.notes == []
    assert storage.data["notes"] == snapshot


def test_write_failure_keeps_in_memory_state_and_surfaces_error():
    store = NoteStore(FailingStorage())
    store.load_initial()
    seen = []
    store.subscribe(seen.append)

    n = store.save_draft(Draft(title="kept"))
    assert store.notes == [n]
    assert "quota exceeded" in store.error
    assert seen[-1].error == store.error
    assert [x.title for x in seen[-1].notes] == ["kept"]


def test_subscribers_get_view_on_every_change_and_can_unsubscribe():
    store = NoteStore(MemoryStorage())
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.load_initial()
    store.new_note()
    store.update_draft(title="x")
    assert [v.editing for v in seen] == [False, True, True]
    assert seen[-1].draft.title == "x"

    unsubscribe()
    store.cancel()
    assert len(seen) == 3


def test_reload_from_sqlite(tmp_path, monkeypatch):
    monkeypatch.setenv("TAGNOTES_DB_PATH", str(tmp_path / "notes.sqlite"))
    reset_engine()

    store = open_store()
    a = store.save_draft(Draft(title="a", content="body", tags=["x", "y"]))
    b = store.save_draft(Draft(title="b"))

    again = NoteStore(SqlStorage())
    assert again.load_initial() == [a, b]


def test_open_store_reads_policy_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TAGNOTES_DB_PATH", str(tmp_path / "policy.sqlite"))
    monkeypatch.setenv("TAGNOTES_PERSIST_EMPTY", "false")
    monkeypatch.setenv("TAGNOTES_STORAGE_KEY", "scratch")
    reset_engine()

    store = open_store()
    assert store.persist_empty is False
    assert store.key == "scratch"
    n = store.save_draft(Draft(title="t"))
    store.delete_note(n.id)
    assert decode_notes(SqlStorage().read("scratch")) == [n]
