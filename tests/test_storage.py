import json

import pytest

from ring_director.models import DirectorSnapshot, Feud, StorylineEntry
from ring_director.storage import StateStore


@pytest.fixture
def store(state_dir):
    return StateStore(state_dir)


# ── Layout ──────────────────────────────────────────────────


def test_base_directory_created_on_first_write(state_dir):
    store = StateStore(state_dir)
    assert store.base_path == state_dir
    assert not state_dir.exists()
    assert store.load_director() is None
    assert store.read_history() == []
    assert not state_dir.exists()

    store.save_engine({})
    assert state_dir.is_dir()


def test_history_append_creates_base_directory(state_dir):
    store = StateStore(state_dir)
    store.append_history({"beat": "trash-talk"})
    assert [e["beat"] for e in store.read_history()] == ["trash-talk"]


def test_unwritable_base_fails_on_write_not_construction(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = StateStore(blocker / "storyline")
    assert store.load_director() is None
    assert store.load_engine() == {}
    with pytest.raises(OSError):
        store.save_engine({})


# ── Director snapshot ───────────────────────────────────────


def test_missing_snapshot_is_none(store):
    assert store.load_director() is None


def test_snapshot_round_trip(store):
    snap = DirectorSnapshot(
        feuds=[Feud(between=["john-cena", "the-rock"], intensity=7.3)],
        active_characters=["john-cena", "the-rock", "undertaker"],
        message_count=42,
        storyline_history=[StorylineEntry(beat="trash-talk", characters=["john-cena", "the-rock"])],
    )
    store.save_director(snap)
    loaded = store.load_director()
    assert loaded.feuds[0].intensity == 7.3
    assert loaded.message_count == 42
    assert loaded.storyline_history[0].beat == "trash-talk"


def test_snapshot_is_camel_case_on_disk(store):
    store.save_director(DirectorSnapshot(message_count=3, beats_since_last_surprise=2))
    data = json.loads(store.state_file.read_text())
    assert data["messageCount"] == 3
    assert data["beatsSinceLastSurprise"] == 2
    assert not store.state_file.with_suffix(".json.tmp").exists()


def test_partial_snapshot_marks_only_present_fields(store):
    store.base_path.mkdir(parents=True)
    store.state_file.write_text(json.dumps({"messageCount": 9}))
    loaded = store.load_director()
    assert loaded.model_fields_set == {"message_count"}


def test_corrupt_snapshot_raises(store):
    store.base_path.mkdir(parents=True)
    store.state_file.write_text("{")
    with pytest.raises(ValueError):
        store.load_director()


# ── Audit log ───────────────────────────────────────────────


def test_history_appends_lines(store):
    store.append_history({"beat": "entrance", "characters": ["undertaker"], "timestamp": 10})
    store.append_history({"beat": "callout", "characters": ["mankind"], "timestamp": 20})
    lines = store.history_file.read_text().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[0])["beat"] == "entrance"


def test_history_keeps_caller_timestamp(store):
    store.append_history({"beat": "entrance", "timestamp": 123})
    assert store.read_history()[0]["timestamp"] == 123


def test_history_stamps_missing_timestamp(store):
    store.append_history({"beat": "entrance"})
    assert store.read_history()[0]["timestamp"] > 0


def test_read_history_limit(store):
    for i in range(5):
        store.append_history({"beat": f"b{i}", "timestamp": i})
    assert [e["beat"] for e in store.read_history(limit=2)] == ["b3", "b4"]


def test_read_history_empty(store):
    assert store.read_history() == []


def test_export_history(store, tmp_path):
    store.append_history({"beat": "entrance", "timestamp": 1})
    dest = store.export_history(tmp_path / "out" / "transcript.jsonl")
    assert dest.read_text() == store.history_file.read_text()


def test_export_empty_history(store, tmp_path):
    dest = store.export_history(tmp_path / "transcript.jsonl")
    assert dest.read_text() == ""


# ── Engine state ────────────────────────────────────────────


def test_engine_state_round_trip(store):
    assert store.load_engine() == {}
    store.save_engine({"matches": {"matchHistory": []}})
    assert store.load_engine() == {"matches": {"matchHistory": []}}


def test_engine_state_must_be_object(store):
    store.base_path.mkdir(parents=True)
    store.engine_file.write_text("[1, 2]")
    with pytest.raises(ValueError):
        store.load_engine()
