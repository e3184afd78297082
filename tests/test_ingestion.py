"""Tests for the ingestion service."""
import threading
import pytest
from chatlog import storage
from chatlog.errors import StorageError, ValidationError
from chatlog.ingestion import ingest


def test_ingest_stores_message_and_counts_user():
    before = storage.count_messages()

    result = ingest("alice", "hi", "127.0.0.1")

    assert result.stats_updated
    assert result.message.username == "alice"
    assert result.message.body == "hi"
    assert storage.count_messages() == before + 1

    stats = storage.get_user_stats("alice")
    assert stats.message_count == 1
    assert stats.first_seen == stats.last_seen == result.message.timestamp


def test_ingest_increments_existing_user():
    first = ingest("alice", "hi")
    second = ingest("alice", "yo")

    stats = storage.get_user_stats("alice")
    assert stats.message_count == 2
    assert stats.first_seen == first.message.timestamp
    assert stats.last_seen == second.message.timestamp


@pytest.mark.parametrize(
    "username,body",
    [
        ("", "hello"),
        ("alice", ""),
        (None, "hello"),
        ("alice", None),
        (True, "hello"),
        (0, "hello"),
        ({"name": "alice"}, "hello"),
        ("alice", ["hi"]),
    ],
)
def test_ingest_rejects_missing_fields(username, body):
    with pytest.raises(ValidationError):
        ingest(username, body)

    assert storage.count_messages() == 0
    assert storage.top_users() == []


def test_stats_failure_keeps_message(monkeypatch):
    def broken_upsert(*args, **kwargs):
        raise StorageError("upsert_user_stats failed: disk I/O error")

    monkeypatch.setattr(storage, "upsert_user_stats", broken_upsert)

    result = ingest("alice", "hi")

    assert not result.stats_updated
    assert storage.count_messages() == 1
    assert storage.get_user_stats("alice") is None

    assert storage.rebuild_user_stats() == 1
    assert storage.get_user_stats("alice").message_count == 1


def test_message_insert_failure_raises(monkeypatch):
    def broken_insert(*args, **kwargs):
        raise StorageError("insert_message failed: database is locked")

    monkeypatch.setattr(storage, "insert_message", broken_insert)

    with pytest.raises(StorageError):
        ingest("alice", "hi")


def test_concurrent_ingestion_same_user_loses_no_updates():
    threads_count = 20
    errors = []

    def worker(i):
        try:
            ingest("alice", f"message {i}")
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert storage.count_messages() == threads_count
    assert storage.get_user_stats("alice").message_count == threads_count


def test_concurrent_ingestion_many_users():
    names = ["alice", "bob", "carol", "dave"]

    def worker(name):
        for i in range(5):
            ingest(name, f"{name} {i}")

    threads = [threading.Thread(target=worker, args=(name,)) for name in names]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for name in names:
        assert storage.get_user_stats(name).message_count == 5
    assert storage.count_distinct_users() == len(names)


def test_ingest_stores_numeric_values_as_text():
    result = ingest(42, 3.5)

    assert result.message.username == "42"
    assert result.message.body == "3.5"
    assert storage.get_user_stats("42").message_count == 1


def test_ingest_unencodable_text_is_storage_error():
    with pytest.raises(StorageError):
        ingest("al\ud800ice", "hi")

    assert storage.count_messages() == 0
