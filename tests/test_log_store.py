"""
Tests for the LogStore: bounded cache, file persistence, read bookkeeping.
"""
import json
import logging

from runtime.models.log_models import LogLevel
from runtime.store.log_store import LogStore


def test_keeps_only_the_100_most_recent_entries(log_store):
    for i in range(150):
        log_store.info(f"msg {i}")

    entries = log_store.get_recent_logs(500)

    assert len(entries) == 100
    assert entries[0].message == "msg 149"
    assert entries[-1].message == "msg 50"


def test_limit_returns_newest_first(log_store):
    for i in range(5):
        log_store.info(f"msg {i}")

    assert [e.message for e in log_store.get_recent_logs(2)] == ["msg 4", "msg 3"]


def test_entries_are_appended_to_daily_file(log_store, log_dir):
    log_store.info("hello", {"a": 1})
    log_store.warn("careful")

    # 1_700_000_000 is 2023-11-14 UTC
    path = log_dir / "app-2023-11-14.log"
    assert log_store.log_file == path

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["level"] == "INFO"
    assert first["message"] == "hello"
    assert first["details"] == {"a": 1}
    assert set(first["os"]) == {"platform", "release"}
    assert first["process"]["env"] == "test"
    assert isinstance(first["process"]["pid"], int)
    assert json.loads(lines[1])["level"] == "WARN"


def test_error_normalizes_exceptions(log_store):
    try:
        raise ValueError("bad value")
    except ValueError as e:
        entry = log_store.error("Something failed", e)

    assert entry.level == LogLevel.ERROR
    assert entry.details["name"] == "ValueError"
    assert entry.details["message"] == "bad value"
    assert "ValueError" in entry.details["stack"]


def test_error_keeps_mappings_and_none(log_store):
    assert log_store.error("with dict", {"error": "x"}).details == {"error": "x"}
    assert log_store.error("without details").details is None


def test_non_json_details_are_stringified(log_store, tmp_path):
    entry = log_store.info("path", {"filepath": tmp_path})
    assert entry.details == {"filepath": str(tmp_path)}


def test_reads_from_file_when_cache_is_empty(log_dir, clock):
    writer = LogStore(log_dir=str(log_dir), clock=clock)
    writer.info("first")
    writer.info("second")
    with writer.log_file.open("a", encoding="utf-8") as f:
        f.write("not json\n")

    reader = LogStore(log_dir=str(log_dir), clock=clock)
    entries = reader.get_recent_logs()

    assert [e.message for e in entries] == [
        "Failed to parse log entry",
        "second",
        "first",
    ]
    assert entries[0].level == LogLevel.ERROR
    assert entries[0].details == "not json"

    # The cache was refilled from the file.
    assert [e.message for e in reader.get_recent_logs(1)] == ["Failed to parse log entry"]


def test_undecodable_line_becomes_placeholder(log_dir, clock):
    writer = LogStore(log_dir=str(log_dir), clock=clock)
    writer.info("first")
    with writer.log_file.open("ab") as f:
        f.write(b"\xff\xfe not utf8\n")
    writer.info("last")

    reader = LogStore(log_dir=str(log_dir), clock=clock)
    entries = reader.get_recent_logs()

    assert [e.message for e in entries] == [
        "last",
        "Failed to parse log entry",
        "first",
    ]
    assert entries[1].level == LogLevel.ERROR
    assert entries[1].details.endswith(" not utf8")


def test_missing_file_returns_empty_list(log_store):
    assert log_store.get_recent_logs() == []


def test_read_resets_update_counter(log_store, clock):
    assert log_store.have_logs_updated() is False

    log_store.info("one")
    log_store.info("two")
    assert log_store.update_count == 2
    assert log_store.have_logs_updated() is True

    log_store.get_recent_logs()
    assert log_store.update_count == 0
    assert log_store.have_logs_updated() is False

    clock.advance(2.5)
    assert log_store.get_time_since_last_request() == 2.5


def test_file_write_failure_keeps_in_memory_entry(tmp_path, clock, caplog):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory")

    store = LogStore(log_dir=str(blocked), clock=clock)
    with caplog.at_level(logging.ERROR):
        store.info("still recorded")

    assert [e.message for e in store.get_recent_logs()] == ["still recorded"]
    assert "Error writing to log file" in caplog.text


def test_observers_are_notified_and_isolated(log_store):
    seen = []

    def broken(entry):
        raise RuntimeError("observer bug")

    log_store.subscribe(broken)
    unsubscribe = log_store.subscribe(seen.append)

    entry = log_store.info("observed")
    assert seen == [entry]

    unsubscribe()
    log_store.info("not observed")
    assert seen == [entry]
