"""Unit tests for the tabular store."""

from datetime import datetime, timezone

import pytest

from companion.errors import StorageError
from companion import storage
from companion.storage import create_store


def test_insert_assigns_id_and_timestamps(store):
    row = store.insert("courses", {
        "faculty_id": "f1",
        "course_name": "Compilers",
        "course_code": "CS-410",
        "semester": "Fall 2025",
        "attendance_percentage": 80.0,
        "syllabus_percentage": 70.0,
        "compliance_percentage": 75.0,
        "status": "compliant",
    })
    assert row["id"]
    assert row["created_at"] is not None
    assert row["updated_at"] is not None


def test_course_round_trip(store):
    """Reading a course back yields the inserted field values."""
    values = {
        "faculty_id": "f1",
        "course_name": "Operating Systems",
        "course_code": "CS-320",
        "semester": "Spring 2025",
        "attendance_percentage": 62.5,
        "syllabus_percentage": 48.0,
        "compliance_percentage": 55.25,
        "status": "pending",
    }
    inserted = store.insert("courses", values)
    fetched = store.get("courses", inserted["id"])

    assert fetched == inserted
    for key, value in values.items():
        assert fetched[key] == value


def test_select_filters_orders_and_limits(store):
    for i in range(5):
        store.insert("csv_uploads", {
            "faculty_id": "f1" if i < 4 else "f2",
            "file_name": f"file{i}.csv",
            "file_type": "attendance",
            "status": "success",
        })

    rows = store.select("csv_uploads", filters={"faculty_id": "f1"}, order_by="file_name", descending=False)
    assert [r["file_name"] for r in rows] == ["file0.csv", "file1.csv", "file2.csv", "file3.csv"]

    limited = store.select("csv_uploads", filters={"faculty_id": "f1"}, order_by="file_name", limit=2)
    assert [r["file_name"] for r in limited] == ["file3.csv", "file2.csv"]


def test_update_by_id(store):
    row = store.insert("reminders", {"faculty_id": "f1", "message": "m", "tone": "gentle", "is_read": False})
    updated = store.update("reminders", row["id"], {"is_read": True})
    assert updated["is_read"] is True
    assert store.update("reminders", "missing", {"is_read": True}) is None


def test_update_where(store):
    for _ in range(3):
        store.insert("reminders", {"faculty_id": "f1", "message": "m", "tone": "formal", "is_read": False})
    store.insert("reminders", {"faculty_id": "f2", "message": "m", "tone": "formal", "is_read": False})

    assert store.update_where("reminders", {"faculty_id": "f1", "is_read": False}, {"is_read": True}) == 3
    assert len(store.select("reminders", filters={"is_read": False})) == 1


def test_transaction_rolls_back(store):
    with pytest.raises(RuntimeError):
        with store.transaction() as tx:
            tx.insert("announcements", {"faculty_id": "f1", "title": "t", "content": "c"})
            raise RuntimeError("boom")
    assert store.select("announcements") == []


def test_json_column(store):
    pubs = [{"title": "On Engines", "year": 1843, "journal": None}]
    row = store.insert("profiles", {"email": "a@b.c", "full_name": "A", "research_publications": pubs})
    assert store.get("profiles", row["id"])["research_publications"] == pubs


def test_storage_error_on_constraint(store):
    store.insert("profiles", {"email": "dup@example.edu", "full_name": "A"})
    with pytest.raises(StorageError):
        store.insert("profiles", {"email": "dup@example.edu", "full_name": "B"})


def test_unknown_table(store):
    with pytest.raises(StorageError):
        store.select("grades")


def test_create_store_file(tmp_path):
    store = create_store(f"sqlite:///{tmp_path / 'compliance.db'}")
    store.insert("announcements", {"faculty_id": "f1", "title": "t", "content": "c"})
    assert len(store.select("announcements")) == 1


def test_select_breaks_timestamp_ties_by_id(store, monkeypatch):
    """Rows stamped with the same time come back in a fixed order."""
    fixed = datetime(2025, 10, 3, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(storage, "_now", lambda: fixed)
    ids = [
        store.insert("reminders", {"faculty_id": "f1", "message": "m", "tone": "gentle", "is_read": False})["id"]
        for _ in range(5)
    ]

    newest_first = [r["id"] for r in store.select("reminders", order_by="created_at")]
    oldest_first = [r["id"] for r in store.select("reminders", order_by="created_at", descending=False)]
    assert newest_first == sorted(ids, reverse=True)
    assert oldest_first == sorted(ids)
