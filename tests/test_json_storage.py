"""
Record store behaviour against temporary JSON files.
"""
from __future__ import annotations

import json
import threading
import time

import pytest

from records_api.repositories import json_storage
from records_api.repositories.json_storage import (
    CollectionNotFoundError,
    DuplicateIdError,
    MalformedDataError,
    RecordStore,
    WriteError,
    find_one,
    load_collection,
    remove_where,
    save_collection,
    upsert_mutate,
)
from records_api.repositories.models import PostRecord, UserRecord


def _user(user_id, email="a@x.com", first="Ada", last="Lovelace"):
    return UserRecord(id=user_id, email=email, password="hash", first_name=first, last_name=last)


def _post(post_id, user_id="u1", title="Hello"):
    return PostRecord(
        id=post_id,
        title=title,
        description="a valid description",
        date="2024-11-01T10:00:00.000Z",
        user_id=user_id,
    )


def test_save_then_load_returns_same_records(tmp_path):
    path = tmp_path / "users.json"
    records = [_user(1), _user("u2", email="b@x.com")]
    save_collection(path, records)
    assert load_collection(path, UserRecord) == records


def test_saved_file_uses_camel_case_keys(tmp_path):
    path = tmp_path / "posts.json"
    save_collection(path, [_post("p1")])
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == [
        {
            "id": "p1",
            "title": "Hello",
            "description": "a valid description",
            "date": "2024-11-01T10:00:00.000Z",
            "userId": "u1",
        }
    ]


def test_unknown_keys_survive_a_rewrite(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps([{"id": 1, "email": "a@x.com", "password": "h", "firstName": "A", "lastName": "B", "role": "admin"}]),
        encoding="utf-8",
    )
    save_collection(path, load_collection(path, UserRecord))
    assert json.loads(path.read_text(encoding="utf-8"))[0]["role"] == "admin"


def test_missing_file(tmp_path):
    path = tmp_path / "nope.json"
    with pytest.raises(CollectionNotFoundError):
        load_collection(path, UserRecord)
    assert load_collection(path, UserRecord, missing_ok=True) == []


def test_empty_collection_is_an_empty_list(tmp_path):
    path = tmp_path / "posts.json"
    path.write_text("[]", encoding="utf-8")
    assert load_collection(path, PostRecord) == []


@pytest.mark.parametrize(
    "content",
    [
        b"not json",
        b'{"id": 1}',
        b'[{"id": "p1", "title": "Hello"}]',
        b'[{"id": "p1", "title": 5, "description": "x", "date": "d", "userId": "u"}]',
        b'[{"id": "\xff\xfe"}]',
    ],
)
def test_malformed_content_fails_closed(tmp_path, content):
    path = tmp_path / "posts.json"
    path.write_bytes(content)
    with pytest.raises(MalformedDataError):
        load_collection(path, PostRecord)


def test_duplicate_ids_are_rejected(tmp_path):
    path = tmp_path / "posts.json"
    path.write_text(json.dumps([_post("p1").model_dump(by_alias=True)] * 2), encoding="utf-8")
    with pytest.raises(MalformedDataError):
        load_collection(path, PostRecord)
    with pytest.raises(DuplicateIdError):
        save_collection(tmp_path / "other.json", [_post("p1"), _post("p1")])
    assert not (tmp_path / "other.json").exists()


def test_failed_write_keeps_previous_content(tmp_path, monkeypatch):
    path = tmp_path / "posts.json"
    save_collection(path, [_post("p1")])
    before = path.read_text(encoding="utf-8")

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(json_storage.os, "replace", _boom)
    with pytest.raises(WriteError):
        save_collection(path, [_post("p1"), _post("p2")])

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["posts.json"]


def test_unencodable_text_is_a_write_error(tmp_path):
    path = tmp_path / "posts.json"
    save_collection(path, [_post("p1")])
    before = path.read_text(encoding="utf-8")

    with pytest.raises(WriteError):
        save_collection(path, [_post("p1"), _post("p2", title="Hello\ud800")])

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["posts.json"]


def test_save_creates_parent_directories(tmp_path):
    path = tmp_path / "data" / "nested" / "users.json"
    save_collection(path, [_user(1)])
    assert load_collection(path, UserRecord) == [_user(1)]


def test_find_one_returns_first_match_in_order():
    records = [_post("p1", title="one"), _post("p2", title="two"), _post("p3", title="two")]
    assert find_one(records, lambda p: p.title == "two").id == "p2"
    assert find_one(records, lambda p: p.title == "three") is None


def test_remove_where_then_find_one_is_not_found():
    records = [_post("p1", user_id="u1"), _post("p2", user_id="u2"), _post("p3", user_id="u1")]

    def predicate(p):
        return p.user_id == "u1"

    remaining = remove_where(records, predicate)
    assert find_one(remaining, predicate) is None
    assert [p.id for p in remaining] == ["p2"]
    assert len(records) == 3


def test_upsert_mutate_without_match_returns_equal_sequence():
    records = [_user(1), _user(2, email="b@x.com")]
    result = upsert_mutate(records, lambda u: u.id == 99, lambda u: u.model_copy(update={"first_name": "X"}))
    assert result == records


def test_upsert_mutate_only_touches_matches():
    records = [_user(1), _user(2, email="b@x.com")]
    result = upsert_mutate(records, lambda u: u.id == 2, lambda u: u.model_copy(update={"first_name": "Grace"}))
    assert result[0] == records[0]
    assert result[1].first_name == "Grace"
    assert records[1].first_name == "Ada"


def test_mutate_aborts_without_writing(tmp_path):
    store = RecordStore(tmp_path / "posts.json", PostRecord)
    store.save([_post("p1")])

    def _fail(records):
        raise LookupError("nope")

    with pytest.raises(LookupError):
        store.mutate(_fail)
    assert store.load() == [_post("p1")]


def test_mutate_creates_missing_collection(tmp_path):
    store = RecordStore(tmp_path / "posts.json", PostRecord)
    store.mutate(lambda records: [*records, _post("p1")])
    assert store.load(missing_ok=False) == [_post("p1")]


def test_concurrent_mutations_keep_both_updates(tmp_path):
    path = tmp_path / "posts.json"
    save_collection(path, [])
    barrier = threading.Barrier(2)
    errors = []

    def _append(post_id):
        store = RecordStore(path, PostRecord)

        def transform(records):
            # widen the window between load and save
            time.sleep(0.05)
            return [*records, _post(post_id)]

        try:
            barrier.wait()
            store.mutate(transform)
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=_append, args=(pid,)) for pid in ("p1", "p2")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sorted(p.id for p in load_collection(path, PostRecord)) == ["p1", "p2"]
