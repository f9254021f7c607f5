from unittest.mock import MagicMock

import pytest
from firebase_admin import firestore

from store import BLOGS, DESC, FirestoreStore


def snapshot(doc_id, data, exists=True):
    snap = MagicMock()
    snap.id = doc_id
    snap.exists = exists
    snap.to_dict.return_value = data
    return snap


def test_get_adds_document_id():
    db = MagicMock()
    db.collection.return_value.document.return_value.get.return_value = snapshot("abc", {"title": "Hi"})

    assert FirestoreStore(db).get(BLOGS, "abc") == {"title": "Hi", "_id": "abc"}
    db.collection.assert_called_with(BLOGS)


def test_get_missing_document():
    db = MagicMock()
    db.collection.return_value.document.return_value.get.return_value = snapshot("abc", None, exists=False)

    assert FirestoreStore(db).get(BLOGS, "abc") is None


def test_find_builds_query():
    db = MagicMock()
    query = db.collection.return_value
    query.where.return_value = query
    query.order_by.return_value = query
    query.offset.return_value = query
    query.limit.return_value = query
    query.stream.return_value = [snapshot("one", {"draft": False})]

    docs = FirestoreStore(db).find(
        BLOGS, [("draft", "==", False)], order_by=[("publishedAt", DESC)], offset=10, limit=5
    )

    assert docs == [{"draft": False, "_id": "one"}]
    assert query.where.call_count == 1
    query.order_by.assert_called_once_with("publishedAt", direction=firestore.Query.DESCENDING)
    query.offset.assert_called_once_with(10)
    query.limit.assert_called_once_with(5)


def test_unit_of_work_commits_one_batch():
    db = MagicMock()
    store = FirestoreStore(db)

    with store.unit_of_work() as uow:
        uow.set(BLOGS, "a", {"title": "A"})
        uow.update(BLOGS, "b", {"activity.total_likes": firestore.Increment(1)})
        uow.delete(BLOGS, "c")

    batch = db.batch.return_value
    assert db.batch.call_count == 1
    assert batch.set.call_count == 1
    assert batch.update.call_count == 1
    assert batch.delete.call_count == 1
    batch.commit.assert_called_once_with()


def test_unit_of_work_is_discarded_on_error():
    db = MagicMock()
    store = FirestoreStore(db)

    with pytest.raises(RuntimeError):
        with store.unit_of_work() as uow:
            uow.delete(BLOGS, "a")
            raise RuntimeError("boom")

    db.batch.assert_not_called()


def test_large_unit_of_work_is_chunked():
    db = MagicMock()
    store = FirestoreStore(db)

    with store.unit_of_work() as uow:
        for i in range(FirestoreStore.MAX_BATCH_WRITES + 1):
            uow.delete(BLOGS, f"post-{i}")

    assert db.batch.call_count == 2
    assert db.batch.return_value.commit.call_count == 2
