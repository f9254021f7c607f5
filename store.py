"""Document store used by the services.

Documents are plain dicts; every document returned by the store carries its
id under ``"_id"``. Updates may use dotted field paths
(``"activity.total_likes"``) and Firestore transforms
(``firestore.Increment``, ``firestore.ArrayUnion``, ``firestore.ArrayRemove``,
``firestore.DELETE_FIELD``).

Multi-document mutations go through a :class:`UnitOfWork`, which buffers
writes and commits them together when the ``with`` block exits cleanly.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

logger = logging.getLogger(__name__)

USERS = "users"
BLOGS = "blogs"
COMMENTS = "comments"
NOTIFICATIONS = "notifications"

ASC = "asc"
DESC = "desc"

Filter = Tuple[str, str, Any]
Order = Tuple[str, str]


class UnitOfWork:
    def __init__(self, store: "Store"):
        self._store = store
        self.ops: List[Tuple[str, str, str, Optional[Dict[str, Any]]]] = []

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.ops.append(("set", collection, doc_id, data))

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self.ops.append(("update", collection, doc_id, fields))

    def delete(self, collection: str, doc_id: str) -> None:
        self.ops.append(("delete", collection, doc_id, None))

    def commit(self) -> None:
        if self.ops:
            self._store.commit(self.ops)
        self.ops = []


class Store(ABC):
    @abstractmethod
    def new_id(self, collection: str) -> str:
        ...

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def get_many(self, collection: str, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        ...

    @abstractmethod
    def find(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[Order] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        ...

    @abstractmethod
    def commit(self, ops: List[Tuple[str, str, str, Optional[Dict[str, Any]]]]) -> None:
        ...

    def find_one(self, collection: str, filters: Sequence[Filter]) -> Optional[Dict[str, Any]]:
        docs = self.find(collection, filters, limit=1)
        return docs[0] if docs else None

    def exists(self, collection: str, filters: Sequence[Filter]) -> bool:
        return self.find_one(collection, filters) is not None

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        uow = UnitOfWork(self)
        yield uow
        uow.commit()

    def close(self) -> None:
        pass


class FirestoreStore(Store):
    # Firestore rejects batches with more than 500 writes.
    MAX_BATCH_WRITES = 500

    def __init__(self, db):
        self._db = db

    def new_id(self, collection):
        return self._db.collection(collection).document().id

    def get(self, collection, doc_id):
        if not doc_id:
            return None
        snapshot = self._db.collection(collection).document(doc_id).get()
        return self._to_dict(snapshot) if snapshot.exists else None

    def get_many(self, collection, doc_ids):
        refs = [self._db.collection(collection).document(i) for i in set(doc_ids) if i]
        if not refs:
            return {}
        return {
            snapshot.id: self._to_dict(snapshot)
            for snapshot in self._db.get_all(refs)
            if snapshot.exists
        }

    def find(self, collection, filters=(), order_by=(), offset=0, limit=None):
        query = self._query(collection, filters)
        for field, direction in order_by:
            query = query.order_by(
                field,
                direction=firestore.Query.DESCENDING if direction == DESC else firestore.Query.ASCENDING,
            )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_dict(snapshot) for snapshot in query.stream()]

    def count(self, collection, filters=()):
        result = self._query(collection, filters).count(alias="total").get()
        return int(result[0][0].value)

    def commit(self, ops):
        for start in range(0, len(ops), self.MAX_BATCH_WRITES):
            chunk = ops[start:start + self.MAX_BATCH_WRITES]
            if start:
                logger.warning(
                    "Unit of work has %d writes; committing chunk at %d non-atomically", len(ops), start
                )
            batch = self._db.batch()
            for kind, collection, doc_id, data in chunk:
                ref = self._db.collection(collection).document(doc_id)
                if kind == "set":
                    batch.set(ref, data)
                elif kind == "update":
                    batch.update(ref, data)
                else:
                    batch.delete(ref)
            batch.commit()

    def close(self):
        self._db.close()

    def _query(self, collection, filters):
        query = self._db.collection(collection)
        for field, op, value in filters:
            query = query.where(filter=FieldFilter(field, op, value))
        return query

    @staticmethod
    def _to_dict(snapshot):
        data = snapshot.to_dict() or {}
        data["_id"] = snapshot.id
        return data
