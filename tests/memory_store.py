"""In-memory Store used by the tests.

Applies the Firestore transforms the services use, and commits a unit of
work all-or-nothing like a Firestore write batch.
"""

import copy
import itertools
from collections import defaultdict

from firebase_admin import firestore

from store import DESC, Store

MISSING = object()


def get_path(doc, path):
    value = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return MISSING
        value = value[part]
    return value


def apply_field(doc, path, value):
    *parents, leaf = path.split(".")
    target = doc
    for part in parents:
        target = target.setdefault(part, {})

    if value is firestore.DELETE_FIELD:
        target.pop(leaf, None)
    elif isinstance(value, firestore.Increment):
        target[leaf] = target.get(leaf, 0) + value.value
    elif isinstance(value, firestore.ArrayUnion):
        current = list(target.get(leaf, []))
        current.extend(v for v in value.values if v not in current)
        target[leaf] = current
    elif isinstance(value, firestore.ArrayRemove):
        target[leaf] = [v for v in target.get(leaf, []) if v not in value.values]
    else:
        target[leaf] = copy.deepcopy(value)


def matches(doc, field, op, expected):
    value = get_path(doc, field)
    if value is MISSING:
        return False
    if op == "==":
        return value == expected
    if op == ">=":
        return value >= expected
    if op == "<=":
        return value <= expected
    if op == "in":
        return value in expected
    if op == "array_contains":
        return expected in value
    if op == "array_contains_any":
        return any(v in value for v in expected)
    raise ValueError(f"unsupported operator {op}")


class MemoryStore(Store):
    def __init__(self):
        self.collections = defaultdict(dict)
        self.commits = 0
        self._ids = itertools.count(1)

    def new_id(self, collection):
        return f"{collection}-{next(self._ids)}"

    def put(self, collection, doc_id, data):
        self.collections[collection][doc_id] = copy.deepcopy(data)

    def raw(self, collection, doc_id):
        return self.collections[collection].get(doc_id)

    def get(self, collection, doc_id):
        doc = self.collections[collection].get(doc_id)
        if doc is None:
            return None
        return dict(copy.deepcopy(doc), _id=doc_id)

    def get_many(self, collection, doc_ids):
        found = {}
        for doc_id in doc_ids:
            doc = self.get(collection, doc_id) if doc_id else None
            if doc is not None:
                found[doc_id] = doc
        return found

    def _matching(self, collection, filters):
        return [
            dict(copy.deepcopy(doc), _id=doc_id)
            for doc_id, doc in self.collections[collection].items()
            if all(matches(doc, *f) for f in filters)
        ]

    def find(self, collection, filters=(), order_by=(), offset=0, limit=None):
        docs = self._matching(collection, filters)
        for field, _ in order_by:
            docs = [doc for doc in docs if get_path(doc, field) is not MISSING]
        for field, direction in reversed(list(order_by)):
            docs.sort(key=lambda doc: get_path(doc, field), reverse=direction == DESC)
        docs = docs[offset:]
        return docs if limit is None else docs[:limit]

    def count(self, collection, filters=()):
        return len(self._matching(collection, filters))

    def commit(self, ops):
        staged = copy.deepcopy(self.collections)
        for kind, collection, doc_id, data in ops:
            docs = staged[collection]
            if kind == "set":
                doc = {}
                for key, value in data.items():
                    apply_field(doc, key, value)
                docs[doc_id] = doc
            elif kind == "update":
                if doc_id not in docs:
                    raise LookupError(f"No document to update: {collection}/{doc_id}")
                for key, value in data.items():
                    apply_field(docs[doc_id], key, value)
            else:
                docs.pop(doc_id, None)
        self.collections = staged
        self.commits += 1
