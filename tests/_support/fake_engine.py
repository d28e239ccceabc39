"""
In-memory stand-in for a document-store engine.

Implements the :mod:`docspine.core.protocols` contract over plain dicts so
gateway behavior can be asserted without a database.  Every query records
its chain calls (``sort``, ``skip``, ``limit``, ``populate``) and every
model records the verbs it received.

Usage in test code::

    from tests._support.fake_engine import FakeModel

    tags = FakeModel([{"_id": "t1", "label": "python"}])
    posts = FakeModel([{"_id": "p1", "tags": ["t1"]}], refs={"tags": tags})
    posts.fail("create", RuntimeError("duplicate key"))
"""

from __future__ import annotations

import copy
import itertools
from typing import Any


class FakeDocument:
    """Raw engine document; only ``to_object()`` is part of the contract."""

    def __init__(self, data: dict[str, Any]):
        self._data = data

    def to_object(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FakeDocument):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        return f"FakeDocument({self._data!r})"


def _matches(doc: dict[str, Any], where: Any) -> bool:
    return all(doc.get(key) == value for key, value in (where or {}).items())


class FakeQuery:
    """Chainable query; ``exec()`` resolves against the model's store."""

    def __init__(self, model: FakeModel, kind: str, where: Any):
        self.model = model
        self.kind = kind
        self.where = where
        self.calls: list[tuple[str, Any]] = []
        self.executed = False

    def sort(self, spec: Any) -> FakeQuery:
        self.calls.append(("sort", spec))
        return self

    def skip(self, count: int) -> FakeQuery:
        self.calls.append(("skip", count))
        return self

    def limit(self, count: int) -> FakeQuery:
        self.calls.append(("limit", count))
        return self

    def populate(self, spec: Any) -> FakeQuery:
        self.calls.append(("populate", spec))
        return self

    def call_args(self, name: str) -> list[Any]:
        return [arg for call, arg in self.calls if call == name]

    def _populate(self, data: dict[str, Any]) -> dict[str, Any]:
        for spec in self.call_args("populate"):
            if not isinstance(spec, str) or spec not in self.model.refs or spec not in data:
                continue
            ref = self.model.refs[spec]
            value = data[spec]
            if isinstance(value, list):
                data[spec] = [ref.store[v] for v in value if v in ref.store]
            else:
                data[spec] = ref.store.get(value)
        return data

    def _selected(self) -> list[dict[str, Any]]:
        docs = [d for d in self.model.store.values() if _matches(d, self.where)]
        for spec in self.call_args("sort"):
            for key, direction in reversed(list(spec.items())):
                docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        for count in self.call_args("skip"):
            docs = docs[count:]
        for count in self.call_args("limit"):
            docs = docs[:count]
        return docs

    async def exec(self) -> Any:
        self.executed = True
        self.model.check("exec")
        if self.kind == "count":
            return len(self._selected())
        docs = [FakeDocument(self._populate(copy.deepcopy(d))) for d in self._selected()]
        if self.kind == "many":
            return docs
        return docs[0] if docs else None


class FakeModel:
    """Engine handle over an ``_id``-keyed dict."""

    _ids = itertools.count(1)

    def __init__(
        self,
        documents: list[dict[str, Any]] | None = None,
        *,
        refs: dict[str, FakeModel] | None = None,
    ):
        self.store: dict[Any, dict[str, Any]] = {}
        for doc in documents or []:
            self.store[doc["_id"]] = copy.deepcopy(doc)
        self.refs = refs or {}
        self.queries: list[FakeQuery] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._failures: dict[str, Exception] = {}

    # -- test controls ---------------------------------------------------------

    def fail(self, verb: str, error: Exception) -> None:
        self._failures[verb] = error

    def check(self, verb: str) -> None:
        if verb in self._failures:
            raise self._failures[verb]

    def verbs(self) -> list[str]:
        return [name for name, _ in self.calls]

    @property
    def last_query(self) -> FakeQuery:
        return self.queries[-1]

    def _record(self, verb: str, *args: Any) -> None:
        self.calls.append((verb, args))
        self.check(verb)

    def _query(self, kind: str, where: Any) -> FakeQuery:
        query = FakeQuery(self, kind, where)
        self.queries.append(query)
        return query

    def _first(self, where: Any) -> dict[str, Any] | None:
        return next((d for d in self.store.values() if _matches(d, where)), None)

    def _insert(self, data: dict[str, Any]) -> FakeDocument:
        doc = copy.deepcopy(data)
        doc.setdefault("_id", f"id{next(self._ids)}")
        self.store[doc["_id"]] = doc
        return FakeDocument(copy.deepcopy(doc))

    # -- query builders --------------------------------------------------------

    def find(self, where: Any) -> FakeQuery:
        self._record("find", where)
        return self._query("many", where)

    def find_one(self, where: Any) -> FakeQuery:
        self._record("find_one", where)
        return self._query("one", where)

    def find_by_id(self, id: Any) -> FakeQuery:
        self._record("find_by_id", id)
        return self._query("one", {"_id": id})

    def count_documents(self, where: Any) -> FakeQuery:
        self._record("count_documents", where)
        return self._query("count", where)

    # -- awaitable verbs -------------------------------------------------------

    async def exists(self, where: Any) -> Any:
        self._record("exists", where)
        doc = self._first(where)
        return {"_id": doc["_id"]} if doc else None

    async def create(self, data: Any, options: dict[str, Any]) -> Any:
        self._record("create", data, options)
        if isinstance(data, list):
            return [self._insert(item) for item in data]
        return self._insert(data)

    async def find_by_id_and_update(self, id: Any, data: Any, options: dict[str, Any]) -> Any:
        self._record("find_by_id_and_update", id, data, options)
        return self._update(self.store.get(id), data, options)

    async def find_one_and_update(self, where: Any, data: Any, options: dict[str, Any]) -> Any:
        self._record("find_one_and_update", where, data, options)
        return self._update(self._first(where), data, options)

    async def find_one_and_replace(self, where: Any, data: Any, options: dict[str, Any]) -> Any:
        self._record("find_one_and_replace", where, data, options)
        doc = self._first(where)
        if doc is None:
            return None
        replaced = {"_id": doc["_id"], **copy.deepcopy(data)}
        self.store[doc["_id"]] = replaced
        return FakeDocument(copy.deepcopy(replaced))

    def _update(self, doc: dict[str, Any] | None, data: Any, options: dict[str, Any]) -> Any:
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        doc.update(copy.deepcopy(data or {}))
        return FakeDocument(copy.deepcopy(doc if options.get("new") else before))

    async def find_by_id_and_delete(self, id: Any, options: dict[str, Any]) -> Any:
        self._record("find_by_id_and_delete", id, options)
        doc = self.store.pop(id, None)
        return FakeDocument(doc) if doc is not None else None

    async def find_one_and_delete(self, where: Any, options: dict[str, Any]) -> Any:
        self._record("find_one_and_delete", where, options)
        doc = self._first(where)
        if doc is None:
            return None
        return FakeDocument(self.store.pop(doc["_id"]))

    async def delete_one(self, where: Any, options: dict[str, Any]) -> Any:
        self._record("delete_one", where, options)
        doc = self._first(where)
        if doc is None:
            return {"deletedCount": 0}
        del self.store[doc["_id"]]
        return {"deletedCount": 1}

    async def delete_many(self, where: Any, options: dict[str, Any]) -> Any:
        self._record("delete_many", where, options)
        doomed = [key for key, d in self.store.items() if _matches(d, where)]
        for key in doomed:
            del self.store[key]
        return {"deletedCount": len(doomed)}

    async def update_many(self, where: Any, data: Any, options: dict[str, Any]) -> Any:
        self._record("update_many", where, data, options)
        matched = [d for d in self.store.values() if _matches(d, where)]
        for doc in matched:
            doc.update(copy.deepcopy(data))
        return {"nModified": len(matched)}
