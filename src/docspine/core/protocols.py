"""
Canonical protocol definitions for the persistence-engine boundary.

docspine never talks to a data store directly.  It drives an engine
``model`` object that builds chainable queries and executes CRUD verbs.
This module is the single definition of that contract; gateways, relation
helpers and tests all type against it.

Architecture:
    ::

        EngineModel                       EngineQuery
        ┌─────────────────────────────┐   ┌──────────────────────────┐
        │ find(where)        → Query  │   │ sort(spec)      → Query  │
        │ find_one(where)    → Query  │   │ skip(n)         → Query  │
        │ find_by_id(id)     → Query  │   │ limit(n)        → Query  │
        │ count_documents(w) → Query  │   │ populate(spec)  → Query  │
        │ exists / create / *_update  │   │ await exec()    → raw    │
        │ *_delete / update_many      │   └──────────────────────────┘
        │ (all awaitable)             │
        └─────────────────────────────┘   RawDocument.to_object() → dict

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; engines live in the application

Tags:
    protocol, engine, query, document-store, docspine, contracts
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RawDocument(Protocol):
    """A document as returned by the engine, before wrapping."""

    def to_object(self) -> dict[str, Any]:
        """Return a plain dict copy of the document's fields."""
        ...


@runtime_checkable
class EngineQuery(Protocol):
    """Chainable, not-yet-executed engine query.

    Chain methods may mutate the query in place or return a new query; the
    gateway always keeps the returned value.
    """

    def sort(self, spec: Any) -> EngineQuery: ...

    def skip(self, count: int) -> EngineQuery: ...

    def limit(self, count: int) -> EngineQuery: ...

    def populate(self, spec: Any) -> EngineQuery: ...

    async def exec(self) -> Any:
        """Execute and return raw document(s), a count, or ``None``."""
        ...


@runtime_checkable
class EngineModel(Protocol):
    """Engine handle for one collection, bound to a gateway as ``model``."""

    def find(self, where: Any) -> EngineQuery: ...

    def find_one(self, where: Any) -> EngineQuery: ...

    def find_by_id(self, id: Any) -> EngineQuery: ...

    def count_documents(self, where: Any) -> EngineQuery: ...

    async def exists(self, where: Any) -> Any: ...

    async def create(self, data: Any, options: dict[str, Any]) -> Any: ...

    async def find_by_id_and_update(self, id: Any, data: Any, options: dict[str, Any]) -> Any: ...

    async def find_by_id_and_delete(self, id: Any, options: dict[str, Any]) -> Any: ...

    async def find_one_and_update(self, where: Any, data: Any, options: dict[str, Any]) -> Any: ...

    async def find_one_and_replace(self, where: Any, data: Any, options: dict[str, Any]) -> Any: ...

    async def find_one_and_delete(self, where: Any, options: dict[str, Any]) -> Any: ...

    async def delete_one(self, where: Any, options: dict[str, Any]) -> Any: ...

    async def delete_many(self, where: Any, options: dict[str, Any]) -> Any: ...

    async def update_many(self, where: Any, data: Any, options: dict[str, Any]) -> Any: ...


__all__ = [
    "RawDocument",
    "EngineQuery",
    "EngineModel",
]
