"""
Document gateway: CRUD verbs with lifecycle hooks and relation inclusion.

:class:`DocumentGateway` is the base class for "model" classes of a web
backend.  A subclass names its engine handle and, optionally, a relation
registry and hooks; it then gets every CRUD verb as an async classmethod,
and its instances are the records those verbs return.

Manifesto:
    Every collection needs the same verbs, and most need a little extra
    behavior around a few of them (stamp a field before edit, invalidate a
    cache after delete, audit a create).  Overriding each verb for that
    duplicates the delegation code everywhere.  Instead every verb runs the
    same hook sandwich, and subclasses fill in only the hooks they need.

Architecture:
    ::

        caller
          │
          ▼
        Gateway.verb(...)
          │ before_* hook        (may mutate / replace input)
          │ engine call          (model.find / model.create / ...)
          │ populate_includes    (find family only)
          │ wrap + postprocess   (records only)
          │ after_* hook         (observes input and outcome)
          ▼
        result  (record, list of records, raw engine result, or None)

    No state is kept across calls.  Engine errors and hook errors propagate
    unchanged and abort the rest of the call.

Examples:
    >>> class Post(DocumentGateway):
    ...     model = engine.model("posts")
    ...     relations = {
    ...         "tags": "populate",
    ...         "author": {"path": "_id", "transform": lambda id: f"user/{id}"},
    ...     }
    ...
    ...     @classmethod
    ...     async def after_delete(cls, target, removed):
    ...         await cache.invalidate(removed)
    >>> posts = await Post.find({"where": {"draft": False}, "limit": 10}, ["author"])
    >>> posts[0].author
    'user/u1'

Tags:
    gateway, crud, hooks, relations, document-store, docspine

Doc-Types:
    - API Reference
    - Extension Guide
"""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from docspine.core.errors import MissingModelError
from docspine.core.filters import Filter
from docspine.core.hooks import HookSet, collect_hooks, run_hook
from docspine.core.logging import LogContext, get_logger
from docspine.core.protocols import EngineModel
from docspine.core.record import Record, raw_fields
from docspine.core.relations import (
    RelationRegistry,
    apply_include_postprocessing,
    populate_includes,
)

logger = get_logger(__name__)

G = TypeVar("G", bound="DocumentGateway")

# Returned by update_many when before_edit leaves nothing to write.
EMPTY_UPDATE: Mapping[str, int] = {"nModified": 0}


@dataclass(frozen=True)
class GatewayConfig:
    """Per-class configuration resolved when a gateway class is defined."""

    name: str
    relations: RelationRegistry
    hooks: HookSet


def _verb(name: str) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Run a gateway verb inside a ``gateway``/``verb`` log context."""

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(cls: type[DocumentGateway], *args: Any, **kwargs: Any) -> Any:
            async with LogContext(gateway=cls.__name__, verb=name):
                return await func(cls, *args, **kwargs)

        return wrapper

    return decorator


def _removed(result: Any) -> list[Any]:
    return [result] if result else []


class DocumentGateway(Record):
    """Base class for gateway-backed record types.

    Class attributes:
        model: Engine handle (see :class:`~docspine.core.protocols.EngineModel`).
            Required before the first verb call; may be bound after the
            class is defined.
        relations: Relation registry declaration, validated at class
            definition and replaced by a :class:`RelationRegistry`.
        hooks: Optional :class:`HookSet`; hook classmethods on the class
            take precedence.

    Stored fields are read as attributes unless the name is also a class
    member (``count``, ``model``, ``find``, ``get``, ``save``...); in that case
    the member wins and the field is read with ``record["count"]``.
    """

    model: ClassVar[EngineModel | None] = None
    relations: ClassVar[Mapping[str, Any]] = RelationRegistry()
    hooks: ClassVar[HookSet | None] = None
    __gateway__: ClassVar[GatewayConfig]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        registry = RelationRegistry.build(cls.relations, gateway=cls.__name__)
        cls.relations = registry
        cls.__gateway__ = GatewayConfig(
            name=cls.__name__,
            relations=registry,
            hooks=collect_hooks(cls, cls.hooks),
        )

    # -- internals -----------------------------------------------------------

    @classmethod
    def _engine(cls) -> EngineModel:
        if cls.model is None:
            raise MissingModelError(cls.__name__)
        return cls.model

    @classmethod
    def _wrap(cls: type[G], raw: Any, include: Iterable[str] = ()) -> G:
        record = cls(raw_fields(raw))
        apply_include_postprocessing(record, cls.__gateway__.relations, include)
        return record

    # -- find family ---------------------------------------------------------

    @classmethod
    @_verb("find")
    async def find(
        cls: type[G],
        filter: Filter | Mapping[str, Any] | None = None,
        include: Iterable[str] | None = None,
    ) -> list[G]:
        """Fetch records matching ``filter.where`` with sort/skip/limit applied."""
        criteria = Filter.coerce(filter)
        include = list(include or [])
        hooks = cls.__gateway__.hooks
        if hooks.before_find is not None:
            await run_hook(hooks.before_find, criteria, include)

        query = criteria.apply(cls._engine().find(criteria.where))
        query = populate_includes(query, cls.__gateway__.relations, include)
        docs = await query.exec()

        records = [cls._wrap(doc, include) for doc in docs or []]
        if hooks.after_find is not None:
            await run_hook(hooks.after_find, records)
        logger.debug("find_completed", count=len(records), include=include)
        return records

    @classmethod
    @_verb("count")
    async def count(cls, filter: Filter | Mapping[str, Any] | None = None) -> int:
        """Count documents matching ``filter.where``; skip/limit apply, sort does not."""
        criteria = Filter.coerce(filter)
        hooks = cls.__gateway__.hooks
        if hooks.before_find is not None:
            await run_hook(hooks.before_find, criteria, [])

        query = criteria.apply_pagination(cls._engine().count_documents(criteria.where))
        return await query.exec()

    @classmethod
    @_verb("find_one")
    async def find_one(
        cls: type[G],
        where: Any = None,
        include: Iterable[str] | None = None,
    ) -> G | None:
        """Fetch the first matching record, or ``None`` (after_find is skipped then)."""
        where = {} if where is None else where
        include = list(include or [])
        hooks = cls.__gateway__.hooks
        if hooks.before_find is not None:
            await run_hook(hooks.before_find, where, include)

        query = populate_includes(cls._engine().find_one(where), cls.__gateway__.relations, include)
        doc = await query.exec()
        if not doc:
            return None

        record = cls._wrap(doc, include)
        if hooks.after_find is not None:
            await run_hook(hooks.after_find, record)
        return record

    @classmethod
    @_verb("find_by_id")
    async def find_by_id(cls: type[G], id: Any, include: Iterable[str] | None = None) -> G | None:
        """Fetch by primary key, or ``None``.  Runs no hooks."""
        include = list(include or [])
        query = populate_includes(cls._engine().find_by_id(id), cls.__gateway__.relations, include)
        doc = await query.exec()
        if not doc:
            return None
        return cls._wrap(doc, include)

    @classmethod
    @_verb("exists")
    async def exists(cls, where: Any = None) -> bool:
        where = {} if where is None else where
        hooks = cls.__gateway__.hooks
        if hooks.before_find is not None:
            await run_hook(hooks.before_find, where, [])
        return bool(await cls._engine().exists(where))

    # -- edit family ---------------------------------------------------------

    @classmethod
    @_verb("find_by_id_and_update")
    async def find_by_id_and_update(
        cls,
        id: Any,
        data: Any = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Update by primary key.  ``before_edit`` returns the data to write."""
        data = {} if data is None else data
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_edit is not None:
            data = await run_hook(hooks.before_edit, id, data, options)

        result = await cls._engine().find_by_id_and_update(id, data, options)
        if hooks.after_edit is not None:
            await run_hook(hooks.after_edit, id, result)
        return result

    @classmethod
    @_verb("find_one_and_update")
    async def find_one_and_update(
        cls,
        where: Any = None,
        data: Any = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        return await cls._edit_one("find_one_and_update", where, data, options)

    @classmethod
    @_verb("find_one_and_replace")
    async def find_one_and_replace(
        cls,
        where: Any = None,
        data: Any = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        return await cls._edit_one("find_one_and_replace", where, data, options)

    @classmethod
    async def _edit_one(cls, operation: str, where: Any, data: Any, options: dict[str, Any] | None) -> Any:
        where = {} if where is None else where
        data = {} if data is None else data
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_edit is not None:
            data = await run_hook(hooks.before_edit, where, data, options)

        result = await getattr(cls._engine(), operation)(where, data, options)
        if hooks.after_edit is not None:
            await run_hook(hooks.after_edit, where, result)
        return result

    @classmethod
    @_verb("update_many")
    async def update_many(
        cls,
        where: Any = None,
        data: Any = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Update every match.  Nothing is written if ``data`` ends up falsy."""
        where = {} if where is None else where
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_edit is not None:
            data = await run_hook(hooks.before_edit, where, data, options)
        if not data:
            logger.debug("update_skipped", reason="no data")
            return dict(EMPTY_UPDATE)

        result = await cls._engine().update_many(where, data, options)
        if hooks.after_edit is not None:
            await run_hook(hooks.after_edit, where, result)
        return result

    # -- delete family -------------------------------------------------------

    @classmethod
    @_verb("find_by_id_and_delete")
    async def find_by_id_and_delete(cls, id: Any, options: dict[str, Any] | None = None) -> Any:
        """Delete by primary key; returns the removed document or ``None``."""
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_delete is not None:
            await run_hook(hooks.before_delete, id)

        result = await cls._engine().find_by_id_and_delete(id, options)
        if hooks.after_delete is not None:
            await run_hook(hooks.after_delete, {"_id": id}, _removed(result))
        return result

    @classmethod
    @_verb("find_one_and_delete")
    async def find_one_and_delete(cls, where: Any = None, options: dict[str, Any] | None = None) -> Any:
        where = {} if where is None else where
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_delete is not None:
            await run_hook(hooks.before_delete, where, options)

        result = await cls._engine().find_one_and_delete(where, options)
        if hooks.after_delete is not None:
            await run_hook(hooks.after_delete, where, _removed(result))
        return result

    @classmethod
    @_verb("delete_one")
    async def delete_one(cls, where: Any = None, options: dict[str, Any] | None = None) -> Any:
        where = {} if where is None else where
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_delete is not None:
            await run_hook(hooks.before_delete, where, options)

        result = await cls._engine().delete_one(where, options)
        if hooks.after_delete is not None:
            await run_hook(hooks.after_delete, where, [result] if result else result)
        return result

    @classmethod
    @_verb("delete_many")
    async def delete_many(cls, where: Any = None, options: dict[str, Any] | None = None) -> Any:
        """Delete every match.

        With an ``after_delete`` hook the matches are fetched first; the hook
        receives them and they are returned in place of the engine summary.
        """
        where = {} if where is None else where
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_delete is not None:
            await run_hook(hooks.before_delete, where, options)

        engine = cls._engine()
        if hooks.after_delete is None:
            return await engine.delete_many(where, options)

        removed = list(await engine.find(where).exec() or [])
        logger.debug("delete_prefetched", count=len(removed))
        await engine.delete_many(where, options)
        await run_hook(hooks.after_delete, where, removed)
        return removed

    # -- create --------------------------------------------------------------

    @classmethod
    @_verb("create")
    async def create(cls: type[G], data: Any, options: dict[str, Any] | None = None) -> G | list[G]:
        """Create one document, or many when ``data`` is a list."""
        options = {} if options is None else options
        hooks = cls.__gateway__.hooks
        if hooks.before_create is not None:
            data = await run_hook(hooks.before_create, data)

        try:
            created = await cls._engine().create(data, options)
        except Exception:
            logger.exception("create_failed")
            raise

        if isinstance(created, (list, tuple)):
            item: G | list[G] = [cls._wrap(doc) for doc in created]
        else:
            item = cls._wrap(created)

        if hooks.after_create is not None:
            await run_hook(hooks.after_create, data, item)
        return item

    # -- instance verbs ------------------------------------------------------

    async def save(self, options: dict[str, Any] | None = None) -> Any:
        """Write this record's stored fields back by ``_id``.

        Goes straight to the engine; no hooks run.
        """
        engine = type(self)._engine()
        return await engine.find_by_id_and_update(self._id, self.to_dict(), options or {})

    async def delete(self, options: dict[str, Any] | None = None) -> Any:
        """Delete this record by ``_id``.  No hooks run."""
        return await type(self)._engine().find_by_id_and_delete(self._id, options or {})


DocumentGateway.__gateway__ = GatewayConfig(
    name=DocumentGateway.__name__,
    relations=RelationRegistry(),
    hooks=HookSet(),
)


__all__ = ["DocumentGateway", "GatewayConfig", "EMPTY_UPDATE"]
