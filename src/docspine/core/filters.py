"""Find/count filter: ``where`` conditions plus pagination and sort.

Tags:
    spine-core, filter, pagination, docspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from docspine.core.protocols import EngineQuery


@dataclass
class Filter:
    """Per-call find parameters.

    Shapes are not validated; ``where`` and ``sort`` go to the engine as
    given.  A falsy ``skip``/``limit`` (``None`` or ``0``) means "not
    requested".  Mutable so that ``before_find`` hooks can adjust it.
    """

    where: Any = field(default_factory=dict)
    skip: Any = None
    limit: Any = None
    sort: Any = None

    @classmethod
    def coerce(cls, value: Filter | Mapping[str, Any] | None) -> Filter:
        """Accept ``None``, a Filter, or a ``{where, skip, limit, sort}`` mapping.

        Keys other than those four are ignored.
        """
        if value is None:
            return cls()
        if isinstance(value, Filter):
            return value
        if isinstance(value, Mapping):
            where = value.get("where")
            return cls(
                where={} if where is None else where,
                skip=value.get("skip"),
                limit=value.get("limit"),
                sort=value.get("sort"),
            )
        raise TypeError(f"filter must be a Filter or mapping, not {type(value).__name__}")

    def apply_pagination(self, query: EngineQuery) -> EngineQuery:
        if self.skip:
            query = query.skip(int(self.skip))
        if self.limit:
            query = query.limit(int(self.limit))
        return query

    def apply(self, query: EngineQuery) -> EngineQuery:
        """Chain sort, skip and limit onto ``query`` (each only when truthy)."""
        if self.sort:
            query = query.sort(self.sort)
        return self.apply_pagination(query)


__all__ = ["Filter"]
