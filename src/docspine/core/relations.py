"""
Declarative relation inclusion for gateway finds.

A gateway declares a relation registry: relation name → descriptor.  A
caller passes an include list of names per find call.  Inclusion runs in
two phases:

1. :func:`populate_includes` augments the in-flight engine query so the
   related documents are fetched alongside the primary one.
2. :func:`apply_include_postprocessing` runs after the raw document has
   been wrapped in a record and copies (optionally transforming) each
   configured relation's source field onto the record under the
   relation's name.

Architecture:
    ::

        RelationRegistry {name: descriptor}
        ┌──────────────────────────────────────────────────────────────┐
        │ Populate()               query.populate(name)               │
        │                          data lands at its natural field    │
        │                          post-processing: untouched         │
        ├──────────────────────────────────────────────────────────────┤
        │ Include(path, transform) query.populate(descriptor)         │
        │                          post-processing:                   │
        │                          record[name] = transform(raw[path])│
        └──────────────────────────────────────────────────────────────┘

    Names in the include list that are absent from the registry are
    skipped silently in both phases.

Examples:
    >>> registry = RelationRegistry.build({
    ...     "tags": "populate",
    ...     "author": {"path": "_id", "transform": lambda id: f"user/{id}"},
    ... })
    >>> registry["tags"]
    Populate()
    >>> registry["author"].path
    '_id'

Tags:
    relations, populate, eager-loading, registry, docspine
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from docspine.core.errors import RelationDefinitionError
from docspine.core.protocols import EngineQuery
from docspine.core.record import Record

POPULATE = "populate"


@dataclass(frozen=True)
class Populate:
    """Populate the field named after the relation using its default shape."""


@dataclass(frozen=True)
class Include:
    """Copy ``path`` from the fetched document, optionally through ``transform``.

    ``options`` carries any extra engine population settings (field
    selection, nested population) and travels to the engine with the
    descriptor.
    """

    path: str
    transform: Callable[[Any], Any] | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def resolve(self, fields: Mapping[str, Any]) -> Any:
        value = fields.get(self.path)
        if self.transform is not None:
            return self.transform(value)
        return value


RelationDescriptor = Union[Populate, Include]


def as_descriptor(name: str, value: Any, *, gateway: str | None = None) -> RelationDescriptor:
    """Normalize one registry entry, accepting the declaration shorthands.

    ``"populate"`` becomes :class:`Populate`; a mapping with a string
    ``path`` becomes :class:`Include`.  Anything else raises
    :class:`RelationDefinitionError`.
    """
    if isinstance(value, (Populate, Include)):
        return value
    if isinstance(value, str):
        if value == POPULATE:
            return Populate()
        raise RelationDefinitionError(name, gateway=gateway, value=value)
    if isinstance(value, Mapping):
        path = value.get("path")
        transform = value.get("transform")
        if not isinstance(path, str) or not path:
            raise RelationDefinitionError(name, gateway=gateway, value=value)
        if transform is not None and not callable(transform):
            raise RelationDefinitionError(name, gateway=gateway, value=value)
        options = {k: v for k, v in value.items() if k not in ("path", "transform")}
        return Include(path=path, transform=transform, options=MappingProxyType(options))
    raise RelationDefinitionError(name, gateway=gateway, value=value)


class RelationRegistry(Mapping[str, RelationDescriptor]):
    """Immutable mapping of relation name to descriptor."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, RelationDescriptor] | None = None) -> None:
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def build(
        cls,
        relations: Mapping[str, Any] | None = None,
        *,
        gateway: str | None = None,
    ) -> RelationRegistry:
        """Validate a declared registry; broken entries raise immediately."""
        if isinstance(relations, RelationRegistry):
            return relations
        return cls({
            name: as_descriptor(name, value, gateway=gateway)
            for name, value in (relations or {}).items()
        })

    def __getitem__(self, name: str) -> RelationDescriptor:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RelationRegistry({dict(self._entries)!r})"


def populate_includes(
    query: EngineQuery,
    registry: Mapping[str, Any],
    include: Iterable[str] | None,
) -> EngineQuery:
    """Chain a ``populate`` onto ``query`` for every registered included name.

    Returns the (possibly new) query; does not execute it.
    """
    for name in include or ():
        entry = registry.get(name)
        if entry is None:
            continue
        descriptor = as_descriptor(name, entry)
        if isinstance(descriptor, Populate):
            query = query.populate(name)
        else:
            query = query.populate(descriptor)
    return query


def apply_include_postprocessing(
    record: Record,
    registry: Mapping[str, Any],
    include: Iterable[str] | None,
) -> Record:
    """Assign every included :class:`Include` relation onto ``record`` in place.

    Source values are read from a snapshot of the record taken before any
    assignment, so one relation never sees another's output.
    """
    source: dict[str, Any] | None = None
    for name in include or ():
        entry = registry.get(name)
        if entry is None:
            continue
        descriptor = as_descriptor(name, entry)
        if not isinstance(descriptor, Include):
            continue
        if source is None:
            source = record.to_dict(include_relations=True)
        record.set_relation(name, descriptor.resolve(source))
    return record


__all__ = [
    "POPULATE",
    "Populate",
    "Include",
    "RelationDescriptor",
    "RelationRegistry",
    "as_descriptor",
    "populate_includes",
    "apply_include_postprocessing",
]
