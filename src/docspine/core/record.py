"""Attribute-bag records built from raw engine documents.

Tags:
    spine-core, record, attribute-bag, docspine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_INTERNAL = frozenset({"_fields", "_relation_keys"})


def raw_fields(raw: Any) -> dict[str, Any]:
    """Return a fresh dict of fields from an engine document or mapping."""
    if isinstance(raw, Record):
        return raw.to_dict(include_relations=True)
    to_object = getattr(raw, "to_object", None)
    if callable(to_object):
        return dict(to_object())
    if isinstance(raw, Mapping):
        return dict(raw)
    raise TypeError(f"cannot build a record from {type(raw).__name__}")


class Record:
    """A plain bag of fields, readable as attributes or items.

    Relation-derived fields (assigned by include post-processing) are kept
    apart from the stored fields so that :meth:`to_dict` returns only what
    the engine persisted.

    Class attributes win over fields on attribute lookup; use item access
    (``record["model"]``) for a field whose name is also a class attribute.
    """

    __slots__ = ("_fields", "_relation_keys")

    def __init__(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        object.__setattr__(self, "_fields", dict(data or {}))
        object.__setattr__(self, "_relation_keys", set())
        self._fields.update(fields)

    @classmethod
    def from_raw(cls, raw: Any) -> Record:
        return cls(raw_fields(raw))

    def __getattr__(self, name: str) -> Any:
        if name in _INTERNAL:
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} record has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _INTERNAL:
            object.__setattr__(self, name, value)
            return
        self._fields[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._fields[name]
        except KeyError:
            raise AttributeError(name) from None
        self._relation_keys.discard(name)

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._fields[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def set_relation(self, name: str, value: Any) -> None:
        """Assign a relation-derived field."""
        self._fields[name] = value
        self._relation_keys.add(name)

    @property
    def relation_keys(self) -> frozenset[str]:
        return frozenset(self._relation_keys)

    def to_dict(self, *, include_relations: bool = False) -> dict[str, Any]:
        if include_relations:
            return dict(self._fields)
        return {k: v for k, v in self._fields.items() if k not in self._relation_keys}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record) or type(other) is not type(self):
            return NotImplemented
        return self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __getstate__(self) -> tuple[dict[str, Any], set[str]]:
        return self._fields, self._relation_keys

    def __setstate__(self, state: tuple[dict[str, Any], set[str]]) -> None:
        fields, relation_keys = state
        object.__setattr__(self, "_fields", dict(fields))
        object.__setattr__(self, "_relation_keys", set(relation_keys))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fields!r})"


__all__ = ["Record", "raw_fields"]
