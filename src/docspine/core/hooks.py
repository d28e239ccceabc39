"""Lifecycle hooks for gateway verbs.

Hooks are resolved once, when a gateway class is defined, into a frozen
:class:`HookSet`.  At call time the gateway only checks a field for
``None``.

Declaring hooks::

    class Post(DocumentGateway):
        model = posts

        @classmethod
        async def before_edit(cls, target, data, options):
            return {**data, "edited": True}

    # or, equivalently
    class Post(DocumentGateway):
        model = posts
        hooks = HookSet(before_edit=stamp_edit)

Class members override ``hooks`` entries of the same name, and a member set
to ``None`` switches an inherited hook off.

Tags:
    spine-core, hooks, lifecycle, docspine
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, fields, replace
from typing import Any

from docspine.core.errors import HookDefinitionError

Hook = Callable[..., Any]

HOOK_NAMES: tuple[str, ...] = (
    "before_find",
    "after_find",
    "before_create",
    "after_create",
    "before_edit",
    "after_edit",
    "before_delete",
    "after_delete",
)


@dataclass(frozen=True)
class HookSet:
    """Optional callbacks around each gateway verb."""

    before_find: Hook | None = None
    after_find: Hook | None = None
    before_create: Hook | None = None
    after_create: Hook | None = None
    before_edit: Hook | None = None
    after_edit: Hook | None = None
    before_delete: Hook | None = None
    after_delete: Hook | None = None

    def defined(self) -> tuple[str, ...]:
        """Names of the hooks that are set."""
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not None)


def collect_hooks(cls: type, declared: HookSet | None = None) -> HookSet:
    """Build the hook set for ``cls`` from ``declared`` and its class members."""
    if declared is not None and not isinstance(declared, HookSet):
        raise HookDefinitionError(
            "hooks",
            gateway=cls.__name__,
            message="`hooks` must be a HookSet",
        )
    found: dict[str, Hook | None] = {}
    for name in HOOK_NAMES:
        for klass in cls.__mro__:
            if name not in vars(klass):
                continue
            member = vars(klass)[name]
            if member is None:
                found[name] = None
            elif isinstance(member, (classmethod, staticmethod)):
                found[name] = getattr(cls, name)
            elif inspect.isfunction(member) or not callable(member):
                raise HookDefinitionError(name, gateway=cls.__name__)
            else:
                found[name] = member
            break
    return replace(declared or HookSet(), **found)


async def run_hook(hook: Hook, *args: Any) -> Any:
    """Call a hook, awaiting its result when it is awaitable."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


__all__ = ["Hook", "HOOK_NAMES", "HookSet", "collect_hooks", "run_hook"]
