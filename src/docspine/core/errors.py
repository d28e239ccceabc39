"""
Structured error types for the docspine gateway layer.

The gateway is a thin pass-through over a persistence engine, so it owns
very few failure modes of its own.  The ones it does own are programmer
errors in a gateway class definition: a broken relation registry, a hook
declared with the wrong binding, or a gateway used without an engine model.
Those are raised as :class:`ConfigurationError` subclasses.

Engine failures (connectivity, constraint violations, timeouts) are NOT
wrapped.  They reach the caller as the original exception object.

Manifesto:
    - **Typed Error Hierarchy:** Configuration bugs have their own types
    - **Never Retried:** Definition bugs are marked non-retryable
    - **Rich Context:** Errors carry gateway/relation metadata for logging
    - **No Translation:** Engine errors pass through untouched

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      GatewayError                            │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigurationError  (CONFIG, never retryable)               │
        │       │                                                      │
        │  RelationDefinitionError   HookDefinitionError               │
        │  MissingModelError                                           │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = RelationDefinitionError("author", gateway="Post")
    >>> error.retryable
    False
    >>> str(error)
    '<author> definition is broken'
    >>> error.context.gateway
    'Post'

Tags:
    error-handling, exception-hierarchy, configuration, docspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification in logs."""

    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to a gateway error.

    Attributes:
        gateway: Name of the gateway class involved
        verb: Gateway verb being executed (``find``, ``create``...)
        relation: Relation name, for registry errors
        hook: Hook name, for hook declaration errors
        metadata: Additional key-value pairs
    """

    gateway: str | None = None
    verb: str | None = None
    relation: str | None = None
    hook: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["gateway", "verb", "relation", "hook"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class GatewayError(Exception):
    """
    Base exception for all docspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` to provide
    sensible defaults for their domain.

    Examples:
        >>> error = GatewayError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(gateway="Post").context.gateway
        'Post'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> GatewayError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigurationError("bad registry").with_context(gateway="Post")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(GatewayError):
    """
    Gateway class definition error.

    Never retryable - the gateway class must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class RelationDefinitionError(ConfigurationError):
    """A relation registry entry is neither a Populate nor an Include."""

    def __init__(self, name: str, *, gateway: str | None = None, value: Any = None):
        self.name = name
        self.value = value
        super().__init__(
            f"<{name}> definition is broken",
            context=ErrorContext(gateway=gateway, relation=name),
        )


class HookDefinitionError(ConfigurationError):
    """A lifecycle hook is declared with an unusable binding."""

    def __init__(self, hook: str, *, gateway: str | None = None, message: str | None = None):
        self.hook = hook
        super().__init__(
            message or f"hook <{hook}> must be a classmethod, staticmethod or callable",
            context=ErrorContext(gateway=gateway, hook=hook),
        )


class MissingModelError(ConfigurationError):
    """A gateway verb was called on a class with no engine model."""

    def __init__(self, gateway: str):
        super().__init__(
            f"{gateway} has no engine model; set the `model` class attribute",
            context=ErrorContext(gateway=gateway),
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "GatewayError",
    "ConfigurationError",
    "RelationDefinitionError",
    "HookDefinitionError",
    "MissingModelError",
]
