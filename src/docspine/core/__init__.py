"""docspine core -- gateway base class, relation inclusion and hooks.

Architecture::

    Layer 1 -- Contracts & Errors
        errors.py      Structured error hierarchy (GatewayError, ConfigurationError)
        protocols.py   Engine boundary (EngineModel, EngineQuery, RawDocument)

    Layer 2 -- Gateway Primitives
        record.py      Attribute-bag records built from raw documents
        filters.py     Filter {where, skip, limit, sort}
        relations.py   Relation registry, populate_includes, post-processing
        hooks.py       HookSet and hook collection

    Layer 3 -- Gateway
        gateway.py     DocumentGateway (CRUD verbs + hook sandwich)

    Layer 4 -- Cross-Cutting Concerns
        logging.py     Structured logging (structlog)
        settings.py    DocspineSettings (pydantic-settings)
"""

from docspine.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    GatewayError,
    HookDefinitionError,
    MissingModelError,
    RelationDefinitionError,
)
from docspine.core.filters import Filter
from docspine.core.gateway import EMPTY_UPDATE, DocumentGateway, GatewayConfig
from docspine.core.hooks import HOOK_NAMES, HookSet
from docspine.core.protocols import EngineModel, EngineQuery, RawDocument
from docspine.core.record import Record
from docspine.core.relations import (
    POPULATE,
    Include,
    Populate,
    RelationRegistry,
    apply_include_postprocessing,
    populate_includes,
)

__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "GatewayError",
    "HookDefinitionError",
    "MissingModelError",
    "RelationDefinitionError",
    "Filter",
    "EMPTY_UPDATE",
    "DocumentGateway",
    "GatewayConfig",
    "HOOK_NAMES",
    "HookSet",
    "EngineModel",
    "EngineQuery",
    "RawDocument",
    "Record",
    "POPULATE",
    "Include",
    "Populate",
    "RelationRegistry",
    "apply_include_postprocessing",
    "populate_includes",
]
