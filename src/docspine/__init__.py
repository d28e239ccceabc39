"""docspine -- CRUD gateway with lifecycle hooks over a document-store engine.

Usage:
    import docspine
    from docspine import DocumentGateway

    docspine.setup()  # logging from DOCSPINE_* settings

    class Post(DocumentGateway):
        model = engine.model("posts")
        relations = {"tags": "populate"}

    posts = await Post.find({"limit": 10}, include=["tags"])
"""

from __future__ import annotations

from docspine.core import (
    ConfigurationError,
    DocumentGateway,
    Filter,
    GatewayError,
    HookSet,
    Include,
    Populate,
    Record,
    RelationRegistry,
)
from docspine.core.logging import configure_logging
from docspine.core.settings import DocspineSettings

__version__ = "0.1.0"


def setup(settings: DocspineSettings | None = None) -> DocspineSettings:
    """Load settings (environment / ``.env`` by default) and configure logging."""
    settings = settings or DocspineSettings()
    configure_logging(
        level=settings.effective_log_level,
        json_format=settings.log_json,
        service=settings.service_name,
    )
    return settings


__all__ = [
    "ConfigurationError",
    "DocumentGateway",
    "Filter",
    "GatewayError",
    "HookSet",
    "Include",
    "Populate",
    "Record",
    "RelationRegistry",
    "DocspineSettings",
    "configure_logging",
    "setup",
    "__version__",
]
