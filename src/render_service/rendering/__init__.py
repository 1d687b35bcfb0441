"""
Domain layer for template rendering.
Provides interfaces (gateways) and a service to orchestrate a render,
abstracting template download, PDF conversion and object storage so the
HTTP front-end stays a thin adapter over the same core logic.
"""

from .interfaces import (
    ConverterGateway,
    RenderRequest,
    RenderResult,
    SecurityGateway,
    StorageGateway,
    TemplateSource,
)
from .service import RenderService, normalize_request
