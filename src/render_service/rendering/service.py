import asyncio
import logging
from typing import Any, Mapping

from .errors import BadRequest, Unauthorized
from .interfaces import (
    ConverterGateway,
    RenderRequest,
    RenderResult,
    SecurityGateway,
    StorageGateway,
    TemplateSource,
)
from .rewriter import rewrite_archive
from .validator import DEFAULT_MIN_BYTES, validate_pdf

logger = logging.getLogger(__name__)


def _present(value: Any) -> bool:
    # Alias fallback treats null, "", 0 and false as absent; an empty object counts.
    return value is not None and value is not False and value != "" and value != 0


def _first(body: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = body.get(key)
        if _present(value):
            return value
    return None


def _scalar_text(value: Any) -> str:
    """Stringify a JSON value the way JavaScript's toString renders it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_request(body: Any) -> RenderRequest:
    """Build a RenderRequest from a decoded JSON body.

    Aliases: `srcUrl` takes precedence over `src`, `values` over `userValues`.
    A missing `format` defaults to "pdf". Raises BadRequest when code or source
    URL is empty, or when the format is anything but pdf.
    """
    if not isinstance(body, Mapping):
        body = {}

    code = _first(body, "code")
    src = _first(body, "srcUrl", "src")
    raw_values = _first(body, "values", "userValues")
    fmt = _first(body, "format")

    values: dict[str, str] = {}
    if isinstance(raw_values, Mapping):
        values = {str(k): _scalar_text(v) for k, v in raw_values.items()}

    request = RenderRequest(
        code=str(code or "").strip().upper(),
        source_url=str(src or "").strip(),
        values=values,
        format=str(fmt or "pdf").lower(),
    )
    if not request.code or not request.source_url or request.format != "pdf":
        raise BadRequest("code and srcUrl are required and format must be pdf")
    return request


class RenderService:
    """Core domain service for rendering a template to a stored PDF.

    Framework-agnostic: the HTTP layer authorizes and normalizes the request,
    then awaits `render`. Each stage runs after the previous one finishes and
    the first failure propagates as a RenderError subclass.
    """

    def __init__(
        self,
        source: TemplateSource,
        converter: ConverterGateway,
        storage: StorageGateway,
        security: SecurityGateway,
        *,
        min_pdf_bytes: int = DEFAULT_MIN_BYTES,
    ) -> None:
        self._source = source
        self._converter = converter
        self._storage = storage
        self._security = security
        self._min_pdf_bytes = min_pdf_bytes

    def authorize(self, api_key: str | None) -> None:
        if not self._security.verify(api_key):
            raise Unauthorized("missing or invalid x-api-key")

    async def render(self, request: RenderRequest) -> RenderResult:
        logger.info("Render started: code=%s", request.code)

        template = await asyncio.to_thread(self._source.fetch, request.source_url)
        logger.debug("Fetched template: %d bytes", len(template))

        rewritten = await asyncio.to_thread(rewrite_archive, template, request.values)
        logger.debug("Substituted %d token occurrences", rewritten.substitutions)

        pdf = await asyncio.to_thread(self._converter.convert, rewritten.data)
        validate_pdf(pdf, self._min_pdf_bytes)

        path = await asyncio.to_thread(self._storage.publish, pdf, request.code)
        logger.info(
            "Render complete: code=%s path=%s substitutions=%d bytes=%d",
            request.code,
            path,
            rewritten.substitutions,
            len(pdf),
        )
        return RenderResult(path=path, substitutions=rewritten.substitutions, bytes=len(pdf))
