import logging

from fastapi import FastAPI, Header, Request, status
from fastapi.responses import JSONResponse

from render_service import __version__
from render_service.config import ServiceConfig, configure_logging
from render_service.rendering import RenderService, normalize_request
from render_service.rendering.adapters import (
    GotenbergConverter,
    HttpTemplateSource,
    SharedKeySecurity,
    SupabaseStorage,
)
from render_service.rendering.errors import RenderError, ServerError

logger = logging.getLogger(__name__)


def build_service(config: ServiceConfig) -> RenderService:
    return RenderService(
        source=HttpTemplateSource(timeout=config.source_timeout_sec),
        converter=GotenbergConverter(config.gotenberg_url, timeout=config.gotenberg_timeout_sec),
        storage=SupabaseStorage(
            config.supabase_url,
            config.supabase_service_role_key,
            timeout=config.storage_timeout_sec,
        ),
        security=SharedKeySecurity(config.service_key),
        min_pdf_bytes=config.pdf_min_bytes,
    )


def _error(exc: RenderError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.code})


def create_app(config: ServiceConfig | None = None, service: RenderService | None = None) -> FastAPI:
    """Build the ASGI app. Tests pass a prebuilt service with fake gateways."""
    config = config or ServiceConfig.from_env()
    service = service or build_service(config)

    app = FastAPI(
        title="Template Render Service",
        version=__version__,
        description=(
            "Fills RMGC tokens in DOCX/ODT templates, converts them to PDF via "
            "Gotenberg and publishes the result to Supabase Storage."
        ),
    )
    app.state.config = config
    app.state.service = service

    @app.on_event("startup")
    async def _startup() -> None:
        config.log_summary()

    @app.get("/health")
    def health() -> dict[str, bool]:
        """Basic health check endpoint."""
        return {"ok": True}

    @app.post("/render")
    async def render(request: Request, x_api_key: str | None = Header(None)) -> JSONResponse:
        """Render a template to PDF and store it.

        Authentication runs before the body is read, so a rejected caller never
        triggers a fetch, conversion or upload.
        """
        try:
            service.authorize(x_api_key)
            try:
                body = await request.json()
            except ValueError:
                body = {}
            render_request = normalize_request(body)
            result = await service.render(render_request)
        except RenderError as e:
            logger.warning("Render failed: %s (%s)", e.code, e)
            return _error(e)
        except Exception:
            logger.exception("Unexpected render failure")
            return _error(ServerError())
        return JSONResponse(status_code=status.HTTP_200_OK, content=result.as_response())

    return app


configure_logging(ServiceConfig.from_env().log_level)
app = create_app()


def run() -> None:
    """Run the ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set HOST/PORT to
    override and RELOAD=true for development auto-reload.
    """
    import uvicorn

    config = ServiceConfig.from_env()
    uvicorn.run("render_service.webapi:app", host=config.host, port=config.port, reload=config.reload)


if __name__ == "__main__":
    run()
