"""Failure taxonomy for a render request.

Each error carries the stable `code` returned to callers and the HTTP status
it maps to. Gateways raise these at the call site; the HTTP layer renders
them as `{"ok": false, "error": code}`.
"""


class RenderError(Exception):
    code = "server_error"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)


class Unauthorized(RenderError):
    code = "unauthorized"
    status_code = 401


class BadRequest(RenderError):
    code = "bad_request"
    status_code = 400


class SourceFetchFailed(RenderError):
    code = "source_fetch_failed"
    status_code = 400


class UnrecognizedFormat(RenderError):
    code = "unknown_template_format"
    status_code = 400


class ConversionFailed(RenderError):
    code = "gotenberg_failed"
    status_code = 502


class ConversionUnreachable(ConversionFailed):
    pass


class PdfTooSmall(RenderError):
    code = "pdf_too_small"
    status_code = 502


class NotPdf(RenderError):
    code = "not_pdf"
    status_code = 502


class UploadFailed(RenderError):
    code = "upload_failed"
    status_code = 502


class ServerError(RenderError):
    pass
