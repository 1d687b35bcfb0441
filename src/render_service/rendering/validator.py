from .errors import NotPdf, PdfTooSmall

PDF_SIGNATURE = b"%PDF-"
DEFAULT_MIN_BYTES = 51200


def validate_pdf(data: bytes, min_bytes: int = DEFAULT_MIN_BYTES) -> None:
    """Reject converter output that is too small or lacks the PDF signature.

    The size check runs first: a tiny but well-formed PDF is usually an error
    page from the converter.
    """
    if len(data) < min_bytes:
        raise PdfTooSmall(f"pdf is {len(data)} bytes, minimum is {min_bytes}")
    if data[:5] != PDF_SIGNATURE:
        raise NotPdf(f"unexpected leading bytes {data[:5]!r}")
