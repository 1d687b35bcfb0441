import hmac
import logging
import uuid

import requests

from .errors import (
    ConversionFailed,
    ConversionUnreachable,
    SourceFetchFailed,
    UploadFailed,
)
from .interfaces import ConverterGateway, SecurityGateway, StorageGateway, TemplateSource

logger = logging.getLogger(__name__)

REPORTS_BUCKET = "reports"


def _succeeded(resp: requests.Response) -> bool:
    # `Response.ok` also accepts 3xx; only 2xx counts here.
    return 200 <= resp.status_code < 300


class HttpTemplateSource(TemplateSource):
    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout

    def fetch(self, url: str) -> bytes:
        try:
            resp = requests.get(url, headers={"Cache-Control": "no-cache"}, timeout=self._timeout)
        except requests.RequestException as e:
            raise SourceFetchFailed(f"template fetch failed: {e}") from e
        if not _succeeded(resp):
            raise SourceFetchFailed(f"template fetch returned {resp.status_code}")
        return resp.content


class GotenbergConverter(ConverterGateway):
    """Converts office documents through Gotenberg's LibreOffice route.

    The upload is always named `in.doc`; LibreOffice sniffs the real format,
    so DOCX and ODT payloads both convert.
    """

    ROUTE = "/forms/libreoffice/convert"
    UPLOAD_NAME = "in.doc"

    def __init__(self, base_url: str, *, timeout: float | None = None) -> None:
        self._url = base_url.rstrip("/") + self.ROUTE
        self._timeout = timeout

    def convert(self, document: bytes) -> bytes:
        files = {"files": (self.UPLOAD_NAME, document, "application/octet-stream")}
        try:
            resp = requests.post(self._url, files=files, timeout=self._timeout)
        except requests.RequestException as e:
            raise ConversionUnreachable(f"gotenberg unreachable: {e}") from e
        if not _succeeded(resp):
            raise ConversionFailed(f"gotenberg returned {resp.status_code}")
        return resp.content


class SupabaseStorage(StorageGateway):
    """Uploads rendered PDFs to Supabase Storage over its REST API."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        bucket: str = REPORTS_BUCKET,
        timeout: float | None = None,
    ) -> None:
        self._base = base_url.rstrip("/")
        self._key = service_key
        self._bucket = bucket
        self._timeout = timeout

    @staticmethod
    def object_path(code: str) -> str:
        return f"tmp/{code}/{uuid.uuid4()}.pdf"

    def publish(self, pdf: bytes, code: str) -> str:
        path = self.object_path(code)
        headers = {
            "Authorization": f"Bearer {self._key}",
            "apikey": self._key,
            "Content-Type": "application/pdf",
            "cache-control": "max-age=3600",
            # A fresh uuid per call; never replace an existing object.
            "x-upsert": "false",
        }
        url = f"{self._base}/storage/v1/object/{self._bucket}/{path}"
        try:
            resp = requests.post(url, data=pdf, headers=headers, timeout=self._timeout)
        except requests.RequestException as e:
            raise UploadFailed(f"storage unreachable: {e}") from e
        if not _succeeded(resp):
            raise UploadFailed(f"storage returned {resp.status_code}")
        return f"{self._bucket}/{path}"


class SharedKeySecurity(SecurityGateway):
    def __init__(self, service_key: str) -> None:
        self._key = service_key

    def verify(self, api_key: str | None) -> bool:
        # An unset service key locks the endpoint rather than opening it.
        if not self._key or not api_key:
            return False
        return hmac.compare_digest(api_key.encode("utf-8"), self._key.encode("utf-8"))
