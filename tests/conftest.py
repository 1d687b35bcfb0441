"""
Pytest fixtures for the render service tests.
"""

import io
import os
import zipfile

# Set before importing render_service.webapi, which builds its app from the environment.
os.environ["PDF_SERVICE_KEY"] = "test-service-key-1234"
os.environ["GOTENBERG_URL"] = "http://gotenberg:3000/"
os.environ["SUPABASE_URL"] = "https://store.example.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"

import pytest

from render_service.config import ServiceConfig
from render_service.rendering import RenderService
from render_service.rendering.adapters import SharedKeySecurity

SERVICE_KEY = "test-service-key-1234"


def build_archive(members: dict[str, str | bytes], compression: int = zipfile.ZIP_DEFLATED) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=compression) as zf:
        for name, content in members.items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            zf.writestr(name, content)
    return buf.getvalue()


def fake_pdf(size: int = 60000) -> bytes:
    head = b"%PDF-1.7\n"
    return head + b"0" * (size - len(head))


class FakeSource:
    def __init__(self, data: bytes = b"", error: Exception | None = None) -> None:
        self.data = data
        self.error = error
        self.calls: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.data


class FakeConverter:
    def __init__(self, pdf: bytes = b"", error: Exception | None = None) -> None:
        self.pdf = pdf
        self.error = error
        self.calls: list[bytes] = []

    def convert(self, document: bytes) -> bytes:
        self.calls.append(document)
        if self.error:
            raise self.error
        return self.pdf


class FakeStorage:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    def publish(self, pdf: bytes, code: str) -> str:
        self.calls.append((pdf, code))
        if self.error:
            raise self.error
        return f"reports/tmp/{code}/00000000-0000-4000-8000-000000000000.pdf"


@pytest.fixture
def docx_bytes() -> bytes:
    return build_archive(
        {
            "[Content_Types].xml": "<Types/>",
            "word/document.xml": "<w:document><w:t>Dear RMGC1,</w:t></w:document>",
            "word/media/image1.png": b"\x89PNG\r\n\x1a\nRMGC1",
        }
    )


@pytest.fixture
def config() -> ServiceConfig:
    return ServiceConfig(
        service_key=SERVICE_KEY,
        supabase_url="https://store.example.test",
        supabase_service_role_key="service-role-key",
        gotenberg_url="http://gotenberg:3000",
        pdf_min_bytes=51200,
    )


@pytest.fixture
def fakes(docx_bytes):
    """Gateways that succeed by default; tests flip individual ones to fail."""
    return {
        "source": FakeSource(docx_bytes),
        "converter": FakeConverter(fake_pdf()),
        "storage": FakeStorage(),
    }


@pytest.fixture
def service(fakes, config) -> RenderService:
    return RenderService(
        source=fakes["source"],
        converter=fakes["converter"],
        storage=fakes["storage"],
        security=SharedKeySecurity(config.service_key),
        min_pdf_bytes=config.pdf_min_bytes,
    )


@pytest.fixture
def auth_headers():
    return {"x-api-key": SERVICE_KEY}
