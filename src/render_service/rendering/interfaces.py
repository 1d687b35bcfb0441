from dataclasses import dataclass, field
from typing import Protocol


class TemplateSource(Protocol):
    def fetch(self, url: str) -> bytes:
        """Download the template archive at `url`, bypassing caches.
        Raises SourceFetchFailed on a non-success response or transport error.
        """


class ConverterGateway(Protocol):
    def convert(self, document: bytes) -> bytes:
        """Convert an office document to PDF synchronously.
        This is a blocking call; callers should offload to threads if needed.
        """


class StorageGateway(Protocol):
    def publish(self, pdf: bytes, code: str) -> str:
        ...


class SecurityGateway(Protocol):
    def verify(self, api_key: str | None) -> bool:
        ...


@dataclass(frozen=True)
class RenderRequest:
    code: str
    source_url: str
    values: dict[str, str] = field(default_factory=dict)
    format: str = "pdf"


@dataclass(frozen=True)
class RenderResult:
    path: str
    substitutions: int
    bytes: int

    def as_response(self) -> dict[str, object]:
        return {
            "ok": True,
            "path": self.path,
            "substitutions": self.substitutions,
            "bytes": self.bytes,
        }
