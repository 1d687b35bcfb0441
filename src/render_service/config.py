import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _timeout(name: str, default: str) -> float | None:
    # 0 disables the timeout for that stage
    value = float(os.getenv(name, default))
    return value if value > 0 else None


@dataclass(frozen=True)
class ServiceConfig:
    """Process-wide settings, read once at startup and never mutated."""

    service_key: str = ""
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    gotenberg_url: str = ""
    pdf_min_bytes: int = 51200
    source_timeout_sec: float | None = 30.0
    gotenberg_timeout_sec: float | None = 120.0
    storage_timeout_sec: float | None = 60.0
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            service_key=os.getenv("PDF_SERVICE_KEY", ""),
            supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
            gotenberg_url=os.getenv("GOTENBERG_URL", "").rstrip("/"),
            pdf_min_bytes=int(os.getenv("PDF_MIN_BYTES", "51200")),
            source_timeout_sec=_timeout("SOURCE_TIMEOUT_SEC", "30"),
            gotenberg_timeout_sec=_timeout("GOTENBERG_TIMEOUT_SEC", "120"),
            storage_timeout_sec=_timeout("STORAGE_TIMEOUT_SEC", "60"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8080")),
            reload=os.getenv("RELOAD", "false").lower() in _TRUTHY,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def startup_issues(self) -> list[str]:
        """Return human-readable warnings for settings that will make renders fail."""
        issues = []
        if not self.service_key:
            issues.append("PDF_SERVICE_KEY is empty; every /render call will be rejected")
        if not self.gotenberg_url:
            issues.append("GOTENBERG_URL is not set")
        if not self.supabase_url or not self.supabase_service_role_key:
            issues.append("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY are not set")
        return issues

    def log_summary(self) -> None:
        """Log the loaded configuration with secrets redacted."""
        for issue in self.startup_issues():
            logger.warning(issue)
        logger.info("Configuration loaded: port=%s", self.port)
        logger.info("  gotenberg_url=%s", self.gotenberg_url or "<unset>")
        logger.info("  supabase_url=%s", self.supabase_url or "<unset>")
        logger.info("  service_key=%s", "*****" if self.service_key else "<empty>")
        logger.info("  pdf_min_bytes=%s", self.pdf_min_bytes)
        logger.info(
            "  timeouts: source=%s gotenberg=%s storage=%s",
            self.source_timeout_sec,
            self.gotenberg_timeout_sec,
            self.storage_timeout_sec,
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
