from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="WEBPROOF_", extra="ignore"
    )

    # Notary
    default_notary_host: str = "test-notary.vlayer.xyz"
    default_notary_port: int = 443
    default_notary_tls: bool = True

    # Capture bounds (bytes)
    default_max_sent_data: int = 4096
    default_max_recv_data: int = 16384

    # Invocation
    timeout_ms: int = 30000
    cancel_on_timeout: bool = True  # only coroutine capabilities can be cancelled

    # Native binding
    binding_module_name: str = "vlayer_web_proof"
    binding_dir: Path | None = None  # defaults to the package directory
    binding_paths: list[str] | None = None  # overrides the platform defaults
    binding_max_attempts: int = 3
    preload_binding: bool = False

    # Logging
    log_level: str = "INFO"

    @property
    def default_notary_url(self) -> str:
        scheme = "https" if self.default_notary_tls else "http"
        return f"{scheme}://{self.default_notary_host}:{self.default_notary_port}/"


settings = Settings()
