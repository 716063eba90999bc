from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Alertmanager targets (comma-separated host:port list)
    alertmanager_addresses: str = Field(default="")
    alertmanager_api_version: Literal["v1", "v2"] = Field(default="v2")
    push_timeout_seconds: float = Field(default=10.0, gt=0)
    query_timeout_seconds: float = Field(default=10.0, gt=0)

    # Webhook receiver
    listen_address: str = Field(default=":8080")
    shutdown_timeout_seconds: float = Field(default=5.0, gt=0)
    settle_seconds: float = Field(default=10.0, ge=0)

    # Plan runner
    plan_file: str | None = Field(default=None)
    report_dir: str = Field(default=".")
    generator_url: str = Field(default="http://example.com/")

    # Synthetic sender
    sender_runs: int = Field(default=1)
    sender_num: int = Field(default=1)
    sender_batch: int = Field(default=1)
    sender_repeat_interval: str = Field(default="10s")
    sender_labels: str = Field(
        default="alertname=HighLatency,service=my-service,instance=instance-{{i}}"
    )
    sender_annotations: str = Field(
        default='summary="High Latency",description="Latency is high!"'
    )
    sender_start: str = Field(default="now")
    sender_end: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = False

    @field_validator("sender_runs", "sender_num", "sender_batch")
    @classmethod
    def check_positive(cls, v: int) -> int:
        """Runs, alert count and batch size must be strictly positive."""
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def alertmanager_targets(self) -> list[str]:
        """Parse comma-separated target list."""
        return [
            address.strip()
            for address in self.alertmanager_addresses.split(",")
            if address.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
