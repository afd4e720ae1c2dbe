"""XDG config loading."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from kubeterm.resources.models import GROUP, VERSION
from kubeterm.resources.validation import DEFAULT_COMMAND, DEFAULT_IMAGE, is_dns_subdomain
from kubeterm.retry import RetryPolicy

DEFAULT_CONFIG_PATH = Path("~/.config/kubeterm/config.toml").expanduser()
DEFAULT_NAMESPACE = "default"
NAMESPACE_ENV = "KUBETERM_NAMESPACE"
KUBECONFIG_ENV = "KUBETERM_KUBECONFIG"

logger = py_logging.getLogger(__name__)


class AppConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    namespace: str = DEFAULT_NAMESPACE
    group: str = GROUP
    version: str = VERSION
    default_image: str = DEFAULT_IMAGE
    default_command: list[str] = Field(default_factory=lambda: list(DEFAULT_COMMAND))
    kubeconfig: str = ""
    in_cluster: bool | None = None
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_backoff_seconds: float = Field(default=0.5, ge=0)

    @field_validator("namespace")
    @classmethod
    def _validate_namespace(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned or not is_dns_subdomain(cleaned):
            raise ValueError(f"Invalid namespace: {value}")
        return cleaned

    @field_validator("default_image")
    @classmethod
    def _validate_image(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("default_image must not be empty")
        return cleaned

    @field_validator("default_command")
    @classmethod
    def _validate_command(cls, value: list[str]) -> list[str]:
        if not value or not all(item.strip() for item in value):
            raise ValueError("default_command must contain non-empty strings")
        return value

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            initial_backoff_seconds=self.retry_backoff_seconds,
        )


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _sanitize(raw: dict[str, Any]) -> AppConfig:
    defaults = AppConfig()
    values: dict[str, Any] = {}
    for field_name in AppConfig.model_fields:
        if field_name not in raw:
            continue
        candidate = raw[field_name]
        try:
            AppConfig(**{field_name: candidate})
        except ValidationError:
            logger.warning("Ignoring invalid config value field=%s", field_name)
            continue
        values[field_name] = candidate
    if not values:
        return defaults
    return AppConfig(**values)


def _apply_env(config: AppConfig) -> AppConfig:
    namespace = os.environ.get(NAMESPACE_ENV, "").strip()
    if namespace:
        try:
            config.namespace = namespace
        except ValidationError:
            logger.warning("Ignoring invalid %s=%s", NAMESPACE_ENV, namespace)
    kubeconfig = os.environ.get(KUBECONFIG_ENV, "").strip()
    if kubeconfig:
        config.kubeconfig = kubeconfig
    return config


def load_config(path: str | Path | None = None) -> AppConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _apply_env(AppConfig())
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Config unreadable path=%s error=%s; using defaults", resolved, exc)
        return _apply_env(AppConfig())
    return _apply_env(_sanitize(raw))
