"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from sitehook.errors import ConfigError
from sitehook.utils.platform import get_config_dir

_PM2_APP_NAME = "OpenAgentsBuilderDocs"


def _default_deploy_commands() -> list[str]:
    return [
        "git pull",
        "npm install",
        "npm run build",
        # Absent on a fresh host; a failure here must not stop the start below
        f"pm2 delete {_PM2_APP_NAME} || true",
        f'pm2 start "sitehook serve" --name {_PM2_APP_NAME}',
        "pm2 reload all",
    ]


class ServerConfig(BaseModel):
    bind: str = "0.0.0.0"
    port: int = 4321


class WebhookConfig(BaseModel):
    path: str = "/github-webhook"
    secret: SecretStr = SecretStr("")
    event_header: str = "X-GitHub-Event"
    signature_header: str = "X-Hub-Signature-256"
    delivery_header: str = "X-GitHub-Delivery"
    expected_event: str = "push"

    def secret_bytes(self) -> bytes | None:
        """The shared secret as bytes, or None when it is not configured."""
        value = self.secret.get_secret_value()
        return value.encode("utf-8") if value else None


class DeployConfig(BaseModel):
    working_dir: str = ""
    commands: list[str] = Field(default_factory=_default_deploy_commands)
    timeout: float = 900.0
    log_file: str = "deploy.log"


class SiteConfig(BaseModel):
    """Where the static-site framework puts its built output."""
    static_dir: str = "dist/client"
    base: str = "/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SITEHOOK_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    site: SiteConfig = Field(default_factory=SiteConfig)
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML arrives as init kwargs; the environment wins over it.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config.

    ``GITHUB_WEBHOOK_SECRET`` is honoured when no secret is set any other way,
    since that is the name most hosting guides use.
    """
    yaml_data: dict[str, Any] = {}

    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("SITEHOOK_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    # Load YAML if found
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            try:
                with open(path) as f:
                    yaml_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            if not isinstance(yaml_data, dict):
                raise ConfigError(f"{path} must contain a mapping at the top level")

    overrides: dict[str, Any] = {}
    fallback_secret = os.environ.get("GITHUB_WEBHOOK_SECRET")
    if fallback_secret:
        overrides = {"webhook": {"secret": fallback_secret}}

    # Build settings: YAML values as defaults, env vars override
    try:
        settings = Settings(**yaml_data)
        if overrides and settings.webhook.secret_bytes() is None:
            settings = Settings(**_deep_merge(yaml_data, overrides))
    except ValidationError as e:
        raise ConfigError(str(e)) from e
    return settings
