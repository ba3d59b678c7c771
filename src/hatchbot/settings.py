from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    Field,
    SecretStr,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import DEFAULT_DEPLOY_DELAY, ConfigError, HandlerPaths


class BotSettings(BaseSettings):
    """Process configuration read from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    bot_token: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("BOT_TOKEN", "bot_token")
    )
    client_id: str | None = Field(
        default=None, validation_alias=AliasChoices("CLIENT_ID", "client_id")
    )
    guild_id: str | None = Field(
        default=None, validation_alias=AliasChoices("GUILD_ID", "guild_id")
    )
    deploy_delay: float = Field(
        default=DEFAULT_DEPLOY_DELAY,
        ge=0,
        validation_alias=AliasChoices("HATCHBOT_DEPLOY_DELAY", "deploy_delay"),
    )
    auto_deploy: bool = Field(
        default=True,
        validation_alias=AliasChoices("HATCHBOT_AUTO_DEPLOY", "auto_deploy"),
    )
    watch_handlers: bool = Field(
        default=False,
        validation_alias=AliasChoices("HATCHBOT_WATCH_HANDLERS", "watch_handlers"),
    )

    handlers_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("HATCHBOT_HANDLERS_DIR", "handlers_dir"),
    )

    @field_validator("bot_token", "client_id", "guild_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError(f"{info.field_name} must be a string")
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str):
            raise ValueError(f"{info.field_name} must be a string")
        cleaned = value.strip()
        return cleaned or None

    @field_serializer("bot_token")
    def _dump_token(self, value: SecretStr | None) -> str | None:
        return value.get_secret_value() if value else None

    @property
    def token(self) -> str | None:
        if self.bot_token is None:
            return None
        return self.bot_token.get_secret_value()

    @property
    def has_credentials(self) -> bool:
        return self.token is not None and self.client_id is not None

    def handler_paths(self) -> HandlerPaths:
        if self.handlers_dir is None:
            return HandlerPaths.bundled()
        return HandlerPaths.under(self.handlers_dir)


def load_settings(**overrides: Any) -> BotSettings:
    try:
        return BotSettings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid bot configuration: {e}") from e
