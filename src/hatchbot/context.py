"""Process-wide state shared by the dispatcher, sync operations and handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import anyio
import httpx

from .config import ConfigError, HandlerPaths
from .loader import load_commands, load_components
from .logging import get_logger
from .registry import CommandRegistry, ComponentRegistry
from .rest import DiscordRestClient
from .result import Result, failure, success
from .settings import BotSettings

if TYPE_CHECKING:
    from .client import BotClient

logger = get_logger(__name__)


@dataclass(slots=True)
class BotContext:
    settings: BotSettings
    paths: HandlerPaths = field(default_factory=HandlerPaths.bundled)
    client: BotClient | None = None
    commands: CommandRegistry = field(default_factory=CommandRegistry)
    components: ComponentRegistry = field(default_factory=ComponentRegistry)
    http_transport: httpx.AsyncBaseTransport | None = None
    sleep: Callable[[float], Awaitable[None]] = anyio.sleep

    @property
    def deploy_delay(self) -> float:
        return self.settings.deploy_delay

    def rest_client(self) -> DiscordRestClient:
        token = self.settings.token
        application_id = self.settings.client_id
        if token is None or application_id is None:
            raise ConfigError("BOT_TOKEN and CLIENT_ID are required for REST calls")
        return DiscordRestClient(token, application_id, transport=self.http_transport)

    def load_registries(self, *, reload: bool = False) -> Result[dict[str, Any]]:
        """Build both registries from disk and swap them in together."""
        commands = load_commands(self.paths.commands, reload=reload)
        if not commands.success or commands.data is None:
            return failure(commands.error)
        components = load_components(self.paths.components, reload=reload)
        if not components.success or components.data is None:
            return failure(components.error)

        self.commands = commands.data
        self.components = components.data
        return success(
            {"commands": len(self.commands), "components": len(self.components)}
        )

    def reload(self) -> Result[dict[str, Any]]:
        result = self.load_registries(reload=True)
        if result.success:
            logger.info("context.reloaded", **(result.data or {}))
        else:
            logger.error("context.reload_failed", error=result.error)
        return result
