"""Push slash command definitions to the Discord API."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from .loader import load_command_schemas
from .logging import get_logger
from .rest import DiscordApiError, DiscordRestClient, GuildRef
from .result import Result, failure, success

if TYPE_CHECKING:
    from .context import BotContext

logger = get_logger(__name__)

NO_COMMANDS = "No commands found to deploy"
TOKEN_REQUIRED = "BOT_TOKEN environment variable is required"
CLIENT_ID_REQUIRED = "CLIENT_ID environment variable is required"
CREDENTIALS_REQUIRED = "BOT_TOKEN and CLIENT_ID environment variables are required"
INVALID_CLIENT = "Valid Discord client instance is required"
NO_GUILDS = "Bot is not connected to any guilds"


class GuildSource(Protocol):
    @property
    def guilds(self) -> Iterable[Any]: ...


@dataclass(frozen=True, slots=True)
class DeployReport:
    command_count: int
    is_global: bool


@dataclass(frozen=True, slots=True)
class GuildDeployResult:
    guild_id: str
    guild_name: str
    success: bool
    command_count: int = 0
    error: str | None = None


@dataclass(frozen=True, slots=True)
class GuildDeployReport:
    total_guilds: int
    success_count: int
    failure_count: int
    command_count: int
    results: tuple[GuildDeployResult, ...]


@dataclass(frozen=True, slots=True)
class GuildDeleteReport:
    total_guilds: int
    success_count: int
    failure_count: int
    results: tuple[GuildDeployResult, ...]


def _connected_guilds(source: GuildSource | None) -> list[GuildRef] | None:
    guilds = getattr(source, "guilds", None) if source is not None else None
    if guilds is None:
        return None
    return [
        GuildRef(id=str(guild.id), name=str(getattr(guild, "name", None) or guild.id))
        for guild in guilds
    ]


def _command_payloads(ctx: BotContext) -> Result[list[dict[str, Any]]]:
    loaded = load_command_schemas(ctx.paths.commands)
    if not loaded.success:
        return loaded
    if not loaded.data:
        return failure(NO_COMMANDS)
    return loaded


async def deploy_commands(ctx: BotContext) -> Result[DeployReport]:
    """Replace the command set of the configured guild, or globally without one."""
    payloads = _command_payloads(ctx)
    if not payloads.success or payloads.data is None:
        return failure(payloads.error)
    commands = payloads.data

    settings = ctx.settings
    if settings.token is None:
        return failure(TOKEN_REQUIRED)
    if settings.client_id is None:
        return failure(CLIENT_ID_REQUIRED)

    guild_id = settings.guild_id
    logger.info("sync.deploy_started", commands=len(commands), guild_id=guild_id)
    try:
        async with ctx.rest_client() as rest:
            if guild_id is not None:
                data = await rest.put_guild_commands(guild_id, commands)
            else:
                data = await rest.put_global_commands(commands)
    except Exception as exc:
        logger.error(
            "sync.deploy_failed",
            guild_id=guild_id,
            error=str(exc),
            error_type=exc.__class__.__name__,
            exc_info=not isinstance(exc, DiscordApiError),
        )
        return failure(exc)

    if guild_id is not None:
        logger.info("sync.guild_deployed", commands=len(data), guild_id=guild_id)
    else:
        logger.info("sync.global_deployed", commands=len(data))
    return success(DeployReport(command_count=len(data), is_global=guild_id is None))


async def _push_each(
    ctx: BotContext,
    rest: DiscordRestClient,
    guilds: Sequence[GuildRef],
    commands: list[dict[str, Any]],
    *,
    action: str,
) -> list[GuildDeployResult]:
    results: list[GuildDeployResult] = []
    for index, guild in enumerate(guilds):
        if index:
            await ctx.sleep(ctx.deploy_delay)
        logger.info(f"sync.{action}_guild", guild_id=guild.id, guild_name=guild.name)
        try:
            data = await rest.put_guild_commands(guild.id, commands)
        except Exception as exc:
            # one bad guild never stops the rest
            error = str(exc) or exc.__class__.__name__
            logger.error(
                f"sync.{action}_guild_failed",
                guild_id=guild.id,
                guild_name=guild.name,
                error=error,
                error_type=exc.__class__.__name__,
                exc_info=not isinstance(exc, DiscordApiError),
            )
            results.append(
                GuildDeployResult(
                    guild_id=guild.id,
                    guild_name=guild.name,
                    success=False,
                    error=error,
                )
            )
            continue
        results.append(
            GuildDeployResult(
                guild_id=guild.id,
                guild_name=guild.name,
                success=True,
                command_count=len(data),
            )
        )
    return results


def _summarize(report: Any, *, noun: str) -> Result[Any]:
    total = report.total_guilds
    logger.info(
        f"sync.{noun}_summary",
        succeeded=f"{report.success_count}/{total}",
        failed=f"{report.failure_count}/{total}",
    )
    failed_message = f"{report.failure_count} {noun}s failed"
    if report.success_count > 0:
        if report.failure_count:
            logger.warning(f"sync.partial_{noun}", message=failed_message)
        return success(report)
    return failure(failed_message if report.failure_count else NO_GUILDS, report)


async def deploy_commands_to_all_guilds(
    ctx: BotContext, client: GuildSource | None = None
) -> Result[GuildDeployReport]:
    """Deploy the command set to every guild the client is connected to.

    Guilds are handled one at a time with ``ctx.deploy_delay`` seconds between
    them. A failing guild is recorded and the rest still run; the overall
    result succeeds if any guild did.
    """
    guilds = _connected_guilds(client if client is not None else ctx.client)
    if guilds is None:
        return failure(INVALID_CLIENT)

    payloads = _command_payloads(ctx)
    if not payloads.success or payloads.data is None:
        return failure(payloads.error)
    commands = payloads.data

    if not ctx.settings.has_credentials:
        return failure(CREDENTIALS_REQUIRED)

    logger.info("sync.deploy_all_started", commands=len(commands), guilds=len(guilds))
    async with ctx.rest_client() as rest:
        results = await _push_each(ctx, rest, guilds, commands, action="deploy")

    succeeded = sum(1 for result in results if result.success)
    report = GuildDeployReport(
        total_guilds=len(guilds),
        success_count=succeeded,
        failure_count=len(results) - succeeded,
        command_count=len(commands),
        results=tuple(results),
    )
    return _summarize(report, noun="deployment")


async def delete_commands_from_all_guilds(
    ctx: BotContext, client: GuildSource | None = None
) -> Result[GuildDeleteReport]:
    """Remove every command from each connected guild by pushing an empty list."""
    guilds = _connected_guilds(client if client is not None else ctx.client)
    if guilds is None:
        return failure(INVALID_CLIENT)

    if not ctx.settings.has_credentials:
        return failure(CREDENTIALS_REQUIRED)

    logger.info("sync.delete_all_started", guilds=len(guilds))
    async with ctx.rest_client() as rest:
        results = await _push_each(ctx, rest, guilds, [], action="delete")

    succeeded = sum(1 for result in results if result.success)
    report = GuildDeleteReport(
        total_guilds=len(guilds),
        success_count=succeeded,
        failure_count=len(results) - succeeded,
        results=tuple(results),
    )
    return _summarize(report, noun="deletion")


@dataclass(frozen=True, slots=True)
class GuildList:
    guilds: tuple[GuildRef, ...]


async def fetch_guilds(ctx: BotContext) -> Result[GuildList]:
    """List the bot's guilds over REST, for use without a gateway connection."""
    if not ctx.settings.has_credentials:
        return failure(CREDENTIALS_REQUIRED)
    try:
        async with ctx.rest_client() as rest:
            guilds = await rest.list_guilds()
    except Exception as exc:
        logger.error(
            "sync.fetch_guilds_failed",
            error=str(exc),
            error_type=exc.__class__.__name__,
            exc_info=not isinstance(exc, DiscordApiError),
        )
        return failure(exc)
    return success(GuildList(tuple(guilds)))
