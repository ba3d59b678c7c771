from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..handlers import EventDefinition
from ..logging import get_logger

if TYPE_CHECKING:
    from ..context import BotContext

logger = get_logger(__name__)


async def execute(ctx: BotContext) -> None:
    client = ctx.client
    if client is None:
        return
    guilds = client.guilds
    logger.info(
        "bot.ready",
        user=str(client.user),
        guilds=len(guilds),
        users=sum(guild.member_count or 0 for guild in guilds),
    )
    try:
        await client.set_presence(
            discord.Activity(
                type=discord.ActivityType.watching,
                name=f"{len(guilds)} servers | /help",
            )
        )
    except discord.DiscordException as exc:
        logger.error("bot.presence_failed", error=str(exc))
        return
    logger.info("bot.presence_set")


EVENT = EventDefinition(name="on_ready", execute=execute, once=True)
