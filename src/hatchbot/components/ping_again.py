from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..commands.ping import PING_AGAIN_ID, api_latency_ms
from ..embeds import pong_embed
from ..handlers import ComponentHandler
from ..logging import get_logger

if TYPE_CHECKING:
    from ..context import BotContext
    from ..interaction import DiscordInteraction

logger = get_logger(__name__)


async def execute(ctx: BotContext, interaction: DiscordInteraction) -> None:
    try:
        await interaction.defer_update()
        message = interaction.raw.message
        started = message.created_at if message is not None else interaction.created_at
        elapsed = discord.utils.utcnow() - started
        embed = pong_embed(
            round(elapsed.total_seconds() * 1000), api_latency_ms(ctx), updated=True
        )
        await interaction.edit_reply(embed=embed)
    except discord.HTTPException as exc:
        logger.error("component.ping_again_failed", error=str(exc))
        if not interaction.acknowledged:
            await interaction.reply(
                "❌ An error occurred while updating the ping.", ephemeral=True
            )


COMPONENT = ComponentHandler(custom_id=PING_AGAIN_ID, execute=execute)
