from __future__ import annotations

import math
from typing import TYPE_CHECKING

import discord

from ..embeds import error_embed, pong_embed, send_error
from ..handlers import CommandHandler, CommandSchema
from ..logging import get_logger

if TYPE_CHECKING:
    from ..context import BotContext
    from ..interaction import DiscordInteraction

logger = get_logger(__name__)

PING_AGAIN_ID = "ping_again"


def api_latency_ms(ctx: BotContext) -> int:
    latency = ctx.client.latency if ctx.client is not None else float("nan")
    if math.isnan(latency) or math.isinf(latency):
        return 0
    return round(latency * 1000)


def ping_again_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(
        discord.ui.Button(
            custom_id=PING_AGAIN_ID,
            label="Ping Again",
            style=discord.ButtonStyle.primary,
            emoji="🏓",
        )
    )
    return view


async def execute(ctx: BotContext, interaction: DiscordInteraction) -> None:
    try:
        await interaction.reply("🏓 Pinging...")
        elapsed = discord.utils.utcnow() - interaction.created_at
        embed = pong_embed(
            round(elapsed.total_seconds() * 1000), api_latency_ms(ctx)
        )
        await interaction.edit_reply(content=None, embed=embed, view=ping_again_view())
    except discord.HTTPException as exc:
        logger.error("command.ping_failed", error=str(exc))
        await send_error(interaction, error_embed())


COMMAND = CommandHandler(
    schema=CommandSchema(
        name="ping", description="Replies with Pong and bot latency!"
    ),
    execute=execute,
)
