from __future__ import annotations

import discord

from .interaction import Interaction

ERROR_COLOR = discord.Colour(0xFF0000)
INFO_COLOR = discord.Colour(0x0099FF)
SUCCESS_COLOR = discord.Colour(0x00FF00)
BOOST_COLOR = discord.Colour(0xFF73FA)

FOOTER = "HatchBot Framework"


def error_embed(
    title: str = "❌ Error",
    description: str = "An error occurred while executing this command.",
    *,
    footer: str | None = None,
) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=description,
        colour=ERROR_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    if footer is not None:
        embed.set_footer(text=footer)
    return embed


async def send_error(interaction: Interaction, embed: discord.Embed) -> None:
    """Reply with ``embed``, or replace the existing reply if already acknowledged."""
    if interaction.acknowledged:
        await interaction.edit_reply(embed=embed, view=None)
    else:
        await interaction.reply(embed=embed, ephemeral=True)


def pong_embed(
    bot_latency_ms: int, api_latency_ms: int, *, updated: bool = False
) -> discord.Embed:
    now = discord.utils.utcnow()
    embed = discord.Embed(title="🏓 Pong!", colour=SUCCESS_COLOR, timestamp=now)
    embed.add_field(name="📡 Bot Latency", value=f"{bot_latency_ms}ms", inline=True)
    embed.add_field(name="💓 API Latency", value=f"{api_latency_ms}ms", inline=True)
    if updated:
        embed.add_field(
            name="🔄 Updated", value=discord.utils.format_dt(now, "R"), inline=True
        )
        embed.set_footer(text=f"{FOOTER} • Updated")
    else:
        embed.set_footer(text=FOOTER)
    return embed
