from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..commands.info import SERVER_DETAILS_ID
from ..embeds import BOOST_COLOR, ERROR_COLOR, INFO_COLOR
from ..handlers import ComponentHandler
from ..logging import get_logger

if TYPE_CHECKING:
    from ..context import BotContext
    from ..interaction import DiscordInteraction

logger = get_logger(__name__)

MAX_LISTED_ROLES = 20


def channels_embed(guild: discord.Guild) -> discord.Embed:
    channels = guild.channels
    counts = {
        "📝 Text Channels": sum(1 for c in channels if c.type == discord.ChannelType.text),
        "🔊 Voice Channels": sum(
            1 for c in channels if c.type == discord.ChannelType.voice
        ),
        "📁 Categories": sum(
            1 for c in channels if c.type == discord.ChannelType.category
        ),
        "🧵 Threads": len(guild.threads),
        "📊 Total Channels": len(channels),
    }
    embed = discord.Embed(
        title="💬 Channel Information",
        colour=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    for name, value in counts.items():
        embed.add_field(name=name, value=str(value), inline=True)
    embed.set_footer(text=f"{guild.name} Channel Stats")
    return embed


def roles_embed(guild: discord.Guild) -> discord.Embed:
    roles = [role for role in guild.roles if role != guild.default_role]
    embed = discord.Embed(
        title="🎭 Role Information",
        colour=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(name="📊 Total Roles", value=str(len(roles)), inline=True)
    embed.add_field(
        name="🎨 Colored Roles",
        value=str(sum(1 for role in roles if role.colour.value != 0)),
        inline=True,
    )
    embed.add_field(
        name="🔧 Managed Roles",
        value=str(sum(1 for role in roles if role.managed)),
        inline=True,
    )
    top = sorted(roles, key=lambda role: role.position, reverse=True)[:MAX_LISTED_ROLES]
    if top:
        embed.add_field(
            name=f"🏷️ Roles (Top {MAX_LISTED_ROLES})",
            value=", ".join(role.mention for role in top),
            inline=False,
        )
    embed.set_footer(text=f"{guild.name} Role Stats")
    return embed


def boosts_embed(guild: discord.Guild) -> discord.Embed:
    embed = discord.Embed(
        title="🚀 Server Boost Information",
        colour=BOOST_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(name="✨ Boost Level", value=str(guild.premium_tier), inline=True)
    embed.add_field(
        name="💎 Boost Count",
        value=str(guild.premium_subscription_count or 0),
        inline=True,
    )
    embed.add_field(
        name="👑 Boosters", value=str(len(guild.premium_subscribers)), inline=True
    )
    embed.set_footer(text=f"{guild.name} Boost Stats")
    return embed


BUILDERS = {
    "channels": channels_embed,
    "roles": roles_embed,
    "boosts": boosts_embed,
}


def invalid_selection_embed() -> discord.Embed:
    return discord.Embed(
        title="❌ Invalid Selection",
        description="Please select a valid option.",
        colour=ERROR_COLOR,
    )


async def execute(ctx: BotContext, interaction: DiscordInteraction) -> None:
    selection = interaction.values[0] if interaction.values else None
    guild = interaction.guild
    builder = BUILDERS.get(selection or "")
    try:
        if guild is None or builder is None:
            embed = invalid_selection_embed()
        else:
            embed = builder(guild)
        await interaction.reply(embed=embed, ephemeral=True)
    except discord.HTTPException as exc:
        logger.error("component.server_info_details_failed", error=str(exc))
        if not interaction.acknowledged:
            await interaction.reply(
                "❌ An error occurred while fetching server details.", ephemeral=True
            )


COMPONENT = ComponentHandler(custom_id=SERVER_DETAILS_ID, execute=execute)
