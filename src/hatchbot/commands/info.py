from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..embeds import INFO_COLOR, error_embed, send_error
from ..handlers import CommandHandler, CommandOption, CommandSchema, OptionType
from ..logging import get_logger

if TYPE_CHECKING:
    from ..context import BotContext
    from ..interaction import DiscordInteraction

logger = get_logger(__name__)

SERVER_DETAILS_ID = "server_info_details"


def _relative(dt) -> str:
    return discord.utils.format_dt(dt, "R") if dt is not None else "unknown"


def server_details_view() -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(
        discord.ui.Select(
            custom_id=SERVER_DETAILS_ID,
            placeholder="Select category for more details...",
            options=[
                discord.SelectOption(
                    label="Channels",
                    description="View channel breakdown",
                    value="channels",
                    emoji="💬",
                ),
                discord.SelectOption(
                    label="Roles",
                    description="View role information",
                    value="roles",
                    emoji="🎭",
                ),
                discord.SelectOption(
                    label="Boosts",
                    description="View boost information",
                    value="boosts",
                    emoji="🚀",
                ),
            ],
        )
    )
    return view


def server_embed(guild: discord.Guild) -> discord.Embed:
    embed = discord.Embed(
        title=f"📊 {guild.name} Server Information",
        description=guild.description or None,
        colour=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    if guild.icon is not None:
        embed.set_thumbnail(url=guild.icon.url)
    embed.add_field(name="👑 Owner", value=f"<@{guild.owner_id}>", inline=True)
    embed.add_field(name="📅 Created", value=_relative(guild.created_at), inline=True)
    embed.add_field(name="👥 Members", value=str(guild.member_count or 0), inline=True)
    embed.add_field(name="💬 Channels", value=str(len(guild.channels)), inline=True)
    embed.add_field(name="🎭 Roles", value=str(len(guild.roles)), inline=True)
    embed.add_field(name="😊 Emojis", value=str(len(guild.emojis)), inline=True)
    embed.set_footer(text=f"Server ID: {guild.id}")
    return embed


def user_embed(
    user: discord.abc.User, member: discord.Member | None
) -> discord.Embed:
    embed = discord.Embed(
        title=f"👤 {user.display_name} User Information",
        colour=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.set_thumbnail(url=user.display_avatar.url)
    embed.add_field(name="🏷️ Username", value=user.name, inline=True)
    embed.add_field(name="🆔 User ID", value=str(user.id), inline=True)
    embed.add_field(
        name="📅 Account Created", value=_relative(user.created_at), inline=True
    )
    if member is not None:
        embed.add_field(
            name="📅 Joined Server", value=_relative(member.joined_at), inline=True
        )
        # every member has @everyone
        extra_roles = len(member.roles) - 1
        embed.add_field(
            name="🎭 Roles",
            value=str(extra_roles) if extra_roles > 0 else "None",
            inline=True,
        )
        if member.nick:
            embed.add_field(name="📝 Nickname", value=member.nick, inline=True)
    return embed


async def _resolve_member(
    guild: discord.Guild | None, user_id: int
) -> discord.Member | None:
    if guild is None:
        return None
    member = guild.get_member(user_id)
    if member is not None:
        return member
    try:
        return await guild.fetch_member(user_id)
    except discord.HTTPException:
        return None


async def handle_server_info(interaction: DiscordInteraction) -> None:
    guild = interaction.guild
    if guild is None:
        await interaction.reply(
            "This command can only be used in a server.", ephemeral=True
        )
        return
    await interaction.reply(embed=server_embed(guild), view=server_details_view())


async def handle_user_info(interaction: DiscordInteraction) -> None:
    target = interaction.option_value("target")
    if target is None:
        user: discord.abc.User = interaction.raw.user
    else:
        user = await interaction.raw.client.get_or_fetch_user(int(target))
    member = await _resolve_member(interaction.guild, user.id)
    await interaction.reply(embed=user_embed(user, member))


async def execute(ctx: BotContext, interaction: DiscordInteraction) -> None:
    subcommand = interaction.subcommand
    try:
        if subcommand == "server":
            await handle_server_info(interaction)
        elif subcommand == "user":
            await handle_user_info(interaction)
    except discord.HTTPException as exc:
        logger.error("command.info_failed", subcommand=subcommand, error=str(exc))
        await send_error(interaction, error_embed())


COMMAND = CommandHandler(
    schema=CommandSchema(
        name="info",
        description="Get information about the server or a user",
        options=[
            CommandOption(
                type=OptionType.SUB_COMMAND,
                name="server",
                description="Get server information",
            ),
            CommandOption(
                type=OptionType.SUB_COMMAND,
                name="user",
                description="Get user information",
                options=[
                    CommandOption(
                        type=OptionType.USER,
                        name="target",
                        description="The user to get info about",
                        required=False,
                    )
                ],
            ),
        ],
    ),
    execute=execute,
)
