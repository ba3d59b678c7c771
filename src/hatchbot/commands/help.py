from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..embeds import FOOTER, INFO_COLOR
from ..handlers import CommandHandler, CommandOption, CommandSchema, OptionType

if TYPE_CHECKING:
    from ..context import BotContext
    from ..interaction import DiscordInteraction

# Discord caps autocomplete responses at 25 choices
MAX_CHOICES = 25


def help_embed(ctx: BotContext, name: str | None) -> discord.Embed:
    embed = discord.Embed(colour=INFO_COLOR, timestamp=discord.utils.utcnow())
    embed.set_footer(text=FOOTER)
    if name is not None:
        command = ctx.commands.get(name)
        if command is None:
            embed.title = "❓ Unknown command"
            embed.description = f"`/{name}` is not a registered command."
            return embed
        embed.title = f"/{command.name}"
        embed.description = command.schema.description
        for option in command.schema.options:
            embed.add_field(name=option.name, value=option.description, inline=False)
        return embed

    embed.title = "📖 Available commands"
    embed.description = "\n".join(
        f"`/{handler.name}` {handler.schema.description}"
        for _, handler in sorted(ctx.commands.items())
    ) or "No commands are registered."
    return embed


async def execute(ctx: BotContext, interaction: DiscordInteraction) -> None:
    name = interaction.option_value("command")
    await interaction.reply(embed=help_embed(ctx, name), ephemeral=True)


async def autocomplete(ctx: BotContext, interaction: DiscordInteraction) -> None:
    prefix = interaction.focused_value.lower()
    names = sorted(name for name in ctx.commands if name.startswith(prefix))
    await interaction.send_choices((name, name) for name in names[:MAX_CHOICES])


COMMAND = CommandHandler(
    schema=CommandSchema(
        name="help",
        description="Show available commands",
        options=[
            CommandOption(
                type=OptionType.STRING,
                name="command",
                description="Show details for a single command",
                required=False,
                autocomplete=True,
            )
        ],
    ),
    execute=execute,
    autocomplete=autocomplete,
)
