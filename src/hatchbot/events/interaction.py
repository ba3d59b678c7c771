from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from ..dispatch import dispatch_interaction
from ..handlers import EventDefinition
from ..interaction import DiscordInteraction

if TYPE_CHECKING:
    from ..context import BotContext


async def execute(ctx: BotContext, interaction: discord.Interaction) -> None:
    await dispatch_interaction(ctx, DiscordInteraction(interaction))


EVENT = EventDefinition(name="on_interaction", execute=execute)
