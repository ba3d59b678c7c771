"""Route inbound interactions to registered command and component handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .embeds import error_embed, send_error
from .interaction import Interaction, InteractionKind
from .logging import get_logger

if TYPE_CHECKING:
    from .context import BotContext

logger = get_logger(__name__)

COMPONENT_UNAVAILABLE = "❌ This component is no longer available."
ERROR_TITLE = "❌ Something went wrong!"
ERROR_DESCRIPTION = (
    "An error occurred while processing your request. Please try again later."
)
ERROR_FOOTER = "If this persists, contact support"


async def dispatch_interaction(ctx: BotContext, interaction: Interaction) -> None:
    """Handle one interaction. Never raises."""
    try:
        kind = interaction.kind
        if kind is InteractionKind.COMMAND:
            await handle_command(ctx, interaction)
        elif kind is InteractionKind.COMPONENT:
            await handle_component(ctx, interaction)
        elif kind is InteractionKind.AUTOCOMPLETE:
            await handle_autocomplete(ctx, interaction)
    except Exception as exc:
        logger.exception("dispatch.interaction_error", error=str(exc))
        await handle_interaction_error(interaction)


async def handle_command(ctx: BotContext, interaction: Interaction) -> None:
    name = interaction.command_name
    command = ctx.commands.get(name) if name else None
    if command is None:
        # unknown commands are dropped without telling the user
        logger.error("dispatch.command_not_found", command=name)
        return

    try:
        await command.execute(ctx, interaction)
    except Exception:
        logger.error("dispatch.command_failed", command=name, user=interaction.user_tag)
        raise
    logger.info("dispatch.command_executed", command=name, user=interaction.user_tag)


async def handle_component(ctx: BotContext, interaction: Interaction) -> None:
    custom_id = interaction.custom_id
    component = ctx.components.get(custom_id) if custom_id else None
    if component is None:
        logger.warning("dispatch.component_not_found", custom_id=custom_id)
        await interaction.reply(COMPONENT_UNAVAILABLE, ephemeral=True)
        return

    try:
        await component.execute(ctx, interaction)
    except Exception:
        logger.error(
            "dispatch.component_failed", custom_id=custom_id, user=interaction.user_tag
        )
        raise
    logger.info(
        "dispatch.component_executed", custom_id=custom_id, user=interaction.user_tag
    )


async def handle_autocomplete(ctx: BotContext, interaction: Interaction) -> None:
    name = interaction.command_name
    command = ctx.commands.get(name) if name else None
    if command is None or command.autocomplete is None:
        return

    try:
        await command.autocomplete(ctx, interaction)
    except Exception as exc:
        logger.exception("dispatch.autocomplete_failed", command=name, error=str(exc))


async def handle_interaction_error(interaction: Interaction) -> None:
    embed = error_embed(ERROR_TITLE, ERROR_DESCRIPTION, footer=ERROR_FOOTER)
    try:
        await send_error(interaction, embed)
    except Exception as exc:
        logger.error(
            "dispatch.error_notice_failed",
            error=str(exc),
            error_type=exc.__class__.__name__,
        )
