"""Wire event definitions into the client's listener table."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

from .handlers import EventDefinition
from .logging import get_logger

if TYPE_CHECKING:
    from .context import BotContext

logger = get_logger(__name__)

Listener = Callable[..., Awaitable[None]]


class EventEmitter(Protocol):
    def on(self, event: str, listener: Listener) -> None: ...

    def once(self, event: str, listener: Listener) -> None: ...


def subscribe(
    emitter: EventEmitter, ctx: BotContext, definition: EventDefinition
) -> Listener:
    async def listener(*args: Any) -> None:
        await definition.execute(ctx, *args)

    listener.__name__ = definition.name
    if definition.once:
        emitter.once(definition.name, listener)
    else:
        emitter.on(definition.name, listener)
    logger.debug(
        "router.subscribed", event_name=definition.name, once=definition.once
    )
    return listener
