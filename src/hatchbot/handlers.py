"""Handler definitions exported by command, component and event modules."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .context import BotContext
    from .interaction import Interaction

InteractionHandler = Callable[["BotContext", "Interaction"], Awaitable[None]]
EventHandler = Callable[..., Awaitable[None]]

COMMAND_NAME_PATTERN = r"^[-_a-z0-9]{1,32}$"


class CommandType(IntEnum):
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3


class OptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


class OptionChoice(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    value: str | int | float


class CommandOption(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: OptionType
    name: str = Field(pattern=COMMAND_NAME_PATTERN)
    description: str = Field(min_length=1, max_length=100)
    required: bool | None = None
    autocomplete: bool | None = None
    choices: list[OptionChoice] | None = None
    options: list[CommandOption] | None = None


class CommandSchema(BaseModel):
    """Slash command description as registered with Discord."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(pattern=COMMAND_NAME_PATTERN)
    description: str = Field(min_length=1, max_length=100)
    type: CommandType = CommandType.CHAT_INPUT
    options: list[CommandOption] = Field(default_factory=list)
    dm_permission: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True, slots=True)
class CommandHandler:
    schema: CommandSchema
    execute: InteractionHandler
    autocomplete: InteractionHandler | None = None

    @property
    def name(self) -> str:
        return self.schema.name


@dataclass(frozen=True, slots=True)
class ComponentHandler:
    custom_id: str
    execute: InteractionHandler


@dataclass(frozen=True, slots=True)
class EventDefinition:
    """Gateway event listener.

    ``execute`` receives the bot context followed by the event's own
    arguments.
    """

    name: str
    execute: EventHandler
    once: bool = False
