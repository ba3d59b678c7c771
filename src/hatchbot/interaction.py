"""Thin adapter over ``discord.Interaction`` used by the dispatcher and handlers."""

from __future__ import annotations

import datetime
from collections.abc import Iterable, Iterator
from enum import Enum
from typing import Any, Protocol

import discord

# Discord component types routed to component handlers
BUTTON = 2
STRING_SELECT = 3

SUB_COMMAND = 1
SUB_COMMAND_GROUP = 2


class InteractionKind(Enum):
    COMMAND = "command"
    COMPONENT = "component"
    AUTOCOMPLETE = "autocomplete"
    UNHANDLED = "unhandled"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class Interaction(Protocol):
    @property
    def kind(self) -> InteractionKind: ...

    @property
    def command_name(self) -> str | None: ...

    @property
    def custom_id(self) -> str | None: ...

    @property
    def values(self) -> list[str]: ...

    @property
    def user_tag(self) -> str: ...

    @property
    def acknowledged(self) -> bool: ...

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: discord.Embed | None = None,
        view: discord.ui.View | None = None,
        ephemeral: bool = False,
    ) -> None: ...

    async def edit_reply(
        self,
        *,
        content: Any = UNSET,
        embed: Any = UNSET,
        view: Any = UNSET,
    ) -> None: ...

    async def defer_update(self) -> None: ...

    async def send_choices(self, choices: Iterable[tuple[str, str]]) -> None: ...


def _iter_options(options: list[dict[str, Any]] | None) -> Iterator[dict[str, Any]]:
    for option in options or []:
        yield option
        yield from _iter_options(option.get("options"))


class DiscordInteraction:
    """Wraps a py-cord interaction."""

    def __init__(self, raw: discord.Interaction) -> None:
        self.raw = raw

    @property
    def _data(self) -> dict[str, Any]:
        return self.raw.data or {}

    @property
    def kind(self) -> InteractionKind:
        itype = self.raw.type
        if itype == discord.InteractionType.application_command:
            # only chat-input commands; user and message context menus are not routed
            if self._data.get("type", 1) == 1:
                return InteractionKind.COMMAND
            return InteractionKind.UNHANDLED
        if itype == discord.InteractionType.component:
            if self._data.get("component_type") in (BUTTON, STRING_SELECT):
                return InteractionKind.COMPONENT
            return InteractionKind.UNHANDLED
        if itype == discord.InteractionType.auto_complete:
            return InteractionKind.AUTOCOMPLETE
        return InteractionKind.UNHANDLED

    @property
    def command_name(self) -> str | None:
        return self._data.get("name")

    @property
    def custom_id(self) -> str | None:
        return self._data.get("custom_id")

    @property
    def values(self) -> list[str]:
        return list(self._data.get("values") or [])

    @property
    def user_tag(self) -> str:
        user = self.raw.user
        return str(user) if user is not None else "unknown"

    @property
    def acknowledged(self) -> bool:
        return self.raw.response.is_done()

    @property
    def created_at(self) -> datetime.datetime:
        return self.raw.created_at

    @property
    def guild(self) -> discord.Guild | None:
        return self.raw.guild

    @property
    def subcommand(self) -> str | None:
        for option in self._data.get("options") or []:
            if option.get("type") in (SUB_COMMAND, SUB_COMMAND_GROUP):
                return option.get("name")
        return None

    def option_value(self, name: str) -> Any:
        for option in _iter_options(self._data.get("options")):
            if option.get("name") == name and "value" in option:
                return option["value"]
        return None

    @property
    def focused_value(self) -> str:
        for option in _iter_options(self._data.get("options")):
            if option.get("focused"):
                return str(option.get("value") or "")
        return ""

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: discord.Embed | None = None,
        view: discord.ui.View | None = None,
        ephemeral: bool = False,
    ) -> None:
        kwargs: dict[str, Any] = {"ephemeral": ephemeral}
        if embed is not None:
            kwargs["embed"] = embed
        if view is not None:
            kwargs["view"] = view
        await self.raw.response.send_message(content, **kwargs)

    async def edit_reply(
        self,
        *,
        content: Any = UNSET,
        embed: Any = UNSET,
        view: Any = UNSET,
    ) -> None:
        kwargs: dict[str, Any] = {}
        if content is not UNSET:
            kwargs["content"] = content
        if embed is not UNSET:
            kwargs["embed"] = embed
        if view is not UNSET:
            kwargs["view"] = view
        await self.raw.edit_original_response(**kwargs)

    async def defer_update(self) -> None:
        await self.raw.response.defer()

    async def send_choices(self, choices: Iterable[tuple[str, str]]) -> None:
        await self.raw.response.send_autocomplete_result(
            choices=[discord.OptionChoice(name=name, value=value) for name, value in choices]
        )
