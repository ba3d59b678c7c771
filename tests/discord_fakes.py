from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from hatchbot.config import HandlerPaths
from hatchbot.context import BotContext
from hatchbot.interaction import UNSET, InteractionKind
from hatchbot.settings import BotSettings


class FakeInteraction:
    def __init__(
        self,
        kind: InteractionKind,
        *,
        command_name: str | None = None,
        custom_id: str | None = None,
        values: list[str] | None = None,
        focused_value: str = "",
        options: dict[str, Any] | None = None,
        acknowledged: bool = False,
        reply_error: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.command_name = command_name
        self.custom_id = custom_id
        self.values = values or []
        self.focused_value = focused_value
        self.options = options or {}
        self.user_tag = "tester"
        self.acknowledged = acknowledged
        self.guild = None
        self.reply_error = reply_error
        self.replies: list[dict[str, Any]] = []
        self.edits: list[dict[str, Any]] = []
        self.choices: list[tuple[str, str]] | None = None
        self.deferred = False

    def option_value(self, name: str) -> Any:
        return self.options.get(name)

    async def reply(
        self,
        content: str | None = None,
        *,
        embed: Any = None,
        view: Any = None,
        ephemeral: bool = False,
    ) -> None:
        if self.reply_error is not None:
            raise self.reply_error
        self.replies.append(
            {"content": content, "embed": embed, "view": view, "ephemeral": ephemeral}
        )
        self.acknowledged = True

    async def edit_reply(
        self, *, content: Any = UNSET, embed: Any = UNSET, view: Any = UNSET
    ) -> None:
        if self.reply_error is not None:
            raise self.reply_error
        edit: dict[str, Any] = {}
        if content is not UNSET:
            edit["content"] = content
        if embed is not UNSET:
            edit["embed"] = embed
        if view is not UNSET:
            edit["view"] = view
        self.edits.append(edit)

    async def defer_update(self) -> None:
        self.deferred = True
        self.acknowledged = True

    async def send_choices(self, choices: Iterable[tuple[str, str]]) -> None:
        self.choices = list(choices)


class FakeEmitter:
    def __init__(self) -> None:
        self.on_calls: list[tuple[str, Callable[..., Any]]] = []
        self.once_calls: list[tuple[str, Callable[..., Any]]] = []

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self.on_calls.append((event, listener))

    def once(self, event: str, listener: Callable[..., Any]) -> None:
        self.once_calls.append((event, listener))


@dataclass(frozen=True, slots=True)
class FakeGuild:
    id: int
    name: str


@dataclass(slots=True)
class FakeGuildSource:
    guilds: list[FakeGuild] = field(default_factory=list)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeDiscordApi:
    """httpx transport that echoes command lists back like Discord does."""

    def __init__(
        self,
        *,
        failing_guilds: Iterable[str] = (),
        raising_guilds: Iterable[str] = (),
        guilds: list[dict[str, Any]] | None = None,
    ) -> None:
        self.failing_guilds = set(failing_guilds)
        self.raising_guilds = set(raising_guilds)
        self.guilds = guilds or []
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path.endswith("/users/@me/guilds"):
            return httpx.Response(200, json=self.guilds)
        for guild_id in self.raising_guilds:
            if f"/guilds/{guild_id}/" in path:
                raise RuntimeError(f"transport broke on guild {guild_id}")
        for guild_id in self.failing_guilds:
            if f"/guilds/{guild_id}/" in path:
                return httpx.Response(500, json={"message": "Internal Server Error"})
        body = json.loads(request.content or b"[]")
        echoed = [
            {"id": str(index + 1), **command} for index, command in enumerate(body)
        ]
        return httpx.Response(200, json=echoed)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def put_paths(self) -> list[str]:
        return [r.url.path for r in self.requests if r.method == "PUT"]


def make_settings(**overrides: Any) -> BotSettings:
    values: dict[str, Any] = {"bot_token": "token", "client_id": "app"}
    values.update(overrides)
    return BotSettings(_env_file=None, **values)


def make_ctx(
    root: Path,
    *,
    api: FakeDiscordApi | None = None,
    sleep: Callable[[float], Any] | None = None,
    **settings: Any,
) -> BotContext:
    paths = HandlerPaths.under(root)
    for directory in (paths.commands, paths.components, paths.events):
        directory.mkdir(parents=True, exist_ok=True)
    ctx = BotContext(
        settings=make_settings(**settings),
        paths=paths,
        http_transport=api.transport if api is not None else None,
    )
    if sleep is not None:
        ctx.sleep = sleep
    return ctx


COMMAND_MODULE = """\
from hatchbot.handlers import CommandHandler, CommandSchema


async def execute(ctx, interaction):
    await interaction.reply({reply!r})


COMMAND = CommandHandler(
    schema=CommandSchema(name={name!r}, description={description!r}),
    execute=execute,
)
"""

COMPONENT_MODULE = """\
from hatchbot.handlers import ComponentHandler


async def execute(ctx, interaction):
    await interaction.reply("clicked", ephemeral=True)


COMPONENT = ComponentHandler(custom_id={custom_id!r}, execute=execute)
"""

EVENT_MODULE = """\
from hatchbot.handlers import EventDefinition


async def execute(ctx, *args):
    return None


EVENT = EventDefinition(name={name!r}, execute=execute, once={once!r})
"""


def write_command(
    directory: Path,
    name: str,
    *,
    description: str = "A test command",
    reply: str = "ok",
    filename: str | None = None,
) -> Path:
    path = directory / (filename or f"{name}.py")
    path.write_text(
        COMMAND_MODULE.format(name=name, description=description, reply=reply),
        encoding="utf-8",
    )
    return path


def write_component(directory: Path, custom_id: str) -> Path:
    path = directory / f"{custom_id}.py"
    path.write_text(COMPONENT_MODULE.format(custom_id=custom_id), encoding="utf-8")
    return path


def write_event(directory: Path, name: str, *, once: bool = False) -> Path:
    path = directory / f"{name}.py"
    path.write_text(EVENT_MODULE.format(name=name, once=once), encoding="utf-8")
    return path
