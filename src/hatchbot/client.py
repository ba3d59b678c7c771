"""Discord gateway client wrapper."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

import discord

from .logging import get_logger

logger = get_logger(__name__)

Listener = Callable[..., Awaitable[None]]


class BotClient:
    """Wrapper around a py-cord ``discord.Client``.

    Slash commands are not handled by the library; interactions reach the
    bot through the ``on_interaction`` listener installed by the event
    handlers.
    """

    def __init__(
        self,
        token: str,
        *,
        intents: discord.Intents | None = None,
    ) -> None:
        self._token = token
        self._intents = intents
        # Defer client creation until inside async context
        self._client: discord.Client | None = None
        self._ready_event: asyncio.Event | None = None
        self._start_task: asyncio.Task[None] | None = None

    def _ensure_client(self) -> discord.Client:
        if self._client is not None:
            return self._client

        intents = self._intents or discord.Intents.default()
        intents.guilds = True

        self._client = discord.Client(intents=intents)
        self._ready_event = asyncio.Event()

        @self._client.event
        async def on_ready() -> None:
            assert self._ready_event is not None
            self._ready_event.set()

        @self._client.event
        async def on_error(event_method: str, *args: Any, **kwargs: Any) -> None:
            logger.exception("client.event_error", event_name=event_method)

        return self._client

    @property
    def client(self) -> discord.Client:
        return self._ensure_client()

    @property
    def user(self) -> discord.ClientUser | None:
        if self._client is None:
            return None
        return self._client.user

    @property
    def guilds(self) -> list[discord.Guild]:
        if self._client is None:
            return []
        return list(self._client.guilds)

    @property
    def latency(self) -> float:
        if self._client is None:
            return float("nan")
        return self._client.latency

    def on(self, event: str, listener: Listener) -> None:
        self._ensure_client().add_listener(listener, event)

    def once(self, event: str, listener: Listener) -> None:
        client = self._ensure_client()

        async def _once(*args: Any) -> None:
            client.remove_listener(_once, event)
            await listener(*args)

        client.add_listener(_once, event)

    async def set_presence(self, activity: discord.BaseActivity) -> None:
        await self._ensure_client().change_presence(
            activity=activity, status=discord.Status.online
        )

    async def start(self) -> None:
        """Log in, connect, and wait until the gateway reports ready."""
        client = self._ensure_client()
        assert self._ready_event is not None

        async def _run_client() -> None:
            try:
                await client.start(self._token)
            except asyncio.CancelledError:
                pass
            except RuntimeError as e:
                # Suppress "Session is closed" error during shutdown
                if "Session is closed" not in str(e):
                    raise

        self._start_task = asyncio.create_task(_run_client(), name="discord-client-start")
        ready = asyncio.create_task(self._ready_event.wait())
        done, _ = await asyncio.wait(
            {self._start_task, ready}, return_when=asyncio.FIRST_COMPLETED
        )
        if ready not in done:
            ready.cancel()
            # login failed before ready; surface the library's error
            self._start_task.result()
            raise RuntimeError("Discord client stopped before becoming ready")

    async def wait_until_ready(self) -> None:
        self._ensure_client()
        assert self._ready_event is not None
        await self._ready_event.wait()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            if self._start_task is not None and not self._start_task.done():
                self._start_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._start_task
