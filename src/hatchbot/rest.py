"""Minimal Discord REST client for application command registration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from .config import DISCORD_API_BASE_URL
from .logging import get_logger

logger = get_logger(__name__)

# /users/@me/guilds page size cap
GUILD_PAGE_LIMIT = 200


class DiscordApiError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True, slots=True)
class GuildRef:
    id: str
    name: str


class DiscordRestClient:
    def __init__(
        self,
        token: str,
        application_id: str,
        *,
        base_url: str = DISCORD_API_BASE_URL,
        timeout_s: float = 30,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not token:
            raise ValueError("Discord bot token is empty")
        if not application_id:
            raise ValueError("Discord application id is empty")
        self._application_id = application_id
        self._base = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bot {token}"}
        self._client = client or httpx.AsyncClient(timeout=timeout_s, transport=transport)
        self._owns_client = client is None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> DiscordRestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Any = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base}{path}"
        logger.debug("discord.request", method=method, path=path, params=params)
        try:
            resp = await self._client.request(
                method, url, json=json_data, params=params, headers=self._headers
            )
        except httpx.HTTPError as e:
            logger.error(
                "discord.network_error",
                method=method,
                path=path,
                error=str(e),
                error_type=e.__class__.__name__,
            )
            raise DiscordApiError(f"Network error calling {path}: {e}") from e

        if resp.is_error:
            body = resp.text
            logger.error(
                "discord.http_error",
                method=method,
                path=path,
                status=resp.status_code,
                body=body,
            )
            raise DiscordApiError(
                _error_message(resp), status=resp.status_code
            )

        try:
            return resp.json()
        except ValueError as e:
            logger.error(
                "discord.bad_response",
                method=method,
                path=path,
                status=resp.status_code,
                body=resp.text,
            )
            raise DiscordApiError(
                f"Invalid JSON from {path}", status=resp.status_code
            ) from e

    async def _put_commands(
        self, path: str, commands: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        payload = await self._request("PUT", path, list(commands))
        if not isinstance(payload, list):
            raise DiscordApiError(f"Expected a command list from {path}")
        return payload

    async def put_global_commands(
        self, commands: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        return await self._put_commands(
            f"/applications/{self._application_id}/commands", commands
        )

    async def put_guild_commands(
        self, guild_id: str | int, commands: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        return await self._put_commands(
            f"/applications/{self._application_id}/guilds/{guild_id}/commands",
            commands,
        )

    async def list_guilds(self) -> list[GuildRef]:
        """Every guild the bot is in, following the `after` cursor page by page."""
        guilds: list[GuildRef] = []
        after: str | None = None
        while True:
            params: dict[str, Any] = {"limit": GUILD_PAGE_LIMIT}
            if after is not None:
                params["after"] = after
            payload = await self._request("GET", "/users/@me/guilds", params=params)
            if not isinstance(payload, list):
                raise DiscordApiError("Expected a guild list from /users/@me/guilds")
            page = [
                GuildRef(id=str(item["id"]), name=str(item.get("name", item["id"])))
                for item in payload
                if isinstance(item, dict) and "id" in item
            ]
            guilds.extend(page)
            if len(payload) < GUILD_PAGE_LIMIT or not page:
                return guilds
            after = page[-1].id


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return f"{payload['message']} (HTTP {resp.status_code})"
    return f"HTTP {resp.status_code} {resp.reason_phrase}".strip()
