from __future__ import annotations

import json
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from hatchbot.rest import GuildRef
from hatchbot.sync import (
    CLIENT_ID_REQUIRED,
    CREDENTIALS_REQUIRED,
    INVALID_CLIENT,
    NO_COMMANDS,
    NO_GUILDS,
    TOKEN_REQUIRED,
    GuildList,
    delete_commands_from_all_guilds,
    deploy_commands,
    deploy_commands_to_all_guilds,
    fetch_guilds,
)
from tests.discord_fakes import (
    FakeDiscordApi,
    FakeGuild,
    FakeGuildSource,
    RecordingSleep,
    make_ctx,
    write_command,
)

pytestmark = pytest.mark.anyio

THREE_GUILDS = FakeGuildSource(
    [FakeGuild(1, "One"), FakeGuild(2, "Two"), FakeGuild(3, "Three")]
)


class TestDeployCommands:
    async def test_no_commands_is_a_failure(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        ctx = make_ctx(tmp_path, api=api)

        result = await deploy_commands(ctx)

        assert not result.success
        assert result.error == NO_COMMANDS
        assert api.requests == []

    async def test_deploys_to_development_guild(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        ctx = make_ctx(tmp_path, api=api, guild_id="555")
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands(ctx)

        assert result.success
        assert result.data is not None
        assert result.data.command_count == 1
        assert result.data.is_global is False
        assert api.put_paths() == ["/api/v10/applications/app/guilds/555/commands"]
        request = api.requests[0]
        assert request.headers["Authorization"] == "Bot token"
        assert [c["name"] for c in json.loads(request.content)] == ["ping"]

    async def test_deploys_globally_without_guild(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        ctx = make_ctx(tmp_path, api=api)
        write_command(ctx.paths.commands, "ping")
        write_command(ctx.paths.commands, "info")

        result = await deploy_commands(ctx)

        assert result.success
        assert result.data is not None
        assert result.data.command_count == 2
        assert result.data.is_global is True
        assert api.put_paths() == ["/api/v10/applications/app/commands"]

    async def test_redeploy_sends_the_same_payload(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        ctx = make_ctx(tmp_path, api=api, guild_id="555")
        write_command(ctx.paths.commands, "ping")

        first = await deploy_commands(ctx)
        second = await deploy_commands(ctx)

        assert first == second
        assert api.requests[0].content == api.requests[1].content

    async def test_missing_token(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, bot_token=None)
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands(ctx)

        assert result.error == TOKEN_REQUIRED

    async def test_missing_client_id(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, client_id=None)
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands(ctx)

        assert result.error == CLIENT_ID_REQUIRED

    async def test_api_error_is_reported(self, tmp_path: Path) -> None:
        api = FakeDiscordApi(failing_guilds=["555"])
        ctx = make_ctx(tmp_path, api=api, guild_id="555")
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands(ctx)

        assert not result.success
        assert result.error == "Internal Server Error (HTTP 500)"

    async def test_unexpected_transport_error_becomes_failure(
        self, tmp_path: Path
    ) -> None:
        api = FakeDiscordApi(raising_guilds=["2"])
        ctx = make_ctx(tmp_path, api=api, guild_id="2")
        write_command(ctx.paths.commands, "ping")

        with capture_logs() as logs:
            result = await deploy_commands(ctx)

        assert not result.success
        assert result.error == "transport broke on guild 2"
        failed = [e for e in logs if e["event"] == "sync.deploy_failed"]
        assert failed[0]["error_type"] == "RuntimeError"
        assert failed[0]["exc_info"] is True


class TestDeployToAllGuilds:
    async def test_partial_failure_still_succeeds(self, tmp_path: Path) -> None:
        api = FakeDiscordApi(failing_guilds=["2"])
        sleep = RecordingSleep()
        ctx = make_ctx(tmp_path, api=api, sleep=sleep)
        write_command(ctx.paths.commands, "ping")

        with capture_logs() as logs:
            result = await deploy_commands_to_all_guilds(ctx, THREE_GUILDS)

        assert result.success
        assert result.error is None
        report = result.data
        assert report is not None
        assert report.total_guilds == 3
        assert report.success_count == 2
        assert report.failure_count == 1
        assert report.command_count == 1
        assert [r.guild_id for r in report.results] == ["1", "2", "3"]
        assert [r.success for r in report.results] == [True, False, True]
        assert report.results[1].guild_name == "Two"
        assert report.results[1].error == "Internal Server Error (HTTP 500)"
        assert sleep.calls == [1.0, 1.0]
        assert any(e["event"] == "sync.partial_deployment" for e in logs)

    async def test_unexpected_error_is_recorded_and_enumeration_continues(
        self, tmp_path: Path
    ) -> None:
        api = FakeDiscordApi(raising_guilds=["2"])
        sleep = RecordingSleep()
        ctx = make_ctx(tmp_path, api=api, sleep=sleep)
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands_to_all_guilds(ctx, THREE_GUILDS)

        assert result.success
        report = result.data
        assert report is not None
        assert (report.success_count, report.failure_count) == (2, 1)
        assert len(report.results) == 3
        assert report.results[1].error == "transport broke on guild 2"
        assert api.put_paths()[-1] == "/api/v10/applications/app/guilds/3/commands"
        assert sleep.calls == [1.0, 1.0]

    async def test_delay_uses_configured_value(self, tmp_path: Path) -> None:
        sleep = RecordingSleep()
        ctx = make_ctx(tmp_path, api=FakeDiscordApi(), sleep=sleep, deploy_delay=0.25)
        write_command(ctx.paths.commands, "ping")

        await deploy_commands_to_all_guilds(ctx, THREE_GUILDS)

        assert sleep.calls == [0.25, 0.25]

    async def test_all_guilds_failing(self, tmp_path: Path) -> None:
        api = FakeDiscordApi(failing_guilds=["1", "2"])
        ctx = make_ctx(tmp_path, api=api, sleep=RecordingSleep())
        write_command(ctx.paths.commands, "ping")
        source = FakeGuildSource([FakeGuild(1, "One"), FakeGuild(2, "Two")])

        result = await deploy_commands_to_all_guilds(ctx, source)

        assert not result.success
        assert result.error == "2 deployments failed"
        assert result.data is not None
        assert result.data.failure_count == 2

    async def test_no_guilds(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        ctx = make_ctx(tmp_path, api=api)
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands_to_all_guilds(ctx, FakeGuildSource())

        assert result.error == NO_GUILDS
        assert api.requests == []

    async def test_invalid_client(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path)
        write_command(ctx.paths.commands, "ping")

        assert (await deploy_commands_to_all_guilds(ctx)).error == INVALID_CLIENT
        assert (
            await deploy_commands_to_all_guilds(ctx, object())  # type: ignore[arg-type]
        ).error == INVALID_CLIENT

    async def test_no_commands(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path)

        result = await deploy_commands_to_all_guilds(ctx, THREE_GUILDS)

        assert result.error == NO_COMMANDS

    async def test_credentials_required(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, client_id=None)
        write_command(ctx.paths.commands, "ping")

        result = await deploy_commands_to_all_guilds(ctx, THREE_GUILDS)

        assert result.error == CREDENTIALS_REQUIRED


class TestDeleteFromAllGuilds:
    async def test_pushes_empty_list_to_each_guild(self, tmp_path: Path) -> None:
        api = FakeDiscordApi()
        sleep = RecordingSleep()
        ctx = make_ctx(tmp_path, api=api, sleep=sleep)
        write_command(ctx.paths.commands, "ping")

        result = await delete_commands_from_all_guilds(ctx, THREE_GUILDS)

        assert result.success
        assert result.data is not None
        assert result.data.success_count == 3
        assert api.put_paths() == [
            "/api/v10/applications/app/guilds/1/commands",
            "/api/v10/applications/app/guilds/2/commands",
            "/api/v10/applications/app/guilds/3/commands",
        ]
        assert all(json.loads(r.content) == [] for r in api.requests)
        assert sleep.calls == [1.0, 1.0]

    async def test_accepts_guild_list(self, tmp_path: Path) -> None:
        api = FakeDiscordApi(failing_guilds=["9"])
        ctx = make_ctx(tmp_path, api=api, sleep=RecordingSleep())
        guilds = GuildList((GuildRef("8", "Eight"), GuildRef("9", "Nine")))

        result = await delete_commands_from_all_guilds(ctx, guilds)

        assert result.success
        assert result.data is not None
        assert result.data.failure_count == 1

    async def test_unexpected_error_does_not_stop_deletion(
        self, tmp_path: Path
    ) -> None:
        api = FakeDiscordApi(raising_guilds=["1"])
        ctx = make_ctx(tmp_path, api=api, sleep=RecordingSleep())

        result = await delete_commands_from_all_guilds(ctx, THREE_GUILDS)

        assert result.success
        assert result.data is not None
        assert [r.success for r in result.data.results] == [False, True, True]

    async def test_invalid_client(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path)
        result = await delete_commands_from_all_guilds(ctx)
        assert result.error == INVALID_CLIENT

    async def test_credentials_required(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, bot_token=None)
        result = await delete_commands_from_all_guilds(ctx, THREE_GUILDS)
        assert result.error == CREDENTIALS_REQUIRED


class TestFetchGuilds:
    async def test_lists_guilds_over_rest(self, tmp_path: Path) -> None:
        api = FakeDiscordApi(
            guilds=[{"id": "10", "name": "Ten"}, {"id": 11, "name": "Eleven"}]
        )
        ctx = make_ctx(tmp_path, api=api)

        result = await fetch_guilds(ctx)

        assert result.success
        assert result.data == GuildList((GuildRef("10", "Ten"), GuildRef("11", "Eleven")))

    async def test_requires_credentials(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, client_id=None)
        assert (await fetch_guilds(ctx)).error == CREDENTIALS_REQUIRED
