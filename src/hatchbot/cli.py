from __future__ import annotations

import anyio
import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .app import install_exception_hooks, run_main_loop
from .config import ConfigError
from .context import BotContext
from .logging import setup_logging
from .result import Result, failure
from .settings import BotSettings, load_settings
from .sync import (
    GuildDeleteReport,
    delete_commands_from_all_guilds,
    deploy_commands,
    fetch_guilds,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _load_settings_or_exit() -> BotSettings:
    try:
        return load_settings()
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from None


def _build_context(settings: BotSettings) -> BotContext:
    return BotContext(settings=settings, paths=settings.handler_paths())


def _render_guild_table(report: GuildDeleteReport) -> None:
    table = Table(title="Deletion Summary")
    table.add_column("Guild")
    table.add_column("ID")
    table.add_column("Status")
    for item in report.results:
        status = "[green]ok[/green]" if item.success else f"[red]{item.error}[/red]"
        table.add_row(item.guild_name, item.guild_id, status)
    console = Console(stderr=True)
    console.print(table)
    console.print(
        f"succeeded {report.success_count}/{report.total_guilds}, "
        f"failed {report.failure_count}/{report.total_guilds}"
    )


async def _delete_everywhere(ctx: BotContext) -> Result[GuildDeleteReport]:
    guilds = await fetch_guilds(ctx)
    if not guilds.success or guilds.data is None:
        return failure(guilds.error)
    return await delete_commands_from_all_guilds(ctx, guilds.data)


def deploy_command(
    delete: bool = typer.Option(
        False,
        "--delete",
        help="Delete all commands from every guild the bot is in.",
    ),
) -> None:
    """Register slash commands with Discord (guild-scoped when GUILD_ID is set)."""
    ctx = _build_context(_load_settings_or_exit())

    if delete:
        deleted = anyio.run(_delete_everywhere, ctx)
        if deleted.data is not None:
            _render_guild_table(deleted.data)
        if not deleted.success:
            typer.echo(f"Command deletion failed: {deleted.error}", err=True)
            raise typer.Exit(code=1)
        return

    deployed = anyio.run(deploy_commands, ctx)
    if not deployed.success or deployed.data is None:
        typer.echo(f"Command deployment failed: {deployed.error}", err=True)
        raise typer.Exit(code=1)
    scope = "global" if deployed.data.is_global else f"guild {ctx.settings.guild_id}"
    typer.echo(f"deployed {deployed.data.command_count} commands ({scope})")


def run_command() -> None:
    """Connect to Discord and serve interactions until interrupted."""
    ctx = _build_context(_load_settings_or_exit())
    install_exception_hooks()
    code = anyio.run(run_main_loop, ctx)
    if code:
        raise typer.Exit(code=code)


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        no_args_is_help=True,
        help="Discord slash command and event dispatcher.",
    )

    @app.callback()
    def main(
        version: bool = typer.Option(
            False,
            "--version",
            help="Show the version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
        debug: bool = typer.Option(
            False,
            "--debug",
            help="Enable debug logging.",
        ),
    ) -> None:
        setup_logging(debug=debug)

    app.command(name="run")(run_command)
    app.command(name="deploy")(deploy_command)
    return app


def main() -> None:
    app = create_app()
    app()


if __name__ == "__main__":
    main()
