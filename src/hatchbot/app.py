"""Bot lifecycle: load, subscribe, connect, deploy, serve, shut down."""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path
from types import TracebackType
from typing import Any

import anyio
from watchfiles import awatch

from .client import BotClient
from .context import BotContext
from .loader import load_events
from .logging import get_logger
from .result import Result, failure, success
from .router import EventEmitter
from .sync import TOKEN_REQUIRED, DeployReport, deploy_commands

logger = get_logger(__name__)


def _shutdown_signals() -> tuple[int, ...]:
    signals = [signal.SIGINT, signal.SIGTERM]
    if hasattr(signal, "SIGHUP"):
        signals.append(signal.SIGHUP)
    return tuple(signals)


def _log_uncaught(
    exc_type: type[BaseException],
    exc: BaseException,
    tb: TracebackType | None,
) -> None:
    logger.critical("process.uncaught_exception", exc_info=(exc_type, exc, tb))


def _log_unhandled_task_error(
    loop: asyncio.AbstractEventLoop, context: dict[str, Any]
) -> None:
    logger.error(
        "process.unhandled_task_error",
        message=context.get("message"),
        exc_info=context.get("exception"),
    )


def install_exception_hooks() -> None:
    """Log process-level errors; the interpreter still exits 1 on uncaught ones."""
    sys.excepthook = _log_uncaught


async def initialize_bot(ctx: BotContext, emitter: EventEmitter) -> Result[dict[str, int]]:
    logger.info("app.initializing")
    loaded = ctx.load_registries()
    if not loaded.success:
        return failure(loaded.error)

    events = load_events(emitter, ctx, ctx.paths.events)
    if not events.success:
        return failure(events.error)

    counts = {
        "commands": len(ctx.commands),
        "events": events.data or 0,
        "components": len(ctx.components),
    }
    logger.info("app.initialized", **counts)
    return success(counts)


async def auto_deploy_commands(ctx: BotContext) -> Result[DeployReport]:
    logger.info("app.auto_deploy")
    deployed = await deploy_commands(ctx)
    if not deployed.success or deployed.data is None:
        return failure(f"Command deployment failed: {deployed.error}")

    scope = "globally" if deployed.data.is_global else "to development guild"
    logger.info(
        "app.commands_deployed", commands=deployed.data.command_count, scope=scope
    )
    return deployed


async def start_bot(ctx: BotContext) -> Result[dict[str, Any]]:
    settings = ctx.settings
    token = settings.token
    if token is None:
        return failure(TOKEN_REQUIRED)
    if settings.client_id is None:
        logger.warning("app.client_id_missing", detail="command auto-deploy skipped")

    if ctx.client is None:
        ctx.client = BotClient(token)
    client = ctx.client

    initialized = await initialize_bot(ctx, client)
    if not initialized.success:
        return failure(f"Initialization failed: {initialized.error}")

    try:
        await client.start()
    except Exception as exc:
        logger.exception("app.login_failed", error=str(exc))
        return failure(exc)
    logger.info("app.authenticated", user=str(client.user))

    if settings.client_id is not None and settings.auto_deploy:
        deployed = await auto_deploy_commands(ctx)
        if not deployed.success:
            logger.warning("app.deploy_failed_continuing", error=deployed.error)

    return success(
        {"initialized": initialized.data, "status": "Bot started successfully"}
    )


async def watch_handlers(ctx: BotContext) -> None:
    """Rebuild the registries whenever a command or component file changes."""
    paths = [str(path) for path in (ctx.paths.commands, ctx.paths.components)]
    logger.info("app.watch_started", paths=paths)
    async for changes in awatch(*paths):
        if any(Path(path).suffix == ".py" for _, path in changes):
            ctx.reload()


async def serve(ctx: BotContext) -> None:
    """Block until SIGINT/SIGTERM; SIGHUP reloads handler registries."""
    async with anyio.create_task_group() as tg:
        if ctx.settings.watch_handlers:
            tg.start_soon(watch_handlers, ctx)
        with anyio.open_signal_receiver(*_shutdown_signals()) as signals:
            async for signum in signals:
                if getattr(signal, "SIGHUP", None) == signum:
                    logger.info("app.reload_signal", signal="SIGHUP")
                    ctx.reload()
                    continue
                logger.info("app.shutdown_signal", signal=signal.Signals(signum).name)
                break
        tg.cancel_scope.cancel()


async def run_main_loop(ctx: BotContext) -> int:
    asyncio.get_running_loop().set_exception_handler(_log_unhandled_task_error)

    started = await start_bot(ctx)
    try:
        if not started.success:
            logger.error("app.startup_failed", error=started.error)
            return 1
        await serve(ctx)
    finally:
        if ctx.client is not None:
            await ctx.client.close()
        logger.info("app.stopped")
    return 0
