"""Discover handler modules in a directory and index them by key."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from .handlers import CommandHandler, CommandSchema, ComponentHandler, EventDefinition
from .logging import get_logger
from .registry import CommandRegistry, ComponentRegistry
from .result import Result, failure, success
from .router import EventEmitter, subscribe

if TYPE_CHECKING:
    from .context import BotContext

logger = get_logger(__name__)

DYNAMIC_PACKAGE = "hatchbot_handlers"


@dataclass(frozen=True, slots=True)
class _Kind:
    label: str
    attribute: str
    check: Callable[[Any], str | None]


def _check_command(value: Any) -> str | None:
    if not isinstance(value, CommandHandler):
        return "COMMAND is not a CommandHandler"
    if not isinstance(value.schema, CommandSchema):
        return "missing command schema"
    if not callable(value.execute):
        return "missing execute"
    if value.autocomplete is not None and not callable(value.autocomplete):
        return "autocomplete is not callable"
    return None


def _check_component(value: Any) -> str | None:
    if not isinstance(value, ComponentHandler):
        return "COMPONENT is not a ComponentHandler"
    if not isinstance(value.custom_id, str) or not value.custom_id:
        return "missing custom_id"
    if not callable(value.execute):
        return "missing execute"
    return None


def _check_event(value: Any) -> str | None:
    if not isinstance(value, EventDefinition):
        return "EVENT is not an EventDefinition"
    if not isinstance(value.name, str) or not value.name:
        return "missing event name"
    if not callable(value.execute):
        return "missing execute"
    return None


COMMANDS = _Kind("command", "COMMAND", _check_command)
COMPONENTS = _Kind("component", "COMPONENT", _check_component)
EVENTS = _Kind("event", "EVENT", _check_event)


def _handler_files(directory: Path) -> list[Path]:
    return sorted(
        path
        for path in directory.iterdir()
        if path.suffix == ".py" and not path.name.startswith("_") and path.is_file()
    )


def _package_for(directory: Path) -> str | None:
    """Dotted package name of ``directory`` if it is importable as one."""
    if not (directory / "__init__.py").is_file():
        return None
    parts = [directory.name]
    parent = directory.parent
    while (parent / "__init__.py").is_file():
        parts.append(parent.name)
        parent = parent.parent
    name = ".".join(reversed(parts))
    try:
        package = importlib.import_module(name)
    except ImportError:
        return None
    locations = getattr(package, "__path__", None) or []
    if any(Path(location).resolve() == directory.resolve() for location in locations):
        return name
    return None


def _import_file(name: str, path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def _import_handler(
    path: Path, *, package: str | None, kind: _Kind, reload: bool
) -> ModuleType:
    if package is not None:
        name = f"{package}.{path.stem}"
    else:
        digest = hashlib.sha1(str(path.parent.resolve()).encode()).hexdigest()[:12]
        name = f"{DYNAMIC_PACKAGE}.{kind.label}_{digest}.{path.stem}"
    if reload:
        sys.modules.pop(name, None)
    elif name in sys.modules:
        return sys.modules[name]
    if package is not None:
        return importlib.import_module(name)
    return _import_file(name, path)


def _scan(directory: Path, kind: _Kind, *, reload: bool) -> list[tuple[str, Any]]:
    """Import every handler module of ``kind``; OSError escapes for the caller."""
    files = _handler_files(directory)
    if reload:
        importlib.invalidate_caches()
    package = _package_for(directory)

    found: list[tuple[str, Any]] = []
    for path in files:
        try:
            module = _import_handler(path, package=package, kind=kind, reload=reload)
        except Exception as exc:
            logger.warning(
                "loader.import_failed",
                kind=kind.label,
                file=path.name,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            continue

        definition = getattr(module, kind.attribute, None)
        problem = (
            f"missing {kind.attribute}"
            if definition is None
            else kind.check(definition)
        )
        if problem is not None:
            logger.warning(
                "loader.malformed_module",
                kind=kind.label,
                file=path.name,
                reason=problem,
            )
            continue
        found.append((path.name, definition))
    return found


def _index(
    found: list[tuple[str, Any]], kind: _Kind, key: Callable[[Any], str]
) -> list[tuple[str, Any]]:
    entries: dict[str, Any] = {}
    for filename, definition in found:
        name = key(definition)
        if name in entries:
            logger.warning(
                "loader.duplicate_key", kind=kind.label, key=name, file=filename
            )
            continue
        entries[name] = definition
        logger.info(f"loader.{kind.label}_loaded", key=name)
    return list(entries.items())


def load_commands(directory: str | Path, *, reload: bool = False) -> Result[CommandRegistry]:
    try:
        found = _scan(Path(directory), COMMANDS, reload=reload)
    except OSError as exc:
        logger.error("loader.commands_failed", directory=str(directory), error=str(exc))
        return failure(f"Failed to load commands: {exc}")
    return success(CommandRegistry(_index(found, COMMANDS, lambda c: c.name)))


def load_components(
    directory: str | Path, *, reload: bool = False
) -> Result[ComponentRegistry]:
    try:
        found = _scan(Path(directory), COMPONENTS, reload=reload)
    except OSError as exc:
        logger.error(
            "loader.components_failed", directory=str(directory), error=str(exc)
        )
        return failure(f"Failed to load components: {exc}")
    return success(ComponentRegistry(_index(found, COMPONENTS, lambda c: c.custom_id)))


def load_events(
    emitter: EventEmitter,
    ctx: BotContext,
    directory: str | Path,
    *,
    reload: bool = False,
) -> Result[int]:
    """Subscribe every event definition in ``directory``; data is the count."""
    try:
        found = _scan(Path(directory), EVENTS, reload=reload)
    except OSError as exc:
        logger.error("loader.events_failed", directory=str(directory), error=str(exc))
        return failure(f"Failed to load events: {exc}")

    for _filename, definition in found:
        subscribe(emitter, ctx, definition)
        logger.info("loader.event_loaded", key=definition.name, once=definition.once)
    return success(len(found))


def load_command_schemas(directory: str | Path) -> Result[list[dict[str, Any]]]:
    """Fresh read of the command payloads as they are on disk."""
    loaded = load_commands(directory, reload=True)
    if not loaded.success or loaded.data is None:
        return failure(loaded.error)
    return success([handler.schema.to_payload() for handler in loaded.data.values()])
