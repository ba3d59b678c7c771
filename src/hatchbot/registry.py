from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from .handlers import CommandHandler, ComponentHandler

H = TypeVar("H")


class DuplicateKeyError(KeyError):
    pass


class Registry(Mapping[str, H], Generic[H]):
    """Read-only lookup table of handlers keyed by name or custom id."""

    def __init__(self, entries: Iterable[tuple[str, H]] = ()) -> None:
        table: dict[str, H] = {}
        for key, handler in entries:
            if key in table:
                raise DuplicateKeyError(key)
            table[key] = handler
        self._table = table

    def __getitem__(self, key: str) -> H:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self._table)!r})"


class CommandRegistry(Registry[CommandHandler]):
    @classmethod
    def of(cls, *handlers: CommandHandler) -> CommandRegistry:
        return cls((handler.name, handler) for handler in handlers)


class ComponentRegistry(Registry[ComponentHandler]):
    @classmethod
    def of(cls, *handlers: ComponentHandler) -> ComponentRegistry:
        return cls((handler.custom_id, handler) for handler in handlers)
