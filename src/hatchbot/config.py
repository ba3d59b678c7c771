from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parent

DISCORD_API_BASE_URL = "https://discord.com/api/v10"
DEFAULT_DEPLOY_DELAY = 1.0


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class HandlerPaths:
    commands: Path
    components: Path
    events: Path

    @classmethod
    def bundled(cls) -> HandlerPaths:
        return cls(
            commands=PACKAGE_ROOT / "commands",
            components=PACKAGE_ROOT / "components",
            events=PACKAGE_ROOT / "events",
        )

    @classmethod
    def under(cls, root: str | Path) -> HandlerPaths:
        base = Path(root).expanduser()
        return cls(
            commands=base / "commands",
            components=base / "components",
            events=base / "events",
        )
