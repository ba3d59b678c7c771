import pytest

ENV_KEYS = (
    "BOT_TOKEN",
    "CLIENT_ID",
    "GUILD_ID",
    "HATCHBOT_DEPLOY_DELAY",
    "HATCHBOT_AUTO_DEPLOY",
    "HATCHBOT_WATCH_HANDLERS",
    "HATCHBOT_HANDLERS_DIR",
)


@pytest.fixture
def anyio_backend() -> str:
    # py-cord only runs on asyncio
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
