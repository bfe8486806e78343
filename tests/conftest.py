from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from paddock.collaborators import ActionOutcome, ActionRegistry, ActionRequest
from paddock.navigation import NavigationMachine


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI the environment is left alone so tests only see explicit settings.
    """

    if os.environ.get("CI"):
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture()
def machine() -> NavigationMachine:
    """A machine over the default graph, bootstrapped into the main menu."""

    m = NavigationMachine()
    m.transition_to("main_menu")
    return m


class RecordingActions:
    """Action collaborator double: records every request and answers with a preset outcome."""

    def __init__(self) -> None:
        self.calls: list[ActionRequest] = []
        self.outcomes: dict[str, ActionOutcome] = {}
        self.registry = ActionRegistry()

    def answer(self, name: str, outcome: ActionOutcome | None = None) -> None:
        self.outcomes[name] = outcome or ActionOutcome.ok()
        self.registry.register(name, self._handle)

    async def _handle(self, request: ActionRequest) -> ActionOutcome:
        self.calls.append(request)
        return self.outcomes[request.name]


@pytest.fixture()
def actions() -> RecordingActions:
    rec = RecordingActions()
    rec.answer("create_character", ActionOutcome.ok(character_created=True))
    return rec


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient plus the fakeredis instance behind it.

    The live-session registry is emptied afterwards so sessions do not leak across tests.
    """

    import fakeredis
    from fastapi.testclient import TestClient

    from paddock.api.deps import get_redis
    from paddock.main import app
    from paddock.runtime import registry

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
    registry._by_id.clear()
