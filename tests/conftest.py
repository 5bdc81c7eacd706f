"""Shared pytest fixtures and utilities for rl-playground tests."""

from pathlib import Path
from typing import Any, Callable, Generator, List, Optional, Tuple, Union

import httpx
import pytest

from rl_playground.client import PredictionClient
from rl_playground.config.models import ServiceConfig
from rl_playground.session import GameSession
from rl_playground.tracking.activity_logger import ActivityLogger


# ============================================================================
# Fake prediction service
# ============================================================================


class FakePredictionService:
    """In-process stand-in for the prediction service, used via httpx.MockTransport.

    Single-action responses are served from a queue; the full policy
    response is fixed. Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.action_responses: List[Union[Tuple[int, Any], Exception]] = []
        self.policy_response: Tuple[int, Any] = (200, [])
        self.on_request: Optional[Callable[[httpx.Request], None]] = None

    def queue_action(self, body: Any, status: int = 200) -> None:
        self.action_responses.append((status, body))

    def queue_error(self, error: Exception) -> None:
        self.action_responses.append(error)

    def set_policy(self, body: Any, status: int = 200) -> None:
        self.policy_response = (status, body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request:
            self.on_request(request)

        if request.url.path.startswith("/predict_all"):
            status, body = self.policy_response
            return httpx.Response(status, json=body)

        if not self.action_responses:
            return httpx.Response(500, json={"error": "no response queued"})
        item = self.action_responses.pop(0)
        if isinstance(item, Exception):
            raise item
        status, body = item
        return httpx.Response(status, json=body)


def grid_records(rows: int, cols: int, action: str = "Up") -> List[list]:
    """Build a row-major full-policy response body for a rows x cols grid."""
    return [
        [{"position": [r, c], "done": False}, action]
        for r in range(rows)
        for c in range(cols)
    ]


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def fake_service() -> FakePredictionService:
    """Provide a fresh fake prediction service."""
    return FakePredictionService()


@pytest.fixture
def transport(fake_service: FakePredictionService) -> httpx.MockTransport:
    return httpx.MockTransport(fake_service)


@pytest.fixture
def client(transport: httpx.MockTransport) -> Generator[PredictionClient, None, None]:
    """Create a prediction client backed by the fake service."""
    client = PredictionClient(ServiceConfig(), transport=transport)
    yield client
    client.close()


@pytest.fixture
def make_grid_records() -> Callable[..., List[list]]:
    """Factory fixture for full-policy response bodies."""
    return grid_records


@pytest.fixture
def activity_logger(tmp_path: Path) -> ActivityLogger:
    """Create an activity logger writing under a temporary directory."""
    return ActivityLogger("test-session", tmp_path / "logs", level="DEBUG")


@pytest.fixture
def session(client: PredictionClient, activity_logger: ActivityLogger) -> GameSession:
    """Create a play session with logging enabled."""
    return GameSession(client, session_id="test-session", activity_logger=activity_logger)


@pytest.fixture
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config location at an empty temporary directory."""
    config_home = tmp_path / "xdg"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test (fast, isolated)")
    config.addinivalue_line(
        "markers", "integration: mark test as exercising several components together"
    )
