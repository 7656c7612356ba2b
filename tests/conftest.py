"""
Pytest configuration and fixtures.
Shared test utilities and a scripted generation gateway.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from data.hr_reference import HR_DATA
from src.agent import HRBuddyAgent
from src.generation import FALLBACK_REPLY, GenerationResult, GenerationStatus
from src.leave_store import JsonLeaveStore


class FakeGateway:
    """Generation gateway that records prompts and replays scripted results."""

    def __init__(self, *results: GenerationResult):
        self.results = list(results)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.results:
            return self.results.pop(0)
        return GenerationResult(GenerationStatus.OK, text=f"Generated reply {len(self.prompts)}")

    def get_circuit_breaker_state(self) -> dict:
        return {"name": "FakeBreaker", "state": "closed", "failure_count": 0}


def ok(text: str) -> GenerationResult:
    return GenerationResult(GenerationStatus.OK, text=text)


def parse_failure() -> GenerationResult:
    return GenerationResult(GenerationStatus.PARSE_FAILURE, text=FALLBACK_REPLY)


def transport_failure() -> GenerationResult:
    return GenerationResult(GenerationStatus.TRANSPORT_FAILURE, error="connection refused")


@pytest.fixture
def leave_store(tmp_path):
    """Leave store backed by a fresh temp file."""
    return JsonLeaveStore(tmp_path / "leaves.json")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def agent(leave_store, gateway):
    """Agent wired to temp storage and the fake gateway."""
    return HRBuddyAgent(leave_store=leave_store, gateway=gateway, reference_data=HR_DATA)


@pytest.fixture
def test_client(agent):
    """FastAPI test client serving the fixture agent."""
    from src.main import app

    with patch("src.main.get_agent", return_value=agent):
        yield TestClient(app)
