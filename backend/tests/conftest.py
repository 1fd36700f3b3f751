"""Shared fixtures: settings overrides and a fake AI client."""
import json
from types import SimpleNamespace
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from config import settings


class FakeStream:
    def __init__(self, chunks: List[str], error: Optional[Exception] = None, gate=None):
        self.chunks = chunks
        self.error = error
        self.gate = gate

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self.gate is not None:
            await self.gate.wait()
        for chunk in self.chunks:
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=chunk))])
        if self.error is not None:
            raise self.error


class FakeCompletions:
    def __init__(self, content=None, error=None, chunks=None, stream_error=None, gate=None):
        self.content = content
        self.error = error
        self.chunks = chunks or []
        self.stream_error = stream_error
        self.gate = gate
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return FakeStream(self.chunks, self.stream_error, self.gate)
        content = self.content if isinstance(self.content, str) or self.content is None else json.dumps(self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeClient:
    """Stands in for openai.AsyncOpenAI: only chat.completions.create is used."""

    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def mock_mode(monkeypatch):
    """No credential: every AI call returns the demo payload immediately."""
    monkeypatch.setattr(settings, "api_key", "")
    monkeypatch.setattr(settings, "mock_delay_seconds", 0)


@pytest.fixture
def live_mode(monkeypatch):
    monkeypatch.setattr(settings, "api_key", "test-key")
    monkeypatch.setattr(settings, "mock_delay_seconds", 0)


@pytest.fixture
def client(mock_mode):
    from main import app

    with TestClient(app) as test_client:
        yield test_client


ASSESSED_PAYLOAD = {
    "risk": "Medium",
    "diagnosis": "The P-trap slip nut is loose.",
    "tools": ["Bucket", "Channel-lock pliers"],
    "instructions": [
        "Safety First: Place a bucket under the trap.",
        "Hand-tighten the slip nut.",
        "Give it another quarter turn with the pliers.",
    ],
    "difficulty": "Beginner",
    "estimatedTime": "10 minutes",
    "potentialPitfalls": ["Overtightening cracks plastic nuts."],
}

HIGH_RISK_PAYLOAD = {
    "risk": "High",
    "safetyWarning": "Water is leaking near the electrical panel. Call a licensed electrician.",
    "diagnosis": "should be dropped",
    "instructions": ["should be dropped"],
}


@pytest.fixture
def assessed_payload():
    return json.loads(json.dumps(ASSESSED_PAYLOAD))


@pytest.fixture
def high_risk_payload():
    return json.loads(json.dumps(HIGH_RISK_PAYLOAD))
