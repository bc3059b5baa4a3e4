"""
Shared fixtures: a scripted completion provider and a scripted human.
"""

import json

import pytest

from agents.base import HubConfig
from agents.registry import AgentRegistry
from orchestrator.interaction import InteractionKind, Proceed
from utils.enhanced_logger import set_logger


class StubProvider:
    """Returns scripted replies in order; an Exception entry is raised instead."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def execute(self, prompt, api_key, model, system_prompt=None):
        self.calls.append({"prompt": prompt, "model": model, "system_prompt": system_prompt})
        if not self.replies:
            raise AssertionError(f"unexpected provider call #{len(self.calls)}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class RepeatingProvider(StubProvider):
    """Returns the same reply forever."""

    def __init__(self, reply):
        super().__init__()
        self.reply = reply

    def execute(self, prompt, api_key, model, system_prompt=None):
        self.calls.append({"prompt": prompt, "model": model, "system_prompt": system_prompt})
        return self.reply


class ScriptedChannel:
    """
    Answers asks from per-kind scripts and records every ask.

    Once a kind's script runs out, decisions proceed and retries decline.
    """

    def __init__(self, responses=None):
        self.responses = {kind: list(items) for kind, items in (responses or {}).items()}
        self.asks = []

    def __call__(self, kind, data):
        self.asks.append((kind, data))
        script = self.responses.get(kind)
        if script:
            return script.pop(0)
        return False if kind is InteractionKind.RETRY else Proceed()

    def kinds(self):
        return [kind for kind, _ in self.asks]

    def count(self, kind):
        return sum(1 for k, _ in self.asks if k is kind)


def blueprint_reply(sections, title="Rust Ownership", assembler="tutorial",
                    persona="standard", language="English", message="Two focused sections."):
    """Architect reply for sections given as (heading, goal, writer_id) tuples."""
    return json.dumps({
        "message": message,
        "title": title,
        "assemblerId": assembler,
        "personaId": persona,
        "language": language,
        "sections": [
            {"heading": heading, "goal": goal, "writerId": writer_id}
            for heading, goal, writer_id in sections
        ],
    })


TWO_SECTIONS = [
    ("Why Ownership", "Explain the problem ownership solves", "prose"),
    ("Borrowing in Practice", "Show borrowing with runnable code", "code"),
]


@pytest.fixture(autouse=True)
def no_trace_logger():
    set_logger(None)
    yield
    set_logger(None)


@pytest.fixture
def registry():
    return AgentRegistry()


@pytest.fixture
def config():
    return HubConfig(model="test-model", api_key="test-key", base_url=None, max_attempts=5)
