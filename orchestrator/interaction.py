"""
Interaction channel between the orchestrator and the human.

A channel is any callable `channel(kind, data) -> response`. The call is a
synchronous suspension point: the run waits until a response comes back.

Kinds and response shapes:
- ARCHITECT / ASSEMBLER / PERSONA / WRITER: Proceed() or Feedback(text)
- RETRY: bool, True re-runs the failed completion call
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Union


class InteractionKind(str, Enum):
    ARCHITECT = "architect"
    ASSEMBLER = "assembler"
    PERSONA = "persona"
    WRITER = "writer"
    RETRY = "retry"


@dataclass(frozen=True)
class Proceed:
    """Accept the proposal as it stands."""


@dataclass(frozen=True)
class Feedback:
    """Reject the proposal with instructions for the next attempt."""
    text: str

    def __post_init__(self):
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("Feedback requires non-empty text")


Decision = Union[Proceed, Feedback]
Response = Union[Proceed, Feedback, bool]
Channel = Callable[[InteractionKind, Dict[str, Any]], Response]


def expect_decision(kind: InteractionKind, response: Any) -> Decision:
    """Check a proceed/feedback response, raising TypeError on anything else."""
    if not isinstance(response, (Proceed, Feedback)):
        raise TypeError(f"'{kind.value}' expects Proceed or Feedback, got {type(response).__name__}")
    return response


def expect_retry(response: Any) -> bool:
    """Check a retry response, raising TypeError unless it is a bool."""
    if not isinstance(response, bool):
        raise TypeError(f"'retry' expects a bool, got {type(response).__name__}")
    return response


def auto_proceed(kind: InteractionKind, data: Dict[str, Any]) -> Response:
    """Non-interactive channel: accepts every proposal and never retries."""
    if kind is InteractionKind.RETRY:
        return False
    return Proceed()
