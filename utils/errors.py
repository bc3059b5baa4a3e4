"""
Error taxonomy for the hub pipeline.

- NotFound: an agent id resolves nowhere (a planning defect when the Architect
  named it, fatal elsewhere)
- ProviderError: completion call failed (eligible for a retry ask)
- StructuralDefect: Architect output is malformed or uses an ineligible writer
- ArtifactParseError: a stored agent artifact cannot be parsed
- RetryBudgetExceeded: a feedback/retry loop ran out of attempts (fatal)

Unreadable artifacts surface as the builtin OSError and are never wrapped.
"""

from typing import Optional


class HubError(Exception):
    """Base class for all pipeline errors."""


class NotFound(HubError):
    def __init__(self, kind: str, agent_id: str):
        self.kind = kind
        self.agent_id = agent_id
        super().__init__(f"{kind} '{agent_id}' not found in registry")


class ProviderError(HubError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class StructuralDefect(HubError):
    pass


class ArtifactParseError(HubError):
    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename}: {reason}")


class RetryBudgetExceeded(HubError):
    """
    A step ran out of attempts.

    `drafts` holds the section drafts produced before drafting stopped (the
    exhausted section last, marked failed); it stays empty for planning.
    """

    def __init__(self, stage: str, attempts: int):
        self.stage = stage
        self.attempts = attempts
        self.drafts = []
        super().__init__(f"{stage} exhausted its budget of {attempts} attempt(s)")
