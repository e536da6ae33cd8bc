from __future__ import annotations


class RuleAnalysisError(RuntimeError):
    """Base class for rule analysis failures surfaced to callers."""


class NotFoundError(RuleAnalysisError):
    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidStateError(RuleAnalysisError):
    pass
