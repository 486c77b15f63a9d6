"""Pipeline error types."""

from __future__ import annotations


class InputError(ValueError):
    """Bad arguments or missing session state. Never retried."""


class StageError(RuntimeError):
    """A collaborator (browser, vision model, filesystem) failed during a stage."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
