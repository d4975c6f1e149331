from __future__ import annotations

from typing import Optional, Sequence


class DraftEngineError(RuntimeError):
    def __init__(self, code: str, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.record_id = record_id


class DraftNotAllowedError(DraftEngineError, ValueError):
    """Raised by the record store when the lifecycle state forbids drafting."""


class InvalidTransitionError(DraftEngineError, ValueError):
    """Raised when a transition is requested from the wrong lifecycle state."""


class MissingFieldsError(DraftEngineError, ValueError):
    """Raised when an authoritative write lacks required fields."""


class TransitionInProgressError(DraftEngineError):
    pass


class TransitionValidationError(DraftEngineError):
    def __init__(self, record_id: str, messages: Sequence[str]):
        joined = "; ".join(messages) or "Validation failed."
        super().__init__("validation_failed", joined, record_id)
        self.messages = list(messages)


class TransitionFailedError(DraftEngineError):
    pass
