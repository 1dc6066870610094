from __future__ import annotations

from uuid import uuid4


def new_trace_id() -> str:
    return uuid4().hex


class AskUserError(Exception):
    def __init__(self, message: str, *, error_type: str, trace_id: str | None = None) -> None:
        self.error_type = error_type
        self.trace_id = trace_id or new_trace_id()
        super().__init__(message)

    def with_trace(self) -> str:
        return f"{self.args[0]} (trace_id={self.trace_id})"


class ConfigurationError(AskUserError):
    """A question batch that cannot start a flow. The whole batch is rejected."""

    def __init__(self, message: str, *, trace_id: str | None = None) -> None:
        super().__init__(message, error_type="configuration", trace_id=trace_id)


class InvalidQuestionError(ConfigurationError):
    def __init__(self, message: str, *, errors: list[str] | None = None, trace_id: str | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message, trace_id=trace_id)


class DuplicateQuestionError(ConfigurationError):
    def __init__(self, question: str, *, trace_id: str | None = None) -> None:
        self.question = question
        super().__init__(
            f"All questions must have unique question text: {question!r} appears more than once",
            trace_id=trace_id,
        )


class OptionCountError(ConfigurationError):
    def __init__(self, question: str, count: int, *, trace_id: str | None = None) -> None:
        self.question = question
        self.count = count
        super().__init__(
            f"Question {question!r} has {count} option(s); 2-4 are required",
            trace_id=trace_id,
        )


class DuplicateOptionError(ConfigurationError):
    def __init__(self, question: str, value: str, *, trace_id: str | None = None) -> None:
        self.question = question
        self.value = value
        super().__init__(
            f"Question {question!r} has duplicate option value {value!r}",
            trace_id=trace_id,
        )


class DeliveryError(AskUserError):
    """The host rejected or failed to receive a built response."""

    def __init__(self, message: str, *, trace_id: str | None = None) -> None:
        super().__init__(message, error_type="delivery", trace_id=trace_id)


__all__ = [
    "new_trace_id",
    "AskUserError",
    "ConfigurationError",
    "InvalidQuestionError",
    "DuplicateQuestionError",
    "OptionCountError",
    "DuplicateOptionError",
    "DeliveryError",
]
