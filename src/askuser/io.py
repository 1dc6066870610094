"""Host-facing interfaces.

A ``ResponseSink`` receives the built response text; a ``QuestionPresenter``
shows a question batch to the operator and returns what was delivered.
The terminal and line presenters implement the latter; hosts and tests
supply the former.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from askuser.models import Question


@runtime_checkable
class ResponseSink(Protocol):
    async def deliver_response(self, text: str) -> None:
        """Hand the response to the host. Raising means the delivery failed."""
        ...


@runtime_checkable
class QuestionPresenter(Protocol):
    async def present(self, questions: list[Question]) -> str:
        """Collect answers for ``questions`` and return the delivered text.

        Returns an empty string if the operator left without submitting.
        """
        ...


class CallbackSink:
    """Adapts a plain (sync or async) callable to ``ResponseSink``."""

    def __init__(self, callback: Callable[[str], Awaitable[None] | None]):
        self._callback = callback

    async def deliver_response(self, text: str) -> None:
        result = self._callback(text)
        if inspect.isawaitable(result):
            await result


class CollectingSink:
    """Keeps every delivered response; the last one is the operator's answer."""

    def __init__(self) -> None:
        self.responses: list[str] = []

    @property
    def last(self) -> str:
        return self.responses[-1] if self.responses else ""

    async def deliver_response(self, text: str) -> None:
        self.responses.append(text)
