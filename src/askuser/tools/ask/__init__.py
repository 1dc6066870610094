"""AskUser tool - presents multiple-choice questions to the operator.

With a presenter attached, blocks until the operator submits and returns
the formatted answers. Without one, only acknowledges the batch; the host
renders the questions itself and the answer comes back as a new message.
"""

from __future__ import annotations

from typing import Any

from askuser.core.formatter import ResponseFormatter
from askuser.exceptions import ConfigurationError
from askuser.io import QuestionPresenter
from askuser.models import MAX_OPTIONS, MIN_OPTIONS, QuestionDefaults, parse_questions
from askuser.tools.base import BaseTool, ToolParam, ToolResult, function_schema

OPTION_SCHEMA = {
    "type": "object",
    "properties": {
        "label": {"type": "string", "description": "Display text for this option"},
        "value": {"type": "string", "description": "Value returned when this option is selected"},
        "description": {"type": "string", "description": "Additional context for this option"},
    },
    "required": ["label", "value"],
}

QUESTION_SCHEMA = {
    "type": "object",
    "properties": {
        "question": {
            "type": "string",
            "description": "The question to ask the user (also serves as unique identifier)",
        },
        "header": {
            "type": "string",
            "description": 'Short label displayed as a tab (max 12 chars), e.g., "Framework"',
        },
        "options": {
            "type": "array",
            "description": f"Available choices ({MIN_OPTIONS}-{MAX_OPTIONS} options)",
            "items": OPTION_SCHEMA,
            "minItems": MIN_OPTIONS,
            "maxItems": MAX_OPTIONS,
        },
        "multiSelect": {"type": "boolean", "description": "Allow multiple selections"},
        "allowOther": {"type": "boolean", "description": 'Include "Other" text input option'},
        "required": {"type": "boolean", "description": "Whether this question must be answered"},
    },
    "required": ["question", "header", "options"],
}


class AskUser(BaseTool):
    name = "ask_user"
    description = (
        "Ask the user a question with multiple-choice options. Renders an "
        "interactive UI inline in the conversation. Several questions are "
        "shown as tabs; the user reviews and submits them together."
    )
    parameters = [
        ToolParam(
            name="questions",
            type="array",
            description="Array of questions to ask the user, displayed as tabs",
        ),
    ]

    def __init__(
        self,
        presenter: QuestionPresenter | None = None,
        defaults: QuestionDefaults | None = None,
    ):
        self._presenter = presenter
        self._defaults = defaults
        self._formatter = ResponseFormatter()

    async def execute(self, **kwargs: Any) -> ToolResult:
        raw_questions = kwargs.get("questions") or []
        if not raw_questions:
            return ToolResult(error="No questions provided.", is_error=True)

        try:
            questions = parse_questions(raw_questions, self._defaults)
        except ConfigurationError as e:
            return ToolResult(error=str(e), is_error=True)

        if not self._presenter:
            return ToolResult(output=self._formatter.summarize(questions))

        response = await self._presenter.present(questions)
        if not response:
            return ToolResult(output="(no answer - use your best judgment)")
        return ToolResult(output=response)

    def to_openai_schema(self) -> dict[str, Any]:
        return function_schema(self.name, self.description, {
            "type": "object",
            "properties": {
                "questions": {
                    "type": "array",
                    "description": self.parameters[0].description,
                    "minItems": 1,
                    "items": QUESTION_SCHEMA,
                },
            },
            "required": ["questions"],
        })
