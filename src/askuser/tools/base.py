"""Tool plumbing for exposing askuser to an agent's function calling."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from askuser.log import log_tool_execution

# JSON-schema primitive -> (python types, phrase used in errors)
JSON_TYPES: dict[str, tuple[type | tuple[type, ...], str]] = {
    "string": (str, "a string"),
    "integer": (int, "an integer"),
    "number": ((int, float), "a number"),
    "boolean": (bool, "a boolean"),
    "array": ((list, tuple), "an array"),
    "object": (dict, "an object"),
}


@dataclass
class ToolParam:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True
    enum: list[str] | None = None

    def to_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema

    def check(self, value: Any) -> str | None:
        """Type and enum check for a supplied value; None when it passes."""
        expected = JSON_TYPES.get(self.type)
        if expected:
            types, phrase = expected
            # bool is an int subclass; True is not a count
            if isinstance(value, bool) and self.type in ("integer", "number"):
                return f"Parameter '{self.name}' should be {phrase}, got bool"
            if not isinstance(value, types):
                return f"Parameter '{self.name}' should be {phrase}, got {type(value).__name__}"
        if self.enum and value not in self.enum:
            return f"Parameter '{self.name}' must be one of {self.enum}, got '{value}'"
        return None


@dataclass
class ToolResult:
    output: str = ""
    error: str | None = None
    is_error: bool = False

    def to_content(self) -> str:
        """Text handed back to the model."""
        return f"Error: {self.error}" if self.is_error else self.output


def validate_tool_args(params: list[ToolParam], args: dict[str, Any]) -> str | None:
    """Check ``args`` against ``params``.

    Returns None when the arguments are acceptable, otherwise one message
    listing every problem found.
    """
    problems = [
        f"Missing required parameter: '{p.name}'"
        for p in params
        if p.required and p.name not in args
    ]
    for p in params:
        value = args.get(p.name)
        if value is not None:
            problem = p.check(value)
            if problem:
                problems.append(problem)

    if not problems:
        return None
    return "Validation errors:\n" + "\n".join(f"  - {msg}" for msg in problems)


def function_schema(name: str, description: str, parameters: dict[str, Any]) -> dict[str, Any]:
    """Wrap a JSON-schema object in the function-calling envelope."""
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": parameters,
        },
    }


class BaseTool(ABC):
    name: str = ""
    description: str = ""
    parameters: list[ToolParam] = []

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Run with arguments that already passed ``validate_tool_args``."""

    async def run(self, args: dict[str, Any]) -> ToolResult:
        """Validate ``args``, execute, and log the outcome."""
        start = time.monotonic()
        error = validate_tool_args(self.parameters, args)
        result = ToolResult(error=error, is_error=True) if error else await self.execute(**args)
        log_tool_execution(
            self.name,
            time.monotonic() - start,
            len(result.to_content()),
            is_error=result.is_error,
        )
        return result

    def to_openai_schema(self) -> dict[str, Any]:
        return function_schema(self.name, self.description, {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        })
