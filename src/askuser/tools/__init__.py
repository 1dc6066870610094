"""Agent-facing tools."""

from askuser.tools.ask import AskUser
from askuser.tools.base import BaseTool, ToolParam, ToolResult, function_schema, validate_tool_args

__all__ = ["AskUser", "BaseTool", "ToolParam", "ToolResult", "function_schema", "validate_tool_args"]
