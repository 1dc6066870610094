"""Structured JSON logging for askuser.

Flow transitions, deliveries and tool calls are logged as single-line JSON
so a host can collect them as diagnostics. Structured fields travel in the
record's ``data`` attribute (``extra={"data": {...}}``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

LOG_FILE = "askuser.jsonl"


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data is not None:
            entry["data"] = data
        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["error"] = str(exc)
            trace_id = getattr(exc, "trace_id", None)
            if trace_id:
                entry["trace_id"] = trace_id
        return json.dumps(entry, ensure_ascii=False, default=str)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setFormatter(JSONFormatter())
    handler.setLevel(level)
    logger.addHandler(handler)


def setup_logging(
    log_dir: Path | None = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Configure the ``askuser`` logger.

    Args:
        log_dir: Directory for the JSON-lines log file. If None, logs to stderr only.
        level: Logging level for the file.

    Returns:
        The 'askuser' logger.
    """
    logger = logging.getLogger("askuser")
    logger.setLevel(level)
    if logger.handlers:
        return logger

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8"), level)
    # stdout belongs to the UI and the final answer
    _attach(logger, logging.StreamHandler(), logging.WARNING)
    return logger


def _emit(name: str, level: int, msg: str, data: dict[str, Any], exc: BaseException | None = None) -> None:
    logging.getLogger(name).log(level, msg, extra={"data": data}, exc_info=exc)


def log_flow_event(event: str, qid: str | None = None, **data: Any) -> None:
    """One state-machine transition, at DEBUG."""
    _emit("askuser.flow", logging.DEBUG, event, {"qid": qid, **data})


def log_delivery(
    batch_size: int,
    elapsed_s: float,
    ok: bool,
    error: BaseException | None = None,
) -> None:
    data: dict[str, Any] = {"questions": batch_size, "elapsed_s": round(elapsed_s, 3), "ok": ok}
    if ok:
        _emit("askuser.delivery", logging.INFO, "delivery", data)
        return
    data["error"] = str(error) if error else ""
    _emit("askuser.delivery", logging.WARNING, "delivery_failed", data, error)


def log_tool_execution(
    tool_name: str,
    elapsed_s: float,
    output_len: int,
    is_error: bool = False,
) -> None:
    _emit("askuser.tool", logging.INFO, "tool_exec", {
        "tool": tool_name,
        "elapsed_s": round(elapsed_s, 3),
        "output_len": output_len,
        "is_error": is_error,
    })
