"""JSON formatting used for generated configuration files."""

from __future__ import annotations

import inspect
import json
from typing import Awaitable, Protocol, Union


class JsonFormatter(Protocol):
    """Anything exposing ``format_json``; may be sync or async."""

    def format_json(self, text: str) -> Union[str, Awaitable[str]]:
        ...


class StandardJsonFormatter:
    """Re-serialises JSON with two-space indentation and a trailing newline."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def format_json(self, text: str) -> str:
        return json.dumps(json.loads(text), indent=self.indent, ensure_ascii=False) + "\n"


async def run_formatter(formatter: JsonFormatter, text: str) -> str:
    result = formatter.format_json(text)
    if inspect.isawaitable(result):
        result = await result
    return result


__all__ = ["JsonFormatter", "StandardJsonFormatter", "run_formatter"]
