# Copyright (c) Microsoft. All rights reserved.

from typing import Awaitable, Callable, Iterable, Optional, Protocol, Union

from .models import ToolApprovalRequest

"""
Approval policies decide whether a pending MCP tool call may run.
"""


class ApprovalPolicy(Protocol):
    def decide(self, request: ToolApprovalRequest) -> Union[bool, Awaitable[bool]]:
        ...


class AlwaysApprove:
    """Approve every tool call."""

    def decide(self, request: ToolApprovalRequest) -> bool:
        return True


class ToolAllowList:
    """Approve by tool name and server label.

    A tool in ``denied_tools`` is always denied. Otherwise a tool in
    ``allowed_tools`` or any tool of a server in ``allowed_servers`` is approved,
    and everything else falls back to ``default``.
    """

    def __init__(
        self,
        allowed_tools: Iterable[str] = (),
        denied_tools: Iterable[str] = (),
        allowed_servers: Iterable[str] = (),
        default: bool = False,
    ) -> None:
        self._allowed_tools = frozenset(allowed_tools)
        self._denied_tools = frozenset(denied_tools)
        self._allowed_servers = frozenset(allowed_servers)
        self._default = default

    def decide(self, request: ToolApprovalRequest) -> bool:
        if request.tool_name in self._denied_tools:
            return False
        if request.tool_name in self._allowed_tools:
            return True
        if request.server_label in self._allowed_servers:
            return True
        return self._default


class ConsolePrompt:
    """Ask on the console before each tool call."""

    def __init__(self, prompt: Optional[Callable[[str], str]] = None) -> None:
        self._prompt = prompt or input

    def decide(self, request: ToolApprovalRequest) -> bool:
        print(f"[MCP] Agent requested approval to use tool server: {request.server_label}")
        print(f"  Tool: {request.tool_name}")
        if request.arguments:
            print(f"  Arguments: {request.arguments[:200]}")
        try:
            answer = self._prompt("Approve? (y/n): ")
        except (EOFError, KeyboardInterrupt):
            return False
        return answer.strip().lower() in ("y", "yes")
