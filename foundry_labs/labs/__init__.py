# Copyright (c) Microsoft. All rights reserved.

import logging
from typing import Callable, Optional

from ..agents import AgentVersionRef
from ..approval_loop import ApprovalEvent, ApprovalLoopExceededError, ApprovalPhase

"""
Console labs. Each module exposes ``main()`` (async) and ``run()`` (sync entry point).
"""


def print_approval_event(event: ApprovalEvent) -> None:
    if event.phase is ApprovalPhase.APPROVED:
        print(f"  [MCP] Approving tool call: {event.server_label} ({event.tool_name})")
    elif event.phase is ApprovalPhase.DENIED:
        print(f"  [MCP] Denied tool call: {event.server_label} ({event.tool_name})")


def print_agent_created(ref: Optional[AgentVersionRef]) -> None:
    if ref is not None:
        print(f"Created agent: {ref.name} (version: {ref.version})")


def report_turn_error(e: Exception) -> None:
    """Print a failed turn without ending the lab."""
    if isinstance(e, ApprovalLoopExceededError):
        print(f"Error: the tool server kept asking for approval ({e})")
    else:
        print(f"Error: {e}")
    logging.getLogger(__name__).debug("Turn failed", exc_info=e)


def read_line(prompt: str, reader: Callable[[str], str] = input) -> str:
    try:
        return reader(prompt)
    except EOFError:
        return ""
