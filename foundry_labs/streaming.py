# Copyright (c) Microsoft. All rights reserved.

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Union

from .approval_loop import ApprovalEvent, ApprovalLoop, ApprovalPhase, TurnCancelledError
from .config import DEFAULT_MAX_APPROVAL_ROUNDS, PolicyFailureMode
from .models import ConversationRequest
from .policies import ApprovalPolicy
from .responses_client import ResponseClient

"""
Chat-style streaming of one turn.

Tool-free turns stream text deltas straight from the platform. Turns with
tools go through the approval loop, which needs complete responses, so the
caller sees tool progress updates followed by the final text in one piece.
"""


@dataclass(frozen=True)
class TextDelta:
    text: str


@dataclass(frozen=True)
class ToolCallUpdate:
    tool_name: str
    detail: str


@dataclass(frozen=True)
class ToolResultUpdate:
    tool_name: str
    result: str


StreamUpdate = Union[TextDelta, ToolCallUpdate, ToolResultUpdate]


def event_to_update(event: ApprovalEvent) -> StreamUpdate:
    if event.phase is ApprovalPhase.REQUESTED:
        return ToolCallUpdate(event.server_label, "Requesting approval...")
    if event.phase is ApprovalPhase.APPROVED:
        return ToolResultUpdate(event.server_label, "Approved")
    return ToolResultUpdate(event.server_label, "Denied")


async def stream_turn(
    client: ResponseClient,
    request: ConversationRequest,
    policy: Optional[ApprovalPolicy] = None,
    *,
    use_approval_loop: Optional[bool] = None,
    max_rounds: int = DEFAULT_MAX_APPROVAL_ROUNDS,
    policy_failure: PolicyFailureMode = PolicyFailureMode.DENY,
    cancel: Optional[asyncio.Event] = None,
) -> AsyncIterator[StreamUpdate]:
    """Yield updates for one turn.

    ``use_approval_loop`` defaults to whether the request carries tools. Agents
    whose tools live on the agent definition should pass True explicitly.
    Setting ``cancel`` raises TurnCancelledError before the next delta or
    request goes out.
    """
    if use_approval_loop is None:
        use_approval_loop = bool(request.tools)

    if not use_approval_loop:
        if cancel is not None and cancel.is_set():
            raise TurnCancelledError(None)
        async for delta in client.stream_response(request.model_copy(update={"stream": True})):
            if cancel is not None and cancel.is_set():
                raise TurnCancelledError(None)
            yield TextDelta(delta)
        return

    queue: "asyncio.Queue[ApprovalEvent]" = asyncio.Queue()
    loop = ApprovalLoop(
        client,
        policy,
        max_rounds=max_rounds,
        on_event=queue.put_nowait,
        policy_failure=policy_failure,
    )
    task = asyncio.create_task(loop.run(request, cancel=cancel))
    try:
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                yield event_to_update(getter.result())
                continue
            getter.cancel()
            break

        while not queue.empty():
            yield event_to_update(queue.get_nowait())

        result = task.result()
        if result.text:
            yield TextDelta(result.text)
    finally:
        if not task.done():
            task.cancel()
