# Copyright (c) Microsoft. All rights reserved.

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .config import DEFAULT_MAX_APPROVAL_ROUNDS, PolicyFailureMode
from .models import ApprovalDecision, ConversationRequest, ConversationResponse, ToolApprovalRequest
from .policies import AlwaysApprove, ApprovalPolicy
from .responses_client import ResponseClient

"""
Tool-call approval loop.

Drives one user turn against the Responses API: submit the request, answer
every MCP approval request in the response, continue from that response, and
stop at the first response that has nothing left to approve.
"""

logger = logging.getLogger(__name__)


class ApprovalPhase(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    DENIED = "denied"


@dataclass(frozen=True)
class ApprovalEvent:
    server_label: str
    tool_name: str
    phase: ApprovalPhase
    approval_request_id: str


EventSink = Callable[[ApprovalEvent], Union[None, Awaitable[None]]]


class ApprovalLoopError(RuntimeError):
    """Base class for failures raised by the approval loop itself."""


class ApprovalLoopExceededError(ApprovalLoopError):
    """The platform kept asking for approvals past the round limit."""

    def __init__(self, max_rounds: int, last_response: ConversationResponse) -> None:
        super().__init__(
            f"approval loop exceeded: still {len(last_response.approval_requests)} pending "
            f"approval(s) after {max_rounds} round(s)"
        )
        self.max_rounds = max_rounds
        self.last_response = last_response


class TurnCancelledError(ApprovalLoopError):
    """Cancellation was requested before the next request was sent.

    ``decisions`` holds the approval decisions already made for
    ``last_response`` that were never submitted.
    """

    def __init__(
        self,
        last_response: Optional[ConversationResponse],
        decisions: Optional[list[ApprovalDecision]] = None,
    ) -> None:
        super().__init__("turn cancelled before the next request was sent")
        self.last_response = last_response
        self.decisions = list(decisions or [])


class ApprovalPolicyError(ApprovalLoopError):
    """The approval policy raised and the loop is configured to abort."""

    def __init__(self, request: ToolApprovalRequest) -> None:
        super().__init__(
            f"approval policy failed for {request.server_label}/{request.tool_name} ({request.id})"
        )
        self.request = request


@dataclass
class TurnResult:
    response: ConversationResponse
    rounds: int
    events: list[ApprovalEvent] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.response.text


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ApprovalLoop:
    """Resolve MCP tool-call approvals until the agent produces a final response.

    Args:
        client: Sends requests to the platform.
        policy: Decides each pending tool call. Sync and async policies both work.
        max_rounds: Upper bound on calls to ``client`` for one turn.
        on_event: Optional callback (sync or async) receiving every ApprovalEvent
            before the continuation carrying that decision is sent.
        policy_failure: Deny the call (default) or abort the turn when the policy raises.
    """

    def __init__(
        self,
        client: ResponseClient,
        policy: Optional[ApprovalPolicy] = None,
        *,
        max_rounds: int = DEFAULT_MAX_APPROVAL_ROUNDS,
        on_event: Optional[EventSink] = None,
        policy_failure: PolicyFailureMode = PolicyFailureMode.DENY,
    ) -> None:
        if max_rounds < 1:
            raise ValueError(f"max_rounds must be at least 1, got {max_rounds}")
        self._client = client
        self._policy = policy or AlwaysApprove()
        self._max_rounds = max_rounds
        self._on_event = on_event
        self._policy_failure = PolicyFailureMode(policy_failure)

    @property
    def max_rounds(self) -> int:
        return self._max_rounds

    async def run(
        self, request: ConversationRequest, cancel: Optional[asyncio.Event] = None
    ) -> TurnResult:
        events: list[ApprovalEvent] = []
        current = request
        rounds = 0
        self._check_cancel(cancel, None, rounds)

        while True:
            latest = await self._client.create_response(current)
            rounds += 1

            pending = latest.approval_requests
            if not pending:
                return TurnResult(response=latest, rounds=rounds, events=events)

            # the policy is only consulted for decisions that will be submitted
            if rounds == self._max_rounds:
                logger.error("Approval loop exceeded %d round(s)", self._max_rounds)
                raise ApprovalLoopExceededError(self._max_rounds, latest)
            self._check_cancel(cancel, latest, rounds)

            logger.debug("Response %s has %d pending approval(s)", latest.id, len(pending))
            decisions = []
            for approval in pending:
                await self._emit(events, approval, ApprovalPhase.REQUESTED)
                approved = await self._decide(approval)
                await self._emit(
                    events, approval, ApprovalPhase.APPROVED if approved else ApprovalPhase.DENIED
                )
                decisions.append(ApprovalDecision(approval_request_id=approval.id, approved=approved))

            self._check_cancel(cancel, latest, rounds, decisions)
            current = request.continuation(latest.id, decisions)

    @staticmethod
    def _check_cancel(
        cancel: Optional[asyncio.Event],
        latest: Optional[ConversationResponse],
        rounds: int,
        decisions: Optional[list[ApprovalDecision]] = None,
    ) -> None:
        if cancel is None or not cancel.is_set():
            return
        logger.info(
            "Turn cancelled after %d round(s) with %d unsent decision(s)", rounds, len(decisions or [])
        )
        raise TurnCancelledError(latest, decisions)

    async def _decide(self, approval: ToolApprovalRequest) -> bool:
        try:
            return bool(await _maybe_await(self._policy.decide(approval)))
        except Exception as e:
            if self._policy_failure is PolicyFailureMode.ABORT:
                raise ApprovalPolicyError(approval) from e
            logger.exception(
                "Approval policy failed for %s/%s; denying the call",
                approval.server_label,
                approval.tool_name,
            )
            return False

    async def _emit(
        self, events: list[ApprovalEvent], approval: ToolApprovalRequest, phase: ApprovalPhase
    ) -> None:
        event = ApprovalEvent(
            server_label=approval.server_label,
            tool_name=approval.tool_name,
            phase=phase,
            approval_request_id=approval.id,
        )
        events.append(event)
        logger.info("[MCP] %s tool call: %s/%s", phase.value, approval.server_label, approval.tool_name)
        if self._on_event is not None:
            await _maybe_await(self._on_event(event))


async def run_turn(
    client: ResponseClient,
    request: ConversationRequest,
    policy: Optional[ApprovalPolicy] = None,
    *,
    cancel: Optional[asyncio.Event] = None,
    **loop_options: Any,
) -> TurnResult:
    """One-shot helper around ApprovalLoop.run."""
    return await ApprovalLoop(client, policy, **loop_options).run(request, cancel=cancel)
