# Copyright (c) Microsoft. All rights reserved.

import logging
from typing import Any, AsyncIterator, Optional, Protocol

from openai import AsyncOpenAI

from .models import (
    ApprovalDecision,
    ConversationRequest,
    ConversationResponse,
    InputMessage,
    OutputItem,
    TextOutput,
    ToolApprovalRequest,
    ToolCallOutput,
)

"""
Responses API access for a Microsoft Foundry project.

The OpenAI client comes from ``AIProjectClient.get_openai_client()``; requests
either reference a Foundry agent by name or target a model deployment directly.
"""

logger = logging.getLogger(__name__)


class ResponseClient(Protocol):
    async def create_response(self, request: ConversationRequest) -> ConversationResponse:
        ...

    def stream_response(self, request: ConversationRequest) -> AsyncIterator[str]:
        ...


def request_input(request: ConversationRequest) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for item in request.input:
        if isinstance(item, InputMessage):
            items.append({"role": item.role, "content": item.content})
        elif isinstance(item, ApprovalDecision):
            items.append(
                {
                    "type": "mcp_approval_response",
                    "approval_request_id": item.approval_request_id,
                    "approve": item.approved,
                }
            )
        else:
            raise TypeError(f"Unsupported input item: {type(item).__name__}")
    return items


def convert_output_item(item: Any) -> list[OutputItem]:
    """Map one Responses API output item onto zero or more OutputItem values."""
    item_type = getattr(item, "type", None)

    if item_type == "message":
        texts: list[OutputItem] = []
        for part in getattr(item, "content", None) or []:
            if getattr(part, "type", None) == "output_text":
                texts.append(TextOutput(text=part.text or ""))
        return texts

    if item_type == "mcp_approval_request":
        return [
            ToolApprovalRequest(
                id=item.id,
                server_label=item.server_label,
                tool_name=getattr(item, "name", "") or "",
                arguments=getattr(item, "arguments", "") or "",
            )
        ]

    if item_type == "mcp_call":
        error = getattr(item, "error", None)
        return [
            ToolCallOutput(
                id=item.id,
                server_label=item.server_label,
                tool_name=getattr(item, "name", "") or "",
                arguments=getattr(item, "arguments", "") or "",
                output=getattr(item, "output", None),
                error=str(error) if error is not None else None,
            )
        ]

    logger.debug("Skipping output item of type %s", item_type)
    return []


def convert_response(response: Any) -> ConversationResponse:
    output: list[OutputItem] = []
    for item in getattr(response, "output", None) or []:
        output.extend(convert_output_item(item))
    return ConversationResponse(id=response.id, output=output)


class FoundryResponsesClient:
    """ResponseClient backed by the OpenAI Responses API of a Foundry project.

    Exactly one of ``agent_name`` (a Foundry agent reference) and ``model``
    (a model deployment) is required.
    """

    def __init__(
        self,
        openai_client: AsyncOpenAI,
        *,
        agent_name: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        if bool(agent_name) == bool(model):
            raise ValueError("Provide exactly one of agent_name or model")
        self._openai = openai_client
        self._agent_name = agent_name
        self._model = model

    @property
    def agent_name(self) -> Optional[str]:
        return self._agent_name

    def _create_kwargs(self, request: ConversationRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"input": request_input(request)}
        if self._agent_name:
            kwargs["extra_body"] = {"agent": {"name": self._agent_name, "type": "agent_reference"}}
        else:
            kwargs["model"] = self._model
        if request.previous_response_id:
            kwargs["previous_response_id"] = request.previous_response_id
        if request.instructions is not None:
            kwargs["instructions"] = request.instructions
        if request.tools:
            kwargs["tools"] = [tool.to_wire() for tool in request.tools]
        return kwargs

    async def create_response(self, request: ConversationRequest) -> ConversationResponse:
        kwargs = self._create_kwargs(request)
        logger.debug(
            "Creating response (previous=%s, %d input item(s))",
            request.previous_response_id,
            len(kwargs["input"]),
        )
        response = await self._openai.responses.create(**kwargs)
        return convert_response(response)

    async def stream_response(self, request: ConversationRequest) -> AsyncIterator[str]:
        kwargs = self._create_kwargs(request)
        stream = await self._openai.responses.create(stream=True, **kwargs)
        async for event in stream:
            if getattr(event, "type", None) == "response.output_text.delta":
                delta = getattr(event, "delta", "")
                if delta:
                    yield delta
