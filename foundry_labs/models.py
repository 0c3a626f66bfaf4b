# Copyright (c) Microsoft. All rights reserved.

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

"""
Request and response types exchanged with the Foundry Responses API.

Output items form a closed union discriminated on ``type``. Code that walks a
response's output should handle every member of ``OutputItem``.
"""


class InputMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

    @classmethod
    def user(cls, content: str) -> "InputMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "InputMessage":
        return cls(role="assistant", content=content)


class ApprovalDecision(BaseModel):
    approval_request_id: str
    approved: bool


InputItem = Union[InputMessage, ApprovalDecision]


class McpToolDescriptor(BaseModel):
    """A remote MCP server attached to an agent or a single request."""

    server_label: str
    server_url: str
    require_approval: Literal["always", "never"] = "always"
    allowed_tools: Optional[list[str]] = None
    headers: Optional[dict[str, str]] = None

    def to_wire(self) -> dict[str, Any]:
        tool: dict[str, Any] = {
            "type": "mcp",
            "server_label": self.server_label,
            "server_url": self.server_url,
            "require_approval": self.require_approval,
        }
        if self.allowed_tools is not None:
            tool["allowed_tools"] = list(self.allowed_tools)
        if self.headers:
            tool["headers"] = dict(self.headers)
        return tool


class ConversationRequest(BaseModel):
    previous_response_id: Optional[str] = None
    input: list[InputItem] = Field(default_factory=list)
    instructions: Optional[str] = None
    tools: list[McpToolDescriptor] = Field(default_factory=list)
    stream: bool = False

    @classmethod
    def from_prompt(
        cls,
        prompt: str,
        *,
        history: Optional[list[InputMessage]] = None,
        instructions: Optional[str] = None,
        tools: Optional[list[McpToolDescriptor]] = None,
    ) -> "ConversationRequest":
        items: list[InputItem] = list(history or [])
        items.append(InputMessage.user(prompt))
        return cls(input=items, instructions=instructions, tools=list(tools or []))

    @property
    def is_continuation(self) -> bool:
        return self.previous_response_id is not None

    def continuation(
        self, previous_response_id: str, decisions: list[ApprovalDecision]
    ) -> "ConversationRequest":
        """Follow-up request answering approval requests of ``previous_response_id``.

        Instructions and tools are re-sent on every continuation; the platform is
        not relied on to inherit them from the earlier response.
        """
        return ConversationRequest(
            previous_response_id=previous_response_id,
            input=list(decisions),
            instructions=self.instructions,
            tools=[tool.model_copy() for tool in self.tools],
            stream=False,
        )


class TextOutput(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolApprovalRequest(BaseModel):
    type: Literal["tool_approval_request"] = "tool_approval_request"
    id: str
    server_label: str
    tool_name: str
    arguments: str = ""


class ToolCallOutput(BaseModel):
    """An MCP call the platform already executed."""

    type: Literal["tool_call"] = "tool_call"
    id: str
    server_label: str
    tool_name: str
    arguments: str = ""
    output: Optional[str] = None
    error: Optional[str] = None


OutputItem = Annotated[
    Union[TextOutput, ToolApprovalRequest, ToolCallOutput],
    Field(discriminator="type"),
]


class ConversationResponse(BaseModel):
    id: str
    output: list[OutputItem] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(item.text for item in self.output if isinstance(item, TextOutput))

    @property
    def approval_requests(self) -> list[ToolApprovalRequest]:
        return [item for item in self.output if isinstance(item, ToolApprovalRequest)]

    @property
    def tool_calls(self) -> list[ToolCallOutput]:
        return [item for item in self.output if isinstance(item, ToolCallOutput)]
