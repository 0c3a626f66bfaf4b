import asyncio
from types import SimpleNamespace

import pytest

from foundry_labs.models import (
    ApprovalDecision,
    ConversationRequest,
    ConversationResponse,
    InputMessage,
    McpToolDescriptor,
    TextOutput,
    ToolApprovalRequest,
    ToolCallOutput,
)
from foundry_labs.responses_client import FoundryResponsesClient, convert_response, request_input


def message(*texts):
    return SimpleNamespace(
        type="message",
        content=[SimpleNamespace(type="output_text", text=t) for t in texts],
    )


class FakeResponses:
    def __init__(self, result):
        self.result = result
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return self.result


class FakeStream:
    def __init__(self, events):
        self._events = events

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for event in self._events:
            yield event


def fake_openai(result):
    return SimpleNamespace(responses=FakeResponses(result))


def test_convert_response_maps_known_item_types():
    raw = SimpleNamespace(
        id="resp_1",
        output=[
            SimpleNamespace(type="reasoning", summary=[]),
            SimpleNamespace(
                type="mcp_call",
                id="call_1",
                server_label="mslearn",
                name="microsoft_docs_search",
                arguments='{"query": "aks"}',
                output="results",
                error=None,
            ),
            SimpleNamespace(
                type="mcp_approval_request",
                id="apr_1",
                server_label="github",
                name="list_issues",
                arguments='{"repo": "x"}',
            ),
            message("Hello, ", "world"),
        ],
    )

    response = convert_response(raw)

    assert response.id == "resp_1"
    assert response.output == [
        ToolCallOutput(
            id="call_1",
            server_label="mslearn",
            tool_name="microsoft_docs_search",
            arguments='{"query": "aks"}',
            output="results",
        ),
        ToolApprovalRequest(id="apr_1", server_label="github", tool_name="list_issues", arguments='{"repo": "x"}'),
        TextOutput(text="Hello, "),
        TextOutput(text="world"),
    ]
    assert response.text == "Hello, world"
    assert [a.id for a in response.approval_requests] == ["apr_1"]


def test_convert_response_without_output():
    response = convert_response(SimpleNamespace(id="resp_empty", output=None))
    assert response == ConversationResponse(id="resp_empty")
    assert response.text == ""


def test_request_input_maps_messages_and_decisions():
    request = ConversationRequest(
        input=[
            InputMessage.user("hi"),
            InputMessage.assistant("hello"),
            ApprovalDecision(approval_request_id="apr_1", approved=False),
        ]
    )

    assert request_input(request) == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"type": "mcp_approval_response", "approval_request_id": "apr_1", "approve": False},
    ]


def test_agent_reference_request():
    openai = fake_openai(SimpleNamespace(id="resp_2", output=[message("ok")]))
    client = FoundryResponsesClient(openai, agent_name="GitHubAgent")
    request = ConversationRequest(
        previous_response_id="resp_1",
        input=[ApprovalDecision(approval_request_id="apr_1", approved=True)],
    )

    response = asyncio.run(client.create_response(request))

    assert response.text == "ok"
    (call,) = openai.responses.calls
    assert call["extra_body"] == {"agent": {"name": "GitHubAgent", "type": "agent_reference"}}
    assert call["previous_response_id"] == "resp_1"
    assert "model" not in call
    assert "tools" not in call
    assert "instructions" not in call


def test_model_request_sends_instructions_and_tools():
    openai = fake_openai(SimpleNamespace(id="resp_1", output=[]))
    client = FoundryResponsesClient(openai, model="gpt-4.1")
    tool = McpToolDescriptor(
        server_label="mslearn",
        server_url="https://learn.microsoft.com/api/mcp",
        allowed_tools=["microsoft_docs_search"],
    )
    request = ConversationRequest.from_prompt("What is AKS?", instructions="Cite sources.", tools=[tool])

    asyncio.run(client.create_response(request))

    (call,) = openai.responses.calls
    assert call["model"] == "gpt-4.1"
    assert call["instructions"] == "Cite sources."
    assert call["tools"] == [
        {
            "type": "mcp",
            "server_label": "mslearn",
            "server_url": "https://learn.microsoft.com/api/mcp",
            "require_approval": "always",
            "allowed_tools": ["microsoft_docs_search"],
        }
    ]
    assert "previous_response_id" not in call


def test_stream_response_yields_text_deltas_only():
    events = [
        SimpleNamespace(type="response.created"),
        SimpleNamespace(type="response.output_text.delta", delta="Hel"),
        SimpleNamespace(type="response.output_text.delta", delta=""),
        SimpleNamespace(type="response.output_text.delta", delta="lo"),
        SimpleNamespace(type="response.completed"),
    ]
    openai = fake_openai(FakeStream(events))
    client = FoundryResponsesClient(openai, agent_name="Writer")

    async def collect():
        return [d async for d in client.stream_response(ConversationRequest.from_prompt("hi"))]

    assert asyncio.run(collect()) == ["Hel", "lo"]
    assert openai.responses.calls[0]["stream"] is True


@pytest.mark.parametrize("kwargs", [{}, {"agent_name": "a", "model": "m"}])
def test_client_requires_exactly_one_target(kwargs):
    with pytest.raises(ValueError):
        FoundryResponsesClient(fake_openai(None), **kwargs)
