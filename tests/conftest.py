import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest

from foundry_labs.models import ConversationResponse, TextOutput, ToolApprovalRequest


class FakeResponseClient:
    """Replays scripted responses and records every request it receives."""

    def __init__(self, responses=None, factory=None, deltas=None):
        self._responses = list(responses or [])
        self._factory = factory
        self._deltas = list(deltas or [])
        self.requests = []
        self.stream_requests = []

    async def create_response(self, request):
        self.requests.append(request)
        if self._factory is not None:
            return self._factory(len(self.requests))
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def stream_response(self, request):
        self.stream_requests.append(request)
        for delta in self._deltas:
            yield delta


def approval_response(response_id, *approvals):
    return ConversationResponse(
        id=response_id,
        output=[
            ToolApprovalRequest(id=approval_id, server_label=server, tool_name=tool, arguments="{}")
            for approval_id, server, tool in approvals
        ],
    )


def text_response(response_id, *texts):
    return ConversationResponse(id=response_id, output=[TextOutput(text=t) for t in texts])


@pytest.fixture
def fake_client_factory():
    return FakeResponseClient
