import asyncio
from types import SimpleNamespace

from conftest import FakeResponseClient, approval_response, text_response
from foundry_labs.agents import AgentInfo, AgentVersionRef
from foundry_labs.approval_loop import ApprovalEvent, ApprovalLoopExceededError, ApprovalPhase
from foundry_labs.config import FoundrySettings
from foundry_labs.labs import print_agent_created, print_approval_event, read_line, report_turn_error
from foundry_labs.labs import cleanup, github_agents
from foundry_labs.labs.mslearn_mcp import build_prompt, mslearn_agent_spec
from foundry_labs.models import ConversationResponse


def test_mslearn_scenario_prompts():
    assert build_prompt("1", "AKS") == "Use microsoft_docs_search to answer: AKS"
    assert build_prompt("2", "AKS").startswith("Use microsoft_docs_fetch")
    assert build_prompt("3", "AKS") == "Use microsoft_code_sample_search to find code samples for: AKS"
    assert build_prompt("x", "AKS") == "AKS"


def test_mslearn_agent_requires_approval():
    spec = mslearn_agent_spec("https://learn.microsoft.com/api/mcp")
    (tool,) = spec.tools
    assert tool.server_label == "mslearn"
    assert tool.require_approval == "always"


def test_console_helpers(capsys):
    print_approval_event(ApprovalEvent("github", "list_issues", ApprovalPhase.APPROVED, "apr_1"))
    print_approval_event(ApprovalEvent("github", "delete_repo", ApprovalPhase.DENIED, "apr_2"))
    report_turn_error(RuntimeError("network down"))
    report_turn_error(ApprovalLoopExceededError(3, ConversationResponse(id="r")))
    print_agent_created(AgentVersionRef("Writer", "2"))
    print_agent_created(None)

    out = capsys.readouterr().out
    assert "Approving tool call: github (list_issues)" in out
    assert "Denied tool call: github (delete_repo)" in out
    assert "Error: network down" in out
    assert "kept asking for approval" in out
    assert out.count("Created agent:") == 1
    assert "Created agent: Writer (version: 2)" in out


def test_read_line_handles_eof():
    def closed(_):
        raise EOFError

    assert read_line("> ", closed) == ""


class StubRegistry:
    def __init__(self):
        self._infos = {
            "Writer": AgentInfo("Writer", has_tools=False),
            "Reviewer": AgentInfo("Reviewer", has_tools=False),
            "GitHub": AgentInfo("GitHub", has_tools=True),
        }

    def get(self, key):
        return AgentVersionRef(key, "1") if key in self._infos else None

    def info(self, key):
        return self._infos.get(key) or AgentInfo.unknown(key)

    def keys(self):
        return list(self._infos)


def make_lab(clients):
    lab = github_agents.GitHubAgentsLab(object(), StubRegistry(), FoundrySettings())
    lab._client = lambda key: clients[key]
    return lab


def test_github_chat_uses_approval_loop_and_records_history(capsys):
    github = FakeResponseClient([
        approval_response("resp_1", ("apr_1", "github", "list_issues")),
        text_response("resp_2", "Found 3 open issues."),
        text_response("resp_3", "Issue 1 is the oldest."),
    ])
    lab = make_lab({"GitHub": github})

    assert asyncio.run(lab.chat("GitHub", "List open issues")) == "Found 3 open issues."
    asyncio.run(lab.chat("GitHub", "Which is oldest?"))

    follow_up = github.requests[2]
    assert [item.content for item in follow_up.input] == [
        "List open issues",
        "Found 3 open issues.",
        "Which is oldest?",
    ]
    assert "Approved" in capsys.readouterr().out


def test_writer_reviewer_workflow_feeds_draft_to_reviewer():
    writer = FakeResponseClient(deltas=["Charge ", "ahead."])
    reviewer = FakeResponseClient(deltas=["Punchy."])
    lab = make_lab({"Writer": writer, "Reviewer": reviewer})

    assert asyncio.run(lab.writer_reviewer("Slogan please")) == "Punchy."
    (review_request,) = reviewer.stream_requests
    assert review_request.input[-1].content == github_agents.review_prompt("Charge ahead.")


class FakeProjectAgents:
    def __init__(self, names, failing=()):
        self._names = names
        self._failing = set(failing)
        self.deleted = []

    async def list(self):
        for name in self._names:
            yield SimpleNamespace(name=name)

    async def delete(self, agent_name):
        if agent_name in self._failing:
            raise RuntimeError("locked")
        self.deleted.append(agent_name)


def test_cleanup_counts_deleted_and_failed(capsys):
    agents = FakeProjectAgents(["Writer", "Reviewer", "GitHubAgent"], failing=["Reviewer"])

    deleted, failed = asyncio.run(cleanup.cleanup_agents(SimpleNamespace(agents=agents)))

    assert (deleted, failed) == (2, 1)
    assert agents.deleted == ["Writer", "GitHubAgent"]
    assert "Failed to delete agent Reviewer" in capsys.readouterr().out


def test_cleanup_requires_confirmation(monkeypatch, capsys):
    monkeypatch.setenv("AZURE_AI_PROJECT_ENDPOINT", "https://example.services.ai.azure.com/api/projects/p")

    asyncio.run(cleanup.main(confirm=lambda _: "no"))

    assert "Cleanup cancelled." in capsys.readouterr().out
