import asyncio
import logging
from types import SimpleNamespace

import pytest

from foundry_labs.agents import (
    AgentInfo,
    AgentRegistry,
    AgentSpec,
    AgentVersionRef,
    agent_version,
    create_agent_version,
    release_agent_version,
)
from foundry_labs.models import McpToolDescriptor


class FakeAgents:
    def __init__(self, fail_create=(), fail_delete=()):
        self.fail_create = set(fail_create)
        self.fail_delete = set(fail_delete)
        self.created = []
        self.deleted = []

    async def create_version(self, agent_name, definition):
        if agent_name in self.fail_create:
            raise RuntimeError(f"cannot create {agent_name}")
        self.created.append((agent_name, definition))
        return SimpleNamespace(name=agent_name, version=1)

    async def delete_version(self, agent_name, agent_version):
        if agent_name in self.fail_delete:
            raise RuntimeError(f"cannot delete {agent_name}")
        self.deleted.append((agent_name, agent_version))


def project(**kwargs):
    return SimpleNamespace(agents=FakeAgents(**kwargs))


WRITER = AgentSpec(name="Writer", instructions="Write things.", description="Creates content")
GITHUB = AgentSpec(
    name="GitHubAgent",
    instructions="Use GitHub.",
    tools=[McpToolDescriptor(server_label="github", server_url="https://api.githubcopilot.com/mcp")],
)


def test_create_agent_version():
    client = project()

    ref = asyncio.run(create_agent_version(client, "gpt-4.1", GITHUB))

    assert ref == AgentVersionRef(name="GitHubAgent", version="1")
    (name, definition), = client.agents.created
    assert name == "GitHubAgent"
    assert definition is not None


def test_release_swallows_failures():
    client = project(fail_delete=["Writer"])

    assert asyncio.run(release_agent_version(client, AgentVersionRef("Writer", "1"))) is False
    assert asyncio.run(release_agent_version(client, None)) is False
    assert asyncio.run(release_agent_version(client, AgentVersionRef("Reviewer", "2"))) is True
    assert client.agents.deleted == [("Reviewer", "2")]


def test_agent_version_released_when_body_fails():
    client = project()

    async def scenario():
        async with agent_version(client, "gpt-4.1", WRITER):
            raise KeyError("boom")

    with pytest.raises(KeyError):
        asyncio.run(scenario())

    assert client.agents.deleted == [("Writer", "1")]


def test_agent_version_released_when_cancelled():
    client = project()

    async def scenario():
        async with agent_version(client, "gpt-4.1", WRITER):
            raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(scenario())

    assert client.agents.deleted == [("Writer", "1")]


def test_registry_lifecycle():
    client = project(fail_create=["GitHubAgent"])

    async def scenario():
        async with AgentRegistry(client, "gpt-4.1") as registry:
            await registry.add("Writer", WRITER)
            skipped = await registry.add("GitHub", GITHUB, optional=True)
            assert skipped is None
            assert registry.keys() == ["Writer"]
            assert registry.info("Writer") == AgentInfo(
                name="Writer", description="Creates content", avatar="W", has_tools=False
            )
            assert registry.info("GitHub").description == "Unknown agent"
            assert registry.get("GitHub") is None
            return registry

    registry = asyncio.run(scenario())

    assert client.agents.deleted == [("Writer", "1")]
    assert registry.available() == []


def test_registry_required_agent_failure_propagates():
    client = project(fail_create=["Writer"])

    async def scenario():
        async with AgentRegistry(client, "gpt-4.1") as registry:
            await registry.add("Writer", WRITER)

    with pytest.raises(RuntimeError, match="cannot create Writer"):
        asyncio.run(scenario())


def test_lifecycle_logs_without_console_output(capsys, caplog):
    client = project(fail_delete=["GitHubAgent"])

    with caplog.at_level(logging.INFO, logger="foundry_labs.agents"):
        ref = asyncio.run(create_agent_version(client, "gpt-4.1", GITHUB))
        asyncio.run(release_agent_version(client, ref))

    assert capsys.readouterr().out == ""
    messages = [record.getMessage() for record in caplog.records]
    assert "Created agent GitHubAgent v1 with 1 tool(s)" in messages
    assert "Failed to delete agent GitHubAgent v1" in messages
