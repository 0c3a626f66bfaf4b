# Copyright (c) Microsoft. All rights reserved.

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Optional

from azure.ai.projects.models import MCPTool, PromptAgentDefinition

from .models import McpToolDescriptor

"""
Agent version lifecycle in a Foundry project.

Whoever creates an agent version owns its release. Release is best effort:
failures are logged and never raised, so teardown can run on every exit path.
"""

logger = logging.getLogger(__name__)


@dataclass
class AgentSpec:
    name: str
    instructions: str
    tools: list[McpToolDescriptor] = field(default_factory=list)
    description: str = ""


@dataclass(frozen=True)
class AgentVersionRef:
    name: str
    version: str


@dataclass
class AgentInfo:
    """What a chat front end shows about an agent."""

    name: str
    description: str = ""
    avatar: str = ""
    capabilities: list[str] = field(default_factory=list)
    has_tools: bool = False

    @classmethod
    def unknown(cls, name: str) -> "AgentInfo":
        return cls(name=name, description="Unknown agent", avatar=name[:1].upper())


def _to_mcp_tool(tool: McpToolDescriptor) -> MCPTool:
    kwargs: dict[str, Any] = {
        "server_label": tool.server_label,
        "server_url": tool.server_url,
        "require_approval": tool.require_approval,
    }
    if tool.allowed_tools is not None:
        kwargs["allowed_tools"] = list(tool.allowed_tools)
    if tool.headers:
        kwargs["headers"] = dict(tool.headers)
    return MCPTool(**kwargs)


async def create_agent_version(project_client: Any, model: str, spec: AgentSpec) -> AgentVersionRef:
    definition = PromptAgentDefinition(
        model=model,
        instructions=spec.instructions,
        tools=[_to_mcp_tool(tool) for tool in spec.tools] or None,
    )
    agent = await project_client.agents.create_version(agent_name=spec.name, definition=definition)
    ref = AgentVersionRef(name=agent.name, version=str(agent.version))
    logger.info("Created agent %s v%s with %d tool(s)", ref.name, ref.version, len(spec.tools))
    return ref


async def release_agent_version(project_client: Any, ref: Optional[AgentVersionRef]) -> bool:
    """Delete an agent version, returning False instead of raising on failure."""
    if ref is None:
        return False
    try:
        await project_client.agents.delete_version(agent_name=ref.name, agent_version=ref.version)
    except Exception:
        logger.warning("Failed to delete agent %s v%s", ref.name, ref.version, exc_info=True)
        return False
    logger.info("Deleted agent %s v%s", ref.name, ref.version)
    return True


@asynccontextmanager
async def agent_version(project_client: Any, model: str, spec: AgentSpec) -> AsyncIterator[AgentVersionRef]:
    ref = await create_agent_version(project_client, model, spec)
    try:
        yield ref
    finally:
        await release_agent_version(project_client, ref)


class AgentRegistry:
    """Named agent versions created for one chat process and released together.

    Usage::

        async with AgentRegistry(project_client, model) as registry:
            await registry.add("Writer", writer_spec, writer_info)
            ref = registry.get("Writer")
    """

    def __init__(self, project_client: Any, model: str) -> None:
        self._project_client = project_client
        self._model = model
        self._agents: dict[str, AgentVersionRef] = {}
        self._infos: dict[str, AgentInfo] = {}

    async def add(
        self, key: str, spec: AgentSpec, info: Optional[AgentInfo] = None, *, optional: bool = False
    ) -> Optional[AgentVersionRef]:
        """Create ``spec`` and register it under ``key``.

        With ``optional=True`` a creation failure is logged and the agent is
        skipped; otherwise the error propagates.
        """
        try:
            ref = await create_agent_version(self._project_client, self._model, spec)
        except Exception:
            if not optional:
                raise
            logger.warning("Failed to create agent %s. Skipping.", key, exc_info=True)
            return None
        self._agents[key] = ref
        self._infos[key] = info or AgentInfo(
            name=key, description=spec.description, avatar=key[:1].upper(), has_tools=bool(spec.tools)
        )
        return ref

    def get(self, key: str) -> Optional[AgentVersionRef]:
        return self._agents.get(key)

    def info(self, key: str) -> AgentInfo:
        return self._infos.get(key) or AgentInfo.unknown(key)

    def available(self) -> list[AgentInfo]:
        return list(self._infos.values())

    def keys(self) -> list[str]:
        return list(self._agents)

    async def aclose(self) -> None:
        for key, ref in list(self._agents.items()):
            await release_agent_version(self._project_client, ref)
            logger.debug("Released agent registered as %s", key)
        self._agents.clear()
        self._infos.clear()

    async def __aenter__(self) -> "AgentRegistry":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
