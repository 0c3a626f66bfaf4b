# Copyright (c) Microsoft. All rights reserved.

import asyncio

from ..agents import AgentInfo, AgentRegistry, AgentSpec
from ..config import FoundrySettings
from ..conversation import ChatMessage, ConversationStore
from ..models import ConversationRequest, McpToolDescriptor
from ..observability import configure_logging, configure_tracing
from ..policies import AlwaysApprove
from ..project import open_project
from ..responses_client import FoundryResponsesClient
from ..streaming import TextDelta, ToolCallUpdate, ToolResultUpdate, stream_turn
from . import print_agent_created, read_line, report_turn_error

"""
Lab - Build AI agents: Writer, Reviewer and a GitHub agent with MCP

Writer and Reviewer stream their answers. The GitHub agent uses the GitHub MCP
server, so its turns go through the approval loop (all calls auto-approved).
Each agent keeps its own conversation history for the session.

Commands: writer, reviewer, github, workflow, quit
"""

WRITER_SPEC = AgentSpec(
    name="Writer",
    instructions="You are an excellent content writer. You create new content and edit contents based on the feedback.",
    description="Creates and edits content",
)

REVIEWER_SPEC = AgentSpec(
    name="Reviewer",
    instructions=(
        "You are an excellent content reviewer. Provide actionable feedback to the writer about the provided "
        "content. Provide the feedback in the most concise manner possible."
    ),
    description="Reviews and provides feedback",
)

GITHUB_INSTRUCTIONS = """You are a helpful GitHub assistant with access to GitHub via MCP (Model Context Protocol).
You can help users with:
- Searching for repositories, code, issues, and pull requests
- Getting information about repositories, commits, and branches
- Listing issues and pull requests
- Searching for users and organizations

Use the GitHub MCP tools available to you to answer questions and perform tasks.
Always be helpful and provide clear, concise responses."""

WORKFLOW_PROMPT = "Create a slogan for a new electric SUV that is affordable and fun to drive."


def github_agent_spec(server_url: str) -> AgentSpec:
    return AgentSpec(
        name="GitHubAgent",
        instructions=GITHUB_INSTRUCTIONS,
        tools=[McpToolDescriptor(server_label="github", server_url=server_url, require_approval="always")],
        description="GitHub assistant with MCP tools",
    )


def review_prompt(content: str) -> str:
    return f"Please review this content and provide feedback:\n\n{content}"


class GitHubAgentsLab:
    def __init__(self, openai_client, registry: AgentRegistry, settings: FoundrySettings) -> None:
        self._openai = openai_client
        self._registry = registry
        self._settings = settings
        self._store = ConversationStore()
        self._sessions: dict[str, str] = {}

    def _client(self, key: str) -> FoundryResponsesClient:
        ref = self._registry.get(key)
        if ref is None:
            raise KeyError(f"Unknown agent: {key}. Available agents: {', '.join(self._registry.keys())}")
        return FoundryResponsesClient(self._openai, agent_name=ref.name)

    def _session(self, key: str) -> str:
        if key not in self._sessions:
            self._sessions[key] = self._store.create_session()
        return self._sessions[key]

    async def chat(self, key: str, prompt: str) -> str:
        """Run one turn against ``key`` and print the updates as they arrive."""
        info = self._registry.info(key)
        session_id = self._session(key)
        request = self._store.build_request(session_id, prompt, history_limit=self._settings.history_limit)

        print(f"\n=== {info.name} Agent ===")
        parts: list[str] = []
        async for update in stream_turn(
            self._client(key),
            request,
            AlwaysApprove(),
            use_approval_loop=info.has_tools,
            max_rounds=self._settings.max_approval_rounds,
            policy_failure=self._settings.policy_failure,
        ):
            if isinstance(update, TextDelta):
                parts.append(update.text)
                print(update.text, end="", flush=True)
            elif isinstance(update, ToolCallUpdate):
                print(f"  [MCP] {update.tool_name}: {update.detail}")
            elif isinstance(update, ToolResultUpdate):
                print(f"  [MCP] {update.tool_name}: {update.result}")
        print("\n")

        reply = "".join(parts)
        self._store.add_message(session_id, ChatMessage(role="user", content=prompt, agent_name=info.name))
        self._store.add_message(session_id, ChatMessage(role="assistant", content=reply, agent_name=info.name))
        return reply

    async def writer_reviewer(self, prompt: str = WORKFLOW_PROMPT) -> str:
        print(f"\nUser: {prompt}")
        draft = await self._single_turn("Writer", prompt)
        return await self._single_turn("Reviewer", review_prompt(draft))

    async def _single_turn(self, key: str, prompt: str) -> str:
        print(f"\n=== {self._registry.info(key).name} Agent ===")
        parts: list[str] = []
        async for delta in self._client(key).stream_response(ConversationRequest.from_prompt(prompt)):
            parts.append(delta)
            print(delta, end="", flush=True)
        print("\n")
        return "".join(parts)


async def create_agents(registry: AgentRegistry, settings: FoundrySettings) -> None:
    writer = await registry.add(
        "Writer",
        WRITER_SPEC,
        AgentInfo("Writer", WRITER_SPEC.description, "W", ["Content creation", "Editing"]),
    )
    reviewer = await registry.add(
        "Reviewer",
        REVIEWER_SPEC,
        AgentInfo("Reviewer", REVIEWER_SPEC.description, "R", ["Content review", "Feedback"]),
    )
    github = await registry.add(
        "GitHub",
        github_agent_spec(settings.github_mcp_server_url),
        AgentInfo(
            "GitHub",
            "GitHub assistant with MCP tools",
            "G",
            ["Repository search", "Issue tracking", "Code search", "PR management"],
            has_tools=True,
        ),
        optional=True,
    )
    for ref in (writer, reviewer, github):
        print_agent_created(ref)
    if github is None:
        print("Warning: GitHub agent could not be created. Continuing without it.")


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print(f"Using Azure AI endpoint: {settings.require_project_endpoint()}")
    print(f"Using model deployment: {settings.require_model()}")
    print(f"GitHub MCP Server: {settings.github_mcp_server_url}")

    async with (
        open_project(settings) as (project_client, openai_client),
        AgentRegistry(project_client, settings.require_model()) as registry,
    ):
        await create_agents(registry, settings)
        lab = GitHubAgentsLab(openai_client, registry, settings)

        print("\n=== Interactive Mode ===")
        print("Available agents: " + ", ".join(info.name for info in registry.available()))
        print("Commands: 'writer', 'reviewer', 'github', 'workflow', 'quit'\n")

        commands = {"writer": "Writer", "reviewer": "Reviewer", "github": "GitHub"}
        while True:
            command = read_line("Select agent or command: ").strip().lower()
            if command in ("", "quit"):
                break

            try:
                if command == "workflow":
                    await lab.writer_reviewer()
                elif command in commands:
                    prompt = read_line(f"\n[{commands[command]}] Enter your prompt: ")
                    if prompt.strip():
                        await lab.chat(commands[command], prompt)
                else:
                    print("Unknown command. Use: writer, reviewer, github, workflow, or quit")
            except Exception as e:
                report_turn_error(e)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
