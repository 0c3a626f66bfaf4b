# Copyright (c) Microsoft. All rights reserved.

import asyncio

from ..agents import AgentSpec, agent_version
from ..approval_loop import ApprovalLoop
from ..config import FoundrySettings
from ..models import ConversationRequest, McpToolDescriptor
from ..observability import configure_logging, configure_tracing
from ..policies import AlwaysApprove
from ..project import open_project
from ..responses_client import FoundryResponsesClient
from . import print_agent_created, print_approval_event, read_line, report_turn_error

"""
Lab - Connect an agent to a remote MCP server

Creates an agent that uses the Microsoft Learn MCP server. Every tool call
requires approval; this lab approves them all and prints each approval.

Pre-requisites:
- Set AZURE_AI_PROJECT_ENDPOINT and AZURE_AI_MODEL_DEPLOYMENT_NAME environment variables.
- Optionally set MSLEARN_MCP_SERVER_URL.
"""

AGENT_NAME = "MSLearnMcpAgent"

INSTRUCTIONS = (
    "You are a helpful Microsoft Learn assistant.\n"
    "Use the MCP tools provided by the Microsoft Learn MCP server to answer questions "
    "with up-to-date official documentation.\n"
    "When you cite information, include the Microsoft Learn URL(s) you used."
)

SCENARIOS = {
    "1": "Search docs (microsoft_docs_search)",
    "2": "Fetch a doc page (microsoft_docs_fetch)",
    "3": "Search code samples (microsoft_code_sample_search)",
}


def build_prompt(scenario: str, query: str) -> str:
    if scenario == "1":
        return f"Use microsoft_docs_search to answer: {query}"
    if scenario == "2":
        return f"Use microsoft_docs_fetch to retrieve the most relevant page for: {query}. Then summarize it."
    if scenario == "3":
        return f"Use microsoft_code_sample_search to find code samples for: {query}"
    return query


def mslearn_agent_spec(server_url: str) -> AgentSpec:
    return AgentSpec(
        name=AGENT_NAME,
        instructions=INSTRUCTIONS,
        tools=[McpToolDescriptor(server_label="mslearn", server_url=server_url, require_approval="always")],
    )


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print("=== Lab - Connect AI Agents to a remote MCP server ===")
    print(f"Foundry Project: {settings.require_project_endpoint()}")
    print(f"Model deployment: {settings.require_model()}")
    print(f"MS Learn MCP server: {settings.mslearn_mcp_server_url}\n")

    async with (
        open_project(settings) as (project_client, openai_client),
        agent_version(
            project_client, settings.require_model(), mslearn_agent_spec(settings.mslearn_mcp_server_url)
        ) as agent,
    ):
        print_agent_created(agent)
        client = FoundryResponsesClient(openai_client, agent_name=agent.name)
        loop = ApprovalLoop(
            client,
            AlwaysApprove(),
            max_rounds=settings.max_approval_rounds,
            on_event=print_approval_event,
            policy_failure=settings.policy_failure,
        )

        while True:
            print("\nChoose an MCP scenario:")
            for key, label in SCENARIOS.items():
                print(f"  {key}) {label}")
            print("  q) Quit")
            scenario = read_line("> ").strip().lower()
            if scenario in ("", "q", "quit"):
                break

            query = read_line("Your question / query: ")
            if not query.strip():
                continue

            try:
                result = await loop.run(ConversationRequest.from_prompt(build_prompt(scenario, query)))
            except Exception as e:
                report_turn_error(e)
                continue
            print(f"\n{result.text}\n")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
