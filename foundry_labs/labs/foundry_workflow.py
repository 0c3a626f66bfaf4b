# Copyright (c) Microsoft. All rights reserved.

import asyncio
from dataclasses import dataclass

from ..agents import AgentRegistry, AgentSpec
from ..config import FoundrySettings
from ..models import ConversationRequest
from ..observability import configure_logging, configure_tracing
from ..project import open_project
from ..responses_client import FoundryResponsesClient, ResponseClient
from . import print_agent_created, read_line

"""
Lab - Build a workflow in Microsoft Foundry

A planner, a writer and a reviewer agent run one after another, each step
feeding its output to the next. All three agent versions are released when
the lab exits, whether the pipeline finished or failed.

Pre-requisites:
- Set AZURE_AI_PROJECT_ENDPOINT and AZURE_AI_MODEL_DEPLOYMENT_NAME environment variables.
"""

DEFAULT_TOPIC = "How to add MCP tools to a Foundry agent"

PLANNER_SPEC = AgentSpec(
    name="WorkflowPlanner",
    instructions="You are a planner. Create a short plan for the requested output.",
)

WRITER_SPEC = AgentSpec(
    name="WorkflowWriter",
    instructions="You are a writer. Produce a high-quality draft following the provided plan.",
)

REVIEWER_SPEC = AgentSpec(
    name="WorkflowReviewer",
    instructions="You are a reviewer. Provide concise improvement suggestions and a final revised version.",
)

STEPS = (("Planner", PLANNER_SPEC), ("Writer", WRITER_SPEC), ("Reviewer", REVIEWER_SPEC))


def plan_prompt(topic: str) -> str:
    return f"Create a short outline/plan for a developer blog post about: {topic}"


def draft_prompt(plan: str) -> str:
    return f"Write the blog post using this plan:\n\n{plan}"


def review_prompt(draft: str) -> str:
    return (
        "Review and improve this draft. Return: (1) brief feedback, (2) revised final version.\n\n"
        f"DRAFT:\n{draft}"
    )


@dataclass
class PipelineResult:
    plan: str
    draft: str
    review: str


async def _ask(client: ResponseClient, prompt: str) -> str:
    response = await client.create_response(ConversationRequest.from_prompt(prompt))
    return response.text


async def run_pipeline(
    planner: ResponseClient, writer: ResponseClient, reviewer: ResponseClient, topic: str
) -> PipelineResult:
    """Plan, draft, then review. A failing step stops the pipeline."""
    plan = await _ask(planner, plan_prompt(topic))
    draft = await _ask(writer, draft_prompt(plan))
    review = await _ask(reviewer, review_prompt(draft))
    return PipelineResult(plan=plan, draft=draft, review=review)


def print_result(result: PipelineResult) -> None:
    print("\n=== PLAN ===\n")
    print(result.plan)
    print("\n=== DRAFT ===\n")
    print(result.draft)
    print("\n=== REVIEW + FINAL ===\n")
    print(result.review)


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print("Lab 08 - Build a workflow in Microsoft Foundry")
    print("This sample demonstrates a simple workflow-like pipeline using multiple agents.\n")

    async with (
        open_project(settings) as (project_client, openai_client),
        AgentRegistry(project_client, settings.require_model()) as registry,
    ):
        clients = []
        for key, spec in STEPS:
            ref = await registry.add(key, spec)
            print_agent_created(ref)
            clients.append(FoundryResponsesClient(openai_client, agent_name=ref.name))

        topic = read_line("Enter a topic for a short developer blog post (or blank to use default): ").strip()
        result = await run_pipeline(*clients, topic or DEFAULT_TOPIC)
        print_result(result)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
