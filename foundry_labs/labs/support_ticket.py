# Copyright (c) Microsoft. All rights reserved.

import asyncio
import logging

from httpx import AsyncClient, HTTPError

from ..agents import AgentSpec, agent_version
from ..config import FoundrySettings
from ..models import ConversationRequest
from ..observability import configure_logging, configure_tracing
from ..project import open_project
from ..responses_client import FoundryResponsesClient
from . import print_agent_created, read_line, report_turn_error

"""
Lab - Use a custom function in an AI agent

A support-ticket assistant. Each problem description is first sent to a
text-normalization function over HTTP (the same function can serve as an Azure
AI Search custom skill); if that call fails the raw description is used. The
agent then turns the inputs into a JSON support ticket.

Pre-requisites:
- Set AZURE_AI_PROJECT_ENDPOINT and AZURE_AI_MODEL_DEPLOYMENT_NAME environment variables.
- Optionally set SKILLS_BASE_URL and SKILLS_NORMALIZE_PATH for the normalize function.
"""

logger = logging.getLogger(__name__)

AGENT_NAME = "SupportTicketAgent"

INSTRUCTIONS = """You are a technical support agent.
Collect a user's issue description and produce a structured support ticket.
Keep the ticket concise and actionable.
Output must be valid JSON."""

TICKET_SCHEMA = """{
  "ticketId": "string",
  "submittedBy": "string",
  "summary": "string",
  "description": "string",
  "normalizedDescription": "string",
  "severity": "low|medium|high",
  "category": "string",
  "suggestedNextSteps": ["string"]
}"""


def support_agent_spec() -> AgentSpec:
    return AgentSpec(name=AGENT_NAME, instructions=INSTRUCTIONS)


async def normalize_description(http_client: AsyncClient, path: str, description: str) -> str:
    """Return the normalized text from the skill, or ``description`` if it is unavailable."""
    try:
        response = await http_client.post(path, json={"text": description})
        response.raise_for_status()
        payload = response.json()
    except (HTTPError, ValueError) as e:
        logger.warning("Normalize function failed, using the raw description: %s", e)
        return description

    normalized = payload.get("normalizedText") if isinstance(payload, dict) else None
    return normalized or description


def build_ticket_prompt(email: str, description: str, normalized_description: str) -> str:
    return (
        f"Create a support ticket in JSON using this schema:\n\n{TICKET_SCHEMA}\n\n"
        "Use these inputs:\n"
        f"- submittedBy: {email}\n"
        f"- description: {description}\n"
        f"- normalizedDescription: {normalized_description}"
    )


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print("Lab 03 - Use a custom function in an AI agent")
    print("This sample builds a simple support-ticket assistant.")
    print(f"Skills function base URL: {settings.skills_base_url}\n")

    async with (
        open_project(settings) as (project_client, openai_client),
        agent_version(project_client, settings.require_model(), support_agent_spec()) as agent,
        AsyncClient(base_url=settings.skills_base_url) as http_client,
    ):
        print_agent_created(agent)
        client = FoundryResponsesClient(openai_client, agent_name=agent.name)

        while True:
            email = read_line("User email (or 'quit'): ").strip()
            if not email or email.lower() == "quit":
                break

            description = read_line("Describe the problem: ")
            if not description.strip():
                continue

            normalized = await normalize_description(http_client, settings.skills_normalize_path, description)
            try:
                response = await client.create_response(
                    ConversationRequest.from_prompt(build_ticket_prompt(email, description, normalized))
                )
            except Exception as e:
                report_turn_error(e)
                continue
            print(f"\n{response.text}\n")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
