# Copyright (c) Microsoft. All rights reserved.

import asyncio

from ..approval_loop import ApprovalLoop
from ..config import FoundrySettings
from ..models import ConversationRequest
from ..observability import configure_logging, configure_tracing
from ..policies import ConsolePrompt
from ..project import open_project
from ..responses_client import FoundryResponsesClient
from . import print_approval_event, read_line, report_turn_error

"""
Lab - Integrate an AI agent with Foundry IQ

Talks to an agent created in the Foundry portal with Foundry IQ knowledge
enabled. Knowledge access is mediated through MCP approval requests, and this
lab asks you to approve or deny each one.

Pre-requisites:
- Set AZURE_AI_PROJECT_ENDPOINT.
- Set FOUNDRY_IQ_AGENT_NAME if your agent is not called "FoundryIQAgent".
"""


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print("=== Lab - Integrate an AI agent with Foundry IQ ===")
    print(f"Foundry Project: {settings.require_project_endpoint()}")
    print(f"Agent (portal-created): {settings.foundry_iq_agent_name}\n")

    async with open_project(settings) as (_, openai_client):
        loop = ApprovalLoop(
            FoundryResponsesClient(openai_client, agent_name=settings.foundry_iq_agent_name),
            ConsolePrompt(),
            max_rounds=settings.max_approval_rounds,
            on_event=print_approval_event,
            policy_failure=settings.policy_failure,
        )

        while True:
            prompt = read_line("Ask a question (or 'quit'): ")
            if not prompt.strip() or prompt.strip().lower() == "quit":
                break

            try:
                result = await loop.run(ConversationRequest.from_prompt(prompt))
            except Exception as e:
                report_turn_error(e)
                continue
            print(f"\n{result.text}\n")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
