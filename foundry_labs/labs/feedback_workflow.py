# Copyright (c) Microsoft. All rights reserved.

import asyncio
from typing import Callable

from agent_framework import ChatAgent, ChatMessage, Role, SequentialBuilder, Workflow
from agent_framework.azure import AzureOpenAIChatClient

from ..config import FoundrySettings, create_credential
from ..observability import configure_logging, configure_tracing
from . import read_line

"""
Lab - Agent orchestration: sequential customer feedback triage

Summarizer -> Sentiment -> ActionPlanner, each agent seeing the conversation so
far. Runs on Azure OpenAI directly, no Foundry agents are created.

Pre-requisites:
- Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_CHAT_DEPLOYMENT_NAME environment variables.
"""

SUMMARIZER_INSTRUCTIONS = (
    "You summarize customer feedback for a product team. Output 3-5 bullet points. Be faithful to the input."
)
SENTIMENT_INSTRUCTIONS = (
    'You analyze customer feedback sentiment. Output JSON only: { "sentiment": "positive"|"neutral"|"negative", '
    '"confidence": number (0-1), "rationale": string }.'
)
ACTION_PLANNER_INSTRUCTIONS = (
    "You are a customer support + product triage agent. Based on the conversation so far, output JSON only: "
    '{ "priority": "p0"|"p1"|"p2", "actions": string[], "owner": "support"|"engineering"|"product", '
    '"replyToCustomer": string }.'
)


def read_multiline(reader: Callable[[str], str] = input) -> str:
    """Read lines until an empty line or end of input."""
    lines: list[str] = []
    while True:
        line = read_line("", reader)
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def create_participants(chat_client: AzureOpenAIChatClient) -> list[ChatAgent]:
    return [
        ChatAgent(name="Summarizer", instructions=SUMMARIZER_INSTRUCTIONS, chat_client=chat_client),
        ChatAgent(name="Sentiment", instructions=SENTIMENT_INSTRUCTIONS, chat_client=chat_client),
        ChatAgent(name="ActionPlanner", instructions=ACTION_PLANNER_INSTRUCTIONS, chat_client=chat_client),
    ]


async def run_workflow(workflow: Workflow, feedback: str) -> None:
    events = await workflow.run(feedback)
    outputs = events.get_outputs()

    if not outputs:
        print("No output produced.")
        return

    print("\nFinal conversation:")
    messages: list[ChatMessage] = outputs[0]
    for message in messages:
        name = message.author_name or ("assistant" if message.role == Role.ASSISTANT else "user")
        print(f"- {name}: {message.text}")


async def main() -> None:
    settings = FoundrySettings.from_env()
    configure_logging()
    configure_tracing(settings.enable_tracing)

    print("=== Lab - Agent orchestration (Sequential workflow) ===")
    print("Enter a piece of customer feedback. End with an empty line.")
    feedback = read_multiline()
    if not feedback.strip():
        print("No input provided.")
        return

    async with create_credential(settings) as credential:
        chat_client = AzureOpenAIChatClient(credential=credential)
        workflow = SequentialBuilder().participants(create_participants(chat_client)).build()
        await run_workflow(workflow, feedback)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
