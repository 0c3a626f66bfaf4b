# Copyright (c) Microsoft. All rights reserved.

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from azure.ai.projects.aio import AIProjectClient

from .config import FoundrySettings, create_credential

"""
Shared connection setup for the labs: credential, project client and the
project's OpenAI client, closed in reverse order on exit.
"""


@asynccontextmanager
async def open_project(settings: FoundrySettings) -> AsyncIterator[tuple[AIProjectClient, Any]]:
    endpoint = settings.require_project_endpoint()
    async with (
        create_credential(settings) as credential,
        AIProjectClient(endpoint=endpoint, credential=credential) as project_client,
        project_client.get_openai_client() as openai_client,
    ):
        yield project_client, openai_client
