# Copyright (c) Microsoft. All rights reserved.

import asyncio
import logging
from typing import Any, Callable

from azure.ai.projects.aio import AIProjectClient

from ..config import ConfigurationError, FoundrySettings, create_credential
from ..observability import configure_logging
from . import read_line

"""
Foundry project cleanup

Deletes every agent (all versions) in the project. Labs release the versions
they create on exit; this is for anything left behind by interrupted runs.
"""

logger = logging.getLogger(__name__)

CONFIRMATION = "DELETE ALL"


async def cleanup_agents(project_client: Any) -> tuple[int, int]:
    """
    List and delete all agents in the project.

    Returns:
        Tuple of (deleted_count, failed_count)
    """
    deleted = 0
    failed = 0

    print("\n" + "=" * 50)
    print("CLEANING UP AGENTS")
    print("=" * 50)

    agent_names = []
    async for agent in project_client.agents.list():
        agent_names.append(agent.name)

    if not agent_names:
        print("No agents found.")
        return deleted, failed

    print(f"Found {len(agent_names)} agent(s):\n")
    for name in agent_names:
        print(f"  - Agent: {name}")

    print(f"\nDeleting {len(agent_names)} agent(s)...")
    for name in agent_names:
        try:
            await project_client.agents.delete(agent_name=name)
        except Exception as e:
            print(f"  ✗ Failed to delete agent {name}: {e}")
            logger.warning("Failed to delete agent %s", name, exc_info=True)
            failed += 1
            continue
        print(f"  ✓ Deleted agent: {name}")
        deleted += 1

    return deleted, failed


async def main(confirm: Callable[[str], str] = input) -> None:
    configure_logging(logging.WARNING)
    settings = FoundrySettings.from_env()

    print("\n" + "=" * 60)
    print("  MICROSOFT FOUNDRY CLEANUP SCRIPT")
    print("=" * 60)

    try:
        endpoint = settings.require_project_endpoint()
    except ConfigurationError as e:
        print(f"\nError: {e}")
        return

    print(f"\nProject Endpoint: {endpoint}")
    print("\nThis script will delete ALL agents in your Microsoft Foundry project.")
    print("This action cannot be undone!")

    if read_line(f"\nType '{CONFIRMATION}' to confirm cleanup: ", confirm) != CONFIRMATION:
        print("\nCleanup cancelled.")
        return

    async with (
        create_credential(settings) as credential,
        AIProjectClient(endpoint=endpoint, credential=credential) as project_client,
    ):
        deleted, failed = await cleanup_agents(project_client)

    print("\n" + "=" * 50)
    print("CLEANUP SUMMARY")
    print("=" * 50)
    print(f"\n  Agents deleted: {deleted} (failed: {failed})")
    print("\n" + "=" * 50 + "\n")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
