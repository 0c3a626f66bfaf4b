# Copyright (c) Microsoft. All rights reserved.

import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from azure.identity.aio import DefaultAzureCredential, ManagedIdentityCredential
from dotenv import load_dotenv
from pydantic import BaseModel, Field

"""
Lab configuration.

Settings come from the process environment, optionally seeded from a .env file.
They are resolved once at startup and passed explicitly to whatever needs them.
"""

DEFAULT_GITHUB_MCP_SERVER_URL = "https://api.githubcopilot.com/mcp"
DEFAULT_MSLEARN_MCP_SERVER_URL = "https://learn.microsoft.com/api/mcp"
DEFAULT_FOUNDRY_IQ_AGENT_NAME = "FoundryIQAgent"
DEFAULT_MAX_APPROVAL_ROUNDS = 25
DEFAULT_HISTORY_LIMIT = 20
DEFAULT_SKILLS_BASE_URL = "http://localhost:7071"
DEFAULT_SKILLS_NORMALIZE_PATH = "/api/normalize-text"

PROJECT_ENDPOINT_VARS = ("AZURE_AI_PROJECT_ENDPOINT", "PROJECT_ENDPOINT", "AZURE_AI_PROJECT")
MODEL_DEPLOYMENT_VARS = ("AZURE_AI_MODEL_DEPLOYMENT_NAME", "MODEL_DEPLOYMENT_NAME")

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigurationError(RuntimeError):
    """A required setting is missing or invalid."""


class PolicyFailureMode(str, Enum):
    """What the approval loop does when an approval policy raises."""

    DENY = "deny"
    ABORT = "abort"


def _first_env(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


def _int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = _first_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if not minimum <= value <= maximum:
        raise ConfigurationError(f"{name} must be between {minimum} and {maximum}, got {value}")
    return value


class FoundrySettings(BaseModel):
    project_endpoint: Optional[str] = None
    model_deployment_name: Optional[str] = None
    github_mcp_server_url: str = DEFAULT_GITHUB_MCP_SERVER_URL
    mslearn_mcp_server_url: str = DEFAULT_MSLEARN_MCP_SERVER_URL
    foundry_iq_agent_name: str = DEFAULT_FOUNDRY_IQ_AGENT_NAME
    skills_base_url: str = DEFAULT_SKILLS_BASE_URL
    skills_normalize_path: str = DEFAULT_SKILLS_NORMALIZE_PATH
    max_approval_rounds: int = Field(default=DEFAULT_MAX_APPROVAL_ROUNDS, ge=1)
    policy_failure: PolicyFailureMode = PolicyFailureMode.DENY
    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=0)
    use_managed_identity: bool = False
    enable_tracing: bool = False

    @classmethod
    def from_env(cls, env_path: Optional[Union[str, Path]] = None) -> "FoundrySettings":
        """Build settings from environment variables.

        If ``env_path`` is given (or a .env exists in the working directory) it is
        loaded first; variables already set in the environment take precedence.
        """
        if env_path is not None:
            load_dotenv(env_path)
        else:
            load_dotenv()

        policy_raw = (_first_env("APPROVAL_POLICY_FAILURE") or PolicyFailureMode.DENY.value).lower()
        try:
            policy_failure = PolicyFailureMode(policy_raw)
        except ValueError as e:
            raise ConfigurationError(
                f"APPROVAL_POLICY_FAILURE must be 'deny' or 'abort', got {policy_raw!r}"
            ) from e

        return cls(
            project_endpoint=_first_env(*PROJECT_ENDPOINT_VARS),
            model_deployment_name=_first_env(*MODEL_DEPLOYMENT_VARS),
            github_mcp_server_url=_first_env("GITHUB_MCP_SERVER_URL") or DEFAULT_GITHUB_MCP_SERVER_URL,
            mslearn_mcp_server_url=_first_env("MSLEARN_MCP_SERVER_URL") or DEFAULT_MSLEARN_MCP_SERVER_URL,
            foundry_iq_agent_name=_first_env("FOUNDRY_IQ_AGENT_NAME") or DEFAULT_FOUNDRY_IQ_AGENT_NAME,
            skills_base_url=_first_env("SKILLS_BASE_URL") or DEFAULT_SKILLS_BASE_URL,
            skills_normalize_path=_first_env("SKILLS_NORMALIZE_PATH") or DEFAULT_SKILLS_NORMALIZE_PATH,
            max_approval_rounds=_int_env("APPROVAL_MAX_ROUNDS", DEFAULT_MAX_APPROVAL_ROUNDS, 1, 1000),
            policy_failure=policy_failure,
            history_limit=_int_env("CHAT_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT, 0, 1000),
            use_managed_identity=bool(_first_env("MSI_ENDPOINT")),
            enable_tracing=(_first_env("ENABLE_TRACING") or "").lower() in _TRUE_VALUES,
        )

    def require_project_endpoint(self) -> str:
        if not self.project_endpoint:
            raise ConfigurationError(
                "Project endpoint is required. Set one of: " + ", ".join(PROJECT_ENDPOINT_VARS)
            )
        return self.project_endpoint

    def require_model(self) -> str:
        if not self.model_deployment_name:
            raise ConfigurationError(
                "Model deployment name is required. Set one of: " + ", ".join(MODEL_DEPLOYMENT_VARS)
            )
        return self.model_deployment_name


def create_credential(settings: FoundrySettings) -> Union[ManagedIdentityCredential, DefaultAzureCredential]:
    """Managed identity when running under MSI, the developer credential chain otherwise."""
    if settings.use_managed_identity:
        return ManagedIdentityCredential()
    return DefaultAzureCredential()
