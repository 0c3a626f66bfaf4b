# Copyright (c) Microsoft. All rights reserved.

from .approval_loop import (
    ApprovalEvent,
    ApprovalLoop,
    ApprovalLoopError,
    ApprovalLoopExceededError,
    ApprovalPhase,
    ApprovalPolicyError,
    TurnCancelledError,
    TurnResult,
    run_turn,
)
from .config import ConfigurationError, FoundrySettings, PolicyFailureMode, create_credential
from .models import (
    ApprovalDecision,
    ConversationRequest,
    ConversationResponse,
    InputMessage,
    McpToolDescriptor,
    TextOutput,
    ToolApprovalRequest,
    ToolCallOutput,
)
from .policies import AlwaysApprove, ApprovalPolicy, ConsolePrompt, ToolAllowList
from .responses_client import FoundryResponsesClient, ResponseClient

__all__ = [
    "AlwaysApprove",
    "ApprovalDecision",
    "ApprovalEvent",
    "ApprovalLoop",
    "ApprovalLoopError",
    "ApprovalLoopExceededError",
    "ApprovalPhase",
    "ApprovalPolicy",
    "ApprovalPolicyError",
    "ConfigurationError",
    "ConsolePrompt",
    "ConversationRequest",
    "ConversationResponse",
    "FoundryResponsesClient",
    "FoundrySettings",
    "InputMessage",
    "McpToolDescriptor",
    "PolicyFailureMode",
    "ResponseClient",
    "TextOutput",
    "ToolAllowList",
    "ToolApprovalRequest",
    "ToolCallOutput",
    "TurnCancelledError",
    "TurnResult",
    "create_credential",
    "run_turn",
]
