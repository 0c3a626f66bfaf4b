# Copyright (c) Microsoft. All rights reserved.

import logging
import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .config import DEFAULT_HISTORY_LIMIT
from .models import ConversationRequest, InputMessage, McpToolDescriptor

"""
In-memory chat sessions for the interactive labs.
"""

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ChatMessage(BaseModel):
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"] = "user"
    content: str = ""
    agent_name: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)


class ConversationSession(BaseModel):
    id: str = Field(default_factory=_new_id)
    current_agent_name: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    last_activity_at: datetime = Field(default_factory=_now)
    messages: list[ChatMessage] = Field(default_factory=list)


class ConversationStore:
    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}

    def create_session(self) -> str:
        session = ConversationSession()
        self._sessions[session.id] = session
        logger.info("Created session: %s", session.id)
        return session.id

    def get_session(self, session_id: str) -> Optional[ConversationSession]:
        return self._sessions.get(session_id)

    def add_message(self, session_id: str, message: ChatMessage) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            session = ConversationSession(id=session_id)
            self._sessions[session_id] = session
            logger.info("Created new session %s and added message", session_id)
        session.messages.append(message)
        session.last_activity_at = _now()
        if message.agent_name:
            session.current_agent_name = message.agent_name
        logger.debug("Added message to session %s: %s", session_id, message.role)

    def messages(self, session_id: str) -> list[ChatMessage]:
        session = self._sessions.get(session_id)
        return list(session.messages) if session else []

    def clear(self, session_id: str) -> None:
        session = self._sessions.get(session_id)
        if session is not None:
            session.messages.clear()
            session.last_activity_at = _now()
            logger.info("Cleared session: %s", session_id)

    def build_request(
        self,
        session_id: str,
        prompt: str,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        instructions: Optional[str] = None,
        tools: Optional[list[McpToolDescriptor]] = None,
    ) -> ConversationRequest:
        """Request for ``prompt`` preceded by at most ``history_limit`` earlier messages."""
        recent = self.messages(session_id)[-history_limit:] if history_limit > 0 else []
        history = [InputMessage(role=m.role, content=m.content) for m in recent]
        return ConversationRequest.from_prompt(
            prompt, history=history, instructions=instructions, tools=tools
        )
