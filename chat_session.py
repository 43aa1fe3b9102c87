"""
Chat session: owns the message list, the pending flag and request admission.

All state changes happen in the session's own coroutine, one action at a time,
so the orchestrator and state machine never see a half-updated message.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Union

import config
from chart_orchestrator import build_bot_reply
from chart_policy import ChartPolicy, DEFAULT_POLICY
from chart_state import select_chart_kind, visualize
from chart_types import ChartKind, Message
from chat_api import ChatApiClient, WebhookRequest
from conversation_store import ConversationStore
from error_handler import (
    ChatAssistantError,
    ErrorSeverity,
    InputValidationError,
    RateLimitExceededError,
    log_error_with_context,
)
from rate_limiter import FixedWindowRateLimiter
from validation import validate_message

logger = logging.getLogger('chart_assistant.chat_session')

ERROR_PREFIX = "❌ "


class ChatSession:
    """A single conversation with the backend."""

    def __init__(
        self,
        api_client: ChatApiClient,
        store: ConversationStore,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        policy: ChartPolicy = DEFAULT_POLICY,
        timeout_seconds: float = config.request_timeout_seconds,
        max_history_length: int = config.max_history_length,
    ):
        self.api_client = api_client
        self.store = store
        self.rate_limiter = rate_limiter or FixedWindowRateLimiter()
        self.policy = policy
        self.timeout_seconds = timeout_seconds
        self.max_history_length = max_history_length

        self.conversation_id = store.get_or_create_conversation_id()
        self.messages: List[Message] = []
        self.is_pending = False
        self.last_error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def _append_error(self, user_message: str) -> Message:
        self.last_error = user_message
        message = Message(role='bot', content=f"{ERROR_PREFIX}{user_message}")
        self.messages.append(message)
        return message

    def _history(self):
        """Most recent non-empty turns, each capped to the message length limit."""
        turns = [
            {'role': message.role, 'content': message.content[:config.max_message_length]}
            for message in self.messages
            if message.content.strip()
        ]
        return turns[-self.max_history_length:]

    async def send_message(self, content: str) -> Optional[Message]:
        """
        Send a user message and append the bot's reply.

        Returns:
            The appended bot message (a chart turn or an error turn), or None
            when the session is busy with a previous request.
        """
        if self.is_pending:
            logger.info(f"Message rejected: a request is already pending for conversation {self.conversation_id}")
            return None

        try:
            validate_message(content)
            self.rate_limiter.enforce(self.conversation_id)
        except (InputValidationError, RateLimitExceededError) as e:
            log_error_with_context(e, "Admitting user message", ErrorSeverity.LOW)
            return self._append_error(e.user_message)

        self.messages.append(Message(role='user', content=content))
        self.is_pending = True
        self.last_error = None

        request = WebhookRequest(
            conversation_id=self.conversation_id,
            message=content,
            history=self._history(),
        )

        try:
            response = await asyncio.wait_for(self.api_client.send(request), timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            self._append_error(config.ERROR_MESSAGES['cancelled'])
            logger.info(f"Request cancelled for conversation {self.conversation_id}")
            raise
        except asyncio.TimeoutError as e:
            log_error_with_context(e, "Waiting for backend response", ErrorSeverity.MEDIUM)
            return self._append_error(config.ERROR_MESSAGES['timeout'])
        except ChatAssistantError as e:
            log_error_with_context(e, "Sending message to backend", ErrorSeverity.MEDIUM)
            return self._append_error(e.user_message)
        except Exception as e:
            log_error_with_context(e, "Sending message to backend", ErrorSeverity.HIGH)
            return self._append_error(config.ERROR_MESSAGES['unknown_error'])
        finally:
            self.is_pending = False

        reply = build_bot_reply(response.output, content, response.chart_payload, self.policy)
        bot_message = Message(role='bot', content=reply.content, presentation=reply.presentation)
        self.messages.append(bot_message)
        return bot_message

    # -------------------------------------------------------------------------
    # Chart actions
    # -------------------------------------------------------------------------

    def get_message(self, message_id: str) -> Optional[Message]:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    def _apply(self, message_id: str, transition: Callable[[Message], Message]) -> Optional[Message]:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                updated = transition(message)
                self.messages[index] = updated
                return updated
        logger.debug(f"No message with id {message_id}")
        return None

    def visualize(self, message_id: str) -> Optional[Message]:
        """Turn a suggested chart into a choice of kinds."""
        return self._apply(message_id, visualize)

    def select_chart_kind(self, message_id: str, kind: Union[ChartKind, str]) -> Optional[Message]:
        return self._apply(message_id, lambda message: select_chart_kind(message, kind))

    # -------------------------------------------------------------------------
    # Conversation lifecycle
    # -------------------------------------------------------------------------

    def clear(self) -> bool:
        """Drop every message. Ignored while a request is pending."""
        if self.is_pending:
            logger.info("Clear ignored while a request is pending")
            return False
        self.messages = []
        self.last_error = None
        return True

    def reset_conversation(self) -> bool:
        """Clear the transcript and start a new conversation id."""
        if not self.clear():
            return False
        self.rate_limiter.clear(self.conversation_id)
        self.store.clear_conversation_id()
        self.conversation_id = self.store.get_or_create_conversation_id()
        return True
