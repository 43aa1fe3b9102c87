"""
HTTP client for the text-generation backend (an n8n-style webhook).

Requests are validated and sanitised before they leave the process; every
failure surfaces as a TransportError subclass carrying a user-safe sentence.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

import config
from error_handler import (
    BackendHTTPError,
    RequestTimeoutError,
    ResponseFormatError,
    TransportError,
)
from validation import (
    sanitize_history,
    sanitize_string,
    validate_conversation_id,
    validate_history,
    validate_message,
)

logger = logging.getLogger('chart_assistant.chat_api')

# Raw server bodies are logged truncated and never shown to the user
MAX_LOGGED_BODY = 200


@dataclass
class WebhookRequest:
    conversation_id: str
    message: str
    history: List[Dict[str, str]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'conversationId': self.conversation_id,
            'message': self.message,
            'history': [{'role': entry['role'], 'content': entry['content']} for entry in self.history],
        }


@dataclass
class WebhookResponse:
    output: str
    chart_payload: Optional[Any] = None


class ChatApiClient:
    """Sends one conversation turn to the backend and returns its reply."""

    def __init__(
        self,
        url: str = config.webhook_url,
        timeout_seconds: float = config.request_timeout_seconds,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session = session

    def _prepare(self, request: WebhookRequest) -> WebhookRequest:
        validate_conversation_id(request.conversation_id)
        validate_message(request.message)
        validate_history(request.history)

        return WebhookRequest(
            conversation_id=sanitize_string(request.conversation_id),
            message=sanitize_string(request.message),
            history=sanitize_history(request.history),
        )

    async def send(self, request: WebhookRequest) -> WebhookResponse:
        """
        POST the request and parse the reply.

        Args:
            request: Conversation id, message and history

        Returns:
            WebhookResponse: Sanitised output text and the raw chart payload, if any

        Raises:
            InputValidationError: The request was rejected before any network call
            RequestTimeoutError: The backend did not answer within the timeout
            BackendHTTPError: Non-2xx status
            ResponseFormatError: The body is not the expected array shape
            TransportError: Any other connection failure
        """
        payload = self._prepare(request).to_payload()

        try:
            if self._session is not None:
                return await self._post(self._session, payload)
            async with aiohttp.ClientSession() as session:
                return await self._post(session, payload)
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(detail=f"No response after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(config.ERROR_MESSAGES['connection_error'], detail=str(e)) from e

    async def _post(self, session: aiohttp.ClientSession, payload: Dict[str, Any]) -> WebhookResponse:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with session.post(self.url, json=payload, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                body = await response.text()
                logger.warning(f"Backend returned HTTP {response.status}: {body[:MAX_LOGGED_BODY]}")
                raise BackendHTTPError(response.status, detail=body[:MAX_LOGGED_BODY])

            try:
                data = await response.json(content_type=None)
            except ValueError as e:
                raise ResponseFormatError(config.ERROR_MESSAGES['invalid_response_format'], detail=str(e)) from e

        return self._parse(data)

    @staticmethod
    def _parse(data: Any) -> WebhookResponse:
        if not isinstance(data, list) or not data:
            raise ResponseFormatError(
                config.ERROR_MESSAGES['invalid_response_format'],
                detail=f"Expected non-empty array, got {type(data).__name__}",
            )

        first = data[0]
        output = first.get('output') if isinstance(first, dict) else None
        if not output or not isinstance(output, str):
            raise ResponseFormatError(config.ERROR_MESSAGES['invalid_response_output'])

        chart_payload = first.get('chartData')
        logger.debug(f"Webhook response: chartData={'yes' if chart_payload is not None else 'no'}, output={output[:MAX_LOGGED_BODY]!r}")

        return WebhookResponse(output=sanitize_string(output), chart_payload=chart_payload)
