"""Shared fixtures for the chart assistant test suite."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from chat_api import WebhookResponse
from chat_session import ChatSession
from conversation_store import ConversationStore
from rate_limiter import FixedWindowRateLimiter

VALID_CONVERSATION_ID = '123e4567-e89b-42d3-a456-426614174000'

SALES_LIST_RESPONSE = (
    "Vendas por mês:\n"
    "- Junho: R$ 100.000,00\n"
    "- Julho: R$ 150.000,00\n"
    "- Agosto: R$ 200.000,00"
)

IMPRESSIONS_LIST_RESPONSE = (
    "Impressões por canal:\n"
    "- Google: 1.200\n"
    "- Meta: 800"
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return ConversationStore(str(tmp_path / 'chat_state.db'))


@pytest.fixture
def api_client():
    client = MagicMock()
    client.url = 'https://example.com/webhook'
    client.send = AsyncMock(return_value=WebhookResponse(output="Olá!", chart_payload=None))
    return client


@pytest.fixture
def session(api_client, store, clock):
    return ChatSession(
        api_client=api_client,
        store=store,
        rate_limiter=FixedWindowRateLimiter(max_requests=10, window_seconds=60, clock=clock),
    )


def make_aiohttp_session(status=200, json_data=None, text='', json_side_effect=None, post_side_effect=None):
    """Mock aiohttp.ClientSession whose post() is an async context manager."""
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=json_data, side_effect=json_side_effect)
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = MagicMock()
    mock_session.post = MagicMock(return_value=mock_response, side_effect=post_side_effect)
    return mock_session
