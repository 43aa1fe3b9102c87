"""
Input validation and sanitisation applied before any request leaves the session.

Validators raise InputValidationError carrying a user-facing sentence from
config.ERROR_MESSAGES.
"""

import re
from typing import Any, Dict, List

import config
from error_handler import InputValidationError

UUID_PATTERN = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)

# Control characters except \n and \r
CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x09\x0b\x0c\x0e-\x1f\x7f]')

VALID_ROLES = ('user', 'bot')


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def sanitize_string(value: Any) -> str:
    """Remove control characters (keeping line breaks) and trim."""
    if not isinstance(value, str):
        return ''
    return CONTROL_CHARS_PATTERN.sub('', value).strip()


def validate_message(message: Any, max_length: int = None) -> None:
    """Reject non-string, blank or oversized messages."""
    max_length = config.max_message_length if max_length is None else max_length

    if not message or not isinstance(message, str):
        raise InputValidationError(config.ERROR_MESSAGES['invalid_message'])
    if not message.strip():
        raise InputValidationError(config.ERROR_MESSAGES['empty_message'])
    if len(message) > max_length:
        raise InputValidationError(
            config.ERROR_MESSAGES['message_too_long'].format(max_length=max_length),
            detail=f"message length {len(message)}",
        )


def validate_conversation_id(conversation_id: Any) -> None:
    """Conversation ids must be short UUID strings."""
    if not conversation_id or not isinstance(conversation_id, str):
        raise InputValidationError(config.ERROR_MESSAGES['invalid_conversation_id'])
    if len(conversation_id) > config.max_conversation_id_length:
        raise InputValidationError(config.ERROR_MESSAGES['conversation_id_too_long'])
    if not is_valid_uuid(conversation_id):
        raise InputValidationError(
            config.ERROR_MESSAGES['conversation_id_format'],
            detail=f"conversation id {conversation_id[:40]!r}",
        )


def validate_history(history: Any, max_length: int = None) -> None:
    """
    Check the history sent alongside a message.

    Args:
        history: List of ``{'role': ..., 'content': ...}`` entries
        max_length: Maximum number of entries (defaults to config)

    Raises:
        InputValidationError: On the first invalid entry
    """
    max_length = config.max_history_length if max_length is None else max_length

    if not isinstance(history, list):
        raise InputValidationError(config.ERROR_MESSAGES['history_not_list'])
    if len(history) > max_length:
        raise InputValidationError(
            config.ERROR_MESSAGES['history_too_long'].format(max_length=max_length)
        )

    for entry in history:
        if not isinstance(entry, dict) or entry.get('role') not in VALID_ROLES:
            raise InputValidationError(config.ERROR_MESSAGES['history_invalid_role'])
        validate_message(entry.get('content'))


def sanitize_history(history: List[Dict[str, str]]) -> List[Dict[str, str]]:
    return [{'role': entry['role'], 'content': sanitize_string(entry['content'])} for entry in history]
