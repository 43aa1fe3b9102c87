"""
Per-message chart presentation transitions.

    none -> suggested -> options -> rendered <-> rendered (kind change)

Every transition returns a new Message; an action that does not apply to the
message's current state returns the message unchanged.
"""

import dataclasses
import logging
from typing import Union

from chart_types import ChartKind, Message, OptionsOffered, Rendered, Suggested

logger = logging.getLogger('chart_assistant.chart_state')

STATE_NONE = 'none'
STATE_SUGGESTED = 'suggested'
STATE_OPTIONS = 'options'
STATE_RENDERED = 'rendered'

ACTION_VISUALIZE = 'visualize'
ACTION_SELECT_KIND = 'select_kind'


def presentation_state(message: Message) -> str:
    """Short state name for UI and logging."""
    presentation = message.presentation
    if isinstance(presentation, Suggested):
        return STATE_SUGGESTED
    if isinstance(presentation, OptionsOffered):
        return STATE_OPTIONS
    if isinstance(presentation, Rendered):
        return STATE_RENDERED
    return STATE_NONE


def can_transition(message: Message, action: str) -> bool:
    """Whether the UI should offer ``action`` for this message."""
    if action == ACTION_VISUALIZE:
        return isinstance(message.presentation, Suggested)
    if action == ACTION_SELECT_KIND:
        return message.chart_options is not None and bool(message.chart_options.available_kinds)
    return False


def visualize(message: Message) -> Message:
    """Accept a suggestion: its data becomes a choice of chart kinds."""
    if not isinstance(message.presentation, Suggested):
        logger.debug(f"Visualize ignored for message {message.id} in state '{presentation_state(message)}'")
        return message
    return dataclasses.replace(message, presentation=OptionsOffered(message.presentation.suggestion))


def select_chart_kind(message: Message, kind: Union[ChartKind, str]) -> Message:
    """
    Render the message's options with the chosen kind.

    Options are kept alongside the rendered spec so the kind can change later.
    A kind that is not offered, or a message without options, is a no-op.
    """
    options = message.chart_options
    chosen = ChartKind.parse(kind)

    if options is None or chosen is None or chosen not in options.available_kinds:
        logger.debug(f"Chart kind '{kind}' not selectable for message {message.id}")
        return message

    rendered = Rendered(spec=options.to_spec(chosen), options=options)
    if rendered == message.presentation:
        return message
    return dataclasses.replace(message, presentation=rendered)
