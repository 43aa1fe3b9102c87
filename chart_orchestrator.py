"""
Turns a backend reply into the content and chart presentation of a bot turn.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from chart_extractors import extract_from_json, run_extraction_cascade
from chart_policy import ChartPolicy, DEFAULT_POLICY
from chart_types import (
    ChartOptions,
    NoChart,
    OptionsOffered,
    Presentation,
    Rendered,
    Suggested,
)
from chart_utils import get_available_chart_types, infer_chart_type, is_chart_request, validate_chart_data
from code_cleaner import clean_output_from_code

logger = logging.getLogger('chart_assistant.chart_orchestrator')

PAYLOAD_SOURCE = 'payload'
JSON_SOURCE = 'json'


@dataclass(frozen=True)
class BotReply:
    """Content and presentation for a new bot message."""
    content: str
    presentation: Presentation
    source: Optional[str] = None


def build_bot_reply(
    response_text: str,
    user_message: Optional[str],
    structured_payload: Optional[Any] = None,
    policy: ChartPolicy = DEFAULT_POLICY,
) -> BotReply:
    """
    Decide how a backend reply is presented.

    An explicit structured payload always wins over anything parsed from the
    text. The intent of the user message then chooses between offering chart
    kinds and quietly suggesting a chart.

    Args:
        response_text: The ``output`` text returned by the backend
        user_message: The user turn that triggered the reply
        structured_payload: Optional pre-structured chart data from the backend
        policy: Locale heuristics

    Returns:
        BotReply: Content (code-stripped when a chart is attached) and presentation
    """
    text = response_text or ''
    user_requested_chart = is_chart_request(user_message, policy)

    candidate = None
    source = None

    if structured_payload is not None:
        candidate = validate_chart_data(structured_payload)
        if candidate is not None:
            source = PAYLOAD_SOURCE
        else:
            logger.debug("Structured chart payload rejected by shape validation")

    if candidate is None:
        candidate = extract_from_json(text, policy)
        if candidate is not None:
            source = JSON_SOURCE

    if candidate is None:
        candidate, source = run_extraction_cascade(
            text, user_requested_chart, policy, skip=(JSON_SOURCE,)
        )

    if candidate is None:
        return BotReply(content=text, presentation=NoChart())

    available_kinds = get_available_chart_types(candidate.dataset, candidate.x_key, candidate.y_key, policy)
    logger.debug(
        f"Chart candidate from '{source}': {len(candidate.dataset)} rows, "
        f"intent={user_requested_chart}, kinds={[kind.value for kind in available_kinds]}"
    )

    if user_requested_chart:
        if available_kinds:
            presentation = OptionsOffered(ChartOptions.from_spec(candidate, available_kinds))
        else:
            default_kind = infer_chart_type(candidate.dataset, candidate.x_key, policy)
            presentation = Rendered(spec=ChartOptions.from_spec(candidate, []).to_spec(default_kind))
    elif available_kinds:
        presentation = Suggested(ChartOptions.from_spec(candidate, available_kinds))
    else:
        return BotReply(content=text, presentation=NoChart(), source=source)

    return BotReply(content=clean_output_from_code(text), presentation=presentation, source=source)
