"""
Chart data utilities: locale-aware number parsing, structural validation of
candidate chart payloads, chart kind availability and chart intent detection.
"""

import logging
import math
import re
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple

from chart_policy import ChartPolicy, DEFAULT_POLICY
from chart_types import ChartKind, ChartSpec, Dataset, YKey, as_key_list

logger = logging.getLogger('chart_assistant.chart_utils')


class ChartDataValidator:
    """Utility class for validating and normalizing chart data."""

    @staticmethod
    def _clean_numeric_string(value: str, policy: ChartPolicy) -> str:
        """Remove currency markers, whitespace and grouping separators; canonicalise the decimal point."""
        clean_str = value.strip()
        for marker in policy.currency_markers:
            clean_str = clean_str.replace(marker, '')
        clean_str = ''.join(clean_str.split())
        clean_str = clean_str.replace(policy.grouping_separator, '')
        return clean_str.replace(policy.decimal_separator, '.')

    @staticmethod
    def parse_locale_number(token: Any, policy: ChartPolicy = DEFAULT_POLICY) -> float:
        """
        Convert a locale-formatted literal such as "R$ 252.951,59" to a float.

        Best effort: anything that does not parse becomes 0.0.

        Args:
            token: The raw token (usually a string)
            policy: Supplies currency markers and separators

        Returns:
            float: The parsed value, or 0.0
        """
        if isinstance(token, bool) or token is None:
            return 0.0
        if isinstance(token, (int, float)):
            return float(token)
        if not isinstance(token, str):
            return 0.0

        numeric_str = ChartDataValidator._clean_numeric_string(token, policy)
        try:
            value = float(numeric_str)
        except ValueError:
            return 0.0
        # float() accepts 'nan' and 'inf'; neither is chartable
        return value if math.isfinite(value) else 0.0

    @staticmethod
    def _resolve_y_keys(y_key: Any, rows: Dataset) -> Optional[YKey]:
        """Keep the y keys present in some row; None if none is in the first row."""
        if isinstance(y_key, str):
            return y_key if y_key in rows[0] else None

        if not isinstance(y_key, (list, tuple)) or not y_key:
            return None
        if not all(isinstance(key, str) for key in y_key):
            return None
        if not any(key in rows[0] for key in y_key):
            return None
        return [key for key in y_key if any(key in row for row in rows)]

    @staticmethod
    def validate_chart_data(candidate: Any) -> Optional[ChartSpec]:
        """
        Enforce the structural contract of a candidate chart payload.

        The candidate uses the wire shape (type, data, xKey, yKey, optional
        title and labels). Any violation returns None; nothing is raised.
        """
        if not isinstance(candidate, Mapping):
            return None

        kind = ChartKind.parse(candidate.get('type'))
        if kind is None:
            return None

        rows = candidate.get('data')
        if not isinstance(rows, list) or not rows:
            return None
        if not all(isinstance(row, Mapping) for row in rows):
            return None
        rows = [dict(row) for row in rows]

        x_key = candidate.get('xKey')
        if not isinstance(x_key, str) or x_key not in rows[0]:
            return None

        y_key = ChartDataValidator._resolve_y_keys(candidate.get('yKey'), rows)
        if y_key is None:
            return None

        title = candidate.get('title')
        labels = candidate.get('labels')
        if not (isinstance(labels, Mapping)
                and all(isinstance(k, str) and isinstance(v, str) for k, v in labels.items())):
            labels = None

        return ChartSpec(
            kind=kind,
            dataset=rows,
            x_key=x_key,
            y_key=y_key,
            title=title if isinstance(title, str) else None,
            label_map=dict(labels) if labels is not None else None,
        )


def parse_locale_number(token: Any, policy: ChartPolicy = DEFAULT_POLICY) -> float:
    """Convenience wrapper around ChartDataValidator.parse_locale_number."""
    return ChartDataValidator.parse_locale_number(token, policy)


def validate_chart_data(candidate: Any) -> Optional[ChartSpec]:
    """Convenience wrapper around ChartDataValidator.validate_chart_data."""
    return ChartDataValidator.validate_chart_data(candidate)


def is_chart_request(message: Optional[str], policy: ChartPolicy = DEFAULT_POLICY) -> bool:
    """
    Detect whether the user explicitly asked for a chart.

    Plain substring matching; recall is preferred over precision because a
    miss only downgrades the presentation to a suggestion.
    """
    if not message:
        return False
    lower_message = message.lower()
    return any(keyword in lower_message for keyword in policy.intent_keywords)


def _has_resolvable_axes(data: Dataset, x_key: str, y_key: YKey) -> Tuple[bool, List[str]]:
    if not data or not isinstance(data, list) or not isinstance(data[0], Mapping):
        return False, []
    y_keys = as_key_list(y_key)
    first_item = data[0]
    if x_key not in first_item:
        return False, y_keys
    return any(key in first_item for key in y_keys), y_keys


def get_available_chart_types(
    data: Dataset,
    x_key: str,
    y_key: YKey,
    policy: ChartPolicy = DEFAULT_POLICY,
) -> List[ChartKind]:
    """
    Determine which chart kinds can represent the given data.

    Bar, line and area are always legal once the axes resolve; pie only for a
    single series of at most ``policy.pie_max_rows`` rows.
    """
    valid, y_keys = _has_resolvable_axes(data, x_key, y_key)
    if not valid:
        return []

    available_kinds = [ChartKind.BAR, ChartKind.LINE, ChartKind.AREA]
    if len(data) <= policy.pie_max_rows and len(y_keys) == 1:
        available_kinds.append(ChartKind.PIE)
    return available_kinds


def can_visualize_as_chart(
    data: Dataset,
    x_key: str,
    y_key: YKey,
    policy: ChartPolicy = DEFAULT_POLICY,
) -> bool:
    """Check whether the data can be drawn as any chart at all."""
    return len(get_available_chart_types(data, x_key, y_key, policy)) > 0


def infer_chart_type(data: Dataset, x_key: str, policy: ChartPolicy = DEFAULT_POLICY) -> ChartKind:
    """Pick a default chart kind when the user gets no choice."""
    if len(data) <= policy.pie_inference_max_rows:
        return ChartKind.PIE

    first_x = data[0].get(x_key) if data else None
    if isinstance(first_x, str) and ('/' in first_x or '-' in first_x or re.match(r'\d{4}', first_x)):
        return ChartKind.LINE

    return ChartKind.BAR
