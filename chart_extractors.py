"""
Candidate extractors that turn free text into chart data.

Each strategy is a pure function ``(text, policy) -> Optional[ChartSpec]``.
They are tried in the fixed order of EXTRACTION_STRATEGIES and the first one
that yields a shape-valid chart wins. A strategy never raises for bad input;
a malformed fragment is simply a non-match.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

from chart_policy import ChartPolicy, DEFAULT_POLICY
from chart_types import ChartKind, ChartSpec
from chart_utils import parse_locale_number, validate_chart_data
from code_cleaner import remove_fenced_code_blocks
from error_handler import ErrorSeverity, safe_execute

logger = logging.getLogger('chart_assistant.chart_extractors')

FENCED_CONTENT_PATTERN = re.compile(r"```[\w+-]*[ \t]*\n?([\s\S]*?)```")

# Upper bound on failed raw_decode attempts over a single response
MAX_INLINE_JSON_FAILURES = 50

MIN_SERIES_POINTS = 2

LABEL_ARRAY_PATTERN = re.compile(
    r"\b(?:meses|mes|periodos|periodo|labels|label|months|month)\s*=\s*\[([^\]]+)\]",
    re.IGNORECASE,
)
VALUE_ARRAY_PATTERN = re.compile(
    r"\b(?:investimentos|investimento|valores|valor|dados|data|impressoes|impressões|cpm|values|value)"
    r"\s*=\s*\[([^\]]+)\]",
    re.IGNORECASE,
)

TITLE_PHRASE_PATTERN = re.compile(
    r"(?:aqui está|here is|gráfico|grafico|chart)\s+(?:com|de|do|da|dos|das|of|with)\s+([^:.\n]+)",
    re.IGNORECASE,
)
TITLE_HEADING_PATTERN = re.compile(r"^\s*([^:.\n\-•*|#][^:.\n]*?)\s*:\s*(?:[-•]|$)", re.MULTILINE)
MAX_TITLE_LENGTH = 80


# =============================================================================
# JSON
# =============================================================================

def _chart_payload(parsed: Any) -> Optional[Any]:
    """Pick the chart-shaped object out of a parsed JSON value."""
    if not isinstance(parsed, dict):
        return None
    if 'chartData' in parsed:
        return parsed['chartData']
    if all(key in parsed for key in ('type', 'data', 'xKey', 'yKey')):
        return parsed
    return None


def _spec_from_json_value(parsed: Any) -> Optional[ChartSpec]:
    payload = _chart_payload(parsed)
    if payload is None:
        return None
    return validate_chart_data(payload)


def _fenced_candidates(text: str) -> Iterable[str]:
    for match in FENCED_CONTENT_PATTERN.finditer(text):
        yield match.group(1)


def _may_hold_chart(fragment: str) -> bool:
    return '"chartData"' in fragment or '"type"' in fragment


def _inline_json_candidates(text: str) -> Iterable[Any]:
    """
    Decode the JSON objects embedded in free text, left to right.

    A decoded object whose text cannot hold a chart is skipped as a whole;
    only failed decodes count towards MAX_INLINE_JSON_FAILURES.
    """
    if not _may_hold_chart(text):
        return
    decoder = json.JSONDecoder()
    failures = 0
    start = text.find('{')
    while start != -1:
        try:
            parsed, end = decoder.raw_decode(text, start)
        except (ValueError, RecursionError):
            failures += 1
            if failures >= MAX_INLINE_JSON_FAILURES:
                logger.debug(f"Inline JSON scan stopped after {failures} failed decodes")
                return
            start = text.find('{', start + 1)
            continue

        yield parsed
        # Nested objects of a non-chart wrapper may still be the chart
        next_start = start + 1 if _may_hold_chart(text[start + 1:end]) else end
        start = text.find('{', next_start)


def extract_from_json(text: str, policy: ChartPolicy = DEFAULT_POLICY) -> Optional[ChartSpec]:
    """
    Find a chart payload written as JSON in the response.

    Tries fenced code blocks, then inline objects, then the whole text.
    """
    if not text:
        return None

    for block in _fenced_candidates(text):
        try:
            parsed = json.loads(block)
        except (ValueError, RecursionError):
            continue
        spec = _spec_from_json_value(parsed)
        if spec is not None:
            return spec

    for parsed in _inline_json_candidates(text):
        spec = _spec_from_json_value(parsed)
        if spec is not None:
            return spec

    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return _spec_from_json_value(parsed)


# =============================================================================
# Labelled series helpers
# =============================================================================

def _clean_label(label: str) -> str:
    return label.strip().strip('*_').strip()


def _build_series_spec(
    labels: List[str],
    values: List[float],
    temporal: bool,
    title: Optional[str],
    policy: ChartPolicy,
) -> ChartSpec:
    """Two-field dataset: label axis (period or item) and the value axis."""
    is_line = temporal and len(labels) >= policy.min_temporal_points
    x_field = policy.temporal_key if is_line else policy.categorical_key
    value_field = policy.value_key

    return ChartSpec(
        kind=ChartKind.LINE if is_line else ChartKind.BAR,
        dataset=[{x_field: label, value_field: value} for label, value in zip(labels, values)],
        x_key=x_field,
        y_key=value_field,
        title=title or policy.default_title,
        label_map={
            x_field: policy.label_for(x_field),
            value_field: policy.label_for(value_field),
        },
    )


def extract_title(text: str) -> Optional[str]:
    """Opportunistic title: "gráfico de X" phrases first, then an "X:" heading line."""
    if not text:
        return None
    for pattern in (TITLE_PHRASE_PATTERN, TITLE_HEADING_PATTERN):
        match = pattern.search(text)
        if match and match.group(1).strip():
            title = match.group(1).strip()
            if len(title) <= MAX_TITLE_LENGTH:
                return title
    return None


# =============================================================================
# Python literal arrays
# =============================================================================

def _split_literal_entries(body: str) -> List[str]:
    return [entry.strip() for entry in body.split(',')]


def _parse_plain_number(entry: str) -> float:
    try:
        value = float(entry)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def extract_from_python_literals(text: str, policy: ChartPolicy = DEFAULT_POLICY) -> Optional[ChartSpec]:
    """
    Read sibling list assignments such as ``meses = [...]`` and ``valores = [...]``.

    Only meaningful when the user asked for a chart; the cascade enforces that.
    """
    if not text:
        return None

    labels_match = LABEL_ARRAY_PATTERN.search(text)
    values_match = VALUE_ARRAY_PATTERN.search(text)
    if not labels_match or not values_match:
        return None

    labels = [entry.strip('\'"') for entry in _split_literal_entries(labels_match.group(1))]
    labels = [label.strip() for label in labels if label.strip()]
    values = [_parse_plain_number(entry) for entry in _split_literal_entries(values_match.group(1)) if entry]

    if len(labels) != len(values) or len(labels) < MIN_SERIES_POINTS:
        logger.debug(f"Literal arrays rejected: {len(labels)} labels vs {len(values)} values")
        return None

    temporal = any(policy.looks_temporal(label) for label in labels)
    return _build_series_spec(labels, values, temporal, None, policy)


# =============================================================================
# Bulleted lists and delimited pairs
# =============================================================================

def _bulleted_pattern(policy: ChartPolicy):
    return re.compile(
        r"^[ \t]*[-•*][ \t]*([^:\n]+?):[ \t]*\**[ \t]*" + policy.currency_pattern() + r"(\d[\d.,]*)",
        re.MULTILINE,
    )


def _delimited_pattern(policy: ChartPolicy):
    return re.compile(r"([^:\n|]+)[:|][ \t]*" + policy.currency_pattern() + r"(\d[\d.,]*)")


def _pairs_to_spec(
    matches: List[Tuple[str, str]],
    raw_text: str,
    policy: ChartPolicy,
) -> Optional[ChartSpec]:
    labels = []
    values = []
    for raw_label, raw_value in matches:
        label = _clean_label(raw_label.lstrip('-•* \t'))
        if not label:
            continue
        labels.append(label)
        values.append(parse_locale_number(raw_value, policy))

    if len(labels) < MIN_SERIES_POINTS:
        return None

    temporal = policy.looks_temporal(labels[0])
    return _build_series_spec(labels, values, temporal, extract_title(raw_text), policy)


def extract_from_bulleted_list(text: str, policy: ChartPolicy = DEFAULT_POLICY) -> Optional[ChartSpec]:
    """Lines like ``- Junho: R$ 252.951,59``."""
    if not text:
        return None
    without_code = remove_fenced_code_blocks(text)
    matches = _bulleted_pattern(policy).findall(without_code)
    if len(matches) < MIN_SERIES_POINTS:
        return None
    return _pairs_to_spec(matches, without_code, policy)


def extract_from_delimited_pairs(text: str, policy: ChartPolicy = DEFAULT_POLICY) -> Optional[ChartSpec]:
    """Any ``label: number`` or ``label | number`` occurrence; the loosest strategy."""
    if not text:
        return None
    without_code = remove_fenced_code_blocks(text)
    if len(_bulleted_pattern(policy).findall(without_code)) >= MIN_SERIES_POINTS:
        # Bulleted lists belong to the stricter strategy
        return None
    matches = _delimited_pattern(policy).findall(without_code)
    if len(matches) < MIN_SERIES_POINTS:
        return None
    return _pairs_to_spec(matches, without_code, policy)


# =============================================================================
# Strategy registry
# =============================================================================

@dataclass(frozen=True)
class ExtractionStrategy:
    """A named extractor and whether it needs an explicit chart request."""
    name: str
    extract: Callable[[str, ChartPolicy], Optional[ChartSpec]]
    requires_intent: bool = False


EXTRACTION_STRATEGIES = (
    ExtractionStrategy('json', extract_from_json),
    ExtractionStrategy('python_literals', extract_from_python_literals, requires_intent=True),
    ExtractionStrategy('bulleted_list', extract_from_bulleted_list),
    ExtractionStrategy('delimited_pairs', extract_from_delimited_pairs),
)


def run_extraction_cascade(
    text: str,
    user_requested_chart: bool,
    policy: ChartPolicy = DEFAULT_POLICY,
    skip: Tuple[str, ...] = (),
    strategies: Tuple[ExtractionStrategy, ...] = EXTRACTION_STRATEGIES,
) -> Tuple[Optional[ChartSpec], Optional[str]]:
    """
    Try each strategy in order and stop at the first chart found.

    Args:
        text: Backend response text
        user_requested_chart: Result of the intent classifier for the user message
        policy: Locale heuristics
        skip: Strategy names already tried by the caller
        strategies: Ordered registry (overridable for tests)

    Returns:
        Tuple of (chart spec or None, name of the winning strategy or None)
    """
    for strategy in strategies:
        if strategy.name in skip:
            continue
        if strategy.requires_intent and not user_requested_chart:
            continue

        spec = safe_execute(
            strategy.extract,
            text,
            policy,
            context=f"Chart extraction strategy '{strategy.name}'",
            default_return=None,
            severity=ErrorSeverity.DEBUG,
        )
        if spec is not None:
            logger.debug(f"Chart data extracted by '{strategy.name}' strategy ({len(spec.dataset)} rows)")
            return spec, strategy.name

    return None, None
