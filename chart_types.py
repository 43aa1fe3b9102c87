"""
Data structures shared by the extraction engine, the presentation state machine
and the chat session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Scalar = Union[str, int, float]
Row = Dict[str, Scalar]
Dataset = List[Row]
YKey = Union[str, List[str]]


class ChartKind(str, Enum):
    """Closed set of chart kinds the renderer understands."""
    BAR = 'bar'
    LINE = 'line'
    PIE = 'pie'
    AREA = 'area'

    @classmethod
    def parse(cls, value: Any) -> Optional['ChartKind']:
        """Return the matching kind, or None for anything outside the set."""
        if isinstance(value, ChartKind):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def as_key_list(y_key: YKey) -> List[str]:
    """Normalise a singular-or-multiple y key to a list."""
    return list(y_key) if isinstance(y_key, (list, tuple)) else [y_key]


@dataclass(frozen=True)
class ChartSpec:
    """A fully resolved, renderable chart description."""

    kind: ChartKind
    dataset: Dataset
    x_key: str
    y_key: YKey
    title: Optional[str] = None
    label_map: Optional[Dict[str, str]] = None

    @property
    def y_keys(self) -> List[str]:
        return as_key_list(self.y_key)

    def label(self, key: str) -> str:
        if self.label_map and key in self.label_map:
            return self.label_map[key]
        return key

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape used by the backend payload."""
        payload = {
            'type': self.kind.value,
            'data': self.dataset,
            'xKey': self.x_key,
            'yKey': self.y_key,
        }
        if self.title is not None:
            payload['title'] = self.title
        if self.label_map is not None:
            payload['labels'] = self.label_map
        return payload


@dataclass(frozen=True)
class ChartOptions:
    """Chart data that is ready to draw, waiting for the user to pick a kind."""

    dataset: Dataset
    x_key: str
    y_key: YKey
    available_kinds: List[ChartKind]
    title: Optional[str] = None
    label_map: Optional[Dict[str, str]] = None

    @classmethod
    def from_spec(cls, spec: ChartSpec, available_kinds: List[ChartKind]) -> 'ChartOptions':
        return cls(
            dataset=spec.dataset,
            x_key=spec.x_key,
            y_key=spec.y_key,
            available_kinds=list(available_kinds),
            title=spec.title,
            label_map=spec.label_map,
        )

    def to_spec(self, kind: ChartKind) -> ChartSpec:
        return ChartSpec(
            kind=kind,
            dataset=self.dataset,
            x_key=self.x_key,
            y_key=self.y_key,
            title=self.title,
            label_map=self.label_map,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            'data': self.dataset,
            'xKey': self.x_key,
            'yKey': self.y_key,
            'availableTypes': [kind.value for kind in self.available_kinds],
        }
        if self.title is not None:
            payload['title'] = self.title
        if self.label_map is not None:
            payload['labels'] = self.label_map
        return payload


# A suggestion carries exactly the same data as an options offer; only the
# presentation state that holds it differs.
ChartSuggestion = ChartOptions


# =============================================================================
# Presentation variants
# =============================================================================

@dataclass(frozen=True)
class NoChart:
    """Plain text message."""


@dataclass(frozen=True)
class Suggested:
    """Data is chartable but the user did not ask for a chart."""
    suggestion: ChartSuggestion


@dataclass(frozen=True)
class OptionsOffered:
    """The user asked for a chart and must pick a kind."""
    options: ChartOptions


@dataclass(frozen=True)
class Rendered:
    """A kind was chosen; options are kept so the kind can still change."""
    spec: ChartSpec
    options: Optional[ChartOptions] = None


Presentation = Union[NoChart, Suggested, OptionsOffered, Rendered]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Message:
    """One conversation turn."""

    role: str  # 'user' or 'bot'
    content: str
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)
    presentation: Presentation = field(default_factory=NoChart)

    @property
    def chart_spec(self) -> Optional[ChartSpec]:
        if isinstance(self.presentation, Rendered):
            return self.presentation.spec
        return None

    @property
    def chart_options(self) -> Optional[ChartOptions]:
        if isinstance(self.presentation, OptionsOffered):
            return self.presentation.options
        if isinstance(self.presentation, Rendered):
            return self.presentation.options
        return None

    @property
    def chart_suggestion(self) -> Optional[ChartSuggestion]:
        if isinstance(self.presentation, Suggested):
            return self.presentation.suggestion
        return None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'role': self.role,
            'content': self.content,
            'createdAt': self.created_at.isoformat(),
        }
        if self.chart_spec is not None:
            payload['chartData'] = self.chart_spec.to_dict()
        if self.chart_options is not None:
            payload['chartOptions'] = self.chart_options.to_dict()
        if self.chart_suggestion is not None:
            payload['chartSuggestion'] = self.chart_suggestion.to_dict()
        return payload
