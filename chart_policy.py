"""
Locale-specific chart heuristics.

Every constant the extraction engine uses to decide "is this a chart request",
"is this axis temporal" or "may this be a pie chart" lives here, so a different
locale or product decision only needs a different ChartPolicy.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Pattern, Tuple

import config

PORTUGUESE_MONTHS = (
    'janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho', 'julho',
    'agosto', 'setembro', 'outubro', 'novembro', 'dezembro',
    'jan', 'fev', 'mar', 'abr', 'mai', 'jun', 'jul', 'ago', 'set', 'out', 'nov', 'dez',
)

CHART_INTENT_KEYWORDS = (
    'gráfico',
    'grafico',
    'gráficos',
    'graficos',
    'chart',
    'visualizar',
    'visualização',
    'visualizacao',
    'visualize',
    'plotar',
    'plot',
)


@dataclass(frozen=True)
class ChartPolicy:
    """Heuristic knobs for extraction, classification and pie eligibility."""

    intent_keywords: Tuple[str, ...] = CHART_INTENT_KEYWORDS
    month_names: Tuple[str, ...] = PORTUGUESE_MONTHS
    currency_markers: Tuple[str, ...] = ('R$', '$', '€', '£')
    grouping_separator: str = '.'
    decimal_separator: str = ','
    pie_max_rows: int = 8
    pie_inference_max_rows: int = 5
    min_temporal_points: int = 3
    temporal_key: str = 'periodo'
    categorical_key: str = 'item'
    value_key: str = 'valor'
    default_title: str = 'Gráfico de Dados'
    axis_labels: Dict[str, str] = field(default_factory=lambda: {
        'periodo': 'Período',
        'item': 'Item',
        'valor': 'Valor',
    })

    def month_pattern(self) -> Pattern:
        """Whole-word month names, longest first so 'março' wins over 'mar'."""
        names = sorted(self.month_names, key=len, reverse=True)
        return re.compile(r'\b(?:' + '|'.join(re.escape(n) for n in names) + r')\b', re.IGNORECASE)

    def currency_pattern(self) -> str:
        """Regex fragment matching an optional currency marker before a number."""
        markers = sorted(self.currency_markers, key=len, reverse=True)
        return r'(?:(?:' + '|'.join(re.escape(m) for m in markers) + r')\s*)?'

    def looks_temporal(self, label: str) -> bool:
        """True if the label names a month or carries a 4-digit year."""
        if not isinstance(label, str):
            return False
        return bool(self.month_pattern().search(label) or re.search(r'\b\d{4}\b', label))

    def label_for(self, key: str) -> str:
        return self.axis_labels.get(key, key)


DEFAULT_POLICY = ChartPolicy(pie_max_rows=config.pie_max_rows)
