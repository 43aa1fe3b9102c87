"""
Chart rendering for validated chart specs.
Draws bar, line, area and pie charts with seaborn/matplotlib and returns PNG buffers.
"""

import io
import logging
import warnings
from typing import List, Optional

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from chart_policy import ChartPolicy, DEFAULT_POLICY
from chart_types import ChartKind, ChartSpec
from chart_utils import parse_locale_number

logger = logging.getLogger('chart_assistant.chart_renderer')

# Set matplotlib to use non-interactive backend
plt.switch_backend('Agg')

# Suppress matplotlib categorical units warning
warnings.filterwarnings('ignore', category=UserWarning, module='matplotlib.category')

# Long-format column names, kept apart from any series label
SERIES_COLUMN = '_series'
VALUE_COLUMN = '_value'


class ChartRenderer:
    """Renders a ChartSpec to a PNG image."""

    # Custom color scheme (0x96f theme)
    COLORS = {
        'background': '#000000',
        'foreground': '#FCFCFA',
        'border': '#666666',
    }

    # Chart color palette for bars/lines/slices
    CHART_PALETTE = [
        '#49CAE4',  # blue
        '#BCDF59',  # green
        '#A093E2',  # purple
        '#FFCA58',  # yellow
        '#FF7272',  # red
        '#AEE8F4',  # cyan
        '#64D2E8',  # bright_blue
        '#C6E472',  # bright_green
    ]

    def __init__(self, policy: ChartPolicy = DEFAULT_POLICY):
        """Initialize the chart renderer."""
        self.policy = policy
        # Set dark theme with no grid
        sns.set_theme(style="dark")
        plt.rcParams.update({
            'figure.facecolor': self.COLORS['background'],
            'axes.facecolor': self.COLORS['background'],
            'axes.edgecolor': self.COLORS['foreground'],
            'axes.labelcolor': self.COLORS['foreground'],
            'text.color': self.COLORS['foreground'],
            'xtick.color': self.COLORS['foreground'],
            'ytick.color': self.COLORS['foreground'],
            'grid.color': self.COLORS['background'],  # Hide grid
            'grid.alpha': 0,  # Hide grid
            'font.family': 'monospace',
        })

    def render(self, spec: ChartSpec) -> Optional[io.BytesIO]:
        """
        Render the spec as a PNG.

        Args:
            spec: A validated chart spec

        Returns:
            BytesIO positioned at 0, or None if drawing failed
        """
        try:
            if spec.kind == ChartKind.BAR:
                return self._generate_bar_chart(spec)
            elif spec.kind == ChartKind.PIE:
                return self._generate_pie_chart(spec)
            elif spec.kind in (ChartKind.LINE, ChartKind.AREA):
                return self._generate_line_chart(spec, filled=spec.kind == ChartKind.AREA)
            else:
                logger.warning(f"Unknown chart type: {spec.kind}")
                return None

        except Exception as e:
            logger.error(f"Error generating {spec.kind} chart: {e}", exc_info=True)
            return None

    def to_dataframe(self, spec: ChartSpec) -> pd.DataFrame:
        """Wide frame: the x column plus one numeric column per series, named by their labels."""
        data_dict = {
            spec.label(spec.x_key): [
                str(row.get(spec.x_key, f"Item {i + 1}")) for i, row in enumerate(spec.dataset)
            ]
        }
        for key in spec.y_keys:
            data_dict[spec.label(key)] = [parse_locale_number(row.get(key), self.policy) for row in spec.dataset]
        return pd.DataFrame(data_dict)

    def _colors(self, count: int) -> List[str]:
        return [self.CHART_PALETTE[i % len(self.CHART_PALETTE)] for i in range(count)]

    def _new_figure(self, figsize=(10, 6)):
        fig, ax = plt.subplots(figsize=figsize)
        fig.patch.set_facecolor(self.COLORS['background'])
        ax.set_facecolor(self.COLORS['background'])
        return fig, ax

    def _style_axes(self, ax, title: str, x_label: str):
        ax.set_title(title, fontsize=18, fontweight='bold', color=self.COLORS['foreground'], pad=20)
        ax.set_xlabel(x_label, fontsize=14, color=self.COLORS['foreground'])
        ax.spines['bottom'].set_color(self.COLORS['foreground'])
        ax.spines['left'].set_color(self.COLORS['foreground'])
        ax.spines['right'].set_visible(False)
        ax.spines['top'].set_visible(False)
        ax.tick_params(axis='x', labelrotation=45)

    def _add_legend(self, ax, series_count: int):
        if series_count > 1:
            legend = ax.legend(
                facecolor=self.COLORS['background'],
                edgecolor=self.COLORS['foreground'],
                labelcolor=self.COLORS['foreground'],
                fontsize=12
            )
            legend.get_frame().set_linewidth(1.5)
        elif ax.get_legend() is not None:
            ax.get_legend().remove()

    def _save(self, fig) -> io.BytesIO:
        plt.tight_layout()
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=150, bbox_inches='tight', facecolor=self.COLORS['background'])
        buf.seek(0)
        plt.close(fig)
        return buf

    def _title(self, spec: ChartSpec) -> str:
        return spec.title or self.policy.default_title

    def _generate_bar_chart(self, spec: ChartSpec) -> io.BytesIO:
        """Grouped bars, one hue per series."""
        df = self.to_dataframe(spec)
        x_label = spec.label(spec.x_key)
        series_labels = [spec.label(key) for key in spec.y_keys]

        df_melted = df.melt(id_vars=[x_label], var_name=SERIES_COLUMN, value_name=VALUE_COLUMN)

        fig, ax = self._new_figure()
        sns.barplot(
            data=df_melted,
            x=x_label,
            y=VALUE_COLUMN,
            hue=SERIES_COLUMN,
            palette=self._colors(len(series_labels)),
            edgecolor=self.COLORS['border'],
            ax=ax,
        )
        ax.set_ylabel(series_labels[0] if len(series_labels) == 1 else '')

        self._style_axes(ax, self._title(spec), x_label)
        self._add_legend(ax, len(series_labels))
        return self._save(fig)

    def _generate_line_chart(self, spec: ChartSpec, filled: bool = False) -> io.BytesIO:
        """Line chart with one line per series; filled below the line for area charts."""
        df = self.to_dataframe(spec)
        x_label = spec.label(spec.x_key)
        series_labels = [spec.label(key) for key in spec.y_keys]
        positions = range(len(df))

        fig, ax = self._new_figure()

        for idx, series in enumerate(series_labels):
            color = self.CHART_PALETTE[idx % len(self.CHART_PALETTE)]
            ax.plot(
                positions,
                df[series],
                color=color,
                linewidth=2.5,
                marker='o',
                markersize=8,
                label=series,
                markeredgecolor=self.COLORS['foreground'],
                markeredgewidth=1
            )
            if filled:
                ax.fill_between(positions, df[series], color=color, alpha=0.6)

        ax.set_xticks(list(positions))
        ax.set_xticklabels(df[x_label], ha='right')
        if len(series_labels) == 1:
            ax.set_ylabel(series_labels[0])

        self._style_axes(ax, self._title(spec), x_label)
        self._add_legend(ax, len(series_labels))
        return self._save(fig)

    def _generate_pie_chart(self, spec: ChartSpec) -> io.BytesIO:
        """Pie chart of the first series (matplotlib, seaborn has no pie)."""
        df = self.to_dataframe(spec)
        x_label = spec.label(spec.x_key)
        first_series = spec.label(spec.y_keys[0])

        fig, ax = self._new_figure(figsize=(10, 8))

        wedges, texts, autotexts = ax.pie(
            df[first_series],
            labels=df[x_label],
            autopct='%1.0f%%',
            startangle=90,
            colors=self._colors(len(df)),
            textprops={'color': self.COLORS['foreground'], 'fontsize': 14}
        )

        # Style percentage labels
        for autotext in autotexts:
            autotext.set_color(self.COLORS['background'])
            autotext.set_fontweight('bold')

        ax.set_title(self._title(spec), fontsize=18, fontweight='bold', color=self.COLORS['foreground'], pad=20)
        return self._save(fig)


def render_chart(spec: ChartSpec) -> Optional[io.BytesIO]:
    """Render with a default renderer."""
    return ChartRenderer().render(spec)
