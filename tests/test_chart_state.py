"""
Tests for the per-message chart presentation transitions.
"""

from chart_state import (
    ACTION_SELECT_KIND,
    ACTION_VISUALIZE,
    can_transition,
    presentation_state,
    select_chart_kind,
    visualize,
)
from chart_types import ChartKind, ChartOptions, Message, NoChart, OptionsOffered, Rendered, Suggested

OPTIONS = ChartOptions(
    dataset=[{'item': f'Canal {i}', 'valor': float(i)} for i in range(10)],
    x_key='item',
    y_key='valor',
    available_kinds=[ChartKind.BAR, ChartKind.LINE, ChartKind.AREA],
    title='Cliques',
)


def _message(presentation):
    return Message(role='bot', content='dados', presentation=presentation)


class TestSelectChartKind:
    """Test suite for select_chart_kind()"""

    def test_unavailable_kind_is_rejected(self):
        message = _message(OptionsOffered(OPTIONS))
        assert select_chart_kind(message, ChartKind.PIE) is message
        assert select_chart_kind(message, 'scatter') is message

    def test_available_kind_renders_and_keeps_options(self):
        message = _message(OptionsOffered(OPTIONS))
        rendered = select_chart_kind(message, ChartKind.BAR)

        assert isinstance(rendered.presentation, Rendered)
        assert rendered.chart_spec.kind == ChartKind.BAR
        assert rendered.chart_spec.dataset == OPTIONS.dataset
        assert rendered.chart_spec.title == 'Cliques'
        assert rendered.chart_options == OPTIONS
        assert rendered.id == message.id
        assert message.presentation == OptionsOffered(OPTIONS)

    def test_selecting_same_kind_twice_is_idempotent(self):
        message = _message(OptionsOffered(OPTIONS))
        once = select_chart_kind(message, 'bar')
        twice = select_chart_kind(once, 'bar')
        assert twice == once
        assert twice.chart_spec == once.chart_spec

    def test_kind_can_change_after_rendering(self):
        rendered = select_chart_kind(_message(OptionsOffered(OPTIONS)), ChartKind.BAR)
        changed = select_chart_kind(rendered, ChartKind.LINE)
        assert changed.chart_spec.kind == ChartKind.LINE
        assert changed.chart_options == OPTIONS

    def test_no_options_is_a_no_op(self):
        plain = _message(NoChart())
        suggested = _message(Suggested(OPTIONS))
        default_render = _message(Rendered(spec=OPTIONS.to_spec(ChartKind.BAR)))

        assert select_chart_kind(plain, ChartKind.BAR) is plain
        assert select_chart_kind(suggested, ChartKind.BAR) is suggested
        assert select_chart_kind(default_render, ChartKind.LINE) is default_render


class TestVisualize:
    """Test suite for visualize()"""

    def test_suggestion_becomes_options(self):
        message = _message(Suggested(OPTIONS))
        visualized = visualize(message)
        assert visualized.presentation == OptionsOffered(OPTIONS)
        assert visualized.chart_suggestion is None

    def test_other_states_unchanged(self):
        for presentation in (NoChart(), OptionsOffered(OPTIONS), Rendered(OPTIONS.to_spec(ChartKind.BAR), OPTIONS)):
            message = _message(presentation)
            assert visualize(message) is message


class TestPresentationState:
    """Test suite for presentation_state() and can_transition()"""

    def test_state_names(self):
        assert presentation_state(_message(NoChart())) == 'none'
        assert presentation_state(_message(Suggested(OPTIONS))) == 'suggested'
        assert presentation_state(_message(OptionsOffered(OPTIONS))) == 'options'
        assert presentation_state(_message(Rendered(OPTIONS.to_spec(ChartKind.BAR)))) == 'rendered'

    def test_can_transition(self):
        suggested = _message(Suggested(OPTIONS))
        offered = _message(OptionsOffered(OPTIONS))
        rendered = _message(Rendered(OPTIONS.to_spec(ChartKind.BAR), OPTIONS))

        assert can_transition(suggested, ACTION_VISUALIZE) is True
        assert can_transition(suggested, ACTION_SELECT_KIND) is False
        assert can_transition(offered, ACTION_VISUALIZE) is False
        assert can_transition(offered, ACTION_SELECT_KIND) is True
        assert can_transition(rendered, ACTION_SELECT_KIND) is True
        assert can_transition(_message(NoChart()), 'unknown') is False

    def test_message_dict_projection(self):
        rendered = select_chart_kind(_message(OptionsOffered(OPTIONS)), ChartKind.AREA)
        payload = rendered.to_dict()
        assert payload['chartData']['type'] == 'area'
        assert payload['chartOptions']['availableTypes'] == ['bar', 'line', 'area']
        assert 'chartSuggestion' not in payload
