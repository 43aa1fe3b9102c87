"""
Tests for the individual chart data extractors and the ordered extraction cascade.
"""

import json
import logging

import pytest

from chart_extractors import (
    EXTRACTION_STRATEGIES,
    ExtractionStrategy,
    extract_from_bulleted_list,
    extract_from_delimited_pairs,
    extract_from_json,
    extract_from_python_literals,
    extract_title,
    run_extraction_cascade,
)
from chart_orchestrator import build_bot_reply
from chart_types import ChartKind, OptionsOffered
from conftest import SALES_LIST_RESPONSE

CHART_PAYLOAD = {
    'type': 'bar',
    'data': [{'canal': 'Google', 'cliques': 120}, {'canal': 'Meta', 'cliques': 80}],
    'xKey': 'canal',
    'yKey': 'cliques',
    'title': 'Cliques por canal',
}

LITERAL_RESPONSE = (
    "Vou criar um gráfico para você.\n"
    "```python\n"
    "import matplotlib.pyplot as plt\n"
    "meses = ['Janeiro', 'Fevereiro', 'Março']\n"
    "valores = [100, 200, 300]\n"
    "plt.plot(meses, valores)\n"
    "plt.show()\n"
    "```\n"
    "Os valores cresceram."
)


class TestExtractFromJson:
    """Test suite for extract_from_json()"""

    def test_fenced_json_block(self):
        text = f"Aqui estão os dados:\n```json\n{json.dumps(CHART_PAYLOAD)}\n```"
        spec = extract_from_json(text)
        assert spec is not None
        assert spec.kind == ChartKind.BAR
        assert spec.x_key == 'canal'
        assert spec.title == 'Cliques por canal'

    def test_bare_fence(self):
        text = f"```\n{json.dumps(CHART_PAYLOAD)}\n```"
        assert extract_from_json(text) is not None

    def test_chart_data_sub_object_inline(self):
        text = f"Resposta: {json.dumps({'output': 'ok', 'chartData': CHART_PAYLOAD})} fim."
        spec = extract_from_json(text)
        assert spec is not None
        assert spec.y_key == 'cliques'

    def test_inline_chart_after_many_plain_records(self):
        records = [{'campanha': f'c{i}', 'cliques': i} for i in range(60)]
        text = f"Registros brutos: {json.dumps(records)}\nGráfico: {json.dumps(CHART_PAYLOAD)}"

        spec = extract_from_json(text)

        assert spec is not None
        assert spec.x_key == 'canal'
        assert len(spec.dataset) == 2

    def test_plain_records_never_become_pairs_chart(self):
        records = [{'campanha': f'c{i}', 'cliques': i} for i in range(60)]
        text = f"Registros brutos: {json.dumps(records)}\nGráfico: {json.dumps(CHART_PAYLOAD)}"

        reply = build_bot_reply(text, "mostre um gráfico")

        assert isinstance(reply.presentation, OptionsOffered)
        assert reply.presentation.options.x_key == 'canal'
        assert reply.source == 'json'

    def test_inline_scan_stops_after_repeated_decode_failures(self):
        text = "{quebrado " * 60 + json.dumps(CHART_PAYLOAD)
        assert extract_from_json(text) is None

    def test_stopped_inline_scan_is_logged(self, caplog):
        text = "{quebrado " * 60 + json.dumps(CHART_PAYLOAD)
        with caplog.at_level(logging.DEBUG, logger='chart_assistant.chart_extractors'):
            extract_from_json(text)
        assert "Inline JSON scan stopped after 50 failed decodes" in caplog.text

    def test_whole_text_is_json(self):
        assert extract_from_json(json.dumps(CHART_PAYLOAD)) is not None

    def test_skips_invalid_block_and_uses_next(self):
        text = (
            "```json\n{\"type\": \"bar\", \"data\": []}\n```\n"
            f"```json\n{json.dumps(CHART_PAYLOAD)}\n```"
        )
        assert extract_from_json(text).x_key == 'canal'

    @pytest.mark.parametrize("text", [
        "```json\n{\"type\": \"bar\", \"data\": [\n```",
        "{not json at all",
        "{\"type\": \"bar\", \"data\": [{\"a\": 1}], \"xKey\": \"b\", \"yKey\": \"a\"}",
        "```json\n[1, 2, 3]\n```",
        "",
        "texto sem dados",
    ])
    def test_malformed_or_invalid_is_no_match(self, text):
        assert extract_from_json(text) is None


class TestExtractFromPythonLiterals:
    """Test suite for extract_from_python_literals()"""

    def test_temporal_series_becomes_line(self):
        spec = extract_from_python_literals(LITERAL_RESPONSE)
        assert spec.kind == ChartKind.LINE
        assert spec.x_key == 'periodo'
        assert spec.y_key == 'valor'
        assert spec.dataset == [
            {'periodo': 'Janeiro', 'valor': 100.0},
            {'periodo': 'Fevereiro', 'valor': 200.0},
            {'periodo': 'Março', 'valor': 300.0},
        ]
        assert spec.title == 'Gráfico de Dados'
        assert spec.label_map == {'periodo': 'Período', 'valor': 'Valor'}

    def test_categorical_series_becomes_bar(self):
        text = "labels = ['Google', 'Meta']\nvalues = [10.5, 20]"
        spec = extract_from_python_literals(text)
        assert spec.kind == ChartKind.BAR
        assert spec.x_key == 'item'
        assert [row['valor'] for row in spec.dataset] == [10.5, 20.0]

    def test_two_temporal_points_stay_categorical(self):
        text = "meses = ['Janeiro', 'Fevereiro']\nvalores = [1, 2]"
        spec = extract_from_python_literals(text)
        assert spec.kind == ChartKind.BAR
        assert spec.x_key == 'item'

    def test_non_numeric_values_become_zero(self):
        text = "meses = ['Jan', 'Fev', 'Mar']\nvalores = [1, x, 3]"
        spec = extract_from_python_literals(text)
        assert [row['valor'] for row in spec.dataset] == [1.0, 0.0, 3.0]

    def test_non_finite_values_become_zero(self):
        text = "meses = ['Jan', 'Fev', 'Mar', 'Abr']\nvalores = [1, inf, nan, 1e400]"
        spec = extract_from_python_literals(text)
        assert [row['valor'] for row in spec.dataset] == [1.0, 0.0, 0.0, 0.0]

    def test_length_mismatch_is_no_match(self):
        text = "meses = ['Jan', 'Fev', 'Mar']\nvalores = [1, 2]"
        assert extract_from_python_literals(text) is None

    def test_single_point_is_no_match(self):
        text = "meses = ['Jan']\nvalores = [1]"
        assert extract_from_python_literals(text) is None

    def test_missing_value_array_is_no_match(self):
        assert extract_from_python_literals("meses = ['Jan', 'Fev']") is None


class TestExtractFromLists:
    """Test suite for the bulleted list and delimited pair extractors"""

    def test_bulleted_currency_list(self):
        spec = extract_from_bulleted_list(SALES_LIST_RESPONSE)
        assert spec.kind == ChartKind.LINE
        assert spec.x_key == 'periodo'
        assert [row['periodo'] for row in spec.dataset] == ['Junho', 'Julho', 'Agosto']
        assert [row['valor'] for row in spec.dataset] == [100000.0, 150000.0, 200000.0]
        assert spec.title == 'Vendas por mês'

    def test_bold_labels_and_other_bullets(self):
        text = "• **Google:** 1.200\n* **Meta:** 800"
        spec = extract_from_bulleted_list(text)
        assert [row['item'] for row in spec.dataset] == ['Google', 'Meta']
        assert [row['valor'] for row in spec.dataset] == [1200.0, 800.0]

    def test_bullets_inside_code_fences_are_ignored(self):
        text = "```\n- Jan: 1\n- Fev: 2\n```"
        assert extract_from_bulleted_list(text) is None

    def test_single_bullet_is_no_match(self):
        assert extract_from_bulleted_list("- Total: 100") is None

    def test_colon_pairs(self):
        text = "Resultados\nGoogle: 1.500\nMeta: 2.300"
        spec = extract_from_delimited_pairs(text)
        assert spec.kind == ChartKind.BAR
        assert spec.dataset == [{'item': 'Google', 'valor': 1500.0}, {'item': 'Meta', 'valor': 2300.0}]
        assert spec.title == 'Gráfico de Dados'

    def test_pipe_pairs(self):
        text = "Google | 10\nMeta | 20\nTikTok | 30"
        spec = extract_from_delimited_pairs(text)
        assert [row['item'] for row in spec.dataset] == ['Google', 'Meta', 'TikTok']

    def test_pairs_defer_to_bulleted_list(self):
        assert extract_from_delimited_pairs(SALES_LIST_RESPONSE) is None

    def test_year_labels_are_temporal(self):
        text = "2021: 10\n2022: 20\n2023: 30"
        spec = extract_from_delimited_pairs(text)
        assert spec.kind == ChartKind.LINE
        assert spec.x_key == 'periodo'

    def test_month_prefix_inside_word_is_not_temporal(self):
        text = "Marketing: 10\nVendas: 20\nSuporte: 30"
        spec = extract_from_delimited_pairs(text)
        assert spec.kind == ChartKind.BAR


class TestExtractTitle:
    """Test suite for extract_title()"""

    def test_chart_phrase(self):
        assert extract_title("Aqui está o gráfico de vendas mensais:") == "vendas mensais"

    def test_english_phrase(self):
        assert extract_title("Here is the chart of revenue.") == "revenue"

    def test_heading_line(self):
        assert extract_title("Resumo do trimestre:\n- Jan: 1") == "Resumo do trimestre"

    def test_no_title(self):
        assert extract_title("Nada por aqui") is None
        assert extract_title("") is None


class TestExtractionCascade:
    """Test suite for run_extraction_cascade()"""

    def test_strategy_order(self):
        assert [strategy.name for strategy in EXTRACTION_STRATEGIES] == [
            'json', 'python_literals', 'bulleted_list', 'delimited_pairs',
        ]

    def test_json_wins_over_lists(self):
        text = f"{SALES_LIST_RESPONSE}\n```json\n{json.dumps(CHART_PAYLOAD)}\n```"
        spec, source = run_extraction_cascade(text, user_requested_chart=False)
        assert source == 'json'
        assert spec.x_key == 'canal'

    def test_python_literals_need_chart_intent(self):
        assert run_extraction_cascade(LITERAL_RESPONSE, user_requested_chart=False) == (None, None)

        spec, source = run_extraction_cascade(LITERAL_RESPONSE, user_requested_chart=True)
        assert source == 'python_literals'
        assert spec.kind == ChartKind.LINE

    def test_lists_run_without_intent(self):
        spec, source = run_extraction_cascade(SALES_LIST_RESPONSE, user_requested_chart=False)
        assert source == 'bulleted_list'

    def test_skip(self):
        text = f"```json\n{json.dumps(CHART_PAYLOAD)}\n```"
        assert run_extraction_cascade(text, False, skip=('json',)) == (None, None)

    def test_failing_strategy_is_a_non_match(self):
        def explode(text, policy):
            raise RuntimeError("boom")

        strategies = (
            ExtractionStrategy('explode', explode),
            ExtractionStrategy('bulleted_list', extract_from_bulleted_list),
        )
        spec, source = run_extraction_cascade(SALES_LIST_RESPONSE, False, strategies=strategies)
        assert source == 'bulleted_list'
        assert spec is not None

    def test_no_data(self):
        assert run_extraction_cascade("O total foi 100.", True) == (None, None)
