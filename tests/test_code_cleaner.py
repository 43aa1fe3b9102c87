"""
Tests for clean_output_from_code(), the code residue stripper.
"""

import pytest

from code_cleaner import clean_output_from_code, remove_fenced_code_blocks

SAMPLES = [
    "Aqui estão os dados.\n\n```python\nimport matplotlib.pyplot as plt\nplt.show()\n```\n\nConclusão final.",
    (
        "Vou criar um gráfico para você.\n"
        "meses = ['Jan', 'Fev']\n"
        "valores = [1, 2]\n"
        "plt.plot(meses, valores)\n"
        "plt.show()\n"
        "Esses são os números."
    ),
    "Total de vendas: 100",
    "Linha 1   \n\n\n\n\nLinha 2\t",
    "import os\nfrom pathlib import Path\nTexto normal.",
    "Agora vou criar a visualização.\nResultado pronto.",
    "",
]


class TestCleanOutputFromCode:
    """Test suite for clean_output_from_code()"""

    def test_removes_fenced_blocks(self):
        assert clean_output_from_code(SAMPLES[0]) == "Aqui estão os dados.\n\nConclusão final."

    def test_removes_lead_in_through_terminal_call(self):
        assert clean_output_from_code(SAMPLES[1]) == "Esses são os números."

    def test_plain_text_unchanged(self):
        assert clean_output_from_code("Total de vendas: 100") == "Total de vendas: 100"

    def test_collapses_blank_lines_and_trailing_whitespace(self):
        assert clean_output_from_code(SAMPLES[3]) == "Linha 1\n\nLinha 2"

    def test_drops_import_lines(self):
        assert clean_output_from_code(SAMPLES[4]) == "Texto normal."

    def test_drops_intro_sentence(self):
        assert clean_output_from_code(SAMPLES[5]) == "Resultado pronto."

    def test_keeps_prose_starting_with_from(self):
        text = "from now on, sales grew."
        assert clean_output_from_code(text) == text

    def test_lead_in_line_without_terminal_call(self):
        text = "Vou criar o gráfico agora\nOs dados seguem abaixo."
        assert clean_output_from_code(text) == "Os dados seguem abaixo."

    def test_empty_input(self):
        assert clean_output_from_code("") == ""
        assert clean_output_from_code(None) == ""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = clean_output_from_code(text)
        assert clean_output_from_code(once) == once


class TestRemoveFencedCodeBlocks:
    """Test suite for remove_fenced_code_blocks()"""

    def test_any_language_tag(self):
        text = "a```js\nx = 1\n```b```\nplain\n```c"
        assert remove_fenced_code_blocks(text) == "abc"
