"""
Removes source-code residue from a backend response once a chart has been
derived from it, so the transcript does not repeat what is now drawn.
"""

import re
from typing import List

FENCED_BLOCK_PATTERN = re.compile(r"```[\w+-]*[ \t]*\n?[\s\S]*?```")

# Terminal call that ends a plotting snippet
TERMINAL_CALL_PATTERN = re.compile(r"plt\.show\(\)")

# Narrative lead-in through the terminal plotting call
CODE_SPAN_PATTERNS = [
    re.compile(r"Vou criar.*?gráfico.*?plt\.show\(\)", re.IGNORECASE | re.DOTALL),
    re.compile(r"Agora vou criar.*?plt\.show\(\)", re.IGNORECASE | re.DOTALL),
    re.compile(r"import\s+matplotlib[\s\S]*?plt\.show\(\)", re.IGNORECASE),
    re.compile(r"import\s+\w+[\s\S]*?plt\.show\(\)", re.IGNORECASE),
    re.compile(r"\w+\s*=\s*\[[^\]]+\][\s\S]*?plt\.show\(\)", re.IGNORECASE),
]

# Sentences announcing that code is about to be shown
INTRO_PHRASE_PATTERNS = [
    re.compile(r"Vou criar.*?gráfico.*?para você\.", re.IGNORECASE),
    re.compile(r"Agora vou criar.*?visualização\.", re.IGNORECASE),
    re.compile(r"Vou criar.*?gráfico\.", re.IGNORECASE),
    re.compile(r"Agora vou.*?gráfico\.", re.IGNORECASE),
]

LEAD_IN_LINE_PATTERN = re.compile(r"^(Vou criar|Agora vou criar).*?gráfico", re.IGNORECASE)

CODE_LINE_PATTERNS = [
    re.compile(r"^import\s"),
    re.compile(r"^from\s+[\w.]+\s+import\s"),
    re.compile(r"^plt\."),
    re.compile(r"^\w+\s*=\s*\["),
]


def remove_fenced_code_blocks(text: str) -> str:
    """Drop every ``` fenced block (any language tag)."""
    return FENCED_BLOCK_PATTERN.sub('', text)


def _is_code_line(stripped: str) -> bool:
    return any(pattern.match(stripped) for pattern in CODE_LINE_PATTERNS)


def _drop_code_lines(lines: List[str]) -> List[str]:
    """Filter code-looking lines; a lead-in line swallows everything up to the terminal call."""
    kept = []
    index = 0
    while index < len(lines):
        stripped = lines[index].strip()

        if LEAD_IN_LINE_PATTERN.match(stripped):
            end = next(
                (i for i in range(index + 1, len(lines)) if TERMINAL_CALL_PATTERN.search(lines[i])),
                None,
            )
            # Without a terminal call only the announcing line goes
            index = end + 1 if end is not None else index + 1
            continue

        if not _is_code_line(stripped):
            kept.append(lines[index])
        index += 1
    return kept


def clean_output_from_code(output: str) -> str:
    """
    Strip code residue from a response.

    Removes fenced blocks, lead-in-to-plt.show() spans, announcing sentences,
    import/plotting/array-assignment lines, then normalises blank lines.
    Running it on already cleaned text returns the text unchanged.
    """
    if not output:
        return ''

    cleaned = remove_fenced_code_blocks(output)

    for pattern in CODE_SPAN_PATTERNS:
        cleaned = pattern.sub('', cleaned)

    for pattern in INTRO_PHRASE_PATTERNS:
        cleaned = pattern.sub('', cleaned)

    cleaned = '\n'.join(_drop_code_lines(cleaned.split('\n')))

    cleaned = re.sub(r"[ \t]+$", '', cleaned, flags=re.MULTILINE)
    cleaned = re.sub(r"\n{3,}", '\n\n', cleaned)

    return cleaned.strip()
