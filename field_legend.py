"""
Legend of the fields in the backend's campaign dataset.

Lets users see which columns they can ask about, grouped by category.
"""

import unicodedata
from dataclasses import dataclass
from typing import List, Optional

CATEGORY_LABELS = {
    'identificação': 'Identificação',
    'campanha': 'Campanha',
    'métricas': 'Métricas',
    'orçamento': 'Orçamento',
    'engajamento': 'Engajamento',
    'segmentação': 'Segmentação',
}


@dataclass(frozen=True)
class FieldInfo:
    name: str
    description: str
    category: str


FIELD_LEGEND = (
    FieldInfo('id', 'Identificador único do registro', 'identificação'),
    FieldInfo('date', 'Data do registro', 'identificação'),
    FieldInfo('campaign_name', 'Nome da campanha', 'campanha'),
    FieldInfo('adset_name', 'Nome do conjunto de anúncios', 'campanha'),
    FieldInfo('ad_name', 'Nome do anúncio', 'campanha'),
    FieldInfo('adset_start_time', 'Data/hora de início do conjunto de anúncios', 'campanha'),
    FieldInfo('adset_end_time', 'Data/hora de término do conjunto de anúncios', 'campanha'),
    FieldInfo('adset_lifetime_budget', 'Orçamento total do conjunto de anúncios', 'orçamento'),
    FieldInfo('impressions', 'Número de impressões', 'métricas'),
    FieldInfo('reach', 'Alcance (pessoas únicas)', 'métricas'),
    FieldInfo('frequency', 'Frequência média de visualização', 'métricas'),
    FieldInfo('link_clicks', 'Cliques em links', 'métricas'),
    FieldInfo('sony_conversoes_todos_os_players', 'Conversões Sony (todos os players)', 'métricas'),
    FieldInfo('thruplay_actions', 'Ações de reprodução completa', 'métricas'),
    FieldInfo('landing_page_views', 'Visualizações da página de destino', 'métricas'),
    FieldInfo('cost', 'Custo total', 'orçamento'),
    FieldInfo('post_engagements', 'Engajamentos no post', 'engajamento'),
    FieldInfo('genero', 'Gênero do público-alvo', 'segmentação'),
    FieldInfo('tipo_campanha', 'Tipo de campanha', 'campanha'),
    FieldInfo('tipo_compra', 'Tipo de compra', 'campanha'),
    FieldInfo('artista', 'Artista relacionado', 'segmentação'),
)


def _fold(text: str) -> str:
    """Lowercase without accents, so 'metricas' finds 'métricas'."""
    decomposed = unicodedata.normalize('NFKD', text.strip().lower())
    return ''.join(char for char in decomposed if not unicodedata.combining(char))


def get_categories() -> List[str]:
    """Categories in the order they first appear in the legend."""
    categories = []
    for field in FIELD_LEGEND:
        if field.category not in categories:
            categories.append(field.category)
    return categories


def resolve_category(name: str) -> Optional[str]:
    folded = _fold(name)
    for category in CATEGORY_LABELS:
        if _fold(category) == folded:
            return category
    return None


def get_fields(category: Optional[str] = None) -> List[FieldInfo]:
    """
    Fields of one category, or every field when no category is given.

    Args:
        category: Category name, accents and case ignored

    Returns:
        list: Matching fields (empty for an unknown category)
    """
    if category is None:
        return list(FIELD_LEGEND)
    resolved = resolve_category(category)
    return [field for field in FIELD_LEGEND if field.category == resolved]


def format_legend(fields: List[FieldInfo], category: Optional[str] = None) -> str:
    """Plain-text legend with a footer count such as "4 campos em Orçamento"."""
    if not fields:
        return "Nenhum campo encontrado nesta categoria."

    lines = [f"  {field.name:<34} [{CATEGORY_LABELS[field.category]}] {field.description}" for field in fields]
    footer = f"{len(fields)} {'campo' if len(fields) == 1 else 'campos'}"
    resolved = resolve_category(category) if category else None
    if resolved:
        footer += f" em {CATEGORY_LABELS[resolved]}"
    lines.append(footer)
    return '\n'.join(lines)
