# src/pytrips/core/strategies.py
"""
Combinadores de estrategias de extracción.

Cada estrategia es una función pura `(Tag) -> Optional[str]`. Un campo se
resuelve con una lista ordenada de estrategias y gana el primer resultado no
vacío (`first_non_empty`). No hay pesos ni puntajes de confianza.
"""
import re
from typing import Callable, Iterable, NamedTuple, Optional, Pattern, Sequence, Union

from bs4 import BeautifulSoup, Tag

Scope = Union[Tag, BeautifulSoup]
Strategy = Callable[[Scope], Optional[str]]

HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)


class FieldPattern(NamedTuple):
    """Patrón de texto libre y el grupo a capturar."""
    pattern: Pattern
    group: int = 1


class CategoryPattern(NamedTuple):
    """Patrón que, si aparece, mapea el campo a una categoría fija."""
    pattern: Pattern
    label: str


def fp(regex: str, group: int = 1, flags: int = re.IGNORECASE) -> FieldPattern:
    return FieldPattern(re.compile(regex, flags), group)


def element_text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return element.get_text(" ", strip=True)


def scope_text(scope: Scope) -> str:
    """Texto completo de la región, una línea por nodo de texto."""
    return scope.get_text("\n", strip=True)


def is_visible(element: Tag) -> bool:
    """Aproximación estática de visibilidad: hidden, aria-hidden o estilos inline."""
    node = element
    while isinstance(node, Tag) and node.name != "[document]":
        if node.has_attr("hidden") or node.get("aria-hidden") == "true":
            return False
        if HIDDEN_STYLE_RE.search(node.get("style", "")):
            return False
        if node.name in ("script", "style", "template", "noscript"):
            return False
        node = node.parent
    return True


def first_non_empty(strategies: Iterable[Strategy], scope: Scope) -> Optional[str]:
    for strategy in strategies:
        value = strategy(scope)
        if value:
            return value
    return None


def selector_strategy(*selectors: str, postprocess: Optional[Callable[[str], Optional[str]]] = None) -> Strategy:
    """Primer elemento (por selector, en orden de prioridad) con texto no vacío."""

    def run(scope: Scope) -> Optional[str]:
        for selector in selectors:
            for element in scope.select(selector):
                text = element_text(element)
                if not text:
                    continue
                value = postprocess(text) if postprocess else text
                if value:
                    return value
        return None

    run.__name__ = f"selectors[{', '.join(selectors)}]"
    return run


def pattern_strategy(patterns: Sequence[FieldPattern],
                     postprocess: Optional[Callable[[str], Optional[str]]] = None) -> Strategy:
    """Primer patrón que coincide sobre el texto completo de la región."""

    def run(scope: Scope) -> Optional[str]:
        text = scope_text(scope)
        for field_pattern in patterns:
            match = field_pattern.pattern.search(text)
            if not match:
                continue
            value = (match.group(field_pattern.group) or "").strip()
            if postprocess and value:
                value = postprocess(value)
            if value:
                return value
        return None

    run.__name__ = "patterns"
    return run


def category_strategy(categories: Sequence[CategoryPattern]) -> Strategy:
    """Devuelve la etiqueta de la primera categoría cuyo patrón aparece en el texto."""

    def run(scope: Scope) -> Optional[str]:
        text = scope_text(scope)
        for category in categories:
            if category.pattern.search(text):
                return category.label
        return None

    run.__name__ = "categories"
    return run
