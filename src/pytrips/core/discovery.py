# src/pytrips/core/discovery.py
import re
from typing import Callable, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup, Tag

from pytrips.config.settings import config
from pytrips.core.enums import DebugLevel
from pytrips.core.models import CandidateRegion
from pytrips.core.strategies import is_visible
from pytrips.exceptions import DataNotFoundError
from pytrips.utils.logger import get_logger

DebugCallback = Callable[[DebugLevel, str], None]

CSS_ID_RE = re.compile(r"^[A-Za-z][\w-]*$")


def css_path(element: Tag) -> str:
    """
    Ruta CSS (`tag:nth-of-type(n) > ...`) que re-ubica el elemento en la página viva.
    Se corta en el primer ancestro con id válido.
    """
    parts = []
    node = element
    while isinstance(node, Tag) and node.name != "[document]":
        node_id = node.get("id")
        if isinstance(node_id, str) and CSS_ID_RE.match(node_id):
            parts.append(f"#{node_id}")
            break

        parent = node.parent
        if isinstance(parent, Tag):
            siblings = parent.find_all(node.name, recursive=False)
            position = next((i for i, sibling in enumerate(siblings, 1) if sibling is node), 1)
        else:
            position = 1
        parts.append(f"{node.name}:nth-of-type({position})")
        node = parent

    return " > ".join(reversed(parts))


def structural_similarity(a: Tag, b: Tag) -> float:
    """Similitud 0..1 entre dos contenedores: tag, solapamiento de clases y cantidad de hijos."""
    tag_score = 1.0 if a.name == b.name else 0.0

    classes_a, classes_b = set(a.get("class", [])), set(b.get("class", []))
    union = classes_a | classes_b
    class_score = len(classes_a & classes_b) / len(union) if union else 0.0

    children_a = len(a.find_all(True, recursive=False))
    children_b = len(b.find_all(True, recursive=False))
    largest = max(children_a, children_b)
    child_score = 1.0 - abs(children_a - children_b) / largest if largest else 1.0

    return 0.4 * tag_score + 0.4 * class_score + 0.2 * child_score


class DiscoveryEngine:
    """
    Busca en el documento las regiones que representan una reserva cada una.
    Las estrategias se prueban en orden y gana el primer resultado no vacío.
    """

    STRUCTURAL_SELECTORS = [
        '.reservation-card',
        '.trip-card',
        '.booking-card',
        '[data-testid*="reservation"]',
        '[data-testid*="trip"]',
        '.upcoming-stay',
        '.future-reservation',
        'div[class*="reservation"]',
        'div[class*="trip"]',
        'div[class*="booking"]',
        'div[id*="reservation"]',
        'div[id*="trip"]',
        'div[id*="booking"]',
        '.card',
        '.panel',
        '.module',
        '.section',
    ]

    CONTAINER_TAGS = ["div", "section", "article", "li"]
    BLOCK_TAGS = ["div", "section", "article", "li", "p", "dl"]
    STAY_KEYWORDS = ["check", "night", "reservation"]
    DIAGNOSTIC_KEYWORDS = [
        "reservation", "trip", "booking", "hotel", "check-in",
        "check-out", "confirmation", "night", "stay",
    ]

    def __init__(self, html_content: Union[str, BeautifulSoup, None] = None,
                 on_debug: Optional[DebugCallback] = None,
                 min_text: Optional[int] = None,
                 max_text: Optional[int] = None,
                 similarity_threshold: Optional[float] = None,
                 free_text_cap: Optional[int] = None,
                 brand_keywords: Optional[Sequence[str]] = None):
        self.logger = get_logger(classname="DiscoveryEngine")
        if isinstance(html_content, BeautifulSoup):
            self.soup = html_content
        else:
            self.soup = BeautifulSoup(html_content or "", "html.parser")

        self.on_debug = on_debug
        self.min_text = min_text if min_text is not None else config.MIN_REGION_TEXT
        self.max_text = max_text if max_text is not None else config.MAX_REGION_TEXT
        self.similarity_threshold = (similarity_threshold if similarity_threshold is not None
                                     else config.SIMILARITY_THRESHOLD)
        self.free_text_cap = free_text_cap if free_text_cap is not None else config.FREE_TEXT_RESULT_CAP
        brands = brand_keywords if brand_keywords is not None else config.BRAND_KEYWORDS
        self.domain_keywords = ["hotel"] + [brand.lower() for brand in brands]

    # -------------------------------------------------
    #                  METODOS PUBLICOS               #
    # -------------------------------------------------

    def strategies(self) -> List[Tuple[str, Callable[[], List[Tag]]]]:
        return [
            ("structural", self.find_by_structural_selectors),
            ("similarity", self.find_by_structural_similarity),
            ("free_text", self.find_by_free_text),
            ("tabular", self.find_by_tables),
        ]

    def find_candidate_regions(self) -> List[CandidateRegion]:
        for name, strategy in self.strategies():
            elements = strategy()
            if elements:
                self._debug(DebugLevel.SUCCESS, f"Estrategia '{name}' encontró {len(elements)} regiones candidatas.")
                return [
                    CandidateRegion(index=i, element=element, strategy=name, selector=css_path(element))
                    for i, element in enumerate(elements)
                ]
            self._debug(DebugLevel.INFO, f"Estrategia '{name}' sin resultados.")

        self.run_diagnostics()
        raise DataNotFoundError("No se encontraron reservas en la página.")

    def run_diagnostics(self) -> dict:
        """Barrido de diagnóstico: cuántos nodos de texto contienen cada palabra clave."""
        counts = {}
        for keyword in self.DIAGNOSTIC_KEYWORDS:
            pattern = re.compile(re.escape(keyword), re.IGNORECASE)
            counts[keyword] = len(self.soup.find_all(string=pattern))
            self._debug(DebugLevel.WARNING, f"Diagnóstico: '{keyword}' aparece en {counts[keyword]} elementos.")
        self._debug(DebugLevel.WARNING, f"Diagnóstico: {len(self.soup.find_all(True))} elementos en el documento.")
        return counts

    # -------------------------------------------------
    #                   ESTRATEGIAS                   #
    # -------------------------------------------------

    def find_by_structural_selectors(self) -> List[Tag]:
        for selector in self.STRUCTURAL_SELECTORS:
            matches = [
                element for element in self.soup.select(selector)
                if is_visible(element) and self._within_bounds(element)
            ]
            regions = self._collapse_nesting(matches)
            if regions:
                self.logger.debug(f"Selector '{selector}' -> {len(regions)} regiones")
                return regions
        return []

    def find_by_structural_similarity(self) -> List[Tag]:
        best: List[Tag] = []
        for parent in self.soup.find_all(True):
            children = [
                child for child in parent.find_all(self.CONTAINER_TAGS, recursive=False)
                if is_visible(child) and self._within_bounds(child) and self._has_stay_keyword(child)
            ]
            if len(children) < 2:
                continue
            for group in self._group_similar(children):
                if len(group) >= 2 and len(group) > len(best):
                    best = group
        return best

    def find_by_free_text(self) -> List[Tag]:
        matches = [
            element for element in self.soup.find_all(self.BLOCK_TAGS)
            if is_visible(element)
            and len(element.get_text(" ", strip=True)) <= self.max_text
            and self._has_domain_keyword(element)
            and self._has_stay_keyword(element)
        ]
        return self._innermost(matches)[:self.free_text_cap]

    def find_by_tables(self) -> List[Tag]:
        results: List[Tag] = []
        for structure in self.soup.find_all(["form", "table"]):
            if not (is_visible(structure) and self._is_trip_text(structure)):
                continue
            rows = [row for row in structure.find_all("tr") if self._is_trip_text(row)]
            if len(rows) >= 2:
                results.extend(rows)
            else:
                results.append(structure)

        results = self._outermost(results)
        if results:
            return results

        return [row for row in self.soup.find_all("tr") if is_visible(row) and self._is_trip_text(row)]

    # -------------------------------------------------
    #                 METODOS PRIVADOS                #
    # -------------------------------------------------

    def _debug(self, level: DebugLevel, message: str) -> None:
        if self.on_debug:
            self.on_debug(level, message)
        else:
            self.logger.debug(message)

    def _within_bounds(self, element: Tag) -> bool:
        length = len(element.get_text(" ", strip=True))
        return self.min_text <= length <= self.max_text

    def _has_domain_keyword(self, element: Tag) -> bool:
        text = element.get_text(" ", strip=True).lower()
        return any(keyword in text for keyword in self.domain_keywords)

    def _has_stay_keyword(self, element: Tag) -> bool:
        text = element.get_text(" ", strip=True).lower()
        return any(keyword in text for keyword in self.STAY_KEYWORDS)

    def _is_trip_text(self, element: Tag) -> bool:
        return self._has_domain_keyword(element) and self._has_stay_keyword(element)

    def _group_similar(self, elements: List[Tag]) -> List[List[Tag]]:
        groups: List[List[Tag]] = []
        for element in elements:
            for group in groups:
                if all(structural_similarity(element, member) > self.similarity_threshold for member in group):
                    group.append(element)
                    break
            else:
                groups.append([element])
        return groups

    @staticmethod
    def _innermost(elements: List[Tag]) -> List[Tag]:
        ids = {id(element) for element in elements}
        return [
            element for element in elements
            if not any(id(descendant) in ids for descendant in element.find_all(True))
        ]

    @staticmethod
    def _outermost(elements: List[Tag]) -> List[Tag]:
        ids = {id(element) for element in elements}
        return [
            element for element in elements
            if not any(id(parent) in ids for parent in element.parents)
        ]

    @classmethod
    def _collapse_nesting(cls, elements: List[Tag]) -> List[Tag]:
        """Descarta envoltorios que contienen 2+ coincidencias y se queda con las más externas."""
        ids = {id(element) for element in elements}
        singles = [
            element for element in elements
            if sum(1 for descendant in element.find_all(True) if id(descendant) in ids) < 2
        ]
        return cls._outermost(singles)
