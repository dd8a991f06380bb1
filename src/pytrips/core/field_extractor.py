# src/pytrips/core/field_extractor.py
from typing import Dict, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup

from pytrips.config.settings import config
from pytrips.core import field_rules
from pytrips.core.field_rules import FieldRule, GENERIC_DATE_RE
from pytrips.core.models import CandidateRegion, ReservationRecord
from pytrips.core.strategies import (
    Scope, Strategy, category_strategy, first_non_empty, pattern_strategy, scope_text, selector_strategy
)
from pytrips.exceptions import ParsingError
from pytrips.utils.logger import get_logger
from pytrips.utils.normalizations import normalize_date


def build_chain(rule: FieldRule) -> List[Strategy]:
    """Cadena estructural -> texto libre -> categorías para una regla."""
    chain: List[Strategy] = []
    if rule.selectors:
        chain.append(selector_strategy(*rule.selectors, postprocess=rule.clean_selector))
    if rule.patterns:
        chain.append(pattern_strategy(rule.patterns, postprocess=rule.clean_pattern))
    if rule.categories:
        chain.append(category_strategy(rule.categories))
    return chain


class ReservationFieldExtractor:
    """
    Extrae el esquema fijo de campos de una región (vista de lista) o de la
    página completa (vista de detalle).
    """

    DETAIL_CONTAINER_SELECTORS = ["main", '[role="main"]', "#main-content", "body"]

    def __init__(self, brand_keywords: Optional[Sequence[str]] = None):
        self.logger = get_logger(classname="ReservationFieldExtractor")
        brands = brand_keywords if brand_keywords is not None else config.BRAND_KEYWORDS

        hotel_rule = FieldRule(
            name="hotel_name",
            selectors=field_rules.HOTEL_NAME.selectors,
            patterns=field_rules.hotel_name_patterns(brands),
        )

        self.basic_chains: Dict[str, List[Strategy]] = {
            rule.name: build_chain(rule) for rule in [hotel_rule] + field_rules.BASIC_RULES
        }
        self.detail_chains: Dict[str, List[Strategy]] = {}
        for rule in [hotel_rule] + field_rules.DETAIL_RULES:
            overrides = field_rules.DETAIL_SELECTOR_OVERRIDES.get(rule.name)
            self.detail_chains[rule.name] = build_chain(rule.with_selectors(*overrides) if overrides else rule)

        self.check_in_chain = build_chain(field_rules.CHECK_IN)
        self.check_out_chain = build_chain(field_rules.CHECK_OUT)

    # -------------------------------------------------
    #                  METODOS PUBLICOS               #
    # -------------------------------------------------

    def extract_field(self, name: str, scope: Scope, detailed: bool = False) -> Optional[str]:
        chains = self.detail_chains if detailed else self.basic_chains
        if name not in chains:
            raise KeyError(f"Campo desconocido: {name}")
        return first_non_empty(chains[name], scope)

    def extract_dates(self, scope: Scope) -> Tuple[Optional[str], Optional[str]]:
        """
        Fechas etiquetadas primero; si falta alguna, el patrón genérico
        'Mes Día, Año' con al menos dos coincidencias (entrada, salida).
        """
        check_in = first_non_empty(self.check_in_chain, scope)
        check_out = first_non_empty(self.check_out_chain, scope)

        if not check_in or not check_out:
            matches = GENERIC_DATE_RE.findall(scope_text(scope))
            if len(matches) >= 2:
                check_in, check_out = matches[0], matches[1]

        return normalize_date(check_in), normalize_date(check_out)

    def extract_fields(self, region: Union[CandidateRegion, Scope], source: Optional[str] = None) -> ReservationRecord:
        """Extracción básica (fila/tarjeta de la lista) acotada a la región."""
        scope = region.element if isinstance(region, CandidateRegion) else region
        try:
            values = {name: first_non_empty(chain, scope) for name, chain in self.basic_chains.items()}
            values["check_in_date"], values["check_out_date"] = self.extract_dates(scope)
        except (AttributeError, TypeError, ValueError) as e:
            raise ParsingError(f"Error extrayendo campos de la región: {e}")

        return ReservationRecord(**values, source=source, detailed_page=False)

    def extract_detailed(self, html_content: Union[str, BeautifulSoup], source: Optional[str] = None) -> ReservationRecord:
        """Extracción de la vista de detalle: búsquedas a nivel de página y superconjunto de campos."""
        soup = html_content if isinstance(html_content, BeautifulSoup) else BeautifulSoup(html_content, "html.parser")
        scope = self._detail_scope(soup)
        try:
            values = {name: first_non_empty(chain, scope) for name, chain in self.detail_chains.items()}
            values["check_in_date"], values["check_out_date"] = self.extract_dates(scope)
        except (AttributeError, TypeError, ValueError) as e:
            raise ParsingError(f"Error extrayendo campos del detalle: {e}")

        return ReservationRecord(**values, source=source, detailed_page=True)

    @staticmethod
    def merge(detailed: ReservationRecord, basic: Optional[ReservationRecord]) -> ReservationRecord:
        """El detalle tiene prioridad; los huecos se completan con la extracción básica."""
        if basic is None:
            return detailed
        merged = basic.model_dump()
        for key, value in detailed.model_dump().items():
            if value is not None:
                merged[key] = value
        merged["detailed_page"] = True
        return ReservationRecord(**merged)

    # -------------------------------------------------
    #                 METODOS PRIVADOS                #
    # -------------------------------------------------

    def _detail_scope(self, soup: BeautifulSoup) -> Scope:
        for selector in self.DETAIL_CONTAINER_SELECTORS:
            container = soup.select_one(selector)
            if container is not None and container.get_text(strip=True):
                return container
        return soup
