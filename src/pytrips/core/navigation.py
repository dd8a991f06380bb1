# src/pytrips/core/navigation.py
import re
import time
from typing import Callable, Optional
from urllib.parse import urlsplit

from playwright.sync_api import Error as PlaywrightError, Locator, Page, TimeoutError as PlaywrightTimeoutError

from pytrips.config.settings import config
from pytrips.core.enums import NavigationState
from pytrips.core.models import CandidateRegion
from pytrips.exceptions import NetworkError
from pytrips.utils.logger import get_logger
from pytrips.utils.polling import PollResult, attempts_for, poll_until


def _strip_url(url: str) -> str:
    parts = urlsplit(url or "")
    return f"{parts.scheme}://{parts.netloc}{parts.path}".rstrip("/").lower()


class NavigationController:
    """
    Máquina de estados sobre la página viva:

        UNKNOWN -> LIST_PAGE -> PANEL_COLLAPSED -> PANEL_EXPANDED -> DETAIL_PAGE -> LIST_PAGE

    Cada acción simulada (click, goto, back) va seguida de una espera acotada.
    Un timeout degrada (se devuelve False) en vez de abortar la ejecución.
    """

    LIST_CONTENT_SELECTORS = [
        '.reservation',
        '.reservation-card',
        '.trip-card',
        '.booking-card',
        '[data-testid*="reservation"]',
        '[data-testid*="trip"]',
    ]

    EXPANDED_CLASSES = ("expanded", "is-expanded", "open", "is-open", "active", "show")

    TOGGLE_SELECTORS = [
        '[aria-expanded="false"]',
        'button[aria-controls]',
        '[class*="toggle"]',
        '[class*="expand"]',
        'summary',
        'button',
    ]

    DETAIL_ACTION_SELECTORS = [
        'a[href*="modify"]',
        'a[href*="reservationDetail"]',
        '[data-testid*="view-modify"]',
        '[data-testid*="modify"]',
    ]

    DETAIL_ACTION_TEXT = re.compile(
        r"view\s*/\s*modify|view or modify|view details|view reservation|modify (?:reservation|stay)|manage (?:reservation|stay)",
        re.IGNORECASE,
    )

    def __init__(self, page: Page,
                 reservations_url: Optional[str] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.logger = get_logger(classname="NavigationController")
        self.page = page
        self.reservations_url = reservations_url or config.reservations_url
        self.sleep = sleep or time.sleep
        self.state = NavigationState.UNKNOWN

        self.poll_interval = config.POLL_INTERVAL
        self.page_load_timeout = config.PAGE_LOAD_TIMEOUT
        # consultas sobre regiones que ya pueden no existir: sin auto-espera larga
        self.element_timeout = int(self.poll_interval * 1000)

    # -------------------------------------------------
    #                     LISTA                       #
    # -------------------------------------------------

    @property
    def current_url(self) -> str:
        return self.page.url or ""

    def has_document(self) -> bool:
        return bool(self.current_url) and not self.current_url.startswith(("about:", "chrome:", "data:"))

    def is_at_list_page(self) -> bool:
        return _strip_url(self.current_url).startswith(_strip_url(self.reservations_url))

    def has_list_content(self) -> bool:
        try:
            return any(self.page.query_selector(selector) for selector in self.LIST_CONTENT_SELECTORS)
        except PlaywrightError as e:
            self.logger.debug(f"Error consultando contenido de la lista: {e}")
            return False

    def wait_for_list_content(self) -> PollResult:
        return self._poll(self.has_list_content, config.LIST_CONTENT_TIMEOUT)

    def go_to_list_page(self) -> bool:
        """Lleva la página a la lista de reservas y espera a que aparezca contenido."""
        if self.is_at_list_page():
            self.logger.info("Ya estamos en la lista de reservas, esperando contenido...")
        else:
            self.logger.info(f"Navegando a la lista de reservas: {self.reservations_url}")
            try:
                self.page.goto(self.reservations_url, wait_until="domcontentloaded", timeout=self.page_load_timeout)
            except PlaywrightTimeoutError:
                self.logger.warning("Timeout navegando a la lista de reservas, se continúa con la página actual.")
            except PlaywrightError as e:
                raise NetworkError(f"Error de Playwright navegando a la lista de reservas: {e}")
            self.wait_for_page_load()

        result = self.wait_for_list_content()
        if not result:
            self.logger.warning("El contenido de la lista no apareció a tiempo, se continúa con el documento actual.")
        self.state = NavigationState.LIST_PAGE
        return result.found

    def wait_for_page_load(self) -> None:
        try:
            self.page.wait_for_load_state("load", timeout=self.page_load_timeout)
        except PlaywrightTimeoutError:
            self.logger.warning("Timeout esperando la carga completa de la página.")
        self.sleep(config.PAGE_LOAD_SETTLE)

    def snapshot(self) -> str:
        """HTML actual del documento vivo."""
        try:
            return self.page.content()
        except PlaywrightError as e:
            raise NetworkError(f"No se pudo capturar el documento: {e}")

    # -------------------------------------------------
    #                    PANELES                      #
    # -------------------------------------------------

    def region_locator(self, region: CandidateRegion) -> Locator:
        return self.page.locator(region.selector).first

    def capture_region_html(self, region: CandidateRegion) -> Optional[str]:
        try:
            return self.region_locator(region).evaluate("el => el.outerHTML", timeout=self.element_timeout)
        except PlaywrightError as e:
            self.logger.debug(f"No se pudo capturar la región {region.index}: {e}")
            return None

    def is_expanded(self, region: CandidateRegion) -> bool:
        locator = self.region_locator(region)
        try:
            if locator.get_attribute("aria-expanded", timeout=self.element_timeout) == "true":
                return True
            classes = (locator.get_attribute("class", timeout=self.element_timeout) or "").lower().split()
            if any(name in classes for name in self.EXPANDED_CLASSES):
                return True
            if locator.locator('[aria-expanded="true"]').count() > 0:
                return True
        except PlaywrightError as e:
            self.logger.debug(f"Error evaluando expansión de la región {region.index}: {e}")
            return False
        return self.find_detail_action(locator) is not None

    def expand_panel(self, region: CandidateRegion) -> bool:
        """Expande el panel de la reserva si hace falta. False si no se pudo (se degrada)."""
        self.state = NavigationState.PANEL_COLLAPSED
        if self.is_expanded(region):
            self.state = NavigationState.PANEL_EXPANDED
            return True

        toggle = self._find_toggle(self.region_locator(region))
        if toggle is None:
            self.logger.warning(f"Región {region.index}: no se encontró control para expandir.")
            return False

        try:
            toggle.click(timeout=self.page_load_timeout)
        except PlaywrightError as e:
            self.logger.warning(f"Región {region.index}: click de expansión falló: {e}")
            return False

        self.sleep(config.PANEL_SETTLE_DELAY)
        result = self._poll(lambda: self.is_expanded(region), config.PANEL_EXPAND_TIMEOUT)
        if not result:
            self.logger.warning(f"Región {region.index}: el panel no se expandió a tiempo.")
            return False

        self.state = NavigationState.PANEL_EXPANDED
        return True

    # -------------------------------------------------
    #                    DETALLE                      #
    # -------------------------------------------------

    def find_detail_action(self, scope: Locator) -> Optional[Locator]:
        """Acción 'View/Modify' dentro de la región: selectores y luego texto."""
        try:
            for selector in self.DETAIL_ACTION_SELECTORS:
                candidate = scope.locator(selector)
                if candidate.count() > 0:
                    return candidate.first

            by_text = scope.locator("a, button").filter(has_text=self.DETAIL_ACTION_TEXT)
            if by_text.count() > 0:
                return by_text.first
        except PlaywrightError as e:
            self.logger.debug(f"Error buscando acción de detalle: {e}")
        return None

    def open_detail(self, region: CandidateRegion) -> bool:
        """Activa 'View/Modify' y espera el cambio de URL. False si no se llegó al detalle."""
        locator = self.region_locator(region)
        action = self._poll(lambda: self.find_detail_action(locator), config.DETAIL_ACTION_TIMEOUT)
        if not action:
            self.logger.warning(f"Región {region.index}: no se encontró la acción de detalle.")
            return False

        url_before = self.current_url
        try:
            action.value.click(timeout=self.page_load_timeout)
        except PlaywrightError as e:
            self.logger.warning(f"Región {region.index}: click en la acción de detalle falló: {e}")
            return False

        changed = self._poll(lambda: self.current_url != url_before, config.DETAIL_NAVIGATION_TIMEOUT)
        if not changed:
            self.logger.warning(f"Región {region.index}: la URL no cambió tras abrir el detalle.")
            return False

        self.wait_for_page_load()
        self.state = NavigationState.DETAIL_PAGE
        self.logger.info(f"Detalle abierto: {self.current_url}")
        return True

    def return_to_list(self) -> bool:
        """Vuelve a la lista (historial del navegador o navegación directa)."""
        try:
            self.page.go_back(wait_until="domcontentloaded", timeout=self.page_load_timeout)
        except PlaywrightError as e:
            self.logger.warning(f"No se pudo volver atrás en el historial: {e}")
        self.wait_for_page_load()
        return self.go_to_list_page()

    # -------------------------------------------------
    #                 METODOS PRIVADOS                #
    # -------------------------------------------------

    def _poll(self, predicate: Callable, timeout: float) -> PollResult:
        return poll_until(
            predicate,
            interval=self.poll_interval,
            max_attempts=attempts_for(timeout, self.poll_interval),
            sleep=self.sleep,
        )

    def _find_toggle(self, locator: Locator) -> Optional[Locator]:
        try:
            if locator.get_attribute("aria-expanded", timeout=self.element_timeout) == "false":
                return locator
            for selector in self.TOGGLE_SELECTORS:
                candidate = locator.locator(selector)
                if candidate.count() > 0:
                    return candidate.first
        except PlaywrightError as e:
            self.logger.debug(f"Error buscando control de expansión: {e}")
        return None
