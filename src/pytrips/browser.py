# src/pytrips/browser.py
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlsplit

from playwright.sync_api import Browser, BrowserContext, Error as PlaywrightError, Page, sync_playwright

from pytrips.config.settings import config
from pytrips.exceptions import NetworkError
from pytrips.utils.logger import get_logger


class TripBrowser:
    """
    Maneja el ciclo de vida de Playwright.

    - Con CDP_URL se adjunta a un Chrome ya abierto (sesión del usuario).
    - Sin CDP_URL usa un perfil persistente para conservar la sesión entre ejecuciones.
    """

    def __init__(self, headless: Optional[bool] = None,
                 user_data_dir: Optional[Union[str, Path]] = None,
                 cdp_url: Optional[str] = None):
        self.logger = get_logger(classname='TripBrowser')

        self.headless = headless if headless is not None else config.HEADLESS
        self.user_data_dir = Path(user_data_dir) if user_data_dir else None
        self.cdp_url = cdp_url or config.CDP_URL

        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def start(self) -> Page:
        """Inicializa los recursos de Playwright si no están activos y devuelve la página."""
        if self.page:
            return self.page

        self.logger.info("Iniciando Playwright...")
        try:
            self.playwright = sync_playwright().start()

            if self.cdp_url:
                self.logger.info(f"Conectando al navegador vía CDP: {self.cdp_url}")
                self.browser = self.playwright.chromium.connect_over_cdp(self.cdp_url)
                self.context = self.browser.contexts[0] if self.browser.contexts else self.browser.new_context(
                    user_agent=config.USER_AGENT
                )
            else:
                profile_dir = self.user_data_dir or config.get_user_data_dir()
                self.logger.info(f"Usando perfil persistente en: {profile_dir}")
                self.context = self.playwright.chromium.launch_persistent_context(
                    user_data_dir=str(profile_dir),
                    headless=self.headless,
                    user_agent=config.USER_AGENT,
                    viewport={'width': 1920, 'height': 1080}
                )

            self.page = self._find_site_page() or self.context.new_page()
        except PlaywrightError as e:
            self.close()
            raise NetworkError(f"No se pudo iniciar el navegador: {e}")

        return self.page

    def _find_site_page(self) -> Optional[Page]:
        """Reutiliza una pestaña ya abierta en el sitio, si existe."""
        domain = urlsplit(config.BASE_URL).netloc
        pages = list(self.context.pages) if self.context else []
        for page in pages:
            if domain and domain in (page.url or ""):
                return page
        return pages[0] if pages else None

    def close(self):
        """Cierra todos los recursos."""
        if self.context and not self.cdp_url:
            self.context.close()
        if self.browser:
            self.browser.close()
        if self.playwright:
            self.playwright.stop()

        self.page = None
        self.context = None
        self.browser = None
        self.playwright = None
        self.logger.info("Recursos del navegador cerrados.")

    def __enter__(self) -> Page:
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
