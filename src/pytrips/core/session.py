# src/pytrips/core/session.py
import re
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Comment, Tag

from pytrips.core.strategies import element_text, is_visible
from pytrips.utils.logger import get_logger


class SessionChecker:
    """
    Heurística de sesión iniciada sobre una captura del documento.

    No es un control de seguridad: ante ausencia de evidencia negativa
    se asume sesión iniciada.
    """

    ACCOUNT_SELECTORS = [
        '[data-testid="account-menu"]',
        '.account-menu',
        '.user-profile',
        '.my-account',
        '[aria-label*="Account"]',
        '.sign-out',
        '.logout',
    ]

    LOGGED_IN_PATTERNS = [
        re.compile(r"welcome back", re.IGNORECASE),
        re.compile(r"signed in as", re.IGNORECASE),
        re.compile(r"\bsign out\b", re.IGNORECASE),
        re.compile(r"\blog out\b", re.IGNORECASE),
        re.compile(r"\bpoints\s*:\s*\d[\d,]*", re.IGNORECASE),
    ]

    SIGN_IN_SELECTORS = [
        '.sign-in',
        '.login-button',
        '[data-testid*="sign-in"]',
        '[data-testid*="signin"]',
        'a[href*="signIn"]',
        'a[href*="sign-in"]',
        'a[href*="login"]',
    ]

    SIGN_IN_TEXT_RE = re.compile(r"^(?:sign\s*in|log\s*in|login|sign in or join)$", re.IGNORECASE)

    NON_TEXT_TAGS = ["script", "style", "noscript", "template"]

    def __init__(self, html_content: Union[str, BeautifulSoup, None] = None):
        self.logger = get_logger(classname="SessionChecker")
        if isinstance(html_content, BeautifulSoup):
            self.soup = html_content
        else:
            self.soup = BeautifulSoup(html_content or "", "html.parser")

    def find_account_indicator(self) -> Optional[str]:
        """Selector estructural de menú de cuenta presente, si lo hay."""
        for selector in self.ACCOUNT_SELECTORS:
            if self.soup.select_one(selector) is not None:
                return selector
        return None

    def page_text(self) -> str:
        """Texto legible del documento, sin scripts, estilos ni comentarios."""
        parts = []
        for string in self.soup.find_all(string=True):
            if isinstance(string, Comment) or string.find_parent(self.NON_TEXT_TAGS) is not None:
                continue
            text = string.strip()
            if text:
                parts.append(text)
        return " ".join(parts)

    def find_login_phrase(self) -> Optional[str]:
        text = self.page_text()
        for pattern in self.LOGGED_IN_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(0)
        return None

    def find_sign_in_affordances(self) -> List[Tag]:
        """Elementos accionables y visibles de 'Sign In' / 'Login'."""
        found: List[Tag] = []
        for selector in self.SIGN_IN_SELECTORS:
            for element in self.soup.select(selector):
                if is_visible(element) and element not in found:
                    found.append(element)

        for element in self.soup.find_all(["a", "button"]):
            if element in found or not is_visible(element):
                continue
            if self.SIGN_IN_TEXT_RE.match(element_text(element)):
                found.append(element)
        return found

    def is_authenticated(self) -> bool:
        indicator = self.find_account_indicator()
        if indicator:
            self.logger.debug(f"Sesión detectada por selector: {indicator}")
            return True

        phrase = self.find_login_phrase()
        if phrase:
            self.logger.debug(f"Sesión detectada por texto: '{phrase}'")
            return True

        affordances = self.find_sign_in_affordances()
        if affordances:
            self.logger.warning(f"⚠️ Se encontraron {len(affordances)} accesos de 'Sign In' y ningún indicador de sesión.")
            return False

        # Señal débil: sin evidencia negativa asumimos sesión iniciada
        self.logger.debug("Sin indicadores de sesión ni accesos de login; se asume sesión iniciada.")
        return True
