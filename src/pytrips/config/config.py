import os
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Configuración base de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # -----------------------
    # Flags generales
    # -----------------------
    DEBUG: bool = False
    VERBOSE: bool = False
    HEADLESS: bool = False
    SAVE_HTML: bool = False
    SAVE_JSON: bool = False
    FORCE_COLOR: bool = False
    DRILL_DOWN: bool = True

    LOG_LEVEL: Optional[str] = "INFO"
    LOG_BACKUP_COUNT: int = 10

    # -----------------------
    # Paths
    # -----------------------
    BASE_DIR: Path = Path(os.getcwd())

    # -----------------------
    # Sitio / negocio
    # -----------------------
    BASE_URL: str = "https://www.marriott.com"
    RESERVATIONS_PATH: str = "/loyalty/findReservationList.mi"
    BRAND_KEYWORDS: List[str] = ["marriott", "sheraton", "westin", "ritz-carlton", "courtyard"]

    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )

    # -----------------------
    # Navegador
    # -----------------------
    USER_DATA_DIR: Optional[Path] = None
    CDP_URL: Optional[str] = None
    PAGE_LOAD_TIMEOUT: int = 30000  # ms

    # -----------------------
    # Esperas (segundos)
    # -----------------------
    POLL_INTERVAL: float = 0.5
    LIST_CONTENT_TIMEOUT: float = 10.0
    PANEL_SETTLE_DELAY: float = 1.0
    PANEL_EXPAND_TIMEOUT: float = 5.0
    DETAIL_ACTION_TIMEOUT: float = 5.0
    DETAIL_NAVIGATION_TIMEOUT: float = 10.0
    PAGE_LOAD_SETTLE: float = 1.0

    # -----------------------
    # Heurísticas
    # -----------------------
    MIN_REGION_TEXT: int = 100
    MAX_REGION_TEXT: int = 2000
    SIMILARITY_THRESHOLD: float = 0.3
    FREE_TEXT_RESULT_CAP: int = 10

    # -----------------------
    # Consumidor
    # -----------------------
    STORAGE_KEY: str = "reservations"
    DEBUG_BUFFER_SIZE: int = 100

    @property
    def reservations_url(self) -> str:
        return f"{self.BASE_URL.rstrip('/')}{self.RESERVATIONS_PATH}"

    # -----------------------
    # Directorios de trabajo (bajo BASE_DIR, creados bajo demanda)
    # -----------------------
    def _work_dir(self, name: str) -> Path:
        path = self.BASE_DIR / name
        path.mkdir(parents=True, exist_ok=True)
        return path

    def get_log_path(self) -> Path:
        return self._work_dir("logs")

    def get_html_path(self) -> Path:
        return self._work_dir("html")

    def get_data_path(self, filename: str) -> Path:
        return self._work_dir("data") / filename

    def get_storage_path(self) -> Path:
        return self._work_dir("storage")

    def get_user_data_dir(self) -> Path:
        """Perfil persistente del navegador (conserva la sesión de Marriott)."""
        if self.USER_DATA_DIR:
            return Path(self.USER_DATA_DIR)
        return self._work_dir("browser_profile")
