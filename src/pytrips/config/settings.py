# src/pytrips/config/settings.py
from typing import Any, Optional

from .config import Config
from .settings_loader import SettingsLoader


class Settings:
    """
    Acceso perezoso a la configuración.

    Config (.env + defaults) -> overrides del proyecto -> configure() en runtime.
    """

    def __init__(self):
        self._config_object: Optional[Config] = None
        self._runtime_overrides: dict = {}

    def _get_config(self) -> Config:
        if self._config_object is None:
            values = Config().model_dump()
            values.update(SettingsLoader.load(known_keys=Config.model_fields))
            values.update(self._runtime_overrides)
            self._config_object = Config(**values)
        return self._config_object

    def configure(self, **overrides: Any) -> None:
        """Override en runtime; rechaza claves que Config no conoce."""
        unknown = sorted(set(overrides) - set(Config.model_fields))
        if unknown:
            raise AttributeError(f"Settings desconocidos: {', '.join(unknown)}")
        self._runtime_overrides.update(overrides)
        self._config_object = None

    def reset(self) -> None:
        """Descarta overrides de runtime y vuelve a leer el entorno."""
        self._runtime_overrides.clear()
        self._config_object = None

    def dump(self) -> dict:
        return self._get_config().model_dump(mode="json")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._get_config(), name)


settings = Settings()
config = settings
