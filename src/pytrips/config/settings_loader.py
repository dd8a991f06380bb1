# src/pytrips/config/settings_loader.py
import importlib
import importlib.util
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Tuple


class SettingsLoader:
    """
    Overrides del proyecto en orden de prioridad creciente:

        PYTRIPS_SETTINGS_MODULE  (módulo importable)
        settings.py              (CWD)
        settings_<PYTRIPS_ENV>.py (CWD)

    Solo se toman nombres en MAYÚSCULAS que existan como campo de Config.
    """

    SETTINGS_MODULE_ENV = "PYTRIPS_SETTINGS_MODULE"
    ENV_NAME = "PYTRIPS_ENV"
    DEFAULT_FILENAME = "settings.py"

    @classmethod
    def sources(cls, base_dir: Optional[Path] = None) -> List[Tuple[str, Optional[ModuleType]]]:
        base_dir = base_dir or Path(os.getcwd())
        found: List[Tuple[str, Optional[ModuleType]]] = []

        module_path = os.getenv(cls.SETTINGS_MODULE_ENV)
        if module_path:
            found.append((module_path, importlib.import_module(module_path)))

        filenames = [cls.DEFAULT_FILENAME]
        env = os.getenv(cls.ENV_NAME)
        if env:
            filenames.append(f"settings_{env}.py")

        for filename in filenames:
            path = base_dir / filename
            if path.is_file():
                found.append((str(path), cls._exec_file(path)))
        return found

    @classmethod
    def load(cls, known_keys: Iterable[str] = (), base_dir: Optional[Path] = None) -> Dict[str, Any]:
        known = set(known_keys)
        data: Dict[str, Any] = {}
        for _, module in cls.sources(base_dir):
            data.update(cls._settings_from(module, known))
        return data

    @staticmethod
    def _exec_file(path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(f"pytrips_local_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    @staticmethod
    def _settings_from(module: ModuleType, known: set) -> Dict[str, Any]:
        return {
            key: value
            for key, value in vars(module).items()
            if key.isupper() and (not known or key in known)
        }
