# src/pytrips/services/storage.py
import json
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import diskcache as dc

from pytrips.config.settings import config
from pytrips.core.models import ReservationRecord
from pytrips.utils.logger import get_logger


class ReservationStore:
    """
    Almacenamiento clave-valor de la lista final de reservas.
    El extractor solo escribe; la lectura es para el consumidor (CLI / UI).
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None, key: Optional[str] = None):
        self.logger = get_logger(classname='ReservationStore')
        self.directory = Path(directory) if directory else config.get_storage_path()
        self.key = key or config.STORAGE_KEY
        self.cache = dc.Cache(str(self.directory))

    def save(self, records: List[ReservationRecord]) -> int:
        self.cache.set(self.key, [record.to_message() for record in records])
        self.logger.info(f"💾 {len(records)} reservas guardadas (key='{self.key}').")
        return len(records)

    def load(self) -> List[ReservationRecord]:
        stored = self.cache.get(self.key, default=[]) or []
        return [ReservationRecord.model_validate(item) for item in stored]

    def clear(self) -> None:
        self.cache.delete(self.key)
        self.logger.info("Datos de reservas eliminados.")

    def export_json(self, output: Optional[Union[str, Path]] = None) -> Path:
        """Exporta las reservas guardadas a JSON (marriott-reservations-YYYY-MM-DD.json)."""
        path = Path(output) if output else config.BASE_DIR / f"marriott-reservations-{date.today().isoformat()}.json"
        data = [record.to_message() for record in self.load()]
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        self.logger.info(f"Datos exportados en: {path}")
        return path

    def close(self) -> None:
        self.cache.close()
