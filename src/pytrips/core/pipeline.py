# src/pytrips/core/pipeline.py
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from pytrips.core.models import ReservationRecord
from pytrips.utils.logger import get_logger
from pytrips.utils.normalizations import compute_nights, parse_iso_date, per_night_amount


class RecordPipeline:
    """
    Normaliza y filtra los registros crudos:
    campos derivados -> validez -> de-duplicación -> solo futuras.
    El orden de salida es el orden de descubrimiento.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self.logger = get_logger(classname="RecordPipeline")
        self._today = today or date.today

    @property
    def today(self) -> date:
        return self._today()

    def finalize(self, record: ReservationRecord) -> ReservationRecord:
        """Calcula noches y, si falta, la tarifa por noche desde el total."""
        updates = {}
        nights = compute_nights(record.check_in_date, record.check_out_date)
        if nights is not None:
            updates["nights"] = nights

        if not record.price_per_night:
            per_night = per_night_amount(record.total_cost, nights)
            if per_night:
                updates["price_per_night"] = per_night

        return record.model_copy(update=updates) if updates else record

    @staticmethod
    def is_valid(record: Optional[ReservationRecord]) -> bool:
        return bool(record is not None and record.hotel_name and record.hotel_name.strip())

    def is_upcoming(self, record: ReservationRecord) -> bool:
        """Sin fecha de entrada interpretable se incluye; si no, entrada >= hoy."""
        check_in = parse_iso_date(record.check_in_date)
        if check_in is None:
            return True
        return check_in >= self.today

    def filter_upcoming(self, records: Iterable[ReservationRecord]) -> List[ReservationRecord]:
        return [record for record in records if self.is_upcoming(record)]

    @staticmethod
    def dedupe_key(record: ReservationRecord) -> Tuple:
        if record.confirmation_number:
            return ("confirmation", record.confirmation_number.upper())
        return ("stay", (record.hotel_name or "").lower(), record.check_in_date, record.check_out_date)

    def deduplicate(self, records: Iterable[ReservationRecord]) -> List[ReservationRecord]:
        seen = set()
        unique = []
        for record in records:
            key = self.dedupe_key(record)
            if key in seen:
                self.logger.debug(f"Registro duplicado descartado: {key}")
                continue
            seen.add(key)
            unique.append(record)
        return unique

    def process(self, records: Iterable[ReservationRecord]) -> List[ReservationRecord]:
        finalized = [self.finalize(record) for record in records if self.is_valid(record)]
        unique = self.deduplicate(finalized)
        upcoming = self.filter_upcoming(unique)
        self.logger.info(
            f"Pipeline: {len(finalized)} válidos, {len(unique)} únicos, {len(upcoming)} próximos."
        )
        return upcoming

    @staticmethod
    def sort_by_check_in(records: Iterable[ReservationRecord]) -> List[ReservationRecord]:
        """Orden del consumidor: por fecha de entrada ascendente, sin fecha primero."""
        return sorted(records, key=lambda record: parse_iso_date(record.check_in_date) or date.min)
