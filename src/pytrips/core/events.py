# src/pytrips/core/events.py
"""
Canal de eventos del extractor (observer explícito).

Entrega best-effort y sin back-pressure: si un listener falla se registra
en el log y el resto sigue recibiendo el evento.
"""
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from pytrips.config.settings import config
from pytrips.core.enums import DebugLevel
from pytrips.core.models import DebugEvent, ProgressEvent, ReservationRecord
from pytrips.utils.logger import get_logger

PROGRESS = "progress"
DEBUG = "debug"
COMPLETE = "extractionComplete"
ERROR = "extractionError"

EVENT_NAMES = (PROGRESS, DEBUG, COMPLETE, ERROR)


class ExtractionEvents:

    def __init__(self):
        self.logger = get_logger(classname="ExtractionEvents")
        self._listeners: Dict[str, List[Callable]] = {name: [] for name in EVENT_NAMES}
        self._last_percent = 0

    def subscribe(self, event: str, callback: Callable) -> Callable[[], None]:
        """Registra un listener y devuelve una función para darlo de baja."""
        if event not in self._listeners:
            raise ValueError(f"Evento desconocido: {event}")
        self._listeners[event].append(callback)

        def unsubscribe():
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    def reset(self) -> None:
        """Nueva ejecución: el progreso vuelve a 0."""
        self._last_percent = 0

    def progress(self, percent: int, message: str) -> ProgressEvent:
        # Progreso monótono no decreciente dentro de una ejecución
        percent = max(self._last_percent, min(100, max(0, int(percent))))
        self._last_percent = percent
        event = ProgressEvent(percent=percent, message=message)
        self.logger.info(f"[{percent:3d}%] {message}")
        self._dispatch(PROGRESS, event)
        return event

    def debug(self, level: DebugLevel, message: str) -> DebugEvent:
        level = DebugLevel(level)
        event = DebugEvent(level=level, message=message)
        log_method = getattr(self.logger, DebugLevel.to_logging()[level])
        log_method(message)
        self._dispatch(DEBUG, event)
        return event

    def complete(self, records: List[ReservationRecord]) -> None:
        self._dispatch(COMPLETE, records)

    def error(self, message: str) -> None:
        self._dispatch(ERROR, message)

    def _dispatch(self, event: str, payload) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(payload)
            except Exception as e:
                self.logger.warning(f"Listener de '{event}' falló: {e}")


class DebugBuffer:
    """Buffer del consumidor: conserva solo las N entradas de debug más recientes."""

    def __init__(self, maxlen: Optional[int] = None):
        self.entries: Deque[DebugEvent] = deque(maxlen=maxlen or config.DEBUG_BUFFER_SIZE)

    def __call__(self, event: DebugEvent) -> None:
        self.entries.append(event)

    def __len__(self) -> int:
        return len(self.entries)

    def clear(self) -> None:
        self.entries.clear()

    def lines(self) -> List[str]:
        return [f"[{entry.timestamp}] {entry.level.value.upper()}: {entry.message}" for entry in self.entries]
