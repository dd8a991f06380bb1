# src/pytrips/services/extraction_service.py
import threading
from typing import List, Optional, Tuple

from pytrips.browser import TripBrowser
from pytrips.config.settings import config
from pytrips.core.discovery import DiscoveryEngine
from pytrips.core.enums import DebugLevel, RunState
from pytrips.core.events import ExtractionEvents
from pytrips.core.field_extractor import ReservationFieldExtractor
from pytrips.core.models import CandidateRegion, ExtractionAck, ReservationRecord
from pytrips.core.navigation import NavigationController
from pytrips.core.pipeline import RecordPipeline
from pytrips.core.session import SessionChecker
from pytrips.exceptions import AuthenticationError, TripExtractorError
from pytrips.services.storage import ReservationStore
from pytrips.utils.dev import save_html_debug, save_json
from pytrips.utils.logger import get_logger, log_execution


class ReservationExtractionService:
    """
    Controlador de una ejecución de extracción.

    Sesión -> lista de reservas -> descubrimiento -> (detalle opcional) ->
    campos -> pipeline -> almacenamiento. Solo una ejecución activa a la vez:
    una petición solapada recibe 'busy' y se descarta.
    """

    def __init__(self, browser: Optional[TripBrowser] = None,
                 store: Optional[ReservationStore] = None,
                 events: Optional[ExtractionEvents] = None,
                 pipeline: Optional[RecordPipeline] = None,
                 extractor: Optional[ReservationFieldExtractor] = None,
                 navigator: Optional[NavigationController] = None,
                 drill_down: Optional[bool] = None):
        self.logger = get_logger(classname='ReservationExtractionService')

        self.browser = browser
        self.store = store
        self.events = events or ExtractionEvents()
        self.pipeline = pipeline or RecordPipeline()
        self.extractor = extractor or ReservationFieldExtractor()
        self.drill_down = drill_down if drill_down is not None else config.DRILL_DOWN

        self._navigator = navigator
        self._run_lock = threading.Lock()
        self._state = RunState.IDLE
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> RunState:
        return self._state

    # -------------------------------------------------
    #                  METODOS PUBLICOS               #
    # -------------------------------------------------

    def start_extraction(self, background: bool = True) -> ExtractionAck:
        """
        Acuse inmediato; los resultados llegan por eventos.
        Si ya hay una ejecución en curso devuelve status='busy'.
        """
        if not self._try_acquire():
            return ExtractionAck(success=False, status="busy")

        if background:
            self._thread = threading.Thread(target=self._run_and_release, name="pytrips-extraction", daemon=True)
            self._thread.start()
            return ExtractionAck(success=True, status="started")

        self._run_and_release()
        return ExtractionAck(success=True, status="finished")

    def wait(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> Optional[List[ReservationRecord]]:
        """
        Ejecución completa y síncrona. Nunca propaga excepciones: los errores
        se reportan con el evento extractionError y se devuelve None. Si ya
        hay otra ejecución activa se descarta y también devuelve None.
        """
        if not self._try_acquire():
            return None
        return self._run_and_release()

    # -------------------------------------------------
    #                 METODOS PRIVADOS                #
    # -------------------------------------------------

    def _try_acquire(self) -> bool:
        if not self._run_lock.acquire(blocking=False):
            self.logger.warning("⚠️ Ya hay una extracción en curso, se descarta la petición.")
            return False
        self._state = RunState.RUNNING
        return True

    def _run_and_release(self) -> Optional[List[ReservationRecord]]:
        try:
            return self._run()
        finally:
            self._state = RunState.IDLE
            self._run_lock.release()

    @log_execution
    def _run(self) -> Optional[List[ReservationRecord]]:
        self.events.reset()
        navigator, opened = None, False
        try:
            navigator, opened = self._open_navigator()
            records = self._extract(navigator)

            self.events.progress(90, "Guardando datos extraídos...")
            if self.store is not None:
                self.store.save(records)
            save_json(records, "reservations.json")

            self.events.progress(100, "¡Extracción completa!")
            self.events.complete(records)
            return records

        except TripExtractorError as e:
            self.logger.error(f"❌ Extracción abortada: {e}")
            self.events.debug(DebugLevel.ERROR, str(e))
            self.events.error(str(e))
        except Exception as e:
            self.logger.error(f"❌ Error inesperado durante la extracción: {e}", exc_info=True)
            self.events.debug(DebugLevel.ERROR, f"Error inesperado: {e}")
            self.events.error(f"Error inesperado durante la extracción: {e}")
        finally:
            if opened and self.browser is not None:
                self.browser.close()
        return None

    def _open_navigator(self) -> Tuple[NavigationController, bool]:
        if self._navigator is not None:
            return self._navigator, False
        if self.browser is None:
            self.browser = TripBrowser()
        page = self.browser.start()
        return NavigationController(page), True

    def _extract(self, navigator: NavigationController) -> List[ReservationRecord]:
        self.events.progress(10, "Verificando sesión...")
        if not navigator.has_document():
            navigator.go_to_list_page()

        if not SessionChecker(navigator.snapshot()).is_authenticated():
            raise AuthenticationError("Inicia sesión en tu cuenta de Marriott antes de extraer.")
        self.events.debug(DebugLevel.SUCCESS, "Sesión iniciada detectada.")

        self.events.progress(20, "Navegando a reservas...")
        if not navigator.go_to_list_page():
            self.events.debug(DebugLevel.WARNING, "La lista no terminó de cargar; se continúa con lo disponible.")

        self.events.progress(40, "Buscando reservas próximas...")
        list_html = navigator.snapshot()
        save_html_debug(list_html, "reservations_list.html")
        regions = DiscoveryEngine(list_html, on_debug=self.events.debug).find_candidate_regions()

        self.events.progress(60, f"Extrayendo detalles de {len(regions)} reservas...")
        raw_records: List[ReservationRecord] = []
        for position, region in enumerate(regions, 1):
            try:
                record = self._extract_trip(navigator, region)
                if self.pipeline.is_valid(record):
                    raw_records.append(record)
                    self.events.debug(DebugLevel.INFO, f"Reserva {position}: {record.hotel_name}")
                else:
                    self.events.debug(DebugLevel.WARNING, f"Reserva {position}: sin nombre de hotel, se descarta.")
            except Exception as e:
                self.logger.error(f"Error procesando la reserva {position}: {e}", exc_info=True)
                self.events.debug(DebugLevel.WARNING, f"Reserva {position}: se omite por error: {e}")

            self.events.progress(60 + int(30 * position / len(regions)),
                                 f"Procesadas {position}/{len(regions)} reservas")

        records = self.pipeline.process(raw_records)
        self.events.debug(DebugLevel.SUCCESS, f"{len(records)} reservas próximas extraídas.")
        return records

    def _extract_trip(self, navigator: NavigationController, region: CandidateRegion) -> ReservationRecord:
        source = navigator.current_url
        if not self.drill_down:
            return self.extractor.extract_fields(region, source=source)

        if navigator.expand_panel(region):
            region.refresh(navigator.capture_region_html(region))
        basic = self.extractor.extract_fields(region, source=source)

        if not navigator.open_detail(region):
            self.events.debug(DebugLevel.INFO, f"Reserva {region.index + 1}: sin vista de detalle, se usa el resumen.")
            return basic

        try:
            detail_html = navigator.snapshot()
            save_html_debug(detail_html, f"detail_{region.index + 1}.html")
            detailed = self.extractor.extract_detailed(detail_html, source=navigator.current_url)
        finally:
            navigator.return_to_list()

        return self.extractor.merge(detailed, basic)
