# src/pytrips/cli.py
import argparse
import sys
from typing import List, Optional

from pytrips.browser import TripBrowser
from pytrips.config.settings import config
from pytrips.core.events import COMPLETE, DEBUG, ERROR, PROGRESS, DebugBuffer, ExtractionEvents
from pytrips.core.pipeline import RecordPipeline
from pytrips.core.models import ReservationRecord
from pytrips.services.extraction_service import ReservationExtractionService
from pytrips.services.storage import ReservationStore
from pytrips.utils.logger import log_execution, logger


def parse_arguments(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Extractor de reservas próximas de Marriott")
    parser.add_argument("command", nargs="?", default="extract", choices=["extract", "show", "clear", "export"],
                        help="Acción a realizar")
    parser.add_argument("--headless", action="store_true", help="Ejecutar el navegador sin ventana")
    parser.add_argument("--cdp-url", type=str, help="Adjuntarse a un Chrome abierto (p.ej. http://localhost:9222)")
    parser.add_argument("--user-data-dir", type=str, help="Directorio del perfil persistente del navegador")
    parser.add_argument("--no-drill-down", action="store_true", help="No abrir la vista de detalle de cada reserva")
    parser.add_argument("--output", type=str, help="Archivo destino para 'export'")
    parser.add_argument("--verbose", action="store_true", help="Activar logs detallados")
    return parser.parse_args(argv)


def format_record(record: ReservationRecord) -> str:
    lines = [f"🏨 {record.hotel_name}"]
    if record.confirmation_number:
        lines.append(f"   Confirmación: {record.confirmation_number}")
    if record.check_in_date or record.check_out_date:
        lines.append(f"   Fechas: {record.check_in_date or '?'} -> {record.check_out_date or '?'}"
                     + (f" ({record.nights} noches)" if record.nights is not None else ""))
    if record.room_type:
        lines.append(f"   Habitación: {record.room_type}")
    if record.total_cost:
        per_night = f" ({record.price_per_night}/noche)" if record.price_per_night else ""
        lines.append(f"   Total: {record.total_cost}{per_night}")
    if record.points_used:
        lines.append(f"   Puntos: {record.points_used}")
    if record.cancellation_policy:
        lines.append(f"   Cancelación: {record.cancellation_policy}")
    return "\n".join(lines)


def show_records(store: ReservationStore) -> int:
    records = RecordPipeline.sort_by_check_in(store.load())
    if not records:
        print("No hay reservas guardadas. Ejecuta 'pytrips extract' primero.")
        return 0
    print(f"{len(records)} reservas próximas:\n")
    for record in records:
        print(format_record(record))
        print()
    return 0


def run_extraction(args, store: ReservationStore) -> int:
    events = ExtractionEvents()
    debug_log = DebugBuffer()
    outcome = {}

    events.subscribe(PROGRESS, lambda event: print(f"[{event.percent:3d}%] {event.message}"))
    events.subscribe(DEBUG, debug_log)
    events.subscribe(COMPLETE, lambda records: outcome.setdefault("records", records))
    events.subscribe(ERROR, lambda message: outcome.setdefault("error", message))

    browser = TripBrowser(
        headless=args.headless or None,
        user_data_dir=args.user_data_dir,
        cdp_url=args.cdp_url,
    )
    service = ReservationExtractionService(
        browser=browser,
        store=store,
        events=events,
        drill_down=False if args.no_drill_down else None,
    )
    service.start_extraction(background=False)

    if "error" in outcome:
        logger.error(f"La extracción falló: {outcome['error']}")
        if config.VERBOSE:
            for line in debug_log.lines():
                print(line)
        return 1

    records = outcome.get("records", [])
    print(f"\n✅ {len(records)} reservas extraídas.\n")
    for record in RecordPipeline.sort_by_check_in(records):
        print(format_record(record))
        print()
    return 0


@log_execution
def main(argv: Optional[List[str]] = None) -> int:
    # 1. Procesar argumentos
    args = parse_arguments(argv)

    if args.verbose:
        config.configure(VERBOSE=True)
        logger.setLevel("DEBUG")

    store = ReservationStore()
    try:
        if args.command == "show":
            return show_records(store)

        if args.command == "clear":
            store.clear()
            print("Datos de reservas eliminados.")
            return 0

        if args.command == "export":
            path = store.export_json(args.output)
            print(f"Reservas exportadas en: {path}")
            return 0

        return run_extraction(args, store)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
