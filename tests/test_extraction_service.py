import threading
import unittest
from unittest.mock import MagicMock

from pytrips.config.settings import config
from pytrips.core.enums import RunState
from pytrips.core.events import COMPLETE, DEBUG, ERROR, PROGRESS, ExtractionEvents
from pytrips.services.extraction_service import ReservationExtractionService
from tests import html_samples

DETAIL_URL = "https://www.marriott.com/reservation/reservationDetail.mi?confirmationNumber=81234567"


class FakeNavigator:
    """Navegador en memoria: lista y detalle como HTML estático."""

    def __init__(self, list_html, detail_html=None, failing_regions=()):
        self.list_html = list_html
        self.detail_html = detail_html
        self.failing_regions = set(failing_regions)
        self.current_url = config.reservations_url
        self.returns_to_list = 0

    def has_document(self):
        return True

    def go_to_list_page(self):
        self.current_url = config.reservations_url
        return True

    def snapshot(self):
        return self.detail_html if self.current_url == DETAIL_URL else self.list_html

    def expand_panel(self, region):
        if region.index in self.failing_regions:
            raise RuntimeError("el panel desapareció")
        return True

    def capture_region_html(self, region):
        return None

    def open_detail(self, region):
        if self.detail_html is None:
            return False
        self.current_url = DETAIL_URL
        return True

    def return_to_list(self):
        self.returns_to_list += 1
        return self.go_to_list_page()


class BlockingNavigator(FakeNavigator):
    """Se detiene al comprobar el documento hasta que el test lo libera."""

    def __init__(self, list_html):
        super().__init__(list_html)
        self.entered = threading.Event()
        self.release = threading.Event()

    def has_document(self):
        self.entered.set()
        self.release.wait(timeout=10)
        return True


class TestReservationExtractionService(unittest.TestCase):

    def setUp(self):
        self.events = ExtractionEvents()
        self.progress = MagicMock()
        self.debug = MagicMock()
        self.complete = MagicMock()
        self.error = MagicMock()
        self.events.subscribe(PROGRESS, self.progress)
        self.events.subscribe(DEBUG, self.debug)
        self.events.subscribe(COMPLETE, self.complete)
        self.events.subscribe(ERROR, self.error)
        self.store = MagicMock()

    def make_service(self, navigator, drill_down=False):
        return ReservationExtractionService(
            store=self.store, events=self.events, navigator=navigator, drill_down=drill_down
        )

    def test_list_only_run(self):
        service = self.make_service(FakeNavigator(html_samples.LIST_PAGE))

        ack = service.start_extraction(background=False)

        self.assertTrue(ack.success)
        self.error.assert_not_called()
        self.complete.assert_called_once()
        records = self.complete.call_args.args[0]
        # la estadía de 2001 queda fuera por ser pasada
        self.assertEqual([record.hotel_name for record in records],
                         ["Courtyard Boston Downtown", "The Westin Maui Resort & Spa"])
        self.assertEqual(records[0].nights, 3)
        self.assertEqual(records[0].price_per_night, "$200.00")
        self.store.save.assert_called_once_with(records)
        self.assertEqual(service.state, RunState.IDLE)

    def test_three_future_cards_yield_three_records_in_order(self):
        list_html = html_samples.LIST_PAGE.replace("2001", "2099")

        records = self.make_service(FakeNavigator(list_html)).run()

        self.assertEqual([record.hotel_name for record in records], [
            "Courtyard Boston Downtown", "The Westin Maui Resort & Spa", "Sheraton Grand Chicago",
        ])

    def test_progress_is_non_decreasing_and_ends_at_100(self):
        self.make_service(FakeNavigator(html_samples.LIST_PAGE)).run()

        percents = [call.args[0].percent for call in self.progress.call_args_list]
        self.assertEqual(percents, sorted(percents))
        self.assertEqual(percents[0], 10)
        self.assertEqual(percents[-1], 100)

    def test_signed_out_aborts_without_completion(self):
        service = self.make_service(FakeNavigator(html_samples.SIGNED_OUT_PAGE))

        self.assertIsNone(service.run())

        self.complete.assert_not_called()
        self.store.save.assert_not_called()
        self.error.assert_called_once()
        self.assertIn("Inicia sesión", self.error.call_args.args[0])

    def test_no_reservations_reports_error(self):
        self.make_service(FakeNavigator(html_samples.EMPTY_PAGE)).run()

        self.complete.assert_not_called()
        self.assertIn("No se encontraron reservas", self.error.call_args.args[0])

    def test_drill_down_merges_detail(self):
        navigator = FakeNavigator(html_samples.LIST_PAGE, detail_html=html_samples.DETAIL_PAGE)

        records = self.make_service(navigator, drill_down=True).run()

        # las tres tarjetas llevan al mismo detalle y se de-duplican por confirmación
        self.assertEqual(len(records), 1)
        self.assertTrue(records[0].detailed_page)
        self.assertEqual(records[0].taxes, "$60.00")
        self.assertEqual(records[0].source, DETAIL_URL)
        self.assertEqual(navigator.returns_to_list, 3)

    def test_missing_detail_keeps_basic_record(self):
        records = self.make_service(FakeNavigator(html_samples.LIST_PAGE), drill_down=True).run()

        self.assertEqual(len(records), 2)
        self.assertFalse(any(record.detailed_page for record in records))

    def test_failing_trip_is_skipped(self):
        navigator = FakeNavigator(html_samples.LIST_PAGE, failing_regions=[0])

        records = self.make_service(navigator, drill_down=True).run()

        self.assertEqual([record.hotel_name for record in records], ["The Westin Maui Resort & Spa"])
        self.error.assert_not_called()

    def test_overlapping_request_is_rejected(self):
        service = self.make_service(FakeNavigator(html_samples.LIST_PAGE))
        service._run_lock.acquire()
        try:
            ack = service.start_extraction(background=False)
        finally:
            service._run_lock.release()

        self.assertFalse(ack.success)
        self.assertEqual(ack.status, "busy")
        self.complete.assert_not_called()

    def test_run_is_rejected_while_lock_is_held(self):
        service = self.make_service(FakeNavigator(html_samples.LIST_PAGE))
        service._run_lock.acquire()
        try:
            self.assertIsNone(service.run())
        finally:
            service._run_lock.release()

        self.complete.assert_not_called()
        self.store.save.assert_not_called()

    def test_run_during_background_run_is_rejected(self):
        navigator = BlockingNavigator(html_samples.LIST_PAGE)
        service = self.make_service(navigator)

        ack = service.start_extraction()
        self.assertTrue(navigator.entered.wait(timeout=10))
        try:
            self.assertEqual(service.state, RunState.RUNNING)
            self.assertIsNone(service.run())
            self.assertEqual(service.start_extraction(background=False).status, "busy")
        finally:
            navigator.release.set()
        service.wait(timeout=10)

        self.assertEqual(ack.status, "started")
        self.complete.assert_called_once()
        self.assertEqual(service.state, RunState.IDLE)

    def test_background_run(self):
        service = self.make_service(FakeNavigator(html_samples.LIST_PAGE))

        ack = service.start_extraction()
        service.wait(timeout=10)

        self.assertEqual(ack.status, "started")
        self.complete.assert_called_once()
        self.assertEqual(service.state, RunState.IDLE)

    def test_browser_start_failure_reports_error(self):
        browser = MagicMock()
        browser.start.side_effect = RuntimeError("sin navegador")
        service = ReservationExtractionService(browser=browser, store=self.store, events=self.events)

        self.assertIsNone(service.run())

        self.error.assert_called_once()
        self.complete.assert_not_called()


if __name__ == '__main__':
    unittest.main()
