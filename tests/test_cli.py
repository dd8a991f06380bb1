import unittest
from unittest.mock import MagicMock, patch

from pytrips import cli
from pytrips.core.models import ReservationRecord


class TestCli(unittest.TestCase):

    @patch('pytrips.cli.ReservationStore')
    def test_show_lists_saved_records(self, MockStore):
        MockStore.return_value.load.return_value = [
            ReservationRecord(hotel_name="Courtyard Boston Downtown", check_in_date="2099-03-14"),
        ]
        with patch('builtins.print') as mock_print:
            self.assertEqual(cli.main(["show"]), 0)

        printed = "\n".join(str(call.args[0]) for call in mock_print.call_args_list if call.args)
        self.assertIn("Courtyard Boston Downtown", printed)
        MockStore.return_value.close.assert_called_once()

    @patch('pytrips.cli.ReservationStore')
    def test_clear(self, MockStore):
        with patch('builtins.print'):
            self.assertEqual(cli.main(["clear"]), 0)
        MockStore.return_value.clear.assert_called_once()

    @patch('pytrips.cli.ReservationStore')
    def test_export_passes_output(self, MockStore):
        with patch('builtins.print'):
            cli.main(["export", "--output", "trips.json"])
        MockStore.return_value.export_json.assert_called_once_with("trips.json")

    @patch('pytrips.cli.ReservationExtractionService')
    @patch('pytrips.cli.TripBrowser')
    @patch('pytrips.cli.ReservationStore')
    def test_extract_reports_failure(self, MockStore, MockBrowser, MockService):
        def fake_start(background=True):
            events = MockService.call_args.kwargs["events"]
            events.error("Inicia sesión en tu cuenta de Marriott antes de extraer.")
            return MagicMock(success=True)

        MockService.return_value.start_extraction.side_effect = fake_start

        with patch('builtins.print'):
            self.assertEqual(cli.main(["extract", "--no-drill-down", "--cdp-url", "http://localhost:9222"]), 1)

        MockBrowser.assert_called_once_with(headless=None, user_data_dir=None, cdp_url="http://localhost:9222")
        self.assertFalse(MockService.call_args.kwargs["drill_down"])


if __name__ == '__main__':
    unittest.main()
