import unittest
from unittest.mock import MagicMock

from pytrips.core.enums import DebugLevel
from pytrips.core.events import COMPLETE, DEBUG, ERROR, PROGRESS, DebugBuffer, ExtractionEvents


class TestExtractionEvents(unittest.TestCase):

    def setUp(self):
        self.events = ExtractionEvents()

    def test_progress_is_monotonic_and_bounded(self):
        listener = MagicMock()
        self.events.subscribe(PROGRESS, listener)

        for percent in (10, 40, 20, 150):
            self.events.progress(percent, "paso")

        percents = [call.args[0].percent for call in listener.call_args_list]
        self.assertEqual(percents, [10, 40, 40, 100])

    def test_reset_starts_a_new_run(self):
        self.events.progress(90, "casi")
        self.events.reset()
        self.assertEqual(self.events.progress(10, "otra vez").percent, 10)

    def test_failing_listener_does_not_block_others(self):
        broken = MagicMock(side_effect=RuntimeError("popup cerrado"))
        healthy = MagicMock()
        self.events.subscribe(ERROR, broken)
        self.events.subscribe(ERROR, healthy)

        self.events.error("fallo")

        healthy.assert_called_once_with("fallo")

    def test_unsubscribe(self):
        listener = MagicMock()
        unsubscribe = self.events.subscribe(COMPLETE, listener)
        unsubscribe()
        self.events.complete([])
        listener.assert_not_called()

    def test_unknown_event_is_rejected(self):
        with self.assertRaises(ValueError):
            self.events.subscribe("startExtraction", MagicMock())

    def test_progress_message_shape(self):
        event = self.events.progress(40, "Buscando reservas...")
        self.assertEqual(event.to_message(), {"action": "progress", "percent": 40, "text": "Buscando reservas..."})


class TestDebugBuffer(unittest.TestCase):

    def test_keeps_most_recent_entries(self):
        events = ExtractionEvents()
        buffer = DebugBuffer(maxlen=100)
        events.subscribe(DEBUG, buffer)

        for i in range(150):
            events.debug(DebugLevel.INFO, f"mensaje {i}")

        self.assertEqual(len(buffer), 100)
        self.assertTrue(buffer.lines()[0].endswith("mensaje 50"))
        self.assertTrue(buffer.lines()[-1].endswith("mensaje 149"))

    def test_line_format_and_clear(self):
        buffer = DebugBuffer()
        events = ExtractionEvents()
        events.subscribe(DEBUG, buffer)
        events.debug(DebugLevel.WARNING, "sin resultados")

        self.assertRegex(buffer.lines()[0], r"^\[\d{2}:\d{2}:\d{2}\] WARNING: sin resultados$")
        buffer.clear()
        self.assertEqual(len(buffer), 0)


if __name__ == '__main__':
    unittest.main()
