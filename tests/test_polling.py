import unittest
from unittest.mock import MagicMock

from pytrips.utils.polling import attempts_for, poll_until


class TestPolling(unittest.TestCase):

    def test_returns_first_truthy_value(self):
        sleep = MagicMock()
        values = iter([None, "", "found"])

        result = poll_until(lambda: next(values), interval=0.5, max_attempts=5, sleep=sleep)

        self.assertTrue(result)
        self.assertEqual(result.value, "found")
        self.assertEqual(result.attempts, 3)
        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(0.5)

    def test_timeout_degrades_without_raising(self):
        sleep = MagicMock()

        result = poll_until(lambda: False, interval=0.1, max_attempts=4, sleep=sleep)

        self.assertFalse(result)
        self.assertIsNone(result.value)
        self.assertEqual(result.attempts, 4)
        # no se espera después del último intento
        self.assertEqual(sleep.call_count, 3)

    def test_attempts_for(self):
        self.assertEqual(attempts_for(10, 0.5), 20)
        self.assertEqual(attempts_for(1, 0.3), 4)
        self.assertEqual(attempts_for(0, 0.5), 1)
        self.assertEqual(attempts_for(5, 0), 1)


if __name__ == '__main__':
    unittest.main()
