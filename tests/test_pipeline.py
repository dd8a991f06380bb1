import unittest
from datetime import date

from pytrips.core.models import ReservationRecord
from pytrips.core.pipeline import RecordPipeline


def make_record(**kwargs):
    values = {"hotel_name": "Courtyard Boston Downtown"}
    values.update(kwargs)
    return ReservationRecord(**values)


class TestRecordPipeline(unittest.TestCase):

    def setUp(self):
        self.pipeline = RecordPipeline(today=lambda: date(2050, 6, 1))

    def test_finalize_computes_nights_and_rate(self):
        record = self.pipeline.finalize(make_record(
            check_in_date="2050-07-01", check_out_date="2050-07-04", total_cost="$600.00"
        ))
        self.assertEqual(record.nights, 3)
        self.assertEqual(record.price_per_night, "$200.00")

    def test_finalize_keeps_extracted_rate(self):
        record = self.pipeline.finalize(make_record(
            check_in_date="2050-07-01", check_out_date="2050-07-04",
            total_cost="$600.00", price_per_night="$199.00"
        ))
        self.assertEqual(record.price_per_night, "$199.00")

    def test_inverted_dates_are_not_clamped(self):
        record = self.pipeline.finalize(make_record(
            check_in_date="2050-07-04", check_out_date="2050-07-01", total_cost="$600.00"
        ))
        self.assertEqual(record.nights, -3)
        self.assertIsNone(record.price_per_night)

    def test_records_without_hotel_name_are_invalid(self):
        self.assertFalse(self.pipeline.is_valid(ReservationRecord(confirmation_number="123456")))
        self.assertFalse(self.pipeline.is_valid(make_record(hotel_name="   ")))
        self.assertFalse(self.pipeline.is_valid(None))
        self.assertTrue(self.pipeline.is_valid(make_record()))

    def test_upcoming_filter(self):
        past = make_record(check_in_date="2001-01-10")
        today = make_record(check_in_date="2050-06-01")
        future = make_record(check_in_date="2099-01-10")
        undated = make_record(check_in_date="sometime")

        self.assertEqual(self.pipeline.filter_upcoming([past, today, future, undated]), [today, future, undated])

    def test_upcoming_filter_is_idempotent(self):
        records = [make_record(check_in_date="2001-01-10"), make_record(check_in_date="2099-01-10")]
        once = self.pipeline.filter_upcoming(records)
        self.assertEqual(self.pipeline.filter_upcoming(once), once)

    def test_deduplicate_by_confirmation_then_stay(self):
        records = [
            make_record(confirmation_number="abc12345", check_in_date="2099-01-01"),
            make_record(confirmation_number="ABC12345", hotel_name="Other"),
            make_record(check_in_date="2099-02-01", check_out_date="2099-02-03"),
            make_record(hotel_name="courtyard boston downtown", check_in_date="2099-02-01", check_out_date="2099-02-03"),
        ]
        unique = self.pipeline.deduplicate(records)
        self.assertEqual(unique, [records[0], records[2]])

    def test_process_preserves_discovery_order(self):
        records = [
            make_record(hotel_name="B", check_in_date="2099-05-01"),
            ReservationRecord(confirmation_number="NONAME1"),
            make_record(hotel_name="A", check_in_date="2099-01-01"),
            make_record(hotel_name="C", check_in_date="2001-01-01"),
        ]
        processed = self.pipeline.process(records)
        self.assertEqual([record.hotel_name for record in processed], ["B", "A"])

    def test_sort_by_check_in(self):
        records = [
            make_record(hotel_name="late", check_in_date="2099-05-01"),
            make_record(hotel_name="undated"),
            make_record(hotel_name="early", check_in_date="2099-01-01"),
        ]
        ordered = RecordPipeline.sort_by_check_in(records)
        self.assertEqual([record.hotel_name for record in ordered], ["undated", "early", "late"])


class TestReservationRecord(unittest.TestCase):

    def test_message_uses_camel_case_and_skips_missing(self):
        message = make_record(check_in_date="2099-01-01", points_used="40000").to_message()

        self.assertEqual(message["hotelName"], "Courtyard Boston Downtown")
        self.assertEqual(message["checkInDate"], "2099-01-01")
        self.assertEqual(message["pointsUsed"], "40000")
        self.assertFalse(message["detailedPage"])
        self.assertNotIn("totalCost", message)

    def test_round_trip_from_message(self):
        record = make_record(confirmation_number="81234567")
        self.assertEqual(ReservationRecord.model_validate(record.to_message()), record)


if __name__ == '__main__':
    unittest.main()
