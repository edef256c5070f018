"""Tests for the daily (time-based) rotating file sink."""

import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from rotating_sinks.errors import ConfigurationError
from rotating_sinks.filenames import dated_date_only
from rotating_sinks.records import FormattedRecord
from rotating_sinks.sinks import DailyFileSink


class DailySinkTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.base = os.path.join(self.tmpdir, "daily")
        self.clock = [datetime(2024, 1, 1, 23, 59, 59)]

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def time_func(self):
        return self.clock[0]

    def _read(self, name: str) -> bytes:
        with open(os.path.join(self.tmpdir, name), "rb") as f:
            return f.read()


class TestNextRotation(DailySinkTestCase):
    def test_midnight_later_today(self):
        sink = DailyFileSink(self.base, 0, 0, clock=self.time_func)
        sink.close()
        self.assertEqual(sink.next_rotation_at, datetime(2024, 1, 2, 0, 0, 0))

    def test_rotation_time_already_passed(self):
        sink = DailyFileSink(self.base, 0, 0, clock=self.time_func)
        sink.close()
        self.assertEqual(
            sink.next_rotation(datetime(2024, 1, 2, 0, 0, 1)),
            datetime(2024, 1, 3, 0, 0, 0),
        )

    def test_exact_rotation_instant_moves_to_next_day(self):
        sink = DailyFileSink(self.base, 6, 30, clock=self.time_func)
        sink.close()
        self.assertEqual(
            sink.next_rotation(datetime(2024, 5, 10, 6, 30, 0)),
            datetime(2024, 5, 11, 6, 30, 0),
        )

    def test_same_day_when_still_ahead(self):
        sink = DailyFileSink(self.base, 6, 30, clock=self.time_func)
        sink.close()
        self.assertEqual(
            sink.next_rotation(datetime(2024, 5, 10, 6, 29, 59, 999999)),
            datetime(2024, 5, 10, 6, 30, 0),
        )

    def test_month_and_year_boundaries(self):
        sink = DailyFileSink(self.base, 12, 0, clock=self.time_func)
        sink.close()
        self.assertEqual(sink.next_rotation(datetime(2024, 2, 29, 13, 0)), datetime(2024, 3, 1, 12, 0))
        self.assertEqual(sink.next_rotation(datetime(2024, 12, 31, 12, 0)), datetime(2025, 1, 1, 12, 0))


class TestValidation(DailySinkTestCase):
    def test_invalid_rotation_time_fails_before_open(self):
        for hour, minute in ((24, 0), (-1, 0), (0, 60), (0, -1)):
            helper = MagicMock()
            with self.assertRaises(ConfigurationError):
                DailyFileSink(self.base, hour, minute, clock=self.time_func, file_helper=helper)
            helper.open.assert_not_called()
        self.assertEqual(os.listdir(self.tmpdir), [])

    def test_boundary_values_accepted(self):
        sink = DailyFileSink(self.base, 23, 59, clock=self.time_func)
        sink.close()
        self.assertEqual(sink.next_rotation_at, datetime(2024, 1, 2, 23, 59, 0))


class TestDailyRotation(DailySinkTestCase):
    def test_initial_file_is_dated(self):
        sink = DailyFileSink(self.base, clock=self.time_func)
        sink.close()
        self.assertEqual(sink.filename, os.path.join(self.tmpdir, "daily_2024-01-01_23-59.txt"))

    def test_keeps_given_extension(self):
        sink = DailyFileSink(self.base + ".log", clock=self.time_func)
        sink.close()
        self.assertEqual(os.listdir(self.tmpdir), ["daily_2024-01-01_23-59.log"])

    def test_rotates_once_instant_is_reached(self):
        sink = DailyFileSink(self.base, 0, 0, clock=self.time_func)
        self.assertFalse(sink.write(FormattedRecord(b"before midnight\n")))

        self.clock[0] = datetime(2024, 1, 2, 0, 0, 0)
        self.assertTrue(sink.write(FormattedRecord(b"after midnight\n")))
        self.clock[0] += timedelta(hours=5)
        self.assertFalse(sink.write(FormattedRecord(b"still same day\n")))
        sink.close()

        self.assertEqual(sink.next_rotation_at, datetime(2024, 1, 3, 0, 0, 0))
        self.assertEqual(self._read("daily_2024-01-01_23-59.txt"), b"before midnight\n")
        self.assertEqual(
            self._read("daily_2024-01-02_00-00.txt"), b"after midnight\nstill same day\n"
        )

    def test_old_files_are_never_deleted(self):
        sink = DailyFileSink(self.base, 0, 0, clock=self.time_func)
        for day in range(2, 6):
            self.clock[0] = datetime(2024, 1, day, 0, 1)
            sink.write(FormattedRecord(b"x\n"))
        sink.close()
        self.assertEqual(len(os.listdir(self.tmpdir)), 5)

    def test_date_only_names(self):
        sink = DailyFileSink(self.base, 0, 0, filename_calculator=dated_date_only,
                             clock=self.time_func)
        self.clock[0] = datetime(2024, 1, 2, 0, 0, 30)
        sink.write(FormattedRecord(b"new day\n"))
        sink.close()
        self.assertEqual(
            sorted(os.listdir(self.tmpdir)), ["daily_2024-01-01.txt", "daily_2024-01-02.txt"]
        )

    def test_from_parts(self):
        sink = DailyFileSink.from_parts(self.base, "out", 0, 0, clock=self.time_func)
        sink.close()
        self.assertEqual(os.listdir(self.tmpdir), ["daily_2024-01-01_23-59.out"])

    def test_force_flush(self):
        sink = DailyFileSink(self.base, clock=self.time_func)
        sink.set_force_flush(True)
        sink.write(FormattedRecord(b"visible\n"))
        self.assertEqual(self._read("daily_2024-01-01_23-59.txt"), b"visible\n")
        sink.close()


if __name__ == "__main__":
    unittest.main()
