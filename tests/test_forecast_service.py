import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from ridecheck.data_sources import CallableForecastDataSource
from ridecheck.domain import Category, CommuteWindow, ForecastEntry, SafetyLevel
from ridecheck.errors import PreconditionViolation
from ridecheck.forecast_service import (
    build_samples,
    check_city,
    evaluate_entries,
    select_forecast_day,
    to_sample,
)

TZ = ZoneInfo("Europe/Bucharest")


def _entry(day: int, hour: int, kelvin: float = 288.15, wind_ms: float = 2.0, rain: float = 0.0, pop: float = 0.0):
    return ForecastEntry(
        time=dt.datetime(2024, 5, day, hour, 0, tzinfo=TZ),
        temperature_kelvin=kelvin,
        wind_speed_ms=wind_ms,
        rain_probability=pop,
        rain_volume_mm=rain,
    )


def _day_entries(day: int = 6, **overrides):
    """A 3-hourly day as OpenWeatherMap delivers it in summer (02, 05, ..., 23 local)."""
    return [_entry(day, h, **overrides) for h in (2, 5, 8, 11, 14, 17, 20, 23)]


class TestToSample(unittest.TestCase):
    def test_converts_and_rounds_once(self):
        sample = to_sample(_entry(6, 8, kelvin=277.15, wind_ms=9.7, rain=1.2, pop=0.4))
        self.assertEqual(sample.hour_of_day, 8)
        self.assertEqual(sample.temperature_celsius, 4)
        self.assertEqual(sample.wind_speed_kmh, 35)  # 34.92
        self.assertEqual(sample.rain_volume_mm, 1.2)
        self.assertEqual(sample.rain_probability, 0.4)


class TestSelectForecastDay(unittest.TestCase):
    def test_explicit_day_wins(self):
        entries = _day_entries(6) + _day_entries(7)
        self.assertEqual(select_forecast_day(entries, day=dt.date(2024, 5, 7)), dt.date(2024, 5, 7))

    def test_rolls_over_when_today_has_no_commute_slot_left(self):
        entries = [_entry(6, 20), _entry(6, 23)] + _day_entries(7)
        self.assertEqual(select_forecast_day(entries), dt.date(2024, 5, 7))

    def test_no_commute_slot_anywhere_raises(self):
        with self.assertRaises(PreconditionViolation):
            select_forecast_day([_entry(6, 2), _entry(6, 11)])

    def test_build_samples_keeps_only_that_day(self):
        entries = _day_entries(7) + _day_entries(6)
        samples = build_samples(entries, dt.date(2024, 5, 6))
        self.assertEqual([s.hour_of_day for s in samples], [2, 5, 8, 11, 14, 17, 20, 23])


class TestEvaluateEntries(unittest.TestCase):
    def test_clear_day(self):
        report = evaluate_entries("Arad", _day_entries(6))
        self.assertTrue(report.verdict.safe)
        self.assertEqual(report.verdict.warnings, [])
        self.assertEqual(report.day, dt.date(2024, 5, 6))
        self.assertEqual(len(report.samples), 8)
        self.assertEqual([f.category for f in report.findings],
                         [Category.TEMPERATURE, Category.RAIN, Category.WIND])

    def test_wind_warning_shows_the_rounded_compared_value(self):
        entries = _day_entries(6)
        entries[3] = _entry(6, 11, wind_ms=13.95)  # 50.22 km/h -> 50
        report = evaluate_entries("Arad", entries)
        self.assertTrue(report.verdict.safe)
        self.assertEqual(report.verdict.warnings, ["Moderate winds: 50 km/h - ride with caution"])

    def test_cold_commute_slot_makes_day_unsafe(self):
        entries = _day_entries(6)
        entries[5] = _entry(6, 17, kelvin=276.15)  # 3°C at 17:00
        report = evaluate_entries("Arad", entries)
        self.assertFalse(report.verdict.safe)
        self.assertEqual(report.verdict.warnings, ["Temperature too low during commute: 3°C"])
        self.assertEqual(report.findings[0].level, SafetyLevel.UNSAFE)

    def test_only_selected_day_is_evaluated(self):
        stormy_tomorrow = _day_entries(7, wind_ms=20.0, rain=12.0)
        report = evaluate_entries("Arad", _day_entries(6) + stormy_tomorrow)
        self.assertTrue(report.verdict.safe)

    def test_custom_window(self):
        window = CommuteWindow(morning_hours=frozenset({5}), evening_hours=frozenset({20}))
        entries = _day_entries(6)
        entries[1] = _entry(6, 5, kelvin=280.15)  # 7°C at 05:00
        report = evaluate_entries("Arad", entries, window=window)
        self.assertEqual(report.verdict.warnings, ["Cool temperature during commute: 7°C - ride with caution"])

    def test_no_entries_raises(self):
        with self.assertRaises(PreconditionViolation):
            evaluate_entries("Arad", [])


class TestCheckCity(unittest.TestCase):
    def test_fetches_from_injected_source(self):
        calls = []

        def fake_forecast(city, *, country_code):
            calls.append((city, country_code))
            return _day_entries(6, rain=0.5)

        report = check_city("Sibiu", data_source=CallableForecastDataSource(forecast=fake_forecast))
        self.assertEqual(calls, [("Sibiu", "ro")])
        self.assertEqual(report.city, "Sibiu")
        self.assertEqual(report.verdict.warnings, ["Light rain during commute - ride with caution"])


if __name__ == "__main__":
    unittest.main()
