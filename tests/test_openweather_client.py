import datetime as dt
import json
import unittest
from zoneinfo import ZoneInfo

from ridecheck.data_sources import openweather_client
from ridecheck.errors import ConfigurationError, ForecastParseError, ProviderError

BUCHAREST = ZoneInfo("Europe/Bucharest")


class DummyResp:
    def __init__(self, payload, status_code=200, reason="OK", url="https://example.test/forecast"):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self.url = url

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _utc_ts(*args):
    return int(dt.datetime(*args, tzinfo=dt.timezone.utc).timestamp())


def _make_forecast_payload():
    return {
        "cod": "200",
        "cnt": 3,
        "list": [
            {
                # 05:00 UTC -> 08:00 in Bucharest (summer time)
                "dt": _utc_ts(2024, 5, 6, 5, 0),
                "main": {"temp": 285.15, "humidity": 70},
                "wind": {"speed": 3.0, "deg": 180},
                "pop": 0.2,
            },
            {
                "dt": _utc_ts(2024, 5, 6, 14, 0),
                "main": {"temp": 290.15},
                "wind": {"speed": 10.0},
                "pop": 0.8,
                "rain": {"3h": 2.5},
            },
            {
                "dt": _utc_ts(2024, 5, 6, 8, 0),
                "main": {"temp": 288.15},
                "wind": {"speed": 4.0},
            },
        ],
        "city": {"name": "Arad", "country": "RO", "timezone": 10800},
    }


class RecordingSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.resp


class TestParseForecastPayload(unittest.TestCase):
    def test_entries_are_localized_sorted_and_defaulted(self):
        entries = openweather_client.parse_forecast_payload(_make_forecast_payload(), "Europe/Bucharest")
        self.assertEqual(len(entries), 3)
        self.assertEqual([e.time.hour for e in entries], [8, 11, 17])
        self.assertEqual(entries[0].time.tzinfo, BUCHAREST)
        self.assertEqual(entries[0].temperature_kelvin, 285.15)
        self.assertEqual(entries[0].rain_volume_mm, 0.0)
        self.assertEqual(entries[1].rain_probability, 0.0)
        self.assertEqual(entries[2].rain_volume_mm, 2.5)
        self.assertEqual(entries[2].wind_speed_ms, 10.0)

    def test_missing_list_raises(self):
        with self.assertRaises(ForecastParseError):
            openweather_client.parse_forecast_payload({"cod": "200"})

    def test_non_numeric_temperature_raises(self):
        payload = _make_forecast_payload()
        payload["list"][0]["main"]["temp"] = "warm"
        with self.assertRaises(ForecastParseError):
            openweather_client.parse_forecast_payload(payload)

    def test_missing_wind_raises(self):
        payload = _make_forecast_payload()
        del payload["list"][1]["wind"]
        with self.assertRaises(ForecastParseError):
            openweather_client.parse_forecast_payload(payload)

    def test_out_of_range_probability_raises(self):
        payload = _make_forecast_payload()
        payload["list"][0]["pop"] = 3
        with self.assertRaises(ForecastParseError):
            openweather_client.parse_forecast_payload(payload)

    def test_non_finite_numbers_raise(self):
        bodies = [
            '{"list":[{"dt":1717390800,"main":{"temp":NaN},"wind":{"speed":3.0}}]}',
            '{"list":[{"dt":1717390800,"main":{"temp":Infinity},"wind":{"speed":3.0}}]}',
            '{"list":[{"dt":1717390800,"main":{"temp":290.0},"wind":{"speed":Infinity}}]}',
            '{"list":[{"dt":1717390800,"main":{"temp":290.0},"wind":{"speed":3.0},"rain":{"3h":NaN}}]}',
        ]
        for body in bodies:
            with self.subTest(body=body):
                with self.assertRaises(ForecastParseError) as ctx:
                    openweather_client.parse_forecast_payload(json.loads(body))
                self.assertIn("not a finite number", str(ctx.exception))


class TestFetchForecast(unittest.TestCase):
    def setUp(self):
        self._orig_session = openweather_client.session

    def tearDown(self):
        openweather_client.session = self._orig_session

    def test_fetch_forecast_sends_city_and_key(self):
        recorder = RecordingSession(DummyResp(_make_forecast_payload()))
        openweather_client.session = recorder

        entries = openweather_client.fetch_forecast(
            "Cluj-Napoca", country_code="ro", api_key="k3y", base_url="https://example.test/data/2.5/"
        )
        self.assertEqual(len(entries), 3)
        call = recorder.calls[0]
        self.assertEqual(call["url"], "https://example.test/data/2.5/forecast")
        self.assertEqual(call["params"], {"q": "Cluj-Napoca,ro", "appid": "k3y"})
        self.assertEqual(call["timeout"], 10.0)

    def test_missing_api_key_fails_before_request(self):
        recorder = RecordingSession(DummyResp(_make_forecast_payload()))
        openweather_client.session = recorder
        with self.assertRaises(ConfigurationError) as ctx:
            openweather_client.fetch_forecast("Arad", api_key=None)
        self.assertEqual(str(ctx.exception), "Weather API key is not configured")
        self.assertEqual(recorder.calls, [])

    def test_provider_error_carries_message_and_status(self):
        resp = DummyResp({"cod": "404", "message": "city not found"}, status_code=404, reason="Not Found")
        openweather_client.session = RecordingSession(resp)
        with self.assertRaises(ProviderError) as ctx:
            openweather_client.fetch_forecast("Atlantis", api_key="k3y")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.message, "city not found")

    def test_provider_error_without_json_uses_reason(self):
        resp = DummyResp(ValueError("no json"), status_code=503, reason="Service Unavailable")
        openweather_client.session = RecordingSession(resp)
        with self.assertRaises(ProviderError) as ctx:
            openweather_client.fetch_forecast("Arad", api_key="k3y")
        self.assertEqual(str(ctx.exception), "Service Unavailable")

    def test_invalid_json_body_raises_parse_error(self):
        openweather_client.session = RecordingSession(DummyResp(ValueError("bad json")))
        with self.assertRaises(ForecastParseError):
            openweather_client.fetch_forecast("Arad", api_key="k3y")

    def test_non_finite_json_body_raises_parse_error(self):
        body = json.loads('{"list":[{"dt":1717390800,"main":{"temp":NaN},"wind":{"speed":3.0}}]}')
        openweather_client.session = RecordingSession(DummyResp(body))
        with self.assertRaises(ForecastParseError):
            openweather_client.fetch_forecast("Arad", api_key="k3y")


if __name__ == "__main__":
    unittest.main()
