import datetime as dt
import unittest

import requests

from fogcast.data_sources import met_no_client
from fogcast.errors import StructuralError, UpstreamError

from forecast_fixtures import START, hourly_series, make_document, make_entry

UTC = dt.timezone.utc


class DummyResp:
    def __init__(self, payload=None, status_code=200, headers=None):
        self._payload = payload
        self.status_code = status_code
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class RecordingSession:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc:
            raise self.exc
        return self.resp


class TestFetchLocationforecast(unittest.TestCase):
    def setUp(self):
        self._orig_session = met_no_client.session

    def tearDown(self):
        met_no_client.session = self._orig_session

    def test_fetch_returns_document_and_freshness(self):
        payload = make_document(hourly_series(2, fog=10.0))
        met_no_client.session = RecordingSession(DummyResp(payload, headers={
            "Last-Modified": "Mon, 01 Jan 2024 00:05:00 GMT",
            "Expires": "Mon, 01 Jan 2024 00:35:00 GMT",
        }))

        result = met_no_client.fetch_locationforecast(37.80734, -122.47477, user_agent="fogcast-test")

        self.assertFalse(result.not_modified)
        self.assertEqual(result.document, payload)
        self.assertEqual(result.last_modified, dt.datetime(2024, 1, 1, 0, 5, tzinfo=UTC))
        self.assertEqual(result.expires, dt.datetime(2024, 1, 1, 0, 35, tzinfo=UTC))

        url, kwargs = met_no_client.session.calls[0]
        self.assertEqual(url, met_no_client.MET_NO_COMPLETE_URL)
        self.assertEqual(kwargs["params"], {"lat": "37.8073", "lon": "-122.4748"})
        self.assertEqual(kwargs["headers"]["User-Agent"], "fogcast-test")
        self.assertNotIn("If-Modified-Since", kwargs["headers"])
        self.assertEqual(kwargs["timeout"], 10.0)

    def test_conditional_request_and_not_modified(self):
        met_no_client.session = RecordingSession(DummyResp(status_code=304, headers={
            "Expires": "Mon, 01 Jan 2024 01:00:00 GMT",
        }))

        result = met_no_client.fetch_locationforecast(0, 0, if_modified_since=dt.datetime(2024, 1, 1, 0, 5, tzinfo=UTC))

        self.assertTrue(result.not_modified)
        self.assertIsNone(result.document)
        self.assertEqual(result.expires, dt.datetime(2024, 1, 1, 1, 0, tzinfo=UTC))
        _url, kwargs = met_no_client.session.calls[0]
        self.assertEqual(kwargs["headers"]["If-Modified-Since"], "Mon, 01 Jan 2024 00:05:00 GMT")

    def test_missing_headers_are_none(self):
        met_no_client.session = RecordingSession(DummyResp(make_document(hourly_series(1))))
        result = met_no_client.fetch_locationforecast(0, 0)
        self.assertIsNone(result.last_modified)
        self.assertIsNone(result.expires)

    def test_error_status_raises_upstream_error(self):
        met_no_client.session = RecordingSession(DummyResp({"error": "nope"}, status_code=503))
        with self.assertRaises(UpstreamError) as ctx:
            met_no_client.fetch_locationforecast(0, 0)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.to_dict()["status_code"], 503)

    def test_network_failure_raises_upstream_error(self):
        met_no_client.session = RecordingSession(exc=requests.Timeout("read timed out"))
        with self.assertRaises(UpstreamError):
            met_no_client.fetch_locationforecast(0, 0)

    def test_invalid_json_raises_structural_error(self):
        met_no_client.session = RecordingSession(DummyResp(ValueError("Expecting value")))
        with self.assertRaises(StructuralError):
            met_no_client.fetch_locationforecast(0, 0)


class TestParseTimeseries(unittest.TestCase):
    def test_parses_details_and_summaries(self):
        entry = make_entry(START, fog=12.5, humidity=93.0, cloud=88.0, next_1="fog", next_12="cloudy")
        entry["data"]["next_12_hours"]["summary"]["symbol_confidence"] = "certain"
        parsed = met_no_client.parse_timeseries(make_document([entry]))

        self.assertEqual(len(parsed), 1)
        first = parsed[0]
        self.assertEqual(first.time, START)
        self.assertEqual(first.fog_area_fraction, 12.5)
        self.assertEqual(first.relative_humidity, 93.0)
        self.assertEqual(first.next_1_hours.symbol_code, "fog")
        self.assertIsNone(first.next_6_hours)
        self.assertEqual(first.next_12_hours.symbol_confidence, "certain")

    def test_tolerates_missing_data_blocks(self):
        parsed = met_no_client.parse_timeseries(make_document([{"time": "2024-01-01T00:00:00Z"}]))
        self.assertIsNone(parsed[0].fog_area_fraction)
        self.assertIsNone(parsed[0].next_1_hours)

    def test_non_numeric_detail_becomes_none(self):
        entry = make_entry(START, humidity="high")
        parsed = met_no_client.parse_timeseries(make_document([entry]))
        self.assertIsNone(parsed[0].relative_humidity)

    def test_structural_failures(self):
        for document in (None, [], {"properties": None}, {"properties": {"timeseries": {}}}):
            with self.subTest(document=document):
                with self.assertRaises(StructuralError):
                    met_no_client.parse_timeseries(document)

    def test_unexpected_units_are_logged(self):
        document = make_document([make_entry(START)])
        document["properties"]["meta"]["units"]["fog_area_fraction"] = "fraction"
        with self.assertLogs(met_no_client.logger.logger, level="WARNING") as logs:
            met_no_client.parse_timeseries(document)
        self.assertIn("Unexpected locationforecast unit", logs.output[0])


class TestHttpDates(unittest.TestCase):
    def test_parse_and_format(self):
        value = met_no_client.parse_http_date("Tue, 02 Jan 2024 03:04:05 GMT")
        self.assertEqual(value, dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        self.assertEqual(met_no_client.format_http_date(value), "Tue, 02 Jan 2024 03:04:05 GMT")

    def test_malformed_date_is_none(self):
        self.assertIsNone(met_no_client.parse_http_date("yesterday-ish"))
        self.assertIsNone(met_no_client.parse_http_date(None))


if __name__ == "__main__":
    unittest.main()
