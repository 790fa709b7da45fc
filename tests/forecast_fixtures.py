"""Builders for locationforecast-shaped documents used across the tests."""
import datetime as dt

UTC = dt.timezone.utc
START = dt.datetime(2024, 1, 1, 0, 0, tzinfo=UTC)


def iso(ts: dt.datetime) -> str:
    return ts.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def make_entry(ts, fog=None, humidity=85.0, cloud=90.0, next_1=None, next_6=None, next_12=None):
    details = {"relative_humidity": humidity, "cloud_area_fraction": cloud}
    if fog is not None:
        details["fog_area_fraction"] = fog
    data = {"instant": {"details": details}}
    for name, code in (("next_1_hours", next_1), ("next_6_hours", next_6), ("next_12_hours", next_12)):
        if code is not None:
            data[name] = {"summary": {"symbol_code": code}, "details": {}}
    return {"time": iso(ts), "data": data}


def make_document(entries):
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [-122.4748, 37.8073, 10]},
        "properties": {
            "meta": {
                "updated_at": iso(START),
                "units": {
                    "fog_area_fraction": "%",
                    "relative_humidity": "%",
                    "cloud_area_fraction": "%",
                },
            },
            "timeseries": entries,
        },
    }


def hourly_series(count, start=START, **kwargs):
    return [make_entry(start + dt.timedelta(hours=i), **kwargs) for i in range(count)]
