import orjson

from chartsync.core.pipeline import build_chart_model
from chartsync.core.types import Placement
from visual.payload import chart_payload, dumps_chart

from conftest import day, make_indicator


def _model(daily_records, trade_records):
    indicators = [
        make_indicator("SMA", [(day(2), 12.5)]),
        make_indicator("RSI", [(day(1), 40.0), (day(3), 70.0)], Placement.SUB),
        make_indicator("GONE", [(day(20), 1.0)]),
    ]
    return build_chart_model(daily_records, indicators, trade_records, "long")


def test_chart_payload_shape(daily_records, trade_records):
    payload = chart_payload(_model(daily_records, trade_records))

    primary, rsi = payload["panels"]
    assert primary["kind"] == "primary"
    candles, sma = primary["series"]
    assert candles["type"] == "candlestick"
    assert candles["data"][0] == [day(1), [9.0, 12.0, 8.0, 10.0]]
    assert sma["data"] == [[day(2), 12.5]]
    assert set(primary["yaxis"]) == {"min", "max"}
    assert primary["markers"][0] == {
        "timestamp": day(1),
        "price": 10.0,
        "kind": "entry",
        "position_type": "long",
        "trade_id": "t1",
    }
    assert rsi["title"] == "RSI"
    assert rsi["markers"] == []
    assert payload["diagnostics"][0]["kind"] == "unalignable_indicator"


def test_dumps_chart_is_json(daily_records, trade_records):
    model = _model(daily_records, trade_records)
    assert orjson.loads(dumps_chart(model)) == chart_payload(model)


def test_empty_model():
    payload = chart_payload(build_chart_model([]))
    assert payload["panels"] == []
    assert payload["diagnostics"][0]["kind"] == "empty_series"


def test_every_candle_reaches_the_payload(daily_records):
    payload = chart_payload(build_chart_model(daily_records))
    (candles,) = payload["panels"][0]["series"]
    assert len(candles["data"]) == len(daily_records)
    assert [row[0] for row in candles["data"]] == [day(1), day(2), day(3)]
