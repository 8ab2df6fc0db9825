import logging

import pytest

from distance_calculator.catalog.feed import csv_bytes_to_records
from distance_calculator.catalog.normalizer import (
    CANONICAL_COLUMNS,
    records_to_restaurants,
    time_to_hhmm,
)
from distance_calculator.errors import DeliveryRangeError, ErrorKind

HEADER = "id,latitude,longitude,availability_radius,open_hour,close_hour,rating"


def _csv(*rows, header=HEADER):
    return "\n".join([header, *rows]).encode("utf-8")


def _records(*rows, header=HEADER):
    return csv_bytes_to_records(_csv(*rows, header=header))


def test_time_to_hhmm_accepts_clock_formats():
    assert time_to_hhmm("21:30") == 2130
    assert time_to_hhmm("9:05") == 905
    assert time_to_hhmm("00:00:00") == 0
    assert time_to_hhmm("23:59:59") == 2359


@pytest.mark.parametrize("raw", ["24:00", "12:60", "noon", "12", "12:30:61", ""])
def test_time_to_hhmm_rejects_bad_values(raw):
    with pytest.raises(ValueError):
        time_to_hhmm(raw)


def test_valid_rows_become_restaurants_in_order():
    records = _records(
        "b,50.05,8.67,6,09:00:00,18:00:00,4.5",
        "a,50.10,8.70,3.5,22:00:00,06:00:00,3.9",
    )
    restaurants = records_to_restaurants(records)

    assert [r.id for r in restaurants] == ["b", "a"]
    first = restaurants[0]
    assert (first.lat, first.long, first.radius) == (50.05, 8.67, 6.0)
    assert (first.open, first.close, first.rating) == (900, 1800, 4.5)
    assert restaurants[1].open == 2200
    assert restaurants[1].close == 600


def test_malformed_rows_are_skipped_with_warning(caplog):
    records = _records(
        "ok1,50.05,8.67,6,09:00:00,18:00:00,4.5",
        "short,50.05,8.67,6,09:00:00",
        "badlat,north,8.67,6,09:00:00,18:00:00,4.5",
        "badtime,50.05,8.67,6,late,18:00:00,4.5",
        "outside,95.0,8.67,6,09:00:00,18:00:00,4.5",
        "ok2,50.06,8.68,6,09:00:00,18:00:00,4.0",
    )
    with caplog.at_level(logging.WARNING, logger="distance_calculator.catalog.normalizer"):
        restaurants = records_to_restaurants(records)

    assert [r.id for r in restaurants] == ["ok1", "ok2"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 4


def test_duplicate_ids_keep_first_occurrence():
    records = _records(
        "dup,50.05,8.67,6,09:00:00,18:00:00,4.5",
        "dup,10.0,10.0,1,09:00:00,18:00:00,1.0",
    )
    restaurants = records_to_restaurants(records)
    assert len(restaurants) == 1
    assert restaurants[0].lat == 50.05


def test_header_missing_column_is_format_error():
    header = "id,latitude,longitude,open_hour,close_hour,rating"
    with pytest.raises(DeliveryRangeError) as exc_info:
        records_to_restaurants(_records("a,50.05,8.67,09:00:00,18:00:00,4.5", header=header))
    assert exc_info.value.kind is ErrorKind.format


def test_header_in_wrong_order_is_format_error():
    header = ",".join(reversed(CANONICAL_COLUMNS))
    with pytest.raises(DeliveryRangeError) as exc_info:
        records_to_restaurants([header.split(","), ["4.5", "18:00", "09:00", "6", "8.67", "50.05", "a"]])
    assert exc_info.value.kind is ErrorKind.format


def test_too_few_records_is_data_error():
    with pytest.raises(DeliveryRangeError) as exc_info:
        records_to_restaurants([CANONICAL_COLUMNS])
    assert exc_info.value.kind is ErrorKind.data


def test_all_rows_malformed_is_data_error():
    records = _records("x,not,a,row,at,all,!")
    with pytest.raises(DeliveryRangeError) as exc_info:
        records_to_restaurants(records)
    assert exc_info.value.kind is ErrorKind.data


def test_csv_with_only_header_is_format_error():
    with pytest.raises(DeliveryRangeError) as exc_info:
        csv_bytes_to_records(_csv())
    assert exc_info.value.kind is ErrorKind.format


def test_csv_bytes_strip_bom_and_blank_lines():
    raw = ("\ufeff" + HEADER + "\n\na,50.05,8.67,6,09:00:00,18:00:00,4.5\n").encode("utf-8")
    records = csv_bytes_to_records(raw)
    assert records[0] == CANONICAL_COLUMNS
    assert len(records) == 2
