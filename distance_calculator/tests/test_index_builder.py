from distance_calculator.catalog.models import Restaurant
from distance_calculator.indexing.builder import build_indexes
from distance_calculator.indexing.models import CoordinateEntry, EligibilitySchedule


def _restaurant(rid, lat, long, radius=5.0, open_=900, close=1800):
    return Restaurant(id=rid, lat=lat, long=long, radius=radius, open=open_, close=close, rating=4.0)


RESTAURANTS = [
    _restaurant("c", 50.3, 8.1),
    _restaurant("a", 49.9, 8.9, radius=2.5, open_=2200, close=600),
    _restaurant("b", 50.1, 8.5),
]


def test_axes_are_sorted_ascending():
    indexes = build_indexes(RESTAURANTS)

    assert indexes.lat_index.entries() == [
        CoordinateEntry(49.9, "a"),
        CoordinateEntry(50.1, "b"),
        CoordinateEntry(50.3, "c"),
    ]
    assert indexes.long_index.ids == ["c", "b", "a"]
    assert indexes.long_index.coordinates.tolist() == [8.1, 8.5, 8.9]


def test_eligibility_map_has_one_schedule_per_restaurant():
    indexes = build_indexes(RESTAURANTS)

    assert set(indexes.schedules) == {"a", "b", "c"}
    assert indexes.schedules["a"] == EligibilitySchedule(open=2200, close=600, radius=2.5)


def test_equal_coordinates_are_all_kept():
    indexes = build_indexes([_restaurant("x", 1.0, 1.0), _restaurant("y", 1.0, 2.0)])

    assert sorted(indexes.lat_index.ids) == ["x", "y"]
    assert indexes.lat_index.coordinates.tolist() == [1.0, 1.0]
