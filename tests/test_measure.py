import math

import pytest

from metro_schematic import DistanceMeasure, format_distance, haversine
from metro_schematic.measure import EARTH_RADIUS_M, path_length


def test_haversine_one_degree_of_latitude():
    assert haversine((0.0, 0.0), (1.0, 0.0)) == pytest.approx(EARTH_RADIUS_M * math.pi / 180.0)
    assert haversine((59.93, 30.32), (59.93, 30.32)) == 0.0


@pytest.mark.parametrize(
    "metres, label",
    [
        (0.0, "0 m"),
        (734.4, "734 m"),
        (999.4, "999 m"),
        (999.6, "1 km"),
        (1250.0, "1.25 km"),
        (9999.0, "9.999 km"),
        (10000.0, "10 km"),
        (12349.0, "12.35 km"),
        (12345678.0, "12345.68 km"),
        (20000000.0, "20000 km"),
    ],
)
def test_format_distance(metres, label):
    assert format_distance(metres) == label


def test_path_length_sums_legs():
    points = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]
    expected = haversine(points[0], points[1]) + haversine(points[1], points[2])
    assert path_length(points) == pytest.approx(expected)
    assert path_length(points[:1]) == 0


def test_measure_labels_are_cumulative():
    measure = DistanceMeasure()
    assert not measure.active
    assert measure.labels() == []
    assert measure.last_label() is None

    assert measure.add((0.0, 0.0)) == "0"
    assert measure.add((0.001, 0.0)) == "111 m"
    assert measure.add((0.01, 0.0)) == "1.112 km"
    assert measure.labels() == ["0", "111 m", "1.112 km"]
    assert measure.active


def test_measure_edits_waypoints():
    measure = DistanceMeasure()
    for waypoint in [(0.0, 0.0), (0.001, 0.0), (0.002, 0.0)]:
        measure.add(waypoint)

    measure.move(2, (0.003, 0.0))
    assert measure.last_label() == "334 m"
    measure.remove(1)
    assert measure.total() == pytest.approx(haversine((0.0, 0.0), (0.003, 0.0)))
    measure.clear()
    assert not measure.active
