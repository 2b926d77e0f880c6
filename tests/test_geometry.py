import math

import numpy as np
import pytest

from metro_schematic import DegenerateGeometry, Graph, circumcenter, circumcircle, find_interchange_cluster
from metro_schematic.geometry import point, representative_triple, transfer_adjacency


def _station_graph(n_platforms, transfers, positions=None):
    positions = positions or [[float(i), float(i * i)] for i in range(n_platforms)]
    return Graph.from_dict(
        {
            "platforms": [{"name": f"P{i}", "location": positions[i]} for i in range(n_platforms)],
            "stations": [{"name": "Hub", "platforms": list(range(n_platforms))}],
            "spans": [],
            "transfers": [{"source": s, "target": t} for s, t in transfers],
        }
    )


def test_circumcenter_is_equidistant_from_three_points():
    pts = [point(10.0, 0.0), point(12.0, 0.0), point(11.0, 2.0)]
    center = circumcenter(pts)
    assert math.isclose(center[0], 11.0)
    assert math.isclose(center[1], 0.75)
    radii = [math.hypot(center[0] - p[0], center[1] - p[1]) for p in pts]
    assert all(math.isclose(r, 1.25) for r in radii)


def test_circumcenter_rejects_collinear_points():
    with pytest.raises(DegenerateGeometry):
        circumcenter([point(0, 0), point(1, 1), point(3, 3)])


def test_circumcenter_rejects_coincident_points():
    with pytest.raises(DegenerateGeometry):
        circumcenter([point(2, 2), point(2, 2), point(2, 2)])


def test_circumcenter_requires_three_points():
    with pytest.raises(DegenerateGeometry):
        circumcenter([point(0, 0), point(1, 0)])


def test_circumcircle_of_square_uses_its_corners():
    pts = [point(0, 0), point(2, 0), point(2, 2), point(0, 2)]
    center, radius = circumcircle(pts)
    assert np.allclose(center, [1.0, 1.0])
    assert math.isclose(radius, math.sqrt(2.0))


def test_representative_triple_prefers_largest_triangle():
    pts = [point(1, 1), point(0, 0), point(4, 0), point(0, 4)]
    assert representative_triple(pts) == (1, 2, 3)


def test_representative_triple_breaks_area_ties_by_earliest_indices():
    # every triple of a square's corners spans the same area and perimeter
    pts = [point(0, 0), point(2, 0), point(2, 2), point(0, 2)]
    assert representative_triple(pts) == (0, 1, 2)


def test_cluster_found_for_transfer_triangle():
    graph = _station_graph(3, [(0, 1), (1, 2), (0, 2)])
    assert find_interchange_cluster(graph, 0) == [0, 1, 2]


def test_no_cluster_when_triangle_is_incomplete():
    graph = _station_graph(3, [(0, 1), (1, 2)])
    assert find_interchange_cluster(graph, 0) is None


def test_no_cluster_for_two_platform_station():
    graph = _station_graph(2, [(0, 1)])
    assert find_interchange_cluster(graph, 0) is None


def test_largest_clique_wins():
    transfers = [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]
    graph = _station_graph(4, transfers)
    assert find_interchange_cluster(graph, 0) == [0, 1, 2, 3]


def test_equal_cliques_resolve_to_lowest_ids():
    transfers = [(0, 1), (0, 2), (1, 2), (1, 3), (2, 3)]
    graph = _station_graph(4, transfers)
    assert find_interchange_cluster(graph, 0) == [0, 1, 2]


def test_cluster_members_follow_station_order():
    data = {
        "platforms": [{"name": f"P{i}", "location": [float(i), float(i * i)]} for i in range(3)],
        "stations": [{"name": "Hub", "platforms": [2, 0, 1]}],
        "spans": [],
        "transfers": [{"source": 0, "target": 1}, {"source": 1, "target": 2}, {"source": 2, "target": 0}],
    }
    graph = Graph.from_dict(data)
    assert find_interchange_cluster(graph, 0) == [2, 0, 1]


def test_transfer_adjacency_ignores_links_to_other_stations():
    graph = Graph.from_dict(
        {
            "platforms": [{"name": f"P{i}", "location": [float(i), 0.0]} for i in range(3)],
            "stations": [{"name": "A", "platforms": [0, 1]}, {"name": "B", "platforms": [2]}],
            "spans": [],
            "transfers": [{"source": 0, "target": 1}, {"source": 1, "target": 2}],
        }
    )
    adjacency = transfer_adjacency(graph, 0)
    assert sorted(adjacency.nodes) == [0, 1]
    assert sorted(tuple(sorted(edge)) for edge in adjacency.edges) == [(0, 1)]
