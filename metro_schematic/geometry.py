"""Point arithmetic, circumcircles and interchange cluster detection."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
from scipy.spatial.distance import pdist, squareform

from .config import get_layout_config
from .logging_utils import apply_debug_logging

if TYPE_CHECKING:
    from .network import Graph

logger = logging.getLogger(__name__)

Point = np.ndarray


class DegenerateGeometry(ValueError):
    """Raised when points do not determine a unique circle."""


def point(x: float, y: float) -> Point:
    return np.array([float(x), float(y)], dtype=float)


def as_point(value: Sequence[float]) -> Point:
    return point(value[0], value[1])


def add(a: Point, b: Point) -> Point:
    return a + b


def subtract(a: Point, b: Point) -> Point:
    return a - b


def scale(v: Point, factor: float) -> Point:
    return v * float(factor)


def midpoint(a: Point, b: Point) -> Point:
    return (a + b) * 0.5


def distance(a: Point, b: Point) -> float:
    return float(math.hypot(b[0] - a[0], b[1] - a[1]))


def _cross(a: Point, b: Point) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


def _rotate90(v: Point) -> Point:
    return np.array([-v[1], v[0]], dtype=float)


@dataclass
class _Bisector:
    anchor: Point
    direction: Point


def _perpendicular_bisector(a: Point, b: Point) -> _Bisector:
    return _Bisector(anchor=midpoint(a, b), direction=_rotate90(b - a))


def _triangle_area2(a: Point, b: Point, c: Point) -> float:
    return abs(_cross(b - a, c - a))


def representative_triple(points: Sequence[Point]) -> Tuple[int, int, int]:
    """Pick the three points spanning the largest triangle.

    Ties on area go to the larger perimeter, then to the earliest indices.
    """

    if len(points) < 3:
        raise DegenerateGeometry(f"need at least three points, got {len(points)}")
    if len(points) == 3:
        return (0, 1, 2)
    coords = np.vstack([np.asarray(p, dtype=float) for p in points])
    pairwise = squareform(pdist(coords))
    best: Optional[Tuple[int, int, int]] = None
    best_key = (-1.0, -1.0)
    for i, j, k in combinations(range(len(points)), 3):
        area = _triangle_area2(coords[i], coords[j], coords[k])
        perimeter = float(pairwise[i, j] + pairwise[j, k] + pairwise[i, k])
        key = (area, perimeter)
        if key > best_key:
            best_key = key
            best = (i, j, k)
    assert best is not None
    return best


def circumcenter(points: Sequence[Point], *, eps: Optional[float] = None) -> Point:
    """Center of the circle through ``points``.

    Three points are solved exactly by intersecting two perpendicular
    bisectors. For more points a representative triple is used, see
    :func:`representative_triple`.
    """

    if len(points) < 3:
        raise DegenerateGeometry(f"circumcenter needs three points, got {len(points)}")
    if len(points) > 3:
        i, j, k = representative_triple(points)
        points = [points[i], points[j], points[k]]
    if eps is None:
        eps = get_layout_config().collinear_eps

    a, b, c = (np.asarray(p, dtype=float) for p in points)
    first = _perpendicular_bisector(a, b)
    second = _perpendicular_bisector(b, c)
    denom = _cross(first.direction, second.direction)
    extent = max(distance(a, b), distance(b, c), distance(a, c))
    if extent == 0.0 or abs(denom) <= eps * extent * extent:
        raise DegenerateGeometry(f"points are collinear: {a.tolist()}, {b.tolist()}, {c.tolist()}")
    offset = second.anchor - first.anchor
    t = _cross(offset, second.direction) / denom
    return first.anchor + first.direction * t


def circumradius(center: Point, points: Sequence[Point]) -> float:
    return distance(center, np.asarray(points[0], dtype=float))


def circumcircle(points: Sequence[Point], *, eps: Optional[float] = None) -> Tuple[Point, float]:
    """Center and radius of the circle through ``points`` (or their representative triple)."""

    if len(points) > 3:
        i, j, k = representative_triple(points)
        points = [points[i], points[j], points[k]]
    center = circumcenter(points, eps=eps)
    return center, circumradius(center, points)


def transfer_adjacency(graph: "Graph", station_id: int) -> nx.Graph:
    """Transfer graph restricted to the platforms of one station."""

    members = graph.stations[station_id].platforms
    member_set = set(members)
    adjacency = nx.Graph()
    adjacency.add_nodes_from(members)
    for transfer in graph.transfers:
        if transfer.source in member_set and transfer.target in member_set:
            adjacency.add_edge(transfer.source, transfer.target)
    return adjacency


def find_interchange_cluster(graph: "Graph", station_id: int) -> Optional[List[int]]:
    """Largest clique of mutually transfer-linked platforms of size three or more.

    Members are returned in the station's platform order; ``None`` when the
    station has no such clique.
    """

    members = graph.stations[station_id].platforms
    if len(members) < 3:
        return None
    adjacency = transfer_adjacency(graph, station_id)
    candidates = [sorted(clique) for clique in nx.find_cliques(adjacency) if len(clique) >= 3]
    if not candidates:
        return None
    best = min(candidates, key=lambda clique: (-len(clique), clique))
    chosen = set(best)
    return [pid for pid in members if pid in chosen]


__all__ = [
    "DegenerateGeometry",
    "Point",
    "add",
    "as_point",
    "circumcenter",
    "circumcircle",
    "circumradius",
    "distance",
    "find_interchange_cluster",
    "midpoint",
    "point",
    "representative_triple",
    "scale",
    "subtract",
    "transfer_adjacency",
]


apply_debug_logging(globals(), logger=logger, skip={"point", "as_point", "add", "subtract", "scale", "midpoint", "distance"})
