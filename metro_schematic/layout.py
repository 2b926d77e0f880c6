"""Schematic layout: graph + projector + tier style -> RenderModel."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from .config import LayoutConfig, get_layout_config
from .geometry import (
    DegenerateGeometry,
    Point,
    circumcircle,
    distance,
    find_interchange_cluster,
    midpoint,
    point,
)
from .logging_utils import apply_debug_logging
from .lod import Tier, TierStyle
from .network import Graph
from .render_model import (
    XY,
    ClusterCircle,
    CurveSegment,
    HitRegion,
    Marker,
    PixelBounds,
    RenderModel,
    TransferLine,
)

logger = logging.getLogger(__name__)

Projector = Callable[[float, float], Sequence[float]]


def _xy(p: Point) -> XY:
    return (float(p[0]), float(p[1]))


class _Positions:
    """Projects each platform at most once per pass, relative to the surface origin."""

    def __init__(self, graph: Graph, projector: Projector, origin: XY) -> None:
        self._graph = graph
        self._projector = projector
        self._origin = point(*origin)
        self._cache: Dict[int, Point] = {}

    def __call__(self, platform_id: int) -> Point:
        cached = self._cache.get(platform_id)
        if cached is None:
            lat, lng = self._graph.platforms[platform_id].location
            projected = self._projector(lat, lng)
            cached = point(projected[0], projected[1]) - self._origin
            self._cache[platform_id] = cached
        return cached

    @property
    def projected_count(self) -> int:
        return len(self._cache)


def blend_midpoints(mid0: Point, mid1: Point, len0: float, len1: float) -> Point:
    """Point on ``mid0 -> mid1`` at fraction ``len0 / (len0 + len1)``."""

    return mid0 + (mid1 - mid0) * (len0 / (len0 + len1))


def whisker_points(
    position: Point, neighbor0: Point, neighbor1: Point
) -> Optional[Tuple[Point, Point]]:
    """Bezier control points of a pass-through platform.

    Both segment midpoints are shifted by the same offset ``position - mm``,
    where ``mm`` blends the midpoints toward the shorter segment's one.
    Returns ``None`` when both neighbours coincide with the platform.
    """

    len0 = distance(position, neighbor0)
    len1 = distance(position, neighbor1)
    if len0 + len1 == 0.0:
        return None
    mid0 = midpoint(position, neighbor0)
    mid1 = midpoint(position, neighbor1)
    mm = blend_midpoints(mid0, mid1, len0, len1)
    diff = position - mm
    return mid0 + diff, mid1 + diff


def _line_classes(lines: Sequence[Tuple[str, Optional[str]]]) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    labels = tuple(line for line, _ in lines)
    colors = tuple(color for _, color in lines if color)
    return labels, colors


def _hit_region(marker_id: str, center: XY, radius: float, config: LayoutConfig) -> HitRegion:
    return HitRegion(f"d-{marker_id}", center, radius * config.hit_region_scale, marker_id)


def _build_simplified(
    graph: Graph, positions: _Positions, style: TierStyle, model: RenderModel, config: LayoutConfig
) -> None:
    for station in graph.stations:
        first = station.platforms[0]
        center = _xy(positions(first))
        labels = tuple(sorted(graph.passing_lines(station.id)))
        colors: List[str] = []
        for pid in station.platforms:
            for _, color in graph.platform_lines(pid):
                if color and color not in colors:
                    colors.append(color)
        marker_id = f"s-{station.id}"
        region = _hit_region(marker_id, center, style.circle_radius, config)
        model.markers.append(
            Marker(
                marker_id,
                center,
                style.circle_radius,
                " ".join(("station",) + labels),
                "station",
                station.id,
                region.id,
                border=style.circle_border,
                colors=tuple(colors),
            )
        )
        model.hit_regions.append(region)


def _platform_whiskers(graph: Graph, positions: _Positions, platform_id: int) -> Optional[Tuple[Point, Point]]:
    platform = graph.platforms[platform_id]
    if len(platform.spans) != 2:
        return None
    neighbors = [positions(graph.neighbor(platform_id, span_id)) for span_id in platform.spans]
    return whisker_points(positions(platform_id), neighbors[0], neighbors[1])


def _cluster_circle(
    graph: Graph,
    station_id: int,
    members: Sequence[int],
    positions: _Positions,
    style: TierStyle,
    config: LayoutConfig,
) -> Optional[ClusterCircle]:
    coords = [positions(pid) for pid in members]
    try:
        center, radius = circumcircle(coords, eps=config.collinear_eps)
    except DegenerateGeometry as exc:
        logger.warning(
            "Station %d (%s): cluster %s is degenerate (%s); drawing transfer lines instead",
            station_id,
            graph.stations[station_id].name,
            list(members),
            exc,
        )
        return None
    return ClusterCircle(
        station_id,
        _xy(center),
        radius,
        tuple(members),
        border=style.circle_border,
        opacity=config.cluster_opacity,
    )


def _outer_neighbor(graph: Graph, platform_id: int, span_id: int) -> int:
    """Platform beyond ``platform_id`` along the continuing span, or itself at a terminus."""

    spans = graph.platforms[platform_id].spans
    if len(spans) != 2:
        return platform_id
    other_span = spans[1] if spans[0] == span_id else spans[0]
    return graph.neighbor(platform_id, other_span)


def _control_point(
    graph: Graph,
    whiskers: Dict[int, Tuple[Point, Point]],
    positions: _Positions,
    platform_id: int,
    span_id: int,
) -> Point:
    pair = whiskers.get(platform_id)
    if pair is None:
        return positions(platform_id)
    index = graph.platforms[platform_id].spans.index(span_id)
    return pair[index]


def _build_detailed(
    graph: Graph, positions: _Positions, style: TierStyle, model: RenderModel, config: LayoutConfig
) -> None:
    whiskers: Dict[int, Tuple[Point, Point]] = {}
    covered: Set[int] = set()

    for station in graph.stations:
        cluster = find_interchange_cluster(graph, station.id)
        for pid in station.platforms:
            center = _xy(positions(pid))
            labels, colors = _line_classes(graph.platform_lines(pid))
            marker_id = f"p-{pid}"
            region = _hit_region(marker_id, center, style.circle_radius, config)
            model.markers.append(
                Marker(
                    marker_id,
                    center,
                    style.circle_radius,
                    " ".join(("station",) + labels),
                    "platform",
                    pid,
                    region.id,
                    border=style.circle_border,
                    colors=colors,
                )
            )
            model.hit_regions.append(region)

            pair = _platform_whiskers(graph, positions, pid)
            if pair is not None:
                whiskers[pid] = pair

        if cluster:
            circle = _cluster_circle(graph, station.id, cluster, positions, style, config)
            if circle is not None:
                model.clusters.append(circle)
                covered.update(circle.platforms)

    for span in graph.spans:
        src, trg = span.source, span.target
        neighborhood = tuple(
            _xy(positions(pid))
            for pid in (_outer_neighbor(graph, src, span.id), src, trg, _outer_neighbor(graph, trg, span.id))
        )
        controls = (
            _xy(positions(src)),
            _xy(_control_point(graph, whiskers, positions, src, span.id)),
            _xy(_control_point(graph, whiskers, positions, trg, span.id)),
            _xy(positions(trg)),
        )
        lines = tuple(graph.routes[route_id].line for route_id in span.routes)
        model.curves.append(CurveSegment(span.id, controls, neighborhood, lines, style.line_width))  # type: ignore[arg-type]

    for transfer in graph.transfers:
        if transfer.source in covered and transfer.target in covered:
            continue
        model.transfer_lines.append(
            TransferLine(
                transfer.id,
                _xy(positions(transfer.source)),
                _xy(positions(transfer.target)),
                border=style.circle_border,
                opacity=config.transfer_opacity,
            )
        )

    model.whiskers = {pid: (_xy(a), _xy(b)) for pid, (a, b) in whiskers.items()}


def build(
    graph: Graph,
    projector: Projector,
    bounds: PixelBounds,
    style: TierStyle,
    *,
    config: Optional[LayoutConfig] = None,
) -> RenderModel:
    """Lay out ``graph`` for one tier.

    ``projector`` maps ``(lat, lng)`` to viewport pixels; ``bounds.min`` is
    subtracted from every projected point so the result is surface-local.
    """

    config = config or get_layout_config()
    model = RenderModel(style=style, bounds=bounds)
    if style.tier is Tier.HIDDEN:
        logger.info("Zoom %s is below the visible range; layout is empty", style.zoom)
        return model

    positions = _Positions(graph, projector, bounds.min)
    if style.tier is Tier.SIMPLIFIED:
        _build_simplified(graph, positions, style, model, config)
    else:
        _build_detailed(graph, positions, style, model, config)

    logger.info(
        "Layout (%s, zoom %s): %d markers, %d curves, %d clusters, %d transfer lines, %d projections",
        style.tier.value,
        style.zoom,
        len(model.markers),
        len(model.curves),
        len(model.clusters),
        len(model.transfer_lines),
        positions.projected_count,
    )
    return model


__all__ = ["Projector", "blend_midpoints", "build", "whisker_points"]


apply_debug_logging(globals(), logger=logger, skip={"blend_midpoints", "whisker_points"})
