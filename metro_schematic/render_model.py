"""Per-pass render entities and the layered primitive tree built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .lod import Tier, TierStyle

XY = Tuple[float, float]

LAYER_ORDER = ("paths", "transfers", "station-circles", "dummy-circles")


@dataclass(frozen=True)
class PixelBounds:
    min: XY
    max: XY

    @property
    def size(self) -> XY:
        return (self.max[0] - self.min[0], self.max[1] - self.min[1])

    @property
    def center(self) -> XY:
        return ((self.min[0] + self.max[0]) * 0.5, (self.min[1] + self.max[1]) * 0.5)

    @classmethod
    def from_corners(cls, a: XY, b: XY) -> "PixelBounds":
        return cls(
            (min(a[0], b[0]), min(a[1], b[1])),
            (max(a[0], b[0]), max(a[1], b[1])),
        )

    def padded(self, factor: float) -> "PixelBounds":
        """Grow by ``factor - 1`` times the size, split evenly around the box."""

        width, height = self.size
        dx = width * (factor - 1.0) * 0.5
        dy = height * (factor - 1.0) * 0.5
        return PixelBounds((self.min[0] - dx, self.min[1] - dy), (self.max[0] + dx, self.max[1] + dy))


@dataclass(frozen=True)
class Marker:
    id: str
    center: XY
    radius: float
    style_class: str
    owner_kind: str  # "platform" or "station"
    owner_id: int
    hit_region_id: str
    border: float = 0.0
    colors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HitRegion:
    id: str
    center: XY
    radius: float
    marker_id: str


@dataclass(frozen=True)
class CurveSegment:
    """Cubic bezier for one span: source, two control points, target."""

    span_id: int
    points: Tuple[XY, XY, XY, XY]
    neighborhood: Tuple[XY, XY, XY, XY]
    lines: Tuple[str, ...] = ()
    width: float = 0.0

    @property
    def is_straight(self) -> bool:
        return self.points[1] == self.points[0] and self.points[2] == self.points[3]


@dataclass(frozen=True)
class ClusterCircle:
    station_id: int
    center: XY
    radius: float
    platforms: Tuple[int, ...]
    border: float = 0.0
    opacity: float = 0.5


@dataclass(frozen=True)
class TransferLine:
    transfer_id: int
    start: XY
    end: XY
    border: float = 0.0
    opacity: float = 0.5


@dataclass(frozen=True)
class Plate:
    """Transient label anchored next to a marker."""

    marker_id: str
    anchor: XY
    lines: Tuple[str, ...]
    id: str = "plate"


@dataclass(frozen=True)
class CirclePrimitive:
    id: Optional[str]
    center: XY
    radius: float
    style_class: str
    visible: bool = True
    interactive: bool = False
    ref: Optional[str] = None
    stroke_width: float = 0.0
    opacity: Optional[float] = None


@dataclass(frozen=True)
class LinePrimitive:
    start: XY
    end: XY
    style_class: str
    stroke_width: float = 0.0
    opacity: Optional[float] = None


@dataclass(frozen=True)
class PathPrimitive:
    points: Tuple[XY, ...]
    style_class: str
    stroke_width: float = 0.0


@dataclass
class RenderModel:
    style: TierStyle
    bounds: Optional[PixelBounds] = None
    markers: List[Marker] = field(default_factory=list)
    hit_regions: List[HitRegion] = field(default_factory=list)
    curves: List[CurveSegment] = field(default_factory=list)
    clusters: List[ClusterCircle] = field(default_factory=list)
    transfer_lines: List[TransferLine] = field(default_factory=list)
    whiskers: Dict[int, Tuple[XY, XY]] = field(default_factory=dict)

    @property
    def tier(self) -> Tier:
        return self.style.tier

    @property
    def is_empty(self) -> bool:
        return not (self.markers or self.hit_regions or self.curves or self.clusters or self.transfer_lines)

    @property
    def registry(self) -> Dict[str, str]:
        """Hit region id to marker id."""

        return {region.id: region.marker_id for region in self.hit_regions}

    @property
    def covered_platforms(self) -> FrozenSet[int]:
        return frozenset(pid for cluster in self.clusters for pid in cluster.platforms)

    def marker(self, marker_id: str) -> Marker:
        for marker in self.markers:
            if marker.id == marker_id:
                return marker
        raise KeyError(marker_id)

    def layers(self) -> Dict[str, List[object]]:
        """Primitives grouped by surface layer, in paint order."""

        groups: Dict[str, List[object]] = {name: [] for name in LAYER_ORDER}
        for curve in self.curves:
            classes = " ".join(("span",) + curve.lines)
            groups["paths"].append(PathPrimitive(curve.points, classes, curve.width))
        for cluster in self.clusters:
            groups["transfers"].append(
                CirclePrimitive(
                    None,
                    cluster.center,
                    cluster.radius,
                    "transfer",
                    stroke_width=cluster.border,
                    opacity=cluster.opacity,
                )
            )
        for line in self.transfer_lines:
            groups["transfers"].append(
                LinePrimitive(line.start, line.end, "transfer", line.border, line.opacity)
            )
        for marker in self.markers:
            groups["station-circles"].append(
                CirclePrimitive(marker.id, marker.center, marker.radius, marker.style_class, stroke_width=marker.border)
            )
        for region in self.hit_regions:
            groups["dummy-circles"].append(
                CirclePrimitive(
                    region.id,
                    region.center,
                    region.radius,
                    "invisible-circle",
                    visible=False,
                    interactive=True,
                    ref=region.marker_id,
                )
            )
        return groups

    def primitives(self) -> Iterable[object]:
        for items in self.layers().values():
            yield from items


__all__ = [
    "LAYER_ORDER",
    "CirclePrimitive",
    "ClusterCircle",
    "CurveSegment",
    "HitRegion",
    "LinePrimitive",
    "Marker",
    "PathPrimitive",
    "PixelBounds",
    "Plate",
    "RenderModel",
    "TransferLine",
    "XY",
]
