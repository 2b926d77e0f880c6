"""Transit network data model, feed parsing and integrity checks."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

logger = logging.getLogger(__name__)

LatLng = Tuple[float, float]

_COLLECTIONS = ("platforms", "stations", "spans", "transfers", "routes")


class NetworkError(Exception):
    """Base class for problems with the network feed."""


class GraphFeedError(NetworkError):
    """The feed could not be decoded into the graph shape."""


class GraphIntegrityError(NetworkError):
    """The decoded graph references ids that do not resolve."""


@dataclass(frozen=True)
class Platform:
    id: int
    name: str
    location: LatLng
    spans: Tuple[int, ...]
    station: int
    alt_names: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Station:
    id: int
    name: str
    platforms: Tuple[int, ...]
    alt_names: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Span:
    id: int
    source: int
    target: int
    routes: Tuple[int, ...] = ()

    def other_end(self, platform_id: int) -> int:
        return self.target if self.source == platform_id else self.source


@dataclass(frozen=True)
class Transfer:
    id: int
    source: int
    target: int


@dataclass(frozen=True)
class Route:
    id: int
    line: str
    color: Optional[str] = None
    spans: Tuple[int, ...] = ()


@dataclass(frozen=True)
class GeoBounds:
    south: float
    west: float
    north: float
    east: float

    @property
    def north_west(self) -> LatLng:
        return (self.north, self.west)

    @property
    def south_east(self) -> LatLng:
        return (self.south, self.east)

    @property
    def center(self) -> LatLng:
        return ((self.south + self.north) * 0.5, (self.west + self.east) * 0.5)

    @classmethod
    def around(cls, locations: Iterable[LatLng]) -> "GeoBounds":
        lats: List[float] = []
        lngs: List[float] = []
        for lat, lng in locations:
            lats.append(lat)
            lngs.append(lng)
        if not lats:
            raise ValueError("GeoBounds.around requires at least one location")
        return cls(min(lats), min(lngs), max(lats), max(lngs))


@dataclass(frozen=True)
class Graph:
    """Arena of network entities; every cross reference is a list index."""

    platforms: Tuple[Platform, ...]
    stations: Tuple[Station, ...]
    spans: Tuple[Span, ...]
    transfers: Tuple[Transfer, ...] = ()
    routes: Tuple[Route, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Graph":
        """Decode the feed document and check integrity."""

        if not isinstance(data, Mapping):
            raise GraphFeedError(f"feed must be a JSON object, got {type(data).__name__}")
        missing = [key for key in ("platforms", "stations", "spans") if key not in data]
        if missing:
            raise GraphFeedError(f"feed is missing collections: {', '.join(missing)}")
        for key in _COLLECTIONS:
            if key in data and not isinstance(data[key], list):
                raise GraphFeedError(f"feed collection {key!r} must be a list")
        if not data["platforms"]:
            raise GraphFeedError("feed has no platforms")

        raw_spans = data["spans"]
        spans = tuple(_decode_span(idx, entry) for idx, entry in enumerate(raw_spans))
        stations = tuple(_decode_station(idx, entry) for idx, entry in enumerate(data["stations"]))
        owner: Dict[int, int] = {}
        for station in stations:
            for platform_id in station.platforms:
                if platform_id in owner:
                    raise GraphIntegrityError(
                        f"platform {platform_id} belongs to stations {owner[platform_id]} and {station.id}"
                    )
                owner[platform_id] = station.id

        incident: Dict[int, List[int]] = {}
        for span in spans:
            incident.setdefault(span.source, []).append(span.id)
            incident.setdefault(span.target, []).append(span.id)

        platforms = tuple(
            _decode_platform(idx, entry, owner, incident) for idx, entry in enumerate(data["platforms"])
        )
        transfers = tuple(_decode_transfer(idx, entry) for idx, entry in enumerate(data.get("transfers", [])))

        route_spans: Dict[int, List[int]] = {}
        for span in spans:
            for route_id in span.routes:
                route_spans.setdefault(route_id, []).append(span.id)
        routes = tuple(
            _decode_route(idx, entry, route_spans.get(idx, [])) for idx, entry in enumerate(data.get("routes", []))
        )

        graph = cls(platforms, stations, spans, transfers, routes)
        check_integrity(graph)
        logger.info(
            "Loaded graph: %d platforms, %d stations, %d spans, %d transfers, %d routes",
            len(platforms),
            len(stations),
            len(spans),
            len(transfers),
            len(routes),
        )
        return graph

    def neighbor(self, platform_id: int, span_id: int) -> int:
        """Return the endpoint of ``span_id`` that is not ``platform_id``."""

        return self.spans[span_id].other_end(platform_id)

    def geo_bounds(self) -> GeoBounds:
        return GeoBounds.around(platform.location for platform in self.platforms)

    def platform_lines(self, platform_id: int) -> List[Tuple[str, Optional[str]]]:
        """Distinct ``(line, color)`` pairs of the routes serving a platform, in span order."""

        seen: Set[str] = set()
        lines: List[Tuple[str, Optional[str]]] = []
        for span_id in self.platforms[platform_id].spans:
            for route_id in self.spans[span_id].routes:
                route = self.routes[route_id]
                if route.line in seen:
                    continue
                seen.add(route.line)
                lines.append((route.line, route.color))
        return lines

    def passing_lines(self, station_id: int) -> Set[str]:
        lines: Set[str] = set()
        for platform_id in self.stations[station_id].platforms:
            lines.update(line for line, _ in self.platform_lines(platform_id))
        return lines

    def station_center(self, station_id: int) -> LatLng:
        members = [self.platforms[pid].location for pid in self.stations[station_id].platforms]
        lat = sum(loc[0] for loc in members) / len(members)
        lng = sum(loc[1] for loc in members) / len(members)
        return (lat, lng)

    def station_names(self, station_id: int) -> List[str]:
        """Names of a station zipped from its platforms.

        The first entry joins the distinct primary names; each following
        entry joins the distinct alternates of one language, languages in
        order of first appearance.
        """

        members = [self.platforms[pid] for pid in self.stations[station_id].platforms]
        return _zip_names([p.name for p in members], [p.alt_names for p in members])

    def platform_names(self, platform_id: int) -> List[str]:
        platform = self.platforms[platform_id]
        return _zip_names([platform.name], [platform.alt_names])


def _zip_names(primary: Sequence[str], alternates: Sequence[Mapping[str, str]]) -> List[str]:
    def _distinct(values: Iterable[str]) -> List[str]:
        out: List[str] = []
        for value in values:
            if value and value not in out:
                out.append(value)
        return out

    names = [" / ".join(_distinct(primary))]
    languages: List[str] = []
    for alt in alternates:
        for lang in alt:
            if lang not in languages:
                languages.append(lang)
    for lang in languages:
        joined = " / ".join(_distinct(alt.get(lang, "") for alt in alternates))
        if joined:
            names.append(joined)
    return names


def _require(entry: Any, key: str, kind: str, idx: int) -> Any:
    if not isinstance(entry, Mapping):
        raise GraphFeedError(f"{kind} {idx} must be an object")
    if key not in entry:
        raise GraphFeedError(f"{kind} {idx} has no {key!r}")
    return entry[key]


def _as_index(value: Any, kind: str, idx: int, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise GraphFeedError(f"{kind} {idx}: {key} must be an integer id, got {value!r}")
    return value


def _as_index_list(value: Any, kind: str, idx: int, key: str) -> Tuple[int, ...]:
    if not isinstance(value, list):
        raise GraphFeedError(f"{kind} {idx}: {key} must be a list")
    return tuple(_as_index(item, kind, idx, key) for item in value)


def _decode_location(value: Any, idx: int) -> LatLng:
    if isinstance(value, Mapping):
        try:
            lat, lng = value["lat"], value["lng"]
        except KeyError as exc:
            raise GraphFeedError(f"platform {idx}: location object lacks {exc.args[0]!r}") from exc
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        lat, lng = value
    else:
        raise GraphFeedError(f"platform {idx}: location must be [lat, lng] or {{lat, lng}}")
    try:
        return (float(lat), float(lng))
    except (TypeError, ValueError) as exc:
        raise GraphFeedError(f"platform {idx}: location is not numeric") from exc


def _decode_alt_names(entry: Mapping[str, Any]) -> Dict[str, str]:
    alt = entry.get("altNames", entry.get("alt_names")) or {}
    if not isinstance(alt, Mapping):
        return {}
    return {str(lang): str(name) for lang, name in alt.items() if name}


def _decode_span(idx: int, entry: Any) -> Span:
    source = _as_index(_require(entry, "source", "span", idx), "span", idx, "source")
    target = _as_index(_require(entry, "target", "span", idx), "span", idx, "target")
    routes = _as_index_list(entry.get("routes", []), "span", idx, "routes")
    return Span(idx, source, target, routes)


def _decode_station(idx: int, entry: Any) -> Station:
    platforms = _as_index_list(_require(entry, "platforms", "station", idx), "station", idx, "platforms")
    return Station(idx, str(entry.get("name", "")), platforms, _decode_alt_names(entry))


def _decode_platform(
    idx: int,
    entry: Any,
    owner: Mapping[int, int],
    incident: Mapping[int, List[int]],
) -> Platform:
    location = _decode_location(_require(entry, "location", "platform", idx), idx)
    if "spans" in entry:
        spans = _as_index_list(entry["spans"], "platform", idx, "spans")
    else:
        spans = tuple(incident.get(idx, ()))
    if idx not in owner:
        raise GraphIntegrityError(f"platform {idx} does not belong to any station")
    station = owner[idx]
    declared = entry.get("station")
    if declared is not None and declared != station:
        raise GraphIntegrityError(
            f"platform {idx} declares station {declared} but is listed by station {station}"
        )
    return Platform(idx, str(entry.get("name", "")), location, spans, station, _decode_alt_names(entry))


def _decode_transfer(idx: int, entry: Any) -> Transfer:
    source = _as_index(_require(entry, "source", "transfer", idx), "transfer", idx, "source")
    target = _as_index(_require(entry, "target", "transfer", idx), "transfer", idx, "target")
    return Transfer(idx, source, target)


def _decode_route(idx: int, entry: Any, derived_spans: Sequence[int]) -> Route:
    line = str(_require(entry, "line", "route", idx))
    color = entry.get("color")
    if "spans" in entry:
        spans = _as_index_list(entry["spans"], "route", idx, "spans")
    else:
        spans = tuple(derived_spans)
    return Route(idx, line, str(color) if color is not None else None, spans)


def check_integrity(graph: Graph) -> None:
    """Raise :class:`GraphIntegrityError` on any unresolved reference."""

    n_platforms = len(graph.platforms)
    n_spans = len(graph.spans)
    n_stations = len(graph.stations)
    n_routes = len(graph.routes)

    def _check(value: int, limit: int, what: str, where: str) -> None:
        if not 0 <= value < limit:
            raise GraphIntegrityError(f"{where} references missing {what} {value}")

    for span in graph.spans:
        _check(span.source, n_platforms, "platform", f"span {span.id}")
        _check(span.target, n_platforms, "platform", f"span {span.id}")
        for route_id in span.routes:
            _check(route_id, n_routes, "route", f"span {span.id}")

    for platform in graph.platforms:
        _check(platform.station, n_stations, "station", f"platform {platform.id}")
        if platform.id not in graph.stations[platform.station].platforms:
            raise GraphIntegrityError(
                f"platform {platform.id} is not listed by its station {platform.station}"
            )
        for span_id in platform.spans:
            _check(span_id, n_spans, "span", f"platform {platform.id}")
            span = graph.spans[span_id]
            if platform.id not in (span.source, span.target):
                raise GraphIntegrityError(f"platform {platform.id} lists span {span_id} it is not an endpoint of")

    claimed: Set[int] = set()
    for station in graph.stations:
        if not station.platforms:
            raise GraphIntegrityError(f"station {station.id} has no platforms")
        for platform_id in station.platforms:
            _check(platform_id, n_platforms, "platform", f"station {station.id}")
            if platform_id in claimed:
                raise GraphIntegrityError(f"platform {platform_id} is claimed by more than one station")
            claimed.add(platform_id)
    if len(claimed) != n_platforms:
        orphans = sorted(set(range(n_platforms)) - claimed)
        raise GraphIntegrityError(f"platforms without a station: {orphans}")

    for transfer in graph.transfers:
        _check(transfer.source, n_platforms, "platform", f"transfer {transfer.id}")
        _check(transfer.target, n_platforms, "platform", f"transfer {transfer.id}")
        if transfer.source == transfer.target:
            raise GraphIntegrityError(f"transfer {transfer.id} joins platform {transfer.source} to itself")

    for route in graph.routes:
        for span_id in route.spans:
            _check(span_id, n_spans, "span", f"route {route.id}")


def load_graph(source: Union[str, Path, Mapping[str, Any]]) -> Graph:
    """Load a graph from a JSON document, a path to one, or a decoded mapping."""

    if isinstance(source, Mapping):
        return Graph.from_dict(source)
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise GraphFeedError(f"couldn't read feed {source}: {exc}") from exc
    else:
        text = source
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GraphFeedError(f"feed is not valid JSON: {exc}") from exc
    return Graph.from_dict(data)


__all__ = [
    "GeoBounds",
    "Graph",
    "GraphFeedError",
    "GraphIntegrityError",
    "LatLng",
    "NetworkError",
    "Platform",
    "Route",
    "Span",
    "Station",
    "Transfer",
    "check_integrity",
    "load_graph",
]
