"""Spherical Web Mercator projection and an offline map view built on it."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional, Tuple

from .network import GeoBounds, LatLng
from .render_model import XY, PixelBounds

logger = logging.getLogger(__name__)

MAX_LATITUDE = 85.0511287798
TILE_SIZE = 256

Handler = Callable[[], None]


class WebMercatorProjector:
    """Maps ``(lat, lng)`` to absolute world pixels at a zoom level."""

    def __init__(self, zoom: float, tile_size: int = TILE_SIZE) -> None:
        self.zoom = zoom
        self.tile_size = tile_size

    @property
    def world_size(self) -> float:
        return self.tile_size * math.pow(2.0, self.zoom)

    def project(self, lat: float, lng: float) -> XY:
        lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
        sin_lat = math.sin(math.radians(lat))
        x = (lng + 180.0) / 360.0
        y = 0.5 - math.log((1.0 + sin_lat) / (1.0 - sin_lat)) / (4.0 * math.pi)
        size = self.world_size
        return (x * size, y * size)

    def unproject(self, x: float, y: float) -> LatLng:
        size = self.world_size
        lng = x / size * 360.0 - 180.0
        n = math.pi - 2.0 * math.pi * y / size
        lat = math.degrees(math.atan(math.sinh(n)))
        return (lat, lng)

    def __call__(self, lat: float, lng: float) -> XY:
        return self.project(lat, lng)


def default_tile_layer_for_zoom(zoom: float) -> str:
    """Coarse overview tiles below street level, detailed ones above."""

    if zoom < 12:
        return "overview"
    if zoom < 16:
        return "streets"
    return "buildings"


class StaticMapView:
    """In-process stand-in for an interactive map.

    Container points are world pixels minus the top-left corner of the view
    plus the pan translation accumulated since the last view reset, which is
    how a slippy map's pane offset behaves while dragging.
    """

    def __init__(
        self,
        zoom: float,
        center: LatLng = (0.0, 0.0),
        viewport: Tuple[int, int] = (1024, 768),
        tile_layer_for_zoom: Callable[[float], str] = default_tile_layer_for_zoom,
    ) -> None:
        self.viewport = viewport
        self.tile_layer_for_zoom = tile_layer_for_zoom
        self.tile_layer: Optional[str] = tile_layer_for_zoom(zoom)
        self.dragging_enabled = True
        self._projector = WebMercatorProjector(zoom)
        self._center = center
        self._translation: XY = (0.0, 0.0)
        self._origin: XY = (0.0, 0.0)
        self._handlers: DefaultDict[str, List[Handler]] = defaultdict(list)
        self._once: DefaultDict[str, List[Handler]] = defaultdict(list)
        self._reset_origin()

    def _reset_origin(self) -> None:
        cx, cy = self._projector.project(*self._center)
        self._origin = (cx - self.viewport[0] / 2.0, cy - self.viewport[1] / 2.0)
        self._translation = (0.0, 0.0)

    # events -------------------------------------------------------------

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def once(self, event: str, handler: Handler) -> None:
        self._once[event].append(handler)

    def fire(self, event: str) -> None:
        pending, self._once[event] = self._once[event], []
        for handler in list(self._handlers[event]) + pending:
            handler()

    # map view protocol --------------------------------------------------

    def project(self, lat: float, lng: float) -> XY:
        wx, wy = self._projector.project(lat, lng)
        return (wx - self._origin[0] + self._translation[0], wy - self._origin[1] + self._translation[1])

    def current_zoom(self) -> float:
        return self._projector.zoom

    def pixel_bounds_for(self, bounds: GeoBounds) -> PixelBounds:
        return PixelBounds.from_corners(self.project(*bounds.north_west), self.project(*bounds.south_east))

    def pane_translation(self) -> XY:
        return self._translation

    def set_view(self, center: LatLng, zoom: Optional[float] = None) -> None:
        self.fire("movestart")
        self._center = center
        if zoom is not None:
            self._projector = WebMercatorProjector(zoom, self._projector.tile_size)
        self._reset_origin()
        self.fire("move")
        self.fire("moveend")

    def enable_dragging(self) -> None:
        self.dragging_enabled = True

    def disable_dragging(self) -> None:
        self.dragging_enabled = False

    def set_tile_layer(self, layer: str) -> None:
        logger.info("Switching tile layer %s -> %s", self.tile_layer, layer)
        self.tile_layer = layer

    # user interaction ---------------------------------------------------

    def pan_by(self, dx: float, dy: float) -> None:
        if not self.dragging_enabled:
            raise RuntimeError("dragging is disabled while the overlay is being rebuilt")
        self.fire("movestart")
        self._translation = (self._translation[0] + dx, self._translation[1] + dy)
        self.fire("move")
        self.fire("moveend")

    def zoom_to(self, zoom: float) -> None:
        """Zoom around the current view center."""

        vx = self._origin[0] - self._translation[0] + self.viewport[0] / 2.0
        vy = self._origin[1] - self._translation[1] + self.viewport[1] / 2.0
        center = self._projector.unproject(vx, vy)
        self.fire("zoomstart")
        self._projector = WebMercatorProjector(zoom, self._projector.tile_size)
        self._center = center
        self._reset_origin()
        self.fire("zoomend")


__all__ = ["MAX_LATITUDE", "TILE_SIZE", "StaticMapView", "WebMercatorProjector", "default_tile_layer_for_zoom"]
