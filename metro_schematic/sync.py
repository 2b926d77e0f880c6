"""Keeps the overlay surface aligned with the map and decides when to re-lay it out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol

from .config import ConfigurationError, LayoutConfig, get_layout_config
from .layout import build
from .lod import Tier, select_tier, style_for_zoom
from .network import GeoBounds, Graph, LatLng
from .projection import default_tile_layer_for_zoom
from .render_model import XY, PixelBounds, RenderModel
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

RebuildListener = Callable[[RenderModel], None]


class MapView(Protocol):
    def project(self, lat: float, lng: float) -> XY: ...

    def current_zoom(self) -> float: ...

    def pixel_bounds_for(self, bounds: GeoBounds) -> PixelBounds: ...

    def pane_translation(self) -> XY: ...

    def set_view(self, center: LatLng) -> None: ...

    def enable_dragging(self) -> None: ...

    def disable_dragging(self) -> None: ...

    def set_tile_layer(self, layer: str) -> None: ...


IDLE = "idle"
ZOOMING = "zooming"


@dataclass(frozen=True)
class SyncState:
    tier: Tier = Tier.HIDDEN
    zoom: Optional[float] = None
    prev_zoom: Optional[float] = None
    phase: str = IDLE


def begin_zoom(state: SyncState, zoom: float) -> SyncState:
    """``zoomstart``: remember the zoom being left."""

    return replace(state, prev_zoom=zoom, phase=ZOOMING)


def settle_zoom(state: SyncState, zoom: float) -> SyncState:
    """``zoomend`` or initial load: adopt the new zoom and its tier."""

    return replace(state, zoom=zoom, tier=select_tier(zoom), phase=IDLE)


_REQUIRED_MAP_METHODS = (
    "project",
    "current_zoom",
    "pixel_bounds_for",
    "pane_translation",
    "set_view",
    "enable_dragging",
    "disable_dragging",
    "set_tile_layer",
)


class Synchronizer:
    """Mirrors pans onto the surface and rebuilds the layout when a zoom settles."""

    def __init__(
        self,
        map_view: MapView,
        surface: DrawingSurface,
        *,
        tile_layer_for_zoom: Callable[[float], str] = default_tile_layer_for_zoom,
        config: Optional[LayoutConfig] = None,
    ) -> None:
        if map_view is None:
            raise ConfigurationError("cannot attach overlay: map view is missing")
        missing = [name for name in _REQUIRED_MAP_METHODS if not callable(getattr(map_view, name, None))]
        if missing:
            raise ConfigurationError(f"map view lacks required methods: {', '.join(missing)}")
        if surface is None:
            raise ConfigurationError("cannot attach overlay: drawing surface is missing")

        self.map_view = map_view
        self.surface = surface
        self.tile_layer_for_zoom = tile_layer_for_zoom
        self.config = config or get_layout_config()
        self.state = SyncState()
        self.graph: Optional[Graph] = None
        self.model: Optional[RenderModel] = None
        self.rebuild_count = 0
        self._listeners: List[RebuildListener] = []
        self._rebuilding = False
        self._pending = False

    def bind(self) -> "Synchronizer":
        """Subscribe to the map's viewport events when it exposes ``on``."""

        register = getattr(self.map_view, "on", None)
        if register is None:
            raise ConfigurationError("map view does not emit events")
        register("move", self.on_move)
        register("zoomstart", self.on_zoomstart)
        register("zoomend", self.on_zoomend)
        return self

    def add_rebuild_listener(self, listener: RebuildListener) -> None:
        self._listeners.append(listener)

    # viewport events ----------------------------------------------------

    def on_move(self) -> None:
        self.surface.transform = self.map_view.pane_translation()

    def on_zoomstart(self) -> None:
        self.state = begin_zoom(self.state, self.map_view.current_zoom())
        self.surface.opacity = self.config.provisional_opacity
        self.map_view.disable_dragging()

    def on_zoomend(self) -> None:
        zoom = self.map_view.current_zoom()
        prev_zoom = self.state.prev_zoom
        if prev_zoom is not None:
            layer = self.tile_layer_for_zoom(zoom)
            if layer != self.tile_layer_for_zoom(prev_zoom):
                self.map_view.set_tile_layer(layer)
        self._settle(zoom)

    # graph lifecycle ----------------------------------------------------

    def initial_load(self, graph: Graph) -> Optional[RenderModel]:
        """Center the view on ``graph`` and lay it out for the current zoom."""

        self.graph = graph
        self.map_view.set_view(graph.geo_bounds().center)
        self.map_view.disable_dragging()
        return self._settle(self.map_view.current_zoom())

    def replace_graph(self, graph: Graph) -> Optional[RenderModel]:
        """Swap in an edited graph and lay it out from scratch."""

        self.graph = graph
        if self.state.zoom is None:
            self.state = settle_zoom(self.state, self.map_view.current_zoom())
        return self.rebuild()

    # rebuild ------------------------------------------------------------

    def _settle(self, zoom: float) -> Optional[RenderModel]:
        self.state = settle_zoom(self.state, zoom)
        try:
            return self.rebuild()
        finally:
            self.surface.opacity = None
            self.map_view.enable_dragging()

    def rebuild(self) -> Optional[RenderModel]:
        """Run a layout pass; a request made during a pass runs once after it."""

        if self._rebuilding:
            logger.debug("Rebuild requested during a rebuild; queued")
            self._pending = True
            return None
        self._rebuilding = True
        try:
            model = self._rebuild_once()
            while self._pending:
                self._pending = False
                model = self._rebuild_once()
            return model
        finally:
            self._rebuilding = False
            self._pending = False

    def _rebuild_once(self) -> Optional[RenderModel]:
        if self.graph is None or self.state.zoom is None:
            logger.info("No graph loaded; skipping layout")
            return None
        zoom = self.state.zoom
        style = style_for_zoom(zoom)

        bounds = self.map_view.pixel_bounds_for(self.graph.geo_bounds())
        surface_bounds = bounds.padded(self.config.buffer_factor)
        translation = self.map_view.pane_translation()
        self.surface.transform = translation
        width, height = surface_bounds.size
        self.surface.resize(
            surface_bounds.min[0] - translation[0],
            surface_bounds.min[1] - translation[1],
            width,
            height,
        )

        model = build(self.graph, self.map_view.project, surface_bounds, style, config=self.config)
        self.surface.show(model)
        self.model = model
        self.rebuild_count += 1
        logger.info(
            "Rebuilt overlay #%d at zoom %s (%s), surface %.0fx%.0f",
            self.rebuild_count,
            zoom,
            self.state.tier.value,
            width,
            height,
        )
        for listener in list(self._listeners):
            listener(model)
        return model


__all__ = [
    "IDLE",
    "ZOOMING",
    "MapView",
    "SyncState",
    "Synchronizer",
    "begin_zoom",
    "settle_zoom",
]
