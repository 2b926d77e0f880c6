"""Wiring of the synchronizer, surface and label layer around one map view."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from .config import LayoutConfig, get_layout_config
from .labels import LabelLayer
from .network import GraphFeedError, load_graph
from .projection import default_tile_layer_for_zoom
from .render_model import RenderModel
from .surface import DrawingSurface
from .sync import MapView, Synchronizer

logger = logging.getLogger(__name__)


class MetroOverlay:
    """Schematic network overlay on top of a map view."""

    def __init__(
        self,
        map_view: MapView,
        surface: Optional[DrawingSurface] = None,
        *,
        tile_layer_for_zoom: Callable[[float], str] = default_tile_layer_for_zoom,
        config: Optional[LayoutConfig] = None,
    ) -> None:
        self.config = config or get_layout_config()
        self.surface = surface if surface is not None else DrawingSurface()
        self.sync = Synchronizer(
            map_view,
            self.surface,
            tile_layer_for_zoom=tile_layer_for_zoom,
            config=self.config,
        )
        self.labels = LabelLayer(self.surface, config=self.config)
        self.sync.add_rebuild_listener(self._on_rebuild)
        if hasattr(map_view, "on"):
            self.sync.bind()

    def _on_rebuild(self, model: RenderModel) -> None:
        assert self.sync.graph is not None
        self.labels.attach(model, self.sync.graph)

    @property
    def model(self) -> Optional[RenderModel]:
        return self.sync.model

    def receive_feed(self, feed: Union[str, Path, Mapping[str, Any]]) -> bool:
        """Load a feed and lay it out.

        A malformed feed is logged and leaves the overlay untouched; integrity
        errors in a well-formed feed propagate.
        """

        try:
            graph = load_graph(feed)
        except GraphFeedError as exc:
            logger.error("Couldn't load the network graph: %s", exc)
            return False
        self.sync.initial_load(graph)
        return True


__all__ = ["MetroOverlay"]
