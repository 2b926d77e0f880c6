"""Pointer handling on hit regions and the single transient label plate."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import LayoutConfig, get_layout_config
from .network import Graph
from .render_model import Marker, Plate, RenderModel
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


def plate_text(graph: Graph, marker: Marker) -> List[str]:
    """Names of the marker's platform or station followed by the lines serving it."""

    if marker.owner_kind == "platform":
        names = graph.platform_names(marker.owner_id)
        lines = [line for line, _ in graph.platform_lines(marker.owner_id)]
    else:
        names = graph.station_names(marker.owner_id)
        lines = sorted(graph.passing_lines(marker.owner_id))
    text = [name for name in names if name]
    if lines:
        text.append(", ".join(lines))
    return text


class LabelLayer:
    """Maps hit regions to markers and shows at most one plate at a time."""

    def __init__(self, surface: DrawingSurface, *, config: Optional[LayoutConfig] = None) -> None:
        self.surface = surface
        self.config = config or get_layout_config()
        self.graph: Optional[Graph] = None
        self.model: Optional[RenderModel] = None
        self.registry: Dict[str, str] = {}
        self._markers: Dict[str, Marker] = {}

    def attach(self, model: RenderModel, graph: Graph) -> None:
        """Drop the previous registry and bind to the hit regions of ``model``."""

        self.model = model
        self.graph = graph
        self.registry = model.registry
        self._markers = {marker.id: marker for marker in model.markers}
        logger.debug("Label layer bound to %d hit regions", len(self.registry))

    @property
    def live_plate(self) -> Optional[Plate]:
        return self.surface.plate

    def pointer_enter(self, hit_region_id: str) -> Plate:
        if self.graph is None:
            raise RuntimeError("label layer is not attached to a render model")
        marker_id = self.registry[hit_region_id]
        marker = self._markers[marker_id]
        if self.surface.plate is not None:
            self.surface.remove_plate()
        offset = marker.radius * self.config.plate_offset
        plate = Plate(
            marker_id,
            (marker.center[0] + offset, marker.center[1] - offset),
            tuple(plate_text(self.graph, marker)),
        )
        self.surface.insert_plate(plate)
        return plate

    def pointer_leave(self, hit_region_id: str) -> Optional[Plate]:
        marker_id = self.registry.get(hit_region_id)
        plate = self.surface.plate
        if marker_id is None or plate is None or plate.marker_id != marker_id:
            return None
        return self.surface.remove_plate()


__all__ = ["LabelLayer", "plate_text"]
