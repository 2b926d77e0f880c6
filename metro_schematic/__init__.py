from .config import ConfigurationError, LayoutConfig, get_layout_config, set_layout_config
from .network import (
    GeoBounds,
    Graph,
    GraphFeedError,
    GraphIntegrityError,
    NetworkError,
    Platform,
    Route,
    Span,
    Station,
    Transfer,
    check_integrity,
    load_graph,
)
from .geometry import (
    DegenerateGeometry,
    circumcenter,
    circumcircle,
    distance,
    find_interchange_cluster,
    midpoint,
)
from .lod import Tier, TierStyle, select_tier, style_for_zoom
from .render_model import (
    ClusterCircle,
    CurveSegment,
    HitRegion,
    Marker,
    PixelBounds,
    Plate,
    RenderModel,
    TransferLine,
)
from .layout import build, whisker_points
from .surface import DrawingSurface, render_svg
from .projection import StaticMapView, WebMercatorProjector, default_tile_layer_for_zoom
from .sync import MapView, SyncState, Synchronizer
from .labels import LabelLayer
from .overlay import MetroOverlay
from .measure import DistanceMeasure, format_distance, haversine

__all__ = [
    'ConfigurationError',
    'LayoutConfig',
    'get_layout_config',
    'set_layout_config',
    'GeoBounds',
    'Graph',
    'GraphFeedError',
    'GraphIntegrityError',
    'NetworkError',
    'Platform',
    'Route',
    'Span',
    'Station',
    'Transfer',
    'check_integrity',
    'load_graph',
    'DegenerateGeometry',
    'circumcenter',
    'circumcircle',
    'distance',
    'find_interchange_cluster',
    'midpoint',
    'Tier',
    'TierStyle',
    'select_tier',
    'style_for_zoom',
    'ClusterCircle',
    'CurveSegment',
    'HitRegion',
    'Marker',
    'PixelBounds',
    'Plate',
    'RenderModel',
    'TransferLine',
    'build',
    'whisker_points',
    'DrawingSurface',
    'render_svg',
    'StaticMapView',
    'WebMercatorProjector',
    'default_tile_layer_for_zoom',
    'MapView',
    'SyncState',
    'Synchronizer',
    'LabelLayer',
    'MetroOverlay',
    'DistanceMeasure',
    'format_distance',
    'haversine',
]
