import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from metro_schematic import (
    ConfigurationError,
    DrawingSurface,
    GraphIntegrityError,
    MetroOverlay,
    StaticMapView,
    Synchronizer,
    Tier,
    load_graph,
)
from metro_schematic.sync import IDLE, ZOOMING, SyncState, begin_zoom, settle_zoom

DATA_PATH = Path(__file__).resolve().parent / "data" / "sample_network.json"
VIEWPORT = (800, 600)


def _loaded_overlay(zoom=13):
    map_view = StaticMapView(zoom, viewport=VIEWPORT)
    overlay = MetroOverlay(map_view)
    graph = load_graph(DATA_PATH)
    overlay.sync.initial_load(graph)
    return map_view, overlay, graph


def test_sync_state_transitions():
    state = begin_zoom(SyncState(), 13)
    assert state.prev_zoom == 13
    assert state.phase == ZOOMING
    state = settle_zoom(state, 11)
    assert state.zoom == 11
    assert state.tier is Tier.SIMPLIFIED
    assert state.phase == IDLE


def test_missing_map_view_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        Synchronizer(None, DrawingSurface())


def test_missing_surface_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        Synchronizer(StaticMapView(13), None)


def test_map_view_without_required_methods_is_rejected():
    with pytest.raises(ConfigurationError, match="pane_translation"):
        Synchronizer(SimpleNamespace(project=lambda lat, lng: (lat, lng)), DrawingSurface())


def test_bind_requires_an_event_source():
    silent_map = SimpleNamespace(
        project=lambda lat, lng: (lng, lat),
        current_zoom=lambda: 13.0,
        pixel_bounds_for=lambda bounds: None,
        pane_translation=lambda: (0.0, 0.0),
        set_view=lambda center: None,
        enable_dragging=lambda: None,
        disable_dragging=lambda: None,
        set_tile_layer=lambda layer: None,
    )
    sync = Synchronizer(silent_map, DrawingSurface())
    with pytest.raises(ConfigurationError):
        sync.bind()


def test_bind_subscribes_to_move_and_zoom_events_only():
    events = []
    recording_map = StaticMapView(13, viewport=VIEWPORT)
    recording_map.on = lambda event, handler: events.append(event)

    Synchronizer(recording_map, DrawingSurface()).bind()

    assert events == ["move", "zoomstart", "zoomend"]


def test_initial_load_centers_view_and_builds_once():
    map_view, overlay, graph = _loaded_overlay()

    x, y = map_view.project(*graph.geo_bounds().center)
    assert x == pytest.approx(VIEWPORT[0] / 2)
    assert y == pytest.approx(VIEWPORT[1] / 2)
    assert overlay.sync.rebuild_count == 1
    assert overlay.model.tier is Tier.DETAILED
    assert overlay.surface.model is overlay.model
    assert overlay.surface.opacity is None
    assert map_view.dragging_enabled


def test_surface_spans_three_times_the_network_extent():
    map_view, overlay, graph = _loaded_overlay()
    bounds = map_view.pixel_bounds_for(graph.geo_bounds())
    width, height = bounds.size

    surface = overlay.surface
    assert surface.width == pytest.approx(3 * width)
    assert surface.height == pytest.approx(3 * height)
    assert surface.left == pytest.approx(bounds.min[0] - width)
    assert surface.top == pytest.approx(bounds.min[1] - height)


def test_markers_land_on_projected_platforms_after_pan():
    map_view, overlay, graph = _loaded_overlay()
    map_view.pan_by(40.0, -25.0)
    overlay.sync.replace_graph(graph)

    surface = overlay.surface
    for marker in overlay.model.markers:
        lat, lng = graph.platforms[marker.owner_id].location
        px, py = map_view.project(lat, lng)
        assert surface.left + surface.transform[0] + marker.center[0] == pytest.approx(px)
        assert surface.top + surface.transform[1] + marker.center[1] == pytest.approx(py)


def test_pan_mirrors_translation_without_rebuilding():
    map_view, overlay, _ = _loaded_overlay()
    map_view.pan_by(15.0, -4.0)
    map_view.pan_by(5.0, 2.0)

    assert overlay.surface.transform == (20.0, -2.0)
    assert overlay.sync.rebuild_count == 1
    assert overlay.surface.redraw_count == 1


def test_zoom_dims_surface_and_locks_dragging_until_rebuilt():
    map_view, overlay, _ = _loaded_overlay()
    seen = []
    overlay.sync.add_rebuild_listener(
        lambda model: seen.append((overlay.surface.opacity, map_view.dragging_enabled, model.tier))
    )

    map_view.zoom_to(11)

    assert seen == [(0.5, False, Tier.SIMPLIFIED)]
    assert overlay.surface.opacity is None
    assert map_view.dragging_enabled
    assert overlay.sync.state.prev_zoom == 13
    assert overlay.sync.state.zoom == 11


def test_zoom_out_switches_to_station_markers_and_overview_tiles():
    map_view, overlay, graph = _loaded_overlay()
    assert map_view.tile_layer == "streets"

    map_view.zoom_to(11)

    model = overlay.model
    assert model.tier is Tier.SIMPLIFIED
    assert len(model.markers) == len(graph.stations)
    assert model.curves == []
    assert model.clusters == []
    assert map_view.tile_layer == "overview"
    assert overlay.sync.rebuild_count == 2


def test_tile_layer_kept_when_zoom_stays_in_band():
    map_view, overlay, _ = _loaded_overlay()
    switched = []
    map_view.set_tile_layer = switched.append

    map_view.zoom_to(14)

    assert switched == []
    assert overlay.model.tier is Tier.DETAILED


def test_zoom_below_visible_range_clears_surface():
    map_view, overlay, _ = _loaded_overlay()
    map_view.zoom_to(9)

    assert overlay.model.tier is Tier.HIDDEN
    assert overlay.model.is_empty
    assert overlay.surface.model.is_empty


def test_rebuild_requested_during_rebuild_runs_once_afterwards():
    _, overlay, _ = _loaded_overlay()
    nested = []

    def _request_again(model):
        if not nested:
            nested.append(overlay.sync.rebuild())

    overlay.sync.add_rebuild_listener(_request_again)
    overlay.sync.rebuild()

    assert nested == [None]
    assert overlay.sync.rebuild_count == 3


def test_rebuild_without_graph_is_a_no_op(caplog):
    sync = Synchronizer(StaticMapView(13), DrawingSurface())
    with caplog.at_level(logging.INFO, logger="metro_schematic.sync"):
        assert sync.rebuild() is None
    assert sync.rebuild_count == 0
    assert "No graph loaded" in caplog.text


def test_receive_feed_logs_malformed_feed_and_keeps_state(caplog):
    overlay = MetroOverlay(StaticMapView(13))
    with caplog.at_level(logging.ERROR, logger="metro_schematic.overlay"):
        assert overlay.receive_feed("{broken") is False
    assert overlay.model is None
    assert "Couldn't load the network graph" in caplog.text


def test_receive_feed_lays_out_graph():
    overlay = MetroOverlay(StaticMapView(12))
    assert overlay.receive_feed(DATA_PATH) is True
    assert overlay.model.tier is Tier.DETAILED
    assert overlay.labels.registry == overlay.model.registry


def test_receive_feed_propagates_integrity_errors():
    overlay = MetroOverlay(StaticMapView(13))
    feed = {
        "platforms": [{"name": "A", "location": [0.0, 0.0]}],
        "stations": [{"name": "A", "platforms": [0]}],
        "spans": [{"source": 0, "target": 3}],
    }
    with pytest.raises(GraphIntegrityError):
        overlay.receive_feed(feed)


def test_rebuild_uses_settled_zoom_from_state():
    map_view, overlay, _ = _loaded_overlay(zoom=13)
    overlay.sync.state = settle_zoom(overlay.sync.state, 11)

    model = overlay.sync.rebuild()

    assert map_view.current_zoom() == 13
    assert model.tier is Tier.SIMPLIFIED
    assert model.tier is overlay.sync.state.tier


def test_replace_graph_before_initial_load_adopts_current_zoom():
    sync = Synchronizer(StaticMapView(11, viewport=VIEWPORT), DrawingSurface())

    model = sync.replace_graph(load_graph(DATA_PATH))

    assert sync.state.zoom == 11
    assert sync.state.tier is Tier.SIMPLIFIED
    assert model.tier is Tier.SIMPLIFIED


def test_receive_feed_without_platforms_logs_and_keeps_state(caplog):
    overlay = MetroOverlay(StaticMapView(13))
    with caplog.at_level(logging.ERROR, logger="metro_schematic.overlay"):
        assert overlay.receive_feed({"platforms": [], "stations": [], "spans": []}) is False
    assert overlay.model is None
    assert "no platforms" in caplog.text
