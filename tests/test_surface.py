from pathlib import Path

import pytest

from metro_schematic import (
    DrawingSurface,
    MetroOverlay,
    PixelBounds,
    Plate,
    StaticMapView,
    build,
    load_graph,
    render_svg,
    style_for_zoom,
)
from metro_schematic.surface import _format_float

DATA_PATH = Path(__file__).resolve().parent / "data" / "sample_network.json"


def _model(zoom=13):
    graph = load_graph(DATA_PATH)
    return build(graph, lambda lat, lng: (lng * 1000.0, -lat * 1000.0), PixelBounds((30000.0, -60000.0), (31000.0, -59000.0)), style_for_zoom(zoom))


def test_format_float_trims_zeros():
    assert _format_float(1.5) == "1.5"
    assert _format_float(2.0) == "2"
    assert _format_float(-0.0001) == "0"
    assert _format_float(3.14159) == "3.142"
    with pytest.raises(ValueError):
        _format_float(float("nan"))


def test_svg_has_one_group_per_layer_in_paint_order():
    svg = render_svg(_model(), 300.0, 200.0)
    positions = [svg.index(f'<g id="{name}"') for name in ("paths", "transfers", "station-circles", "dummy-circles")]
    assert positions == sorted(positions)
    assert '<g id="transfers" class="transfer">' in svg
    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="300" height="200" id="overlay">')


def test_svg_contains_markers_curves_and_hit_regions():
    model = _model()
    svg = render_svg(model, 100.0, 100.0)
    assert svg.count("<path ") == len(model.curves)
    assert svg.count('class="invisible-circle"') == len(model.hit_regions)
    assert 'id="p-0"' in svg
    assert 'data-ref="p-0"' in svg
    assert " C " in svg
    assert svg.count("<line ") == len(model.transfer_lines)


def test_empty_surface_serialises_empty_groups():
    svg = DrawingSurface().to_svg()
    assert '<g id="paths">\n</g>' in svg
    assert "<circle" not in svg


def test_plate_sits_between_markers_and_hit_regions():
    model = _model()
    plate = Plate("p-0", (10.0, 20.0), ("Nevsky prospekt", "M2 & M3"))
    svg = render_svg(model, 100.0, 100.0, plate=plate)
    assert svg.index('<g id="station-circles"') < svg.index('class="plate"') < svg.index('<g id="dummy-circles"')
    assert "M2 &amp; M3" in svg


def test_surface_allows_a_single_plate():
    surface = DrawingSurface()
    surface.insert_plate(Plate("p-0", (0.0, 0.0), ("A",)))
    with pytest.raises(RuntimeError):
        surface.insert_plate(Plate("p-1", (0.0, 0.0), ("B",)))
    removed = surface.remove_plate()
    assert removed.marker_id == "p-0"
    assert surface.remove_plate() is None


def test_show_replaces_content_and_drops_plate():
    surface = DrawingSurface()
    surface.insert_plate(Plate("p-0", (0.0, 0.0), ("A",)))
    model = _model()
    surface.show(model)
    assert surface.model is model
    assert surface.plate is None
    assert surface.redraw_count == 1


def test_overlay_surface_writes_svg_of_current_model():
    overlay = MetroOverlay(StaticMapView(13, viewport=(640, 480)))
    overlay.receive_feed(DATA_PATH)
    svg = overlay.surface.to_svg()
    assert f'width="{_format_float(overlay.surface.width)}"' in svg
    assert svg.count('class="invisible-circle"') == 11
