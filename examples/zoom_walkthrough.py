"""Example session: load a small network, pan, zoom through every tier and hover a platform."""

from metro_schematic import MetroOverlay, StaticMapView

FEED = """
{
  "platforms": [
    {"name": "Ploshchad Vosstaniya", "altNames": {"en": "Uprising Square"}, "location": [59.9307, 30.3605]},
    {"name": "Mayakovskaya", "location": [59.9318, 30.3547]},
    {"name": "Vladimirskaya", "location": [59.9275, 30.3478]},
    {"name": "Dostoevskaya", "location": [59.9283, 30.3459]},
    {"name": "Ligovsky prospekt", "location": [59.9208, 30.3553]},
    {"name": "Gostiny dvor", "location": [59.9340, 30.3330]},
    {"name": "Chernyshevskaya", "location": [59.9445, 30.3599]}
  ],
  "stations": [
    {"name": "Ploshchad Vosstaniya", "platforms": [0, 1]},
    {"name": "Vladimirskaya", "platforms": [2, 3]},
    {"name": "Ligovsky prospekt", "platforms": [4]},
    {"name": "Gostiny dvor", "platforms": [5]},
    {"name": "Chernyshevskaya", "platforms": [6]}
  ],
  "spans": [
    {"source": 6, "target": 0, "routes": [0]},
    {"source": 0, "target": 2, "routes": [0]},
    {"source": 5, "target": 1, "routes": [1]},
    {"source": 3, "target": 4, "routes": [2]}
  ],
  "transfers": [
    {"source": 0, "target": 1},
    {"source": 2, "target": 3}
  ],
  "routes": [
    {"line": "M1", "color": "#d6083b"},
    {"line": "M3", "color": "#009a49"},
    {"line": "M4", "color": "#f58631"}
  ]
}
"""


def _describe(overlay: MetroOverlay) -> None:
    model = overlay.model
    surface = overlay.surface
    print(
        f"  tier={model.tier.value} markers={len(model.markers)} curves={len(model.curves)} "
        f"transfers={len(model.transfer_lines)} surface={surface.width:.0f}x{surface.height:.0f}"
    )


def main() -> None:
    map_view = StaticMapView(13, viewport=(800, 600))
    overlay = MetroOverlay(map_view)
    if not overlay.receive_feed(FEED):
        return
    print("Initial load:")
    _describe(overlay)

    map_view.pan_by(120.0, -40.0)
    print(f"\nAfter pan the surface transform is {overlay.surface.transform}")

    for zoom in (15, 11, 9, 13):
        map_view.zoom_to(zoom)
        print(f"\nZoom {zoom} (tiles: {map_view.tile_layer}):")
        _describe(overlay)

    plate = overlay.labels.pointer_enter("d-p-0")
    print("\nHovering p-0:")
    for line in plate.lines:
        print(f"  {line}")
    overlay.labels.pointer_leave("d-p-0")


if __name__ == "__main__":
    main()
