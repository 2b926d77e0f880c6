import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from metro_schematic import (
    GraphFeedError,
    MetroOverlay,
    StaticMapView,
    load_graph,
)
from metro_schematic.preview import render_png

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_viewport(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x", 1))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"viewport must look like 1024x768, got {value!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("viewport dimensions must be positive")
    return width, height


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out a transit network as a schematic overlay")
    parser.add_argument("path", help="Path to the network graph JSON feed")
    parser.add_argument(
        "--zoom",
        type=float,
        default=13.0,
        help="Map zoom level to lay the network out for (default: 13)",
    )
    parser.add_argument(
        "--viewport",
        type=_parse_viewport,
        default=(1024, 768),
        help="Map viewport size in pixels, WIDTHxHEIGHT (default: 1024x768)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--svg-output-path",
        help="Write the overlay surface as an SVG document to the given path",
    )
    parser.add_argument(
        "--png-output-path",
        help="Write a raster preview of the layout to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading network from %s", args.path)
    try:
        graph = load_graph(Path(args.path))
    except GraphFeedError as exc:
        logger.error("Couldn't load the network graph: %s", exc)
        raise SystemExit(1)

    map_view = StaticMapView(args.zoom, viewport=args.viewport)
    overlay = MetroOverlay(map_view)
    overlay.sync.initial_load(graph)
    model = overlay.model
    assert model is not None

    print(f"Zoom: {args.zoom:g} ({model.tier.value})")
    print(f"Tile layer: {map_view.tile_layer}")
    print(f"Surface: {overlay.surface.width:.0f}x{overlay.surface.height:.0f} at ({overlay.surface.left:.0f}, {overlay.surface.top:.0f})")
    print(f"Markers: {len(model.markers)}")
    print(f"Curves: {len(model.curves)}")
    print(f"Clusters: {len(model.clusters)}")
    for cluster in model.clusters:
        station = graph.stations[cluster.station_id]
        print(f"  {station.name}: platforms {list(cluster.platforms)} r={cluster.radius:.2f}")
    print(f"Transfer lines: {len(model.transfer_lines)}")

    if args.svg_output_path:
        output_path = Path(args.svg_output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing SVG document to %s", output_path)
        output_path.write_text(overlay.surface.to_svg(), encoding="utf-8")
        print(f"SVG document written to {output_path}")

    if args.png_output_path:
        written = render_png(model, args.png_output_path)
        print(f"Preview written to {written}")


if __name__ == "__main__":
    main(sys.argv[1:])
