"""Raster preview of a render model for offline inspection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .render_model import RenderModel

logger = logging.getLogger(__name__)

DEFAULT_LINE_COLOR = "#444444"


def render_png(model: RenderModel, path: Union[str, Path], *, title: str = "", dpi: int = 100) -> Path:
    """Draw curves, transfers, clusters and markers of ``model`` into a PNG."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.patches import Circle, PathPatch
    from matplotlib.path import Path as MplPath

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(6, 6))
    for curve in model.curves:
        bezier = MplPath(
            list(curve.points),
            [MplPath.MOVETO, MplPath.CURVE4, MplPath.CURVE4, MplPath.CURVE4],
        )
        ax.add_patch(
            PathPatch(bezier, facecolor="none", edgecolor=DEFAULT_LINE_COLOR, linewidth=max(curve.width, 0.5))
        )
    for line in model.transfer_lines:
        ax.plot(
            [line.start[0], line.end[0]],
            [line.start[1], line.end[1]],
            color="black",
            alpha=line.opacity,
            linewidth=max(line.border, 0.5),
        )
    for cluster in model.clusters:
        ax.add_patch(
            Circle(cluster.center, cluster.radius, fill=False, alpha=cluster.opacity, linewidth=max(cluster.border, 0.5))
        )
    for marker in model.markers:
        edge = marker.colors[0] if marker.colors else "black"
        ax.add_patch(
            Circle(marker.center, marker.radius, facecolor="white", edgecolor=edge, linewidth=max(marker.border, 0.5))
        )

    if model.bounds is not None:
        ax.set_xlim(0.0, model.bounds.size[0])
        ax.set_ylim(model.bounds.size[1], 0.0)
    else:
        ax.invert_yaxis()
    ax.set_aspect("equal", adjustable="box")
    ax.set_axis_off()
    ax.set_title(title or f"{model.tier.value} (zoom {model.style.zoom:g})")
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    logger.info("Wrote preview %s", path)
    return path


__all__ = ["render_png"]
