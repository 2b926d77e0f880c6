"""Drawing surface state and SVG serialisation of the primitive tree."""

from __future__ import annotations

import html
import logging
import math
from typing import Dict, List, Optional

from .render_model import (
    LAYER_ORDER,
    XY,
    CirclePrimitive,
    LinePrimitive,
    PathPrimitive,
    Plate,
    RenderModel,
)

logger = logging.getLogger(__name__)

PLATE_LINE_HEIGHT = 14.0
PLATE_CHAR_WIDTH = 7.0
PLATE_PADDING = 4.0


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for SVG output")
    formatted = f"{value:.3f}".rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted


def _attrs(**values: object) -> str:
    parts = []
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = _format_float(value)
        parts.append(f'{key.rstrip("_").replace("_", "-")}="{html.escape(str(value))}"')
    return " ".join(parts)


def _circle_svg(primitive: CirclePrimitive) -> str:
    style = []
    if primitive.stroke_width:
        style.append(f"stroke-width:{_format_float(primitive.stroke_width)}")
    if primitive.opacity is not None:
        style.append(f"opacity:{_format_float(primitive.opacity)}")
    attrs = _attrs(
        id=primitive.id,
        cx=float(primitive.center[0]),
        cy=float(primitive.center[1]),
        r=float(primitive.radius),
        class_=primitive.style_class,
        style=";".join(style) or None,
        data_ref=primitive.ref,
    )
    return f"<circle {attrs}/>"


def _line_svg(primitive: LinePrimitive) -> str:
    style = []
    if primitive.stroke_width:
        style.append(f"stroke-width:{_format_float(primitive.stroke_width)}")
    if primitive.opacity is not None:
        style.append(f"opacity:{_format_float(primitive.opacity)}")
    attrs = _attrs(
        x1=float(primitive.start[0]),
        y1=float(primitive.start[1]),
        x2=float(primitive.end[0]),
        y2=float(primitive.end[1]),
        class_=primitive.style_class,
        style=";".join(style) or None,
    )
    return f"<line {attrs}/>"


def _path_data(points: List[XY]) -> str:
    def _pt(p: XY) -> str:
        return f"{_format_float(p[0])} {_format_float(p[1])}"

    if len(points) == 4:
        return f"M {_pt(points[0])} C {_pt(points[1])}, {_pt(points[2])}, {_pt(points[3])}"
    return "M " + " L ".join(_pt(p) for p in points)


def _path_svg(primitive: PathPrimitive) -> str:
    attrs = _attrs(
        d=_path_data(list(primitive.points)),
        class_=primitive.style_class,
        style=f"stroke-width:{_format_float(primitive.stroke_width)}" if primitive.stroke_width else None,
    )
    return f"<path {attrs}/>"


def _primitive_svg(primitive: object) -> str:
    if isinstance(primitive, CirclePrimitive):
        return _circle_svg(primitive)
    if isinstance(primitive, LinePrimitive):
        return _line_svg(primitive)
    if isinstance(primitive, PathPrimitive):
        return _path_svg(primitive)
    raise TypeError(f"unsupported primitive {type(primitive).__name__}")


def _plate_svg(plate: Plate) -> str:
    width = PLATE_PADDING * 2 + PLATE_CHAR_WIDTH * max((len(line) for line in plate.lines), default=0)
    height = PLATE_PADDING * 2 + PLATE_LINE_HEIGHT * len(plate.lines)
    x, y = plate.anchor
    out = [f'<g {_attrs(id=plate.id, class_="plate", data_ref=plate.marker_id)}>']
    out.append(f"  <rect {_attrs(x=float(x), y=float(y - height), width=float(width), height=float(height))}/>")
    for idx, line in enumerate(plate.lines):
        baseline = y - height + PLATE_PADDING + PLATE_LINE_HEIGHT * (idx + 1) - 3.0
        out.append(f"  <text {_attrs(x=float(x + PLATE_PADDING), y=float(baseline))}>{html.escape(line)}</text>")
    out.append("</g>")
    return "\n".join(out)


def render_svg(
    model: Optional[RenderModel],
    width: float,
    height: float,
    *,
    plate: Optional[Plate] = None,
) -> str:
    """Serialise ``model`` as a standalone SVG document with one group per layer."""

    lines = [
        '<svg xmlns="http://www.w3.org/2000/svg" '
        + _attrs(width=float(width), height=float(height), id="overlay")
        + ">"
    ]
    groups: Dict[str, List[object]] = model.layers() if model is not None else {name: [] for name in LAYER_ORDER}
    for name in LAYER_ORDER:
        group_class = ' class="transfer"' if name == "transfers" else ""
        lines.append(f'<g id="{name}"{group_class}>')
        lines.extend("  " + _primitive_svg(primitive) for primitive in groups[name])
        lines.append("</g>")
        if name == "station-circles" and plate is not None:
            # plate stays below the hit regions
            lines.append(_plate_svg(plate))
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


class DrawingSurface:
    """Mutable state of the vector overlay element.

    ``transform`` mirrors the map pane translation, ``left``/``top`` place the
    surface relative to the map container and ``opacity`` of ``None`` means
    fully opaque.
    """

    def __init__(self) -> None:
        self.transform: XY = (0.0, 0.0)
        self.opacity: Optional[float] = None
        self.left = 0.0
        self.top = 0.0
        self.width = 0.0
        self.height = 0.0
        self.model: Optional[RenderModel] = None
        self.plate: Optional[Plate] = None
        self.redraw_count = 0

    def resize(self, left: float, top: float, width: float, height: float) -> None:
        self.left, self.top, self.width, self.height = left, top, width, height

    def show(self, model: RenderModel) -> None:
        """Replace all layer content with ``model``; any plate is dropped with it."""

        self.model = model
        self.plate = None
        self.redraw_count += 1
        logger.debug("Surface redraw #%d: %d primitives", self.redraw_count, sum(1 for _ in model.primitives()))

    def clear(self) -> None:
        self.model = None
        self.plate = None

    def insert_plate(self, plate: Plate) -> None:
        if self.plate is not None:
            raise RuntimeError(f"plate for {self.plate.marker_id} is still live")
        self.plate = plate

    def remove_plate(self) -> Optional[Plate]:
        plate, self.plate = self.plate, None
        return plate

    def to_svg(self) -> str:
        return render_svg(self.model, self.width, self.height, plate=self.plate)


__all__ = ["DrawingSurface", "render_svg"]
