"""Zoom level to rendering tier mapping.

    z < 10        hidden
    10 <= z < 12  station roundels only
    z >= 12       platforms, curves, clusters and transfers
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

HIDDEN_BELOW = 10
DETAILED_FROM = 12


class Tier(enum.Enum):
    HIDDEN = "hidden"
    SIMPLIFIED = "simplified"
    DETAILED = "detailed"


@dataclass(frozen=True)
class TierStyle:
    tier: Tier
    zoom: float
    line_width: float = 0.0
    circle_radius: float = 0.0
    circle_border: float = 0.0


def select_tier(zoom: float) -> Tier:
    if zoom < HIDDEN_BELOW:
        return Tier.HIDDEN
    if zoom < DETAILED_FROM:
        return Tier.SIMPLIFIED
    return Tier.DETAILED


def style_for_zoom(zoom: float) -> TierStyle:
    tier = select_tier(zoom)
    if tier is Tier.HIDDEN:
        return TierStyle(tier, zoom)
    line_width = (zoom - 7) * 0.5
    if tier is Tier.SIMPLIFIED:
        circle_radius = line_width * 1.25
    else:
        circle_radius = (zoom - 7) * 0.5
    return TierStyle(tier, zoom, line_width, circle_radius, circle_radius * 0.4)


__all__ = ["DETAILED_FROM", "HIDDEN_BELOW", "Tier", "TierStyle", "select_tier", "style_for_zoom"]
