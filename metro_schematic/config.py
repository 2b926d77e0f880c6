"""Configuration for the layout engine and overlay synchronizer."""

from __future__ import annotations

import copy
from dataclasses import dataclass


@dataclass
class LayoutConfig:
    """Tunable constants shared by the layout, sync and label components."""

    # hit region radius as a multiple of the marker radius
    hit_region_scale: float = 2.0
    # surface size as a multiple of the graph's pixel extent
    buffer_factor: float = 3.0
    provisional_opacity: float = 0.5
    transfer_opacity: float = 0.5
    cluster_opacity: float = 0.5
    # relative determinant threshold below which three points count as collinear
    collinear_eps: float = 1e-9
    # label plate offset from the marker, in marker radii
    plate_offset: float = 1.5


class ConfigurationError(RuntimeError):
    """A required collaborator is missing or unusable."""


_LAYOUT_CONFIG = LayoutConfig()


def get_layout_config() -> LayoutConfig:
    return copy.deepcopy(_LAYOUT_CONFIG)


def set_layout_config(config: LayoutConfig) -> None:
    global _LAYOUT_CONFIG
    _LAYOUT_CONFIG = copy.deepcopy(config)


__all__ = ["ConfigurationError", "LayoutConfig", "get_layout_config", "set_layout_config"]
