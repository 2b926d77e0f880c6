import math

import pytest

from metro_schematic import Tier, select_tier, style_for_zoom


@pytest.mark.parametrize(
    "zoom, tier",
    [
        (3, Tier.HIDDEN),
        (9.99, Tier.HIDDEN),
        (10, Tier.SIMPLIFIED),
        (11.5, Tier.SIMPLIFIED),
        (12, Tier.DETAILED),
        (18, Tier.DETAILED),
    ],
)
def test_select_tier_boundaries(zoom, tier):
    assert select_tier(zoom) is tier


def test_hidden_style_draws_nothing():
    style = style_for_zoom(9)
    assert style.tier is Tier.HIDDEN
    assert style.line_width == 0.0
    assert style.circle_radius == 0.0
    assert style.circle_border == 0.0


@pytest.mark.parametrize(
    "zoom, line_width, radius",
    [
        (10, 1.5, 1.875),
        (11, 2.0, 2.5),
        (12, 2.5, 2.5),
        (13, 3.0, 3.0),
        (16, 4.5, 4.5),
    ],
)
def test_style_dimensions_follow_zoom(zoom, line_width, radius):
    style = style_for_zoom(zoom)
    assert math.isclose(style.line_width, line_width)
    assert math.isclose(style.circle_radius, radius)
    assert math.isclose(style.circle_border, radius * 0.4)
    assert style.zoom == zoom
