from datetime import datetime, timezone

import pytest

from wheel_config import SEGMENT_COLORS
from wheel_render import format_amount, format_expiry, point_on_circle, segment_color, wedge_points


def test_point_on_circle_follows_screen_orientation():
    # 0 = right, 90 = down, -90 = up (the pointer).
    assert point_on_circle((0, 0), 10, 0) == pytest.approx((10, 0))
    assert point_on_circle((0, 0), 10, 90) == pytest.approx((0, 10), abs=1e-9)
    assert point_on_circle((5, 5), 10, -90) == pytest.approx((5, -5), abs=1e-9)


def test_wedge_points_start_at_centre_and_span_the_arc():
    points = wedge_points((0, 0), 100, -90, 0)

    assert points[0] == (0, 0)
    assert points[1] == pytest.approx((0, -100), abs=1e-9)
    assert points[-1] == pytest.approx((100, 0), abs=1e-9)
    assert len(points) == 2 + 45


def test_segment_colors_cycle():
    assert segment_color(0) == SEGMENT_COLORS[0]
    assert segment_color(len(SEGMENT_COLORS)) == SEGMENT_COLORS[0]


def test_format_amount():
    assert format_amount(50) == "$50.00"
    assert format_amount("12.5") == "$12.50"
    assert format_amount("n/a") == "n/a"


def test_format_expiry_passes_unparseable_text_through():
    assert format_expiry("next week") == "next week"


def test_format_expiry_parses_iso_strings():
    text = format_expiry("2026-11-17T12:00:00Z")
    expected = datetime(2026, 11, 17, 12, 0, tzinfo=timezone.utc).astimezone().strftime("%b %d, %Y %I:%M %p")
    assert text == expected
