# =============================================================================
# Kiosk Prize Wheel - Segment Layout
#
# Maps a segment's position in the campaign list to its wedge on the wheel.
#
# Coordinate system (shared with the renderer):
# - 0 degrees points right (3 o'clock), angles grow CLOCKWISE (screen y is down).
# - Segment 0 starts at 12 o'clock (-90 degrees) and segments proceed clockwise.
# - The pointer is fixed at 12 o'clock, i.e. at POINTER_ANGLE.
# =============================================================================

from dataclasses import dataclass
from typing import NamedTuple, Optional

POINTER_ANGLE = -90.0


class WheelConfigError(ValueError):
    """The wheel cannot be spun as configured (no segments, or a target outside the wheel)."""


@dataclass(frozen=True)
class Segment:
    """One prize wedge. `order` is its position after sorting by segment_order."""
    order: int
    label: str
    amount: Optional[float] = None


class SegmentAngles(NamedTuple):
    start: float
    end: float
    mid: float


def normalize_angle(angle: float) -> float:
    """Folds any angle into [0, 360)."""
    return ((angle % 360) + 360) % 360


def segment_span(total_segments: int) -> float:
    if total_segments <= 0:
        raise WheelConfigError("cannot lay out a wheel with no segments")
    return 360.0 / total_segments


def segment_angles(order: int, total_segments: int) -> SegmentAngles:
    """Start, end and mid angle of a wedge before any wheel rotation is applied."""
    span = segment_span(total_segments)
    start = order * span + POINTER_ANGLE
    return SegmentAngles(start, start + span, start + span / 2)


def layout_wheel(segments):
    """Angles for every segment, in list order. The list must already be sorted."""
    total = len(segments)
    segment_span(total)
    return [segment_angles(i, total) for i in range(total)]


def sort_segments(records):
    """
    Turns campaign segment records into Segments ordered by `segment_order`.
    Records may be mappings or objects exposing the same attributes.
    """
    def field(record, name, default=None):
        if isinstance(record, dict):
            return record.get(name, default)
        return getattr(record, name, default)

    # Records without a segment_order (or with null) sort first, keeping their list order.
    ordered = sorted(records, key=lambda r: field(r, "segment_order", 0) or 0)
    return [
        Segment(order=i, label=str(field(r, "label", "")), amount=field(r, "amount"))
        for i, r in enumerate(ordered)
    ]


def segment_under_pointer(rotation: float, total_segments: int) -> int:
    """Index of the wedge sitting under the pointer when the wheel is turned by `rotation`."""
    span = segment_span(total_segments)
    # A wheel turned clockwise by R shows, under the pointer, the face angle POINTER_ANGLE - R.
    offset = normalize_angle(-rotation)
    return int(offset // span) % total_segments
