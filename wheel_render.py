# =============================================================================
# Kiosk Prize Wheel - Rendering
#
# Draws the wheel face, pointer, winning highlight and prize panel with pygame.
# The renderer is told the display rotation each frame; it never decides
# where the wheel stops.
#
# Angles follow wheel_layout: 0 = right, clockwise positive, which is also
# pygame's screen orientation (y grows downwards), so cos/sin map straight
# onto pixels.
# =============================================================================

import logging
import math
from datetime import datetime

import pygame

from spin_engine import ease_out_back
from wheel_config import (
    COLOR_BACKGROUND, COLOR_BLACK, COLOR_GOLD, COLOR_GREEN, COLOR_GREY, COLOR_HUB,
    COLOR_RED, COLOR_WHITE, COLOR_YELLOW, FONT_BODY, FONT_LABEL, FONT_SIZES, FONT_TITLE,
    MARGIN_PX, MAX_RENDER_DIAMETER, POINTER_JIGGLE_STRENGTH_PX, SEGMENT_COLORS,
    WHEEL_SCALE_FACTOR,
)
from wheel_layout import POINTER_ANGLE, layout_wheel, segment_span

log = logging.getLogger(__name__)

ARC_STEP_DEG = 2.0  # Polygon resolution of a wedge's outer edge.


# ========= GEOMETRY HELPERS =========

def point_on_circle(center, radius, angle_deg):
    th = math.radians(angle_deg)
    return (center[0] + radius * math.cos(th), center[1] + radius * math.sin(th))


def wedge_points(center, radius, start_deg, end_deg, step=ARC_STEP_DEG):
    """Polygon outline of a pie wedge: the centre followed by its outer arc."""
    steps = max(1, math.ceil((end_deg - start_deg) / step))
    arc = [point_on_circle(center, radius, start_deg + (end_deg - start_deg) * i / steps)
           for i in range(steps + 1)]
    return [center] + arc


def segment_color(index):
    return SEGMENT_COLORS[index % len(SEGMENT_COLORS)]


def format_amount(amount):
    try:
        return f"${float(amount):,.2f}"
    except (TypeError, ValueError):
        return str(amount)


def format_expiry(expires_at):
    if isinstance(expires_at, str):
        try:
            expires_at = datetime.fromisoformat(expires_at.replace("Z", "+00:00"))
        except ValueError:
            return expires_at
    if isinstance(expires_at, datetime):
        return expires_at.astimezone().strftime("%b %d, %Y %I:%M %p")
    return str(expires_at)


# ========= UI HELPERS =========

def blit_center(surface, img, center):
    """Draws an image onto a surface, with the image's center at the specified coordinate."""
    surface.blit(img, img.get_rect(center=center))


def draw_animated_pointer(surface, cx, cy, radius, anim_progress):
    """Draws the triangular pointer at 12 o'clock, kicked up by a peg and falling back to rest."""
    # anim_progress resets to 0.0 on every peg tick: the pointer is kicked UP and
    # then settles as the progress runs to 1.0.
    y_offset = POINTER_JIGGLE_STRENGTH_PX * ease_out_back(1.0 - anim_progress)

    y_top = cy - radius - 20 + POINTER_JIGGLE_STRENGTH_PX - y_offset
    half_w = max(15, radius // 25)
    base_y = y_top - 15
    tip_y  = y_top + 30

    tip, left, right = (cx, tip_y), (cx - half_w, base_y), (cx + half_w, base_y)
    pygame.draw.polygon(surface, COLOR_YELLOW, (tip, left, right))
    pygame.draw.polygon(surface, COLOR_WHITE, (tip, left, right), width=3)


class WheelRenderer:
    """Holds the pre-drawn wheel face and paints a full kiosk frame."""

    def __init__(self, window_size):
        self.window_size = window_size
        self.cx, self.cy = window_size[0] // 3, window_size[1] // 2
        max_dim = min(window_size[0] * 2 // 3, window_size[1]) - (MARGIN_PX * 2)
        self.wheel_radius = max(60, max_dim // 2)

        self.title_font = pygame.font.SysFont(FONT_TITLE, FONT_SIZES["title"])
        self.prize_font = pygame.font.SysFont(FONT_TITLE, FONT_SIZES["prize"])
        self.body_font  = pygame.font.SysFont(FONT_BODY, FONT_SIZES["body"])
        self.small_font = pygame.font.SysFont(FONT_BODY, FONT_SIZES["small"])

        self.face = None
        self._face_key = None
        self.flash_timer = 0

    # --- Wheel face ---
    def ensure_face(self, segments):
        """Rebuilds the face only when the campaign changes."""
        key = tuple((s.order, s.label) for s in segments)
        if key != self._face_key:
            self.face = self.create_wheel_surface(segments) if segments else None
            self._face_key = key

    def create_wheel_surface(self, segments):
        """
        Draws the wheel face once, unrotated, on a high-resolution canvas and
        downsamples it for a smooth, anti-aliased edge.
        """
        ideal_scaled_diameter = self.wheel_radius * 2 * WHEEL_SCALE_FACTOR
        if ideal_scaled_diameter > MAX_RENDER_DIAMETER:
            log.warning("Ideal wheel render size %spx exceeds %spx; capping",
                        ideal_scaled_diameter, MAX_RENDER_DIAMETER)
            scaled_diameter = MAX_RENDER_DIAMETER
        else:
            scaled_diameter = ideal_scaled_diameter
        scale_factor = scaled_diameter / (self.wheel_radius * 2)

        scaled_radius = scaled_diameter // 2
        wheel_surf    = pygame.Surface((scaled_diameter, scaled_diameter), pygame.SRCALPHA)
        wheel_center  = (scaled_radius, scaled_radius)
        face_radius   = scaled_radius - int(10 * scale_factor)

        # 1. Wedges, with a white edge between neighbours
        for seg, angles in zip(segments, layout_wheel(segments)):
            points = wedge_points(wheel_center, face_radius, angles.start, angles.end)
            pygame.draw.polygon(wheel_surf, segment_color(seg.order), points)
            pygame.draw.line(wheel_surf, COLOR_WHITE, wheel_center,
                             point_on_circle(wheel_center, face_radius, angles.start),
                             max(1, int(2 * scale_factor)))

        # 2. Labels, written outward along each wedge's centre line
        label_font = pygame.font.SysFont(FONT_LABEL, int(FONT_SIZES["label"] * scale_factor), bold=True)
        for seg, angles in zip(segments, layout_wheel(segments)):
            text = label_font.render(seg.label, True, COLOR_WHITE)
            shadow = label_font.render(seg.label, True, COLOR_BLACK)
            rotated = pygame.transform.rotate(text, -angles.mid)
            rotated_shadow = pygame.transform.rotate(shadow, -angles.mid)
            label_radius = face_radius - int(15 * scale_factor) - text.get_width() / 2
            pos = point_on_circle(wheel_center, label_radius, angles.mid)
            blit_center(wheel_surf, rotated_shadow, (pos[0] + 2 * scale_factor, pos[1] + 2 * scale_factor))
            blit_center(wheel_surf, rotated, pos)

        # 3. Gold outer ring and the dark hub
        pygame.draw.circle(wheel_surf, COLOR_GOLD, wheel_center, face_radius, int(6 * scale_factor))
        hub_radius = int(scaled_radius * 0.3)
        pygame.draw.circle(wheel_surf, COLOR_HUB, wheel_center, hub_radius)
        pygame.draw.circle(wheel_surf, COLOR_GOLD, wheel_center, hub_radius, int(3 * scale_factor))

        return pygame.transform.smoothscale(wheel_surf, (self.wheel_radius * 2, self.wheel_radius * 2))

    # --- Frame ---
    def draw(self, surface, screen, pointer_anim_progress=1.0, test_index=None):
        """Paints one frame for `screen` (a SpinScreen)."""
        self.flash_timer += 1
        surface.fill(COLOR_BACKGROUND)
        self.ensure_face(screen.segments)

        title = "Spinning..." if screen.spinning else "SPIN THE WHEEL!"
        title_surf = self.title_font.render(title, True, COLOR_YELLOW)
        surface.blit(title_surf, title_surf.get_rect(midtop=(self.cx, 10)))

        if self.face is not None:
            rotated = pygame.transform.rotozoom(self.face, -screen.rotation, 1.0)
            blit_center(surface, rotated, (self.cx, self.cy))
            if screen.winning_index is not None and not screen.spinning:
                self._draw_winning_segment_highlight(surface, len(screen.segments))
            pygame.draw.circle(surface, COLOR_BLACK, (self.cx, self.cy), self.wheel_radius + 20, width=6)
            draw_animated_pointer(surface, self.cx, self.cy, self.wheel_radius, pointer_anim_progress)

        self._draw_side_panel(surface, screen, test_index)

    def _draw_winning_segment_highlight(self, surface, total_segments):
        """Pulsing gold overlay on the wedge resting under the pointer."""
        span = segment_span(total_segments)
        highlight_surf = pygame.Surface(self.window_size, pygame.SRCALPHA)
        pulse = (math.sin(self.flash_timer * 0.1) + 1) / 2
        alpha = int(50 + pulse * 100)
        points = wedge_points((self.cx, self.cy), self.wheel_radius,
                              POINTER_ANGLE - span / 2, POINTER_ANGLE + span / 2)
        pygame.draw.polygon(highlight_surf, (*COLOR_GOLD, alpha), points)
        surface.blit(highlight_surf, (0, 0))

    def _draw_side_panel(self, surface, screen, test_index):
        x = self.window_size[0] * 2 // 3
        y = 80
        lines = []
        if screen.error:
            lines.append((self.title_font, "Cannot Spin", COLOR_RED))
            lines.append((self.body_font, screen.error, COLOR_GREY))
        elif screen.show_result:
            lines.append((self.body_font, "Congratulations!", COLOR_GREEN))
            lines.append((self.prize_font, format_amount(screen.result.amount), COLOR_WHITE))
            lines.append((self.body_font, "Printing your winning receipt...", COLOR_GREY))
            if screen.result.barcode:
                lines.append((self.small_font, f"Barcode: {screen.result.barcode}", COLOR_GREY))
            if screen.result.expires_at:
                lines.append((self.small_font, f"Redeem by: {format_expiry(screen.result.expires_at)}", COLOR_YELLOW))
        else:
            lines.append((self.body_font, "How to Play", COLOR_YELLOW))
            for step in ("1. Press the buzzer or SPACE", "2. Watch the wheel spin!",
                         "3. Win the prize where the pointer lands", "4. Collect your winning receipt!"):
                lines.append((self.small_font, step, COLOR_WHITE))
        if screen.spinning:
            lines.append((self.body_font, "Good luck!", COLOR_YELLOW))
        if test_index is not None:
            lines.append((self.small_font, f"TEST MODE - segment {test_index}", COLOR_YELLOW))

        for font, text, color in lines:
            surf = font.render(text, True, color)
            surface.blit(surf, (x, y))
            y += surf.get_height() + 12
