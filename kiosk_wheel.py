# =============================================================================
# Kiosk Prize Wheel
# The "spin the wheel" screen of an arcade kiosk, as a Pygame application.
#
# The outcome service decides the prize; the wheel eases into it over a few
# extra full turns so the winning wedge stops right under the pointer. After
# the prize is shown, the ticket is handed off for printing.
#
# Key Features:
# - Procedural wheel face built from the campaign's segments.
# - Forward-only, frame-driven spin with cubic ease-out.
# - Pointer jiggle and tick sound as wedges pass the pointer.
# - Pulsing highlight on the winning wedge after a spin.
# - MQTT bridge for the wireless arcade buzzer.
# - Test mode for pinning the winning segment.
#
# Controls:
# - SPACE:          Spin the wheel.
# - T:              Toggle test mode (use Left/Right arrows to select).
# - B / BACKSPACE:  Back to mode selection.
# - Q / ESC:        Quit the application.
# =============================================================================

import logging
import os
import random
import sys
import time
from datetime import timedelta

import pygame

from buzzer_bridge import BuzzerBridge
from outcome_service import DemoOutcomeService
from spin_screen import KioskState, SpinScreen
from wheel_config import POINTER_JIGGLE_DURATION_SEC, load_config
from wheel_layout import segment_under_pointer
from wheel_render import WheelRenderer

log = logging.getLogger(__name__)

DEMO_CUSTOMER_ID = "walk-in"


class KioskWheel:
    """Owns the window, the spin screen and the buzzer bridge."""

    def __init__(self, cfg, outcome_service=None, customer_id=DEMO_CUSTOMER_ID):
        self.cfg = cfg
        pygame.mixer.pre_init(44100, -16, 2, 512)
        pygame.init()
        self.click_channel = pygame.mixer.Channel(0)
        self.clock = pygame.time.Clock()

        # --- Display Setup ---
        flags = 0
        if cfg.fullscreen:
            flags |= pygame.FULLSCREEN
            info = pygame.display.Info()
            self.WINDOW_SIZE = (info.current_w, info.current_h)
        else:
            self.WINDOW_SIZE = cfg.window_size
        self.window = pygame.display.set_mode(self.WINDOW_SIZE, flags)
        pygame.display.set_caption("Prize Wheel - Space:Spin | T:Test | B:Back | Q/Esc:Quit")

        self.renderer = WheelRenderer(self.WINDOW_SIZE)
        self.click_sound = self._load_click_sound(cfg.click_sound)

        # --- Outcome & Spin Screen ---
        self.demo_service = None
        if outcome_service is None:
            self.demo_service = DemoOutcomeService(
                segments=cfg.segments,
                ticket_ttl=timedelta(days=cfg.ticket_ttl_days),
            )
            outcome_service = self.demo_service
        self.screen = SpinScreen(
            outcome_service,
            customer_id=customer_id,
            duration=cfg.spin_duration,
            result_hold=cfg.result_hold,
            rng=random.Random(),
            min_full_spins=cfg.min_full_spins,
            max_full_spins=cfg.max_full_spins,
            on_ticket=self._print_ticket,
        )

        # --- Visual Effect State ---
        self.pointer_anim_progress = 1.0  # 1.0 = pointer at rest
        self.last_tick_idx = None
        self.test_index = None

        self.buzzer = BuzzerBridge.from_config(cfg.mqtt)
        self.screen.add_listener(self.buzzer.publish_state)
        self.buzzer.start()

        if not self.screen.load_campaign():
            log.warning("Spin wheel not ready: %s", self.screen.error)

    def _load_click_sound(self, path):
        if not path or not os.path.exists(path):
            return None
        try:
            return pygame.mixer.Sound(path)
        except pygame.error as e:
            log.warning("Could not load sound %r: %s", path, e)
            return None

    def run(self):
        log.info("Ready. Press SPACE to spin or use the wireless buzzer.")
        dt = 0.0
        running = True
        while running:
            running = self._handle_events()
            for _ in range(self.buzzer.drain_presses()):
                self._spin()
            self._update_state(dt)
            self.renderer.draw(self.window, self.screen, self.pointer_anim_progress, self.test_index)
            pygame.display.flip()
            dt = self.clock.tick(self.cfg.fps) / 1000.0
        # --- Shutdown ---
        self.screen.teardown()
        self.buzzer.stop()
        pygame.quit()

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type != pygame.KEYDOWN:
                continue
            if event.key in (pygame.K_ESCAPE, pygame.K_q):
                return False
            if event.key == pygame.K_SPACE:
                self._spin()
            elif event.key in (pygame.K_b, pygame.K_BACKSPACE):
                self.screen.back()
            elif event.key == pygame.K_t:
                self._toggle_test_mode()
            elif self.test_index is not None and event.key in (pygame.K_LEFT, pygame.K_RIGHT):
                step = 1 if event.key == pygame.K_RIGHT else -1
                self.test_index = (self.test_index + step) % max(1, len(self.screen.segments))
                self.demo_service.pinned_index = self.test_index
        return True

    def _toggle_test_mode(self):
        """Pins the demo outcome to a chosen segment. Only available without a real backend."""
        if self.demo_service is None or self.screen.spinning:
            return
        self.test_index = None if self.test_index is not None else 0
        self.demo_service.pinned_index = self.test_index
        log.info("Test mode %s", "off" if self.test_index is None else "on")

    def _spin(self):
        if self.screen.state is KioskState.MODE_SELECTION and self.screen.error:
            self.screen.load_campaign()
        if self.screen.request_spin():
            self.last_tick_idx = None

    def _update_state(self, dt):
        if self.pointer_anim_progress < 1.0:
            self.pointer_anim_progress = min(1.0, self.pointer_anim_progress + dt / POINTER_JIGGLE_DURATION_SEC)

        self.screen.tick(time.monotonic())

        # Tick and jiggle whenever a new wedge passes under the pointer
        if self.screen.spinning and self.screen.segments:
            idx_now = segment_under_pointer(self.screen.rotation, len(self.screen.segments))
            if idx_now != self.last_tick_idx:
                if self.click_sound:
                    self.click_channel.play(self.click_sound)
                self.last_tick_idx = idx_now
                self.pointer_anim_progress = 0.0

    def _print_ticket(self, result):
        # Ticket printing belongs to the printer station; the wheel only hands the ticket over.
        log.info("Ticket %s ready for printing: %s, barcode %s, expires %s",
                 result.ticket_id, result.amount, result.barcode, result.expires_at)


# ========= ENTRY POINT =========
def main():
    cfg = load_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    KioskWheel(cfg).run()
    sys.exit(0)


if __name__ == "__main__":
    main()
