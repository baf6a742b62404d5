# =============================================================================
# Kiosk Prize Wheel - Configuration
#
# All primary tunable parameters for the spin screen live here. Every value
# can be overridden from the environment (or a .env file next to this module)
# so a venue can retune a kiosk without touching the code.
# =============================================================================

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# --- DISPLAY & RESOLUTION ---
FULLSCREEN = True      # Set to True to run in fullscreen, False for a window.
WINDOW_SIZE = (1200, 800)  # Window size used when FULLSCREEN is False.
FPS        = 120       # Target frames per second for smooth animation.
MARGIN_PX  = 40        # Minimum space between the wheel and the edge of the window.

# Internal render resolution multiplier for the wheel face (anti-aliasing).
WHEEL_SCALE_FACTOR = 2
# Caps the internal wheel surface so huge displays don't exhaust video memory.
MAX_RENDER_DIAMETER = 8192

# --- SPIN ---
SPIN_DURATION_SEC = 5.0   # Length of the spin animation.
MIN_FULL_SPINS    = 5     # Minimum number of extra full rotations for a spin.
MAX_FULL_SPINS    = 7     # Maximum number of extra full rotations for a spin.
RESULT_HOLD_SEC   = 2.0   # How long the prize is shown before ticket printing.
TICKET_TTL_DAYS   = 30    # Redemption window used by the demo outcome service.

# --- ANIMATION FEEL ---
POINTER_JIGGLE_DURATION_SEC = 0.25 # How long the pointer jiggle animation lasts.
POINTER_JIGGLE_STRENGTH_PX  = 8    # How much the pointer moves vertically.

# --- ASSETS ---
CLICK_SOUND = "tick.wav"  # Played each time a wedge boundary passes the pointer.

# --- BUZZER (MQTT) ---
MQTT_HOST         = "localhost"
MQTT_PORT         = 1883
MQTT_KEEPALIVE    = 60
MQTT_SPIN_TOPIC   = "wheel/spin"    # The buzzer publishes "pressed" here.
MQTT_STATE_TOPIC  = "wheel/state"   # We publish the wheel state here for the buzzer LEDs.

# --- FONTS ---
FONT_TITLE  = "Arial Black"
FONT_LABEL  = "Arial Bold"
FONT_BODY   = "Arial"
FONT_SIZES = {
    "title": 64,
    "label": 34,
    "prize": 96,
    "body": 30,
    "small": 24,
}

# --- COLORS ---
COLOR_BACKGROUND = (20, 20, 20)
COLOR_BLACK      = (0, 0, 0)
COLOR_WHITE      = (255, 255, 255)
COLOR_GOLD       = (255, 215, 0)
COLOR_YELLOW     = (250, 204, 21)
COLOR_HUB        = (44, 62, 80)
COLOR_GREEN      = (74, 222, 128)
COLOR_RED        = (248, 113, 113)
COLOR_GREY       = (170, 170, 170)

# Wedge colours, assigned by segment index and cycled when there are more wedges.
SEGMENT_COLORS = [
    (231, 76, 60),
    (52, 152, 219),
    (46, 204, 113),
    (155, 89, 182),
    (243, 156, 18),
    (26, 188, 156),
    (52, 73, 94),
    (241, 196, 15),
    (230, 126, 34),
]

# The campaign shown when no segments file is configured.
DEFAULT_CAMPAIGN_SEGMENTS = [
    {"segment_order": 0, "label": "$50", "amount": 50, "daily_win_limit": 5, "is_active": True},
    {"segment_order": 1, "label": "$25", "amount": 25, "daily_win_limit": 10, "is_active": True},
    {"segment_order": 2, "label": "$10", "amount": 10, "daily_win_limit": 20, "is_active": True},
    {"segment_order": 3, "label": "$5", "amount": 5, "daily_win_limit": 40, "is_active": True},
    {"segment_order": 4, "label": "Better luck!", "amount": 0, "daily_win_limit": None, "is_active": True},
]


@dataclass(frozen=True)
class MqttConfig:
    host: str
    port: int
    keepalive: int
    spin_topic: str
    state_topic: str


@dataclass(frozen=True)
class KioskConfig:
    fullscreen: bool
    window_size: tuple
    fps: int
    spin_duration: float
    min_full_spins: int
    max_full_spins: int
    result_hold: float
    ticket_ttl_days: int
    click_sound: str
    log_level: str
    segments: list
    mqtt: MqttConfig


def _getenv(name, default=None):
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _int(name, default):
    value = _getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got: {value!r}") from e


def _float(name, default):
    value = _getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got: {value!r}") from e


def _bool(name, default):
    value = _getenv(name)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got: {value!r}")


def _window_size(name, default):
    value = _getenv(name)
    if value is None:
        return default
    try:
        w, h = (int(part) for part in value.lower().split("x", 1))
    except ValueError as e:
        raise ValueError(f"{name} must look like 1200x800, got: {value!r}") from e
    return (w, h)


def load_segments_file(path, var_name="WHEEL_SEGMENTS_FILE"):
    """Reads a JSON list of campaign segment records."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"{var_name} could not be read: {path!r} ({e})") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"{var_name} is not valid JSON: {path!r} ({e})") from e
    if isinstance(data, dict):
        data = data.get("segments", [])
    if not isinstance(data, list):
        raise ValueError(f"{var_name} must contain a list of segments, got: {path!r}")
    return data


def load_config(env_file=None):
    """Builds the kiosk configuration from the environment and an optional .env file."""
    dotenv_path = Path(env_file) if env_file else Path(__file__).resolve().parent / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)

    min_spins = _int("WHEEL_MIN_FULL_SPINS", MIN_FULL_SPINS)
    max_spins = _int("WHEEL_MAX_FULL_SPINS", MAX_FULL_SPINS)
    if min_spins < 1:
        raise ValueError("WHEEL_MIN_FULL_SPINS must be >= 1")
    if max_spins < min_spins:
        raise ValueError("WHEEL_MAX_FULL_SPINS must be >= WHEEL_MIN_FULL_SPINS")

    spin_duration = _float("WHEEL_SPIN_DURATION_SEC", SPIN_DURATION_SEC)
    if spin_duration <= 0:
        raise ValueError("WHEEL_SPIN_DURATION_SEC must be > 0")

    segments_file = _getenv("WHEEL_SEGMENTS_FILE")
    segments = load_segments_file(segments_file) if segments_file else list(DEFAULT_CAMPAIGN_SEGMENTS)

    return KioskConfig(
        fullscreen=_bool("WHEEL_FULLSCREEN", FULLSCREEN),
        window_size=_window_size("WHEEL_WINDOW_SIZE", WINDOW_SIZE),
        fps=_int("WHEEL_FPS", FPS),
        spin_duration=spin_duration,
        min_full_spins=min_spins,
        max_full_spins=max_spins,
        result_hold=_float("WHEEL_RESULT_HOLD_SEC", RESULT_HOLD_SEC),
        ticket_ttl_days=_int("WHEEL_TICKET_TTL_DAYS", TICKET_TTL_DAYS),
        click_sound=_getenv("WHEEL_CLICK_SOUND", CLICK_SOUND) or "",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
        segments=segments,
        mqtt=MqttConfig(
            host=_getenv("MQTT_HOST", MQTT_HOST) or MQTT_HOST,
            port=_int("MQTT_PORT", MQTT_PORT),
            keepalive=_int("MQTT_KEEPALIVE", MQTT_KEEPALIVE),
            spin_topic=_getenv("MQTT_SPIN_TOPIC", MQTT_SPIN_TOPIC) or MQTT_SPIN_TOPIC,
            state_topic=_getenv("MQTT_STATE_TOPIC", MQTT_STATE_TOPIC) or MQTT_STATE_TOPIC,
        ),
    )
