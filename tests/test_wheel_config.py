import json

import pytest

import wheel_config
from wheel_config import DEFAULT_CAMPAIGN_SEGMENTS, load_config

ENV_VARS = [
    "WHEEL_FULLSCREEN", "WHEEL_WINDOW_SIZE", "WHEEL_FPS", "WHEEL_SPIN_DURATION_SEC",
    "WHEEL_MIN_FULL_SPINS", "WHEEL_MAX_FULL_SPINS", "WHEEL_RESULT_HOLD_SEC",
    "WHEEL_TICKET_TTL_DAYS", "WHEEL_CLICK_SOUND", "WHEEL_SEGMENTS_FILE", "LOG_LEVEL",
    "MQTT_HOST", "MQTT_PORT", "MQTT_KEEPALIVE", "MQTT_SPIN_TOPIC", "MQTT_STATE_TOPIC",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # setenv first so monkeypatch also removes anything load_dotenv writes later.
    for name in ENV_VARS:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    # Point at an empty .env so a developer's local file can't leak in.
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


def test_defaults(clean_env):
    cfg = load_config(clean_env)

    assert cfg.spin_duration == wheel_config.SPIN_DURATION_SEC
    assert (cfg.min_full_spins, cfg.max_full_spins) == (5, 7)
    assert cfg.result_hold == 2.0
    assert cfg.segments == DEFAULT_CAMPAIGN_SEGMENTS
    assert cfg.mqtt.host == "localhost"
    assert cfg.mqtt.spin_topic == "wheel/spin"
    assert cfg.log_level == "INFO"


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("WHEEL_FULLSCREEN", "no")
    monkeypatch.setenv("WHEEL_WINDOW_SIZE", "1024x600")
    monkeypatch.setenv("WHEEL_SPIN_DURATION_SEC", "3.5")
    monkeypatch.setenv("MQTT_PORT", "1884")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = load_config(clean_env)

    assert cfg.fullscreen is False
    assert cfg.window_size == (1024, 600)
    assert cfg.spin_duration == 3.5
    assert cfg.mqtt.port == 1884
    assert cfg.log_level == "DEBUG"


def test_dotenv_file_is_read(clean_env, monkeypatch):
    clean_env.write_text("WHEEL_FPS=60\nMQTT_HOST=buzzer.local\n")
    monkeypatch.setenv("WHEEL_FPS", "30")

    cfg = load_config(clean_env)

    # Real environment wins over the .env file.
    assert cfg.fps == 30
    assert cfg.mqtt.host == "buzzer.local"


def test_segments_file(clean_env, monkeypatch, tmp_path):
    path = tmp_path / "segments.json"
    path.write_text(json.dumps({"segments": [{"segment_order": 0, "label": "Free play"}]}))
    monkeypatch.setenv("WHEEL_SEGMENTS_FILE", str(path))

    cfg = load_config(clean_env)

    assert cfg.segments == [{"segment_order": 0, "label": "Free play"}]


def test_missing_segments_file_names_the_variable(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("WHEEL_SEGMENTS_FILE", str(tmp_path / "nope.json"))

    with pytest.raises(ValueError, match="WHEEL_SEGMENTS_FILE"):
        load_config(clean_env)


@pytest.mark.parametrize("content", ["{not json", '"just text"'])
def test_bad_segments_file_names_the_variable(clean_env, monkeypatch, tmp_path, content):
    path = tmp_path / "segments.json"
    path.write_text(content)
    monkeypatch.setenv("WHEEL_SEGMENTS_FILE", str(path))

    with pytest.raises(ValueError, match="WHEEL_SEGMENTS_FILE"):
        load_config(clean_env)


@pytest.mark.parametrize("name,value", [
    ("WHEEL_FPS", "fast"),
    ("WHEEL_SPIN_DURATION_SEC", "0"),
    ("WHEEL_MIN_FULL_SPINS", "0"),
    ("WHEEL_MAX_FULL_SPINS", "3"),
    ("WHEEL_FULLSCREEN", "maybe"),
    ("WHEEL_WINDOW_SIZE", "big"),
])
def test_invalid_values_name_the_variable(clean_env, monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        load_config(clean_env)
