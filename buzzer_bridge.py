# =============================================================================
# Kiosk Prize Wheel - Arcade Buzzer Bridge
#
# Talks to the wireless arcade buzzer over MQTT. The buzzer publishes
# "pressed" on the spin topic; we publish the wheel state back so its LED
# ring can follow along (spinning, flash on a prize, idle).
#
# paho runs its network loop on a background thread, so presses are queued
# here and drained by the frame loop. The wheel itself is only ever touched
# from the frame loop.
# =============================================================================

import logging
import queue

import paho.mqtt.client as mqtt

from spin_screen import KioskState
from wheel_config import MQTT_HOST, MQTT_KEEPALIVE, MQTT_PORT, MQTT_SPIN_TOPIC, MQTT_STATE_TOPIC

log = logging.getLogger(__name__)

PRESSED_PAYLOAD = "pressed"


def state_payload(state, result):
    """The buzzer LED mode for a kiosk state, or None when the buzzer doesn't care."""
    if state is KioskState.SPINNING:
        return "spinning"
    if state is KioskState.PRIZE_AWARDED:
        if result is not None and not result.amount:
            return "flash_red"
        return "flash_white"
    if state in (KioskState.PRINTING_TICKET, KioskState.SPIN_MODE, KioskState.MODE_SELECTION):
        return "idle"
    return None


class BuzzerBridge:
    def __init__(self, host=MQTT_HOST, port=MQTT_PORT, keepalive=MQTT_KEEPALIVE,
                 spin_topic=MQTT_SPIN_TOPIC, state_topic=MQTT_STATE_TOPIC, client=None):
        self.host = host
        self.port = port
        self.keepalive = keepalive
        self.spin_topic = spin_topic
        self.state_topic = state_topic
        self.presses = queue.SimpleQueue()

        self.client = client or mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

    @classmethod
    def from_config(cls, mqtt_config):
        return cls(
            host=mqtt_config.host,
            port=mqtt_config.port,
            keepalive=mqtt_config.keepalive,
            spin_topic=mqtt_config.spin_topic,
            state_topic=mqtt_config.state_topic,
        )

    def start(self):
        """Connects and starts paho's network thread. Returns False if the broker is unreachable."""
        try:
            self.client.connect(self.host, self.port, self.keepalive)
        except (OSError, ValueError) as e:
            log.warning("MQTT connection to %s:%s failed (%s); keyboard controls still work",
                        self.host, self.port, e)
            return False
        self.client.loop_start()
        return True

    def stop(self):
        if self.client.is_connected():
            self.client.disconnect()
        self.client.loop_stop()

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code == 0:
            log.info("Connected to MQTT broker at %s:%s", self.host, self.port)
            client.subscribe(self.spin_topic)
        else:
            log.error("MQTT broker refused connection: %s", reason_code)

    def _on_message(self, client, userdata, msg):
        if msg.topic == self.spin_topic and msg.payload.decode(errors="replace").strip() == PRESSED_PAYLOAD:
            self.presses.put(True)

    def drain_presses(self):
        """Number of buzzer presses since the last call."""
        count = 0
        while True:
            try:
                self.presses.get_nowait()
            except queue.Empty:
                return count
            count += 1

    def publish_state(self, state, result=None):
        """SpinScreen listener: mirrors the kiosk state to the buzzer LEDs."""
        payload = state_payload(state, result)
        if payload is None or not self.client.is_connected():
            return
        self.client.publish(self.state_topic, payload=payload, qos=0, retain=False)
        log.debug("Published buzzer state: %s", payload)
