"""Constants for the light-control bridge."""

# Default configuration paths
DEFAULT_CONFIG_FILE = "light_control.yaml"
DEFAULT_CONFIG_EXAMPLE_FILE = "light_control.yaml.example"
CONFIG_ENV_VAR = "LIGHT_CONTROL_CONFIG"

# MQTT Topics and Payloads
MQTT_TOPIC_PREFIX = "zigbee2mqtt"
MQTT_PAYLOAD_ON = "ON"
MQTT_PAYLOAD_OFF = "OFF"

# Shared state record suffixes
RECORD_REPORT_SUFFIX = "is"
RECORD_DESIRED_SUFFIX = "set"

# Provenance tag
PROVENANCE_KEY = "from"

# Command delivery (seconds)
RESEND_TIMEOUT = 2.0
MAX_RESENDS = 10
DESIRED_STATE_DEBOUNCE = 0.05

# Continuous brightness move (seconds)
MOVE_INTERVAL = 0.5
MOVE_TIMEOUT = 10.0

# Paulmann color temperature move
COLOR_TEMP_MIN = 153
COLOR_TEMP_MAX = 370
MODE_SWITCH_SENTINEL = 286
MODE_SWITCH_VALUE = 370

# Tradfri single remote
TRADFRI_TRANSITION = 0.2
TRADFRI_BRIGHTNESS_STEP = 25
TRADFRI_BRIGHTNESS_MIN = 5
TRADFRI_BRIGHTNESS_MAX = 255
TRADFRI_BRIGHTNESS_LEAP = 80
COLOR_FAMILY_KEYS = ("color", "color_temp", "color_temp_percent")

# Philips dimmer switch (device units)
PHILIPS_BRIGHTNESS_STEP = 25
PHILIPS_BRIGHTNESS_MOVE = 80

# Fraction of the brightness steps below which transitions turn the light off
LOW_BRIGHTNESS_FRACTION = 0.2

# Health endpoint
HEALTH_HOST = "0.0.0.0"
HEALTH_PORT = 8099

# MQTT settings
MQTT_QOS = 1
MQTT_KEEPALIVE = 60
MQTT_CONNECT_TIMEOUT = 10.0

# Remote families accepted in the configuration
REMOTE_TYPES = ("tradfri", "tradfri_multi", "paulmann", "philips_dimmer")
