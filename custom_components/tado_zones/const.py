"""Constants for Tado Zones integration."""

from __future__ import annotations

from typing import Any

DOMAIN = "tado_zones"
PLATFORMS: list[str] = ["binary_sensor", "climate", "sensor", "switch"]

CONF_HOME_ID = "home_id"
CONF_ACCESS_TOKEN = "access_token"
CONF_ZONES = "zones"
CONF_ZONE_ID = "zone_id"
CONF_TERMINATION_OPTION = "termination_option"
CONF_SENSORS = "sensors"
CONF_SENSOR_NAME = "name"

CONF_STATE_UPDATE_INTERVAL = "state_update_interval"
CONF_ZONE_UPDATE_INTERVAL = "zone_update_interval"
CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK = "switch_to_auto_in_next_time_block"
CONF_ALTERNATIVE_STATE_LOGIC = "alternative_state_logic"
CONF_HIDE_WINDOW_SENSORS = "hide_window_sensors"

SERVICE_REFRESH = "refresh"
ATTR_ENTRY_ID = "entry_id"
ATTR_ZONE_ID = "zone_id"

EVENT_ZONE_STATE_UPDATED = "tado_zones_state_updated"

DEFAULT_STATE_UPDATE_INTERVAL = 60
DEFAULT_ZONE_UPDATE_INTERVAL = 300

API_BASE_URL = "https://my.tado.com/api/v2"
REQUEST_TIMEOUT_SECONDS = 20

STORAGE_VERSION = 1
STORAGE_KEY_PREFIX = "tado_zones.accessories"

MANUFACTURER = "Tado"
ZONE_TYPE_HEATING = "HEATING"
DUTY_ZONE_LEADER = "ZONE_LEADER"
BATTERY_STATE_NORMAL = "NORMAL"

# Accessory kinds and sub-service kinds.
KIND_THERMOSTAT = "ThermostatAccessory"

SERVICE_INFORMATION = "accessory_information"
SERVICE_THERMOSTAT = "thermostat"
SERVICE_HUMIDITY = "humidity_sensor"
SERVICE_CONTACT = "contact_sensor"
SERVICE_SWITCH = "switch"

SENSOR_SUBTYPE_PREFIX = "sensor-"

# Characteristics.
CHAR_NAME = "name"
CHAR_MANUFACTURER = "manufacturer"
CHAR_MODEL = "model"
CHAR_SERIAL_NUMBER = "serial_number"
CHAR_FIRMWARE_REVISION = "firmware_revision"
CHAR_CURRENT_HEATING_STATE = "current_heating_cooling_state"
CHAR_TARGET_HEATING_STATE = "target_heating_cooling_state"
CHAR_CURRENT_TEMPERATURE = "current_temperature"
CHAR_TARGET_TEMPERATURE = "target_temperature"
CHAR_STATUS_LOW_BATTERY = "status_low_battery"
CHAR_CURRENT_HUMIDITY = "current_relative_humidity"
CHAR_CONTACT_STATE = "contact_sensor_state"
CHAR_ON = "on"

# Heating/cooling state values. COOL is never valid for a heating zone.
MODE_OFF = 0
MODE_HEAT = 1
MODE_COOL = 2
MODE_AUTO = 3

CURRENT_MODE_VALUES: tuple[int, ...] = (MODE_OFF, MODE_HEAT)
TARGET_MODE_VALUES: tuple[int, ...] = (MODE_OFF, MODE_HEAT, MODE_AUTO)

TARGET_TEMPERATURE_MIN_C = 5.0
TARGET_TEMPERATURE_MAX_C = 25.0
TARGET_TEMPERATURE_STEP_C = 0.1

# The Home app writes the target temperature right after every switch to
# AUTO; temperature writes wait this long so the AUTO write can cancel them.
TEMPERATURE_DEBOUNCE_SECONDS = 0.25

TERMINATION_MANUAL = "manual"
TERMINATION_AUTO = "auto"
TERMINATION_NEXT_TIME_BLOCK = "next_time_block"

DEFAULTS: dict[str, object] = {
    CONF_STATE_UPDATE_INTERVAL: DEFAULT_STATE_UPDATE_INTERVAL,
    CONF_ZONE_UPDATE_INTERVAL: DEFAULT_ZONE_UPDATE_INTERVAL,
    CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK: False,
    CONF_ALTERNATIVE_STATE_LOGIC: False,
    CONF_HIDE_WINDOW_SENSORS: False,
    CONF_ZONES: [],
}

OPTION_KEYS: tuple[str, ...] = (
    CONF_STATE_UPDATE_INTERVAL,
    CONF_ZONE_UPDATE_INTERVAL,
    CONF_SWITCH_TO_AUTO_IN_NEXT_TIME_BLOCK,
    CONF_ALTERNATIVE_STATE_LOGIC,
    CONF_HIDE_WINDOW_SENSORS,
)


def normalize_entry_data(data: dict[str, Any]) -> dict[str, Any]:
    """Normalize entry/options data for runtime use."""
    normalized = {**DEFAULTS, **data}
    normalized[CONF_ZONES] = list(normalized.get(CONF_ZONES) or [])
    return normalized
