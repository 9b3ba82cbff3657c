import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Environment variables
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./parking.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
API_ROOT_PATH = os.getenv("API_ROOT_PATH", "/pl")

PARKING_CAR_SPOTS = int(os.getenv("PARKING_CAR_SPOTS", "3"))
PARKING_BIKE_SPOTS = int(os.getenv("PARKING_BIKE_SPOTS", "2"))

MQTT_HOST = os.getenv("MQTT_HOST")
MQTT_PORT = int(os.getenv("MQTT_PORT", "1883"))
MQTT_TLS_PORT = int(os.getenv("MQTT_TLS_PORT", "8883"))
MQTT_USERNAME = os.getenv("MQTT_USERNAME")
MQTT_PASSWORD = os.getenv("MQTT_PASSWORD")
MQTT_ENTRY_TOPIC = os.getenv("MQTT_ENTRY_TOPIC", "parking/gate/entry")
MQTT_EXIT_TOPIC = os.getenv("MQTT_EXIT_TOPIC", "parking/gate/exit")
MQTT_TLS_ENABLED = os.getenv("MQTT_TLS_ENABLED", "false").lower() == "true"

# Certificate paths default to files shipped next to the package
CA_CERT = os.getenv("MQTT_CA_CERT", os.path.join(BASE_DIR, "mqtt", "iot_mqtt_ca.crt"))
CLIENT_CERT = os.getenv("MQTT_CLIENT_CERT", os.path.join(BASE_DIR, "mqtt", "iot_mqtt_client.crt"))
CLIENT_KEY = os.getenv("MQTT_CLIENT_KEY", os.path.join(BASE_DIR, "mqtt", "iot_mqtt_client.key"))
