import logging
import ssl

from aiomqtt import Client

from parking_lot import config
from parking_lot.outcomes import Allocated, Closed
from parking_lot.schemas import GateSignal

logger = logging.getLogger(__name__)


def entry_signal(outcome: Allocated) -> GateSignal:
    return GateSignal(
        gate="entry",
        plate_number=outcome.plate_number,
        spot_number=outcome.spot_number,
        timestamp=outcome.entry_time,
    )


def exit_signal(outcome: Closed) -> GateSignal:
    return GateSignal(
        gate="exit",
        plate_number=outcome.plate_number,
        spot_number=outcome.spot_number,
        timestamp=outcome.exit_time,
        fee=round(outcome.price, 2),
    )


def build_tls_context():
    tls_context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    tls_context.load_verify_locations(cafile=config.CA_CERT)
    tls_context.load_cert_chain(certfile=config.CLIENT_CERT, keyfile=config.CLIENT_KEY)
    return tls_context


async def publish_gate_signal(topic: str, signal: GateSignal) -> bool:
    """Tell the barrier at ``signal.gate`` to open for the vehicle that was just processed."""
    if not config.MQTT_HOST:
        logger.info(f"MQTT_HOST not set, {signal.gate} gate for {signal.plate_number} not signalled")
        return False

    payload = signal.model_dump_json()
    try:
        tls_context = build_tls_context() if config.MQTT_TLS_ENABLED else None
        port = config.MQTT_TLS_PORT if config.MQTT_TLS_ENABLED else config.MQTT_PORT

        async with Client(
            hostname=config.MQTT_HOST,
            port=port,
            username=config.MQTT_USERNAME,
            password=config.MQTT_PASSWORD,
            tls_context=tls_context
        ) as client:
            await client.publish(topic, payload.encode())
        logger.info(f"Signalled {signal.gate} gate on '{topic}' for spot {signal.spot_number}")
        return True
    except Exception as e:
        logger.error(f"Gate signal for {signal.plate_number} on '{topic}' failed: {e}")
        return False
