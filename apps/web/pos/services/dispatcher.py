"""
POS event dispatcher - routes broker deliveries to sync handlers.

Deliveries are handled one at a time:
1. Parse the routing key (pos.<vendor>.<entity>[.<verb>])
2. Decode the JSON body
3. Run the registered handler
4. Decide the delivery outcome (ack, retry, dead-letter)

Handlers are idempotent, so a retried or replayed delivery is always safe.
"""

import enum
import json
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from django.db import IntegrityError, InterfaceError, OperationalError

from avoqado_schemas import EntityType, EventVerb, POSVendor

from apps.web.pos.exceptions import (
    POSConfigurationError,
    POSPayloadError,
    POSRoutingError,
)

if TYPE_CHECKING:
    from apps.web.pos.services.registry import HandlerRegistry

logger = logging.getLogger(__name__)

ROUTING_PREFIX = "pos"

# Errors worth another attempt: connection drops, deadlocks and
# serialization failures, and unique-key races between duplicate deliveries.
TRANSIENT_ERRORS = (OperationalError, InterfaceError, IntegrityError)


class DeliveryOutcome(enum.Enum):
    """What the consumer should do with a delivery."""

    ACK = "ack"
    RETRY = "retry"
    DEAD_LETTER = "dead_letter"


@dataclass(frozen=True)
class RoutingKey:
    """Parsed event routing key."""

    vendor: POSVendor
    entity: EntityType
    verb: EventVerb | None = None

    @classmethod
    def parse(cls, routing_key: str) -> "RoutingKey":
        """
        Parse ``pos.<vendor>.<entity>.<verb>`` (heartbeats have no verb).

        Raises:
            POSRoutingError: The key does not follow the grammar or names an
                unknown vendor, entity or verb.
        """
        parts = routing_key.split(".")
        if len(parts) not in (3, 4) or parts[0] != ROUTING_PREFIX:
            raise POSRoutingError(f"Invalid routing key: {routing_key}", routing_key)

        try:
            vendor = POSVendor(parts[1])
            entity = EntityType(parts[2])
            verb = EventVerb(parts[3]) if len(parts) == 4 else None
        except ValueError as e:
            raise POSRoutingError(
                f"Unknown segment in routing key {routing_key}: {e}", routing_key
            ) from e

        if (entity == EntityType.HEARTBEAT) != (verb is None):
            raise POSRoutingError(
                f"Routing key {routing_key} has the wrong number of segments "
                f"for {entity.value}",
                routing_key,
            )

        return cls(vendor=vendor, entity=entity, verb=verb)

    def __str__(self) -> str:
        parts = [ROUTING_PREFIX, self.vendor.value, self.entity.value]
        if self.verb is not None:
            parts.append(self.verb.value)
        return ".".join(parts)


def decode_body(body: bytes) -> dict[str, Any]:
    """Decode a delivery body into a JSON object."""
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise POSPayloadError(f"Message body is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise POSPayloadError("Message body must be a JSON object")
    return data


class Dispatcher:
    """
    Runs the handler for each delivery and decides its outcome.

    Outcomes:
    - success or configuration error -> ACK (the terminal is at fault, a
      redelivery cannot help)
    - transient datastore error, attempts left -> RETRY
    - anything else -> DEAD_LETTER for operator review and replay
    """

    def __init__(
        self, registry: "HandlerRegistry", max_delivery_attempts: int
    ) -> None:
        if max_delivery_attempts < 1:
            raise ValueError("max_delivery_attempts must be at least 1")
        self.registry = registry
        self.max_delivery_attempts = max_delivery_attempts

    def dispatch(
        self, routing_key: str, body: bytes, attempt: int = 1
    ) -> DeliveryOutcome:
        """
        Handle one delivery.

        Args:
            routing_key: Routing key the message was published with.
            body: Raw message body.
            attempt: 1-based delivery attempt for this message.

        Returns:
            The outcome the consumer must apply to the delivery.
        """
        start_time = time.monotonic()

        try:
            key = RoutingKey.parse(routing_key)
            handler = self.registry.get(key.entity)
            handler(key, decode_body(body))

        except POSConfigurationError as e:
            logger.error(
                "Configuration error for %s; acknowledging: %s", routing_key, e.message
            )
            return DeliveryOutcome.ACK

        except TRANSIENT_ERRORS as e:
            if attempt < self.max_delivery_attempts:
                logger.warning(
                    "Transient error handling %s (attempt %d/%d), will retry: %s",
                    routing_key,
                    attempt,
                    self.max_delivery_attempts,
                    e,
                )
                return DeliveryOutcome.RETRY
            logger.exception(
                "Transient error handling %s persisted after %d attempts; "
                "dead-lettering",
                routing_key,
                attempt,
            )
            return DeliveryOutcome.DEAD_LETTER

        except Exception as e:
            logger.exception("Failed to handle %s; dead-lettering: %s", routing_key, e)
            return DeliveryOutcome.DEAD_LETTER

        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.info("Handled %s in %dms", routing_key, duration_ms)
        return DeliveryOutcome.ACK
