"""
RabbitMQ adapter for POS events and commands.

Topology (declared idempotently on every start):
- events exchange (topic) -> events queue bound with ``pos.#``
- events queue dead-letters into the dead-letter exchange (direct)
- commands exchange (topic) for messages sent back to terminals
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.db import close_old_connections

import pika
from pika.adapters.blocking_connection import BlockingChannel
from pika.spec import Basic, BasicProperties

from apps.web.pos.services.dispatcher import DeliveryOutcome, Dispatcher

logger = logging.getLogger(__name__)

ATTEMPT_HEADER = "x-delivery-attempt"
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class BrokerConfig:
    """Broker names and tuning, read from settings."""

    url: str
    events_exchange: str
    commands_exchange: str
    events_queue: str
    events_binding: str
    dead_letter_exchange: str
    dead_letter_queue: str
    dead_letter_routing_key: str
    prefetch_count: int
    heartbeat: int
    blocked_connection_timeout: int

    @classmethod
    def from_settings(cls) -> "BrokerConfig":
        return cls(
            url=settings.RABBITMQ_URL,
            events_exchange=settings.POS_EVENTS_EXCHANGE,
            commands_exchange=settings.POS_COMMANDS_EXCHANGE,
            events_queue=settings.POS_EVENTS_QUEUE,
            events_binding=settings.POS_EVENTS_BINDING,
            dead_letter_exchange=settings.DEAD_LETTER_EXCHANGE,
            dead_letter_queue=settings.DEAD_LETTER_QUEUE,
            dead_letter_routing_key=settings.DEAD_LETTER_ROUTING_KEY,
            prefetch_count=settings.POS_CONSUMER_PREFETCH,
            heartbeat=settings.POS_BROKER_HEARTBEAT,
            blocked_connection_timeout=settings.POS_BROKER_BLOCKED_TIMEOUT,
        )


def connection_parameters(config: BrokerConfig) -> pika.URLParameters:
    params = pika.URLParameters(config.url)
    params.heartbeat = config.heartbeat
    params.blocked_connection_timeout = config.blocked_connection_timeout
    return params


def connect(config: BrokerConfig) -> pika.BlockingConnection:
    """Open a blocking connection to the broker."""
    logger.info("Connecting to broker at %s", pika.URLParameters(config.url).host)
    return pika.BlockingConnection(connection_parameters(config))


def declare_topology(channel: BlockingChannel, config: BrokerConfig) -> None:
    """Declare exchanges, queues and bindings. Safe to repeat."""
    channel.exchange_declare(
        exchange=config.dead_letter_exchange, exchange_type="direct", durable=True
    )
    channel.queue_declare(queue=config.dead_letter_queue, durable=True)
    channel.queue_bind(
        queue=config.dead_letter_queue,
        exchange=config.dead_letter_exchange,
        routing_key=config.dead_letter_routing_key,
    )

    channel.exchange_declare(
        exchange=config.events_exchange, exchange_type="topic", durable=True
    )
    channel.exchange_declare(
        exchange=config.commands_exchange, exchange_type="topic", durable=True
    )
    channel.queue_declare(
        queue=config.events_queue,
        durable=True,
        arguments={
            "x-dead-letter-exchange": config.dead_letter_exchange,
            "x-dead-letter-routing-key": config.dead_letter_routing_key,
        },
    )
    channel.queue_bind(
        queue=config.events_queue,
        exchange=config.events_exchange,
        routing_key=config.events_binding,
    )
    logger.info(
        "Broker topology ready: %s -> %s (%s)",
        config.events_exchange,
        config.events_queue,
        config.events_binding,
    )


def delivery_attempt(properties: BasicProperties) -> int:
    """1-based attempt number carried in the message headers."""
    headers = properties.headers or {}
    try:
        return max(int(headers.get(ATTEMPT_HEADER, 1)), 1)
    except (TypeError, ValueError):
        return 1


class PikaCommandPublisher:
    """Publishes JSON commands on the commands exchange."""

    def __init__(self, channel: BlockingChannel, exchange: str) -> None:
        self.channel = channel
        self.exchange = exchange

    def publish(self, routing_key: str, message: dict[str, Any]) -> None:
        self.channel.basic_publish(
            exchange=self.exchange,
            routing_key=routing_key,
            body=json.dumps(message).encode(),
            properties=BasicProperties(
                content_type=JSON_CONTENT_TYPE,
                delivery_mode=pika.DeliveryMode.Persistent,
            ),
        )
        logger.info("Published command %s", routing_key)


class POSEventConsumer:
    """
    Consumes the events queue and applies dispatcher outcomes.

    - ACK: basic_ack
    - RETRY: republish with the attempt header incremented, then ack
    - DEAD_LETTER: basic_nack without requeue (the queue dead-letters it)
    """

    def __init__(
        self, channel: BlockingChannel, dispatcher: Dispatcher, config: BrokerConfig
    ) -> None:
        self.channel = channel
        self.dispatcher = dispatcher
        self.config = config

    def start(self) -> None:
        """Consume until stop() is called or the connection drops."""
        self.channel.basic_qos(prefetch_count=self.config.prefetch_count)
        self.channel.basic_consume(
            queue=self.config.events_queue, on_message_callback=self.on_message
        )
        logger.info(
            "Consuming %s (prefetch %d)",
            self.config.events_queue,
            self.config.prefetch_count,
        )
        self.channel.start_consuming()

    def stop(self) -> None:
        self.channel.stop_consuming()

    def on_message(
        self,
        channel: BlockingChannel,
        method: Basic.Deliver,
        properties: BasicProperties,
        body: bytes,
    ) -> None:
        attempt = delivery_attempt(properties)
        logger.debug(
            "Received %s (attempt %d, tag %s)",
            method.routing_key,
            attempt,
            method.delivery_tag,
        )

        close_old_connections()
        try:
            outcome = self.dispatcher.dispatch(method.routing_key, body, attempt)
        finally:
            close_old_connections()

        if outcome == DeliveryOutcome.ACK:
            channel.basic_ack(delivery_tag=method.delivery_tag)
        elif outcome == DeliveryOutcome.RETRY:
            self._republish(channel, method, properties, body, attempt + 1)
            channel.basic_ack(delivery_tag=method.delivery_tag)
        else:
            logger.warning("Dead-lettering %s", method.routing_key)
            channel.basic_nack(delivery_tag=method.delivery_tag, requeue=False)

    def _republish(
        self,
        channel: BlockingChannel,
        method: Basic.Deliver,
        properties: BasicProperties,
        body: bytes,
        attempt: int,
    ) -> None:
        headers = dict(properties.headers or {})
        headers[ATTEMPT_HEADER] = attempt
        channel.basic_publish(
            exchange=self.config.events_exchange,
            routing_key=method.routing_key,
            body=body,
            properties=BasicProperties(
                content_type=properties.content_type or JSON_CONTENT_TYPE,
                delivery_mode=pika.DeliveryMode.Persistent,
                message_id=properties.message_id,
                timestamp=properties.timestamp,
                headers=headers,
            ),
        )
        logger.info("Requeued %s for attempt %d", method.routing_key, attempt)
