"""
Consume POS terminal events from RabbitMQ and sync them into the database.

Usage:
    uv run python apps/web/manage.py consume_pos_events
    uv run python apps/web/manage.py consume_pos_events --declare-only
    uv run python apps/web/manage.py consume_pos_events --prefetch 1
"""

import dataclasses
import signal
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.web.pos.broker import (
    BrokerConfig,
    PikaCommandPublisher,
    POSEventConsumer,
    connect,
    declare_topology,
)
from apps.web.pos.services import (
    Dispatcher,
    build_handler_registry,
    build_sync_services,
)


class Command(BaseCommand):
    help = "Consume POS events from the broker and reconcile them"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--declare-only",
            action="store_true",
            help="Declare exchanges and queues, then exit",
        )
        parser.add_argument(
            "--prefetch",
            type=int,
            default=None,
            help="Unacknowledged deliveries per consumer (default: settings)",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        config = BrokerConfig.from_settings()
        if options["prefetch"]:
            config = dataclasses.replace(config, prefetch_count=options["prefetch"])

        connection = connect(config)
        try:
            channel = connection.channel()
            declare_topology(channel, config)
            if options["declare_only"]:
                self.stdout.write("Broker topology declared")
                return

            # Services and handlers are wired once for the process lifetime.
            publisher = PikaCommandPublisher(channel, config.commands_exchange)
            services = build_sync_services(publisher)
            dispatcher = Dispatcher(
                build_handler_registry(services),
                max_delivery_attempts=settings.POS_MAX_DELIVERY_ATTEMPTS,
            )
            consumer = POSEventConsumer(channel, dispatcher, config)

            signal.signal(signal.SIGTERM, lambda *_: consumer.stop())

            self.stdout.write(f"Consuming POS events from {config.events_queue}...")
            try:
                consumer.start()
            except KeyboardInterrupt:
                consumer.stop()
            self.stdout.write("Consumer stopped")
        finally:
            if connection.is_open:
                connection.close()
