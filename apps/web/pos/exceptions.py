"""POS sync exceptions."""


class POSError(Exception):
    """Base exception for POS sync errors."""

    def __init__(self, message: str, vendor: str | None = None) -> None:
        self.message = message
        self.vendor = vendor
        super().__init__(message)


class POSConfigurationError(POSError):
    """The terminal is misconfigured; the event cannot be applied anywhere."""


class VenueNotFoundError(POSConfigurationError):
    """Event references a venue that does not exist."""

    def __init__(self, venue_id: str, vendor: str | None = None) -> None:
        super().__init__(f"Venue {venue_id} not found", vendor)
        self.venue_id = venue_id


class POSNotFoundError(POSError):
    """Event references a parent entity that was never synchronized."""

    def __init__(
        self,
        message: str,
        vendor: str | None = None,
        external_id: str | None = None,
    ) -> None:
        super().__init__(message, vendor)
        self.external_id = external_id


class POSPayloadError(POSError):
    """Event body is malformed or incomplete."""


class POSRoutingError(POSPayloadError):
    """Routing key does not match pos.<vendor>.<entity>[.<verb>]."""

    def __init__(self, message: str, routing_key: str) -> None:
        super().__init__(message)
        self.routing_key = routing_key
