"""Payment method mapping - terminal catalog ids to canonical categories."""

import logging
from collections.abc import Iterable

from django.conf import settings

from avoqado_schemas import PaymentMethodCatalogEntry, POSVendor

from apps.web.restaurant.models import PaymentMethod

logger = logging.getLogger(__name__)

# Catalog "type" column on the terminal.
CATALOG_TYPE_CASH = 1
CATALOG_TYPE_CARD = 2

DEBIT_MARKERS = ("DEB", "DÉBITO")


def fallback_catalog(vendor: POSVendor) -> list[PaymentMethodCatalogEntry]:
    """Configured catalog used when an event does not ship its own."""
    entries = settings.POS_DEFAULT_PAYMENT_METHOD_CATALOGS.get(vendor.value, [])
    return [PaymentMethodCatalogEntry.model_validate(entry) for entry in entries]


def map_payment_method(
    method_id: str, catalog: Iterable[PaymentMethodCatalogEntry]
) -> str:
    """
    Map a terminal payment method id to a PaymentMethod value.

    Args:
        method_id: Terminal payment method id (e.g., 'EFE', 'CRE').
        catalog: Payment method definitions from the terminal.

    Returns:
        PaymentMethod value. Unknown ids map to OTHER.
    """
    wanted = method_id.strip()
    entry = next((m for m in catalog if m.external_id.strip() == wanted), None)

    if entry is None:
        logger.warning(
            "Payment method %r not found in catalog; using OTHER", method_id
        )
        return PaymentMethod.OTHER

    if entry.type == CATALOG_TYPE_CASH:
        return PaymentMethod.CASH

    if entry.type == CATALOG_TYPE_CARD:
        # The catalog does not separate credit from debit; the description does.
        description = entry.description.upper()
        if any(marker in description for marker in DEBIT_MARKERS):
            return PaymentMethod.DEBIT_CARD
        return PaymentMethod.CREDIT_CARD

    return PaymentMethod.OTHER
