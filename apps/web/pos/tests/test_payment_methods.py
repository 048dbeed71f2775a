"""Tests for payment method mapping."""

from django.test import override_settings

import pytest
from avoqado_schemas import PaymentMethodCatalogEntry, POSVendor

from apps.web.pos.services.payment_methods import fallback_catalog, map_payment_method
from apps.web.restaurant.models import PaymentMethod

CATALOG = [
    PaymentMethodCatalogEntry(external_id="EFE", description="EFECTIVO", type=1),
    PaymentMethodCatalogEntry(external_id="CRE", description="TARJETA CREDITO", type=2),
    PaymentMethodCatalogEntry(external_id="DEB", description="TARJETA DEBITO", type=2),
    PaymentMethodCatalogEntry(external_id="TDD", description="Tarjeta débito", type=2),
    PaymentMethodCatalogEntry(external_id="VAL", description="VALES", type=3),
    PaymentMethodCatalogEntry(external_id="OTR", description="OTROS", type=4),
    PaymentMethodCatalogEntry(external_id="XYZ", description="RARO", type=9),
]


class TestMapPaymentMethod:
    """Tests for map_payment_method."""

    @pytest.mark.parametrize(
        ("method_id", "expected"),
        [
            ("EFE", PaymentMethod.CASH),
            ("CRE", PaymentMethod.CREDIT_CARD),
            ("DEB", PaymentMethod.DEBIT_CARD),
            ("TDD", PaymentMethod.DEBIT_CARD),
            ("VAL", PaymentMethod.OTHER),
            ("OTR", PaymentMethod.OTHER),
            ("XYZ", PaymentMethod.OTHER),
        ],
    )
    def test_maps_catalog_types(self, method_id: str, expected: str) -> None:
        assert map_payment_method(method_id, CATALOG) == expected

    def test_unknown_id_maps_to_other(self, caplog) -> None:
        assert map_payment_method("NOPE", CATALOG) == PaymentMethod.OTHER
        assert "NOPE" in caplog.text

    def test_ids_are_compared_trimmed(self) -> None:
        assert map_payment_method(" EFE ", CATALOG) == PaymentMethod.CASH

    def test_empty_catalog(self) -> None:
        assert map_payment_method("EFE", []) == PaymentMethod.OTHER


class TestFallbackCatalog:
    """Tests for the configured per-vendor catalog."""

    def test_reads_settings(self) -> None:
        catalog = fallback_catalog(POSVendor.SOFTRESTAURANT)

        assert map_payment_method("EFE", catalog) == PaymentMethod.CASH
        assert map_payment_method("DEB", catalog) == PaymentMethod.DEBIT_CARD

    @override_settings(POS_DEFAULT_PAYMENT_METHOD_CATALOGS={})
    def test_missing_vendor_is_empty(self) -> None:
        assert fallback_catalog(POSVendor.SOFTRESTAURANT) == []
