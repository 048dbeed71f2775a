"""
Order identity resolution for orders created before their shift was known.

Terminals create orders under a placeholder shift segment (``I:0:F``) while
no shift is open, then resend them under the real segment (``I:7:F``) once
paid. Both ids name the same order.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

from avoqado_schemas import OrderExternalId


class OrderIdentityAction(enum.Enum):
    UPDATE = "update"
    RENAME_THEN_UPDATE = "rename_then_update"
    CREATE = "create"


class OrderRow(NamedTuple):
    """Minimal view of a stored order needed to resolve its identity."""

    pk: int
    is_deleted: bool


@dataclass(frozen=True)
class OrderIdentity:
    action: OrderIdentityAction
    target_id: int | None = None
    previous_external_id: str | None = None


OrderLookup = Callable[[str], OrderRow | None]


def resolve_order_identity(candidate_id: str, lookup: OrderLookup) -> OrderIdentity:
    """
    Decide how an incoming order id maps onto stored orders.

    1. Exact match on the incoming id -> UPDATE that row
    2. Otherwise, for ``I:S:F`` with S != "0", a non-deleted row stored as
       ``I:0:F`` is the same order -> RENAME_THEN_UPDATE
    3. Otherwise -> CREATE

    Args:
        candidate_id: External id from the event.
        lookup: Returns the stored row for an external id in the event's
            venue, or None.
    """
    exact = lookup(candidate_id)
    if exact is not None:
        return OrderIdentity(OrderIdentityAction.UPDATE, exact.pk)

    parsed = OrderExternalId.parse(candidate_id)
    if parsed is not None and not parsed.is_placeholder:
        placeholder_id = str(parsed.with_placeholder_shift())
        orphan = lookup(placeholder_id)
        if orphan is not None and not orphan.is_deleted:
            return OrderIdentity(
                OrderIdentityAction.RENAME_THEN_UPDATE,
                orphan.pk,
                previous_external_id=placeholder_id,
            )

    return OrderIdentity(OrderIdentityAction.CREATE)
