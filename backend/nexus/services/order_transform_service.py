# Overview: View-model normalizer between persisted order records and the canonical order.

"""
Order View-Model Normalizer

The orders table accepted writes across several schema revisions, so rows
come back in two shapes:

- CurrentOrderRecord: flat row, items/addresses/metadata stored as JSON text.
- LegacyOrderRecord: nested document written by older clients, with already
  decoded structures, "totalAmount" instead of "total_amount", and line items
  keyed qty/price/product.

classify_record() tags a raw row at the storage boundary; from_persisted() is
the only place that branches on which shape it received.

FIELD ISOLATION: each stored blob is decoded on its own. A corrupt "items"
blob yields an empty item list but leaves shipping_address, billing_address
and metadata untouched. Fallbacks are logged, never raised.
"""

from __future__ import annotations

import copy
import json
import logging
import secrets
import time
from dataclasses import dataclass, field, fields as dataclass_fields
from datetime import datetime
from decimal import Decimal
from numbers import Number
from typing import Any, Callable, Mapping

from ..time_utils import parse_iso_datetime, to_utc_z, utcnow
from ..view_models import (
    Address,
    CanonicalOrder,
    LineItem,
    OrderStatus,
    ValidationResult,
    parse_status,
    to_decimal,
)

logger = logging.getLogger(__name__)


# Injected when an order reaches storage without a retailer
PLACEHOLDER_RETAILER_ID = "550e8400-e29b-41d4-a716-446655440000"

_MISSING = object()


@dataclass(frozen=True)
class CurrentOrderRecord:
    """Row shape of the orders table. JSON columns are opaque text to the store."""

    id: str
    retailer_id: str
    status: str
    total_amount: Decimal
    items: str
    metadata: str
    created_by: str
    created_at: str
    updated_at: str
    location_id: str | None = None
    customer_id: str | None = None
    shipping_address: str | None = None
    billing_address: str | None = None
    signature_url: str | None = None
    id_photo_url: str | None = None
    contract_url: str | None = None
    requires_ltl: bool = False

    def to_row(self) -> dict:
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self)}


@dataclass(frozen=True)
class LegacyOrderRecord:
    """Nested document shape from older clients; kept as the decoded mapping."""

    document: Mapping[str, Any] = field(default_factory=dict)


_BLOB_FIELDS = ("items", "shipping_address", "billing_address", "metadata")
_LEGACY_ONLY_KEYS = ("totalAmount",)


def classify_record(raw: Mapping[str, Any] | CurrentOrderRecord | LegacyOrderRecord):
    """
    Tag a raw storage row as current or legacy.

    A row is legacy when any blob field holds a decoded structure instead of
    text, or when it carries keys only older clients wrote.
    """
    if isinstance(raw, (CurrentOrderRecord, LegacyOrderRecord)):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Order record of type %s is not a mapping; treating as empty legacy document", type(raw).__name__)
        return LegacyOrderRecord(document={})

    if any(key in raw for key in _LEGACY_ONLY_KEYS):
        return LegacyOrderRecord(document=dict(raw))
    for name in _BLOB_FIELDS:
        value = raw.get(name)
        if value is not None and not isinstance(value, str):
            return LegacyOrderRecord(document=dict(raw))

    return CurrentOrderRecord(
        id=raw.get("id"),
        retailer_id=raw.get("retailer_id"),
        status=raw.get("status"),
        total_amount=raw.get("total_amount"),
        items=raw.get("items"),
        metadata=raw.get("metadata"),
        created_by=raw.get("created_by"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        location_id=raw.get("location_id"),
        customer_id=raw.get("customer_id"),
        shipping_address=raw.get("shipping_address"),
        billing_address=raw.get("billing_address"),
        signature_url=raw.get("signature_url"),
        id_photo_url=raw.get("id_photo_url"),
        contract_url=raw.get("contract_url"),
        requires_ltl=bool(raw.get("requires_ltl") or False),
    )


# =============================================================================
# DECODING (persisted -> canonical)
# =============================================================================

def _decode_json(text: str, *, exact: bool = True) -> Any:
    # Money is written as strings; older rows hold floats, which still decode to Decimal.
    # Metadata keeps plain floats.
    if exact:
        return json.loads(text, parse_float=Decimal)
    return json.loads(text)


def _decode_items(value: Any, order_id: Any) -> list[LineItem]:
    if not isinstance(value, list):
        raise ValueError("items must be a list")
    items = []
    for index, raw_item in enumerate(value):
        try:
            items.append(LineItem.from_value(raw_item))
        except ValueError as exc:
            logger.warning("Order %s: skipping malformed line item %d: %s", order_id, index, exc)
    return items


def _decode_metadata(value: Any, order_id: Any) -> dict:
    if not isinstance(value, Mapping):
        raise ValueError("metadata must be an object")
    return dict(value)


def _decode_field(
    order_id: Any,
    name: str,
    raw: Any,
    default: Callable[[], Any],
    convert: Callable[[Any], Any],
    *,
    from_text: bool,
) -> Any:
    """Decode one stored field; on any failure log and return a fresh default."""
    if raw is None or (from_text and isinstance(raw, str) and raw.strip() == ""):
        return default()
    try:
        value = _decode_json(raw, exact=name != "metadata") if from_text else raw
        if value is None:
            return default()
        return convert(value)
    except (ValueError, TypeError, RecursionError) as exc:
        # json.JSONDecodeError is a ValueError; absurdly nested blobs exhaust the decoder's stack
        logger.warning("Order %s: could not decode %s (%s); using empty default", order_id, name, exc)
        return default()


def _decode_total(order_id: Any, raw: Any) -> Decimal | None:
    if raw is None:
        return None
    try:
        return to_decimal(raw, field_name="total_amount")
    except ValueError as exc:
        logger.warning("Order %s: invalid total_amount %r (%s)", order_id, raw, exc)
        return None


def _decode_status(order_id: Any, raw: Any) -> OrderStatus | None:
    status = parse_status(raw)
    if status is None and raw is not None:
        logger.warning("Order %s: unknown status %r", order_id, raw)
    return status


def _decode_timestamp(order_id: Any, name: str, raw: Any) -> datetime | None:
    try:
        return parse_iso_datetime(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Order %s: invalid %s %r (%s)", order_id, name, raw, exc)
        return None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _build_canonical(data: Mapping[str, Any], *, amount: Any, from_text: bool) -> CanonicalOrder:
    order_id = data.get("id")
    order = CanonicalOrder(
        id=_optional_str(order_id),
        retailer_id=_optional_str(data.get("retailer_id")),
        location_id=_optional_str(data.get("location_id")),
        customer_id=_optional_str(data.get("customer_id")),
        status=_decode_status(order_id, data.get("status")),
        total_amount=_decode_total(order_id, amount),
        items=_decode_field(order_id, "items", data.get("items"), list, lambda v: _decode_items(v, order_id), from_text=from_text),
        shipping_address=_decode_field(order_id, "shipping_address", data.get("shipping_address"), lambda: None, Address.from_value, from_text=from_text),
        billing_address=_decode_field(order_id, "billing_address", data.get("billing_address"), lambda: None, Address.from_value, from_text=from_text),
        metadata=_decode_field(order_id, "metadata", data.get("metadata"), dict, lambda v: _decode_metadata(v, order_id), from_text=from_text),
        created_by=_optional_str(data.get("created_by")),
        created_at=_decode_timestamp(order_id, "created_at", data.get("created_at")),
        updated_at=_decode_timestamp(order_id, "updated_at", data.get("updated_at")),
        signature_url=_optional_str(data.get("signature_url")),
        id_photo_url=_optional_str(data.get("id_photo_url")),
        contract_url=_optional_str(data.get("contract_url")),
        requires_ltl=bool(data.get("requires_ltl") or False),
    )

    for issue in data_quality_issues(order):
        logger.warning("Order %s: %s", order_id, issue)
    return order


def from_persisted(record) -> CanonicalOrder:
    """
    Convert a stored order (raw mapping, CurrentOrderRecord or LegacyOrderRecord)
    into a new CanonicalOrder. Never raises for bad field contents.
    """
    tagged = classify_record(record)

    if isinstance(tagged, CurrentOrderRecord):
        return _build_canonical(tagged.to_row(), amount=tagged.total_amount, from_text=True)

    document = tagged.document
    amount = document.get("total_amount")
    if amount is None:
        amount = document.get("totalAmount")
    # Legacy documents may still hold individual blobs as text; decode those per field.
    normalized = dict(document)
    for name in _BLOB_FIELDS:
        value = normalized.get(name)
        if isinstance(value, str):
            if name in ("shipping_address", "billing_address"):
                normalized[name] = _decode_legacy_address_text(document.get("id"), name, value)
            else:
                normalized[name] = _decode_field(
                    document.get("id"), name, value,
                    list if name == "items" else dict,
                    lambda v: v,
                    from_text=True,
                )
    return _build_canonical(normalized, amount=amount, from_text=False)


def _decode_legacy_address_text(order_id: Any, name: str, value: str) -> Any:
    # Legacy documents store either JSON text or a free-form address line.
    try:
        return _decode_json(value)
    except RecursionError:
        logger.warning("Order %s: %s is nested too deeply to decode", order_id, name)
        return None
    except ValueError:
        logger.debug("Order %s: %s is free-form text", order_id, name)
        return value


# =============================================================================
# ENCODING (canonical -> persisted)
# =============================================================================


def _json_default(value: Any):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return to_utc_z(value, keep_microseconds=True)
    if isinstance(value, (LineItem, Address)):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode(value: Any) -> str:
    return json.dumps(value, default=_json_default, separators=(",", ":"))


def new_order_id() -> str:
    """
    Time-based id with a random suffix. Uniqueness is probabilistic; the
    orders primary key rejects the rare collision.
    """
    return f"order-{int(time.time() * 1000)}-{secrets.token_hex(6)}"


def to_persisted(
    order,
    actor_id: str,
    *,
    default_retailer_id: str = PLACEHOLDER_RETAILER_ID,
    now: datetime | None = None,
) -> CurrentOrderRecord:
    """
    Convert a (possibly partial) canonical order into the stored row shape.

    Gaps are filled, never rejected: missing id, retailer, status, creator and
    created_at get defaults; updated_at is always stamped with now.
    """
    if not isinstance(order, CanonicalOrder):
        order = coerce_order(order if isinstance(order, Mapping) else {})

    stamp = now or utcnow()
    items = []
    for item in order.items:
        try:
            items.append(LineItem.from_value(item).to_dict())
        except ValueError as exc:
            logger.warning("Order %s: dropping line item on write: %s", order.id, exc)

    total = order.total_amount if order.total_amount is not None else Decimal("0")

    return CurrentOrderRecord(
        id=order.id or new_order_id(),
        retailer_id=order.retailer_id or default_retailer_id,
        location_id=order.location_id or None,
        customer_id=order.customer_id or None,
        status=(order.status or OrderStatus.PENDING).value,
        total_amount=total,
        signature_url=order.signature_url or None,
        id_photo_url=order.id_photo_url or None,
        contract_url=order.contract_url or None,
        requires_ltl=bool(order.requires_ltl),
        items=_encode(items),
        shipping_address=_encode(order.shipping_address.to_dict()) if order.shipping_address else None,
        billing_address=_encode(order.billing_address.to_dict()) if order.billing_address else None,
        metadata=_encode(order.metadata or {}),
        created_by=order.created_by or actor_id,
        created_at=to_utc_z(order.created_at or stamp, keep_microseconds=True),
        updated_at=to_utc_z(stamp, keep_microseconds=True),
    )


# =============================================================================
# VALIDATION AND DEFAULTS
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def validate(order) -> ValidationResult:
    """
    Report every missing required field. Does not block anything; callers
    decide whether to refuse a save.
    """
    if isinstance(order, CanonicalOrder):
        data: Mapping[str, Any] = {
            "id": order.id,
            "status": order.status,
            "total_amount": order.total_amount,
            "created_by": order.created_by,
        }
    elif isinstance(order, Mapping):
        data = order
    else:
        data = {}

    errors = []
    if not data.get("id"):
        errors.append("Order ID is required")
    if not data.get("status"):
        errors.append("Order status is required")
    if not _is_number(data.get("total_amount")) and not _is_number(data.get("totalAmount")):
        errors.append("Order total amount is required")
    if not data.get("created_by"):
        errors.append("Order creator ID is required")

    return ValidationResult(valid=not errors, errors=errors)


def data_quality_issues(order: CanonicalOrder) -> list[str]:
    """Non-fatal problems worth flagging on a canonical order."""
    issues = []
    if order.total_amount is not None and not order.total_overridden and order.items:
        if order.total_amount != order.line_total:
            issues.append(
                f"total_amount {order.total_amount} does not match line items total {order.line_total}"
            )
    return issues


_SCALAR_FIELDS = (
    "id",
    "retailer_id",
    "location_id",
    "customer_id",
    "created_by",
    "signature_url",
    "id_photo_url",
    "contract_url",
)


def _overlay(order: CanonicalOrder, partial: Mapping[str, Any]) -> CanonicalOrder:
    """Apply caller-supplied fields on top of an order, coercing to canonical types."""
    for name in _SCALAR_FIELDS:
        if name in partial:
            setattr(order, name, _optional_str(partial[name]))

    if "status" in partial:
        order.status = parse_status(partial["status"])

    amount = partial.get("total_amount", _MISSING)
    if amount is _MISSING or amount is None:
        amount = partial.get("totalAmount", _MISSING)
    if amount is not _MISSING and amount is not None:
        order.total_amount = to_decimal(amount, field_name="total_amount")

    if "items" in partial:
        order.items = [LineItem.from_value(item) for item in (partial["items"] or [])]
    if "shipping_address" in partial:
        order.shipping_address = Address.from_value(partial["shipping_address"])
    if "billing_address" in partial:
        order.billing_address = Address.from_value(partial["billing_address"])
    if "metadata" in partial:
        metadata = partial["metadata"] or {}
        if not isinstance(metadata, Mapping):
            raise ValueError("metadata must be an object")
        order.metadata = dict(metadata)
    if "requires_ltl" in partial:
        order.requires_ltl = bool(partial["requires_ltl"])
    for name in ("created_at", "updated_at"):
        if name in partial:
            try:
                setattr(order, name, parse_iso_datetime(partial[name]))
            except TypeError as exc:
                raise ValueError(f"{name}: {exc}")
    return order


def coerce_order(data: Mapping[str, Any]) -> CanonicalOrder:
    """Build a CanonicalOrder from caller-supplied fields without injecting defaults."""
    return _overlay(CanonicalOrder(), data)


def apply_patch(order: CanonicalOrder, patch: Mapping[str, Any]) -> CanonicalOrder:
    """Return a copy of order with the patch applied. Raises ValueError on bad input."""
    return _overlay(copy.deepcopy(order), patch)


def with_defaults(partial: Mapping[str, Any] | None, actor_id: str) -> CanonicalOrder:
    """
    New draft order: generated id, pending status, zero total, no items,
    creator actor_id, then whatever the caller supplied on top.

    Raises ValueError when a supplied field cannot be coerced.
    """
    stamp = utcnow()
    order = CanonicalOrder(
        id=new_order_id(),
        status=OrderStatus.PENDING,
        total_amount=Decimal("0"),
        items=[],
        metadata={},
        created_by=actor_id,
        created_at=stamp,
        updated_at=stamp,
    )
    return _overlay(order, partial or {})
