# Overview: Canonical in-memory order view model shared by services and routes.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping

from .time_utils import to_utc_z


class OrderStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    COMPLETED = "completed"


ORDER_STATUSES = tuple(status.value for status in OrderStatus)


def parse_status(value: Any) -> OrderStatus | None:
    """Return the OrderStatus for a raw value, or None when it is not a known status."""
    if isinstance(value, OrderStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return OrderStatus(value.strip().lower())
    except ValueError:
        return None


def to_decimal(value: Any, *, field_name: str = "amount") -> Decimal:
    """
    Coerce a numeric value to a non-negative Decimal.

    Floats go through str() so 999.99 stays 999.99 instead of its binary expansion.
    Raises ValueError for booleans, non-numeric strings, NaN/inf and negatives.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"{field_name} must be a number")
    else:
        raise ValueError(f"{field_name} must be a number")

    if not amount.is_finite():
        raise ValueError(f"{field_name} must be a finite number")
    if amount < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return amount


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class LineItem:
    product_variant_id: str
    quantity: int
    unit_price: Decimal
    name: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_value(cls, value: Any) -> "LineItem":
        """
        Build a line item from a decoded row.

        Accepts the current keys (product_variant_id, quantity, unit_price) and
        the legacy ones (variant_id/product, qty, price).
        """
        if isinstance(value, LineItem):
            return value
        if not isinstance(value, Mapping):
            raise ValueError("line item must be an object")

        variant = _first_present(value, "product_variant_id", "variant_id", "product")
        if variant is None or str(variant).strip() == "":
            raise ValueError("line item product_variant_id is required")

        raw_qty = _first_present(value, "quantity", "qty")
        if isinstance(raw_qty, bool) or raw_qty is None:
            raise ValueError("line item quantity is required")
        try:
            quantity = int(raw_qty)
        except (TypeError, ValueError, OverflowError):
            raise ValueError("line item quantity must be an integer")
        if quantity != raw_qty and not (isinstance(raw_qty, str) and raw_qty.strip().isdigit()):
            raise ValueError("line item quantity must be an integer")
        if quantity < 1:
            raise ValueError("line item quantity must be >= 1")

        unit_price = to_decimal(_first_present(value, "unit_price", "price"), field_name="unit_price")

        name = value.get("name")
        return cls(
            product_variant_id=str(variant),
            quantity=quantity,
            unit_price=unit_price,
            name=str(name) if name is not None else None,
        )

    def to_dict(self) -> dict:
        data = {
            "product_variant_id": self.product_variant_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }
        if self.name is not None:
            data["name"] = self.name
        return data


_ADDRESS_ALIASES = {
    "name": ("name", "recipient"),
    "line1": ("line1", "address1", "street", "address_line1"),
    "line2": ("line2", "address2", "address_line2"),
    "city": ("city",),
    "state": ("state", "province", "region"),
    "postal_code": ("postal_code", "zip", "zip_code", "postcode"),
    "country": ("country",),
}


@dataclass(frozen=True)
class Address:
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    name: str | None = None

    @classmethod
    def from_value(cls, value: Any) -> "Address | None":
        """
        Build an address from a decoded value.

        Older rows stored the whole address as one opaque string; that string
        becomes line1. Empty values map to None.
        """
        if value is None or isinstance(value, Address):
            return value
        if isinstance(value, str):
            text = value.strip()
            return cls(line1=text) if text else None
        if not isinstance(value, Mapping):
            raise ValueError("address must be an object or a string")

        fields: dict[str, str | None] = {}
        for attr, keys in _ADDRESS_ALIASES.items():
            raw = _first_present(value, *keys)
            fields[attr] = str(raw) if raw is not None else None
        if not any(fields.values()):
            return None
        return cls(**fields)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }


@dataclass
class CanonicalOrder:
    """
    Application-level order. Instances are never shared between callers:
    every transform produces a fresh object.
    """

    id: str | None = None
    retailer_id: str | None = None
    location_id: str | None = None
    customer_id: str | None = None
    status: OrderStatus | None = None
    total_amount: Decimal | None = None
    items: list[LineItem] = field(default_factory=list)
    shipping_address: Address | None = None
    billing_address: Address | None = None
    metadata: dict = field(default_factory=dict)
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    signature_url: str | None = None
    id_photo_url: str | None = None
    contract_url: str | None = None
    requires_ltl: bool = False

    @property
    def line_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def total_overridden(self) -> bool:
        return bool(self.metadata.get("total_override"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "retailer_id": self.retailer_id,
            "location_id": self.location_id,
            "customer_id": self.customer_id,
            "status": self.status.value if self.status else None,
            "total_amount": self.total_amount,
            "line_total": self.line_total,
            "items": [item.to_dict() for item in self.items],
            "shipping_address": self.shipping_address.to_dict() if self.shipping_address else None,
            "billing_address": self.billing_address.to_dict() if self.billing_address else None,
            "metadata": dict(self.metadata),
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "signature_url": self.signature_url,
            "id_photo_url": self.id_photo_url,
            "contract_url": self.contract_url,
            "requires_ltl": self.requires_ltl,
        }


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str]

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}
