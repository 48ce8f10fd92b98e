# Overview: Service-layer operations for customers; scoped reads and writes.

"""
Customer Service

Customers belong to one retailer and optionally to a primary location.
Visibility follows the order rules:
- owner, backoffice: every customer
- retailer: customers of actor.retailer_id
- location_user: customers whose primary location is actor.location_id

Out-of-scope customers are reported as not found.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from ..extensions import db
from ..models import Customer, Location, Retailer
from ..permissions import Role, UNBOUNDED_ROLES
from ..validation import ConflictError, ValidationError, clean_str
from ..view_models import Address
from .access_service import AccessDeniedError, Actor, can_access_customer, coerce_role, require_capability
from .concurrency import lock_for_update, run_with_retry

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "email", "phone", "default_address", "notes", "primary_location_id")


class CustomerError(Exception):
    """Raised when customer operations fail."""
    pass


class CustomerNotFoundError(CustomerError):
    pass


def _scoped_query(actor: Actor):
    query = db.session.query(Customer)
    role = coerce_role(actor.role)
    if role in UNBOUNDED_ROLES:
        return query
    if role is Role.RETAILER and actor.retailer_id:
        return query.filter(Customer.retailer_id == actor.retailer_id)
    if role is Role.LOCATION_USER and actor.location_id:
        return query.filter(Customer.primary_location_id == actor.location_id)
    return None


def _visible(actor: Actor, customer: Customer | None) -> bool:
    return customer is not None and can_access_customer(actor, customer.retailer_id, customer.primary_location_id)


def list_customers(actor: Actor, search: str | None = None, limit: int | None = None) -> list[Customer]:
    """Customers visible to the actor, by name. search matches name, email or phone."""
    require_capability(actor, "can_see_customers")

    query = _scoped_query(actor)
    if query is None:
        return []

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(db.or_(
            Customer.name.ilike(pattern),
            Customer.email.ilike(pattern),
            Customer.phone.ilike(pattern),
        ))

    query = query.order_by(Customer.name.asc(), Customer.id.asc())
    if limit is not None:
        query = query.limit(limit)
    return [customer for customer in query.all() if _visible(actor, customer)]


def get_customer(actor: Actor, customer_id: str) -> Customer:
    require_capability(actor, "can_see_customers")
    customer = db.session.get(Customer, customer_id)
    if not _visible(actor, customer):
        raise CustomerNotFoundError("Customer not found")
    return customer


def resolve_order_customer(actor: Actor, customer_id: str, retailer_id: str | None) -> Customer:
    """
    Customer referenced by an order the actor is writing.

    Raises ValidationError when the customer is missing, outside the actor's
    scope, or belongs to a different retailer than the order.
    """
    customer = db.session.get(Customer, customer_id)
    if not _visible(actor, customer):
        raise ValidationError("Customer not found")
    if retailer_id and customer.retailer_id != retailer_id:
        raise ValidationError("Customer does not belong to this retailer")
    return customer


def _clean_email(value: Any) -> str | None:
    email = clean_str(value, field="email", max_length=255)
    if email is None:
        return None
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("email is not a valid address")
    return email.lower()


def _clean_address(value: Any) -> str | None:
    try:
        address = Address.from_value(value)
    except ValueError as exc:
        raise ValidationError(f"default_address: {exc}")
    return json.dumps(address.to_dict()) if address else None


def _clean_fields(data: Mapping[str, Any]) -> dict:
    cleaned = {}
    if "name" in data:
        cleaned["name"] = clean_str(data.get("name"), field="name", required=True, max_length=255)
    if "email" in data:
        cleaned["email"] = _clean_email(data.get("email"))
    if "phone" in data:
        cleaned["phone"] = clean_str(data.get("phone"), field="phone", max_length=32)
    if "default_address" in data:
        cleaned["default_address"] = _clean_address(data.get("default_address"))
    if "notes" in data:
        cleaned["notes"] = clean_str(data.get("notes"), field="notes")
    if "primary_location_id" in data:
        cleaned["primary_location_id"] = clean_str(data.get("primary_location_id"), field="primary_location_id")
    return cleaned


def _resolve_scope(actor: Actor, retailer_id: str | None, location_id: str | None) -> tuple[str, str | None]:
    """Pin a customer to the actor's retailer/location; reject attempts to leave it."""
    role = coerce_role(actor.role)

    if role is Role.RETAILER:
        if retailer_id and retailer_id != actor.retailer_id:
            raise AccessDeniedError("Cannot manage customers of another retailer")
        retailer_id = actor.retailer_id
    elif role is Role.LOCATION_USER:
        if location_id and location_id != actor.location_id:
            raise AccessDeniedError("Cannot manage customers of another location")
        if retailer_id and retailer_id != actor.retailer_id:
            raise AccessDeniedError("Cannot manage customers of another retailer")
        retailer_id, location_id = actor.retailer_id, actor.location_id

    if location_id:
        location = db.session.get(Location, location_id)
        if not location:
            raise ValidationError("Location not found")
        if retailer_id and retailer_id != location.retailer_id:
            raise ValidationError("Location does not belong to this retailer")
        retailer_id = location.retailer_id

    if not retailer_id:
        raise ValidationError("retailer_id is required")
    if not db.session.get(Retailer, retailer_id):
        raise ValidationError("Retailer not found")
    return retailer_id, location_id


def _check_duplicate_email(retailer_id: str, email: str | None, exclude_id: str | None = None) -> None:
    if not email:
        return
    query = db.session.query(Customer).filter_by(retailer_id=retailer_id, email=email)
    if exclude_id:
        query = query.filter(Customer.id != exclude_id)
    if query.first():
        raise ConflictError("A customer with this email already exists for this retailer")


def create_customer(actor: Actor, payload: Mapping[str, Any] | None) -> Customer:
    require_capability(actor, "can_edit_customers")

    data = dict(payload or {})
    if "name" not in data:
        raise ValidationError("name is required")
    fields = _clean_fields(data)
    retailer_id, location_id = _resolve_scope(
        actor,
        clean_str(data.get("retailer_id"), field="retailer_id"),
        fields.pop("primary_location_id", None),
    )
    _check_duplicate_email(retailer_id, fields.get("email"))

    customer = Customer(
        retailer_id=retailer_id,
        primary_location_id=location_id,
        created_by=actor.id,
        **fields,
    )
    db.session.add(customer)
    db.session.commit()
    logger.info("Customer %s created by %s for retailer %s", customer.id, actor.id, retailer_id)
    return customer


def update_customer(actor: Actor, customer_id: str, patch: Mapping[str, Any] | None) -> Customer:
    """Partial update. A customer never changes retailer."""
    require_capability(actor, "can_edit_customers")

    patch = dict(patch or {})
    if "retailer_id" in patch:
        raise ValidationError("retailer_id cannot be changed")
    unknown = sorted(set(patch) - set(_EDITABLE_FIELDS) - {"id"})
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(unknown)}")
    fields = _clean_fields(patch)

    def _op():
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        if not _visible(actor, customer):
            raise CustomerNotFoundError("Customer not found")

        if "primary_location_id" in fields and fields["primary_location_id"] != customer.primary_location_id:
            new_location = fields["primary_location_id"]
            if coerce_role(actor.role) is Role.LOCATION_USER:
                raise AccessDeniedError("Cannot move customers to another location")
            if new_location:
                _resolve_scope(actor, customer.retailer_id, new_location)

        _check_duplicate_email(customer.retailer_id, fields.get("email"), exclude_id=customer.id)

        for name, value in fields.items():
            setattr(customer, name, value)
        db.session.commit()
        return customer

    customer = run_with_retry(_op)
    logger.info("Customer %s updated by %s", customer.id, actor.id)
    return customer
