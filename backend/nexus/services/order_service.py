# Overview: Service-layer operations for orders; scoped reads and writes through the order normalizer.

"""
Order Service

Every read and write is scoped by the Actor:
- owner, backoffice: all orders
- retailer: orders of actor.retailer_id
- location_user: orders of actor.location_id

Out-of-scope orders are reported as not found so their existence is not
leaked. Rows are only ever built and read through order_transform_service.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Location, Order
from ..permissions import Role, UNBOUNDED_ROLES
from ..validation import ValidationError
from ..view_models import CanonicalOrder, parse_status
from . import customer_service
from . import order_transform_service as transforms
from .access_service import AccessDeniedError, Actor, can_access_order, coerce_role, require_capability
from .concurrency import lock_for_update, run_with_retry

logger = logging.getLogger(__name__)

# Set by the server, never by the client
_SERVER_FIELDS = ("created_by", "created_at", "updated_at")


class OrderError(Exception):
    """Raised when order operations fail."""
    pass


class OrderNotFoundError(OrderError):
    pass


class OrderValidationError(OrderError):
    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


def _store():
    return current_app.extensions["order_store"]


def _default_retailer_id() -> str:
    return current_app.config.get("DEFAULT_RETAILER_ID") or transforms.PLACEHOLDER_RETAILER_ID


def _scoped_query(actor: Actor):
    query = db.session.query(Order)
    role = coerce_role(actor.role)
    if role in UNBOUNDED_ROLES:
        return query
    if role is Role.RETAILER and actor.retailer_id:
        return query.filter(Order.retailer_id == actor.retailer_id)
    if role is Role.LOCATION_USER and actor.location_id:
        return query.filter(Order.location_id == actor.location_id)
    return None


def list_orders(actor: Actor, status: str | None = None, limit: int | None = None) -> list[CanonicalOrder]:
    """Orders visible to the actor, newest first."""
    require_capability(actor, "can_see_orders")

    query = _scoped_query(actor)
    if query is None:
        return []

    if status:
        parsed = parse_status(status)
        if parsed is None:
            raise OrderValidationError([f"Unknown order status: {status}"])
        query = query.filter(Order.status == parsed.value)

    query = query.order_by(Order.created_at.desc())
    if limit is not None:
        query = query.limit(limit)

    return [
        transforms.from_persisted(row.to_record())
        for row in query.all()
        if can_access_order(actor, row.retailer_id, row.location_id)
    ]


def get_order(actor: Actor, order_id: str) -> CanonicalOrder:
    require_capability(actor, "can_see_orders")
    row = db.session.get(Order, order_id)
    if not row or not can_access_order(actor, row.retailer_id, row.location_id):
        raise OrderNotFoundError("Order not found")
    return transforms.from_persisted(row.to_record())


def _apply_scope(actor: Actor, order: CanonicalOrder) -> None:
    """Pin the order to the actor's retailer/location; reject attempts to leave it."""
    role = coerce_role(actor.role)

    if role is Role.RETAILER:
        if order.retailer_id and order.retailer_id != actor.retailer_id:
            raise AccessDeniedError("Cannot create orders for another retailer")
        order.retailer_id = actor.retailer_id
    elif role is Role.LOCATION_USER:
        if order.location_id and order.location_id != actor.location_id:
            raise AccessDeniedError("Cannot create orders for another location")
        if order.retailer_id and order.retailer_id != actor.retailer_id:
            raise AccessDeniedError("Cannot create orders for another retailer")
        order.location_id = actor.location_id
        order.retailer_id = actor.retailer_id

    if order.location_id:
        location = db.session.get(Location, order.location_id)
        if not location:
            raise OrderValidationError(["Location not found"])
        if order.retailer_id and order.retailer_id != location.retailer_id:
            raise OrderValidationError(["Location does not belong to this retailer"])
        order.retailer_id = location.retailer_id


def _check_customer(actor: Actor, order: CanonicalOrder) -> None:
    """The referenced customer must be visible to the actor and belong to the order's retailer."""
    if not order.customer_id:
        return
    try:
        customer = customer_service.resolve_order_customer(actor, order.customer_id, order.retailer_id)
    except ValidationError as exc:
        raise OrderValidationError(exc.errors)
    if not order.retailer_id:
        order.retailer_id = customer.retailer_id


def _check_valid(order: CanonicalOrder) -> None:
    result = transforms.validate(order)
    if not result.valid:
        raise OrderValidationError(result.errors)


def create_order(actor: Actor, payload: Mapping[str, Any] | None) -> CanonicalOrder:
    """
    Build a draft from payload, scope it to the actor, validate and persist it.

    The saved order is published to the app's order store.
    """
    require_capability(actor, "can_create_orders")

    data = {k: v for k, v in (payload or {}).items() if k not in _SERVER_FIELDS}
    if data.get("id") is None or (isinstance(data["id"], str) and not data["id"].strip()):
        # Blank ids get a generated one
        data.pop("id", None)
    client_id = data.get("id")
    try:
        order = transforms.with_defaults(data, actor.id)
    except ValueError as exc:
        raise OrderValidationError([str(exc)])

    _apply_scope(actor, order)
    _check_customer(actor, order)
    _check_valid(order)

    if client_id and db.session.get(Order, order.id):
        raise OrderError("Order id already exists")

    for attempt in range(2):
        record = transforms.to_persisted(order, actor.id, default_retailer_id=_default_retailer_id())
        row = Order.from_record(record)
        db.session.add(row)
        try:
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if db.session.get(Order, order.id) is None:
                # Not an id collision
                raise
            if client_id or attempt:
                raise OrderError("Order id already exists")
            # Generated id collided; draw a new one
            logger.warning("Order id %s collided, regenerating", order.id)
            order.id = transforms.new_order_id()

    saved = transforms.from_persisted(row.to_record())
    _store().add(saved)
    logger.info("Order %s created by %s for retailer %s", saved.id, actor.id, saved.retailer_id)
    return saved


def update_order(actor: Actor, order_id: str, patch: Mapping[str, Any] | None) -> CanonicalOrder:
    """Apply a partial update. id and server-stamped fields cannot be changed."""
    require_capability(actor, "can_edit_orders")

    patch = dict(patch or {})
    if "id" in patch and patch["id"] != order_id:
        raise OrderValidationError(["Order ID cannot be changed"])
    for name in ("id",) + _SERVER_FIELDS:
        patch.pop(name, None)

    def _op():
        row = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not row or not can_access_order(actor, row.retailer_id, row.location_id):
            raise OrderNotFoundError("Order not found")

        current = transforms.from_persisted(row.to_record())
        try:
            updated = transforms.apply_patch(current, patch)
        except ValueError as exc:
            raise OrderValidationError([str(exc)])

        if coerce_role(actor.role) not in UNBOUNDED_ROLES:
            if (updated.retailer_id, updated.location_id) != (current.retailer_id, current.location_id):
                raise AccessDeniedError("Cannot move orders outside your scope")
        elif (updated.retailer_id, updated.location_id) != (current.retailer_id, current.location_id):
            _apply_scope(actor, updated)

        if (updated.customer_id, updated.retailer_id) != (current.customer_id, current.retailer_id):
            _check_customer(actor, updated)

        _check_valid(updated)

        row.apply_record(transforms.to_persisted(updated, actor.id, default_retailer_id=_default_retailer_id()))
        db.session.commit()
        return transforms.from_persisted(row.to_record())

    saved = run_with_retry(_op)
    _store().replace(saved)
    logger.info("Order %s updated by %s", saved.id, actor.id)
    return saved


def recent_orders(actor: Actor, limit: int | None = None) -> list[CanonicalOrder]:
    """Orders created in this process (from the order store) that the actor may see."""
    require_capability(actor, "can_see_orders")
    orders = [
        order for order in _store().get()
        if can_access_order(actor, order.retailer_id, order.location_id)
    ]
    return orders[:limit] if limit is not None else orders
