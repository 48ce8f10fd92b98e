from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Location, Retailer
from ..validation import ConflictError
from .access_service import Actor, can_access_location, can_access_retailer, require_capability
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


class RetailerError(Exception):
    """Raised when retailer or location operations fail."""
    pass


class RetailerNotFoundError(RetailerError):
    pass


def list_retailers(actor: Actor) -> list[Retailer]:
    require_capability(actor, "can_see_retailers")
    retailers = db.session.query(Retailer).order_by(Retailer.name.asc()).all()
    return [retailer for retailer in retailers if can_access_retailer(actor, retailer.id)]


def get_retailer(actor: Actor, retailer_id: str) -> Retailer:
    retailer = db.session.get(Retailer, retailer_id)
    if not retailer or not can_access_retailer(actor, retailer.id):
        raise RetailerNotFoundError("Retailer not found")
    return retailer


def create_retailer(actor: Actor, name: str | None, website: str | None = None) -> Retailer:
    require_capability(actor, "can_manage_retailers")

    def _op():
        if not name:
            raise RetailerError("Retailer name is required")
        if db.session.query(Retailer).filter_by(name=name).first():
            raise ConflictError("Retailer name already exists")

        retailer = Retailer(name=name, website=website)
        db.session.add(retailer)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Retailer name already exists")
        return retailer

    retailer = run_with_retry(_op)
    logger.info("Retailer %s (%s) created by %s", retailer.id, retailer.name, actor.id)
    return retailer


def list_locations(actor: Actor, retailer_id: str) -> list[Location]:
    """
    Locations of a retailer visible to the actor.

    Location users only see their own location, and only under their own retailer.
    """
    retailer = db.session.get(Retailer, retailer_id)
    if not retailer:
        raise RetailerNotFoundError("Retailer not found")

    if not can_access_retailer(actor, retailer_id):
        if actor.retailer_id != retailer_id:
            raise RetailerNotFoundError("Retailer not found")

    locations = (
        db.session.query(Location)
        .filter_by(retailer_id=retailer_id)
        .order_by(Location.name.asc())
        .all()
    )
    return [location for location in locations if can_access_location(actor, location.id)]


def create_location(
    actor: Actor,
    retailer_id: str,
    *,
    name: str | None,
    address: Any = None,
    phone: str | None = None,
    timezone: str | None = None,
) -> Location:
    require_capability(actor, "can_manage_retailers")

    def _op():
        retailer = db.session.get(Retailer, retailer_id)
        if not retailer or not can_access_retailer(actor, retailer_id):
            raise RetailerNotFoundError("Retailer not found")
        if not name:
            raise RetailerError("Location name is required")
        if db.session.query(Location).filter_by(retailer_id=retailer_id, name=name).first():
            raise ConflictError("Location name already exists for this retailer")

        location = Location(
            retailer_id=retailer_id,
            name=name,
            address=json.dumps(address) if isinstance(address, dict) else address,
            phone=phone,
            timezone=timezone or "UTC",
        )
        db.session.add(location)
        db.session.commit()
        return location

    location = run_with_retry(_op)
    logger.info("Location %s (%s) created under retailer %s", location.id, location.name, retailer_id)
    return location
