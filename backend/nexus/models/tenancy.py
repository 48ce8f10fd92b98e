from __future__ import annotations

import json
import uuid

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


def new_uuid() -> str:
    return str(uuid.uuid4())


class Retailer(db.Model):
    """
    Tenant root: every location, retailer-scoped user and order belongs to one retailer.

    Distributor staff (owner, backoffice) sit above retailers and are not
    attached to any of them.
    """
    __tablename__ = "retailers"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(255), nullable=False, unique=True)
    website = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Retailer id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "website": self.website,
            "created_at": to_utc_z(self.created_at),
        }


class Location(db.Model):
    """
    Physical store of a retailer. Location names are unique within a retailer.

    address is stored as JSON text, the same way order addresses are.
    """
    __tablename__ = "locations"
    __table_args__ = (
        db.UniqueConstraint("retailer_id", "name", name="uq_locations_retailer_name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    retailer_id = db.Column(db.String(36), db.ForeignKey("retailers.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.Text, nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    timezone = db.Column(db.String(64), nullable=False, default="UTC")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    retailer = db.relationship("Retailer", backref=db.backref("locations", lazy=True))

    def __repr__(self) -> str:
        return f"<Location id={self.id} name={self.name!r} retailer_id={self.retailer_id}>"

    def to_dict(self) -> dict:
        try:
            address = json.loads(self.address) if self.address else None
        except ValueError:
            address = self.address
        return {
            "id": self.id,
            "retailer_id": self.retailer_id,
            "name": self.name,
            "address": address,
            "phone": self.phone,
            "timezone": self.timezone,
            "created_at": to_utc_z(self.created_at),
        }
