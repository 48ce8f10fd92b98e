from __future__ import annotations

import json

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .tenancy import new_uuid


class Customer(db.Model):
    """
    End customer of a retailer.

    MULTI-TENANT: every customer belongs to one retailer. primary_location_id
    narrows visibility for location users; customers without one are visible
    retailer-wide only.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_retailer_name", "retailer_id", "name"),
        db.Index("ix_customers_email", "email"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    retailer_id = db.Column(db.String(36), db.ForeignKey("retailers.id"), nullable=False, index=True)
    primary_location_id = db.Column(db.String(36), db.ForeignKey("locations.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    default_address = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.String(36), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    retailer = db.relationship("Retailer", backref=db.backref("customers", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r} retailer_id={self.retailer_id}>"

    def to_dict(self) -> dict:
        try:
            address = json.loads(self.default_address) if self.default_address else None
        except ValueError:
            address = None
        return {
            "id": self.id,
            "retailer_id": self.retailer_id,
            "primary_location_id": self.primary_location_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "default_address": address,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
