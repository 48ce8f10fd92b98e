from __future__ import annotations

from ..extensions import db
from ..services.order_transform_service import CurrentOrderRecord


class Order(db.Model):
    """
    Persisted order in the current row shape.

    items, addresses and metadata are JSON text; only the order transform
    service reads or writes them. Timestamps are ISO-8601 Z strings so a row
    maps one-to-one onto CurrentOrderRecord.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_retailer_status", "retailer_id", "status"),
        db.Index("ix_orders_location_id", "location_id"),
    )

    id = db.Column(db.String(64), primary_key=True)
    retailer_id = db.Column(db.String(36), nullable=False)
    location_id = db.Column(db.String(36), nullable=True)
    customer_id = db.Column(db.String(36), nullable=True)

    status = db.Column(db.String(32), nullable=False, default="pending")
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    items = db.Column(db.Text, nullable=False, default="[]")
    shipping_address = db.Column(db.Text, nullable=True)
    billing_address = db.Column(db.Text, nullable=True)
    metadata_json = db.Column("metadata", db.Text, nullable=False, default="{}")

    signature_url = db.Column(db.Text, nullable=True)
    id_photo_url = db.Column(db.Text, nullable=True)
    contract_url = db.Column(db.Text, nullable=True)
    requires_ltl = db.Column(db.Boolean, nullable=False, default=False)

    created_by = db.Column(db.String(36), nullable=False)
    created_at = db.Column(db.String(40), nullable=False, index=True)
    updated_at = db.Column(db.String(40), nullable=False)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} retailer_id={self.retailer_id} status={self.status}>"

    def to_record(self) -> CurrentOrderRecord:
        return CurrentOrderRecord(
            id=self.id,
            retailer_id=self.retailer_id,
            location_id=self.location_id,
            customer_id=self.customer_id,
            status=self.status,
            total_amount=self.total_amount,
            items=self.items,
            shipping_address=self.shipping_address,
            billing_address=self.billing_address,
            metadata=self.metadata_json,
            signature_url=self.signature_url,
            id_photo_url=self.id_photo_url,
            contract_url=self.contract_url,
            requires_ltl=bool(self.requires_ltl),
            created_by=self.created_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_record(self, record: CurrentOrderRecord) -> None:
        """Copy every column from a record; id and created_at are left alone on existing rows."""
        row = record.to_row()
        if self.id is None:
            self.id = row["id"]
        if self.created_at is None:
            self.created_at = row["created_at"]
        for name in (
            "retailer_id", "location_id", "customer_id", "status", "total_amount",
            "items", "shipping_address", "billing_address",
            "signature_url", "id_photo_url", "contract_url", "requires_ltl",
            "created_by", "updated_at",
        ):
            setattr(self, name, row[name])
        self.metadata_json = row["metadata"]

    @classmethod
    def from_record(cls, record: CurrentOrderRecord) -> "Order":
        order = cls()
        order.apply_record(record)
        return order
