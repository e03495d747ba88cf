# lokal/model/receipt.py
import uuid
from datetime import datetime
from ..extensions import db


def _new_id():
    return str(uuid.uuid4())


class Receipt(db.Model):
    __tablename__ = "receipts"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)

    # ownership
    user_id = db.Column(db.String(128), nullable=False, index=True)
    buyer_id = db.Column(db.String(128), index=True)
    is_buyer_copy = db.Column(db.Boolean, nullable=False, default=False)
    original_receipt_id = db.Column(db.String(36), index=True)  # not a FK constraint

    # commerce snapshot, opaque to the buyer copy logic
    store_id = db.Column(db.String(128), index=True)
    store_name = db.Column(db.String(255))
    order_id = db.Column(db.String(128))
    payment_intent_id = db.Column(db.String(255))
    amount = db.Column(db.Numeric(12, 2))
    currency = db.Column(db.String(3))
    payment_method = db.Column(db.String(32))
    items = db.Column(db.JSON)
    extra = db.Column(db.JSON)  # any other fields the client sent

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # column -> API name
    API_NAMES = {
        "id": "id",
        "user_id": "userId",
        "buyer_id": "buyerId",
        "is_buyer_copy": "isBuyerCopy",
        "original_receipt_id": "originalReceiptId",
        "store_id": "storeId",
        "store_name": "storeName",
        "order_id": "orderId",
        "payment_intent_id": "paymentIntentId",
        "amount": "amount",
        "currency": "currency",
        "payment_method": "paymentMethod",
        "items": "items",
        "created_at": "createdAt",
        "timestamp": "timestamp",
    }

    def as_dict(self):
        """Plain column snapshot keyed by column name."""
        return {c.key: getattr(self, c.key) for c in self.__table__.columns}

    def as_api(self):
        out = dict(self.extra or {})
        for col, name in self.API_NAMES.items():
            out[name] = getattr(self, col)
        out["amount"] = float(self.amount) if self.amount is not None else None
        out["isBuyerCopy"] = bool(self.is_buyer_copy)
        out["createdAt"] = self.created_at.isoformat() if self.created_at else None
        out["timestamp"] = self.timestamp.isoformat() if self.timestamp else None
        return out

    def __repr__(self):
        return f"<Receipt {self.id} user={self.user_id} buyer={self.buyer_id} copy={self.is_buyer_copy}>"
