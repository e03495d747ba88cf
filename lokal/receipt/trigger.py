"""Buyer receipt duplication.

When a seller records a receipt that names a buyer, the buyer gets their own
copy so it shows up in their receipts list without being able to read the
seller's record. The copy is marked ``is_buyer_copy`` which stops it from
being copied again when its own insert event comes through.
"""
import logging
from datetime import datetime

from ..model import Receipt

logger = logging.getLogger(__name__)

# Never inherited from the source record.
OVERRIDDEN_FIELDS = ("id", "user_id", "is_buyer_copy", "original_receipt_id", "created_at", "timestamp")


def should_duplicate(record) -> bool:
    if not record:
        return False
    buyer_id = record.get("buyer_id")
    if not buyer_id:
        return False
    if record.get("user_id") == buyer_id:
        return False
    if record.get("is_buyer_copy"):
        return False
    return True


def build_buyer_copy(receipt_id: str, record: dict, now: datetime) -> dict:
    copy = {k: v for k, v in record.items() if k not in OVERRIDDEN_FIELDS}
    copy.update(
        user_id=record["buyer_id"],
        is_buyer_copy=True,
        original_receipt_id=receipt_id,
        # derivation time, so the buyer's list orders by when they got it
        created_at=now,
        timestamp=now,
    )
    return copy


class ReceiptStore:
    """Reads and writes receipts through its own sessions.

    ``session_factory`` is a ``sessionmaker`` (or anything returning a
    context-managed SQLAlchemy session); it is built once when the app starts
    and handed to the trigger.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get(self, receipt_id):
        with self.session_factory() as session:
            r = session.get(Receipt, receipt_id)
            return r.as_dict() if r else None

    def add(self, fields: dict) -> str:
        with self.session_factory() as session:
            r = Receipt(**fields)
            session.add(r)
            try:
                session.flush()
                rid = r.id
                session.commit()
            except Exception:
                session.rollback()
                raise
            return rid


class BuyerReceiptTrigger:
    """Called once per inserted receipt with its id and column values.

    Returns the id of the buyer copy it created, or None. It never raises:
    the source receipt is already stored and a failure here must not undo
    or retry that write.
    """

    def __init__(self, store, clock=datetime.utcnow):
        self.store = store
        self.clock = clock

    def __call__(self, receipt_id, record):
        try:
            if not should_duplicate(record):
                logger.info(
                    "Skipping buyer receipt for %s: already for buyer or missing buyer info", receipt_id
                )
                return None

            logger.info("Processing receipt %s for buyer %s", receipt_id, record["buyer_id"])
            copy_id = self.store.add(build_buyer_copy(receipt_id, record, self.clock()))
            logger.info("Created buyer copy %s of receipt %s for user %s", copy_id, receipt_id, record["buyer_id"])
            return copy_id
        except Exception:
            logger.exception("Error creating buyer copy of receipt %s", receipt_id)
            return None

    def process(self, receipt_id):
        """Run the trigger against a stored receipt (manual replay)."""
        try:
            record = self.store.get(receipt_id)
        except Exception:
            logger.exception("Error loading receipt %s", receipt_id)
            return None
        if record is None:
            logger.warning("Receipt %s not found", receipt_id)
            return None
        return self(receipt_id, record)
