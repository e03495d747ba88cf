"""Insert events for the ``receipts`` table.

Every committed ``Receipt`` insert is published to the app's ``ReceiptFeed``;
subscribers (the buyer copy trigger) receive ``(receipt_id, record)`` where
``record`` is the row as it was inserted. Inserts that are rolled back are
never published. Delivery is at-least-once from the subscriber's point of
view: replaying an event will run the trigger again.
"""
import logging
import threading
from collections import deque, namedtuple

from flask import current_app, has_app_context
from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, object_session, sessionmaker

from ..extensions import db
from ..model import Receipt
from .trigger import BuyerReceiptTrigger, ReceiptStore

logger = logging.getLogger(__name__)

ReceiptEvent = namedtuple("ReceiptEvent", ["receipt_id", "record"])

# an event waiting for its transaction to commit; `savepoint` is the
# innermost nested transaction it was flushed in, if any
_Pending = namedtuple("_Pending", ["event", "savepoint"])

_PENDING_KEY = "lokal.receipt_events"
_FEED_KEY = "lokal.receipt_feed"


class ReceiptFeed:
    def __init__(self):
        self._queue = deque()
        self._subscribers = []
        self._lock = threading.Lock()

    def subscribe(self, handler):
        self._subscribers.append(handler)
        return handler

    def publish(self, evt: ReceiptEvent):
        with self._lock:
            self._queue.append(evt)

    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    def drain(self) -> int:
        """Deliver queued events in order until none are left.

        Events published by subscribers while draining are delivered in the
        same call.
        """
        delivered = 0
        while True:
            with self._lock:
                if not self._queue:
                    break
                evt = self._queue.popleft()
            for handler in list(self._subscribers):
                try:
                    handler(evt.receipt_id, evt.record)
                except Exception:
                    logger.exception("Receipt subscriber %r failed on %s", handler, evt.receipt_id)
            delivered += 1
        return delivered


def get_feed(app=None) -> ReceiptFeed:
    app = app or current_app
    return app.extensions["receipt_feed"]


def get_trigger(app=None) -> BuyerReceiptTrigger:
    app = app or current_app
    return app.extensions["receipt_trigger"]


# ---------- SQLAlchemy hooks ----------

@event.listens_for(Receipt, "after_insert")
def _record_insert(mapper, connection, target):
    session = object_session(target)
    if session is None:
        return
    # read loaded values only; lazy loads are not allowed mid-flush
    loaded = inspect(target).dict
    record = {c.key: loaded.get(c.key) for c in mapper.columns}
    pending = _Pending(ReceiptEvent(target.id, record), session.get_nested_transaction())
    session.info.setdefault(_PENDING_KEY, []).append(pending)


@event.listens_for(Session, "after_commit")
def _publish_committed(session):
    pending = session.info.pop(_PENDING_KEY, None)
    if not pending:
        return
    feed = session.info.get(_FEED_KEY)
    if feed is None and has_app_context():
        feed = current_app.extensions.get("receipt_feed")
    if feed is None:
        logger.warning("Dropping %d receipt event(s): no receipt feed in this context", len(pending))
        return
    for p in pending:
        feed.publish(p.event)


@event.listens_for(Session, "after_soft_rollback")
def _discard_rolled_back(session, previous_transaction):
    if not previous_transaction.nested:
        session.info.pop(_PENDING_KEY, None)
        return
    # a savepoint rolled back: drop only what was flushed inside it
    pending = session.info.get(_PENDING_KEY)
    if pending:
        session.info[_PENDING_KEY] = [
            p for p in pending if not _inside(p.savepoint, previous_transaction)
        ]


def _inside(transaction, savepoint):
    while transaction is not None:
        if transaction is savepoint:
            return True
        transaction = transaction.parent
    return False


def init_app(app):
    feed = ReceiptFeed()
    with app.app_context():
        store = ReceiptStore(sessionmaker(bind=db.engine, info={_FEED_KEY: feed}))
    trigger = BuyerReceiptTrigger(store)
    feed.subscribe(trigger)

    app.extensions["receipt_feed"] = feed
    app.extensions["receipt_trigger"] = trigger

    if app.config.get("RECEIPT_TRIGGER_INLINE", True):
        @app.after_request
        def _deliver_receipt_events(response):
            feed.drain()
            return response

    return feed
