"""Push notification payloads and the deep links they open.

Payload shape (what the messaging service delivers to the web worker)::

    {"notification": {"title": ..., "body": ...},
     "data": {"type": ..., "conversationId": ..., "orderId": ..., "receiptId": ...,
              "storeId": ..., "reviewId": ..., "url": ...}}

Every ``data`` value is a string and absent ids are left out.
"""
import logging
from urllib.parse import quote

from ..extensions import db
from ..model import Notification, NotificationPreference

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://lokalshops.co.uk/"
DEFAULT_TITLE = "Lokal"
DEFAULT_BODY = "You have a new notification"
ICON = "/images/logo192.png"
VIBRATE = [200, 100, 200]
ACTIONS = [
    {"action": "open", "title": "Open"},
    {"action": "close", "title": "Close"},
]

TYPES = ("message", "order", "payment", "review", "store_boost", "other")

# keyword -> data key
ID_KEYS = {
    "conversation_id": "conversationId",
    "order_id": "orderId",
    "receipt_id": "receiptId",
    "store_id": "storeId",
    "review_id": "reviewId",
}

# notification type -> NotificationPreference column that can silence it
PREFERENCE_FOR_TYPE = {
    "message": "message_notifications",
    "order": "order_notifications",
    "payment": "payment_notifications",
    "review": "review_notifications",
}


def build_payload(title, body, type="other", url=None, **ids):
    unknown = set(ids) - set(ID_KEYS)
    if unknown:
        raise TypeError(f"unknown notification ids: {', '.join(sorted(unknown))}")

    data = {"type": type or "other"}
    for kw, key in ID_KEYS.items():
        value = ids.get(kw)
        if value not in (None, ""):
            data[key] = str(value)
    if url:
        data["url"] = str(url)
    return {"notification": {"title": title, "body": body}, "data": data}


def _join(base_url, path):
    return base_url.rstrip("/") + path


def resolve_url(data, base_url=DEFAULT_BASE_URL):
    """Deep link opened when a notification is clicked."""
    if not data:
        return base_url

    kind = data.get("type")
    if kind == "message":
        cid = data.get("conversationId")
        return _join(base_url, "/messages" + (f"?id={quote(cid)}" if cid else ""))
    if kind == "order":
        oid = data.get("orderId")
        return _join(base_url, "/receipts" + (f"?id={quote(oid)}" if oid else ""))
    if kind == "payment":
        rid = data.get("receiptId")
        return _join(base_url, "/receipts" + (f"?id={quote(rid)}" if rid else ""))
    if kind == "review":
        store_id = data.get("storeId")
        if not store_id:
            return base_url
        review_id = data.get("reviewId")
        return _join(base_url, f"/store/{quote(store_id)}" + (f"#review-{review_id}" if review_id else ""))
    if kind == "store_boost":
        return _join(base_url, "/store-profile")
    return data.get("url") or base_url


def render(payload):
    """Title and options for showing a payload as a platform notification."""
    payload = payload or {}
    notification = payload.get("notification") or {}
    data = payload.get("data") or {}
    options = {
        "body": notification.get("body") or DEFAULT_BODY,
        "icon": ICON,
        "badge": ICON,
        "tag": data.get("type") or "default",
        "data": data,
        "requireInteraction": False,
        "vibrate": list(VIBRATE),
        "actions": [dict(a) for a in ACTIONS],
    }
    return notification.get("title") or DEFAULT_TITLE, options


def is_enabled(user_id, type) -> bool:
    column = PREFERENCE_FOR_TYPE.get(type)
    if column is None:
        return True
    prefs = db.session.get(NotificationPreference, user_id)
    if prefs is None:
        return True
    return getattr(prefs, column) is not False


def notify(user_id, payload, base_url=DEFAULT_BASE_URL):
    """Store a notification in the user's inbox unless they opted out of its type.

    Returns the saved Notification, or None when the user's preferences
    silence this type.
    """
    data = dict(payload.get("data") or {})
    kind = data.get("type") or "other"
    if not is_enabled(user_id, kind):
        logger.info("User %s has disabled %s notifications", user_id, kind)
        return None

    note = Notification(
        user_id=user_id,
        title=payload["notification"]["title"],
        body=payload["notification"]["body"],
        type=kind,
        data=data,
        url=resolve_url(data, base_url),
    )
    db.session.add(note)
    db.session.commit()
    logger.info("Notification %s stored for user %s", note.id, user_id)
    return note
