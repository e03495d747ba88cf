from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from ..extensions import db
from ..model import Notification, NotificationPreference
from ..utils.api import api_ok, api_error
from . import bp
from .push import build_payload, notify

def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r
def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r


@bp.get("")
@jwt_required()
def index():
    me = get_jwt_identity()
    notes = (Notification.query.filter_by(user_id=me)
             .order_by(Notification.created_at.desc(), Notification.id.desc())
             .limit(100).all())
    return ok("notifications", {
        "unread": sum(1 for n in notes if not n.is_read),
        "items": [n.as_api() for n in notes],
    })


@bp.post("")
@jwt_required()
def create_notification():
    """Send a custom notification to a user."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return err("JSON object required", 400)
    user_id = data.get("userId")
    title = data.get("title")
    body = data.get("body")
    if not user_id or not title or not body:
        return err("userId, title, and body are required", 400)

    payload = build_payload(title, body, type=data.get("type") or "custom", url=data.get("url"))
    extra = data.get("additionalData") or {}
    if not isinstance(extra, dict):
        return err("additionalData must be an object", 400)
    payload["data"].update({k: str(v) for k, v in extra.items() if v is not None and k != "type"})

    note = notify(str(user_id), payload, base_url=current_app.config["PUBLIC_BASE_URL"])
    if note is None:
        return ok("notification not sent", {"success": False, "reason": "disabled"})
    return ok("notification created", {"success": True, "notification": note.as_api()}, status=201)


@bp.put("/<int:note_id>/read")
@jwt_required()
def mark_as_read(note_id):
    note = db.session.get(Notification, note_id)
    if not note or note.user_id != get_jwt_identity():
        return err("notification not found", 404)
    note.is_read = True
    db.session.commit()
    return ok("marked as read", {"notification": note.as_api()})


@bp.get("/preferences")
@jwt_required()
def get_preferences():
    me = get_jwt_identity()
    prefs = db.session.get(NotificationPreference, me) or NotificationPreference(user_id=me)
    return ok("preferences", {"preferences": prefs.as_api()})


@bp.put("/preferences")
@jwt_required()
def update_preferences():
    me = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return err("JSON object required", 400)
    unknown = sorted(set(data) - set(NotificationPreference.FIELDS))
    if unknown:
        return err(f"unknown preferences: {', '.join(unknown)}", 400)
    if any(not isinstance(v, bool) for v in data.values()):
        return err("preferences must be true or false", 400)

    prefs = db.session.get(NotificationPreference, me)
    if prefs is None:
        prefs = NotificationPreference(user_id=me)
        db.session.add(prefs)
    for name, value in data.items():
        setattr(prefs, NotificationPreference.FIELDS[name], value)
    db.session.commit()
    return ok("preferences updated", {"preferences": prefs.as_api()})
