# lokal/receipt/routes.py

import re
from datetime import datetime, timedelta

from flask import request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity

from ..extensions import db
from ..model import Receipt
from ..utils.api import api_ok, api_error
from ..utils.money import parse_amount, round_money
from . import bp

def ok(msg, data=None, status=200):
    r = jsonify(api_ok(msg, data)); r.status_code = status; return r
def err(msg, status=400, data=None):
    r = jsonify(api_error(msg, data)); r.status_code = status; return r

# API name -> column, for fields a client may set
WRITABLE = {
    "buyerId": "buyer_id",
    "storeId": "store_id",
    "storeName": "store_name",
    "orderId": "order_id",
    "paymentIntentId": "payment_intent_id",
    "currency": "currency",
    "paymentMethod": "payment_method",
    "items": "items",
}
# set by the server only
SERVER_ONLY = {"isBuyerCopy", "originalReceiptId"}
IGNORED = {"id", "createdAt", "timestamp"}
CURRENCY_RE = re.compile(r"^[A-Za-z]{3}\Z")


@bp.post("")
@jwt_required()
def create():
    me = get_jwt_identity()
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return err("JSON object required", 400)

    forbidden = sorted(SERVER_ONLY.intersection(payload))
    if forbidden:
        return err(f"fields are set by the server: {', '.join(forbidden)}", 422)

    owner = payload.get("userId") or me
    if owner != me:
        return err("cannot create receipts for another user", 403)

    fields = {"user_id": owner}
    for name, col in WRITABLE.items():
        if payload.get(name) is not None:
            fields[col] = payload[name]

    if payload.get("amount") is not None:
        amount = parse_amount(payload["amount"])
        if amount is None:
            return err("amount must be a number below 10,000,000,000", 422)
        fields["amount"] = round_money(amount)

    if "currency" in fields:
        currency = fields["currency"]
        if not isinstance(currency, str) or not CURRENCY_RE.match(currency):
            return err("currency must be a 3-letter code", 422)
        fields["currency"] = currency.upper()

    known = set(WRITABLE) | SERVER_ONLY | IGNORED | {"userId", "amount"}
    extra = {k: v for k, v in payload.items() if k not in known}
    if extra:
        fields["extra"] = extra

    r = Receipt(**fields)
    try:
        db.session.add(r)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return err(f"could not save receipt: {e}", 500)

    return ok("receipt created", {"receipt": r.as_api()}, status=201)


@bp.get("")
@jwt_required()
def list_receipts():
    """
    The caller's receipts, newest first. Buyer copies show up here for the buyer.

    Query params:
      - page, per_page
      - store_id=...
      - start, end (YYYY-MM-DD, end inclusive)
    """
    me = get_jwt_identity()
    q = Receipt.query.filter(Receipt.user_id == me)

    store_id = request.args.get("store_id")
    start    = request.args.get("start")
    end      = request.args.get("end")

    if store_id: q = q.filter(Receipt.store_id == store_id)
    try:
        if start:
            q = q.filter(Receipt.timestamp >= datetime.fromisoformat(start))
        if end:
            q = q.filter(Receipt.timestamp < datetime.fromisoformat(end) + timedelta(days=1))
    except ValueError:
        return err("start/end must be YYYY-MM-DD", 400)

    page = max(request.args.get("page", 1, type=int) or 1, 1)
    per  = min(max(request.args.get("per_page", 20, type=int) or 20, 1), 100)

    q = q.order_by(Receipt.timestamp.desc())
    paged = q.paginate(page=page, per_page=per, error_out=False)

    return ok("receipts", {
        "page": page, "per_page": per, "total": paged.total,
        "items": [r.as_api() for r in paged.items],
    })


@bp.get("/<receipt_id>")
@jwt_required()
def get_receipt(receipt_id):
    r = db.session.get(Receipt, receipt_id)
    # someone else's receipt is reported as missing
    if not r or r.user_id != get_jwt_identity():
        return err("receipt not found", 404)
    return ok("receipt", {"receipt": r.as_api()})
