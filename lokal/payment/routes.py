"""Stripe payment proxy used by the storefront checkout.

Responses keep the shape the web client already reads:
``{clientSecret, paymentIntentId}`` on success and ``{error}`` with a 400 on
any failure, Stripe's own errors included.
"""
import logging
import time

import stripe
from flask import current_app, jsonify, request

from ..notification.push import build_payload, notify
from ..utils.money import from_minor_units, to_minor_units
from . import bp

logger = logging.getLogger(__name__)

REFUND_ARRIVAL_DAYS = (2, 10)


def _fail(e, status=400, **extra):
    return jsonify(error=str(e), **extra), status


def _intent_response(intent):
    return jsonify(clientSecret=intent.client_secret, paymentIntentId=intent.id)


@bp.post("/create-payment-intent")
def create_payment_intent():
    data = request.get_json(silent=True) or {}
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(data["amount"]),
            currency=data["currency"].lower(),
            automatic_payment_methods={"enabled": True},
        )
    except Exception as e:
        logger.warning("Payment intent error: %s", e)
        return _fail(e)
    return _intent_response(intent)


@bp.post("/create-connect-payment-intent")
def create_connect_payment_intent():
    """Marketplace payment: funds go to the seller's connected account minus the platform fee."""
    data = request.get_json(silent=True) or {}
    seller_account = data.get("sellerStripeAccountId")
    if not seller_account:
        return _fail("Seller Stripe account ID is required")
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(data["amount"]),
            currency=data["currency"].lower(),
            application_fee_amount=to_minor_units(data.get("applicationFeeAmount") or 0),
            transfer_data={"destination": seller_account},
            automatic_payment_methods={"enabled": True},
        )
    except Exception as e:
        logger.error("Connect payment intent error: %s", e)
        return _fail(e)
    return _intent_response(intent)


@bp.post("/create-boost-payment-intent")
def create_boost_payment_intent():
    data = request.get_json(silent=True) or {}
    required = ("amount", "currency", "storeId", "boostDuration", "userId")
    if any(not data.get(k) for k in required):
        return _fail(
            "Missing required fields. Please provide amount, currency, storeId, boostDuration, and userId"
        )
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(data["amount"]),
            currency=data["currency"].lower(),
            metadata={
                "type": "store_boost",
                "storeId": str(data["storeId"]),
                "userId": str(data["userId"]),
                "boostDuration": str(data["boostDuration"]),
                "boostStartDate": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            },
            automatic_payment_methods={"enabled": True},
        )
    except Exception as e:
        logger.error("Boost payment error: %s", e)
        return _fail(e)
    return _intent_response(intent)


@bp.post("/api/process-refund")
def process_refund():
    data = request.get_json(silent=True) or {}
    payment_intent_id = data.get("paymentIntentId")
    if not payment_intent_id:
        return _fail("Payment Intent ID is required")

    params = {
        "payment_intent": payment_intent_id,
        "reason": data.get("reason") or "requested_by_customer",
    }
    if data.get("amount"):
        params["amount"] = to_minor_units(data["amount"])  # partial refund

    try:
        refund = stripe.Refund.create(**params)
    except Exception as e:
        logger.error("Refund error: %s", e)
        return _fail(e, type=getattr(e, "type", None) or "api_error")

    now = int(time.time())
    earliest, latest = REFUND_ARRIVAL_DAYS
    return jsonify(
        success=True,
        refundId=refund.id,
        amount=from_minor_units(refund.amount),
        currency=refund.currency,
        status=refund.status,
        expectedArrival={
            "earliest": now + earliest * 24 * 60 * 60,
            "latest": now + latest * 24 * 60 * 60,
        },
    )


@bp.post("/webhook")
def webhook():
    """Stripe events. The raw body is needed for the signature check."""
    try:
        event = stripe.Webhook.construct_event(
            request.get_data(),
            request.headers.get("Stripe-Signature", ""),
            current_app.config["STRIPE_WEBHOOK_SECRET"],
        )
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error("Webhook Error: %s", e)
        return _fail(f"Webhook Error: {e}")

    obj = event["data"]["object"]
    kind = event["type"]

    if kind == "payment_intent.succeeded":
        metadata = obj.get("metadata") or {}
        if metadata.get("type") == "store_boost":
            logger.info("Store boost payment succeeded: %s", obj["id"])
            if metadata.get("userId"):
                notify(
                    metadata["userId"],
                    build_payload(
                        "Store Boosted Successfully!",
                        "Your store is now featured and will reach more customers!",
                        type="store_boost",
                        store_id=metadata.get("storeId"),
                    ),
                    base_url=current_app.config["PUBLIC_BASE_URL"],
                )
        transfer = obj.get("transfer_data") or {}
        if transfer.get("destination"):
            logger.info(
                "Connect marketplace payment succeeded: %s amount=%s seller=%s fee=%s",
                obj["id"],
                from_minor_units(obj.get("amount") or 0),
                transfer["destination"],
                from_minor_units(obj.get("application_fee_amount") or 0),
            )
    elif kind == "account.updated":
        logger.info(
            "Connect account updated: %s charges=%s payouts=%s details=%s",
            obj["id"], obj.get("charges_enabled"), obj.get("payouts_enabled"), obj.get("details_submitted"),
        )
    elif kind == "transfer.created":
        logger.info(
            "Transfer created: %s amount=%s destination=%s",
            obj["id"], from_minor_units(obj.get("amount") or 0), obj.get("destination"),
        )

    return jsonify(received=True)
