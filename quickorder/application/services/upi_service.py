"""UPI payment intent links and payer-app detection.

Pure functions: nothing here talks to a payment gateway. A link only asks the
payer's app to start a transfer; whether money moved is never verified.
"""

from __future__ import annotations

import base64
from urllib.parse import quote, quote_plus

from quickorder.application.dtos.order import PaymentIntent
from quickorder.domain.enums import UpiApp

MERCHANT_CODE = "0000"
CURRENCY = "INR"

PHONEPE_HANDLES = frozenset({"ybl", "ibl", "axl"})
GPAY_HANDLES = frozenset({"oksbi", "okaxis", "okicici", "okhdfcbank"})
PAYTM_HANDLES = frozenset({"paytm"})

# Characters left alone by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _format_amount(amount: float) -> str:
    return f"{amount:.2f}"


def _encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _form_encode(value: str) -> str:
    """application/x-www-form-urlencoded as browsers write it: only *-._ stay bare."""
    return quote_plus(value, safe="*").replace("~", "%7E")


def generate_upi_url(
    vpa: str,
    payee_name: str,
    amount: float,
    transaction_note: str,
    transaction_ref: str,
) -> str:
    """Generic upi://pay link understood by every UPI app (also the QR payload)."""
    params = [
        ("pa", vpa),
        ("pn", payee_name),
        ("mc", MERCHANT_CODE),
        ("tr", transaction_ref),
        ("tn", transaction_note),
        ("am", _format_amount(amount)),
        ("cu", CURRENCY),
    ]
    query = "&".join(f"{key}={_form_encode(value)}" for key, value in params)
    return f"upi://pay?{query}"


def generate_phonepe_url(amount: float, order_id: str, vpa: str, name: str) -> str:
    """PhonePe redirect link: the raw intent base64-encoded behind https://phon.pe/."""
    raw_link = (
        f"phonepe://pay?pa={vpa}&pn={_encode_component(name)}"
        f"&am={_format_amount(amount)}&tr={order_id}&tn=Order {order_id}"
        f"&cu={CURRENCY}&mode=02"
    )
    encoded = base64.b64encode(raw_link.encode("utf-8")).decode("ascii")
    return f"https://phon.pe/{encoded}"


def _request_link(scheme: str, amount: float, order_id: str, vpa: str, name: str) -> str:
    return (
        f"{scheme}?pa={vpa}&pn={_encode_component(name)}"
        f"&am={_format_amount(amount)}&tr={order_id}"
        f"&tn=Payment for Order {order_id}&cu={CURRENCY}"
    )


def generate_gpay_url(amount: float, order_id: str, vpa: str, name: str) -> str:
    """Google Pay request intent."""
    return _request_link("gpay://upi/request", amount, order_id, vpa, name)


def generate_paytm_url(amount: float, order_id: str, vpa: str, name: str) -> str:
    """Paytm pay intent."""
    return _request_link("paytmmp://pay", amount, order_id, vpa, name)


def detect_upi_app(vpa: str | None) -> UpiApp:
    """Guess the payer's app from the handle after '@'."""
    if not vpa or "@" not in vpa:
        return UpiApp.OTHER
    handle = vpa.split("@")[1].lower()
    if handle in PHONEPE_HANDLES:
        return UpiApp.PHONEPE
    if handle in GPAY_HANDLES:
        return UpiApp.GPAY
    if handle in PAYTM_HANDLES:
        return UpiApp.PAYTM
    return UpiApp.OTHER


def order_payment_url(vpa: str, merchant_name: str, amount: float, order_id: str) -> str:
    """Generic link for an order: note 'Order #<id>', reference = order id."""
    return generate_upi_url(
        vpa=vpa,
        payee_name=merchant_name,
        amount=amount,
        transaction_note=f"Order #{order_id}",
        transaction_ref=order_id,
    )


def build_payment_link(
    payer_vpa: str,
    amount: float,
    order_id: str,
    vpa: str,
    merchant_name: str,
) -> PaymentIntent:
    """Pick the deep link matching the payer's app; OTHER gets the generic link."""
    app = detect_upi_app(payer_vpa)
    fallback = order_payment_url(vpa, merchant_name, amount, order_id)
    if app is UpiApp.PHONEPE:
        link = generate_phonepe_url(amount, order_id, vpa, merchant_name)
    elif app is UpiApp.GPAY:
        link = generate_gpay_url(amount, order_id, vpa, merchant_name)
    elif app is UpiApp.PAYTM:
        link = generate_paytm_url(amount, order_id, vpa, merchant_name)
    else:
        link = fallback
    return PaymentIntent(app=app, link=link, fallback_link=fallback, payer_vpa=payer_vpa)
