import hashlib
import hmac
import json
from decimal import Decimal
from flask import current_app
from models import db, Payment, PaymentStatus
from utils import generate_order_id

MEMBERSHIP_FEE = Decimal("100")
CHECKSUM_FIELD = "CHECKSUMHASH"
TXN_SUCCESS = "TXN_SUCCESS"


# =========================
# GATEWAY CHECKSUM
# =========================
def _canonical_payload(params):
    """Sorted JSON of every field except the checksum itself."""
    body = {k: "" if v is None else str(v) for k, v in params.items() if k != CHECKSUM_FIELD}
    return json.dumps(body, sort_keys=True, separators=(",", ":"))


def generate_signature(params, merchant_key):
    return hmac.new(
        merchant_key.encode(),
        _canonical_payload(params).encode(),
        hashlib.sha256
    ).hexdigest()


def verify_signature(params, merchant_key):
    signature = params.get(CHECKSUM_FIELD)
    if not signature:
        return False
    expected_signature = generate_signature(params, merchant_key)
    return hmac.compare_digest(str(signature), expected_signature)


# =========================
# BUILD PAYMENT ORDER
# =========================
def create_payment_order(phone):
    """Record a pending order and return the signed gateway payload."""
    order_id = generate_order_id()

    payment = Payment(
        order_id=order_id,
        phone=phone,
        amount=MEMBERSHIP_FEE,
        status=PaymentStatus.PENDING.value,
    )
    db.session.add(payment)
    db.session.commit()

    paytm_params = {
        "requestType": "Payment",
        "MID": current_app.config["PAYTM_MID"],
        "WEBSITE": current_app.config["PAYTM_WEBSITE"],
        "ORDER_ID": order_id,
        "CUST_ID": phone,
        "TXN_AMOUNT": str(int(MEMBERSHIP_FEE)),
        "CALLBACK_URL": current_app.config["PAYTM_CALLBACK_URL"],
        "INDUSTRY_TYPE_ID": "Retail",
        "CHANNEL_ID": "WEB",
    }
    paytm_params[CHECKSUM_FIELD] = generate_signature(
        paytm_params, current_app.config["PAYTM_MERCHANT_KEY"]
    )
    return payment, paytm_params
