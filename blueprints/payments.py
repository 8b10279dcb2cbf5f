#======================================================================================================
#
#   PAYMENT API BLUEPRINT FOR PAYTM GATEWAY INTEGRATION
#
#===========================================================================================================
from decimal import Decimal
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from models import db, Payment, PaymentStatus, User
from errors import AuthError, NotFoundError, ValidationError
from logger import payments_logger
from utils import get_request_data
from blueprints.payments_helpers import (
    create_payment_order, verify_signature, MEMBERSHIP_FEE, TXN_SUCCESS
)


bp = Blueprint("payments", __name__)


#=============================================================================================
#      PAYMENT INITIATION ENDPOINT
#============================================================================================
@bp.route("/pay", methods=["POST"])
@login_required
def initiate_payment():
    """Signed gateway payload for the fixed membership fee; the client redirects with it."""
    payment, paytm_params = create_payment_order(current_user.phone)
    payments_logger.info(f"Order {payment.order_id} created for {current_user.phone}")
    return jsonify(paytm_params), 200


#=============================================================================================
#      GATEWAY CALLBACK
#============================================================================================
@bp.route("/callback", methods=["POST"])
def payment_callback():
    """
    Gateway callback after a payment attempt.
    Expected fields: STATUS, TXNID, ORDERID, CUST_ID, CHECKSUMHASH
    """
    data = get_request_data()
    if not data:
        raise ValidationError("No callback data")

    if not verify_signature(data, current_app.config["PAYTM_MERCHANT_KEY"]):
        payments_logger.warning(f"Rejected callback with bad checksum for order {data.get('ORDERID')}")
        raise AuthError("Invalid checksum")

    order_id = data.get("ORDERID")
    status = data.get("STATUS")
    if not order_id or not status:
        raise ValidationError("Missing required fields")

    payment = Payment.query.filter_by(order_id=order_id).first()
    if not payment:
        raise NotFoundError("Unknown order")

    # Idempotency check
    if payment.status != PaymentStatus.PENDING.value:
        payments_logger.info(f"Callback for already processed order {order_id}")
        return jsonify({"message": "Already processed", "orderId": order_id, "status": payment.status}), 200

    phone = data.get("CUST_ID") or payment.phone
    if phone != payment.phone:
        raise ValidationError("Customer does not match order")

    payment.txn_id = data.get("TXNID")

    if status == TXN_SUCCESS:
        user = User.query.filter_by(phone=phone).first()
        if not user:
            raise NotFoundError("User not found")

        payment.status = PaymentStatus.SUCCESS.value
        user.wallet = Decimal(str(user.wallet or 0)) + MEMBERSHIP_FEE
        user.has_paid = True
        db.session.commit()

        payments_logger.info(f"Payment {order_id} succeeded: {phone} credited {MEMBERSHIP_FEE}")
        return jsonify({
            "message": "Payment successful",
            "orderId": order_id,
            "status": PaymentStatus.SUCCESS.value,
            "phone": phone,
        }), 200

    payment.status = PaymentStatus.FAILED.value
    db.session.commit()
    payments_logger.warning(f"Payment {order_id} failed with gateway status {status}")
    return jsonify({"error": "Payment failed", "status": PaymentStatus.FAILED.value}), 400
