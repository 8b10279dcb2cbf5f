#======================================================================================
#
# ADMIN API
#
#=======================================================================================
from flask import jsonify, Blueprint
from models import User, Payment, Withdrawal, PaymentStatus, WithdrawalStatus
from security import admin_required
from utils import get_request_data, require_fields
from bonus.commission import ReferralCommissionHelper
from blueprints.withdraw_helpers import WithdrawalRecordManager



admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


@admin_bp.route("/withdrawals", methods=["GET"])
@admin_required
def list_withdrawals():
    withdrawals = Withdrawal.query.order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).all()
    return jsonify([w.to_dict() for w in withdrawals]), 200


@admin_bp.route("/new-withdrawals", methods=["GET"])
@admin_required
def list_pending_withdrawals():
    withdrawals = Withdrawal.query.filter_by(
        status=WithdrawalStatus.PENDING.value
    ).order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc()).all()
    return jsonify([w.to_dict() for w in withdrawals]), 200


@admin_bp.route("/withdrawal/<int:withdrawal_id>", methods=["PUT"])
@admin_required
def update_withdrawal(withdrawal_id):
    """Expected JSON: {"status": "Approved" | "Rejected" | "Pending"}"""
    data = get_request_data()
    require_fields(data, "status")

    withdrawal = WithdrawalRecordManager.update_withdrawal_status(withdrawal_id, str(data["status"]).strip())
    return jsonify({"message": "Status updated", "withdrawal": withdrawal.to_dict()}), 200


@admin_bp.route("/users", methods=["GET"])
@admin_required
def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([user.to_public_dict() for user in users]), 200


@admin_bp.route("/payments", methods=["GET"])
@admin_required
def list_payments():
    payments = Payment.query.filter_by(
        status=PaymentStatus.SUCCESS.value
    ).order_by(Payment.created_at.desc(), Payment.id.desc()).all()
    return jsonify([p.to_dict() for p in payments]), 200


@admin_bp.route("/referrals", methods=["GET"])
@admin_required
def list_referrals():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return jsonify([
        {
            "phone": user.phone,
            "personalReferCode": user.personal_refer_code,
            "referChain": len(user.referrals),
            "upline": [ancestor.phone for ancestor in ReferralCommissionHelper.get_upline(user)],
            "referralCommission": float(ReferralCommissionHelper.ledger_total(user)),
        }
        for user in users
    ]), 200
