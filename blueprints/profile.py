from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from models import User, ReferralBonus
from errors import NotFoundError, ForbiddenError
from bonus.commission import ReferralCommissionHelper


bp = Blueprint('profile', __name__, url_prefix="")

# ----------------------------------------------------------------------------------
# DASHBOARD DATA FOR A SINGLE ACCOUNT
# ----------------------------------------------------------------------------------
@bp.route("/user/<phone>", methods=["GET"])
@login_required
def get_user_dashboard(phone):
    """
    Wallet, commissions and payment flag for the dashboard.
    referralCommission is the ledger total; estimatedCommission is the
    count-based figure derived from the number of direct referrals.
    """
    if current_user.phone != phone and not current_user.is_admin:
        raise ForbiddenError("You can only view your own dashboard")

    user = User.query.filter_by(phone=phone).first()
    if not user:
        raise NotFoundError("User not found")

    return jsonify({
        "phone": user.phone,
        "personalReferCode": user.personal_refer_code,
        "wallet": float(user.wallet or 0),
        "referralCommission": float(ReferralCommissionHelper.ledger_total(user)),
        "estimatedCommission": float(ReferralCommissionHelper.estimate_commission(user)),
        "referrals": len(user.referrals),
        "hasPaid": bool(user.has_paid),
    }), 200


@bp.route("/user/<phone>/commissions", methods=["GET"])
@login_required
def get_user_commissions(phone):
    """Ledger rows credited to the account, newest first."""
    if current_user.phone != phone and not current_user.is_admin:
        raise ForbiddenError("You can only view your own commissions")

    user = User.query.filter_by(phone=phone).first()
    if not user:
        raise NotFoundError("User not found")

    bonuses = user.bonuses.order_by(ReferralBonus.created_at.desc(), ReferralBonus.id.desc()).all()
    return jsonify([bonus.to_dict() for bonus in bonuses]), 200
