from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from utils import get_request_data, require_fields, parse_amount
from blueprints.withdraw_helpers import WithdrawalRecordManager

bp = Blueprint("withdraw", __name__, url_prefix="")


@bp.route("/withdraw", methods=["POST"])
@login_required
def request_withdrawal():
    """
    Expected JSON: {
        "upiId": "name@bank",
        "amount": 150
    }
    """
    data = get_request_data()
    require_fields(data, "upiId", "amount")

    amount = parse_amount(data["amount"])
    upi_id = str(data["upiId"]).strip()

    withdrawal = WithdrawalRecordManager.create_withdrawal(current_user.phone, upi_id, amount)

    return jsonify({
        "message": "Withdrawal request submitted",
        "withdrawal": withdrawal.to_dict(),
    }), 200
