import re
import secrets
import string
import time
from decimal import Decimal, InvalidOperation

from flask import current_app, request

from errors import ValidationError
from models import User

BASE36_CHARS = string.digits + string.ascii_uppercase
REFERRAL_SUFFIX_LENGTH = 6


def validate_phone(phone):
    return re.match(r'^\+?\d{9,15}$', phone) is not None


def get_request_data():
    """JSON body if present, otherwise form fields (gateways post forms)."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_fields(data, *fields):
    missing = [field for field in fields if data.get(field) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def parse_amount(value):
    """Positive Decimal with at most two decimal places."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount format")

    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be a positive number")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError("Amount can have at most two decimal places")
    return amount


def generate_referral_code(max_attempts=10):
    """
    Uppercased prefix + random base-36 suffix, retried until no account holds it.
    The suffix grows by one character after each full round of collisions.
    """
    prefix = current_app.config.get("REFERRAL_CODE_PREFIX", "GOALUX").upper()
    length = REFERRAL_SUFFIX_LENGTH
    while True:
        for _ in range(max_attempts):
            code = prefix + ''.join(secrets.choice(BASE36_CHARS) for _ in range(length))
            if not User.query.filter_by(personal_refer_code=code).first():
                return code
        current_app.logger.warning(f"Referral code space crowded at length {length}, extending")
        length += 1


def generate_order_id():
    return f"ORDER{int(time.time() * 1000)}{secrets.token_hex(4).upper()}"
