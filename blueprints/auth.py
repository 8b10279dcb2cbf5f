from flask import jsonify, Blueprint, current_app
from sqlalchemy.exc import IntegrityError
from models import User
from extensions import db
from errors import ApiError, ValidationError, DuplicateError
from security import create_access_token
from utils import validate_phone, get_request_data, require_fields, generate_referral_code
from logger import app_logger


#==================================================================================================================

bp = Blueprint("auth", __name__, url_prefix="")

MIN_PASSWORD_LENGTH = 6
CODE_ATTEMPTS = 3


#===========================================================================
#      REGISTER ROUTE.
#==============================================================================
@bp.route("/register", methods=["POST"])
def register():
    """
    Create a new account and pay referral commissions up the inviter's chain.
    Expected JSON:
    {
        "phone": "",
        "password": "",
        "referralCode": ""
    }
    """
    data = get_request_data()
    require_fields(data, "phone", "password", "referralCode")

    phone = str(data["phone"]).strip()
    password = str(data["password"])
    referral_code = str(data["referralCode"]).strip().upper()

    # -----------------------------------------
    #  BASIC VALIDATION
    # -----------------------------------------
    if not validate_phone(phone):
        raise ValidationError("Invalid phone number")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if User.query.filter_by(phone=phone).first():
        raise DuplicateError("This phone number is already registered")

    # -----------------------------------------
    #  CREATE ACCOUNT
    # -----------------------------------------
    from bonus.commission import ReferralCommissionHelper

    referrer = ReferralCommissionHelper.find_by_code(referral_code)

    # A concurrent signup can claim the phone or the code before the commit.
    # Only a code collision is retried.
    for _ in range(CODE_ATTEMPTS):
        new_user = User(
            phone=phone,
            refer_code=referral_code,
            personal_refer_code=generate_referral_code(),
            referred_by=referrer,
        )
        new_user.set_password(password)

        try:
            db.session.add(new_user)
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if User.query.filter_by(phone=phone).first():
                raise DuplicateError("This phone number is already registered")
            app_logger.warning(f"Referral code {new_user.personal_refer_code} already taken, regenerating")
    else:
        raise ApiError("Could not allocate a referral code, please try again", 503)

    current_app.logger.info(
        f"Registered {new_user.phone} with code {new_user.personal_refer_code} (referred by {referral_code})"
    )

    # -------------------------------------
    #  REFERRAL COMMISSIONS
    # -------------------------------------
    credits = []
    if referrer:
        credits = ReferralCommissionHelper.distribute(
            referrer.personal_refer_code, referred_user=new_user, start_level=1
        )
        current_app.logger.info(f"Referral walk for {new_user.phone} credited {len(credits)} ancestors")

    return jsonify({
        "message": "Registration successful",
        "personalReferCode": new_user.personal_refer_code,
        "commissionsPaid": len(credits),
    }), 201


# --------------------------------------------------
#      Login Route
# --------------------------------------------------
@bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate a user and issue a bearer token.
    Expected JSON:
    {
        "phone": "",
        "password": ""
    }
    """
    data = get_request_data()
    require_fields(data, "phone", "password")

    phone = str(data["phone"]).strip()
    password = str(data["password"])

    user = User.query.filter_by(phone=phone).first()

    if not user or not user.check_password(password):
        raise ValidationError("Incorrect credentials")

    app_logger.info(f"Login for {user.phone}")
    return jsonify({
        "message": "Login successful",
        "token": create_access_token(user),
        "personalReferCode": user.personal_refer_code,
    }), 200
