#=======================================================================================================
# Bearer token authentication for the Goalux API
#=======================================================================================================
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request, jsonify
from flask_login import current_user

from errors import AuthError, ForbiddenError
from extensions import login_manager
from models import User


def create_access_token(user):
    """Signed token carrying the phone claim, valid for JWT_EXPIRES_SECONDS."""
    now = datetime.now(timezone.utc)
    payload = {
        "phone": user.phone,
        "iat": now,
        "exp": now + timedelta(seconds=current_app.config["JWT_EXPIRES_SECONDS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_access_token(token):
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")


def _bearer_token():
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@login_manager.request_loader
def load_user_from_request(req):
    token = _bearer_token()
    if not token:
        g.auth_error = "Token required"
        return None

    try:
        payload = decode_access_token(token)
    except AuthError as e:
        g.auth_error = e.message
        return None

    phone = payload.get("phone")
    user = User.query.filter_by(phone=phone).first() if phone else None
    if user is None:
        g.auth_error = "Invalid token"
    return user


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": g.get("auth_error", "Token required")}), 401


def admin_required(f):
    """
    Restrict a route to accounts with the admin role.
    - 401 when no valid bearer token is presented.
    - 403 when the caller is an ordinary member.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthError(g.get("auth_error", "Token required"))

        if not current_user.is_admin:
            raise ForbiddenError("Admin access required")

        return f(*args, **kwargs)

    return decorated_function
