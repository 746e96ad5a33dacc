from datetime import datetime, timedelta

from flask import current_app
from jose import jwt, JWTError

from medcare.extensions import db, login_manager
from medcare.errors import Unauthorized

ALGORITHM = "HS256"


def _secret():
    return current_app.config.get("JWT_SECRET") or current_app.config["SECRET_KEY"]


def create_access_token(user):
    days = current_app.config.get("JWT_EXPIRES_DAYS", 30)
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "exp": datetime.utcnow() + timedelta(days=days),
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def decode_access_token(token):
    """Return the token claims, or None when the token is invalid or expired."""
    try:
        return jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except JWTError:
        return None


@login_manager.request_loader
def load_user_from_request(request):
    from medcare.models.user import User

    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    claims = decode_access_token(header.split(" ", 1)[1].strip())
    if not claims or not str(claims.get("sub", "")).isdigit():
        return None
    user = db.session.get(User, int(claims["sub"]))
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized("Not authorized, missing or invalid token")
