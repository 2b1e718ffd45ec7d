import jwt
import datetime
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

from models.rbac import Role, Session

def hash_password(password):
    return generate_password_hash(password)

def verify_password(hash, password):
    return check_password_hash(hash, password)

def password_hash_for(role):
    """Admin has its own password; every network rep shares the rep password."""
    key = "ADMIN_PASSWORD_HASH" if role.is_admin else "REP_PASSWORD_HASH"
    return current_app.config[key]

def generate_token(session):
    payload = {
        "role": session.role.value,
        "display_name": session.display_name,
        "exp": datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(hours=current_app.config["TOKEN_TTL_HOURS"]),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")

def decode_token(token):
    """Returns the Session for a token; raises jwt.InvalidTokenError subclasses."""
    data = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    try:
        role = Role(data["role"])
    except (KeyError, ValueError):
        raise jwt.InvalidTokenError("Token carries no valid role")
    return Session(role, data.get("display_name") or role.label)
