from flask import Blueprint, request, g, current_app

from models.rbac import Role, Session
from utils.auth_utils import generate_token, verify_password, password_hash_for
from utils.decorators import token_required
from utils.responses import ok, fail
from utils.validators import require_fields

auth_bp = Blueprint("auth", __name__)

# -------------------------
# LOGIN
# -------------------------
@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return fail("Invalid JSON", 400)

    missing = require_fields(data, ["role", "password"])
    if missing:
        return missing

    try:
        role = Role(str(data["role"]).strip().lower())
    except ValueError:
        return fail("Invalid role", 400, errors={"valid_roles": [r.value for r in Role]})

    if not verify_password(password_hash_for(role), data["password"]):
        current_app.logger.warning("Login failed for role %s", role.value)
        return fail("Invalid password. Please check your credentials.", 401)

    display_name = str(data.get("display_name") or "").strip()
    if not display_name:
        return fail("Please enter your display name.", 400)

    session = Session(role, display_name)
    token = generate_token(session)
    current_app.logger.info("Login: %s as %s", display_name, role.value)
    return ok("Login successful", data={"token": token, "session": session.to_dict()})

# -------------------------
# CURRENT SESSION
# -------------------------
@auth_bp.route("/session", methods=["GET"])
@token_required
def current_session():
    return ok(data=g.session.to_dict())
