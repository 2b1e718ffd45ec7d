import hmac
from functools import wraps

import jwt
from flask import request, g, current_app

from utils.auth_utils import decode_token
from utils.responses import fail

def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        auth_header = request.headers.get('Authorization')

        if auth_header and auth_header.startswith('Bearer '):
            parts = auth_header.split(' ')
            if len(parts) > 1:
                token = parts[1]

        if not token or not token.strip() or token.lower() in ['null', 'undefined']:
            current_app.logger.warning("Auth failed: token missing on %s", request.path)
            return fail('Token is missing', 401)
        try:
            g.session = decode_token(token)
        except jwt.ExpiredSignatureError:
            return fail('Token has expired', 401)
        except jwt.InvalidTokenError as e:
            current_app.logger.warning("Auth failed: %s", e)
            return fail('Token is invalid', 401)
        return f(*args, **kwargs)
    return decorated

def role_required(allowed_roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.session.role not in allowed_roles:
                return fail('Permission denied', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator

def write_access_required(f):
    """Gate for the raw data endpoints: explicit enablement plus optional API key."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_app.config.get("ENABLE_WRITE_OPERATIONS"):
            return fail('Write operations are disabled. This API is read-only.', 403)

        api_key = current_app.config.get("API_KEY")
        if api_key and not hmac.compare_digest(request.headers.get('X-API-Key', ''), api_key):
            return fail('Unauthorized. Valid API key required for write operations.', 401)
        return f(*args, **kwargs)
    return decorated
