from flask import jsonify

from utils.middleware import get_request_id

def ok(message="OK", data=None, code=200, **extra):
    payload = {"success": True, "message": message, "data": data}
    payload.update(extra)
    return jsonify(payload), code

def fail(message="Bad Request", code=400, errors=None, **extra):
    # `error` mirrors `message` for clients of the old Express API
    payload = {"success": False, "message": message, "error": message}
    if errors is not None:
        payload["errors"] = errors
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id
    payload.update(extra)
    return jsonify(payload), code
