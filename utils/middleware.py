import uuid
from flask import g, request, has_request_context

REQUEST_ID_HEADER = "X-Request-ID"

def attach_request_id():
    g.request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

def get_request_id():
    if not has_request_context():
        return None
    return getattr(g, "request_id", None)

def echo_request_id(response):
    request_id = get_request_id()
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response
