from flask import Blueprint, request, g

from models.change_request import ChangeStatus
from change_requests import ledger
from utils.audit_logger import log_action
from utils.decorators import token_required
from utils.responses import ok, fail
from utils.validators import require_fields

change_requests_bp = Blueprint("change_requests", __name__)

@change_requests_bp.route("", methods=["GET"])
@token_required
def list_change_requests():
    status = request.args.get("status")
    if status and status not in [s.value for s in ChangeStatus]:
        return fail("Invalid status", 400, errors={"valid_statuses": [s.value for s in ChangeStatus]})
    requests = ledger.list_requests(g.session, status=status, service_id=request.args.get("service_id"))
    return ok(data=requests, count=len(requests))

@change_requests_bp.route("/<request_id>", methods=["GET"])
@token_required
def get_change_request(request_id):
    return ok(data=ledger.get_request(request_id))

@change_requests_bp.route("", methods=["POST"])
@token_required
def create_change_request():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return fail("Invalid JSON", 400)
    missing = require_fields(data, ["service_id", "field"])
    if missing:
        return missing

    cr = ledger.create_or_update_draft(g.session, data["service_id"], data["field"], data.get("new_value"))
    log_action("DRAFT", "change_request", cr["id"], meta={"field": cr["field"], "service_id": cr["service_id"]})
    return ok("Draft saved", data=cr)

@change_requests_bp.route("/<request_id>/submit", methods=["POST"])
@token_required
def submit_change_request(request_id):
    cr = ledger.submit(g.session, request_id)
    log_action("SUBMIT", "change_request", request_id)
    return ok("Change request submitted for admin review!", data=cr)

@change_requests_bp.route("/<request_id>/recall", methods=["POST"])
@token_required
def recall_change_request(request_id):
    cr = ledger.recall(g.session, request_id)
    log_action("RECALL", "change_request", request_id)
    return ok("Change request recalled to draft", data=cr)

@change_requests_bp.route("/<request_id>/approve", methods=["POST"])
@token_required
def approve_change_request(request_id):
    cr = ledger.approve(g.session, request_id)
    log_action("APPROVE", "change_request", request_id, meta={"field": cr["field"], "service_id": cr["service_id"]})
    return ok(f"Change approved: {cr['field']} updated for {cr['service_id']}", data=cr)

@change_requests_bp.route("/<request_id>/reject", methods=["POST"])
@token_required
def reject_change_request(request_id):
    data = request.get_json(force=True, silent=True) or {}
    cr = ledger.reject(g.session, request_id, data.get("comment") if isinstance(data, dict) else None)
    log_action("REJECT", "change_request", request_id, meta={"comment": cr["comments"]})
    return ok(f"Change rejected: {cr['field']} for {cr['service_id']}", data=cr)

@change_requests_bp.route("/<request_id>", methods=["DELETE"])
@token_required
def cancel_change_request(request_id):
    ledger.cancel(g.session, request_id)
    log_action("CANCEL", "change_request", request_id)
    return ok("Draft cancelled")
