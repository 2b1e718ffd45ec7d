"""
Change request ledger.

A change request proposes a new value for one per-network leaf of a catalog
entry. Lifecycle:

    draft --submit--> pending --approve--> approved
      ^                  |  \
      +-----recall-------+   +--reject--> rejected

approved and rejected are terminal and stay in the ledger as history.
cancel deletes a draft outright. For any (service, field) there is at most
one draft and at most one pending request at a time.
"""
import time
import uuid
from typing import Dict, Any, Optional

from flask import current_app

from models import db
from models.change_request import ChangeRequest, ChangeStatus, ledger_lock
from models.rbac import Action, authorize
from catalog import services as catalog
from utils.errors import NotFound, Forbidden, Conflict
from utils.timeutils import next_stamp
from utils.validators import normalize_key, parse_field_path

DRAFT = ChangeStatus.DRAFT.value
PENDING = ChangeStatus.PENDING.value
APPROVED = ChangeStatus.APPROVED.value
REJECTED = ChangeStatus.REJECTED.value


def generate_change_request_id() -> str:
    return f"cr_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _find(service_id, field, status) -> Optional[ChangeRequest]:
    return ChangeRequest.query.filter_by(service_id=service_id, field=field, status=status).first()


def _require(request_id, status) -> ChangeRequest:
    """Load a request that must currently be in `status`."""
    cr = db.session.get(ChangeRequest, request_id)
    if not cr:
        raise NotFound(f"Change request '{request_id}' not found")
    if cr.status != status:
        raise NotFound(
            f"Change request '{request_id}' is {cr.status}, expected {status}",
            status=cr.status,
        )
    return cr


def _require_owner_network(session, cr):
    authorize(session, Action.PROPOSE_CHANGE, network=cr.network)


def _reviewer_name(session):
    return session.display_name or "Admin"


def get_request(request_id) -> Dict[str, Any]:
    cr = db.session.get(ChangeRequest, request_id)
    if not cr:
        raise NotFound(f"Change request '{request_id}' not found")
    return cr.to_dict()


def list_requests(session=None, status=None, service_id=None) -> Dict[str, Dict[str, Any]]:
    """Ledger view keyed by request id. Representatives only see their own network."""
    q = ChangeRequest.query
    if status:
        q = q.filter_by(status=status)
    if service_id:
        q = q.filter_by(service_id=normalize_key(service_id))
    rows = q.order_by(ChangeRequest.requested_at.desc()).all()
    if session is not None and not session.is_admin:
        rows = [r for r in rows if r.network == session.role.network]
    return {r.id: r.to_dict() for r in rows}


def create_or_update_draft(session, service_id, field, new_value) -> Dict[str, Any]:
    network, _ = parse_field_path(field)
    authorize(session, Action.PROPOSE_CHANGE, network=network)
    field = field.strip()
    new_value = "" if new_value is None else str(new_value)

    with ledger_lock:
        entry = catalog.require_entry(service_id)
        old_value = catalog.current_value(entry.service_id, field)

        cr = _find(entry.service_id, field, DRAFT)
        if cr:
            cr.new_value = new_value
            cr.old_value = old_value
            cr.requested_at = next_stamp(cr.requested_at)
            event = "updated"
        else:
            cr = ChangeRequest(
                id=generate_change_request_id(),
                service_id=entry.service_id,
                field=field,
                old_value=old_value,
                new_value=new_value,
                requested_by=session.display_name or "Unknown User",
                requested_at=next_stamp(),
                status=DRAFT,
            )
            db.session.add(cr)
            event = "created"
        db.session.commit()
        result = cr.to_dict()

    current_app.logger.info("Draft %s %s for %s %s", result["id"], event, result["service_id"], result["field"])
    return result


def submit(session, request_id) -> Dict[str, Any]:
    with ledger_lock:
        cr = _require(request_id, DRAFT)
        _require_owner_network(session, cr)
        if _find(cr.service_id, cr.field, PENDING):
            raise Conflict(
                f"A change to {cr.field} on '{cr.service_id}' is already awaiting review"
            )
        cr.status = PENDING
        cr.requested_at = next_stamp(cr.requested_at)
        db.session.commit()
    return cr.to_dict()


def recall(session, request_id) -> Dict[str, Any]:
    with ledger_lock:
        cr = _require(request_id, PENDING)
        _require_owner_network(session, cr)

        # The recalled request takes the place of any draft for the same field
        existing = _find(cr.service_id, cr.field, DRAFT)
        if existing:
            current_app.logger.info("Recall of %s replaces draft %s", cr.id, existing.id)
            db.session.delete(existing)
            db.session.flush()

        cr.status = DRAFT
        cr.requested_at = next_stamp(cr.requested_at)
        db.session.commit()
    return cr.to_dict()


def approve(session, request_id) -> Dict[str, Any]:
    authorize(session, Action.REVIEW_CHANGE)
    with ledger_lock:
        cr = _require(request_id, PENDING)
        try:
            catalog.apply_field_value(cr.service_id, cr.field, cr.new_value, commit=False)
        except NotFound:
            db.session.rollback()
            raise NotFound(
                f"Service '{cr.service_id}' no longer exists",
                request_id=request_id,
            )
        cr.status = APPROVED
        cr.reviewed_by = _reviewer_name(session)
        cr.reviewed_at = next_stamp()
        db.session.commit()

    current_app.logger.info("Approved %s: %s on %s", cr.id, cr.field, cr.service_id)
    return cr.to_dict()


def reject(session, request_id, comment=None) -> Dict[str, Any]:
    authorize(session, Action.REVIEW_CHANGE)
    with ledger_lock:
        cr = _require(request_id, PENDING)
        cr.status = REJECTED
        cr.reviewed_by = _reviewer_name(session)
        cr.reviewed_at = next_stamp()
        cr.comments = comment or None
        db.session.commit()
    return cr.to_dict()


def cancel(session, request_id) -> Dict[str, Any]:
    with ledger_lock:
        cr = _require(request_id, DRAFT)
        _require_owner_network(session, cr)
        if cr.requested_by != session.display_name:
            raise Forbidden("Only the original requester can cancel a draft")
        removed = cr.to_dict()
        db.session.delete(cr)
        db.session.commit()
    return removed
