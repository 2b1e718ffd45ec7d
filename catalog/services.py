import math
import threading
from typing import Dict, Any, Optional

from flask import current_app

from models import db
from models.service_entry import ServiceEntry, ServiceNetworkCode
from models.change_request import ChangeRequest, ChangeStatus, LIVE_STATUSES, ledger_lock
from models.rbac import NETWORKS, Action, authorize
from catalog.projections import apply_network_subset
from utils.errors import NotFound, InvalidArgument, Conflict
from utils.timeutils import next_stamp
from utils.validators import normalize_key, validate_network, parse_field_path

# Serializes every catalog read-modify-write. When the ledger lock is also
# needed it must be taken first.
catalog_lock = threading.RLock()

DEFAULT_SERVICE_NAME = "New Service"
DEFAULT_GUIDANCE = (
    "Provide guidance here for telco reps on what codes and explanations "
    "are expected for this service."
)
SYSTEM_REVIEWER = "system"

# -----------------------------
# READS
# -----------------------------
def get_entry(service_id) -> Optional[ServiceEntry]:
    return ServiceEntry.query.filter_by(service_id=normalize_key(service_id)).first()

def require_entry(service_id) -> ServiceEntry:
    entry = get_entry(service_id)
    if not entry:
        raise NotFound(f"Service '{service_id}' not found")
    return entry

def get_service(service_id) -> Dict[str, Any]:
    return require_entry(service_id).to_dict()

def snapshot(active_only=False) -> Dict[str, Dict[str, Any]]:
    """Whole catalog keyed by service id. Built fresh on every call."""
    q = ServiceEntry.query
    if active_only:
        q = q.filter_by(active=True)
    return {e.service_id: e.to_dict() for e in q.order_by(ServiceEntry.service_id.asc()).all()}

def current_value(service_id, field) -> str:
    network, key = parse_field_path(field)
    row = require_entry(service_id).network_code(network)
    return getattr(row, key) if row else ""

def list_catalog(query="", page=1, per_page=10) -> Dict[str, Any]:
    """Admin/rep listing: sorted by id, substring filter on id or name, paginated."""
    items = list(snapshot().values())
    q = (query or "").strip().lower()
    if q:
        items = [s for s in items if q in s["service_id"].lower() or q in s["service_name"].lower()]

    per_page = max(1, int(per_page))
    page = max(1, int(page))
    total_items = len(items)
    start = (page - 1) * per_page
    return {
        "items": items[start:start + per_page],
        "page": page,
        "per_page": per_page,
        "total_items": total_items,
        "total_pages": math.ceil(total_items / per_page),
    }

def _active_entry(service):
    entry = get_entry(service)
    if not entry or not entry.active:
        valid = ", ".join(e.service_id for e in ServiceEntry.query.filter_by(active=True).order_by(ServiceEntry.service_id).all())
        raise NotFound(f"Unknown service '{service}'. Valid services: {valid}")
    return entry

def lookup(service, network) -> Dict[str, str]:
    entry = _active_entry(service)
    n = validate_network(network)
    row = entry.network_code(n)
    if not row:
        raise NotFound(f"No entry for network '{network}' under service '{service}'.")
    return {"code": row.code, "explanation": row.explanation}

def list_service_names(network=None):
    entries = ServiceEntry.query.filter_by(active=True).all()
    if network:
        n = normalize_key(network)
        entries = [e for e in entries if e.network_code(n)]
    return sorted(e.service_name for e in entries)

def compare(service) -> Dict[str, Optional[str]]:
    entry = _active_entry(service)
    out = {}
    for n in NETWORKS:
        row = entry.network_code(n)
        out[n] = row.code if row and row.code else None
    return out

# -----------------------------
# WRITES
# -----------------------------
def touch(entry):
    entry.last_updated = next_stamp(entry.last_updated)

def _as_bool(value, name="active"):
    if not isinstance(value, bool):
        raise InvalidArgument(f"'{name}' must be true or false")
    return value

def _close_live_requests(service_ids, reason):
    """
    Retire the ledger for services that no longer exist: drafts are dropped,
    pending requests are rejected by the system. Caller holds ledger_lock
    and commits.
    """
    if not service_ids:
        return 0
    rows = ChangeRequest.query.filter(
        ChangeRequest.service_id.in_(list(service_ids)),
        ChangeRequest.status.in_(LIVE_STATUSES),
    ).all()
    for cr in rows:
        if cr.status == ChangeStatus.DRAFT.value:
            db.session.delete(cr)
        else:
            cr.status = ChangeStatus.REJECTED.value
            cr.reviewed_by = SYSTEM_REVIEWER
            cr.reviewed_at = next_stamp()
            cr.comments = reason
    if rows:
        current_app.logger.info("Closed %s live change requests: %s", len(rows), reason)
    return len(rows)

def _set_network_field(entry, network, key, value):
    row = entry.network_code(network)
    if row is None:
        row = ServiceNetworkCode(network=network, code="", explanation="")
        entry.codes.append(row)
    setattr(row, key, "" if value is None else str(value))

def _set_network_block(entry, network, block):
    if not isinstance(block, dict):
        raise InvalidArgument(f"'{network}' must be an object with code and explanation")
    for key in ("code", "explanation"):
        if key in block:
            _set_network_field(entry, network, key, block[key])
        elif entry.network_code(network) is None:
            _set_network_field(entry, network, key, "")

def apply_field_value(service_id, field, value, commit=True) -> ServiceEntry:
    """
    Write `value` into one per-network leaf and stamp last_updated.
    The only path by which an approved change reaches the catalog.
    """
    network, key = parse_field_path(field)
    with catalog_lock:
        entry = require_entry(service_id)
        _set_network_field(entry, network, key, value)
        touch(entry)
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    return entry

def edit_field_direct(session, service_id, field, value) -> Dict[str, Any]:
    authorize(session, Action.EDIT_FIELD_DIRECT)
    return apply_field_value(service_id, field, value).to_dict()

def _unique_new_id():
    idx = 1
    while ServiceEntry.query.filter_by(service_id=f"new_service_{idx}").first():
        idx += 1
    return f"new_service_{idx}"

def add_service(session) -> Dict[str, Any]:
    """Admin 'add service': placeholder entry with empty records for every network."""
    authorize(session, Action.MANAGE_SERVICES)
    with catalog_lock:
        entry = ServiceEntry(
            service_id=_unique_new_id(),
            service_name=DEFAULT_SERVICE_NAME,
            description=DEFAULT_GUIDANCE,
            active=True,
        )
        for n in NETWORKS:
            entry.codes.append(ServiceNetworkCode(network=n, code="", explanation=""))
        touch(entry)
        db.session.add(entry)
        db.session.commit()
    return entry.to_dict()

def create_service(data) -> Dict[str, Any]:
    """
    Create from the flat schema used by /api/data:
    {service_id, service_name, description?, active?, mtn: {code, explanation}, ...}
    Only the network blocks supplied are stored.
    """
    if not isinstance(data, dict):
        raise InvalidArgument("Invalid JSON. Expected an object.")
    service_id = normalize_key(data.get("service_id"))
    if not service_id:
        raise InvalidArgument("service_id is required")

    with catalog_lock:
        if get_entry(service_id):
            raise Conflict(f"Service '{data.get('service_id')}' already exists")

        entry = ServiceEntry(
            service_id=service_id,
            service_name=str(data.get("service_name") or service_id),
            description=data.get("description"),
            active=_as_bool(data.get("active", True)),
        )
        for n in NETWORKS:
            if n in data:
                _set_network_block(entry, n, data[n])
        touch(entry)
        db.session.add(entry)
        db.session.commit()
    return entry.to_dict()

def _rename(entry, new_id):
    new_key = normalize_key(new_id)
    if not new_key:
        raise InvalidArgument("service_id cannot be empty")
    if new_key == entry.service_id:
        return
    if get_entry(new_key):
        raise Conflict(f"Service '{new_id}' already exists")
    if ChangeRequest.query.filter(
        ChangeRequest.service_id == new_key,
        ChangeRequest.status.in_(LIVE_STATUSES),
    ).first():
        raise Conflict(f"Open change requests are still filed under '{new_key}'")

    old_key = entry.service_id
    entry.service_id = new_key
    # Requests follow the entry to its new key
    ChangeRequest.query.filter_by(service_id=old_key).update(
        {"service_id": new_key}, synchronize_session="fetch"
    )
    current_app.logger.info("Renamed service %s -> %s", old_key, new_key)

def update_service(service_id, updates) -> Dict[str, Any]:
    """
    Partial merge in the flat /api/data schema. Network blocks merge per key;
    a differing service_id renames the entry.
    """
    if not isinstance(updates, dict):
        raise InvalidArgument("Invalid JSON. Expected an object.")

    with catalog_lock:
        entry = require_entry(service_id)
        for n in NETWORKS:
            if n in updates:
                _set_network_block(entry, n, updates[n])
        _apply_attributes(entry, updates)
        touch(entry)
        db.session.commit()
    return entry.to_dict()

def _apply_attributes(entry, changes):
    if "service_name" in changes:
        name = str(changes["service_name"] or "").strip()
        if not name:
            raise InvalidArgument("service_name cannot be empty")
        entry.service_name = name
    if "description" in changes:
        entry.description = changes["description"] or None
    if "active" in changes:
        entry.active = _as_bool(changes["active"])
    if "service_id" in changes:
        _rename(entry, changes["service_id"])

def update_attributes(session, service_id, changes) -> Dict[str, Any]:
    """Admin edits of id / name / guidance / active flag."""
    authorize(session, Action.MANAGE_SERVICES)
    if not isinstance(changes, dict):
        raise InvalidArgument("Invalid JSON. Expected an object.")
    with catalog_lock:
        entry = require_entry(service_id)
        _apply_attributes(entry, changes)
        touch(entry)
        db.session.commit()
    return entry.to_dict()

def delete_service(service_id) -> Dict[str, Any]:
    with ledger_lock, catalog_lock:
        entry = require_entry(service_id)
        removed = entry.to_dict()
        _close_live_requests([entry.service_id], "Service deleted")
        db.session.delete(entry)
        db.session.commit()
    return removed

def remove_service(session, service_id) -> Dict[str, Any]:
    authorize(session, Action.MANAGE_SERVICES)
    return delete_service(service_id)

def _entry_from_dict(service_id, data):
    entry = ServiceEntry(
        service_id=normalize_key(service_id),
        service_name=data.get("service_name") or service_id,
        description=data.get("description"),
        active=bool(data.get("active", True)),
    )
    for n, t in (data.get("telcos") or {}).items():
        if n in NETWORKS:
            entry.codes.append(ServiceNetworkCode(
                network=n, code=t.get("code", ""), explanation=t.get("explanation", "")
            ))
    touch(entry)
    return entry

def replace_catalog(catalog) -> int:
    """Swap the whole catalog for `catalog` (admin import, version restore)."""
    with ledger_lock, catalog_lock:
        try:
            dropped = set()
            for entry in ServiceEntry.query.all():
                if entry.service_id not in catalog:
                    dropped.add(entry.service_id)
                db.session.delete(entry)
            _close_live_requests(dropped, "Service removed by catalog replace")
            db.session.flush()
            for service_id, data in catalog.items():
                db.session.add(_entry_from_dict(service_id, data))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
    return len(catalog)

def import_full(session, catalog) -> int:
    authorize(session, Action.IMPORT_FULL)
    return replace_catalog(catalog)

def import_subset(session, network, subset) -> int:
    """Merge one network's fields from a representative's upload; other fields untouched."""
    network = validate_network(network)
    authorize(session, Action.IMPORT_SUBSET, network=network)

    with catalog_lock:
        current = snapshot()
        merged = apply_network_subset(current, network, subset)
        touched = 0
        for service_id in subset:
            if service_id not in current:
                continue
            entry = get_entry(service_id)
            t = merged[service_id]["telcos"][network]
            _set_network_field(entry, network, "code", t["code"])
            _set_network_field(entry, network, "explanation", t["explanation"])
            touch(entry)
            touched += 1
        db.session.commit()
    return touched
