import json

from flask import Blueprint, request, jsonify, g, Response

from models.rbac import Role
from catalog import services as catalog
from catalog import versions
from catalog.projections import to_original_schema, to_network_subset, normalize_imported
from change_requests import ledger
from utils.audit_logger import log_action
from utils.decorators import token_required, role_required, write_access_required
from utils.errors import InvalidArgument
from utils.responses import ok, fail
from utils.timeutils import file_stamp
from utils.validators import require_fields

# Read-only lookups, safe for unauthenticated clients
lookup_bp = Blueprint("lookup", __name__)
# Raw admin CRUD in the flat export schema
data_bp = Blueprint("data", __name__)
# Catalog editing for signed-in admins and reps
catalog_bp = Blueprint("catalog", __name__)
versions_bp = Blueprint("versions", __name__)

ADMIN_ONLY = [Role.ADMIN]

def _json_body():
    data = request.get_json(force=True, silent=True)
    if data is None:
        raise InvalidArgument("Invalid JSON or Content-Type not set to application/json")
    return data

# =========================================================
# READ-ONLY LOOKUPS
# =========================================================

# lookup_ussd(service, network) -> {code, explanation}
@lookup_bp.route("/lookup/<service>/<network>", methods=["GET"])
def lookup(service, network):
    return jsonify(catalog.lookup(service, network))

# list_services(network=None) -> sorted names
@lookup_bp.route("/services", methods=["GET"])
def list_services():
    return jsonify(catalog.list_service_names(request.args.get("network")))

# compare_codes(service) -> {network: code | null}
@lookup_bp.route("/compare/<service>", methods=["GET"])
def compare(service):
    return jsonify(catalog.compare(service))

# =========================================================
# ADMIN DATA CRUD (/api/data)
# =========================================================
@data_bp.route("", methods=["GET"])
@write_access_required
@token_required
@role_required(ADMIN_ONLY)
def get_all_data():
    out = {}
    for service_id, entry in catalog.snapshot().items():
        record = {
            "service_name": entry["service_name"],
            "description": entry["description"],
            "active": entry["active"],
            "last_updated": entry["last_updated"],
        }
        record.update(entry["telcos"])
        out[service_id] = record
    return jsonify(out)

@data_bp.route("", methods=["POST"])
@write_access_required
@token_required
@role_required(ADMIN_ONLY)
def create_data():
    entry = catalog.create_service(_json_body())
    log_action("CREATE", "service", entry["service_id"], 201)
    return ok(f"Service '{entry['service_id']}' created", data=entry, code=201)

@data_bp.route("/<service>", methods=["PUT"])
@write_access_required
@token_required
@role_required(ADMIN_ONLY)
def update_data(service):
    updates = _json_body()
    entry = catalog.update_service(service, updates)
    log_action("UPDATE", "service", entry["service_id"], meta={"keys": sorted(updates)})
    return ok(f"Service '{service}' updated", data=entry)

@data_bp.route("/<service>", methods=["DELETE"])
@write_access_required
@token_required
@role_required(ADMIN_ONLY)
def delete_data(service):
    removed = catalog.delete_service(service)
    log_action("DELETE", "service", removed["service_id"])
    return ok(f"Service '{service}' deleted")

# =========================================================
# CATALOG EDITING (/api/catalog)
# =========================================================
@catalog_bp.route("", methods=["GET"])
@token_required
def list_catalog():
    try:
        page = int(request.args.get("page", 1))
        per_page = int(request.args.get("per_page", 10))
    except ValueError:
        return fail("page and per_page must be integers", 400)
    return ok(data=catalog.list_catalog(request.args.get("q", ""), page, per_page))

@catalog_bp.route("", methods=["POST"])
@token_required
def add_service():
    entry = catalog.add_service(g.session)
    log_action("CREATE", "service", entry["service_id"], 201)
    return ok("Service added", data=entry, code=201)

@catalog_bp.route("/<service_id>", methods=["GET"])
@token_required
def get_service(service_id):
    return ok(data=catalog.get_service(service_id))

@catalog_bp.route("/<service_id>", methods=["PATCH"])
@token_required
def update_service(service_id):
    changes = _json_body()
    entry = catalog.update_attributes(g.session, service_id, changes)
    log_action("UPDATE", "service", entry["service_id"], meta={"keys": sorted(changes), "from": service_id})
    return ok("Service updated", data=entry)

@catalog_bp.route("/<service_id>", methods=["DELETE"])
@token_required
def delete_service(service_id):
    removed = catalog.remove_service(g.session, service_id)
    log_action("DELETE", "service", removed["service_id"])
    return ok(f"Service '{service_id}' deleted")

@catalog_bp.route("/<service_id>/fields", methods=["PUT"])
@token_required
def edit_field(service_id):
    """Admins write straight to the catalog; reps get a draft change request."""
    data = _json_body()
    missing = require_fields(data, ["field"])
    if missing:
        return missing

    if g.session.is_admin:
        entry = catalog.edit_field_direct(g.session, service_id, data["field"], data.get("value"))
        log_action("EDIT_FIELD", "service", entry["service_id"], meta={"field": data["field"]})
        return ok("Field updated", data=entry)

    cr = ledger.create_or_update_draft(g.session, service_id, data["field"], data.get("value"))
    log_action("DRAFT", "change_request", cr["id"], meta={"field": cr["field"]})
    return ok("Draft saved", data=cr)

@catalog_bp.route("/export", methods=["GET"])
@token_required
def export_catalog():
    if g.session.is_admin:
        payload = to_original_schema(catalog.snapshot())
        filename = f"ussd_data_full_{file_stamp()}.json"
    else:
        network = g.session.role.network
        payload = to_network_subset(catalog.snapshot(), network)
        filename = f"{network}_data_{file_stamp()}.json"

    return Response(
        json.dumps(payload, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@catalog_bp.route("/import", methods=["POST"])
@token_required
def import_catalog():
    data = _json_body()
    if g.session.is_admin:
        count = catalog.import_full(g.session, normalize_imported(data))
        log_action("IMPORT_FULL", "catalog", meta={"services": count})
    else:
        count = catalog.import_subset(g.session, g.session.role.network, data)
        log_action("IMPORT_SUBSET", "catalog", g.session.role.network, meta={"services": count})
    return ok("Import successful.", data={"services": count})

# =========================================================
# VERSION HISTORY (/api/versions)
# =========================================================
@versions_bp.route("", methods=["GET"])
@token_required
def list_versions():
    return ok(data=versions.list_versions())

@versions_bp.route("", methods=["POST"])
@token_required
def save_version():
    version = versions.save_version(g.session)
    log_action("SAVE_VERSION", "catalog_version", version["id"], 201)
    return ok(f"Saved new version: {version['label']}", data=version, code=201)

@versions_bp.route("/<int:version_id>/restore", methods=["POST"])
@token_required
def restore_version(version_id):
    version = versions.restore_version(g.session, version_id)
    log_action("RESTORE_VERSION", "catalog_version", version_id)
    return ok(f"Restored version: {version['label']}", data=version)
