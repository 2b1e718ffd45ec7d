"""
Pure transforms between the catalog snapshot and its export formats.

A catalog snapshot is a dict keyed by service id whose values look like
ServiceEntry.to_dict(). Nothing here touches the database; every function
returns a new structure and leaves its input alone.
"""
import copy

from models.rbac import NETWORKS
from utils.errors import InvalidArgument
from utils.timeutils import iso, utc_now
from utils.validators import normalize_key

def _empty_record():
    return {"code": "", "explanation": ""}

def to_original_schema(catalog):
    """
    Full admin export: active entries only, every network, guidance notes stripped.
    """
    out = {}
    for service_id, entry in catalog.items():
        if not entry.get("active", True):
            continue
        telcos = entry.get("telcos") or {}
        record = {"service_name": entry["service_name"]}
        for n in NETWORKS:
            t = telcos.get(n) or _empty_record()
            record[n] = {"code": t.get("code", ""), "explanation": t.get("explanation", "")}
        out[service_id] = record
    return out

def to_network_subset(catalog, network):
    """Representative export: only `network`'s code/explanation, keyed by service id."""
    out = {}
    for service_id, entry in catalog.items():
        if not entry.get("active", True):
            continue
        t = (entry.get("telcos") or {}).get(network) or _empty_record()
        out[service_id] = {"code": t.get("code", ""), "explanation": t.get("explanation", "")}
    return out

def normalize_imported(data):
    """
    Turn an uploaded full-schema document back into a catalog snapshot.
    Missing fields default to empty strings; non-object values and blank
    ids are skipped. Ids are trimmed and lowercased, and two keys that
    land on the same id are rejected.
    """
    if not isinstance(data, dict):
        raise InvalidArgument("Invalid JSON root. Expected an object.")

    stamp = iso(utc_now())
    result = {}
    for raw_id, obj in data.items():
        if not isinstance(obj, dict):
            continue
        service_id = normalize_key(raw_id)
        if not service_id:
            continue
        if service_id in result:
            raise InvalidArgument(
                f"Duplicate service id '{service_id}' in import", service_id=service_id
            )
        description = obj.get("description")
        telcos = {}
        for n in NETWORKS:
            t = obj.get(n)
            if not isinstance(t, dict):
                t = {}
            telcos[n] = {
                "code": _as_text(t.get("code")),
                "explanation": _as_text(t.get("explanation")),
            }
        result[service_id] = {
            "service_id": service_id,
            "service_name": _as_text(obj.get("service_name"), default=service_id),
            "description": str(description) if description else None,
            "telcos": telcos,
            "active": True,
            "last_updated": stamp,
        }
    return result

def apply_network_subset(catalog, network, subset):
    """
    Merge a representative's subset into a copy of the catalog.
    Unknown service ids are skipped; only `network`'s fields change.
    """
    if not isinstance(subset, dict):
        raise InvalidArgument("Invalid JSON root. Expected an object.")

    nxt = copy.deepcopy(catalog)
    stamp = iso(utc_now())
    for service_id, patch in subset.items():
        entry = nxt.get(service_id)
        if entry is None:
            continue
        if not isinstance(patch, dict):
            patch = {}
        t = entry.setdefault("telcos", {}).setdefault(network, _empty_record())
        t["code"] = _as_text(patch.get("code"), default=t["code"])
        t["explanation"] = _as_text(patch.get("explanation"), default=t["explanation"])
        entry["last_updated"] = stamp
    return nxt

def _as_text(value, default=""):
    return default if value is None else str(value)
