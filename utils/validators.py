from models.rbac import NETWORKS, FIELD_KEYS
from utils.errors import InvalidArgument
from utils.responses import fail

def require_fields(data: dict, fields: list):
    missing = [f for f in fields if f not in data or data.get(f) in (None, "", [])]
    if missing:
        return fail("Validation failed", 400, errors={"missing_fields": missing})
    return None

def normalize_key(value) -> str:
    """Service ids and network ids are compared trimmed and lowercased."""
    return (value or "").strip().lower()

def validate_network(network: str) -> str:
    n = normalize_key(network)
    if n not in NETWORKS:
        raise InvalidArgument(
            f"Unknown network '{network}'. Valid networks: {', '.join(NETWORKS)}"
        )
    return n

def parse_field_path(field: str):
    """
    'telcos.mtn.code' -> ('mtn', 'code').
    Only the 8 per-network leaves are addressable.
    """
    parts = (field or "").strip().split(".")
    if len(parts) != 3 or parts[0] != "telcos" or parts[1] not in NETWORKS or parts[2] not in FIELD_KEYS:
        raise InvalidArgument(
            f"Invalid field '{field}'. Expected telcos.<{'|'.join(NETWORKS)}>.<{'|'.join(FIELD_KEYS)}>"
        )
    return parts[1], parts[2]
