from flask import request, g, current_app, has_request_context
from models import db
from models.audit_log import AuditLog
from utils.middleware import get_request_id

def log_action(action, entity, entity_id=None, status_code=200, meta=None):
    """
    Creates an audit log row for a committed mutation.
    Never store passwords or tokens in meta.
    """
    session = g.get("session") if has_request_context() else None

    log = AuditLog(
        role=session.role.value if session else "SYSTEM",
        display_name=session.display_name if session else None,

        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,

        meta=meta,
    )
    if has_request_context():
        log.method = request.method
        log.path = request.path
        log.status_code = status_code
        log.request_id = get_request_id()
        log.ip_address = request.remote_addr
        log.user_agent = request.headers.get("User-Agent")

    try:
        db.session.add(log)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Audit log write failed for %s %s %s", action, entity, entity_id)
        raise

    current_app.logger.info("%s %s %s by %s", action, entity, entity_id, log.role)
