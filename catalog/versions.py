from flask import current_app

from models import db
from models.catalog_version import CatalogVersion
from models.rbac import Action, authorize
from catalog import services as catalog
from utils.errors import NotFound
from utils.timeutils import ts_label

def list_versions():
    rows = CatalogVersion.query.order_by(CatalogVersion.created_at.desc(), CatalogVersion.id.desc()).all()
    return [v.to_dict() for v in rows]

def get_version(version_id):
    v = db.session.get(CatalogVersion, version_id)
    if not v:
        raise NotFound(f"Version {version_id} not found")
    return v

def save_version(session):
    """Snapshot the full catalog; only the newest MAX_VERSIONS survive."""
    authorize(session, Action.MANAGE_VERSIONS)
    keep = current_app.config.get("MAX_VERSIONS", 5)

    with catalog.catalog_lock:
        version = CatalogVersion(
            label=ts_label(),
            created_by=session.display_name,
            snapshot=catalog.snapshot(),
        )
        db.session.add(version)
        db.session.flush()

        stale = (
            CatalogVersion.query
            .order_by(CatalogVersion.created_at.desc(), CatalogVersion.id.desc())
            .offset(keep)
            .all()
        )
        for old in stale:
            db.session.delete(old)
        db.session.commit()

    return version.to_dict()

def restore_version(session, version_id):
    authorize(session, Action.MANAGE_VERSIONS)
    version = get_version(version_id)
    count = catalog.replace_catalog(version.snapshot)
    current_app.logger.info("Restored version %s (%s services)", version.label, count)
    return version.to_dict()
