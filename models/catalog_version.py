from models import db
from utils.timeutils import utc_now, iso

class CatalogVersion(db.Model):
    __tablename__ = "catalog_versions"

    id = db.Column(db.Integer, primary_key=True)
    label = db.Column(db.String(30), nullable=False)  # e.g. 2025-11-01 09:30:00
    created_by = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    # Full catalog keyed by service id, as returned by catalog.services.snapshot()
    snapshot = db.Column(db.JSON, nullable=False)

    def to_dict(self, include_snapshot=False):
        out = {
            "id": self.id,
            "label": self.label,
            "created_by": self.created_by,
            "created_at": iso(self.created_at),
            "service_count": len(self.snapshot or {}),
        }
        if include_snapshot:
            out["snapshot"] = self.snapshot
        return out
