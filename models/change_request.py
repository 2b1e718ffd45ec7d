import threading
from enum import Enum

from sqlalchemy import text

from models import db
from utils.timeutils import utc_now, iso

class ChangeStatus(Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

LIVE_STATUSES = (ChangeStatus.DRAFT.value, ChangeStatus.PENDING.value)

# Serializes writes to change_requests. Taken before the catalog lock
# whenever both are held.
ledger_lock = threading.RLock()

class ChangeRequest(db.Model):
    __tablename__ = "change_requests"

    id = db.Column(db.String(40), primary_key=True)  # cr_<epoch ms>_<random>

    service_id = db.Column(db.String(100), nullable=False, index=True)
    field = db.Column(db.String(50), nullable=False)  # telcos.<network>.<code|explanation>

    old_value = db.Column(db.Text, nullable=False, default="")
    new_value = db.Column(db.Text, nullable=False, default="")

    requested_by = db.Column(db.String(100), nullable=False)
    requested_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    status = db.Column(db.String(20), nullable=False, default=ChangeStatus.DRAFT.value)
    # draft -> pending -> approved | rejected, pending -> draft on recall

    reviewed_by = db.Column(db.String(100), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    comments = db.Column(db.Text, nullable=True)

    # At most one draft and one pending request per (service, field)
    __table_args__ = (
        db.Index(
            "uq_change_request_draft", "service_id", "field", unique=True,
            sqlite_where=text("status = 'draft'"),
            postgresql_where=text("status = 'draft'"),
        ),
        db.Index(
            "uq_change_request_pending", "service_id", "field", unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    @property
    def network(self):
        return self.field.split(".")[1]

    def to_dict(self):
        return {
            "id": self.id,
            "service_id": self.service_id,
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "requested_by": self.requested_by,
            "requested_at": iso(self.requested_at),
            "status": self.status,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": iso(self.reviewed_at),
            "comments": self.comments,
        }
