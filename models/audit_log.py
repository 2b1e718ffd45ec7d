from models import db
from utils.timeutils import utc_now, iso

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)

    role = db.Column(db.String(20))
    display_name = db.Column(db.String(100))

    action = db.Column(db.String(100), nullable=False)
    entity = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.String(100), nullable=True)

    method = db.Column(db.String(10))
    path = db.Column(db.String(255))
    status_code = db.Column(db.Integer)
    request_id = db.Column(db.String(64))

    ip_address = db.Column(db.String(50))
    user_agent = db.Column(db.String(255))

    meta = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=utc_now)

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "display_name": self.display_name,
            "action": self.action,
            "entity": self.entity,
            "entity_id": self.entity_id,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "meta": self.meta,
            "created_at": iso(self.created_at),
        }
