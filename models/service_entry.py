from models import db
from models.rbac import NETWORKS
from utils.timeutils import utc_now, iso

class ServiceEntry(db.Model):
    __tablename__ = "service_entries"

    id = db.Column(db.Integer, primary_key=True)

    # Public key; renames update this column, network rows hang off `id`
    service_id = db.Column(db.String(100), unique=True, nullable=False, index=True)
    service_name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)  # admin guidance for reps, never exported

    active = db.Column(db.Boolean, default=True, nullable=False)
    last_updated = db.Column(db.DateTime, default=utc_now, nullable=False)

    codes = db.relationship(
        "ServiceNetworkCode",
        backref="service",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ServiceNetworkCode.network",
    )

    def network_code(self, network):
        for row in self.codes:
            if row.network == network:
                return row
        return None

    def telcos(self):
        """Network records present on this entry, in the fixed network order."""
        by_network = {row.network: row for row in self.codes}
        return {
            n: {"code": by_network[n].code, "explanation": by_network[n].explanation}
            for n in NETWORKS if n in by_network
        }

    def to_dict(self):
        return {
            "service_id": self.service_id,
            "service_name": self.service_name,
            "description": self.description,
            "telcos": self.telcos(),
            "active": bool(self.active),
            "last_updated": iso(self.last_updated),
        }

    def __repr__(self):
        return f"<ServiceEntry {self.service_id}>"


class ServiceNetworkCode(db.Model):
    __tablename__ = "service_network_codes"

    id = db.Column(db.Integer, primary_key=True)
    entry_id = db.Column(db.Integer, db.ForeignKey("service_entries.id"), nullable=False)

    network = db.Column(db.String(20), nullable=False)  # mtn / telecel / airteltigo / glo
    code = db.Column(db.String(100), nullable=False, default="")
    explanation = db.Column(db.Text, nullable=False, default="")

    __table_args__ = (db.UniqueConstraint("entry_id", "network", name="uq_service_network"),)
