from enum import Enum

from utils.errors import Forbidden

NETWORKS = ("mtn", "telecel", "airteltigo", "glo")
FIELD_KEYS = ("code", "explanation")


class Role(Enum):
    ADMIN = "admin"
    MTN = "mtn"
    TELECEL = "telecel"
    AIRTELTIGO = "airteltigo"
    GLO = "glo"

    @property
    def is_admin(self):
        return self is Role.ADMIN

    @property
    def network(self):
        """Network a representative speaks for, None for the admin."""
        return None if self.is_admin else self.value

    @property
    def label(self):
        return ROLE_LABEL[self]


ROLE_LABEL = {
    Role.ADMIN: "Admin",
    Role.MTN: "MTN Rep",
    Role.TELECEL: "Telecel Rep",
    Role.AIRTELTIGO: "AirtelTigo Rep",
    Role.GLO: "Glo Rep",
}


class Action(Enum):
    MANAGE_SERVICES = "MANAGE_SERVICES"     # create / rename / delete / toggle active
    EDIT_FIELD_DIRECT = "EDIT_FIELD_DIRECT"
    PROPOSE_CHANGE = "PROPOSE_CHANGE"
    REVIEW_CHANGE = "REVIEW_CHANGE"
    IMPORT_FULL = "IMPORT_FULL"
    IMPORT_SUBSET = "IMPORT_SUBSET"
    MANAGE_VERSIONS = "MANAGE_VERSIONS"


ADMIN_ACTIONS = {
    Action.MANAGE_SERVICES,
    Action.EDIT_FIELD_DIRECT,
    Action.REVIEW_CHANGE,
    Action.IMPORT_FULL,
    Action.MANAGE_VERSIONS,
}

# Rep actions are additionally scoped to the rep's own network
REP_ACTIONS = {
    Action.PROPOSE_CHANGE,
    Action.IMPORT_SUBSET,
}


class Session:
    """The acting role plus the display name it signed in with."""

    def __init__(self, role, display_name):
        self.role = role if isinstance(role, Role) else Role(role)
        self.display_name = display_name

    @property
    def is_admin(self):
        return self.role.is_admin

    def to_dict(self):
        return {
            "role": self.role.value,
            "role_label": self.role.label,
            "display_name": self.display_name,
        }

    def __repr__(self):
        return f"<Session {self.role.value}:{self.display_name}>"


def authorize(session, action, network=None):
    """
    Single authorization check consulted by every mutating entry point.
    Raises Forbidden when the session's role may not perform `action`
    (for rep actions, on `network`).
    """
    if session is None:
        raise Forbidden("No active session")

    if session.role.is_admin:
        if action in ADMIN_ACTIONS:
            return
        raise Forbidden(f"Admin cannot perform {action.value}")

    if action not in REP_ACTIONS:
        raise Forbidden(f"{session.role.label} cannot perform {action.value}")

    if network is not None and network != session.role.network:
        raise Forbidden(f"{session.role.label} may only change {session.role.network} fields")
