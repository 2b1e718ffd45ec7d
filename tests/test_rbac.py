import pytest

from models.rbac import Role, Session, Action, authorize, NETWORKS
from utils.errors import Forbidden


class TestAuthorize:

    @pytest.mark.parametrize("action", [
        Action.MANAGE_SERVICES, Action.EDIT_FIELD_DIRECT, Action.REVIEW_CHANGE,
        Action.IMPORT_FULL, Action.MANAGE_VERSIONS,
    ])
    def test_admin_actions(self, action):
        authorize(Session(Role.ADMIN, "Ama"), action)
        with pytest.raises(Forbidden):
            authorize(Session(Role.GLO, "Yaw"), action, network="glo")

    @pytest.mark.parametrize("network", NETWORKS)
    def test_rep_limited_to_own_network(self, network):
        rep = Session(Role(network), "Rep")
        authorize(rep, Action.PROPOSE_CHANGE, network=network)
        for other in NETWORKS:
            if other != network:
                with pytest.raises(Forbidden):
                    authorize(rep, Action.PROPOSE_CHANGE, network=other)

    def test_no_session(self):
        with pytest.raises(Forbidden):
            authorize(None, Action.PROPOSE_CHANGE, network="mtn")

    def test_role_network(self):
        assert Role.ADMIN.network is None
        assert Role.AIRTELTIGO.network == "airteltigo"
        assert Session("telecel", "Esi").role is Role.TELECEL
