from config import TestConfig


class TestLogin:

    def test_admin_login_and_session(self, client):
        resp = client.post("/api/auth/login", json={
            "role": "admin", "display_name": "  Ama  ", "password": TestConfig.ADMIN_PASSWORD,
        })
        assert resp.status_code == 200
        token = resp.get_json()["data"]["token"]

        resp = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"role": "admin", "role_label": "Admin", "display_name": "Ama"}

    def test_rep_password_is_not_admin_password(self, client):
        resp = client.post("/api/auth/login", json={
            "role": "admin", "display_name": "Ama", "password": TestConfig.REP_PASSWORD,
        })
        assert resp.status_code == 401

    def test_display_name_required(self, client):
        resp = client.post("/api/auth/login", json={
            "role": "glo", "display_name": " ", "password": TestConfig.REP_PASSWORD,
        })
        assert resp.status_code == 400

    def test_unknown_role(self, client):
        resp = client.post("/api/auth/login", json={
            "role": "vodafone", "display_name": "X", "password": TestConfig.REP_PASSWORD,
        })
        assert resp.status_code == 400

    def test_missing_and_bad_tokens(self, client):
        assert client.get("/api/auth/session").status_code == 401
        resp = client.get("/api/auth/session", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
