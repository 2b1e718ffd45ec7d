FIELD = "telcos.mtn.code"


def _draft(client, headers, value="*125#", field=FIELD, service_id="check_balance"):
    resp = client.post("/api/change-requests", json={
        "service_id": service_id, "field": field, "new_value": value,
    }, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


class TestWorkflow:

    def test_full_approval(self, client, mtn_headers, admin_headers):
        cr = _draft(client, mtn_headers)
        resp = client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        assert resp.get_json()["data"]["status"] == "pending"

        pending = client.get("/api/change-requests?status=pending", headers=admin_headers).get_json()
        assert list(pending["data"]) == [cr["id"]]

        resp = client.post(f"/api/change-requests/{cr['id']}/approve", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "approved"
        assert client.get("/api/lookup/check_balance/mtn").get_json()["code"] == "*125#"

    def test_reject_with_comment(self, client, mtn_headers, admin_headers):
        cr = _draft(client, mtn_headers)
        client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        resp = client.post(f"/api/change-requests/{cr['id']}/reject",
                           json={"comment": "Wrong code"}, headers=admin_headers)
        body = resp.get_json()["data"]
        assert body["status"] == "rejected"
        assert body["comments"] == "Wrong code"
        assert client.get("/api/lookup/check_balance/mtn").get_json()["code"] == "*124#"

    def test_recall_and_cancel(self, client, mtn_headers):
        cr = _draft(client, mtn_headers)
        client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        resp = client.post(f"/api/change-requests/{cr['id']}/recall", headers=mtn_headers)
        assert resp.get_json()["data"]["status"] == "draft"

        assert client.delete(f"/api/change-requests/{cr['id']}", headers=mtn_headers).status_code == 200
        assert client.get(f"/api/change-requests/{cr['id']}", headers=mtn_headers).status_code == 404

    def test_precondition_failures_are_404(self, client, mtn_headers, admin_headers):
        cr = _draft(client, mtn_headers)
        assert client.post(f"/api/change-requests/{cr['id']}/approve", headers=admin_headers).status_code == 404
        assert client.post(f"/api/change-requests/{cr['id']}/recall", headers=mtn_headers).status_code == 404
        assert client.post("/api/change-requests/cr_missing/submit", headers=mtn_headers).status_code == 404

    def test_rep_cannot_approve(self, client, mtn_headers):
        cr = _draft(client, mtn_headers)
        client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        assert client.post(f"/api/change-requests/{cr['id']}/approve", headers=mtn_headers).status_code == 403

    def test_other_rep_cannot_submit(self, client, mtn_headers, telecel_headers):
        cr = _draft(client, mtn_headers)
        assert client.post(f"/api/change-requests/{cr['id']}/submit", headers=telecel_headers).status_code == 403

    def test_telecel_cannot_draft_mtn_field(self, client, telecel_headers):
        resp = client.post("/api/change-requests", json={
            "service_id": "check_balance", "field": FIELD, "new_value": "*125#",
        }, headers=telecel_headers)
        assert resp.status_code == 403

    def test_validation(self, client, mtn_headers):
        resp = client.post("/api/change-requests", json={"field": FIELD}, headers=mtn_headers)
        assert resp.status_code == 400
        resp = client.post("/api/change-requests", json={
            "service_id": "check_balance", "field": "telcos.mtn.color",
        }, headers=mtn_headers)
        assert resp.status_code == 400
        assert client.get("/api/change-requests?status=open", headers=mtn_headers).status_code == 400

    def test_second_pending_conflicts(self, client, mtn_headers):
        first = _draft(client, mtn_headers)
        client.post(f"/api/change-requests/{first['id']}/submit", headers=mtn_headers)
        second = _draft(client, mtn_headers, value="*126#")
        resp = client.post(f"/api/change-requests/{second['id']}/submit", headers=mtn_headers)
        assert resp.status_code == 409

    def test_approve_for_deleted_service(self, client, mtn_headers, admin_headers):
        cr = _draft(client, mtn_headers, service_id="borrow_credit")
        client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        client.delete("/api/data/borrow_credit", headers=admin_headers)
        resp = client.post(f"/api/change-requests/{cr['id']}/approve", headers=admin_headers)
        assert resp.status_code == 404
        status = client.get(f"/api/change-requests/{cr['id']}", headers=admin_headers).get_json()["data"]["status"]
        assert status == "rejected"

    def test_recreated_service_ignores_old_request(self, client, mtn_headers, admin_headers):
        cr = _draft(client, mtn_headers, value="*999#", service_id="borrow_credit")
        client.post(f"/api/change-requests/{cr['id']}/submit", headers=mtn_headers)
        client.delete("/api/data/borrow_credit", headers=admin_headers)
        client.post("/api/data", json={
            "service_id": "borrow_credit", "service_name": "Borrow",
            "mtn": {"code": "*5#", "explanation": "fresh"},
        }, headers=admin_headers)

        resp = client.post(f"/api/change-requests/{cr['id']}/approve", headers=admin_headers)
        assert resp.status_code == 404
        assert client.get("/api/lookup/borrow_credit/mtn").get_json()["code"] == "*5#"
