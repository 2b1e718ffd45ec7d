import os
import json
import uuid

import requests

# Configuration
BASE_URL = os.getenv("USSD_API_URL", "http://127.0.0.1:3001")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password12345!")
REP_PASSWORD = os.getenv("REP_PASSWORD", "password54321!")
API_KEY = os.getenv("API_KEY")

def print_header(title):
    print(f"\n{'='*60}")
    print(f" {title}")
    print(f"{'='*60}")

def print_response(response, action):
    status_emoji = "✅" if response.status_code in [200, 201] else "❌"
    print(f"\n{status_emoji} --- {action} ---")
    print(f"Status: {response.status_code}")
    try:
        print(f"Body: {json.dumps(response.json(), indent=2)}")
    except ValueError:
        print(f"Body: {response.text}")
    return response

def login(session, role, display_name, password):
    resp = session.post(f"{BASE_URL}/api/auth/login", json={
        "role": role, "display_name": display_name, "password": password,
    })
    print_response(resp, f"Login as {role}")
    if resp.status_code != 200:
        return None
    headers = {"Authorization": f"Bearer {resp.json()['data']['token']}"}
    if API_KEY:
        headers["X-API-Key"] = API_KEY
    return headers

def run_tests():
    session = requests.Session()

    # ==========================================
    # 1. READ-ONLY LOOKUPS
    # ==========================================
    print_header("TESTING LOOKUP ENDPOINTS")

    resp = session.get(f"{BASE_URL}/health")
    print_response(resp, "Health")
    if resp.status_code != 200:
        print("❌ Health check failed. Aborting tests. (Is the server running?)")
        return

    print_response(session.get(f"{BASE_URL}/api/lookup/check_balance/mtn"), "Lookup check_balance/mtn")
    print_response(session.get(f"{BASE_URL}/api/lookup/check_balance/xx"), "Lookup invalid network (expect 400)")
    print_response(session.get(f"{BASE_URL}/api/services"), "List services")
    print_response(session.get(f"{BASE_URL}/api/services", params={"network": "glo"}), "List services for glo")
    print_response(session.get(f"{BASE_URL}/api/compare/borrow_credit"), "Compare borrow_credit")

    # ==========================================
    # 2. ADMIN DATA CRUD
    # ==========================================
    print_header("TESTING ADMIN DATA ENDPOINTS")

    admin = login(session, "admin", "Smoke Admin", ADMIN_PASSWORD)
    if not admin:
        print("❌ Admin login failed. Aborting tests.")
        return

    service_id = f"smoke_{uuid.uuid4().hex[:6]}"
    resp = session.post(f"{BASE_URL}/api/data", json={
        "service_id": service_id,
        "service_name": "Smoke Test Service",
        "mtn": {"code": "*000#", "explanation": "Smoke test"},
    }, headers=admin)
    print_response(resp, "Create service")

    resp = session.put(f"{BASE_URL}/api/data/{service_id}", json={"glo": {"code": "*001#"}}, headers=admin)
    print_response(resp, "Update service")

    # ==========================================
    # 3. CHANGE REQUEST WORKFLOW
    # ==========================================
    print_header("TESTING CHANGE REQUEST WORKFLOW")

    rep = login(session, "mtn", "Smoke MTN Rep", REP_PASSWORD)
    if rep:
        resp = session.post(f"{BASE_URL}/api/change-requests", json={
            "service_id": service_id, "field": "telcos.mtn.code", "new_value": "*002#",
        }, headers=rep)
        print_response(resp, "Create draft")

        if resp.status_code == 200:
            request_id = resp.json()["data"]["id"]
            print_response(session.post(f"{BASE_URL}/api/change-requests/{request_id}/submit", headers=rep), "Submit")
            print_response(session.post(f"{BASE_URL}/api/change-requests/{request_id}/approve", headers=admin), "Approve")
            print_response(session.get(f"{BASE_URL}/api/lookup/{service_id}/mtn"), "Lookup after approval")

    resp = session.delete(f"{BASE_URL}/api/data/{service_id}", headers=admin)
    print_response(resp, "Delete service")

if __name__ == "__main__":
    run_tests()
