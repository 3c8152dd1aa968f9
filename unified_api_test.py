#!/usr/bin/env python3
"""
Live smoke test for a running LabDesk server.

Logs in with the configured admin account, walks every API endpoint
once (seed the catalog, register a patient, enter results, print, back
up) and reports the failures.  Data it creates is removed at the end
by deleting the smoke patient and expenses.

    LAB_BASE_URL=http://127.0.0.1:8000 LAB_ADMIN_USERNAME=admin \
        LAB_ADMIN_PASSWORD=... python unified_api_test.py
"""
import os
import sys
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import requests

BASE_URL = os.getenv("LAB_BASE_URL", "http://127.0.0.1:8000")
USERNAME = os.getenv("LAB_ADMIN_USERNAME", "admin")
PASSWORD = os.getenv("LAB_ADMIN_PASSWORD", "")


@dataclass
class EndpointCheck:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    description: str = ""


class SmokeTester:
    def __init__(self):
        self.session = requests.Session()
        self.results: List[EndpointCheck] = []

    @property
    def errors(self) -> List[EndpointCheck]:
        return [r for r in self.results if not r.success]

    def login(self) -> bool:
        print(f"🔐 Logging in as {USERNAME}...")
        r = self.session.post(f"{BASE_URL}/api/login", json={"username": USERNAME, "password": PASSWORD})
        if r.status_code != 200:
            print(f"❌ Login failed: {r.status_code} - {r.text[:100]}")
            return False
        # session auth checks CSRF on unsafe methods
        token = self.session.cookies.get("csrftoken")
        if token:
            self.session.headers["X-CSRFToken"] = token
        print("✅ Logged in")
        return True

    def call(self, method: str, endpoint: str, data: Any = None, params: Optional[Dict] = None,
             expected: tuple = (200, 201, 204), description: str = "") -> Optional[requests.Response]:
        start = time.time()
        try:
            r = self.session.request(method, f"{BASE_URL}{endpoint}", json=data, params=params, timeout=15)
        except requests.RequestException as e:
            elapsed = time.time() - start
            self.results.append(EndpointCheck(False, endpoint, method, 0, elapsed, str(e), description))
            print(f"❌ {method} {endpoint} - {e}")
            return None
        elapsed = time.time() - start
        ok = r.status_code in expected
        self.results.append(EndpointCheck(ok, endpoint, method, r.status_code, elapsed,
                                          "" if ok else r.text[:200], description))
        mark = "✅" if ok else "❌"
        print(f"{mark} {method} {endpoint} - {r.status_code} ({elapsed:.2f}s)")
        return r

    def run(self) -> None:
        today = date.today().isoformat()
        self.call("GET", "/healthz", description="health check")
        self.call("GET", "/api/session", description="session probe")
        self.call("POST", "/api/tests/initialize-defaults", description="seed catalog")
        self.call("POST", "/api/tests/add-urine-test", description="urine test")
        tests = self.call("GET", "/api/tests")
        catalog = tests.json() if tests is not None and tests.ok else []
        picked = [t["id"] for t in catalog[:3]]
        if not picked:
            print("⚠️  Empty catalog, skipping patient flow")
            return

        reg = self.call("POST", "/api/patients/register", {
            "name": "Smoke Test Patient", "source": "smoke", "testIds": picked, "visitDate": today,
        }, description="register patient")
        if reg is None or not reg.ok:
            return
        body = reg.json()
        patient_id, visit_id = body["patient"]["id"], body["visit"]["id"]
        self.call("GET", f"/api/patients/{patient_id}")
        self.call("GET", "/api/visits", params={"date": today})
        self.call("GET", "/api/test-results", params={"visitId": visit_id})
        self.call("PUT", "/api/test-results/batch", {
            "updates": [{"id": r["id"], "data": {"result": "ok"}} for r in body["results"]],
        }, description="batch result entry")
        self.call("GET", f"/api/visits/{visit_id}/print", description="result sheet")

        expense = self.call("POST", "/api/expenses", {"name": "Smoke expense", "amount": 1, "date": today})
        self.call("GET", "/api/reports/daily", params={"date": today})
        self.call("POST", "/api/reports/daily/print", {"date": today, "notes": []}, description="report print")
        self.call("GET", "/api/settings")
        self.call("GET", "/api/dashboard-layouts")
        self.call("GET", "/api/users")
        self.call("GET", "/api/data/export", description="backup export")

        # cleanup
        if expense is not None and expense.ok:
            self.call("DELETE", f"/api/expenses/{expense.json()['id']}")
        self.call("DELETE", f"/api/patients/{patient_id}")
        self.call("POST", "/api/logout")

    def report(self) -> None:
        total = len(self.results)
        failed = self.errors
        rate = (total - len(failed)) / total * 100 if total else 0
        print("\n🎯 Summary:")
        print(f"  checks:  {total}")
        print(f"  failed:  {len(failed)}")
        print(f"  success: {rate:.1f}%")
        for i, e in enumerate(failed, 1):
            print(f"{i}. {e.method} {e.endpoint} [{e.status_code}] {e.description}")
            print(f"   {e.error_message}")


def main() -> int:
    tester = SmokeTester()
    if not tester.login():
        return 1
    tester.run()
    tester.report()
    return 1 if tester.errors else 0


if __name__ == "__main__":
    sys.exit(main())
