#!/usr/bin/env python3
"""
Smoke test against a running mock payment service.

Run:
  python -m payment_service            # in another shell
  python e2e_smoke.py

Optional env:
  PAYMENT_BASE=http://localhost:3000
  API_PREFIX=/api
  MAX_CHECKOUT_ATTEMPTS=25
  DEBUG=1

Checkout outcomes are random, so the happy path retries checkout with fresh
order ids until one is authorized.
"""

from __future__ import annotations

import os
import sys
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests


# =========================
# Simple CLI UI (ANSI)
# =========================

class Style:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


def section_title(text: str):
    print(f"\n{Style.BLUE}{Style.BOLD}== {text} =={Style.RESET}")


def info(msg: str):
    print(f"{Style.CYAN}ℹ {msg}{Style.RESET}")


def warn(msg: str):
    print(f"{Style.YELLOW}⚠ {msg}{Style.RESET}")


def ok(msg: str):
    print(f"{Style.GREEN}✔ {msg}{Style.RESET}")


def fail(msg: str):
    print(f"{Style.RED}✘ {msg}{Style.RESET}")


# =========================
# Config
# =========================

PAYMENT_BASE = os.getenv("PAYMENT_BASE", "http://localhost:3000")
API_PREFIX = os.getenv("API_PREFIX", "/api")
MAX_CHECKOUT_ATTEMPTS = int(os.getenv("MAX_CHECKOUT_ATTEMPTS", "25"))
DEBUG = os.getenv("DEBUG", "0").strip() in {"1", "true", "True", "YES", "yes"}

API = PAYMENT_BASE + API_PREFIX


def debug(msg: str):
    if DEBUG:
        print(f"{Style.GRAY}… {msg}{Style.RESET}")


@dataclass
class CheckResult:
    name: str
    success: bool
    details: str = ""


# =========================
# HTTP helpers
# =========================

def http(method: str, url: str, **kwargs) -> requests.Response:
    kwargs.setdefault("timeout", 8)
    debug(f"{method} {url} {kwargs.get('json', '')}")
    return requests.request(method, url, **kwargs)


def wait_for_health(timeout: int = 30) -> bool:
    start = time.time()
    while time.time() - start < timeout:
        try:
            if http("GET", f"{PAYMENT_BASE}/health").status_code == 200:
                ok("Payment service is healthy.")
                return True
        except requests.exceptions.RequestException as e:
            debug(f"not ready: {e}")
        time.sleep(1)
    fail(f"Payment service did not become healthy in {timeout} seconds.")
    return False


def expect(resp: requests.Response, status: int, ctx: str) -> Dict[str, Any]:
    if resp.status_code != status:
        raise AssertionError(f"{ctx}: expected HTTP {status}, got {resp.status_code}, body={resp.text}")
    return resp.json()


# =========================
# Checks
# =========================

def create_customer() -> int:
    body = expect(http("POST", f"{API}/customers", json={"name": "Smoke Tester"}), 201, "create customer")
    return body["customer_id"]


def checkout_until_authorized(customer_id: int) -> Optional[str]:
    for attempt in range(1, MAX_CHECKOUT_ATTEMPTS + 1):
        order_id = f"SMOKE-{uuid.uuid4().hex[:8]}"
        body = expect(
            http("POST", f"{API}/orders/checkout", json={"orderId": order_id, "customerId": customer_id, "amount": 120}),
            200,
            "checkout",
        )
        info(f"attempt {attempt}: {order_id} -> {body['result']} / {body['status']}")
        if body["status"] == "AUTHORIZED":
            return order_id
    return None


def check_happy_path() -> List[CheckResult]:
    section_title("Checkout → Settle → Detail")
    results: List[CheckResult] = []
    try:
        customer_id = create_customer()
        ok(f"customer {customer_id} created")

        order_id = checkout_until_authorized(customer_id)
        if order_id is None:
            results.append(CheckResult("Checkout", False, f"no authorization in {MAX_CHECKOUT_ATTEMPTS} attempts"))
            return results
        results.append(CheckResult("Checkout", True, order_id))

        body = expect(http("POST", f"{API}/payments/settle", json={"orderId": order_id, "amount": 120}), 200, "settle")
        results.append(CheckResult("Settle", body == {"orderId": order_id, "paymentStatus": "SETTLED"}, str(body)))

        detail = expect(http("GET", f"{API}/orders/{order_id}"), 200, "order detail")
        settled = detail["order"]["status"] == "SETTLED" and detail["lastSettlement"] is not None
        results.append(CheckResult("Order detail", settled, str(detail["order"])))

        resp = http("POST", f"{API}/payments/settle", json={"orderId": order_id, "amount": 120})
        results.append(CheckResult("Second settle rejected", resp.status_code == 400, resp.text))
    except (AssertionError, requests.exceptions.RequestException) as e:
        results.append(CheckResult("Happy path", False, str(e)))
    return results


def check_error_paths() -> List[CheckResult]:
    section_title("Error paths")
    results: List[CheckResult] = []
    try:
        resp = http("POST", f"{API}/payments/settle", json={"orderId": f"MISSING-{uuid.uuid4().hex[:8]}", "amount": 50})
        results.append(CheckResult("Settle unknown order → 404", resp.status_code == 404, resp.text))

        resp = http("POST", f"{API}/orders/checkout", json={"orderId": "SMOKE-X", "amount": 10})
        results.append(CheckResult("Checkout missing customer → 400", resp.status_code == 400, resp.text))

        resp = http("DELETE", f"{API}/customers/1")
        results.append(CheckResult("Delete customer → 403", resp.status_code == 403, resp.text))
    except requests.exceptions.RequestException as e:
        results.append(CheckResult("Error paths", False, str(e)))
    return results


def check_stats() -> List[CheckResult]:
    section_title("Stats")
    try:
        body = expect(http("GET", f"{API}/stats"), 200, "stats")
    except (AssertionError, requests.exceptions.RequestException) as e:
        return [CheckResult("Stats", False, str(e))]
    info(f"totals={body['totals']} settled_total={body['settled_total']}")
    shaped = "ALL" in body["totals"] and len(body["recentOrders"]) <= 5
    return [CheckResult("Stats shape", shaped, str(body["totals"]))]


def print_summary(results: List[CheckResult]) -> int:
    section_title("Summary")
    failed = 0
    for r in results:
        (ok if r.success else fail)(f"{r.name}: {r.details}")
        failed += 0 if r.success else 1
    if failed:
        warn(f"{failed} of {len(results)} checks failed")
    else:
        ok(f"all {len(results)} checks passed")
    return 1 if failed else 0


def main() -> int:
    if not wait_for_health():
        return 1
    results: List[CheckResult] = []
    results += check_happy_path()
    results += check_error_paths()
    results += check_stats()
    return print_summary(results)


if __name__ == "__main__":
    sys.exit(main())
