"""Seed script for development data.

Run with:  python -m leave_ledger.seed
Requires the API to be running at BASE_URL.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date, timedelta

import httpx

logger = logging.getLogger(__name__)

BASE_URL = "http://localhost:8000"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

# Well-known employee UUIDs
ASHA_ID = "00000000-0000-0000-0000-000000000002"
RAVI_ID = "00000000-0000-0000-0000-000000000003"
MEERA_ID = "00000000-0000-0000-0000-000000000004"

EMPLOYEES = [
    {
        "id": ADMIN_USER_ID,
        "firstName": "Admin",
        "lastName": "User",
        "email": "admin@example.com",
        "department": "HR",
        "position": "HR Manager",
        "role": "admin",
        "monthlySalary": 90000,
        "startDate": "2022-04-01",
    },
    {
        "id": ASHA_ID,
        "firstName": "Asha",
        "lastName": "Verma",
        "email": "asha.verma@example.com",
        "department": "Engineering",
        "position": "Software Engineer",
        "role": "employee",
        "monthlySalary": 60000,
        "startDate": "2023-06-12",
    },
    {
        "id": RAVI_ID,
        "firstName": "Ravi",
        "lastName": "Kumar",
        "email": "ravi.kumar@example.com",
        "department": "Engineering",
        "position": "Engineering Manager",
        "role": "manager",
        "monthlySalary": 110000,
        "startDate": "2021-09-01",
    },
    {
        "id": MEERA_ID,
        "firstName": "Meera",
        "lastName": "Nair",
        "email": "meera.nair@example.com",
        "department": "Finance",
        "position": "Accountant",
        "role": "employee",
        "monthlySalary": 55000,
        "startDate": "2024-01-08",
    },
]

ALLOCATION = {"sick": 2, "casual": 2, "paid": 2}

# (employee_id, type, days from today to start, length in days, reason, approve)
LEAVES = [
    (ASHA_ID, "Casual", 7, 1, "Family function", True),
    (ASHA_ID, "Sick", 14, 2, "Dental surgery", False),
    (MEERA_ID, "Paid", 10, 2, "Vacation", True),
    (MEERA_ID, "Unpaid", 30, 3, "Extended travel", False),
]


def _check(resp: httpx.Response, what: str) -> dict:
    if resp.status_code >= 400:
        logger.error("%s failed: %d %s", what, resp.status_code, resp.text)
        sys.exit(1)
    return resp.json() if resp.content else {}


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed the employee directory."""
    logger.info("Seeding employees")
    for employee in EMPLOYEES:
        body = {k: v for k, v in employee.items() if k != "id"}
        resp = await client.put(f"{BASE_URL}/employees/{employee['id']}", json=body, headers=HEADERS)
        _check(resp, f"employee {employee['email']}")


async def seed_allocation(client: httpx.AsyncClient) -> None:
    """Save the per-quarter allocation."""
    logger.info("Seeding leave allocation %s", ALLOCATION)
    resp = await client.put(f"{BASE_URL}/leave-allocations", json=ALLOCATION, headers=HEADERS)
    _check(resp, "allocation")


async def seed_leaves(client: httpx.AsyncClient) -> None:
    """File leave requests and approve some of them."""
    logger.info("Seeding leave requests")
    today = date.today()
    for employee_id, leave_type, offset, length, reason, approve in LEAVES:
        start = today + timedelta(days=offset)
        end = start + timedelta(days=length - 1)
        resp = await client.post(
            f"{BASE_URL}/leaves",
            json={
                "employeeId": employee_id,
                "type": leave_type,
                "from": start.isoformat(),
                "to": end.isoformat(),
                "reason": reason,
            },
            headers=HEADERS,
        )
        if resp.status_code == 400:
            logger.warning("Skipping %s leave for %s: %s", leave_type, employee_id, resp.json().get("detail"))
            continue
        leave = _check(resp, f"{leave_type} leave for {employee_id}")
        if approve:
            resp = await client.put(f"{BASE_URL}/leaves/{leave['id']}", json={"status": "Approved"}, headers=HEADERS)
            _check(resp, f"approve leave {leave['id']}")


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            await client.get(f"{BASE_URL}/health")
        except httpx.ConnectError:
            logger.error("API not reachable at %s", BASE_URL)
            sys.exit(1)
        await seed_employees(client)
        await seed_allocation(client)
        await seed_leaves(client)
    logger.info("Seed complete")


if __name__ == "__main__":
    asyncio.run(main())
