#!/usr/bin/env python3
"""
Booking and refund dispute flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens are minted locally with the backend's JWT settings, so run it with the
same environment (.env) as the server.

Usage:
    python scripts/flow_book_and_dispute.py --service-id 1 --customer-id 3 --agency-user-id 2 --admin-id 1
    python scripts/flow_book_and_dispute.py --service-id 1 --customer-id 3 --agency-user-id 2 --admin-id 1 --capacity 2
    python scripts/flow_book_and_dispute.py --customer-id 3 --agency-user-id 2 --admin-id 1

Flow:
    0. Agency publishes a service (only when --service-id is omitted)
    1. Agency opens an availability window covering now
    2. Customer books the service
    3. Customer fetches the e-ticket
    4. Agency confirms the booking
    5. Customer requests a refund
    6. Agency responds to the dispute
    7. Admin resolves the dispute
"""

import argparse
import json
import sys
from datetime import UTC, datetime, timedelta

import httpx

from getlost.core.security import create_user_token

BASE_URL = "http://localhost:8000"


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    global BASE_URL

    parser = argparse.ArgumentParser(description="Booking and refund dispute flow")
    parser.add_argument("--service-id", type=int, help="Existing service ID (publishes a new one if omitted)")
    parser.add_argument("--customer-id", type=int, required=True, help="Customer user ID")
    parser.add_argument("--agency-user-id", type=int, required=True, help="User ID of the agency owning the service")
    parser.add_argument("--admin-id", type=int, required=True, help="Web admin user ID")
    parser.add_argument("--capacity", type=int, default=5, help="Capacity of the new window")
    parser.add_argument("--base-url", default=BASE_URL, help="Backend base URL")
    parser.add_argument("--reason", default="Tour was cut short by half a day", help="Refund reason")
    args = parser.parse_args()
    BASE_URL = args.base_url

    customer_token = create_user_token(args.customer_id, "customer")
    agency_token = create_user_token(args.agency_user_id, "agency")
    admin_token = create_user_token(args.admin_id, "webadmin")

    if args.service_id is None:
        print_step(0, "Publish service")
        service_result = api_request(agency_token, "POST", "/api/v1/services/", {
            "title": "Flow Script Desert Tour",
            "price": "99.00",
            "location": "Wadi Rum",
            "duration": 2,
        })
        if not print_result(service_result, ["id", "agency_id", "title", "price"]):
            sys.exit(1)
        args.service_id = service_result["data"]["id"]

    # Step 1: Open window
    print_step(1, "Open availability window")
    now = datetime.now(UTC)
    window_result = api_request(agency_token, "POST", f"/api/v1/services/{args.service_id}/availability", {
        "start_date": (now - timedelta(hours=1)).isoformat(),
        "end_date": (now + timedelta(days=7)).isoformat(),
        "capacity": args.capacity,
    })
    if not print_result(window_result, ["id", "start_date", "end_date", "capacity", "remaining_spots"]):
        sys.exit(1)

    # Step 2: Book
    print_step(2, "Book service")
    booking_result = api_request(customer_token, "POST", f"/api/v1/services/{args.service_id}/book")
    if not print_result(booking_result, ["id", "status", "window_id", "booking_date"]):
        sys.exit(1)
    booking_id = booking_result["data"]["id"]
    print(f"\nBooking created: {booking_id}")

    # Step 3: E-ticket
    print_step(3, "Fetch e-ticket")
    ticket_result = api_request(customer_token, "GET", f"/api/v1/bookings/{booking_id}/eticket")
    if not print_result(ticket_result, ["ticket_code", "issued_at"]):
        sys.exit(1)
    ticket_code = ticket_result["data"]["ticket_code"]

    # Step 4: Confirm
    print_step(4, "Confirm booking")
    confirm_result = api_request(agency_token, "POST", f"/api/v1/bookings/{booking_id}/confirm")
    if not print_result(confirm_result, ["id", "status", "confirmed_at"]):
        sys.exit(1)
    print("\nBooking CONFIRMED")

    # Step 5: Refund request
    print_step(5, "Request refund")
    refund_result = api_request(customer_token, "POST", f"/api/v1/bookings/{booking_id}/refund", {
        "reason": args.reason,
    })
    if not print_result(refund_result, ["id", "booking_id", "status", "reason"]):
        sys.exit(1)
    dispute_id = refund_result["data"]["id"]

    # Step 6: Agency response
    print_step(6, "Agency responds")
    respond_result = api_request(agency_token, "POST", f"/api/v1/refunds/{dispute_id}/respond", {
        "response": "Weather closed the last site; partial refund offered",
    })
    if not print_result(respond_result, ["id", "status", "agency_response"]):
        sys.exit(1)

    # Step 7: Admin verdict
    print_step(7, "Admin resolves dispute")
    verdict_result = api_request(admin_token, "POST", f"/api/v1/refunds/{dispute_id}/verdict", {
        "verdict": "Refund half of the booking price",
    })
    if not print_result(verdict_result, ["id", "status", "admin_verdict", "resolved_at"]):
        sys.exit(1)

    # Final summary
    print("\n" + "="*60)
    print("BOOK & DISPUTE FLOW COMPLETE")
    print("="*60)
    print(f"Booking:        {booking_id}")
    print(f"Ticket:         {ticket_code}")
    print(f"Dispute:        {dispute_id}")
    print("Final Status:   RESOLVED")


if __name__ == "__main__":
    main()
