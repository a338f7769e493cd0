#!/usr/bin/env python3
"""
Manual smoke check against a running GameTime server.
"""
import requests


def run_match_flow(base_url: str = "http://127.0.0.1:7122") -> None:
    """Record a short match and print the resulting summary."""
    print("Resetting match...")
    response = requests.post(f"{base_url}/api/reset")
    print(f"   Status: {response.status_code}")

    print("\n1. Starting clock...")
    response = requests.post(f"{base_url}/api/timer/start")
    print(f"   Status: {response.status_code}")

    print("\n2. Recording goals and events...")
    steps = [
        ("/api/goals", {"scorer_name": "Smith", "assist_name": "Jones", "match_second": 1200}),
        ("/api/events", {"event_type": "Yellow Card", "notes": "Late tackle", "match_second": 1500}),
        ("/api/goals/opposition", {"match_second": 1800}),
        ("/api/events", {"event_type": "Half Time"}),
    ]
    for path, payload in steps:
        response = requests.post(f"{base_url}{path}", json=payload)
        print(f"   {path}: {response.status_code} {response.json().get('notifications')}")

    print("\n3. Timeline:")
    response = requests.get(f"{base_url}/api/timeline")
    if response.status_code == 200:
        for row in response.json()["timeline"]:
            print(f"   {row['icon']} {row['time_label']}' - {row['summary']}")
    else:
        print(f"   Error: {response.text}")

    print("\n4. Share text:")
    response = requests.get(f"{base_url}/api/share")
    print(response.json().get("text"))


if __name__ == "__main__":
    run_match_flow()
