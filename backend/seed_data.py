"""
Seed Script - Loads sample_data.json into Demo Pass via the API.

Creates the sample batches, then enrolls the sample students. Batches or
enrollments that already exist are reported and skipped, so the script
can be re-run safely.

Usage:
    python seed_data.py                              # Uses default URL
    python seed_data.py http://localhost:8000        # Custom API URL
"""

import json
import os
import sys

import httpx


def post_json(client, url, data):
    resp = client.post(url, json=data)
    try:
        body = resp.json()
    except ValueError:
        body = {"message": resp.text.strip() or resp.reason_phrase}
    return resp.status_code, body


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")

    data_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_data.json")
    if not os.path.exists(data_file):
        print("Error: Could not find sample_data.json")
        sys.exit(1)

    print(f"Loading data from: {data_file}")
    with open(data_file, 'r') as f:
        sample = json.load(f)

    with httpx.Client(timeout=30.0) as client:
        print("=" * 60)
        print("BATCHES")
        print("=" * 60)
        for batch in sample.get("batches", []):
            status, body = post_json(client, f"{api_url}/api/batches", batch)
            if status == 201:
                print(f"  ✅ {batch['batchId']}: created")
            else:
                print(f"  ⏭  {batch['batchId']}: {body.get('message', status)}")

        print()
        print("=" * 60)
        print("ENROLLMENTS")
        print("=" * 60)
        for enrollment in sample.get("enrollments", []):
            status, body = post_json(client, f"{api_url}/api/enrollments", enrollment)
            label = f"{enrollment['name']} → {enrollment['batchId']}"
            if status == 201:
                token = body["data"]["qrCodeData"]
                print(f"  ✅ {label} (pass: {token[:8]}...)")
            else:
                print(f"  ⏭  {label}: {body.get('message', status)}")

    print()
    print(f"✅ Seeding complete! API docs at {api_url}/docs")


if __name__ == "__main__":
    main()
