#!/usr/bin/env python3
"""
Example script that submits every text file in a directory to a running grepbase service.

Usage:
    python scripts/ingest_directory.py ./transcripts \
        --source youtube \
        --publisher "Some Channel" \
        --api-url http://localhost:8080 \
        --wait
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Dict, List

import httpx


def collect_files(directory: Path, pattern: str) -> List[Path]:
    """Return matching files sorted by name."""
    return sorted(path for path in directory.glob(pattern) if path.is_file())


def submit(client: httpx.Client, api_url: str, payload: Dict) -> Dict:
    response = client.post(f"{api_url}/api/v1/documents", json=payload)
    if response.status_code not in (201, 409, 422):
        response.raise_for_status()
    return response.json()


def wait_for_queue(client: httpx.Client, api_url: str, timeout: float) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        health = client.get(f"{api_url}/api/v1/health").json()
        print(f"Queue: {health['queue_size']} pending, {health['in_flight']} in flight")
        if health["queue_size"] == 0 and health["in_flight"] == 0:
            return True
        time.sleep(2)
    return False


def main() -> None:
    parser = argparse.ArgumentParser(description="Ingest a directory of text files into grepbase")
    parser.add_argument("directory", type=Path)
    parser.add_argument("--source", required=True, help="Top-level source category")
    parser.add_argument("--publisher", help="Optional sub-category")
    parser.add_argument("--pattern", default="*.txt")
    parser.add_argument("--overwrite", action="store_true")
    parser.add_argument("--api-url", default="http://localhost:8080")
    parser.add_argument("--wait", action="store_true", help="Poll until the processing queue drains")
    parser.add_argument("--timeout", type=float, default=600)
    args = parser.parse_args()

    files = collect_files(args.directory, args.pattern)
    if not files:
        print(f"No files matching {args.pattern} in {args.directory}")
        sys.exit(1)

    added = duplicates = failed = 0
    with httpx.Client(timeout=30) as client:
        for path in files:
            payload = {
                "content": path.read_text(encoding="utf-8"),
                "format": "text",
                "label": path.stem.replace("_", " "),
                "source": args.source,
                "overwrite": args.overwrite,
            }
            if args.publisher:
                payload["publisher"] = args.publisher

            try:
                result = submit(client, args.api_url, payload)
            except httpx.HTTPError as e:
                print(f"Error: {path.name}: {e}")
                failed += 1
                continue

            if result.get("success"):
                added += 1
                print(f"Added {path.name} -> {result['ref']}")
            elif result.get("duplicate"):
                duplicates += 1
                print(f"Skipped {path.name}: already stored")
            else:
                failed += 1
                print(f"Rejected {path.name}: {result.get('message')}")

        print(f"\n{added} added, {duplicates} duplicate, {failed} failed")

        if args.wait and added and not wait_for_queue(client, args.api_url, args.timeout):
            print("Timed out waiting for enrichment to finish")
            sys.exit(1)


if __name__ == "__main__":
    main()
