#!/usr/bin/env python3
"""
hardware_item_add.py

Purpose:
  Record one hardware item through the inventory JSON API.
  - Reports whether the item's name/brand/model already form a group, in which
    case the group's monthly cost applies instead of --cost.
  - Prints the saved record as JSON.

API:
  Base: http://localhost:8089/api/v1
  Cost lock: GET  /hardware/cost-lock?name=..&brand=..&model=..
  Create:    POST /hardware  -> body: {"name", "brand", "model", "serialNumber",
                                       "monthlyCost", "details"}

Examples:
  python hardware_item_add.py Laptop Dell X1 SN-0001 --cost 50
  python hardware_item_add.py Laptop Dell X1 SN-0002 -d "Loaned to accounting"
  INVENTORY_BASE_URL=http://inventory.local/api/v1 python hardware_item_add.py Phone Apple 15 SN-9

Exit codes:
  0 = created
  1 = refused by the server (missing field, duplicate serial) or other error
  2 = network/HTTP error
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict, Optional

import requests

DEFAULT_BASE_URL = "http://localhost:8089/api/v1"
RESOURCE_PATH = "hardware"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Add a hardware item to the inventory API.")
    p.add_argument("name", help="Hardware name (e.g. 'Laptop').")
    p.add_argument("brand", help="Brand (e.g. 'Dell').")
    p.add_argument("model", help="Model (e.g. 'Latitude 7440').")
    p.add_argument("serial", help="Serial number; must be unique across the inventory.")
    p.add_argument("--cost", type=float, default=0.0,
                   help="Monthly cost. Ignored when the group already exists.")
    p.add_argument("-d", "--details", default=None, help="Optional free-form details.")
    p.add_argument("--base-url", default=os.getenv("INVENTORY_BASE_URL", DEFAULT_BASE_URL),
                   help=f"Base API URL (default: env INVENTORY_BASE_URL or {DEFAULT_BASE_URL})")
    p.add_argument("--timeout", type=float, default=15.0,
                   help="HTTP timeout in seconds (default: 15)")
    p.add_argument("--no-verify-tls", action="store_true",
                   help="Disable TLS verification (use only for testing).")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Verbose logging to stderr.")
    return p.parse_args(argv)


def vprint(enabled: bool, *args: Any) -> None:
    if enabled:
        print(*args, file=sys.stderr)


def resource_url(base_url: str, *parts: str) -> str:
    return "/".join([base_url.rstrip("/"), RESOURCE_PATH, *parts])


def api_cost_lock(session: requests.Session, base_url: str, name: str, brand: str, model: str,
                  timeout: float, verify_tls: bool, verbose: bool) -> Dict[str, Any]:
    url = resource_url(base_url, "cost-lock")
    params = {"name": name, "brand": brand, "model": model}
    vprint(verbose, f"GET {url} params={params}")
    r = session.get(url, params=params, headers={"Accept": "application/json"},
                    timeout=timeout, verify=verify_tls)
    r.raise_for_status()
    return r.json()


def api_create_item(session: requests.Session, base_url: str, payload: Dict[str, Any],
                    timeout: float, verify_tls: bool, verbose: bool) -> requests.Response:
    url = resource_url(base_url)
    vprint(verbose, f"POST {url} json={payload}")
    return session.post(url, json=payload, headers={"Accept": "application/json"},
                        timeout=timeout, verify=verify_tls)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    verify_tls = not args.no_verify_tls
    payload: Dict[str, Any] = {
        "name": args.name,
        "brand": args.brand,
        "model": args.model,
        "serialNumber": args.serial,
        "monthlyCost": args.cost,
        "details": args.details,
    }

    session = requests.Session()
    try:
        lock = api_cost_lock(session, args.base_url, args.name, args.brand, args.model,
                             args.timeout, verify_tls, args.verbose)
        if lock.get("locked"):
            print(f"NOTE: group exists; monthly cost locked to {lock.get('monthlyCost')}", file=sys.stderr)

        r = api_create_item(session, args.base_url, payload, args.timeout, verify_tls, args.verbose)
        if r.status_code == 422:
            body = r.json()
            print(f"REFUSED: {body.get('message', 'validation failed')}", file=sys.stderr)
            return 1
        r.raise_for_status()
        print(json.dumps({"status": "created", "record": r.json()}, indent=2))
        return 0

    except requests.exceptions.RequestException as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        # Non-JSON body from something that is not the inventory API.
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
