from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any
import urllib.request
import urllib.error


DEFAULT_BASE_URL = os.getenv("PORTAL_BASE_URL", "http://localhost:8000")
DEFAULT_ADMIN_KEY = os.getenv("INTERNAL_ADMIN_KEY", "")
DEFAULT_SUPER_KEY = os.getenv("PORTAL_SUPER_ADMIN_KEY", "")

DEFAULT_TIMEOUT_SECONDS = 30


class SeedError(Exception):
    pass


def http_post(url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url=url,
        data=data,
        method="POST",
        headers={"Content-Type": "application/json", **headers},
    )
    try:
        with urllib.request.urlopen(req, timeout=DEFAULT_TIMEOUT_SECONDS) as resp:
            raw = resp.read().decode("utf-8")
            return json.loads(raw) if raw else {}
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace")
        raise SeedError(f"HTTP {e.code} {e.reason} for {url}: {body}") from e
    except urllib.error.URLError as e:
        raise SeedError(f"Network error for {url}: {e}") from e


DEMO_AGENCIES = [
    {
        "name": "FutureWorks Real Estate",
        "address": "Rua das Palmeiras, 123, Sao Paulo, SP",
        "phone": "+55 11 9999-1234",
        "admin": {"external_id": "admin-futureworks-001", "first_name": "Maria", "last_name": "Santos"},
        "agent": {"external_id": "agent-futureworks-001", "first_name": "Pedro", "last_name": "Rodrigues"},
    },
    {
        "name": "InnovateLabs Properties",
        "address": "Av. Paulista, 456, Sao Paulo, SP",
        "phone": "+55 11 8888-5678",
        "admin": {"external_id": "admin-innovate-001", "first_name": "Joao", "last_name": "Costa"},
        "agent": {"external_id": "agent-innovate-001", "first_name": "Lucia", "last_name": "Fernandes"},
    },
]


def demo_property(agency_name: str) -> dict[str, Any]:
    return {
        "title": f"Family house by {agency_name}",
        "description": "Bright three-bedroom house with garden, garage and a quiet street.",
        "type": "HOUSE",
        "transaction_type": "SALE",
        "address": "Calle Los Pinos 742, Zona Sur",
        "location_state": "La Paz",
        "location_city": "La Paz",
        "location_neigh": "Calacoto",
        "price": 185000,
        "currency": "DOLLARS",
        "bedrooms": 3,
        "bathrooms": 2,
        "garage_spaces": 1,
        "square_meters": 240,
        "features": ["garden", "garage"],
    }


def demo_project(agency_name: str) -> dict[str, Any]:
    return {
        "name": f"{agency_name} Towers",
        "description": "Twelve-floor residential tower with mixed apartment units.",
        "location": "Av. Arce, La Paz",
        "floors": [
            {
                "number": 1,
                "name": "Ground",
                "quadrants": [
                    {"custom_id": "1A", "type": "LOCAL_COMERCIAL", "area": 80, "bedrooms": 0, "bathrooms": 1,
                     "price": 120000, "currency": "DOLLARS"},
                ],
            },
            {
                "number": 2,
                "quadrants": [
                    {"custom_id": "2A", "area": 95, "bedrooms": 2, "bathrooms": 2, "price": 98000, "currency": "DOLLARS"},
                    {"custom_id": "2B", "area": 110, "bedrooms": 3, "bathrooms": 2, "price": 115000, "currency": "DOLLARS"},
                ],
            },
        ],
    }


def seed(base_url: str, admin_key: str, super_key: str, approve: bool) -> dict[str, Any]:
    v1 = f"{base_url.rstrip('/')}/v1"

    if not super_key:
        created = http_post(
            f"{v1}/bootstrap/super-admin",
            {"external_id": "super-admin-001", "email": "carlos.silva@example.com", "first_name": "Carlos", "last_name": "Silva"},
            {"X-Internal-Admin-Key": admin_key},
        )
        super_key = created["api_key"]["plain_key"]
    super_headers = {"X-API-Key": super_key}

    summary: dict[str, Any] = {"super_admin_key": super_key, "agencies": []}
    for demo in DEMO_AGENCIES:
        agency = http_post(
            f"{v1}/agencies",
            {"name": demo["name"], "address": demo["address"], "phone": demo["phone"]},
            super_headers,
        )
        admin = http_post(
            f"{v1}/users",
            {**demo["admin"], "email": f"{demo['admin']['external_id']}@example.com", "role": "AGENCY_ADMIN", "agency_id": agency["id"]},
            super_headers,
        )
        admin_headers = {"X-API-Key": admin["api_key"]["plain_key"]}
        agent = http_post(
            f"{v1}/users",
            {**demo["agent"], "email": f"{demo['agent']['external_id']}@example.com", "role": "AGENT"},
            admin_headers,
        )
        agent_headers = {"X-API-Key": agent["api_key"]["plain_key"]}

        prop = http_post(f"{v1}/properties", demo_property(demo["name"]), agent_headers)
        project = http_post(f"{v1}/projects", demo_project(demo["name"]), agent_headers)
        if approve:
            http_post(f"{v1}/properties/{prop['id']}/approve", {}, admin_headers)
            http_post(f"{v1}/projects/{project['id']}/approve", {}, admin_headers)

        summary["agencies"].append(
            {
                "agency_id": agency["id"],
                "admin_key": admin["api_key"]["plain_key"],
                "agent_key": agent["api_key"]["plain_key"],
                "property_id": prop["id"],
                "project_id": project["id"],
            }
        )
    return summary


def main() -> int:
    p = argparse.ArgumentParser(description="Seed a running portal with demo agencies, users and listings.")
    p.add_argument("--base-url", default=DEFAULT_BASE_URL)
    p.add_argument("--admin-key", default=DEFAULT_ADMIN_KEY, help="internal admin key (bootstrap)")
    p.add_argument("--super-key", default=DEFAULT_SUPER_KEY, help="existing super admin API key; skips bootstrap")
    p.add_argument("--approve", action="store_true", help="approve the demo listings so they are public")
    args = p.parse_args()

    if not args.super_key and not args.admin_key:
        print("Missing INTERNAL_ADMIN_KEY (env) or --admin-key", file=sys.stderr)
        return 2

    try:
        summary = seed(args.base_url, args.admin_key, args.super_key, args.approve)
    except SeedError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
