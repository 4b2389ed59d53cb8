"""Drive the register desk API by hand: entries, exits, passes and cash."""

import argparse
import requests

BACKEND_URL = "http://127.0.0.1:8080/api/v1"


def show(label, resp):
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    print(f"{'✅' if resp.ok else '❌'} {label} → HTTP {resp.status_code}: {body}")


def lookup(plate, headers):
    show(f"lookup {plate}", requests.get(f"{BACKEND_URL}/register/plates/{plate}",
                                         headers=headers, timeout=10))


def submit(plate, kind, brand, mode, headers):
    payload = {"plate": plate, "vehicle_kind": kind, "brand": brand}
    if mode != "plain":
        payload[mode] = True
    show(f"submit {plate} ({mode})", requests.post(f"{BACKEND_URL}/register/submit",
                                                   json=payload, headers=headers, timeout=10))


def withdraw(amount, note, headers):
    show(f"withdraw {amount}", requests.post(f"{BACKEND_URL}/cash/withdrawals",
                                             json={"amount": amount, "note": note},
                                             headers=headers, timeout=10))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate register desk traffic")
    parser.add_argument("--action", default="submit", choices=["lookup", "submit", "withdraw", "summary"])
    parser.add_argument("--plate", default="ABC123")
    parser.add_argument("--kind", default="car", choices=["car", "motorcycle"])
    parser.add_argument("--brand", default="Toyota")
    parser.add_argument("--mode", default="plain", choices=["plain", "monthly", "daily", "event"])
    parser.add_argument("--amount", type=int, default=10000)
    parser.add_argument("--note", default="")
    parser.add_argument("--api-key", default=None)
    args = parser.parse_args()

    headers = {"X-API-Key": args.api_key} if args.api_key else {}
    if args.action == "lookup":
        lookup(args.plate, headers)
    elif args.action == "submit":
        submit(args.plate, args.kind, args.brand, args.mode, headers)
    elif args.action == "withdraw":
        withdraw(args.amount, args.note, headers)
    else:
        show("cash summary", requests.get(f"{BACKEND_URL}/cash/summary", headers=headers, timeout=10))
