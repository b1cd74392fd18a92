#!/usr/bin/env python3
"""
Bed presence client: read or update presence on a running bed server.
Useful from sensor scripts, cron, or a shell when checking the sensors.

Usage:
  smart-bed-presence                       # Print merged in-bed status
  smart-bed-presence --side left           # Print one side only
  smart-bed-presence --left true           # Report presence on the left side
  smart-bed-presence --left true --right false
  smart-bed-presence --log FILE            # Append report to FILE (for cron)
"""
import argparse
import json
import logging
import sys
import time

import requests

from . import server_config as config

logger = logging.getLogger("PresenceCLI")

PRESENCE_PATH = "/api/metrics/presence"
TIMEOUT_SEC = 5


def parse_bool(value):
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def fetch_presence(base_url, side=None):
    params = {"side": side} if side else None
    resp = requests.get(base_url.rstrip("/") + PRESENCE_PATH, params=params, timeout=TIMEOUT_SEC)
    resp.raise_for_status()
    return resp.json()


def post_presence(base_url, left=None, right=None):
    payload = {}
    if left is not None:
        payload["left"] = left
    if right is not None:
        payload["right"] = right
    resp = requests.post(base_url.rstrip("/") + PRESENCE_PATH, json=payload, timeout=TIMEOUT_SEC)
    if resp.status_code == 400:
        body = resp.json()
        raise ValueError(f"{body.get('error')}: {body.get('message')}")
    resp.raise_for_status()
    return resp.json()


def describe_side(name, view):
    state = "present" if view.get("present") else "absent"
    stale = " (stale)" if view.get("isStale") else ""
    return f"{name}: {state}{stale}, last update {view.get('lastUpdatedAt')}"


def describe_merged(view):
    presence = view.get("presence")
    if presence == "unavailable":
        headline = "In bed: unknown (no fresh sensor data)"
    else:
        headline = f"In bed: {'yes' if presence else 'no'}"
    lines = [headline]
    details = view.get("details", {})
    updated = view.get("lastUpdated", {})
    for side in ("left", "right"):
        value = details.get(side)
        label = value if value == "unavailable" else ("present" if value else "absent")
        lines.append(f"  {side}: {label}, last update {updated.get(side)}")
    return lines


def build_report(args):
    ts = time.strftime("%Y-%m-%d %H:%M:%S")
    lines = [f"=== Bed presence @ {ts} ==="]

    if args.left is not None or args.right is not None:
        result = post_presence(args.url, left=args.left, right=args.right)
        if args.json:
            return json.dumps(result, indent=2) + "\n"
        data = result.get("data", {})
        lines.append(f"Updated: left={data.get('left')} right={data.get('right')}")
    else:
        view = fetch_presence(args.url, args.side)
        if args.json:
            return json.dumps(view, indent=2) + "\n"
        if args.side:
            lines.append(describe_side(args.side, view))
        else:
            lines.extend(describe_merged(view))

    lines.append("")
    return "\n".join(lines)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Read or update bed presence")
    ap.add_argument("--url", default=config.API_URL, help="Bed server base URL")
    ap.add_argument("--side", choices=["left", "right"], help="Show one side only")
    ap.add_argument("--left", type=parse_bool, metavar="BOOL", help="Set left side presence")
    ap.add_argument("--right", type=parse_bool, metavar="BOOL", help="Set right side presence")
    ap.add_argument("--json", action="store_true", help="Print the raw JSON response")
    ap.add_argument("--log", metavar="FILE", help="Append report to FILE (for cron)")
    args = ap.parse_args(argv)

    try:
        report = build_report(args)
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Presence request failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.log:
        try:
            with open(args.log, "a") as f:
                f.write(report)
        except OSError as e:
            print(report, file=sys.stderr)
            print(f"Error: cannot write {args.log}: {e}", file=sys.stderr)
            return 1
    else:
        print(report, end="")

    return 0


if __name__ == "__main__":
    sys.exit(main())
