from __future__ import annotations

import argparse
import json
import sys

import requests

from swarmctl.settings import settings


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _reply(r: requests.Response) -> int:
    _print(r.json())
    return 0 if r.ok else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="swarmctl CLI")
    p.add_argument("--api", default=settings.api_url, help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("services", help="List services (declared replicas)")
    sub.add_parser("status", help="List services with running vs. required replicas")

    s_create = sub.add_parser("create", help="Create a replicated service")
    s_create.add_argument("--name", required=True)
    s_create.add_argument("--image", required=True)
    s_create.add_argument("--replicas", type=int, default=1)
    s_create.add_argument("--memory-limit", type=int, default=0, help="Memory limit in MB (0 = unlimited)")
    s_create.add_argument("--network", default=None, help="Overlay network (defaults to the server's default)")

    s_del = sub.add_parser("delete", help="Delete services by name")
    s_del.add_argument("names", nargs="+")

    s_net = sub.add_parser("network-create", help="Create an overlay network if missing")
    s_net.add_argument("name")

    s_net_rm = sub.add_parser("network-rm", help="Remove a network by name")
    s_net_rm.add_argument("name")

    s_ev = sub.add_parser("events", help="Show events")
    s_ev.add_argument("--limit", type=int, default=20)
    s_ev.add_argument("--service", default=None)

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "services":
        return _reply(requests.get(f"{base}/services", timeout=30))

    if args.cmd == "status":
        return _reply(requests.get(f"{base}/services/status", timeout=30))

    if args.cmd == "create":
        payload = {
            "name": args.name,
            "image": args.image,
            "replicas": args.replicas,
            "memory_limit": args.memory_limit,
            "network": args.network,
        }
        return _reply(requests.post(f"{base}/services", json=payload, timeout=60))

    if args.cmd == "delete":
        return _reply(requests.delete(f"{base}/services", params={"name": args.names}, timeout=60))

    if args.cmd == "network-create":
        return _reply(requests.post(f"{base}/networks", json={"name": args.name}, timeout=60))

    if args.cmd == "network-rm":
        return _reply(requests.delete(f"{base}/networks/{args.name}", timeout=60))

    if args.cmd == "events":
        params = {"limit": args.limit}
        if args.service:
            params["service"] = args.service
        return _reply(requests.get(f"{base}/events", params=params, timeout=10))

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
