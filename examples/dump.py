#!/usr/bin/env python
#
# Dump all services and actions of a gateway, call every action which only
# returns values, and optionally write metric definition templates as JSON.
#

import argparse
import json
import logging

import tr064client
from tr064client.const import DEFAULT_BASE_URL


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--gateway-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--verify-tls", action="store_true")
    parser.add_argument("--no-call", action="store_true", help="don't call any action")
    parser.add_argument("--json-out", help="write metric templates to this file")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    root = tr064client.load_services(
        args.gateway_url,
        username=args.username,
        password=args.password,
        verify_tls=args.verify_tls,
    )
    tr064client.dump.dump_services(root, call_actions=not args.no_call)

    if args.json_out:
        with open(args.json_out, "w") as f:
            json.dump(tr064client.dump.metric_templates(root), f, indent=4)


if __name__ == "__main__":
    main()
