#!/usr/bin/env python3
"""
Look up policies from the command line through the policy service.

Examples:
  python scripts/policy_lookup.py --email john.doe@example.com
  python scripts/policy_lookup.py --number POL-001
  python scripts/policy_lookup.py --status EXPIRED --mock
  python scripts/policy_lookup.py --expiring-within 30 --environment staging

Configuration comes from config/policy_api.yml plus API_* environment
variables (see src/utils/config_loader.py).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.integrations.clients.mocks.policy_api import MockPolicyApiClient
from src.integrations.policy.policy_service import PolicyService, ServiceFactory
from src.utils.config_loader import load_policy_api_config


def _print_policies(policies) -> None:
    print(json.dumps([p.model_dump(by_alias=True, exclude_none=True) for p in policies], indent=2))
    print(f"\n{len(policies)} policies")


def main() -> int:
    parser = argparse.ArgumentParser(description="Policy lookup against the upstream policy API")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--email", help="Policies for an email address")
    group.add_argument("--customer", help="Policies for a customer ID")
    group.add_argument("--number", help="A single policy by number")
    group.add_argument("--status", help="Policies with a status (ACTIVE, EXPIRED, ...)")
    group.add_argument("--search", help="Free-text search")
    group.add_argument("--expiring-within", type=int, metavar="DAYS", help="Active policies expiring within DAYS")
    parser.add_argument("--page", type=int, default=None)
    parser.add_argument("--size", type=int, default=None)
    parser.add_argument("--environment", help="Override the configured environment (local, dev, test, staging, prod)")
    parser.add_argument("--mock", action="store_true", help="Use the in-memory mock API instead of HTTP")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.mock:
        service = PolicyService(MockPolicyApiClient())
    else:
        factory = ServiceFactory(load_policy_api_config())
        service = factory.for_environment(args.environment) if args.environment else factory.create_policy_service()

    try:
        if args.number:
            policy = service.get_policy_by_number(args.number)
            if policy is None:
                print(f"Policy {args.number} not found", file=sys.stderr)
                return 1
            print(json.dumps(policy.model_dump(by_alias=True, exclude_none=True), indent=2))
            return 0

        if args.email:
            policies = service.get_policies_by_email(args.email, args.page, args.size)
        elif args.customer:
            policies = service.get_policies_by_customer_id(args.customer, args.page, args.size)
        elif args.status:
            policies = service.get_policies_by_status(args.status)
        elif args.search:
            policies = service.search_policies(args.search, args.page, args.size)
        else:
            policies = service.get_policies_expiring_soon(args.expiring_within)

        _print_policies(policies)
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
